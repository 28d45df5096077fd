"""Typed Python client for the Amphitheatre platform API."""

__version__ = "0.1.0"

from amp_client.api.accounts import Account
from amp_client.api.actors import ActorSpec, EventKinds, SyncPath, Synchronization
from amp_client.api.endpoint import Endpoint, Pagination
from amp_client.api.oauth import AccessToken, OAuthTokenPayload
from amp_client.api.options import ListOptions
from amp_client.api.playbooks import PlaybookPayload, PlaybookSpec, Preface
from amp_client.api.streaming import AsyncEventSource, Event, EventSource, EventType
from amp_client.client import AsyncClient, Client
from amp_client.exceptions import (
    AmpError,
    ConfigurationError,
    DeserializationError,
    HTTPError,
    HTTPStatusError,
    PayloadSerializationError,
    StreamEndedError,
    TransportError,
)
from amp_client.http_client import Response

__all__ = [
    "__version__",
    "Client",
    "AsyncClient",
    "Response",
    "Endpoint",
    "Pagination",
    "ListOptions",
    "Account",
    "AccessToken",
    "OAuthTokenPayload",
    "ActorSpec",
    "EventKinds",
    "SyncPath",
    "Synchronization",
    "PlaybookSpec",
    "PlaybookPayload",
    "Preface",
    "Event",
    "EventType",
    "EventSource",
    "AsyncEventSource",
    "AmpError",
    "ConfigurationError",
    "HTTPError",
    "TransportError",
    "HTTPStatusError",
    "DeserializationError",
    "PayloadSerializationError",
    "StreamEndedError",
]
