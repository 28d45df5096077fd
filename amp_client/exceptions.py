"""
Exceptions
==========

Error hierarchy for amp-client.

Every error raised by the library derives from `AmpError`, so a single
`except AmpError` catches them all. Request failures derive from
`HTTPError`:

    AmpError
    ├── ConfigurationError          bad base URL / settings, raised at construction
    └── HTTPError
        ├── TransportError          connect / DNS / TLS / timeout
        ├── HTTPStatusError         4xx / 5xx, carries status and body
        ├── DeserializationError    body is not valid JSON or does not match the schema
        ├── PayloadSerializationError
        │                           request payload cannot be encoded (no request sent)
        └── StreamEndedError        server closed an event stream

There is no `NotFoundError`; inspect `HTTPStatusError.status`.
"""

from __future__ import annotations

from typing import Any, Optional


class AmpError(Exception):
    """Base exception for all amp-client errors."""


class ConfigurationError(AmpError):
    """Raised when the client cannot be constructed from the given settings."""


class HTTPError(AmpError):
    """Base class for failures of a single API request."""


class TransportError(HTTPError):
    """
    The request never produced an HTTP response.

    The underlying httpx exception is chained as `__cause__`.
    """


class HTTPStatusError(HTTPError):
    """
    The server answered with a non-2xx status.

    Attributes:
        status: HTTP status code.
        body: Raw response body text.
        message: Error message extracted from a JSON body, if any.
        method / url: The request that failed.
    """

    def __init__(
        self,
        status: int,
        body: str = "",
        *,
        message: Optional[str] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        self.status = status
        self.body = body
        self.message = message
        self.method = method
        self.url = url
        detail = message or body or "no body"
        target = f" {method} {url}" if method and url else ""
        super().__init__(f"HTTP {status}{target}: {detail}")

    @classmethod
    def from_response(cls, response: Any) -> "HTTPStatusError":
        """
        Build from an httpx.Response whose body has already been read.

        Recognises `{"message": ...}` and `{"error": ...}` bodies, where
        `error` may itself be an object with a `message`.
        """
        body = response.text
        message: Optional[str] = None
        try:
            parsed = response.json()
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            error = parsed.get("error")
            if isinstance(error, dict):
                error = error.get("message")
            found = parsed.get("message") or error
            if found is not None:
                message = str(found)

        request = response.request
        return cls(
            response.status_code,
            body,
            message=message,
            method=request.method,
            url=str(request.url),
        )

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500


class DeserializationError(HTTPError):
    """
    A response body could not be decoded into the expected type.

    Attributes:
        body: The offending body (or fragment), when available.
    """

    def __init__(self, message: str, body: Any = None) -> None:
        super().__init__(message)
        self.body = body


class PayloadSerializationError(HTTPError):
    """A request payload could not be encoded as JSON. Raised before any I/O."""


class StreamEndedError(HTTPError):
    """The server closed an event stream. Reported as an error event, never raised."""


__all__ = [
    "AmpError",
    "ConfigurationError",
    "HTTPError",
    "TransportError",
    "HTTPStatusError",
    "DeserializationError",
    "PayloadSerializationError",
    "StreamEndedError",
]
