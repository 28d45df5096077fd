"""
Authentication & Configuration
==============================

Helpers for configuring and applying authentication to amp-client requests.

The Amphitheatre API authenticates with an HTTP Bearer token:

    Authorization: Bearer <AMP_API_TOKEN>

The token is optional. A client without one sends unauthenticated requests
and leaves it to the server to reject them.

This module provides:

- ClientConfig: typed configuration for connection and auth values
- ClientConfig.from_env(): convenience loader for server-side usage
- validate_base_url(): reject base URLs that cannot be requested
- build_auth_headers(): construct headers for a single request
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
import os

import httpx

from amp_client.exceptions import ConfigurationError

# Environment variable names.
ENV_BASE_URL = "AMP_BASE_URL"
ENV_API_TOKEN = "AMP_API_TOKEN"
ENV_TIMEOUT = "AMP_TIMEOUT"

DEFAULT_BASE_URL = "https://cloud.amphitheatre.app"
DEFAULT_TIMEOUT = 10.0
API_VERSION = "v1"


def validate_base_url(base_url: str) -> httpx.URL:
    """
    Parse `base_url` and make sure it is an absolute http(s) URL.

    Raises:
        ConfigurationError: if the URL is unparsable, relative, or uses
            another scheme.
    """
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigurationError(f"Invalid base URL {base_url!r}: {exc}") from exc

    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(
            f"Invalid base URL {base_url!r}: expected an absolute http(s) URL"
        )
    return url


def versioned_base_url(base_url: str, version: str = API_VERSION) -> str:
    """
    Append the API version segment unless the URL already ends with it.

        "https://cloud.amphitheatre.app"     -> "https://cloud.amphitheatre.app/v1"
        "http://127.0.0.1:1234/v1/"          -> "http://127.0.0.1:1234/v1"
    """
    url = validate_base_url(base_url)
    path = url.path.rstrip("/")
    if not path.endswith(f"/{version}"):
        path = f"{path}/{version}"
    return str(url.copy_with(path=path))


@dataclass(frozen=True)
class ClientConfig:
    """
    Connection and authentication context for amp-client.

    Attributes:
        base_url:
            Root URL of the Amphitheatre API. The `/v1` prefix is applied
            by the HTTP adapter when missing.
        token:
            Optional bearer token attached to every request.
        timeout:
            Per-request timeout in seconds for the httpx transport.
    """

    base_url: str = DEFAULT_BASE_URL
    token: Optional[str] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        validate_base_url(self.base_url)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Load configuration from environment variables.

        Optional:
            - AMP_BASE_URL  (defaults to https://cloud.amphitheatre.app)
            - AMP_API_TOKEN
            - AMP_TIMEOUT   (seconds)

        Raises:
            ConfigurationError: if AMP_BASE_URL or AMP_TIMEOUT is malformed.
        """
        base_url = os.getenv(ENV_BASE_URL) or DEFAULT_BASE_URL
        token = os.getenv(ENV_API_TOKEN) or None

        raw_timeout = os.getenv(ENV_TIMEOUT)
        timeout: Optional[float] = DEFAULT_TIMEOUT
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as exc:
                raise ConfigurationError(
                    f"{ENV_TIMEOUT} must be a number of seconds, got {raw_timeout!r}"
                ) from exc

        return cls(base_url=base_url, token=token, timeout=timeout)


def build_auth_headers(config: ClientConfig) -> Dict[str, str]:
    """
    Build the authentication-related HTTP headers for a request.

    Returns a dict containing `Authorization: Bearer <token>` when a token
    is configured, and nothing otherwise.
    """
    headers: Dict[str, str] = {}
    if config.token:
        headers["Authorization"] = f"Bearer {config.token}"
    return headers


__all__ = [
    "ClientConfig",
    "build_auth_headers",
    "validate_base_url",
    "versioned_base_url",
    "API_VERSION",
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "ENV_BASE_URL",
    "ENV_API_TOKEN",
    "ENV_TIMEOUT",
]
