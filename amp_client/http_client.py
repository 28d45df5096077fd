"""
HTTP client implementations for amp-client.

This module exposes minimal typed interfaces (`AmpHTTPClient`,
`AsyncAmpHTTPClient`) used by the API façades, and concrete httpx-based
adapters (`HttpxAmpHTTPClient`, `AsyncHttpxAmpHTTPClient`).

Notes:
- Every request method takes an `Endpoint` binding which decides how the
  response payload is decoded; the adapters return a `Response[T]`.
- Bodies are JSON. A body of the form `{"data": ..., "pagination": ...}` is
  unwrapped; pagination is exposed on the Response.
- Non-2xx responses raise `HTTPStatusError`; transport failures raise
  `TransportError`; undecodable bodies raise `DeserializationError`;
  request payloads that cannot be JSON-encoded raise
  `PayloadSerializationError` before anything is sent.
- The `/v1` API prefix is applied to the base URL by the adapters.
"""

from __future__ import annotations

import json as jsonlib
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Mapping, Optional, TypeVar

import httpx

from amp_client import __version__
from amp_client.api.core.authentication import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    ClientConfig,
    build_auth_headers,
    versioned_base_url,
)
from amp_client.api.core.debugging_requests import RequestMeta, extract_request_meta
from amp_client.api.endpoint import EMPTY, Endpoint, Pagination, unwrap_envelope
from amp_client.api.streaming import AsyncEventSource, EventSource
from amp_client.exceptions import (
    DeserializationError,
    HTTPStatusError,
    PayloadSerializationError,
    TransportError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
Params = Optional[Mapping[str, Any]]

USER_AGENT = f"amp-client/{__version__}"


@dataclass(frozen=True)
class Response(Generic[T]):
    """
    A decoded API response.

    Attributes:
        status: HTTP status code.
        data: Decoded payload, None for status-only endpoints.
        pagination: Present only when the server sent pagination metadata.
        headers: Response headers (lower-cased names).
    """

    status: int
    data: Optional[T] = None
    pagination: Optional[Pagination] = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def meta(self) -> RequestMeta:
        return extract_request_meta(self.headers)

    def unwrap(self) -> T:
        """Return the payload, raising DeserializationError if there is none."""
        if self.data is None:
            raise DeserializationError(f"HTTP {self.status} response carried no payload")
        return self.data


class AmpHTTPClient:
    """
    Minimal HTTP client interface used by the API façades.

    Implementations decode the response payload with the given endpoint
    binding and return a `Response`.
    """

    def url(self, path: str) -> str:
        raise NotImplementedError("AmpHTTPClient.url must be implemented by the runtime client")

    def get(self, path: str, endpoint: Endpoint[T], params: Params = None) -> Response[T]:
        raise NotImplementedError("AmpHTTPClient.get must be implemented by the runtime client")

    def post(self, path: str, endpoint: Endpoint[T], *, json: Any = None, params: Params = None) -> Response[T]:
        raise NotImplementedError("AmpHTTPClient.post must be implemented by the runtime client")

    def patch(self, path: str, endpoint: Endpoint[T], *, json: Any = None) -> Response[T]:
        raise NotImplementedError("AmpHTTPClient.patch must be implemented by the runtime client")

    def delete(self, path: str, endpoint: Endpoint[T] = EMPTY, *, params: Params = None) -> Response[T]:  # type: ignore[assignment]
        raise NotImplementedError("AmpHTTPClient.delete must be implemented by the runtime client")

    def stream(self, path: str) -> EventSource:
        raise NotImplementedError("AmpHTTPClient.stream must be implemented by the runtime client")


class AsyncAmpHTTPClient:
    """Coroutine counterpart of `AmpHTTPClient`."""

    def url(self, path: str) -> str:
        raise NotImplementedError("AsyncAmpHTTPClient.url must be implemented by the runtime client")

    async def get(self, path: str, endpoint: Endpoint[T], params: Params = None) -> Response[T]:
        raise NotImplementedError("AsyncAmpHTTPClient.get must be implemented by the runtime client")

    async def post(
        self, path: str, endpoint: Endpoint[T], *, json: Any = None, params: Params = None
    ) -> Response[T]:
        raise NotImplementedError("AsyncAmpHTTPClient.post must be implemented by the runtime client")

    async def patch(self, path: str, endpoint: Endpoint[T], *, json: Any = None) -> Response[T]:
        raise NotImplementedError("AsyncAmpHTTPClient.patch must be implemented by the runtime client")

    async def delete(self, path: str, endpoint: Endpoint[T] = EMPTY, *, params: Params = None) -> Response[T]:  # type: ignore[assignment]
        raise NotImplementedError("AsyncAmpHTTPClient.delete must be implemented by the runtime client")

    def stream(self, path: str) -> AsyncEventSource:
        raise NotImplementedError("AsyncAmpHTTPClient.stream must be implemented by the runtime client")


# Shared request/response handling ------------------------------------------

def _default_headers(config: ClientConfig, extra: Optional[Mapping[str, str]]) -> Dict[str, str]:
    headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
    headers.update(build_auth_headers(config))
    if extra:
        headers.update(extra)
    return headers


def _encode_body(payload: Any) -> bytes:
    try:
        return jsonlib.dumps(payload, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise PayloadSerializationError(f"request payload is not JSON-serializable: {exc}") from exc


def _join_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _decode(resp: httpx.Response, endpoint: Endpoint[T]) -> Response[T]:
    method = resp.request.method
    url = resp.request.url
    logger.debug("%s %s -> %s", method, url, resp.status_code)

    if not resp.is_success:
        error = HTTPStatusError.from_response(resp)
        logger.warning("%s %s failed with HTTP %s", method, url, resp.status_code)
        raise error

    headers = dict(resp.headers)
    if not endpoint.expects_body:
        return Response(status=resp.status_code, headers=headers)

    if not resp.content:
        raise DeserializationError(f"{method} {url}: empty response body, expected {endpoint.name}")
    try:
        body = resp.json()
    except ValueError as exc:
        raise DeserializationError(f"{method} {url}: malformed JSON: {exc}", resp.text) from exc

    payload, pagination = unwrap_envelope(body)
    if payload is None:
        raise DeserializationError(f"{method} {url}: response carried no payload", body)

    return Response(
        status=resp.status_code,
        data=endpoint.decode(payload),
        pagination=pagination,
        headers=headers,
    )


def _transport_error(method: str, url: str, exc: httpx.RequestError) -> TransportError:
    logger.warning("%s %s transport failure: %s", method, url, exc)
    error = TransportError(f"{method} {url}: {exc}")
    error.__cause__ = exc
    return error


# Concrete httpx adapters -----------------------------------------------------

class HttpxAmpHTTPClient(AmpHTTPClient):
    """
    Synchronous httpx-based implementation of AmpHTTPClient.

    Example:
        http = HttpxAmpHTTPClient("https://cloud.amphitheatre.app", token="...")
        account = http.get("/me", ACCOUNT).unwrap()
        http.close()

    Pass `transport=httpx.MockTransport(handler)` to serve canned responses.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        *,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        config = ClientConfig(base_url=base_url, token=token, timeout=timeout)
        self.base_url = versioned_base_url(config.base_url)
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=_default_headers(config, headers),
            timeout=timeout,
            transport=transport,
        )
        self._stream_timeout = httpx.Timeout(timeout, read=None)

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "HttpxAmpHTTPClient":
        return cls(config.base_url, config.token, timeout=config.timeout, **kwargs)

    def url(self, path: str) -> str:
        return _join_url(self.base_url, path)

    def _request(
        self,
        method: str,
        path: str,
        endpoint: Endpoint[T],
        *,
        params: Params = None,
        content: Optional[bytes] = None,
    ) -> Response[T]:
        headers = {"Content-Type": "application/json"} if content is not None else None
        try:
            resp = self._client.request(method, path, params=params, content=content, headers=headers)
        except httpx.RequestError as exc:
            raise _transport_error(method, self.url(path), exc) from exc
        return _decode(resp, endpoint)

    def get(self, path: str, endpoint: Endpoint[T], params: Params = None) -> Response[T]:
        return self._request("GET", path, endpoint, params=params)

    def post(self, path: str, endpoint: Endpoint[T], *, json: Any = None, params: Params = None) -> Response[T]:
        return self._request("POST", path, endpoint, params=params, content=_encode_body(json))

    def patch(self, path: str, endpoint: Endpoint[T], *, json: Any = None) -> Response[T]:
        return self._request("PATCH", path, endpoint, content=_encode_body(json))

    def delete(self, path: str, endpoint: Endpoint[T] = EMPTY, *, params: Params = None) -> Response[T]:  # type: ignore[assignment]
        return self._request("DELETE", path, endpoint, params=params)

    def stream(self, path: str) -> EventSource:
        return EventSource(
            lambda headers: self._client.stream("GET", path, headers=headers, timeout=self._stream_timeout),
            self.url(path),
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpxAmpHTTPClient":
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: Optional[Any]) -> None:
        self.close()


class AsyncHttpxAmpHTTPClient(AsyncAmpHTTPClient):
    """
    Asynchronous httpx-based implementation of AsyncAmpHTTPClient.

    Same behaviour as `HttpxAmpHTTPClient`, on top of `httpx.AsyncClient`.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        *,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        config = ClientConfig(base_url=base_url, token=token, timeout=timeout)
        self.base_url = versioned_base_url(config.base_url)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=_default_headers(config, headers),
            timeout=timeout,
            transport=transport,
        )
        self._stream_timeout = httpx.Timeout(timeout, read=None)

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "AsyncHttpxAmpHTTPClient":
        return cls(config.base_url, config.token, timeout=config.timeout, **kwargs)

    def url(self, path: str) -> str:
        return _join_url(self.base_url, path)

    async def _request(
        self,
        method: str,
        path: str,
        endpoint: Endpoint[T],
        *,
        params: Params = None,
        content: Optional[bytes] = None,
    ) -> Response[T]:
        headers = {"Content-Type": "application/json"} if content is not None else None
        try:
            resp = await self._client.request(method, path, params=params, content=content, headers=headers)
        except httpx.RequestError as exc:
            raise _transport_error(method, self.url(path), exc) from exc
        return _decode(resp, endpoint)

    async def get(self, path: str, endpoint: Endpoint[T], params: Params = None) -> Response[T]:
        return await self._request("GET", path, endpoint, params=params)

    async def post(
        self, path: str, endpoint: Endpoint[T], *, json: Any = None, params: Params = None
    ) -> Response[T]:
        return await self._request("POST", path, endpoint, params=params, content=_encode_body(json))

    async def patch(self, path: str, endpoint: Endpoint[T], *, json: Any = None) -> Response[T]:
        return await self._request("PATCH", path, endpoint, content=_encode_body(json))

    async def delete(self, path: str, endpoint: Endpoint[T] = EMPTY, *, params: Params = None) -> Response[T]:  # type: ignore[assignment]
        return await self._request("DELETE", path, endpoint, params=params)

    def stream(self, path: str) -> AsyncEventSource:
        return AsyncEventSource(
            lambda headers: self._client.stream("GET", path, headers=headers, timeout=self._stream_timeout),
            self.url(path),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpxAmpHTTPClient":
        return self

    async def __aexit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: Optional[Any]) -> None:
        await self.aclose()


__all__ = [
    "Response",
    "AmpHTTPClient",
    "AsyncAmpHTTPClient",
    "HttpxAmpHTTPClient",
    "AsyncHttpxAmpHTTPClient",
    "USER_AGENT",
]
