"""
Streaming Events
================

Server-Sent Events (SSE) consumers for the actor log and playbook event
streams.

    GET /v1/actors/{pid}/{name}/logs
    GET /v1/playbooks/{id}/events

A stream is consumed as a sequence of `Event` notifications:

- "open":    the connection is established and the stream accepted.
- "message": one dispatched SSE event (`data`, `event`, `id`).
- "error":   the connection failed or the server ended the stream.

An error does not end iteration by itself. If the caller keeps iterating,
the source reconnects (sending `Last-Event-ID`) and the sequence continues,
so a log stream is effectively infinite until the caller closes it:

    with client.actors().logs("1", "hello") as logs:
        for event in logs:
            if event.is_message:
                print(event.data)
            elif event.is_error:
                logs.close()

A non-2xx status or a response that is not `text/event-stream` is reported
as an error event after which the stream ends without reconnecting.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import (
    Any,
    AsyncContextManager,
    AsyncIterator,
    Callable,
    ContextManager,
    Dict,
    Iterator,
    List,
    Optional,
)

import httpx

from amp_client.exceptions import (
    DeserializationError,
    HTTPError,
    HTTPStatusError,
    StreamEndedError,
    TransportError,
)

logger = logging.getLogger(__name__)

EVENT_STREAM_CONTENT_TYPE = "text/event-stream"

Connect = Callable[[Dict[str, str]], ContextManager[httpx.Response]]
AsyncConnect = Callable[[Dict[str, str]], AsyncContextManager[httpx.Response]]


class EventType:
    """String constants for the notifications a stream produces."""

    OPEN = "open"
    MESSAGE = "message"
    ERROR = "error"


@dataclass(frozen=True)
class Event:
    """
    A single stream notification.

    Attributes:
        type: One of EventType.OPEN / MESSAGE / ERROR.
        data: Message payload (SSE `data:` lines joined with "\\n").
        event: SSE event name, "message" unless the server set one.
        id: Last event id seen on the stream, if any.
        retry: Reconnection delay in milliseconds advertised by the server.
        error: The failure, for error notifications.
    """

    type: str
    data: str = ""
    event: str = "message"
    id: Optional[str] = None
    retry: Optional[int] = None
    error: Optional[HTTPError] = None

    @classmethod
    def opened(cls) -> "Event":
        return cls(type=EventType.OPEN)

    @classmethod
    def failed(cls, error: HTTPError) -> "Event":
        return cls(type=EventType.ERROR, error=error)

    @property
    def is_open(self) -> bool:
        return self.type == EventType.OPEN

    @property
    def is_message(self) -> bool:
        return self.type == EventType.MESSAGE

    @property
    def is_error(self) -> bool:
        return self.type == EventType.ERROR

    def json(self) -> Any:
        """
        Parse the message data as JSON.

        Raises:
            DeserializationError: if the data is not valid JSON. The stream
                itself is unaffected.
        """
        try:
            return json.loads(self.data)
        except ValueError as exc:
            raise DeserializationError(f"event data is not valid JSON: {exc}", self.data) from exc


class _EventParser:
    """Incremental SSE line parser (WHATWG event-stream interpretation)."""

    def __init__(self) -> None:
        self.last_event_id: Optional[str] = None
        self.retry_ms: Optional[int] = None
        self._data: List[str] = []
        self._event = ""

    def reset(self) -> None:
        """Drop a partially received event; the id and retry survive reconnects."""
        self._data = []
        self._event = ""

    def feed(self, line: str) -> Optional[Event]:
        if line == "":
            return self._dispatch()
        if line.startswith(":"):
            return None

        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if field == "data":
            self._data.append(value)
        elif field == "event":
            self._event = value
        elif field == "id":
            if "\0" not in value:
                self.last_event_id = value
        elif field == "retry":
            if value.isdigit():
                self.retry_ms = int(value)
        return None

    def _dispatch(self) -> Optional[Event]:
        if not self._data:
            self.reset()
            return None
        event = Event(
            type=EventType.MESSAGE,
            data="\n".join(self._data),
            event=self._event or "message",
            id=self.last_event_id,
            retry=self.retry_ms,
        )
        self.reset()
        return event

    def request_headers(self) -> Dict[str, str]:
        headers = {"Accept": EVENT_STREAM_CONTENT_TYPE, "Cache-Control": "no-cache"}
        if self.last_event_id:
            headers["Last-Event-ID"] = self.last_event_id
        return headers


def _content_type_error(response: httpx.Response) -> Optional[HTTPError]:
    content_type = response.headers.get("content-type", "")
    if not content_type.startswith(EVENT_STREAM_CONTENT_TYPE):
        return HTTPStatusError(
            response.status_code,
            f"unexpected content type {content_type!r}",
            method=response.request.method,
            url=str(response.request.url),
        )
    return None


def _transport_error(url: str, exc: httpx.HTTPError) -> TransportError:
    error = TransportError(f"event stream {url} failed: {exc}")
    error.__cause__ = exc
    return error


class EventSource:
    """
    Blocking SSE consumer. Iterate it for `Event`s; call `close()` (or use it
    as a context manager) to release the connection.
    """

    def __init__(self, connect: Connect, url: str) -> None:
        self._connect = connect
        self.url = url
        self._parser = _EventParser()
        self._closed = False
        self._events: Optional[Iterator[Event]] = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def last_event_id(self) -> Optional[str]:
        return self._parser.last_event_id

    def __iter__(self) -> "EventSource":
        return self

    def __next__(self) -> Event:
        if self._closed:
            raise StopIteration
        if self._events is None:
            self._events = self._run()
        return next(self._events)

    def _run(self) -> Iterator[Event]:
        while not self._closed:
            rejection: Optional[HTTPError] = None
            try:
                with self._connect(self._parser.request_headers()) as response:
                    if not response.is_success:
                        response.read()
                        rejection = HTTPStatusError.from_response(response)
                    else:
                        rejection = _content_type_error(response)

                    if rejection is None:
                        logger.debug("event stream %s opened", self.url)
                        yield Event.opened()
                        for line in response.iter_lines():
                            event = self._parser.feed(line)
                            if event is not None:
                                yield event
                error: HTTPError = StreamEndedError(f"event stream {self.url} ended")
            except httpx.HTTPError as exc:
                logger.warning("event stream %s failed: %s", self.url, exc)
                error = _transport_error(self.url, exc)

            if rejection is not None:
                logger.warning("event stream %s rejected: %s", self.url, rejection)
                self._closed = True
                yield Event.failed(rejection)
                return

            self._parser.reset()
            yield Event.failed(error)

            if not self._closed and self._parser.retry_ms:
                time.sleep(self._parser.retry_ms / 1000.0)

    def close(self) -> None:
        """Stop the stream and release the underlying connection."""
        if self._closed and self._events is None:
            return
        self._closed = True
        if self._events is not None:
            events, self._events = self._events, None
            events.close()  # type: ignore[attr-defined]
        logger.debug("event stream %s closed", self.url)

    def __enter__(self) -> "EventSource":
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: Optional[Any]) -> None:
        self.close()


class AsyncEventSource:
    """
    Asynchronous SSE consumer with the same contract as `EventSource`:
    `async for event in source`, then `await source.aclose()`.
    """

    def __init__(self, connect: AsyncConnect, url: str) -> None:
        self._connect = connect
        self.url = url
        self._parser = _EventParser()
        self._closed = False
        self._events: Optional[AsyncIterator[Event]] = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def last_event_id(self) -> Optional[str]:
        return self._parser.last_event_id

    def __aiter__(self) -> "AsyncEventSource":
        return self

    async def __anext__(self) -> Event:
        if self._closed:
            raise StopAsyncIteration
        if self._events is None:
            self._events = self._run()
        return await self._events.__anext__()

    async def _run(self) -> AsyncIterator[Event]:
        while not self._closed:
            rejection: Optional[HTTPError] = None
            try:
                async with self._connect(self._parser.request_headers()) as response:
                    if not response.is_success:
                        await response.aread()
                        rejection = HTTPStatusError.from_response(response)
                    else:
                        rejection = _content_type_error(response)

                    if rejection is None:
                        logger.debug("event stream %s opened", self.url)
                        yield Event.opened()
                        async for line in response.aiter_lines():
                            event = self._parser.feed(line)
                            if event is not None:
                                yield event
                error: HTTPError = StreamEndedError(f"event stream {self.url} ended")
            except httpx.HTTPError as exc:
                logger.warning("event stream %s failed: %s", self.url, exc)
                error = _transport_error(self.url, exc)

            if rejection is not None:
                logger.warning("event stream %s rejected: %s", self.url, rejection)
                self._closed = True
                yield Event.failed(rejection)
                return

            self._parser.reset()
            yield Event.failed(error)

            if not self._closed and self._parser.retry_ms:
                await asyncio.sleep(self._parser.retry_ms / 1000.0)

    async def aclose(self) -> None:
        """Stop the stream and release the underlying connection."""
        if self._closed and self._events is None:
            return
        self._closed = True
        if self._events is not None:
            events, self._events = self._events, None
            await events.aclose()  # type: ignore[attr-defined]
        logger.debug("event stream %s closed", self.url)

    async def __aenter__(self) -> "AsyncEventSource":
        return self

    async def __aexit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: Optional[Any]) -> None:
        await self.aclose()


__all__ = [
    "EventType",
    "Event",
    "EventSource",
    "AsyncEventSource",
    "EVENT_STREAM_CONTENT_TYPE",
]
