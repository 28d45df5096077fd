"""
Endpoint Bindings
=================

Static declarations of what a route's JSON payload decodes into.

Each resource module declares its bindings once, at import time:

    PLAYBOOK = Endpoint.of(PlaybookSpec.from_dict)
    PLAYBOOKS = Endpoint.list_of(PlaybookSpec.from_dict)

and passes them to the HTTP client, which uses the binding's decoder on the
response payload. The binding is chosen by the call site, so no runtime type
inspection is needed to pick a decoder.

Responses may wrap the payload in an envelope:

    {"data": <payload>, "pagination": {"current_page": 1, ...} | null}

`unwrap_envelope()` separates the payload from the pagination metadata;
bodies that are not envelopes are treated as the payload itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Tuple, TypeVar

from amp_client.exceptions import DeserializationError

JSON = Dict[str, Any]
T = TypeVar("T")
R = TypeVar("R")

_ENVELOPE_KEYS = frozenset({"data", "pagination"})


@dataclass(frozen=True)
class Pagination:
    """Pagination metadata attached to list responses."""

    current_page: int
    per_page: int
    total_entries: int
    total_pages: int

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Pagination":
        return cls(
            current_page=int(d["current_page"]),
            per_page=int(d["per_page"]),
            total_entries=int(d["total_entries"]),
            total_pages=int(d["total_pages"]),
        )

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages


@dataclass(frozen=True)
class Endpoint(Generic[T]):
    """
    Association of a route shape with the decoder for its payload.

    Attributes:
        decoder:
            Callable turning the JSON payload into T. None means the body is
            ignored entirely (status-only routes).
        name:
            Human-readable name used in error messages and logs.
    """

    decoder: Optional[Callable[[Any], T]]
    name: str

    @classmethod
    def of(cls, decoder: Callable[[Mapping[str, Any]], R], name: Optional[str] = None) -> "Endpoint[R]":
        """Binding for a single JSON object."""

        def decode_one(payload: Any) -> R:
            if not isinstance(payload, Mapping):
                raise DeserializationError(
                    f"expected a JSON object, got {type(payload).__name__}", payload
                )
            return decoder(payload)

        return cls(decoder=decode_one, name=name or _decoder_name(decoder))  # type: ignore[arg-type]

    @classmethod
    def list_of(
        cls, decoder: Callable[[Mapping[str, Any]], R], name: Optional[str] = None
    ) -> "Endpoint[List[R]]":
        """Binding for a JSON array of objects, preserving server order."""

        def decode_many(payload: Any) -> List[R]:
            if not isinstance(payload, list):
                raise DeserializationError(
                    f"expected a JSON array, got {type(payload).__name__}", payload
                )
            items: List[R] = []
            for item in payload:
                if not isinstance(item, Mapping):
                    raise DeserializationError(
                        f"expected a JSON object in array, got {type(item).__name__}", item
                    )
                items.append(decoder(item))
            return items

        return cls(decoder=decode_many, name=name or f"List[{_decoder_name(decoder)}]")  # type: ignore[arg-type]

    @property
    def expects_body(self) -> bool:
        return self.decoder is not None

    def decode(self, payload: Any) -> T:
        """
        Decode `payload`, converting schema mismatches into
        DeserializationError.
        """
        if self.decoder is None:
            return None  # type: ignore[return-value]
        try:
            return self.decoder(payload)
        except DeserializationError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise DeserializationError(
                f"response does not match {self.name}: {exc!r}", payload
            ) from exc


def _decoder_name(decoder: Callable[..., Any]) -> str:
    qualname = getattr(decoder, "__qualname__", repr(decoder))
    return qualname.rsplit(".from_dict", 1)[0]


def unwrap_envelope(body: Any) -> Tuple[Any, Optional[Pagination]]:
    """
    Split a decoded JSON body into (payload, pagination).

    Only an object whose keys are `data` plus optionally `pagination`
    counts as an envelope.
    """
    if isinstance(body, Mapping) and "data" in body and set(body) <= _ENVELOPE_KEYS:
        raw_pagination = body.get("pagination")
        pagination = None
        if raw_pagination is not None:
            if not isinstance(raw_pagination, Mapping):
                raise DeserializationError("pagination must be a JSON object", raw_pagination)
            try:
                pagination = Pagination.from_dict(raw_pagination)
            except (KeyError, TypeError, ValueError) as exc:
                raise DeserializationError(
                    f"malformed pagination: {exc!r}", raw_pagination
                ) from exc
        return body["data"], pagination
    return body, None


# Status-only routes: the body, if any, is ignored.
EMPTY: Endpoint[None] = Endpoint(decoder=None, name="Empty")

# Loosely-typed routes: the JSON payload is returned as-is.
JSON_VALUE: Endpoint[Any] = Endpoint(decoder=lambda payload: payload, name="JsonValue")


__all__ = [
    "Endpoint",
    "Pagination",
    "unwrap_envelope",
    "EMPTY",
    "JSON_VALUE",
    "JSON",
]
