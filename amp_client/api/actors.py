"""
Actors API
==========

Inspect and interact with the actors running inside a playbook.

Endpoints
---------
GET    /v1/playbooks/{playbook_id}/actors      → list actors of a playbook
GET    /v1/actors/{playbook_id}/{name}         → retrieve an actor
GET    /v1/actors/{playbook_id}/{name}/logs    → actor log stream (SSE)
GET    /v1/actors/{playbook_id}/{name}/info    → environment, mounts, ports
GET    /v1/actors/{playbook_id}/{name}/stats   → CPU / memory / disk / network usage
POST   /v1/actors/{playbook_id}/{name}/sync    → push file changes (202 Accepted)

`info` and `stats` are server-defined JSON maps and are returned untyped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from amp_client.api.endpoint import EMPTY, JSON_VALUE, Endpoint
from amp_client.api.options import Options, to_query_params
from amp_client.api.streaming import AsyncEventSource, EventSource
from amp_client.http_client import AmpHTTPClient, AsyncAmpHTTPClient

JSON = Dict[str, Any]


# ───────────────────────────────────────────────────────────────
# Dataclasses: actors
# ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ActorSpec:
    """
    Minimal typed view of an actor.

    The actor schema is owned by the server and keeps growing; everything
    not surfaced here is available in `raw`.
    """

    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    source: Optional[JSON] = None
    character: Optional[JSON] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ActorSpec":
        source = d.get("source")
        character = d.get("character")
        return cls(
            name=d["name"],
            description=d.get("description"),
            image=d.get("image"),
            source=dict(source) if isinstance(source, Mapping) else None,
            character=dict(character) if isinstance(character, Mapping) else None,
            raw=dict(d),
        )


ACTOR = Endpoint.of(ActorSpec.from_dict)
ACTORS = Endpoint.list_of(ActorSpec.from_dict)


# ───────────────────────────────────────────────────────────────
# Dataclasses: file synchronization
# ───────────────────────────────────────────────────────────────

class EventKinds:
    """Kinds of file-system change carried by a Synchronization."""

    CREATE = "create"
    MODIFY = "modify"
    RENAME = "rename"
    REMOVE = "remove"
    OVERRIDE = "override"

    ALL = frozenset({CREATE, MODIFY, RENAME, REMOVE, OVERRIDE})


@dataclass(frozen=True)
class SyncPath:
    """A file or directory affected by a change, relative to the actor workspace."""

    path: str
    is_directory: bool = False

    @classmethod
    def file(cls, path: str) -> "SyncPath":
        return cls(path)

    @classmethod
    def directory(cls, path: str) -> "SyncPath":
        return cls(path, is_directory=True)

    def to_dict(self) -> JSON:
        return {"directory" if self.is_directory else "file": self.path}


@dataclass(frozen=True)
class Synchronization:
    """
    A batch of file changes to apply inside an actor.

        Synchronization(kind=EventKinds.CREATE, paths=[SyncPath.file("a.txt")])

    Attributes:
        kind: One of EventKinds.
        paths: Affected files and directories.
        attributes: Optional server-interpreted attributes (e.g. modes).
        payload: Optional file content bytes (e.g. a tar archive).
    """

    kind: str
    paths: Sequence[SyncPath]
    attributes: Optional[JSON] = None
    payload: Optional[bytes] = None

    def __post_init__(self) -> None:
        if self.kind not in EventKinds.ALL:
            raise ValueError(f"unknown synchronization kind {self.kind!r}")

    def to_dict(self) -> JSON:
        return {
            "kind": self.kind,
            "paths": [p.to_dict() for p in self.paths],
            "attributes": self.attributes,
            "payload": list(self.payload) if self.payload is not None else None,
        }


# ───────────────────────────────────────────────────────────────
# Façades
# ───────────────────────────────────────────────────────────────

def _actor_path(playbook_id: str, name: str, action: str = "") -> str:
    path = f"/actors/{playbook_id}/{name}"
    return f"{path}/{action}" if action else path


class Actors:
    """
    The Actors service handles the actors endpoints of the Amphitheatre API.

        actors = client.actors().list("1")
        actor = client.actors().get("1", "hello")
        status = client.actors().sync("1", "hello", Synchronization(...))
    """

    def __init__(self, http: AmpHTTPClient) -> None:
        self._http = http

    def list(self, playbook_id: str, options: Options = None) -> List[ActorSpec]:
        """
        List the actors of a playbook, in the order the server returns them.
        """
        resp = self._http.get(f"/playbooks/{playbook_id}/actors", ACTORS, params=to_query_params(options))
        return resp.unwrap()

    def get(self, playbook_id: str, name: str) -> ActorSpec:
        return self._http.get(_actor_path(playbook_id, name), ACTOR).unwrap()

    def logs(self, playbook_id: str, name: str) -> EventSource:
        """
        Open the actor's log stream. Nothing is sent until iteration starts;
        close the returned source to release the connection.
        """
        return self._http.stream(_actor_path(playbook_id, name, "logs"))

    def info(self, playbook_id: str, name: str) -> JSON:
        """Environment variables, mounts and port bindings of the actor."""
        return self._http.get(_actor_path(playbook_id, name, "info"), JSON_VALUE).unwrap()

    def stats(self, playbook_id: str, name: str) -> JSON:
        """Resource usage of the actor, as human-readable strings."""
        return self._http.get(_actor_path(playbook_id, name, "stats"), JSON_VALUE).unwrap()

    def sync(self, playbook_id: str, name: str, payload: Synchronization) -> int:
        """
        Push file changes to the actor.

        Returns:
            int: The HTTP status code; 202 means the change was accepted and
            is applied asynchronously.
        """
        resp = self._http.post(_actor_path(playbook_id, name, "sync"), EMPTY, json=payload.to_dict())
        return resp.status


class AsyncActors:
    """Coroutine variant of `Actors`."""

    def __init__(self, http: AsyncAmpHTTPClient) -> None:
        self._http = http

    async def list(self, playbook_id: str, options: Options = None) -> List[ActorSpec]:
        resp = await self._http.get(
            f"/playbooks/{playbook_id}/actors", ACTORS, params=to_query_params(options)
        )
        return resp.unwrap()

    async def get(self, playbook_id: str, name: str) -> ActorSpec:
        resp = await self._http.get(_actor_path(playbook_id, name), ACTOR)
        return resp.unwrap()

    def logs(self, playbook_id: str, name: str) -> AsyncEventSource:
        return self._http.stream(_actor_path(playbook_id, name, "logs"))

    async def info(self, playbook_id: str, name: str) -> JSON:
        resp = await self._http.get(_actor_path(playbook_id, name, "info"), JSON_VALUE)
        return resp.unwrap()

    async def stats(self, playbook_id: str, name: str) -> JSON:
        resp = await self._http.get(_actor_path(playbook_id, name, "stats"), JSON_VALUE)
        return resp.unwrap()

    async def sync(self, playbook_id: str, name: str, payload: Synchronization) -> int:
        resp = await self._http.post(_actor_path(playbook_id, name, "sync"), EMPTY, json=payload.to_dict())
        return resp.status


__all__ = [
    "ActorSpec",
    "EventKinds",
    "SyncPath",
    "Synchronization",
    "Actors",
    "AsyncActors",
    "ACTOR",
    "ACTORS",
]
