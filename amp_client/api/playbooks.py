"""
Playbooks API
=============

Create, inspect, update and run playbooks.

Endpoints
---------
GET    /v1/playbooks                           → list playbooks
POST   /v1/playbooks                           → create a playbook
GET    /v1/playbooks/{id}                      → retrieve a playbook
PATCH  /v1/playbooks/{id}                      → update a playbook
DELETE /v1/playbooks/{id}                      → delete a playbook (204)
GET    /v1/playbooks/{id}/events               → playbook event stream (SSE)
POST   /v1/playbooks/{id}/actions/start        → start a playbook (204)
POST   /v1/playbooks/{id}/actions/stop         → stop a playbook (204)

A playbook's run state lives on the server only. `start` and `stop` return
the HTTP status of the request; poll `get` to observe the transition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from amp_client.api.endpoint import EMPTY, Endpoint
from amp_client.api.options import Options, to_query_params
from amp_client.api.streaming import AsyncEventSource, EventSource
from amp_client.http_client import AmpHTTPClient, AsyncAmpHTTPClient

JSON = Dict[str, Any]


# ───────────────────────────────────────────────────────────────
# Dataclasses
# ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Preface:
    """
    The leading character of a playbook: where its first actor comes from.

    Example:
        Preface(name="amp-example-go",
                repository={"repo": "https://github.com/amphitheatre-app/amp-example-go"})
    """

    name: str = ""
    repository: Optional[JSON] = None
    registry: Optional[JSON] = None
    manifest: Optional[str] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Preface":
        return cls(
            name=d.get("name", ""),
            repository=d.get("repository"),
            registry=d.get("registry"),
            manifest=d.get("manifest"),
            raw=dict(d),
        )

    def to_dict(self) -> JSON:
        return {
            "name": self.name,
            "repository": self.repository,
            "registry": self.registry,
            "manifest": self.manifest,
        }


@dataclass(frozen=True)
class PlaybookSpec:
    """
    Minimal typed view of a playbook; the full JSON is kept in `raw`.
    """

    id: str
    title: str
    description: Optional[str] = None
    preface: Optional[Preface] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "PlaybookSpec":
        preface = d.get("preface")
        return cls(
            id=str(d["id"]),
            title=d["title"],
            description=d.get("description"),
            preface=Preface.from_dict(preface) if isinstance(preface, Mapping) else None,
            created_at=d.get("created_at"),
            updated_at=d.get("updated_at"),
            raw=dict(d),
        )


@dataclass(frozen=True)
class PlaybookPayload:
    """
    Body for creating or updating a playbook.

    `live` is only sent when set; older servers do not know the field.
    """

    title: str
    description: str = ""
    preface: Preface = field(default_factory=Preface)
    live: Optional[bool] = None

    def to_dict(self) -> JSON:
        body: JSON = {
            "title": self.title,
            "description": self.description,
            "preface": self.preface.to_dict(),
        }
        if self.live is not None:
            body["live"] = self.live
        return body


PLAYBOOK = Endpoint.of(PlaybookSpec.from_dict)
PLAYBOOKS = Endpoint.list_of(PlaybookSpec.from_dict)


# ───────────────────────────────────────────────────────────────
# Façades
# ───────────────────────────────────────────────────────────────

class Playbooks:
    """
    The Playbooks service handles the playbooks endpoints of the Amphitheatre API.

        playbook = client.playbooks().create(PlaybookPayload(title="Untitled"))
        client.playbooks().start(playbook.id)
        client.playbooks().delete(playbook.id)
    """

    def __init__(self, http: AmpHTTPClient) -> None:
        self._http = http

    def list(self, options: Options = None) -> List[PlaybookSpec]:
        """
        List playbooks visible to the current account, in server order.
        """
        return self._http.get("/playbooks", PLAYBOOKS, params=to_query_params(options)).unwrap()

    def create(self, payload: PlaybookPayload) -> PlaybookSpec:
        """Create a playbook; the returned record carries the server-assigned id."""
        return self._http.post("/playbooks", PLAYBOOK, json=payload.to_dict()).unwrap()

    def get(self, playbook_id: str) -> PlaybookSpec:
        return self._http.get(f"/playbooks/{playbook_id}", PLAYBOOK).unwrap()

    def update(self, playbook_id: str, payload: PlaybookPayload) -> PlaybookSpec:
        return self._http.patch(f"/playbooks/{playbook_id}", PLAYBOOK, json=payload.to_dict()).unwrap()

    def delete(self, playbook_id: str) -> int:
        """Delete a playbook. Returns the HTTP status code (204 on success)."""
        return self._http.delete(f"/playbooks/{playbook_id}", EMPTY).status

    def events(self, playbook_id: str) -> EventSource:
        """
        Open the playbook's event stream. Close the returned source to
        release the connection.
        """
        return self._http.stream(f"/playbooks/{playbook_id}/events")

    def start(self, playbook_id: str) -> int:
        return self._action(playbook_id, "start")

    def stop(self, playbook_id: str) -> int:
        return self._action(playbook_id, "stop")

    def _action(self, playbook_id: str, action: str) -> int:
        return self._http.post(f"/playbooks/{playbook_id}/actions/{action}", EMPTY, json=None).status


class AsyncPlaybooks:
    """Coroutine variant of `Playbooks`."""

    def __init__(self, http: AsyncAmpHTTPClient) -> None:
        self._http = http

    async def list(self, options: Options = None) -> List[PlaybookSpec]:
        resp = await self._http.get("/playbooks", PLAYBOOKS, params=to_query_params(options))
        return resp.unwrap()

    async def create(self, payload: PlaybookPayload) -> PlaybookSpec:
        resp = await self._http.post("/playbooks", PLAYBOOK, json=payload.to_dict())
        return resp.unwrap()

    async def get(self, playbook_id: str) -> PlaybookSpec:
        resp = await self._http.get(f"/playbooks/{playbook_id}", PLAYBOOK)
        return resp.unwrap()

    async def update(self, playbook_id: str, payload: PlaybookPayload) -> PlaybookSpec:
        resp = await self._http.patch(f"/playbooks/{playbook_id}", PLAYBOOK, json=payload.to_dict())
        return resp.unwrap()

    async def delete(self, playbook_id: str) -> int:
        resp = await self._http.delete(f"/playbooks/{playbook_id}", EMPTY)
        return resp.status

    def events(self, playbook_id: str) -> AsyncEventSource:
        return self._http.stream(f"/playbooks/{playbook_id}/events")

    async def start(self, playbook_id: str) -> int:
        return await self._action(playbook_id, "start")

    async def stop(self, playbook_id: str) -> int:
        return await self._action(playbook_id, "stop")

    async def _action(self, playbook_id: str, action: str) -> int:
        resp = await self._http.post(f"/playbooks/{playbook_id}/actions/{action}", EMPTY, json=None)
        return resp.status


__all__ = [
    "Preface",
    "PlaybookSpec",
    "PlaybookPayload",
    "Playbooks",
    "AsyncPlaybooks",
    "PLAYBOOK",
    "PLAYBOOKS",
]
