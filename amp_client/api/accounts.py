"""
Accounts API
============

Details about the account the client is authenticated as.

Endpoints
---------
GET    /v1/me    → the current authenticated account
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from amp_client.api.endpoint import Endpoint
from amp_client.http_client import AmpHTTPClient, AsyncAmpHTTPClient

JSON = Dict[str, Any]


# ───────────────────────────────────────────────────────────────
# Dataclasses
# ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Account:
    """
    An Amphitheatre account.

    Timestamps are kept as the strings the server sent.
    """

    id: int
    email: str
    name: str
    created_at: str
    updated_at: str

    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Account":
        return cls(
            id=int(d["id"]),
            email=d["email"],
            name=d["name"],
            created_at=d["created_at"],
            updated_at=d["updated_at"],
            raw=dict(d),
        )


ACCOUNT = Endpoint.of(Account.from_dict)


# ───────────────────────────────────────────────────────────────
# Façades
# ───────────────────────────────────────────────────────────────

class Accounts:
    """
    The Accounts service handles the account endpoint of the Amphitheatre API.

        client.accounts().me()
    """

    def __init__(self, http: AmpHTTPClient) -> None:
        self._http = http

    def me(self) -> Account:
        """
        Retrieve the details of the entity used to access the API.
        """
        return self._http.get("/me", ACCOUNT).unwrap()


class AsyncAccounts:
    """Coroutine variant of `Accounts`."""

    def __init__(self, http: AsyncAmpHTTPClient) -> None:
        self._http = http

    async def me(self) -> Account:
        resp = await self._http.get("/me", ACCOUNT)
        return resp.unwrap()


__all__ = [
    "Account",
    "Accounts",
    "AsyncAccounts",
    "ACCOUNT",
]
