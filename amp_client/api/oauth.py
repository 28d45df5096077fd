"""
OAuth API
=========

Exchange an OAuth authorization code for an access token.

Endpoints
---------
POST   /v1/oauth/access_token   → exchange an authorization code for a token

The request body always carries `grant_type: "authorization_code"`; callers
supply the remaining fields through `OAuthTokenPayload`. Invalid or expired
codes and mismatched client credentials surface as `HTTPStatusError`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Mapping, Optional

from amp_client.api.endpoint import Endpoint
from amp_client.http_client import AmpHTTPClient, AsyncAmpHTTPClient

JSON = Dict[str, Any]

ACCESS_TOKEN_PATH = "/oauth/access_token"
GRANT_TYPE_AUTHORIZATION_CODE = "authorization_code"


@dataclass(frozen=True)
class OAuthTokenPayload:
    """What the caller knows after the authorization redirect."""

    client_id: str
    client_secret: str
    code: str
    redirect_uri: str
    state: str

    def to_params(self) -> JSON:
        """Request body for the token exchange, with the fixed grant type."""
        params: JSON = {"grant_type": GRANT_TYPE_AUTHORIZATION_CODE}
        params.update(asdict(self))
        return params


@dataclass(frozen=True)
class AccessToken:
    """
    An access token issued for an account.
    """

    access_token: str
    account_id: int
    token_type: str
    scope: Optional[str] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "AccessToken":
        return cls(
            access_token=d["access_token"],
            account_id=int(d["account_id"]),
            token_type=d["token_type"],
            scope=d.get("scope"),
            raw=dict(d),
        )


ACCESS_TOKEN = Endpoint.of(AccessToken.from_dict)


class OAuth:
    """
    The OAuth service handles the OAuth2 token exchange.

        token = client.oauth().exchange_authorization_for_token(
            OAuthTokenPayload(client_id="...", client_secret="...", code="...",
                              redirect_uri="...", state="..."),
        )
    """

    def __init__(self, http: AmpHTTPClient) -> None:
        self._http = http

    def exchange_authorization_for_token(self, payload: OAuthTokenPayload) -> AccessToken:
        return self._http.post(ACCESS_TOKEN_PATH, ACCESS_TOKEN, json=payload.to_params()).unwrap()


class AsyncOAuth:
    """Coroutine variant of `OAuth`."""

    def __init__(self, http: AsyncAmpHTTPClient) -> None:
        self._http = http

    async def exchange_authorization_for_token(self, payload: OAuthTokenPayload) -> AccessToken:
        resp = await self._http.post(ACCESS_TOKEN_PATH, ACCESS_TOKEN, json=payload.to_params())
        return resp.unwrap()


__all__ = [
    "OAuthTokenPayload",
    "AccessToken",
    "OAuth",
    "AsyncOAuth",
    "ACCESS_TOKEN",
    "GRANT_TYPE_AUTHORIZATION_CODE",
]
