from typing import Any, Optional

import httpx

from amp_client.api.accounts import Accounts, AsyncAccounts
from amp_client.api.actors import Actors, AsyncActors
from amp_client.api.core.authentication import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, ClientConfig
from amp_client.api.oauth import AsyncOAuth, OAuth
from amp_client.api.playbooks import AsyncPlaybooks, Playbooks
from amp_client.http_client import (
    AmpHTTPClient,
    AsyncAmpHTTPClient,
    AsyncHttpxAmpHTTPClient,
    HttpxAmpHTTPClient,
)


class Client:
    """
    Entry point to the Amphitheatre API.

        client = Client("https://cloud.amphitheatre.app", token="AUTH_TOKEN")
        account = client.accounts().me()

    A missing token is allowed; the server decides whether to reject the
    request. An unusable base URL raises ConfigurationError.
    Pass `http=` to reuse an already configured AmpHTTPClient; the
    connection arguments are then ignored.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        *,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
        http: Optional[AmpHTTPClient] = None,
    ) -> None:
        if http is None:
            http = HttpxAmpHTTPClient(base_url, token, timeout=timeout, transport=transport)
        self._http: AmpHTTPClient = http

    @classmethod
    def from_env(cls, **kwargs: Any) -> "Client":
        config = ClientConfig.from_env()
        return cls(config.base_url, config.token, timeout=config.timeout, **kwargs)

    @classmethod
    def from_http(cls, http: AmpHTTPClient) -> "Client":
        """Wrap an existing AmpHTTPClient, e.g. a custom adapter or a test double."""
        return cls(http=http)

    def accounts(self) -> Accounts:
        return Accounts(self._http)

    def actors(self) -> Actors:
        return Actors(self._http)

    def oauth(self) -> OAuth:
        return OAuth(self._http)

    def playbooks(self) -> Playbooks:
        return Playbooks(self._http)

    def close(self) -> None:
        close = getattr(self._http, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: Optional[Any]) -> None:
        self.close()


class AsyncClient:
    """
    Coroutine variant of `Client`.

        async with AsyncClient(token="AUTH_TOKEN") as client:
            playbooks = await client.playbooks().list()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        *,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http: Optional[AsyncAmpHTTPClient] = None,
    ) -> None:
        if http is None:
            http = AsyncHttpxAmpHTTPClient(base_url, token, timeout=timeout, transport=transport)
        self._http: AsyncAmpHTTPClient = http

    @classmethod
    def from_env(cls, **kwargs: Any) -> "AsyncClient":
        config = ClientConfig.from_env()
        return cls(config.base_url, config.token, timeout=config.timeout, **kwargs)

    @classmethod
    def from_http(cls, http: AsyncAmpHTTPClient) -> "AsyncClient":
        """Wrap an existing AsyncAmpHTTPClient."""
        return cls(http=http)

    def accounts(self) -> AsyncAccounts:
        return AsyncAccounts(self._http)

    def actors(self) -> AsyncActors:
        return AsyncActors(self._http)

    def oauth(self) -> AsyncOAuth:
        return AsyncOAuth(self._http)

    def playbooks(self) -> AsyncPlaybooks:
        return AsyncPlaybooks(self._http)

    async def aclose(self) -> None:
        aclose = getattr(self._http, "aclose", None)
        if aclose is not None:
            await aclose()

    async def __aenter__(self) -> "AsyncClient":
        return self

    async def __aexit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: Optional[Any]) -> None:
        await self.aclose()
