"""Shared fixtures: serve recorded `.http` responses through httpx.MockTransport."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterator, List, Tuple

import httpx
import pytest

from amp_client import AsyncClient, Client

FIXTURES = Path(__file__).parent / "fixtures" / "v1" / "api"
TOKEN = "some-token"


def parse_fixture(name: str) -> Tuple[int, Dict[str, str], bytes]:
    """
    Read `tests/fixtures/v1/api/<name>.http`: a status line, headers, a
    blank line, then the body.
    """
    content = (FIXTURES / f"{name}.http").read_text()
    head, _, body = content.partition("\n\n")
    status_line, *header_lines = head.splitlines()
    status = int(status_line.split()[1])
    headers = {}
    for line in header_lines:
        key, _, value = line.partition(":")
        headers[key.strip()] = value.strip()
    return status, headers, body.encode("utf-8")


def mock_transport(
    path: str, fixture: str, method: str, requests: List[httpx.Request]
) -> httpx.MockTransport:
    """Answer `method /v1<path>` with the fixture; anything else gets a 501."""
    status, headers, body = parse_fixture(fixture)
    expected_path = f"/v1{path}"

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.method == method and request.url.path == expected_path:
            return httpx.Response(status, headers=headers, content=body)
        return httpx.Response(501, json={"message": f"no mock for {request.method} {request.url.path}"})

    return httpx.MockTransport(handler)


@pytest.fixture
def requests() -> List[httpx.Request]:
    """Requests received by the mock transport, in order."""
    return []


@pytest.fixture
def setup_mock_for(requests: List[httpx.Request]) -> Iterator[Callable[[str, str, str], Client]]:
    clients: List[Client] = []

    def factory(path: str, fixture: str, method: str) -> Client:
        client = Client(
            "http://amp.test/v1",
            TOKEN,
            transport=mock_transport(path, fixture, method, requests),
        )
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def setup_async_mock_for(requests: List[httpx.Request]) -> Callable[[str, str, str], AsyncClient]:
    def factory(path: str, fixture: str, method: str) -> AsyncClient:
        return AsyncClient(
            "http://amp.test/v1",
            TOKEN,
            transport=mock_transport(path, fixture, method, requests),
        )

    return factory
