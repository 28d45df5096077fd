"""Tests for the OAuth API."""

import json

import pytest

from amp_client import HTTPStatusError, OAuthTokenPayload

PAYLOAD = OAuthTokenPayload(
    client_id="some-client-id",
    client_secret="some-client-secret",
    code="some-code",
    redirect_uri="https://example.com/callback",
    state="some-state",
)


class TestExchangeAuthorizationForToken:
    def test_exchange_authorization_for_token(self, setup_mock_for, requests):
        client = setup_mock_for("/oauth/access_token", "oauth/oauth-access-token-success", "POST")

        token = client.oauth().exchange_authorization_for_token(PAYLOAD)

        assert token.access_token == "zKQ7OLqF5N1gylcJweA9WodA000BUNJD"
        assert token.account_id == 1
        assert token.token_type == "Bearer"
        assert token.scope is None

    def test_grant_type_is_fixed(self, setup_mock_for, requests):
        """The request body carries grant_type=authorization_code plus the payload."""
        client = setup_mock_for("/oauth/access_token", "oauth/oauth-access-token-success", "POST")

        client.oauth().exchange_authorization_for_token(PAYLOAD)

        body = json.loads(requests[0].content)
        assert body == {
            "grant_type": "authorization_code",
            "client_id": "some-client-id",
            "client_secret": "some-client-secret",
            "code": "some-code",
            "redirect_uri": "https://example.com/callback",
            "state": "some-state",
        }
        assert requests[0].headers["Content-Type"] == "application/json"

    def test_exchange_error(self, setup_mock_for):
        """Invalid codes surface as an opaque HTTP error."""
        client = setup_mock_for("/oauth/access_token", "oauth/oauth-access-token-error", "POST")

        with pytest.raises(HTTPStatusError) as excinfo:
            client.oauth().exchange_authorization_for_token(PAYLOAD)

        assert excinfo.value.status == 400
        assert excinfo.value.message == "invalid_request"
