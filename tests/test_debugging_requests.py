"""Tests for rate-limit and request-id metadata."""

from amp_client.api.accounts import ACCOUNT
from amp_client.api.core.debugging_requests import RateLimitInfo, extract_request_meta


class TestRequestMeta:
    def test_rate_limit_headers(self):
        meta = extract_request_meta(
            {
                "X-RateLimit-Limit": "2",
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-After": "never",
                "X-Request-Id": "abc",
            }
        )

        assert meta.request_id == "abc"
        assert meta.rate_limit.limit == 2
        assert meta.rate_limit.remaining == 0
        assert meta.rate_limit.after == "never"
        assert meta.rate_limit.exhausted

    def test_missing_and_malformed_headers(self):
        meta = extract_request_meta({"x-ratelimit-limit": "lots"})

        assert meta.request_id is None
        assert meta.rate_limit.limit is None
        assert not meta.rate_limit.exhausted

    def test_response_meta(self, setup_mock_for):
        client = setup_mock_for("/me", "accounts/get-me-success", "GET")

        resp = client._http.get("/me", ACCOUNT)

        assert resp.meta.rate_limit.remaining == 3991
        assert resp.meta.request_id == "0d1a8b2e-5b0e-4a0c-9f3c-2f1d1a0b6c7e"

    def test_unlimited_window_is_not_exhausted(self):
        assert not RateLimitInfo(limit=None, remaining=None, after="never").exhausted
