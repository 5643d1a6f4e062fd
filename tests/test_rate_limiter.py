"""
Tests for the in-memory login rate limiter.

Run with: pytest tests/test_rate_limiter.py -v
"""

from types import SimpleNamespace
from unittest.mock import patch

from starlette.requests import Request

from app.core.rate_limiter import RateLimitConfig, RateLimiter, get_client_ip


def make_request(headers=None, client=("127.0.0.1", 50000)) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "headers": raw_headers, "client": client})


class TestRateLimiter:

    def limiter(self) -> RateLimiter:
        return RateLimiter({"login_ip": RateLimitConfig(max_requests=2, window_seconds=60)})

    def test_blocks_after_limit_until_window_passes(self):
        limiter = self.limiter()

        with patch("app.core.rate_limiter.time.time", return_value=1000.0):
            assert limiter.is_allowed("login_ip", "1.2.3.4") == (True, 0)
            assert limiter.is_allowed("login_ip", "1.2.3.4") == (True, 0)
            assert limiter.is_allowed("login_ip", "1.2.3.4") == (False, 61)
            # Other identifiers have their own budget
            assert limiter.is_allowed("login_ip", "5.6.7.8") == (True, 0)

        with patch("app.core.rate_limiter.time.time", return_value=1061.0):
            assert limiter.is_allowed("login_ip", "1.2.3.4") == (True, 0)

    def test_unknown_limit_type_is_allowed(self):
        assert self.limiter().is_allowed("nope", "1.2.3.4") == (True, 0)

    def test_stale_identifiers_are_forgotten(self):
        limiter = self.limiter()

        with patch("app.core.rate_limiter.time.time", return_value=1000.0):
            for i in range(50):
                limiter.is_allowed("login_ip", f"10.0.0.{i}")
        assert limiter.tracked_keys() == 50

        with patch("app.core.rate_limiter.time.time", return_value=1100.0):
            limiter.is_allowed("login_ip", "10.0.1.1")
        assert limiter.tracked_keys() == 1

    def test_expired_key_is_removed_when_revisited(self):
        limiter = self.limiter()

        with patch("app.core.rate_limiter.time.time", return_value=1000.0):
            limiter.is_allowed("login_ip", "1.2.3.4")
        # A shorter window than the sweep uses, so only the per-key cleanup drops it
        assert limiter._cleanup_old_requests("login_ip:1.2.3.4", 10, 1030.0) == []

        assert limiter.tracked_keys() == 0

    def test_reset(self):
        limiter = self.limiter()
        limiter.is_allowed("login_ip", "1.2.3.4")
        limiter.is_allowed("login_ip", "5.6.7.8")

        limiter.reset("login_ip", "1.2.3.4")
        assert limiter.tracked_keys() == 1
        limiter.reset()
        assert limiter.tracked_keys() == 0


class TestClientIp:

    def test_forwarding_headers_ignored_by_default(self):
        request = make_request({"X-Forwarded-For": "203.0.113.7", "X-Real-IP": "203.0.113.8"})
        assert get_client_ip(request) == "127.0.0.1"

    def test_forwarding_headers_used_when_trusted(self):
        trusted = SimpleNamespace(trust_proxy_headers=True)
        with patch("app.core.rate_limiter.get_settings", return_value=trusted):
            assert get_client_ip(make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})) == "203.0.113.7"
            assert get_client_ip(make_request({"X-Real-IP": "203.0.113.8"})) == "203.0.113.8"
            assert get_client_ip(make_request()) == "127.0.0.1"

    def test_no_client(self):
        assert get_client_ip(make_request(client=None)) == "unknown"
