"""Unit tests for memantra.core.ratelimit: fixed-window counting with a controllable clock."""

import unittest
from unittest.mock import MagicMock

from fastapi import HTTPException

from memantra.core.ratelimit import FixedWindowRateLimiter, client_key


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _request(host: str | None = "10.0.0.1") -> MagicMock:
    request = MagicMock()
    request.client = MagicMock(host=host) if host else None
    request.url.path = "/api/auth/me"
    return request


class TestFixedWindowRateLimiter(unittest.TestCase):
    """hit() allows max_requests per window and per key, then rejects until the window ends."""

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.limiter = FixedWindowRateLimiter(3, 900, now=self.clock)

    def test_allows_up_to_limit_then_rejects(self) -> None:
        results = [self.limiter.hit("ip:a") for _ in range(4)]
        self.assertEqual([r.allowed for r in results], [True, True, True, False])
        self.assertEqual([r.remaining for r in results], [2, 1, 0, 0])
        self.assertEqual(results[-1].limit, 3)

    def test_window_expiry_resets_count(self) -> None:
        for _ in range(4):
            self.limiter.hit("ip:a")
        self.clock.now += 899
        result = self.limiter.hit("ip:a")
        self.assertFalse(result.allowed)
        self.assertEqual(result.reset_after, 1)

        self.clock.now += 1
        result = self.limiter.hit("ip:a")
        self.assertTrue(result.allowed)
        self.assertEqual(result.remaining, 2)
        self.assertEqual(result.reset_after, 900)

    def test_keys_are_counted_separately(self) -> None:
        for _ in range(3):
            self.limiter.hit("ip:a")
        self.assertFalse(self.limiter.hit("ip:a").allowed)
        self.assertTrue(self.limiter.hit("ip:b").allowed)

    def test_reset_clears_counts(self) -> None:
        for _ in range(4):
            self.limiter.hit("ip:a")
        self.limiter.reset()
        self.assertTrue(self.limiter.hit("ip:a").allowed)

    def test_dependency_sets_headers_then_raises_429(self) -> None:
        response = MagicMock()
        response.headers = {}
        for _ in range(3):
            self.limiter(_request(), response)
        self.assertEqual(response.headers["X-RateLimit-Remaining"], "0")
        self.assertEqual(response.headers["X-RateLimit-Limit"], "3")

        with self.assertRaises(HTTPException) as ctx:
            self.limiter(_request(), response)
        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(ctx.exception.detail, "Too many requests, please try again later.")
        self.assertEqual(ctx.exception.headers["Retry-After"], "900")

    def test_disabled_limiter_never_counts(self) -> None:
        limiter = FixedWindowRateLimiter(1, 900, enabled=False, now=self.clock)
        response = MagicMock()
        response.headers = {}
        for _ in range(5):
            limiter(_request(), response)
        self.assertEqual(response.headers, {})

    def test_client_key_uses_ip(self) -> None:
        self.assertEqual(client_key(_request("10.0.0.1")), "ip:10.0.0.1")
        self.assertEqual(client_key(_request(None)), "ip:unknown")
