"""Unit tests for the fixed window rate limiter and its middleware."""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from pytest_check import check

from b2bvendas.api.middleware.rate_limit import (
    FixedWindowRateLimiter,
    RateLimitMiddleware,
)
from b2bvendas.core.config import RateLimitConfig
from b2bvendas.domain.auditoria.models import AuditAction, AuditResource
from tests.unit.api.middleware.conftest import AuditSpy

type ClientFactory = Callable[[FastAPI], AsyncClient]

START = 1_767_225_600.0  # 2026-01-01T00:00:00Z


class FakeClock:
    def __init__(self) -> None:
        self.now = START

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def _app(
    config: RateLimitConfig,
    clock: FakeClock,
    audit: AuditSpy,
    *,
    trust_proxy_headers: bool = False,
) -> FastAPI:
    app = FastAPI()

    async def ok() -> dict[str, bool]:
        return {"ok": True}

    for path in ("/api/produtos", "/api/health", "/static/app.js"):
        app.add_api_route(path, ok, methods=["GET"])

    app.add_middleware(
        RateLimitMiddleware,
        rate_limit_config=config,
        limiter=FixedWindowRateLimiter(
            config.max_requests, config.window_seconds, clock=clock
        ),
        audit_recorder=audit,
        trust_proxy_headers=trust_proxy_headers,
    )
    return app


@pytest.mark.unit
class TestFixedWindowRateLimiter:
    """Test counting and window resets."""

    def test_allows_up_to_the_limit(self, clock: FakeClock) -> None:
        limiter = FixedWindowRateLimiter(3, 60, clock=clock)

        results = [limiter.hit("10.0.0.1") for _ in range(4)]

        assert [r.allowed for r in results] == [True, True, True, False]
        assert [r.remaining for r in results] == [2, 1, 0, 0]
        assert results[0].reset_at == START + 60

    def test_first_rejection_is_flagged_once(self, clock: FakeClock) -> None:
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)

        results = [limiter.hit("10.0.0.1") for _ in range(4)]

        assert [r.first_rejection for r in results] == [False, True, False, False]

    def test_window_resets_after_it_elapses(self, clock: FakeClock) -> None:
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        limiter.hit("10.0.0.1")
        assert not limiter.hit("10.0.0.1").allowed

        clock.now += 60
        result = limiter.hit("10.0.0.1")

        assert result.allowed
        assert result.reset_at == START + 120

    def test_keys_are_counted_separately(self, clock: FakeClock) -> None:
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        limiter.hit("10.0.0.1")

        assert limiter.hit("10.0.0.2").allowed
        assert not limiter.hit("10.0.0.1").allowed

    def test_reset(self, clock: FakeClock) -> None:
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        limiter.hit("10.0.0.1")
        limiter.hit("10.0.0.2")

        limiter.reset("10.0.0.1")
        with check:
            assert limiter.hit("10.0.0.1").allowed
        with check:
            assert not limiter.hit("10.0.0.2").allowed

        limiter.reset()
        assert limiter.hit("10.0.0.2").allowed


@pytest.mark.unit
class TestRateLimitMiddleware:
    """Test the 429 response and which requests are counted."""

    async def test_over_limit_is_429(
        self, clock: FakeClock, audit: AuditSpy, client_for: ClientFactory
    ) -> None:
        config = RateLimitConfig(max_requests=2, window_seconds=60)
        client = client_for(_app(config, clock, audit))

        statuses = [(await client.get("/api/produtos")).status_code for _ in range(2)]
        clock.now += 15
        response = await client.get("/api/produtos")

        assert statuses == [200, 200]
        assert response.status_code == 429
        assert response.json() == {
            "error": "Muitas requisições. Tente novamente mais tarde.",
            "code": "RATE_LIMIT_EXCEEDED",
        }
        reset = datetime.fromisoformat(response.headers["X-RateLimit-Reset"])
        with check:
            assert response.headers["X-RateLimit-Limit"] == "2"
        with check:
            assert response.headers["X-RateLimit-Remaining"] == "0"
        with check:
            assert response.headers["Retry-After"] == "45"
        with check:
            assert reset == datetime(2026, 1, 1, 0, 1, tzinfo=UTC)

    async def test_first_rejection_is_audited(
        self, clock: FakeClock, audit: AuditSpy, client_for: ClientFactory
    ) -> None:
        config = RateLimitConfig(max_requests=1, window_seconds=60)
        client = client_for(_app(config, clock, audit))

        for _ in range(3):
            await client.get("/api/produtos", headers={"User-Agent": "bot/1.0"})

        assert len(audit.entries) == 1
        entry = audit.entries[0]
        assert entry.action == AuditAction.RATE_LIMIT_EXCEEDED
        assert entry.resource == AuditResource.SECURITY
        assert entry.ip == "127.0.0.1"
        assert entry.user_agent == "bot/1.0"
        assert entry.detalhes == {"path": "/api/produtos", "method": "GET"}

    async def test_trusted_ip_is_never_limited(
        self, clock: FakeClock, audit: AuditSpy, client_for: ClientFactory
    ) -> None:
        config = RateLimitConfig(
            max_requests=1, window_seconds=60, trusted_ips=["127.0.0.1"]
        )
        client = client_for(_app(config, clock, audit))

        statuses = {(await client.get("/api/produtos")).status_code for _ in range(3)}

        assert statuses == {200}

    @pytest.mark.parametrize("path", ["/api/health", "/static/app.js"])
    async def test_excluded_prefixes_are_not_counted(
        self,
        clock: FakeClock,
        audit: AuditSpy,
        client_for: ClientFactory,
        path: str,
    ) -> None:
        config = RateLimitConfig(max_requests=1, window_seconds=60)
        client = client_for(_app(config, clock, audit))

        for _ in range(3):
            assert (await client.get(path)).status_code == 200
        assert (await client.get("/api/produtos")).status_code == 200

    async def test_disabled(
        self, clock: FakeClock, audit: AuditSpy, client_for: ClientFactory
    ) -> None:
        config = RateLimitConfig(enabled=False, max_requests=1)
        client = client_for(_app(config, clock, audit))

        statuses = {(await client.get("/api/produtos")).status_code for _ in range(3)}

        assert statuses == {200}

    async def test_forwarded_ip_counts_when_trusted(
        self, clock: FakeClock, audit: AuditSpy, client_for: ClientFactory
    ) -> None:
        config = RateLimitConfig(max_requests=1, window_seconds=60)
        client = client_for(_app(config, clock, audit, trust_proxy_headers=True))

        first = await client.get(
            "/api/produtos", headers={"X-Forwarded-For": "203.0.113.9"}
        )
        other = await client.get(
            "/api/produtos", headers={"X-Forwarded-For": "203.0.113.10"}
        )
        repeat = await client.get(
            "/api/produtos", headers={"X-Forwarded-For": "203.0.113.9"}
        )

        assert [first.status_code, other.status_code, repeat.status_code] == [
            200,
            200,
            429,
        ]
        assert audit.entries[0].ip == "203.0.113.9"
