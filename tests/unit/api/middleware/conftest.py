"""Fixtures for middleware tests: a small app and an HTTP client for it."""

from collections.abc import AsyncGenerator, Callable

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from b2bvendas.core.security import SessionUser, UserRole, create_session_token
from b2bvendas.domain.auditoria.models import AuditLog


@pytest.fixture
def echo_app() -> FastAPI:
    """App whose routes echo the session decoded by the middleware."""
    app = FastAPI()

    async def whoami(request: Request) -> dict[str, object]:
        user = request.state.user
        return {"path": request.url.path, "userId": user.id if user else None}

    for path in (
        "/",
        "/login",
        "/dashboard/fornecedor/produtos",
        "/dashboard/cliente",
        "/api/auth/me",
        "/api/public/produtos",
        "/api/fornecedor/estoque",
        "/api/cliente/pedidos",
        "/api/admin/email/logs",
        "/api/produtos",
    ):
        app.add_api_route(path, whoami, methods=["GET"])
    return app


@pytest.fixture
async def client_for() -> AsyncGenerator[Callable[[FastAPI], AsyncClient]]:
    """Factory returning an httpx client bound to a given app."""
    clients: list[AsyncClient] = []

    def make(app: FastAPI) -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield make
    for client in clients:
        await client.aclose()


@pytest.fixture
def token_for() -> Callable[[UserRole], str]:
    """Factory signing a session token for a user of the given role."""

    def make(tipo: UserRole) -> str:
        user = SessionUser(
            id=7, email=f"{tipo.value}@empresa.com.br", nome="Teste", tipo=tipo
        )
        return create_session_token(user)

    return make


class AuditSpy:
    """Audit recorder keeping entries in memory."""

    def __init__(self) -> None:
        self.entries: list[AuditLog] = []

    async def __call__(self, entry: AuditLog) -> None:
        self.entries.append(entry)


@pytest.fixture
def audit() -> AuditSpy:
    return AuditSpy()
