"""Fixtures for integration tests against the full application.

Each test gets a fresh in-memory SQLite database behind the process-wide
engine, an application built by ``create_app`` and an httpx client talking to
it in process. Accounts are created through the public registration route and
authenticated with the Bearer token returned by the sign-in route.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

import b2bvendas.domain  # noqa: F401 - registers the ORM models
from b2bvendas.api.main import create_app
from b2bvendas.core.security import SessionUser, UserRole, create_session_token
from b2bvendas.infrastructure.database import Base, close_database, get_engine

SENHA = "Abcdef12"
FORNECEDOR_CNPJ = "11222333000181"
CLIENTE_CNPJ = "44555666000199"

type Headers = dict[str, str]
type Register = Callable[..., Awaitable[dict[str, Any]]]
type Login = Callable[[str], Awaitable[Headers]]


@pytest.fixture
async def app() -> AsyncGenerator[FastAPI]:
    await close_database()
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    application = create_app()
    yield application

    await application.state.email_queue.stop()
    await close_database()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register(client: AsyncClient) -> Register:
    """Register an account; extra keyword arguments override payload fields."""

    async def _register(tipo: str, email: str, cnpj: str, **fields: Any) -> dict:
        payload = {
            "tipo": tipo,
            "email": email,
            "senha": SENHA,
            "nome": "Usuário Teste",
            "razaoSocial": f"Empresa {cnpj} Ltda",
            "cnpj": cnpj,
            **fields,
        }
        response = await client.post("/api/auth/registro", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _register


@pytest.fixture
def login(client: AsyncClient) -> Login:
    """Sign in and return Bearer headers.

    The session cookie set by the response is dropped so each request is
    authenticated only by the headers it passes.
    """

    async def _login(email: str) -> Headers:
        response = await client.post(
            "/api/auth/login", json={"email": email, "senha": SENHA}
        )
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['data']['token']}"}

    return _login


@pytest.fixture
async def fornecedor_headers(
    register: Register, login: Login
) -> Headers:
    await register(
        "fornecedor",
        "vendas@distribuidora.com.br",
        FORNECEDOR_CNPJ,
        nomeFantasia="Distribuidora Central",
    )
    return await login("vendas@distribuidora.com.br")


@pytest.fixture
async def cliente_headers(
    register: Register, login: Login
) -> Headers:
    await register(
        "cliente",
        "compras@mercado.com.br",
        CLIENTE_CNPJ,
        nomeFantasia="Mercado Bom Preço",
    )
    return await login("compras@mercado.com.br")


@pytest.fixture
def admin_headers() -> Headers:
    """Admin accounts are not self-registered; sign a token directly."""
    admin = SessionUser(
        id=999, email="admin@b2bvendas.com.br", nome="Admin", tipo=UserRole.ADMIN
    )
    return {"Authorization": f"Bearer {create_session_token(admin)}"}
