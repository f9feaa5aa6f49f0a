"""Integration tests for registration, sign-in and route protection."""

import pytest
from httpx import AsyncClient
from pytest_check import check

from tests.integration.conftest import CLIENTE_CNPJ, SENHA, Headers, Register


@pytest.mark.integration
class TestRegistro:
    """Test the registration route."""

    async def test_registers_cliente(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/auth/registro",
            json={
                "tipo": "cliente",
                "email": "a@b.com",
                "senha": SENHA,
                "nome": "Ana Souza",
                "razaoSocial": "Mercado da Ana Ltda",
                "cnpj": CLIENTE_CNPJ,
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["email"] == "a@b.com"
        assert body["data"]["tipo"] == "cliente"
        assert "senha" not in body["data"]

    async def test_missing_tipo(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/auth/registro",
            json={"email": "a@b.com", "senha": SENHA, "cnpj": CLIENTE_CNPJ},
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "Tipo de usuário inválido",
            "code": "VALIDATION_ERROR",
        }

    async def test_invalid_payload_writes_nothing(
        self, client: AsyncClient, register: Register
    ) -> None:
        response = await client.post(
            "/api/auth/registro",
            json={
                "tipo": "fornecedor",
                "email": "vendas@atacado.com.br",
                "senha": "fraca",
                "nome": "Carlos",
                "razaoSocial": "Atacado Ltda",
                "cnpj": "123",
            },
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        errors = body["details"]["validation_errors"]
        with check:
            assert errors["senha"] == ["Senha deve ter no mínimo 8 caracteres"]
        with check:
            assert errors["cnpj"] == ["CNPJ deve conter 14 dígitos"]

        # The same email is still free
        await register("fornecedor", "vendas@atacado.com.br", "11222333000181")

    async def test_duplicate_email(
        self, register: Register, client: AsyncClient
    ) -> None:
        await register("cliente", "compras@mercado.com.br", CLIENTE_CNPJ)

        response = await client.post(
            "/api/auth/registro",
            json={
                "tipo": "fornecedor",
                "email": "compras@mercado.com.br",
                "senha": SENHA,
                "nome": "Outra Pessoa",
                "razaoSocial": "Outra Empresa Ltda",
                "cnpj": "11222333000181",
            },
        )

        assert response.status_code == 409
        assert response.json()["error"] == "Email já cadastrado"

    async def test_register_alias(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/auth/register",
            json={
                "tipo": "fornecedor",
                "email": "contato@fabrica.com.br",
                "senha": SENHA,
                "nome": "Fábrica",
                "razaoSocial": "Fábrica de Doces Ltda",
                "cnpj": "11222333000181",
            },
        )

        assert response.status_code == 201


@pytest.mark.integration
class TestLogin:
    """Test sign-in and the session routes."""

    async def test_wrong_password(
        self, client: AsyncClient, register: Register
    ) -> None:
        await register("cliente", "compras@mercado.com.br", CLIENTE_CNPJ)

        response = await client.post(
            "/api/auth/login",
            json={"email": "compras@mercado.com.br", "senha": "Errada123"},
        )

        assert response.status_code == 401
        assert response.json() == {
            "error": "Credenciais inválidas",
            "code": "UNAUTHORIZED",
        }

    async def test_login_sets_cookie(
        self, client: AsyncClient, register: Register
    ) -> None:
        await register("cliente", "compras@mercado.com.br", CLIENTE_CNPJ)

        response = await client.post(
            "/api/auth/login",
            json={"email": "compras@mercado.com.br", "senha": SENHA},
        )

        assert response.status_code == 200
        assert "b2bvendas_session=" in response.headers["set-cookie"]
        assert "httponly" in response.headers["set-cookie"].lower()
        data = response.json()["data"]
        assert data["usuario"]["tipo"] == "cliente"
        assert data["usuario"]["clienteId"] is not None
        assert data["usuario"]["fornecedorId"] is None

    async def test_session(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        response = await client.get("/api/auth/session", headers=fornecedor_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "vendas@distribuidora.com.br"
        assert data["tipo"] == "fornecedor"
        assert data["fornecedorId"] is not None

    async def test_session_requires_login(self, client: AsyncClient) -> None:
        response = await client.get("/api/auth/session")

        assert response.status_code == 401
        assert response.json()["error"] == "Autenticação necessária"

    async def test_change_password(
        self,
        client: AsyncClient,
        cliente_headers: Headers,
    ) -> None:
        wrong = await client.post(
            "/api/auth/alterar-senha",
            json={"senhaAtual": "Errada123", "novaSenha": "NovaSenha9"},
            headers=cliente_headers,
        )
        changed = await client.post(
            "/api/auth/alterar-senha",
            json={"senhaAtual": SENHA, "novaSenha": "NovaSenha9"},
            headers=cliente_headers,
        )
        old = await client.post(
            "/api/auth/login",
            json={"email": "compras@mercado.com.br", "senha": SENHA},
        )

        with check:
            assert wrong.status_code == 400
        with check:
            assert changed.status_code == 200
        with check:
            assert old.status_code == 401


@pytest.mark.integration
class TestProtectedRoutes:
    """Test role gating on the API prefixes."""

    @pytest.mark.parametrize(
        "path",
        ["/api/fornecedor/estoque", "/api/produtos", "/api/cliente/pedidos"],
    )
    async def test_requires_session(self, client: AsyncClient, path: str) -> None:
        response = await client.get(path)

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    async def test_cliente_cannot_use_fornecedor_area(
        self, client: AsyncClient, cliente_headers: Headers
    ) -> None:
        area = await client.get("/api/fornecedor/estoque", headers=cliente_headers)
        produtos = await client.get("/api/produtos", headers=cliente_headers)

        with check:
            assert area.status_code == 401
        with check:
            assert produtos.status_code == 401
        with check:
            assert produtos.json()["error"] == "Permissão insuficiente"

    async def test_fornecedor_cannot_place_orders(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        response = await client.post(
            "/api/cliente/pedidos",
            json={"fornecedorId": 1, "itens": [{"produtoId": 1, "quantidade": 1}]},
            headers=fornecedor_headers,
        )

        assert response.status_code == 401

    async def test_page_redirects_to_login(self, client: AsyncClient) -> None:
        response = await client.get("/dashboard/fornecedor")

        assert response.status_code == 307
        assert response.headers["location"] == (
            "/login?callbackUrl=%2Fdashboard%2Ffornecedor"
        )

    async def test_security_headers(self, client: AsyncClient) -> None:
        response = await client.get("/api/health")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert "x-correlation-id" in response.headers
