"""Integration tests for categories, products and the public catalog."""

from typing import Any

import pytest
from httpx import AsyncClient
from pytest_check import check

from tests.integration.conftest import Headers, Login, Register


async def _create_categoria(
    client: AsyncClient, headers: Headers, nome: str, pai: int | None = None
) -> dict[str, Any]:
    response = await client.post(
        "/api/categorias",
        json={"nome": nome, "categoriaPaiId": pai},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def _create_produto(
    client: AsyncClient, headers: Headers, **fields: Any
) -> dict[str, Any]:
    payload = {
        "nome": "Arroz Tipo 1 5kg",
        "sku": "ARR-5",
        "precoBase": 25.9,
        "quantidadeEstoque": 10,
        "estoqueMinimo": 2,
        **fields,
    }
    response = await client.post("/api/produtos", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.integration
class TestCategorias:
    """Test the category tree routes."""

    async def test_tree(self, client: AsyncClient, fornecedor_headers: Headers) -> None:
        bebidas = await _create_categoria(client, fornecedor_headers, "Bebidas")
        await _create_categoria(
            client, fornecedor_headers, "Refrigerantes", bebidas["id"]
        )

        tree = (await client.get("/api/categorias", headers=fornecedor_headers)).json()
        flat = (
            await client.get("/api/categorias?flat=true", headers=fornecedor_headers)
        ).json()

        assert bebidas["slug"] == "bebidas"
        assert [c["nome"] for c in tree["data"]] == ["Bebidas"]
        assert [c["nome"] for c in tree["data"][0]["filhos"]] == ["Refrigerantes"]
        assert len(flat["data"]) == 2

    async def test_duplicate_slug(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        await _create_categoria(client, fornecedor_headers, "Limpeza")

        response = await client.post(
            "/api/categorias", json={"nome": "limpeza"}, headers=fornecedor_headers
        )

        assert response.status_code == 409

    async def test_move_rejects_cycles(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        raiz = await _create_categoria(client, fornecedor_headers, "Alimentos")
        filha = await _create_categoria(
            client, fornecedor_headers, "Grãos", raiz["id"]
        )

        response = await client.patch(
            f"/api/categorias/{raiz['id']}/mover",
            json={"categoriaPaiId": filha["id"]},
            headers=fornecedor_headers,
        )

        assert response.status_code == 422
        assert response.json() == {
            "error": "Esta operação criaria uma referência circular",
            "code": "BUSINESS_RULE_VIOLATION",
        }

    async def test_path(self, client: AsyncClient, fornecedor_headers: Headers) -> None:
        raiz = await _create_categoria(client, fornecedor_headers, "Alimentos")
        filha = await _create_categoria(
            client, fornecedor_headers, "Grãos", raiz["id"]
        )

        response = await client.get(
            f"/api/categorias/{filha['id']}/caminho", headers=fornecedor_headers
        )

        assert [c["nome"] for c in response.json()["data"]] == ["Alimentos", "Grãos"]

    async def test_delete_with_products_needs_force(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        categoria = await _create_categoria(client, fornecedor_headers, "Bebidas")
        produto = await _create_produto(
            client, fornecedor_headers, categoriaId=categoria["id"]
        )
        url = f"/api/categorias/{categoria['id']}"

        blocked = await client.delete(url, headers=fornecedor_headers)
        forced = await client.delete(f"{url}?force=true", headers=fornecedor_headers)
        detached = await client.get(
            f"/api/produtos/{produto['id']}", headers=fornecedor_headers
        )

        with check:
            assert blocked.status_code == 422
        with check:
            assert forced.status_code == 200
        with check:
            assert detached.json()["data"]["categoriaId"] is None


@pytest.mark.integration
class TestProdutos:
    """Test supplier product management."""

    async def test_create(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        produto = await _create_produto(client, fornecedor_headers)

        assert produto["slug"] == "arroz-tipo-1-5kg"
        assert produto["precoBase"] == 25.9
        assert produto["statusEstoque"] == "in_stock"
        assert produto["ativo"] is True

    async def test_duplicate_sku(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        await _create_produto(client, fornecedor_headers)

        response = await client.post(
            "/api/produtos",
            json={"nome": "Outro Arroz", "sku": "ARR-5", "precoBase": 20},
            headers=fornecedor_headers,
        )

        assert response.status_code == 409
        assert response.json()["error"] == "SKU já cadastrado para este fornecedor"

    async def test_minimum_above_maximum(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        response = await client.post(
            "/api/produtos",
            json={
                "nome": "Feijão 1kg",
                "sku": "FEI-1",
                "precoBase": 8.5,
                "estoqueMinimo": 10,
                "estoqueMaximo": 5,
            },
            headers=fornecedor_headers,
        )

        assert response.status_code == 400

    async def test_list_is_paginated(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        for index in range(3):
            await _create_produto(
                client, fornecedor_headers, nome=f"Produto {index}", sku=f"P-{index}"
            )

        response = await client.get(
            "/api/produtos?pagina=2&limite=2&ordenarPor=nome&ordem=asc",
            headers=fornecedor_headers,
        )

        body = response.json()
        assert body["meta"] == {
            "pagina": 2,
            "limite": 2,
            "total": 3,
            "totalPaginas": 2,
        }
        assert [p["nome"] for p in body["data"]] == ["Produto 2"]

    async def test_invalid_pagination(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        response = await client.get(
            "/api/produtos?limite=500", headers=fornecedor_headers
        )

        assert response.status_code == 400

    async def test_update_and_soft_delete(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        produto = await _create_produto(client, fornecedor_headers)
        url = f"/api/produtos/{produto['id']}"

        updated = await client.put(
            url, json={"precoBase": 27.5}, headers=fornecedor_headers
        )
        deleted = await client.delete(url, headers=fornecedor_headers)
        after = await client.get(url, headers=fornecedor_headers)

        assert updated.json()["data"]["precoBase"] == 27.5
        assert updated.json()["data"]["nome"] == "Arroz Tipo 1 5kg"
        assert deleted.json()["data"] == {"message": "Produto desativado com sucesso"}
        assert after.json()["data"]["ativo"] is False

    async def test_toggle_ativo(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        produto = await _create_produto(client, fornecedor_headers)
        url = f"/api/produtos/{produto['id']}/toggle-ativo"

        first = await client.patch(url, headers=fornecedor_headers)
        second = await client.patch(url, headers=fornecedor_headers)

        assert first.json()["data"]["ativo"] is False
        assert second.json()["data"]["ativo"] is True

    async def test_other_supplier_product_is_not_found(
        self,
        client: AsyncClient,
        fornecedor_headers: Headers,
        register: Register,
        login: Login,
    ) -> None:
        produto = await _create_produto(client, fornecedor_headers)
        await register("fornecedor", "outro@atacado.com.br", "99888777000166")
        outro = await login("outro@atacado.com.br")

        response = await client.get(f"/api/produtos/{produto['id']}", headers=outro)

        assert response.status_code == 404
        assert response.json()["error"] == "Produto não encontrado"


@pytest.mark.integration
class TestEstoque:
    """Test stock status, low stock listing and stock updates."""

    async def test_low_stock(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        await _create_produto(client, fornecedor_headers, sku="OK-1")
        no_minimo = await _create_produto(
            client,
            fornecedor_headers,
            nome="Açúcar 1kg",
            sku="ACU-1",
            quantidadeEstoque=2,
            estoqueMinimo=2,
        )

        baixo = await client.get(
            "/api/produtos/estoque-baixo", headers=fornecedor_headers
        )
        estoque = await client.get(
            "/api/fornecedor/estoque?lowStockOnly=true", headers=fornecedor_headers
        )

        assert [p["id"] for p in baixo.json()["data"]] == [no_minimo["id"]]
        # Stock equal to the minimum still reads as in stock
        assert no_minimo["statusEstoque"] == "in_stock"
        assert estoque.json()["data"] == []

    async def test_update_stock_is_clamped(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        produto = await _create_produto(
            client, fornecedor_headers, estoqueMinimo=2, estoqueMaximo=50
        )

        above = await client.patch(
            "/api/fornecedor/estoque",
            json={"id": produto["id"], "estoqueAtual": 80},
            headers=fornecedor_headers,
        )
        below = await client.patch(
            "/api/fornecedor/estoque",
            json={"id": produto["id"], "estoqueAtual": -5},
            headers=fornecedor_headers,
        )

        assert above.json()["data"]["estoqueAtual"] == 50
        assert below.json()["data"]["estoqueAtual"] == 2
        assert below.json()["data"]["nomeProduto"] == "Arroz Tipo 1 5kg"


@pytest.mark.integration
class TestCatalogoPublico:
    """Test the public catalog route."""

    async def test_lists_active_products_without_session(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        ativo = await _create_produto(client, fornecedor_headers, destaque=True)
        inativo = await _create_produto(
            client, fornecedor_headers, nome="Arroz Integral 1kg", sku="INA-1"
        )
        await client.delete(
            f"/api/produtos/{inativo['id']}", headers=fornecedor_headers
        )

        response = await client.get("/api/public/produtos?busca=arroz")

        assert response.status_code == 200
        body = response.json()
        assert [p["id"] for p in body["data"]] == [ativo["id"]]
        assert body["data"][0]["fornecedor"]["nomeFantasia"] == (
            "Distribuidora Central"
        )
        assert "quantidadeEstoque" not in body["data"][0]
        assert body["meta"]["limite"] == 20
