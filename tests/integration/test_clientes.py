"""Integration tests for supplier customers and price lists."""

from typing import Any

import pytest
from httpx import AsyncClient
from pytest_check import check
from pytest_mock import MockerFixture

from b2bvendas.domain.clientes.models import Cliente
from b2bvendas.domain.clientes.repository import ClienteRepository

from tests.integration.conftest import CLIENTE_CNPJ, Headers


async def _create_lista(
    client: AsyncClient, headers: Headers, **fields: Any
) -> dict[str, Any]:
    payload = {
        "nome": "Atacado",
        "descontoTipo": "percentual",
        "descontoValor": 10,
        **fields,
    }
    response = await client.post(
        "/api/fornecedor/precos", json=payload, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.integration
class TestClientes:
    """Test customer association through the supplier routes."""

    async def test_association_is_idempotent(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        payload = {
            "cnpj": "44.555.666/0001-99",
            "razaoSocial": "Mercado Bom Preço Ltda",
            "email": "compras@mercado.com.br",
        }

        first = await client.post(
            "/api/clientes", json=payload, headers=fornecedor_headers
        )
        second = await client.post(
            "/api/clientes", json=payload, headers=fornecedor_headers
        )
        listing = await client.get("/api/clientes", headers=fornecedor_headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["data"]["id"] == second.json()["data"]["id"]
        assert first.json()["data"]["cnpj"] == CLIENTE_CNPJ
        assert listing.json()["meta"]["total"] == 1

    async def test_registered_cliente_is_reused(
        self,
        client: AsyncClient,
        fornecedor_headers: Headers,
        cliente_headers: Headers,
    ) -> None:
        response = await client.post(
            "/api/clientes",
            json={"cnpj": CLIENTE_CNPJ, "razaoSocial": "Outro Nome"},
            headers=fornecedor_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["email"] == "compras@mercado.com.br"
        assert response.json()["data"]["nomeFantasia"] == "Mercado Bom Preço"

    async def test_update_and_remove(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        created = await client.post(
            "/api/clientes",
            json={"cnpj": CLIENTE_CNPJ, "razaoSocial": "Mercado Ltda"},
            headers=fornecedor_headers,
        )
        url = f"/api/clientes/{created.json()['data']['id']}"

        updated = await client.put(
            url,
            json={"cidade": "Campinas", "estado": "sp"},
            headers=fornecedor_headers,
        )
        removed = await client.delete(url, headers=fornecedor_headers)
        after = await client.get(url, headers=fornecedor_headers)
        readded = await client.post(
            "/api/clientes",
            json={"cnpj": CLIENTE_CNPJ, "razaoSocial": "Mercado Ltda"},
            headers=fornecedor_headers,
        )

        with check:
            assert updated.json()["data"]["estado"] == "SP"
        with check:
            assert removed.json()["data"] == {"message": "Cliente removido com sucesso"}
        with check:
            assert after.status_code == 404
        with check:
            assert readded.status_code == 201

    async def test_concurrent_association_stays_idempotent(
        self,
        client: AsyncClient,
        fornecedor_headers: Headers,
        mocker: MockerFixture,
    ) -> None:
        """A lookup that misses a customer inserted meanwhile falls back to it."""
        payload = {"cnpj": CLIENTE_CNPJ, "razaoSocial": "Mercado Ltda"}
        first = await client.post(
            "/api/clientes", json=payload, headers=fornecedor_headers
        )
        real_lookup = ClienteRepository.get_by_cnpj
        lookups: list[str] = []

        async def stale_lookup(self: ClienteRepository, cnpj: str) -> Cliente | None:
            lookups.append(cnpj)
            if len(lookups) == 1:
                return None
            return await real_lookup(self, cnpj)

        mocker.patch.object(ClienteRepository, "get_by_cnpj", stale_lookup)

        second = await client.post(
            "/api/clientes", json=payload, headers=fornecedor_headers
        )
        listing = await client.get("/api/clientes", headers=fornecedor_headers)

        assert second.status_code == 200, second.text
        assert second.json()["data"]["id"] == first.json()["data"]["id"]
        assert lookups == [CLIENTE_CNPJ, CLIENTE_CNPJ]
        assert listing.json()["meta"]["total"] == 1

    async def test_search(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        for cnpj, nome in [
            (CLIENTE_CNPJ, "Mercado Bom Preço"),
            ("99888777000166", "Padaria Pão Quente"),
        ]:
            await client.post(
                "/api/clientes",
                json={"cnpj": cnpj, "razaoSocial": nome},
                headers=fornecedor_headers,
            )

        response = await client.get(
            "/api/clientes?search=padaria", headers=fornecedor_headers
        )

        assert [c["razaoSocial"] for c in response.json()["data"]] == [
            "Padaria Pão Quente"
        ]

    async def test_totals_without_orders(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        await client.post(
            "/api/clientes",
            json={"cnpj": CLIENTE_CNPJ, "razaoSocial": "Mercado Ltda"},
            headers=fornecedor_headers,
        )

        response = await client.get(
            "/api/fornecedor/clientes", headers=fornecedor_headers
        )

        cliente = response.json()["data"][0]
        assert cliente["totalPedidos"] == 0
        assert cliente["totalGasto"] == 0


@pytest.mark.integration
class TestListasPreco:
    """Test price lists and their assignment to customers."""

    async def test_assign_and_remove(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        lista = await _create_lista(client, fornecedor_headers)
        created = await client.post(
            "/api/clientes",
            json={"cnpj": CLIENTE_CNPJ, "razaoSocial": "Mercado Ltda"},
            headers=fornecedor_headers,
        )
        url = f"/api/clientes/{created.json()['data']['id']}/lista-preco"

        assigned = await client.post(
            url, json={"listaPrecoId": lista["id"]}, headers=fornecedor_headers
        )
        removed = await client.delete(url, headers=fornecedor_headers)

        assert assigned.status_code == 200
        assert assigned.json()["data"]["listaPreco"] == {
            "id": lista["id"],
            "nome": "Atacado",
            "descontoTipo": "percentual",
            "descontoValor": 10.0,
        }
        assert removed.status_code == 200
        assert removed.json()["data"]["listaPreco"] is None

    async def test_unknown_list(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        created = await client.post(
            "/api/clientes",
            json={"cnpj": CLIENTE_CNPJ, "razaoSocial": "Mercado Ltda"},
            headers=fornecedor_headers,
        )

        response = await client.post(
            f"/api/clientes/{created.json()['data']['id']}/lista-preco",
            json={"listaPrecoId": 999},
            headers=fornecedor_headers,
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Lista de preço não encontrada"

    async def test_percentage_above_100(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        response = await client.post(
            "/api/fornecedor/precos",
            json={"nome": "Promoção", "descontoValor": 150},
            headers=fornecedor_headers,
        )

        assert response.status_code == 400

    async def test_list_and_delete(
        self, client: AsyncClient, fornecedor_headers: Headers
    ) -> None:
        lista = await _create_lista(client, fornecedor_headers)

        missing_id = await client.delete(
            "/api/fornecedor/precos", headers=fornecedor_headers
        )
        deleted = await client.delete(
            f"/api/fornecedor/precos?id={lista['id']}", headers=fornecedor_headers
        )
        listing = await client.get("/api/fornecedor/precos", headers=fornecedor_headers)

        assert missing_id.status_code == 400
        assert missing_id.json()["error"] == "ID é obrigatório"
        assert deleted.status_code == 200
        assert listing.json()["data"] == []
