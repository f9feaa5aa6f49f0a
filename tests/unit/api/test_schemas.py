"""Unit tests for request schemas and their Portuguese validation messages."""

from decimal import Decimal
from typing import Any

import pytest
from pydantic import ValidationError as PydanticValidationError

from b2bvendas.api.schemas.auth import RegistroClienteRequest
from b2bvendas.api.schemas.clientes import ClienteCreate
from b2bvendas.api.schemas.email import CustomEmailRequest, TemplateEmailRequest
from b2bvendas.api.schemas.pedidos import PedidoCreate, PedidoFiltros
from b2bvendas.api.schemas.produtos import EstoqueItem, ProdutoCreate
from b2bvendas.domain.pedidos.models import StatusPedido


def _registro(**overrides: Any) -> dict[str, Any]:
    return {
        "email": "compras@mercado.com.br",
        "senha": "Abcdef12",
        "nome": "Maria Compras",
        "razaoSocial": "Mercado Bom Preço Ltda",
        "cnpj": "11.222.333/0001-81",
        **overrides,
    }


def _messages(exc: pytest.ExceptionInfo[PydanticValidationError]) -> list[str]:
    return [error["msg"] for error in exc.value.errors()]


@pytest.mark.unit
class TestRegistroSchema:
    """Test registration payload normalization and rules."""

    def test_normalizes_documents(self) -> None:
        payload = RegistroClienteRequest.model_validate(
            _registro(
                email="Compras@Mercado.com.br",
                telefone="(11) 98765-4321",
                cep="01310-100",
                estado="sp",
            )
        )

        assert payload.email == "compras@mercado.com.br"
        assert payload.cnpj == "11222333000181"
        assert payload.telefone == "11987654321"
        assert payload.cep == "01310100"
        assert payload.estado == "SP"
        assert payload.razao_social == "Mercado Bom Preço Ltda"

    @pytest.mark.parametrize(
        ("senha", "message"),
        [
            ("Abc1", "Senha deve ter no mínimo 8 caracteres"),
            ("abcdefg1", "Senha deve conter pelo menos uma letra maiúscula"),
            ("ABCDEFG1", "Senha deve conter pelo menos uma letra minúscula"),
            ("Abcdefgh", "Senha deve conter pelo menos um número"),
        ],
    )
    def test_password_rules(self, senha: str, message: str) -> None:
        with pytest.raises(PydanticValidationError) as exc:
            RegistroClienteRequest.model_validate(_registro(senha=senha))

        assert _messages(exc) == [message]

    @pytest.mark.parametrize("cnpj", ["123", "11.222.333/0001", "1122233300018a"])
    def test_invalid_cnpj(self, cnpj: str) -> None:
        with pytest.raises(PydanticValidationError) as exc:
            RegistroClienteRequest.model_validate(_registro(cnpj=cnpj))

        assert _messages(exc) == ["CNPJ deve conter 14 dígitos"]

    def test_invalid_email(self) -> None:
        with pytest.raises(PydanticValidationError) as exc:
            RegistroClienteRequest.model_validate(_registro(email="sem-arroba"))

        assert _messages(exc) == ["Email inválido"]

    def test_accepts_snake_case_names(self) -> None:
        data = _registro()
        data["razao_social"] = data.pop("razaoSocial")

        payload = RegistroClienteRequest.model_validate(data)

        assert payload.razao_social == "Mercado Bom Preço Ltda"


@pytest.mark.unit
class TestOtherSchemas:
    """Test product, customer, order and email schemas."""

    def test_produto_sku_pattern(self) -> None:
        with pytest.raises(PydanticValidationError):
            ProdutoCreate.model_validate(
                {"nome": "Arroz 5kg", "sku": "ARR 5", "precoBase": "25.90"}
            )

    def test_produto_price_must_be_positive(self) -> None:
        with pytest.raises(PydanticValidationError):
            ProdutoCreate.model_validate(
                {"nome": "Arroz 5kg", "sku": "ARR-5", "precoBase": 0}
            )

    def test_cliente_create(self) -> None:
        payload = ClienteCreate.model_validate(
            {"cnpj": "11222333000181", "razaoSocial": "Mercado", "listaPrecoId": 2}
        )

        assert payload.lista_preco_id == 2
        assert payload.model_dump(exclude_unset=True) == {
            "cnpj": "11222333000181",
            "razao_social": "Mercado",
            "lista_preco_id": 2,
        }

    def test_pedido_needs_items(self) -> None:
        with pytest.raises(PydanticValidationError):
            PedidoCreate.model_validate({"fornecedorId": 1, "itens": []})

    def test_pedido_defaults(self) -> None:
        payload = PedidoCreate.model_validate(
            {"fornecedorId": 1, "itens": [{"produtoId": 3, "quantidade": 2}]}
        )

        assert payload.frete == Decimal(0)
        assert payload.itens[0].produto_id == 3

    @pytest.mark.parametrize(
        ("status", "expected"),
        [(None, None), ("all", None), ("enviado", StatusPedido.ENVIADO)],
    )
    def test_pedido_status_filter(
        self, status: str | None, expected: StatusPedido | None
    ) -> None:
        assert PedidoFiltros(status=status).status_filtro == expected

    def test_custom_email_needs_body(self) -> None:
        with pytest.raises(PydanticValidationError) as exc:
            CustomEmailRequest.model_validate(
                {"to": "a@b.com", "subject": "Oi", "useQueue": False}
            )

        assert _messages(exc) == ["Informe o conteúdo html ou text do email"]

    def test_template_email_type(self) -> None:
        with pytest.raises(PydanticValidationError):
            TemplateEmailRequest.model_validate({"type": "newsletter", "to": "a@b.com"})

    def test_estoque_item_aliases(self) -> None:
        item = EstoqueItem(
            id=1,
            nome="Arroz",
            sku="ARR-5",
            quantidade_estoque=3,
            estoque_minimo=5,
            estoque_maximo=None,
            status_estoque="low_stock",
            updated_at="2026-01-10T12:00:00Z",
        )

        dumped = item.model_dump(mode="json", by_alias=True)

        assert dumped["nomeProduto"] == "Arroz"
        assert dumped["estoqueAtual"] == 3
        assert dumped["status"] == "low_stock"
        assert dumped["estoqueMinimo"] == 5
        assert "ultimaAtualizacao" in dumped
