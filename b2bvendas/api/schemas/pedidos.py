"""Order schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import Field

from b2bvendas.api.schemas.common import ApiModel, Money, Paginacao
from b2bvendas.domain.pedidos.models import StatusPedido


class ItemPedidoRequest(ApiModel):
    produto_id: int
    quantidade: int = Field(gt=0)


class PedidoCreate(ApiModel):
    fornecedor_id: int
    itens: list[ItemPedidoRequest] = Field(min_length=1)
    frete: Decimal = Field(default=Decimal(0), ge=0, decimal_places=2)
    observacoes: str | None = Field(default=None, max_length=1000)


class PedidoStatusUpdate(ApiModel):
    status: StatusPedido


class PedidoFiltros(Paginacao):
    status: StatusPedido | Literal["all"] | None = None

    @property
    def status_filtro(self) -> StatusPedido | None:
        return None if self.status == "all" else self.status


class ProdutoDoItem(ApiModel):
    id: int
    nome: str
    sku: str


class ClienteDoPedido(ApiModel):
    id: int
    razao_social: str
    nome_fantasia: str | None
    cnpj: str
    email: str | None


class ItemPedidoResponse(ApiModel):
    id: int
    produto_id: int
    quantidade: int
    preco_unitario: Money
    subtotal: Money
    produto: ProdutoDoItem


class PedidoResponse(ApiModel):
    id: int
    numero: str
    cliente_id: int
    fornecedor_id: int
    status: StatusPedido
    subtotal: Money
    desconto: Money
    frete: Money
    total: Money
    observacoes: str | None
    created_at: datetime
    updated_at: datetime
    cliente: ClienteDoPedido
    itens: list[ItemPedidoResponse]
