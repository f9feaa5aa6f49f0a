"""Customer schemas as seen by a supplier."""

from datetime import datetime
from decimal import Decimal
from typing import Self

from pydantic import Field

from b2bvendas.api.schemas.common import (
    ApiModel,
    Cep,
    Cnpj,
    Email,
    Estado,
    Money,
    Paginacao,
    Telefone,
)
from b2bvendas.api.schemas.precos import ListaPrecoResumo
from b2bvendas.domain.clientes.models import ClienteFornecedor
from b2bvendas.domain.pedidos.repository import ResumoPedidos


class ClienteCampos(ApiModel):
    nome_fantasia: str | None = Field(default=None, max_length=200)
    inscricao_estadual: str | None = Field(default=None, max_length=20)
    email: Email | None = None
    telefone: Telefone | None = None
    whatsapp: Telefone | None = None
    endereco: str | None = Field(default=None, max_length=255)
    cidade: str | None = Field(default=None, max_length=100)
    estado: Estado | None = None
    cep: Cep | None = None


class ClienteCreate(ClienteCampos):
    """Create a customer, or associate an existing one found by CNPJ."""

    cnpj: Cnpj
    razao_social: str = Field(min_length=1, max_length=200)
    lista_preco_id: int | None = None


class ClienteUpdate(ClienteCampos):
    razao_social: str | None = Field(default=None, min_length=1, max_length=200)
    ativo: bool | None = None


class AtribuirListaRequest(ApiModel):
    lista_preco_id: int


class ClienteFiltros(Paginacao):
    search: str | None = None
    ativo: bool | None = None
    cidade: str | None = None
    estado: str | None = Field(default=None, min_length=2, max_length=2)


class ClienteResponse(ApiModel):
    id: int
    razao_social: str
    nome_fantasia: str | None
    cnpj: str
    inscricao_estadual: str | None
    email: str | None
    telefone: str | None
    whatsapp: str | None
    endereco: str | None
    cidade: str | None
    estado: str | None
    cep: str | None
    ativo: bool
    created_at: datetime


class ClienteAssociado(ClienteResponse):
    """Customer plus the state of its association with the supplier."""

    associacao_id: int
    associado_em: datetime
    lista_preco: ListaPrecoResumo | None = None

    @classmethod
    def from_association(cls, association: ClienteFornecedor) -> Self:
        return cls.model_validate(
            {
                **ClienteResponse.model_validate(association.cliente).model_dump(),
                "associacao_id": association.id,
                "associado_em": association.created_at,
                "lista_preco": association.lista_preco,
            }
        )


class ClienteComTotais(ClienteAssociado):
    total_pedidos: int = 0
    total_gasto: Money = Decimal(0)


class ClienteStats(ApiModel):
    total_pedidos: int
    total_gasto: Money
    ultimo_pedido_em: datetime | None
    ticket_medio: Money

    @classmethod
    def from_resumo(cls, resumo: ResumoPedidos) -> Self:
        return cls(
            total_pedidos=resumo.total_pedidos,
            total_gasto=resumo.total_gasto,
            ultimo_pedido_em=resumo.ultimo_pedido_em,
            ticket_medio=resumo.ticket_medio,
        )
