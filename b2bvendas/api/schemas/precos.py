"""Price list schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from b2bvendas.api.schemas.common import ApiModel, Money
from b2bvendas.domain.precos.models import TipoDesconto, TipoListaPreco


class ListaPrecoCreate(ApiModel):
    nome: str = Field(min_length=2, max_length=100)
    descricao: str | None = None
    tipo: TipoListaPreco = TipoListaPreco.GERAL
    desconto_tipo: TipoDesconto = TipoDesconto.PERCENTUAL
    desconto_valor: Decimal = Field(ge=0, decimal_places=2)
    ativo: bool = True


class ListaPrecoResumo(ApiModel):
    id: int
    nome: str
    desconto_tipo: TipoDesconto
    desconto_valor: Money


class ListaPrecoResponse(ListaPrecoResumo):
    fornecedor_id: int
    descricao: str | None
    tipo: TipoListaPreco
    ativo: bool
    created_at: datetime
    updated_at: datetime
