"""Price lists."""

from decimal import Decimal
from enum import StrEnum

from sqlalchemy import ForeignKey, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column

from b2bvendas.infrastructure.database import BaseModel, Identifier, str_enum_column


class TipoListaPreco(StrEnum):
    GERAL = "geral"
    CLIENTE = "cliente"
    CATEGORIA = "categoria"


class TipoDesconto(StrEnum):
    PERCENTUAL = "percentual"
    FIXO = "fixo"


class ListaPreco(BaseModel):
    """A discount rule a supplier can assign to its customers."""

    __tablename__ = "listas_preco"

    fornecedor_id: Mapped[int] = mapped_column(
        Identifier, ForeignKey("fornecedores.id", ondelete="CASCADE"), index=True
    )
    nome: Mapped[str] = mapped_column(String(100))
    descricao: Mapped[str | None] = mapped_column(Text)
    tipo: Mapped[TipoListaPreco] = mapped_column(
        str_enum_column(TipoListaPreco), default=TipoListaPreco.GERAL
    )
    desconto_tipo: Mapped[TipoDesconto] = mapped_column(
        str_enum_column(TipoDesconto), default=TipoDesconto.PERCENTUAL
    )
    desconto_valor: Mapped[Decimal] = mapped_column(default=Decimal(0))
    ativo: Mapped[bool] = mapped_column(default=True, server_default=true())
