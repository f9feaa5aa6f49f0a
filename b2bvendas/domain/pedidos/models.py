"""Orders and their line items."""

from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from b2bvendas.infrastructure.database import BaseModel, Identifier, str_enum_column

if TYPE_CHECKING:
    from b2bvendas.domain.clientes.models import Cliente
    from b2bvendas.domain.produtos.models import Produto


class StatusPedido(StrEnum):
    PENDENTE = "pendente"
    CONFIRMADO = "confirmado"
    ENVIADO = "enviado"
    ENTREGUE = "entregue"
    CANCELADO = "cancelado"


TRANSICOES_STATUS: dict[StatusPedido, frozenset[StatusPedido]] = {
    StatusPedido.PENDENTE: frozenset({StatusPedido.CONFIRMADO, StatusPedido.CANCELADO}),
    StatusPedido.CONFIRMADO: frozenset({StatusPedido.ENVIADO, StatusPedido.CANCELADO}),
    StatusPedido.ENVIADO: frozenset({StatusPedido.ENTREGUE}),
    StatusPedido.ENTREGUE: frozenset(),
    StatusPedido.CANCELADO: frozenset(),
}


class Pedido(BaseModel):
    __tablename__ = "pedidos"

    numero: Mapped[str] = mapped_column(String(40), unique=True, index=True)
    cliente_id: Mapped[int] = mapped_column(
        Identifier, ForeignKey("clientes.id", ondelete="RESTRICT"), index=True
    )
    fornecedor_id: Mapped[int] = mapped_column(
        Identifier, ForeignKey("fornecedores.id", ondelete="RESTRICT"), index=True
    )
    status: Mapped[StatusPedido] = mapped_column(
        str_enum_column(StatusPedido), default=StatusPedido.PENDENTE, index=True
    )
    subtotal: Mapped[Decimal] = mapped_column(default=Decimal(0))
    desconto: Mapped[Decimal] = mapped_column(default=Decimal(0))
    frete: Mapped[Decimal] = mapped_column(default=Decimal(0))
    total: Mapped[Decimal] = mapped_column(default=Decimal(0))
    observacoes: Mapped[str | None] = mapped_column(Text)

    cliente: Mapped["Cliente"] = relationship(lazy="raise")
    itens: Mapped[list["ItemPedido"]] = relationship(
        back_populates="pedido",
        cascade="all, delete-orphan",
        lazy="raise",
        order_by="ItemPedido.id",
    )

    def can_transition_to(self, status: StatusPedido) -> bool:
        return status in TRANSICOES_STATUS[self.status]


class ItemPedido(BaseModel):
    __tablename__ = "itens_pedido"

    pedido_id: Mapped[int] = mapped_column(
        Identifier, ForeignKey("pedidos.id", ondelete="CASCADE"), index=True
    )
    produto_id: Mapped[int] = mapped_column(
        Identifier, ForeignKey("produtos.id", ondelete="RESTRICT")
    )
    quantidade: Mapped[int]
    preco_unitario: Mapped[Decimal]
    subtotal: Mapped[Decimal]

    pedido: Mapped["Pedido"] = relationship(back_populates="itens", lazy="raise")
    produto: Mapped["Produto"] = relationship(lazy="raise")
