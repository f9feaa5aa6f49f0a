"""Catalog products and their stock levels."""

from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import JSON, ForeignKey, String, Text, UniqueConstraint, false, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from b2bvendas.infrastructure.database import BaseModel, Identifier

if TYPE_CHECKING:
    from b2bvendas.domain.categorias.models import Categoria
    from b2bvendas.domain.fornecedores.models import Fornecedor


class StatusEstoque(StrEnum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class Produto(BaseModel):
    __tablename__ = "produtos"
    __table_args__ = (
        UniqueConstraint("fornecedor_id", "sku", name="uq_produtos_fornecedor_sku"),
        UniqueConstraint("fornecedor_id", "slug", name="uq_produtos_fornecedor_slug"),
    )

    fornecedor_id: Mapped[int] = mapped_column(
        Identifier, ForeignKey("fornecedores.id", ondelete="CASCADE"), index=True
    )
    categoria_id: Mapped[int | None] = mapped_column(
        Identifier, ForeignKey("categorias.id", ondelete="SET NULL"), index=True
    )
    nome: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(280))
    sku: Mapped[str] = mapped_column(String(100))
    descricao: Mapped[str | None] = mapped_column(Text)
    preco_base: Mapped[Decimal]
    imagens: Mapped[list[str]] = mapped_column(JSON, default=list)
    unidade: Mapped[str] = mapped_column(String(10), default="UN")
    quantidade_estoque: Mapped[int] = mapped_column(default=0, server_default="0")
    estoque_minimo: Mapped[int] = mapped_column(default=0, server_default="0")
    estoque_maximo: Mapped[int | None]
    ativo: Mapped[bool] = mapped_column(default=True, server_default=true())
    destaque: Mapped[bool] = mapped_column(default=False, server_default=false())

    fornecedor: Mapped["Fornecedor"] = relationship(lazy="raise")
    categoria: Mapped["Categoria | None"] = relationship(lazy="raise")

    @property
    def status_estoque(self) -> StatusEstoque:
        """Stock status: zero is out of stock, below the minimum is low."""
        if self.quantidade_estoque <= 0:
            return StatusEstoque.OUT_OF_STOCK
        if self.quantidade_estoque < self.estoque_minimo:
            return StatusEstoque.LOW_STOCK
        return StatusEstoque.IN_STOCK
