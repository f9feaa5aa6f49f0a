"""Customer profiles and their links to suppliers."""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, UniqueConstraint, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from b2bvendas.infrastructure.database import BaseModel, Identifier

if TYPE_CHECKING:
    from b2bvendas.domain.fornecedores.models import Fornecedor
    from b2bvendas.domain.precos.models import ListaPreco
    from b2bvendas.domain.usuarios.models import Usuario


class Cliente(BaseModel):
    """A customer company, identified by its CNPJ.

    ``usuario_id`` stays empty while the customer only exists because a
    supplier registered it; the customer claims the record when signing up
    with the same CNPJ.
    """

    __tablename__ = "clientes"

    usuario_id: Mapped[int | None] = mapped_column(
        Identifier, ForeignKey("usuarios.id", ondelete="SET NULL"), unique=True
    )
    razao_social: Mapped[str] = mapped_column(String(200))
    nome_fantasia: Mapped[str | None] = mapped_column(String(200))
    cnpj: Mapped[str] = mapped_column(String(14), unique=True, index=True)
    inscricao_estadual: Mapped[str | None] = mapped_column(String(20))
    email: Mapped[str | None] = mapped_column(String(255))
    telefone: Mapped[str | None] = mapped_column(String(11))
    whatsapp: Mapped[str | None] = mapped_column(String(11))
    endereco: Mapped[str | None] = mapped_column(String(255))
    cidade: Mapped[str | None] = mapped_column(String(100))
    estado: Mapped[str | None] = mapped_column(String(2))
    cep: Mapped[str | None] = mapped_column(String(8))
    ativo: Mapped[bool] = mapped_column(default=True, server_default=true())

    usuario: Mapped["Usuario | None"] = relationship(
        back_populates="cliente", lazy="raise"
    )


class ClienteFornecedor(BaseModel):
    """Association of a customer with a supplier, optionally with a price list."""

    __tablename__ = "clientes_fornecedores"
    __table_args__ = (
        UniqueConstraint(
            "cliente_id", "fornecedor_id", name="uq_clientes_fornecedores_par"
        ),
    )

    cliente_id: Mapped[int] = mapped_column(
        Identifier, ForeignKey("clientes.id", ondelete="CASCADE"), index=True
    )
    fornecedor_id: Mapped[int] = mapped_column(
        Identifier, ForeignKey("fornecedores.id", ondelete="CASCADE"), index=True
    )
    lista_preco_id: Mapped[int | None] = mapped_column(
        Identifier, ForeignKey("listas_preco.id", ondelete="SET NULL")
    )
    ativo: Mapped[bool] = mapped_column(default=True, server_default=true())

    cliente: Mapped["Cliente"] = relationship(lazy="raise")
    fornecedor: Mapped["Fornecedor"] = relationship(lazy="raise")
    lista_preco: Mapped["ListaPreco | None"] = relationship(lazy="raise")
