"""Supplier profiles."""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text, false, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from b2bvendas.infrastructure.database import BaseModel, Identifier

if TYPE_CHECKING:
    from b2bvendas.domain.usuarios.models import Usuario


class Fornecedor(BaseModel):
    """A supplier company; owns catalog, price lists and customer links."""

    __tablename__ = "fornecedores"

    usuario_id: Mapped[int] = mapped_column(
        Identifier, ForeignKey("usuarios.id", ondelete="CASCADE"), unique=True
    )
    razao_social: Mapped[str] = mapped_column(String(200))
    nome_fantasia: Mapped[str | None] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(220), unique=True, index=True)
    cnpj: Mapped[str] = mapped_column(String(14), unique=True, index=True)
    descricao: Mapped[str | None] = mapped_column(Text)
    telefone: Mapped[str | None] = mapped_column(String(11))
    endereco: Mapped[str | None] = mapped_column(String(255))
    cidade: Mapped[str | None] = mapped_column(String(100))
    estado: Mapped[str | None] = mapped_column(String(2))
    cep: Mapped[str | None] = mapped_column(String(8))
    verificado: Mapped[bool] = mapped_column(default=False, server_default=false())
    ativo: Mapped[bool] = mapped_column(default=True, server_default=true())

    usuario: Mapped["Usuario"] = relationship(back_populates="fornecedor", lazy="raise")

    @property
    def nome_exibicao(self) -> str:
        return self.nome_fantasia or self.razao_social
