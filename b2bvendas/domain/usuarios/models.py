"""User accounts."""

from typing import TYPE_CHECKING

from sqlalchemy import String, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from b2bvendas.core.security import UserRole
from b2bvendas.infrastructure.database import BaseModel, str_enum_column

if TYPE_CHECKING:
    from b2bvendas.domain.clientes.models import Cliente
    from b2bvendas.domain.fornecedores.models import Fornecedor


class Usuario(BaseModel):
    """Login identity; ``tipo`` decides which profile (if any) it owns."""

    __tablename__ = "usuarios"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    senha_hash: Mapped[str] = mapped_column(String(255), default="")
    nome: Mapped[str] = mapped_column(String(200))
    tipo: Mapped[UserRole] = mapped_column(str_enum_column(UserRole))
    telefone: Mapped[str | None] = mapped_column(String(11))
    ativo: Mapped[bool] = mapped_column(default=True, server_default=true())

    fornecedor: Mapped["Fornecedor | None"] = relationship(
        back_populates="usuario", lazy="raise"
    )
    cliente: Mapped["Cliente | None"] = relationship(
        back_populates="usuario", lazy="raise"
    )
