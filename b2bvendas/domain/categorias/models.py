"""Product categories, arranged as a per-supplier tree."""

from sqlalchemy import ForeignKey, String, UniqueConstraint, true
from sqlalchemy.orm import Mapped, mapped_column

from b2bvendas.infrastructure.database import BaseModel, Identifier


class Categoria(BaseModel):
    __tablename__ = "categorias"
    __table_args__ = (
        UniqueConstraint("fornecedor_id", "slug", name="uq_categorias_fornecedor_slug"),
    )

    fornecedor_id: Mapped[int] = mapped_column(
        Identifier, ForeignKey("fornecedores.id", ondelete="CASCADE"), index=True
    )
    categoria_pai_id: Mapped[int | None] = mapped_column(
        Identifier, ForeignKey("categorias.id", ondelete="SET NULL"), index=True
    )
    nome: Mapped[str] = mapped_column(String(100))
    slug: Mapped[str] = mapped_column(String(120))
    descricao: Mapped[str | None] = mapped_column(String(500))
    imagem: Mapped[str | None] = mapped_column(String(500))
    ordem: Mapped[int] = mapped_column(default=0, server_default="0")
    ativo: Mapped[bool] = mapped_column(default=True, server_default=true())
