"""Product persistence, for supplier management and the public catalog."""

from decimal import Decimal
from typing import Literal

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from b2bvendas.domain.fornecedores.models import Fornecedor
from b2bvendas.domain.produtos.models import Produto
from b2bvendas.infrastructure.database import BaseRepository, Page

SORTABLE_COLUMNS = {
    "nome": Produto.nome,
    "sku": Produto.sku,
    "preco_base": Produto.preco_base,
    "quantidade_estoque": Produto.quantidade_estoque,
    "created_at": Produto.created_at,
}


class ProdutoRepository(BaseRepository[Produto]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Produto)

    def _with_relations(self) -> Select[tuple[Produto]]:
        return select(Produto).options(
            selectinload(Produto.categoria),
            selectinload(Produto.fornecedor),
        )

    async def get_for_fornecedor(
        self, produto_id: int, fornecedor_id: int
    ) -> Produto | None:
        """Product of the supplier with category and supplier loaded."""
        stmt = (
            self._with_relations()
            .where(Produto.id == produto_id, Produto.fornecedor_id == fornecedor_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(
        self, produto_ids: list[int], fornecedor_id: int
    ) -> list[Produto]:
        stmt = select(Produto).where(
            Produto.id.in_(produto_ids), Produto.fornecedor_id == fornecedor_id
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sku_exists(
        self, sku: str, fornecedor_id: int, exclude_id: int | None = None
    ) -> bool:
        conditions = [Produto.sku == sku, Produto.fornecedor_id == fornecedor_id]
        if exclude_id is not None:
            conditions.append(Produto.id != exclude_id)
        return await self.exists(*conditions)

    async def slug_exists(
        self, slug: str, fornecedor_id: int, exclude_id: int | None = None
    ) -> bool:
        conditions = [Produto.slug == slug, Produto.fornecedor_id == fornecedor_id]
        if exclude_id is not None:
            conditions.append(Produto.id != exclude_id)
        return await self.exists(*conditions)

    async def list_for_fornecedor(
        self,
        fornecedor_id: int,
        *,
        busca: str | None = None,
        categoria_id: int | None = None,
        ativo: bool | None = None,
        estoque_minimo: int | None = None,
        ordenar_por: str | None = None,
        ordem: Literal["asc", "desc"] = "desc",
        pagina: int = 1,
        limite: int = 10,
    ) -> Page[Produto]:
        """Products of the supplier; unknown ``ordenar_por`` falls back to date."""
        stmt = self._with_relations().where(Produto.fornecedor_id == fornecedor_id)
        if busca:
            pattern = f"%{busca.strip()}%"
            stmt = stmt.where(
                or_(
                    Produto.nome.ilike(pattern),
                    Produto.sku.ilike(pattern),
                    Produto.descricao.ilike(pattern),
                )
            )
        if categoria_id is not None:
            stmt = stmt.where(Produto.categoria_id == categoria_id)
        if ativo is not None:
            stmt = stmt.where(Produto.ativo.is_(ativo))
        if estoque_minimo is not None:
            stmt = stmt.where(Produto.quantidade_estoque <= estoque_minimo)

        column = SORTABLE_COLUMNS.get(ordenar_por or "", Produto.created_at)
        if ordem == "asc":
            stmt = stmt.order_by(column.asc(), Produto.id.asc())
        else:
            stmt = stmt.order_by(column.desc(), Produto.id.desc())
        return await self.paginate(stmt, pagina, limite)

    async def list_stock(self, fornecedor_id: int) -> list[Produto]:
        """Every product of the supplier ordered by name, for the stock screen."""
        stmt = (
            select(Produto)
            .where(Produto.fornecedor_id == fornecedor_id)
            .order_by(Produto.nome, Produto.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def low_stock(self, fornecedor_id: int) -> list[Produto]:
        """Active products at or below their minimum stock, lowest first."""
        stmt = (
            self._with_relations()
            .where(
                Produto.fornecedor_id == fornecedor_id,
                Produto.ativo.is_(True),
                Produto.quantidade_estoque <= Produto.estoque_minimo,
            )
            .order_by(Produto.quantidade_estoque, Produto.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def public_catalog(
        self,
        *,
        busca: str | None = None,
        categoria_id: int | None = None,
        fornecedor_id: int | None = None,
        preco_min: Decimal | None = None,
        preco_max: Decimal | None = None,
        pagina: int = 1,
        limite: int = 20,
    ) -> Page[Produto]:
        """Active products of active suppliers, featured first."""
        stmt = (
            self._with_relations()
            .join(Produto.fornecedor)
            .where(Produto.ativo.is_(True), Fornecedor.ativo.is_(True))
        )
        if busca:
            pattern = f"%{busca.strip()}%"
            stmt = stmt.where(
                or_(Produto.nome.ilike(pattern), Produto.descricao.ilike(pattern))
            )
        if categoria_id is not None:
            stmt = stmt.where(Produto.categoria_id == categoria_id)
        if fornecedor_id is not None:
            stmt = stmt.where(Produto.fornecedor_id == fornecedor_id)
        if preco_min is not None:
            stmt = stmt.where(Produto.preco_base >= preco_min)
        if preco_max is not None:
            stmt = stmt.where(Produto.preco_base <= preco_max)

        stmt = stmt.order_by(
            Produto.destaque.desc(), Produto.created_at.desc(), Produto.id.desc()
        )
        return await self.paginate(stmt, pagina, limite)
