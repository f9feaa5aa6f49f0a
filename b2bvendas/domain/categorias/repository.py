"""Category persistence."""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.domain.categorias.models import Categoria
from b2bvendas.domain.produtos.models import Produto
from b2bvendas.infrastructure.database import BaseRepository


class CategoriaRepository(BaseRepository[Categoria]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Categoria)

    async def get_for_fornecedor(
        self, categoria_id: int, fornecedor_id: int
    ) -> Categoria | None:
        return await self.find_one_by(id=categoria_id, fornecedor_id=fornecedor_id)

    async def list_for_fornecedor(
        self, fornecedor_id: int, *, ativo: bool | None = None
    ) -> list[Categoria]:
        """Every category of a supplier, ordered by ``ordem`` then name."""
        stmt = select(Categoria).where(Categoria.fornecedor_id == fornecedor_id)
        if ativo is not None:
            stmt = stmt.where(Categoria.ativo.is_(ativo))
        stmt = stmt.order_by(Categoria.ordem, Categoria.nome, Categoria.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def slug_exists(
        self, slug: str, fornecedor_id: int, exclude_id: int | None = None
    ) -> bool:
        conditions = [Categoria.slug == slug, Categoria.fornecedor_id == fornecedor_id]
        if exclude_id is not None:
            conditions.append(Categoria.id != exclude_id)
        return await self.exists(*conditions)

    async def count_products(self, categoria_id: int) -> int:
        stmt = select(func.count(Produto.id)).where(
            Produto.categoria_id == categoria_id
        )
        return (await self.session.execute(stmt)).scalar() or 0

    async def count_subcategories(self, categoria_id: int) -> int:
        return await self.count(Categoria.categoria_pai_id == categoria_id)

    async def product_counts(self, fornecedor_id: int) -> dict[int, int]:
        """Number of products per category id of a supplier."""
        stmt = (
            select(Produto.categoria_id, func.count(Produto.id))
            .where(
                Produto.fornecedor_id == fornecedor_id,
                Produto.categoria_id.is_not(None),
            )
            .group_by(Produto.categoria_id)
        )
        result = await self.session.execute(stmt)
        return {categoria_id: count for categoria_id, count in result.all()}

    async def detach(self, categoria_id: int) -> None:
        """Unlink products and subcategories before a forced delete."""
        await self.session.execute(
            update(Produto)
            .where(Produto.categoria_id == categoria_id)
            .values(categoria_id=None)
        )
        await self.session.execute(
            update(Categoria)
            .where(Categoria.categoria_pai_id == categoria_id)
            .values(categoria_pai_id=None)
        )
