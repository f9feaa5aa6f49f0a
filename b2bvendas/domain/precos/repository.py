"""Price list persistence."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.domain.precos.models import ListaPreco
from b2bvendas.infrastructure.database import BaseRepository


class ListaPrecoRepository(BaseRepository[ListaPreco]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ListaPreco)

    async def get_for_fornecedor(
        self, lista_id: int, fornecedor_id: int
    ) -> ListaPreco | None:
        return await self.find_one_by(id=lista_id, fornecedor_id=fornecedor_id)

    async def list_for_fornecedor(self, fornecedor_id: int) -> list[ListaPreco]:
        stmt = (
            select(ListaPreco)
            .where(ListaPreco.fornecedor_id == fornecedor_id)
            .order_by(ListaPreco.nome, ListaPreco.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
