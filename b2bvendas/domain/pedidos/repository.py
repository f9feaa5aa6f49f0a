"""Order persistence and order statistics."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from b2bvendas.domain.pedidos.models import ItemPedido, Pedido, StatusPedido
from b2bvendas.infrastructure.database import BaseRepository, Page


@dataclass(frozen=True, slots=True)
class ResumoPedidos:
    """Aggregate of a customer's non-cancelled orders with one supplier."""

    total_pedidos: int
    total_gasto: Decimal
    ultimo_pedido_em: datetime | None

    @property
    def ticket_medio(self) -> Decimal:
        if not self.total_pedidos:
            return Decimal(0)
        return (self.total_gasto / self.total_pedidos).quantize(Decimal("0.01"))


class PedidoRepository(BaseRepository[Pedido]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Pedido)

    def _with_relations(self) -> Select[tuple[Pedido]]:
        return select(Pedido).options(
            selectinload(Pedido.itens).selectinload(ItemPedido.produto),
            selectinload(Pedido.cliente),
        )

    async def get_detail(self, pedido_id: int) -> Pedido | None:
        """Order with items, products and customer loaded."""
        result = await self.session.execute(
            self._with_relations().where(Pedido.id == pedido_id).execution_options(
                populate_existing=True
            )
        )
        return result.scalar_one_or_none()

    async def list_for_fornecedor(
        self,
        fornecedor_id: int,
        *,
        status: StatusPedido | None = None,
        pagina: int = 1,
        limite: int = 10,
    ) -> Page[Pedido]:
        stmt = self._with_relations().where(Pedido.fornecedor_id == fornecedor_id)
        if status is not None:
            stmt = stmt.where(Pedido.status == status)
        stmt = stmt.order_by(Pedido.created_at.desc(), Pedido.id.desc())
        return await self.paginate(stmt, pagina, limite)

    async def list_for_cliente(
        self,
        cliente_id: int,
        *,
        fornecedor_id: int | None = None,
        pagina: int = 1,
        limite: int = 10,
    ) -> Page[Pedido]:
        stmt = self._with_relations().where(Pedido.cliente_id == cliente_id)
        if fornecedor_id is not None:
            stmt = stmt.where(Pedido.fornecedor_id == fornecedor_id)
        stmt = stmt.order_by(Pedido.created_at.desc(), Pedido.id.desc())
        return await self.paginate(stmt, pagina, limite)

    async def resumo_cliente(
        self, cliente_id: int, fornecedor_id: int
    ) -> ResumoPedidos:
        stmt = select(
            func.count(Pedido.id),
            func.coalesce(func.sum(Pedido.total), 0),
            func.max(Pedido.created_at),
        ).where(
            Pedido.cliente_id == cliente_id,
            Pedido.fornecedor_id == fornecedor_id,
            Pedido.status != StatusPedido.CANCELADO,
        )
        count, total, last = (await self.session.execute(stmt)).one()
        return ResumoPedidos(
            total_pedidos=count,
            total_gasto=Decimal(str(total)),
            ultimo_pedido_em=last,
        )

    async def totais_por_cliente(
        self, fornecedor_id: int, cliente_ids: list[int]
    ) -> dict[int, tuple[int, Decimal]]:
        """Order count and amount per customer, ignoring cancelled orders."""
        if not cliente_ids:
            return {}
        stmt = (
            select(
                Pedido.cliente_id,
                func.count(Pedido.id),
                func.coalesce(func.sum(Pedido.total), 0),
            )
            .where(
                Pedido.fornecedor_id == fornecedor_id,
                Pedido.cliente_id.in_(cliente_ids),
                Pedido.status != StatusPedido.CANCELADO,
            )
            .group_by(Pedido.cliente_id)
        )
        result = await self.session.execute(stmt)
        return {
            cliente_id: (count, Decimal(str(total)))
            for cliente_id, count, total in result.all()
        }
