"""Customer and customer-supplier association persistence."""

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from b2bvendas.core.text import only_digits
from b2bvendas.domain.clientes.models import Cliente, ClienteFornecedor
from b2bvendas.infrastructure.database import BaseRepository, Page


class ClienteRepository(BaseRepository[Cliente]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Cliente)

    async def get_by_cnpj(self, cnpj: str) -> Cliente | None:
        return await self.find_one_by(cnpj=cnpj)

    async def get_by_usuario_id(self, usuario_id: int) -> Cliente | None:
        return await self.find_one_by(usuario_id=usuario_id)


class ClienteFornecedorRepository(BaseRepository[ClienteFornecedor]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ClienteFornecedor)

    def _with_relations(self) -> Select[tuple[ClienteFornecedor]]:
        return select(ClienteFornecedor).options(
            selectinload(ClienteFornecedor.cliente),
            selectinload(ClienteFornecedor.lista_preco),
        )

    async def get_pair(
        self, cliente_id: int, fornecedor_id: int
    ) -> ClienteFornecedor | None:
        """Association between a customer and a supplier, active or not."""
        stmt = self._with_relations().where(
            ClienteFornecedor.cliente_id == cliente_id,
            ClienteFornecedor.fornecedor_id == fornecedor_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active(
        self, cliente_id: int, fornecedor_id: int
    ) -> ClienteFornecedor | None:
        association = await self.get_pair(cliente_id, fornecedor_id)
        if association is None or not association.ativo:
            return None
        return association

    async def list_for_fornecedor(
        self,
        fornecedor_id: int,
        *,
        search: str | None = None,
        ativo: bool | None = None,
        cidade: str | None = None,
        estado: str | None = None,
        pagina: int = 1,
        limite: int = 10,
    ) -> Page[ClienteFornecedor]:
        """Active associations of a supplier, ordered by razão social."""
        stmt = (
            self._with_relations()
            .join(ClienteFornecedor.cliente)
            .where(
                ClienteFornecedor.fornecedor_id == fornecedor_id,
                ClienteFornecedor.ativo.is_(True),
            )
        )
        if search:
            pattern = f"%{search.strip()}%"
            conditions = [
                Cliente.razao_social.ilike(pattern),
                Cliente.nome_fantasia.ilike(pattern),
                Cliente.email.ilike(pattern),
            ]
            if digits := only_digits(search):
                conditions.append(Cliente.cnpj.contains(digits))
            stmt = stmt.where(or_(*conditions))
        if ativo is not None:
            stmt = stmt.where(Cliente.ativo.is_(ativo))
        if cidade:
            stmt = stmt.where(Cliente.cidade.ilike(f"%{cidade.strip()}%"))
        if estado:
            stmt = stmt.where(Cliente.estado == estado.upper())

        stmt = stmt.order_by(Cliente.razao_social, ClienteFornecedor.id)
        return await self.paginate(stmt, pagina, limite)

    async def active_fornecedor_ids(self, cliente_id: int) -> list[int]:
        stmt = select(ClienteFornecedor.fornecedor_id).where(
            ClienteFornecedor.cliente_id == cliente_id,
            ClienteFornecedor.ativo.is_(True),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
