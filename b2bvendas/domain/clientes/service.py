"""Customer management from a supplier's point of view.

Every method is scoped by ``fornecedor_id``: a supplier only ever sees the
customers it is actively associated with.
"""

from collections.abc import Mapping
from typing import Any

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.core.exceptions import NotFoundError
from b2bvendas.core.text import only_digits
from b2bvendas.domain.clientes.models import Cliente, ClienteFornecedor
from b2bvendas.domain.clientes.repository import (
    ClienteFornecedorRepository,
    ClienteRepository,
)
from b2bvendas.domain.pedidos.models import Pedido
from b2bvendas.domain.pedidos.repository import PedidoRepository, ResumoPedidos
from b2bvendas.domain.precos.models import ListaPreco
from b2bvendas.domain.precos.repository import ListaPrecoRepository
from b2bvendas.infrastructure.database import Page

CLIENTE_NAO_ASSOCIADO = "Cliente não encontrado ou não associado"
LISTA_NAO_ENCONTRADA = "Lista de preço não encontrada"

CLIENTE_FIELDS = frozenset(
    {
        "razao_social",
        "nome_fantasia",
        "inscricao_estadual",
        "email",
        "telefone",
        "whatsapp",
        "endereco",
        "cidade",
        "estado",
        "cep",
        "ativo",
    }
)


class ClienteService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.clientes = ClienteRepository(session)
        self.associacoes = ClienteFornecedorRepository(session)
        self.listas = ListaPrecoRepository(session)
        self.pedidos = PedidoRepository(session)

    async def list_clientes(
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
        return await self.associacoes.list_for_fornecedor(
            fornecedor_id,
            search=search,
            ativo=ativo,
            cidade=cidade,
            estado=estado,
            pagina=pagina,
            limite=limite,
        )

    async def get_cliente(
        self, fornecedor_id: int, cliente_id: int
    ) -> ClienteFornecedor:
        """Active association for ``cliente_id``, with customer and price list."""
        association = await self.associacoes.get_active(cliente_id, fornecedor_id)
        if association is None:
            raise NotFoundError(
                CLIENTE_NAO_ASSOCIADO,
                context={"cliente_id": cliente_id, "fornecedor_id": fornecedor_id},
            )
        return association

    async def create_or_associate(
        self, fornecedor_id: int, data: Mapping[str, Any]
    ) -> tuple[ClienteFornecedor, bool]:
        """Associate a customer, identified by CNPJ, with the supplier.

        Reuses an existing customer with the same CNPJ and an existing
        association for the pair, so calling it twice never duplicates rows.
        The writes run in a savepoint: when a concurrent call inserts the same
        customer or association first, the savepoint is rolled back and the
        lookup runs again against the committed rows.

        Returns:
            tuple[ClienteFornecedor, bool]: The association and whether it was
                created (or reactivated) by this call.
        """
        cnpj = only_digits(data["cnpj"])
        lista: ListaPreco | None = None
        if (lista_preco_id := data.get("lista_preco_id")) is not None:
            lista = await self._get_active_lista(fornecedor_id, lista_preco_id)

        try:
            async with self.session.begin_nested():
                return await self._associate(fornecedor_id, cnpj, data, lista)
        except IntegrityError:
            logger.warning(
                "Concurrent association of CNPJ {} with fornecedor {}, retrying",
                cnpj,
                fornecedor_id,
            )
        return await self._associate(fornecedor_id, cnpj, data, lista)

    async def _associate(
        self,
        fornecedor_id: int,
        cnpj: str,
        data: Mapping[str, Any],
        lista: ListaPreco | None,
    ) -> tuple[ClienteFornecedor, bool]:
        cliente = await self.clientes.get_by_cnpj(cnpj)
        if cliente is None:
            cliente = await self.clientes.create(
                Cliente(
                    cnpj=cnpj,
                    **{k: v for k, v in data.items() if k in CLIENTE_FIELDS},
                )
            )
            logger.info(
                "Cliente {} created by fornecedor {}",
                cliente.id,
                fornecedor_id,
                cliente_id=cliente.id,
                fornecedor_id=fornecedor_id,
            )
        else:
            association = await self.associacoes.get_pair(cliente.id, fornecedor_id)
            if association is not None and association.ativo:
                logger.info(
                    "Cliente {} already associated with fornecedor {}",
                    cliente.id,
                    fornecedor_id,
                )
                return association, False
            if association is not None:
                await self.associacoes.update(
                    association, {"ativo": True, "lista_preco": lista}
                )
                logger.info(
                    "Association of cliente {} with fornecedor {} reactivated",
                    cliente.id,
                    fornecedor_id,
                )
                return await self.get_cliente(fornecedor_id, cliente.id), True

        await self.associacoes.create(
            ClienteFornecedor(
                cliente=cliente,
                fornecedor_id=fornecedor_id,
                lista_preco=lista,
                ativo=True,
            )
        )
        return await self.get_cliente(fornecedor_id, cliente.id), True

    async def update_cliente(
        self, fornecedor_id: int, cliente_id: int, data: Mapping[str, Any]
    ) -> ClienteFornecedor:
        association = await self.get_cliente(fornecedor_id, cliente_id)
        changes = {k: v for k, v in data.items() if k in CLIENTE_FIELDS}
        if changes:
            await self.clientes.update(association.cliente, changes)
        return association

    async def remove_association(self, fornecedor_id: int, cliente_id: int) -> None:
        """Deactivate the association; the customer record is kept."""
        association = await self.get_cliente(fornecedor_id, cliente_id)
        await self.associacoes.update(association, {"ativo": False})
        logger.info(
            "Association of cliente {} with fornecedor {} removed",
            cliente_id,
            fornecedor_id,
        )

    async def assign_price_list(
        self, fornecedor_id: int, cliente_id: int, lista_preco_id: int
    ) -> ClienteFornecedor:
        association = await self.get_cliente(fornecedor_id, cliente_id)
        lista = await self._get_active_lista(fornecedor_id, lista_preco_id)
        await self.associacoes.update(association, {"lista_preco": lista})
        logger.info(
            "Lista de preço {} assigned to cliente {}",
            lista.id,
            cliente_id,
            fornecedor_id=fornecedor_id,
        )
        return association

    async def remove_price_list(
        self, fornecedor_id: int, cliente_id: int
    ) -> ClienteFornecedor:
        association = await self.get_cliente(fornecedor_id, cliente_id)
        await self.associacoes.update(association, {"lista_preco": None})
        logger.info(
            "Lista de preço removed from cliente {}",
            cliente_id,
            fornecedor_id=fornecedor_id,
        )
        return association

    async def get_cliente_orders(
        self, fornecedor_id: int, cliente_id: int, *, pagina: int = 1, limite: int = 10
    ) -> Page[Pedido]:
        await self.get_cliente(fornecedor_id, cliente_id)
        return await self.pedidos.list_for_cliente(
            cliente_id, fornecedor_id=fornecedor_id, pagina=pagina, limite=limite
        )

    async def get_cliente_stats(
        self, fornecedor_id: int, cliente_id: int
    ) -> ResumoPedidos:
        await self.get_cliente(fornecedor_id, cliente_id)
        return await self.pedidos.resumo_cliente(cliente_id, fornecedor_id)

    async def _get_active_lista(self, fornecedor_id: int, lista_id: int) -> ListaPreco:
        lista = await self.listas.get_for_fornecedor(lista_id, fornecedor_id)
        if lista is None or not lista.ativo:
            raise NotFoundError(
                LISTA_NAO_ENCONTRADA,
                context={"lista_preco_id": lista_id, "fornecedor_id": fornecedor_id},
            )
        return lista
