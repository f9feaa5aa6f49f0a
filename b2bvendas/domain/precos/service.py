"""Price list management."""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.core.exceptions import NotFoundError, ValidationError
from b2bvendas.domain.precos.models import ListaPreco, TipoDesconto
from b2bvendas.domain.precos.repository import ListaPrecoRepository

LISTA_NAO_ENCONTRADA = "Lista de preço não encontrada"
MAX_PERCENTUAL = Decimal(100)


class ListaPrecoService:
    def __init__(self, session: AsyncSession) -> None:
        self.listas = ListaPrecoRepository(session)

    async def list_listas(self, fornecedor_id: int) -> list[ListaPreco]:
        return await self.listas.list_for_fornecedor(fornecedor_id)

    async def get_lista(self, fornecedor_id: int, lista_id: int) -> ListaPreco:
        lista = await self.listas.get_for_fornecedor(lista_id, fornecedor_id)
        if lista is None:
            raise NotFoundError(
                LISTA_NAO_ENCONTRADA, context={"lista_preco_id": lista_id}
            )
        return lista

    async def create_lista(
        self, fornecedor_id: int, data: Mapping[str, Any]
    ) -> ListaPreco:
        self._check_desconto(data["desconto_tipo"], data["desconto_valor"])
        lista = await self.listas.create(
            ListaPreco(fornecedor_id=fornecedor_id, **data)
        )
        logger.info(
            "Lista de preço {} created", lista.id, fornecedor_id=fornecedor_id
        )
        return lista

    async def update_lista(
        self, fornecedor_id: int, lista_id: int, data: Mapping[str, Any]
    ) -> ListaPreco:
        lista = await self.get_lista(fornecedor_id, lista_id)
        self._check_desconto(
            data.get("desconto_tipo", lista.desconto_tipo),
            data.get("desconto_valor", lista.desconto_valor),
        )
        return await self.listas.update(lista, data)

    async def delete_lista(self, fornecedor_id: int, lista_id: int) -> None:
        """Delete a price list; associations that used it are left without one."""
        lista = await self.get_lista(fornecedor_id, lista_id)
        await self.listas.delete(lista)

    @staticmethod
    def _check_desconto(tipo: TipoDesconto, valor: Decimal) -> None:
        if tipo == TipoDesconto.PERCENTUAL and valor > MAX_PERCENTUAL:
            raise ValidationError("Desconto percentual não pode ser maior que 100%")
