"""Customer routes for the authenticated supplier."""

from typing import Annotated, Any

from fastapi import APIRouter, Query, Response, status

from b2bvendas.api.dependencies import FornecedorId
from b2bvendas.api.schemas.clientes import (
    AtribuirListaRequest,
    ClienteAssociado,
    ClienteCreate,
    ClienteFiltros,
    ClienteStats,
    ClienteUpdate,
)
from b2bvendas.api.schemas.common import Paginacao
from b2bvendas.api.schemas.pedidos import PedidoResponse
from b2bvendas.api.utils.responses import paginated, success
from b2bvendas.domain.clientes.service import ClienteService
from b2bvendas.infrastructure.database import DatabaseSession

router = APIRouter(prefix="/clientes", tags=["clientes"])


@router.get("")
async def list_clientes(
    filtros: Annotated[ClienteFiltros, Query()],
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
) -> dict[str, Any]:
    page = await ClienteService(db).list_clientes(
        fornecedor_id,
        search=filtros.search,
        ativo=filtros.ativo,
        cidade=filtros.cidade,
        estado=filtros.estado,
        pagina=filtros.pagina,
        limite=filtros.limite,
    )
    return paginated(
        page, [ClienteAssociado.from_association(a) for a in page.items]
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_cliente(
    payload: ClienteCreate,
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
    response: Response,
) -> dict[str, Any]:
    """Create the customer or link an existing one with the same CNPJ.

    Answers 201 when an association was created and 200 when the customer was
    already associated.
    """
    association, created = await ClienteService(db).create_or_associate(
        fornecedor_id, payload.model_dump(exclude_unset=True)
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return success(ClienteAssociado.from_association(association))


@router.get("/{cliente_id}")
async def get_cliente(
    cliente_id: int, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    association = await ClienteService(db).get_cliente(fornecedor_id, cliente_id)
    return success(ClienteAssociado.from_association(association))


@router.put("/{cliente_id}")
async def update_cliente(
    cliente_id: int,
    payload: ClienteUpdate,
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
) -> dict[str, Any]:
    association = await ClienteService(db).update_cliente(
        fornecedor_id, cliente_id, payload.model_dump(exclude_unset=True)
    )
    return success(ClienteAssociado.from_association(association))


@router.delete("/{cliente_id}")
async def remove_cliente(
    cliente_id: int, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    await ClienteService(db).remove_association(fornecedor_id, cliente_id)
    return success({"message": "Cliente removido com sucesso"})


@router.post("/{cliente_id}/lista-preco")
async def assign_lista_preco(
    cliente_id: int,
    payload: AtribuirListaRequest,
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
) -> dict[str, Any]:
    association = await ClienteService(db).assign_price_list(
        fornecedor_id, cliente_id, payload.lista_preco_id
    )
    return success(ClienteAssociado.from_association(association))


@router.delete("/{cliente_id}/lista-preco")
async def remove_lista_preco(
    cliente_id: int, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    association = await ClienteService(db).remove_price_list(
        fornecedor_id, cliente_id
    )
    return success(ClienteAssociado.from_association(association))


@router.get("/{cliente_id}/pedidos")
async def cliente_pedidos(
    cliente_id: int,
    paginacao: Annotated[Paginacao, Query()],
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
) -> dict[str, Any]:
    page = await ClienteService(db).get_cliente_orders(
        fornecedor_id, cliente_id, pagina=paginacao.pagina, limite=paginacao.limite
    )
    return paginated(page, [PedidoResponse.model_validate(p) for p in page.items])


@router.get("/{cliente_id}/stats")
async def cliente_stats(
    cliente_id: int, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    resumo = await ClienteService(db).get_cliente_stats(fornecedor_id, cliente_id)
    return success(ClienteStats.from_resumo(resumo))
