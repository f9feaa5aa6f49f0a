"""Supplier area: customers with totals, stock, orders and price lists."""

from decimal import Decimal
from typing import Annotated, Any

from fastapi import APIRouter, Query, status

from b2bvendas.api.dependencies import EmailServiceDep, FornecedorId
from b2bvendas.api.schemas.clientes import (
    ClienteAssociado,
    ClienteComTotais,
    ClienteFiltros,
)
from b2bvendas.api.schemas.pedidos import (
    PedidoFiltros,
    PedidoResponse,
    PedidoStatusUpdate,
)
from b2bvendas.api.schemas.precos import ListaPrecoCreate, ListaPrecoResponse
from b2bvendas.api.schemas.produtos import AtualizarEstoqueRequest, EstoqueItem
from b2bvendas.api.utils.responses import paginated, success
from b2bvendas.core.exceptions import ValidationError
from b2bvendas.domain.clientes.service import ClienteService
from b2bvendas.domain.pedidos.repository import PedidoRepository
from b2bvendas.domain.pedidos.service import PedidoService
from b2bvendas.domain.precos.service import ListaPrecoService
from b2bvendas.domain.produtos.service import ProdutoService
from b2bvendas.infrastructure.database import DatabaseSession

ID_OBRIGATORIO = "ID é obrigatório"

router = APIRouter(prefix="/fornecedor", tags=["fornecedor"])


@router.get("/clientes")
async def clientes_com_totais(
    filtros: Annotated[ClienteFiltros, Query()],
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
) -> dict[str, Any]:
    """Associated customers with order count and amount spent."""
    page = await ClienteService(db).list_clientes(
        fornecedor_id,
        search=filtros.search,
        ativo=filtros.ativo,
        cidade=filtros.cidade,
        estado=filtros.estado,
        pagina=filtros.pagina,
        limite=filtros.limite,
    )
    totais = await PedidoRepository(db).totais_por_cliente(
        fornecedor_id, [a.cliente_id for a in page.items]
    )
    items = []
    for association in page.items:
        total_pedidos, total_gasto = totais.get(
            association.cliente_id, (0, Decimal(0))
        )
        items.append(
            ClienteComTotais(
                **ClienteAssociado.from_association(association).model_dump(),
                total_pedidos=total_pedidos,
                total_gasto=total_gasto,
            )
        )
    return paginated(page, items)


@router.get("/estoque")
async def estoque(
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
    low_stock_only: Annotated[bool, Query(alias="lowStockOnly")] = False,
) -> dict[str, Any]:
    produtos = await ProdutoService(db).list_stock(
        fornecedor_id, low_stock_only=low_stock_only
    )
    return success([EstoqueItem.model_validate(p) for p in produtos])


@router.patch("/estoque")
async def atualizar_estoque(
    payload: AtualizarEstoqueRequest,
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
) -> dict[str, Any]:
    """Set the stock of one product, clamped to its minimum and maximum."""
    produto = await ProdutoService(db).update_stock(
        fornecedor_id, payload.id, payload.estoque_atual
    )
    return success(EstoqueItem.model_validate(produto))


@router.get("/pedidos")
async def list_pedidos(
    filtros: Annotated[PedidoFiltros, Query()],
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
) -> dict[str, Any]:
    page = await PedidoService(db).list_for_fornecedor(
        fornecedor_id,
        status=filtros.status_filtro,
        pagina=filtros.pagina,
        limite=filtros.limite,
    )
    return paginated(page, [PedidoResponse.model_validate(p) for p in page.items])


@router.get("/pedidos/{pedido_id}")
async def get_pedido(
    pedido_id: int, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    pedido = await PedidoService(db).get_for_fornecedor(fornecedor_id, pedido_id)
    return success(PedidoResponse.model_validate(pedido))


@router.patch("/pedidos/{pedido_id}")
async def update_pedido_status(
    pedido_id: int,
    payload: PedidoStatusUpdate,
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
    emails: EmailServiceDep,
) -> dict[str, Any]:
    """Move the order to a new status and notify the customer."""
    service = PedidoService(db)
    previous = (await service.get_for_fornecedor(fornecedor_id, pedido_id)).status
    pedido = await service.update_status(fornecedor_id, pedido_id, payload.status)
    data = PedidoResponse.model_validate(pedido)
    await emails.send_order_status(pedido, previous)
    return success(data)


@router.get("/precos")
async def list_precos(
    fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    listas = await ListaPrecoService(db).list_listas(fornecedor_id)
    return success([ListaPrecoResponse.model_validate(lista) for lista in listas])


@router.post("/precos", status_code=status.HTTP_201_CREATED)
async def create_preco(
    payload: ListaPrecoCreate, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    lista = await ListaPrecoService(db).create_lista(
        fornecedor_id, payload.model_dump()
    )
    return success(ListaPrecoResponse.model_validate(lista))


@router.delete("/precos")
async def delete_preco(
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
    lista_id: Annotated[int | None, Query(alias="id")] = None,
) -> dict[str, Any]:
    if lista_id is None:
        raise ValidationError(ID_OBRIGATORIO)
    await ListaPrecoService(db).delete_lista(fornecedor_id, lista_id)
    return success({"message": "Lista de preço removida com sucesso"})
