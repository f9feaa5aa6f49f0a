"""Customer area: placing and following orders."""

from typing import Annotated, Any

from fastapi import APIRouter, Query, status

from b2bvendas.api.dependencies import ClienteId, EmailServiceDep
from b2bvendas.api.schemas.common import Paginacao
from b2bvendas.api.schemas.pedidos import PedidoCreate, PedidoResponse
from b2bvendas.api.utils.responses import paginated, success
from b2bvendas.domain.pedidos.service import ItemSolicitado, PedidoService
from b2bvendas.infrastructure.database import DatabaseSession

router = APIRouter(prefix="/cliente", tags=["cliente"])


@router.post("/pedidos", status_code=status.HTTP_201_CREATED)
async def create_pedido(
    payload: PedidoCreate,
    cliente_id: ClienteId,
    db: DatabaseSession,
    emails: EmailServiceDep,
) -> dict[str, Any]:
    pedido = await PedidoService(db).create_pedido(
        cliente_id,
        payload.fornecedor_id,
        [ItemSolicitado(item.produto_id, item.quantidade) for item in payload.itens],
        frete=payload.frete,
        observacoes=payload.observacoes,
    )
    data = PedidoResponse.model_validate(pedido)
    await emails.send_order_confirmation(pedido)
    return success(data)


@router.get("/pedidos")
async def list_pedidos(
    paginacao: Annotated[Paginacao, Query()],
    cliente_id: ClienteId,
    db: DatabaseSession,
) -> dict[str, Any]:
    page = await PedidoService(db).list_for_cliente(
        cliente_id, pagina=paginacao.pagina, limite=paginacao.limite
    )
    return paginated(page, [PedidoResponse.model_validate(p) for p in page.items])
