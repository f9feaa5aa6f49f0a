"""Category routes for the authenticated supplier."""

from typing import Annotated, Any

from fastapi import APIRouter, Query, status

from b2bvendas.api.dependencies import FornecedorId
from b2bvendas.api.schemas.categorias import (
    CategoriaComContagem,
    CategoriaCreate,
    CategoriaResponse,
    CategoriaTree,
    CategoriaUpdate,
    MoverCategoriaRequest,
)
from b2bvendas.api.utils.responses import success
from b2bvendas.domain.categorias.service import CategoriaService
from b2bvendas.infrastructure.database import DatabaseSession

router = APIRouter(prefix="/categorias", tags=["categorias"])


@router.get("")
async def list_categorias(
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
    flat: Annotated[bool, Query()] = False,
    with_count: Annotated[bool, Query(alias="withCount")] = False,
) -> dict[str, Any]:
    """Category tree, or the flat list with ``?flat=true``."""
    service = CategoriaService(db)
    if not flat:
        tree = await service.get_tree(fornecedor_id)
        return success([CategoriaTree.from_node(node) for node in tree])
    if with_count:
        nodes = await service.list_with_counts(fornecedor_id)
        return success([CategoriaComContagem.from_node(node) for node in nodes])
    categorias = await service.list_categorias(fornecedor_id)
    return success([CategoriaResponse.model_validate(c) for c in categorias])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_categoria(
    payload: CategoriaCreate, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    categoria = await CategoriaService(db).create_categoria(
        fornecedor_id, payload.model_dump()
    )
    return success(CategoriaResponse.model_validate(categoria))


@router.get("/{categoria_id}")
async def get_categoria(
    categoria_id: int, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    categoria = await CategoriaService(db).get_categoria(fornecedor_id, categoria_id)
    return success(CategoriaResponse.model_validate(categoria))


@router.put("/{categoria_id}")
async def update_categoria(
    categoria_id: int,
    payload: CategoriaUpdate,
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
) -> dict[str, Any]:
    categoria = await CategoriaService(db).update_categoria(
        fornecedor_id, categoria_id, payload.model_dump(exclude_unset=True)
    )
    return success(CategoriaResponse.model_validate(categoria))


@router.delete("/{categoria_id}")
async def delete_categoria(
    categoria_id: int,
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
    force: Annotated[bool, Query()] = False,
) -> dict[str, Any]:
    await CategoriaService(db).delete_categoria(
        fornecedor_id, categoria_id, force=force
    )
    return success({"message": "Categoria excluída com sucesso"})


@router.patch("/{categoria_id}/mover")
async def mover_categoria(
    categoria_id: int,
    payload: MoverCategoriaRequest,
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
) -> dict[str, Any]:
    categoria = await CategoriaService(db).move_categoria(
        fornecedor_id, categoria_id, payload.categoria_pai_id
    )
    return success(CategoriaResponse.model_validate(categoria))


@router.get("/{categoria_id}/caminho")
async def caminho_categoria(
    categoria_id: int, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    """Breadcrumb from the root category down to ``categoria_id``."""
    caminho = await CategoriaService(db).get_path(fornecedor_id, categoria_id)
    return success([CategoriaResponse.model_validate(c) for c in caminho])
