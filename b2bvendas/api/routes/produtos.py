"""Product routes: supplier catalog management and the public catalog."""

from typing import Annotated, Any

from fastapi import APIRouter, Query, status

from b2bvendas.api.dependencies import FornecedorId
from b2bvendas.api.schemas.produtos import (
    CatalogoFiltros,
    ProdutoCreate,
    ProdutoFiltros,
    ProdutoPublico,
    ProdutoResponse,
    ProdutoUpdate,
)
from b2bvendas.api.utils.responses import paginated, success
from b2bvendas.domain.produtos.service import ProdutoService
from b2bvendas.infrastructure.database import DatabaseSession

router = APIRouter(prefix="/produtos", tags=["produtos"])
public_router = APIRouter(prefix="/public", tags=["catalogo"])


@router.get("")
async def list_produtos(
    filtros: Annotated[ProdutoFiltros, Query()],
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
) -> dict[str, Any]:
    page = await ProdutoService(db).list_produtos(
        fornecedor_id,
        busca=filtros.busca,
        categoria_id=filtros.categoria_id,
        ativo=filtros.ativo,
        estoque_minimo=filtros.estoque_minimo,
        ordenar_por=filtros.ordenar_por,
        ordem=filtros.ordem,
        pagina=filtros.pagina,
        limite=filtros.limite,
    )
    return paginated(page, [ProdutoResponse.model_validate(p) for p in page.items])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_produto(
    payload: ProdutoCreate, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    produto = await ProdutoService(db).create_produto(
        fornecedor_id, payload.model_dump()
    )
    return success(ProdutoResponse.model_validate(produto))


@router.get("/estoque-baixo")
async def estoque_baixo(
    fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    """Active products at or below their minimum stock, lowest first."""
    produtos = await ProdutoService(db).low_stock(fornecedor_id)
    return success([ProdutoResponse.model_validate(p) for p in produtos])


@router.get("/{produto_id}")
async def get_produto(
    produto_id: int, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    produto = await ProdutoService(db).get_produto(fornecedor_id, produto_id)
    return success(ProdutoResponse.model_validate(produto))


@router.put("/{produto_id}")
async def update_produto(
    produto_id: int,
    payload: ProdutoUpdate,
    fornecedor_id: FornecedorId,
    db: DatabaseSession,
) -> dict[str, Any]:
    produto = await ProdutoService(db).update_produto(
        fornecedor_id, produto_id, payload.model_dump(exclude_unset=True)
    )
    return success(ProdutoResponse.model_validate(produto))


@router.delete("/{produto_id}")
async def delete_produto(
    produto_id: int, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    await ProdutoService(db).delete_produto(fornecedor_id, produto_id)
    return success({"message": "Produto desativado com sucesso"})


@router.patch("/{produto_id}/toggle-ativo")
async def toggle_ativo(
    produto_id: int, fornecedor_id: FornecedorId, db: DatabaseSession
) -> dict[str, Any]:
    produto = await ProdutoService(db).toggle_ativo(fornecedor_id, produto_id)
    return success(ProdutoResponse.model_validate(produto))


@public_router.get("/produtos")
async def catalogo_publico(
    filtros: Annotated[CatalogoFiltros, Query()], db: DatabaseSession
) -> dict[str, Any]:
    """Active products of every active supplier; no session required."""
    page = await ProdutoService(db).public_catalog(
        busca=filtros.busca,
        categoria_id=filtros.categoria_id,
        fornecedor_id=filtros.fornecedor_id,
        preco_min=filtros.preco_min,
        preco_max=filtros.preco_max,
        pagina=filtros.pagina,
        limite=filtros.limite,
    )
    return paginated(page, [ProdutoPublico.model_validate(p) for p in page.items])
