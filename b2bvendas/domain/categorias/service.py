"""Category tree management for a supplier.

Categories form a forest per supplier through ``categoria_pai_id``. Tree
operations (building, paths, descendants and cycle detection) work on the
flat list of the supplier's categories, loaded once per call.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.core.exceptions import (
    BusinessRuleViolationError,
    ConflictError,
    NotFoundError,
)
from b2bvendas.core.text import slugify
from b2bvendas.domain.categorias.models import Categoria
from b2bvendas.domain.categorias.repository import CategoriaRepository

CATEGORIA_NAO_ENCONTRADA = "Categoria não encontrada"
CATEGORIA_PAI_NAO_ENCONTRADA = "Categoria pai não encontrada"
SLUG_DUPLICADO = "Já existe uma categoria com este slug"
REFERENCIA_CIRCULAR = "Esta operação criaria uma referência circular"


@dataclass(slots=True)
class CategoriaNode:
    """A category with its children and usage counts."""

    categoria: Categoria
    total_produtos: int = 0
    filhos: list["CategoriaNode"] = field(default_factory=list)

    @property
    def total_subcategorias(self) -> int:
        return len(self.filhos)


def build_tree(
    categorias: Sequence[Categoria], product_counts: Mapping[int, int] | None = None
) -> list[CategoriaNode]:
    """Arrange a flat, ordered list into root nodes with nested children.

    Categories whose parent is not in the list are treated as roots.
    """
    counts = product_counts or {}
    nodes = {
        categoria.id: CategoriaNode(categoria, counts.get(categoria.id, 0))
        for categoria in categorias
    }
    roots: list[CategoriaNode] = []
    for categoria in categorias:
        node = nodes[categoria.id]
        parent = nodes.get(categoria.categoria_pai_id or 0)
        if parent is None:
            roots.append(node)
        else:
            parent.filhos.append(node)
    return roots


def category_path(
    categoria_id: int, categorias: Sequence[Categoria]
) -> list[Categoria]:
    """Breadcrumb from the root down to ``categoria_id``."""
    by_id = {categoria.id: categoria for categoria in categorias}
    path: list[Categoria] = []
    visited: set[int] = set()
    current = by_id.get(categoria_id)
    while current is not None and current.id not in visited:
        visited.add(current.id)
        path.append(current)
        current = by_id.get(current.categoria_pai_id or 0)
    return list(reversed(path))


def descendant_ids(categoria_id: int, categorias: Sequence[Categoria]) -> list[int]:
    """Ids of every category below ``categoria_id``, breadth first."""
    children: dict[int, list[int]] = {}
    for categoria in categorias:
        if categoria.categoria_pai_id is not None:
            children.setdefault(categoria.categoria_pai_id, []).append(categoria.id)

    result: list[int] = []
    pending = list(children.get(categoria_id, []))
    while pending:
        current = pending.pop(0)
        if current in result or current == categoria_id:
            continue
        result.append(current)
        pending.extend(children.get(current, []))
    return result


def would_create_cycle(
    categoria_id: int, new_parent_id: int | None, categorias: Sequence[Categoria]
) -> bool:
    """Whether making ``new_parent_id`` the parent of ``categoria_id`` loops."""
    if new_parent_id is None:
        return False
    parents = {categoria.id: categoria.categoria_pai_id for categoria in categorias}
    visited: set[int] = set()
    current: int | None = new_parent_id
    while current is not None and current not in visited:
        if current == categoria_id:
            return True
        visited.add(current)
        current = parents.get(current)
    return False


class CategoriaService:
    def __init__(self, session: AsyncSession) -> None:
        self.categorias = CategoriaRepository(session)

    async def list_categorias(
        self, fornecedor_id: int, *, ativo: bool | None = None
    ) -> list[Categoria]:
        return await self.categorias.list_for_fornecedor(fornecedor_id, ativo=ativo)

    async def list_with_counts(self, fornecedor_id: int) -> list[CategoriaNode]:
        """Flat list where every node carries product and subcategory counts."""
        categorias = await self.categorias.list_for_fornecedor(fornecedor_id)
        counts = await self.categorias.product_counts(fornecedor_id)
        tree = build_tree(categorias, counts)
        nodes = {node.categoria.id: node for node in _walk(tree)}
        return [nodes[categoria.id] for categoria in categorias]

    async def get_tree(self, fornecedor_id: int) -> list[CategoriaNode]:
        categorias = await self.categorias.list_for_fornecedor(fornecedor_id)
        counts = await self.categorias.product_counts(fornecedor_id)
        return build_tree(categorias, counts)

    async def get_categoria(self, fornecedor_id: int, categoria_id: int) -> Categoria:
        categoria = await self.categorias.get_for_fornecedor(
            categoria_id, fornecedor_id
        )
        if categoria is None:
            raise NotFoundError(
                CATEGORIA_NAO_ENCONTRADA, context={"categoria_id": categoria_id}
            )
        return categoria

    async def get_path(self, fornecedor_id: int, categoria_id: int) -> list[Categoria]:
        await self.get_categoria(fornecedor_id, categoria_id)
        categorias = await self.categorias.list_for_fornecedor(fornecedor_id)
        return category_path(categoria_id, categorias)

    async def get_descendant_ids(
        self, fornecedor_id: int, categoria_id: int
    ) -> list[int]:
        categorias = await self.categorias.list_for_fornecedor(fornecedor_id)
        return descendant_ids(categoria_id, categorias)

    async def create_categoria(
        self, fornecedor_id: int, data: Mapping[str, Any]
    ) -> Categoria:
        values = dict(data)
        values["slug"] = values.get("slug") or slugify(values["nome"])
        if await self.categorias.slug_exists(values["slug"], fornecedor_id):
            raise ConflictError(SLUG_DUPLICADO, context={"slug": values["slug"]})

        if (parent_id := values.get("categoria_pai_id")) is not None:
            await self._ensure_parent(fornecedor_id, parent_id)

        categoria = await self.categorias.create(
            Categoria(fornecedor_id=fornecedor_id, **values)
        )
        logger.info(
            "Categoria {} created", categoria.id, fornecedor_id=fornecedor_id
        )
        return categoria

    async def update_categoria(
        self, fornecedor_id: int, categoria_id: int, data: Mapping[str, Any]
    ) -> Categoria:
        categoria = await self.get_categoria(fornecedor_id, categoria_id)
        values = dict(data)

        if values.get("nome") and not values.get("slug"):
            values["slug"] = slugify(values["nome"])
        if values.get("slug") and await self.categorias.slug_exists(
            values["slug"], fornecedor_id, exclude_id=categoria_id
        ):
            raise ConflictError(SLUG_DUPLICADO, context={"slug": values["slug"]})

        if "categoria_pai_id" in values:
            await self._check_new_parent(
                fornecedor_id, categoria_id, values["categoria_pai_id"]
            )

        return await self.categorias.update(categoria, values)

    async def move_categoria(
        self, fornecedor_id: int, categoria_id: int, new_parent_id: int | None
    ) -> Categoria:
        categoria = await self.get_categoria(fornecedor_id, categoria_id)
        await self._check_new_parent(fornecedor_id, categoria_id, new_parent_id)
        logger.info(
            "Moving categoria {} under {}", categoria_id, new_parent_id
        )
        return await self.categorias.update(
            categoria, {"categoria_pai_id": new_parent_id}
        )

    async def delete_categoria(
        self, fornecedor_id: int, categoria_id: int, *, force: bool = False
    ) -> None:
        """Delete a category.

        Without ``force`` a category that still has products or subcategories
        is kept. With ``force`` those are detached (they become uncategorized
        or root categories) and the category is removed.
        """
        categoria = await self.get_categoria(fornecedor_id, categoria_id)

        product_count = await self.categorias.count_products(categoria_id)
        if product_count and not force:
            raise BusinessRuleViolationError(
                f"Esta categoria possui {product_count} produto(s) associado(s). "
                "Remova os produtos ou use a opção de exclusão forçada.",
                context={"categoria_id": categoria_id, "produtos": product_count},
            )

        subcategory_count = await self.categorias.count_subcategories(categoria_id)
        if subcategory_count and not force:
            raise BusinessRuleViolationError(
                f"Esta categoria possui {subcategory_count} subcategoria(s). "
                "Remova as subcategorias ou use a opção de exclusão forçada.",
                context={
                    "categoria_id": categoria_id,
                    "subcategorias": subcategory_count,
                },
            )

        if product_count or subcategory_count:
            await self.categorias.detach(categoria_id)
        await self.categorias.delete(categoria)
        logger.info(
            "Categoria {} deleted",
            categoria_id,
            fornecedor_id=fornecedor_id,
            force=force,
        )

    async def _ensure_parent(self, fornecedor_id: int, parent_id: int) -> None:
        if await self.categorias.get_for_fornecedor(parent_id, fornecedor_id) is None:
            raise NotFoundError(
                CATEGORIA_PAI_NAO_ENCONTRADA, context={"categoria_pai_id": parent_id}
            )

    async def _check_new_parent(
        self, fornecedor_id: int, categoria_id: int, parent_id: int | None
    ) -> None:
        if parent_id is None:
            return
        await self._ensure_parent(fornecedor_id, parent_id)
        categorias = await self.categorias.list_for_fornecedor(fornecedor_id)
        if would_create_cycle(categoria_id, parent_id, categorias):
            raise BusinessRuleViolationError(
                REFERENCIA_CIRCULAR,
                context={"categoria_id": categoria_id, "categoria_pai_id": parent_id},
            )


def _walk(nodes: list[CategoriaNode]) -> list[CategoriaNode]:
    result: list[CategoriaNode] = []
    for node in nodes:
        result.append(node)
        result.extend(_walk(node.filhos))
    return result
