"""Product catalog management and stock control."""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Literal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.core.exceptions import ConflictError, NotFoundError, ValidationError
from b2bvendas.core.text import slugify
from b2bvendas.domain.categorias.repository import CategoriaRepository
from b2bvendas.domain.produtos.models import Produto, StatusEstoque
from b2bvendas.domain.produtos.repository import ProdutoRepository
from b2bvendas.infrastructure.database import Page

SKU_DUPLICADO = "SKU já cadastrado para este fornecedor"
ESTOQUE_MINIMO_MAIOR = "Estoque mínimo não pode ser maior que o estoque máximo"

STOCK_FIELDS = ("quantidade_estoque", "estoque_minimo", "estoque_maximo")


def clamp_stock(quantidade: int, minimo: int, maximo: int | None) -> int:
    """Keep ``quantidade`` within ``[minimo, maximo]`` when a maximum is set.

    Without a maximum only negative values are corrected, to 0.
    """
    if maximo is None:
        return max(quantidade, 0)
    return min(max(quantidade, minimo), maximo)


class ProdutoService:
    def __init__(self, session: AsyncSession) -> None:
        self.produtos = ProdutoRepository(session)
        self.categorias = CategoriaRepository(session)

    async def list_produtos(
        self,
        fornecedor_id: int,
        *,
        busca: str | None = None,
        categoria_id: int | None = None,
        ativo: bool | None = None,
        estoque_minimo: int | None = None,
        ordenar_por: str | None = None,
        ordem: Literal["asc", "desc"] = "desc",
        pagina: int = 1,
        limite: int = 10,
    ) -> Page[Produto]:
        return await self.produtos.list_for_fornecedor(
            fornecedor_id,
            busca=busca,
            categoria_id=categoria_id,
            ativo=ativo,
            estoque_minimo=estoque_minimo,
            ordenar_por=ordenar_por,
            ordem=ordem,
            pagina=pagina,
            limite=limite,
        )

    async def get_produto(self, fornecedor_id: int, produto_id: int) -> Produto:
        produto = await self.produtos.get_for_fornecedor(produto_id, fornecedor_id)
        if produto is None:
            raise NotFoundError.for_resource("Produto", produto_id=produto_id)
        return produto

    async def create_produto(
        self, fornecedor_id: int, data: Mapping[str, Any]
    ) -> Produto:
        values = dict(data)
        if await self.produtos.sku_exists(values["sku"], fornecedor_id):
            raise ConflictError(SKU_DUPLICADO, context={"sku": values["sku"]})
        if (categoria_id := values.get("categoria_id")) is not None:
            await self._ensure_categoria(fornecedor_id, categoria_id)

        values["slug"] = await self._unique_slug(fornecedor_id, values["nome"])
        self._apply_stock_rules(values, None)

        produto = await self.produtos.create(
            Produto(fornecedor_id=fornecedor_id, **values)
        )
        logger.info(
            "Produto {} created",
            produto.id,
            fornecedor_id=fornecedor_id,
            sku=produto.sku,
        )
        return await self.get_produto(fornecedor_id, produto.id)

    async def update_produto(
        self, fornecedor_id: int, produto_id: int, data: Mapping[str, Any]
    ) -> Produto:
        produto = await self.get_produto(fornecedor_id, produto_id)
        values = dict(data)

        if values.get("sku") and values["sku"] != produto.sku:
            if await self.produtos.sku_exists(
                values["sku"], fornecedor_id, exclude_id=produto_id
            ):
                raise ConflictError(SKU_DUPLICADO, context={"sku": values["sku"]})
        if values.get("categoria_id") is not None:
            await self._ensure_categoria(fornecedor_id, values["categoria_id"])
        if values.get("nome") and values["nome"] != produto.nome:
            values["slug"] = await self._unique_slug(
                fornecedor_id, values["nome"], exclude_id=produto_id
            )
        if any(key in values for key in STOCK_FIELDS):
            self._apply_stock_rules(values, produto)

        await self.produtos.update(produto, values)
        return await self.get_produto(fornecedor_id, produto_id)

    async def delete_produto(self, fornecedor_id: int, produto_id: int) -> None:
        """Soft delete: the product is deactivated so past orders keep it."""
        produto = await self.get_produto(fornecedor_id, produto_id)
        await self.produtos.update(produto, {"ativo": False})
        logger.info("Produto {} deactivated", produto_id, fornecedor_id=fornecedor_id)

    async def toggle_ativo(self, fornecedor_id: int, produto_id: int) -> Produto:
        produto = await self.get_produto(fornecedor_id, produto_id)
        return await self.produtos.update(produto, {"ativo": not produto.ativo})

    async def low_stock(self, fornecedor_id: int) -> list[Produto]:
        return await self.produtos.low_stock(fornecedor_id)

    async def list_stock(
        self, fornecedor_id: int, *, low_stock_only: bool = False
    ) -> list[Produto]:
        """Stock overview; ``low_stock_only`` keeps low and out of stock items."""
        produtos = await self.produtos.list_stock(fornecedor_id)
        if low_stock_only:
            return [p for p in produtos if p.status_estoque != StatusEstoque.IN_STOCK]
        return produtos

    async def update_stock(
        self, fornecedor_id: int, produto_id: int, quantidade: int
    ) -> Produto:
        produto = await self.get_produto(fornecedor_id, produto_id)
        clamped = clamp_stock(
            quantidade, produto.estoque_minimo, produto.estoque_maximo
        )
        if clamped != quantidade:
            logger.info(
                "Stock of produto {} clamped from {} to {}",
                produto_id,
                quantidade,
                clamped,
            )
        return await self.produtos.update(produto, {"quantidade_estoque": clamped})

    async def public_catalog(
        self,
        *,
        busca: str | None = None,
        categoria_id: int | None = None,
        fornecedor_id: int | None = None,
        preco_min: Decimal | None = None,
        preco_max: Decimal | None = None,
        pagina: int = 1,
        limite: int = 20,
    ) -> Page[Produto]:
        return await self.produtos.public_catalog(
            busca=busca,
            categoria_id=categoria_id,
            fornecedor_id=fornecedor_id,
            preco_min=preco_min,
            preco_max=preco_max,
            pagina=pagina,
            limite=limite,
        )

    async def _ensure_categoria(self, fornecedor_id: int, categoria_id: int) -> None:
        categoria = await self.categorias.get_for_fornecedor(
            categoria_id, fornecedor_id
        )
        if categoria is None:
            raise NotFoundError(
                "Categoria não encontrada", context={"categoria_id": categoria_id}
            )

    async def _unique_slug(
        self, fornecedor_id: int, nome: str, exclude_id: int | None = None
    ) -> str:
        base_slug = slugify(nome) or "produto"
        slug, counter = base_slug, 1
        while await self.produtos.slug_exists(slug, fornecedor_id, exclude_id):
            slug = f"{base_slug}-{counter}"
            counter += 1
        return slug

    @staticmethod
    def _apply_stock_rules(values: dict[str, Any], produto: Produto | None) -> None:
        """Validate the min/max pair and clamp the stock quantity in place."""
        minimo = values.get("estoque_minimo", produto.estoque_minimo if produto else 0)
        maximo = values.get(
            "estoque_maximo", produto.estoque_maximo if produto else None
        )
        if maximo is not None and minimo > maximo:
            raise ValidationError(
                ESTOQUE_MINIMO_MAIOR,
                context={"estoque_minimo": minimo, "estoque_maximo": maximo},
            )
        quantidade = values.get(
            "quantidade_estoque", produto.quantidade_estoque if produto else 0
        )
        values["quantidade_estoque"] = clamp_stock(quantidade, minimo, maximo)
