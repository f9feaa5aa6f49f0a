"""Product schemas for supplier management, stock and the public catalog."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from b2bvendas.api.schemas.common import ApiModel, Money, Ordenacao, Paginacao, Url
from b2bvendas.domain.produtos.models import StatusEstoque

SKU_PATTERN = r"^[A-Za-z0-9-]+$"
MAX_PRECO = Decimal("999999.99")


class ProdutoCreate(ApiModel):
    nome: str = Field(min_length=3, max_length=200)
    sku: str = Field(min_length=1, max_length=100, pattern=SKU_PATTERN)
    descricao: str | None = None
    preco_base: Decimal = Field(gt=0, le=MAX_PRECO, decimal_places=2)
    categoria_id: int | None = None
    imagens: list[Url] = Field(default_factory=list)
    unidade: str = Field(default="UN", max_length=10)
    quantidade_estoque: int = Field(default=0, ge=0)
    estoque_minimo: int = Field(default=0, ge=0)
    estoque_maximo: int | None = Field(default=None, ge=0)
    ativo: bool = True
    destaque: bool = False


class ProdutoUpdate(ApiModel):
    nome: str | None = Field(default=None, min_length=3, max_length=200)
    sku: str | None = Field(
        default=None, min_length=1, max_length=100, pattern=SKU_PATTERN
    )
    descricao: str | None = None
    preco_base: Decimal | None = Field(
        default=None, gt=0, le=MAX_PRECO, decimal_places=2
    )
    categoria_id: int | None = None
    imagens: list[Url] | None = None
    unidade: str | None = Field(default=None, max_length=10)
    quantidade_estoque: int | None = Field(default=None, ge=0)
    estoque_minimo: int | None = Field(default=None, ge=0)
    estoque_maximo: int | None = Field(default=None, ge=0)
    ativo: bool | None = None
    destaque: bool | None = None


class ProdutoFiltros(Ordenacao):
    busca: str | None = None
    categoria_id: int | None = None
    ativo: bool | None = None
    estoque_minimo: int | None = None


class CatalogoFiltros(Paginacao):
    limite: int = Field(default=20, ge=1, le=100)
    busca: str | None = None
    categoria_id: int | None = None
    fornecedor_id: int | None = None
    preco_min: Decimal | None = Field(default=None, ge=0)
    preco_max: Decimal | None = Field(default=None, ge=0)


class AtualizarEstoqueRequest(ApiModel):
    id: int
    estoque_atual: int


class CategoriaResumo(ApiModel):
    id: int
    nome: str
    slug: str


class FornecedorResumo(ApiModel):
    id: int
    razao_social: str
    nome_fantasia: str | None
    slug: str
    cidade: str | None
    estado: str | None
    verificado: bool


class ProdutoResponse(ApiModel):
    id: int
    fornecedor_id: int
    categoria_id: int | None
    nome: str
    slug: str
    sku: str
    descricao: str | None
    preco_base: Money
    imagens: list[str]
    unidade: str
    quantidade_estoque: int
    estoque_minimo: int
    estoque_maximo: int | None
    ativo: bool
    destaque: bool
    status_estoque: StatusEstoque
    categoria: CategoriaResumo | None = None
    created_at: datetime
    updated_at: datetime


class ProdutoPublico(ApiModel):
    id: int
    nome: str
    slug: str
    descricao: str | None
    preco_base: Money
    imagens: list[str]
    unidade: str
    destaque: bool
    categoria: CategoriaResumo | None
    fornecedor: FornecedorResumo


class EstoqueItem(ApiModel):
    """Row of the supplier stock screen."""

    id: int
    nome: str = Field(serialization_alias="nomeProduto")
    sku: str
    quantidade_estoque: int = Field(serialization_alias="estoqueAtual")
    estoque_minimo: int
    estoque_maximo: int | None
    status_estoque: StatusEstoque = Field(serialization_alias="status")
    updated_at: datetime = Field(serialization_alias="ultimaAtualizacao")
