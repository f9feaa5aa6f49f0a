"""Category schemas, including the nested tree representation."""

from datetime import datetime
from typing import Self

from pydantic import Field

from b2bvendas.api.schemas.common import ApiModel, Url
from b2bvendas.domain.categorias.service import CategoriaNode


class CategoriaCreate(ApiModel):
    nome: str = Field(min_length=2, max_length=100)
    descricao: str | None = Field(default=None, max_length=500)
    imagem: Url | None = None
    categoria_pai_id: int | None = None
    ativo: bool = True
    ordem: int = Field(default=0, ge=0)


class CategoriaUpdate(ApiModel):
    nome: str | None = Field(default=None, min_length=2, max_length=100)
    descricao: str | None = Field(default=None, max_length=500)
    imagem: Url | None = None
    categoria_pai_id: int | None = None
    ativo: bool | None = None
    ordem: int | None = Field(default=None, ge=0)


class MoverCategoriaRequest(ApiModel):
    categoria_pai_id: int | None = None


class CategoriaResponse(ApiModel):
    id: int
    fornecedor_id: int
    categoria_pai_id: int | None
    nome: str
    slug: str
    descricao: str | None
    imagem: str | None
    ordem: int
    ativo: bool
    created_at: datetime
    updated_at: datetime


class CategoriaComContagem(CategoriaResponse):
    total_produtos: int = 0
    total_subcategorias: int = 0

    @classmethod
    def from_node(cls, node: CategoriaNode) -> Self:
        return cls.model_validate(node.categoria).model_copy(
            update={
                "total_produtos": node.total_produtos,
                "total_subcategorias": node.total_subcategorias,
            }
        )


class CategoriaTree(CategoriaComContagem):
    filhos: list["CategoriaTree"] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: CategoriaNode) -> Self:
        tree = super().from_node(node)
        tree.filhos = [CategoriaTree.from_node(child) for child in node.filhos]
        return tree
