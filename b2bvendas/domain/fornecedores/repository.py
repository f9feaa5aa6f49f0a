"""Supplier persistence."""

from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.core.text import slugify
from b2bvendas.domain.fornecedores.models import Fornecedor
from b2bvendas.infrastructure.database import BaseRepository


class FornecedorRepository(BaseRepository[Fornecedor]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Fornecedor)

    async def get_by_cnpj(self, cnpj: str) -> Fornecedor | None:
        return await self.find_one_by(cnpj=cnpj)

    async def get_by_usuario_id(self, usuario_id: int) -> Fornecedor | None:
        return await self.find_one_by(usuario_id=usuario_id)

    async def unique_slug(self, name: str) -> str:
        """Slug of ``name``, suffixed with -1, -2... until no supplier uses it."""
        base_slug = slugify(name) or "fornecedor"
        slug, counter = base_slug, 1
        while await self.exists(Fornecedor.slug == slug):
            slug = f"{base_slug}-{counter}"
            counter += 1
        return slug
