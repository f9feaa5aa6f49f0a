"""User persistence."""

from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.domain.usuarios.models import Usuario
from b2bvendas.infrastructure.database import BaseRepository


class UsuarioRepository(BaseRepository[Usuario]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Usuario)

    async def get_by_email(self, email: str) -> Usuario | None:
        return await self.find_one_by(email=email.strip().lower())

    async def email_exists(self, email: str) -> bool:
        return await self.exists(Usuario.email == email.strip().lower())
