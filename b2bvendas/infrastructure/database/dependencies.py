"""FastAPI dependency injection for database session management.

One session per request: committed when the route returns, rolled back when
it raises. ``DatabaseSession`` is the annotated type route handlers use.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.infrastructure.database.session import get_async_session


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Provide a database session for FastAPI dependency injection.

    Example:
        @router.get("/produtos")
        async def list_produtos(db: DatabaseSession): ...
    """
    async with get_async_session() as session:
        yield session


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
