"""Base repository pattern implementation for database operations.

Repositories are thin pass-throughs over an ``AsyncSession``: they build
queries and never commit. Transactions belong to the caller (the request
scoped session from ``get_db`` or the email worker's own session).
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass

from loguru import logger
from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.infrastructure.database.base import BaseModel


@dataclass(frozen=True, slots=True)
class Page[T]:
    """One page of query results plus the numbers needed for pagination meta."""

    items: list[T]
    total: int
    pagina: int
    limite: int

    @property
    def total_paginas(self) -> int:
        return math.ceil(self.total / self.limite) if self.limite else 0


class BaseRepository[T: BaseModel]:
    """Base repository class providing common CRUD operations.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class ProdutoRepository(BaseRepository[Produto]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Produto)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    @property
    def _name(self) -> str:
        return self.model_class.__name__

    async def get_by_id(self, entity_id: int) -> T | None:
        """Retrieve a model instance by its ID."""
        logger.debug("Fetching {} by ID: {}", self._name, entity_id)
        return await self.session.get(self.model_class, entity_id)

    async def create(self, obj: T) -> T:
        """Add a new instance and flush it so ID and timestamps are populated."""
        self.session.add(obj)
        await self.session.flush()
        logger.info("Created {} instance with ID: {}", self._name, obj.id)
        return obj

    async def update(self, obj: T, data: Mapping[str, object]) -> T:
        """Apply ``data`` to ``obj`` and flush.

        Keys that are not attributes of the model are ignored with a warning.
        """
        for key, value in data.items():
            if hasattr(obj, key):
                setattr(obj, key, value)
            else:
                logger.warning(
                    "Attempted to update non-existent field '{}' on {}",
                    key,
                    self._name,
                )

        await self.session.flush()
        logger.info(
            "Updated {} instance ID {} - fields: {}", self._name, obj.id, list(data)
        )
        return obj

    async def delete(self, obj: T) -> None:
        """Delete an instance."""
        await self.session.delete(obj)
        await self.session.flush()
        logger.info("Deleted {} instance with ID: {}", self._name, obj.id)

    async def count(self, *conditions: ColumnElement[bool]) -> int:
        """Count instances matching all ``conditions``."""
        stmt = select(func.count()).select_from(self.model_class).where(*conditions)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def exists(self, *conditions: ColumnElement[bool]) -> bool:
        """Whether at least one instance matches all ``conditions``."""
        stmt = select(self.model_class.id).where(*conditions).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def filter_by(self, **kwargs: object) -> list[T]:
        """Return every instance whose fields equal the given values."""
        stmt = (
            select(self.model_class)
            .filter_by(**kwargs)
            .order_by(self.model_class.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_one_by(self, **kwargs: object) -> T | None:
        """Find the first instance whose fields equal the given values."""
        stmt = (
            select(self.model_class)
            .filter_by(**kwargs)
            .order_by(self.model_class.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def paginate(
        self, stmt: Select[tuple[T]], pagina: int, limite: int
    ) -> Page[T]:
        """Run ``stmt`` for one page and count the full result set."""
        count_stmt = select(func.count()).select_from(
            stmt.order_by(None).subquery()
        )
        total = (await self.session.execute(count_stmt)).scalar() or 0

        result = await self.session.execute(
            stmt.offset((pagina - 1) * limite).limit(limite)
        )
        items = list(result.scalars().unique().all())
        logger.debug(
            "Paginated {} - page {} ({} of {})", self._name, pagina, len(items), total
        )
        return Page(items=items, total=total, pagina=pagina, limite=limite)
