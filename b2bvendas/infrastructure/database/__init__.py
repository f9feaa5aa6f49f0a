"""Database infrastructure: declarative base, async sessions and repositories.

- **base**: Declarative base and common model fields
- **session**: Async engine and session management
- **repository**: Generic repository with CRUD and pagination
- **dependencies**: FastAPI dependency injection helpers
"""

from b2bvendas.infrastructure.database.base import (
    Base,
    BaseModel,
    Identifier,
    str_enum_column,
)
from b2bvendas.infrastructure.database.dependencies import DatabaseSession, get_db
from b2bvendas.infrastructure.database.repository import BaseRepository, Page
from b2bvendas.infrastructure.database.session import (
    close_database,
    create_database_engine,
    create_session_factory,
    get_async_session,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "Identifier",
    "DatabaseSession",
    "Page",
    "close_database",
    "create_database_engine",
    "create_session_factory",
    "get_async_session",
    "get_db",
    "get_engine",
    "get_session_factory",
    "str_enum_column",
]
