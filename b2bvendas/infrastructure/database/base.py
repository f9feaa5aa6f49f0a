"""SQLAlchemy declarative base and common model fields.

Every entity inherits from ``BaseModel`` and gets:

- **id**: auto-incrementing BigInteger primary key (plain INTEGER on SQLite,
  which only auto-increments ``INTEGER PRIMARY KEY`` columns)
- **created_at / updated_at**: timezone-aware timestamps maintained by the
  database and loaded back eagerly after every INSERT/UPDATE, so they can be
  serialized without an extra round trip
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import BigInteger, DateTime, Integer, MetaData, Numeric, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from b2bvendas.infrastructure.constants import (
    MONEY_PRECISION,
    MONEY_SCALE,
    NAMING_CONVENTION,
)

Identifier = BigInteger().with_variant(Integer(), "sqlite")
Money = Numeric(MONEY_PRECISION, MONEY_SCALE, asdecimal=True)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base with naming conventions."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
    type_annotation_map = {Decimal: Money}


class BaseModel(Base):
    """Abstract base model with the id and timestamp columns."""

    __abstract__ = True
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(
        Identifier,
        primary_key=True,
        autoincrement=True,
        doc="Primary key",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        doc="Timestamp when the record was last updated (UTC)",
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"


def str_enum_column[E: Enum](enum_class: type[E]) -> SAEnum:
    """Store a ``StrEnum`` by value in a VARCHAR column (no native DB enum)."""
    return SAEnum(
        enum_class,
        native_enum=False,
        length=20,
        values_callable=lambda members: [member.value for member in members],
    )
