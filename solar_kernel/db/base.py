"""
Module: solar_kernel.db.base
Responsibility: Declarative base classes for the SQLAlchemy ORM models.
    Provides the UUID primary key convention, the type annotation map for
    consistent column types, and the TrackedBase mixin for audit timestamps.
Architecture position: Kernel > DB.  Lowest-level import target of the
    persistence shell; MUST NOT import from models/, services/ or engines.

Invariants enforced:
    - UUID primary keys: every model gets a uuid4 primary key stored as
      String(36) so the schema runs on PostgreSQL and SQLite alike.
    - Floats map to double precision.  Stored proposal figures must match
      the engine's float output exactly, so they are not rounded into a
      fixed-scale Numeric.
    - Timestamps are timezone-aware.
"""

from datetime import datetime
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, Double, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Binds UUIDs or UUID strings (a malformed string is refused before it
    reaches the database) and loads them back as UUID.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, PyUUID):
            value = PyUUID(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else PyUUID(value)


class Base(DeclarativeBase):
    """
    Declarative base for all models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - float maps to a double-precision column.
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        float: Double(),
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TrackedBase(Base):
    """
    Abstract base with audit timestamp and actor tracking.

    Guarantees:
        - created_at is set by the database on INSERT and never changes.
        - updated_at is set on INSERT and refreshed on every UPDATE.
        - created_by_id is required; updated_by_id is optional.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    created_by_id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    updated_by_id: Mapped[PyUUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )


UUID = PyUUID
