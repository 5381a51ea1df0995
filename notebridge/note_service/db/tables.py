"""SQLAlchemy ORM models.

These are the single source of truth for the database schema.  Alembic reads
``Base.metadata`` to autogenerate migration scripts.

Uses SQLAlchemy 2.0 declarative style with ``Mapped`` type annotations.  JSON
columns are plain ``JSON`` with a ``JSONB`` variant on PostgreSQL, so the same
schema runs on PostgreSQL in production and SQLite in local runs and tests.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text, false, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Timezone-aware timestamp type for all datetime columns.
TimestampTZ = DateTime(timezone=True)

JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base with naming convention for constraints."""

    pass


# Apply naming convention to the metadata for deterministic constraint names.
Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class User(Base):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(primary_key=True)
    name: Mapped[str]
    email: Mapped[str | None]
    personal_workspace_id: Mapped[str | None]
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, default=_utcnow, server_default=func.now())


class Workspace(Base):
    __tablename__ = "workspaces"

    workspace_id: Mapped[str] = mapped_column(primary_key=True)
    name: Mapped[str]
    description: Mapped[str | None] = mapped_column(Text)
    image_path: Mapped[str | None]
    owner_id: Mapped[str]
    is_personal: Mapped[bool] = mapped_column(default=False, server_default=false())
    latest_activity_at: Mapped[datetime | None] = mapped_column(TimestampTZ)
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        TimestampTZ, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class WorkspaceMembership(Base):
    """One row per (workspace, user) pair that is not NOT_MEMBER.

    ``status`` is one of ``owner`` / ``member`` / ``banned``.  Keeping a single
    row per pair means a user can never be both a member and banned.
    """

    __tablename__ = "workspace_memberships"
    __table_args__ = (Index("ix_workspace_memberships_user_id", "user_id"),)

    workspace_id: Mapped[str] = mapped_column(
        ForeignKey("workspaces.workspace_id", name="fk_workspace_memberships_workspace_id"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(primary_key=True)
    status: Mapped[str] = mapped_column(String(16))
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, default=_utcnow, server_default=func.now())


class Note(Base):
    __tablename__ = "notes"
    __table_args__ = (
        Index("ix_notes_workspace_kind_created", "workspace_id", "kind", "created_at"),
        Index("ix_notes_author_id", "author_id"),
    )

    note_id: Mapped[str] = mapped_column(primary_key=True)
    workspace_id: Mapped[str] = mapped_column(
        ForeignKey("workspaces.workspace_id", name="fk_notes_workspace_id"),
    )
    author_id: Mapped[str]
    kind: Mapped[str] = mapped_column(String(16))
    tags: Mapped[list] = mapped_column(JSONType, nullable=False, default=list, server_default="[]")
    fields: Mapped[list] = mapped_column(JSONType, nullable=False, default=list, server_default="[]")
    vector_data: Mapped[list] = mapped_column(JSONType, nullable=False, default=list, server_default="[]")
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        TimestampTZ, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )
