"""Note persistence and lifecycle.

Module-level functions cover plain data access (structural filter, get,
delete, copy, move).  :class:`NoteManager` owns the operations that need the
embedding provider: creation computes ``vector_data`` once from the note's
fields, and updates leave it alone unless re-embedding is enabled.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from loguru import logger
from sqlalchemy import delete, func, select, update

from notebridge.note_service.db.tables import Note, Workspace
from notebridge.note_service.errors import AccessDeniedError, NoteNotFoundError
from notebridge.note_service.managers.access import load_roster
from notebridge.note_service.membership import can_post, require_member
from notebridge.note_service.models.enums import NoteKind
from notebridge.note_service.models.note import NoteField, build_embedding_text, dump_fields, normalize_fields

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from notebridge.note_service.embeddings import EmbeddingProvider
    from notebridge.note_service.models.api import NoteCreate, NoteUpdate


_NOT_A_MEMBER = "Access denied: You are not a member of this workspace"


# -- Structural filter ---------------------------------------------------------


async def filter_notes(
    db: AsyncSession,
    workspace_id: str,
    kind: NoteKind,
    tags: list[str] | None = None,
) -> list[Note]:
    """Notes of *kind* in a workspace, newest first.

    With *tags*, only notes sharing at least one tag are returned.
    """
    stmt = select(Note).where(Note.workspace_id == workspace_id, Note.kind == kind)
    if tags:
        elements = _tag_elements(db)
        stmt = stmt.where(select(elements.c.value).where(elements.c.value.in_(tags)).exists())
    stmt = stmt.order_by(Note.created_at.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


def _tag_elements(db: AsyncSession):
    """Table-valued expansion of ``notes.tags`` for the current dialect."""
    if db.get_bind().dialect.name == "postgresql":
        return func.jsonb_array_elements_text(Note.tags).table_valued("value")
    return func.json_each(Note.tags).table_valued("value")


async def list_workspace_tags(db: AsyncSession, workspace_id: str) -> list[str]:
    """Sorted union of the tags used by notes in a workspace."""
    result = await db.execute(select(Note.tags).where(Note.workspace_id == workspace_id))
    tags: set[str] = set()
    for (note_tags,) in result:
        tags.update(note_tags or [])
    return sorted(tags)


async def delete_notes_in_workspace(db: AsyncSession, workspace_id: str) -> int:
    """Delete every note of a workspace without committing.  Returns the count."""
    result = await db.execute(delete(Note).where(Note.workspace_id == workspace_id))
    return result.rowcount or 0


# -- Single-note access --------------------------------------------------------


async def _get_note_row(db: AsyncSession, note_id: str) -> Note:
    note = await db.get(Note, note_id)
    if note is None:
        raise NoteNotFoundError(note_id)
    return note


async def get_note(db: AsyncSession, note_id: str, requester_id: str) -> Note:
    """Get a note readable by *requester_id*."""
    note = await _get_note_row(db, note_id)
    roster = await load_roster(db, note.workspace_id)
    require_member(roster, requester_id)
    return note


async def get_note_workspace(db: AsyncSession, note_id: str, requester_id: str) -> str:
    note = await get_note(db, note_id, requester_id)
    return note.workspace_id


async def delete_note(db: AsyncSession, note_id: str, requester_id: str) -> None:
    """Delete a note.  Only its author may do so."""
    note = await _get_note_row(db, note_id)
    if note.author_id != requester_id:
        msg = "Access denied: Only the note author can delete it"
        raise AccessDeniedError(msg)
    await db.delete(note)
    await db.commit()


async def copy_note(db: AsyncSession, note_id: str, requester_id: str, workspace_id: str) -> Note:
    """Clone a note into another workspace.

    The copy gets a new id, lands as CONTENT and keeps the original's tags,
    fields and vector.  The original is untouched.
    """
    note = await _get_note_row(db, note_id)
    if note.author_id != requester_id:
        msg = "Access denied: Only the note author can copy it"
        raise AccessDeniedError(msg)
    await _require_poster(db, workspace_id, requester_id)

    clone = Note(
        note_id=str(uuid.uuid4()),
        workspace_id=workspace_id,
        author_id=note.author_id,
        kind=NoteKind.CONTENT,
        tags=list(note.tags),
        fields=list(note.fields),
        vector_data=list(note.vector_data),
    )
    db.add(clone)
    await db.commit()
    await db.refresh(clone)
    return clone


async def move_note(db: AsyncSession, note_id: str, requester_id: str, workspace_id: str) -> Note:
    """Re-parent a note into another workspace the author can post to."""
    note = await _get_note_row(db, note_id)
    if note.author_id != requester_id:
        msg = "Access denied: Only the note author can move it"
        raise AccessDeniedError(msg)
    await _require_poster(db, workspace_id, requester_id)

    note.workspace_id = workspace_id
    await db.commit()
    await db.refresh(note)
    return note


async def _require_poster(db: AsyncSession, workspace_id: str, user_id: str) -> None:
    roster = await load_roster(db, workspace_id)
    if not can_post(roster, user_id):
        raise AccessDeniedError(_NOT_A_MEMBER)


async def touch_workspace_activity(db: AsyncSession, workspace_id: str, at: datetime) -> None:
    """Record chat activity on a workspace (single UPDATE, no commit)."""
    await db.execute(update(Workspace).where(Workspace.workspace_id == workspace_id).values(latest_activity_at=at))


# -- Manager -------------------------------------------------------------------


class NoteManager:
    """Note operations that depend on the embedding provider.

    Instantiated once during app lifespan.  Stateless beyond its reference to
    the provider.
    """

    def __init__(self, embedder: EmbeddingProvider, *, reembed_on_update: bool = False) -> None:
        self._embedder = embedder
        self._reembed_on_update = reembed_on_update

    async def create_note(self, db: AsyncSession, author_id: str, body: NoteCreate) -> Note:
        """Create a note in a workspace the author may post to.

        The embedding is computed from the fields as submitted; a provider
        failure stores the note with an empty vector instead of failing.
        CHAT notes bump the workspace's activity timestamp.
        """
        await _require_poster(db, body.workspace_id, author_id)
        fields = normalize_fields(body.fields)
        vector = await self.embed_fields(body.fields)

        now = datetime.now(UTC)
        note = Note(
            note_id=str(uuid.uuid4()),
            workspace_id=body.workspace_id,
            author_id=author_id,
            kind=body.kind,
            tags=list(dict.fromkeys(body.tags)),
            fields=dump_fields(fields),
            vector_data=vector,
            created_at=now,
            updated_at=now,
        )
        db.add(note)
        if body.kind == NoteKind.CHAT:
            await touch_workspace_activity(db, body.workspace_id, now)
        await db.commit()
        await db.refresh(note)
        logger.debug("Note {} created in {} (vector_dim={})", note.note_id, note.workspace_id, len(vector))
        return note

    async def update_note(self, db: AsyncSession, note_id: str, requester_id: str, body: NoteUpdate) -> Note:
        """Partially update a note.  Only its author may do so."""
        note = await _get_note_row(db, note_id)
        if note.author_id != requester_id:
            msg = "Access denied: Only the note author can update it"
            raise AccessDeniedError(msg)

        changes = body.model_dump(exclude_unset=True)
        if not changes:
            return note

        if changes.get("tags") is not None:
            note.tags = list(dict.fromkeys(body.tags or []))
        if changes.get("fields") is not None:
            fields = body.fields or []
            note.fields = dump_fields(normalize_fields(fields))
            if self._reembed_on_update:
                note.vector_data = await self.embed_fields(fields)

        await db.commit()
        await db.refresh(note)
        return note

    async def embed_fields(self, fields: list[NoteField]) -> list[float]:
        """Embedding of a note's fields, or ``[]`` when it can't be produced."""
        text = build_embedding_text(fields)
        if not text:
            return []
        try:
            return await self._embedder.embed(text)
        except Exception as exc:
            logger.warning("Failed to generate embedding (continuing with empty vector): {}", exc)
            return []
