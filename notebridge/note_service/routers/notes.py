"""Note endpoints (RPC-style).

All write operations use POST; reads use GET.  ``vector_data`` is never
part of a response.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from notebridge.note_service.db.tables import Note
from notebridge.note_service.deps import CurrentUserId, DbSession, NoteMgr, Retrieval
from notebridge.note_service.managers import notes as note_mgr
from notebridge.note_service.models.api import (
    NoteCreate,
    NoteResponse,
    NoteTransfer,
    NoteUpdate,
    NoteWorkspaceResponse,
)
from notebridge.note_service.models.enums import NoteKind

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("/create", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(body: NoteCreate, db: DbSession, user_id: CurrentUserId, manager: NoteMgr) -> Note:
    """Create a note in a workspace the caller can post to."""
    return await manager.create_note(db, user_id, body)


@router.get("/search", response_model=list[NoteResponse])
async def search_notes(
    db: DbSession,
    user_id: CurrentUserId,
    retrieval: Retrieval,
    workspace_id: str,
    kind: NoteKind = NoteKind.CONTENT,
    tags: Annotated[list[str] | None, Query()] = None,
    query: str | None = None,
) -> list[Note]:
    """Filter a workspace's notes, ranked by relevance to *query* if given."""
    return await retrieval.search(
        db,
        workspace_id=workspace_id,
        kind=kind,
        tags=tags,
        query=query,
        requester_id=user_id,
    )


@router.get("/{note_id}/get", response_model=NoteResponse)
async def get_note(note_id: str, db: DbSession, user_id: CurrentUserId) -> Note:
    return await note_mgr.get_note(db, note_id, user_id)


@router.post("/{note_id}/update", response_model=NoteResponse)
async def update_note(
    note_id: str, body: NoteUpdate, db: DbSession, user_id: CurrentUserId, manager: NoteMgr
) -> Note:
    """Partially update a note (author only)."""
    return await manager.update_note(db, note_id, user_id, body)


@router.post("/{note_id}/delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(note_id: str, db: DbSession, user_id: CurrentUserId) -> None:
    await note_mgr.delete_note(db, note_id, user_id)


@router.post("/{note_id}/copy", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def copy_note(note_id: str, body: NoteTransfer, db: DbSession, user_id: CurrentUserId) -> Note:
    return await note_mgr.copy_note(db, note_id, user_id, body.workspace_id)


@router.post("/{note_id}/move", response_model=NoteResponse)
async def move_note(note_id: str, body: NoteTransfer, db: DbSession, user_id: CurrentUserId) -> Note:
    return await note_mgr.move_note(db, note_id, user_id, body.workspace_id)


@router.get("/{note_id}/workspace", response_model=NoteWorkspaceResponse)
async def get_note_workspace(note_id: str, db: DbSession, user_id: CurrentUserId) -> NoteWorkspaceResponse:
    workspace_id = await note_mgr.get_note_workspace(db, note_id, user_id)
    return NoteWorkspaceResponse(note_id=note_id, workspace_id=workspace_id)
