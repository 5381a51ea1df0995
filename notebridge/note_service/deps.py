"""FastAPI dependency injection for DB sessions, identity and collaborators.

Usage in route handlers::

    @router.post("/things")
    async def create_thing(db: DbSession, user_id: CurrentUserId, body: ThingCreate) -> ThingResponse:
        ...

The identity gateway in front of the service authenticates users and forwards
``Authorization: Bearer <token>`` plus ``X-User-Id``.  Requests without the
shared token are rejected with 401.

Dependencies raise HTTP 503 if the database was not configured
(NOTEBRIDGE_DATABASE_URL unset).
"""

from __future__ import annotations

import secrets
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from notebridge.note_service.embeddings import EmbeddingProvider
from notebridge.note_service.managers.notes import NoteManager
from notebridge.note_service.notifications import NotificationDispatcher
from notebridge.note_service.retrieval import RetrievalEngine


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an async SQLAlchemy session, closing it after the request.

    Managers commit on success.  If the handler raises, the session is simply
    closed and the implicit transaction is rolled back.
    """
    session_factory = request.app.state.db_session_factory
    if session_factory is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured (NOTEBRIDGE_DATABASE_URL is unset).",
        )
    session: AsyncSession = session_factory()
    try:
        yield session
    finally:
        await session.close()


async def get_current_user_id(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """Return the authenticated user id forwarded by the identity gateway."""
    expected = request.app.state.auth_token
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not expected or not secrets.compare_digest(token, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id header.")
    return x_user_id


def get_embedder(request: Request) -> EmbeddingProvider:
    return request.app.state.embedder


def get_notifier(request: Request) -> NotificationDispatcher:
    return request.app.state.notifier


def get_note_manager(request: Request) -> NoteManager:
    return request.app.state.note_manager


def get_retrieval(request: Request) -> RetrievalEngine:
    return request.app.state.retrieval


# -- Annotated type aliases for concise route signatures ---------------------

DbSession = Annotated[AsyncSession, Depends(get_db)]
"""Annotated dependency: async SQLAlchemy session (auto-closed after request)."""

CurrentUserId = Annotated[str, Depends(get_current_user_id)]
"""Annotated dependency: id of the authenticated caller."""

Embedder = Annotated[EmbeddingProvider, Depends(get_embedder)]
Notifier = Annotated[NotificationDispatcher, Depends(get_notifier)]
NoteMgr = Annotated[NoteManager, Depends(get_note_manager)]
Retrieval = Annotated[RetrievalEngine, Depends(get_retrieval)]
