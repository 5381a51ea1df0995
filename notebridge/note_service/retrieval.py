"""Note retrieval: structural filtering plus optional semantic reranking.

A search first checks that the requester can read the workspace, then runs
the structural filter (workspace, kind, tags; newest first).  Without a query
that recency order is the answer.  With a query, the query is embedded once
and the filtered notes are reordered by cosine similarity to it.  Note
vectors are only read here, never recomputed.

Ranking is a linear scan, sized for workspaces holding hundreds of notes.
An approximate-nearest-neighbour index could replace the scan behind
:func:`rank_by_similarity` without touching callers.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, TypeVar

from loguru import logger

from notebridge.note_service.errors import AccessDeniedError, EmbeddingError, EmbeddingUnavailableError
from notebridge.note_service.managers.access import load_roster
from notebridge.note_service.managers.notes import filter_notes
from notebridge.note_service.membership import can_read
from notebridge.note_service.similarity import cosine_similarity

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from notebridge.note_service.db.tables import Note
    from notebridge.note_service.embeddings import EmbeddingProvider
    from notebridge.note_service.models.enums import NoteKind


class _HasVector(Protocol):
    vector_data: Sequence[float]


V = TypeVar("V", bound=_HasVector)


def rank_by_similarity(items: Sequence[V], query_vector: Sequence[float]) -> list[V]:
    """Order *items* by descending similarity to *query_vector*.

    The sort is stable, so equal scores keep their incoming (recency) order.
    Items without a usable vector score -1 and sink to the bottom.
    """
    scored = [(cosine_similarity(query_vector, item.vector_data), item) for item in items]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in scored]


class RetrievalEngine:
    """Workspace note search.  Instantiated once during app lifespan."""

    def __init__(self, embedder: EmbeddingProvider) -> None:
        self._embedder = embedder

    async def search(
        self,
        db: AsyncSession,
        *,
        workspace_id: str,
        kind: NoteKind,
        tags: list[str] | None,
        query: str | None,
        requester_id: str,
    ) -> list[Note]:
        """Return the notes matching the filter, ranked for relevance.

        Raises ``WorkspaceNotFoundError`` / ``AccessDeniedError`` before any
        note is read, and ``EmbeddingUnavailableError`` if a non-empty query
        can't be embedded (there is no fallback to recency order).
        """
        roster = await load_roster(db, workspace_id)
        if not can_read(roster, requester_id):
            msg = "Access denied: You are not a member of this workspace"
            raise AccessDeniedError(msg)

        notes = await filter_notes(db, workspace_id, kind, tags)

        text = (query or "").strip()
        if not text:
            return notes

        try:
            query_vector = await self._embedder.embed(text)
        except EmbeddingError as exc:
            logger.error("Semantic search failed for workspace {}: {}", workspace_id, exc)
            msg = "Semantic search is temporarily unavailable; please retry"
            raise EmbeddingUnavailableError(msg) from exc

        return rank_by_similarity(notes, query_vector)
