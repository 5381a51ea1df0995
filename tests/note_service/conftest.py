"""Shared fixtures for note-service tests: fake collaborators, seeded users, HTTP client."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from notebridge.note_service.app import app
from notebridge.note_service.deps import get_db
from notebridge.note_service.errors import EmbeddingError
from notebridge.note_service.managers import users as user_mgr
from notebridge.note_service.managers import workspaces as ws_mgr
from notebridge.note_service.managers.notes import NoteManager
from notebridge.note_service.models.api import UserCreate, WorkspaceCreate
from notebridge.note_service.retrieval import RetrievalEngine

AUTH_TOKEN = "test-token"  # noqa: S105


class FakeEmbedder:
    """Deterministic embedder: the first keyword found in the text picks the vector."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, default: list[float] | None = None) -> None:
        self.vectors = dict(vectors or {})
        self.default = default if default is not None else [1.0, 0.0, 0.0]
        self.fail = False
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail:
            msg = "provider down"
            raise EmbeddingError(msg)
        for keyword, vector in self.vectors.items():
            if keyword in text:
                return list(vector)
        return list(self.default)


class RecordingNotifier:
    """Collects notifications; can be switched to report or raise failures."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str, dict[str, str]]] = []
        self.result = True
        self.error: Exception | None = None

    async def notify(self, target_user_id: str, title: str, body: str, data: dict[str, str]) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append((target_user_id, title, body, data))
        return self.result


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder(
        vectors={
            "hiking": [0.9, 0.1, 0.0],
            "tax": [0.0, 0.2, 0.9],
            "recipe": [0.1, 0.9, 0.1],
        }
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def note_manager(embedder: FakeEmbedder) -> NoteManager:
    return NoteManager(embedder)


@pytest.fixture
def retrieval(embedder: FakeEmbedder) -> RetrievalEngine:
    return RetrievalEngine(embedder)


@pytest.fixture
async def users(db_session: AsyncSession) -> dict[str, str]:
    """Register owner, alice, bob and mallory (each with a personal workspace)."""
    ids = {}
    for name in ("owner", "alice", "bob", "mallory"):
        user = await user_mgr.create_user(db_session, f"user-{name}", UserCreate(name=name.title()))
        ids[name] = user.user_id
    return ids


@pytest.fixture
async def workspace_id(db_session: AsyncSession, users: dict[str, str]) -> str:
    """A shared workspace owned by ``owner``."""
    workspace, _ = await ws_mgr.create_workspace(db_session, users["owner"], WorkspaceCreate(name="Team"))
    return workspace.workspace_id


def _auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {AUTH_TOKEN}", "X-User-Id": user_id}


@pytest.fixture
def auth():
    """Build the headers the identity gateway would forward for a user id."""
    return _auth


@pytest.fixture
async def client(
    db_session: AsyncSession,
    embedder: FakeEmbedder,
    notifier: RecordingNotifier,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client wired to the app with a test DB session.

    Overrides ``get_db`` so every request uses the isolated ``db_session``
    fixture from the root conftest.  The app lifespan does NOT run under
    ``ASGITransport``, so state fields are pre-set here.
    """

    async def _override_get_db() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    # Pre-set state fields (lifespan does not run under ASGITransport).
    app.state.auth_token = AUTH_TOKEN
    app.state.db_engine = None
    app.state.db_session_factory = None
    app.state.redis = None
    app.state.embedder = embedder
    app.state.notifier = notifier
    app.state.note_manager = NoteManager(embedder)
    app.state.retrieval = RetrievalEngine(embedder)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
