from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter
from loguru import logger

from notebridge.note_service.db.engine import create_engine, create_session_factory
from notebridge.note_service.embeddings import create_embedding_provider
from notebridge.note_service.errors import EmbeddingUnavailableError, NoteBridgeError
from notebridge.note_service.log import setup_logging
from notebridge.note_service.managers.notes import NoteManager
from notebridge.note_service.notifications import LoggingNotifier, NotificationDispatcher, RedisNotifier
from notebridge.note_service.retrieval import RetrievalEngine
from notebridge.note_service.settings import NoteSettings, get_settings


def _create_notifier(settings: NoteSettings, client: aioredis.Redis | None) -> NotificationDispatcher:
    """Create the notification transport based on configuration."""
    if client is None:
        return LoggingNotifier()
    return RedisNotifier(client, settings.notification_channel)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level)

    _app.state.auth_token = settings.resolve_auth_token()
    if not settings.auth_token:
        logger.warning("No NOTEBRIDGE_AUTH_TOKEN set -- generated token: {}", _app.state.auth_token)

    logger.info("Note service starting (host={}, port={})", settings.host, settings.port)

    # -- Initialise state fields (always present, possibly None) ----------------
    _app.state.db_engine = None
    _app.state.db_session_factory = None
    _app.state.redis = None

    # -- Database --------------------------------------------------------------
    if settings.database_url:
        engine = create_engine(settings.database_url)
        _app.state.db_engine = engine
        _app.state.db_session_factory = create_session_factory(engine)
        logger.info("Database: connected ({})", engine.dialect.name)
    else:
        logger.warning("NOTEBRIDGE_DATABASE_URL not set -- database features disabled")

    # -- Redis -----------------------------------------------------------------
    if settings.redis_url:
        _app.state.redis = aioredis.from_url(
            settings.redis_url,
            decode_responses=False,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        logger.info("Redis: connected")
    else:
        logger.warning("NOTEBRIDGE_REDIS_URL not set -- notifications are only logged")

    # -- Collaborators ---------------------------------------------------------
    _app.state.notifier = _create_notifier(settings, _app.state.redis)
    _app.state.embedder = create_embedding_provider(settings)
    _app.state.note_manager = NoteManager(_app.state.embedder, reembed_on_update=settings.reembed_on_update)
    _app.state.retrieval = RetrievalEngine(_app.state.embedder)

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("Note service shutting down")

    aclose = getattr(_app.state.embedder, "aclose", None)
    if aclose is not None:
        await aclose()

    # Close Redis client (returns pooled connections).
    if _app.state.redis is not None:
        await _app.state.redis.aclose()
        logger.info("Redis: closed")

    # Dispose DB engine (closes all pooled connections).
    if _app.state.db_engine is not None:
        await _app.state.db_engine.dispose()
        logger.info("Database: disposed")


app = FastAPI(title="Notebridge Note Service", lifespan=lifespan)


@app.exception_handler(NoteBridgeError)
async def domain_error_handler(_request: Request, exc: NoteBridgeError) -> JSONResponse:
    """Map domain errors to HTTP responses: ``{"detail", "code"}``."""
    headers = {"Retry-After": "5"} if isinstance(exc, EmbeddingUnavailableError) else None
    if exc.status_code >= 500:
        logger.warning("{} -> {}: {}", type(exc).__name__, exc.status_code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


# ---------------------------------------------------------------------------
# API router -- all backend endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


# -- Routers -----------------------------------------------------------------
from notebridge.note_service.routers.notes import router as notes_router  # noqa: E402
from notebridge.note_service.routers.users import router as users_router  # noqa: E402
from notebridge.note_service.routers.workspaces import router as workspaces_router  # noqa: E402

api.include_router(users_router)
api.include_router(workspaces_router)
api.include_router(notes_router)

app.include_router(api)
