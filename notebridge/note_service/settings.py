"""Service configuration loaded from NOTEBRIDGE_* environment variables."""

from __future__ import annotations

import secrets

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class NoteSettings(BaseSettings):
    """Notebridge note service settings.

    All fields are read from environment variables with the ``NOTEBRIDGE_``
    prefix.  For example, ``NOTEBRIDGE_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTEBRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Infrastructure --------------------------------------------------------
    database_url: str | None = None
    """Async SQLAlchemy URL (``postgresql+psycopg://`` or ``sqlite+aiosqlite://``)."""

    redis_url: str | None = None
    """Redis connection string.  Enables the Redis notification transport."""

    # -- Auth ------------------------------------------------------------------
    auth_token: str | None = None
    """Bearer token shared with the identity gateway.  Auto-generated at startup if empty."""

    # -- Embeddings ------------------------------------------------------------
    openai_api_key: SecretStr | None = None
    openai_base_url: str | None = None
    embedding_model: str = "text-embedding-3-large"
    embedding_timeout: float = 30.0
    """Seconds allowed for a single embedding call (including retries by the client)."""

    embedding_max_retries: int = 2

    reembed_on_update: bool = False
    """Recompute a note's vector when its fields change.

    Off by default: semantic ranking keeps using the vector computed at
    creation time, which matches the established ranking behaviour.
    """

    # -- Notifications ---------------------------------------------------------
    notification_channel: str = "notebridge:notifications"
    """Redis pub/sub channel prefix; the target user id is appended."""

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000

    # -- Helpers ---------------------------------------------------------------

    def resolve_auth_token(self) -> str:
        """Return the configured token or generate a random one."""
        if self.auth_token:
            return self.auth_token
        return secrets.token_urlsafe(32)


def get_settings() -> NoteSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``_get_settings_cached.cache_clear()`` in tests to
    force a re-read after overriding env vars.
    """
    return _get_settings_cached()


def _get_settings_cached() -> NoteSettings:
    """Inner function wrapped by lru_cache (allows type-safe cache_clear)."""
    return NoteSettings()


# Apply lru_cache at runtime so the function is only called once.
from functools import lru_cache  # noqa: E402

_get_settings_cached = lru_cache(maxsize=1)(_get_settings_cached)
