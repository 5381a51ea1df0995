"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from notebridge.note_service.settings import NoteSettings, _get_settings_cached, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    _get_settings_cached.cache_clear()
    yield
    _get_settings_cached.cache_clear()


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("NOTEBRIDGE_DATABASE_URL", "NOTEBRIDGE_OPENAI_API_KEY", "NOTEBRIDGE_REEMBED_ON_UPDATE"):
        monkeypatch.delenv(key, raising=False)
    settings = NoteSettings(_env_file=None)
    assert settings.embedding_model == "text-embedding-3-large"
    assert settings.reembed_on_update is False
    assert settings.openai_api_key is None
    assert settings.port == 8000


def test_env_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NOTEBRIDGE_DATABASE_URL", "sqlite+aiosqlite://")
    monkeypatch.setenv("NOTEBRIDGE_OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("NOTEBRIDGE_REEMBED_ON_UPDATE", "true")

    settings = get_settings()
    assert settings.database_url == "sqlite+aiosqlite://"
    assert settings.openai_api_key.get_secret_value() == "sk-test"
    assert "sk-test" not in repr(settings)
    assert settings.reembed_on_update is True
    assert get_settings() is settings


def test_resolve_auth_token() -> None:
    assert NoteSettings(_env_file=None, auth_token="fixed").resolve_auth_token() == "fixed"
    generated = NoteSettings(_env_file=None, auth_token=None).resolve_auth_token()
    assert len(generated) >= 32
