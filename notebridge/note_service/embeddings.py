"""Embedding providers.

The service only needs ``embed(text) -> list[float]``.  Providers are built
once in the app lifespan and injected wherever vectors are produced (note
creation, query-time search), so tests can substitute a fake.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from loguru import logger
from openai import AsyncOpenAI, OpenAIError

from notebridge.note_service.errors import EmbeddingError

if TYPE_CHECKING:
    from notebridge.note_service.settings import NoteSettings


@runtime_checkable
class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> list[float]:
        """Return the embedding of *text*.  Raises ``EmbeddingError`` on failure."""
        ...


class OpenAIEmbeddingProvider:
    """Embeddings from the OpenAI API through an explicitly owned client."""

    def __init__(self, client: AsyncOpenAI, model: str = "text-embedding-3-large") -> None:
        self._client = client
        self._model = model

    @classmethod
    def from_settings(cls, settings: NoteSettings) -> OpenAIEmbeddingProvider:
        api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=settings.openai_base_url,
            timeout=settings.embedding_timeout,
            max_retries=settings.embedding_max_retries,
        )
        return cls(client, model=settings.embedding_model)

    async def embed(self, text: str) -> list[float]:
        try:
            response = await self._client.embeddings.create(model=self._model, input=text)
        except OpenAIError as exc:
            msg = f"Embedding request failed: {exc}"
            raise EmbeddingError(msg) from exc
        if not response.data:
            msg = "Embedding response contained no vectors"
            raise EmbeddingError(msg)
        return list(response.data[0].embedding)

    async def aclose(self) -> None:
        await self._client.close()


class UnconfiguredEmbeddingProvider:
    """Stand-in used when no provider credentials are configured.

    Every call fails, so notes are stored without vectors and semantic
    search reports the provider as unavailable.
    """

    async def embed(self, text: str) -> list[float]:
        msg = "No embedding provider configured (NOTEBRIDGE_OPENAI_API_KEY is unset)"
        raise EmbeddingError(msg)


def create_embedding_provider(settings: NoteSettings) -> EmbeddingProvider:
    if settings.openai_api_key is None:
        logger.warning("NOTEBRIDGE_OPENAI_API_KEY not set -- semantic search disabled")
        return UnconfiguredEmbeddingProvider()
    logger.info("Embeddings: OpenAI (model={})", settings.embedding_model)
    return OpenAIEmbeddingProvider.from_settings(settings)
