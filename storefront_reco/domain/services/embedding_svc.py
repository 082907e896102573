# storefront_reco/domain/services/embedding_svc.py

from __future__ import annotations
from typing import Optional
import logging

from openai import AsyncOpenAI, OpenAIError
from redis.exceptions import RedisError

from storefront_reco.core.errors import EmbeddingError
from storefront_reco.domain.repositories.vector_cache_repo import VectorCacheRepo

logger = logging.getLogger(__name__)


class OpenAIEmbeddingProvider:
    """
    Text -> vector through the OpenAI embeddings API.

    Lookup order:
      1) Redis cache (when a cache is configured)
      2) OpenAI embeddings.create
      3) Write back to the cache

    Cache failures are logged and ignored: Redis is an optimisation, not a dependency.
    Any OpenAI failure (quota, auth, timeout, empty payload) raises EmbeddingError.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        *,
        cache: Optional[VectorCacheRepo] = None,
        cache_ttl: int = 7 * 24 * 3600,
    ):
        self.client = client
        self.model = model
        self.cache = cache
        self.cache_ttl = cache_ttl

    @classmethod
    def from_settings(cls, settings, redis=None) -> "OpenAIEmbeddingProvider":
        client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.openai_timeout_s)
        cache = VectorCacheRepo(redis, prefix=settings.embedding_cache_prefix) if redis is not None else None
        return cls(client, settings.OPENAI_EMBEDDING_MODEL, cache=cache, cache_ttl=settings.embedding_cache_ttl)

    async def _cache_get(self, key: str) -> Optional[list[float]]:
        if self.cache is None:
            return None
        try:
            return await self.cache.get(key)
        except RedisError as e:
            logger.warning(f"Embedding cache read failed for key={key}: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Ignoring unreadable embedding cache entry: {e}")
            return None

    async def _cache_set(self, key: str, vec: list[float]) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.set(key, vec, ttl=self.cache_ttl)
        except RedisError as e:
            logger.warning(f"Embedding cache write failed for key={key}: {e}")

    async def embed(self, text: str) -> list[float]:
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        cache_key = self.cache.key(text, self.model) if self.cache is not None else ""
        if cache_key and (vec := await self._cache_get(cache_key)):
            logger.debug(f"Embedding cache hit for key: {cache_key}")
            return vec

        logger.debug(f"Requesting embedding from OpenAI model={self.model} chars={len(text)}")
        try:
            resp = await self.client.embeddings.create(model=self.model, input=text)
        except OpenAIError as e:
            raise EmbeddingError(f"OpenAI embedding request failed: {e}", details={"model": self.model}) from e

        vec = list(resp.data[0].embedding) if resp.data else []
        if not vec:
            raise EmbeddingError("OpenAI returned an empty embedding", details={"model": self.model})

        if cache_key:
            await self._cache_set(cache_key, vec)
        return vec
