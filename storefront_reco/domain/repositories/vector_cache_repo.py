# storefront_reco/domain/repositories/vector_cache_repo.py
from __future__ import annotations
from typing import Optional, Sequence
from redis.asyncio import Redis
import json, hashlib

"""
Note:
    - This repository caches embeddings of product texts in Redis.
    - No business logic here, just cache access (get/set/invalidate).
    - The vector store stays the source of truth for nearest-neighbour search.
"""

def _stable_hash(value: str, size: int = 8) -> str:
    """
    Short, stable hash used to version keys per model and per text.
    """
    return hashlib.sha1(value.encode("utf-8")).hexdigest()[:size]

def _is_vector(value) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in value)
    )

class VectorCacheRepo:
    """
    Adapter for storing and retrieving text embeddings in Redis.
    """
    def __init__(self, redis: Redis, prefix: str = "emb"):
        self.redis = redis
        self.prefix = prefix

    def key(self, text: str, model: str) -> str:
        """
        Cache key for the embedding of `text` under `model`.
        Changing the model or the text naturally misses the cache.
        """
        return f"{self.prefix}:{_stable_hash(model)}:{_stable_hash(text, 16)}"

    async def get(self, key: str) -> Optional[list[float]]:
        """
        Cached vector under `key`, or None on a miss.
        Raises ValueError when the stored value is not a non-empty list of numbers.
        """
        raw = await self.redis.get(key)
        if not raw:
            return None
        vector = json.loads(raw)
        if not _is_vector(vector):
            raise ValueError(f"cached value under {key} is not an embedding")
        return [float(x) for x in vector]

    async def set(self, key: str, vector: Sequence[float], ttl: int) -> None:
        await self.redis.set(key, json.dumps(list(vector), separators=(",", ":")), ex=ttl)

