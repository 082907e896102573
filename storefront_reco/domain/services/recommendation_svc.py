# storefront_reco/domain/services/recommendation_svc.py
import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from storefront_reco.core.errors import (
    EmbeddingError,
    NoProductsFoundError,
    NotFoundError,
    VectorBackendError,
)
from storefront_reco.domain.models.product import Product, VectorMatch
from storefront_reco.domain.services.candidate_pool import CandidatePoolBuilder, dedupe_products
from storefront_reco.domain.services.constants import (
    DEFAULT_GROUP_LIMIT,
    DEFAULT_SIMILAR_LIMIT,
    VECTOR_QUERY_BUFFER,
)
from storefront_reco.domain.services.scoring import DEFAULT_WEIGHTS, ScoringWeights, similarity_score
from storefront_reco.domain.services.vector_math import centroid, consistent_vectors
from storefront_reco.domain.services.vector_sync_svc import VectorSyncService

logger = logging.getLogger(__name__)


def _rank(pool: Sequence[Product], scorer: Callable[[Product], float], exclude: set, limit: int) -> List[Product]:
    """Score, sort descending (stable: ties keep pool order), dedupe, truncate."""
    scored = [(scorer(c), c) for c in pool if c.id not in exclude]
    scored.sort(key=lambda t: t[0], reverse=True)
    return dedupe_products((c for _, c in scored), exclude)[:limit]


class RecommendationService:
    """
    Tiered recommendation pipeline.

    Tiers, in order; the first one producing anything wins and results are never blended:
      1) Vector store neighbours (with one lazy resync on a miss)
      2) Deterministic scoring over a candidate pool
      3) Top-rated backup
      4) The base product(s) themselves

    Collaborators are injected:
      catalog  find_by_ids / find_by_category / find_top_rated / get_by_id
      vectors  query_by_id / query_by_vector / fetch_vectors / upsert / delete (optional)
      embedder embed(text) (optional)
    Vector store and embedding failures degrade to the next tier; only input errors escape.
    """

    def __init__(
        self,
        catalog,
        vectors=None,
        embedder=None,
        *,
        sync: Optional[VectorSyncService] = None,
        pool_builder: Optional[CandidatePoolBuilder] = None,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
    ):
        self.catalog = catalog
        self.vectors = vectors
        if sync is None and vectors is not None and embedder is not None:
            sync = VectorSyncService(catalog, vectors, embedder)
        self.sync = sync
        self.pool_builder = pool_builder or CandidatePoolBuilder(catalog)
        self.weights = weights

    # ---------- Public entry points ----------

    async def similar(self, product_id: str, limit: int = DEFAULT_SIMILAR_LIMIT) -> List[Product]:
        product = await self.catalog.get_by_id(product_id)
        if product is None:
            raise NotFoundError(product_id)
        return await self.similar_to(product, limit)

    async def group_similar(self, product_ids: Sequence[str], limit: int = DEFAULT_GROUP_LIMIT) -> List[Product]:
        ids = list(dict.fromkeys(str(i) for i in product_ids if i))  # preserve order, dedupe
        found = {p.id: p for p in await self.catalog.find_by_ids(ids)} if ids else {}
        products = [found[i] for i in ids if i in found]
        if not products:
            raise NoProductsFoundError(ids)
        return await self.group_similar_to(products, limit)

    async def similar_to(self, product: Product, limit: int = DEFAULT_SIMILAR_LIMIT) -> List[Product]:
        if limit <= 0:
            return []

        items = await self._vector_similar(product, limit)
        if items:
            logger.info(f"similar product_id={product.id}: {len(items)} items from vector store")
            return items

        items = await self._fallback_similar(product, limit)
        if items:
            logger.info(f"similar product_id={product.id}: {len(items)} items from fallback scoring")
            return items

        items = await self._top_rated({product.id}, limit)
        if items:
            logger.info(f"similar product_id={product.id}: {len(items)} items from top-rated backup")
            return items

        logger.warning(f"similar product_id={product.id}: catalog has nothing else, returning the product itself")
        return [product]

    async def group_similar_to(self, products: Sequence[Product], limit: int = DEFAULT_GROUP_LIMIT) -> List[Product]:
        bases = dedupe_products(products)
        if limit <= 0 or not bases:
            return []
        base_ids = {p.id for p in bases}
        tag = ",".join(p.id for p in bases)

        items = await self._vector_group(bases, limit)
        if items:
            logger.info(f"group_similar ids={tag}: {len(items)} items from vector store")
            return items

        items = await self._fallback_group(bases, limit)
        if items:
            logger.info(f"group_similar ids={tag}: {len(items)} items from fallback scoring")
            return items

        items = await self._top_rated(base_ids, limit)
        if items:
            logger.info(f"group_similar ids={tag}: {len(items)} items from top-rated backup")
            return items

        logger.warning(f"group_similar ids={tag}: catalog has nothing else, returning the base products")
        return bases[:limit]

    # ---------- Tier 1: vector store ----------

    async def _vector_similar(self, product: Product, limit: int) -> List[Product]:
        if self.vectors is None:
            return []
        top_k = limit + VECTOR_QUERY_BUFFER
        try:
            matches = await self.vectors.query_by_id(product.vector_id, top_k)
        except VectorBackendError as e:
            logger.warning(f"Vector query failed for product_id={product.id}: {e}")
            return []

        if not matches:
            logger.info(f"No stored neighbours for product_id={product.id}; attempting lazy resync")
            if not await self._resync(product):
                return []
            try:
                matches = await self.vectors.query_by_id(product.vector_id, top_k)
            except VectorBackendError as e:
                logger.warning(f"Vector query retry failed for product_id={product.id}: {e}")
                return []

        return await self._load_matches(matches, {product.id}, limit)

    async def _vector_group(self, bases: List[Product], limit: int) -> List[Product]:
        if self.vectors is None:
            return []
        vector_ids = [b.vector_id for b in bases]
        try:
            stored = await self.vectors.fetch_vectors(vector_ids)
        except VectorBackendError as e:
            logger.warning(f"Vector fetch failed for {len(vector_ids)} base products: {e}")
            return []

        missing = [b for b in bases if b.vector_id not in stored]
        if missing:
            synced = await asyncio.gather(*(self._resync(b) for b in missing))
            refetch = [b.vector_id for b, ok in zip(missing, synced) if ok]
            if refetch:
                try:
                    stored.update(await self.vectors.fetch_vectors(refetch))
                except VectorBackendError as e:
                    logger.warning(f"Vector refetch failed after resync: {e}")

        available = consistent_vectors([stored[v] for v in dict.fromkeys(vector_ids) if v in stored])
        if not available:
            return []

        center = centroid([v.values for v in available])
        base_ids = {b.id for b in bases}
        try:
            matches = await self.vectors.query_by_vector(center, limit + len(bases) + VECTOR_QUERY_BUFFER)
        except VectorBackendError as e:
            logger.warning(f"Centroid query failed: {e}")
            return []
        return await self._load_matches(matches, base_ids, limit)

    async def _resync(self, product: Product) -> bool:
        """One embed + upsert; failures only end the vector tier."""
        if self.sync is None:
            return False
        try:
            return await self.sync.ensure_synced(product)
        except (EmbeddingError, VectorBackendError) as e:
            logger.warning(f"Lazy resync failed for product_id={product.id}: {e}")
            return False

    async def _load_matches(self, matches: Sequence[VectorMatch], exclude: set, limit: int) -> List[Product]:
        """Matches -> catalog products, in store order, without excluded ids or duplicates."""
        ids = list(dict.fromkeys(m.product_id for m in matches if m.product_id not in exclude))
        if not ids:
            return []
        found = {p.id: p for p in await self.catalog.find_by_ids(ids)}
        return [found[i] for i in ids if i in found][:limit]

    # ---------- Tier 2: deterministic scoring ----------

    async def _fallback_similar(self, product: Product, limit: int) -> List[Product]:
        pool = await self.pool_builder.build({product.id}, [product.category] if product.category else [])
        return _rank(pool, lambda c: similarity_score(product, c, self.weights), {product.id}, limit)

    async def _fallback_group(self, bases: List[Product], limit: int) -> List[Product]:
        base_ids = {b.id for b in bases}
        categories = {b.category for b in bases if b.category}
        pool = await self.pool_builder.build(base_ids, categories)
        return _rank(
            pool,
            lambda c: max(similarity_score(b, c, self.weights) for b in bases),
            base_ids,
            limit,
        )

    # ---------- Tier 3: top-rated backup ----------

    async def _top_rated(self, exclude: set, limit: int) -> List[Product]:
        return dedupe_products(await self.catalog.find_top_rated(exclude, limit), exclude)[:limit]
