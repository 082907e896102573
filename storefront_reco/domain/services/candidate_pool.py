# storefront_reco/domain/services/candidate_pool.py
import logging
from typing import Iterable, List, Optional

from storefront_reco.domain.models.product import Product
from storefront_reco.domain.services.constants import CANDIDATE_POOL_LIMIT, MIN_POOL_SIZE

logger = logging.getLogger(__name__)


class CandidatePoolBuilder:
    """
    Bounded working set for fallback scoring.

    A category-filtered pool that comes back thinner than `min_size` is widened with an
    unfiltered query (same exclusions, same cap). Primary entries come first and win on
    duplicate ids. Without a category constraint the primary result is final.
    """

    def __init__(self, catalog, limit: int = CANDIDATE_POOL_LIMIT, min_size: int = MIN_POOL_SIZE):
        self.catalog = catalog
        self.limit = limit
        self.min_size = min_size

    async def build(self, exclude_ids: Iterable[str], categories: Optional[Iterable[str]] = None) -> List[Product]:
        exclude = set(exclude_ids)
        cats = sorted({c for c in (categories or []) if c})

        primary = await self.catalog.find_by_category(cats, exclude, self.limit)
        pool = dedupe_products(primary)

        if cats and len(pool) < self.min_size:
            logger.debug(f"Candidate pool for categories={cats} has {len(pool)} products; widening")
            widened = await self.catalog.find_by_category([], exclude, self.limit)
            pool = dedupe_products(pool + widened)

        return pool[: self.limit]


def dedupe_products(products: Iterable[Product], exclude: Iterable[str] = ()) -> List[Product]:
    """First occurrence of each id wins; ids in `exclude` are dropped."""
    seen = set(exclude)
    out: List[Product] = []
    for p in products:
        if p.id not in seen:
            seen.add(p.id)
            out.append(p)
    return out
