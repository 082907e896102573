# storefront_reco/api/v1/routers/similar.py
from fastapi import APIRouter, Depends, Query
from typing import List
import time
import logging

from storefront_reco.api.deps import recommendation_service
from storefront_reco.api.v1.schemas.reco import GroupSimilarIn, ProductOut
from storefront_reco.domain.services.constants import DEFAULT_SIMILAR_LIMIT, MAX_LIMIT
from storefront_reco.domain.services.recommendation_svc import RecommendationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["similar"])


@router.get("/{product_id}/similar", response_model=List[ProductOut])
async def similar_products(
    product_id: str,
    limit: int = Query(DEFAULT_SIMILAR_LIMIT, ge=1, le=MAX_LIMIT),
    svc: RecommendationService = Depends(recommendation_service),
):
    """
    Products similar to one product.
    Tiers: vector neighbours (lazy resync on miss) -> deterministic scoring -> top rated -> the product itself.
    """
    logger.info("Request: similar_products product_id=%s, limit=%s", product_id, limit)
    start_time = time.perf_counter()

    items = await svc.similar(product_id, limit)

    logger.info(
        "Response: similar_products product_id=%s, count=%s, elapsed_time=%.4fs",
        product_id, len(items), time.perf_counter() - start_time,
    )
    return [p.public() for p in items]


@router.post("/similar", response_model=List[ProductOut])
async def group_similar_products(
    body: GroupSimilarIn,
    svc: RecommendationService = Depends(recommendation_service),
):
    """Products similar to a group of products (e.g. a cart), via the centroid of their vectors."""
    logger.info("Request: group_similar_products ids=%s, limit=%s", body.product_ids, body.limit)
    start_time = time.perf_counter()

    items = await svc.group_similar(body.product_ids, body.limit)

    logger.info(
        "Response: group_similar_products count=%s, elapsed_time=%.4fs",
        len(items), time.perf_counter() - start_time,
    )
    return [p.public() for p in items]
