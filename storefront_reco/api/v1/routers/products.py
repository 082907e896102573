# storefront_reco/api/v1/routers/products.py

from fastapi import APIRouter, Depends, Query
import time

from storefront_reco.api.deps import vector_removal_service, vector_sync_service
from storefront_reco.api.v1.schemas.reco import SyncReportOut, VectorRemovedOut
from storefront_reco.domain.services.vector_sync_svc import VectorSyncService

import logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


@router.post("/vectors/sync", response_model=SyncReportOut, summary="Embed the whole catalog into the vector store")
async def sync_vectors(
    force: bool = Query(False, description="Rebuild even if the namespace already holds one vector per product"),
    svc: VectorSyncService = Depends(vector_sync_service),
):
    """
    Rebuilds the product namespace in batches. Skipped when the namespace is already
    populated (one vector per product) unless `force` is set.
    """
    start = time.perf_counter()
    logger.info(f"[vector_sync] start force={force}")
    report = await svc.sync_catalog(force=force)
    return {**report.model_dump(), "processing_time_ms": (time.perf_counter() - start) * 1000.0}


@router.delete("/{product_id}/vector", response_model=VectorRemovedOut, summary="Remove a product from the vector store")
async def remove_vector(
    product_id: str,
    svc: VectorSyncService = Depends(vector_removal_service),
):
    removed = await svc.remove(product_id)
    return {"product_id": product_id, "removed": removed}
