# storefront_reco/api/deps.py
from fastapi import Depends, Request
from storefront_reco.core.config import get_settings
from storefront_reco.core.errors import ServiceNotConfiguredError
from storefront_reco.db.mongo import get_db
from storefront_reco.domain.repositories.product_repo import ProductRepo
from storefront_reco.domain.services.candidate_pool import CandidatePoolBuilder
from storefront_reco.domain.services.recommendation_svc import RecommendationService
from storefront_reco.domain.services.vector_sync_svc import VectorSyncService

# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    return db

def catalog_dep(db = Depends(mongo_db)) -> ProductRepo:
    return ProductRepo(db, collection_name=get_settings().MONGO_PRODUCTS_COLLECTION)

# Optional backends built by the lifespan; None when not configured
def vector_store_dep(request: Request):
    return getattr(request.app.state, "vector_store", None)

def embedder_dep(request: Request):
    return getattr(request.app.state, "embedder", None)

def recommendation_service(
    catalog = Depends(catalog_dep),
    vectors = Depends(vector_store_dep),
    embedder = Depends(embedder_dep),
) -> RecommendationService:
    settings = get_settings()
    return RecommendationService(
        catalog,
        vectors,
        embedder,
        pool_builder=CandidatePoolBuilder(catalog, limit=settings.candidate_pool_limit),
    )

def vector_sync_service(
    catalog = Depends(catalog_dep),
    vectors = Depends(vector_store_dep),
    embedder = Depends(embedder_dep),
) -> VectorSyncService:
    if vectors is None:
        raise ServiceNotConfiguredError("Vector store", ("PINECONE_API_KEY", "PINECONE_HOST"))
    if embedder is None:
        raise ServiceNotConfiguredError("Embedding provider", ("OPENAI_API_KEY",))
    settings = get_settings()
    return VectorSyncService(
        catalog,
        vectors,
        embedder,
        batch_size=settings.PINECONE_BATCH_SIZE,
        purge_on_sync=settings.PINECONE_PURGE_ON_SYNC,
    )

def vector_removal_service(
    catalog = Depends(catalog_dep),
    vectors = Depends(vector_store_dep),
) -> VectorSyncService:
    # deleting a vector needs no embeddings
    if vectors is None:
        raise ServiceNotConfiguredError("Vector store", ("PINECONE_API_KEY", "PINECONE_HOST"))
    return VectorSyncService(catalog, vectors, None)
