# storefront_reco/core/lifespan.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from storefront_reco.db import mongo, redis as r
from storefront_reco.core.config import get_settings
from storefront_reco.domain.repositories.vector_store_repo import PineconeVectorStore
from storefront_reco.domain.services.embedding_svc import OpenAIEmbeddingProvider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    # Mongo is mandatory: the catalog lives there
    await mongo.connect()

    # Redis optional (embedding cache)
    await r.connect()

    # Vector store optional: without it every request starts at the fallback tier
    app.state.vector_store = None
    if settings.pinecone_enabled:
        app.state.vector_store = PineconeVectorStore.from_settings(settings)
        logger.info(f"Vector store configured host={settings.PINECONE_HOST} namespace='{settings.PINECONE_NAMESPACE}'")
    else:
        logger.warning("PINECONE_API_KEY/PINECONE_HOST not set, vector recommendations disabled")

    # Embeddings optional: without them lazy resync is skipped
    app.state.embedder = None
    if settings.OPENAI_API_KEY:
        app.state.embedder = OpenAIEmbeddingProvider.from_settings(settings, redis=r.get_redis())
    else:
        logger.warning("OPENAI_API_KEY not set, lazy vector resync disabled")

    # Application runs
    yield

    # --- Shutdown ---
    if app.state.vector_store is not None:
        await app.state.vector_store.aclose()
    await r.disconnect()
    await mongo.disconnect()
    logger.info("Connections closed")
