# storefront_reco/api/v1/routers/health.py
import time
from fastapi import APIRouter, Request
from pymongo.errors import PyMongoError
from redis.exceptions import RedisError
from storefront_reco.core.config import get_settings
from storefront_reco.core.errors import VectorBackendError
from storefront_reco.db import mongo
from storefront_reco.db.redis import get_redis  # returns Redis instance or None

router = APIRouter()
START_TIME = time.time()


@router.get("/health")
async def health(request: Request):
    """
    Tolerant health check:
    - ping Mongo via Motor
    - Redis / vector store reported 'skipped' when not configured
    - basic app info + global status
    """
    settings = get_settings()
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "version": settings.GIT_SHA,
        "uptime_seconds": int(time.time() - START_TIME),
    }

    # --- Mongo ---
    try:
        db = mongo.get_db()
        await db.command("ping")
        checks["mongodb"] = "ok"
    except (AssertionError, PyMongoError) as e:
        checks["mongodb"] = f"error: {e}"

    # --- Redis (tolerant) ---
    try:
        r = get_redis()
        if r:
            await r.ping()
            checks["redis"] = "ok"
        else:
            checks["redis"] = "skipped"
    except RedisError as e:
        checks["redis"] = f"error: {e}"

    # --- Vector store (tolerant) ---
    store = getattr(request.app.state, "vector_store", None)
    if store is None:
        checks["vector_store"] = "skipped"
    else:
        try:
            await store.describe_index_stats()
            checks["vector_store"] = "ok"
        except VectorBackendError as e:
            checks["vector_store"] = f"error: {e}"

    # --- OpenAI: key presence only
    checks["openai_api_key_set"] = bool(settings.OPENAI_API_KEY)

    # Only Mongo is fatal: every other backend has a fallback tier
    status = "ok" if checks["mongodb"] == "ok" else "error"

    return {"status": status, "checks": checks, "timestamp": int(time.time())}
