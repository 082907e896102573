from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from storefront_reco.core.config import get_settings
from storefront_reco.core.errors import RecoError
from storefront_reco.core.lifespan import lifespan
from storefront_reco.core.logging import configure_logging
from storefront_reco.api.v1.routers.health import router as health_router
from storefront_reco.api.v1.routers.products import router as products_router
from storefront_reco.api.v1.routers.similar import router as similar_router

import logging

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. "https://shop.example.com,https://www.shop.example.com"
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins or ["http://localhost:3000"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)

# ------- Errors -------
@app.exception_handler(RecoError)
async def reco_error_handler(request: Request, exc: RecoError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message, "details": exc.details})

# ------- Routes -------
app.include_router(health_router)
app.include_router(similar_router, prefix=settings.api_prefix)    # similar + group similar
app.include_router(products_router, prefix=settings.api_prefix)   # vector maintenance
