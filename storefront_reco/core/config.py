from functools import lru_cache
from typing import Literal, Optional
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "StorefrontReco"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Mongo
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "storefront"
    MONGO_PRODUCTS_COLLECTION: str = "products"

    # Redis (optional, embedding cache only)
    REDIS_URL: Optional[str] = None

    # Embedding cache config
    embedding_cache_ttl: int = 7 * 24 * 3600    # 7 days
    embedding_cache_prefix: str = "emb"         # redis key namespace

    # OpenAI
    OPENAI_API_KEY: Optional[str] = None
    openai_timeout_s: int = 30  # seconds
    OPENAI_EMBEDDING_MODEL: str = "text-embedding-3-small"

    # Pinecone (vector store); both key and host are required to enable it
    PINECONE_API_KEY: Optional[str] = None
    PINECONE_HOST: Optional[str] = None
    PINECONE_NAMESPACE: str = ""
    pinecone_timeout_s: float = 20.0
    PINECONE_BATCH_SIZE: int = 25
    PINECONE_PURGE_ON_SYNC: bool = True

    # Fallback recommendation
    candidate_pool_limit: int = 150

    # API
    api_prefix: str = "/api"
    ALLOWED_ORIGINS: str = ""  # CSV

    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

    @property
    def pinecone_enabled(self) -> bool:
        return bool(self.PINECONE_API_KEY and self.PINECONE_HOST)

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
