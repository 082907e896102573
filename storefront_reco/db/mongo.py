# storefront_reco/db/mongo.py
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from storefront_reco.core.config import get_settings
import certifi

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


def get_client() -> AsyncIOMotorClient:
    assert _client is not None, "Mongo client not initialized"
    return _client


def get_db() -> AsyncIOMotorDatabase:
    assert _db is not None, "Mongo DB not initialized"
    return _db


def _new_client(uri: str) -> AsyncIOMotorClient:
    kwargs = dict(
        uuidRepresentation="standard",
        serverSelectionTimeoutMS=6000,
        connectTimeoutMS=6000,
    )
    if uri.startswith("mongodb+srv://"):
        # SRV implies TLS; ship an explicit CA bundle for slim containers
        kwargs.update(tls=True, tlsCAFile=certifi.where())
    return AsyncIOMotorClient(uri, **kwargs)


async def connect():
    """
    Create the Motor client.
    Do not crash the app if the initial ping fails: Motor connects lazily,
    so requests can succeed once the cluster/network is reachable.
    """
    global _client, _db
    settings = get_settings()

    _client = _new_client(settings.MONGO_URI)
    _db = _client[settings.MONGO_DB]
    try:
        await _client.admin.command("ping")
        logger.info("Mongo connected (ping ok)")
    except PyMongoError as e:
        logger.warning(f"Mongo ping at startup failed, will connect lazily on first query: {e}")


async def disconnect():
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None
