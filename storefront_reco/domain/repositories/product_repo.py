# storefront_reco/domain/repositories/product_repo.py

from __future__ import annotations
from typing import Any, Iterable, List, Optional
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, UpdateOne
from storefront_reco.domain.models.product import Product

# Backup ordering when nothing else can be recommended
TOP_RATED_SORT = [("rating", DESCENDING), ("numReviews", DESCENDING), ("createdAt", DESCENDING)]


def _to_object_id(value: str) -> Any:
    """Storefront ids are ObjectId hex strings; anything else is matched as-is."""
    return ObjectId(value) if ObjectId.is_valid(value) else value


def _ids_filter(ids: Iterable[str]) -> dict:
    return {"$in": [_to_object_id(str(i)) for i in ids]}


class ProductRepo:
    """
    Catalog reader backed by the 'products' collection.
    Also records the external vector id of a product once it is synced.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col = db[collection_name]

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        doc = await self.col.find_one({"_id": _to_object_id(product_id)})
        return Product.from_document(doc) if doc else None

    async def find_by_ids(self, ids: List[str]) -> List[Product]:
        if not ids:
            return []
        cursor = self.col.find({"_id": _ids_filter(ids)})
        return [Product.from_document(doc) async for doc in cursor]

    async def find_by_category(self, categories: List[str], exclude_ids: Iterable[str], limit: int) -> List[Product]:
        """Products in any of `categories` (any category if empty), minus `exclude_ids`."""
        query: dict[str, Any] = {}
        exclude = list(exclude_ids)
        if exclude:
            query["_id"] = {"$nin": [_to_object_id(str(i)) for i in exclude]}
        if categories:
            query["category"] = {"$in": list(categories)}
        cursor = self.col.find(query).limit(limit)
        return [Product.from_document(doc) async for doc in cursor]

    async def find_top_rated(self, exclude_ids: Iterable[str], limit: int) -> List[Product]:
        exclude = list(exclude_ids)
        query = {"_id": {"$nin": [_to_object_id(str(i)) for i in exclude]}} if exclude else {}
        cursor = self.col.find(query).sort(TOP_RATED_SORT).limit(limit)
        return [Product.from_document(doc) async for doc in cursor]

    async def find_all(self) -> List[Product]:
        return [Product.from_document(doc) async for doc in self.col.find({})]

    # ----- Vector id bookkeeping --------------------------------------------

    async def set_vector_id(self, product_id: str, vector_id: str) -> None:
        await self.col.update_one(
            {"_id": _to_object_id(product_id)},
            {"$set": {"externalVectorId": vector_id}},
            upsert=False,  # product must already exist
        )

    async def set_vector_ids(self, pairs: Iterable[tuple[str, str]]) -> int:
        ops = [
            UpdateOne({"_id": _to_object_id(pid)}, {"$set": {"externalVectorId": vid}}, upsert=False)
            for pid, vid in pairs
        ]
        if not ops:
            return 0
        result = await self.col.bulk_write(ops, ordered=False)
        return result.modified_count
