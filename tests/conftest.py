"""Shared fixtures: in-memory stand-ins for the catalog, vector store and embedding provider."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List

import pytest

from storefront_reco.core.errors import EmbeddingError, VectorBackendError
from storefront_reco.domain.models.product import Product, StoredVector, VectorMatch

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_product(pid: str, **fields) -> Product:
    data = {
        "id": pid,
        "name": f"Product {pid}",
        "description": f"Description of {pid}",
        "price": 10.0,
        "category": "Shoes",
        "image": f"https://img.example.com/{pid}.jpg",
        "brand": None,
        "stock": 5,
        "rating": 3.0,
        "numReviews": 1,
        "createdAt": BASE_TIME,
    }
    data.update(fields)
    return Product.model_validate(data)


class InMemoryCatalog:
    """Catalog reader over a list of products, keeping insertion order."""

    def __init__(self, products=()):
        self.products: Dict[str, Product] = {p.id: p for p in products}
        self.calls: List[tuple] = []

    async def get_by_id(self, product_id):
        self.calls.append(("get_by_id", product_id))
        return self.products.get(product_id)

    async def find_by_ids(self, ids):
        self.calls.append(("find_by_ids", list(ids)))
        wanted = set(ids)
        # reverse order on purpose: callers must restore their own ranking
        return [p for p in reversed(list(self.products.values())) if p.id in wanted]

    async def find_by_category(self, categories, exclude_ids, limit):
        self.calls.append(("find_by_category", list(categories), set(exclude_ids), limit))
        exclude = set(exclude_ids)
        out = [
            p for p in self.products.values()
            if p.id not in exclude and (not categories or p.category in categories)
        ]
        return out[:limit]

    async def find_top_rated(self, exclude_ids, limit):
        self.calls.append(("find_top_rated", set(exclude_ids), limit))
        exclude = set(exclude_ids)
        ranked = sorted(
            (p for p in self.products.values() if p.id not in exclude),
            key=lambda p: (p.rating, p.num_reviews, p.created_at),
            reverse=True,
        )
        return ranked[:limit]

    async def find_all(self):
        return list(self.products.values())

    async def set_vector_id(self, product_id, vector_id):
        self.calls.append(("set_vector_id", product_id, vector_id))
        p = self.products[product_id]
        self.products[product_id] = p.model_copy(update={"external_vector_id": vector_id})

    async def set_vector_ids(self, pairs):
        pairs = list(pairs)
        for pid, vid in pairs:
            await self.set_vector_id(pid, vid)
        return len(pairs)

    def called(self, name):
        return [c for c in self.calls if c[0] == name]


class FakeVectorStore:
    """
    Scriptable vector client.
    - `by_id_script`: responses consumed by successive query_by_id calls (a list of
      matches, or an exception instance to raise); [] once exhausted.
    - `vector_matches`: what query_by_vector returns.
    - `fail`: operation names that raise VectorBackendError.
    """

    def __init__(self):
        self.records: Dict[str, StoredVector] = {}
        self.by_id_script: list = []
        self.vector_matches: List[VectorMatch] = []
        self.fail: set = set()
        self.queries_by_id: List[tuple] = []
        self.queries_by_vector: List[tuple] = []
        self.upserts: List[list] = []
        self.deleted: List[str] = []
        self.purged = 0

    def _maybe_fail(self, op):
        if op in self.fail:
            raise VectorBackendError(f"{op} unavailable")

    async def query_by_id(self, vector_id, top_k):
        self.queries_by_id.append((vector_id, top_k))
        self._maybe_fail("query_by_id")
        if self.by_id_script:
            nxt = self.by_id_script.pop(0)
            if isinstance(nxt, Exception):
                raise nxt
            return nxt
        return []

    async def query_by_vector(self, vector, top_k):
        self.queries_by_vector.append((list(vector), top_k))
        self._maybe_fail("query_by_vector")
        return list(self.vector_matches)

    async def fetch_vectors(self, ids):
        self._maybe_fail("fetch_vectors")
        return {i: self.records[i] for i in ids if i in self.records}

    async def upsert(self, records):
        self._maybe_fail("upsert")
        self.upserts.append(list(records))
        for r in records:
            self.records[r.id] = StoredVector(id=r.id, values=r.values, metadata=r.metadata.model_dump())

    async def delete(self, ids):
        self._maybe_fail("delete")
        for i in ids:
            self.deleted.append(i)
            self.records.pop(i, None)

    async def namespace_vector_count(self):
        return len(self.records)

    async def purge_namespace(self):
        self._maybe_fail("purge_namespace")
        self.purged += 1
        self.records.clear()

    def store(self, vector_id, values, product_id=None):
        self.records[vector_id] = StoredVector(
            id=vector_id, values=list(values), metadata={"productId": product_id or vector_id}
        )


class FakeEmbedder:
    def __init__(self, vectors=None, default=(0.1, 0.2), fail=False):
        self.vectors = vectors or {}
        self.default = list(default)
        self.fail = fail
        self.texts: List[str] = []

    async def embed(self, text):
        self.texts.append(text)
        if self.fail:
            raise EmbeddingError("quota exceeded")
        return list(self.vectors.get(text, self.default))


def match(pid, score=0.9, vector_id=None):
    return VectorMatch(id=vector_id or pid, score=score, metadata={"productId": pid})


@pytest.fixture
def run():
    return asyncio.run


@pytest.fixture
def catalog():
    return InMemoryCatalog()


@pytest.fixture
def vectors():
    return FakeVectorStore()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def match_factory():
    return match


@pytest.fixture
def catalog_factory():
    return InMemoryCatalog


@pytest.fixture
def embedder_factory():
    return FakeEmbedder


@pytest.fixture
def later():
    """createdAt values increasing with n."""
    return lambda n: BASE_TIME + timedelta(days=n)
