"""Tests for the HTTP surface, with collaborators swapped through dependency overrides."""

import pytest
from fastapi.testclient import TestClient

from storefront_reco.api.deps import catalog_dep, recommendation_service, vector_sync_service
from storefront_reco.domain.services.recommendation_svc import RecommendationService
from storefront_reco.domain.services.vector_sync_svc import VectorSyncService
from storefront_reco.main import app


@pytest.fixture
def shop(catalog_factory, product_factory):
    return catalog_factory([
        product_factory("p", name="Trail Runner", brand="Acme", price=80, rating=4.5, numReviews=12),
        product_factory("a", name="Trail Runner GTX", brand="Acme", price=95),
        product_factory("b", name="Road Racer", price=150),
        product_factory("d", name="Wool Sock", category="Socks", price=12),
    ])


@pytest.fixture
def client(shop, vectors, embedder):
    app.dependency_overrides[recommendation_service] = lambda: RecommendationService(shop, vectors, embedder)
    app.dependency_overrides[vector_sync_service] = lambda: VectorSyncService(shop, vectors, embedder)
    app.dependency_overrides[catalog_dep] = lambda: shop
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_similar_returns_public_projection(client, vectors, match_factory):
    vectors.by_id_script = [[match_factory("p"), match_factory("b"), match_factory("a")]]

    response = client.get("/api/products/p/similar", params={"limit": 5})

    assert response.status_code == 200
    data = response.json()
    assert [item["id"] for item in data] == ["b", "a"]
    assert set(data[0]) == {
        "id", "name", "description", "price", "category", "image",
        "brand", "stock", "rating", "numReviews", "createdAt",
    }


def test_similar_falls_back_when_vector_store_fails(client, vectors):
    vectors.fail = {"query_by_id", "upsert"}
    response = client.get("/api/products/p/similar", params={"limit": 2})
    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == ["a", "b"]


def test_similar_unknown_product_is_404(client):
    response = client.get("/api/products/missing/similar")
    assert response.status_code == 404
    assert response.json()["details"] == {"product_id": "missing"}


def test_similar_validates_limit(client):
    assert client.get("/api/products/p/similar", params={"limit": 0}).status_code == 422
    assert client.get("/api/products/p/similar", params={"limit": 51}).status_code == 422


def test_group_similar(client, vectors, match_factory):
    vectors.store("p", [1.0, 0.0])
    vectors.store("d", [0.0, 1.0])
    vectors.vector_matches = [match_factory("d"), match_factory("a"), match_factory("b")]

    response = client.post("/api/products/similar", json={"productIds": ["p", "d"], "limit": 1})

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == ["a"]
    assert vectors.queries_by_vector[0][0] == [0.5, 0.5]


def test_group_similar_unknown_products_is_404(client):
    response = client.post("/api/products/similar", json={"productIds": ["x", "y"]})
    assert response.status_code == 404


def test_group_similar_requires_ids(client):
    assert client.post("/api/products/similar", json={"productIds": []}).status_code == 422


def test_sync_vectors(client, vectors):
    response = client.post("/api/products/vectors/sync")
    assert response.status_code == 200
    body = response.json()
    assert body["synced"] == 4
    assert body["total"] == 4
    assert "processing_time_ms" in body
    assert set(vectors.records) == {"p", "a", "b", "d"}


def test_remove_vector_without_vector_store_is_503(client):
    response = client.delete("/api/products/p/vector")
    assert response.status_code == 503
    assert response.json()["details"]["component"] == "Vector store"
