# storefront_reco/domain/repositories/vector_store_repo.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence
import logging

import httpx

from storefront_reco.core.errors import VectorBackendError
from storefront_reco.domain.models.product import StoredVector, VectorMatch, VectorRecord

"""
Note:
    - Adapter over a Pinecone-compatible REST index (data plane only).
    - No business logic here: every call is one request object sent through `execute`.
    - Any transport/auth/service failure (timeouts included) surfaces as VectorBackendError.
"""

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VectorRequest:
    """One call against the index: endpoint path + JSON payload."""
    path: str
    payload: Dict[str, Any] = field(default_factory=dict)


class PineconeVectorStore:
    """
    Vector similarity client for the product namespace.
    The namespace is fixed per instance; every request carries it.
    """

    def __init__(self, client: httpx.AsyncClient, namespace: str = ""):
        self.client = client
        self.namespace = namespace

    @classmethod
    def from_settings(cls, settings) -> "PineconeVectorStore":
        client = httpx.AsyncClient(
            base_url=settings.PINECONE_HOST.rstrip("/"),
            headers={"Api-Key": settings.PINECONE_API_KEY, "Content-Type": "application/json"},
            timeout=settings.pinecone_timeout_s,
        )
        return cls(client, namespace=settings.PINECONE_NAMESPACE)

    async def aclose(self) -> None:
        await self.client.aclose()

    # ---------- Transport ----------
    async def execute(self, request: VectorRequest) -> Dict[str, Any]:
        try:
            resp = await self.client.post(request.path, json=request.payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise VectorBackendError(
                f"Vector store returned HTTP {e.response.status_code} for {request.path}",
                details={"path": request.path, "status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise VectorBackendError(
                f"Vector store request to {request.path} failed: {e!r}",
                details={"path": request.path},
            ) from e
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise VectorBackendError(f"Vector store returned invalid JSON for {request.path}") from e

    # ---------- Reads ----------
    @staticmethod
    def _matches(data: Dict[str, Any]) -> List[VectorMatch]:
        return [
            VectorMatch(id=m["id"], score=float(m.get("score") or 0.0), metadata=m.get("metadata") or {})
            for m in data.get("matches") or []
            if m.get("id")
        ]

    async def query_by_id(self, vector_id: str, top_k: int) -> List[VectorMatch]:
        """Neighbours of a stored vector; empty when `vector_id` has no vector."""
        data = await self.execute(VectorRequest("/query", {
            "id": vector_id,
            "topK": top_k,
            "includeMetadata": True,
            "namespace": self.namespace,
        }))
        return self._matches(data)

    async def query_by_vector(self, vector: Sequence[float], top_k: int) -> List[VectorMatch]:
        data = await self.execute(VectorRequest("/query", {
            "vector": list(vector),
            "topK": top_k,
            "includeMetadata": True,
            "namespace": self.namespace,
        }))
        return self._matches(data)

    async def fetch_vectors(self, ids: Sequence[str]) -> Dict[str, StoredVector]:
        """Batch fetch; ids without a stored vector are simply absent from the result."""
        if not ids:
            return {}
        data = await self.execute(VectorRequest("/vectors/fetch", {
            "ids": list(ids),
            "namespace": self.namespace,
            "includeMetadata": True,
            "includeValues": True,
        }))
        out: Dict[str, StoredVector] = {}
        for vid, node in (data.get("vectors") or {}).items():
            values = node.get("values") or []
            if values:
                out[vid] = StoredVector(id=vid, values=values, metadata=node.get("metadata") or {})
        return out

    async def describe_index_stats(self) -> Dict[str, Any]:
        return await self.execute(VectorRequest("/describe_index_stats", {}))

    async def namespace_vector_count(self) -> int:
        """Number of vectors in our namespace; 0 when stats are unavailable."""
        try:
            stats = await self.describe_index_stats()
        except VectorBackendError as e:
            if e.details.get("status") != 404:
                logger.warning(f"Unable to load vector index stats: {e}")
            return 0
        ns = (stats.get("namespaces") or {}).get(self.namespace) or {}
        return int(ns.get("vectorCount") or 0)

    # ---------- Writes ----------
    async def upsert(self, records: Sequence[VectorRecord]) -> None:
        if not records:
            return
        await self.execute(VectorRequest("/vectors/upsert", {
            "vectors": [r.model_dump(exclude_none=True) for r in records],  # index rejects null metadata
            "namespace": self.namespace,
        }))

    async def delete(self, ids: Sequence[str]) -> None:
        if not ids:
            return
        await self.execute(VectorRequest("/vectors/delete", {"ids": list(ids), "namespace": self.namespace}))

    async def purge_namespace(self) -> None:
        await self.execute(VectorRequest("/vectors/delete", {"deleteAll": True, "namespace": self.namespace}))
