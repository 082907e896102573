# storefront_reco/core/errors.py
"""
Error taxonomy of the recommendation engine.

Backend errors (vector store, embeddings, integrity) are recoverable: the
orchestrator converts them into "this tier produced nothing". Only the
input-validation errors are meant to reach API callers.
"""
from typing import Any, Dict, Optional, Sequence


class RecoError(Exception):
    """Base exception for recommendation errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class VectorBackendError(RecoError):
    """Transport, auth or service failure from the vector store (timeouts included)."""
    status_code = 502


class EmbeddingError(RecoError):
    """Embedding generation failed (quota, auth, service, empty response)."""
    status_code = 502


class DataIntegrityError(RecoError):
    """A stored vector does not match the namespace dimensionality."""

    def __init__(self, vector_id: str, expected_dim: int, actual_dim: int):
        super().__init__(
            f"Vector '{vector_id}' has dimension {actual_dim}, expected {expected_dim}",
            details={"vector_id": vector_id, "expected_dim": expected_dim, "actual_dim": actual_dim},
        )


class ServiceNotConfiguredError(RecoError):
    """An optional backend (vector store, embeddings) is required but not configured."""
    status_code = 503

    def __init__(self, component: str, settings_keys: Sequence[str] = ()):
        super().__init__(
            f"{component} is not configured",
            details={"component": component, "settings": list(settings_keys)},
        )


class NotFoundError(RecoError):
    """Raised when a product id does not resolve to a catalog entry."""
    status_code = 404

    def __init__(self, product_id: str):
        super().__init__(f"Product '{product_id}' not found", details={"product_id": product_id})


class NoProductsFoundError(RecoError):
    """Raised when none of the supplied product ids resolve."""
    status_code = 404

    def __init__(self, product_ids: Sequence[str]):
        super().__init__(
            "None of the supplied products were found",
            details={"product_ids": list(product_ids)},
        )
