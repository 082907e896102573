# storefront_reco/domain/services/vector_math.py
import logging
from collections import Counter
from typing import List, Sequence

from storefront_reco.core.errors import DataIntegrityError
from storefront_reco.domain.models.product import StoredVector

logger = logging.getLogger(__name__)


def check_dimension(vector: StoredVector, expected_dim: int) -> None:
    if len(vector.values) != expected_dim:
        raise DataIntegrityError(vector.id, expected_dim, len(vector.values))


def consistent_vectors(vectors: Sequence[StoredVector]) -> List[StoredVector]:
    """
    Keep the vectors sharing the most common dimension (ties go to the earliest seen).
    Mismatches are integrity errors: logged and skipped, never padded or truncated.
    """
    if not vectors:
        return []
    expected, _ = Counter(len(v.values) for v in vectors).most_common(1)[0]
    kept: List[StoredVector] = []
    for v in vectors:
        try:
            check_dimension(v, expected)
        except DataIntegrityError as e:
            logger.warning(f"Skipping vector: {e.message}")
            continue
        kept.append(v)
    return kept


def centroid(vectors: Sequence[Sequence[float]]) -> List[float]:
    """Dimension-wise arithmetic mean. All vectors must share one dimension."""
    if not vectors:
        raise ValueError("centroid of an empty set of vectors")
    dim = len(vectors[0])
    sums = [0.0] * dim
    for i, vec in enumerate(vectors):
        if len(vec) != dim:
            raise DataIntegrityError(f"#{i}", dim, len(vec))
        for d, value in enumerate(vec):
            sums[d] += value
    n = float(len(vectors))
    return [s / n for s in sums]
