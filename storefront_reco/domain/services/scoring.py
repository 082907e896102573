# storefront_reco/domain/services/scoring.py
"""
Deterministic product-to-product similarity used when the vector path yields nothing.

score = category bonus + brand bonus
      + name token Jaccard + description token Jaccard
      + price affinity
each term multiplied by its weight. Every term is symmetric, so score(a, b) == score(b, a).
"""
from __future__ import annotations
from dataclasses import dataclass
from numbers import Real
from typing import AbstractSet, Any, Optional
import math
import re

from storefront_reco.domain.models.product import Product
from storefront_reco.domain.services.constants import (
    BRAND_MATCH_WEIGHT,
    CATEGORY_MATCH_WEIGHT,
    DESCRIPTION_JACCARD_WEIGHT,
    NAME_JACCARD_WEIGHT,
    PRICE_AFFINITY_WEIGHT,
)

_NON_ALNUM = re.compile(r"[\W_]+")


@dataclass(frozen=True)
class ScoringWeights:
    category: float = CATEGORY_MATCH_WEIGHT
    brand: float = BRAND_MATCH_WEIGHT
    name: float = NAME_JACCARD_WEIGHT
    description: float = DESCRIPTION_JACCARD_WEIGHT
    price: float = PRICE_AFFINITY_WEIGHT


DEFAULT_WEIGHTS = ScoringWeights()


def tokenize(text: Optional[str]) -> frozenset[str]:
    """Lower-cased alphanumeric tokens of `text`."""
    if not text:
        return frozenset()
    return frozenset(t for t in _NON_ALNUM.split(text.casefold()) if t)


def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def _as_price(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def price_affinity(a: Any, b: Any) -> float:
    """1 for equal prices, decreasing to 0 as the relative gap reaches 100%."""
    pa, pb = _as_price(a), _as_price(b)
    if pa is None or pb is None:
        return 0.0
    gap = abs(pa - pb) / max(pa, pb, 1.0)
    return 1.0 - min(gap, 1.0)


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a == b


def similarity_score(base: Product, candidate: Product, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    score = 0.0
    if _same(base.category, candidate.category):
        score += weights.category
    if _same(base.brand, candidate.brand):
        score += weights.brand
    score += weights.name * jaccard(tokenize(base.name), tokenize(candidate.name))
    score += weights.description * jaccard(tokenize(base.description), tokenize(candidate.description))
    score += weights.price * price_affinity(base.price, candidate.price)
    return score
