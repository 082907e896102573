"""Tests for the deterministic similarity scorer."""

import itertools
import math

import pytest

from storefront_reco.domain.services.scoring import (
    ScoringWeights,
    jaccard,
    price_affinity,
    similarity_score,
    tokenize,
)


def test_tokenize_splits_on_non_alphanumerics_and_casefolds():
    assert tokenize("Trail-Runner  PRO/2, (men's)") == {"trail", "runner", "pro", "2", "men", "s"}


def test_tokenize_keeps_accented_words_whole():
    assert tokenize("Crème brûlée Café") == {"crème", "brûlée", "café"}
    assert tokenize("Ångström_meter") == {"ångström", "meter"}


def test_accented_names_do_not_overlap_on_fragments():
    assert jaccard(tokenize("Crème Brûlée"), tokenize("Père Noël")) == 0.0


def test_tokenize_empty_inputs():
    assert tokenize("") == frozenset()
    assert tokenize(None) == frozenset()
    assert tokenize("--- !!") == frozenset()


@pytest.mark.parametrize(
    "a, b",
    [
        ({"a"}, {"a"}),
        ({"a", "b"}, {"b", "c"}),
        ({"a"}, {"z"}),
        ({"x", "y", "z"}, {"x"}),
    ],
)
def test_jaccard_bounds(a, b):
    value = jaccard(a, b)
    assert 0.0 <= value <= 1.0
    assert value == jaccard(b, a)


def test_jaccard_identity_and_empty_sets():
    assert jaccard({"shoe", "red"}, {"shoe", "red"}) == 1.0
    assert jaccard(set(), {"shoe"}) == 0.0
    assert jaccard({"shoe"}, set()) == 0.0
    assert jaccard(set(), set()) == 0.0


def test_jaccard_value():
    assert jaccard({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)


@pytest.mark.parametrize("price", [0.01, 1, 19.99, 250, 10_000])
def test_price_affinity_equal_prices_is_one(price):
    assert price_affinity(price, price) == 1.0


@pytest.mark.parametrize("a, b", [(10, 20), (20, 10), (0, 500), (0.5, 0.7), (99, 100)])
def test_price_affinity_bounds_and_symmetry(a, b):
    value = price_affinity(a, b)
    assert 0.0 <= value <= 1.0
    assert value == price_affinity(b, a)


def test_price_affinity_values():
    assert price_affinity(50, 100) == pytest.approx(0.5)
    assert price_affinity(0, 0) == 1.0
    # small prices are compared against a floor of 1
    assert price_affinity(0, 0.5) == pytest.approx(0.5)


@pytest.mark.parametrize("bad", [None, "12", float("nan"), True])
def test_price_affinity_non_numeric_is_zero(bad):
    assert price_affinity(bad, 10) == 0.0
    assert price_affinity(10, bad) == 0.0


def test_score_all_components(product_factory):
    a = product_factory("a", name="Red Shoe", description="comfy red shoe", brand="Acme", price=40)
    b = product_factory("b", name="Red Shoe", description="comfy red shoe", brand="Acme", price=40)
    # 3 category + 2 brand + 3 name + 1 description + 2 price
    assert similarity_score(a, b) == pytest.approx(11.0)


def test_score_requires_non_empty_category_and_brand(product_factory):
    a = product_factory("a", name="x", description="", category="", brand=None, price=10)
    b = product_factory("b", name="y", description="", category="", brand=None, price=10)
    assert similarity_score(a, b) == pytest.approx(2.0)  # price only


def test_score_custom_weights(product_factory):
    a = product_factory("a", name="x", description="", price=10)
    b = product_factory("b", name="y", description="", price=10)
    weights = ScoringWeights(category=1.0, brand=0.0, name=0.0, description=0.0, price=0.0)
    assert similarity_score(a, b, weights) == 1.0


def test_score_is_symmetric(product_factory):
    products = [
        product_factory("a", name="Trail Runner", description="light trail shoe", brand="Acme", price=80),
        product_factory("b", name="Road Runner", description="road shoe", brand="Acme", price=120),
        product_factory("c", name="Wool Sock", description="warm", category="Socks", price=0),
        product_factory("d", name="Trail Sock", description="light sock for trail", category="Socks",
                        brand="Peak", price=12.5),
        product_factory("e", name="", description="", category="", price=3),
    ]
    for x, y in itertools.permutations(products, 2):
        assert similarity_score(x, y) == similarity_score(y, x)
        assert math.isfinite(similarity_score(x, y))
