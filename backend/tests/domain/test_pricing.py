"""Tests for the credit cost / generation budget policy."""

import pytest

from content_studio.domain.pricing import (
    CREDIT_COSTS,
    DEFAULT_CREDIT_COST,
    DEFAULT_GENERATION_BUDGET,
    credit_cost,
    generation_budget,
    pricing_table,
    word_range,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "length,expected",
    [("short", 1), ("medium", 2), ("long", 3), ("extended", 4)],
)
def test_credit_cost_known_tiers(length, expected):
    assert credit_cost(length) == expected


@pytest.mark.parametrize(
    "length,expected",
    [("short", 300), ("medium", 600), ("long", 1200), ("extended", 2000)],
)
def test_generation_budget_known_tiers(length, expected):
    assert generation_budget(length) == expected


@pytest.mark.parametrize("length", ["huge", "", "MEDIUM", "x" * 200])
def test_unmapped_length_falls_back_to_defaults(length):
    """Unknown tags never raise: cost 1, budget 600, medium word range."""
    assert credit_cost(length) == DEFAULT_CREDIT_COST == 1
    assert generation_budget(length) == DEFAULT_GENERATION_BUDGET == 600
    assert word_range(length) == "300-500 words"


def test_cost_and_budget_are_independent_tables():
    """Every billed tier has a budget, but the two tables do not derive from each other."""
    for length in CREDIT_COSTS:
        assert credit_cost(length) >= 1
        assert generation_budget(length) > credit_cost(length)


def test_pricing_table_lists_every_tier_in_order():
    table = pricing_table()

    assert [tier["length"] for tier in table] == ["short", "medium", "long", "extended"]
    assert table[0] == {
        "length": "short",
        "label": "Short",
        "cost": 1,
        "word_range": "100-200 words",
    }
    assert table[-1]["word_range"] == "1000+ words"
