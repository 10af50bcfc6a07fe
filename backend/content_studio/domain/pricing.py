"""Credit cost and generation budget policy.

Pure domain functions keyed by the request's ``length`` tag. No I/O, no side
effects, fully deterministic.

Cost (billing) and generation budget (provider output tokens) are kept in
separate tables so pricing can change without touching generation size,
and the other way round.
"""

# Credits charged per length tier
CREDIT_COSTS: dict[str, int] = {
    "short": 1,
    "medium": 2,
    "long": 3,
    "extended": 4,
}
DEFAULT_CREDIT_COST: int = 1

# Max output tokens requested from the provider per length tier
GENERATION_BUDGETS: dict[str, int] = {
    "short": 300,
    "medium": 600,
    "long": 1200,
    "extended": 2000,
}
DEFAULT_GENERATION_BUDGET: int = 600

# Human-readable word ranges (prompt text and pricing display only)
LENGTH_WORD_RANGES: dict[str, str] = {
    "short": "100-200 words",
    "medium": "300-500 words",
    "long": "600-1000 words",
    "extended": "1000+ words",
}
DEFAULT_WORD_RANGE: str = LENGTH_WORD_RANGES["medium"]

LENGTH_LABELS: dict[str, str] = {
    "short": "Short",
    "medium": "Medium",
    "long": "Long",
    "extended": "Extended",
}


def credit_cost(length: str) -> int:
    """Return the integer credit cost for a length tag.

    Unrecognized tags fall back to DEFAULT_CREDIT_COST rather than erroring.
    """
    return CREDIT_COSTS.get(length, DEFAULT_CREDIT_COST)


def generation_budget(length: str) -> int:
    """Return the provider max-output-token budget for a length tag.

    Unrecognized tags fall back to DEFAULT_GENERATION_BUDGET.
    """
    return GENERATION_BUDGETS.get(length, DEFAULT_GENERATION_BUDGET)


def word_range(length: str) -> str:
    """Return the display word range for a length tag (medium range when unmapped)."""
    return LENGTH_WORD_RANGES.get(length, DEFAULT_WORD_RANGE)


def pricing_table() -> list[dict]:
    """Return every known length tier with its cost, budget and word range."""
    return [
        {
            "length": length,
            "label": LENGTH_LABELS[length],
            "cost": CREDIT_COSTS[length],
            "word_range": LENGTH_WORD_RANGES[length],
        }
        for length in CREDIT_COSTS
    ]
