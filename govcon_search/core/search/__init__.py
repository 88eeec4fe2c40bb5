"""
Search Module
Strategy selection, relevance scoring and post-filtering for contract search
"""
from govcon_search.core.search.text import (
    normalize,
    extract_phrases,
    parse_or_terms
)
from govcon_search.core.search.strategy import (
    QueryPlan,
    SearchStrategy,
    select_strategy
)
from govcon_search.core.search.ranking import (
    deduplicate_contracts,
    rank_contracts,
    score
)
from govcon_search.core.search.filters import (
    apply_filters,
    award_amount_range
)

__all__ = [
    # Text
    "normalize",
    "extract_phrases",
    "parse_or_terms",
    # Strategy
    "QueryPlan",
    "SearchStrategy",
    "select_strategy",
    # Ranking
    "deduplicate_contracts",
    "rank_contracts",
    "score",
    # Filters
    "apply_filters",
    "award_amount_range",
]
