"""
Query Strategy Selection
Classifies a raw query into an exact, phrase, semantic or OR query plan
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from govcon_search.core.logging import get_logger
from govcon_search.core.search.synonyms import SynonymTable, default_table
from govcon_search.core.search.text import contains_or_delimiter, contains_phrase, parse_or_terms

logger = get_logger(__name__)


class SearchStrategy(str, Enum):
    EXACT = "exact"
    PHRASE = "phrase"
    SEMANTIC = "semantic"
    OR = "or"


SEARCH_MODES = ("auto", "exact", "semantic")

# Multi-word domain phrases searched as a unit
KNOWN_PHRASES: List[str] = [
    "web development", "software development", "mobile development",
    "data science", "machine learning", "artificial intelligence",
    "cloud computing", "cyber security", "information technology",
    "project management", "quality assurance", "user experience",
    "database administration", "network security", "help desk",
    "software engineering", "systems analyst", "business analyst",
    "technical writing", "graphic design", "digital marketing",
]


@dataclass(frozen=True)
class QueryPlan:
    """How one search request will be executed"""
    strategy: SearchStrategy
    terms: List[str] = field(default_factory=list)
    original_query: str = ""
    matched_phrase: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.terms


def match_known_phrase(query: str, known_phrases: Iterable[str]) -> Optional[str]:
    """
    Find the known phrase a query equals, contains or is contained by

    Containment is evaluated on whole words.
    """
    for phrase in known_phrases:
        if query == phrase or contains_phrase(query, phrase) or contains_phrase(phrase, query):
            return phrase
    return None


def select_strategy(
    query: str,
    mode: str = "auto",
    known_phrases: Optional[Iterable[str]] = None,
    synonyms: Optional[SynonymTable] = None,
) -> QueryPlan:
    """
    Build a query plan for a raw query

    Rules, in priority order: OR syntax, explicit exact mode, known phrase,
    multi-word or explicit semantic mode, then exact.

    Args:
        query: Raw query string
        mode: "auto", "exact" or "semantic"; ignored for OR queries
        known_phrases: Phrase list (defaults to KNOWN_PHRASES)
        synonyms: Expansion table (defaults to the built-in table)

    Returns:
        QueryPlan; empty terms for a blank query
    """
    original = query or ""
    trimmed = original.strip()
    if not trimmed:
        return QueryPlan(strategy=SearchStrategy.EXACT, terms=[], original_query=original)

    if mode not in SEARCH_MODES:
        logger.warning(f"Unknown search mode '{mode}', using auto")
        mode = "auto"

    if contains_or_delimiter(trimmed):
        return QueryPlan(strategy=SearchStrategy.OR, terms=parse_or_terms(trimmed), original_query=original)

    if mode == "exact":
        return QueryPlan(strategy=SearchStrategy.EXACT, terms=[trimmed], original_query=original)

    lowered = trimmed.lower()
    phrases = KNOWN_PHRASES if known_phrases is None else known_phrases
    matched = match_known_phrase(lowered, phrases)
    if matched:
        return QueryPlan(
            strategy=SearchStrategy.PHRASE,
            terms=[trimmed],
            original_query=original,
            matched_phrase=matched,
        )

    if " " in lowered or mode == "semantic":
        table = synonyms or default_table
        expanded = table.expand(lowered)
        # Query first so it carries the highest weight
        terms = [trimmed] + [term for term in expanded if term != lowered]
        return QueryPlan(strategy=SearchStrategy.SEMANTIC, terms=terms, original_query=original)

    return QueryPlan(strategy=SearchStrategy.EXACT, terms=[trimmed], original_query=original)
