"""
Ranking
Multi-field relevance scoring, ordering and deduplication of contracts
"""
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence

from govcon_search.core.logging import get_logger
from govcon_search.core.models.contract import Contract
from govcon_search.core.search.strategy import QueryPlan, SearchStrategy

logger = get_logger(__name__)


# Field weights; per term only the highest-weighted matching field counts
FIELD_WEIGHTS: Dict[str, int] = {
    "title": 10,
    "solicitation_number": 8,
    "description": 5,
    "naics_description": 3,
    "agency": 2,
    "office": 1,
}

# Same field set for every strategy, heaviest first
SEARCH_FIELDS: List[str] = sorted(FIELD_WEIGHTS, key=FIELD_WEIGHTS.get, reverse=True)

ORIGINAL_TERM_WEIGHT = 3
EXPANSION_TERM_WEIGHT = 1


class WeightedTerm(NamedTuple):
    term: str
    weight: int = EXPANSION_TERM_WEIGHT


def weighted_terms(plan: QueryPlan) -> List[WeightedTerm]:
    """
    Attach weights to a plan's terms

    Semantic plans weight the original query (always first) above its
    expansions; every other strategy weights its terms equally.
    """
    weighted = []
    for index, term in enumerate(plan.terms):
        if plan.strategy == SearchStrategy.SEMANTIC and index == 0:
            weight = ORIGINAL_TERM_WEIGHT
        else:
            weight = EXPANSION_TERM_WEIGHT
        weighted.append(WeightedTerm(term.lower(), weight))
    return weighted


def _field_score(contract: Contract, term: str, fields: Sequence[str]) -> int:
    """Weight of the heaviest field containing the term, 0 if none"""
    best = 0
    for field_name in fields:
        weight = FIELD_WEIGHTS.get(field_name, 0)
        if weight > best and term in contract.field_text(field_name).lower():
            best = weight
    return best


def score(
    contract: Contract,
    terms: Iterable[WeightedTerm],
    fields: Optional[Sequence[str]] = None,
) -> float:
    """
    Score a contract against weighted terms

    Args:
        contract: Candidate record
        terms: Weighted terms (case-insensitive substring match)
        fields: Fields to consider (defaults to SEARCH_FIELDS)

    Returns:
        Sum over terms of (best matching field weight x term weight); 0 means no match
    """
    fields = fields or SEARCH_FIELDS
    total = 0
    for weighted in terms:
        term = weighted.term.lower()
        if not term:
            continue
        total += _field_score(contract, term, fields) * weighted.weight
    return float(total)


def contract_matches(contract: Contract, terms: Iterable[str], fields: Optional[Sequence[str]] = None) -> bool:
    """True if any field contains any term (case-insensitive)"""
    fields = fields or SEARCH_FIELDS
    lowered = [term.lower() for term in terms if term]
    for field_name in fields:
        text = contract.field_text(field_name).lower()
        if text and any(term in text for term in lowered):
            return True
    return False


def _recency_key(value: Optional[str]) -> str:
    # ISO dates sort lexicographically; missing dates sort last under reverse order
    return value or ""


def rank_contracts(contracts: List[Contract]) -> List[Contract]:
    """
    Order contracts by relevance score, then posted date, then creation time

    All keys descending. Contracts without a score sort as 0.
    """
    return sorted(
        contracts,
        key=lambda c: (c.relevance_score or 0.0, _recency_key(c.posted_date), _recency_key(c.created_at)),
        reverse=True,
    )


def sort_by_recency(contracts: List[Contract]) -> List[Contract]:
    """Newest first by posted date, then creation time"""
    return sorted(
        contracts,
        key=lambda c: (_recency_key(c.posted_date), _recency_key(c.created_at)),
        reverse=True,
    )


def deduplicate_contracts(contracts: List[Contract]) -> List[Contract]:
    """
    Drop duplicate records, keeping the highest-scored copy

    Two records are the same entity when their id OR their solicitation
    number matches. The survivor keeps the position of the first copy seen.
    """
    if not contracts:
        return []

    kept: List[Optional[Contract]] = []
    by_id: Dict[str, int] = {}
    by_solicitation: Dict[str, int] = {}

    for contract in contracts:
        solicitation = contract.solicitation_number.strip()
        index = by_id.get(contract.id)
        if index is None and solicitation:
            index = by_solicitation.get(solicitation)

        if index is None:
            index = len(kept)
            kept.append(contract)
        elif (contract.relevance_score or 0.0) > (kept[index].relevance_score or 0.0):
            kept[index] = contract

        by_id[contract.id] = index
        if solicitation:
            by_solicitation[solicitation] = index

    deduplicated = [c for c in kept if c is not None]
    if len(deduplicated) != len(contracts):
        logger.debug(f"Deduplicated {len(contracts)} contracts to {len(deduplicated)} unique records")
    return deduplicated
