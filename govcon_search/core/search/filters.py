"""
Post-filters
Status, agency and award-amount filtering of a candidate set
"""
import re
from typing import Iterable, List, Optional, Tuple

from govcon_search.core.logging import get_logger
from govcon_search.core.models.contract import NO_AGENCY, Contract
from govcon_search.core.models.search import SearchFilters

logger = get_logger(__name__)

_NON_NUMERIC = re.compile(r"[^\d.\-]")

DEFAULT_MAX_AWARD_AMOUNT = 100_000_000.0


def parse_award_amount(value: Optional[str]) -> float:
    """
    Parse a currency-formatted award amount

    "$1,500,000" -> 1500000.0. Missing or unparseable amounts are 0.
    """
    if not value:
        return 0.0
    cleaned = _NON_NUMERIC.sub("", str(value))
    # Keep the longest leading numeric prefix, the way a lenient float parse would
    match = re.match(r"-?\d*\.?\d+|-?\d+", cleaned)
    if not match:
        return 0.0
    return float(match.group(0))


def matches_status(contract: Contract, status: Optional[str]) -> bool:
    """Exact status match; None disables the filter"""
    if status is None:
        return True
    return contract.status.value == status.strip().lower()


def matches_agency(contract: Contract, agencies: Iterable[str]) -> bool:
    """
    OR match over selected agencies

    A record without an agency matches the "(No Agency)" sentinel. Otherwise
    names match case-insensitively by equality or containment either way, so
    "INTERIOR, DEPARTMENT OF THE" matches a selection of "INTERIOR".
    """
    selected = [a for a in agencies if a and a.strip()]
    if not selected:
        return True

    agency = (contract.agency or "").strip().lower()
    for choice in selected:
        if choice == NO_AGENCY:
            if not agency:
                return True
            continue
        choice = choice.strip().lower()
        if agency and (agency == choice or choice in agency or agency in choice):
            return True
    return False


def matches_award_amount(
    contract: Contract,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
) -> bool:
    amount = parse_award_amount(contract.award_amount)
    if min_amount is not None and amount < min_amount:
        return False
    if max_amount is not None and amount > max_amount:
        return False
    return True


def apply_filters(contracts: List[Contract], filters: Optional[SearchFilters]) -> List[Contract]:
    """
    Apply all filters (AND across filter types), preserving order

    Args:
        contracts: Candidate set, already ranked
        filters: Filters to apply; None keeps everything

    Returns:
        Contracts passing every filter
    """
    if filters is None:
        return list(contracts)

    filtered = [
        c for c in contracts
        if matches_status(c, filters.status)
        and matches_agency(c, filters.agencies)
        and matches_award_amount(c, filters.min_award_amount, filters.max_award_amount)
    ]
    logger.debug(
        f"Post-filters kept {len(filtered)} of {len(contracts)} contracts",
        extra={"status_filter": filters.status, "agency_count": len(filters.agencies)},
    )
    return filtered


def award_amount_range(contracts: Iterable[Contract]) -> Tuple[float, float]:
    """
    Min and max of the positive award amounts, for range-slider bounds

    Falls back to (0, DEFAULT_MAX_AWARD_AMOUNT) when no record has an amount.
    """
    amounts = [a for a in (parse_award_amount(c.award_amount) for c in contracts) if a > 0]
    if not amounts:
        return 0.0, DEFAULT_MAX_AWARD_AMOUNT
    return min(amounts), max(amounts)
