"""
Search Executor
Runs a query plan against a contract store, then filters and paginates
"""
from dataclasses import dataclass, field
from typing import List, Optional

from govcon_search.core.exceptions import PhraseSearchUnavailableError
from govcon_search.core.logging import get_logger
from govcon_search.core.models.contract import Contract
from govcon_search.core.models.search import Pagination, SearchFilters
from govcon_search.core.search.filters import apply_filters
from govcon_search.core.search.ranking import SEARCH_FIELDS, deduplicate_contracts, weighted_terms
from govcon_search.core.search.strategy import QueryPlan, SearchStrategy
from govcon_search.database.base import ContractStore

logger = get_logger(__name__)


@dataclass
class SearchExecution:
    """One page of ranked, filtered results plus counts"""
    contracts: List[Contract] = field(default_factory=list)
    total_count: int = 0
    total_unfiltered_count: int = 0
    strategy_used: str = SearchStrategy.EXACT.value
    terms_used: List[str] = field(default_factory=list)
    offset: int = 0
    limit: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total_count


class SearchExecutor:
    """Executes query plans over a ContractStore"""

    def __init__(self, store: ContractStore, fields: Optional[List[str]] = None):
        self.store = store
        self.fields = list(fields or SEARCH_FIELDS)

    def execute(
        self,
        plan: QueryPlan,
        filters: Optional[SearchFilters] = None,
        pagination: Optional[Pagination] = None,
    ) -> SearchExecution:
        """
        Execute a plan

        Args:
            plan: Output of select_strategy
            filters: Post-filters (status defaults to active)
            pagination: Offset/limit window

        Returns:
            SearchExecution; empty with zero counts for an empty plan
        """
        filters = filters if filters is not None else SearchFilters()
        pagination = pagination or Pagination()

        if plan.is_empty:
            return SearchExecution(
                strategy_used=plan.strategy.value,
                offset=pagination.offset,
                limit=pagination.limit,
            )

        if plan.strategy == SearchStrategy.PHRASE:
            candidates, unfiltered_count, strategy_used, terms_used = self._run_phrase(plan)
        else:
            candidates, unfiltered_count = self._run_terms(plan)
            strategy_used = plan.strategy.value
            terms_used = list(plan.terms)

        candidates = deduplicate_contracts(candidates)
        filtered = apply_filters(candidates, filters)
        page = filtered[pagination.offset:pagination.offset + pagination.limit]

        logger.info(
            f"Search executed: {len(filtered)} of {unfiltered_count} matches after filters",
            extra={
                "strategy": strategy_used,
                "term_count": len(terms_used),
                "total_count": len(filtered),
                "total_unfiltered_count": unfiltered_count,
            },
        )

        return SearchExecution(
            contracts=page,
            total_count=len(filtered),
            total_unfiltered_count=unfiltered_count,
            strategy_used=strategy_used,
            terms_used=terms_used,
            offset=pagination.offset,
            limit=pagination.limit,
        )

    def _run_terms(self, plan: QueryPlan):
        terms = weighted_terms(plan)
        candidates = self.store.search_contracts(terms, self.fields)
        unfiltered_count = self.store.count_matches([t.term for t in terms], self.fields)
        return candidates, unfiltered_count

    def _run_phrase(self, plan: QueryPlan):
        phrase = plan.matched_phrase or plan.terms[0]
        try:
            candidates = self.store.phrase_search(phrase, self.fields)
            return candidates, len(candidates), SearchStrategy.PHRASE.value, list(plan.terms)
        except PhraseSearchUnavailableError as e:
            logger.warning(
                f"Phrase search unavailable, falling back to exact: {e}",
                extra={"phrase": phrase, "store": self.store.name},
            )

        fallback = QueryPlan(
            strategy=SearchStrategy.EXACT,
            terms=[plan.terms[0]],
            original_query=plan.original_query,
        )
        candidates, unfiltered_count = self._run_terms(fallback)
        return candidates, unfiltered_count, SearchStrategy.EXACT.value, list(fallback.terms)
