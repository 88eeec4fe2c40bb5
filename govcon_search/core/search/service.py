"""
Contract Search Service
Entry point combining strategy selection, execution and browse mode
"""
from typing import Iterable, List, Optional

from govcon_search.core.config import settings
from govcon_search.core.logging import get_logger
from govcon_search.core.models.search import (
    AwardAmountRange,
    Pagination,
    SearchInfo,
    SearchRequest,
    SearchResponse,
)
from govcon_search.core.search.executor import SearchExecutor
from govcon_search.core.search.filters import apply_filters, award_amount_range
from govcon_search.core.search.ranking import sort_by_recency
from govcon_search.core.search.strategy import KNOWN_PHRASES, select_strategy
from govcon_search.core.search.synonyms import SynonymTable
from govcon_search.database.base import ContractStore

logger = get_logger(__name__)


class ContractSearchService:
    """Search and browse over a contract store"""

    def __init__(
        self,
        store: ContractStore,
        known_phrases: Optional[Iterable[str]] = None,
        synonyms: Optional[SynonymTable] = None,
        max_page_size: Optional[int] = None,
    ):
        self.store = store
        self.executor = SearchExecutor(store)
        if known_phrases is None:
            known_phrases = KNOWN_PHRASES + [
                p for p in settings.extra_known_phrases if p not in KNOWN_PHRASES
            ]
        self.known_phrases: List[str] = list(known_phrases)
        self.synonyms = synonyms
        self.max_page_size = max_page_size or settings.MAX_PAGE_SIZE

    def search(self, request: SearchRequest) -> SearchResponse:
        """
        Run a search request

        A blank query browses the whole corpus, newest first.

        Args:
            request: Query, mode, filters and pagination

        Returns:
            SearchResponse with the requested page and counts
        """
        pagination = Pagination(offset=request.offset, limit=min(request.limit, self.max_page_size))

        if not request.query or not request.query.strip():
            return self.browse(request, pagination)

        plan = select_strategy(
            request.query,
            request.mode,
            known_phrases=self.known_phrases,
            synonyms=self.synonyms,
        )
        logger.info(
            f"Search strategy '{plan.strategy.value}' with {len(plan.terms)} term(s)",
            extra={"query": request.query, "mode": request.mode, "strategy": plan.strategy.value},
        )

        execution = self.executor.execute(plan, request.filters, pagination)
        return SearchResponse(
            contracts=execution.contracts,
            total_count=execution.total_count,
            total_unfiltered_count=execution.total_unfiltered_count,
            has_more=execution.has_more,
            search_info=SearchInfo(
                search_type=execution.strategy_used,
                terms_used=execution.terms_used,
                original_term=request.query,
            ),
        )

    def browse(self, request: SearchRequest, pagination: Pagination) -> SearchResponse:
        """Filter the full corpus without a query, most recent first"""
        corpus = self.store.get_all_contracts()
        filtered = sort_by_recency(apply_filters(corpus, request.filters))
        page = filtered[pagination.offset:pagination.offset + pagination.limit]
        low, high = award_amount_range(corpus)

        logger.info(
            f"Browse returned {len(page)} of {len(filtered)} filtered contracts",
            extra={"corpus_size": len(corpus), "total_count": len(filtered)},
        )

        return SearchResponse(
            contracts=page,
            total_count=len(filtered),
            total_unfiltered_count=len(corpus),
            has_more=pagination.offset + pagination.limit < len(filtered),
            award_amount_range=AwardAmountRange(min=low, max=high),
        )
