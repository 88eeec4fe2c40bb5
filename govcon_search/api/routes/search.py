"""
Search API Routes
Contract search and browse endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from govcon_search.core.config import settings
from govcon_search.core.logging import get_logger
from govcon_search.core.models.search import SearchFilters, SearchRequest, SearchResponse
from govcon_search.core.startup import AppServices
from govcon_search.api.dependencies import get_services

logger = get_logger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

# Query-string value that disables the status filter
ALL_STATUSES = "all"


def _run_search(request: SearchRequest, services: AppServices) -> SearchResponse:
    try:
        logger.info(
            "Search request received",
            extra={
                "query": request.query,
                "mode": request.mode,
                "offset": request.offset,
                "limit": request.limit,
            },
        )
        response = services.search_service.search(request)
        logger.info(
            f"Search returned {len(response.contracts)} of {response.total_count} contracts",
            extra={"query": request.query, "total_count": response.total_count},
        )
        return response
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Search failed: {e}", extra={"query": request.query}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Search failed: {str(e)}")


@router.post("", response_model=SearchResponse)
@router.post("/", response_model=SearchResponse, include_in_schema=False)
def search(request: SearchRequest, services: AppServices = Depends(get_services)):
    """
    Search contracts

    The strategy is chosen from the query: OR-delimited terms, known phrases,
    single words (expanded with synonyms) or exact terms. A blank query browses
    all contracts, newest first, and includes the award amount range.

    Example:
        ```json
        {
          "query": "web development",
          "mode": "auto",
          "filters": {"status": "active", "agencies": ["Department of Defense"]},
          "offset": 0,
          "limit": 20
        }
        ```
    """
    return _run_search(request, services)


@router.get("", response_model=SearchResponse)
@router.get("/", response_model=SearchResponse, include_in_schema=False)
def search_get(
    q: str = Query("", description="Search query"),
    mode: str = Query("auto", pattern="^(auto|exact|semantic)$"),
    status: Optional[str] = Query(None, description="Contract status, or 'all' to disable the filter"),
    agencies: Optional[str] = Query(None, description="Pipe-separated agency names"),
    min_award_amount: Optional[float] = Query(None, alias="minAwardAmount"),
    max_award_amount: Optional[float] = Query(None, alias="maxAwardAmount"),
    offset: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    services: AppServices = Depends(get_services),
):
    """Query-string variant of POST /search"""
    if status is None:
        status = settings.DEFAULT_STATUS
    filters = SearchFilters(
        status=None if status.lower() == ALL_STATUSES else status,
        agencies=[a.strip() for a in (agencies or "").split("|") if a.strip()],
        min_award_amount=min_award_amount,
        max_award_amount=max_award_amount,
    )
    request = SearchRequest(query=q, mode=mode, filters=filters, offset=offset, limit=limit)
    return _run_search(request, services)
