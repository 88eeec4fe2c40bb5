"""
Suggestion API Routes
Lexical and semantic related-term suggestions
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from govcon_search.core.exceptions import SuggestionsUnavailableError
from govcon_search.core.logging import get_logger
from govcon_search.core.models.search import (
    LexicalSuggestionResponse,
    SemanticSuggestionResponse,
    TermSuggestion,
)
from govcon_search.core.startup import AppServices
from govcon_search.api.dependencies import get_services

logger = get_logger(__name__)

router = APIRouter(prefix="/suggestions", tags=["suggestions"])


@router.get("", response_model=LexicalSuggestionResponse)
def lexical_suggestions(
    q: str = Query("", description="Search query"),
    services: AppServices = Depends(get_services),
):
    """Terms that appear often in contracts matching the query"""
    try:
        suggestions = services.lexical_engine.suggest(q)
        return LexicalSuggestionResponse(suggestions=[TermSuggestion(**s) for s in suggestions])
    except Exception as e:
        logger.error(f"Lexical suggestions failed: {e}", extra={"query": q}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Suggestions failed: {str(e)}")


@router.get("/semantic", response_model=SemanticSuggestionResponse)
def semantic_suggestions(
    q: str = Query("", description="Search query"),
    services: AppServices = Depends(get_services),
):
    """
    Phrases from contracts semantically similar to the query

    Returns 503 with available=false when embeddings cannot be produced,
    so clients can tell "unavailable" apart from "no related terms".
    """
    try:
        suggestions = services.semantic_engine.get_suggestions(q)
        return SemanticSuggestionResponse(suggestions=suggestions)
    except SuggestionsUnavailableError as e:
        logger.warning(f"Semantic suggestions unavailable: {e}", extra={"query": q})
        body = SemanticSuggestionResponse(suggestions=[], available=False, error=str(e))
        return JSONResponse(status_code=503, content=body.model_dump(by_alias=True))
    except Exception as e:
        logger.error(f"Semantic suggestions failed: {e}", extra={"query": q}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Suggestions failed: {str(e)}")
