"""
Search Models
Pydantic models for search requests, responses and suggestions
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from govcon_search.core.models.contract import Contract


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchFilters(CamelModel):
    """Attribute filters applied after search; AND across filter types"""
    status: Optional[str] = Field("active", description="Contract status; None disables the status filter")
    agencies: List[str] = Field(default_factory=list, description="Agencies to match (OR semantics)")
    min_award_amount: Optional[float] = Field(None, description="Lower bound on parsed award amount")
    max_award_amount: Optional[float] = Field(None, description="Upper bound on parsed award amount")


class Pagination(CamelModel):
    """Offset/limit pagination"""
    offset: int = Field(0, ge=0)
    limit: int = Field(20, ge=1)


class SearchRequest(CamelModel):
    """Search request model"""
    query: str = Field("", description="Search query string; OR-delimited terms are supported")
    mode: str = Field("auto", pattern="^(auto|exact|semantic)$", description="Search mode: 'auto', 'exact' or 'semantic'")
    filters: SearchFilters = Field(default_factory=SearchFilters)
    offset: int = Field(0, ge=0, description="Number of results to skip")
    limit: int = Field(20, ge=1, le=100, description="Number of results to return")


class SearchInfo(CamelModel):
    """How the query was interpreted"""
    search_type: str
    terms_used: List[str] = Field(default_factory=list)
    original_term: str = ""


class AwardAmountRange(CamelModel):
    min: float = 0.0
    max: float = 0.0


class SearchResponse(CamelModel):
    """Search response model"""
    contracts: List[Contract] = Field(default_factory=list)
    total_count: int = 0
    total_unfiltered_count: int = 0
    has_more: bool = False
    search_info: Optional[SearchInfo] = None
    award_amount_range: Optional[AwardAmountRange] = None


class TermSuggestion(CamelModel):
    """Lexical suggestion"""
    term: str
    frequency: int


class LexicalSuggestionResponse(CamelModel):
    suggestions: List[TermSuggestion] = Field(default_factory=list)


class SearchSuggestion(CamelModel):
    """Semantic suggestion with metadata"""
    term: str
    frequency: int
    confidence: float
    sample_item_ids: List[str] = Field(default_factory=list)
    is_phrase: bool = False


class SemanticSuggestionResponse(CamelModel):
    suggestions: List[SearchSuggestion] = Field(default_factory=list)
    available: bool = True
    error: Optional[str] = None
