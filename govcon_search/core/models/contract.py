"""
Contract Models
Pydantic model for a contract opportunity record
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from govcon_search.core.logging import get_logger

logger = get_logger(__name__)


NO_AGENCY = "(No Agency)"

_NUMERIC_FIELDS = {"relevance_score", "rank"}


class ContractStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    AWARDED = "awarded"
    CANCELLED = "cancelled"


class Contract(BaseModel):
    """A contract opportunity with all stored columns"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    # Core identifiers
    id: str
    solicitation_number: str = ""

    # Searchable text
    title: str = ""
    description: Optional[str] = None
    agency: Optional[str] = None
    office: Optional[str] = None
    naics_code: Optional[str] = None
    naics_description: Optional[str] = None
    set_aside_code: Optional[str] = None
    set_aside_description: Optional[str] = None
    place_of_performance: Optional[str] = None
    contact_info: Optional[str] = None

    # Structured attributes
    posted_date: Optional[str] = None
    response_due_date: Optional[str] = None
    archive_date: Optional[str] = None
    contract_award_date: Optional[str] = None
    award_amount: Optional[str] = None
    sam_url: Optional[str] = None
    status: ContractStatus = ContractStatus.ACTIVE
    last_updated: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    # Filled in by the search executor
    relevance_score: Optional[float] = None

    def field_text(self, field: str) -> str:
        """Return a text field's value, or an empty string when unset"""
        value = getattr(self, field, None)
        return value if isinstance(value, str) else ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> Optional["Contract"]:
        """
        Build a contract from a database row or CSV dict

        Accepts snake_case or camelCase keys. Dates stored as date/datetime
        columns are converted to ISO strings.

        Returns:
            Contract, or None when the row fails validation
        """
        data = {}
        for key, value in row.items():
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            elif isinstance(value, (int, float, Decimal)) and not isinstance(value, bool) and key not in _NUMERIC_FIELDS:
                value = str(value)
            data[key] = value

        if data.get("id") is not None:
            data["id"] = str(data["id"])
        if data.get("status") in (None, ""):
            data.pop("status", None)
        elif isinstance(data["status"], str):
            data["status"] = data["status"].strip().lower()

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            logger.warning(
                f"Skipping invalid contract row: {e.error_count()} validation error(s)",
                extra={"row_id": row.get("id"), "errors": str(e)},
            )
            return None
