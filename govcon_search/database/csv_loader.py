"""
CSV Contract Loader
Reads contract rows from a CSV export (SAM.gov or native column names)
"""
import csv
from datetime import datetime, timezone
from typing import Dict, List, Optional

from govcon_search.core.logging import get_logger

logger = get_logger(__name__)

# SAM.gov export columns -> contract fields
SAM_GOV_COLUMNS = {
    "NoticeId": "id",
    "Sol#": "solicitation_number",
    "Title": "title",
    "Description": "description",
    "Department/Ind.Agency": "agency",
    "Office": "office",
    "NaicsCode": "naics_code",
    "PostedDate": "posted_date",
    "ResponseDeadLine": "response_due_date",
    "ArchiveDate": "archive_date",
    "AwardDate": "contract_award_date",
    "Award$": "award_amount",
    "SetASideCode": "set_aside_code",
    "SetASide": "set_aside_description",
    "Link": "sam_url",
}

_CONTACT_COLUMNS = ["PrimaryContactFullname", "PrimaryContactEmail", "PrimaryContactPhone"]
_PLACE_COLUMNS = ["PopCity", "PopState", "PopCountry"]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def map_sam_gov_row(row: Dict[str, str], now: str) -> Dict[str, Optional[str]]:
    """Translate one SAM.gov export row into contract fields"""
    mapped: Dict[str, Optional[str]] = {field: _clean(row.get(column)) for column, field in SAM_GOV_COLUMNS.items()}
    mapped["id"] = mapped["id"] or mapped["solicitation_number"]
    mapped["solicitation_number"] = mapped["solicitation_number"] or mapped["id"]
    mapped["title"] = mapped["title"] or "Untitled Opportunity"

    place = [p for p in (_clean(row.get(c)) for c in _PLACE_COLUMNS) if p]
    mapped["place_of_performance"] = ", ".join(place) or None
    contact = [c for c in (_clean(row.get(col)) for col in _CONTACT_COLUMNS) if c]
    mapped["contact_info"] = "; ".join(contact) or None

    active = (_clean(row.get("Active")) or "yes").lower()
    mapped["status"] = "active" if active == "yes" else "archived"
    mapped["last_updated"] = mapped["created_at"] = mapped["updated_at"] = now
    return mapped


def read_contracts_csv(file_path: str) -> List[Dict[str, Optional[str]]]:
    """
    Read a CSV file into contract row dicts

    SAM.gov exports are detected by their NoticeId column and mapped to
    contract fields; any other file is expected to use contract field names
    (snake_case or camelCase). Rows without an id are skipped.

    Args:
        file_path: Path to CSV file

    Returns:
        Row dicts ready for Contract.from_row
    """
    rows: List[Dict[str, Optional[str]]] = []
    now = datetime.now(timezone.utc).isoformat()

    with open(file_path, "r", encoding="utf-8-sig", newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        try:
            delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
        except csv.Error:
            delimiter = ","

        reader = csv.DictReader(f, delimiter=delimiter)
        is_sam_gov = "NoticeId" in (reader.fieldnames or [])

        for row_num, row in enumerate(reader, start=2):
            if is_sam_gov:
                mapped = map_sam_gov_row(row, now)
            else:
                mapped = {key: _clean(value) for key, value in row.items() if key}

            if not mapped.get("id"):
                logger.warning(f"Row {row_num}: missing id, skipping", extra={"row_num": row_num})
                continue
            rows.append(mapped)

    logger.info(
        f"Read {len(rows)} contract rows from {file_path}",
        extra={"file_path": file_path, "sam_gov_format": is_sam_gov},
    )
    return rows
