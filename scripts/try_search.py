"""
Try Search
Load a CSV snapshot into the in-memory store and run a search plus suggestions

Usage:
    python scripts/try_search.py opportunities.csv "web development"
    python scripts/try_search.py opportunities.csv "cyber OR network" --status all --limit 5
    python scripts/try_search.py opportunities.csv "software" --mode semantic --semantic
"""
import os
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from govcon_search.core.exceptions import SuggestionsUnavailableError
from govcon_search.core.logging import get_logger
from govcon_search.core.models.search import SearchFilters, SearchRequest
from govcon_search.core.startup import build_services
from govcon_search.database.csv_loader import read_contracts_csv
from govcon_search.database.memory import InMemoryContractStore

logger = get_logger(__name__)


def print_response(response) -> None:
    info = response.search_info
    if info is not None:
        print(f"\nStrategy: {info.search_type}  Terms: {', '.join(info.terms_used)}")
    print(
        f"Showing {len(response.contracts)} of {response.total_count} "
        f"({response.total_unfiltered_count} before filters)"
    )
    for i, contract in enumerate(response.contracts, 1):
        score = f"{contract.relevance_score:.1f}" if contract.relevance_score is not None else "-"
        print(f"{i:>3}. [{score:>5}] {contract.title}")
        print(f"       {contract.agency or 'N/A'} | {contract.solicitation_number} | {contract.award_amount or 'no amount'}")
    if response.award_amount_range is not None:
        print(f"Award amount range: {response.award_amount_range.min:,.0f} - {response.award_amount_range.max:,.0f}")


def main():
    """Main function"""
    import argparse

    parser = argparse.ArgumentParser(description="Run a contract search against a CSV snapshot")
    parser.add_argument("csv_file", help="Path to CSV file (SAM.gov export or contract columns)")
    parser.add_argument("query", nargs="?", default="", help="Search query (blank browses all contracts)")
    parser.add_argument("--mode", choices=["auto", "exact", "semantic"], default="auto", help="Search mode")
    parser.add_argument("--status", default="active", help="Status filter, or 'all' to disable it")
    parser.add_argument("--agency", action="append", default=[], help="Agency filter (repeatable)")
    parser.add_argument("--min-amount", type=float, default=None, help="Minimum award amount")
    parser.add_argument("--max-amount", type=float, default=None, help="Maximum award amount")
    parser.add_argument("--limit", type=int, default=10, help="Number of results to show")
    parser.add_argument("--offset", type=int, default=0, help="Number of results to skip")
    parser.add_argument("--semantic", action="store_true", help="Also show embedding-based suggestions")

    args = parser.parse_args()

    if not os.path.exists(args.csv_file):
        logger.error(f"CSV file not found: {args.csv_file}")
        sys.exit(1)

    store = InMemoryContractStore()
    loaded = store.load_contracts(read_contracts_csv(args.csv_file))
    if loaded == 0:
        logger.error("No contracts loaded")
        sys.exit(1)

    services = build_services(store=store)

    request = SearchRequest(
        query=args.query,
        mode=args.mode,
        filters=SearchFilters(
            status=None if args.status.lower() == "all" else args.status,
            agencies=args.agency,
            min_award_amount=args.min_amount,
            max_award_amount=args.max_amount,
        ),
        offset=args.offset,
        limit=args.limit,
    )
    print_response(services.search_service.search(request))

    if not args.query.strip():
        return

    lexical = services.lexical_engine.suggest(args.query)
    print("\nRelated terms: " + (", ".join(f"{s['term']} ({s['frequency']})" for s in lexical) or "none"))

    if args.semantic:
        try:
            semantic = services.semantic_engine.get_suggestions(args.query)
            print("Semantic suggestions: " + (
                ", ".join(f"{s.term} ({s.confidence:.2f})" for s in semantic) or "none"
            ))
        except SuggestionsUnavailableError as e:
            print(f"Semantic suggestions unavailable: {e}")


if __name__ == "__main__":
    main()
