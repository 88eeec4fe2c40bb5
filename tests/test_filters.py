"""Tests for govcon_search/core/search/filters.py - post-filters."""

import pytest

from govcon_search.core.models.contract import NO_AGENCY, Contract
from govcon_search.core.models.search import SearchFilters
from govcon_search.core.search.filters import (
    DEFAULT_MAX_AWARD_AMOUNT,
    apply_filters,
    award_amount_range,
    matches_agency,
    matches_award_amount,
    matches_status,
    parse_award_amount,
)


class TestParseAwardAmount:
    """Tests for parse_award_amount."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("$1,500,000", 1500000.0),
            ("250000.50", 250000.5),
            ("USD 3,000", 3000.0),
            ("", 0.0),
            (None, 0.0),
            ("TBD", 0.0),
        ],
    )
    def test_parse(self, value, expected) -> None:
        assert parse_award_amount(value) == expected


class TestMatchers:
    """Tests for the individual filter predicates."""

    def test_status_exact_match(self) -> None:
        contract = Contract(id="1", status="archived")
        assert matches_status(contract, "archived")
        assert not matches_status(contract, "active")
        assert matches_status(contract, None)

    def test_agency_containment(self) -> None:
        contract = Contract(id="1", agency="INTERIOR, DEPARTMENT OF THE")
        assert matches_agency(contract, ["INTERIOR"])
        assert matches_agency(contract, ["interior, department of the"])
        assert not matches_agency(contract, ["DEFENSE"])

    def test_agency_or_semantics(self) -> None:
        contract = Contract(id="1", agency="DEPARTMENT OF DEFENSE")
        assert matches_agency(contract, ["INTERIOR", "DEFENSE"])

    def test_no_agency_sentinel(self) -> None:
        assert matches_agency(Contract(id="1"), [NO_AGENCY])
        assert not matches_agency(Contract(id="2", agency="DEFENSE"), [NO_AGENCY])
        assert not matches_agency(Contract(id="3"), ["DEFENSE"])

    def test_empty_agency_selection_matches_all(self) -> None:
        assert matches_agency(Contract(id="1"), [])

    def test_award_amount_bounds(self) -> None:
        contract = Contract(id="1", award_amount="$1,500,000")
        assert matches_award_amount(contract, 1000000, 2000000)
        assert not matches_award_amount(contract, 2000000, None)
        assert not matches_award_amount(contract, None, 1000000)

    def test_missing_amount_is_zero(self) -> None:
        contract = Contract(id="1")
        assert matches_award_amount(contract, None, 100)
        assert not matches_award_amount(contract, 1, None)


class TestApplyFilters:
    """Tests for apply_filters and award_amount_range."""

    def test_default_filters_keep_active_only(self, sample_contracts) -> None:
        result = apply_filters(sample_contracts, SearchFilters())
        assert "c5" not in [c.id for c in result]
        assert len(result) == 5

    def test_none_keeps_everything(self, sample_contracts) -> None:
        assert len(apply_filters(sample_contracts, None)) == len(sample_contracts)

    def test_filters_combine_with_and(self, sample_contracts) -> None:
        filters = SearchFilters(status=None, agencies=["DEFENSE"], min_award_amount=1000000)
        assert [c.id for c in apply_filters(sample_contracts, filters)] == ["c1"]

    def test_preserves_order(self, sample_contracts) -> None:
        reversed_contracts = list(reversed(sample_contracts))
        result = apply_filters(reversed_contracts, SearchFilters(status=None))
        assert [c.id for c in result] == [c.id for c in reversed_contracts]

    def test_award_amount_range(self, sample_contracts) -> None:
        assert award_amount_range(sample_contracts) == (250000.0, 5000000.0)

    def test_award_amount_range_default(self) -> None:
        assert award_amount_range([Contract(id="1")]) == (0.0, DEFAULT_MAX_AWARD_AMOUNT)
