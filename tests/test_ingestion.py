"""Tests for contract models, the memory store, CSV loading and data-update events."""

from datetime import date, datetime
from decimal import Decimal

from govcon_search.core.models.contract import Contract, ContractStatus
from govcon_search.database.csv_loader import read_contracts_csv
from govcon_search.database.memory import InMemoryContractStore
from govcon_search.indexing.events import DataUpdateNotifier


class TestContractFromRow:
    """Tests for Contract.from_row."""

    def test_converts_database_types(self) -> None:
        contract = Contract.from_row({
            "id": 12,
            "title": "Cloud",
            "award_amount": Decimal("1500000.00"),
            "posted_date": date(2024, 3, 1),
            "created_at": datetime(2024, 3, 1, 10, 0, 0),
            "status": " Active ",
        })
        assert contract.id == "12"
        assert contract.award_amount == "1500000.00"
        assert contract.posted_date == "2024-03-01"
        assert contract.created_at == "2024-03-01T10:00:00"
        assert contract.status == ContractStatus.ACTIVE

    def test_accepts_camel_case(self) -> None:
        contract = Contract.from_row({"id": "1", "solicitationNumber": "SOL-1", "awardAmount": "$5"})
        assert contract.solicitation_number == "SOL-1"
        assert contract.award_amount == "$5"

    def test_missing_status_defaults_to_active(self) -> None:
        assert Contract.from_row({"id": "1", "status": ""}).status == ContractStatus.ACTIVE

    def test_invalid_row_returns_none(self) -> None:
        assert Contract.from_row({"title": "no id"}) is None
        assert Contract.from_row({"id": "1", "status": "unknown"}) is None

    def test_serializes_camel_case(self) -> None:
        data = Contract(id="1", solicitation_number="S").model_dump(by_alias=True)
        assert data["solicitationNumber"] == "S"


class TestInMemoryContractStore:
    """Tests for InMemoryContractStore."""

    def test_load_skips_invalid_rows(self) -> None:
        store = InMemoryContractStore()
        assert store.load_contracts([{"id": "1", "title": "a"}, {"title": "missing id"}]) == 1
        assert store.count_contracts() == 1

    def test_add_contracts_merges_on_id_or_solicitation(self, memory_store) -> None:
        result = memory_store.add_contracts([
            {"id": "c1", "solicitation_number": "SOL-001", "title": "Updated web portal"},
            {"id": "new-id", "solicitation_number": "SOL-002", "title": "Replaced by solicitation"},
            {"id": "c8", "solicitation_number": "SOL-008", "title": "Brand new"},
        ])
        assert result == {"inserted": 1, "updated": 2}
        assert memory_store.count_contracts() == 7
        titles = {c.id: c.title for c in memory_store.get_all_contracts()}
        assert titles["c1"] == "Updated web portal"
        assert titles["new-id"] == "Replaced by solicitation"
        assert "c2" not in titles

    def test_phrase_search_whole_word(self, memory_store) -> None:
        assert [c.id for c in memory_store.phrase_search("web development")] == ["c1"]
        assert memory_store.phrase_search("eb develop") == []
        assert memory_store.phrase_search("  ") == []


class TestCsvLoader:
    """Tests for read_contracts_csv."""

    def test_sam_gov_export(self, tmp_path) -> None:
        csv_file = tmp_path / "opportunities.csv"
        csv_file.write_text(
            "NoticeId,Sol#,Title,Department/Ind.Agency,Award$,Active,PopCity,PopState\n"
            "n1,SOL-1,Cloud Hosting,GSA,$100,Yes,Denver,CO\n"
            "n2,SOL-2,Old Portal,DOD,,No,,\n"
            ",,Missing Id,DOD,,Yes,,\n",
            encoding="utf-8",
        )
        rows = read_contracts_csv(str(csv_file))
        assert [r["id"] for r in rows] == ["n1", "n2"]
        assert rows[0]["solicitation_number"] == "SOL-1"
        assert rows[0]["agency"] == "GSA"
        assert rows[0]["place_of_performance"] == "Denver, CO"
        assert rows[0]["status"] == "active"
        assert rows[1]["status"] == "archived"
        assert rows[1]["award_amount"] is None

    def test_native_columns_load_into_store(self, tmp_path) -> None:
        csv_file = tmp_path / "contracts.csv"
        csv_file.write_text(
            "id,solicitationNumber,title,agency,status\n"
            "a1,S-1,Data Platform,GSA,active\n"
            "a2,S-2,Network Monitoring,DHS,archived\n",
            encoding="utf-8",
        )
        store = InMemoryContractStore(read_contracts_csv(str(csv_file)))
        assert store.count_contracts() == 2
        assert store.get_all_contracts()[0].solicitation_number == "S-1"


class TestDataUpdateNotifier:
    """Tests for DataUpdateNotifier."""

    def test_callbacks_run_in_order(self) -> None:
        notifier = DataUpdateNotifier()
        calls = []
        notifier.subscribe(lambda source: calls.append(("refresh", source)))
        notifier.subscribe(lambda source: calls.append(("invalidate", source)))
        notifier.notify("csv-import")
        assert calls == [("refresh", "csv-import"), ("invalidate", "csv-import")]

    def test_failing_callback_does_not_stop_others(self) -> None:
        notifier = DataUpdateNotifier()
        calls = []

        def broken(source):
            raise RuntimeError("boom")

        def working(source):
            calls.append(source)

        notifier.subscribe(broken)
        notifier.subscribe(working)
        result = notifier.notify()
        assert calls == ["manual"]
        assert len(result["failed"]) == 1
        assert len(result["succeeded"]) == 1

    def test_unsubscribe(self) -> None:
        notifier = DataUpdateNotifier()
        calls = []

        def callback(source):
            calls.append(source)

        notifier.subscribe(callback)
        notifier.unsubscribe(callback)
        notifier.notify()
        assert calls == []
