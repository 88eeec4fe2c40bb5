"""Tests for the Supabase snapshot store, local embeddings and store selection."""

from types import SimpleNamespace

import numpy as np
import pytest

from govcon_search.core.config import settings
from govcon_search.core.exceptions import EmbeddingProviderError, StoreError
from govcon_search.core.startup import create_store
from govcon_search.database.memory import InMemoryContractStore
from govcon_search.database.supabase import SupabaseContractStore
from govcon_search.indexing.embeddings_sentence_transformers import SentenceTransformersEmbeddingProvider


class FakeQuery:
    def __init__(self, table: "FakeTable") -> None:
        self.table = table
        self.start = 0
        self.end = 0

    def select(self, columns: str) -> "FakeQuery":
        return self

    def range(self, start: int, end: int) -> "FakeQuery":
        self.start, self.end = start, end
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.start, self.end = 0, count - 1
        return self

    def execute(self):
        if self.table.error is not None:
            raise self.table.error
        self.table.ranges.append((self.start, self.end))
        return SimpleNamespace(data=self.table.rows[self.start:self.end + 1])


class FakeTable:
    def __init__(self, rows, error=None) -> None:
        self.rows = rows
        self.error = error
        self.ranges = []


class FakeSupabaseClient:
    def __init__(self, rows, error=None) -> None:
        self.contracts = FakeTable(rows, error)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.contracts)


class FakeSentenceModel:
    def get_sentence_embedding_dimension(self) -> int:
        return 2

    def encode(self, texts, **kwargs):
        if any("explode" in t for t in texts):
            raise RuntimeError("CUDA out of memory")
        return np.array([[1.0, float(len(t))] for t in texts])


class TestSupabaseContractStore:
    """Tests for SupabaseContractStore."""

    def test_reads_all_pages(self, sample_rows) -> None:
        client = FakeSupabaseClient(sample_rows)
        store = SupabaseContractStore(client=client, page_size=4)
        assert store.count_contracts() == 6
        assert client.contracts.ranges == [(0, 3), (4, 7)]

    def test_refresh_failure_keeps_snapshot(self, sample_rows) -> None:
        client = FakeSupabaseClient(sample_rows)
        store = SupabaseContractStore(client=client, page_size=10)
        client.contracts.error = RuntimeError("timeout")
        with pytest.raises(StoreError):
            store.refresh()
        assert store.count_contracts() == 6

    def test_searches_snapshot(self, sample_rows) -> None:
        store = SupabaseContractStore(client=FakeSupabaseClient(sample_rows))
        assert store.count_matches(["cybersecurity"]) == 1

    def test_health_check(self, sample_rows) -> None:
        client = FakeSupabaseClient(sample_rows)
        store = SupabaseContractStore(client=client, load=False)
        assert store.health_check()
        client.contracts.error = RuntimeError("down")
        assert not store.health_check()


class TestSentenceTransformersEmbeddingProvider:
    """Tests for SentenceTransformersEmbeddingProvider with a stub model."""

    def test_empty_texts_get_zero_vectors(self) -> None:
        provider = SentenceTransformersEmbeddingProvider(model=FakeSentenceModel())
        assert provider.create_embeddings(["", "abc"]) == [[0.0, 0.0], [1.0, 3.0]]
        assert provider.get_dimension() == 2

    def test_encode_failure(self) -> None:
        provider = SentenceTransformersEmbeddingProvider(model=FakeSentenceModel())
        with pytest.raises(EmbeddingProviderError):
            provider.create_embedding("explode")


class TestCreateStore:
    """Tests for create_store."""

    def test_memory_store_seeded_from_csv(self, tmp_path, monkeypatch) -> None:
        csv_file = tmp_path / "seed.csv"
        csv_file.write_text("id,title,status\ns1,Cloud Hosting,active\ns2,Data Platform,active\n", encoding="utf-8")
        monkeypatch.setattr(settings, "SEED_CSV_PATH", str(csv_file))

        store = create_store("memory")
        assert isinstance(store, InMemoryContractStore)
        assert store.count_contracts() == 2

    def test_postgres_requires_database_url(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "DATABASE_URL", "")
        with pytest.raises(ValueError):
            create_store("postgres")
