"""Tests for govcon_search/core/suggestions/semantic.py - embedding-similarity suggestions."""

import threading

import pytest

from govcon_search.core.exceptions import EmbeddingProviderError, SuggestionsUnavailableError
from govcon_search.core.models.contract import Contract
from govcon_search.core.suggestions.semantic import (
    MAX_CONFIDENCE,
    IndexingConfig,
    SemanticSuggestionEngine,
    extract_all_text,
    is_too_similar,
)

ITEMS = [
    {"id": "1", "title": "cloud migration services for agency data centers"},
    {"id": "2", "title": "cloud migration planning and data center consolidation"},
    {"id": "3", "title": "cloud hosting migration support"},
    {"id": "4", "title": "janitorial services for federal buildings"},
]

TITLE_CONFIG = IndexingConfig(text_fields=["title"])


class TestHelpers:
    """Tests for text extraction and similarity filtering."""

    def test_is_too_similar_identical(self) -> None:
        assert is_too_similar("Cloud Migration", "cloud migration")

    def test_is_too_similar_containment(self) -> None:
        assert is_too_similar("cloud migration services", "cloud migration")
        assert is_too_similar("cloud", "cloud migration")

    def test_is_too_similar_word_overlap(self) -> None:
        query = "secure cloud data migration support"
        assert is_too_similar("support secure cloud data migration", query)
        assert not is_too_similar("data center consolidation", query)

    def test_extract_listed_fields(self) -> None:
        contract = Contract(id="1", title="Cloud", description="Hosting", agency=" GSA ")
        assert extract_all_text(contract, ["title", "agency", "office"]) == "Cloud GSA"

    def test_extract_walks_nested_values(self) -> None:
        item = {"id": "1", "meta": {"tags": ["cloud", "hosting"]}, "count": 3}
        assert extract_all_text(item) == "1 cloud hosting"


class TestSemanticSuggestionEngine:
    """Tests for SemanticSuggestionEngine."""

    @pytest.fixture
    def engine(self, keyword_provider) -> SemanticSuggestionEngine:
        engine = SemanticSuggestionEngine(
            embedding_provider=keyword_provider,
            min_similarity_score=0.7,
            min_term_frequency=2,
            phrase_length_range=(1, 3),
            batch_size=2,
            indexing_config=TITLE_CONFIG,
        )
        engine.index_data(ITEMS)
        return engine

    def test_index_data(self, engine) -> None:
        stats = engine.get_index_stats()
        assert stats["total_items"] == 4
        assert stats["built"] is True
        assert stats["embedding_dimension"] == 5

    def test_suggestions_from_similar_items(self, engine) -> None:
        suggestions = engine.get_suggestions("cloud migration")
        assert [s.term for s in suggestions] == ["data"]
        assert suggestions[0].frequency == 2
        assert suggestions[0].sample_item_ids == ["1", "2"]
        assert suggestions[0].is_phrase is False

    def test_query_variations_never_suggested(self, engine) -> None:
        terms = [s.term for s in engine.get_suggestions("cloud migration")]
        assert "cloud migration" not in terms
        assert "cloud" not in terms
        assert "migration" not in terms

    def test_confidence_is_capped(self, engine) -> None:
        engine.min_term_frequency = 1
        suggestions = engine.get_suggestions("cloud migration")
        assert suggestions
        assert all(0 < s.confidence <= MAX_CONFIDENCE for s in suggestions)
        assert len(suggestions) <= engine.max_suggestions

    def test_dissimilar_query_returns_empty(self, engine) -> None:
        assert engine.get_suggestions("web") == []

    def test_blank_query(self, engine) -> None:
        assert engine.get_suggestions("   ") == []

    def test_items_without_id_or_text_are_skipped(self, keyword_provider) -> None:
        engine = SemanticSuggestionEngine(keyword_provider, indexing_config=TITLE_CONFIG)
        count = engine.index_data([{"title": "cloud"}, {"id": "2", "title": "  "}, {"id": "3", "title": "cloud"}])
        assert count == 1

    def test_progress_callback(self, keyword_provider) -> None:
        engine = SemanticSuggestionEngine(keyword_provider, batch_size=3, indexing_config=TITLE_CONFIG)
        progress = []
        engine.index_data(ITEMS, progress_callback=lambda done, total: progress.append((done, total)))
        assert progress == [(3, 4), (4, 4)]

    def test_provider_failure_keeps_previous_index(self, engine, failing_provider) -> None:
        engine.embedding_provider = failing_provider
        with pytest.raises(EmbeddingProviderError):
            engine.index_data(ITEMS[:2])
        assert engine.get_index_stats()["total_items"] == 4

    def test_query_embedding_failure_is_unavailable(self, engine, failing_provider) -> None:
        engine.embedding_provider = failing_provider
        with pytest.raises(SuggestionsUnavailableError):
            engine.get_suggestions("cloud migration")

    def test_rebuild_failure_is_unavailable(self, failing_provider) -> None:
        engine = SemanticSuggestionEngine(
            failing_provider, loader=lambda: ITEMS, indexing_config=TITLE_CONFIG
        )
        with pytest.raises(SuggestionsUnavailableError):
            engine.get_suggestions("cloud")

    def test_lazy_rebuild_from_loader(self, keyword_provider) -> None:
        engine = SemanticSuggestionEngine(
            keyword_provider, loader=lambda: ITEMS, indexing_config=TITLE_CONFIG, phrase_length_range=(1, 3)
        )
        assert engine.needs_rebuild
        engine.get_suggestions("cloud migration")
        assert not engine.needs_rebuild
        engine.invalidate()
        assert engine.needs_rebuild

    def test_invalidate_during_rebuild_keeps_index_stale(self, keyword_provider) -> None:
        rows = [ITEMS[0]]
        loading = threading.Event()
        release = threading.Event()

        def blocking_loader():
            snapshot = list(rows)
            loading.set()
            release.wait(timeout=5)
            return snapshot

        engine = SemanticSuggestionEngine(keyword_provider, loader=blocking_loader, indexing_config=TITLE_CONFIG)
        worker = threading.Thread(target=engine.rebuild)
        worker.start()
        assert loading.wait(timeout=5)

        rows.append(ITEMS[1])
        engine.invalidate()
        release.set()
        worker.join(timeout=5)

        assert engine.get_index_stats()["total_items"] == 1
        assert engine.needs_rebuild

        engine.rebuild()
        assert not engine.needs_rebuild
        assert [i.id for i in engine.find_items_containing("cloud")] == ["1", "2"]

    def test_rebuild_without_loader(self, keyword_provider) -> None:
        engine = SemanticSuggestionEngine(keyword_provider)
        with pytest.raises(RuntimeError):
            engine.rebuild()

    def test_find_items_containing_whole_word(self, engine) -> None:
        assert [i.id for i in engine.find_items_containing("data")] == ["1", "2"]
        assert engine.find_items_containing("dat") == []

    def test_clear_index(self, engine) -> None:
        engine.clear_index()
        assert engine.get_index_stats()["total_items"] == 0
        assert engine.get_suggestions("cloud migration") == []
