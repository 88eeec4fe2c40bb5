"""End-to-end search and suggestion scenarios over the in-memory store."""

from govcon_search.core.models.search import SearchFilters, SearchRequest
from govcon_search.core.search.ranking import ORIGINAL_TERM_WEIGHT, weighted_terms
from govcon_search.core.search.strategy import SearchStrategy, select_strategy
from govcon_search.core.startup import build_services
from govcon_search.indexing.embeddings import HashingEmbeddingProvider


class TestOrQueryScenario:
    """Mixed single-word and phrase terms joined with OR."""

    def test_union_ranked_by_field_weight(self, memory_store) -> None:
        services = build_services(store=memory_store, embedding_provider=HashingEmbeddingProvider(dimension=64))
        response = services.search_service.search(
            SearchRequest(query="web OR web development OR llms", mode="exact")
        )

        assert response.search_info.search_type == "or"
        assert response.search_info.terms_used == ["web", "web development", "llms"]
        assert [c.id for c in response.contracts] == ["c1", "c2"]
        # c1 matches "web" and "web development" in its title; c2 only "llms" in its description
        assert response.contracts[0].relevance_score == 20.0
        assert response.contracts[1].relevance_score == 5.0
        # The archived web hosting record matches but is filtered out
        assert response.total_count == 2
        assert response.total_unfiltered_count == 3


class TestSemanticExpansionScenario:
    """Single word forced into semantic mode."""

    def test_original_term_outweighs_expansions(self) -> None:
        plan = select_strategy("ai", mode="semantic")
        assert plan.strategy == SearchStrategy.SEMANTIC
        assert "artificial intelligence" in plan.terms
        assert "machine learning" in plan.terms

        weights = {t.term: t.weight for t in weighted_terms(plan)}
        assert weights["ai"] == ORIGINAL_TERM_WEIGHT
        assert weights["artificial intelligence"] * 3 == weights["ai"]
        assert all(w == 1 for term, w in weights.items() if term != "ai")

    def test_expansions_find_related_records(self, memory_store) -> None:
        services = build_services(store=memory_store, embedding_provider=HashingEmbeddingProvider(dimension=64))
        response = services.search_service.search(
            SearchRequest(query="ai", mode="semantic", filters=SearchFilters(status=None))
        )
        ids = [c.id for c in response.contracts]
        assert response.search_info.search_type == "semantic"
        assert "c4" in ids
        assert "c2" in ids
        assert "c3" not in ids


class TestDataUpdateScenario:
    """Suggestions reflect an import once the data-updated hook fires."""

    def test_lexical_cache_rebuilt_after_import(self, memory_store) -> None:
        services = build_services(store=memory_store, embedding_provider=HashingEmbeddingProvider(dimension=64))

        before = services.lexical_engine.suggest("web")
        assert "portal" not in [s["term"] for s in before]

        memory_store.add_contracts([
            {
                "id": "c7",
                "solicitation_number": "SOL-007",
                "title": "Web Portal Redesign",
                "description": "Portal accessibility upgrades.",
                "agency": "DEPARTMENT OF EDUCATION",
                "status": "active",
            }
        ])

        # Without the signal the cache is still within its TTL
        stale = services.lexical_engine.suggest("web")
        assert "portal" not in [s["term"] for s in stale]

        result = services.data_updated("csv-import")
        assert result["failed"] == []

        after = services.lexical_engine.suggest("web")
        assert {"term": "portal", "frequency": 3} in after

    def test_semantic_index_marked_stale(self, memory_store, keyword_provider) -> None:
        services = build_services(store=memory_store, embedding_provider=keyword_provider)
        services.semantic_engine.rebuild()
        assert services.semantic_engine.get_index_stats()["total_items"] == 6

        memory_store.add_contracts([{"id": "c7", "title": "Cloud migration", "status": "active"}])
        services.data_updated("sync")
        assert services.semantic_engine.needs_rebuild

        services.semantic_engine.get_suggestions("cloud")
        assert services.semantic_engine.get_index_stats()["total_items"] == 7
