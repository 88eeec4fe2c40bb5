"""Tests for the FastAPI routes using TestClient."""

import pytest
from fastapi.testclient import TestClient

from govcon_search.api.app import create_app
from govcon_search.api.routes.indexing import prune_finished_jobs
from govcon_search.core.config import Settings, settings
from govcon_search.core.startup import build_services


@pytest.fixture
def services(memory_store, keyword_provider):
    return build_services(store=memory_store, embedding_provider=keyword_provider)


@pytest.fixture
def client(services) -> TestClient:
    return TestClient(create_app(services=services))


class TestSearchRoutes:
    """Tests for /search."""

    def test_post_search_camel_case_response(self, client) -> None:
        response = client.post("/search", json={"query": "web OR llms"})
        assert response.status_code == 200
        data = response.json()
        assert data["totalCount"] == 2
        assert data["totalUnfilteredCount"] == 3
        assert data["hasMore"] is False
        assert data["searchInfo"] == {
            "searchType": "or",
            "termsUsed": ["web", "llms"],
            "originalTerm": "web OR llms",
        }
        assert data["contracts"][0]["solicitationNumber"] == "SOL-001"

    def test_post_search_with_camel_case_filters(self, client) -> None:
        response = client.post(
            "/search",
            json={"query": "department", "mode": "exact", "filters": {"agencies": ["INTERIOR"], "minAwardAmount": 100000}},
        )
        assert response.status_code == 200
        assert [c["id"] for c in response.json()["contracts"]] == ["c2"]

    def test_get_search_status_all(self, client) -> None:
        response = client.get("/search", params={"q": "hosting", "status": "all"})
        assert response.status_code == 200
        assert [c["id"] for c in response.json()["contracts"]] == ["c5"]

    def test_get_search_agencies_pipe_separated(self, client) -> None:
        response = client.get("/search", params={"q": "", "agencies": "INTERIOR|HOMELAND"})
        data = response.json()
        assert sorted(c["id"] for c in data["contracts"]) == ["c2", "c3"]
        assert data["awardAmountRange"] == {"min": 250000.0, "max": 5000000.0}

    def test_invalid_mode_rejected(self, client) -> None:
        response = client.post("/search", json={"query": "web", "mode": "fuzzy"})
        assert response.status_code == 422

    def test_store_failure_returns_500(self, client, services, monkeypatch) -> None:
        def broken(*args, **kwargs):
            raise RuntimeError("database down")

        monkeypatch.setattr(services.store, "search_contracts", broken)
        response = client.post("/search", json={"query": "cybersecurity"})
        assert response.status_code == 500


class TestSuggestionRoutes:
    """Tests for /suggestions."""

    def test_lexical_suggestions(self, client) -> None:
        response = client.get("/suggestions", params={"q": "web"})
        assert response.status_code == 200
        assert response.json() == {
            "suggestions": [{"term": "hosting", "frequency": 2}, {"term": "website", "frequency": 2}]
        }

    def test_lexical_short_query(self, client) -> None:
        assert client.get("/suggestions", params={"q": "w"}).json() == {"suggestions": []}

    def test_semantic_suggestions_available(self, client) -> None:
        response = client.get("/suggestions/semantic", params={"q": "web"})
        assert response.status_code == 200
        assert response.json()["available"] is True

    def test_semantic_unavailable_is_503(self, memory_store, failing_provider) -> None:
        app = create_app(services=build_services(store=memory_store, embedding_provider=failing_provider))
        response = TestClient(app).get("/suggestions/semantic", params={"q": "cloud"})
        assert response.status_code == 503
        data = response.json()
        assert data["suggestions"] == []
        assert data["available"] is False
        assert data["error"]


class TestIndexingRoutes:
    """Tests for /indexing."""

    def test_rebuild_job_completes(self, client) -> None:
        response = client.post("/indexing/rebuild")
        assert response.status_code == 200
        job_id = response.json()["job_id"]

        status = client.get(f"/indexing/jobs/{job_id}").json()
        assert status["status"] == "completed"
        assert status["result"] == {"indexed_items": 6}

    def test_finished_jobs_are_capped(self, client, services, monkeypatch) -> None:
        monkeypatch.setattr(settings, "MAX_TRACKED_JOBS", 2)
        job_ids = [client.post("/indexing/rebuild").json()["job_id"] for _ in range(4)]

        assert list(services.indexing_jobs) == job_ids[-2:]
        assert client.get(f"/indexing/jobs/{job_ids[0]}").status_code == 404
        assert client.get("/indexing/stats").json()["jobs"] == 2

    def test_running_jobs_are_never_pruned(self) -> None:
        jobs = {
            "a": {"status": "running"},
            "b": {"status": "completed"},
            "c": {"status": "failed"},
        }
        prune_finished_jobs(jobs, 1)
        assert list(jobs) == ["a"]

    def test_unknown_job(self, client) -> None:
        assert client.get("/indexing/jobs/missing").status_code == 404

    def test_data_updated_invalidates_caches(self, client, services) -> None:
        client.get("/suggestions", params={"q": "web"})
        assert services.lexical_engine.cache_stats()["built"] is True

        response = client.post("/indexing/data-updated", json={"source": "csv-import"})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert len(data["succeeded"]) == 3
        assert services.lexical_engine.cache_stats()["built"] is False
        assert services.semantic_engine.needs_rebuild

    def test_stats(self, client) -> None:
        data = client.get("/indexing/stats").json()
        assert data["contracts"] == 6
        assert data["semantic"]["total_items"] == 0
        assert data["lexical"]["built"] is False

    def test_api_key_required_when_configured(self, client, monkeypatch) -> None:
        monkeypatch.setattr(settings, "INDEXING_API_KEY", "secret")
        assert client.get("/indexing/stats").status_code == 401
        assert client.get("/indexing/stats", headers={"X-API-Key": "wrong"}).status_code == 401
        assert client.get("/indexing/stats", headers={"X-API-Key": "secret"}).status_code == 200


class TestHealthRoutes:
    """Tests for /health and the root endpoint."""

    def test_health(self, client) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["components"]["store"] == "connected"
        assert data["components"]["store_backend"] == "memory"
        assert data["components"]["config"] == "valid"

    def test_liveness(self, client) -> None:
        assert client.get("/liveness").json()["alive"] is True

    def test_root(self, client) -> None:
        assert client.get("/").json()["endpoints"]["search"] == "/search"


class TestSettings:
    """Tests for Settings validation."""

    def test_invalid_store_backend(self) -> None:
        with pytest.raises(ValueError):
            Settings(STORE_BACKEND="mongo").validate_store_backend()

    def test_invalid_phrase_range(self) -> None:
        with pytest.raises(ValueError):
            Settings(SEMANTIC_PHRASE_MIN_LENGTH=3, SEMANTIC_PHRASE_MAX_LENGTH=2).validate_phrase_range()

    def test_invalid_table_name(self) -> None:
        with pytest.raises(ValueError):
            Settings(CONTRACTS_TABLE_NAME="contracts; drop").validate_table_name()

    def test_extra_known_phrases(self) -> None:
        assert Settings(EXTRA_KNOWN_PHRASES=" Grounds Maintenance, ,hvac repair").extra_known_phrases == [
            "grounds maintenance",
            "hvac repair",
        ]
