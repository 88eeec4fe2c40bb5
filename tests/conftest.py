"""Pytest configuration and fixtures."""

import os

# Keep test runs from writing log files or reaching external services
os.environ["LOG_FILE"] = ""
os.environ["STORE_BACKEND"] = "memory"
os.environ["EMBEDDING_PROVIDER"] = "hashing"
os.environ["INDEXING_API_KEY"] = ""
os.environ["SEMANTIC_INDEX_ON_STARTUP"] = "false"
os.environ["SEED_CSV_PATH"] = ""

from typing import List, Sequence

import pytest

from govcon_search.core.exceptions import EmbeddingProviderError
from govcon_search.core.models.contract import Contract
from govcon_search.core.search.text import normalize
from govcon_search.database.memory import InMemoryContractStore
from govcon_search.indexing.embeddings import EmbeddingProvider


SAMPLE_ROWS = [
    {
        "id": "c1",
        "solicitation_number": "SOL-001",
        "title": "Web Development Services for Agency Portal",
        "description": "Modernize the public website with responsive web design.",
        "agency": "DEPARTMENT OF DEFENSE",
        "award_amount": "$1,500,000",
        "posted_date": "2024-03-01",
        "created_at": "2024-03-01T10:00:00",
        "status": "active",
    },
    {
        "id": "c2",
        "solicitation_number": "SOL-002",
        "title": "Large Language Model Pilot",
        "description": "Evaluate llms and chatbot tools for analysts.",
        "agency": "INTERIOR, DEPARTMENT OF THE",
        "award_amount": "$250,000",
        "posted_date": "2024-02-01",
        "created_at": "2024-02-01T10:00:00",
        "status": "active",
    },
    {
        "id": "c3",
        "solicitation_number": "SOL-003",
        "title": "Cybersecurity Assessment",
        "description": "Network security monitoring and incident response.",
        "agency": "DEPARTMENT OF HOMELAND SECURITY",
        "award_amount": "$3,000,000",
        "posted_date": "2024-01-15",
        "created_at": "2024-01-15T10:00:00",
        "status": "active",
    },
    {
        "id": "c4",
        "solicitation_number": "SOL-004",
        "title": "Artificial Intelligence Research",
        "description": "Machine learning models for logistics forecasting.",
        "agency": "DEPARTMENT OF DEFENSE",
        "award_amount": "$900,000",
        "posted_date": "2024-04-01",
        "created_at": "2024-04-01T10:00:00",
        "status": "active",
    },
    {
        "id": "c5",
        "solicitation_number": "SOL-005",
        "title": "Legacy Web Hosting",
        "description": "Hosting for archived website content.",
        "agency": None,
        "award_amount": "",
        "posted_date": "2023-06-01",
        "created_at": "2023-06-01T10:00:00",
        "status": "archived",
    },
    {
        "id": "c6",
        "solicitation_number": "SOL-006",
        "title": "Data Analytics Platform",
        "description": "Cloud computing platform for data science teams.",
        "agency": "GENERAL SERVICES ADMINISTRATION",
        "award_amount": "$5,000,000",
        "posted_date": "2024-05-01",
        "created_at": "2024-05-01T10:00:00",
        "status": "active",
    },
]


class KeywordEmbeddingProvider(EmbeddingProvider):
    """One dimension per keyword; a dimension is 1.0 when the text contains the keyword."""

    def __init__(self, keywords: Sequence[str]):
        self.keywords = list(keywords)
        self.calls = 0

    def create_embedding(self, text: str) -> List[float]:
        self.calls += 1
        words = set(normalize(text).split())
        return [1.0 if keyword in words else 0.0 for keyword in self.keywords]

    def get_dimension(self) -> int:
        return len(self.keywords)


class FailingEmbeddingProvider(EmbeddingProvider):
    """Simulates a provider outage."""

    def create_embedding(self, text: str) -> List[float]:
        raise EmbeddingProviderError("provider unavailable")

    def get_dimension(self) -> int:
        return 3


@pytest.fixture
def sample_rows() -> List[dict]:
    """Raw contract rows."""
    return [dict(row) for row in SAMPLE_ROWS]


@pytest.fixture
def sample_contracts(sample_rows) -> List[Contract]:
    """Validated Contract models."""
    return [Contract.from_row(row) for row in sample_rows]


@pytest.fixture
def memory_store(sample_rows) -> InMemoryContractStore:
    """In-memory store loaded with the sample contracts."""
    return InMemoryContractStore(sample_rows)


@pytest.fixture
def keyword_provider() -> KeywordEmbeddingProvider:
    """Deterministic embedding provider over a small vocabulary."""
    return KeywordEmbeddingProvider(["cloud", "migration", "janitorial", "web", "security"])


@pytest.fixture
def failing_provider() -> FailingEmbeddingProvider:
    """Embedding provider that always fails."""
    return FailingEmbeddingProvider()
