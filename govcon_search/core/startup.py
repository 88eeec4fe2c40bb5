"""
Startup and Composition Root
Builds the store, search service and suggestion engines, and wires the data-updated hook

Every long-lived component is constructed here and owned by an AppServices
instance; nothing is created as a module-level global.
"""
import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from govcon_search.core.config import settings
from govcon_search.core.logging import get_logger
from govcon_search.core.search.service import ContractSearchService
from govcon_search.core.suggestions.lexical import LexicalSuggestionEngine
from govcon_search.core.suggestions.semantic import SemanticSuggestionEngine
from govcon_search.database.base import ContractStore
from govcon_search.database.connection import validate_database_config
from govcon_search.indexing.embeddings import EmbeddingProvider, get_embedding_provider
from govcon_search.indexing.events import DataUpdateNotifier

logger = get_logger(__name__)


@dataclass
class AppServices:
    """Components shared by every request"""
    store: ContractStore
    search_service: ContractSearchService
    lexical_engine: LexicalSuggestionEngine
    semantic_engine: SemanticSuggestionEngine
    notifier: DataUpdateNotifier
    indexing_jobs: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def data_updated(self, source: str = "manual") -> Dict[str, Any]:
        """Fan a data-updated signal out to every subscriber"""
        return self.notifier.notify(source)


def create_store(backend: Optional[str] = None) -> ContractStore:
    """
    Build the contract store selected in settings

    Args:
        backend: "memory", "postgres" or "supabase" (defaults to settings.STORE_BACKEND)
    """
    backend = backend or settings.STORE_BACKEND
    validate_database_config(backend)

    if backend == "postgres":
        from govcon_search.database.postgres import PostgresContractStore
        return PostgresContractStore()

    if backend == "supabase":
        from govcon_search.database.supabase import SupabaseContractStore
        return SupabaseContractStore()

    from govcon_search.database.memory import InMemoryContractStore
    store = InMemoryContractStore()
    if settings.SEED_CSV_PATH:
        from govcon_search.database.csv_loader import read_contracts_csv
        store.load_contracts(read_contracts_csv(settings.SEED_CSV_PATH))
    return store


def build_services(
    store: Optional[ContractStore] = None,
    embedding_provider: Optional[EmbeddingProvider] = None,
) -> AppServices:
    """
    Construct and wire all services

    Data updates refresh the store first, then invalidate the lexical
    cache and the semantic index so their next request rebuilds.
    """
    store = store or create_store()
    embedding_provider = embedding_provider or get_embedding_provider()

    search_service = ContractSearchService(store)
    lexical_engine = LexicalSuggestionEngine(
        loader=store.get_all_contracts,
        ttl_seconds=settings.SUGGESTION_CACHE_TTL_SECONDS,
        max_suggestions=settings.LEXICAL_MAX_SUGGESTIONS,
        min_frequency=settings.LEXICAL_MIN_FREQUENCY,
    )
    semantic_engine = SemanticSuggestionEngine(
        embedding_provider=embedding_provider,
        min_similarity_score=settings.SEMANTIC_MIN_SIMILARITY,
        max_suggestions=settings.SEMANTIC_MAX_SUGGESTIONS,
        min_term_frequency=settings.SEMANTIC_MIN_TERM_FREQUENCY,
        phrase_length_range=settings.phrase_length_range,
        batch_size=settings.EMBEDDING_BATCH_SIZE,
        loader=store.get_all_contracts,
    )

    notifier = DataUpdateNotifier()
    notifier.subscribe(lambda source: store.refresh())
    notifier.subscribe(lambda source: lexical_engine.invalidate())
    notifier.subscribe(lambda source: semantic_engine.invalidate())

    logger.info(
        "Services built",
        extra={"store_backend": store.name, "embedding_dimension": embedding_provider.get_dimension()},
    )
    return AppServices(
        store=store,
        search_service=search_service,
        lexical_engine=lexical_engine,
        semantic_engine=semantic_engine,
        notifier=notifier,
    )


async def warmup_semantic_index(services: AppServices) -> None:
    """Build the semantic index off the event loop (non-critical)"""
    try:
        logger.info("Building semantic suggestion index at startup...")
        loop = asyncio.get_running_loop()
        count = await loop.run_in_executor(None, services.semantic_engine.rebuild)
        logger.info(f"Startup semantic index built with {count} items")
    except Exception as e:
        logger.warning(f"Startup semantic indexing failed (non-critical): {e}")


@asynccontextmanager
async def lifespan_manager(app):
    """
    FastAPI lifespan manager for startup and shutdown

    Builds AppServices unless the app already carries one (tests inject theirs).
    """
    logger.info("Application starting up...")
    logger.info(
        "Configuration loaded",
        extra={
            "environment": settings.ENVIRONMENT,
            "store_backend": settings.STORE_BACKEND,
            "embedding_provider": settings.EMBEDDING_PROVIDER,
            "api_host": settings.API_HOST,
            "api_port": settings.API_PORT,
        },
    )

    if getattr(app.state, "services", None) is None:
        app.state.services = build_services()

    warmup_task = None
    if settings.SEMANTIC_INDEX_ON_STARTUP:
        warmup_task = asyncio.create_task(warmup_semantic_index(app.state.services))

    yield

    logger.info("Application shutting down...")
    if warmup_task is not None and not warmup_task.done():
        warmup_task.cancel()
    close = getattr(app.state.services.store, "close", None)
    if callable(close):
        try:
            close()
        except Exception as e:
            logger.warning(f"Error closing contract store: {e}")


def check_memory_usage() -> dict:
    """
    Check memory usage for health monitoring

    Returns:
        dict with memory stats, empty if psutil is unavailable
    """
    try:
        import psutil

        memory = psutil.virtual_memory()
        disk = psutil.disk_usage('/')

        return {
            "memory_percent": memory.percent,
            "memory_available_mb": memory.available / (1024 * 1024),
            "disk_percent": disk.percent,
            "disk_available_gb": disk.free / (1024 * 1024 * 1024)
        }
    except ImportError:
        return {}
    except Exception as e:
        logger.warning(f"Could not check memory usage: {e}")
        return {}
