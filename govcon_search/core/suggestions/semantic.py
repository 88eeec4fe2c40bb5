"""
Semantic Suggestions
Related-phrase suggestions from embedding similarity over an in-memory index

Every record is embedded once per corpus snapshot. A query is embedded with
the same provider, similar records are selected by cosine similarity, and
phrases drawn from them are ranked by how many similar records contain them.
The index is rebuilt wholesale and swapped in only once complete.
"""
import re
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from govcon_search.core.exceptions import EmbeddingProviderError, SuggestionsUnavailableError
from govcon_search.core.logging import get_logger
from govcon_search.core.models.search import SearchSuggestion
from govcon_search.core.search.text import extract_phrases, normalize
from govcon_search.indexing.embeddings import EmbeddingProvider, cosine_similarity

logger = get_logger(__name__)

ItemLoader = Callable[[], Sequence[Any]]
ProgressCallback = Callable[[int, int], None]

MAX_CONFIDENCE = 0.95
MAX_WORD_OVERLAP = 0.8
SAMPLE_ITEM_IDS = 3
PROGRESS_EVERY = 100
MAX_WALK_DEPTH = 3


@dataclass
class IndexingConfig:
    """
    How to turn an item into indexable text

    Exactly one text source is used, in priority order: ``text_extractor``,
    ``text_fields``, then the reflective walker when ``walk_all_fields`` is set.
    """
    id_field: str = "id"
    text_fields: Optional[List[str]] = None
    text_extractor: Optional[Callable[[Any], str]] = None
    walk_all_fields: bool = False


CONTRACT_INDEXING_CONFIG = IndexingConfig(
    id_field="id",
    text_fields=[
        "title",
        "description",
        "agency",
        "office",
        "naics_description",
        "set_aside_description",
        "place_of_performance",
    ],
)


@dataclass(frozen=True)
class IndexedItem:
    id: str
    data: Any
    text: str
    embedding: List[float] = field(repr=False)


def _get_field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def extract_all_text(item: Any, text_fields: Optional[Sequence[str]] = None) -> str:
    """
    Join an item's text values

    With ``text_fields`` only those string fields are used. Without them,
    every string reachable through dicts, lists and models is collected,
    up to a fixed depth.
    """
    if item is None:
        return ""

    if text_fields is not None:
        values = (_get_field(item, name) for name in text_fields)
        return " ".join(v.strip() for v in values if isinstance(v, str) and v.strip())

    collected: List[str] = []

    def walk(value: Any, depth: int) -> None:
        if depth > MAX_WALK_DEPTH:
            return
        if isinstance(value, str):
            if value.strip():
                collected.append(value.strip())
        elif isinstance(value, BaseModel):
            walk(value.model_dump(), depth)
        elif isinstance(value, dict):
            for nested in value.values():
                walk(nested, depth + 1)
        elif isinstance(value, (list, tuple)):
            for nested in value:
                walk(nested, depth + 1)

    walk(item, 0)
    return " ".join(collected)


def is_too_similar(phrase: str, query: str) -> bool:
    """
    True when a phrase is only a variation of the query

    Either one contains the other, or the word overlap ratio
    (shared words / larger word set) exceeds 0.8.
    """
    normalized_phrase = normalize(phrase)
    normalized_query = normalize(query)
    if not normalized_phrase or not normalized_query:
        return False

    if normalized_query in normalized_phrase or normalized_phrase in normalized_query:
        return True

    query_words = set(normalized_query.split())
    phrase_words = set(normalized_phrase.split())
    overlap = len(query_words & phrase_words)
    return overlap / max(len(query_words), len(phrase_words)) > MAX_WORD_OVERLAP


def word_boundary_pattern(term: str) -> "re.Pattern[str]":
    """Case-insensitive whole-word pattern ("llm" does not match "tllm")"""
    return re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)


class SemanticSuggestionEngine:
    """
    Embedding-similarity suggestion engine

    Owns its index. ``invalidate()`` marks it stale so the next request
    rebuilds from the loader; ``rebuild()`` does so immediately.
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        min_similarity_score: float = 0.7,
        max_suggestions: int = 8,
        min_term_frequency: int = 2,
        phrase_length_range: Tuple[int, int] = (1, 5),
        batch_size: int = 10,
        loader: Optional[ItemLoader] = None,
        indexing_config: Optional[IndexingConfig] = None,
    ):
        self.embedding_provider = embedding_provider
        self.min_similarity_score = min_similarity_score
        self.max_suggestions = max_suggestions
        self.min_term_frequency = min_term_frequency
        self.phrase_length_range = phrase_length_range
        self.batch_size = max(1, batch_size)
        self.loader = loader
        self.indexing_config = indexing_config or CONTRACT_INDEXING_CONFIG

        self._items: List[IndexedItem] = []
        self._built = False
        self._stale = False
        self._built_at: Optional[float] = None
        self._generation = 0
        self._rebuild_lock = threading.Lock()
        self._state_lock = threading.Lock()

    # ==================== Indexing ====================

    def _item_text(self, item: Any, config: IndexingConfig) -> str:
        if config.text_extractor is not None:
            return config.text_extractor(item) or ""
        if config.text_fields is not None:
            return extract_all_text(item, config.text_fields)
        if config.walk_all_fields:
            return extract_all_text(item)
        raise ValueError("IndexingConfig needs text_fields, text_extractor or walk_all_fields=True")

    def index_data(
        self,
        items: Sequence[Any],
        config: Optional[IndexingConfig] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Build a new index from items and swap it in

        Args:
            items: Records (dicts or models)
            config: Id and text extraction settings (defaults to the engine's config)
            progress_callback: Called with (embedded_count, total) after each batch

        Returns:
            Number of items indexed

        Raises:
            EmbeddingProviderError: The provider failed; the previous index is kept
        """
        return self._index_items(items, config or self.indexing_config, progress_callback, self._generation)

    def _index_items(
        self,
        items: Sequence[Any],
        config: IndexingConfig,
        progress_callback: Optional[ProgressCallback],
        generation: int,
    ) -> int:
        start_time = time.time()
        logger.info(f"Indexing {len(items)} items for semantic suggestions")

        pending: List[Tuple[str, Any, str]] = []
        for position, item in enumerate(items):
            item_id = _get_field(item, config.id_field)
            if item_id is None or str(item_id).strip() == "":
                logger.warning(
                    f"Item at index {position} missing ID field '{config.id_field}', skipping",
                    extra={"position": position},
                )
                continue

            text = self._item_text(item, config).strip()
            if not text:
                logger.warning(f"No text content found for item {item_id}, skipping", extra={"item_id": str(item_id)})
                continue
            pending.append((str(item_id), item, text))

        total = len(pending)
        new_items: List[IndexedItem] = []
        for start in range(0, total, self.batch_size):
            batch = pending[start:start + self.batch_size]
            try:
                embeddings = self.embedding_provider.create_embeddings([text for _, _, text in batch])
            except EmbeddingProviderError:
                logger.error("Semantic indexing aborted; keeping previous index", exc_info=True)
                raise
            except Exception as e:
                logger.error(f"Semantic indexing aborted; keeping previous index: {e}", exc_info=True)
                raise EmbeddingProviderError(f"Embedding failed during indexing: {e}") from e

            for (item_id, item, text), embedding in zip(batch, embeddings):
                new_items.append(IndexedItem(id=item_id, data=item, text=text, embedding=list(embedding)))

            done = len(new_items)
            if done // PROGRESS_EVERY > (done - len(batch)) // PROGRESS_EVERY:
                logger.info(f"Indexed {done}/{total} items")
            if progress_callback is not None:
                progress_callback(done, total)

        with self._state_lock:
            self._items = new_items
            self._built = True
            self._built_at = time.time()
            # An invalidation during the build means the loaded data is already old
            stale = self._generation != generation
            self._stale = stale
        if stale:
            logger.info("Data changed while indexing; semantic index stays stale")

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Indexed {len(new_items)} items in {duration_ms}ms",
            extra={"item_count": len(new_items), "skipped": len(items) - total, "duration_ms": duration_ms},
        )
        return len(new_items)

    def rebuild(self, progress_callback: Optional[ProgressCallback] = None) -> int:
        """
        Re-read the loader and rebuild the index

        Raises:
            RuntimeError: No loader configured
            EmbeddingProviderError: The provider failed; the previous index is kept
        """
        if self.loader is None:
            raise RuntimeError("No loader configured for semantic index rebuild")
        with self._rebuild_lock:
            generation = self._generation
            items = self.loader()
            return self._index_items(items, self.indexing_config, progress_callback, generation)

    def invalidate(self) -> None:
        """Mark the index stale; the next request rebuilds it"""
        with self._state_lock:
            self._generation += 1
            self._stale = True
        logger.info("Semantic suggestion index invalidated")

    def clear_index(self) -> None:
        self._items = []
        self._built = False
        self._built_at = None
        logger.info("Cleared semantic suggestion index")

    @property
    def needs_rebuild(self) -> bool:
        return self.loader is not None and (not self._built or self._stale)

    # ==================== Suggestions ====================

    def get_suggestions(self, query: str) -> List[SearchSuggestion]:
        """
        Suggest phrases found in records similar to the query

        Args:
            query: Free-text query

        Returns:
            Suggestions sorted by frequency; empty when nothing is similar enough

        Raises:
            SuggestionsUnavailableError: The embedding provider failed
        """
        if not query or not query.strip():
            return []
        query = query.strip()

        if self.needs_rebuild:
            try:
                self.rebuild()
            except Exception as e:
                raise SuggestionsUnavailableError(f"Semantic index could not be built: {e}") from e

        items = self._items
        if not items:
            logger.debug("Semantic index is empty; no suggestions")
            return []

        try:
            query_embedding = self.embedding_provider.create_embedding(query)
        except Exception as e:
            logger.error(f"Query embedding failed: {e}", extra={"query": query})
            raise SuggestionsUnavailableError(f"Query embedding failed: {e}") from e

        similar = self._find_similar_items(query_embedding, items)
        if not similar:
            logger.debug(f"No similar items found for '{query}'")
            return []

        suggestions = self._extract_suggestions(similar, query)
        logger.info(
            f"Generated {len(suggestions)} semantic suggestions from {len(similar)} similar items",
            extra={"query": query, "similar_items": len(similar)},
        )
        return suggestions

    def _find_similar_items(
        self, query_embedding: Sequence[float], items: Sequence[IndexedItem]
    ) -> List[Tuple[IndexedItem, float]]:
        similar = []
        for item in items:
            try:
                similarity = cosine_similarity(query_embedding, item.embedding)
            except ValueError as e:
                logger.warning(f"Skipping item {item.id}: {e}")
                continue
            if similarity >= self.min_similarity_score:
                similar.append((item, similarity))
        similar.sort(key=lambda pair: pair[1], reverse=True)
        return similar

    def _extract_suggestions(
        self, similar: Sequence[Tuple[IndexedItem, float]], query: str
    ) -> List[SearchSuggestion]:
        frequencies: Dict[str, int] = {}
        item_ids: Dict[str, List[str]] = {}

        for item, _ in similar:
            for phrase in extract_phrases(item.text, self.phrase_length_range):
                if is_too_similar(phrase, query):
                    continue
                frequencies[phrase] = frequencies.get(phrase, 0) + 1
                ids = item_ids.setdefault(phrase, [])
                if item.id not in ids:
                    ids.append(item.id)

        candidates = [
            (phrase, freq) for phrase, freq in frequencies.items() if freq >= self.min_term_frequency
        ]
        if not candidates:
            return []

        # sorted() is stable, so equal frequencies keep first-seen order
        candidates = sorted(candidates, key=lambda pair: pair[1], reverse=True)
        max_frequency = candidates[0][1]

        return [
            SearchSuggestion(
                term=phrase,
                frequency=freq,
                confidence=min(MAX_CONFIDENCE, freq / max_frequency),
                sample_item_ids=item_ids[phrase][:SAMPLE_ITEM_IDS],
                is_phrase=" " in phrase,
            )
            for phrase, freq in candidates[:self.max_suggestions]
        ]

    # ==================== Introspection ====================

    def get_index_stats(self) -> Dict[str, Any]:
        items = self._items
        avg_text_length = round(sum(len(i.text) for i in items) / len(items)) if items else 0
        return {
            "total_items": len(items),
            "avg_text_length": avg_text_length,
            "embedding_dimension": self.embedding_provider.get_dimension(),
            "built": self._built,
            "stale": self._stale,
            "built_at": self._built_at,
        }

    def find_items_containing(self, term: str) -> List[IndexedItem]:
        """Indexed items whose text contains the term as a whole word"""
        if not term or not term.strip():
            return []
        pattern = word_boundary_pattern(term.strip())
        return [item for item in self._items if pattern.search(item.text)]
