"""
Lexical Suggestions
Related-term suggestions from corpus term frequencies
"""
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from govcon_search.core.logging import get_logger
from govcon_search.core.models.contract import Contract
from govcon_search.core.search.text import STOP_WORDS, normalize, parse_or_terms

logger = get_logger(__name__)

ContractLoader = Callable[[], Sequence[Contract]]

MIN_QUERY_LENGTH = 2
MIN_TOKEN_LENGTH = 4


def record_text(contract: Contract) -> str:
    """Lowercased "title description agency" text indexed for a record"""
    parts = [contract.title, contract.description or "", contract.agency or ""]
    return " ".join(parts).lower()


def suggestion_tokens(text: str) -> List[str]:
    """Candidate terms of a record: longer than 3 characters and not stop words"""
    return [
        token for token in normalize(text).split()
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


@dataclass
class TermFrequencyCache:
    """Snapshot of corpus term counts and per-record texts"""
    global_term_counts: Dict[str, int] = field(default_factory=dict)
    record_texts: List[str] = field(default_factory=list)
    built_at: float = 0.0

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return bool(self.record_texts) and (now - self.built_at) < ttl_seconds


class LexicalSuggestionEngine:
    """
    Suggests terms that co-occur with the query in matching records

    The term cache is rebuilt synchronously under a lock when it is older
    than the TTL, empty, or invalidated after a data update.
    """

    def __init__(
        self,
        loader: ContractLoader,
        ttl_seconds: float = 300,
        max_suggestions: int = 6,
        min_frequency: int = 2,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.loader = loader
        self.ttl_seconds = ttl_seconds
        self.max_suggestions = max_suggestions
        self.min_frequency = min_frequency
        self._clock = clock
        self._lock = threading.Lock()
        self._cache: Optional[TermFrequencyCache] = None
        self.rebuild_count = 0

    def invalidate(self) -> None:
        """Drop the cache; the next request rebuilds it"""
        with self._lock:
            self._cache = None
        logger.info("Lexical suggestion cache invalidated")

    def _build_cache(self) -> TermFrequencyCache:
        contracts = self.loader()
        counts: Counter = Counter()
        texts = []
        empty_records = 0

        for contract in contracts:
            text = record_text(contract)
            if not text.strip():
                empty_records += 1
            texts.append(text)
            counts.update(suggestion_tokens(text))

        if empty_records:
            logger.warning(
                f"{empty_records} contract(s) have no title, description or agency text",
                extra={"empty_records": empty_records},
            )

        logger.info(
            f"Term frequency cache built with {len(counts)} unique terms from {len(texts)} contracts",
            extra={"term_count": len(counts), "record_count": len(texts)},
        )
        return TermFrequencyCache(global_term_counts=dict(counts), record_texts=texts, built_at=self._clock())

    def _get_cache(self) -> TermFrequencyCache:
        cache = self._cache
        if cache is not None and cache.is_fresh(self._clock(), self.ttl_seconds):
            return cache

        with self._lock:
            # Another request may have rebuilt while we waited
            cache = self._cache
            if cache is not None and cache.is_fresh(self._clock(), self.ttl_seconds):
                return cache
            cache = self._build_cache()
            self._cache = cache
            self.rebuild_count += 1
            return cache

    def suggest(self, query: str) -> List[Dict[str, object]]:
        """
        Suggest related terms for a query

        Args:
            query: Raw query; OR-delimited terms are supported

        Returns:
            Up to max_suggestions {"term", "frequency"} dicts, most frequent first;
            empty for short queries, unmatched queries or a failed load
        """
        if not query or len(query.strip()) < MIN_QUERY_LENGTH:
            return []

        terms = parse_or_terms(query)
        if not terms:
            return []

        try:
            cache = self._get_cache()
        except Exception as e:
            logger.error(f"Failed to build term frequency cache: {e}", exc_info=True)
            return []

        excluded = set(terms)
        counts: Counter = Counter()
        for text in cache.record_texts:
            if any(term in text for term in terms):
                counts.update(t for t in suggestion_tokens(text) if t not in excluded)

        ranked = sorted(
            ((term, freq) for term, freq in counts.items() if freq >= self.min_frequency),
            key=lambda item: (-item[1], item[0]),
        )
        suggestions = [{"term": term, "frequency": freq} for term, freq in ranked[:self.max_suggestions]]

        logger.debug(
            f"Lexical suggestions: {len(suggestions)} for {len(terms)} term(s)",
            extra={"query": query, "suggestion_count": len(suggestions)},
        )
        return suggestions

    def cache_stats(self) -> Dict[str, object]:
        """Size and age of the current cache"""
        cache = self._cache
        if cache is None:
            return {"built": False, "term_count": 0, "record_count": 0, "age_seconds": None}
        return {
            "built": True,
            "term_count": len(cache.global_term_counts),
            "record_count": len(cache.record_texts),
            "age_seconds": round(self._clock() - cache.built_at, 3),
            "rebuild_count": self.rebuild_count,
        }
