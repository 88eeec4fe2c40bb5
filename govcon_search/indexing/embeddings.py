"""
Embedding Providers
Pluggable text embedding backends for the semantic suggestion engine

Implements:
- EmbeddingProvider interface (single and batch embedding, dimension)
- HashingEmbeddingProvider: deterministic local bag-of-words vectors for development
- OpenAIEmbeddingProvider: OpenAI embeddings API with timeout and retries
- BatchEmbeddingProvider: text cache plus concurrent batches over any provider
- cosine_similarity with zero-vector guard
"""
import hashlib
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

import numpy as np

try:
    from openai import OpenAI
    OPENAI_AVAILABLE = True
except ImportError:
    OPENAI_AVAILABLE = False
    OpenAI = None  # type: ignore

from govcon_search.core.config import settings
from govcon_search.core.exceptions import EmbeddingProviderError
from govcon_search.core.logging import get_logger
from govcon_search.core.search.text import STOP_WORDS, tokenize

logger = get_logger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        ValueError: If the vectors differ in length
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vectors must have the same length ({va.shape[0]} != {vb.shape[0]})")

    magnitude = np.linalg.norm(va) * np.linalg.norm(vb)
    if magnitude == 0:
        return 0.0
    return float(np.dot(va, vb) / magnitude)


class EmbeddingProvider(ABC):
    """Creates embedding vectors for text"""

    @abstractmethod
    def create_embedding(self, text: str) -> List[float]:
        """
        Embed one text

        Raises:
            EmbeddingProviderError: If the backend fails
        """

    def create_embeddings(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed several texts, in order"""
        return [self.create_embedding(text) for text in texts]

    @abstractmethod
    def get_dimension(self) -> int:
        """Dimension of the vectors this provider returns"""


class HashingEmbeddingProvider(EmbeddingProvider):
    """
    Hashed bag-of-words embeddings

    Each non-stop-word token is hashed to a signed bucket; the vector is
    L2-normalized. Deterministic, offline and free, so it is the default
    for development and tests. Texts sharing vocabulary score high.
    """

    def __init__(self, dimension: Optional[int] = None):
        self.dimension = dimension or settings.EMBEDDING_DIMENSION

    def _bucket(self, token: str):
        digest = hashlib.md5(token.encode("utf-8")).digest()
        index = int.from_bytes(digest[:8], "big") % self.dimension
        sign = 1.0 if digest[8] & 1 else -1.0
        return index, sign

    def create_embedding(self, text: str) -> List[float]:
        vector = np.zeros(self.dimension, dtype=np.float64)
        for token in tokenize(text or ""):
            if token in STOP_WORDS:
                continue
            index, sign = self._bucket(token)
            vector[index] += sign

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector.tolist()

    def get_dimension(self) -> int:
        return self.dimension


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embeddings from the OpenAI API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        dimension: Optional[int] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: float = 1.0,
        client=None,
    ):
        """
        Initialize the OpenAI provider

        Args:
            api_key: OpenAI API key (defaults to settings.OPENAI_API_KEY)
            model: Embedding model name (defaults to settings.EMBEDDING_MODEL)
            dimension: Requested vector size (defaults to settings.EMBEDDING_DIMENSION)
            timeout: Per-request timeout in seconds (defaults to settings.EMBEDDING_TIMEOUT_SECONDS)
            max_retries: Attempts per request (defaults to settings.EMBEDDING_MAX_RETRIES)
            retry_delay: Initial backoff delay in seconds
            client: Pre-built OpenAI client
        """
        if client is None and not OPENAI_AVAILABLE:
            raise ImportError(
                "openai package is not installed. "
                "Install it with: pip install openai"
            )

        self.api_key = api_key or settings.OPENAI_API_KEY
        self.model = model or settings.EMBEDDING_MODEL
        self.dimension = dimension or settings.EMBEDDING_DIMENSION
        self.timeout = timeout or settings.EMBEDDING_TIMEOUT_SECONDS
        self.max_retries = max(1, max_retries or settings.EMBEDDING_MAX_RETRIES)
        self.retry_delay = retry_delay

        if client is not None:
            self.client = client
        elif self.api_key:
            # Retries handled in create_embeddings
            self.client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
            logger.info("OpenAI embedding client initialized", extra={"model": self.model})
        else:
            logger.warning(
                "OpenAI API key not configured. "
                "Set OPENAI_API_KEY environment variable."
            )
            self.client = None

    def create_embedding(self, text: str) -> List[float]:
        return self.create_embeddings([text])[0]

    def create_embeddings(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Embed texts in one request, retrying with exponential backoff

        Empty texts get a zero vector without an API call.

        Raises:
            EmbeddingProviderError: If the key is missing or every attempt fails
        """
        if not self.client:
            raise EmbeddingProviderError("OpenAI API key not configured")

        results: List[Optional[List[float]]] = [None] * len(texts)
        valid = [(i, t.strip()) for i, t in enumerate(texts) if t and t.strip()]
        for i, text in enumerate(texts):
            if not text or not text.strip():
                results[i] = [0.0] * self.dimension
        if not valid:
            return results  # type: ignore[return-value]

        last_error: Optional[Exception] = None
        for attempt in range(self.max_retries):
            try:
                response = self.client.embeddings.create(
                    model=self.model,
                    input=[t for _, t in valid],
                    dimensions=self.dimension,
                )
                for (index, _), item in zip(valid, response.data):
                    results[index] = list(item.embedding)
                logger.debug(
                    f"Generated {len(valid)} embeddings",
                    extra={"batch_size": len(valid), "model": self.model},
                )
                return results  # type: ignore[return-value]
            except Exception as e:
                last_error = e
                if attempt < self.max_retries - 1:
                    wait_time = self.retry_delay * (2 ** attempt)
                    logger.warning(
                        f"Embedding request failed, retrying in {wait_time:.1f}s",
                        extra={"error": str(e), "attempt": attempt + 1},
                    )
                    time.sleep(wait_time)

        logger.error(
            "Failed to generate embeddings after retries",
            extra={"error": str(last_error), "attempts": self.max_retries},
        )
        raise EmbeddingProviderError(f"OpenAI embedding failed: {last_error}") from last_error

    def get_dimension(self) -> int:
        return self.dimension


class BatchEmbeddingProvider(EmbeddingProvider):
    """
    Caching, batching wrapper around another provider

    Texts are cached by their trimmed lowercase form. Batches of
    ``batch_size`` texts are embedded concurrently in a thread pool.
    """

    def __init__(self, provider: EmbeddingProvider, batch_size: int = 10):
        self.provider = provider
        self.batch_size = max(1, batch_size)
        self._cache: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(text: str) -> str:
        return (text or "").strip().lower()

    def create_embedding(self, text: str) -> List[float]:
        key = self._key(text)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        embedding = self.provider.create_embedding(text)
        with self._lock:
            self._cache[key] = embedding
        return embedding

    def create_embeddings(self, texts: Sequence[str]) -> List[List[float]]:
        results: List[List[float]] = []
        with ThreadPoolExecutor(max_workers=self.batch_size) as executor:
            for start in range(0, len(texts), self.batch_size):
                batch = texts[start:start + self.batch_size]
                # map re-raises the first provider error
                results.extend(executor.map(self.create_embedding, batch))
        return results

    def get_dimension(self) -> int:
        return self.provider.get_dimension()

    def cache_size(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()


def get_embedding_provider(name: Optional[str] = None) -> EmbeddingProvider:
    """
    Build the embedding provider selected in settings

    Args:
        name: "hashing", "openai" or "sentence-transformers" (defaults to settings.EMBEDDING_PROVIDER)

    Returns:
        Provider wrapped in a BatchEmbeddingProvider
    """
    name = name or settings.EMBEDDING_PROVIDER

    if name == "openai":
        provider: EmbeddingProvider = OpenAIEmbeddingProvider()
    elif name == "sentence-transformers":
        from govcon_search.indexing.embeddings_sentence_transformers import SentenceTransformersEmbeddingProvider
        provider = SentenceTransformersEmbeddingProvider()
    elif name == "hashing":
        provider = HashingEmbeddingProvider()
    else:
        raise ValueError(f"Unknown embedding provider: {name}")

    logger.info(
        f"Embedding provider '{name}' ready",
        extra={"provider": name, "dimension": provider.get_dimension()},
    )
    return BatchEmbeddingProvider(provider, batch_size=settings.EMBEDDING_BATCH_SIZE)
