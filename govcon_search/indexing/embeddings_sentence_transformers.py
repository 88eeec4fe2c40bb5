"""
Sentence Transformers Embedding Provider
Local embeddings using Sentence Transformers (all-MiniLM-L6-v2 by default)

Benefits:
- No API costs
- No rate limits
- Works offline
"""
from typing import List, Optional, Sequence

try:
    from sentence_transformers import SentenceTransformer
    SENTENCE_TRANSFORMERS_AVAILABLE = True
except ImportError:
    SENTENCE_TRANSFORMERS_AVAILABLE = False
    SentenceTransformer = None  # type: ignore

from govcon_search.core.config import settings
from govcon_search.core.exceptions import EmbeddingProviderError
from govcon_search.core.logging import get_logger
from govcon_search.indexing.embeddings import EmbeddingProvider

logger = get_logger(__name__)


class SentenceTransformersEmbeddingProvider(EmbeddingProvider):
    """Local embeddings using Sentence Transformers"""

    def __init__(self, model_name: Optional[str] = None, batch_size: int = 64, model=None):
        """
        Initialize the provider

        Args:
            model_name: Model name (defaults to settings.SENTENCE_TRANSFORMERS_MODEL)
            batch_size: Batch size for encode()
            model: Pre-loaded model exposing encode() and get_sentence_embedding_dimension()
        """
        if model is None and not SENTENCE_TRANSFORMERS_AVAILABLE:
            raise ImportError(
                "sentence-transformers is not installed. "
                "Install it with: pip install sentence-transformers"
            )

        self.model_name = model_name or settings.SENTENCE_TRANSFORMERS_MODEL
        self.batch_size = batch_size

        if model is None:
            logger.info(f"Loading Sentence Transformers model: {self.model_name}")
            model = SentenceTransformer(self.model_name)
        self.model = model
        self.dimension = self.model.get_sentence_embedding_dimension()

        logger.info(
            "SentenceTransformersEmbeddingProvider initialized",
            extra={"model": self.model_name, "dimension": self.dimension, "batch_size": batch_size},
        )

    def create_embeddings(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Embed texts locally; empty texts get a zero vector

        Raises:
            EmbeddingProviderError: If encoding fails
        """
        if not texts:
            return []

        results: List[List[float]] = [[0.0] * self.dimension for _ in texts]
        valid = [(i, t) for i, t in enumerate(texts) if t and t.strip()]
        if not valid:
            return results

        try:
            embeddings = self.model.encode(
                [t for _, t in valid],
                batch_size=self.batch_size,
                show_progress_bar=False,
                convert_to_numpy=True,
                normalize_embeddings=True,
            )
        except Exception as e:
            logger.error("Sentence Transformers encoding failed", extra={"error": str(e)})
            raise EmbeddingProviderError(f"Local embedding failed: {e}") from e

        for (index, _), embedding in zip(valid, embeddings):
            results[index] = [float(x) for x in embedding]
        return results

    def create_embedding(self, text: str) -> List[float]:
        return self.create_embeddings([text])[0]

    def get_dimension(self) -> int:
        return self.dimension
