"""
Embeddings service for semantic search.

Uses Google's embedding API (google-generativeai). Documents are
embedded with task_type "retrieval_document", assistant queries with
"retrieval_query". Vectors are EMBEDDING_DIMENSION floats.
"""
from typing import List, Optional

import google.generativeai as genai
import numpy as np

from collabdocs.core.config import get_settings
from collabdocs.core.exceptions import EmbeddingError
from collabdocs.core.logging_config import LoggerMixin
from collabdocs.rag.prompt import truncate_to_tokens

# text-embedding-004 accepts ~2048 tokens; whitespace words undercount
MAX_EMBEDDING_INPUT_TOKENS = 1500


class Embedder(LoggerMixin):
    """Generates text embeddings with the configured Google model."""

    def __init__(self, model: Optional[str] = None, dimension: Optional[int] = None):
        settings = get_settings()
        self.model = model or settings.embedding_model
        self.dimension = dimension or settings.embedding_dimension
        self._api_key = settings.google_api_key
        self._configured = False

    def _configure(self) -> None:
        if not self._api_key:
            raise EmbeddingError("GOOGLE_API_KEY is not configured")
        if not self._configured:
            genai.configure(api_key=self._api_key)
            self._configured = True

    def embed(self, text: str, task_type: str = "retrieval_document") -> List[float]:
        """
        Embed a single text.

        Args:
            text: Text to embed; must not be blank
            task_type: "retrieval_document" or "retrieval_query"

        Returns:
            Embedding vector of length self.dimension

        Raises:
            EmbeddingError: On blank input, API failure or a wrong-sized vector
        """
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        self._configure()

        try:
            result = genai.embed_content(
                model=self.model,
                content=truncate_to_tokens(text, MAX_EMBEDDING_INPUT_TOKENS),
                task_type=task_type,
                output_dimensionality=self.dimension,
            )
        except Exception as e:
            self.logger.error(f"Embedding request failed ({self.model}): {e}")
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        vector = result["embedding"]
        if len(vector) != self.dimension:
            raise EmbeddingError(
                f"Embedding has {len(vector)} dimensions, expected {self.dimension}"
            )
        return [float(x) for x in vector]

    def embed_query(self, text: str) -> List[float]:
        return self.embed(text, task_type="retrieval_query")


def cosine_similarity(a, b) -> float:
    """Cosine similarity of two vectors; 0.0 when either is all zeros."""
    va = np.asarray(a, dtype=np.float32)
    vb = np.asarray(b, dtype=np.float32)
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.dot(va, vb) / denom)


# Module-level instance
_embedder: Optional[Embedder] = None


def get_embedder() -> Embedder:
    """Get or create the embedder singleton."""
    global _embedder
    if _embedder is None:
        _embedder = Embedder()
    return _embedder


def set_embedder(embedder) -> None:
    """Replace the embedder singleton (tests inject fakes here)."""
    global _embedder
    _embedder = embedder
