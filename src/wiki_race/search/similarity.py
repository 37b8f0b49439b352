"""
Semantic similarity between page titles.

The similarity oracle is the heuristic of the search: the cosine similarity of
sentence embeddings of a candidate title and the goal title. Embeddings are
cached per search session in an ``EmbeddingCache`` that both directions of a
bidirectional search share by reference.
"""

import asyncio
import logging
import threading
from typing import Awaitable, Callable, Dict, Optional

import numpy as np

from wiki_race.collaborators import Embedder
from wiki_race.exceptions import SimilarityComputeError
from wiki_race.models import ModelVariant

logger = logging.getLogger(__name__)


def cosine_similarity(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """Cosine similarity clipped to [-1, 1]; 0.0 if either vector is all zeros."""
    norm1 = float(np.linalg.norm(vec1))
    norm2 = float(np.linalg.norm(vec2))
    if norm1 == 0.0 or norm2 == 0.0:
        return 0.0
    score = float(np.dot(vec1, vec2)) / (norm1 * norm2)
    return max(-1.0, min(1.0, score))


def _unit(vector: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(vector))
    if norm == 0.0:
        return vector
    return vector / norm


class EmbeddingCache:
    """Title -> embedding map scoped to one search session.

    Entries are never evicted. Concurrent misses for the same title share a
    single computation: later callers await the task started by the first.
    """

    def __init__(self):
        self._vectors: Dict[str, np.ndarray] = {}
        self._pending: Dict[str, "asyncio.Task[np.ndarray]"] = {}

    def get(self, title: str) -> Optional[np.ndarray]:
        return self._vectors.get(title)

    def __contains__(self, title: str) -> bool:
        return title in self._vectors

    def __len__(self) -> int:
        return len(self._vectors)

    async def get_or_compute(
        self, title: str, compute: Callable[[], Awaitable[np.ndarray]]
    ) -> np.ndarray:
        cached = self._vectors.get(title)
        if cached is not None:
            return cached

        task = self._pending.get(title)
        if task is None:
            task = asyncio.ensure_future(compute())
            self._pending[title] = task
            task.add_done_callback(lambda _t, key=title: self._pending.pop(key, None))

        vector = await task
        # First finisher stores; a duplicate write would store the same object
        return self._vectors.setdefault(title, vector)


class SimilarityOracle:
    """Computes title similarity under one embedding model.

    One oracle is created per bidirectional search session and handed to both
    directional engines.
    """

    def __init__(
        self,
        embedder: Embedder,
        variant: ModelVariant = ModelVariant.MINILM,
        cache: Optional[EmbeddingCache] = None,
    ):
        self.embedder = embedder
        self.variant = variant
        self.cache = cache if cache is not None else EmbeddingCache()

    async def embedding(self, title: str) -> np.ndarray:
        """Return the cached unit embedding of ``title``, computing it on a miss.

        Raises:
            SimilarityComputeError: If the embedder fails. Never retried.
        """
        async def compute() -> np.ndarray:
            try:
                vector = await self.embedder.embed(title, self.variant)
            except Exception as e:
                logger.error(f"Embedding failed for '{title}' with {self.variant.value}: {e}")
                raise SimilarityComputeError(
                    f"Failed to compute embedding for '{title}' with model {self.variant.value}: {e}"
                ) from e
            return _unit(np.asarray(vector, dtype=np.float32))

        return await self.cache.get_or_compute(title, compute)

    async def similarity(self, a: str, b: str) -> float:
        """Cosine similarity of the embeddings of ``a`` and ``b``, in [-1, 1]."""
        vec_a = await self.embedding(a)
        vec_b = await self.embedding(b)
        return cosine_similarity(vec_a, vec_b)


class SentenceTransformerEmbedder:
    """Embeds titles with ``sentence_transformers`` models, one per variant.

    Models are loaded on first use. Encoding is CPU bound and runs in a worker
    thread so both search directions keep making progress.
    """

    def __init__(self, device: Optional[str] = None, model_factory: Optional[Callable] = None):
        self.device = device
        self._model_factory = model_factory
        self._models: Dict[ModelVariant, object] = {}
        self._load_lock = threading.Lock()

    def _load(self, variant: ModelVariant):
        with self._load_lock:
            model = self._models.get(variant)
            if model is None:
                factory = self._model_factory
                if factory is None:
                    from sentence_transformers import SentenceTransformer
                    factory = SentenceTransformer
                logger.info(f"Loading embedding model {variant.model_id}")
                model = factory(variant.model_id, device=self.device)
                self._models[variant] = model
            return model

    def _encode(self, text: str, variant: ModelVariant) -> np.ndarray:
        model = self._load(variant)
        vector = model.encode(text, normalize_embeddings=True)
        return np.asarray(vector, dtype=np.float32)

    async def embed(self, text: str, variant: ModelVariant) -> np.ndarray:
        return await asyncio.to_thread(self._encode, text, variant)

    async def preload(self, *variants: ModelVariant) -> None:
        """Load model weights ahead of the first search."""
        for variant in variants or tuple(ModelVariant):
            await asyncio.to_thread(self._load, variant)
