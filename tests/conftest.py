"""
Pytest configuration and shared fixtures.

The search engine only talks to its collaborators through small async
interfaces, so most tests run against in-memory stand-ins defined here: a link
graph, a title resolver, a deterministic embedder that counts its calls and a
clock that only moves when told to.
"""

import hashlib
import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pytest

from wiki_race.exceptions import SuccessorFetchError
from wiki_race.models import LinkEdge, ModelVariant
from wiki_race.search import SimilarityOracle, SuccessorCache, SuccessorProvider

# Configure logging for tests
logging.basicConfig(level=logging.INFO)

Graph = Dict[str, List[Tuple[str, str]]]


class GraphLinkSource:
    """Link source over an adjacency list of (target, anchor text) pairs."""

    def __init__(self, graph: Graph, failing: Iterable[str] = ()):
        self.graph = graph
        self.failing = set(failing)
        self.calls: Counter = Counter()

    async def fetch_links(self, title: str) -> List[LinkEdge]:
        self.calls[title] += 1
        if title in self.failing:
            raise SuccessorFetchError(f"backend unavailable for '{title}'")
        return [LinkEdge(target=target, display_text=text) for target, text in self.graph.get(title, [])]


class GraphResolver:
    """Case-insensitive resolver over a fixed set of titles."""

    def __init__(self, titles: Iterable[str]):
        self.titles = {title.casefold(): title for title in titles}
        self.calls: Counter = Counter()

    async def resolve_title(self, title: str) -> Optional[str]:
        self.calls[title] += 1
        return self.titles.get(title.strip().casefold())


class CountingEmbedder:
    """Deterministic embedder; explicit vectors win over hashed ones."""

    def __init__(
        self,
        vectors: Optional[Dict[str, Sequence[float]]] = None,
        failing: Iterable[str] = (),
        dimension: int = 8,
    ):
        self.vectors = vectors or {}
        self.failing = set(failing)
        self.dimension = dimension
        self.calls: Counter = Counter()
        self.variants: List[ModelVariant] = []

    async def embed(self, text: str, variant: ModelVariant) -> np.ndarray:
        self.calls[text] += 1
        self.variants.append(variant)
        if text in self.failing:
            raise RuntimeError(f"model crashed on '{text}'")
        if text in self.vectors:
            return np.asarray(self.vectors[text], dtype=np.float32)
        seed = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest()[:4], "little")
        return np.random.default_rng(seed).standard_normal(self.dimension).astype(np.float32)


class FakeClock:
    """Monotonic clock that advances only when told to."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def titles_of(graph: Graph) -> set:
    """Every title mentioned in a graph, as page or as link target."""
    titles = set(graph)
    for links in graph.values():
        titles.update(target for target, _ in links)
    return titles


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def embedder() -> CountingEmbedder:
    return CountingEmbedder()


@pytest.fixture
def oracle(embedder: CountingEmbedder) -> SimilarityOracle:
    """A fresh session oracle around the counting embedder."""
    return SimilarityOracle(embedder, ModelVariant.MINILM)


@pytest.fixture
def simple_graph() -> Graph:
    """A -> B with anchor text "B-link"."""
    return {"A": [("B", "B-link")], "B": [("A", "A-link")]}


@pytest.fixture
def link_source(simple_graph: Graph) -> GraphLinkSource:
    return GraphLinkSource(simple_graph)


@pytest.fixture
def resolver(simple_graph: Graph) -> GraphResolver:
    return GraphResolver(titles_of(simple_graph))


@pytest.fixture
def successors(link_source: GraphLinkSource) -> SuccessorProvider:
    return SuccessorProvider(link_source, SuccessorCache(max_entries=100))
