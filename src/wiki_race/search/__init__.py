"""
Semantic greedy best-first search between Wikipedia pages.
"""

from .budget import SearchBudget
from .coordinator import BidirectionalCoordinator
from .engine import DirectionalSearchEngine
from .frontier import Frontier, FrontierEntry
from .path_cleaner import clean_path
from .similarity import EmbeddingCache, SentenceTransformerEmbedder, SimilarityOracle, cosine_similarity
from .stream import encode_error, encode_event, event_to_record, ndjson_stream
from .successors import SuccessorCache, SuccessorProvider, is_article_link

__all__ = [
    "BidirectionalCoordinator",
    "DirectionalSearchEngine",
    "EmbeddingCache",
    "Frontier",
    "FrontierEntry",
    "SearchBudget",
    "SentenceTransformerEmbedder",
    "SimilarityOracle",
    "SuccessorCache",
    "SuccessorProvider",
    "clean_path",
    "cosine_similarity",
    "encode_error",
    "encode_event",
    "event_to_record",
    "is_article_link",
    "ndjson_stream",
]
