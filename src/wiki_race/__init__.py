"""
wiki_race - Core Library

Finds a chain of links between two Wikipedia pages with a greedy best-first
search guided by sentence-embedding similarity, run from both ends at once.
"""

from .models import Direction, LinkEdge, ModelVariant, PathStep, TerminationPolicy
from .search import BidirectionalCoordinator, SimilarityOracle, SuccessorCache, SuccessorProvider

__all__ = [
    'BidirectionalCoordinator',
    'Direction',
    'LinkEdge',
    'ModelVariant',
    'PathStep',
    'SimilarityOracle',
    'SuccessorCache',
    'SuccessorProvider',
    'TerminationPolicy',
]
