"""
Priority-ordered open set for greedy best-first search.
"""

import heapq
import itertools
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from wiki_race.models import Path


@dataclass
class FrontierEntry:
    """A discovered but not yet expanded node."""
    node: str
    path: Path
    priority: float


@dataclass
class Frontier:
    """
    Max-priority queue with a stable FIFO tie-break.

    Entries are stored in a binary heap keyed on ``(-priority, sequence)`` where
    ``sequence`` increases monotonically with every enqueue, so among equal
    priorities the earliest enqueued entry is dequeued first.
    """
    _heap: List[Tuple[float, int, FrontierEntry]] = field(default_factory=list)
    _counter: itertools.count = field(default_factory=itertools.count)

    def enqueue(self, node: str, path: Path, priority: float) -> None:
        entry = FrontierEntry(node=node, path=path, priority=priority)
        heapq.heappush(self._heap, (-priority, next(self._counter), entry))

    def dequeue(self) -> Optional[FrontierEntry]:
        """Remove and return the highest-priority entry, or None when empty."""
        if not self._heap:
            return None
        return heapq.heappop(self._heap)[2]

    def is_empty(self) -> bool:
        return not self._heap

    def __len__(self) -> int:
        return len(self._heap)
