"""
BidirectionalCoordinator - runs a forward and a backward search in lockstep.

The forward engine searches start -> goal and the backward engine goal ->
start. Both share the session's similarity oracle (and so its embedding cache)
and the successor provider. Each coordinator tick advances every running
engine by exactly one step concurrently and waits for all of them before
relaying their events, so both directions' tick N events are yielded before
either direction's tick N+1 event.
"""

import asyncio
import logging
import time
from typing import AsyncIterator, Callable, Dict, List, Optional

from wiki_race.collaborators import EndpointResolver
from wiki_race.exceptions import NoPathFoundError, SimilarityComputeError
from wiki_race.models import (
    Direction,
    ErrorEvent,
    ErrorKind,
    Path,
    ProgressEvent,
    SearchEvent,
    TerminationPolicy,
)
from .budget import SearchBudget
from .engine import DirectionalSearchEngine
from .similarity import SimilarityOracle
from .successors import SuccessorProvider

logger = logging.getLogger(__name__)


class BidirectionalCoordinator:
    """Drives two directional searches and merges their event streams."""

    def __init__(
        self,
        start: str,
        goal: str,
        *,
        resolver: EndpointResolver,
        successors: SuccessorProvider,
        oracle: SimilarityOracle,
        time_budget_seconds: float = 60.0,
        policy: TerminationPolicy = TerminationPolicy.WAIT_FOR_BOTH,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.start = start
        self.goal = goal
        self.oracle = oracle
        self.policy = policy

        self.forward = DirectionalSearchEngine(
            start, goal,
            resolver=resolver, successors=successors, oracle=oracle,
            budget=SearchBudget(time_budget_seconds, clock=clock),
            direction=Direction.FORWARD,
        )
        self.backward = DirectionalSearchEngine(
            goal, start,
            resolver=resolver, successors=successors, oracle=oracle,
            budget=SearchBudget(time_budget_seconds, clock=clock),
            direction=Direction.BACKWARD,
        )

        self.paths: Dict[Direction, Path] = {}
        self.failures: Dict[Direction, str] = {}
        self.ticks = 0

    @property
    def engines(self) -> List[DirectionalSearchEngine]:
        return [self.forward, self.backward]

    async def run(self) -> AsyncIterator[SearchEvent]:
        """
        Yield direction-tagged events until the search terminates.

        An unresolvable endpoint produces a single untagged ErrorEvent and ends
        the run. Closing the iterator or cancelling its consumer cancels the
        engines' in-flight lookups.

        Raises:
            NoPathFoundError: Every direction failed and none reached its goal.
        """
        logger.info(
            f"Bidirectional search '{self.start}' <-> '{self.goal}' "
            f"(model {self.oracle.variant.value}, policy {self.policy.value})"
        )
        active = self.engines
        try:
            while active:
                self.ticks += 1
                results = await self._advance_all(active)

                events: List[SearchEvent] = []
                for engine, result in zip(active, results):
                    if isinstance(result, (NoPathFoundError, SimilarityComputeError)):
                        self.failures[engine.direction] = result.message
                        logger.warning(f"{engine.direction.value} search failed: {result.message}")
                        continue
                    if isinstance(result, BaseException):
                        raise result

                    if isinstance(result, ErrorEvent) and result.kind is ErrorKind.INVALID_ENDPOINT:
                        for other in self.engines:
                            other.abandon("invalid endpoint")
                        yield result
                        return

                    events.append(result.model_copy(update={"direction": engine.direction}))
                    if isinstance(result, ProgressEvent) and result.finished:
                        self.paths[engine.direction] = engine.path
                    elif isinstance(result, ErrorEvent):
                        self.failures[engine.direction] = result.error

                for event in events:
                    yield event

                active = [engine for engine in active if not engine.is_terminal]
                if self.paths and active and self.policy is TerminationPolicy.FIRST_FINISH:
                    for engine in active:
                        engine.abandon("other direction already reached its goal")
                    active = []
        finally:
            for engine in self.engines:
                engine.abandon("search closed")

        if not self.paths:
            details = "; ".join(f"{d.value}: {reason}" for d, reason in self.failures.items())
            raise NoPathFoundError(
                f"No path found between '{self.start}' and '{self.goal}'. {details}".strip()
            )

        logger.info(
            f"SEARCH SUMMARY for {self.start} <-> {self.goal}: "
            f"finished directions: {[d.value for d in self.paths]}, "
            f"ticks: {self.ticks}, embeddings cached: {len(self.oracle.cache)}"
        )

    async def _advance_all(self, engines: List[DirectionalSearchEngine]) -> list:
        """Advance every engine by one step and wait for all of them."""
        tasks = [asyncio.ensure_future(engine.advance()) for engine in engines]
        try:
            return await asyncio.gather(*tasks, return_exceptions=True)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
