"""
DirectionalSearchEngine - greedy best-first search from one page towards another.

The engine is an explicit state machine driven from outside: every call to
``advance()`` performs one tick and returns exactly one event.

    INITIALIZING -> SEARCHING -> FINISHED
                              -> FAILED

A tick pops the most promising page from the frontier, checks the time budget,
marks the page visited, stops if it is the goal and otherwise scores every
unvisited link on the page by its similarity to the goal and pushes it onto
the frontier with its (cycle-free) path.
"""

import logging
from typing import Optional, Set

from wiki_race.collaborators import EndpointResolver
from wiki_race.exceptions import (
    BudgetExceededError,
    InvalidEndpointError,
    NoPathFoundError,
    SearchStateError,
    SimilarityComputeError,
)
from wiki_race.models import (
    Direction,
    EngineState,
    ErrorEvent,
    ErrorKind,
    Path,
    PathStep,
    ProgressEvent,
    SearchEvent,
)
from .budget import SearchBudget
from .frontier import Frontier, FrontierEntry
from .path_cleaner import clean_path
from .similarity import SimilarityOracle
from .successors import SuccessorProvider

logger = logging.getLogger(__name__)


class DirectionalSearchEngine:
    """Single-direction greedy best-first search."""

    def __init__(
        self,
        start: str,
        goal: str,
        *,
        resolver: EndpointResolver,
        successors: SuccessorProvider,
        oracle: SimilarityOracle,
        budget: Optional[SearchBudget] = None,
        direction: Direction = Direction.FORWARD,
    ):
        self.start = start
        self.goal = goal
        self.resolver = resolver
        self.successors = successors
        self.oracle = oracle
        self.budget = budget if budget is not None else SearchBudget()
        self.direction = direction

        self.state = EngineState.INITIALIZING
        self.frontier = Frontier()
        self.visited: Set[str] = set()
        self.ticks = 0
        self.path: Optional[Path] = None
        self.failure: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (EngineState.FINISHED, EngineState.FAILED)

    async def advance(self) -> SearchEvent:
        """
        Run the next state transition and return the event it produced.

        Returns:
            A ProgressEvent per tick (``finished`` set on the tick that reaches
            the goal) or an ErrorEvent for an unresolvable endpoint or an
            exhausted time budget.

        Raises:
            NoPathFoundError: The frontier emptied before the goal was reached.
            SimilarityComputeError: The embedder failed; the search is over.
            SearchStateError: The engine already reached a terminal state.
        """
        if self.is_terminal:
            raise SearchStateError(
                f"{self.direction.value} search is already {self.state.value}"
            )

        try:
            if self.state is EngineState.INITIALIZING:
                await self._initialize()
            return await self._tick()
        except InvalidEndpointError as e:
            self._fail(e.message)
            logger.info(f"{self.direction.value} search cannot start: {e.message}")
            return ErrorEvent(error=e.message, kind=ErrorKind.INVALID_ENDPOINT)
        except BudgetExceededError as e:
            self._fail(e.message)
            logger.info(f"{self.direction.value} search stopped after {self.ticks} ticks: {e.message}")
            return ErrorEvent(error=e.message, kind=ErrorKind.BUDGET_EXCEEDED, time=e.elapsed)
        except SimilarityComputeError as e:
            self._fail(e.message)
            raise

    def abandon(self, reason: str) -> None:
        """Stop a search that has not terminated; outstanding work is dropped."""
        if not self.is_terminal:
            logger.info(f"Abandoning {self.direction.value} search: {reason}")
            self._fail(reason)

    def _fail(self, reason: str) -> None:
        self.state = EngineState.FAILED
        self.failure = reason

    async def _resolve(self, title: str) -> str:
        try:
            canonical = await self.resolver.resolve_title(title)
        except Exception as e:
            logger.warning(f"Resolving '{title}' failed: {e}")
            canonical = None
        if canonical is None:
            raise InvalidEndpointError(f"Page '{title}' not found.")
        return canonical

    async def _initialize(self) -> None:
        self.budget.start()

        self.start = await self._resolve(self.start)
        self.goal = await self._resolve(self.goal)
        logger.info(f"Starting {self.direction.value} search: '{self.start}' -> '{self.goal}'")

        self.frontier.enqueue(self.start, [PathStep.root(self.start)], 0.0)
        self.state = EngineState.SEARCHING

    def _next_unvisited(self) -> Optional[FrontierEntry]:
        while True:
            entry = self.frontier.dequeue()
            if entry is None or entry.node not in self.visited:
                return entry

    async def _tick(self) -> SearchEvent:
        entry = self._next_unvisited()
        if entry is None:
            message = (
                f"No path found from '{self.start}' to '{self.goal}' "
                f"after expanding {len(self.visited)} pages."
            )
            self._fail(message)
            logger.info(f"{self.direction.value} search exhausted its frontier")
            raise NoPathFoundError(message)

        elapsed = self.budget.elapsed()
        if self.budget.exceeded():
            raise BudgetExceededError(
                f"Search exceeded the time budget of {self.budget.max_seconds:g} seconds.",
                elapsed=elapsed,
            )

        self.ticks += 1
        self.visited.add(entry.node)
        logger.debug(
            f"{self.direction.value} tick {self.ticks}: '{entry.node}' "
            f"(priority {entry.priority:.3f}, frontier {len(self.frontier)})"
        )

        if entry.node.casefold() == self.goal.casefold():
            self.state = EngineState.FINISHED
            self.path = entry.path
            logger.info(
                f"{self.direction.value} search reached '{self.goal}' in {self.ticks} ticks, "
                f"{len(entry.path) - 1} hops, {elapsed:.2f}s"
            )
            return ProgressEvent(path=entry.path, time=elapsed, finished=True)

        event = ProgressEvent(path=entry.path, time=elapsed)
        await self._expand(entry)
        return event

    async def _expand(self, entry: FrontierEntry) -> None:
        links = await self.successors.successors_of(entry.node)
        for link in links:
            if link.target in self.visited:
                continue
            priority = await self.oracle.similarity(link.target, self.goal)
            step = PathStep(target=link.target, display_text=link.display_text, origin=entry.node)
            self.frontier.enqueue(link.target, clean_path(entry.path + [step]), priority)
