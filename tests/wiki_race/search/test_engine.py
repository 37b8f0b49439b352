"""
Tests for the single-direction greedy best-first search engine.
"""

import pytest

from conftest import CountingEmbedder, FakeClock, GraphLinkSource, GraphResolver, titles_of
from wiki_race.exceptions import NoPathFoundError, SearchStateError, SimilarityComputeError
from wiki_race.models import EngineState, ErrorEvent, ErrorKind, PathStep, ProgressEvent
from wiki_race.search import DirectionalSearchEngine, SimilarityOracle, SuccessorProvider
from wiki_race.search.budget import SearchBudget

pytestmark = pytest.mark.unit


def make_engine(graph, start, goal, embedder=None, budget=None, extra_titles=()):
    source = GraphLinkSource(graph)
    engine = DirectionalSearchEngine(
        start,
        goal,
        resolver=GraphResolver(titles_of(graph) | set(extra_titles)),
        successors=SuccessorProvider(source),
        oracle=SimilarityOracle(embedder or CountingEmbedder()),
        budget=budget,
    )
    return engine, source


async def run_to_end(engine):
    """Advance until the engine terminates; returns (events, raised exception)."""
    events = []
    while not engine.is_terminal:
        try:
            events.append(await engine.advance())
        except (NoPathFoundError, SimilarityComputeError) as e:
            return events, e
    return events, None


class TestEngineHappyPath:

    @pytest.mark.asyncio
    async def test_one_hop_search(self, simple_graph):
        engine, _ = make_engine(simple_graph, "A", "B")

        first = await engine.advance()
        assert isinstance(first, ProgressEvent)
        assert first.path == [PathStep.root("A")]
        assert not first.finished
        assert first.direction is None
        assert engine.state is EngineState.SEARCHING

        second = await engine.advance()
        assert isinstance(second, ProgressEvent)
        assert second.finished
        assert second.path == [
            PathStep(target="A", display_text="A", origin=""),
            PathStep(target="B", display_text="B-link", origin="A"),
        ]
        assert engine.state is EngineState.FINISHED
        assert engine.path == second.path
        assert engine.ticks == 2

    @pytest.mark.asyncio
    async def test_start_equals_goal(self, simple_graph):
        engine, source = make_engine(simple_graph, "A", "A")

        event = await engine.advance()

        assert event.finished
        assert event.path == [PathStep.root("A")]
        assert source.calls == {}, "Reaching the goal never fetches its links"

    @pytest.mark.asyncio
    async def test_goal_match_ignores_case(self):
        graph = {"Start": [("paris", "Paris")]}
        engine, _ = make_engine(graph, "Start", "Paris", extra_titles={"Paris"})
        events, error = await run_to_end(engine)
        assert error is None
        assert events[-1].finished
        assert events[-1].path[-1].target == "paris"

    @pytest.mark.asyncio
    async def test_endpoints_are_canonicalized(self, simple_graph):
        engine, _ = make_engine(simple_graph, "a", "b")
        events, _ = await run_to_end(engine)
        assert engine.start == "A"
        assert engine.goal == "B"
        assert events[0].path == [PathStep.root("A")]

    @pytest.mark.asyncio
    async def test_follows_most_similar_link_first(self):
        graph = {
            "Start": [("Far", "far"), ("Near", "near")],
            "Near": [("Goal", "goal")],
            "Far": [("Goal", "goal")],
        }
        embedder = CountingEmbedder(vectors={
            "Goal": [1.0, 0.0],
            "Near": [0.9, 0.1],
            "Far": [0.0, 1.0],
        })
        engine, source = make_engine(graph, "Start", "Goal", embedder=embedder)

        events, error = await run_to_end(engine)

        assert error is None
        assert [e.path[-1].target for e in events] == ["Start", "Near", "Goal"]
        assert "Far" not in source.calls
        assert [s.display_text for s in events[-1].path] == ["Start", "near", "goal"]

    @pytest.mark.asyncio
    async def test_one_event_per_tick(self):
        graph = {"A": [("B", "B"), ("C", "C")], "B": [("D", "D")], "C": [("D", "D")], "D": []}
        engine, _ = make_engine(graph, "A", "D")
        events, _ = await run_to_end(engine)
        assert len(events) == engine.ticks
        assert [e.finished for e in events].count(True) == 1

    @pytest.mark.asyncio
    async def test_paths_stay_loop_free_on_cyclic_graph(self):
        graph = {
            "A": [("B", "B"), ("C", "C")],
            "B": [("A", "A"), ("C", "C")],
            "C": [("A", "A"), ("B", "B"), ("D", "D")],
            "D": [("B", "B"), ("E", "E")],
            "E": [],
        }
        engine, _ = make_engine(graph, "A", "E")
        events, error = await run_to_end(engine)

        assert error is None
        assert events[-1].finished
        for event in events:
            origins = [s.origin for s in event.path]
            assert len(origins) == len(set(origins))
            for previous, step in zip(event.path, event.path[1:]):
                assert step.origin == previous.target

    @pytest.mark.asyncio
    async def test_each_page_expanded_once(self):
        graph = {"A": [("B", "B"), ("C", "C")], "B": [("C", "C")], "C": [("B", "B")]}
        engine, source = make_engine(graph, "A", "Z", extra_titles={"Z"})
        events, error = await run_to_end(engine)
        assert isinstance(error, NoPathFoundError)
        assert sorted(e.path[-1].target for e in events) == ["A", "B", "C"]
        assert all(count == 1 for count in source.calls.values())


class TestEngineFailures:

    @pytest.mark.asyncio
    async def test_unknown_start(self, simple_graph):
        engine, source = make_engine(simple_graph, "Nowhere", "B")

        event = await engine.advance()

        assert isinstance(event, ErrorEvent)
        assert event.kind is ErrorKind.INVALID_ENDPOINT
        assert event.error == "Page 'Nowhere' not found."
        assert engine.state is EngineState.FAILED
        assert source.calls == {}

    @pytest.mark.asyncio
    async def test_unknown_goal(self, simple_graph):
        engine, _ = make_engine(simple_graph, "A", "Nowhere")
        event = await engine.advance()
        assert event.kind is ErrorKind.INVALID_ENDPOINT
        assert event.error == "Page 'Nowhere' not found."

    @pytest.mark.asyncio
    async def test_resolver_error_counts_as_missing(self, simple_graph):
        class BrokenResolver:
            async def resolve_title(self, title):
                raise ConnectionError("offline")

        engine = DirectionalSearchEngine(
            "A", "B",
            resolver=BrokenResolver(),
            successors=SuccessorProvider(GraphLinkSource(simple_graph)),
            oracle=SimilarityOracle(CountingEmbedder()),
        )
        event = await engine.advance()
        assert event.kind is ErrorKind.INVALID_ENDPOINT

    @pytest.mark.asyncio
    async def test_advance_after_terminal_state_raises(self, simple_graph):
        engine, _ = make_engine(simple_graph, "Nowhere", "B")
        await engine.advance()
        with pytest.raises(SearchStateError):
            await engine.advance()

        finished, _ = make_engine(simple_graph, "A", "A")
        await finished.advance()
        with pytest.raises(SearchStateError):
            await finished.advance()

    @pytest.mark.asyncio
    async def test_exhausted_frontier(self):
        graph = {"A": [("B", "B")], "B": []}
        engine, _ = make_engine(graph, "A", "Island", extra_titles={"Island"})

        events, error = await run_to_end(engine)

        assert isinstance(error, NoPathFoundError)
        assert len(events) == 2
        assert engine.state is EngineState.FAILED
        assert engine.failure == error.message

    @pytest.mark.asyncio
    async def test_time_budget_exceeded(self, fake_clock: FakeClock):
        graph = {"A": [("B", "B")], "B": [("C", "C")], "C": [("D", "D")]}
        engine, _ = make_engine(graph, "A", "D", budget=SearchBudget(5, clock=fake_clock))

        first = await engine.advance()
        assert first.time == 0.0

        fake_clock.advance(2)
        second = await engine.advance()
        assert isinstance(second, ProgressEvent)
        assert second.time == pytest.approx(2.0)

        fake_clock.advance(4)
        third = await engine.advance()
        assert isinstance(third, ErrorEvent)
        assert third.kind is ErrorKind.BUDGET_EXCEEDED
        assert third.time == pytest.approx(6.0)
        assert engine.state is EngineState.FAILED
        assert engine.ticks == 2

    @pytest.mark.asyncio
    async def test_embedding_failure_ends_search(self):
        graph = {"A": [("B", "B")], "B": [("C", "C")]}
        embedder = CountingEmbedder(failing={"B"})
        engine, _ = make_engine(graph, "A", "C", embedder=embedder)

        with pytest.raises(SimilarityComputeError):
            await engine.advance()

        assert engine.state is EngineState.FAILED
        with pytest.raises(SearchStateError):
            await engine.advance()

    @pytest.mark.asyncio
    async def test_failing_link_source_is_a_dead_end(self):
        graph = {"A": [("B", "B")], "B": [("C", "C")]}
        source = GraphLinkSource(graph, failing={"B"})
        engine = DirectionalSearchEngine(
            "A", "C",
            resolver=GraphResolver(titles_of(graph)),
            successors=SuccessorProvider(source),
            oracle=SimilarityOracle(CountingEmbedder()),
        )
        events, error = await run_to_end(engine)
        assert isinstance(error, NoPathFoundError)
        assert [e.path[-1].target for e in events] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_abandon(self, simple_graph):
        engine, _ = make_engine(simple_graph, "A", "B")
        await engine.advance()
        engine.abandon("closed")
        assert engine.state is EngineState.FAILED
        assert engine.failure == "closed"

        engine.abandon("again")
        assert engine.failure == "closed"
