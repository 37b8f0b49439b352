"""
Tests for the NDJSON wire format of search events.
"""

import json

import pytest

from wiki_race.exceptions import NoPathFoundError
from wiki_race.models import Direction, ErrorEvent, ErrorKind, PathStep, ProgressEvent
from wiki_race.search.stream import (
    encode_error,
    encode_event,
    event_to_record,
    format_time,
    ndjson_stream,
)

pytestmark = pytest.mark.unit

PATH = [PathStep.root("A"), PathStep(target="B", display_text="B-link", origin="A")]


class TestEventToRecord:

    def test_format_time_has_two_decimals(self):
        assert format_time(0) == "0.00"
        assert format_time(1.23456) == "1.23"
        assert format_time(60.005) in ("60.00", "60.01")

    def test_progress_record(self):
        event = ProgressEvent(direction=Direction.FORWARD, path=PATH, time=0.5)
        assert event_to_record(event) == {
            "direction": "forward",
            "path": [
                {"target": "A", "displayText": "A", "origin": ""},
                {"target": "B", "displayText": "B-link", "origin": "A"},
            ],
            "time": "0.50",
        }

    def test_finished_record(self):
        event = ProgressEvent(direction=Direction.BACKWARD, path=PATH, time=3.1, finished=True)
        record = event_to_record(event)
        assert record["direction"] == "backward"
        assert record["finished"] is True
        assert record["time"] == "3.10"

    def test_budget_error_record(self):
        event = ErrorEvent(
            direction=Direction.BACKWARD,
            error="Search exceeded the time budget of 60 seconds.",
            kind=ErrorKind.BUDGET_EXCEEDED,
            time=60.013,
        )
        assert event_to_record(event) == {
            "direction": "backward",
            "error": "Search exceeded the time budget of 60 seconds.",
            "time": "60.01",
        }

    def test_untagged_error_record(self):
        event = ErrorEvent(error="Page 'X' not found.", kind=ErrorKind.INVALID_ENDPOINT)
        assert event_to_record(event) == {"error": "Page 'X' not found."}


class TestEncoding:

    def test_encode_event_is_one_json_line(self):
        line = encode_event(ProgressEvent(direction=Direction.FORWARD, path=PATH, time=1))
        assert line.endswith("\n")
        assert line.count("\n") == 1
        assert json.loads(line)["direction"] == "forward"

    def test_non_ascii_titles_are_kept(self):
        path = [PathStep.root("Zürich")]
        line = encode_event(ProgressEvent(path=path, time=0))
        assert "Zürich" in line

    def test_encode_error(self):
        assert json.loads(encode_error("No path found.")) == {"error": "No path found."}


class TestNdjsonStream:

    @pytest.mark.asyncio
    async def test_streams_lines_in_order(self):
        async def events():
            yield ProgressEvent(direction=Direction.FORWARD, path=PATH[:1], time=0)
            yield ProgressEvent(direction=Direction.FORWARD, path=PATH, time=1, finished=True)

        lines = [line async for line in ndjson_stream(events())]

        assert len(lines) == 2
        assert json.loads(lines[1])["finished"] is True

    @pytest.mark.asyncio
    async def test_exceptions_propagate(self):
        async def events():
            yield ProgressEvent(path=PATH[:1], time=0)
            raise NoPathFoundError("nothing")

        lines = []
        with pytest.raises(NoPathFoundError):
            async for line in ndjson_stream(events()):
                lines.append(line)
        assert len(lines) == 1

    @pytest.mark.asyncio
    async def test_closing_closes_source(self):
        closed = []

        async def events():
            try:
                while True:
                    yield ProgressEvent(path=PATH[:1], time=0)
            finally:
                closed.append(True)

        stream = ndjson_stream(events())
        await stream.__anext__()
        await stream.aclose()

        assert closed == [True]
