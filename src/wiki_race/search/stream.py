"""
Serialization of search events for the outside world.

Every event becomes one self-describing JSON object on its own line (NDJSON):

    {"direction": "forward", "path": [{"target": ..., "displayText": ..., "origin": ...}], "time": "0.42"}
    {"direction": "forward", "path": [...], "time": "3.10", "finished": true}
    {"direction": "backward", "error": "Search exceeded ...", "time": "60.01"}
    {"error": "Page 'Foo' not found."}
"""

import json
from typing import Any, AsyncIterator, Dict

from wiki_race.models import ErrorEvent, SearchEvent


def format_time(seconds: float) -> str:
    """Elapsed seconds with fixed two-decimal precision."""
    return f"{seconds:.2f}"


def event_to_record(event: SearchEvent) -> Dict[str, Any]:
    """Convert an event to the wire record."""
    record: Dict[str, Any] = {}
    if event.direction is not None:
        record["direction"] = event.direction.value

    if isinstance(event, ErrorEvent):
        record["error"] = event.error
        if event.direction is not None and event.time is not None:
            record["time"] = format_time(event.time)
        return record

    record["path"] = [step.model_dump(by_alias=True) for step in event.path]
    record["time"] = format_time(event.time)
    if event.finished:
        record["finished"] = True
    return record


def encode_event(event: SearchEvent) -> str:
    """One NDJSON line, including the trailing newline."""
    return json.dumps(event_to_record(event), ensure_ascii=False) + "\n"


def encode_error(message: str) -> str:
    """An untagged error line for failures raised outside the event stream."""
    return json.dumps({"error": message}, ensure_ascii=False) + "\n"


async def ndjson_stream(events: AsyncIterator[SearchEvent]) -> AsyncIterator[str]:
    """Re-yield ``events`` as NDJSON lines.

    Exceptions raised by ``events`` propagate unchanged; closing this iterator
    closes ``events`` as well.
    """
    try:
        async for event in events:
            yield encode_event(event)
    finally:
        aclose = getattr(events, "aclose", None)
        if aclose is not None:
            await aclose()
