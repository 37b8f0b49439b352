"""
Cycle removal for accumulated search paths.
"""

from typing import Dict

from wiki_race.models import Path


def clean_path(path: Path) -> Path:
    """
    Cut loops out of a path so that no two steps share an ``origin``.

    The path is scanned in order while remembering where each origin first
    appeared. When an origin shows up again, every step from its first
    occurrence up to (but excluding) the repeated step is dropped, which
    collapses the detour back to the page where the loop started. For
    ``A -> B -> A -> C`` the steps found on ``A`` (``B`` then ``C``) share an
    origin, so the result is ``A -> C``.

    Origins are compared exactly; a path without repeats is returned unchanged.
    """
    first_seen: Dict[str, int] = {}
    cleaned: Path = []
    changed = False

    for step in path:
        index = first_seen.get(step.origin)
        if index is not None:
            for dropped in cleaned[index:]:
                first_seen.pop(dropped.origin, None)
            del cleaned[index:]
            changed = True
        first_seen[step.origin] = len(cleaned)
        cleaned.append(step)

    return cleaned if changed else path
