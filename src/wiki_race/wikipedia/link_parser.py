"""
Extraction of article links from raw wikitext.
"""

import re
from typing import List

from wiki_race.models import LinkEdge
from wiki_race.utils.wiki_helpers import normalize_page_title

# Sections after which links are citations or navigation rather than content
END_SECTIONS = (
    "references",
    "notes",
    "notes and references",
    "footnotes",
    "citations",
    "sources",
    "bibliography",
    "further reading",
    "see also",
    "external links",
)

_SECTION_RE = re.compile(r"^(=+)\s*(.+?)\s*\1\s*$", re.MULTILINE)
_LINK_RE = re.compile(r"\[\[([^\[\]|]+)(?:\|([^\[\]]*))?\]\]")
_MARKUP_RE = re.compile(r"'{2,}")


def truncate_at_end_sections(wikitext: str) -> str:
    """Drop everything from the first references-like section heading on."""
    for match in _SECTION_RE.finditer(wikitext):
        if match.group(2).strip().lower() in END_SECTIONS:
            return wikitext[:match.start()]
    return wikitext


def extract_links(wikitext: str) -> List[LinkEdge]:
    """
    Return the wiki links of a page body in document order.

    Links after a references-like section are ignored, section anchors are
    stripped from targets and each target is kept once (first anchor text
    wins). Namespace filtering is left to the caller.
    """
    links: List[LinkEdge] = []
    seen = set()

    for match in _LINK_RE.finditer(truncate_at_end_sections(wikitext)):
        raw_target, display = match.group(1), match.group(2)
        target = raw_target.split("#", 1)[0].lstrip(":").strip()
        if not target:
            continue
        try:
            target = normalize_page_title(target)
        except ValueError:
            continue
        if target in seen:
            continue
        seen.add(target)

        text = _MARKUP_RE.sub("", display).strip() if display else ""
        links.append(LinkEdge(target=target, display_text=text or raw_target.strip()))

    return links
