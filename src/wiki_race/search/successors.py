"""
Outgoing links of a page, filtered for search and cached.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Dict, List, Optional

from wiki_race.collaborators import LinkSource
from wiki_race.exceptions import SuccessorFetchError
from wiki_race.models import LinkEdge
from wiki_race.utils.wiki_helpers import split_namespace

logger = logging.getLogger(__name__)

# Namespaces (and their aliases) that never lead to an article; every
# "<namespace> talk" namespace is excluded as well
EXCLUDED_NAMESPACES = frozenset({
    "file", "image", "media",
    "category",
    "portal",
    "template",
    "help",
    "special",
    "wikipedia", "wp", "project", "wt",
    "talk", "user",
    "draft", "module", "mediawiki", "timedtext", "book", "education program", "gadget",
})

# Interwiki prefixes pointing at sister projects
INTERWIKI_PREFIXES = frozenset({
    "wikt", "wiktionary", "commons", "c", "meta", "m", "wikisource", "s",
    "wikiquote", "q", "wikibooks", "b", "wikinews", "n", "wikiversity", "v",
    "wikivoyage", "voy", "wikidata", "d", "species", "wikispecies", "mw",
    "mediawikiwiki", "foundation", "wmf", "w", "wikipedia", "phab", "outreach",
    "incubator", "metawikimedia",
})

# Language editions; a link such as "fr:Paris" leaves the English wiki
LANGUAGE_PREFIXES = frozenset({
    "af", "als", "am", "an", "ar", "arz", "as", "ast", "az", "azb", "ba", "bar",
    "be", "bg", "bn", "bo", "br", "bs", "ca", "ce", "ceb", "ckb", "cs", "cv", "cy",
    "da", "de", "el", "en", "eo", "es", "et", "eu", "fa", "fi", "fo", "fr", "fy",
    "ga", "gd", "gl", "gu", "he", "hi", "hr", "ht", "hu", "hy", "ia", "id", "ig",
    "io", "is", "it", "ja", "jv", "ka", "kk", "km", "kn", "ko", "ku", "ky", "la",
    "lb", "li", "lmo", "lt", "lv", "mg", "min", "mk", "ml", "mn", "mr", "ms", "mt",
    "my", "mzn", "nds", "ne", "new", "nl", "nn", "no", "oc", "or", "pa", "pl",
    "pms", "pnb", "ps", "pt", "qu", "ro", "ru", "sa", "sah", "scn", "sco", "sd",
    "sh", "si", "simple", "sk", "sl", "so", "sq", "sr", "su", "sv", "sw", "ta",
    "te", "tg", "th", "tl", "tr", "tt", "uk", "ur", "uz", "vec", "vi", "vo", "wa",
    "war", "xh", "yi", "yo", "yue", "zh", "zh-classical", "zh-min-nan", "zh-yue", "zu",
})


def is_article_link(target: str) -> bool:
    """Whether a link target is a main-namespace article on this wiki.

    Interwiki and language prefixes only count when the colon is directly
    followed by the page name, so "Mission: Impossible" stays an article.
    """
    namespace, rest = split_namespace(target.lstrip(":"))
    if not namespace:
        return True
    if namespace in EXCLUDED_NAMESPACES or namespace.endswith(" talk"):
        return False
    if rest[:1].isspace():
        return True
    return namespace not in INTERWIKI_PREFIXES and namespace not in LANGUAGE_PREFIXES


class SuccessorCache:
    """Bounded title -> links map with least-recently-used eviction.

    The owner decides the lifetime: the HTTP service keeps one for the whole
    process, the CLI one per run.
    """

    def __init__(self, max_entries: int = 10_000):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, List[LinkEdge]]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, title: str) -> Optional[List[LinkEdge]]:
        links = self._entries.get(title)
        if links is None:
            self.misses += 1
            return None
        self._entries.move_to_end(title)
        self.hits += 1
        return links

    def put(self, title: str, links: List[LinkEdge]) -> None:
        self._entries[title] = links
        self._entries.move_to_end(title)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug(f"Evicted links of '{evicted}' from successor cache")

    def __contains__(self, title: str) -> bool:
        return title in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self._entries),
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }


class SuccessorProvider:
    """Fetches the searchable outgoing links of a page.

    Links into excluded namespaces are dropped. A failing link source is
    logged and treated as a page without links; such failures are not cached
    so a later search can try again.
    """

    def __init__(self, source: LinkSource, cache: Optional[SuccessorCache] = None):
        self.source = source
        self.cache = cache if cache is not None else SuccessorCache()
        # title -> Task that will resolve to List[LinkEdge]
        self._pending: Dict[str, "asyncio.Task[Optional[List[LinkEdge]]]"] = {}

    async def successors_of(self, title: str) -> List[LinkEdge]:
        cached = self.cache.get(title)
        if cached is not None:
            return cached

        # Cooperative fetch: if another search is already fetching, await it
        task = self._pending.get(title)
        if task is None:
            task = asyncio.ensure_future(self._fetch(title))
            self._pending[title] = task
            task.add_done_callback(lambda _t, key=title: self._pending.pop(key, None))

        links = await task
        return links if links is not None else []

    async def _fetch(self, title: str) -> Optional[List[LinkEdge]]:
        fetch_start = time.perf_counter()
        try:
            raw_links = await self.source.fetch_links(title)
        except SuccessorFetchError as e:
            logger.warning(f"Could not fetch links for '{title}', treating as no links: {e}")
            return None
        except Exception as e:
            logger.warning(f"Link source failed for '{title}', treating as no links: {e}", exc_info=True)
            return None

        links = [link for link in raw_links if is_article_link(link.target)]
        if not links:
            logger.info(f"No extractable links found for '{title}'")

        self.cache.put(title, links)
        logger.debug(
            f"Fetched {len(links)} links for '{title}' "
            f"({len(raw_links) - len(links)} filtered) in {(time.perf_counter() - fetch_start)*1000:.1f}ms"
        )
        return links
