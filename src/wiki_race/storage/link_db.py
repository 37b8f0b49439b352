"""
WikiLinkDB - read access to an offline snapshot of the Wikipedia link graph.

The snapshot is a SQLite file with three tables:

    pages(id INTEGER PRIMARY KEY, title TEXT, is_redirect INTEGER)
    redirects(source_id INTEGER PRIMARY KEY, target_id INTEGER)
    links(from_id INTEGER, to_id INTEGER, anchor TEXT)

Titles are stored in display form ("Notre Dame Fighting Irish").
"""

import logging
import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import aiosqlite

from wiki_race.exceptions import SuccessorFetchError
from wiki_race.models import LinkEdge
from wiki_race.utils.wiki_helpers import validate_page_title

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS pages (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL,
    is_redirect INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS pages_title_nocase ON pages (title COLLATE NOCASE);
CREATE TABLE IF NOT EXISTS redirects (
    source_id INTEGER PRIMARY KEY,
    target_id INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS links (
    from_id INTEGER NOT NULL,
    to_id INTEGER NOT NULL,
    anchor TEXT
);
CREATE INDEX IF NOT EXISTS links_from_id ON links (from_id);
"""

# Read-only tuning for a large static snapshot
READ_PRAGMAS = (
    "PRAGMA synchronous = OFF",
    "PRAGMA cache_size = 1000000",
    "PRAGMA temp_store = MEMORY",
    "PRAGMA mmap_size = 268435456",
)


async def create_snapshot(
    db_path: str,
    pages: Iterable[Tuple[int, str, bool]],
    links: Iterable[Tuple[int, int, Optional[str]]],
    redirects: Iterable[Tuple[int, int]] = (),
) -> None:
    """Create (or extend) a snapshot file from page, link and redirect rows."""
    async with aiosqlite.connect(db_path) as db:
        await db.executescript(SCHEMA)
        await db.executemany(
            "INSERT INTO pages (id, title, is_redirect) VALUES (?, ?, ?)",
            [(page_id, title, int(is_redirect)) for page_id, title, is_redirect in pages],
        )
        await db.executemany("INSERT INTO redirects (source_id, target_id) VALUES (?, ?)", list(redirects))
        await db.executemany("INSERT INTO links (from_id, to_id, anchor) VALUES (?, ?, ?)", list(links))
        await db.commit()


class WikiLinkDB:
    """
    Endpoint resolver and link source backed by a SQLite snapshot.

    Title lookups are case-insensitive and follow redirects; links come back
    with their anchor text (or the target title when the anchor is empty).
    """

    def __init__(self, db_path: str = "my_wiki.db"):
        self.db_path = Path(db_path)
        if not self.db_path.exists():
            logger.error(f"Database file not found at {self.db_path.resolve()}")

    async def _connect(self) -> aiosqlite.Connection:
        db = await aiosqlite.connect(self.db_path)
        try:
            for pragma in READ_PRAGMAS:
                await db.execute(pragma)
        except sqlite3.Error:
            await db.close()
            raise
        return db

    async def resolve_title(self, title: str) -> Optional[str]:
        """
        Get the canonical title for a page, following redirects.

        Returns:
            Optional[str]: The article title, or None if not found.
        """
        validate_page_title(title)
        title = title.strip().replace("_", " ")

        db = await self._connect()
        try:
            query = "SELECT id, title, is_redirect FROM pages WHERE title = ? COLLATE NOCASE"
            async with db.execute(query, (title,)) as cursor:
                results = await cursor.fetchall()

            if not results:
                logger.debug(f"No page found for title: '{title}'")
                return None

            # Prefer an exact, non-redirect match, then any non-redirect
            for _, db_title, is_redirect in results:
                if db_title == title and not is_redirect:
                    return db_title
            for _, db_title, is_redirect in results:
                if not is_redirect:
                    return db_title

            redirect_query = """
                SELECT p.title FROM redirects r JOIN pages p ON p.id = r.target_id
                WHERE r.source_id = ?
            """
            async with db.execute(redirect_query, (results[0][0],)) as cursor:
                row = await cursor.fetchone()
            if row is None:
                logger.warning(f"Page '{title}' is a redirect but no target was found.")
                return None
            return row[0]
        finally:
            await db.close()

    async def fetch_links(self, title: str) -> List[LinkEdge]:
        """Get the outgoing links of a page in stored order.

        Raises:
            SuccessorFetchError: If the snapshot cannot be queried.
        """
        query = """
            SELECT p2.title AS to_page, l.anchor
            FROM pages p1
            JOIN links l ON l.from_id = p1.id
            JOIN pages p2 ON l.to_id = p2.id
            WHERE p1.title = ?
            ORDER BY l.rowid
        """
        try:
            db = await self._connect()
            try:
                async with db.execute(query, (title,)) as cursor:
                    rows = await cursor.fetchall()
            finally:
                await db.close()
        except sqlite3.Error as e:
            raise SuccessorFetchError(f"Database error while fetching links for '{title}': {e}") from e

        return [LinkEdge(target=to_page, display_text=anchor or to_page) for to_page, anchor in rows]

    async def get_database_stats(self) -> Tuple[int, int]:
        """Get total number of pages and links."""
        db = await self._connect()
        try:
            async with db.execute("SELECT COUNT(*) FROM pages") as cursor:
                page_count = (await cursor.fetchone())[0]
            async with db.execute("SELECT COUNT(*) FROM links") as cursor:
                link_count = (await cursor.fetchone())[0]
            return page_count, link_count
        finally:
            await db.close()
