import logging
import httpx
from typing import List, Optional

from wiki_race.exceptions import SuccessorFetchError
from wiki_race.models import LinkEdge
from .link_parser import extract_links

USER_AGENT = "wiki-race/0.1 (semantic path search)"


class LiveWikiService:
    """
    Resolves titles and fetches page links from the live Wikipedia API.
    All methods are asynchronous.
    """
    def __init__(
        self,
        language: str = "en",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.language = language
        self.base_url = f"https://{language}.wikipedia.org/w/api.php"
        self.timeout = timeout
        self._transport = transport
        self.logger = logging.getLogger(__name__)

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout or self.timeout,
            transport=self._transport,
            headers={"User-Agent": USER_AGENT},
        )

    async def resolve_title(self, title: str) -> Optional[str]:
        """
        Resolve normalization and redirects for a title.

        Returns the canonical article title, or None if the page does not exist.

        Raises:
            ConnectionError: If the Wikipedia API cannot be reached.
        """
        params = {
            "action": "query", "format": "json", "formatversion": "2",
            "titles": title, "redirects": "1", "prop": "info",
        }
        try:
            async with self._client(timeout=5.0) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            self.logger.error(f"Failed to resolve '{title}': {e}")
            raise ConnectionError(f"Wikipedia API request failed for '{title}': {e}")

        pages = data.get("query", {}).get("pages", [])
        if not pages:
            return None
        page = pages[0]
        if page.get("missing") or page.get("invalid"):
            self.logger.debug(f"Page '{title}' does not exist")
            return None
        return page["title"]

    async def fetch_links(self, title: str) -> List[LinkEdge]:
        """
        Fetch the article links of a page from its wikitext.

        Links after the references-like sections are dropped. A missing page
        yields an empty list.

        Raises:
            SuccessorFetchError: If the request fails or the API reports an error.
        """
        params = {
            "action": "parse", "format": "json", "formatversion": "2",
            "page": title, "prop": "wikitext", "redirects": "1",
        }
        try:
            async with self._client() as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise SuccessorFetchError(f"Wikipedia API request failed for '{title}': {e}") from e

        if "error" in data:
            code = data["error"].get("code")
            if code == "missingtitle":
                self.logger.warning(f"Page '{title}' is missing or does not exist.")
                return []
            raise SuccessorFetchError(f"Wikipedia API error for '{title}': {data['error'].get('info', code)}")

        wikitext = data.get("parse", {}).get("wikitext", "")
        links = extract_links(wikitext)
        self.logger.debug(f"Extracted {len(links)} links from '{title}'")
        return links
