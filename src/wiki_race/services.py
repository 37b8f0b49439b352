"""
Construction of the external collaborators from configuration.
"""

import logging
from typing import Union

from wiki_race.config import SearchConfig
from wiki_race.search import SuccessorCache, SuccessorProvider
from wiki_race.storage import WikiLinkDB
from wiki_race.wikipedia import LiveWikiService

logger = logging.getLogger(__name__)

LinkBackend = Union[LiveWikiService, WikiLinkDB]


def create_link_backend(config: SearchConfig) -> LinkBackend:
    """The resolver/link source selected by ``config.link_source``."""
    if config.link_source == "sqlite":
        logger.info(f"Using offline link snapshot at {config.db_path}")
        return WikiLinkDB(config.db_path)
    logger.info(f"Using live Wikipedia API ({config.wiki_language})")
    return LiveWikiService(language=config.wiki_language)


def create_successor_provider(config: SearchConfig, backend: LinkBackend) -> SuccessorProvider:
    return SuccessorProvider(backend, SuccessorCache(config.successor_cache_size))
