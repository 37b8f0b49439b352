"""
Wikipedia module for wiki_race.

Live access to Wikipedia: title resolution and link extraction from page
wikitext.
"""

from .live_service import LiveWikiService
from .link_parser import extract_links, truncate_at_end_sections

__all__ = [
    'LiveWikiService',
    'extract_links',
    'truncate_at_end_sections',
]
