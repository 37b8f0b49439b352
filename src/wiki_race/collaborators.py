"""
Interfaces of the external services the search engine depends on.

Any object with matching async methods can be plugged in; the concrete
implementations live in ``wiki_race.wikipedia``, ``wiki_race.storage`` and
``wiki_race.search.similarity``.
"""

from typing import List, Optional, Protocol, runtime_checkable

import numpy as np

from wiki_race.models import LinkEdge, ModelVariant


@runtime_checkable
class EndpointResolver(Protocol):
    async def resolve_title(self, title: str) -> Optional[str]:
        """Return the canonical title for ``title`` or None when it does not exist."""
        ...


@runtime_checkable
class LinkSource(Protocol):
    async def fetch_links(self, title: str) -> List[LinkEdge]:
        """Return the outgoing links of a canonical page title.

        May raise ``SuccessorFetchError``; callers treat that as no links.
        """
        ...


@runtime_checkable
class Embedder(Protocol):
    async def embed(self, text: str, variant: ModelVariant) -> np.ndarray:
        """Return the unit-normalized embedding of ``text`` under ``variant``."""
        ...

