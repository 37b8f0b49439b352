from fastapi import Request

from wiki_race.collaborators import EndpointResolver, Embedder
from wiki_race.config import SearchConfig
from wiki_race.search import SuccessorProvider

def get_search_config(request: Request) -> SearchConfig:
    """Dependency provider to get the shared SearchConfig."""
    return request.app.state.search_config

def get_resolver(request: Request) -> EndpointResolver:
    """Dependency provider to get the shared title resolver."""
    return request.app.state.resolver

def get_successor_provider(request: Request) -> SuccessorProvider:
    """Dependency provider to get the process-wide SuccessorProvider and its cache."""
    return request.app.state.successors

def get_embedder(request: Request) -> Embedder:
    """Dependency provider to get the shared embedder (models stay loaded)."""
    return request.app.state.embedder
