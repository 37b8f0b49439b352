from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from typing import AsyncIterator, Optional
import logging

from wiki_race.collaborators import EndpointResolver, Embedder
from wiki_race.config import SearchConfig
from wiki_race.exceptions import InvalidModelVariantError, NoPathFoundError
from wiki_race.models import ModelVariant
from wiki_race.search import BidirectionalCoordinator, SimilarityOracle, SuccessorProvider
from wiki_race.search.stream import encode_error, ndjson_stream
from backend.dependencies import (
    get_embedder,
    get_resolver,
    get_search_config,
    get_successor_provider,
)

router = APIRouter(prefix="/api", tags=["search"])
logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "application/x-ndjson"

@router.get("/wikipedia")
async def search_path(
    start_word: str = Query(..., alias="startWord", min_length=1, description="Title of the start page"),
    end_word: str = Query(..., alias="endWord", min_length=1, description="Title of the goal page"),
    model: Optional[str] = Query(
        None, description="Embedding model selector (0, 1 or 2) or model name; defaults to the configured model"
    ),
    config: SearchConfig = Depends(get_search_config),
    resolver: EndpointResolver = Depends(get_resolver),
    successors: SuccessorProvider = Depends(get_successor_provider),
    embedder: Embedder = Depends(get_embedder),
) -> StreamingResponse:
    """
    Stream a bidirectional semantic search between two Wikipedia pages.

    The response is NDJSON: one record per search tick and direction, ending
    with the records that carry ``finished`` or ``error``.
    """
    if not start_word.strip() or not end_word.strip():
        raise HTTPException(status_code=422, detail="startWord and endWord must be non-empty page titles")
    try:
        variant = ModelVariant.from_selector(model if model is not None else config.default_model)
    except InvalidModelVariantError as e:
        raise HTTPException(status_code=422, detail=e.message)

    coordinator = BidirectionalCoordinator(
        start_word.strip(),
        end_word.strip(),
        resolver=resolver,
        successors=successors,
        oracle=SimilarityOracle(embedder, variant),
        time_budget_seconds=config.time_budget_seconds,
        policy=config.termination_policy,
    )
    logger.info(f"Search requested: {start_word} -> {end_word} (model {variant.value})")

    return StreamingResponse(_stream(coordinator), media_type=NDJSON_MEDIA_TYPE)

async def _stream(coordinator: BidirectionalCoordinator) -> AsyncIterator[str]:
    """NDJSON lines; a search without any path ends with a final error record."""
    try:
        async for line in ndjson_stream(coordinator.run()):
            yield line
    except NoPathFoundError as e:
        logger.warning(f"Search failed: {e.message}")
        yield encode_error(e.message)
