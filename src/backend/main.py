import logging
import sqlite3
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import config
from backend.api.search import router as search_router
from wiki_race.config import SearchConfig
from wiki_race.models import ModelVariant
from wiki_race.search import SentenceTransformerEmbedder
from wiki_race.storage import WikiLinkDB
from wiki_race.services import create_link_backend, create_successor_provider

# Configure unified logging to match wiki_race style
from wiki_race.logging_config import setup_logging, setup_prod_logging
if config.debug:
    setup_logging(level="DEBUG")
else:
    setup_prod_logging(level="INFO")

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logger.info("Starting Wiki Race API...")

    # Tests and embedding hosts may install their own collaborators first
    search_config = getattr(app.state, "search_config", None) or SearchConfig.from_env()
    if getattr(app.state, "successors", None) is None:
        backend = create_link_backend(search_config)
        if isinstance(backend, WikiLinkDB):
            try:
                page_count, link_count = await backend.get_database_stats()
                logger.info(f"Link snapshot {search_config.db_path}: {page_count} pages, {link_count} links")
            except sqlite3.Error as e:
                logger.error(f"Link snapshot {search_config.db_path} is not readable: {e}")
        app.state.resolver = backend
        # Successor cache lives as long as the process
        app.state.successors = create_successor_provider(search_config, backend)
    if getattr(app.state, "embedder", None) is None:
        app.state.embedder = SentenceTransformerEmbedder()
        if config.preload_models:
            await app.state.embedder.preload(*ModelVariant)
    app.state.search_config = search_config

    logger.info(
        f"Wiki Race API startup complete (source={search_config.link_source}, "
        f"budget={search_config.time_budget_seconds}s, policy={search_config.termination_policy.value})"
    )

    yield

    logger.info(f"Successor cache at shutdown: {app.state.successors.cache.stats()}")
    logger.info("Wiki Race API shutdown complete")

# Create FastAPI app
app = FastAPI(
    title="Wiki Race API",
    description="Streams a semantic bidirectional link search between two Wikipedia pages",
    version="0.1.0",
    debug=config.debug,
    lifespan=lifespan
)

app.include_router(search_router)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "wiki-race-api",
        "version": "0.1.0",
        "models": {variant.selector: variant.value for variant in ModelVariant},
    }

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    logging.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred"
        }
    )

if __name__ == "__main__":
    uvicorn.run(
        "backend.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="info"
    )
