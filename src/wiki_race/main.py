import asyncio
import logging
import os
import sys
from typing import Optional

import typer

from wiki_race.config import SearchConfig
from wiki_race.exceptions import InvalidModelVariantError, NoPathFoundError
from wiki_race.models import ModelVariant, TerminationPolicy
from wiki_race.search import BidirectionalCoordinator, SentenceTransformerEmbedder, SimilarityOracle
from wiki_race.search.stream import ndjson_stream
from wiki_race.services import create_link_backend, create_successor_provider


app = typer.Typer()


@app.command()
def search(
    start: str = typer.Argument(..., help="Title of the page to start from."),
    goal: str = typer.Argument(..., help="Title of the page to reach."),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help=(
            "Embedding model: 0=all-MiniLM-L6-v2, 1=GIST-small-Embedding-v0, 2=MedEmbed-small-v0.1. "
            "Defaults to WIKI_RACE_DEFAULT_MODEL or 0."
        ),
    ),
    budget: float = typer.Option(60.0, "--budget", "-b", help="Time budget per direction in seconds."),
    source: str = typer.Option("live", "--source", "-s", help="Link source: live or sqlite."),
    db_path: str = typer.Option("my_wiki.db", "--db", help="SQLite snapshot used with --source sqlite."),
    policy: TerminationPolicy = typer.Option(
        TerminationPolicy.WAIT_FOR_BOTH, "--policy", help="Stop when both directions finish or at the first."
    ),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level for stderr output."),
):
    """
    Search for a chain of links between two Wikipedia pages and print every
    search event as a JSON line.
    """
    if not start.strip() or not goal.strip():
        raise typer.BadParameter("start and goal must be non-empty page titles")
    if model is None:
        model = os.getenv("WIKI_RACE_DEFAULT_MODEL", "0")
    try:
        variant = ModelVariant.from_selector(model)
    except InvalidModelVariantError as e:
        raise typer.BadParameter(e.message, param_hint="--model")
    if source not in ("live", "sqlite"):
        raise typer.BadParameter(f"unknown link source '{source}'", param_hint="--source")
    if budget <= 0:
        raise typer.BadParameter("the time budget must be positive", param_hint="--budget")

    config = SearchConfig(
        time_budget_seconds=budget,
        termination_policy=policy,
        default_model=model,
        link_source=source,
        db_path=db_path,
    )
    found = asyncio.run(run_search_async(start, goal, variant, config, log_level))
    raise typer.Exit(code=0 if found else 1)


async def run_search_async(
    start: str,
    goal: str,
    variant: ModelVariant,
    config: SearchConfig,
    log_level: str = "INFO",
) -> bool:
    from wiki_race.logging_config import setup_logging

    setup_logging(level=log_level)
    logger = logging.getLogger(__name__)

    backend = create_link_backend(config)
    coordinator = BidirectionalCoordinator(
        start,
        goal,
        resolver=backend,
        successors=create_successor_provider(config, backend),
        oracle=SimilarityOracle(SentenceTransformerEmbedder(), variant),
        time_budget_seconds=config.time_budget_seconds,
        policy=config.termination_policy,
    )

    try:
        async for line in ndjson_stream(coordinator.run()):
            sys.stdout.write(line)
            sys.stdout.flush()
    except NoPathFoundError as e:
        logger.error(e.message)
        return False

    return bool(coordinator.paths)


if __name__ == "__main__":
    app()
