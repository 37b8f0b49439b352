import os
from pydantic import BaseModel, Field, field_validator

from wiki_race.exceptions import InvalidModelVariantError
from wiki_race.models import ModelVariant, TerminationPolicy


class SearchConfig(BaseModel):
    """Configuration for the path search engine."""

    # Search settings
    time_budget_seconds: float = Field(60.0, gt=0)
    termination_policy: TerminationPolicy = TerminationPolicy.WAIT_FOR_BOTH
    default_model: str = "0"

    # Successor cache
    successor_cache_size: int = Field(10_000, gt=0)

    # Link source settings
    link_source: str = Field("live", pattern="^(live|sqlite)$")
    db_path: str = "my_wiki.db"
    wiki_language: str = "en"

    @field_validator("default_model")
    @classmethod
    def check_default_model(cls, value: str) -> str:
        try:
            ModelVariant.from_selector(value)
        except InvalidModelVariantError as e:
            raise ValueError(e.message)
        return value

    def default_variant(self) -> ModelVariant:
        return ModelVariant.from_selector(self.default_model)

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """Create config from environment variables."""
        return cls(
            time_budget_seconds=float(os.getenv("WIKI_RACE_TIME_BUDGET", "60")),
            termination_policy=TerminationPolicy(os.getenv("WIKI_RACE_TERMINATION", "wait_for_both")),
            default_model=os.getenv("WIKI_RACE_DEFAULT_MODEL", "0"),
            successor_cache_size=int(os.getenv("WIKI_RACE_SUCCESSOR_CACHE_SIZE", "10000")),
            link_source=os.getenv("WIKI_RACE_LINK_SOURCE", "live"),
            db_path=os.getenv("WIKI_RACE_DB_PATH", "my_wiki.db"),
            wiki_language=os.getenv("WIKI_RACE_LANGUAGE", "en"),
        )
