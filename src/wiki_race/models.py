from typing import List, Optional, Union
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

from wiki_race.exceptions import InvalidModelVariantError

# --- Enums ---

class Direction(str, Enum):
    """Which way a directional search runs."""
    FORWARD = "forward"
    BACKWARD = "backward"

class EngineState(Enum):
    """Lifecycle of a directional search engine."""
    INITIALIZING = "initializing"
    SEARCHING = "searching"
    FINISHED = "finished"
    FAILED = "failed"

class ErrorKind(str, Enum):
    """Categorizes the failures that are reported through the event stream."""
    INVALID_ENDPOINT = "invalid_endpoint"
    BUDGET_EXCEEDED = "budget_exceeded"

class ModelVariant(str, Enum):
    """Sentence embedding models that can drive the similarity heuristic."""
    MINILM = "all-MiniLM-L6-v2"
    GIST_SMALL = "GIST-small-Embedding-v0"
    MEDEMBED_SMALL = "MedEmbed-small-v0.1"

    @property
    def model_id(self) -> str:
        """Hugging Face repository the model weights are loaded from."""
        return _MODEL_IDS[self]

    @property
    def selector(self) -> str:
        """Numeric selector used by clients ("0", "1", "2")."""
        return str(list(ModelVariant).index(self))

    @classmethod
    def from_selector(cls, value: str) -> "ModelVariant":
        """Accepts a numeric selector or a variant name.

        Raises:
            InvalidModelVariantError: If ``value`` matches no variant.
        """
        variants = list(cls)
        if value.isdecimal() and int(value) < len(variants):
            return variants[int(value)]
        for variant in variants:
            if value in (variant.value, variant.name.lower(), variant.model_id):
                return variant
        supported = ", ".join(f"{v.selector}={v.value}" for v in variants)
        raise InvalidModelVariantError(f"Unknown model '{value}'. Supported models: {supported}")

_MODEL_IDS = {
    ModelVariant.MINILM: "sentence-transformers/all-MiniLM-L6-v2",
    ModelVariant.GIST_SMALL: "avsolatorio/GIST-small-Embedding-v0",
    ModelVariant.MEDEMBED_SMALL: "abhinand/MedEmbed-small-v0.1",
}

class TerminationPolicy(str, Enum):
    """When a bidirectional search stops."""
    WAIT_FOR_BOTH = "wait_for_both"
    FIRST_FINISH = "first_finish"

# --- Graph Models ---

class LinkEdge(BaseModel):
    """An outgoing link found on a page."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    target: str = Field(..., description="Title of the page the link points to")
    display_text: str = Field(..., alias="displayText", description="Anchor text shown for the link")

class PathStep(BaseModel):
    """One hop of an accumulated path."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    target: str = Field(..., description="Title of the page reached by this step")
    display_text: str = Field(..., alias="displayText", description="Anchor text of the followed link")
    origin: str = Field(..., description="Title of the page the link was found on; empty for the root step")

    @classmethod
    def root(cls, title: str) -> "PathStep":
        """The first step of every path: the start page pointing at itself."""
        return cls(target=title, display_text=title, origin="")

Path = List[PathStep]

# --- Event Models ---

class ProgressEvent(BaseModel):
    """Emitted once per tick with the path to the node being expanded."""
    direction: Optional[Direction] = None
    path: List[PathStep]
    time: float = Field(..., ge=0, description="Seconds since the directional search started")
    finished: bool = False

class ErrorEvent(BaseModel):
    """Terminal failure reported through the event stream."""
    direction: Optional[Direction] = None
    error: str
    kind: ErrorKind
    time: Optional[float] = None

SearchEvent = Union[ProgressEvent, ErrorEvent]
