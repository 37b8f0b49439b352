"""
Exception taxonomy for the wiki_race search engine.
"""

class WikiRaceException(Exception):
    """Base exception for the library."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class InvalidEndpointError(WikiRaceException):
    """Raised when a start or goal page title cannot be resolved."""
    pass

class BudgetExceededError(WikiRaceException):
    """Raised when a directional search runs past its wall-clock budget."""
    def __init__(self, message: str, elapsed: float = 0.0):
        self.elapsed = elapsed
        super().__init__(message)

class NoPathFoundError(WikiRaceException):
    """Raised when the frontier empties without reaching the goal."""
    pass

class SuccessorFetchError(WikiRaceException):
    """Raised by a link source when the links of a page cannot be fetched."""
    pass

class SimilarityComputeError(WikiRaceException):
    """Raised when an embedding cannot be computed for a label."""
    pass

class SearchStateError(WikiRaceException):
    """Raised when an engine is advanced after it reached a terminal state."""
    pass

class InvalidModelVariantError(WikiRaceException):
    """Raised when a requested embedding model selector is not supported."""
    pass
