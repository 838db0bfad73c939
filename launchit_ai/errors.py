"""Exception types raised by the AI backend components."""


class LaunchItError(Exception):
    """Base class for every error raised by this package."""


class EmbeddingUnavailable(LaunchItError):
    """The external embedding model could not produce a vector."""


class DimensionMismatch(LaunchItError, ValueError):
    """Two vectors of different lengths were compared."""

    def __init__(self, left: int, right: int) -> None:
        super().__init__(f"Vectors must have same length (got {left} and {right})")
        self.left = left
        self.right = right


class LaunchDataError(LaunchItError):
    """The chat model failed while extracting listing data from a page."""


class SuggestionError(LaunchItError):
    """The chat model failed while generating project suggestions."""
