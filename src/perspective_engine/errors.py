"""Exception types raised by the perspective engine.

Only ``NotFoundError`` and ``StoreError`` reach callers. ``DegradedSignalError``
and ``CacheWriteConflict`` are raised and absorbed internally.
"""


class PerspectiveEngineError(Exception):
    """Base class for engine errors."""


class NotFoundError(PerspectiveEngineError):
    """The requested main article does not exist."""

    def __init__(self, article_id: str, country: str) -> None:
        super().__init__(f"Article {article_id!r} not found in {country!r}")
        self.article_id = article_id
        self.country = country


class StoreError(PerspectiveEngineError):
    """The article store, source registry, or perspective cache is unavailable."""


class DegradedSignalError(PerspectiveEngineError):
    """An entity-extraction or embedding call failed and its signal is neutral."""


class CacheWriteConflict(PerspectiveEngineError):
    """Another writer already cached the same (main, related) pair."""
