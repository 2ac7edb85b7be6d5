"""No-op entity extractor for running without the analysis service."""

from perspective_engine.data import ExtractedEntities


class NoOpEntityExtractor:
    """Extractor that never finds entities.

    With this extractor every candidate falls below the entity threshold,
    so no embedding calls are made and no perspectives are matched.
    """

    async def extract(self, text: str) -> ExtractedEntities:
        return ExtractedEntities.empty()
