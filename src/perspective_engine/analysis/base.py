"""Protocols for the external text-analysis service."""

from typing import Protocol

import numpy as np
from numpy.typing import NDArray

from perspective_engine.data import ExtractedEntities


class EntityExtractor(Protocol):
    """Interface for named-entity extraction."""

    async def extract(self, text: str) -> ExtractedEntities:
        """Extract persons, organizations, locations and events from text.

        Implementations never raise on service failure; they return
        ``ExtractedEntities.empty()`` instead.

        Args:
            text: Article text (truncated by the implementation).

        Returns:
            The extracted entities.
        """
        ...


class TextEmbedder(Protocol):
    """Interface for text embedding models."""

    async def embed(self, text: str) -> NDArray[np.float32]:
        """Embed a single text.

        Args:
            text: Text to embed (truncated by the caller).

        Returns:
            Vector of fixed dimensionality.

        Raises:
            DegradedSignalError: If the embedding could not be produced.
        """
        ...
