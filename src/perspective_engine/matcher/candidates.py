"""Time-windowed candidate selection for perspective matching."""

from datetime import timedelta

from perspective_engine.data import Article
from perspective_engine.store.base import ArticleStore

DEFAULT_WINDOW_HOURS = 24
DEFAULT_MAX_CANDIDATES = 50


class CandidateSelector:
    """Select articles that could cover the same story as a main article.

    Candidates are same-country, non-suppressed articles published within
    ``window_hours`` either side of the main article, newest first.
    """

    def __init__(self, articles: ArticleStore) -> None:
        self._articles = articles

    async def select(
        self,
        main: Article,
        window_hours: float = DEFAULT_WINDOW_HOURS,
        max_results: int = DEFAULT_MAX_CANDIDATES,
    ) -> list[Article]:
        """Return candidate articles; an empty list means nothing to compare against."""
        if max_results <= 0:
            return []
        window = timedelta(hours=window_hours)
        return await self._articles.list_articles_in_window(
            main.country,
            main.published_at - window,
            main.published_at + window,
            exclude_id=main.id,
            limit=max_results,
        )
