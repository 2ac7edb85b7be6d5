"""Balanced feed: recent articles grouped by source alignment."""

import logging
import math

from perspective_engine.alignment import LabelLanguage, bucket_for_score, source_label
from perspective_engine.data import (
    AlignmentBucket,
    BalancedFeed,
    CountryCode,
    FeedArticle,
    Source,
)
from perspective_engine.store.base import ArticleStore, SourceRegistry

logger = logging.getLogger(__name__)

DEFAULT_SCAN_SIZE = 100


class BalancedFeedBuilder:
    """Build a feed with articles from pro-government, mixed and anti-government outlets.

    Each active source of the country belongs to exactly one bucket, so no
    article can appear in two buckets. Buckets are filled independently from
    one newest-first scan of recent articles; a bucket with no sources stays
    empty. Read-only.

    Args:
        articles: Article store.
        sources: Source registry.
        scan_size: Recent articles scanned per page.
        label_language: Language of alignment labels.
    """

    def __init__(
        self,
        articles: ArticleStore,
        sources: SourceRegistry,
        *,
        scan_size: int = DEFAULT_SCAN_SIZE,
        label_language: LabelLanguage = "en",
    ) -> None:
        self._articles = articles
        self._sources = sources
        self._scan_size = scan_size
        self._label_language: LabelLanguage = label_language

    async def get_balanced_feed(
        self,
        country: str | CountryCode,
        limit: int = 10,
        page: int = 1,
    ) -> BalancedFeed:
        """Return up to ``ceil(limit / 3)`` articles per alignment bucket.

        Args:
            country: Country partition.
            limit: Total feed size requested, split across three buckets.
            page: 1-based page; each page scans the next ``scan_size`` articles.

        Raises:
            ValueError: If the country is unsupported or limit/page is below 1.
            StoreError: If a store is unavailable.
        """
        country = CountryCode.parse(country)
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        if page < 1:
            raise ValueError(f"page must be at least 1, got {page}")

        feed = BalancedFeed()
        active = await self._sources.list_active_sources(country)
        if not active:
            return feed

        source_buckets: dict[str, tuple[AlignmentBucket, Source]] = {
            s.name: (bucket_for_score(s.alignment_score), s) for s in active
        }
        per_bucket = math.ceil(limit / 3)

        recent = await self._articles.list_recent_articles(
            country,
            limit=self._scan_size,
            offset=(page - 1) * self._scan_size,
        )
        primaries = await self._articles.get_primary_sources(country, [a.id for a in recent])

        for article in recent:
            primary = primaries.get(article.id)
            if primary is None or primary.source_name not in source_buckets:
                continue
            bucket, source = source_buckets[primary.source_name]
            items = feed.bucket(bucket)
            if len(items) >= per_bucket:
                continue
            items.append(
                FeedArticle(
                    article=article,
                    source_name=primary.source_name,
                    source_logo_url=primary.logo_url or source.logo_url,
                    alignment_score=source.alignment_score,
                    alignment_label=source_label(source, self._label_language),
                )
            )

        logger.debug(
            "Balanced feed for %s page %d: %d pro-gov, %d mixed, %d anti-gov",
            country.value,
            page,
            len(feed.pro_gov),
            len(feed.mixed),
            len(feed.anti_gov),
        )
        return feed
