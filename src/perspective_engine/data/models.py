"""Core data models for the perspective engine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class CountryCode(StrEnum):
    """Countries with an article store partition."""

    TR = "tr"
    DE = "de"
    US = "us"
    UK = "uk"
    FR = "fr"
    ES = "es"
    IT = "it"
    RU = "ru"

    @classmethod
    def parse(cls, value: "str | CountryCode") -> "CountryCode":
        """Resolve a country string to a supported code.

        Raises:
            ValueError: If the country is not supported.
        """
        if isinstance(value, CountryCode):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            supported = ", ".join(c.value for c in cls)
            msg = f"Unsupported country code: {value!r} (supported: {supported})"
            raise ValueError(msg) from None


class AlignmentBucket(StrEnum):
    """Coarse editorial-alignment group used by the balanced feed."""

    PRO_GOV = "proGov"
    MIXED = "mixed"
    ANTI_GOV = "antiGov"


class AlignmentLabel(StrEnum):
    """Display label derived from a source's alignment score and confidence."""

    OPPOSITION_LEANING = "Opposition-Leaning"
    SLIGHTLY_OPPOSITION = "Slightly Opposition"
    MIXED_CENTER = "Mixed / Center"
    SLIGHTLY_PRO_GOVERNMENT = "Slightly Pro-Government"
    PRO_GOVERNMENT = "Pro-Government"
    UNCERTAIN = "Uncertain"


@dataclass(frozen=True)
class Article:
    """A persisted news article, read-only from the engine's point of view."""

    id: str
    country: CountryCode
    title: str
    summary: str
    published_at: datetime
    is_filtered: bool = False

    @property
    def text(self) -> str:
        """Text submitted for entity extraction and embedding."""
        return f"{self.title}. {self.summary}"


@dataclass(frozen=True)
class PrimarySource:
    """The outlet an article is attributed to."""

    article_id: str
    source_name: str
    logo_url: str = ""
    source_url: str = ""


@dataclass(frozen=True)
class Source:
    """An outlet in the source registry with its editorial-alignment rating.

    ``alignment_score`` ranges from -5 (critical of government framing) to
    +5 (favorable); ``alignment_confidence`` ranges from 0 to 1.
    """

    name: str
    country: CountryCode
    alignment_score: int = 0
    alignment_confidence: float = 0.7
    id: int | None = None
    logo_url: str = ""
    alignment_label: str | None = None
    alignment_notes: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class ExtractedEntities:
    """Named entities pulled from one block of text."""

    persons: tuple[str, ...] = ()
    organizations: tuple[str, ...] = ()
    locations: tuple[str, ...] = ()
    events: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> "ExtractedEntities":
        return cls()

    def flatten(self) -> list[str]:
        """All entities across the four categories, in category order."""
        return [*self.persons, *self.organizations, *self.locations, *self.events]

    @property
    def is_empty(self) -> bool:
        return not (self.persons or self.organizations or self.locations or self.events)


@dataclass(frozen=True)
class PerspectiveMatch:
    """A cached scoring result for one (main, related) article pair.

    Rows are written once and never updated; ``rank`` is the position the
    pair held in the ranked result of the run that produced it.
    """

    main_article_id: str
    related_article_id: str
    similarity_score: float
    matched_entities: tuple[str, ...] = ()
    rank: int = 0
    created_at: datetime | None = None


@dataclass(frozen=True)
class MatchOptions:
    """Per-request tuning for perspective matching."""

    time_window_hours: float = 24
    entity_threshold: float = 0.25
    combined_threshold: float = 0.65
    max_results: int = 5


@dataclass(frozen=True)
class MainArticleView:
    """The main article as presented alongside its perspectives."""

    id: str
    title: str
    summary: str
    source_name: str | None
    alignment_score: int
    alignment_label: str


@dataclass(frozen=True)
class RelatedPerspective:
    """An article from another outlet covering the same story."""

    article_id: str
    title: str
    summary: str
    source_name: str
    source_logo_url: str
    source_url: str
    alignment_score: int
    alignment_label: str
    published_at: datetime
    similarity_score: float
    matched_entities: tuple[str, ...] = ()


@dataclass(frozen=True)
class PerspectivesResult:
    """Outcome of a perspective search. An empty list is a normal result."""

    main_article: MainArticleView
    related_perspectives: list[RelatedPerspective] = field(default_factory=list)
    from_cache: bool = False


@dataclass(frozen=True)
class FeedArticle:
    """A recent article annotated with its source's alignment."""

    article: Article
    source_name: str
    source_logo_url: str
    alignment_score: int
    alignment_label: str


@dataclass(frozen=True)
class BalancedFeed:
    """Recent articles partitioned into three alignment buckets."""

    pro_gov: list[FeedArticle] = field(default_factory=list)
    mixed: list[FeedArticle] = field(default_factory=list)
    anti_gov: list[FeedArticle] = field(default_factory=list)

    def bucket(self, bucket: AlignmentBucket) -> list[FeedArticle]:
        if bucket is AlignmentBucket.PRO_GOV:
            return self.pro_gov
        if bucket is AlignmentBucket.MIXED:
            return self.mixed
        return self.anti_gov
