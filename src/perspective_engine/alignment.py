"""Editorial-alignment buckets and display labels."""

from typing import Literal

from perspective_engine.data import AlignmentBucket, AlignmentLabel, Source

MIN_ALIGNMENT_SCORE = -5
MAX_ALIGNMENT_SCORE = 5
BUCKET_THRESHOLD = 2
LOW_CONFIDENCE_THRESHOLD = 0.6

# Used when an outlet has no registry entry
DEFAULT_ALIGNMENT_SCORE = 0
DEFAULT_ALIGNMENT_CONFIDENCE = 0.5

LabelLanguage = Literal["en", "tr"]

_TURKISH_LABELS: dict[AlignmentLabel, str] = {
    AlignmentLabel.OPPOSITION_LEANING: "Muhalefete Yakın",
    AlignmentLabel.SLIGHTLY_OPPOSITION: "Muhalefete Eğilimli",
    AlignmentLabel.MIXED_CENTER: "Karışık / Merkez",
    AlignmentLabel.SLIGHTLY_PRO_GOVERNMENT: "İktidara Eğilimli",
    AlignmentLabel.PRO_GOVERNMENT: "İktidara Yakın",
    AlignmentLabel.UNCERTAIN: "Belirsiz",
}


def bucket_for_score(score: int) -> AlignmentBucket:
    """Map an alignment score to its balanced-feed bucket.

    ``proGov`` is score >= +2, ``antiGov`` is score <= -2, everything in
    between is ``mixed``.
    """
    if score >= BUCKET_THRESHOLD:
        return AlignmentBucket.PRO_GOV
    if score <= -BUCKET_THRESHOLD:
        return AlignmentBucket.ANTI_GOV
    return AlignmentBucket.MIXED


def alignment_label(score: int, confidence: float) -> AlignmentLabel:
    """Derive the display label for a score, or ``Uncertain`` when confidence is low."""
    if confidence < LOW_CONFIDENCE_THRESHOLD:
        return AlignmentLabel.UNCERTAIN
    if score <= -3:
        return AlignmentLabel.OPPOSITION_LEANING
    if score <= -1:
        return AlignmentLabel.SLIGHTLY_OPPOSITION
    if score == 0:
        return AlignmentLabel.MIXED_CENTER
    if score <= 2:
        return AlignmentLabel.SLIGHTLY_PRO_GOVERNMENT
    return AlignmentLabel.PRO_GOVERNMENT


def localize_label(label: AlignmentLabel, language: LabelLanguage = "en") -> str:
    if language == "tr":
        return _TURKISH_LABELS[label]
    return label.value


def source_alignment(source: Source | None) -> tuple[int, float]:
    """Return ``(score, confidence)`` for a registry entry, with defaults when missing."""
    if source is None:
        return (DEFAULT_ALIGNMENT_SCORE, DEFAULT_ALIGNMENT_CONFIDENCE)
    return (source.alignment_score, source.alignment_confidence)


def source_label(source: Source | None, language: LabelLanguage = "en") -> str:
    score, confidence = source_alignment(source)
    return localize_label(alignment_label(score, confidence), language)


def is_valid_alignment_score(score: object) -> bool:
    return (
        isinstance(score, int)
        and not isinstance(score, bool)
        and MIN_ALIGNMENT_SCORE <= score <= MAX_ALIGNMENT_SCORE
    )


def is_valid_confidence(confidence: float) -> bool:
    return 0.0 <= confidence <= 1.0
