"""Tests for alignment buckets and labels."""

import pytest

from perspective_engine.alignment import (
    DEFAULT_ALIGNMENT_CONFIDENCE,
    DEFAULT_ALIGNMENT_SCORE,
    alignment_label,
    bucket_for_score,
    is_valid_alignment_score,
    is_valid_confidence,
    localize_label,
    source_alignment,
    source_label,
)
from perspective_engine.data import AlignmentBucket, AlignmentLabel, CountryCode, Source


@pytest.mark.parametrize(
    ("score", "bucket"),
    [
        (-5, AlignmentBucket.ANTI_GOV),
        (-2, AlignmentBucket.ANTI_GOV),
        (-1, AlignmentBucket.MIXED),
        (0, AlignmentBucket.MIXED),
        (1, AlignmentBucket.MIXED),
        (2, AlignmentBucket.PRO_GOV),
        (5, AlignmentBucket.PRO_GOV),
    ],
)
def test_bucket_for_score(score: int, bucket: AlignmentBucket) -> None:
    assert bucket_for_score(score) == bucket


@pytest.mark.parametrize(
    ("score", "label"),
    [
        (-5, AlignmentLabel.OPPOSITION_LEANING),
        (-3, AlignmentLabel.OPPOSITION_LEANING),
        (-2, AlignmentLabel.SLIGHTLY_OPPOSITION),
        (-1, AlignmentLabel.SLIGHTLY_OPPOSITION),
        (0, AlignmentLabel.MIXED_CENTER),
        (1, AlignmentLabel.SLIGHTLY_PRO_GOVERNMENT),
        (2, AlignmentLabel.SLIGHTLY_PRO_GOVERNMENT),
        (3, AlignmentLabel.PRO_GOVERNMENT),
        (5, AlignmentLabel.PRO_GOVERNMENT),
    ],
)
def test_alignment_label(score: int, label: AlignmentLabel) -> None:
    assert alignment_label(score, 0.9) == label


def test_low_confidence_is_uncertain() -> None:
    assert alignment_label(4, 0.59) == AlignmentLabel.UNCERTAIN
    assert alignment_label(4, 0.6) == AlignmentLabel.PRO_GOVERNMENT


def test_localize_label_turkish() -> None:
    assert localize_label(AlignmentLabel.PRO_GOVERNMENT, "tr") == "İktidara Yakın"
    assert localize_label(AlignmentLabel.UNCERTAIN, "tr") == "Belirsiz"
    assert localize_label(AlignmentLabel.MIXED_CENTER) == "Mixed / Center"


def test_source_alignment_missing_source_uses_defaults() -> None:
    assert source_alignment(None) == (DEFAULT_ALIGNMENT_SCORE, DEFAULT_ALIGNMENT_CONFIDENCE)
    # Default confidence is below the label threshold
    assert source_label(None) == "Uncertain"


def test_source_label_uses_live_registry_values() -> None:
    source = Source(name="Daily", country=CountryCode.TR, alignment_score=-4)
    assert source_alignment(source) == (-4, 0.7)
    assert source_label(source) == "Opposition-Leaning"
    assert source_label(source, "tr") == "Muhalefete Yakın"


def test_is_valid_alignment_score() -> None:
    assert is_valid_alignment_score(-5)
    assert is_valid_alignment_score(5)
    assert not is_valid_alignment_score(6)
    assert not is_valid_alignment_score(1.5)
    assert not is_valid_alignment_score(True)


def test_is_valid_confidence() -> None:
    assert is_valid_confidence(0.0)
    assert is_valid_confidence(1.0)
    assert not is_valid_confidence(1.2)
