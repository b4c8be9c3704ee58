"""Unit tests for the attendance bracket table."""
from __future__ import annotations

import pytest

from src.weighting.brackets import (
    BRACKETS,
    AttendanceLevel,
    AttendanceWeight,
    attendance_level,
    attendance_range,
    calculate_weight,
    classify,
)


@pytest.mark.parametrize(
    ("percentage", "weight"),
    [
        (100, 1.0),
        (90, 1.0),
        (89.999, 0.9),
        (75, 0.9),
        (74.999, 0.7),
        (60, 0.7),
        (40, 0.5),
        (25, 0.3),
        (24.999, 0.1),
        (0, 0.1),
    ],
)
def test_boundary_weights(percentage: float, weight: float) -> None:
    assert classify(percentage).weight == weight
    assert calculate_weight(percentage) == weight


@pytest.mark.parametrize(
    ("percentage", "level", "label"),
    [
        (95, AttendanceLevel.FULL, "90%+"),
        (80, AttendanceLevel.HIGH, "75-89%"),
        (65, AttendanceLevel.MODERATE, "60-74%"),
        (50, AttendanceLevel.LIMITED, "40-59%"),
        (30, AttendanceLevel.LOW, "25-39%"),
        (10, AttendanceLevel.MINIMAL, "<25%"),
    ],
)
def test_level_and_label_follow_same_bracket(percentage, level, label) -> None:
    assert attendance_level(percentage) is level
    assert attendance_range(percentage) == label
    assert classify(percentage).level is level


def test_classify_returns_weight_and_level() -> None:
    assert classify(80) == AttendanceWeight(weight=0.9, level=AttendanceLevel.HIGH)
    # str-enum compares equal to its value
    assert classify(80).level == "high"


def test_weight_is_monotonic() -> None:
    """Higher attendance never yields a lower weight."""
    samples = [p / 4 for p in range(0, 401)]  # 0.0 .. 100.0 step 0.25
    weights = [calculate_weight(p) for p in samples]
    assert weights == sorted(weights)


def test_table_is_ordered_highest_first() -> None:
    thresholds = [b.threshold for b in BRACKETS]
    assert thresholds == sorted(thresholds, reverse=True)
    assert len({b.range_label for b in BRACKETS}) == len(BRACKETS)


def test_out_of_range_input_still_classified() -> None:
    """No validation happens here; callers own the 0..100 contract."""
    assert classify(150).level is AttendanceLevel.FULL
    assert classify(-5).level is AttendanceLevel.MINIMAL
    assert classify(float("nan")).weight == 0.1
