"""Attendance brackets: percentage → weight, level and display label.

All three outputs are read from the single :data:`BRACKETS` table so a
percentage can never be assigned a weight from one bracket and a label from
another.  Thresholds are tested highest first; the first one the percentage
reaches wins and anything below the last threshold lands in the *minimal*
bracket.

The functions are total: out-of-range input (negative, above 100) still maps to
a bracket.  Validating the percentage is the caller's job (see
:func:`src.submission.validate_attendance`).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

__all__ = [
    "AttendanceLevel",
    "AttendanceWeight",
    "Bracket",
    "BRACKETS",
    "find_bracket",
    "classify",
    "calculate_weight",
    "attendance_level",
    "attendance_range",
]


class AttendanceLevel(str, Enum):
    """Programmatic category of an attendance bracket."""

    FULL = "full"
    HIGH = "high"
    MODERATE = "moderate"
    LIMITED = "limited"
    LOW = "low"
    MINIMAL = "minimal"


@dataclass(frozen=True)
class Bracket:
    """One row of the attendance table."""

    threshold: float  # inclusive lower bound
    weight: float
    level: AttendanceLevel
    range_label: str


@dataclass(frozen=True)
class AttendanceWeight:
    """Influence multiplier and level for a single respondent."""

    weight: float
    level: AttendanceLevel


# Ordered highest threshold first; find_bracket relies on this.
BRACKETS: Tuple[Bracket, ...] = (
    Bracket(90.0, 1.0, AttendanceLevel.FULL, "90%+"),
    Bracket(75.0, 0.9, AttendanceLevel.HIGH, "75-89%"),
    Bracket(60.0, 0.7, AttendanceLevel.MODERATE, "60-74%"),
    Bracket(40.0, 0.5, AttendanceLevel.LIMITED, "40-59%"),
    Bracket(25.0, 0.3, AttendanceLevel.LOW, "25-39%"),
    Bracket(float("-inf"), 0.1, AttendanceLevel.MINIMAL, "<25%"),
)


def find_bracket(attendance_percentage: float) -> Bracket:
    """Return the bracket *attendance_percentage* falls into."""
    for bracket in BRACKETS:
        if attendance_percentage >= bracket.threshold:
            return bracket
    # NaN compares false against every threshold
    return BRACKETS[-1]


def classify(attendance_percentage: float) -> AttendanceWeight:
    """Return weight and level for *attendance_percentage*."""
    bracket = find_bracket(attendance_percentage)
    return AttendanceWeight(weight=bracket.weight, level=bracket.level)


def calculate_weight(attendance_percentage: float) -> float:
    return find_bracket(attendance_percentage).weight


def attendance_level(attendance_percentage: float) -> AttendanceLevel:
    return find_bracket(attendance_percentage).level


def attendance_range(attendance_percentage: float) -> str:
    """Return the human-readable bracket label, e.g. ``"75-89%"``."""
    return find_bracket(attendance_percentage).range_label
