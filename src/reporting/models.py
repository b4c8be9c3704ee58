"""Data structures for the feedback analytics pipeline."""

from __future__ import annotations

import datetime
from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from src.weighting.brackets import AttendanceLevel


def _pick(data: Mapping[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    """Return ``data[snake]`` or ``data[camel]`` (API payloads use camelCase)."""
    if snake in data:
        return data[snake]
    return data.get(camel, default)


def _parse_timestamp(raw: Any) -> Optional[datetime.datetime]:
    if raw is None or isinstance(raw, datetime.datetime):
        return raw
    text = str(raw)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.datetime.fromisoformat(text)


@dataclass(frozen=True, slots=True)
class FeedbackResponse:
    """One anonymous submission to a feedback form.

    ``weight_factor`` is fixed when the response is submitted and is never
    recomputed, even if the student's attendance changes later.
    """

    form_id: str
    course_id: str
    student_attendance_percentage: float
    responses: Mapping[str, Any]
    weight_factor: float
    response_id: Optional[str] = None
    submitted_at: Optional[datetime.datetime] = None

    def __post_init__(self) -> None:
        # Copy and freeze the answers so callers cannot mutate a stored record.
        frozen = {
            question_id: tuple(value) if isinstance(value, list) else value
            for question_id, value in dict(self.responses).items()
        }
        object.__setattr__(self, "responses", MappingProxyType(frozen))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FeedbackResponse":
        """Build a response from a stored/exported record (snake or camel case).

        Raises:
            ValueError: If ``responses`` is not an object.
            TypeError: If a numeric field is null or not a number.
        """
        answers = _pick(data, "responses", "responses", None) or {}
        if not isinstance(answers, Mapping):
            raise ValueError("responses must map question ids to answers.")
        return cls(
            form_id=str(_pick(data, "form_id", "formId", "")),
            course_id=str(_pick(data, "course_id", "courseId", "")),
            student_attendance_percentage=float(
                _pick(data, "student_attendance_percentage", "studentAttendancePercentage", 0)
            ),
            responses=answers,
            weight_factor=float(_pick(data, "weight_factor", "weightFactor", 1.0)),
            response_id=_pick(data, "response_id", "id"),
            submitted_at=_parse_timestamp(_pick(data, "submitted_at", "submittedAt")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "response_id": self.response_id,
            "form_id": self.form_id,
            "course_id": self.course_id,
            "student_attendance_percentage": self.student_attendance_percentage,
            "responses": {
                question_id: list(value) if isinstance(value, tuple) else value
                for question_id, value in self.responses.items()
            },
            "weight_factor": self.weight_factor,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
        }


@dataclass(slots=True)
class AttendanceGroup:
    """Aggregate of all responses falling into one attendance bracket."""

    range: str
    count: int
    avg_score: float
    percentage: float  # last-seen raw percentage within the bracket
    weight: float
    level: AttendanceLevel

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["level"] = self.level.value
        return data


@dataclass(slots=True)
class AggregationResult:
    """Summary statistics for one set of feedback responses."""

    average_score: float
    total_responses: int
    weighted_average: float
    attendance_distribution: List[AttendanceGroup] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "AggregationResult":
        return cls(average_score=0.0, total_responses=0, weighted_average=0.0)

    @property
    def weighting_impact(self) -> float:
        """How far weighting moved the average (positive = weighted is higher)."""
        return self.weighted_average - self.average_score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average_score": self.average_score,
            "total_responses": self.total_responses,
            "weighted_average": self.weighted_average,
            "attendance_distribution": [
                group.to_dict() for group in self.attendance_distribution
            ],
        }


@dataclass(slots=True)
class QuestionStats:
    """Regular vs attendance-weighted average for a single question."""

    question_id: str
    regular_avg: float
    weighted_avg: float
    response_count: int

    @property
    def impact(self) -> float:
        return self.weighted_avg - self.regular_avg

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["impact"] = self.impact
        return data
