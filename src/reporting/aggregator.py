"""Aggregate raw feedback responses into an :class:`AggregationResult`."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Protocol

from src.reporting.models import AggregationResult, AttendanceGroup, QuestionStats
from src.weighting.brackets import attendance_level, attendance_range
from src.weighting.scores import average_score, is_numeric_answer

logger = logging.getLogger(__name__)

__all__ = ["WeightedResponse", "aggregate", "question_breakdown"]


class WeightedResponse(Protocol):
    """Anything that looks like a stored :class:`FeedbackResponse`."""

    weight_factor: float
    responses: Mapping[str, Any]
    student_attendance_percentage: float


@dataclass
class _GroupTotals:
    count: int
    total_score: float
    percentage: float
    weight: float


def aggregate(responses: Iterable[WeightedResponse]) -> AggregationResult:
    """Compute unweighted/weighted averages and the per-bracket breakdown.

    Brackets appear in the order they are first met while iterating
    *responses*.  Each bracket keeps the percentage and weight of the *last*
    response seen in it.  The function is pure and never raises on degenerate
    input: an empty sequence yields :meth:`AggregationResult.empty`, a response
    without numeric answers scores ``0``.
    """

    items = list(responses)
    if not items:
        return AggregationResult.empty()

    total_score = 0.0
    total_weighted_score = 0.0
    total_weight = 0.0
    # dicts keep insertion order → first-encounter bracket order
    groups: Dict[str, _GroupTotals] = {}

    for response in items:
        weight = response.weight_factor
        score = average_score(response.responses)

        total_score += score
        total_weighted_score += score * weight
        total_weight += weight

        percentage = response.student_attendance_percentage
        label = attendance_range(percentage)
        group = groups.get(label)
        if group is None:
            group = groups[label] = _GroupTotals(0, 0.0, percentage, weight)
        group.count += 1
        group.total_score += score
        group.percentage = percentage
        group.weight = weight

    distribution = [
        AttendanceGroup(
            range=label,
            count=group.count,
            avg_score=group.total_score / group.count,
            percentage=group.percentage,
            weight=group.weight,
            level=attendance_level(group.percentage),
        )
        for label, group in groups.items()
    ]

    result = AggregationResult(
        average_score=total_score / len(items),
        total_responses=len(items),
        weighted_average=total_weighted_score / total_weight if total_weight > 0 else 0.0,
        attendance_distribution=distribution,
    )
    logger.debug(
        "Aggregated %d responses into %d brackets (avg=%.3f weighted=%.3f)",
        result.total_responses,
        len(distribution),
        result.average_score,
        result.weighted_average,
    )
    return result


def question_breakdown(responses: Iterable[WeightedResponse]) -> List[QuestionStats]:
    """Return regular and weighted averages per question.

    Only numeric answers are counted; a question that never received one is
    left out.  Questions are listed in first-encounter order.
    """

    sums: Dict[str, List[float]] = {}  # question → [count, total, weighted, weight]
    for response in responses:
        weight = response.weight_factor
        for question_id, value in response.responses.items():
            if not is_numeric_answer(value):
                continue
            acc = sums.setdefault(question_id, [0, 0.0, 0.0, 0.0])
            acc[0] += 1
            acc[1] += value
            acc[2] += value * weight
            acc[3] += weight

    return [
        QuestionStats(
            question_id=question_id,
            regular_avg=total / count,
            weighted_avg=weighted / weight_sum if weight_sum > 0 else 0.0,
            response_count=int(count),
        )
        for question_id, (count, total, weighted, weight_sum) in sums.items()
    ]
