"""Context dataclass for rendering analytics reports.

This module defines `ReportContext`, a typed container holding every value
used by the Jinja2 template `src/reporting/templates/report.md.j2`.

Building the context is kept separate from rendering so the number
formatting and flags can be unit-tested without touching template strings.
"""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from datetime import datetime as _dt
from datetime import timezone as _tz
from typing import Any, Dict, List, Optional, Sequence

from src.analytics import response_rate
from src.reporting import config
from src.reporting.models import AggregationResult, QuestionStats

__all__ = [
    "Stats",
    "DistributionRow",
    "QuestionRow",
    "ReportContext",
    "build_report_context",
]


@dataclass(slots=True)
class Stats:
    """Headline figures displayed at the top of the report."""

    total_responses: int
    average_score: float
    weighted_average: float
    impact: float
    response_rate: Optional[float] = None
    low_responses: bool = False

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` representation suitable for Jinja."""
        return asdict(self)


@dataclass(slots=True)
class DistributionRow:
    range: str
    level: str
    count: int
    avg_score: float
    weight: float
    bar: str


@dataclass(slots=True)
class QuestionRow:
    question_id: str
    regular_avg: float
    weighted_avg: float
    response_count: int
    impact: float


@dataclass(slots=True)
class ReportContext:
    """Container with all fields used by the report template."""

    # Header & meta
    title: str
    date: str  # ISO-8601 date string (UTC)

    stats: Stats
    distribution: List[DistributionRow] = field(default_factory=list)
    questions: List[QuestionRow] = field(default_factory=list)

    version: str = "1"

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` (recursively) for Jinja rendering."""
        return asdict(self)

    # Alias for convenience (e.g. template kwargs)
    __call__ = to_dict


def _bar(count: int, max_count: int, width: int = 20) -> str:
    """Return a block bar scaled so *max_count* fills *width* characters."""
    if not count or not max_count:
        return ""
    return "█" * max(1, round(count / max_count * width))


def build_report_context(
    result: AggregationResult,
    *,
    title: str = "Feedback report",
    questions: Sequence[QuestionStats] = (),
    enrolled: Optional[int] = None,
) -> ReportContext:
    """Convert an :class:`AggregationResult` into a :class:`ReportContext`.

    Numbers are rounded to ``REPORT_SCORE_DECIMALS``; the question table is
    capped at ``REPORT_MAX_QUESTIONS`` rows.
    """

    digits = config.SCORE_DECIMALS

    stats = Stats(
        total_responses=result.total_responses,
        average_score=round(result.average_score, digits),
        weighted_average=round(result.weighted_average, digits),
        impact=round(result.weighting_impact, digits),
        response_rate=(
            round(response_rate(result.total_responses, enrolled), 1)
            if enrolled is not None
            else None
        ),
        low_responses=result.total_responses < config.LOW_RESPONSE_THRESHOLD,
    )

    max_count = max((g.count for g in result.attendance_distribution), default=0)
    distribution = [
        DistributionRow(
            range=group.range,
            level=group.level.value,
            count=group.count,
            avg_score=round(group.avg_score, digits),
            weight=group.weight,
            bar=_bar(group.count, max_count, config.BAR_WIDTH),
        )
        for group in result.attendance_distribution
    ]

    question_rows = [
        QuestionRow(
            question_id=q.question_id,
            regular_avg=round(q.regular_avg, digits),
            weighted_avg=round(q.weighted_avg, digits),
            response_count=q.response_count,
            impact=round(q.impact, digits),
        )
        for q in list(questions)[: config.MAX_QUESTIONS]
    ]

    return ReportContext(
        title=title,
        date=_dt.now(tz=_tz.utc).strftime("%Y-%m-%d"),
        stats=stats,
        distribution=distribution,
        questions=question_rows,
        version=os.getenv("REPORT_VERSION", "1"),
    )
