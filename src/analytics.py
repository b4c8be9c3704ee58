"""Analytics over stored feedback responses."""
from __future__ import annotations

import logging
from typing import List, Optional

from src.reporting.aggregator import aggregate, question_breakdown
from src.reporting.models import AggregationResult, QuestionStats

logger = logging.getLogger(__name__)


def response_rate(total_responses: int, enrolled: Optional[int]) -> float:
    """Return the share of enrolled students who answered, in percent.

    ``0.0`` when nobody is enrolled.
    """
    if not enrolled or enrolled <= 0:
        return 0.0
    return total_responses / enrolled * 100


class AnalyticsService:
    """Recompute aggregate statistics on demand from a response store.

    Args:
        store: Anything providing ``responses_by_course`` and
            ``responses_by_form`` (see
            :class:`src.submission.ThreadSafeResponseStore`).
    """

    def __init__(self, store) -> None:
        self._store = store

    def course_summary(self, course_id: str) -> AggregationResult:
        responses = self._store.responses_by_course(course_id)
        logger.debug("Summarising %d responses for course %s", len(responses), course_id)
        return aggregate(responses)

    def form_summary(self, form_id: str) -> AggregationResult:
        responses = self._store.responses_by_form(form_id)
        logger.debug("Summarising %d responses for form %s", len(responses), form_id)
        return aggregate(responses)

    def question_summary(
        self, *, course_id: Optional[str] = None, form_id: Optional[str] = None
    ) -> List[QuestionStats]:
        """Per-question breakdown for exactly one of *course_id* / *form_id*."""
        if (course_id is None) == (form_id is None):
            raise ValueError("Pass exactly one of course_id or form_id.")
        if form_id is not None:
            responses = self._store.responses_by_form(form_id)
        else:
            responses = self._store.responses_by_course(course_id)
        return question_breakdown(responses)
