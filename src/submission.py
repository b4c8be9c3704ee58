"""Feedback submission: attendance lookup, weighting and storage."""
from __future__ import annotations

import datetime
import logging
import math
import os
import threading
import uuid
from typing import Any, Dict, List, Mapping, Optional, Tuple

from src.attendance import AttendanceBook
from src.exceptions import AlreadySubmittedError, InvalidAttendanceError
from src.reporting.models import FeedbackResponse
from src.weighting.brackets import calculate_weight

logger = logging.getLogger(__name__)

POLICY_REJECT = "reject"
POLICY_CLAMP = "clamp"
_POLICIES = (POLICY_REJECT, POLICY_CLAMP)


def _get_out_of_range_policy_from_env() -> str:  # noqa: WPS430 – tiny helper
    raw_val = os.getenv("ATTENDANCE_OUT_OF_RANGE", POLICY_REJECT).strip().lower()
    if raw_val not in _POLICIES:
        logger.warning(
            "Invalid ATTENDANCE_OUT_OF_RANGE value '%s'; falling back to '%s'.",
            raw_val,
            POLICY_REJECT,
        )
        return POLICY_REJECT
    return raw_val


def validate_attendance(percentage: Any, policy: str = POLICY_REJECT) -> float:
    """Return *percentage* as a float in 0..100.

    Non-numeric, NaN and infinite values are always rejected.  Finite values
    outside the range are rejected or clamped depending on *policy*.

    Raises:
        InvalidAttendanceError: If the value cannot be used.
    """
    if isinstance(percentage, bool):
        raise InvalidAttendanceError(
            f"Attendance percentage {percentage!r} is not a number."
        )
    try:
        value = float(percentage)
    except (TypeError, ValueError) as exc:
        raise InvalidAttendanceError(
            f"Attendance percentage {percentage!r} is not a number."
        ) from exc

    if not math.isfinite(value):
        raise InvalidAttendanceError(f"Attendance percentage {value} is not finite.")

    if 0.0 <= value <= 100.0:
        return value
    if policy == POLICY_CLAMP:
        return min(100.0, max(0.0, value))
    raise InvalidAttendanceError(
        f"Attendance percentage {value} is outside the range 0-100."
    )


class ThreadSafeResponseStore:
    """A thread-safe in-memory store for submitted feedback responses.

    Responses are immutable once stored.  A student may answer each form only
    once; the store remembers who answered but never exposes it alongside the
    response, keeping submissions anonymous.
    """

    def __init__(self) -> None:
        self._responses: Dict[str, FeedbackResponse] = {}
        self._submitted: set[Tuple[str, str]] = set()  # (student_id, form_id)
        self._lock = threading.Lock()

    def add_response(self, student_id: str, response: FeedbackResponse) -> None:
        """Store *response* for *student_id*.

        Raises:
            AlreadySubmittedError: If the student already answered the form.
            ValueError: If the response has no ID or the ID is already taken.
        """
        if response.response_id is None:
            raise ValueError("Stored responses need a response_id.")
        key = (student_id, response.form_id)
        with self._lock:
            if key in self._submitted:
                raise AlreadySubmittedError(
                    f"Student {student_id} already submitted feedback for form {response.form_id}."
                )
            if response.response_id in self._responses:
                raise ValueError(
                    f"Response with ID {response.response_id} already exists."
                )
            self._submitted.add(key)
            self._responses[response.response_id] = response

    def has_submitted(self, student_id: str, form_id: str) -> bool:
        with self._lock:
            return (student_id, form_id) in self._submitted

    def get_response(self, response_id: str) -> Optional[FeedbackResponse]:
        """Retrieves a response by its ID. Returns None if not found."""
        with self._lock:
            return self._responses.get(response_id)

    def _select(self, **criteria: str) -> List[FeedbackResponse]:
        with self._lock:
            matches = [
                r
                for r in self._responses.values()
                if all(getattr(r, attr) == value for attr, value in criteria.items())
            ]
        epoch = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)
        # newest first; stable for equal timestamps
        return sorted(matches, key=lambda r: r.submitted_at or epoch, reverse=True)

    def responses_by_form(self, form_id: str) -> List[FeedbackResponse]:
        return self._select(form_id=form_id)

    def responses_by_course(self, course_id: str) -> List[FeedbackResponse]:
        return self._select(course_id=course_id)

    def all_responses(self) -> List[FeedbackResponse]:
        return self._select()

    def count(self) -> int:
        with self._lock:
            return len(self._responses)


class ResponseSubmissionService:
    """Accept answers from a student and persist them with a fixed weight."""

    def __init__(
        self,
        store: ThreadSafeResponseStore,
        attendance: AttendanceBook,
        *,
        policy: Optional[str] = None,
    ) -> None:
        self._store = store
        self._attendance = attendance
        self._policy = policy or _get_out_of_range_policy_from_env()
        self._logger = logging.getLogger(__name__)

    def submit(
        self,
        student_id: str,
        form_id: str,
        course_id: str,
        answers: Mapping[str, Any],
    ) -> FeedbackResponse:
        """Record *answers* and return the stored response.

        The student's current attendance for *course_id* (``0`` when unknown)
        determines ``weight_factor``; it is computed here once and kept as-is.

        Raises:
            AlreadySubmittedError: If the student already answered *form_id*.
            InvalidAttendanceError: If the recorded attendance is unusable.
        """
        if self._store.has_submitted(student_id, form_id):
            raise AlreadySubmittedError(
                f"Student {student_id} already submitted feedback for form {form_id}."
            )

        percentage = validate_attendance(
            self._attendance.percentage_for(student_id, course_id), self._policy
        )
        response = FeedbackResponse(
            form_id=form_id,
            course_id=course_id,
            student_attendance_percentage=percentage,
            responses=answers,
            weight_factor=calculate_weight(percentage),
            response_id=str(uuid.uuid4()),
            submitted_at=datetime.datetime.now(datetime.timezone.utc),
        )
        self._store.add_response(student_id, response)
        self._logger.info(
            "feedback_received",
            extra={
                "form_id": form_id,
                "course_id": course_id,
                "weight_factor": response.weight_factor,
            },
        )
        return response
