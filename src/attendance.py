"""Per-course attendance records.

Each (student, course) pair has at most one record.  Updating it replaces the
class counts and recomputes the percentage.
"""
from __future__ import annotations

import datetime
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


def attendance_percentage(attended_classes: int, total_classes: int) -> float:
    """Return ``attended / total * 100``; ``0.0`` when no classes were held."""
    if total_classes <= 0:
        return 0.0
    return attended_classes / total_classes * 100


@dataclass
class AttendanceRecord:
    student_id: str
    course_id: str
    total_classes: int = 0
    attended_classes: int = 0
    updated_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    @property
    def attendance_percentage(self) -> float:
        return attendance_percentage(self.attended_classes, self.total_classes)


class AttendanceBook:
    """A thread-safe in-memory store of attendance records."""

    def __init__(self) -> None:
        self._records: Dict[Tuple[str, str], AttendanceRecord] = {}
        self._lock = threading.Lock()

    def update(
        self,
        student_id: str,
        course_id: str,
        *,
        total_classes: int,
        attended_classes: int,
    ) -> AttendanceRecord:
        """Create or replace the record for *student_id* in *course_id*.

        Raises ValueError if the counts are negative or more classes were
        attended than held.
        """
        if total_classes < 0 or attended_classes < 0:
            raise ValueError("Class counts must not be negative.")
        if attended_classes > total_classes:
            raise ValueError(
                f"Attended classes ({attended_classes}) exceed total ({total_classes})."
            )

        record = AttendanceRecord(
            student_id=student_id,
            course_id=course_id,
            total_classes=total_classes,
            attended_classes=attended_classes,
        )
        with self._lock:
            self._records[(student_id, course_id)] = record
        logger.info(
            "Attendance updated for student %s in course %s: %.1f%%",
            student_id,
            course_id,
            record.attendance_percentage,
        )
        return record

    def get(self, student_id: str, course_id: str) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._records.get((student_id, course_id))

    def percentage_for(self, student_id: str, course_id: str) -> float:
        """Return the attendance percentage, ``0.0`` if no record exists."""
        record = self.get(student_id, course_id)
        return record.attendance_percentage if record else 0.0
