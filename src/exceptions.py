"""Project-wide custom exception types."""


class AlreadySubmittedError(RuntimeError):
    """Raised when a student attempts to answer the same feedback form twice."""

    def __init__(self, message: str) -> None:  # noqa: D401 – simple constructor
        super().__init__(message)


class InvalidAttendanceError(ValueError):
    """Raised when an attendance percentage is not a finite number in 0..100."""
