"""Extract rating scores from a response's answer map."""
from __future__ import annotations

from typing import Any, List, Mapping


def is_numeric_answer(value: Any) -> bool:
    """Return *True* for rating answers.

    Only real ``int``/``float`` values count.  ``bool`` is rejected even though
    it subclasses ``int`` (a yes/no question is not a rating) and so are
    numeric-looking strings such as ``"4"`` which come from free-text fields.
    """
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def numeric_answers(answers: Mapping[str, Any]) -> List[float]:
    """Return the numeric answers of *answers* in question order."""
    return [float(value) for value in answers.values() if is_numeric_answer(value)]


def average_score(answers: Mapping[str, Any]) -> float:
    """Mean of the numeric answers, ``0.0`` when there are none."""
    scores = numeric_answers(answers)
    if not scores:
        return 0.0
    return sum(scores) / len(scores)
