import datetime
import threading
import unittest

from src.exceptions import AlreadySubmittedError
from src.reporting.models import FeedbackResponse
from src.submission import ThreadSafeResponseStore


def _response(response_id, form_id="F1", course_id="C1", minutes=0):
    return FeedbackResponse(
        form_id=form_id,
        course_id=course_id,
        student_attendance_percentage=80.0,
        responses={"q1": 4},
        weight_factor=0.9,
        response_id=response_id,
        submitted_at=datetime.datetime(2024, 9, 1, tzinfo=datetime.timezone.utc)
        + datetime.timedelta(minutes=minutes),
    )


class TestThreadSafeResponseStore(unittest.TestCase):
    def setUp(self):
        self.store = ThreadSafeResponseStore()

    def test_add_and_get_response(self):
        response = _response("r1")
        self.store.add_response("s1", response)

        self.assertIs(self.store.get_response("r1"), response)
        self.assertEqual(self.store.count(), 1)
        self.assertTrue(self.store.has_submitted("s1", "F1"))
        self.assertFalse(self.store.has_submitted("s2", "F1"))

    def test_second_submission_for_same_form_rejected(self):
        self.store.add_response("s1", _response("r1"))
        with self.assertRaises(AlreadySubmittedError):
            self.store.add_response("s1", _response("r2"))
        self.assertEqual(self.store.count(), 1)

    def test_same_student_may_answer_other_forms(self):
        self.store.add_response("s1", _response("r1", form_id="F1"))
        self.store.add_response("s1", _response("r2", form_id="F2"))
        self.assertEqual(self.store.count(), 2)

    def test_duplicate_response_id_rejected(self):
        self.store.add_response("s1", _response("r1"))
        with self.assertRaisesRegex(ValueError, "Response with ID r1 already exists."):
            self.store.add_response("s2", _response("r1"))
        # failed add does not mark the student as submitted
        self.assertFalse(self.store.has_submitted("s2", "F1"))

    def test_response_without_id_rejected(self):
        with self.assertRaises(ValueError):
            self.store.add_response("s1", _response(None))
        self.assertEqual(self.store.count(), 0)

    def test_get_non_existent_response(self):
        self.assertIsNone(self.store.get_response("nope"))

    def test_queries_filter_and_order_newest_first(self):
        self.store.add_response("s1", _response("old", minutes=0))
        self.store.add_response("s2", _response("new", minutes=5))
        self.store.add_response("s3", _response("other", form_id="F2", course_id="C2"))

        self.assertEqual(
            [r.response_id for r in self.store.responses_by_form("F1")], ["new", "old"]
        )
        self.assertEqual(
            [r.response_id for r in self.store.responses_by_course("C2")], ["other"]
        )
        self.assertEqual(len(self.store.all_responses()), 3)
        self.assertEqual(self.store.responses_by_course("missing"), [])

    def test_concurrent_duplicate_submissions(self):
        errors = []

        def submit(idx):
            try:
                self.store.add_response("s1", _response(f"r{idx}"))
            except AlreadySubmittedError as exc:
                errors.append(exc)

        threads = [threading.Thread(target=submit, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(self.store.count(), 1)
        self.assertEqual(len(errors), 19)


if __name__ == "__main__":
    unittest.main()
