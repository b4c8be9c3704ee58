"""Unit tests for report rendering and Slack posting helpers."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from slack_sdk.errors import SlackApiError

from src.reporting.aggregator import aggregate, question_breakdown
from src.reporting.models import AggregationResult, FeedbackResponse
from src.reporting.render import post_report_to_slack, render_report


def _responses() -> list[FeedbackResponse]:
    return [
        FeedbackResponse("F1", "C1", 95.0, {"clarity": 5, "pace": 4}, 1.0),
        FeedbackResponse("F1", "C1", 30.0, {"clarity": 2, "comment": "too fast"}, 0.3),
    ]


@pytest.fixture()
def result() -> AggregationResult:
    return aggregate(_responses())


def test_render_report_basic(result: AggregationResult):
    out = render_report(
        result,
        title="CS101 midterm",
        questions=question_breakdown(_responses()),
        enrolled=4,
    )

    assert "CS101 midterm" in out
    assert "`90%+`" in out and "`25-39%`" in out
    assert "50.0% response rate" in out
    assert "clarity" in out
    # comment answers never show up in the figures
    assert "too fast" not in out


def test_render_report_empty():
    out = render_report(AggregationResult.empty())

    assert "No feedback responses yet" in out
    assert "Attendance distribution" not in out


def test_post_report_short_message(result: AggregationResult):
    client = MagicMock()
    client.chat_postMessage.return_value = {"ts": "111.222"}

    with patch("src.reporting.render.render_report", return_value="short") as render_mp:
        post_report_to_slack(result=result, client=client, channel="C123")

    render_mp.assert_called_once()
    assert client.chat_postMessage.call_count == 2
    client.chat_postMessage.assert_called_with(
        channel="C123", text="short", thread_ts="111.222"
    )
    client.files_upload_v2.assert_not_called()


def test_post_report_long_upload(result: AggregationResult):
    client = MagicMock()
    client.chat_postMessage.return_value = {"ts": "111.222"}

    with patch("src.reporting.render.render_report", return_value="x" * 3000):
        post_report_to_slack(result=result, client=client, channel="C123")

    client.files_upload_v2.assert_called_once()
    assert client.files_upload_v2.call_args.kwargs["thread_ts"] == "111.222"
    # only the parent message goes through chat_postMessage
    client.chat_postMessage.assert_called_once()


def test_post_report_slack_error_propagates(result: AggregationResult):
    client = MagicMock()
    client.chat_postMessage.side_effect = SlackApiError(
        "boom", {"ok": False, "error": "channel_not_found"}
    )

    with pytest.raises(SlackApiError):
        post_report_to_slack(result=result, client=client, channel="C404")
