"""Render analytics reports using Jinja2 templates."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from jinja2 import Environment, FileSystemLoader
from slack_sdk.errors import SlackApiError

from src.reporting import config
from src.reporting.context import build_report_context
from src.reporting.models import AggregationResult, QuestionStats

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Markdown/slack templates don’t need HTML escaping – it breaks apostrophes etc.
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_report(
    result: AggregationResult,
    *,
    title: str = "Feedback report",
    questions: Sequence[QuestionStats] = (),
    enrolled: Optional[int] = None,
) -> str:
    """Render a Slack-friendly markdown report for *result*."""

    context = build_report_context(
        result, title=title, questions=questions, enrolled=enrolled
    )
    template = _env.get_template("report.md.j2")
    return template.render(**context.to_dict())


def post_report_to_slack(
    *,
    result: AggregationResult,
    client,
    channel: str,
    title: str = "Feedback report",
    questions: Sequence[QuestionStats] = (),
    enrolled: Optional[int] = None,
) -> None:
    """Send the report for *result* to Slack *channel* using *client* (WebClient).

    A short parent message is posted first; the report goes into its thread,
    as a file upload when it exceeds ``REPORT_SLACK_MESSAGE_LIMIT``.
    """

    try:
        parent_resp = client.chat_postMessage(
            channel=channel,
            text=f"*{title}*: {result.total_responses} response(s)",
        )
        parent_ts = parent_resp["ts"]

        report_text = render_report(
            result, title=title, questions=questions, enrolled=enrolled
        )
        report_len = len(report_text)
        logger.debug("Report generated for channel=%s len=%d", channel, report_len)

        if report_len < config.SLACK_MESSAGE_LIMIT:
            client.chat_postMessage(
                channel=channel,
                text=report_text,
                thread_ts=parent_ts,
            )
        else:
            logger.debug(
                "Uploading report as file (len=%d >= %d)",
                report_len,
                config.SLACK_MESSAGE_LIMIT,
            )
            client.files_upload_v2(
                channels=channel,
                title=title,
                content=report_text,
                filename="feedback_report.md",
                thread_ts=parent_ts,
            )
    except SlackApiError as exc:
        logger.error(
            "Failed to post report to %s: %s", channel, exc.response.get("error")
        )
        raise
