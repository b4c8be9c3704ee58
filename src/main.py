"""Command-line export of attendance-weighted feedback analytics.

Reads an exported JSON array of feedback responses, aggregates them and prints
either the raw figures (JSON) or the Markdown report.  With
``--slack-channel`` the report is also posted to Slack, which requires
``SLACK_BOT_TOKEN``.

Usage::

    python -m src.main responses.json --course CS101 --format markdown
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from dotenv import load_dotenv
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from src.analytics import response_rate
from src.reporting.aggregator import aggregate, question_breakdown
from src.reporting.models import FeedbackResponse
from src.reporting.render import post_report_to_slack, render_report

logger = logging.getLogger("src.main")


def load_responses(path: Path) -> List[FeedbackResponse]:
    """Load a JSON array of response records from *path*.

    Raises:
        ValueError: If the file is not a JSON array of objects.
    """
    with path.open(encoding="utf-8") as fh:
        payload = json.load(fh)
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON array of responses.")

    responses: List[FeedbackResponse] = []
    for idx, item in enumerate(payload):
        if not isinstance(item, Mapping):
            raise ValueError(f"Record #{idx} in {path} is not a JSON object.")
        try:
            responses.append(FeedbackResponse.from_dict(item))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Record #{idx} in {path} is malformed: {exc}") from exc
    return responses


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feedback-report",
        description="Attendance-weighted feedback analytics.",
    )
    parser.add_argument("responses", type=Path, help="JSON file of responses")
    scope = parser.add_mutually_exclusive_group()
    scope.add_argument("--course", help="only responses for this course id")
    scope.add_argument("--form", help="only responses for this form id")
    parser.add_argument("--format", choices=("json", "markdown"), default="json")
    parser.add_argument("--title", default="Feedback report")
    parser.add_argument("--enrolled", type=int, help="enrolled students, for response rate")
    parser.add_argument("--slack-channel", help="also post the report to this channel")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point; returns the process exit status."""

    load_dotenv()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=os.environ.get("LOG_LEVEL", "INFO"),
    )

    args = _build_parser().parse_args(argv)

    try:
        responses = load_responses(args.responses)
    except (OSError, ValueError) as exc:
        logger.error("Could not read responses from %s: %s", args.responses, exc)
        return 1

    if args.course:
        responses = [r for r in responses if r.course_id == args.course]
    elif args.form:
        responses = [r for r in responses if r.form_id == args.form]

    result = aggregate(responses)
    questions = question_breakdown(responses)
    logger.info("Aggregated %d response(s)", result.total_responses)

    if args.format == "markdown":
        print(
            render_report(
                result, title=args.title, questions=questions, enrolled=args.enrolled
            )
        )
    else:
        payload = result.to_dict()
        payload["questions"] = [q.to_dict() for q in questions]
        if args.enrolled is not None:
            payload["response_rate"] = response_rate(result.total_responses, args.enrolled)
        print(json.dumps(payload, indent=2))

    if args.slack_channel:
        token = os.getenv("SLACK_BOT_TOKEN")
        if not token:
            logger.error(
                "Environment variable SLACK_BOT_TOKEN is required to post to Slack."
            )
            return 1
        try:
            post_report_to_slack(
                result=result,
                client=WebClient(token=token),
                channel=args.slack_channel,
                title=args.title,
                questions=questions,
                enrolled=args.enrolled,
            )
        except SlackApiError:
            return 1
        logger.info("Report posted to %s", args.slack_channel)

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
