"""Configuration constants for the analytics report."""
from __future__ import annotations

import os

# Decimal places shown for scores and weights
SCORE_DECIMALS: int = int(os.getenv("REPORT_SCORE_DECIMALS", "2"))

# Width (characters) of the longest distribution bar
BAR_WIDTH: int = int(os.getenv("REPORT_BAR_WIDTH", "20"))

# Maximum number of questions listed in the question table
MAX_QUESTIONS: int = int(os.getenv("REPORT_MAX_QUESTIONS", "10"))

# Response count under which the report flags the sample as small
LOW_RESPONSE_THRESHOLD: int = int(os.getenv("REPORT_LOW_RESPONSE_THRESHOLD", "5"))

# Reports longer than this are uploaded to Slack as a file
SLACK_MESSAGE_LIMIT: int = int(os.getenv("REPORT_SLACK_MESSAGE_LIMIT", "2800"))
