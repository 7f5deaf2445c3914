"""
Render assessment records as a Slack-style message.
"""
from __future__ import annotations

from typing import Iterable

from .assessment_html import AssessmentRecord

DISCLAIMER = (
    "_*WARNING:* Assessment information may vary/change/be entirely different! "
    "Use at your own discretion_\r\n>>>"
)


def format_record(record: AssessmentRecord) -> str:
    return (
        f"*{record.subject}*: `{record.weighting}` _{record.task}_ *({record.due_date})*\r\n"
    )


def format_assessment(records: Iterable[AssessmentRecord]) -> str:
    """Disclaimer header followed by one line per record, in order."""
    return DISCLAIMER + "".join(format_record(r) for r in records)
