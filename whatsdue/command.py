"""
Chat command adapter for ``!whatsdue <course1> <course2> ...``.

Channel and user are passed in explicitly so the adapter works with any
chat client: with no courses given, the channel name is used as the
course code, and the calendar goes to the requesting user.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .delivery import UPLOAD_TITLE, DeliverySink
from .errors import UsageError, WhatsDueError
from .pipeline import run
from .transport import Fetch

log = logging.getLogger(__name__)

COMMAND_RE = re.compile(r"!?whatsdue ?((?: ?[a-z0-9]+)+)?$", re.IGNORECASE)
NO_COURSE_MESSAGE = "Please enter at least one valid course."


@dataclass(frozen=True)
class CommandContext:
    channel_name: Optional[str]
    user_id: str


def parse_command(text: str) -> Optional[List[str]]:
    """
    Course tokens of a whatsdue command, [] for a bare command,
    or None when ``text`` is not a whatsdue command.
    """
    m = COMMAND_RE.search((text or "").strip())
    if not m:
        return None
    return (m.group(1) or "").split()


def select_courses(tokens: Sequence[str], fallback: Optional[str] = None) -> List[str]:
    courses = [t for t in tokens if t.strip()]
    if courses:
        return courses
    if fallback and fallback.strip():
        return [fallback.strip()]
    raise UsageError(NO_COURSE_MESSAGE)


async def handle_command(
    text: str,
    context: CommandContext,
    fetch: Fetch,
    sink: DeliverySink,
    default_year: int | None = None,
) -> List[str]:
    """
    Run one command and return the messages to post back.

    On success the calendar is also handed to ``sink`` for ``context.user_id``.
    Every failure becomes a single message; nothing is raised for pipeline errors.
    """
    tokens = parse_command(text)
    if tokens is None:
        return []

    try:
        courses = select_courses(tokens, context.channel_name)
        result = await run(courses, fetch, default_year=default_year)
    except WhatsDueError as e:
        return [str(e)]

    sink(result.calendar, context.user_id, UPLOAD_TITLE)
    return [result.text]
