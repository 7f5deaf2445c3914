"""
Course codes in, formatted assessment text and calendar out.

    codes -> profile ids (concurrent) -> report -> records -> {text, calendar}
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Sequence

from .assessment_fetch import extract
from .assessment_html import AssessmentRecord
from .export import CalendarDocument, build_calendar
from .formatting import format_assessment
from .profile_fetch import normalize_course_code, resolve
from .transport import Fetch

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WhatsDueResult:
    text: str
    calendar: CalendarDocument
    records: List[AssessmentRecord]


async def resolve_all(courses: Sequence[str], fetch: Fetch) -> List[str]:
    """
    Resolve every course concurrently and return the profile ids in input order.

    Waits for every lookup to finish; if any failed, the failure of the
    earliest course in ``courses`` is raised.
    """
    results = await asyncio.gather(
        *(resolve(c, fetch) for c in courses), return_exceptions=True
    )
    for course, result in zip(courses, results):
        if isinstance(result, BaseException):
            log.info("Resolving %s failed: %s", course, result)
            raise result
    return list(results)


async def run(
    course_codes: Sequence[str],
    fetch: Fetch,
    default_year: int | None = None,
) -> WhatsDueResult:
    courses = [normalize_course_code(c) for c in course_codes]
    if not courses:
        raise ValueError("At least one course code is required.")

    profile_ids = await resolve_all(courses, fetch)
    records = await extract(profile_ids, fetch)

    return WhatsDueResult(
        text=format_assessment(records),
        calendar=build_calendar(records, default_year=default_year),
        records=records,
    )
