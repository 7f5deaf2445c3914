"""
Fetch the combined assessment report for one or more course profiles.
"""
from __future__ import annotations

import logging
from typing import List, Sequence

from .assessment_html import AssessmentRecord, parse_assessment_html
from .errors import TransportError
from .transport import Fetch

log = logging.getLogger(__name__)

ASSESSMENT_URL = (
    "https://www.courses.uq.edu.au/student_section_report.php"
    "?report=assessment&profileIds="
)


def assessment_url(profile_ids: Sequence[str]) -> str:
    """The report endpoint takes every profile id in one comma-separated list."""
    if not profile_ids:
        raise ValueError("At least one profile id is required.")
    return ASSESSMENT_URL + ",".join(profile_ids)


async def extract(profile_ids: Sequence[str], fetch: Fetch) -> List[AssessmentRecord]:
    """Fetch the report for ``profile_ids`` and parse its assessment table."""
    url = assessment_url(profile_ids)
    try:
        body = await fetch(url)
    except TransportError as e:
        raise TransportError("There was an error getting the assessment.") from e

    records = parse_assessment_html(html_content=body)
    log.info("Extracted %d assessment item(s) for profiles %s", len(records), ",".join(profile_ids))
    return records
