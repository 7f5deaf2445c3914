"""
Resolve a course code to the profile id of its most recent offering.

The public course page links to every published course profile; the first
``profileId=`` link on the page is the current one.
"""
from __future__ import annotations

import logging
import re

from .errors import InvalidCourseCode, NoProfileAvailable, TransportError
from .transport import Fetch

log = logging.getLogger(__name__)

COURSE_URL = "https://www.uq.edu.au/study/course.html?course_code="

_PROFILE_ID_RE = re.compile(r"profileId=(\d+)")
_INVALID_CODE_RE = re.compile(
    r"is not a valid course code|unable to find course code", re.IGNORECASE
)


def normalize_course_code(course: str) -> str:
    return (course or "").strip().upper()


def find_profile_id(course: str, body: str) -> str:
    """
    Pick the profile id out of a course page body.

    Raises InvalidCourseCode when the page says the code does not exist and
    NoProfileAvailable when the course exists but has no published profile.
    """
    m = _PROFILE_ID_RE.search(body)
    if m:
        return m.group(1)
    if _INVALID_CODE_RE.search(body):
        raise InvalidCourseCode(course)
    raise NoProfileAvailable(course)


async def resolve(course: str, fetch: Fetch) -> str:
    """Fetch the course page for ``course`` and return its profile id."""
    course = normalize_course_code(course)
    if not course:
        raise InvalidCourseCode(course)

    try:
        body = await fetch(COURSE_URL + course)
    except TransportError as e:
        raise TransportError("There was an error getting the course profile.") from e

    profile_id = find_profile_id(course, body)
    log.info("Resolved %s to profile %s", course, profile_id)
    return profile_id
