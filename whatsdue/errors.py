"""
Failure kinds raised by the whatsdue pipeline.

Every message is safe to show to an end user as-is.
"""
from __future__ import annotations


class WhatsDueError(Exception):
    """Base class for all pipeline failures."""


class InvalidCourseCode(WhatsDueError):
    def __init__(self, course: str) -> None:
        super().__init__(f"{course} is not a valid course code.")
        self.course = course


class NoProfileAvailable(WhatsDueError):
    def __init__(self, course: str) -> None:
        super().__init__(f"{course} has no available course profiles.")
        self.course = course


class TransportError(WhatsDueError):
    """The page could not be fetched (network failure or HTTP error status)."""


class MalformedAssessmentRow(WhatsDueError):
    def __init__(self, row: int, reason: str = "") -> None:
        super().__init__("There was an error parsing the assessment.")
        self.row = row
        self.reason = reason


class UsageError(WhatsDueError):
    """The caller supplied neither course codes nor a fallback course."""
