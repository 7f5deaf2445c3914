"""
Export assessment records to ICS, CSV, and JSON.
"""
from __future__ import annotations

import csv
import hashlib
import json
import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Sequence

import icalendar
from dateutil import parser as dt_parser

from .assessment_html import AssessmentRecord

log = logging.getLogger(__name__)

CALENDAR_FILENAME = "assessmentCalendar.ics"
CALENDAR_MIMETYPE = "text/calendar"
PRODID = "-//whatsdue//assessment generation//EN"
UNSCHEDULED = "UNSCHEDULED"

# A due date must mention a month name or a d/m date before we try to parse it.
# Without this "Week 6" would come back as the 6th of the current month.
# "may" only counts as a month with a day number next to it.
_DATE_HINT_RE = re.compile(
    r"\b(jan(uary)?|feb(ruary)?|mar(ch)?|apr(il)?|june?|july?|aug(ust)?"
    r"|sept?(ember)?|oct(ober)?|nov(ember)?|dec(ember)?)\b"
    r"|\b\d{1,2}(st|nd|rd|th)?\s+may\b|\bmay\s+\d{1,2}\b"
    r"|\b\d{1,2}/\d{1,2}(/\d{2,4})?\b",
    re.IGNORECASE,
)
_TIME_HINT_RE = re.compile(r"\d{1,2}:\d{2}|\d\s*(am|pm)\b", re.IGNORECASE)
_RANGE_SPLIT_RE = re.compile(r"\s+[-–—]\s+|\s+to\s+", re.IGNORECASE)
_FULL_YEAR_RE = re.compile(r"\b\d{4}\b")
# Text that carries numbers but never part of the date itself
_NOISE_RE = re.compile(r"\([^)]*\)|\bweek\s*\d+\b|^\s*due\b:?", re.IGNORECASE)


@dataclass(frozen=True)
class CalendarDocument:
    """Serialized calendar plus the metadata an uploader needs."""

    content: bytes
    filename: str = CALENDAR_FILENAME
    mimetype: str = CALENDAR_MIMETYPE
    unscheduled: List[AssessmentRecord] = field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.content)

    def text(self) -> str:
        return self.content.decode("utf-8")


def parse_due_date(text: str, default_year: int | None = None) -> datetime | date | None:
    """
    Turn a published due date into a date (all-day) or datetime (has a clock time).

    Ranges such as "22 Mar - 26 Mar" resolve to their last dated part, since
    that is when the item is due. Returns None for anything that does not
    look like a calendar date ("Week 6", "Examination Period", "TBA").
    Week numbers and parenthesised notes are ignored; any other stray word
    makes the date unparseable rather than guessed.
    """
    text = _NOISE_RE.sub(" ", (text or "")).strip()
    if not text:
        return None
    year = default_year or date.today().year

    dated = [p for p in _RANGE_SPLIT_RE.split(text) if _DATE_HINT_RE.search(p)]
    if not dated:
        return None
    part = dated[-1].strip(" ,;:")

    try:
        dt = dt_parser.parse(part, default=datetime(year, 1, 1), dayfirst=True)
    except (ValueError, OverflowError):
        log.debug("Could not parse due date %r", text)
        return None

    # A year we did not ask for came from some other number in the text
    if dt.year != year and not _FULL_YEAR_RE.search(part):
        log.debug("Rejecting due date %r: parsed year %d", text, dt.year)
        return None

    if _TIME_HINT_RE.search(part):
        return dt
    return dt.date()


def _event_uid(index: int, record: AssessmentRecord) -> str:
    uid_string = f"{index}|{record.subject}|{record.task}|{record.due_date}|{record.weighting}"
    uid_hash = hashlib.md5(uid_string.encode("utf-8")).hexdigest()
    return f"{uid_hash}@whatsdue"


def build_calendar(
    records: Sequence[AssessmentRecord],
    default_year: int | None = None,
    now: datetime | None = None,
) -> CalendarDocument:
    """
    Build an iCalendar document with one component per record.

    Records with a usable due date become VEVENTs starting on it. The rest
    become VTODOs (no start or due date needed) flagged UNSCHEDULED, and are
    listed in ``CalendarDocument.unscheduled``.
    """
    stamp = now or datetime.now(timezone.utc)

    cal = icalendar.Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", "Assessment")

    unscheduled: List[AssessmentRecord] = []
    for i, r in enumerate(records):
        due = parse_due_date(r.due_date, default_year)
        if due is None:
            component = icalendar.Todo()
            component.add("status", "NEEDS-ACTION")
            component.add("categories", [UNSCHEDULED])
            component.add("x-whatsdue-unscheduled", "TRUE")
            unscheduled.append(r)
        else:
            component = icalendar.Event()
            component.add("dtstart", due)

        component.add("uid", _event_uid(i, r))
        component.add("dtstamp", stamp)
        component.add("summary", f"{r.subject} ({r.weighting}): {r.headline}")
        component.add("description", f"{r.task}\nWeighting: {r.weighting}\nDue: {r.due_date}")
        cal.add_component(component)

    if unscheduled:
        log.warning("%d assessment item(s) have no usable due date", len(unscheduled))
    return CalendarDocument(content=cal.to_ical(), unscheduled=unscheduled)


def export_ics(
    records: Sequence[AssessmentRecord],
    out_path: str | Path,
    default_year: int | None = None,
    calendar: CalendarDocument | None = None,
) -> CalendarDocument:
    """
    Export records to iCalendar (.ics) for Apple/Google calendar.
    An already built ``calendar`` for the same records is written as-is.
    """
    doc = calendar or build_calendar(records, default_year=default_year)
    Path(out_path).write_bytes(doc.content)
    return doc


def export_csv(records: Sequence[AssessmentRecord], out_path: str | Path) -> None:
    """Export records to CSV."""
    if not records:
        Path(out_path).write_text("", encoding="utf-8")
        return
    rows = [asdict(r) for r in records]
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        w.writerows(rows)


def export_json(records: Sequence[AssessmentRecord], out_path: str | Path) -> None:
    """Export records to JSON."""
    Path(out_path).write_text(
        json.dumps([asdict(r) for r in records], indent=2, ensure_ascii=False), encoding="utf-8"
    )


def export(
    records: Sequence[AssessmentRecord],
    out_path: str | Path,
    fmt: str,
    default_year: int | None = None,
    calendar: CalendarDocument | None = None,
) -> None:
    """Export to the given format: ics, csv, or json."""
    fmt = fmt.lower()
    if fmt == "ics":
        export_ics(records, out_path, default_year=default_year, calendar=calendar)
    elif fmt == "csv":
        export_csv(records, out_path)
    elif fmt == "json":
        export_json(records, out_path)
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use ics, csv, or json.")
