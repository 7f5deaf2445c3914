import json
from datetime import date, datetime, timezone

import icalendar
import pytest

from whatsdue.assessment_html import AssessmentRecord
from whatsdue.export import (
    CALENDAR_FILENAME,
    CALENDAR_MIMETYPE,
    build_calendar,
    export,
    parse_due_date,
)

NOW = datetime(2026, 2, 20, 9, 30, tzinfo=timezone.utc)

RECORDS = [
    AssessmentRecord("CSSE2310", "Assignment 1 - Report", "31 Mar", "20%"),
    AssessmentRecord("CSSE2310", "Quiz", "15 Apr 2026 14:00", "10%"),
    AssessmentRecord("MATH1051", "Final Exam", "Examination Period", "60%"),
]


def _components(doc):
    cal = icalendar.Calendar.from_ical(doc.content)
    return [c for c in cal.subcomponents if c.name in ("VEVENT", "VTODO")]


class TestParseDueDate:
    def test_day_month_uses_default_year(self):
        assert parse_due_date("31 Mar", 2026) == date(2026, 3, 31)

    def test_with_time(self):
        assert parse_due_date("15 Apr 2026 14:00", 2025) == datetime(2026, 4, 15, 14, 0)

    def test_due_prefix(self):
        assert parse_due_date("Due: 12 May 16:00", 2026) == datetime(2026, 5, 12, 16, 0)

    def test_numeric_is_day_first(self):
        assert parse_due_date("5/4/2026") == date(2026, 4, 5)

    def test_range_uses_last_date(self):
        assert parse_due_date("22 Mar - 26 Mar", 2026) == date(2026, 3, 26)

    def test_week_numbers_and_notes_ignored(self):
        assert parse_due_date("31 Mar (Week 5)", 2026) == date(2026, 3, 31)
        assert parse_due_date("Week 13, Fri 30 May", 2026) == date(2026, 5, 30)

    def test_may_needs_a_day_number(self):
        assert parse_due_date("Due date may vary", 2026) is None
        assert parse_due_date("Week 5 (date may change)", 2026) is None
        assert parse_due_date("In class; may be held in Week 3", 2026) is None

    def test_stray_number_as_year_rejected(self):
        assert parse_due_date("31 Mar 21", 2026) is None

    def test_not_a_date(self):
        assert parse_due_date("Week 6", 2026) is None
        assert parse_due_date("Examination Period", 2026) is None
        assert parse_due_date("Due to be confirmed", 2026) is None
        assert parse_due_date("", 2026) is None


class TestBuildCalendar:
    def test_one_component_per_record(self):
        doc = build_calendar(RECORDS, default_year=2026, now=NOW)
        assert [c.name for c in _components(doc)] == ["VEVENT", "VEVENT", "VTODO"]
        assert doc.filename == CALENDAR_FILENAME == "assessmentCalendar.ics"
        assert doc.mimetype == CALENDAR_MIMETYPE == "text/calendar"
        assert doc.length == len(doc.content)

    def test_summary_uses_task_headline(self):
        doc = build_calendar(RECORDS, default_year=2026, now=NOW)
        summaries = [str(c.get("summary")) for c in _components(doc)]
        assert summaries[0] == "CSSE2310 (20%): Assignment 1"
        assert summaries[2] == "MATH1051 (60%): Final Exam"

    def test_start_comes_from_due_date(self):
        doc = build_calendar(RECORDS, default_year=2026, now=NOW)
        events = _components(doc)
        assert events[0].get("dtstart").dt == date(2026, 3, 31)
        assert events[1].get("dtstart").dt == datetime(2026, 4, 15, 14, 0)

    def test_every_event_has_a_start(self):
        records = RECORDS + [
            AssessmentRecord("CSSE2310", "Demo", "Week 6", "5%"),
            AssessmentRecord("CSSE2310", "Essay", "Due date may vary", "15%"),
        ]
        cal = icalendar.Calendar.from_ical(build_calendar(records, default_year=2026, now=NOW).content)
        events = cal.walk("VEVENT")
        assert len(events) == 2
        assert all(e.get("dtstart") is not None for e in events)

    def test_unparseable_due_date_becomes_flagged_task(self):
        doc = build_calendar(RECORDS, default_year=2026, now=NOW)
        exam = _components(doc)[2]
        assert exam.name == "VTODO"
        assert exam.get("dtstart") is None
        assert str(exam.get("status")) == "NEEDS-ACTION"
        assert doc.unscheduled == [RECORDS[2]]
        content = doc.text()
        assert "X-WHATSDUE-UNSCHEDULED:TRUE" in content
        assert "CATEGORIES:UNSCHEDULED" in content

    def test_uids_unique_and_stable(self):
        twice = RECORDS + [RECORDS[0]]
        first = [str(c.get("uid")) for c in _components(build_calendar(twice, default_year=2026, now=NOW))]
        again = [str(c.get("uid")) for c in _components(build_calendar(twice, default_year=2026))]
        assert len(first) == 4
        assert len(set(first)) == len(first)
        assert first == again
        assert all(uid.endswith("@whatsdue") for uid in first)

    def test_dtstamp(self):
        doc = build_calendar(RECORDS[:1], default_year=2026, now=NOW)
        assert "DTSTAMP:20260220T093000Z" in doc.text()

    def test_empty(self):
        doc = build_calendar([], now=NOW)
        content = doc.text()
        assert "BEGIN:VCALENDAR" in content
        assert "BEGIN:VEVENT" not in content
        assert doc.unscheduled == []


def test_export_ics_writes_given_calendar(tmp_path):
    out_path = tmp_path / "built.ics"
    doc = build_calendar(RECORDS, default_year=2026, now=NOW)
    export(RECORDS, out_path, "ics", calendar=doc)
    assert out_path.read_bytes() == doc.content


def test_export_ics(tmp_path):
    out_path = tmp_path / "test.ics"
    export(RECORDS, out_path, "ics", default_year=2026)

    content = out_path.read_text(encoding="utf-8")
    assert "BEGIN:VCALENDAR" in content
    assert "PRODID:-//whatsdue//assessment generation//EN" in content
    assert "DTSTART;VALUE=DATE:20260331" in content
    assert "DTSTART:20260415T140000" in content
    assert "END:VCALENDAR" in content


def test_export_json(tmp_path):
    out_path = tmp_path / "test.json"
    export(RECORDS[:1], out_path, "json")
    assert json.loads(out_path.read_text(encoding="utf-8")) == [
        {"subject": "CSSE2310", "task": "Assignment 1 - Report", "due_date": "31 Mar", "weighting": "20%"}
    ]


def test_export_csv(tmp_path):
    out_path = tmp_path / "test.csv"
    export(RECORDS[:1], out_path, "CSV")
    lines = out_path.read_text(encoding="utf-8").splitlines()
    assert lines == ["subject,task,due_date,weighting", "CSSE2310,Assignment 1 - Report,31 Mar,20%"]


def test_export_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        export(RECORDS, tmp_path / "x", "pdf")
