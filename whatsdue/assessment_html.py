"""
Parse the UQ "student section report" (assessment report) HTML into
AssessmentRecord objects.

The report is one table with class ``tblborder``:
- first row holds the column headers (Course, Task, Due Date, Weighting)
- every other row is one assessment item, one column per field
- each cell normally wraps its text in a <div>; the task cell uses <br>
  between sub-parts (e.g. "Assignment 1<br>Report")

Markup inside the cells is inconsistent between courses, so fields are read
by column position only and any row that does not yield all four fields
rejects the whole report.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List

from bs4 import BeautifulSoup, Tag  # type: ignore[import]

from .errors import MalformedAssessmentRow

log = logging.getLogger(__name__)

TABLE_CLASS = "tblborder"
SUBJECT_MAX_LEN = 8
TASK_SEPARATOR = " - "

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class AssessmentRecord:
    """One assessment item as published in the report."""

    subject: str
    task: str
    due_date: str
    weighting: str

    @property
    def headline(self) -> str:
        """Task text before the first sub-part separator."""
        return self.task.split(TASK_SEPARATOR, 1)[0]


def _clean(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def _data_rows(table: Tag) -> List[Tag]:
    """
    Rows belonging to ``table`` itself, in document order.
    Includes rows wrapped in thead/tbody, excludes rows of nested tables.
    """
    return [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]


def _text_container(cell: Tag) -> Tag:
    """First <div> inside the cell, or the cell itself when it has none."""
    div = cell.find("div")
    return div if div is not None else cell


def _cell_text(cell: Tag) -> str:
    return _clean(_text_container(cell).get_text())


def _task_text(cell: Tag) -> str:
    """
    Task text with every line break rendered as " - ".
    Works on a copy so the parsed tree is left untouched.
    """
    container = BeautifulSoup(str(_text_container(cell)), "html.parser")
    for br in container.find_all("br"):
        br.replace_with(TASK_SEPARATOR)
    return _clean(container.get_text())


def parse_assessment_row(tr: Tag, row_number: int) -> AssessmentRecord:
    """
    Build one record from a data row.
    ``row_number`` is 1-based (header row excluded) and only used in errors.
    """
    cells = tr.find_all(["td", "th"], recursive=False)
    if len(cells) < 4:
        log.warning("Assessment row %d has %d column(s), expected 4", row_number, len(cells))
        raise MalformedAssessmentRow(row_number, f"expected 4 columns, got {len(cells)}")

    record = AssessmentRecord(
        subject=_cell_text(cells[0])[:SUBJECT_MAX_LEN],
        task=_task_text(cells[1]),
        due_date=_cell_text(cells[2]),
        weighting=_cell_text(cells[3]),
    )

    missing = [name for name, value in vars(record).items() if not value]
    if missing:
        log.warning("Assessment row %d is missing %s", row_number, ", ".join(missing))
        raise MalformedAssessmentRow(row_number, "empty " + ", ".join(missing))
    return record


def parse_assessment_html(
    html_path: str | Path | None = None,
    html_content: str | None = None,
) -> List[AssessmentRecord]:
    """
    Parse a saved report HTML file or HTML string.

    :param html_path: Path to a report page saved from the browser. Omit if html_content is provided.
    :param html_content: Raw HTML string (e.g. from fetch). Used when html_path is not provided.

    Returns the records in table order. A report without the assessment
    table yields an empty list; a malformed row raises MalformedAssessmentRow.
    """
    if html_content is not None:
        html = html_content
    elif html_path is not None:
        html = Path(html_path).read_text(encoding="utf-8", errors="ignore")
    else:
        raise ValueError("Provide either html_path or html_content.")
    soup = BeautifulSoup(html, "html.parser")

    table = soup.find("table", class_=TABLE_CLASS)
    if table is None:
        log.warning("No %r table found in assessment report", TABLE_CLASS)
        return []

    records: List[AssessmentRecord] = []
    # First row is the column headers
    for i, tr in enumerate(_data_rows(table)[1:], start=1):
        records.append(parse_assessment_row(tr, i))

    log.debug("Parsed %d assessment item(s)", len(records))
    return records
