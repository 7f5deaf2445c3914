import asyncio

import pytest

from whatsdue.errors import TransportError

HEADER_ROW = (
    "<tr><td><div>Course</div></td><td><div>Task</div></td>"
    "<td><div>Due Date</div></td><td><div>Weighting</div></td></tr>"
)


def report_html(*rows: str) -> str:
    """Wrap data rows in a report page with the tblborder table."""
    return (
        "<html><body><h1>Assessment</h1>"
        '<table class="tblborder">' + HEADER_ROW + "".join(rows) + "</table>"
        "</body></html>"
    )


def row(subject: str, task: str, due: str, weighting: str) -> str:
    cells = "".join(f"<td><div>{v}</div></td>" for v in (subject, task, due, weighting))
    return f"<tr>{cells}</tr>"


def course_page(profile_ids) -> str:
    links = "".join(
        f'<a href="https://www.courses.uq.edu.au/student_section_loader.php?section=1&profileId={p}">Profile</a>'
        for p in profile_ids
    )
    return f"<html><body><h1>Course</h1>{links}</body></html>"


class FakeFetch:
    """Async fetch returning canned bodies; an Exception value is raised instead."""

    def __init__(self, pages: dict, delays: dict | None = None) -> None:
        self.pages = pages
        self.delays = delays or {}
        self.calls: list[str] = []

    async def __call__(self, url: str) -> str:
        self.calls.append(url)
        if url in self.delays:
            await asyncio.sleep(self.delays[url])
        if url not in self.pages:
            raise TransportError(f"Could not fetch {url}")
        body = self.pages[url]
        if isinstance(body, Exception):
            raise body
        return body


@pytest.fixture
def make_fetch():
    return FakeFetch
