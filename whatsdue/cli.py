"""
Command-line interface: fetch UQ assessment for course codes, print it and export a calendar.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import warnings

# Suppress urllib3/OpenSSL warning on systems with LibreSSL (no impact on functionality)
warnings.filterwarnings("ignore", message=".*urllib3.*OpenSSL.*", module="urllib3")
import sys
from pathlib import Path

from . import __version__
from .command import select_courses
from .errors import WhatsDueError
from .export import CALENDAR_FILENAME, export
from .pipeline import run
from .transport import DEFAULT_TIMEOUT, HttpTransport


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whatsdue",
        description=(
            "Print all assessment for the given UQ courses and export it as ICS / CSV / JSON.\n"
            "- Each course code is resolved to its latest course profile, then one combined report is fetched."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("courses", nargs="*", metavar="COURSE", help="Course codes, e.g. CSSE2310 MATH1051")
    parser.add_argument(
        "--channel",
        metavar="NAME",
        help="Fallback course code used when no COURSE is given (a chat channel named after the course).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=CALENDAR_FILENAME,
        help=f"Output path. Default: {CALENDAR_FILENAME}",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["ics", "csv", "json"],
        default="ics",
        help="Export format. Default: ics",
    )
    parser.add_argument(
        "--year",
        type=int,
        help="Year assumed for due dates that do not state one. Default: current year",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"HTTP timeout in seconds. Default: {DEFAULT_TIMEOUT:g}",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests and parsing details.")
    return parser


def _output_path(output: str, fmt: str) -> Path:
    ext = {"ics": ".ics", "csv": ".csv", "json": ".json"}[fmt]
    return Path(output).with_suffix(ext)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    transport = HttpTransport(timeout=args.timeout)
    try:
        courses = select_courses(args.courses, args.channel)
        result = asyncio.run(run(courses, transport, default_year=args.year))
    except WhatsDueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(result.text.replace("\r\n", "\n"))

    out_path = _output_path(args.output, args.format)
    export(result.records, out_path, args.format, calendar=result.calendar)
    print(f"Exported {len(result.records)} assessment item(s) to {out_path}")

    if args.format == "ics" and result.calendar.unscheduled:
        print(
            f"Warning: {len(result.calendar.unscheduled)} item(s) have no usable due date "
            "and were added as undated tasks:",
            file=sys.stderr,
        )
        for r in result.calendar.unscheduled:
            print(f"  {r.subject}: {r.headline} ({r.due_date})", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
