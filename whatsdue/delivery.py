"""
Hand a generated calendar to whoever asked for it.

A sink is any callable ``(document, destination, title) -> None``; a chat
adapter would upload the file to the user, the CLI writes it to disk.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from .export import CalendarDocument

log = logging.getLogger(__name__)

UPLOAD_TITLE = "Importable iCalendar containing your assessment!"

DeliverySink = Callable[[CalendarDocument, str, str], None]


class FileSink:
    """Write each document to ``<directory>/<destination>/<filename>``."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, document: CalendarDocument, destination: str) -> Path:
        base = self.directory / destination if destination else self.directory
        return base / document.filename

    def __call__(self, document: CalendarDocument, destination: str, title: str = UPLOAD_TITLE) -> None:
        out = self.path_for(document, destination)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(document.content)
        log.info("Delivered %r (%d bytes, %s) to %s", title, document.length, document.mimetype, out)
