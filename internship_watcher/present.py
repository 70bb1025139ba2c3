"""
Presentation of feed snapshots.

After every successful cycle the full snapshot replaces whatever was
displayed before. Feed cells often carry HTML or markdown decoration,
so the console view flattens them to readable text.
"""

import re
import sys
from abc import ABC, abstractmethod
from typing import List, Optional, TextIO

from bs4 import BeautifulSoup

from internship_watcher.models import Record
from internship_watcher.utils import get_logger


# Module logger
logger = get_logger("present")

MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]*)\]\([^)]*\)")
MARKDOWN_EMPHASIS_PATTERN = re.compile(r"(\*\*|__|~~)(.+?)\1")

NO_LINK_TEXT = "no apply link"


def display_text(cell: str) -> str:
    """
    Flatten a cell's HTML and markdown decoration to plain text.

    Args:
        cell: Raw cell text, e.g. ``**<a href="...">Acme</a>**``.

    Returns:
        Readable text with whitespace collapsed.
    """
    if not cell:
        return ""

    text = cell
    if "<" in text and ">" in text:
        text = BeautifulSoup(text, "html.parser").get_text(" ", strip=True)

    text = MARKDOWN_LINK_PATTERN.sub(r"\1", text)
    text = MARKDOWN_EMPHASIS_PATTERN.sub(r"\2", text)

    return " ".join(text.split())


def format_record(record: Record) -> str:
    """Render one record as a short multi-line block."""
    link = record.link or NO_LINK_TEXT
    return "\n".join([
        display_text(record.company),
        f"  {display_text(record.role)}",
        f"  {display_text(record.location)}",
        f"  Apply: {link}",
        f"  Posted: {display_text(record.date_posted)}",
    ])


class Presenter(ABC):
    """Receives the full snapshot after each successful cycle."""

    @abstractmethod
    def show(self, snapshot: List[Record]) -> None:
        """Replace the displayed records with snapshot."""


class MemoryPresenter(Presenter):
    """Keeps only the most recently shown snapshot."""

    def __init__(self):
        self.displayed: List[Record] = []
        self.updates = 0

    def show(self, snapshot: List[Record]) -> None:
        self.displayed = list(snapshot)
        self.updates += 1


class ConsolePresenter(MemoryPresenter):
    """Prints the snapshot to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None, title: str = "Internships"):
        super().__init__()
        self.stream = stream or sys.stdout
        self.title = title

    def show(self, snapshot: List[Record]) -> None:
        super().show(snapshot)

        lines = [f"{self.title} ({len(snapshot)})", "=" * 50]
        for record in snapshot:
            lines.append(format_record(record))
        if not snapshot:
            lines.append("No postings found.")

        self.stream.write("\n".join(lines) + "\n")
        self.stream.flush()
        logger.debug(f"Displayed {len(snapshot)} posting(s)")
