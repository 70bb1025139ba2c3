"""
Parse module for the Internship Watcher.

This module locates the postings table inside the feed document and
decodes its rows into Record objects. The document is free-form
markdown, so the parser is deliberately forgiving: rows that do not
match the expected shape are skipped, never raised on.
"""

from typing import List, Optional

from internship_watcher.fetch import FetchResult
from internship_watcher.links import extract_link
from internship_watcher.models import Record
from internship_watcher.utils import get_logger


# Module logger
logger = get_logger("parse")

TABLE_HEADER_MARKER = "| Company |"
SEPARATOR_MARKER = "----"
MIN_DIVIDER_DASHES = 3
COLUMN_DELIMITER = "|"

# Leading empty column plus company, role, location, link, date
MIN_COLUMNS = 6


def is_separator_row(line: str) -> bool:
    """
    Check whether a table line is the header/body divider.

    Any line containing ``----`` counts, as does a short divider such as
    ``|---|:---:|`` whose cells hold only alignment colons and at least
    three dashes. Cells of a lone ``-`` are content, not dividers.
    """
    if SEPARATOR_MARKER in line:
        return True

    cells = [cell.strip() for cell in line.strip().strip(COLUMN_DELIMITER).split(COLUMN_DELIMITER)]
    return all(
        set(cell) <= set("-:") and cell.count("-") >= MIN_DIVIDER_DASHES
        for cell in cells
    )


def parse_row(line: str) -> Optional[Record]:
    """
    Decode a single table row.

    Columns are split on ``|`` and trimmed. Column 0 is the text before
    the first delimiter; columns 1-5 are company, role, location, link
    cell and date posted.

    Args:
        line: A table line starting with ``|``.

    Returns:
        Record for the row, or None if it has fewer than 6 columns.
    """
    columns = [column.strip() for column in line.split(COLUMN_DELIMITER)]

    if len(columns) < MIN_COLUMNS:
        logger.debug(f"Skipping malformed row ({len(columns)} columns): {line!r}")
        return None

    return Record(
        company=columns[1],
        role=columns[2],
        location=columns[3],
        link=extract_link(columns[4]),
        date_posted=columns[5],
    )


def parse_table(text: Optional[str]) -> List[Record]:
    """
    Extract postings from the feed document.

    Table mode starts at the first line containing the header marker and
    lasts until the end of the document. Inside it, lines not starting
    with ``|`` and separator rows are ignored.

    Args:
        text: Raw feed document.

    Returns:
        Records in document order; empty if no header was found.
    """
    if not text:
        logger.warning("Empty feed document")
        return []

    records: List[Record] = []
    in_table = False

    for raw_line in text.split("\n"):
        line = raw_line.rstrip("\r")

        if not in_table:
            if TABLE_HEADER_MARKER in line:
                in_table = True
            continue

        if not line.startswith(COLUMN_DELIMITER):
            continue

        if is_separator_row(line):
            continue

        record = parse_row(line)
        if record is not None:
            records.append(record)

    if not in_table:
        logger.warning(f"No table header ({TABLE_HEADER_MARKER!r}) found in feed")

    logger.info(f"Parsed {len(records)} posting(s) from feed")

    return records


def parse_fetch_result(result: FetchResult) -> Optional[List[Record]]:
    """
    Parse the feed carried by a fetch result.

    Args:
        result: Outcome of fetch_feed.

    Returns:
        List of records, or None when the fetch failed (no update).
    """
    if not result.success or result.text is None:
        logger.debug(f"Not parsing failed fetch of {result.source_url}")
        return None

    return parse_table(result.text)
