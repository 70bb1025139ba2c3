"""
Link extraction for table cells.

The link column of the feed is noisy: it may hold an HTML anchor (often
wrapping an "Apply" image), a markdown link, a bare URL, or nothing
usable. Strategies are tried in a fixed order and the first match wins.
"""

import re
from typing import Optional


HREF_MARKER = 'href="'

URL_SCHEMES = ("http://", "https://")

BARE_URL_PATTERN = re.compile(r"https?://[A-Za-z0-9._%/\-?#=&:+~]+")


def extract_href(cell: str) -> Optional[str]:
    """
    Return the value of the first double-quoted href attribute.

    Args:
        cell: Raw cell text.

    Returns:
        The attribute value, or None if there is no terminated href.
    """
    start = cell.find(HREF_MARKER)
    if start == -1:
        return None

    start += len(HREF_MARKER)
    end = cell.find('"', start)
    if end == -1:
        return None

    return cell[start:end]


def extract_markdown_link(cell: str) -> Optional[str]:
    """
    Return the target of a markdown link such as ``[Apply](https://...)``.

    Only the first parenthesised group is considered, and it is accepted
    only when it starts with an http(s) scheme.

    Args:
        cell: Raw cell text.

    Returns:
        The link target, or None.
    """
    open_idx = cell.find("(")
    if open_idx == -1:
        return None

    close_idx = cell.find(")", open_idx + 1)
    if close_idx == -1:
        return None

    candidate = cell[open_idx + 1:close_idx].strip()
    if candidate.startswith(URL_SCHEMES):
        return candidate

    return None


def extract_bare_url(cell: str) -> Optional[str]:
    """Return the first bare http(s) URL in the cell, or None."""
    match = BARE_URL_PATTERN.search(cell)
    if match:
        return match.group(0)
    return None


def extract_link(cell: Optional[str]) -> str:
    """
    Recover a usable URL from a link cell.

    Precedence:
    1. HTML anchor ``href="..."``
    2. Markdown link target
    3. Bare URL scan

    Args:
        cell: Raw cell text.

    Returns:
        The URL, or an empty string when nothing usable was found.
    """
    if not cell:
        return ""

    for strategy in (extract_href, extract_markdown_link, extract_bare_url):
        link = strategy(cell)
        if link:
            return link

    return ""
