"""
Fetch module for the Internship Watcher.

This module retrieves the internship feed document as text. Each call
performs exactly one request with a bounded timeout; there is no retry
and no caching. Failures never propagate: they are reported as an
unsuccessful FetchResult so the caller can treat the cycle as a no-op.
"""

import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import requests

from internship_watcher.config import DEFAULT_FETCH_TIMEOUT
from internship_watcher.utils import get_logger


# Module logger
logger = get_logger("fetch")

DEFAULT_TIMEOUT = DEFAULT_FETCH_TIMEOUT
DEFAULT_USER_AGENT = "InternshipWatcher/1.0 (+https://github.com)"

# Non text/* media types that still carry a readable document
TEXTUAL_MEDIA_SUFFIXES = ("json", "xml", "markdown")

READ_CHUNK_SIZE = 8192  # bytes


class FetchError(Exception):
    """Raised when a response cannot be turned into feed text."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class FetchResult:
    """
    Represents the result of fetching the feed once.

    Attributes:
        source_url: The URL that was fetched.
        text: Decoded document body if successful, None otherwise.
        success: Whether the fetch was successful.
        error_message: Error description if fetch failed, None otherwise.
        status_code: HTTP status code if a response was received.
    """
    source_url: str
    text: Optional[str]
    success: bool
    error_message: Optional[str] = None
    status_code: Optional[int] = None


def create_session(user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    """
    Create a requests session with default headers.

    Args:
        user_agent: User-Agent header value.

    Returns:
        Configured requests.Session instance.
    """
    session = requests.Session()
    session.headers.update({
        "User-Agent": user_agent,
        "Accept": "text/markdown,text/plain,text/html;q=0.9,*/*;q=0.5",
        "Accept-Encoding": "gzip, deflate",
    })
    return session


def validate_url(url: str) -> bool:
    """
    Validate that a URL is well-formed and uses HTTP/HTTPS.

    Args:
        url: URL string to validate.

    Returns:
        True if URL is valid, False otherwise.
    """
    try:
        parsed = urlparse(url)
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
    except (TypeError, ValueError, AttributeError):
        return False


def is_textual_content_type(content_type: Optional[str]) -> bool:
    """
    Check whether a Content-Type header describes a text document.

    A missing header is accepted, since raw file hosts often omit it.
    """
    if not content_type:
        return True

    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type.startswith("text/"):
        return True

    return media_type.endswith(TEXTUAL_MEDIA_SUFFIXES)


def read_body(response: requests.Response, deadline: float) -> bytes:
    """
    Read a streamed response body, giving up once the deadline passes.

    The requests timeout only bounds each socket read, so a server that
    trickles bytes could otherwise hold the request open indefinitely.

    Args:
        response: Response obtained with stream=True.
        deadline: time.monotonic() value after which reading stops.

    Returns:
        The raw body.

    Raises:
        FetchError: If the body was not fully read before the deadline.
    """
    chunks = []

    for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
        chunks.append(chunk)
        if time.monotonic() > deadline:
            response.close()
            raise FetchError("Request timeout", status_code=response.status_code)

    return b"".join(chunks)


def decode_body(response: requests.Response, content: Optional[bytes] = None) -> str:
    """
    Decode a response body as UTF-8 text.

    Args:
        response: Response with a 2xx status.
        content: Body already read from the response. Defaults to
                 response.content.

    Returns:
        The decoded document.

    Raises:
        FetchError: If the response is not text or is not valid UTF-8.
    """
    content_type = response.headers.get("Content-Type")
    if not is_textual_content_type(content_type):
        raise FetchError(
            f"Non-text response ({content_type})",
            status_code=response.status_code
        )

    if content is None:
        content = response.content

    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FetchError(
            f"Response is not valid UTF-8: {e}",
            status_code=response.status_code
        ) from e


def fetch_feed(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = DEFAULT_TIMEOUT
) -> FetchResult:
    """
    Fetch the feed document and return the result.

    Args:
        url: URL of the feed.
        session: Optional requests session. A temporary one is created
                 and closed when omitted.
        timeout: Request timeout in seconds. Bounds each socket operation
                 and the total time spent reading the body.

    Returns:
        FetchResult containing the fetch outcome.
    """
    logger.debug(f"Fetching feed: {url}")

    if not validate_url(url):
        logger.warning(f"Invalid URL format: {url}")
        return FetchResult(
            source_url=url,
            text=None,
            success=False,
            error_message="Invalid URL format"
        )

    owns_session = session is None
    if session is None:
        session = create_session()

    deadline = time.monotonic() + timeout

    try:
        response = session.get(url, timeout=timeout, stream=True)

        if not 200 <= response.status_code < 300:
            logger.warning(f"HTTP {response.status_code} for {url}")
            response.close()
            return FetchResult(
                source_url=url,
                text=None,
                success=False,
                error_message=f"HTTP {response.status_code}",
                status_code=response.status_code
            )

        text = decode_body(response, read_body(response, deadline))
        logger.info(f"Successfully fetched {url} ({len(text)} characters)")
        return FetchResult(
            source_url=url,
            text=text,
            success=True,
            status_code=response.status_code
        )

    except FetchError as e:
        logger.warning(f"Unusable response from {url}: {e}")
        return FetchResult(
            source_url=url,
            text=None,
            success=False,
            error_message=str(e),
            status_code=e.status_code
        )

    except requests.exceptions.Timeout:
        logger.warning(f"Timeout fetching {url} after {timeout}s")
        return FetchResult(
            source_url=url,
            text=None,
            success=False,
            error_message="Request timeout"
        )

    except requests.exceptions.ConnectionError as e:
        logger.warning(f"Connection error for {url}: {e}")
        return FetchResult(
            source_url=url,
            text=None,
            success=False,
            error_message=f"Connection error: {str(e)}"
        )

    except requests.exceptions.RequestException as e:
        logger.error(f"Request exception for {url}: {e}")
        return FetchResult(
            source_url=url,
            text=None,
            success=False,
            error_message=f"Request failed: {str(e)}"
        )

    finally:
        if owns_session:
            session.close()
