"""
Tests for the fetch module.

Tests cover:
- Successful feed fetching and UTF-8 decoding
- HTTP error handling
- Timeout and connection error handling, including slow bodies
- Non-text and undecodable responses
- URL validation
- Session configuration and ownership
"""

import itertools
from unittest.mock import Mock, patch

import pytest
import requests

from internship_watcher.fetch import (
    DEFAULT_TIMEOUT,
    FetchError,
    FetchResult,
    create_session,
    decode_body,
    fetch_feed,
    is_textual_content_type,
    read_body,
    validate_url,
)


FEED_URL = "https://raw.githubusercontent.com/example/internships/main/README.md"


def make_response(status_code=200, content=b"| Company |", content_type="text/plain; charset=utf-8"):
    """Build a mock requests response."""
    response = Mock()
    response.status_code = status_code
    response.content = content
    response.iter_content.side_effect = lambda chunk_size=None: iter([content])
    response.headers = {"Content-Type": content_type} if content_type else {}
    return response


class TestValidateUrl:
    """Tests for URL validation function."""

    def test_valid_urls(self):
        """Test that HTTP and HTTPS URLs pass validation."""
        assert validate_url("http://example.com") is True
        assert validate_url(FEED_URL) is True

    def test_invalid_urls(self):
        """Test that invalid URLs fail validation."""
        assert validate_url("") is False
        assert validate_url("not-a-url") is False
        assert validate_url("ftp://example.com") is False
        assert validate_url("https://") is False


class TestCreateSession:
    """Tests for session creation."""

    def test_session_has_headers(self):
        """Test that created session has required headers."""
        session = create_session()

        assert "User-Agent" in session.headers
        assert "Accept" in session.headers

    def test_custom_user_agent(self):
        """Test overriding the User-Agent."""
        session = create_session(user_agent="TestAgent/0.1")

        assert session.headers["User-Agent"] == "TestAgent/0.1"


class TestContentType:
    """Tests for textual content type detection."""

    @pytest.mark.parametrize("content_type", [
        None,
        "",
        "text/plain",
        "text/plain; charset=utf-8",
        "text/markdown",
        "text/html; charset=UTF-8",
        "application/json",
        "application/xhtml+xml",
    ])
    def test_textual(self, content_type):
        assert is_textual_content_type(content_type) is True

    @pytest.mark.parametrize("content_type", [
        "image/png",
        "application/octet-stream",
        "application/pdf",
    ])
    def test_binary(self, content_type):
        assert is_textual_content_type(content_type) is False


class TestDecodeBody:
    """Tests for body decoding."""

    def test_utf8_body(self):
        """Test that non-ASCII text survives decoding."""
        response = make_response(content="| Café | Intern |".encode("utf-8"))

        assert decode_body(response) == "| Café | Intern |"

    def test_bom_stripped(self):
        """Test that a UTF-8 byte order mark is removed."""
        response = make_response(content=b"\xef\xbb\xbf# Title")

        assert decode_body(response) == "# Title"

    def test_invalid_utf8(self):
        """Test that undecodable bytes raise FetchError."""
        response = make_response(content=b"\xff\xfe\xfa")

        with pytest.raises(FetchError):
            decode_body(response)

    def test_binary_content_type(self):
        """Test that a non-text response raises FetchError."""
        response = make_response(content_type="image/png")

        with pytest.raises(FetchError) as exc_info:
            decode_body(response)

        assert exc_info.value.status_code == 200

    def test_preread_content_used(self):
        """Test that an already-read body takes precedence over response.content."""
        response = make_response(content=b"ignored")

        assert decode_body(response, b"| Company |") == "| Company |"


def slow_response(clock_step):
    """
    Build a response whose body never ends, with a fake clock that
    advances by clock_step seconds per reading.
    """
    response = make_response()
    response.iter_content.side_effect = lambda chunk_size=None: itertools.repeat(b"x")
    clock = itertools.count(0, clock_step)
    return response, (lambda: next(clock))


class TestReadBody:
    """Tests for deadline-bounded body reading."""

    def test_reads_all_chunks(self):
        response = make_response()
        response.iter_content.side_effect = lambda chunk_size=None: iter([b"| Com", b"pany |"])

        assert read_body(response, deadline=float("inf")) == b"| Company |"

    def test_trickling_body_hits_deadline(self):
        """Test that a body arriving a byte at a time stops at the deadline."""
        response, fake_clock = slow_response(clock_step=0.5)

        with patch("internship_watcher.fetch.time.monotonic", side_effect=fake_clock):
            with pytest.raises(FetchError, match="Request timeout"):
                read_body(response, deadline=1.0)

        response.close.assert_called_once()


class TestFetchFeed:
    """Tests for feed fetching."""

    def test_successful_fetch(self):
        """Test successful fetch returns decoded content."""
        mock_session = Mock()
        mock_session.get.return_value = make_response(content=b"# Internships\n| Company |")

        result = fetch_feed(FEED_URL, session=mock_session, timeout=10)

        assert result.success is True
        assert result.text == "# Internships\n| Company |"
        assert result.source_url == FEED_URL
        assert result.status_code == 200
        assert result.error_message is None
        mock_session.get.assert_called_once_with(FEED_URL, timeout=10, stream=True)

    def test_default_timeout(self):
        """Test that a bounded default timeout is always applied."""
        mock_session = Mock()
        mock_session.get.return_value = make_response()

        fetch_feed(FEED_URL, session=mock_session)

        mock_session.get.assert_called_once_with(FEED_URL, timeout=DEFAULT_TIMEOUT, stream=True)

    def test_missing_content_type_accepted(self):
        """Test raw hosts that omit Content-Type."""
        mock_session = Mock()
        mock_session.get.return_value = make_response(content_type=None)

        result = fetch_feed(FEED_URL, session=mock_session)

        assert result.success is True

    @pytest.mark.parametrize("status_code", [301, 404, 500, 503])
    def test_non_2xx_status(self, status_code):
        """Test that non-2xx responses are fetch failures."""
        mock_session = Mock()
        mock_session.get.return_value = make_response(status_code=status_code)

        result = fetch_feed(FEED_URL, session=mock_session)

        assert result.success is False
        assert result.text is None
        assert result.status_code == status_code
        assert f"HTTP {status_code}" in result.error_message

    def test_timeout(self):
        """Test that a timeout is reported, not raised."""
        mock_session = Mock()
        mock_session.get.side_effect = requests.exceptions.Timeout("timed out")

        result = fetch_feed(FEED_URL, session=mock_session)

        assert result.success is False
        assert result.error_message == "Request timeout"

    def test_slow_body_is_timeout(self):
        """Test that total request time is bounded, not just each socket read."""
        mock_session = Mock()
        response, fake_clock = slow_response(clock_step=0.5)
        mock_session.get.return_value = response

        with patch("internship_watcher.fetch.time.monotonic", side_effect=fake_clock):
            result = fetch_feed(FEED_URL, session=mock_session, timeout=1)

        assert result.success is False
        assert result.text is None
        assert result.error_message == "Request timeout"

    def test_connection_error(self):
        """Test that a connection error is reported, not raised."""
        mock_session = Mock()
        mock_session.get.side_effect = requests.exceptions.ConnectionError("refused")

        result = fetch_feed(FEED_URL, session=mock_session)

        assert result.success is False
        assert "Connection error" in result.error_message

    def test_generic_request_exception(self):
        """Test that any other requests error is reported."""
        mock_session = Mock()
        mock_session.get.side_effect = requests.exceptions.TooManyRedirects("loop")

        result = fetch_feed(FEED_URL, session=mock_session)

        assert result.success is False
        assert "Request failed" in result.error_message

    def test_non_text_response(self):
        """Test that a binary response is a fetch failure."""
        mock_session = Mock()
        mock_session.get.return_value = make_response(content_type="application/octet-stream")

        result = fetch_feed(FEED_URL, session=mock_session)

        assert result.success is False
        assert result.status_code == 200
        assert "Non-text" in result.error_message

    def test_decode_failure(self):
        """Test that invalid UTF-8 is a fetch failure."""
        mock_session = Mock()
        mock_session.get.return_value = make_response(content=b"\xff\xfe\xfa")

        result = fetch_feed(FEED_URL, session=mock_session)

        assert result.success is False
        assert "UTF-8" in result.error_message

    def test_invalid_url_skips_request(self):
        """Test that an invalid URL never reaches the network."""
        mock_session = Mock()

        result = fetch_feed("not-a-url", session=mock_session)

        assert result.success is False
        assert result.error_message == "Invalid URL format"
        mock_session.get.assert_not_called()

    def test_supplied_session_left_open(self):
        """Test that a caller-owned session is not closed."""
        mock_session = Mock()
        mock_session.get.return_value = make_response()

        fetch_feed(FEED_URL, session=mock_session)

        mock_session.close.assert_not_called()

    @patch("internship_watcher.fetch.create_session")
    def test_temporary_session_closed(self, mock_create_session):
        """Test that a session created for the call is closed afterwards."""
        mock_session = Mock()
        mock_session.get.side_effect = requests.exceptions.Timeout()
        mock_create_session.return_value = mock_session

        result = fetch_feed(FEED_URL)

        assert result.success is False
        mock_session.close.assert_called_once()


class TestFetchResult:
    """Tests for the FetchResult dataclass."""

    def test_defaults(self):
        result = FetchResult(source_url=FEED_URL, text="x", success=True)

        assert result.error_message is None
        assert result.status_code is None
