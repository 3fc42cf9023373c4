"""
Unit tests for HTTP request parsing.
"""

import logging

import pytest

from tinyhttpd.http.request import (
    Request,
    RecognizedHeaders,
    RequestParser,
    RequestTooLarge,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self):
        """Test parsing a minimal well-formed request."""
        request = RequestParser().parse(b"GET /x HTTP/1.1\r\nHost: a\r\n\r\n")

        assert request.method == "GET"
        assert request.path == "/x"
        assert request.version == "HTTP/1.1"
        assert request.headers.host == "a"
        assert request.is_complete is True

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that allowlisted headers are kept."""
        request = parse_request(sample_get_request)

        assert request.host == "localhost:8080"
        assert request.user_agent == "pytest"
        assert request.content_type is None

    def test_unrecognized_headers_dropped(self, sample_get_request: bytes):
        """Test that headers outside the allowlist are silently discarded."""
        request = parse_request(sample_get_request)

        assert request.headers.get("Accept") is None
        assert request.headers.get("Connection") is None
        assert len(request.headers) == 2

    def test_parse_post_ignores_body(self, sample_post_request: bytes):
        """Test that methods are treated uniformly and the body is ignored."""
        request = parse_request(sample_post_request)

        assert request.method == "POST"
        assert request.path == "/api/users"
        assert request.content_type == "application/json"
        assert b"Content-Length: 16\r\n" in sample_post_request
        assert not hasattr(request, "body")

    def test_missing_path_and_version(self):
        """Test a request line with only the method."""
        request = parse_request(b"GET\r\n\r\n")

        assert request.method == "GET"
        assert request.path is None
        assert request.version is None
        assert request.is_complete is False

    def test_missing_token_still_parses_headers(self):
        """Test that headers after a short request line are still read."""
        request = parse_request(b"GET /only\r\nHost: example.com\r\n\r\n")

        assert request.path == "/only"
        assert request.version is None
        assert request.host == "example.com"

    def test_missing_token_is_logged(self, caplog):
        """Test that the first missing token is reported."""
        with caplog.at_level(logging.WARNING, logger="tinyhttpd.http.request"):
            parse_request(b"GET\r\n\r\n")

        assert "Invalid path" in caplog.text

    def test_extra_tokens_dropped(self):
        """Test that tokens after the version are ignored."""
        request = parse_request(b"GET /x HTTP/1.1 trailing junk\r\n\r\n")

        assert request.method == "GET"
        assert request.path == "/x"
        assert request.version == "HTTP/1.1"

    def test_repeated_spaces_collapse(self):
        """Test that empty tokens between spaces are skipped."""
        request = parse_request(b"GET   /x  HTTP/1.0\r\n\r\n")

        assert request.path == "/x"
        assert request.version == "HTTP/1.0"

    def test_path_kept_verbatim(self):
        """Test that the path token is not decoded or normalized."""
        request = parse_request(b"GET /a%20b/../c?q=1 HTTP/1.1\r\n\r\n")

        assert request.path == "/a%20b/../c?q=1"

    def test_empty_header_value(self):
        """Test that 'Name: ' yields an empty string, not None."""
        request = parse_request(b"GET / HTTP/1.1\r\nHost: \r\n\r\n")

        assert request.host == ""
        assert request.headers.get("Host", "default") == ""

    def test_header_split_on_first_delimiter(self):
        """Test that only the first ': ' separates name and value."""
        request = parse_request(b"GET / HTTP/1.1\r\nUser-Agent: a: b: c\r\n\r\n")

        assert request.user_agent == "a: b: c"

    def test_header_without_delimiter_dropped(self):
        """Test that a line with no ': ' is skipped."""
        request = parse_request(b"GET / HTTP/1.1\r\nHost:nospace\r\nUser-Agent: ua\r\n\r\n")

        assert request.host is None
        assert request.user_agent == "ua"

    def test_last_header_wins(self):
        """Test that a repeated header keeps its last value."""
        request = parse_request(
            b"GET / HTTP/1.1\r\nHost: first\r\nHost: second\r\n\r\n"
        )

        assert request.host == "second"

    def test_case_insensitive_headers(self):
        """Test that header names are case-insensitive."""
        request = parse_request(b"GET / HTTP/1.1\r\nCONTENT-TYPE: text/html\r\n\r\n")

        assert request.content_type == "text/html"
        assert request.headers.get("Content-Type") == "text/html"
        assert request.headers.get("content-type") == "text/html"

    def test_parse_missing_headers(self):
        """Test parsing request with no headers."""
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request.method == "GET"
        assert request.path == "/"
        assert len(request.headers) == 0

    def test_bounded_by_length(self):
        """Test that bytes past `length` are never looked at."""
        buffer = bytearray(b"GET / HTTP/1.1\r\nHost: a\r\n\r\n")
        filled = len(buffer)
        buffer += b"Host: stale\r\n" + b"\x00" * 64

        request = RequestParser().parse(buffer, filled)

        assert request.host == "a"

    def test_length_cuts_mid_line(self):
        """Test that a line without its CRLF inside `length` is ignored."""
        raw = b"GET / HTTP/1.1\r\nHost: a\r\n\r\n"

        request = RequestParser().parse(raw, raw.index(b"Host") + 6)

        assert request.path == "/"
        assert request.host is None

    @pytest.mark.parametrize("length", [-5, 0])
    def test_non_positive_length(self, length):
        """Test that a zero or negative length yields an empty request."""
        request = RequestParser().parse(b"GET / HTTP/1.1\r\n\r\n", length)

        assert request == Request()

    def test_length_larger_than_buffer(self):
        """Test that an oversized length is clamped."""
        raw = b"GET / HTTP/1.1\r\n\r\n"

        request = RequestParser().parse(raw, 10_000)

        assert request.path == "/"

    @pytest.mark.parametrize("raw", [
        b"",
        b"\r\n",
        b"GET / HTTP/1.1",            # no CRLF at all
        b"\xff\xfe\r\n\xff: \xff\r\n",
        b"\r\n\r\n\r\n\r\n",
        b"   \r\n: \r\n",
    ])
    def test_never_raises(self, raw):
        """Test that any input yields a Request."""
        request = parse_request(raw)

        assert isinstance(request, Request)

    def test_incomplete_request_line(self):
        """Test that data without a CRLF produces an empty request."""
        request = parse_request(b"GET / HTTP/1.1")

        assert request.method is None
        assert request.path is None

    def test_parser_is_reusable(self):
        """Test that one parser keeps no state between calls."""
        parser = RequestParser()

        first = parser.parse(b"GET /a HTTP/1.1\r\nHost: one\r\n\r\n")
        second = parser.parse(b"GET /b HTTP/1.1\r\n\r\n")

        assert first.host == "one"
        assert second.host is None
        assert second.path == "/b"


class TestRequest:
    """Tests for the Request and RecognizedHeaders dataclasses."""

    def test_request_is_frozen(self):
        """Test that a parsed request cannot be modified."""
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        with pytest.raises(AttributeError):
            request.path = "/etc/passwd"

    def test_get_header_default(self):
        """Test get with a default value."""
        headers = RecognizedHeaders(host="a")

        assert headers.get("X-Missing") is None
        assert headers.get("X-Missing", "default") == "default"
        assert headers.get("User-Agent", "default") == "default"

    def test_items_canonical_names(self):
        """Test that items() yields canonical header names."""
        headers = RecognizedHeaders(content_type="text/plain", user_agent="ua")

        assert list(headers.items()) == [
            ("Content-Type", "text/plain"),
            ("User-Agent", "ua"),
        ]

    def test_describe(self):
        """Test the debug dump of a request."""
        request = parse_request(b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")

        assert request.describe() == (
            "REQUEST LINE: GET /index.html HTTP/1.1\n"
            "Host: localhost"
        )


class TestRequestTooLarge:
    """Tests for the oversized request error."""

    def test_carries_413(self):
        """Test that the error maps to Payload Too Large."""
        error = RequestTooLarge(5000, 4096)

        assert error.status_code == 413
        assert error.size == 5000
        assert error.limit == 4096
        assert "4096" in str(error)
