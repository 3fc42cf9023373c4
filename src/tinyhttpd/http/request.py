"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes of one client read into a structured Request.

=============================================================================
WHAT WE READ
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    GET /style.css HTTP/1.1\r\n                                  │ │
    │  │    ─┬─ ─────┬──── ────┬───                                      │ │
    │  │   Method   Path    Version                                      │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Host: example.com\r\n              ← kept                    │ │
    │  │    User-Agent: curl/8.4.0\r\n         ← kept                    │ │
    │  │    Accept: */*\r\n                    ← dropped                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only three headers are recognised: Content-Type, Host and User-Agent.
Everything else is thrown away as it is scanned. The input comes from an
untrusted peer, so the amount of state a request can create is fixed no
matter how many headers it sends.

=============================================================================
THE STATE MACHINE
=============================================================================

    ┌──────────────┐   first \r\n    ┌──────────────┐
    │ REQUEST_LINE │ ──────────────► │   HEADERS    │ ──┐ every \r\n
    └──────────────┘                 └──────────────┘ ◄─┘
                                                   (no way back)

The scan is a single left-to-right pass bounded by the number of bytes
actually read. Each CRLF closes one segment:

    - in REQUEST_LINE the segment is split into method, path, version
    - in HEADERS the segment is split into "Name: Value"

The blank line that ends the header block is an empty segment and does
nothing. The scan simply runs on until the end of the buffer.

=============================================================================
LENIENCY
=============================================================================

The parser never raises for bad input. A missing token is logged and the
field is left as None:

    b"GET\\r\\n\\r\\n"  →  Request(method="GET", path=None, version=None)

Deciding what to answer for an incomplete request is the server's job,
not the parser's.

=============================================================================
INTERVIEW QUESTIONS ABOUT THIS PARSER
=============================================================================

Q: "Why not split on '\\r\\n' once and loop over the lines?"
A: "That needs the whole message first. Scanning for CRLF from a moving
   start offset handles each line as soon as it is complete and stops
   exactly at the read length, never past it."

Q: "What happens with 'GET  /x HTTP/1.1' (two spaces)?"
A: "Empty tokens between repeated delimiters are skipped, so it parses
   the same as the single-space form. Tokens after the third are ignored."

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class RequestTooLarge(Exception):
    """
    Raised when a client sends more bytes than max_request_size.

    Oversized requests are rejected with 413 Payload Too Large rather than
    silently truncated: a truncated header block would parse into a
    different request than the one the client sent.
    """

    def __init__(self, size: int, limit: int):
        super().__init__(f"Request too large: {size} bytes (limit {limit})")
        self.size = size
        self.limit = limit
        self.status_code = HTTPStatus.PAYLOAD_TOO_LARGE


class ParseState(Enum):
    """Parser states. Progress is strictly forward."""
    REQUEST_LINE = "request_line"
    HEADERS = "headers"


# =============================================================================
# HEADER ALLOWLIST
# =============================================================================
#
# Lowercase wire name → RecognizedHeaders attribute.
# Header names are case-insensitive, so lookups lowercase the name first.
#
HEADER_FIELDS: Dict[str, str] = {
    "content-type": "content_type",
    "host": "host",
    "user-agent": "user_agent",
}

# Attribute → canonical wire name, for display
_DISPLAY_NAMES: Dict[str, str] = {
    "content_type": "Content-Type",
    "host": "Host",
    "user_agent": "User-Agent",
}

REQUEST_LINE_FIELDS = ("method", "path", "version")


@dataclass(frozen=True)
class RecognizedHeaders:
    """
    The headers we keep, each either a string or None.

    A header sent with an empty value ("Host: ") is stored as "",
    which is different from not being sent at all (None).
    """

    content_type: Optional[str] = None
    host: Optional[str] = None
    user_agent: Optional[str] = None

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Look a header up by its wire name (any case).

        Unrecognised names always return the default.
        """
        attr = HEADER_FIELDS.get(name.lower())
        if attr is None:
            return default
        value = getattr(self, attr)
        return default if value is None else value

    def items(self) -> Iterator[Tuple[str, str]]:
        """Yield (canonical name, value) for every header present."""
        for attr, display_name in _DISPLAY_NAMES.items():
            value = getattr(self, attr)
            if value is not None:
                yield display_name, value

    def __len__(self) -> int:
        return sum(1 for _ in self.items())


@dataclass(frozen=True)
class Request:
    """
    A parsed HTTP request.

    =========================================================================
    LIFECYCLE
    =========================================================================

        raw bytes  ──parse──►  Request  ──path──►  StaticResolver
                              (frozen)                  │
                                                        ▼
                                              dropped after the response

    Frozen: once the parser hands it out nothing can change it. It lives
    only as long as the connection that produced it.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:   First request line token ("GET", "POST", ...) or None
        path:     Second token, exactly as sent ("/style.css") or None
        version:  Third token ("HTTP/1.1") or None
        headers:  RecognizedHeaders (Content-Type, Host, User-Agent)

    A field that is present is never the empty string.

    =========================================================================
    """

    method: Optional[str] = None
    path: Optional[str] = None
    version: Optional[str] = None
    headers: RecognizedHeaders = field(default_factory=RecognizedHeaders)

    @property
    def is_complete(self) -> bool:
        """True when method, path and version were all present."""
        return None not in (self.method, self.path, self.version)

    @property
    def host(self) -> Optional[str]:
        return self.headers.host

    @property
    def user_agent(self) -> Optional[str]:
        return self.headers.user_agent

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.content_type

    def describe(self) -> str:
        """
        Multi-line, human readable dump of the request for debug logs.

            REQUEST LINE: GET /index.html HTTP/1.1
            Host: localhost:8080
        """
        lines = [f"REQUEST LINE: {self.method} {self.path} {self.version}"]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        return "\n".join(lines)


class RequestParser:
    """
    Single-pass request parser.

    ==========================================================================
    PARSER ARCHITECTURE
    ==========================================================================

        buffer[0:length]
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  find next \r\n from `start`                                      │
        │     │  none left? → stop                                          │
        │     ▼                                                             │
        │  segment = buffer[start:crlf]                                     │
        │     │                                                             │
        │     ├── REQUEST_LINE → method / path / version, go to HEADERS    │
        │     └── HEADERS      → "Name: Value" into the allowlist          │
        │     ▼                                                             │
        │  start = crlf + 2                                                 │
        └───────────────────────────────────────────────────────────────────┘
              │
              ▼
        Request (frozen)

    The parser keeps no state between calls, so one instance can be shared
    by any number of connections.

    ==========================================================================
    """

    LINE_END = b"\r\n"
    HEADER_DELIMITER = ": "

    def parse(self, buffer: bytes, length: Optional[int] = None) -> Request:
        """
        Parse raw request bytes.

        Args:
            buffer: Bytes read from the client. May be a larger, partly
                    filled buffer.
            length: Number of valid bytes at the start of buffer. Defaults
                    to the whole buffer; clamped to [0, len(buffer)].

        Returns:
            The parsed Request. Never raises for malformed input.
        """
        if length is None or length > len(buffer):
            length = len(buffer)
        length = max(length, 0)

        # Never look at bytes past `length`
        data = bytes(buffer[:length])

        state = ParseState.REQUEST_LINE
        start = 0
        request_line: Dict[str, str] = {}
        headers: Dict[str, str] = {}

        while True:
            crlf = data.find(self.LINE_END, start)
            if crlf == -1:
                break

            segment = data[start:crlf].decode("utf-8", errors="replace")

            if state is ParseState.REQUEST_LINE:
                request_line = self._parse_request_line(segment)
                state = ParseState.HEADERS
            else:
                self._parse_header(segment, headers)

            start = crlf + len(self.LINE_END)

        if state is ParseState.REQUEST_LINE:
            logger.warning(f"No complete request line in {length} bytes")

        return Request(headers=RecognizedHeaders(**headers), **request_line)

    def _parse_request_line(self, line: str) -> Dict[str, str]:
        """
        Split "METHOD PATH VERSION" into its three tokens.

        Returns only the tokens that were found, keyed by field name.
        Missing trailing tokens are logged once, at the first gap.
        """
        tokens = [token for token in line.split(" ") if token]

        if len(tokens) > len(REQUEST_LINE_FIELDS):
            extra = len(tokens) - len(REQUEST_LINE_FIELDS)
            logger.debug(f"Ignoring {extra} extra token(s) in request line")

        fields = dict(zip(REQUEST_LINE_FIELDS, tokens))

        if len(fields) < len(REQUEST_LINE_FIELDS):
            missing = REQUEST_LINE_FIELDS[len(fields)]
            logger.warning(f"Invalid {missing} in request line: {line!r}")

        return fields

    def _parse_header(self, line: str, headers: Dict[str, str]) -> None:
        """
        Store one "Name: Value" line if Name is on the allowlist.

        Splits on the FIRST ": " only, so "Host: a: b" keeps "a: b".
        Later occurrences of the same header overwrite earlier ones.
        """
        if not line:
            return  # blank line ending the header block

        name, delimiter, value = line.partition(self.HEADER_DELIMITER)
        if not delimiter:
            logger.warning(f"Dropping malformed header line: {line!r}")
            return

        attr = HEADER_FIELDS.get(name.lower())
        if attr is None:
            return

        headers[attr] = value


def parse_request(data: bytes, length: Optional[int] = None) -> Request:
    """
    Parse raw request bytes with a fresh RequestParser.

    Example:
        request = parse_request(b"GET /x HTTP/1.1\\r\\nHost: a\\r\\n\\r\\n")
        request.path   # "/x"
        request.host   # "a"
    """
    return RequestParser().parse(data, length)
