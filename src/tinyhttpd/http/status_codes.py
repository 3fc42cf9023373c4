"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The closed set of status codes this server can put on the wire.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  Code  │ When we send it                                           │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  200   │ Greeting, or a file was resolved and is being streamed    │
    │  400   │ Request line carried no path to resolve                   │
    │  403   │ Resolved path escapes the document root                   │
    │  404   │ Path does not exist or cannot be opened                   │
    │  408   │ Client did not finish the request before the timeout      │
    │  413   │ Request exceeded max_request_size                         │
    │  500   │ Document root itself cannot be resolved                   │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with reason phrases.

    Extends IntEnum so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
