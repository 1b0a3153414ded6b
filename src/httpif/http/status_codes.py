"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can put on the wire, with reason phrases.

=============================================================================
WHO PRODUCES WHICH CODE
=============================================================================

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  CODE  │ PRODUCED BY                                               │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  200   │ Dispatcher default (GET/HEAD/POST, PUT overwrite)         │
    │  201   │ PUT that created a new resource                           │
    │  204   │ DELETE of an existing resource                            │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  400   │ Transport: malformed request / PUT without body          │
    │  403   │ GET on a directory                                        │
    │  404   │ GET / DELETE on a missing resource                        │
    │  408   │ Transport: client never finished sending                  │
    │  413   │ Transport: request above max_request_size                 │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  500   │ I/O failure or command launch failure                     │
    │  503   │ Transport: worker queue full                              │
    │  505   │ Transport: unknown HTTP version                           │
    └────────┴───────────────────────────────────────────────────────────┘

The dispatcher itself only ever produces 200, 201, 204, 403, 404 and 500.
Everything else belongs to the transport layer.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.CREATED == 201
        True
        >>> HTTPStatus.CREATED.phrase
        'Created'
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201
    NO_CONTENT = 204

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line:

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      └── phrase
                      └───────── code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
