"""
=============================================================================
HTTP RESPONSE MODEL
=============================================================================

HTTPResponse is what the dispatcher fills in and the transport writes out.

=============================================================================
BODY: NONE VS EMPTY
=============================================================================

    body = None    no body at all. Content-Length is only present if a
                   handler put it there (HEAD does, to advertise the size
                   a GET would have returned).

    body = b""     a body of length zero. The dispatcher sets
                   Content-Length: 0.

On the wire both end up with no payload bytes; to_bytes() only adds
"Content-Length: 0" when nothing else set the header, so HEAD responses
keep the length of the GET they shadow.

=============================================================================
HEADERS
=============================================================================

Header names are stored exactly as set. "Content-Type" and "content-type"
are two different keys here; handlers always use the canonical spelling.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    An HTTP response under construction.

        HTTPResponse(
            status=HTTPStatus.OK,              default unless a handler sets one
            headers={"Content-Type": ...},     case-sensitive keys
            body=b"hello",                     or None for no body
            version="HTTP/1.1",                copied from the request
        )
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 201 Created"."""
        return f"{self.version} {int(self.status)} {HTTPStatus(self.status).phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def set_content_type(self, content_type: str) -> "HTTPResponse":
        return self.set_header("Content-Type", content_type)

    def set_body(self, body: Union[str, bytes, None]) -> "HTTPResponse":
        """
        Set the body. Strings are UTF-8 encoded; None clears the body.

        Returns:
            Self for method chaining
        """
        if isinstance(body, str):
            self.body = body.encode("utf-8")
        else:
            self.body = body
        return self

    def copy(self) -> "HTTPResponse":
        """Independent copy; header changes on it never touch the original."""
        return HTTPResponse(
            status=self.status,
            headers=dict(self.headers),
            body=self.body,
            version=self.version,
        )

    def to_bytes(self) -> bytes:
        """
        Serialize for socket.sendall().

            HTTP/1.1 200 OK\\r\\n
            Content-Type: text/html\\r\\n
            Server: htt-pif\\r\\n
            Content-Length: 5\\r\\n
            Date: Mon, 19 Oct 2026 09:00:00 GMT\\r\\n
            Connection: close\\r\\n
            \\r\\n
            hello

        Content-Length (0 when missing), Date and Connection are filled in
        on a copy of the headers; the response itself is not modified.
        """
        response_headers = dict(self.headers)
        response_headers.setdefault("Content-Length", "0")
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Connection", "close")

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("iso-8859-1", errors="replace") + b"\r\n"
        return header_bytes + (self.body or b"")


def format_http_date(dt: datetime) -> str:
    """
    Format a UTC datetime as an HTTP-date (RFC 7231).

    Example: Thu, 01 Jan 2026 12:00:00 GMT
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def error_response(
    status: HTTPStatus,
    message: Optional[str] = None,
    server_name: Optional[str] = None,
) -> HTTPResponse:
    """
    Plain-text error response for failures the dispatcher does not turn
    into a response itself (parse errors, Bad Input, Internal Failure).

    Example:
        >>> error_response(HTTPStatus.BAD_REQUEST).body
        b'Bad Request'
    """
    status = HTTPStatus(status)
    body = (message or status.phrase).encode("utf-8")
    response = HTTPResponse(status=status, body=body)
    response.set_content_type("text/plain")
    if server_name:
        response.set_header("Server", server_name)
    response.set_header("Content-Length", str(len(body)))
    return response
