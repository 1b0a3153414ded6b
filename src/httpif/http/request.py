"""
=============================================================================
HTTP REQUEST MODEL AND PARSER
=============================================================================

Two halves live here:

    HTTPRequest     the structured request the dispatcher consumes
    RequestParser   the transport-side code turning raw bytes into one

=============================================================================
BODY: ABSENT VS EMPTY
=============================================================================

The dispatcher treats "no body" and "empty body" differently (a POST
without a body behaves like a GET, a POST with an empty body does not),
so the parser keeps them apart:

    ┌─────────────────────────────────────────────┬──────────────────────┐
    │ Request                                     │ HTTPRequest.body     │
    ├─────────────────────────────────────────────┼──────────────────────┤
    │ no Content-Length header                    │ None                 │
    │ Content-Length: 0                           │ b""                  │
    │ Content-Length: 4  + "data"                 │ b"data"              │
    └─────────────────────────────────────────────┴──────────────────────┘

=============================================================================
METHODS
=============================================================================

Any method token is accepted. GET, POST, PUT, DELETE and HEAD map onto
HTTPMethod; everything else (PATCH, OPTIONS, BREW...) passes through as a
plain string and gets the dispatcher's "not implemented" response.

=============================================================================
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional
from urllib.parse import unquote, urlparse


class HTTPMethod(str, Enum):
    """The methods the dispatcher has a handler for."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"


class HTTPParseError(Exception):
    """
    Raised when raw request bytes cannot be parsed.

    Carries the status code to answer with:

        400 Bad Request                - malformed syntax
        413 Payload Too Large          - over max_request_size
        505 HTTP Version Not Supported - not HTTP/1.0 or HTTP/1.1
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         Method token as sent ("GET", "PATCH", ...).
        uri:            Decoded request path, without query string. The
                        dispatcher may rewrite it ("/" → "/index.html").
        version:        Protocol version, echoed into the response.
        headers:        Header name (lowercase) → value.
        body:           Raw body, or None when the request had none.
        client_address: (ip, port) of the client, for logging.
    """

    method: str
    uri: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    client_address: tuple[str, int] = ("", 0)

    @property
    def known_method(self) -> Optional[HTTPMethod]:
        """The method as an HTTPMethod, or None for anything unrecognized."""
        try:
            return HTTPMethod(self.method)
        except ValueError:
            return None

    @property
    def has_body(self) -> bool:
        return self.body is not None


class RequestParser:
    """
    Parses one complete raw request (as read by Connection) into an
    HTTPRequest.

    REQUEST_LINE_PATTERN: ^(\\S+) (\\S+) (HTTP/\\d\\.\\d)$

        (\\S+)          method token, any case, any name
        (\\S+)          request target
        (HTTP/\\d\\.\\d)  version; only 1.0 and 1.1 are served (505 otherwise)
    """

    REQUEST_LINE_PATTERN = re.compile(r"^(\S+) (\S+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    SUPPORTED_VERSIONS = ("HTTP/1.0", "HTTP/1.1")

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw request bytes.

        Raises:
            HTTPParseError: If the request is malformed, too large or uses
                            an unsupported protocol version.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("iso-8859-1")
        remainder = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, uri, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            uri=uri,
            version=version,
            headers=headers,
            body=self._extract_body(headers, remainder),
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, version = match.groups()

        if version not in self.SUPPORTED_VERSIONS:
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505
            )

        # "/docs/a%20b.txt?x=1" → "/docs/a b.txt"
        uri = unquote(urlparse(target).path) or "/"
        return method.upper(), uri, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse header lines into a dict with lowercase names.

        Malformed lines are skipped. A repeated header is folded into one
        comma-separated value.
        """
        headers: Dict[str, str] = {}
        for line in lines:
            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value
        return headers

    def _extract_body(self, headers: Dict[str, str], remainder: bytes) -> Optional[bytes]:
        if "content-length" not in headers:
            return None

        try:
            content_length = int(headers["content-length"])
        except ValueError as e:
            raise HTTPParseError(
                f"Invalid Content-Length: {headers['content-length']!r}"
            ) from e
        if content_length < 0:
            raise HTTPParseError(f"Invalid Content-Length: {content_length}")

        if len(remainder) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(remainder)}"
            )
        return remainder[:content_length]

