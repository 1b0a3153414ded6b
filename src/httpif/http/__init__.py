"""
=============================================================================
HTTP PROTOCOL PIECES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py       HTTPRequest + RequestParser (raw bytes → request) │
    │ response.py      HTTPResponse + to_bytes() (response → raw bytes)   │
    │ status_codes.py  HTTPStatus: the codes this server can send         │
    │ mime_types.py    resolve_content_type(): extension → MIME type      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest, HTTPMethod, RequestParser, HTTPParseError
from .response import HTTPResponse, error_response, format_http_date
from .status_codes import HTTPStatus
from .mime_types import EXECUTABLE_MARKER_TYPE, resolve_content_type, is_executable_type

__all__ = [
    # Request parsing
    "HTTPRequest",
    "HTTPMethod",
    "RequestParser",
    "HTTPParseError",

    # Responses
    "HTTPResponse",
    "error_response",
    "format_http_date",

    # Status codes
    "HTTPStatus",

    # Content types
    "EXECUTABLE_MARKER_TYPE",
    "resolve_content_type",
    "is_executable_type",
]
