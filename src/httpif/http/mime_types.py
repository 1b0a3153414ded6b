"""
=============================================================================
CONTENT TYPE RESOLUTION
=============================================================================

Maps a resource name to a MIME type string by looking at its extension.

Resolution is a pure function of the name: the file is never opened, so
"report.txt" resolves to text/plain whether or not it exists.

=============================================================================
RESOLVED VS UNRESOLVED
=============================================================================

Unlike a browser-facing static server, we do NOT fall back to
application/octet-stream. An unknown extension is reported as None and the
dispatcher then leaves the Content-Type header out entirely:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  resolve_content_type("index.html")   → "text/html"                 │
    │  resolve_content_type("/srv/run.shar")→ "application/x-shar"        │
    │  resolve_content_type("README")       → None   (no extension)       │
    │  resolve_content_type("blob.xyz")     → None   (unknown extension)  │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE EXECUTABLE MARKER
=============================================================================

POST only runs a resource when its resolved type is exactly
EXECUTABLE_MARKER_TYPE. The type is a naming convention, nothing more: a
file named "tool.shar" is treated as invocable, whatever its content.

=============================================================================
"""

from pathlib import PurePath
from typing import Optional, Union


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================
#
# Lowercase extension (with dot) → MIME type. Follows the classic platform
# content-type table, which is why source files map to text/plain and shell
# archives have their own entry.
#
# =============================================================================

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    ".html": "text/html",
    ".htm": "text/html",
    ".txt": "text/plain",
    ".text": "text/plain",
    ".java": "text/plain",
    ".c": "text/plain",
    ".cc": "text/plain",
    ".c++": "text/plain",
    ".h": "text/plain",
    ".pl": "text/plain",
    ".css": "text/css",
    ".csv": "text/csv",
    ".js": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".md": "text/markdown",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    ".png": "image/png",
    ".gif": "image/gif",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".jpe": "image/jpeg",
    ".bmp": "image/bmp",
    ".svg": "image/svg+xml",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".ico": "image/x-icon",
    ".webp": "image/webp",

    # -------------------------------------------------------------------------
    # AUDIO / VIDEO TYPES
    # -------------------------------------------------------------------------
    ".mp3": "audio/mpeg",
    ".wav": "audio/x-wav",
    ".au": "audio/basic",
    ".mpeg": "video/mpeg",
    ".mpg": "video/mpeg",
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",

    # -------------------------------------------------------------------------
    # DOCUMENT TYPES
    # -------------------------------------------------------------------------
    ".pdf": "application/pdf",
    ".ps": "application/postscript",
    ".rtf": "application/rtf",
    ".doc": "application/msword",

    # -------------------------------------------------------------------------
    # ARCHIVE TYPES
    # -------------------------------------------------------------------------
    ".zip": "application/zip",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
    ".jar": "application/java-archive",

    # -------------------------------------------------------------------------
    # SCRIPT TYPES
    # -------------------------------------------------------------------------
    # Scripts are not text/* here: .shar is the executable marker and the
    # others keep their application/x-* names so they never match it.
    ".sh": "application/x-sh",
    ".csh": "application/x-csh",
    ".tcl": "application/x-tcl",
    ".shar": "application/x-shar",
}

# Resources resolving to this type are run by POST instead of being ignored
EXECUTABLE_MARKER_TYPE = "application/x-shar"


def resolve_content_type(name: Union[str, PurePath]) -> Optional[str]:
    """
    Resolve the MIME type for a resource name or path.

    Only the final path component matters; directories along the way are
    ignored, so "/srv/site.d/page" has no extension.

    Args:
        name: URI, file name or filesystem path.

    Returns:
        The MIME type string, or None when the extension is unknown.

    Examples:
        >>> resolve_content_type("/index.html")
        'text/html'

        >>> resolve_content_type("ARCHIVE.SHAR")
        'application/x-shar'

        >>> resolve_content_type("Makefile") is None
        True

        >>> resolve_content_type("/srv/.shar")
        'application/x-shar'
    """
    # Everything after the last dot, so dotfiles like ".shar" count too
    _, dot, extension = PurePath(name).name.rpartition(".")
    if not dot or not extension:
        return None
    return MIME_TYPES.get("." + extension.lower())  # .HTML → .html


def is_executable_type(content_type: Optional[str]) -> bool:
    """Check whether a resolved type is the executable marker."""
    return content_type == EXECUTABLE_MARKER_TYPE
