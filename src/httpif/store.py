"""
=============================================================================
RESOURCE STORE
=============================================================================

Filesystem access for request URIs, rooted at the configured web root.

=============================================================================
PATH RESOLUTION
=============================================================================

A URI is joined onto the web root as-is:

    web_root = /srv          uri = /docs/a.txt     →  /srv/docs/a.txt
    web_root = /srv          uri = /               →  /srv
    web_root = /srv          uri = /../etc/passwd  →  /srv/../etc/passwd

The leading slash is stripped before joining (pathlib would otherwise
treat "/docs/a.txt" as absolute and drop the root), but nothing else is
touched: no normalization, no symlink resolution, no containment check.
The last row above escapes the root. Containment is an open security
question; see DESIGN.md.

=============================================================================
FAILURE MODES
=============================================================================

    read()    missing      → ResourceNotFoundError   (404)
              directory    → ResourceIsDirectoryError (403)
              other OSError→ StorageError             (500)

    write()   any OSError  → StorageError             (500)

    delete()  never raises; failures are logged only

=============================================================================
"""

import logging
import os
from pathlib import Path
from typing import Union

from .exceptions import (
    ResourceIsDirectoryError,
    ResourceNotFoundError,
    StorageError,
)


logger = logging.getLogger(__name__)


class ResourceStore:
    """
    Read/write/delete access to resources under a web root.

    One instance is created per server and shared by every request; it
    holds nothing but the root path, so concurrent use is safe as far as
    this class is concerned. Concurrent requests on the SAME file still
    race at the operating system level.
    """

    def __init__(self, web_root: Union[str, Path]):
        self.web_root = Path(web_root)

    def resolve(self, uri: str) -> Path:
        """Join a request URI onto the web root (no normalization)."""
        return self.web_root / uri.lstrip("/")

    def exists(self, uri: str) -> bool:
        return self.resolve(uri).exists()

    def is_directory(self, uri: str) -> bool:
        return self.resolve(uri).is_dir()

    def read(self, uri: str) -> bytes:
        """
        Read the full content of a resource.

        Raises:
            ResourceNotFoundError: Nothing exists at the path.
            ResourceIsDirectoryError: The path is a directory.
            StorageError: The read failed for any other reason.
        """
        path = self.resolve(uri)

        if not path.exists():
            raise ResourceNotFoundError(f"No such resource: {uri}")
        if path.is_dir():
            raise ResourceIsDirectoryError(f"Resource is a directory: {uri}")

        try:
            return path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise StorageError(f"Failed to read resource: {uri}") from e

    def write(self, uri: str, data: bytes) -> None:
        """
        Create or truncate a resource and write data to it.

        Parent directories are not created.

        Raises:
            StorageError: The write failed.
        """
        path = self.resolve(uri)
        try:
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise StorageError(f"Failed to write resource: {uri}") from e

    def delete(self, uri: str) -> None:
        """
        Best-effort removal of a file or an empty directory.

        The outcome is not reported to the caller; a failed delete is
        only visible in the log.
        """
        path = self.resolve(uri)
        try:
            if path.is_dir() and not path.is_symlink():
                os.rmdir(path)
            else:
                path.unlink()
        except OSError as e:
            logger.warning(f"Failed to delete {path}: {e}")
