"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

One ServerConfig is built at startup and handed to everything that needs
it: the dispatcher, the resource store, the command bridge and the
transport. Nothing reads configuration from a global.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m httpif --root ./site --port 3000                 │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTPIF_WEB_ROOT=./site python -m httpif                    │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the resource server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    RESOURCES
    - web_root, command_timeout

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout, max_request_size

    THREADING SETTINGS
    - workers, queue_size

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # RESOURCES
    # ─────────────────────────────────────────────────────────────────────

    web_root: str = "."
    """
    Directory every request URI is resolved under.
    GET /a/b.txt reads <web_root>/a/b.txt.
    """

    command_timeout: Optional[float] = None
    """
    Seconds a POSTed executable may run before the request fails with 500.
    None = wait for the program however long it takes.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    port: int = 8080

    backlog: int = 128
    """Maximum number of queued connections waiting for accept()."""

    buffer_size: int = 8192
    """Bytes read from the socket per recv() call."""

    timeout: Optional[float] = 30.0
    """Client socket timeout in seconds. None = block forever."""

    max_request_size: int = 10 * 1024 * 1024  # 10 MB
    """
    Largest request (headers + body) accepted. PUT uploads are bounded by
    this; bigger requests get 413.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 4
    """Worker threads handling connections."""

    queue_size: int = 100
    """Connections waiting for a worker. Beyond this, clients get 503."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    """Access log format: 'text' or 'json'."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "htt-pif"
    """Value of the Server header on every response."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTPIF_WEB_ROOT         Directory to serve (default: .)
        HTTPIF_HOST             Server host (default: 127.0.0.1)
        HTTPIF_PORT             Server port (default: 8080)
        HTTPIF_WORKERS          Worker threads (default: 4)
        HTTPIF_TIMEOUT          Client socket timeout in seconds (default: 30)
        HTTPIF_COMMAND_TIMEOUT  Executable timeout in seconds (default: none)
        HTTPIF_LOG_LEVEL        Logging level (default: INFO)
        HTTPIF_LOG_FORMAT       Access log format, text or json (default: text)

        =====================================================================
        """
        command_timeout = os.getenv("HTTPIF_COMMAND_TIMEOUT")
        return cls(
            web_root=os.getenv("HTTPIF_WEB_ROOT", "."),
            host=os.getenv("HTTPIF_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTPIF_PORT", "8080")),
            workers=int(os.getenv("HTTPIF_WORKERS", "4")),
            timeout=float(os.getenv("HTTPIF_TIMEOUT", "30")),
            command_timeout=float(command_timeout) if command_timeout else None,
            log_level=os.getenv("HTTPIF_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTPIF_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value stops the server before it
        accepts its first connection.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ValueError("command_timeout must be > 0")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {self.log_format!r}")

        if not Path(self.web_root).is_dir():
            raise ValueError(f"web_root is not a directory: {self.web_root}")
