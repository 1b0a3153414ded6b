"""
=============================================================================
HTTPIF CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m httpif

    # Serve ./site on all interfaces, port 3000
    python -m httpif --root ./site --host 0.0.0.0 --port 3000

    # Kill POSTed programs that run longer than 10 seconds
    python -m httpif --command-timeout 10

Every flag left out falls back to its HTTPIF_* environment variable, then
to the ServerConfig default.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import LOG_FORMATS, ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httpif",
        description="Serve a directory over HTTP: GET/HEAD read, PUT write, "
                    "DELETE remove, POST runs *.shar programs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m httpif                          # Serve . on 127.0.0.1:8080
  python -m httpif --root ./site            # Serve ./site
  python -m httpif --host 0.0.0.0 -p 3000   # All interfaces, port 3000
  python -m httpif --log-format json        # JSON access log
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # RESOURCES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Directory to serve (default: $HTTPIF_WEB_ROOT or .)"
    )

    parser.add_argument(
        "--command-timeout",
        type=float,
        default=None,
        help="Seconds a POSTed program may run (default: no limit)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Number of worker threads (default: 4)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"httpif {__version__}"
    )

    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then whatever was given on the command line."""
    config = ServerConfig.from_env()

    overrides = {
        "web_root": args.root,
        "host": args.host,
        "port": args.port,
        "workers": args.workers,
        "command_timeout": args.command_timeout,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)

    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
        server = HTTPServer(config)
    except ValueError as e:
        parser.error(str(e))

    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
