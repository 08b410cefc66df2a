"""
=============================================================================
HTTP SERVER CLI ENTRY POINT
=============================================================================

Usage:
    python -m minihttpd [options]
    minihttpd [options]

Examples:
    python -m minihttpd                          # 127.0.0.1:4221
    python -m minihttpd --directory /tmp/data    # enable /files routes
    python -m minihttpd --port 8080 -l DEBUG

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig, LOG_LEVELS
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttpd",
        description="Minimal HTTP/1.1 server with echo and file endpoints",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttpd                          # Run with defaults
  python -m minihttpd --directory /tmp/data    # Serve and accept files
  python -m minihttpd --port 8080              # Custom port
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Base directory for GET/POST /files/<name> (default: disabled)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=4221,
        help="Port to listen on (default: 4221)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # HARDENING (off unless given)
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--read-timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help=(
            "Drop clients that send nothing for this long, including ones that "
            "stop short of their Content-Length (default: wait forever)"
        ),
    )

    parser.add_argument(
        "--max-header-size",
        type=int,
        default=None,
        metavar="BYTES",
        help="Drop requests whose headers exceed this size (default: unlimited)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS[:4],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttpd {__version__}",
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        host=args.host,
        port=args.port,
        directory=args.directory,
        read_timeout=args.read_timeout,
        max_header_size=args.max_header_size,
        log_level=args.log_level,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        server = HTTPServer(config_from_args(args))
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
