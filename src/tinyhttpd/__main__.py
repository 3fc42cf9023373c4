"""
=============================================================================
TINYHTTPD CLI ENTRY POINT
=============================================================================

=============================================================================
USAGE
=============================================================================

    # Greeting mode on localhost:8080
    python -m tinyhttpd

    # Serve a directory
    python -m tinyhttpd --root ./public

    # Listen on all interfaces (for containers)
    python -m tinyhttpd --host 0.0.0.0 --port 3000 --root ./public

    # See every parsed request
    python -m tinyhttpd --root ./public --log-level DEBUG

Unset flags fall back to the HTTP_* environment variables (see
ServerConfig.from_env), then to the defaults.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .server import HTTPServer
from .config import ServerConfig, LOG_LEVELS


def build_parser() -> argparse.ArgumentParser:
    """Command-line arguments. Every default is None so the env wins."""
    parser = argparse.ArgumentParser(
        prog="tinyhttpd",
        description="Minimal HTTP/1.1 server: a greeting, or static files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttpd                          # Hello, World! on :8080
  python -m tinyhttpd --root ./public          # Serve ./public
  python -m tinyhttpd --port 3000 --root .     # Custom port
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
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

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Document root to serve files from (default: greeting mode)"
    )

    parser.add_argument(
        "--index",
        default=None,
        help="Default document for / and directories (default: index.html)"
    )

    parser.add_argument(
        "--content-length",
        action="store_true",
        help="Send Content-Length with served files"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LIMITS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--max-request-size",
        type=int,
        default=None,
        help="Largest request accepted, in bytes (default: 4096)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Seconds allowed to read a request (default: 30)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttpd {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment config, overridden by whatever was given on the command line."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.root is not None:
        config.document_root = args.root
    if args.index is not None:
        config.index_file = args.index
    if args.max_request_size is not None:
        config.max_request_size = args.max_request_size
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.content_length:
        config.include_content_length = True

    return config


def main(argv=None) -> int:
    """Parse arguments, build the server, run it until interrupted."""
    args = build_parser().parse_args(argv)

    try:
        server = HTTPServer(config_from_args(args))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================
# python -m tinyhttpd

if __name__ == "__main__":
    sys.exit(main())
