"""
=============================================================================
PYFRONT CLI ENTRY POINT
=============================================================================

Serves a site directory with the standard library's WSGI server. For
production, point any WSGI server at ``pyfront.app.FrontController``
instead.

    # Serve ./site on localhost:8080
    python -m pyfront --root ./site

    # All interfaces, French by default, JSON access logs
    python -m pyfront --root ./site --host 0.0.0.0 --default-lang fr --log-format json

Every option falls back to its PYFRONT_* environment variable, then to the
built-in default (see AppConfig).
=============================================================================
"""

import argparse
import logging
import socketserver
import sys
from typing import List, Optional
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from . import __version__
from .app import FrontController
from .config import AppConfig
from .middleware import LoggingMiddleware


logger = logging.getLogger(__name__)


class ThreadingWSGIServer(socketserver.ThreadingMixIn, WSGIServer):
    """wsgiref server with one thread per connection."""

    daemon_threads = True


class QuietRequestHandler(WSGIRequestHandler):
    """Leaves access logging to LoggingMiddleware."""

    def log_message(self, format, *args):
        pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyfront",
        description="Front controller serving static files and Python scripts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m pyfront --root ./site                 # Serve ./site/public
  python -m pyfront --root ./site --port 3000     # Custom port
  python -m pyfront --host 0.0.0.0                # Listen on all interfaces
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # SITE
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Site directory holding public/ and private/ (default: .)",
    )
    parser.add_argument(
        "--default-lang",
        default=None,
        help="Language used when neither ?lang= nor the cookie picks one (default: en)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Access log format (default: text)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"PyFront {__version__}",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> AppConfig:
    """Environment first, then any option given on the command line."""
    config = AppConfig.from_env()
    overrides = {
        "root_dir": args.root,
        "default_language": args.default_lang,
        "host": args.host,
        "port": args.port,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        app = FrontController(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    app.setup_logging()
    app.use(LoggingMiddleware(log_format=config.log_format))

    if not config.public_path.is_dir():
        logger.warning(f"Public directory not found: {config.public_path}")

    httpd = make_server(
        config.host,
        config.port,
        app,
        server_class=ThreadingWSGIServer,
        handler_class=QuietRequestHandler,
    )
    logger.info(f"Serving {config.public_path} on http://{config.host}:{httpd.server_port}")

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    finally:
        httpd.server_close()
        logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
