"""
Command-line entry point.

    python -m staticserver                              # ./public on :8080
    python -m staticserver --root site --mount /static  # ./site under /static
    python -m staticserver --ext html --ext htm         # /about → about.html
    python -m staticserver --max-age 3600 --port 3000
"""

import argparse
import sys

from . import __version__
from .config import ProceedPolicy, SendFailurePolicy, ServerConfig, StaticFileOptions
from .exceptions import ConfigError
from .handlers import StaticFileHandler
from .middleware import LoggingMiddleware
from .server import StaticServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="staticserver",
        description="Serve a directory of static files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m staticserver                              # Serve ./public on :8080
  python -m staticserver --root site --mount /static  # ./site under /static
  python -m staticserver --ext html --ext htm         # /about → about.html
        """,
    )

    # Network
    parser.add_argument("--host", "-H", default="127.0.0.1",
                        help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=8080,
                        help="Port to listen on (default: 8080)")

    # Static files
    parser.add_argument("--root", "-r", default="/public",
                        help="Directory to serve, relative to the working directory (default: /public)")
    parser.add_argument("--mount", "-m", default="/",
                        help="URL prefix the directory is mounted at (default: /)")
    parser.add_argument("--ext", "-e", action="append", dest="extensions", default=None,
                        help="Extension to try when a path is missing, repeatable (e.g. -e html)")
    parser.add_argument("--max-age", type=int, default=0,
                        help="Cache-Control max-age in seconds (default: 0)")
    parser.add_argument("--no-index", action="store_true",
                        help="Do not serve index.html for directory paths")
    parser.add_argument("--no-redirect", action="store_true",
                        help="Do not redirect directories to a trailing slash")
    parser.add_argument("--no-last-modified", action="store_true",
                        help="Do not send Last-Modified")
    parser.add_argument("--proceed", choices=[p.value for p in ProceedPolicy],
                        default=ProceedPolicy.ALWAYS.value,
                        help="When to continue the pipeline after the static stage")
    parser.add_argument("--on-send-error", choices=[p.value for p in SendFailurePolicy],
                        default=SendFailurePolicy.REPORT.value,
                        help="Answer 500 (report) or 200 (swallow) when a file cannot be sent")

    # Logging
    parser.add_argument("--log-level", "-l",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="INFO",
                        help="Logging level (default: INFO)")
    parser.add_argument("--log-format", choices=["text", "json"], default="text",
                        help="Access log format (default: text)")

    parser.add_argument("--version", "-v", action="version",
                        version=f"staticserver {__version__}")
    return parser


def build_server(args: argparse.Namespace) -> StaticServer:
    """Translate parsed arguments into a configured server."""
    config = ServerConfig(
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        log_format=args.log_format,
    )
    options = StaticFileOptions(
        root_path=args.root,
        possible_extensions=args.extensions,
        serve_index_for_directory=not args.no_index,
        add_last_modified_header=not args.no_last_modified,
        max_age_cache_control_seconds=args.max_age,
        redirect_on_directory=not args.no_redirect,
        proceed_policy=ProceedPolicy(args.proceed),
        send_failure_policy=SendFailurePolicy(args.on_send_error),
    )

    server = StaticServer(config)
    server.use(LoggingMiddleware(log_format=config.log_format))
    server.use(args.mount, StaticFileHandler(options))
    return server


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        server = build_server(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
