"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

A pipeline stage that maps GET/HEAD request paths onto files below a
root directory and serves them with caching headers.

=============================================================================
RESOLUTION ORDER
=============================================================================

    Mounted at "/static/*", root "/public", request GET /static/docs

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   1. method GET or HEAD?                 no  ──► next()             │
    │   2. strip mount prefix "/static/"       "docs"                     │
    │   3. join under root, make relative      "./public/docs"            │
    │   4. ends with "/"?                                                 │
    │        index enabled   ──► append "index.html"                      │
    │        index disabled  ──► next()                                   │
    │   5. look it up                                                      │
    │        directory       ──► redirect to "/static/docs/"              │
    │        regular file    ──► serve it                                 │
    │        missing         ──► try "./public/docs.html",                │
    │                                "./public/docs.htm", ...             │
    │                            first regular file wins                  │
    │   6. next()                                                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The path is always made relative (a leading "."), so the request can
never name an absolute filesystem location. Paths whose ".." segments
climb above the root are refused before the filesystem is queried.

=============================================================================
SERVING A FILE
=============================================================================

    Cache-Control: max-age=<seconds>          always
    Last-Modified: <file mtime, HTTP-date>    unless disabled
    <custom headers>                          from the headers setter
    Content-Type / Content-Length + body      from response.send_file()
    status 200

If the metadata lookup, the headers setter or the transfer fails, the
send failure policy decides: REPORT records the error and answers 500
without the caching headers, SWALLOW answers 200 as if nothing
happened.

=============================================================================
CALLING next()
=============================================================================

With ProceedPolicy.ALWAYS the handler calls next() exactly once on every
path through handle(), including after a file was served or a redirect
issued. Later stages see the populated response and must leave it
alone. ProceedPolicy.UNLESS_HANDLED stops the chain once this stage has
produced a response.

=============================================================================
"""

import logging
import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional
from urllib.parse import unquote

from ..config import ProceedPolicy, SendFailurePolicy, StaticFileOptions
from ..exceptions import CustomHeadersError, RedirectError
from ..fs import FileMetadata, FileSystem, LocalFileSystem
from ..http.request import RouterRequest
from ..http.response import RouterResponse, format_http_date
from ..http.status_codes import HTTPStatus
from ..middleware.base import Next, RouterMiddleware


logger = logging.getLogger(__name__)

SERVED_METHODS = ("GET", "HEAD")


class ServeOutcome(Enum):
    """Result of attempting to serve a single file."""

    SENT = "sent"
    FAILED = "failed"


class ResponseHeadersSetter(ABC):
    """
    Hook for adding headers to every served file.

        class Immutable(ResponseHeadersSetter):
            def set_custom_headers(self, response, file_path, metadata):
                if ".min." in file_path:
                    response.set_header("Cache-Control", "max-age=31536000, immutable")

    Called after Cache-Control and Last-Modified are set, before the
    body is attached, so it may override either.
    """

    @abstractmethod
    def set_custom_headers(
        self,
        response: RouterResponse,
        file_path: str,
        metadata: FileMetadata,
    ) -> None:
        """Add or replace headers on ``response`` for ``file_path``."""


class FunctionHeadersSetter(ResponseHeadersSetter):
    """Wraps a plain function ``(response, file_path, metadata)``."""

    def __init__(self, func: Callable[[RouterResponse, str, FileMetadata], None]):
        self._func = func

    def set_custom_headers(self, response, file_path, metadata) -> None:
        self._func(response, file_path, metadata)


class StaticFileHandler(RouterMiddleware):
    """
    Serves files from ``options.root_path`` relative to the working directory.

    Usage:
        static = StaticFileHandler(StaticFileOptions(
            root_path="/public",
            possible_extensions=("html", "htm"),
            max_age_cache_control_seconds=3600,
        ))
        router.use("/static", static)

    The handler holds no per-request state. One instance serves any
    number of concurrent requests.
    """

    def __init__(
        self,
        options: Optional[StaticFileOptions] = None,
        file_system: Optional[FileSystem] = None,
    ):
        """
        Args:
            options:     Resolution and header options. Validated here;
                         invalid options raise ConfigError.
            file_system: Filesystem to query. Defaults to the local disk.
        """
        self.options = options or StaticFileOptions()
        self.options.validate()
        self.file_system = file_system or LocalFileSystem()

    def handle(self, request: RouterRequest, response: RouterResponse, next: Next) -> None:
        """Serve the file the request names, if any, then continue the chain."""
        if request.method not in SERVED_METHODS:
            next()
            return

        file_path = self.resolve_path(request)

        if file_path.endswith("/"):
            if not self.options.serve_index_for_directory:
                logger.debug(f"{request.original_url}: directory index disabled")
                next()
                return
            file_path += self.options.index_file

        if self._escapes_root(file_path):
            logger.warning(f"Refusing path outside root: {request.original_url}")
            handled = False
        else:
            handled = self._serve_path(file_path, request.original_url, response)

        if handled and self.options.proceed_policy is ProceedPolicy.UNLESS_HANDLED:
            return
        next()

    def resolve_path(self, request: RouterRequest) -> str:
        """
        Candidate path for a request, relative to the working directory.

        The mount prefix the router matched (``request.route``) is
        removed from the URL: a trailing "*" is dropped and a "/"
        appended if missing. The remainder is percent-decoded. A URL
        outside the prefix maps to the root itself.

            route "/static/*", url "/static/css/a.css" → "./public/css/a.css"
            route "/static",   url "/static/"          → "./public/"
            route "/static/*", url "/static/my%20dir"  → "./public/my dir"
            route None,        url "/anything"         → "./public"
        """
        file_path = self.options.root_path
        route = request.route

        if route is not None:
            if route.endswith("*"):
                route = route[:-1]
            if not route.endswith("/"):
                route += "/"
            if request.original_url.startswith(route):
                file_path += "/" + unquote(request.original_url[len(route):])

        return "." + file_path

    def serve_file(self, file_path: str, response: RouterResponse) -> ServeOutcome:
        """
        Set caching headers and attach ``file_path`` to the response.

        Failures reading metadata, running the custom headers setter or
        transferring the file never raise; they are handled per
        ``options.send_failure_policy``.
        """
        options = self.options
        try:
            metadata = self.file_system.get_metadata(file_path)

            response.set_header("Cache-Control", f"max-age={options.max_age_cache_control_seconds}")
            if options.add_last_modified_header:
                response.set_header("Last-Modified", format_http_date(metadata.modification_time))
            if options.custom_headers_setter is not None:
                self._set_custom_headers(response, file_path, metadata)

            response.send_file(file_path)
        except OSError as e:
            return self._send_failed(file_path, response, e)
        except CustomHeadersError as e:
            return self._send_failed(file_path, response, e)

        response.status(HTTPStatus.OK)
        logger.debug(f"Served {file_path} ({metadata.size} bytes)")
        return ServeOutcome.SENT

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _serve_path(self, file_path: str, original_url: str, response: RouterResponse) -> bool:
        """Look up a candidate path and act on it. True if a response was produced."""
        exists, is_directory = self.file_system.exists(file_path)

        if exists:
            if is_directory:
                if self.options.redirect_on_directory:
                    return self._redirect_to_directory(original_url, response)
                logger.debug(f"{file_path} is a directory, redirect disabled")
                return False
            self.serve_file(file_path, response)
            return True

        for ext in self.options.possible_extensions or ():
            candidate = f"{file_path}.{ext}"
            exists, is_directory = self.file_system.exists(candidate)
            if exists and not is_directory:
                self.serve_file(candidate, response)
                return True

        logger.debug(f"No file for {original_url} ({file_path})")
        return False

    def _redirect_to_directory(self, original_url: str, response: RouterResponse) -> bool:
        location = original_url + "/"
        try:
            response.redirect(location)
        except RedirectError as e:
            logger.warning(f"Failed to redirect a request for directory to {location}: {e}")
            response.error = e
            return False
        return True

    def _set_custom_headers(self, response: RouterResponse, file_path: str, metadata: FileMetadata) -> None:
        try:
            self.options.custom_headers_setter.set_custom_headers(response, file_path, metadata)
        except Exception as e:
            raise CustomHeadersError(f"Custom headers setter failed for {file_path}: {e}") from e

    def _send_failed(self, file_path: str, response: RouterResponse, error: Exception) -> ServeOutcome:
        if self.options.send_failure_policy is SendFailurePolicy.SWALLOW:
            response.status(HTTPStatus.OK)
            return ServeOutcome.FAILED

        logger.warning(f"Failed to send {file_path}: {type(error).__name__}: {error}")
        # Headers of the file, not of this 500
        response.remove_header("Cache-Control")
        response.remove_header("Last-Modified")
        response.error = error
        response.status(HTTPStatus.INTERNAL_SERVER_ERROR)
        return ServeOutcome.FAILED

    def _escapes_root(self, file_path: str) -> bool:
        root = os.path.normpath("." + self.options.root_path)
        relative = os.path.relpath(os.path.normpath(file_path), root)
        return relative == ".." or relative.startswith(".." + os.sep)


def serve_static(root_path: str = "/public", **options) -> StaticFileHandler:
    """
    Create a static file handler.

    Example:
        router.use("/static", serve_static("/public", max_age_cache_control_seconds=86400))
    """
    return StaticFileHandler(StaticFileOptions(root_path=root_path, **options))
