"""
=============================================================================
ROUTER RESPONSE
=============================================================================

A mutable response shared by every stage of the pipeline.

Unlike a value returned from a handler, a RouterResponse is passed INTO
each stage together with the request. Stages add headers, pick a status,
attach a body, and the router ends the response once the chain is done:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     RESPONSE LIFECYCLE                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   created         stages write          router / redirect()         │
    │   (no status) ──► headers, status,  ──► end()  ──► to_bytes()       │
    │                   body, error                                       │
    │                                                                      │
    │   After end(): send(), send_file() and redirect() raise.            │
    │   Headers may still be set but nothing reads them.                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FILE TRANSFER
=============================================================================

send_file() is the byte-transfer primitive used by the static handler.
It reads the file, sets Content-Type from the extension (unless a stage
already chose one) and Content-Length, and raises SendFileError on any
I/O failure. Deciding what a failure means is left to the caller.

=============================================================================
"""

from datetime import datetime, timezone
from typing import Dict, Optional, Union

from ..exceptions import (
    RedirectError,
    ResponseAlreadyEndedError,
    SendFileError,
)
from .mime_types import get_content_type
from .status_codes import HTTPStatus, reason_phrase


class RouterResponse:
    """
    Response under construction.

    Attributes:
        status_code: Status chosen so far, or None if no stage set one
        headers:     Header name → value (names keep their case)
        body:        Body bytes
        error:       Non-fatal failure recorded by a stage, if any
    """

    def __init__(self, server_name: str = "staticserver"):
        self.status_code: Optional[int] = None
        self.headers: Dict[str, str] = {}
        self.body: bytes = b""
        self.error: Optional[BaseException] = None
        self.server_name = server_name
        self._ended = False

    @property
    def is_ended(self) -> bool:
        return self._ended

    # =========================================================================
    # HEADERS & STATUS
    # =========================================================================

    def set_header(self, name: str, value: str) -> "RouterResponse":
        """
        Set a header, replacing any value with the same name.

        Lookup is case-insensitive, so "cache-control" replaces
        "Cache-Control" rather than adding a second header.
        """
        existing = self._find_header(name)
        if existing is not None:
            del self.headers[existing]
        self.headers[name] = value
        return self

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        existing = self._find_header(name)
        if existing is None:
            return default
        return self.headers[existing]

    def remove_header(self, name: str) -> "RouterResponse":
        existing = self._find_header(name)
        if existing is not None:
            del self.headers[existing]
        return self

    def _find_header(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for key in self.headers:
            if key.lower() == lowered:
                return key
        return None

    def status(self, code: int) -> "RouterResponse":
        """Set the status code. Returns self for chaining."""
        self.status_code = code
        return self

    # =========================================================================
    # BODY
    # =========================================================================

    def send(self, body: Union[str, bytes]) -> "RouterResponse":
        """
        Attach a body. Strings are encoded as UTF-8.

        Raises:
            ResponseAlreadyEndedError: If the response was already ended.
        """
        if self._ended:
            raise ResponseAlreadyEndedError("Cannot send a body on an ended response")
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.body = body
        self.set_header("Content-Length", str(len(body)))
        return self

    def send_file(self, path: str) -> "RouterResponse":
        """
        Attach the contents of a file as the body.

        Args:
            path: Filesystem path of a regular file.

        Raises:
            SendFileError: If the response was already ended or the file
                           cannot be read.
        """
        if self._ended:
            raise SendFileError("Cannot send a file on an ended response", path=path)

        try:
            with open(path, "rb") as fh:
                content = fh.read()
        except OSError as e:
            raise SendFileError(f"Failed to read {path}: {e}", path=path) from e

        if self.get_header("Content-Type") is None:
            self.set_header("Content-Type", get_content_type(path))
        self.body = content
        self.set_header("Content-Length", str(len(content)))
        return self

    def redirect(self, location: str, status: int = HTTPStatus.FOUND) -> "RouterResponse":
        """
        Redirect the client and end the response.

        Args:
            location: Value of the Location header.
            status:   A 3xx status, 302 Found by default.

        Raises:
            RedirectError: If the response was already ended or the
                           status is not a redirect.
        """
        if self._ended:
            raise RedirectError(
                f"Cannot redirect to {location}: response already ended",
                location=location,
            )
        if not 300 <= int(status) < 400:
            raise RedirectError(f"Not a redirect status: {status}", location=location)

        self.status_code = status
        self.set_header("Location", location)
        self.body = b""
        self.set_header("Content-Length", "0")
        return self.end()

    def end(self) -> "RouterResponse":
        """
        Mark the response complete. A response with no status becomes 200.

        Raises:
            ResponseAlreadyEndedError: If end() was already called.
        """
        if self._ended:
            raise ResponseAlreadyEndedError("Response already ended")
        if self.status_code is None:
            self.status_code = HTTPStatus.OK
        self._ended = True
        return self

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    @property
    def status_line(self) -> str:
        code = int(self.status_code if self.status_code is not None else HTTPStatus.OK)
        return f"HTTP/1.1 {code} {reason_phrase(code)}"

    def to_bytes(self, include_body: bool = True) -> bytes:
        """
        Serialize to an HTTP/1.1 message.

        Content-Length, Date and Server are added when missing. HEAD
        responses pass include_body=False: the headers still describe
        the body that a GET would have returned.
        """
        response_headers = dict(self.headers)
        if self._find_header("Content-Length") is None:
            response_headers["Content-Length"] = str(len(self.body))
        if self._find_header("Date") is None:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))
        if self._find_header("Server") is None:
            response_headers["Server"] = self.server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + (self.body if include_body else b"")

    def __repr__(self) -> str:
        return (
            f"RouterResponse(status={self.status_code}, "
            f"headers={len(self.headers)}, body={len(self.body)}B, ended={self._ended})"
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231 IMF-fixdate).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Wed, 01 Jan 2026 12:00:00 GMT

    Naive datetimes are taken to be UTC; aware ones are converted.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
