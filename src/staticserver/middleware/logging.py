"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

Logs one line per request after the rest of the chain has run:

    127.0.0.1 - - [17/Oct/2026:10:00:00 +0000] "GET /static/app.js" 200 5120 0.84ms

Mount it first so the timing covers every later stage:

    router.use(LoggingMiddleware())
    router.use("/static", StaticFileHandler(...))

Because stages in this pipeline call next() in place, the status and
body length are read from the shared response once next() returns.

=============================================================================
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass
from typing import Optional

from .base import Next, RouterMiddleware
from ..http.request import RouterRequest
from ..http.response import RouterResponse
from ..http.status_codes import HTTPStatus


# Namespaced so access logs can be routed separately:
#   logging.getLogger("staticserver.access").addHandler(file_handler)
logger = logging.getLogger("staticserver.access")


@dataclass
class RequestLog:
    """Structured access log entry."""

    request_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str
    error: str = ""

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        if not self.error:
            del entry["error"]
        return entry

    def to_text(self) -> str:
        """Apache combined-style line."""
        line = (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )
        if self.error:
            line += f" error={self.error}"
        return line


class LoggingMiddleware(RouterMiddleware):
    """
    Request logging stage.

    Args:
        log_format: "text" (Apache-style) or "json".
        include_request_id: Add an X-Request-ID header to the response.
        log_level: Level used for access lines.
        skip_paths: Paths never logged (health checks and the like).
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = True,
        log_level: int = logging.INFO,
        skip_paths: Optional[list] = None,
    ):
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def handle(self, request: RouterRequest, response: RouterResponse, next: Next) -> None:
        request_id = str(uuid.uuid4())[:8]
        if self.include_request_id:
            response.set_header("X-Request-ID", request_id)

        start_time = time.time()
        try:
            next()
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.original_url} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise
        duration_ms = (time.time() - start_time) * 1000

        if request.original_url in self.skip_paths:
            return

        entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.original_url,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            # Still unset here means the router will answer 404
            status_code=int(response.status_code or HTTPStatus.NOT_FOUND),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
            error=type(response.error).__name__ if response.error else "",
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())
