"""
HTTP building blocks shared by the pipeline stages.

    request       RouterRequest, what a stage reads
    response      RouterResponse, what a stage writes; format_http_date
    status_codes  HTTPStatus
    mime_types    Content-Type from file extension
    router        Router (import from staticserver.http.router)
"""

from .mime_types import get_content_type, get_mime_type
from .request import RouterRequest
from .response import RouterResponse, format_http_date
from .status_codes import HTTPStatus

__all__ = [
    "RouterRequest",
    "RouterResponse",
    "format_http_date",
    "HTTPStatus",
    "get_mime_type",
    "get_content_type",
]
