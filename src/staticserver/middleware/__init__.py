"""
Pipeline stages.

    RouterMiddleware     base class, handle(request, response, next)
    FunctionMiddleware   wraps a plain function as a stage
    LoggingMiddleware    access log, one line per request

The static file stage lives in staticserver.handlers.
"""

from .base import (
    FunctionMiddleware,
    Next,
    RouterMiddleware,
    as_middleware,
    function_middleware,
)
from .logging import LoggingMiddleware

__all__ = [
    "RouterMiddleware",
    "FunctionMiddleware",
    "function_middleware",
    "as_middleware",
    "Next",
    "LoggingMiddleware",
]
