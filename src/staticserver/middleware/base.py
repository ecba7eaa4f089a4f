"""
=============================================================================
MIDDLEWARE INTERFACE
=============================================================================

Every pipeline stage implements one method:

    handle(request, response, next) -> None

The request and response are shared by all stages. A stage reads the
request, writes to the response, and calls next() to give the following
matching stage its turn:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  CHAIN OF RESPONSIBILITY, IN PLACE                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   router ──► Logging.handle(req, res, next)                         │
    │                 │ start timer                                       │
    │                 └─► next() ──► Static.handle(req, res, next)        │
    │                                   │ set headers, attach file        │
    │                                   └─► next() ──► ... ──► (end)      │
    │                 ◄──────────────────────────────────────────────     │
    │                 │ log status and duration                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing is returned: results travel through the response object. A stage
that never calls next() stops the chain; the router then ends the
response with whatever it holds.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..http.request import RouterRequest
from ..http.response import RouterResponse


# Continues the chain with the next matching stage.
Next = Callable[[], None]

HandlerFunc = Callable[[RouterRequest, RouterResponse, Next], None]


class RouterMiddleware(ABC):
    """
    Abstract base class for pipeline stages.

        class PoweredBy(RouterMiddleware):
            def handle(self, request, response, next):
                response.set_header("X-Powered-By", "staticserver")
                next()
    """

    @abstractmethod
    def handle(self, request: RouterRequest, response: RouterResponse, next: Next) -> None:
        """
        Process the request.

        Args:
            request:  The incoming request, with ``route`` set to the
                      mount pattern that matched this stage
            response: The shared response under construction
            next:     Call to continue with the next matching stage
        """

    @property
    def name(self) -> str:
        return self.__class__.__name__


class FunctionMiddleware(RouterMiddleware):
    """
    Wraps a plain function ``(request, response, next)`` as a stage.

        def hello(request, response, next):
            response.send("hello")
            next()

        router.get("/hello", hello)    # wrapped automatically
    """

    def __init__(self, func: HandlerFunc, name: Optional[str] = None):
        self._func = func
        self._name = name or getattr(func, "__name__", "function")

    def handle(self, request: RouterRequest, response: RouterResponse, next: Next) -> None:
        self._func(request, response, next)

    @property
    def name(self) -> str:
        return self._name


def function_middleware(func: HandlerFunc) -> FunctionMiddleware:
    """Decorator form of FunctionMiddleware."""
    return FunctionMiddleware(func)


def as_middleware(handler) -> RouterMiddleware:
    """Accept either a RouterMiddleware or a plain handler function."""
    if isinstance(handler, RouterMiddleware):
        return handler
    if callable(handler):
        return FunctionMiddleware(handler)
    raise TypeError(f"Not a middleware or handler function: {handler!r}")
