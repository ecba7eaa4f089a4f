"""
=============================================================================
ROUTER REQUEST
=============================================================================

The request object handed to every pipeline stage.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WHAT A STAGE CAN SEE                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /static/css/site.css?v=3 HTTP/1.1                             │
    │   ─┬─ ──────────┬────────────                                       │
    │    │            └── original_url  "/static/css/site.css"            │
    │    └── method     "GET"                                              │
    │                                                                      │
    │   router mount "/static/*"                                          │
    │    └── route      "/static/*"   (set by the router per stage)       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The router rewrites ``route`` and ``path_params`` before invoking each
stage, so a stage always sees the mount pattern that matched it.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
from urllib.parse import parse_qs, unquote, urlsplit


@dataclass
class RouterRequest:
    """
    A request travelling through the router pipeline.

    Attributes:
        method:       HTTP method, uppercase ("GET", "HEAD", ...)
        original_url: Request path as received, without query string,
                      still percent-encoded
        route:        Pattern of the mount point currently handling the
                      request ("/static/*"), or None outside a router
        headers:      Header name → value, names lowercased
        query_params: Parsed query string, name → list of values
        path_params:  Values captured by ``:name`` / ``*name`` segments
        client_address: (ip, port) of the peer
    """

    method: str
    original_url: str
    route: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list] = field(default_factory=dict)
    path_params: Dict[str, str] = field(default_factory=dict)
    client_address: Tuple[str, int] = ("", 0)

    @classmethod
    def from_target(
        cls,
        method: str,
        target: str,
        headers: Optional[Dict[str, str]] = None,
        client_address: Tuple[str, int] = ("", 0),
    ) -> "RouterRequest":
        """
        Build a request from a raw request-target ("/a/b?x=1").

        Header names are lowercased, the path is kept as received and
        the query string is parsed.
        """
        parts = urlsplit(target)
        return cls(
            method=method.upper(),
            original_url=parts.path or "/",
            headers={k.lower(): v for k, v in (headers or {}).items()},
            query_params=parse_qs(parts.query, keep_blank_values=True),
            client_address=client_address,
        )

    @property
    def path(self) -> str:
        """``original_url`` percent-decoded ("/my%20dir" → "/my dir")."""
        return unquote(self.original_url)

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)
