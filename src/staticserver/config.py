"""
=============================================================================
CONFIGURATION
=============================================================================

Two configuration objects:

    StaticFileOptions   how the static handler resolves and serves files.
                        Frozen: built once at startup, shared read-only by
                        every request thread.

    ServerConfig        where the bundled HTTP server listens and how it
                        logs.

Both follow the same shape: a dataclass with defaults, a from_env()
constructor for 12-factor deployments, and validate() for fail-fast
checks at startup.

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    STATIC_ROOT           root_path                        (/public)
    STATIC_EXTENSIONS     possible_extensions, comma list  (unset)
    STATIC_MAX_AGE        max_age_cache_control_seconds    (0)
    STATIC_INDEX          serve_index_for_directory        (true)
    STATIC_REDIRECT       redirect_on_directory            (true)
    STATIC_LAST_MODIFIED  add_last_modified_header         (true)

    STATIC_HOST           ServerConfig.host                (127.0.0.1)
    STATIC_PORT           ServerConfig.port                (8080)
    STATIC_LOG_LEVEL      ServerConfig.log_level           (INFO)

=============================================================================
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

from .exceptions import ConfigError

if TYPE_CHECKING:
    from .handlers.static import ResponseHeadersSetter


class ProceedPolicy(Enum):
    """
    When the static handler hands control to the next pipeline stage.

    ALWAYS:          after every branch, including a served file or an
                     issued redirect. Later stages must tolerate an
                     already-populated response.
    UNLESS_HANDLED:  only when no file was served and no redirect was
                     issued.
    """

    ALWAYS = "always"
    UNLESS_HANDLED = "unless-handled"


class SendFailurePolicy(Enum):
    """
    What the static handler does when a matched file cannot be sent.

    REPORT:   log, record the error on response.error, status 500.
    SWALLOW:  drop the error silently and force status 200.
    """

    REPORT = "report"
    SWALLOW = "swallow"


def normalize_root_path(path: str) -> str:
    """
    Normalize a served root to one leading slash and no trailing slash.

        "public"    → "/public"
        "/public/"  → "/public"
        "//a//b//"  → "/a//b"
        "/"         → ""        (the working directory itself)
    """
    stripped = path.strip("/")
    return "/" + stripped if stripped else ""


@dataclass(frozen=True)
class StaticFileOptions:
    """
    Options for StaticFileHandler.

    Attributes:
        root_path: Directory served, relative to the working directory.
            Normalized on construction (see normalize_root_path).
        possible_extensions: Suffixes, without the dot, appended in
            order when the literal path does not exist. The first one
            naming a regular file wins. Example: ("html", "htm").
        serve_index_for_directory: Serve index_file for paths ending in
            "/". When False such requests are passed on untouched.
        add_last_modified_header: Send Last-Modified from the file mtime.
        max_age_cache_control_seconds: Value of max-age in Cache-Control.
        redirect_on_directory: Redirect a directory path without a
            trailing slash to the same path with one.
        custom_headers_setter: Hook called before the body is sent to add
            headers of its own.
        proceed_policy: When to call next(). See ProceedPolicy.
        send_failure_policy: How to treat a file that cannot be sent.
            See SendFailurePolicy.
        index_file: File name served for directory requests.
    """

    root_path: str = "/public"
    possible_extensions: Optional[Tuple[str, ...]] = None
    serve_index_for_directory: bool = True
    add_last_modified_header: bool = True
    max_age_cache_control_seconds: int = 0
    redirect_on_directory: bool = True
    custom_headers_setter: Optional["ResponseHeadersSetter"] = None
    proceed_policy: ProceedPolicy = ProceedPolicy.ALWAYS
    send_failure_policy: SendFailurePolicy = SendFailurePolicy.REPORT
    index_file: str = "index.html"

    def __post_init__(self):
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "root_path", normalize_root_path(self.root_path))
        if self.possible_extensions is not None:
            object.__setattr__(self, "possible_extensions", tuple(self.possible_extensions))

    @classmethod
    def from_env(cls, **overrides) -> "StaticFileOptions":
        """
        Create options from STATIC_* environment variables.

        Keyword arguments override both the environment and the defaults.
        """
        values = dict(
            root_path=os.getenv("STATIC_ROOT", "/public"),
            possible_extensions=_env_list("STATIC_EXTENSIONS"),
            max_age_cache_control_seconds=int(os.getenv("STATIC_MAX_AGE", "0")),
            serve_index_for_directory=_env_bool("STATIC_INDEX", True),
            redirect_on_directory=_env_bool("STATIC_REDIRECT", True),
            add_last_modified_header=_env_bool("STATIC_LAST_MODIFIED", True),
        )
        values.update(overrides)
        return cls(**values)

    def validate(self) -> None:
        """
        Check option values, raising ConfigError on the first problem.
        """
        if self.max_age_cache_control_seconds < 0:
            raise ConfigError(
                f"max_age_cache_control_seconds must be >= 0, "
                f"got {self.max_age_cache_control_seconds}"
            )
        for ext in self.possible_extensions or ():
            if not ext or ext.startswith(".") or "/" in ext:
                raise ConfigError(
                    f"Invalid extension {ext!r}: give a bare suffix such as 'html'"
                )
        if not self.index_file or "/" in self.index_file:
            raise ConfigError(f"Invalid index file name: {self.index_file!r}")
        if not isinstance(self.proceed_policy, ProceedPolicy):
            raise ConfigError(f"Unknown proceed policy: {self.proceed_policy!r}")
        if not isinstance(self.send_failure_policy, SendFailurePolicy):
            raise ConfigError(f"Unknown send failure policy: {self.send_failure_policy!r}")


@dataclass
class ServerConfig:
    """
    Configuration for the bundled HTTP server.

    Development:
        ServerConfig(host="127.0.0.1", port=8080, log_level="DEBUG")

    Containers:
        ServerConfig(host="0.0.0.0", port=80)
    """

    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"
    log_format: str = "text"
    server_name: str = "staticserver/1.0"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        return cls(
            host=os.getenv("STATIC_HOST", "127.0.0.1"),
            port=int(os.getenv("STATIC_PORT", "8080")),
            log_level=os.getenv("STATIC_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        # Port 0 lets the OS pick one, used by the tests.
        if not 0 <= self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}. Must be 0-65535.")
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"Invalid log level: {self.log_level}")
        if self.log_format not in ("text", "json"):
            raise ConfigError(f"log_format must be 'text' or 'json', got {self.log_format!r}")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> Optional[Sequence[str]]:
    value = os.getenv(name)
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]
