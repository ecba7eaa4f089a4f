"""
pytest configuration and fixtures.
"""

import os
import threading
from typing import Generator, List, Optional, Tuple

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from staticserver import (
    LocalFileSystem,
    Router,
    RouterRequest,
    ServerConfig,
    StaticServer,
)


# Tue, 14 Nov 2023 22:13:20 GMT
FIXED_MTIME = 1700000000


@pytest.fixture
def site_dir(tmp_path: Path, monkeypatch) -> Path:
    """
    A served tree under ./public, with the working directory set to its parent.

        public/
            app.js
            index.html
            about.htm
            docs/
                index.html
            images/
                logo.png
    """
    public = tmp_path / "public"
    (public / "docs").mkdir(parents=True)
    (public / "images").mkdir()

    (public / "app.js").write_text("console.log('app');")
    (public / "index.html").write_text("<h1>home</h1>")
    (public / "about.htm").write_text("<h1>about</h1>")
    (public / "docs" / "index.html").write_text("<h1>docs</h1>")
    (public / "images" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")

    for path in public.rglob("*"):
        os.utime(path, (FIXED_MTIME, FIXED_MTIME))

    monkeypatch.chdir(tmp_path)
    return public


class RecordingFileSystem(LocalFileSystem):
    """LocalFileSystem that remembers every query made against it."""

    def __init__(self):
        self.exists_calls: List[str] = []
        self.metadata_calls: List[str] = []

    def exists(self, path: str) -> Tuple[bool, bool]:
        self.exists_calls.append(path)
        return super().exists(path)

    def get_metadata(self, path: str):
        self.metadata_calls.append(path)
        return super().get_metadata(path)

    @property
    def touched(self) -> bool:
        return bool(self.exists_calls or self.metadata_calls)


@pytest.fixture
def recording_fs() -> RecordingFileSystem:
    return RecordingFileSystem()


class NextRecorder:
    """Stands in for the pipeline's next(), counting calls."""

    def __init__(self):
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1


@pytest.fixture
def next_recorder() -> NextRecorder:
    return NextRecorder()


def make_request(method: str, url: str, route: Optional[str] = "/static/*") -> RouterRequest:
    """Request as the router would hand it to a stage mounted at ``route``."""
    return RouterRequest(method=method, original_url=url, route=route)


class BackgroundServer:
    """StaticServer running on a background thread."""

    def __init__(self, server: StaticServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self) -> None:
        self.server.bind()
        self._thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def background_server() -> Generator:
    """
    Factory: start a server for a router, stopped at teardown.

        srv = background_server(router)
        conn = http.client.HTTPConnection("127.0.0.1", srv.port)
    """
    started: List[BackgroundServer] = []

    def start(router: Router) -> BackgroundServer:
        srv = BackgroundServer(StaticServer(ServerConfig(host="127.0.0.1", port=0), router))
        srv.start()
        started.append(srv)
        return srv

    yield start

    for srv in started:
        srv.stop()
