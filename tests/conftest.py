"""
pytest configuration and fixtures.
"""

import socket
import sys
import threading
from pathlib import Path
from typing import Callable, Generator

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpif import HTTPServer, RequestDispatcher, ServerConfig
from httpif.http import HTTPRequest


@pytest.fixture
def web_root(tmp_path: Path) -> Path:
    """A small site: index page, one text file and one subdirectory."""
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(b"<h1>home</h1>")
    (root / "notes.txt").write_bytes(b"hello")
    (root / "docs").mkdir()
    return root


@pytest.fixture
def config(web_root: Path) -> ServerConfig:
    """Test configuration serving web_root on a free port."""
    return ServerConfig(
        web_root=str(web_root),
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        workers=2,
        timeout=5.0,
        command_timeout=10.0,
        log_level="WARNING",
    )


@pytest.fixture
def dispatcher(config: ServerConfig) -> RequestDispatcher:
    return RequestDispatcher(config)


@pytest.fixture
def make_request() -> Callable[..., HTTPRequest]:
    """Factory for structured requests: make_request("PUT", "/a.txt", b"x")."""
    def _make(method: str, uri: str, body: bytes = None, version: str = "HTTP/1.1") -> HTTPRequest:
        return HTTPRequest(method=method, uri=uri, version=version, body=body)
    return _make


class RunningServer:
    """An HTTPServer running in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def send(self, raw: bytes) -> bytes:
        """Send raw request bytes and read until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def start_server(config: ServerConfig) -> Generator[Callable[..., RunningServer], None, None]:
    """Factory: start_server(max_request_size=64) runs a server with overrides."""
    started = []

    def _start(**overrides) -> RunningServer:
        for name, value in overrides.items():
            setattr(config, name, value)
        srv = RunningServer(HTTPServer(config))
        srv.start()
        started.append(srv)
        return srv

    yield _start

    for srv in started:
        srv.stop()


@pytest.fixture
def running_server(start_server) -> RunningServer:
    return start_server()
