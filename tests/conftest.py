"""
pytest configuration and fixtures.
"""

import os
import socket
import threading
import time
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tinyhttpd import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with recognized and unrecognized headers."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body the parser ignores."""
    body = b'{"name": "John"}'
    return (
        b"POST /api/users HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        + b"Content-Length: %d\r\n" % len(body)
        + b"\r\n"
        + body
    )


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """
    A document root with a sibling and an outside file to escape to.

        tmp_path/
        ├── secret.txt              outside the root
        ├── wwwevil/steal.txt       sibling sharing the root's name prefix
        └── www/                    the document root
            ├── index.html
            ├── style.css
            ├── app.js
            ├── README              no extension
            ├── data.xyz            unknown extension
            ├── a b.txt
            ├── sub/index.html
            ├── empty/
            ├── link_in  -> style.css
            └── link_out -> ../secret.txt
    """
    (tmp_path / "secret.txt").write_bytes(b"top secret")
    (tmp_path / "wwwevil").mkdir()
    (tmp_path / "wwwevil" / "steal.txt").write_bytes(b"stolen")

    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(b"<h1>home</h1>")
    (root / "style.css").write_bytes(b"body { color: red; }\n")
    (root / "app.js").write_bytes(b"console.log('hi');\n")
    (root / "README").write_bytes(b"read me")
    (root / "data.xyz").write_bytes(b"\x00\x01\x02")
    (root / "a b.txt").write_bytes(b"spaced")
    (root / "sub").mkdir()
    (root / "sub" / "index.html").write_bytes(b"<h1>sub</h1>")
    (root / "empty").mkdir()

    try:
        os.symlink(root / "style.css", root / "link_in")
        os.symlink(tmp_path / "secret.txt", root / "link_out")
    except (OSError, NotImplementedError):
        pass  # Symlink tests skip themselves

    return root


@pytest.fixture
def greeting_server() -> HTTPServer:
    """Server without a document root."""
    return HTTPServer(ServerConfig(port=0, log_level="WARNING"))


@pytest.fixture
def file_server(doc_root: Path) -> HTTPServer:
    """Server serving the doc_root fixture."""
    return HTTPServer(ServerConfig(
        port=0,
        document_root=str(doc_root),
        log_level="WARNING",
    ))


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: HTTPServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port},
            daemon=True
        )
        self._thread.start()

        # Wait for server to be ready
        for _ in range(50):  # 5 seconds max
            try:
                with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                    s.connect(('127.0.0.1', self.port))
                    return
            except ConnectionRefusedError:
                time.sleep(0.1)

        raise RuntimeError("Server failed to start")

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes, read until the server closes the connection."""
        with socket.create_connection(('127.0.0.1', self.port), timeout=5.0) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(doc_root: Path, free_port: int) -> Generator[TestServer, None, None]:
    """A file-serving server on a real socket."""
    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        document_root=str(doc_root),
        max_request_size=256,
        timeout=2.0,
        log_level="WARNING",
    ))

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
