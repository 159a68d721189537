"""
Loopback HTTP server for integration tests.

Routes:
    /short          301 -> /long
    /found          302 -> /long
    /see-other      303 -> /long
    /temp           307 -> /long
    /perm           308 -> /long
    /long           200, body "<METHOD> received"
    /loop           302 -> /loop
    /slow-first-byte  sleeps before sending anything
    /slow-headers   status line at once, then a long header one byte every 10ms
    /drip           Content-Length 20, one byte every 0.1s
    /upload         echoes the request body and Content-Type
"""

import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

REDIRECTS = {
    "/short": 301,
    "/found": 302,
    "/see-other": 303,
    "/temp": 307,
    "/perm": 308,
}


class _Handler(BaseHTTPRequestHandler):

    def log_message(self, format, *args):
        pass

    def do_GET(self):
        self._dispatch()

    def do_HEAD(self):
        self._dispatch()

    def do_POST(self):
        self._dispatch()

    def do_PUT(self):
        self._dispatch()

    def _dispatch(self):
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        path = self.path.split("?", 1)[0]
        self.server.seen.append((self.command, path, body))

        try:
            if path in REDIRECTS:
                self._send(REDIRECTS[path], b"", {"Location": "/long"})
            elif path == "/loop":
                self._send(302, b"", {"Location": "/loop"})
            elif path == "/long":
                self._send(200, f"{self.command} received".encode())
            elif path == "/slow-first-byte":
                time.sleep(1.0)
                self._send(200, b"late")
            elif path == "/slow-headers":
                self.wfile.write(b"HTTP/1.1 200 OK\r\n")
                for byte in b"X-Padding: " + b"p" * 400 + b"\r\nContent-Length: 0\r\n\r\n":
                    self.wfile.write(bytes([byte]))
                    time.sleep(0.01)
            elif path == "/drip":
                self.send_response(200)
                self.send_header("Content-Length", "20")
                self.end_headers()
                for _ in range(20):
                    self.wfile.write(b"x")
                    self.wfile.flush()
                    time.sleep(0.1)
            elif path == "/upload":
                self._send(200, body, {"Content-Type": "application/octet-stream",
                                       "X-Received-Content-Type": self.headers.get("Content-Type", "")})
            else:
                self._send(404, b"not found")
        except (BrokenPipeError, ConnectionResetError):
            # Client gave up (timeout tests)
            pass

    def _send(self, status, body, headers=None):
        self.send_response(status)
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)


class LoopbackServer(ThreadingHTTPServer):
    daemon_threads = True
    block_on_close = False

    def __init__(self):
        super().__init__(("127.0.0.1", 0), _Handler)
        self.seen = []

    @property
    def url(self):
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"


@pytest.fixture(scope="module")
def server():
    """Run the loopback server for the whole module."""
    httpd = LoopbackServer()
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd
    httpd.shutdown()
    httpd.server_close()


@pytest.fixture
def seen(server):
    """Requests received by the server during one test."""
    server.seen.clear()
    return server.seen


@pytest.fixture
def refused_url():
    """URL of a local port nothing listens on."""
    sock = socket.socket()
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"http://127.0.0.1:{port}/"
