import re
import socket

import pytest

from ssgserve.config import ServerConfig
from ssgserve.logger import logger_close, logger_init
from ssgserve.worker import Worker

INDEX_BODY = b"<html><body>home</body></html>"
CSS_BODY = b"body { color: black; }"


@pytest.fixture
def log_path(tmp_path):
    path = tmp_path / "server.log"
    logger_init(str(path))
    yield path
    logger_close()


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_BODY)
    (root / "style.css").write_bytes(CSS_BODY)
    return root


@pytest.fixture
def worker(site, log_path):
    running = Worker(0, ServerConfig(document_root=str(site)))
    running.start()
    yield running
    running.stop()
    running.join(5)


def _connect(worker):
    server_side, client_side = socket.socketpair()
    worker.dispatch(server_side)
    client_side.settimeout(5)
    return client_side


def _read_response(sock):
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = sock.recv(4096)
        if not chunk:
            break
        data += chunk
    head, _, body = data.partition(b"\r\n\r\n")
    length = int(re.search(rb"Content-Length: (\d+)", head).group(1))
    while len(body) < length:
        chunk = sock.recv(4096)
        if not chunk:
            break
        body += chunk
    return head, body


def test_serves_index(worker):
    with _connect(worker) as client:
        client.sendall(b"GET / HTTP/1.1\r\n\r\n")
        head, body = _read_response(client)
    assert head.startswith(b"HTTP/1.1 200 OK\r\n")
    assert b"Content-Type: text/html" in head
    assert body == INDEX_BODY


def test_keeps_connection_for_next_request(worker):
    with _connect(worker) as client:
        client.sendall(b"GET / HTTP/1.1\r\n\r\n")
        _, first = _read_response(client)
        client.sendall(b"GET /style.css HTTP/1.1\r\n\r\n")
        head, second = _read_response(client)
    assert first == INDEX_BODY
    assert second == CSS_BODY
    assert b"Content-Type: text/css" in head


def test_other_method_is_rejected_and_closed(worker):
    with _connect(worker) as client:
        client.sendall(b"POST / HTTP/1.1\r\n\r\n")
        head, body = _read_response(client)
        assert client.recv(1) == b""
    assert head.startswith(b"HTTP/1.1 405 Method Not Allowed")
    assert b"405 Method Not Allowed" in body


@pytest.mark.parametrize("request_line", [b"GARBAGE", b"GET /../secret HTTP/1.1\r\n\r\n"])
def test_bad_request_is_rejected_and_closed(worker, request_line):
    with _connect(worker) as client:
        client.sendall(request_line)
        head, _ = _read_response(client)
        assert client.recv(1) == b""
    assert head.startswith(b"HTTP/1.1 400 Bad Request")


def test_missing_file_gives_404_and_closes(worker):
    with _connect(worker) as client:
        client.sendall(b"GET /missing HTTP/1.1\r\n\r\n")
        head, _ = _read_response(client)
        assert client.recv(1) == b""
    assert head.startswith(b"HTTP/1.1 404 Not Found")


def test_stop_ends_thread_and_closes_connections(worker, log_path):
    client = _connect(worker)
    with client:
        client.sendall(b"GET / HTTP/1.1\r\n\r\n")
        _read_response(client)
        worker.stop()
        worker.join(5)
        assert worker.is_alive() is False
        assert client.recv(1) == b""
    log = log_path.read_text()
    assert "Worker 0 started successfully." in log
    assert "Worker 0 terminating." in log


def test_dispatch_after_stop_raises(worker):
    worker.stop()
    server_side, client_side = socket.socketpair()
    with server_side, client_side:
        with pytest.raises(RuntimeError):
            worker.dispatch(server_side)


def test_new_jobs_are_logged(worker, log_path):
    with _connect(worker) as client:
        client.sendall(b"GET / HTTP/1.1\r\n\r\n")
        _read_response(client)
    jobs = re.findall(r"Worker 0: Received new job \(fd: (\d+)\)", log_path.read_text())
    assert len(jobs) == 1
    assert int(jobs[0]) >= 0