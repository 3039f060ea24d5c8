"""Worker threads that serve the connections handed to them."""

from __future__ import annotations

import queue
import selectors
import socket
import threading
from contextlib import suppress
from dataclasses import dataclass

from .config import ServerConfig
from .http_handler import (
    BadRequestError,
    parse_http_request,
    send_error_response,
    serve_static_file,
)
from .logger import log_message
from .timer import TimerNode, TimerWheel

REQUEST_BUFFER_SIZE = 8192
CONNECTION_TIMEOUT = 60

_WHEEL_SLOTS = 60
_WHEEL_INTERVAL = 1
_POLL_TIMEOUT = 1.0
_WAKE_READ_SIZE = 4096


@dataclass(eq=False)
class Connection:
    """A client socket and its pending idle timeout."""

    sock: socket.socket
    timer_node: TimerNode | None = None


class Worker:
    """Serves client sockets passed in through :meth:`dispatch` on its own thread."""

    def __init__(self, worker_id: int, config: ServerConfig) -> None:
        self.worker_id = worker_id
        self.config = config
        self._wheel = TimerWheel(_WHEEL_SLOTS, _WHEEL_INTERVAL)
        self._selector = selectors.DefaultSelector()
        self._jobs: queue.SimpleQueue[socket.socket] = queue.SimpleQueue()
        self._wake_recv, self._wake_send = socket.socketpair()
        self._selector.register(self._wake_recv, selectors.EVENT_READ, None)
        self._connections: set[Connection] = set()
        self._lock = threading.Lock()
        self._stopped = False
        self._thread: threading.Thread | None = None

    def dispatch(self, client: socket.socket) -> None:
        """Hand ``client`` over to this worker.

        Raises RuntimeError once the worker has been stopped.
        """
        with self._lock:
            if self._stopped:
                raise RuntimeError(f"worker {self.worker_id} is stopped")
            self._jobs.put(client)
            self._wake_send.sendall(b"\0")

    def stop(self) -> None:
        """Ask the worker to finish; it exits once pending jobs are taken in."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._wake_send.close()

    def run(self) -> None:
        """Serve connections until :meth:`stop` is called."""
        log_message("Worker %d started successfully.", self.worker_id)
        running = True
        try:
            while running:
                for key, _ in self._selector.select(_POLL_TIMEOUT):
                    if key.data is None:
                        if not self._handle_wakeup():
                            running = False
                    elif key.data in self._connections:
                        self._handle_client(key.data)
                for node in self._wheel.tick():
                    self._close_connection(node.conn)
                    log_message("Worker %d: Closing connection due to timeout", self.worker_id)
        finally:
            log_message("Worker %d terminating.", self.worker_id)
            for conn in list(self._connections):
                self._close_connection(conn)
            self._wheel.clear()
            self._selector.close()
            self._wake_recv.close()

    def start(self) -> None:
        """Run the worker on a new daemon thread."""
        self._thread = threading.Thread(
            target=self.run, name=f"worker-{self.worker_id}", daemon=True
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        """Wait for the worker thread to finish."""
        if self._thread is not None:
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _handle_wakeup(self) -> bool:
        """Take in dispatched sockets; return False once the wake channel is closed."""
        try:
            data = self._wake_recv.recv(_WAKE_READ_SIZE)
        except BlockingIOError:
            return True
        while True:
            try:
                client = self._jobs.get_nowait()
            except queue.Empty:
                break
            self._accept_job(client)
        return bool(data)

    def _accept_job(self, client: socket.socket) -> None:
        conn = Connection(client)
        conn.timer_node = self._wheel.add(conn, CONNECTION_TIMEOUT)
        self._connections.add(conn)
        fd = client.fileno()
        try:
            client.setblocking(False)
            self._selector.register(client, selectors.EVENT_READ, conn)
        except (OSError, ValueError):
            self._close_connection(conn)
            return
        log_message("Worker %d: Received new job (fd: %d)", self.worker_id, fd)

    def _read_request(self, conn: Connection) -> tuple[bytes, bool]:
        """Read what is available, up to the request limit."""
        data = bytearray()
        should_close = False
        limit = REQUEST_BUFFER_SIZE - 1
        while len(data) < limit:
            try:
                chunk = conn.sock.recv(limit - len(data))
            except BlockingIOError:
                break
            except OSError:
                should_close = True
                break
            if not chunk:
                should_close = True
                break
            data += chunk
        return bytes(data), should_close

    def _respond(self, conn: Connection, data: bytes) -> bool:
        """Answer one request; return True when the connection must close."""
        try:
            request = parse_http_request(data)
        except BadRequestError:
            send_error_response(conn.sock, 400)
            return True
        if request.method != "GET":
            send_error_response(conn.sock, 405)
            return True

        try:
            conn.sock.settimeout(CONNECTION_TIMEOUT)
            served = serve_static_file(conn.sock, request.uri, self.config)
        except OSError:
            return True
        finally:
            with suppress(OSError):
                conn.sock.setblocking(False)
        if not served:
            return True

        self._wheel.remove(conn.timer_node)
        conn.timer_node = self._wheel.add(conn, CONNECTION_TIMEOUT)
        return False

    def _handle_client(self, conn: Connection) -> None:
        data, should_close = self._read_request(conn)
        if data and self._respond(conn, data):
            should_close = True
        if should_close:
            self._close_connection(conn)

    def _close_connection(self, conn: Connection) -> None:
        if conn not in self._connections:
            return
        self._connections.discard(conn)
        with suppress(KeyError, ValueError):
            self._selector.unregister(conn.sock)
        self._wheel.remove(conn.timer_node)
        conn.timer_node = None
        fd = conn.sock.fileno()
        conn.sock.close()
        log_message("Worker %d: Closed connection on fd %d", self.worker_id, fd)