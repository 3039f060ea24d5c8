"""Command entry point: acceptor loop dispatching to worker threads."""

from __future__ import annotations

import argparse
import itertools
import signal
import socket
import sys
import threading

from .config import ServerConfig, load_config
from .logger import log_message, logger_close, logger_init
from .server import init_server
from .worker import Worker

_ACCEPT_POLL = 0.5


class Server:
    """Accepts connections and hands them to workers in turn."""

    def __init__(self, config: ServerConfig) -> None:
        if config.num_workers <= 0:
            raise ValueError("num_workers must be positive")
        self.config = config
        self._listener = init_server(config)
        self._listener.settimeout(_ACCEPT_POLL)
        log_message("Creating %d worker threads...", config.num_workers)
        self.workers = [Worker(i, config) for i in range(config.num_workers)]
        self._running = threading.Event()
        self._running.set()

    @property
    def address(self) -> tuple[str, int]:
        return self._listener.getsockname()

    def serve_forever(self) -> None:
        """Accept connections until :meth:`shutdown` is called, then clean up."""
        for worker in self.workers:
            worker.start()
        log_message("Main thread is now running as an Acceptor.")
        next_worker = itertools.cycle(self.workers)
        try:
            while self._running.is_set():
                try:
                    client, _ = self._listener.accept()
                except socket.timeout:
                    continue
                except OSError as exc:
                    if not self._running.is_set():
                        break
                    log_message("ERROR: accept() failed in main loop: %s", exc.strerror)
                    continue
                worker = next(next_worker)
                fd = client.fileno()
                try:
                    worker.dispatch(client)
                except (OSError, RuntimeError):
                    log_message("ERROR: Failed to dispatch fd %d to worker %d", fd, worker.worker_id)
                    client.close()
                else:
                    log_message("Main: Dispatched fd %d to worker %d", fd, worker.worker_id)
        finally:
            self._close()

    def shutdown(self) -> None:
        """Make :meth:`serve_forever` return; safe from signal handlers and threads."""
        self._running.clear()

    def _close(self) -> None:
        log_message("Server shutting down...")
        for worker in self.workers:
            worker.stop()
        for worker in self.workers:
            worker.join()
            log_message("Worker thread %d joined.", worker.worker_id)
        self._listener.close()
        log_message("Server shutdown complete.")


def _install_signal_handlers(server: Server) -> dict:
    if threading.current_thread() is not threading.main_thread():
        return {}

    def handler(signum, frame):
        server.shutdown()

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, handler)
    return previous


def _restore_signal_handlers(previous: dict) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="ssgserve", description="Serve a static site over HTTP.")
    parser.add_argument("-c", "--config", default="server.conf", help="configuration file")
    args = parser.parse_args(argv)

    config = ServerConfig()
    try:
        load_config(args.config, config)
    except OSError as exc:
        print(f"Error: could not open config file: {exc.strerror}", file=sys.stderr)
        print("Failed to load configuration, using defaults.", file=sys.stderr)

    try:
        logger_init(config.log_file)
    except OSError as exc:
        print(f"Error: could not open log file: {exc.strerror}", file=sys.stderr)
        print("Failed to initialize logger.", file=sys.stderr)
        return 1

    try:
        log_message("Server starting...")
        try:
            server = Server(config)
        except (OSError, OverflowError, ValueError):
            log_message("FATAL: Server initialization failed.")
            return 1
        previous = _install_signal_handlers(server)
        print("Server is running. Press Ctrl+C to exit.")
        try:
            server.serve_forever()
        finally:
            _restore_signal_handlers(previous)
        return 0
    finally:
        logger_close()


if __name__ == "__main__":
    raise SystemExit(main())