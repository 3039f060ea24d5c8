"""Listening socket setup."""

from __future__ import annotations

import socket

from .config import ServerConfig
from .logger import log_message


def init_server(config: ServerConfig) -> socket.socket:
    """Open a TCP socket listening on all interfaces at ``config.port``.

    Failures are logged and the OSError is raised again.
    """
    try:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as exc:
        log_message("ERROR: socket() failed: %s", exc.strerror)
        raise

    try:
        try:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError as exc:
            log_message("ERROR: setsockopt(SO_REUSEADDR) failed: %s", exc.strerror)
            raise
        try:
            listener.bind(("", config.port))
        except OSError as exc:
            log_message("ERROR: bind() failed on port %d: %s", config.port, exc.strerror)
            raise
        try:
            listener.listen(socket.SOMAXCONN)
        except OSError as exc:
            log_message("ERROR: listen() failed: %s", exc.strerror)
            raise
    except OSError:
        listener.close()
        raise

    log_message("Server listening on port %d", config.port)
    return listener