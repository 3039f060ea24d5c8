"""Request-line parsing and static file responses."""

from __future__ import annotations

import os
import stat
from contextlib import suppress
from dataclasses import dataclass
from functools import partial

from .config import ServerConfig
from .logger import log_message

_CHUNK_SIZE = 4096

_MIME_TYPES = (
    (".html", "text/html"),
    (".css", "text/css"),
    (".js", "application/javascript"),
    (".png", "image/png"),
    (".jpg", "image/jpeg"),
    (".gif", "image/gif"),
)

_STATUS_MESSAGES = {
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
}


class BadRequestError(ValueError):
    """The request line is malformed or asks for a path outside the root."""


@dataclass
class HttpRequest:
    method: str
    uri: str


def parse_http_request(data: bytes | str) -> HttpRequest:
    """Take the method and URI from the start of a request."""
    if isinstance(data, bytes):
        data = data.decode("latin-1")
    data = data.split("\0", 1)[0]
    tokens = [token for token in data.split(" ") if token]
    if len(tokens) < 2:
        raise BadRequestError("request line needs a method and a URI")
    method, uri = tokens[0], tokens[1]
    if ".." in uri:
        raise BadRequestError(f"path traversal in URI {uri!r}")
    return HttpRequest(method, uri)


def mime_type(filename: str) -> str:
    """Guess a content type from the extensions found in ``filename``."""
    for extension, kind in _MIME_TYPES:
        if extension in filename:
            return kind
    return "application/octet-stream"


def error_response(status_code: int) -> bytes:
    """Build a complete HTML error response; unknown codes read as 500."""
    message = _STATUS_MESSAGES.get(status_code, "Internal Server Error")
    body = f"<html><body><h1>{status_code} {message}</h1></body></html>"
    return (
        f"HTTP/1.1 {status_code} {message}\r\n"
        "Content-Type: text/html\r\n"
        f"Content-Length: {len(body)}\r\n"
        "Connection: close\r\n"
        "\r\n"
        f"{body}"
    ).encode("latin-1")


def send_error_response(sock, status_code: int) -> None:
    """Send an error response; a failed write is ignored."""
    with suppress(OSError):
        sock.sendall(error_response(status_code))


def resolve_path(request_uri: str, document_root: str) -> str:
    """Map a request URI to a file path under ``document_root``."""
    if request_uri == "/":
        return f"{document_root}/index.html"
    if request_uri.startswith(("/images/", "/static/")):
        return f"{document_root}{request_uri}"
    dot = request_uri.rfind(".")
    if dot >= 0 and request_uri[dot:] in (".html", ".css", ".js"):
        return f"{document_root}{request_uri}"
    return f"{document_root}{request_uri}.html"


def serve_static_file(sock, request_uri: str, config: ServerConfig) -> bool:
    """Send the file for ``request_uri``, or an error response.

    Returns True when the file was sent and False when an error response
    was sent instead. Errors writing the file itself propagate.
    """
    filepath = resolve_path(request_uri, config.document_root)
    try:
        file_stat = os.stat(filepath)
    except FileNotFoundError:
        log_message("INFO: File not found for URI '%s', mapped to '%s'", request_uri, filepath)
        send_error_response(sock, 404)
        return False
    except OSError as exc:
        log_message("ERROR: stat error for %s: %s", filepath, exc.strerror)
        send_error_response(sock, 500)
        return False

    if not stat.S_ISREG(file_stat.st_mode):
        send_error_response(sock, 403)
        log_message("DEBUG: Not a regular file. Returning -1.")
        return False

    try:
        handle = open(filepath, "rb")
    except OSError:
        send_error_response(sock, 403)
        log_message("DEBUG: Permission denied. Returning -1.")
        return False

    with handle:
        header = (
            "HTTP/1.1 200 OK\r\n"
            f"Content-Type: {mime_type(filepath)}\r\n"
            f"Content-Length: {file_stat.st_size}\r\n"
            "\r\n"
        )
        sock.sendall(header.encode("latin-1"))
        for chunk in iter(partial(handle.read, _CHUNK_SIZE), b""):
            sock.sendall(chunk)

    log_message("DEBUG: File sent successfully. Returning 0.")
    return True