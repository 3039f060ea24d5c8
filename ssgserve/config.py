"""Server configuration: defaults and the ``key = value`` file format."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

_KEY_MAX_LEN = 63
_VALUE_MAX_LEN = 191
_C_WHITESPACE = " \t\n\r\f\v"

_KEY_RE = re.compile(r"[ \t\n\r\f\v]*([^= ]+)")
_VALUE_RE = re.compile(r"[ \t\n\r\f\v]*=[ \t\n\r\f\v]*([^\n]+)")
_INT_RE = re.compile(r"[ \t\n\r\f\v]*([+-]?\d+)")


@dataclass
class ServerConfig:
    """Settings for the static file server."""

    port: int = 8080
    num_workers: int = 4
    document_root: str = "./ssg_output"
    log_file: str = "server.log"


def _to_int(text: str) -> int:
    """Read a leading integer the lenient way: no digits gives 0."""
    match = _INT_RE.match(text)
    return int(match.group(1)) if match else 0


def _split_line(line: str) -> tuple[str, str] | None:
    """Return the trimmed key and value of a setting line, or None."""
    key_match = _KEY_RE.match(line)
    if key_match is None or len(key_match.group(1)) > _KEY_MAX_LEN:
        return None
    value_match = _VALUE_RE.match(line, key_match.end())
    if value_match is None:
        return None
    key = key_match.group(1).strip(_C_WHITESPACE)
    value = value_match.group(1)[:_VALUE_MAX_LEN].strip(_C_WHITESPACE)
    return key, value


def parse_config_lines(lines: Iterable[str], config: ServerConfig) -> ServerConfig:
    """Apply the settings found in ``lines`` to ``config`` and return it.

    Lines starting with ``#`` and empty lines are skipped, as are lines
    that are not of the form ``key = value`` and unknown keys.
    """
    for line in lines:
        if not line or line[0] in "#\n":
            continue
        pair = _split_line(line)
        if pair is None:
            continue
        key, value = pair
        if key == "port":
            config.port = _to_int(value)
        elif key == "num_workers":
            config.num_workers = _to_int(value)
        elif key == "document_root":
            config.document_root = value
        elif key == "log_file":
            config.log_file = value
    return config


def load_config(filename: str, config: ServerConfig) -> ServerConfig:
    """Read ``filename`` into ``config`` and return it.

    Raises OSError when the file cannot be opened.
    """
    with open(filename, encoding="utf-8", errors="surrogateescape") as handle:
        return parse_config_lines(handle, config)