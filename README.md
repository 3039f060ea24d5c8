# ssgserve

A small static file HTTP server for serving the output of a static site
generator. One acceptor thread hands incoming connections round-robin to a
fixed pool of worker threads. Each worker multiplexes its connections with
`selectors` and closes idle ones through a timer wheel.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Running

```
ssgserve
ssgserve --config path/to/server.conf
```

`-c` / `--config` names the configuration file; it defaults to
`server.conf` in the current directory. If that file cannot be opened, an
error is printed to stderr and the built-in defaults are used.

The command exits with status 1 when the log file cannot be opened or the
server cannot start (for example the port cannot be bound, or
`num_workers` is not positive). Ctrl+C or SIGTERM stops it: the acceptor
stops, the workers are stopped and joined, and the command exits with 0.

## Configuration

The configuration file holds `key = value` lines. Lines starting with `#`,
empty lines, lines not of that form and unknown keys are ignored.

```
# server.conf
port = 8080
num_workers = 4
document_root = ./ssg_output
log_file = server.log
```

| key             | default        |
|-----------------|----------------|
| `port`          | `8080`         |
| `num_workers`   | `4`            |
| `document_root` | `./ssg_output` |
| `log_file`      | `server.log`   |

`port` and `num_workers` take a leading integer; a value without one reads
as `0`.

## Requests and responses

Only the method and URI at the start of the request are looked at; headers
are not read.

- `/` serves `<document_root>/index.html`.
- Paths under `/images/` and `/static/` are served as they are.
- Paths ending in `.html`, `.css` or `.js` are served as they are.
- Any other path gets `.html` appended, so `/about` serves `about.html`.

The content type is taken from the extension (`.html`, `.css`, `.js`,
`.png`, `.jpg`, `.gif`), otherwise `application/octet-stream`.

| situation                              | status |
|----------------------------------------|--------|
| method and URI missing, or URI has `..`| 400    |
| method other than `GET`                | 405    |
| file does not exist                    | 404    |
| not a regular file, or not readable    | 403    |
| any other error looking up the file    | 500    |

Error responses close the connection. After a file is sent, the connection
stays open for further requests; a connection with no activity is closed
after its timeout (60 ticks of a one-second timer wheel, advanced once per
worker poll round).

Every step is logged with a `[YYYY-mm-dd HH:MM:SS]` timestamp to the
configured log file.

## Using it as a library

```python
import threading

from ssgserve.config import ServerConfig, load_config
from ssgserve.logger import logger_init, logger_close
from ssgserve.main import Server

config = load_config("server.conf", ServerConfig())
logger_init(config.log_file)
server = Server(config)          # binds and listens; raises OSError on failure
threading.Thread(target=server.serve_forever).start()
...
server.shutdown()                # serve_forever stops and joins the workers
logger_close()
```

Without `logger_init`, log calls print `Logger not initialized.` to stderr
instead of writing anything.

The parts can also be used on their own:

- `ssgserve.config`: `ServerConfig`, `load_config`, `parse_config_lines`.
- `ssgserve.logger`: `Logger` (a context manager) and the process-wide
  `logger_init`, `log_message`, `logger_close`.
- `ssgserve.timer`: `TimerWheel` with `add`, `remove`, `tick` and `clear`,
  returning `TimerNode` objects.
- `ssgserve.http_handler`: `parse_http_request` (raises `BadRequestError`),
  `resolve_path`, `mime_type`, `error_response`, `send_error_response`,
  `serve_static_file`.
- `ssgserve.server`: `init_server`, which returns a listening socket.
- `ssgserve.worker`: `Worker`, which serves sockets handed to it with
  `dispatch` on its own thread until `stop`.

## What it does not do

There is no TLS, no `HEAD` or other methods, no range requests, no
directory listings, no query-string handling (the query is taken as part of
the path) and no parsing of request headers or bodies. Requests longer than
8191 bytes in one read are cut short.