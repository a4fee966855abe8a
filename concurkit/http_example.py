"""A tiny HTTP server that echoes the requested path and a ``content`` query value."""

from __future__ import annotations

import argparse
import functools
import json
import re
import socket
import sys
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .threadpool import ThreadPool

__all__ = [
    "Request",
    "parse_request_line",
    "parse_header_line",
    "build_response",
    "invalid_request",
    "handle_connection",
    "serve",
    "serve_single",
    "main",
]

_REQUEST_RE = re.compile(
    r"GET (?P<path>[A-z0-9_/]+)(?:\?(?:content=(?P<content>.*))|.*)? HTTP/(?P<version>\d\.\d)"
)
_HEADER_RE = re.compile(r"([A-z\-]+):(.*)")

_BAD_REQUEST = (
    b"HTTP/1.1 400 Bad Request\r\n"
    b"Content-Type: text/text\r\n"
    b"Content-Length: 71\r\n\r\n"
    b"Invalid request."
)


def _debug(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


@dataclass(frozen=True)
class Request:
    """The parts of a request line the server cares about."""

    path: str
    content: str
    version: str


def parse_request_line(line: str) -> Request:
    """Parse a GET request line; raise ValueError if it is not one."""
    match = _REQUEST_RE.search(line)
    if match is None:
        raise ValueError(f"invalid request line: {line!r}")
    return Request(match["path"], match["content"] or "", match["version"])


def parse_header_line(line: str) -> Optional[Tuple[str, str]]:
    """Split a header into name and value, or return None if it does not match."""
    match = _HEADER_RE.search(line)
    if match is None:
        return None
    value = match[2]
    if value.startswith(" "):
        value = value[1:]
    return match[1], value


def build_response(path: str, content: str) -> bytes:
    """The 200 response greeting ``path`` and echoing ``content``."""
    body = f"Halo! You are accessing {path}!\r\nYour content:\r\n{content}".encode()
    head = (
        "HTTP/1.1 200 OK\r\n"
        "Server: Awsl\r\n"
        "Cache-Control: no-store\r\n"
        "Content-Type: text/text\r\n"
        f"Content-Length:{len(body)}\r\n\r\n"
    ).encode()
    return head + body


def invalid_request(stream: socket.socket) -> None:
    """Answer with 400 Bad Request, ignoring write errors."""
    print("Bad request.")
    try:
        stream.sendall(_BAD_REQUEST)
    except OSError:
        pass


def _strip_crlf(line: str) -> Optional[str]:
    return line[:-2] if line.endswith("\r\n") else None


def handle_connection(stream: socket.socket, delay: float = 1.0) -> None:
    """Read one request from ``stream``, answer it and close the connection."""
    with stream, stream.makefile("rb") as reader:
        try:
            first = reader.readline().decode("utf-8")
        except (OSError, UnicodeDecodeError):
            invalid_request(stream)
            return

        time.sleep(delay)
        print("New connection! Starting to parse header.")

        stripped = _strip_crlf(first)
        try:
            request = parse_request_line(first if stripped is None else stripped)
        except ValueError:
            invalid_request(stream)
            return
        print(f"Path: {_debug(request.path)}")
        print(f"Version: {_debug(request.version)}")
        print(f"Content: {_debug(request.content)}")

        print("------- HEADER -------")
        failed = False
        while True:
            try:
                raw = reader.readline().decode("utf-8")
            except (OSError, UnicodeDecodeError):
                break
            line = _strip_crlf(raw)
            if line is None:
                invalid_request(stream)
                failed = True
                break
            if not line:
                break
            header = parse_header_line(line)
            if header is not None:
                print(f"Name: {_debug(header[0])}, Content: {_debug(header[1])}")
        print("----------------------")

        if failed:
            return

        response = build_response(request.path, request.content)
        print(f"Request parsed.\r\nReturning: {_debug(response.decode())}")
        try:
            stream.sendall(response)
        except OSError:
            pass


def serve(host: str = "127.0.0.1", port: int = 8000, workers: int = 8) -> None:
    """Accept connections forever, handling each on a pool of workers."""
    with socket.create_server((host, port)) as listener, ThreadPool(workers) as pool:
        print(f"Bind address: http://{host}:{port}")
        while True:
            conn, _ = listener.accept()
            pool.execute(functools.partial(handle_connection, conn))


def serve_single(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Accept connections forever, handling them one at a time."""
    with socket.create_server((host, port)) as listener:
        print(f"Bind address: http://{host}:{port}")
        while True:
            conn, _ = listener.accept()
            handle_connection(conn)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run the echo HTTP server.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--workers", type=int, default=8)
    parser.add_argument(
        "--single", action="store_true", help="handle connections one at a time"
    )
    args = parser.parse_args(argv)
    try:
        if args.single:
            serve_single(args.host, args.port)
        else:
            serve(args.host, args.port, args.workers)
    except KeyboardInterrupt:
        return 0
    except OSError:
        print("Cannot bind to address.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())