"""Low-level helpers for writing text to and draining text from descriptors."""

from __future__ import annotations

import functools
import os
import socket
from typing import Callable, Union

CHUNK_SIZE = 1024

Readable = Union[int, socket.socket, "object"]


class ConnectionClosed(ConnectionError):
    """Raised when the other end of a connection or pipe has closed it."""


def _fileno(source) -> int:
    return source if isinstance(source, int) else source.fileno()


def send_response(sock, text: str) -> None:
    """Write ``text`` in full to a socket, a file descriptor or a file object."""
    data = text.encode("utf-8")
    if isinstance(sock, socket.socket):
        sock.sendall(data)
        return
    fd = _fileno(sock)
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]


def _reader(source) -> Callable[[], bytes]:
    if isinstance(source, socket.socket):
        source.setblocking(False)
        return functools.partial(source.recv, CHUNK_SIZE)
    fd = _fileno(source)
    os.set_blocking(fd, False)
    return functools.partial(os.read, fd, CHUNK_SIZE)


def read_available(sock) -> str | None:
    """Read everything that can be read right now without blocking.

    Returns the text read, or ``None`` when nothing was waiting.
    Raises :class:`ConnectionClosed` when end of file is reached,
    even if some data arrived before it.
    """
    receive = _reader(sock)
    chunks: list[bytes] = []
    while True:
        try:
            chunk = receive()
        except BlockingIOError:
            break
        if not chunk:
            raise ConnectionClosed("the other end closed the connection")
        chunks.append(chunk)
    if not chunks:
        return None
    return b"".join(chunks).decode("utf-8", errors="replace")