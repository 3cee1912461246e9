"""Chat client: shows what the server says and sends what the user types."""

from __future__ import annotations

import re
import select
import socket
import sys
from dataclasses import dataclass
from typing import Iterable, TextIO

from termcom.util import ConnectionClosed, read_available, send_response

DEFAULT_ADDRESS = "127.0.0.1"
DEFAULT_PORT = 8080
QUIT_COMMAND = "/quit"

_INTEGER = re.compile(r"\s*[+-]?\d+")


def _parse_integer(text: str, what: str) -> int:
    match = _INTEGER.match(text)
    if match is None:
        raise ValueError(f"Specified {what} is not a number")
    if match.end() != len(text):
        raise ValueError(f"Invalid char: {text[match.end()]}")
    return int(match.group())


@dataclass
class ClientOptions:
    address: str = DEFAULT_ADDRESS
    port: int = DEFAULT_PORT


def parse_args(argv: Iterable[str]) -> ClientOptions:
    """Read the client's command-line options, reporting and ignoring bad values."""
    options = ClientOptions()
    args = iter(argv)
    for arg in args:
        if arg == "-ip":
            usage = "Wrong use of ip argument (-ip)"
            value = next(args, None)
            if value is None:
                print(f"{usage}\nNo ip specified", file=sys.stderr)
                print(f"Defaulting to {DEFAULT_ADDRESS}(localhost)")
                continue
            try:
                options.address = socket.inet_ntoa(socket.inet_aton(value))
            except OSError:
                print(f"{usage}\nInvalid ip", file=sys.stderr)
                print(f"Defaulting to {DEFAULT_ADDRESS}(localhost)")
                options.address = DEFAULT_ADDRESS
        elif arg in ("--port", "-p"):
            usage = "Wrong use of port argument (-p or --port)"
            value = next(args, None)
            if value is None:
                print(f"{usage}\nNo port specified", file=sys.stderr)
                print(f"Defaulting to port {DEFAULT_PORT}")
                continue
            try:
                options.port = _parse_integer(value, "port")
            except ValueError as exc:
                print(f"{usage}\n{exc}", file=sys.stderr)
                print(f"Defaulting to port {DEFAULT_PORT}")
                options.port = DEFAULT_PORT
    return options


def listen_to_server(sock: socket.socket, stdin=None, stdout: TextIO | None = None) -> None:
    """Relay between the server and the user until either side stops.

    Returns when the server closes the connection, when ``stdin`` reaches end
    of file, or when the user types the quit command. The socket is closed.
    """
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    with sock:
        while True:
            ready, _, _ = select.select([sock, stdin], [], [])
            if sock in ready:
                try:
                    message = read_available(sock)
                except ConnectionClosed:
                    print("Server connection lost. Exiting program", file=stdout, flush=True)
                    return
                if message is not None:
                    print(f"Server said: {message}", file=stdout, flush=True)
            if stdin in ready:
                try:
                    typed = read_available(stdin)
                except ConnectionClosed:
                    return
                for line in (typed or "").splitlines():
                    if not line:
                        continue
                    if line == QUIT_COMMAND:
                        return
                    send_response(sock, line)


def start_client(address: str = DEFAULT_ADDRESS, port: int = DEFAULT_PORT) -> None:
    """Connect to a server and relay between it and the terminal."""
    sock = socket.create_connection((address, port))
    listen_to_server(sock, sys.stdin, sys.stdout)


def main(argv: list[str] | None = None) -> int:
    options = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        start_client(options.address, options.port)
    except KeyboardInterrupt:
        return 0
    except OSError as exc:
        print(
            "Could not connect the socket to specified address\n"
            f"Error string: {exc}",
            file=sys.stderr,
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())