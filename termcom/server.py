"""Chat server: accepts clients and relays operator commands to them."""

from __future__ import annotations

import re
import socket
import sys
import threading
from dataclasses import dataclass
from typing import Iterable, TextIO

from termcom.commands import Command, CommandBoard, CommandError, CommandType
from termcom.util import ConnectionClosed, read_available, send_response

KICK_MESSAGE = "You have been kicked from the server by the owner. Kick message: "
DEFAULT_MAX_PENDING = 128
MAX_SEGMENTS = 32
POLL_INTERVAL = 0.1

_SEPARATORS = " \n"
_INTEGER = re.compile(r"\s*[+-]?\d+")
_ARITY = {"say": 1, "kick": 2, "kickall": 1}


def _parse_integer(text: str, what: str) -> int:
    match = _INTEGER.match(text)
    if match is None:
        raise ValueError(f"Specified {what} is not a number")
    if match.end() != len(text):
        raise ValueError(f"Invalid char: {text[match.end()]}")
    return int(match.group())


def parse_command(line: str, max_segments: int = MAX_SEGMENTS) -> list[str]:
    """Split an operator line into words; double quotes group words together."""
    segments: list[str] = []
    current: list[str] = []
    quoted = False

    def flush() -> None:
        if not current:
            return
        if len(segments) >= max_segments:
            raise CommandError(
                f"Too many arguments - MAX {max_segments} arguments allowed"
            )
        segments.append("".join(current))
        current.clear()

    for char in line:
        if char == '"':
            flush()
            quoted = not quoted
        elif char in _SEPARATORS and not quoted:
            flush()
        else:
            current.append(char)
    flush()
    return segments


def dispatch_command(board: CommandBoard, segments: list[str]) -> int | None:
    """Post the command named by ``segments`` on ``board``.

    Returns the id of the posted command, or ``None`` for an unknown command.
    """
    if not segments:
        return None
    name, *args = segments
    arity = _ARITY.get(name)
    if arity is None:
        return None
    if len(args) < arity:
        raise CommandError(f"{name} needs {arity} argument(s)")
    if name == "say":
        return board.say(args[0])
    if name == "kick":
        return board.kick(args[0], args[1])
    return board.kick_all(args[0])


def execute_command(sock, address: str, command: Command) -> bool:
    """Carry out ``command`` for the client at ``address`` on ``sock``.

    Returns True when the client has been kicked and must be disconnected.
    """
    if command.type is CommandType.NOCMD:
        return False
    print(f"Executing {command.type} command on client {address}", flush=True)
    if command.type is CommandType.SAY:
        send_response(sock, command.text)
        return False
    if command.type is CommandType.KICK and command.target != address:
        return False
    send_response(sock, KICK_MESSAGE + command.text)
    return True


@dataclass
class ServerOptions:
    port: int = 0
    max_pending: int = DEFAULT_MAX_PENDING


def parse_args(argv: Iterable[str]) -> ServerOptions:
    """Read the server's command-line options, reporting and ignoring bad values."""
    options = ServerOptions()
    args = iter(argv)
    for arg in args:
        if arg in ("--port", "-p"):
            usage = "Wrong use of port argument (-p or --port)"
            value = next(args, None)
            if value is None:
                print(f"{usage}\nNo port specified", file=sys.stderr)
                print("Letting the system choose the port")
                continue
            try:
                options.port = _parse_integer(value, "port")
            except ValueError as exc:
                print(f"{usage}\n{exc}", file=sys.stderr)
                print("Letting the system choose the port")
                options.port = 0
        elif arg in ("--maxPending", "-mp"):
            usage = "Wrong use of maximum pending argument (-mp or --maxPen)"
            value = next(args, None)
            if value is None:
                print(f"{usage}\nNo size specified", file=sys.stderr)
                print(f"Defaulting maximum pending connections to {DEFAULT_MAX_PENDING}")
                continue
            try:
                options.max_pending = _parse_integer(value, "size")
            except ValueError as exc:
                print(f"{usage}\n{exc}", file=sys.stderr)
                print(f"Defaulting to {DEFAULT_MAX_PENDING}")
                options.max_pending = DEFAULT_MAX_PENDING
    return options


class Server:
    """A TCP server handing each client to its own thread."""

    def __init__(self, port: int = 0, max_pending: int = DEFAULT_MAX_PENDING):
        self.board = CommandBoard()
        self._stopped = threading.Event()
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._socket.bind(("", port))
            self._socket.listen(max_pending)
            self._socket.settimeout(POLL_INTERVAL)
        except OSError:
            self._socket.close()
            raise
        print("Server setup complete\nWaiting for clients", flush=True)

    @property
    def port(self) -> int:
        return self._socket.getsockname()[1]

    def __enter__(self) -> Server:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def serve_forever(self) -> None:
        """Accept clients until :meth:`close` is called."""
        while not self._stopped.is_set():
            try:
                client, address = self._socket.accept()
            except TimeoutError:
                continue
            except OSError:
                if self._stopped.is_set():
                    break
                raise
            threading.Thread(
                target=self.manage_client, args=(client, address), daemon=True
            ).start()

    def manage_client(self, sock: socket.socket, address) -> None:
        """Echo what the client says and pass new commands on to it."""
        host = address[0]
        last_id, _ = self.board.latest()
        with sock:
            while not self._stopped.is_set():
                try:
                    message = read_available(sock)
                except ConnectionClosed:
                    print(f"Connection with client {host} lost. Ending thread", flush=True)
                    return
                if message is not None:
                    print(f'Client {host} said: "{message}" ', flush=True)

                newest, command = self.board.latest()
                if newest < last_id:
                    last_id = 0
                if last_id < newest:
                    if execute_command(sock, host, command):
                        return
                    last_id = newest
                self._stopped.wait(POLL_INTERVAL)

    def manage_commands(self, stream: TextIO) -> None:
        """Read operator commands from ``stream`` and post them for the clients."""
        for line in stream:
            if self._stopped.is_set():
                break
            try:
                dispatch_command(self.board, parse_command(line))
            except CommandError as exc:
                print(exc, flush=True)

    def close(self) -> None:
        """Stop serving and release the listening socket."""
        self._stopped.set()
        self._socket.close()


def start_server(port: int = 0, max_pending: int = DEFAULT_MAX_PENDING) -> None:
    """Run a server that takes its commands from standard input."""
    with Server(port, max_pending) as server:
        threading.Thread(
            target=server.manage_commands, args=(sys.stdin,), daemon=True
        ).start()
        server.serve_forever()


def main(argv: list[str] | None = None) -> int:
    options = parse_args(sys.argv[1:] if argv is None else argv)
    print(f"Starting server on port: {options.port}", flush=True)
    try:
        start_server(options.port, options.max_pending)
    except KeyboardInterrupt:
        return 0
    except OSError as exc:
        print(f"Could not start server\nError string: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())