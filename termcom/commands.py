"""Commands posted by the operator and picked up by client handlers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum

BUF_SIZE = 1024
MAX_CMD_SIZE = 128


class CommandError(ValueError):
    """Raised when a command cannot be posted."""


class CommandType(Enum):
    NOCMD = 0
    SAY = 1
    KICK = 2
    KICKALL = 3

    @property
    def label(self) -> str:
        return "NOCOM" if self is CommandType.NOCMD else self.name

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class Command:
    """One posted command; ``target`` is the address a kick is aimed at."""

    type: CommandType = CommandType.NOCMD
    text: str = ""
    target: str | None = None

    @property
    def size(self) -> int:
        return len(self.text) + len(self.target or "")


class CommandBoard:
    """A thread-safe, fixed-size history of commands.

    Slot 0 is never used; posting into a full board starts again from slot 1.
    """

    def __init__(self, capacity: int = MAX_CMD_SIZE, buffer_size: int = BUF_SIZE):
        self.capacity = capacity
        self.buffer_size = buffer_size
        self._lock = threading.Lock()
        self._commands: list[Command] = []
        self._newest = 0
        self.reset()

    @property
    def newest(self) -> int:
        with self._lock:
            return self._newest

    def _clear(self) -> None:
        self._newest = 0
        self._commands = [Command() for _ in range(self.capacity)]

    def reset(self) -> None:
        """Forget every command and start from an empty board."""
        with self._lock:
            self._clear()

    def latest(self) -> tuple[int, Command]:
        """Return the id of the newest command together with that command."""
        with self._lock:
            return self._newest, self._commands[self._newest]

    def _post(self, command: Command) -> int:
        if command.size > self.buffer_size:
            raise CommandError(
                f"{command.type} text too long: {command.size} > {self.buffer_size}"
            )
        with self._lock:
            if self._newest >= self.capacity - 1:
                self._clear()
            self._newest += 1
            self._commands[self._newest] = command
            return self._newest

    def say(self, text: str) -> int:
        """Post a message for every client; returns its id."""
        return self._post(Command(CommandType.SAY, text))

    def kick(self, who: str, text: str) -> int:
        """Post a kick of the client at address ``who``; returns its id."""
        return self._post(Command(CommandType.KICK, text, who))

    def kick_all(self, text: str) -> int:
        """Post a kick of every client; returns its id."""
        return self._post(Command(CommandType.KICKALL, text))