import io
import socket
import threading
import time

import pytest

from termcom.commands import Command, CommandBoard, CommandError, CommandType
from termcom.server import (
    KICK_MESSAGE,
    Server,
    dispatch_command,
    execute_command,
    parse_args,
    parse_command,
)


@pytest.fixture
def pair():
    left, right = socket.socketpair()
    with left, right:
        yield left, right


@pytest.fixture
def running_server():
    server = Server(0, 5)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.close()
    thread.join(timeout=5)


def test_parse_command_quoted_text():
    assert parse_command('say "hello world"\n') == ["say", "hello world"]


def test_parse_command_kick():
    assert parse_command('kick 127.0.0.1 "go away"\n') == ["kick", "127.0.0.1", "go away"]


def test_parse_command_extra_spaces():
    assert parse_command("  say   hi \n") == ["say", "hi"]


def test_parse_command_empty_quotes_dropped():
    assert parse_command('say ""\n') == ["say"]


def test_parse_command_too_many_segments():
    with pytest.raises(CommandError):
        parse_command("a b c\n", 2)


def test_dispatch_say():
    board = CommandBoard()
    assert dispatch_command(board, ["say", "hi"]) == 1
    assert board.latest() == (1, Command(CommandType.SAY, "hi"))


def test_dispatch_kick_sets_target():
    board = CommandBoard()
    dispatch_command(board, ["kick", "10.0.0.1", "bye"])
    _, command = board.latest()
    assert command == Command(CommandType.KICK, "bye", "10.0.0.1")


def test_dispatch_kickall():
    board = CommandBoard()
    dispatch_command(board, ["kickall", "bye"])
    assert board.latest()[1].type is CommandType.KICKALL


def test_dispatch_unknown_posts_nothing():
    board = CommandBoard()
    assert dispatch_command(board, ["dance", "now"]) is None
    assert board.newest == 0


def test_dispatch_missing_argument():
    board = CommandBoard()
    with pytest.raises(CommandError):
        dispatch_command(board, ["kick", "10.0.0.1"])
    assert board.newest == 0


def test_execute_say(pair):
    left, right = pair
    assert execute_command(left, "127.0.0.1", Command(CommandType.SAY, "hi")) is False
    assert right.recv(1024) == b"hi"


def test_execute_kickall(pair):
    left, right = pair
    assert execute_command(left, "127.0.0.1", Command(CommandType.KICKALL, "bye")) is True
    assert right.recv(1024) == (KICK_MESSAGE + "bye").encode()


def test_execute_kick_matching_address(pair):
    left, right = pair
    command = Command(CommandType.KICK, "bye", "127.0.0.1")
    assert execute_command(left, "127.0.0.1", command) is True
    assert right.recv(1024) == (KICK_MESSAGE + "bye").encode()


def test_execute_kick_other_address_sends_nothing(pair):
    left, right = pair
    command = Command(CommandType.KICK, "bye", "10.0.0.1")
    assert execute_command(left, "127.0.0.1", command) is False
    right.setblocking(False)
    with pytest.raises(BlockingIOError):
        right.recv(1)


def test_execute_nocmd(pair):
    left, _ = pair
    assert execute_command(left, "127.0.0.1", Command()) is False


def test_parse_args_values():
    options = parse_args(["-p", "9000", "--maxPending", "10"])
    assert (options.port, options.max_pending) == (9000, 10)


def test_parse_args_defaults():
    options = parse_args([])
    assert (options.port, options.max_pending) == (0, 128)


def test_parse_args_not_a_number(capsys):
    assert parse_args(["--port", "abc"]).port == 0
    assert "Specified port is not a number" in capsys.readouterr().err


def test_parse_args_invalid_char(capsys):
    assert parse_args(["-mp", "12x"]).max_pending == 128
    assert "Invalid char: x" in capsys.readouterr().err


def test_parse_args_missing_value(capsys):
    assert parse_args(["-p"]).port == 0
    assert "No port specified" in capsys.readouterr().err


def test_manage_commands_posts_commands(running_server, capsys):
    stream = io.StringIO('say "hi there"\nkick 10.0.0.1 "bye"\nbogus\nsay\n')
    running_server.manage_commands(stream)
    assert running_server.board.latest() == (
        2,
        Command(CommandType.KICK, "bye", "10.0.0.1"),
    )
    assert "say needs 1 argument(s)" in capsys.readouterr().out


def test_server_relays_say_and_kickall(running_server):
    with socket.create_connection(("127.0.0.1", running_server.port), timeout=5) as client:
        time.sleep(0.5)
        running_server.board.say("hello")
        assert client.recv(1024) == b"hello"
        running_server.board.kick_all("bye")
        expected = (KICK_MESSAGE + "bye").encode()
        received = b""
        while len(received) < len(expected):
            chunk = client.recv(1024)
            if not chunk:
                break
            received += chunk
        assert received == expected
        assert client.recv(1024) == b""


def test_close_stops_serving():
    server = Server(0, 5)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    server.close()
    thread.join(timeout=5)
    assert not thread.is_alive()