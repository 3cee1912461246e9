# termcom

A small terminal chat over TCP. The server accepts many clients, each handled
in its own thread, and prints whatever each one sends to it. The operator
typing at the server's terminal can send a message to every client, kick one
client by its IP address, or kick everyone.

## Installing

```
pip install .
```

## Running the server

```
termcom-server --port 8080 --maxPending 128
```

Options:

- `-p`, `--port PORT`: the port to listen on. If it is left out, has no value
  or is not a number, the system chooses a free port.
- `-mp`, `--maxPending N`: the most connections waiting to be accepted
  (default 128). A value that is not a number falls back to 128.

Bad option values are reported on standard error and the default is used.
The server prints the port it was asked for, then `Server setup complete`.
Each message from a client is printed as `Client <address> said: "<text>"`.
Press Ctrl-C to stop the server.

Once the server is running, type commands on its standard input, one per line:

- `say "hello everyone"`: send a message to every connected client.
- `kick 127.0.0.1 "spamming"`: send the kick message to the client at that
  address and disconnect it.
- `kickall "server closing"`: send the kick message to every client and
  disconnect them all.

Words are separated by spaces; text that contains spaces goes between double
quotes. Unknown commands are ignored. A command with too few arguments, more
than 32 words, or text longer than 1024 characters is reported and not sent.
Kicked clients receive
`You have been kicked from the server by the owner. Kick message: ` followed
by the given text.

## Running the client

```
termcom-client -ip 127.0.0.1 --port 8080
```

Options:

- `-ip ADDRESS`: the server's IPv4 address (default `127.0.0.1`). An invalid
  address falls back to the default.
- `-p`, `--port PORT`: the server's port (default 8080). A value that is not
  a number falls back to 8080.

Each non-empty line you type is sent to the server. Messages from the server
are printed as `Server said: ...`. Type `/quit`, or end standard input, to
leave. If the server closes the connection, the client prints
`Server connection lost. Exiting program` and exits.

## Using it as a library

- `termcom.commands.CommandBoard` is a thread-safe history of operator
  commands (128 slots by default; it starts over when full). `say`, `kick`
  and `kick_all` post a command and return its id, `latest` returns the
  newest id with its `Command`, and `reset` empties the board. Posting text
  longer than the buffer size (1024 by default) raises
  `termcom.commands.CommandError`.
- `termcom.commands.Command` holds a `CommandType` (`NOCMD`, `SAY`, `KICK`,
  `KICKALL`), its `text`, and for a kick the `target` address.
- `termcom.server.parse_command(line, max_segments)` splits an operator line
  into words, keeping quoted text together. `dispatch_command(board,
  segments)` posts them on a board, returning the new id or `None` for an
  unknown command. `execute_command(sock, address, command)` carries a
  command out for one client and returns `True` if that client was kicked.
- `termcom.server.Server(port, max_pending)` listens on all interfaces; use
  it as a context manager, read the bound port from `port`, run
  `serve_forever()`, feed commands with `manage_commands(stream)`, and stop
  it with `close()`. `start_server(port, max_pending)` runs one that reads
  commands from standard input.
- `termcom.client.start_client(address, port)` connects and relays between
  the server and the terminal; `listen_to_server(sock, stdin, stdout)` does
  the relaying on an already connected socket.
- `termcom.server.parse_args` and `termcom.client.parse_args` read the
  command-line options into `ServerOptions` and `ClientOptions`.
- `termcom.util.send_response(sock, text)` writes text in full, and
  `read_available(sock)` returns whatever text is waiting (or `None`),
  raising `termcom.util.ConnectionClosed` when the other end has closed.

## What it does not do

Messages sent by a client go to the server's terminal only; they are not
passed on to the other clients. Only the operator's `say` command reaches
every client. There are no user names, no authentication, no encryption and
no message history kept on disk.