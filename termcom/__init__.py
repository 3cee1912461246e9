"""Terminal chat over TCP: a server with operator commands, and a client."""

__version__ = "0.1.0"
__all__ = ["client", "commands", "server", "util"]