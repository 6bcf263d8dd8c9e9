"""Shared fixtures for the server tests."""
import os
import socket
import sys

# Allow importing the server modules from server/src
SRC = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from _clients import Registry
from _game import GameState
from _lobby import handle_name


class FixedDictionary:
    """Stands in for Dictionary: hands out the given words in order, repeating the last one."""

    def __init__(self, *words):
        self.words = list(words)
        self.picks = 0

    def pick(self):
        word = self.words[min(self.picks, len(self.words) - 1)]
        self.picks += 1
        return word, len(self.words)


def drain(sock):
    """Everything the server has written to a client end so far."""
    sock.setblocking(False)
    chunks = []
    while True:
        try:
            data = sock.recv(4096)
        except BlockingIOError:
            break
        if not data:
            break
        chunks.append(data)
    return b"".join(chunks).decode()


class Table:
    """A registry plus game wired to socketpairs instead of real TCP clients."""

    def __init__(self, *words):
        self.dictionary = FixedDictionary(*(words or ("cat",)))
        self.registry = Registry()
        self.game = GameState(self.registry, self.dictionary)
        self.clients = []

    def connect(self):
        server_end, client_end = socket.socketpair()
        self.clients.append(client_end)
        session = self.registry.register(server_end, ("127.0.0.1", 0))
        return session, client_end

    def seat(self, name):
        session, client = self.connect()
        handle_name(self.game, session, name)
        return session, client

    def drain_all(self):
        for client in self.clients:
            drain(client)

    def close(self):
        self.registry.close()
        for client in self.clients:
            client.close()
