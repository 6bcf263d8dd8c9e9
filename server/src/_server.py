import socket

import _lobby
import _game
from _api import Disconnected, LineOverflow
from _api import MSG as _api_MSG
L_MSG = _api_MSG.LOBBY

from _clients import MEMBERSHIP, Registry
from _dictionary import Dictionary

from _debug import *

"""
the event loop. one readiness wait, then the listener, then every ready client in fd order
"""

MAX_QUEUE = 5

class Engine():
    def __init__(self, lsock, game):
        self.game     = game
        self.registry = game.registry

        self._lsock   = lsock
        self.registry.watch(lsock.fileno())

    # accept one connection and park it in the lobby
    def handle_inbound(self):
        try:
            sock, addr = self._lsock.accept()
        except OSError as e:
            eprint(f"accept failed: {e}")
            return

        dprint(f"{addr[0]} connected")

        session = self.registry.register(sock, addr)
        self.game.send(session, L_MSG.WELCOME)

    # read from a ready client and, once a full line is in, hand it to the right phase
    def handle_client(self, fd):
        session = self.registry.find(fd)

        if session is None:
            dprint(f"fd {fd} belongs to nobody anymore, skipping")
            return

        if session.state == MEMBERSHIP.LOBBY:
            line = self._read(session)
            if line is not None:
                _lobby.handle_name(self.game, session, line)

            return

        line = self._read(session)
        if line is not None:
            _game.handle_guess(self.game, session, line)

        # the turn may have moved, whether by guess or by departure
        if line is not None or session.closed:
            self.game.announce_turn()
            self.game.prompt_turn()

    # None covers both "no full line yet" and "session is gone"
    def _read(self, session):
        try:
            return session.recv()

        except Disconnected as e:
            iprint(f"{session.name or session.addr[0]} disconnected: {e}")

        except LineOverflow as e:
            eprint(f"{session.name or session.addr[0]} overflowed its buffer: {e}")

        self.registry.remove(session)
        return None

    # deal with one wakeup worth of IO
    def tick(self, timeout=-1):
        try:
            events = self.registry.poll(timeout)
        except OSError as e:
            eprint(f"readiness wait failed: {e}")
            return

        ready = {fd for fd, _ in events}

        # new connections first
        lfd = self._lsock.fileno()
        if lfd in ready:
            ready.discard(lfd)
            self.handle_inbound()

        # snapshot, clients removed along the way just fail the lookup
        for fd in sorted(ready):
            self.handle_client(fd)

    def serve_forever(self):
        while True:
            self.tick()

def run(dictionary_path, sockaddr):
    iiprint(f"starting server on {sockaddr}")

    dictionary = Dictionary(dictionary_path)

    lsock = socket.create_server(sockaddr, backlog=MAX_QUEUE, reuse_port=True)

    registry = Registry()
    game     = _game.GameState(registry, dictionary)
    engine   = Engine(lsock, game)

    iiprint("waiting for players...")

    try:
        engine.serve_forever()
    finally:
        registry.close()
        lsock.close()
