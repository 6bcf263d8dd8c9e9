"""End to end tests for the dispatcher over loopback TCP."""
import socket
import unittest

from support import FixedDictionary, Table, drain
from _api import MAX_BUF, MSG
from _clients import Registry
from _game import GameState
from _server import Engine


def recv_until(sock, text, timeout=2.0):
    """Read from a client socket until text shows up."""
    sock.settimeout(timeout)
    data = b""
    while text.encode() not in data:
        chunk = sock.recv(4096)
        if not chunk:
            break
        data += chunk
    return data.decode()


class TestEngine(unittest.TestCase):
    def setUp(self):
        self.table = Table("cat", "dog")
        self.game = self.table.game
        self.registry = self.table.registry
        self.listener = socket.create_server(("127.0.0.1", 0))
        self.engine = Engine(self.listener, self.game)
        self.sockets = []
        self.addCleanup(self.cleanup)

    def cleanup(self):
        for sock in self.sockets:
            sock.close()
        self.table.close()
        self.listener.close()

    def connect(self):
        sock = socket.create_connection(self.listener.getsockname())
        self.sockets.append(sock)
        self.engine.tick(timeout=2)
        return sock

    def send(self, sock, data):
        sock.sendall(data)
        self.engine.tick(timeout=2)

    def join(self, name):
        sock = self.connect()
        self.assertEqual(recv_until(sock, MSG.LOBBY.WELCOME), MSG.LOBBY.WELCOME)
        self.send(sock, name.encode() + b"\r\n")
        return sock

    def test_idle_tick(self):
        """A wait that times out with nothing ready changes nothing."""
        self.engine.tick(timeout=0)
        self.assertEqual(self.registry.lobby, {})
        self.assertEqual(self.registry.roster, {})

    def test_welcome_lands_in_lobby(self):
        sock = self.connect()
        self.assertEqual(recv_until(sock, MSG.LOBBY.WELCOME), MSG.LOBBY.WELCOME)
        self.assertEqual(len(self.registry.lobby), 1)
        self.assertEqual(self.registry.roster, {})

    def test_name_split_across_reads(self):
        sock = self.connect()
        recv_until(sock, MSG.LOBBY.WELCOME)

        self.send(sock, b"ali")
        self.assertEqual(self.registry.roster, {})

        self.send(sock, b"ce\r\n")
        self.assertEqual([p.name for p in self.game.players], ["alice"])
        self.assertIn(MSG.GAME.PROMPT, recv_until(sock, MSG.GAME.PROMPT))

    def test_play(self):
        alice = self.join("alice")
        recv_until(alice, MSG.GAME.PROMPT)
        bob = self.join("bob")
        recv_until(bob, "It's alice's turn.\r\n")

        # bob jumps the queue
        self.send(bob, b"c\r\n")
        out = recv_until(bob, "It's alice's turn.\r\n")
        self.assertIn(MSG.GAME.NOT_YOUR_TURN, out)
        self.assertEqual(self.game.masked, "---")

        self.send(alice, b"c\r\n")
        self.assertIn("Word to guess: c--", recv_until(alice, "It's bob's turn.\r\n"))
        self.assertIn(MSG.GAME.PROMPT, recv_until(bob, MSG.GAME.PROMPT))
        self.assertEqual(self.game.turn.name, "bob")

    def test_holder_disconnect_reseats_and_prompts(self):
        alice = self.join("alice")
        bob = self.join("bob")
        recv_until(bob, "It's alice's turn.\r\n")

        alice.close()
        self.sockets.remove(alice)
        self.engine.tick(timeout=2)

        self.assertEqual([p.name for p in self.game.players], ["bob"])
        self.assertEqual(self.game.turn.name, "bob")
        self.assertIn(MSG.GAME.PROMPT, recv_until(bob, MSG.GAME.PROMPT))

    def test_lobby_disconnect(self):
        sock = self.connect()
        sock.close()
        self.sockets.remove(sock)
        self.engine.tick(timeout=2)
        self.assertEqual(self.registry.lobby, {})

    def test_overflow_disconnects(self):
        """A client that never sends a terminator is dropped once its buffer fills."""
        sock = self.connect()
        sock.sendall(b"x" * (MAX_BUF * 2))

        for _ in range(10):
            if not self.registry.lobby:
                break
            self.engine.tick(timeout=2)

        self.assertEqual(self.registry.lobby, {})

    def test_failed_welcome_removes_session(self):
        """A newcomer whose welcome can't be written never stays in the lobby."""
        listener = _DeadPeerListener()
        self.addCleanup(listener.close)
        engine = Engine(listener, self.game)

        unwatched = []
        unwatch = self.registry.unwatch

        def record(fd):
            unwatched.append(fd)
            unwatch(fd)

        self.registry.unwatch = record
        accepted_fd = listener.accepted.fileno()

        engine.handle_inbound()

        self.assertEqual(self.registry.lobby, {})
        self.assertEqual(unwatched, [accepted_fd])
        self.assertEqual(listener.accepted.fileno(), -1)

    def test_session_removed_mid_pass_is_skipped(self):
        """A ready fd whose session went away earlier in the same pass is not serviced."""
        alice, alice_client = self.table.seat("alice")
        bob, bob_client = self.table.seat("bob")
        self.table.drain_all()
        self.assertLess(alice.fd, bob.fd)

        bob.recv = lambda: self.fail("bob was read after being removed")

        # both ready at once: alice's guess broadcasts to bob, whose peer is gone
        bob_client.sendall(b"x\r\n")
        bob_client.close()
        self.table.clients.remove(bob_client)
        alice_client.sendall(b"c\r\n")

        self.engine.tick(timeout=2)

        self.assertTrue(bob.closed)
        self.assertEqual(self.game.players, [alice])
        self.assertIs(self.game.turn, alice)
        self.assertEqual(self.game.masked, "c--")
        self.assertFalse(self.game.letters_guessed[ord("x") - ord("a")])
        self.assertIn(MSG.GAME.PROMPT, drain(alice_client))


class _DeadPeerListener:
    """Hands out one connection whose peer has already hung up."""

    def __init__(self):
        # something real for the registry to watch in place of a listening socket
        self._watched, self._other = socket.socketpair()
        self.accepted, peer = socket.socketpair()
        peer.close()

    def fileno(self):
        return self._watched.fileno()

    def accept(self):
        return self.accepted, ("127.0.0.1", 0)

    def close(self):
        self._watched.close()
        self._other.close()
        self.accepted.close()


class _BrokenPoller:
    def register(self, fd, mask):
        pass

    def unregister(self, fd):
        pass

    def poll(self, timeout=-1):
        raise OSError("poll exploded")

    def close(self):
        pass


class TestEngineWaitFailure(unittest.TestCase):
    def test_failed_wait_is_survived(self):
        listener = socket.create_server(("127.0.0.1", 0))
        self.addCleanup(listener.close)
        game = GameState(Registry(poller=_BrokenPoller()), FixedDictionary("cat"))
        engine = Engine(listener, game)

        engine.tick()
        engine.tick()
        self.assertEqual(game.registry.lobby, {})


if __name__ == "__main__":
    unittest.main()
