from select import epoll, EPOLLIN, EPOLLERR

from _enum import Enum

from _api import Messenger

from _debug import *

"""
every connection the server knows about, and the readiness set the dispatcher waits on
"""

# which collection a session lives in
MEMBERSHIP = Enum(
    'LOBBY', # connected, still has to pick a name
    'ROSTER', # named and playing
)

class ClientSession():
    def __init__(self, sock, addr):
        self.messenger = Messenger(sock)
        self.fd        = sock.fileno() # kept around, the socket reports -1 once closed
        self.addr      = addr

        self.name      = None # set to str on promotion
        self.state     = MEMBERSHIP.LOBBY
        self.closed    = False

    # wrappers over messenger
    def send(self, text):
        self.messenger.send(text)

    def recv(self):
        return self.messenger.recv()

    def __repr__(self):
        return f"ClientSession({self.fd}, {self.name!r}, {MEMBERSHIP[self.state]})"

"""
owns the lobby and the roster, both keyed by fd so lookups survive removals mid-pass.
insertion order of the roster is the turn order
"""
class Registry():
    def __init__(self, poller=None):
        self.epoll     = poller if poller is not None else epoll()

        self.lobby     = {}
        self.roster    = {}

        self.on_remove = None # bind a function here, called with a roster member right before it is detached

    # wrappers over internal epoll struct
    def watch(self, fd):
        self.epoll.register(fd, EPOLLIN|EPOLLERR)

    def unwatch(self, fd):
        self.epoll.unregister(fd)

    def poll(self, timeout=-1):
        return self.epoll.poll(timeout)

    # new connection lands in the lobby until it picks a name
    def register(self, sock, addr):
        session = ClientSession(sock, addr)

        iprint(f"adding client {session.fd} {addr[0]}")
        self.lobby[session.fd] = session
        self.watch(session.fd)

        return session

    def promote(self, session):
        del self.lobby[session.fd]

        session.state = MEMBERSHIP.ROSTER
        self.roster[session.fd] = session

    # tear a session down. safe to call more than once
    def remove(self, session):
        if session.closed:
            return

        if session.state == MEMBERSHIP.ROSTER and self.on_remove is not None:
            (self.on_remove)(session)

        iprint(f"removing client {session.fd} {session.addr[0]}")
        self.unwatch(session.fd)
        session.messenger.close()
        session.closed = True

        members = self.roster if session.state == MEMBERSHIP.ROSTER else self.lobby
        members.pop(session.fd, None)

    # roster takes priority, None if the fd belongs to nobody (anymore)
    def find(self, fd):
        session = self.roster.get(fd)
        if session is None:
            session = self.lobby.get(fd)

        return session

    def name_taken(self, name):
        return any(_p.name == name for _p in self.roster.values())

    # drop everyone and stop watching, used on shutdown
    def close(self):
        for session in list(self.roster.values()) + list(self.lobby.values()):
            self.remove(session)

        self.epoll.close()
