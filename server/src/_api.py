from _debug import *

"""
serverside abstr over the text protocol: CRLF terminated lines in, canned messages out
"""

CRLF         = b"\r\n"
MAX_BUF      = 256 # bytes a client may have in flight before it must send a line terminator
SEND_TIMEOUT = 5.0 # seconds a write may stall on a peer that stopped reading before it counts as failed

"""
nestable pseudo-dictionarish thing which uses attrs instead of keys

used here to sort the canned messages by the phase of the game they belong to
"""
class _MsgTable():
    def __init__(self, **items):
        for key, item in items.items():
            if key.startswith('_'):
                raise ValueError("_MsgTable keys may not start with '_'")

            setattr(self, key, item)

"""
every line the server ever writes. entries with {fields} get .format()ed at the call site
"""
MSG = _MsgTable(
    LOBBY=_MsgTable(
        WELCOME     = "Welcome to our word game. What is your name? ",
        EMPTY_NAME  = "empty name, what's your name: ",
        NAME_IN_USE = "{name} already exists, enter another name: ",
        JOINED      = "{name} has just joined\r\n",
    ),

    GAME=_MsgTable(
        PROMPT        = "You Guess?\r\n",
        TURN          = "It's {name}'s turn.\r\n",
        NOT_YOUR_TURN = "It is not your turn to guess\r\n",
        BAD_GUESS     = "You can only guess one letter from a-z! Your Guess?\r\n",
        GUESSED       = "{name} guess {letter}\r\n",
        NOT_IN_WORD   = "{letter} is not in the word\r\n",
        WORD_WAS      = "The word was {word}.\r\n",
        YOU_WIN       = "Game over! You win!\r\n",
        PLAYER_WON    = "Game over! {name} win!\r\n",
        NO_GUESSES    = "No guesses left. Game over.\r\n",
    ),
)

# peer closed the connection or the read itself failed
class Disconnected(Exception):
    pass

# client filled its whole buffer without ever sending a terminator
class LineOverflow(Exception):
    pass

"""
fixed capacity accumulator for partial input. fill level doubles as the read cursor
"""
class LineBuffer():
    def __init__(self, capacity=MAX_BUF):
        self.capacity = capacity
        self._data    = bytearray()

    def __len__(self):
        return len(self._data)

    # how many more bytes a single read may take
    def space(self):
        return self.capacity - len(self._data)

    # append freshly read bytes and return the first complete line (terminator stripped), or None if
    # there isn't one yet. anything after that first terminator is dropped and the buffer rewinds
    def feed(self, data):
        if len(data) > self.space():
            raise LineOverflow(f"{len(data)} bytes won't fit, only {self.space()} free")

        # start one byte back so a CR ending the last read still pairs with an LF starting this one
        start = max(len(self._data) - 1, 0)
        self._data += data

        end = self._data.find(CRLF, start)
        if end == -1:
            if len(self._data) >= self.capacity:
                raise LineOverflow(f"no line terminator within {self.capacity} bytes")

            return None

        line     = bytes(self._data[:end])
        trailing = len(self._data) - end - len(CRLF)
        if trailing:
            dprint(f"discarding {trailing} bytes after line terminator")

        self._data.clear()

        return line

"""
socket wrapper to read whole lines and write text
use nearly identically to socket obj
"""
class Messenger():
    def __init__(self, sock, capacity=MAX_BUF, send_timeout=SEND_TIMEOUT):
        self.sock  = sock
        self.inbuf = LineBuffer(capacity)

        # reads only happen once epoll says so, the timeout is there to bound sendall
        self.sock.settimeout(send_timeout)

    def fileno(self):
        return self.sock.fileno()

    # raises OSError if the write fails or times out, caller decides what that costs the client
    def send(self, text):
        self.sock.sendall(text.encode())

    # receive whatever is waiting and return a complete line if there is one, None otherwise
    def recv(self):
        try:
            data = self.sock.recv(self.inbuf.space())
        except OSError as e:
            raise Disconnected(f"read failed: {e}") from e

        if not data:
            raise Disconnected("peer closed connection")

        dprint(f"[{self.fileno()}] read {len(data)} bytes")

        line = self.inbuf.feed(data)
        if line is None:
            return None

        return line.decode(errors='replace')

    def close(self):
        self.sock.close()
