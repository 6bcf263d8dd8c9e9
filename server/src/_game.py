from string import ascii_lowercase

from _enum import Enum

from _api import MSG as _api_MSG
G_MSG = _api_MSG.GAME

from _debug import *

"""
the shared round: target word, reveal progress, guess budget and whose turn it is.
also owns turn scheduling and everything that writes to the roster
"""

MAX_GUESSES = 4
PLACEHOLDER = '-'

ROUND = Enum(
    'IN_PROGRESS',
    'WON', # every letter revealed
    'LOST', # guess budget spent
)

class GameState():
    def __init__(self, registry, dictionary):
        self.registry   = registry
        self.dictionary = dictionary

        # survives round resets, only the scheduler and departures move it
        self.turn       = None

        self.word            = ''
        self.masked          = ''
        self.letters_guessed = [False] * len(ascii_lowercase)
        self.guesses_left    = MAX_GUESSES

        registry.on_remove = self._release

        self.new_round()

    @property
    def players(self):
        return list(self.registry.roster.values())

    # draw a fresh word and restore the budget. roster and turn are left alone
    def new_round(self):
        self.word, size      = self.dictionary.pick()
        self.masked          = PLACEHOLDER * len(self.word)
        self.letters_guessed = [False] * len(ascii_lowercase)
        self.guesses_left    = MAX_GUESSES

        iprint(f"new round: {len(self.word)} letter word out of {size}")
        dprint(f"word is {self.word!r}")

    # apply one validated letter. returns whether it was in the word
    def guess(self, letter):
        found = letter in self.word

        if found:
            self.masked = ''.join(
                _w if _w == letter else _m for _w, _m in zip(self.word, self.masked)
            )
        else:
            self.guesses_left -= 1

        self.letters_guessed[ascii_lowercase.index(letter)] = True

        return found

    def round_state(self):
        if self.masked == self.word:
            return ROUND.WON

        if self.guesses_left <= 0:
            return ROUND.LOST

        return ROUND.IN_PROGRESS

    def status_message(self):
        guessed = ''.join(f"{_c} " for _c, _hit in zip(ascii_lowercase, self.letters_guessed) if _hit)

        return (
            "***************\r\n"
            f"Word to guess: {self.masked}\r\n"
            f"Guesses remaining: {self.guesses_left}\r\n"
            "Letters guessed: \r\n"
            f"{guessed}\r\n"
            "***************\r\n"
        )

    """
    turn scheduling
    """
    # hand the turn to whoever follows the holder in roster order, wrapping around. seats the first
    # player if nobody holds it
    def advance_turn(self):
        players = self.players

        if not players:
            self.turn = None
            return

        if self.turn is None or self.turn not in players:
            self.turn = players[0]
            return

        i = players.index(self.turn) + 1
        self.turn = players[i] if i < len(players) else players[0]

    # registry hook: a roster member is about to go away
    def _release(self, player):
        if self.turn is not player:
            return

        self.advance_turn()

        # they were the only one left
        if self.turn is player:
            self.turn = None

    """
    messaging
    """
    # write to one client. a failed write costs them their connection
    def send(self, session, text):
        try:
            session.send(text)
        except OSError as e:
            eprint(f"write to {session.name or session.addr[0]} failed: {e}")
            self.registry.remove(session)
            return False

        return True

    def broadcast(self, text):
        for player in self.players:
            self.send(player, text)

    # everyone but the holder, who usually just got something tailored
    def broadcast_except_turn(self, text):
        for player in self.players:
            if player is not self.turn:
                self.send(player, text)

    def announce_turn(self):
        if self.turn is None:
            return

        self.broadcast_except_turn(G_MSG.TURN.format(name=self.turn.name))

    def prompt_turn(self):
        if self.turn is not None:
            self.send(self.turn, G_MSG.PROMPT)

    def announce_winner(self, winner):
        word_was = G_MSG.WORD_WAS.format(word=self.word)

        self.send(winner, word_was)
        self.send(winner, G_MSG.YOU_WIN)

        rest = word_was + G_MSG.PLAYER_WON.format(name=winner.name)
        if winner.closed:
            self.broadcast(rest)
        else:
            self.broadcast_except_turn(rest)

# interpret a line from a roster member as a guess
def handle_guess(game, player, line):
    if game.turn is not player:
        dprint(f"{player.name} guessed out of turn")
        game.send(player, G_MSG.NOT_YOUR_TURN)
        return

    if len(line) != 1 or line not in ascii_lowercase:
        dprint(f"{player.name} sent a malformed guess {line!r}")
        game.send(player, G_MSG.BAD_GUESS)
        return

    letter = line
    found  = game.guess(letter)
    iprint(f"{player.name} guessed {letter}: {'hit' if found else 'miss'}, {game.masked} {game.guesses_left} left")

    if not found:
        game.send(player, G_MSG.NOT_IN_WORD.format(letter=letter))

    game.send(player, G_MSG.GUESSED.format(name=player.name, letter=letter))

    state = game.round_state()
    if state == ROUND.WON:
        iiprint(f"{player.name} won, the word was {game.word}")
        game.announce_winner(player)

    elif state == ROUND.LOST:
        iiprint(f"out of guesses, the word was {game.word}")
        game.broadcast(G_MSG.NO_GUESSES)
        game.broadcast(G_MSG.WORD_WAS.format(word=game.word))

    if state != ROUND.IN_PROGRESS:
        game.new_round()

    game.broadcast(game.status_message())

    # if the guesser dropped while we were writing, the departure already moved the turn on
    if not player.closed:
        game.advance_turn()
