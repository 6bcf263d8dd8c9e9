from _api import MSG as _api_MSG
L_MSG = _api_MSG.LOBBY

from _debug import *

"""
connections sit here until they pick a name nobody on the roster is using, then get promoted
"""

MAX_NAME = 30

# treat a line from a lobby member as the name they want
def handle_name(game, player, line):
    dprint(f"{player.addr[0]} requested name {line!r}")

    # overlong names get cut rather than rejected
    name = line[:MAX_NAME]

    if len(name) == 0:
        dprint("denied: empty name")
        game.send(player, L_MSG.EMPTY_NAME)
        return

    if game.registry.name_taken(name):
        dprint(f"denied: {name} already in use")
        game.send(player, L_MSG.NAME_IN_USE.format(name=name))
        return

    player.name = name
    game.registry.promote(player)
    iprint(f"{player.addr[0]} joined as {name}")

    game.broadcast(L_MSG.JOINED.format(name=name))

    if game.turn is None:
        game.advance_turn()

    game.send(player, game.status_message())

    game.prompt_turn()
    game.announce_turn()
