#!/usr/bin/env python3

import os
import sys
import getopt
import traceback

import _server
from _dictionary import DictionaryError

# stands in for a build time constant, WORDSRV_PORT overrides it at startup
DEFAULT_PORT = 52505
PORT_ENV     = 'WORDSRV_PORT'

LADDR = '0.0.0.0'

def eprint(*argv):
    print(*argv, file=sys.stderr)

usage = (
    "usage: wordsrv [options] DICTIONARY\n"
    "\n"
    "    -h  --help :: this\n"
    "\n"
    "    DICTIONARY :: word list, one word per line\n"
    f"    listens on port {DEFAULT_PORT} (set {PORT_ENV} to change)\n"
)

def main(argv=None):
    try:
        optarg, argv = getopt.getopt(sys.argv[1:] if argv is None else argv, 'h', ("help",))
    except getopt.GetoptError as e:
        eprint(f'{e}\n{usage}')
        return 1

    for opt, _ in optarg:
        if opt in ('-h', '--help'):
            print(usage)
            return 0

    if len(argv) != 1:
        eprint(usage)
        return 1

    try:
        lport = int(os.environ.get(PORT_ENV) or DEFAULT_PORT)
        if not 0 <= lport <= 65535:
            raise ValueError(f"port {lport} out of range")
    except ValueError as e:
        eprint(f'bad {PORT_ENV}: {e}\n{usage}')
        return 1

    # start game server and run until killed
    try:
        _server.run(argv[0], (LADDR, lport))
    except DictionaryError as e:
        eprint(e)
        return 1
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        eprint(f"\n[!!!] Fatal unexpected {type(e).__name__}")
        traceback.print_exc(file=sys.stderr)
        return 1

if __name__ == "__main__":
    sys.exit(main())
