"""
console output for the server. everything goes through here so lines carry a level marker and
the [module.function] they came from
"""
import os
from sys import stderr
from inspect import stack

__all__ = ['DEBUG', 'dprint', 'eprint', 'iprint', 'iiprint']

# chatter (bytes read, lookups, etc) stays quiet unless WORDSRV_DEBUG is set to something truthy
DEBUG = os.environ.get('WORDSRV_DEBUG', '').lower() not in ('', '0', 'no', 'false')

def _caller_info():
    # [0] is us, [1] is the *print wrapper, [2] is whoever called it
    frame = stack(0)[2]
    module_name = os.path.splitext(os.path.basename(frame.filename))[0].lstrip('_')

    return f"[{module_name}.{frame.function}]"

def dprint(*args):
    if DEBUG:
        print(f"[$]{_caller_info()}", *args)

def eprint(*args):
    print(f"[!]{_caller_info()}", *args, file=stderr)

def iprint(*args):
    print(f"[*]{_caller_info()}", *args)

def iiprint(*args):
    print(f"\n[***]{_caller_info()}", *args)
