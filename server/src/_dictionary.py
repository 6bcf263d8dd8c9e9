import random

from _debug import *

"""
word list the game draws its targets from
"""

class DictionaryError(Exception):
    pass

class Dictionary():
    def __init__(self, path):
        self.path              = path
        self.words, self.size  = self._load(path)

        iprint(f"loaded {len(self.words)} usable words out of {self.size} entries in {path}")

    # one word per line. only plain a-z words are kept since nothing else could ever be guessed,
    # but every line counts towards the entry total
    @staticmethod
    def _load(path):
        try:
            with open(path, encoding='utf-8') as f:
                lines = [_l.strip().lower() for _l in f]
        except (OSError, UnicodeDecodeError) as e:
            raise DictionaryError(f"can't read {path}: {e}") from e

        words = [_w for _w in lines if _w.isascii() and _w.isalpha()]

        skipped = len([_l for _l in lines if _l]) - len(words)
        if skipped:
            dprint(f"skipped {skipped} entries that aren't plain a-z words")

        if not words:
            raise DictionaryError(f"{path} has no usable words")

        return words, len(lines)

    def __len__(self):
        return len(self.words)

    # random target plus the total entry count of the file
    def pick(self):
        return random.choice(self.words), self.size
