"""
name tables for states that only ever get compared and logged. stdlib enums bring more than we want
"""

"""
Enum('A', 'B') gives .A == 0 and .B == 1, and [1] hands 'B' back for log lines.
keys live in a lookup dict rather than as real attrs, so a typo'd key blows up with the Enum's keys in the message
"""
class Enum():
    def __init__(self, *keys):
        index = {}

        for i, k in enumerate(keys):
            if k.startswith('_'):
                raise ValueError(f"Enum key '{k}' may not start with '_'")

            if k in index:
                raise ValueError(f"duplicate Enum key '{k}'")

            index[k] = i

        self._keys  = tuple(keys)
        self._index = index

    def __getattr__(self, k):
        # only reached for names not found normally, never for our own _attrs
        if k.startswith('_'):
            raise AttributeError(k)

        try:
            return self._index[k]
        except KeyError:
            raise AttributeError(f"no Enum key '{k}', have {', '.join(self._keys)}") from None

    # key name for an integer value
    def __getitem__(self, i):
        return self._keys[i]
