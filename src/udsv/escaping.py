"""
Escape Codec (leaf layer of the UDSV codec).

Maps raw text to its backslash-escaped form and back.

Which characters must be escaped depends on where the scalar sits in the
record grammar:

    PLAIN       a bare field             ':'
    LIST_ITEM   one item of a list       ':' ','
    MAP_KEY     the key of a map item    ':' ',' '='
    MAP_VALUE   the value of a map item  ':' ',' '='

The backslash itself and the control characters LF, CR and TAB are escaped
in every position.
"""

from enum import Enum
from typing import FrozenSet, Iterable, Union

from udsv.errors import InvalidEscape


ESCAPE = "\\"

# Control characters written as a backslash plus a letter
_CONTROL_TO_LETTER = {"\n": "n", "\r": "r", "\t": "t"}
_LETTER_TO_CONTROL = {v: k for k, v in _CONTROL_TO_LETTER.items()}

# Characters that decode to themselves after a backslash
_LITERALS = frozenset("\\:,=")

_ALWAYS = frozenset(ESCAPE) | frozenset(_CONTROL_TO_LETTER)


class Position(Enum):
    """Grammar position of a scalar; selects the escape set."""

    PLAIN = "plain"
    LIST_ITEM = "list_item"
    MAP_KEY = "map_key"
    MAP_VALUE = "map_value"

    @property
    def specials(self) -> FrozenSet[str]:
        return _SPECIALS[self]


_SPECIALS = {
    Position.PLAIN: _ALWAYS | frozenset(":"),
    Position.LIST_ITEM: _ALWAYS | frozenset(":,"),
    Position.MAP_KEY: _ALWAYS | frozenset(":,="),
    Position.MAP_VALUE: _ALWAYS | frozenset(":,="),
}


def escape(raw: str, specials: Union[Position, Iterable[str]] = Position.PLAIN) -> str:
    """
    Escape every special character in `raw`.

    Args:
        raw: Unescaped text
        specials: A Position, or an explicit collection of characters.
            The backslash is always escaped.

    Returns:
        Escaped text
    """
    if isinstance(specials, Position):
        chars = specials.specials
    else:
        chars = frozenset(specials) | frozenset(ESCAPE)

    out = []
    for ch in raw:
        if ch in chars:
            out.append(ESCAPE + _CONTROL_TO_LETTER.get(ch, ch))
        else:
            out.append(ch)
    return "".join(out)


def unescape(raw: str) -> str:
    """
    Decode escape tokens in `raw`.

    A backslash-LF pair is a line continuation and is dropped entirely.

    Raises:
        InvalidEscape: On an unknown escape or a dangling backslash.
            The offset is relative to the start of `raw`.
    """
    if ESCAPE not in raw:
        return raw

    out = []
    i = 0
    n = len(raw)
    while i < n:
        ch = raw[i]
        if ch != ESCAPE:
            out.append(ch)
            i += 1
            continue

        if i + 1 >= n:
            raise InvalidEscape(ESCAPE, offset=i, detail="dangling backslash")

        nxt = raw[i + 1]
        if nxt in _LITERALS:
            out.append(nxt)
        elif nxt in _LETTER_TO_CONTROL:
            out.append(_LETTER_TO_CONTROL[nxt])
        elif nxt != "\n":
            raise InvalidEscape(raw[i:i + 2], offset=i)
        i += 2

    return "".join(out)


__all__ = ["Position", "escape", "unescape", "ESCAPE"]
