"""
Identifier normalization for env keys.
Turns field names and joined field paths into SCREAMING_SNAKE tokens.
"""

from typing import Iterable

DELIMITER = "_"
SEPARATORS = frozenset(" -_.")


def _is_upper(c: str) -> bool:
    return "A" <= c <= "Z"


def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def normalize(identifier: str) -> str:
    """
    Convert an identifier to SCREAMING_SNAKE case.

        >>> normalize("SomeSlice")
        'SOME_SLICE'
        >>> normalize("JSONData")
        'JSON_DATA'
        >>> normalize("Item2Name")
        'ITEM2_NAME'
        >>> normalize("some-slice")
        'SOME_SLICE'

    Acronyms stay together and only split before their last capital when a
    lowercase letter follows. A digit followed by a letter starts a new token.
    """
    s = identifier.strip()
    out: list[str] = []

    def emit_delimiter() -> None:
        if out and out[-1] == DELIMITER:
            return
        out.append(DELIMITER)

    for i, c in enumerate(s):
        if c in SEPARATORS:
            emit_delimiter()
            continue

        if i + 1 < len(s):
            nxt = s[i + 1]
            cap, low, num = _is_upper(c), _is_lower(c), _is_digit(c)
            next_cap, next_low, next_num = _is_upper(nxt), _is_lower(nxt), _is_digit(nxt)

            if (cap and next_low) or (low and next_cap) or (num and (next_cap or next_low)):
                if cap and next_low and i > 0 and _is_upper(s[i - 1]):
                    emit_delimiter()
                out.append(c.upper())
                if low or num or next_num:
                    emit_delimiter()
                continue

        out.append(c.upper())

    return "".join(out)


def join_key(segments: Iterable[str]) -> str:
    """Join path segments with the delimiter and normalize the whole path once."""
    return normalize(DELIMITER.join(s for s in segments if s))
