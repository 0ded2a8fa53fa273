"""
Human-readable size parsing.

This module turns the size column of `du -h` style output ("4.0K", "1.5G",
"512") into a float byte count that can be compared and sorted.

Units:
    A single trailing letter from K, M, G, T, P, E, Z, Y scales the number
    by successive powers of 1024 (K = 1024**1 ... Y = 1024**8). Unit letters
    are case-sensitive; anything else is read as a bare byte count.
"""

import math
import re
from types import MappingProxyType


class SizeParseError(ValueError):
    """Raised when the numeric part of a size token is not a decimal number."""


def _build_suffix_table():
    table = {}
    multiplier = 1.0
    for unit in "KMGTPEZY":
        multiplier *= 1024
        table[unit] = multiplier
    return MappingProxyType(table)


# Read-only after import
SIZE_SUFFIXES = _build_suffix_table()

# Plain decimal notation only: rejects "nan", "inf" and digit separators
# that float() would otherwise accept
_NUMBER_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def _parse_number(text: str, token: str) -> float:
    if not _NUMBER_PATTERN.fullmatch(text):
        raise SizeParseError(f"invalid size {token!r}: {text!r} is not a number")
    value = float(text)
    if not math.isfinite(value):
        raise SizeParseError(f"invalid size {token!r}: {text!r} is out of range")
    return value


def parse_size(text: str) -> float:
    """
    Convert a human-readable size token into a byte count.

    Args:
        text: Size token such as "4.0K", "1.5G" or "512". Leading spaces
              are ignored.

    Returns:
        float: The size in bytes.

    Raises:
        SizeParseError: If the numeric portion is empty or not a decimal
                        number (e.g. "abcK", "K", "").

    Example:
        >>> parse_size("1K")
        1024.0
        >>> parse_size("1.5G")
        1610612736.0
    """
    token = text.lstrip(" ")
    if not token:
        raise SizeParseError(f"invalid size {text!r}: empty")

    multiplier = SIZE_SUFFIXES.get(token[-1])
    if multiplier is None:
        return _parse_number(token, text)

    return _parse_number(token[:-1], text) * multiplier
