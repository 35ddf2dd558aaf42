"""Parsing of the textual pairs accepted on the command line."""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

T = TypeVar("T")


def parse_pair(s: str, separator: str, parse: Callable[[str], T] = int) -> Optional[tuple[T, T]]:
    """Parse a pair such as ``"400x600"`` or ``"1.0,0.5"``.

    ``s`` must have the form ``<left><separator><right>`` where both sides are
    accepted by ``parse``. Returns ``None`` when the separator is missing or
    either side does not parse.
    """

    index = s.find(separator)
    if index == -1:
        return None
    left, right = s[:index], s[index + len(separator):]
    # int() and float() tolerate surrounding whitespace, digit separators and
    # non-ASCII digits, a pair must not.
    for side in (left, right):
        if side != side.strip() or "_" in side or not side.isascii():
            return None
    try:
        return parse(left), parse(right)
    except ValueError:
        return None


def parse_complex(s: str) -> Optional[complex]:
    """Parse a comma-separated ``RE,IM`` pair of floats into a complex number."""

    pair = parse_pair(s, ",", float)
    if pair is None:
        return None
    re, im = pair
    return complex(re, im)


def parse_bounds(s: str) -> Optional[tuple[int, int]]:
    """Parse ``WIDTHxHEIGHT`` image dimensions, both of which must be positive."""

    pair = parse_pair(s, "x", int)
    if pair is None or pair[0] <= 0 or pair[1] <= 0:
        return None
    return pair
