"""Textual grammars for boolean, integer and floating-point literals.

Every string that the conversion engine turns into a number or a boolean goes
through one of these parsers, so a value read back from ``to_string`` always
parses to the value that was written.

Exports
-------
parse_bool
    ``1 t T TRUE true True`` / ``0 f F FALSE false False``, nothing else.

parse_int
    Base-prefixed signed 64-bit literal (``0x1F``, ``0b101``, ``0o17``,
    ``017``, ``-42``, ``1_000``).

parse_float
    Decimal, scientific and hexadecimal (``0x1p-2``) literals, ``inf`` /
    ``infinity`` and ``nan``, at 64- or 32-bit precision.

All three raise ``ValueError`` on malformed or out-of-range input and never
strip whitespace.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Union

import numpy as np
import regex

from .numeric import INT64_MAX, INT64_MIN

_BOOL_LITERALS = {
    "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
    "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
}

_DEC = r"[0-9](?:_?[0-9])*"
_HEX = r"[0-9a-fA-F](?:_?[0-9a-fA-F])*"

_INT_RE = regex.compile(
    r"""
    (?P<sign>[+-]?)
    (?:
        0[xX] (?P<hex> _?[0-9a-fA-F](?:_?[0-9a-fA-F])* )
      | 0[bB] (?P<bin> _?[01](?:_?[01])* )
      | 0[oO] (?P<oct> _?[0-7](?:_?[0-7])* )
      | (?P<zoct> 0(?:_?[0-7])* )
      | (?P<dec> [1-9](?:_?[0-9])* )
    )
    """,
    regex.VERBOSE,
)

_FLOAT_RE = regex.compile(
    rf"""
    (?P<sign>[+-]?)
    (?:
        (?P<dec> (?:{_DEC}(?:\.(?:{_DEC})?)?|\.{_DEC}) (?:[eE][+-]?{_DEC})? )
      | 0[xX] (?P<hex> _?(?:{_HEX}(?:\.(?:{_HEX})?)?|\.{_HEX}) [pP][+-]?{_DEC} )
      | (?P<inf> (?i:inf(?:inity)?) )
      | (?P<nan> (?i:nan) )
    )
    """,
    regex.VERBOSE,
)

_INT_GROUPS = (("hex", 16), ("bin", 2), ("oct", 8), ("zoct", 8), ("dec", 10))

# Smallest magnitude that rounds to infinity at 32 bits: FLT_MAX plus half an ulp.
_FLOAT32_OVERFLOW = Fraction(2 ** 128 - 2 ** 103)


def parse_bool(text: str) -> bool:
    """Parse a canonical boolean literal."""
    try:
        return _BOOL_LITERALS[text]
    except KeyError:
        raise ValueError(f"invalid boolean literal: {text!r}") from None


def parse_int(text: str) -> int:
    """Parse a base-prefixed signed 64-bit integer literal."""
    m = _INT_RE.fullmatch(text)
    if m is None:
        raise ValueError(f"invalid integer literal: {text!r}")

    for group, base in _INT_GROUPS:
        digits = m.group(group)
        if digits is not None:
            break
    n = int(digits.replace("_", ""), base)
    if m.group("sign") == "-":
        n = -n

    if not INT64_MIN <= n <= INT64_MAX:
        raise ValueError(f"integer literal out of 64-bit range: {text!r}")
    return n


def parse_float(text: str, bits: int = 64) -> Union[float, np.float32]:
    """Parse a floating-point literal at 64-bit (``float``) or 32-bit
    (``numpy.float32``) precision.

    Finite literals whose magnitude overflows the requested precision raise
    ``ValueError`` instead of silently becoming infinite.
    """
    m = _FLOAT_RE.fullmatch(text)
    if m is None or (m.group("nan") is not None and m.group("sign")):
        raise ValueError(f"invalid floating-point literal: {text!r}")

    negative = m.group("sign") == "-"
    hex_digits = m.group("hex")
    if m.group("inf") is not None:
        value = math.inf
    elif m.group("nan") is not None:
        value = math.nan
    elif hex_digits is not None:
        hex_digits = hex_digits.replace("_", "")
        try:
            value = float.fromhex("0x" + hex_digits)
        except OverflowError:
            raise ValueError(f"floating-point literal out of range: {text!r}") from None
    else:
        value = float(m.group("dec").replace("_", ""))
        if math.isinf(value):
            raise ValueError(f"floating-point literal out of range: {text!r}")

    if bits == 32:
        if math.isfinite(value) and value != 0.0:
            if hex_digits is not None:
                exact = _hex_fraction(hex_digits)
            else:
                exact = Fraction(m.group("dec").replace("_", ""))
            if exact >= _FLOAT32_OVERFLOW:
                raise ValueError(f"floating-point literal out of 32-bit range: {text!r}")
            narrowed = _nearest_float32(exact)
        else:
            narrowed = np.float32(value)
        return -narrowed if negative else narrowed
    return -value if negative else value


def _hex_fraction(digits: str) -> Fraction:
    """Exact value of a hexadecimal float body such as ``1.8p-3``."""
    mantissa, _, exponent = digits.lower().partition("p")
    whole, _, frac = mantissa.partition(".")
    n = int((whole + frac) or "0", 16)
    return Fraction(n) * Fraction(2) ** (int(exponent) - 4 * len(frac))


def _float32_bits(x: np.float32) -> int:
    return int(np.array(x, dtype=np.float32).view(np.uint32))


def _nearest_float32(exact: Fraction) -> np.float32:
    """Round a non-negative exact value to float32 once, ties to even.

    Going through float64 first can land on a float32 halfway point and
    round a second time; the float64 result is only used as a starting
    guess among its float32 neighbours.
    """
    with np.errstate(over="ignore"):
        guess = np.float32(float(exact))
    down = np.nextafter(guess, np.float32(-np.inf))
    up = np.nextafter(guess, np.float32(np.inf))
    candidates = [c for c in (guess, down, up) if np.isfinite(c)]
    return min(candidates, key=lambda c: (abs(Fraction(float(c)) - exact), _float32_bits(c) & 1))
