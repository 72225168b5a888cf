"""Locale-independent ``'G'``-style float formatting.

``format_float`` picks the shorter of fixed and exponential notation, the way
a ``%G`` verb does:

* exponential form when the decimal exponent is below ``-4`` or at least the
  precision (``6`` for shortest formatting), e.g. ``1E+06``, ``1E-05``;
* fixed form otherwise, without trailing zeros, e.g. ``123456``, ``0.0001``.

Shortest formatting (``prec=-1``) emits the fewest digits that read back to
the same value at the given width: ``numpy.float32(0.1)`` prints as ``0.1``
with ``bits=32``.  A positive *prec* rounds to that many significant digits
instead, hiding binary noise: ``format_float(0.1 + 0.2, 6)`` → ``0.3``.
"""

from __future__ import annotations

import math
from typing import Any, Tuple

import numpy as np


def _digits(value: float, prec: int, bits: int) -> Tuple[str, int]:
    """Decimal digits of a positive finite *value*.

    Returns ``(digits, dp)`` with trailing zeros removed, such that
    ``value == 0.<digits> * 10**dp``.
    """
    if prec < 0:
        scalar = np.float32(value) if bits == 32 else np.float64(value)
        text = np.format_float_scientific(scalar, unique=True, trim="-")
    else:
        text = np.format_float_scientific(
            np.float64(value), precision=max(prec - 1, 0), unique=False, trim="-"
        )
    mantissa, exp = text.split("e")
    digits = mantissa.replace(".", "").rstrip("0") or "0"
    return digits, int(exp) + 1


def _fmt_e(digits: str, dp: int, prec: int) -> str:
    out = [digits[0] if digits else "0"]
    if prec > 0:
        out.append(".")
        out.extend(digits[i] if i < len(digits) else "0" for i in range(1, prec + 1))
    exp = dp - 1 if digits else 0
    out.append("E-" if exp < 0 else "E+")
    out.append(f"{abs(exp):02d}")
    return "".join(out)


def _fmt_f(digits: str, dp: int, prec: int) -> str:
    if dp > 0:
        out = [digits[:dp].ljust(dp, "0")]
    else:
        out = ["0"]
    if prec > 0:
        out.append(".")
        for i in range(prec):
            j = dp + i
            out.append(digits[j] if 0 <= j < len(digits) else "0")
    return "".join(out)


def format_float(value: Any, prec: int = -1, bits: int = 64) -> str:
    """Format *value* in ``'G'`` notation.

    ``prec=-1`` → shortest round-trip digits at *bits* (64 or 32) precision;
    otherwise *prec* significant digits.
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"

    sign = "-" if math.copysign(1.0, value) < 0 else ""
    value = abs(value)
    shortest = prec < 0

    if value == 0:
        digits, dp = "", 0
    else:
        digits, dp = _digits(value, prec, bits)
    nd = len(digits)

    if shortest:
        eprec = 6
        prec = nd
    else:
        prec = max(prec, 1)
        eprec = prec
        if eprec > nd and nd >= dp:
            eprec = nd

    exp = dp - 1
    if exp < -4 or exp >= eprec:
        return sign + _fmt_e(digits, dp, min(prec, nd) - 1)
    if prec > dp:
        prec = nd
    return sign + _fmt_f(digits, dp, max(prec - dp, 0))


def format_complex(value: Any, prec: int = -1) -> str:
    """Format a complex value as ``"real,imag"``."""
    value = complex(value)
    return format_float(value.real, prec) + "," + format_float(value.imag, prec)
