## Copyright (c) 2025 nurbskit contributors

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""Scalar helpers shared by the evaluators.

The algorithms in nurbskit only ever add, subtract, multiply, divide and
compare scalars, so any real number type that supports those operations
can flow through them: ``float``, ``int``, :class:`fractions.Fraction`,
numpy scalars, or :class:`mpmath.mpf` for extended precision.  The few
places that need more (square roots, finiteness tests) go through the
functions here so that an ``mpf`` stays an ``mpf``.
"""

from __future__ import annotations

import math
import numbers

import mpmath as mpm

from nurbskit.errors import NumericValidityError


def isgoodnum(n) -> bool:
    """Return ``True`` if ``n`` is a real scalar and not a ``bool``."""

    if isinstance(n, bool):
        return False
    return isinstance(n, (numbers.Real, mpm.mpf))


def isfinite(n) -> bool:
    """Finite test that understands ``mpmath.mpf``."""

    if isinstance(n, mpm.mpf):
        return bool(mpm.isfinite(n))
    return math.isfinite(n)


def ssqrt(n):
    """Square root preserving ``mpf`` precision; ``math.sqrt`` otherwise."""

    if isinstance(n, mpm.mpf):
        return mpm.sqrt(n)
    return math.sqrt(n)


def clamp(x, lo, hi):
    """Clamp ``x`` into ``[lo, hi]`` without changing its type when inside."""

    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


def difference_interval(t, lo, hi, h):
    """Return ``(t0, t1)`` around ``t`` for a difference quotient on ``[lo, hi]``.

    The half-width is ``h``, but never less than 64 units in the last place
    of ``t``, so ``t1 - t0`` stays positive far from the origin.  The
    interval is clipped to ``[lo, hi]``, which makes the quotient one-sided
    at the ends of the domain.
    """

    step = max(h, 64 * math.ulp(max(1.0, abs(float(t)))))
    return max(lo, t - step), min(hi, t + step)


def require_scalar(n, what: str = 'value'):
    """Return ``n`` unchanged, raising if it is not a finite real scalar."""

    if not isgoodnum(n):
        raise NumericValidityError(f"{what} must be a real number, got {n!r}")
    if not isfinite(n):
        raise NumericValidityError(f"{what} must be finite, got {n!r}")
    return n


__all__ = [
    'isgoodnum',
    'isfinite',
    'ssqrt',
    'clamp',
    'difference_interval',
    'require_scalar',
]
