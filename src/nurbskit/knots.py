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

"""Knot vector validation, parameter domains and span location.

A knot vector for a curve of degree ``p`` with ``n + 1`` control points is
a non-decreasing sequence of ``n + p + 2`` parameter values.  nurbskit only
works with *clamped* knot vectors: the first and last knot values each
repeat exactly ``p + 1`` times, which makes the curve start and end on its
first and last control points.  The curve is defined over the domain
``[knots[p], knots[n + 1]]``.

:func:`find_span` is the single place where a parameter is mapped to the
window of control points that influence it.  Its boundary policy is the one
every evaluator relies on: parameters at or below the domain start map to
the first span, and parameters at or beyond the domain end map to the last
non-empty span, so evaluating exactly at the end of the domain never reads
past the control points.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Sequence
from typing import List, Tuple

from nurbskit.errors import (
    DegenerateGeometryError,
    InsufficientControlPointsError,
    InvalidKnotVectorError,
    KnotCountError,
    KnotMultiplicityError,
    KnotOrderError,
    NumericValidityError,
)
from nurbskit.scalar import require_scalar


def check_degree(degree) -> int:
    """Return ``degree`` if it is a non-negative integer, raise otherwise."""
    if isinstance(degree, bool) or not isinstance(degree, int) or degree < 0:
        raise NumericValidityError(f"degree must be a non-negative integer, got {degree!r}")
    return degree


def _run_length(knots, start: int, step: int) -> int:
    value = knots[start]
    count = 0
    i = start
    while 0 <= i < len(knots) and knots[i] == value:
        count += 1
        i += step
    return count


def validate_knot_vector(knots, degree: int, count: int) -> None:
    """Check ``knots`` against ``degree`` and a control point ``count``.

    Raises:
        InsufficientControlPointsError: ``count < degree + 1``
        KnotCountError: ``len(knots) != count + degree + 1``
        KnotOrderError: knots decrease somewhere
        KnotMultiplicityError: end knots not clamped to multiplicity
            ``degree + 1``, or a knot value repeated more often than that
        InvalidKnotVectorError: the parameter domain has zero length
    """
    check_degree(degree)
    if count < degree + 1:
        raise InsufficientControlPointsError(count, degree)

    required = count + degree + 1
    if len(knots) != required:
        raise KnotCountError(
            f"knot vector has {len(knots)} values, but {count} control points "
            f"of degree {degree} need {required} (len(knots) == len(points) + degree + 1)")

    for i, k in enumerate(knots):
        require_scalar(k, f"knot {i}")
    for i in range(1, len(knots)):
        if knots[i] < knots[i - 1]:
            raise KnotOrderError(
                f"knot vector must be non-decreasing: knots[{i}]={knots[i]!r} < knots[{i - 1}]={knots[i - 1]!r}")

    start = _run_length(knots, 0, 1)
    end = _run_length(knots, len(knots) - 1, -1)
    if start < degree + 1:
        raise KnotMultiplicityError(
            f"first knot {knots[0]!r} has multiplicity {start}, clamping needs {degree + 1}")
    if end < degree + 1:
        raise KnotMultiplicityError(
            f"last knot {knots[-1]!r} has multiplicity {end}, clamping needs {degree + 1}")

    i = 0
    while i < len(knots):
        run = _run_length(knots, i, 1)
        if run > degree + 1:
            raise KnotMultiplicityError(
                f"knot {knots[i]!r} has multiplicity {run}, at most {degree + 1} allowed for degree {degree}")
        i += run

    lo, hi = parameter_domain(knots, degree)
    if not lo < hi:
        raise InvalidKnotVectorError(f"parameter domain [{lo!r}, {hi!r}] is empty")


def parameter_domain(knots, degree: int) -> Tuple:
    """Return ``(knots[degree], knots[len(knots) - degree - 1])``."""
    return knots[degree], knots[len(knots) - degree - 1]


def find_span(u, knots, degree: int) -> int:
    """Return the knot span index for parameter ``u``.

    The result is the highest ``i`` with ``knots[i] <= u < knots[i + 1]``,
    restricted to ``degree <= i <= n`` where ``n`` is the last control point
    index.  ``u`` at or past the domain end gives ``n``; ``u`` at or before
    the domain start gives ``degree``.
    """
    n = len(knots) - degree - 2
    if u >= knots[n + 1]:
        return n
    if u <= knots[degree]:
        return degree
    return bisect_right(knots, u, degree, n + 1) - 1


def knot_multiplicity(knots, u) -> int:
    """Number of times ``u`` occurs in ``knots``."""
    return sum(1 for k in knots if k == u)


def find_span_multiplicity(u, knots, degree: int) -> Tuple[int, int]:
    """Return ``(span, multiplicity of u)``."""
    return find_span(u, knots, degree), knot_multiplicity(knots, u)


def distinct_knots(knots) -> List:
    """Knot values without repetition, in order."""
    out = []
    for k in knots:
        if not out or k != out[-1]:
            out.append(k)
    return out


def uniform_knot_vector(degree: int, count: int, start=0.0, end=1.0) -> List:
    """Clamped knot vector on ``[start, end]`` with evenly spaced interior knots.

    >>> uniform_knot_vector(2, 4)
    [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0]
    """
    check_degree(degree)
    if count < degree + 1:
        raise InsufficientControlPointsError(count, degree)
    if not start < end:
        raise DegenerateGeometryError(f"knot range [{start!r}, {end!r}] is empty")
    interior = count - degree - 1
    knots = [start] * (degree + 1)
    for i in range(1, interior + 1):
        knots.append(start + (end - start) * i / (interior + 1))
    knots.extend([end] * (degree + 1))
    return knots


def clamped_knot_vector(degree: int, count: int) -> List[float]:
    """Clamped uniform knot vector on ``[0, 1]``."""
    return uniform_knot_vector(degree, count, 0.0, 1.0)


def normalize_knot_vector(knots, start=0.0, end=1.0) -> List:
    """Affinely map ``knots`` onto ``[start, end]``, keeping relative spacing."""
    a = knots[0]
    b = knots[-1]
    if not a < b:
        raise DegenerateGeometryError(f"cannot normalize a knot vector spanning [{a!r}, {b!r}]")
    scale = (end - start) / (b - a)
    out = [start + (k - a) * scale for k in knots]
    # pin the ends so clamped multiplicities survive rounding
    for i, k in enumerate(knots):
        if k == a:
            out[i] = start
        elif k == b:
            out[i] = end
    return out


class KnotVector(Sequence):
    """A validated, immutable knot vector.

    Behaves like a read-only tuple of knot values and compares equal to any
    sequence holding the same values.
    """

    __slots__ = ('_knots', '_degree')

    def __init__(self, knots, degree: int, count: int = None):
        values = tuple(knots)
        if count is None:
            count = len(values) - check_degree(degree) - 1
        validate_knot_vector(values, degree, count)
        self._knots = values
        self._degree = degree

    def __getitem__(self, index):
        return self._knots[index]

    def __len__(self):
        return len(self._knots)

    def __iter__(self):
        return iter(self._knots)

    def __eq__(self, other):
        if isinstance(other, KnotVector):
            return self._knots == other._knots
        if isinstance(other, (list, tuple)):
            return self._knots == tuple(other)
        return NotImplemented

    def __hash__(self):
        return hash(self._knots)

    def __repr__(self):
        return f"KnotVector({list(self._knots)!r}, degree={self._degree})"

    @property
    def degree(self) -> int:
        return self._degree

    @property
    def values(self) -> tuple:
        return self._knots

    @property
    def count(self) -> int:
        """Number of control points this knot vector serves."""
        return len(self._knots) - self._degree - 1

    @property
    def domain(self) -> Tuple:
        return parameter_domain(self._knots, self._degree)

    def span(self, u) -> int:
        return find_span(u, self._knots, self._degree)

    def multiplicity(self, u) -> int:
        return knot_multiplicity(self._knots, u)

    def distinct(self) -> List:
        return distinct_knots(self._knots)


__all__ = [
    'KnotVector',
    'check_degree',
    'validate_knot_vector',
    'parameter_domain',
    'find_span',
    'find_span_multiplicity',
    'knot_multiplicity',
    'distinct_knots',
    'uniform_knot_vector',
    'clamped_knot_vector',
    'normalize_knot_vector',
]
