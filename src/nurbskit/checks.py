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

"""Validation helpers shared by the curve, surface and refinement code.

Each helper either returns normalized data or raises one of the typed
errors from :mod:`nurbskit.errors`; none of them returns a fallback value.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from nurbskit.errors import (
    InvalidWeightError,
    NumericValidityError,
    StructuralError,
    WeightCountMismatchError,
)
from nurbskit.knots import check_degree, validate_knot_vector
from nurbskit.scalar import isfinite, isgoodnum
from nurbskit.vec import point


def check_point(p, index=None) -> Tuple[list, int]:
    """Return ``(point(p), dimension)`` for a 2-, 3- or 4-element point."""

    where = '' if index is None else f" {index}"
    if not isinstance(p, (list, tuple)) or not 2 <= len(p) <= 4:
        raise StructuralError(f"control point{where} must be a 2D or 3D point, got {p!r}")
    for c in p[:3]:
        if not isgoodnum(c) or not isfinite(c):
            raise NumericValidityError(f"control point{where} has a non-finite coordinate: {p!r}")
    return point(p), (2 if len(p) == 2 else 3)


def check_control_points(points: Sequence) -> Tuple[List[list], int]:
    """Normalize a control polygon; dimension is 2 only if every point is 2D."""

    if not isinstance(points, (list, tuple)):
        raise StructuralError(f"control points must be a list or tuple, got {type(points).__name__}")
    out = []
    dimension = 2
    for i, p in enumerate(points):
        pt, dim = check_point(p, i)
        out.append(pt)
        dimension = max(dimension, dim)
    return out, dimension


def check_weight(w, index=None):
    if not isgoodnum(w) or not isfinite(w) or not w > 0:
        raise InvalidWeightError(w, index)
    return w


def check_weights(weights: Optional[Sequence], count: int) -> Optional[tuple]:
    """Return weights as a tuple, or ``None`` for the uniform (non-rational) case."""

    if weights is None:
        return None
    if len(weights) != count:
        raise WeightCountMismatchError(len(weights), count)
    return tuple(check_weight(w, i) for i, w in enumerate(weights))


def check_curve_data(control_points, weights, knots, degree):
    """Validate a ``(points, weights, knots, degree)`` curve description.

    Returns ``(points, weights, knots, dimension)`` with points as homogeneous
    point lists, weights as a tuple or ``None`` and knots as a tuple.
    """
    check_degree(degree)
    points, dimension = check_control_points(control_points)
    knots = tuple(knots)
    validate_knot_vector(knots, degree, len(points))
    return points, check_weights(weights, len(points)), knots, dimension


def check_grid(control_points) -> Tuple[List[List[list]], int]:
    """Normalize a ``[u][v]`` control grid; rows must be non-empty and equal length."""

    if not isinstance(control_points, (list, tuple)) or not control_points:
        raise StructuralError("control point grid is empty")
    width = None
    rows = []
    dimension = 2
    for i, row in enumerate(control_points):
        if not isinstance(row, (list, tuple)) or not row:
            raise StructuralError(f"control point grid row {i} is empty")
        if width is None:
            width = len(row)
        elif len(row) != width:
            raise StructuralError(
                f"control point grid is ragged: row {i} has {len(row)} points, expected {width}")
        pts, dim = check_control_points(row)
        rows.append(pts)
        dimension = max(dimension, dim)
    return rows, dimension


def check_weight_grid(weights, u_count: int, v_count: int) -> Optional[Tuple[tuple, ...]]:
    """Return a weight grid as nested tuples, or ``None`` for uniform weights."""

    if weights is None:
        return None
    if len(weights) != u_count:
        raise WeightCountMismatchError(len(weights), u_count, "weight rows")
    out = []
    for i, row in enumerate(weights):
        if not isinstance(row, (list, tuple)):
            raise StructuralError(f"weight grid row {i} must be a sequence, got {row!r}")
        if len(row) != v_count:
            raise WeightCountMismatchError(len(row), v_count, f"weights in row {i}")
        out.append(tuple(check_weight(w, (i, j)) for j, w in enumerate(row)))
    return tuple(out)


__all__ = [
    'check_point',
    'check_control_points',
    'check_weight',
    'check_weights',
    'check_curve_data',
    'check_grid',
    'check_weight_grid',
]
