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

"""NURBS curves.

A :class:`NurbsCurve` bundles a degree, a control polygon, optional
weights and a clamped knot vector, validated once at construction.  The
object is immutable: evaluation only reads it, and the refinement methods
(:meth:`NurbsCurve.insert_knot`, :meth:`NurbsCurve.elevate_degree`,
:meth:`NurbsCurve.split`) return new curves.

Evaluation is total.  Parameters outside the domain are clamped to it, so
``evaluate_at`` never raises once the curve exists.  Derivatives come from
central differences with step ``Settings.derivative_step`` and arc length
from integrating the norm of that derivative; both are approximations,
accurate to roughly the square root of machine precision.

>>> c = NurbsCurve([(0, 0, 0), (1, 1, 1)], degree=1)
>>> c.evaluate_at(0.5)
[0.5, 0.5, 0.5, 1.0]
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import mpmath as mpm

from nurbskit.basis import basis_functions
from nurbskit.checks import check_control_points, check_weights
from nurbskit.errors import NumericValidityError
from nurbskit.knots import KnotVector, check_degree, clamped_knot_vector, find_span
from nurbskit.refine import _elevate_hom, _insert_knot_hom, _split_hom, lift, project
from nurbskit.scalar import clamp, difference_interval, isfinite, isgoodnum, require_scalar
from nurbskit.settings import LENGTH_METHODS, Settings, get_settings
from nurbskit.vec import bbox, coords, dist, mag, scale3, sub, unit, vclose


def curve_point(points: Sequence, weights: Optional[Sequence], knots: Sequence, degree: int, u) -> list:
    """Evaluate the curve defined by the raw arrays at ``u`` (no clamping).

    Accumulates ``sum(N*w*P)`` and ``sum(N*w)`` over the active span and
    divides; with ``weights=None`` the basis already sums to one and no
    division takes place.
    """
    span = find_span(u, knots, degree)
    basis = basis_functions(span, u, degree, knots)
    first = span - degree
    x = y = z = 0
    wsum = 0
    for r, n in enumerate(basis):
        if weights is not None:
            n = n * weights[first + r]
        p = points[first + r]
        x += n * p[0]
        y += n * p[1]
        z += n * p[2]
        wsum += n
    if weights is None:
        return [x, y, z, 1.0]
    return [x / wsum, y / wsum, z / wsum, 1.0]


class NurbsCurve:
    """A non-uniform rational B-spline curve.

    Parameters
    ----------
    control_points : sequence
        2D or 3D points as tuples, lists or homogeneous ``[x, y, z, 1]``
        points.  The curve is 2D when every point is 2D.
    degree : int
        Polynomial degree, ``>= 0``; needs ``degree + 1`` control points.
    knots : sequence, optional
        Clamped knot vector of length ``len(control_points) + degree + 1``.
        A clamped uniform vector on ``[0, 1]`` is generated when omitted.
    weights : sequence, optional
        One positive weight per control point.  ``None`` makes the curve
        non-rational.
    settings : Settings, optional
        Numerical settings; the active :func:`nurbskit.settings.get_settings`
        values are used when omitted.

    Raises
    ------
    StructuralError
        Malformed control points, too few of them, or a weight count that
        does not match.
    NumericValidityError
        Non-finite coordinates, or weights that are not positive and finite.
    InvalidKnotVectorError
        Any knot vector violation.
    """

    __slots__ = ('_points', '_weights', '_knots', '_degree', '_dimension', '_settings')

    def __init__(self, control_points, degree: int = 3, knots=None, weights=None,
                 settings: Optional[Settings] = None):
        check_degree(degree)
        points, dimension = check_control_points(control_points)
        if knots is None:
            knots = clamped_knot_vector(degree, len(points))
        self._knots = KnotVector(knots, degree, len(points))
        self._weights = check_weights(weights, len(points))
        self._points = tuple(tuple(p) for p in points)
        self._degree = degree
        self._dimension = dimension
        self._settings = settings

    def __repr__(self):
        return (f"NurbsCurve(degree={self._degree}, control_points={len(self._points)}, "
                f"rational={self.is_rational}, domain={list(self.parameter_domain)})")

    def __len__(self):
        return len(self._points)

    ## structure
    ## ---------

    @property
    def degree(self) -> int:
        return self._degree

    @property
    def control_points(self) -> Tuple[list, ...]:
        """Control points as homogeneous points ``[x, y, z, 1]``."""
        return tuple(list(p) for p in self._points)

    def control_point(self, i: int) -> list:
        return list(self._points[i])

    @property
    def weights(self) -> tuple:
        """Weights, all ones for a non-rational curve."""
        if self._weights is None:
            return (1.0,) * len(self._points)
        return self._weights

    def weight(self, i: int):
        return self.weights[i]

    @property
    def knots(self) -> KnotVector:
        return self._knots

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_rational(self) -> bool:
        """``True`` when explicit weights were given."""
        return self._weights is not None

    @property
    def is_uniform_weight(self) -> bool:
        """``True`` when all weights are equal, i.e. the curve is a plain B-spline."""
        if self._weights is None:
            return True
        return all(w == self._weights[0] for w in self._weights)

    @property
    def parameter_domain(self) -> tuple:
        return self._knots.domain

    @property
    def settings(self) -> Settings:
        return self._settings if self._settings is not None else get_settings()

    ## parameters
    ## ----------

    def is_parameter_valid(self, t) -> bool:
        """Is ``t`` a finite scalar inside the parameter domain?"""
        if not isgoodnum(t) or not isfinite(t):
            return False
        lo, hi = self.parameter_domain
        return lo <= t <= hi

    def clamp_parameter(self, t):
        lo, hi = self.parameter_domain
        return clamp(require_scalar(t, "parameter"), lo, hi)

    def normalize_parameter(self, t):
        """Map ``t`` from the parameter domain to ``[0, 1]``."""
        lo, hi = self.parameter_domain
        return (t - lo) / (hi - lo)

    def denormalize_parameter(self, s):
        """Map ``s`` from ``[0, 1]`` to the parameter domain."""
        lo, hi = self.parameter_domain
        return lo + s * (hi - lo)

    ## evaluation
    ## ----------

    def evaluate_at(self, t) -> list:
        """Return the curve point at ``t`` as ``[x, y, z, 1]``.

        ``t`` is clamped to the parameter domain first.
        """
        return curve_point(self._points, self._weights, self._knots.values, self._degree,
                           self.clamp_parameter(t))

    def derivative_at(self, t, h=None) -> list:
        """First derivative ``C'(t)`` as a vector, by central differences.

        Near the ends of the domain the difference interval is cut off at
        the boundary, so the quotient becomes one-sided there.
        """
        if h is None:
            h = self.settings.derivative_step
        lo, hi = self.parameter_domain
        t = self.clamp_parameter(t)
        t0, t1 = difference_interval(t, lo, hi, h)
        p0 = curve_point(self._points, self._weights, self._knots.values, self._degree, t0)
        p1 = curve_point(self._points, self._weights, self._knots.values, self._degree, t1)
        return scale3(sub(p1, p0), 1 / (t1 - t0))

    def tangent_at(self, t) -> list:
        """Unit tangent at ``t``; the zero vector where the derivative vanishes."""
        return unit(self.derivative_at(t))

    def sample(self, count: Optional[int] = None) -> List[list]:
        """Evaluate ``count`` evenly spaced points, ending exactly at the domain end."""
        if count is None:
            count = self.settings.sample_count
        if count < 2:
            raise NumericValidityError('count must be >= 2')
        lo, hi = self.parameter_domain
        out = []
        for i in range(count):
            u = hi if i == count - 1 else lo + (hi - lo) * i / (count - 1)
            out.append(curve_point(self._points, self._weights, self._knots.values, self._degree, u))
        return out

    ## measures
    ## --------

    def approximate_length(self, subdivisions: Optional[int] = None, method: Optional[str] = None):
        """Arc length, integrating ``|C'(t)|`` span by span.

        Parameters
        ----------
        subdivisions : int, optional
            For ``"simpson"`` the number of intervals per knot span (rounded
            up to even, default ``Settings.simpson_intervals``).  For
            ``"quad"`` each knot span is cut into this many pieces before
            adaptive integration (default 1).
        method : str, optional
            ``"quad"`` (mpmath adaptive quadrature, result is a float) or
            ``"simpson"`` (fixed step, keeps the scalar type of the knots).
            Defaults to ``Settings.length_method``.
        """
        settings = self.settings
        method = settings.length_method if method is None else method
        if method not in LENGTH_METHODS:
            raise NumericValidityError(f"length method must be one of {LENGTH_METHODS}, got {method!r}")
        if subdivisions is not None and (isinstance(subdivisions, bool)
                                         or not isinstance(subdivisions, int) or subdivisions < 1):
            raise NumericValidityError(f"subdivisions must be a positive integer, got {subdivisions!r}")
        lo, hi = self.parameter_domain
        breaks = [k for k in self._knots.distinct() if lo <= k <= hi]

        if method == "quad":
            pieces = subdivisions or 1
            points = []
            for a, b in zip(breaks, breaks[1:]):
                points.extend(a + (b - a) * i / pieces for i in range(pieces))
            points.append(breaks[-1])

            def integrand(s):
                return mag(self.derivative_at(float(s), settings.derivative_step))

            return float(mpm.quad(integrand, [float(p) for p in points],
                                  maxdegree=settings.quad_max_degree))

        n = subdivisions or settings.simpson_intervals
        n += n % 2
        total = 0
        for a, b in zip(breaks, breaks[1:]):
            step = (b - a) / n
            acc = mag(self.derivative_at(a)) + mag(self.derivative_at(b))
            for i in range(1, n):
                acc += (4 if i % 2 else 2) * mag(self.derivative_at(a + step * i))
            total += acc * step / 3
        return total

    def measure(self):
        """Arc length with the default integration settings."""
        return self.approximate_length()

    def chord_length(self, subdivisions: Optional[int] = None):
        """Length of the polyline through ``subdivisions + 1`` samples."""
        if subdivisions is None:
            subdivisions = self.settings.sample_count - 1
        pts = self.sample(subdivisions + 1)
        return sum(dist(a, b) for a, b in zip(pts, pts[1:]))

    def bounding_box(self) -> List[list]:
        """Bounding box of the control polygon, which contains the curve."""
        return bbox(self._points)

    def is_closed(self, tolerance=None) -> bool:
        """Do the curve ends (first and last control points) coincide?"""
        if tolerance is None:
            tolerance = self.settings.epsilon
        return vclose(self._points[0], self._points[-1], tolerance)

    ## derived curves
    ## --------------

    def _derived(self, points, weights, knots, degree) -> "NurbsCurve":
        return NurbsCurve([coords(p, self._dimension) for p in points], degree, knots, weights,
                          self._settings)

    def _homogeneous(self) -> List[list]:
        return lift(self._points, self._weights)

    def with_weights(self, weights) -> "NurbsCurve":
        """Same control polygon and knots with other weights."""
        return self._derived(self._points, weights, self._knots, self._degree)

    def make_non_rational(self) -> "NurbsCurve":
        """Drop the weights; the shape changes unless they were uniform."""
        return self.with_weights(None)

    def insert_knot(self, u, times: int = 1) -> "NurbsCurve":
        """Return an identical curve with ``u`` inserted ``times`` times."""
        cpw, knots = _insert_knot_hom(self._homogeneous(), self._knots.values, self._degree, u, times)
        points, weights = project(cpw, self.is_rational)
        return self._derived(points, weights, knots, self._degree)

    def elevate_degree(self, times: int = 1) -> "NurbsCurve":
        """Return an identical curve of degree ``degree + times``."""
        cpw, knots, degree = _elevate_hom(self._homogeneous(), self._knots.values, self._degree, times)
        points, weights = project(cpw, self.is_rational)
        return self._derived(points, weights, knots, degree)

    def split(self, t) -> Tuple["NurbsCurve", "NurbsCurve"]:
        """Cut the curve at ``t`` into curves over ``[start, t]`` and ``[t, end]``."""
        halves = []
        for cpw, knots in _split_hom(self._homogeneous(), self._knots.values, self._degree, t):
            points, weights = project(cpw, self.is_rational)
            halves.append(self._derived(points, weights, knots, self._degree))
        return tuple(halves)


__all__ = ['NurbsCurve', 'curve_point']
