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

"""NURBS surfaces.

A :class:`NurbsSurface` is the tensor product of two B-spline bases: a
grid of control points indexed ``[u_index][v_index]``, an optional grid of
weights, and one clamped knot vector and degree per direction.  Like
:class:`nurbskit.curve.NurbsCurve` it is validated once, immutable, and
evaluation is total over the parameter rectangle, with parameters clamped
into it.

Refinement works one direction at a time: every column of the control grid
(for ``"u"``) or every row (for ``"v"``) is a curve sharing the same knot
vector, and is refined with the curve algorithms in
:mod:`nurbskit.refine`.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from nurbskit.basis import basis_functions
from nurbskit.checks import check_grid, check_weight_grid
from nurbskit.curve import NurbsCurve
from nurbskit.errors import NumericValidityError, NurbsError
from nurbskit.knots import KnotVector, check_degree, clamped_knot_vector, find_span, parameter_domain
from nurbskit.refine import _elevate_hom, _insert_knot_hom, _split_hom, lift, project
from nurbskit.scalar import clamp, difference_interval, isfinite, isgoodnum, require_scalar
from nurbskit.settings import Settings, get_settings
from nurbskit.vec import bbox, coords, cross, mag, scale3, sub, triangle_area, unit, vclose, vect

logger = logging.getLogger(__name__)

DIRECTIONS = ('u', 'v')

# fractions of the domain used to step off a degenerate point
_PROBE_STEPS = (1e-6, 1e-4, 1e-2)


def _check_direction(direction: str) -> str:
    if direction not in DIRECTIONS:
        raise NurbsError(f"direction must be 'u' or 'v', got {direction!r}")
    return direction


def surface_point(points, weights, knots_u: Sequence, knots_v: Sequence,
                  degree_u: int, degree_v: int, u, v) -> list:
    """Evaluate the surface defined by the raw arrays at ``(u, v)`` (no clamping)."""
    su = find_span(u, knots_u, degree_u)
    sv = find_span(v, knots_v, degree_v)
    nu = basis_functions(su, u, degree_u, knots_u)
    nv = basis_functions(sv, v, degree_v, knots_v)
    x = y = z = 0
    wsum = 0
    for a, bu in enumerate(nu):
        i = su - degree_u + a
        row = points[i]
        for b, bv in enumerate(nv):
            j = sv - degree_v + b
            n = bu * bv
            if weights is not None:
                n = n * weights[i][j]
            p = row[j]
            x += n * p[0]
            y += n * p[1]
            z += n * p[2]
            wsum += n
    if weights is None:
        return [x, y, z, 1.0]
    return [x / wsum, y / wsum, z / wsum, 1.0]


def _blend_line(cpw: Sequence, knots: Sequence, degree: int, u) -> list:
    # homogeneous curve point, i.e. sum(N[i] * Pw[i]) without the division
    span = find_span(u, knots, degree)
    acc = [0, 0, 0, 0]
    for r, n in enumerate(basis_functions(span, u, degree, knots)):
        q = cpw[span - degree + r]
        acc = [acc[k] + n * q[k] for k in range(4)]
    return acc


class NurbsSurface:
    """A tensor-product NURBS surface.

    Parameters
    ----------
    control_points : sequence of sequences
        Control grid, ``control_points[i][j]`` with ``i`` running along u
        and ``j`` along v.  Every row must have the same length.
    degree_u, degree_v : int
        Degrees in each direction.
    knots_u, knots_v : sequence, optional
        Clamped knot vectors; generated clamped uniform on ``[0, 1]`` when
        omitted.
    weights : sequence of sequences, optional
        Weight grid with the same shape as ``control_points``.
    settings : Settings, optional

    Raises
    ------
    StructuralError
        Empty or ragged grid, or a weight grid of the wrong shape
        (:class:`~nurbskit.errors.WeightCountMismatchError`).
    NumericValidityError
        Non-finite coordinates or invalid weights.
    InvalidKnotVectorError
        A knot vector does not fit its direction.
    """

    __slots__ = ('_points', '_weights', '_knots_u', '_knots_v', '_degree_u', '_degree_v',
                 '_dimension', '_settings')

    def __init__(self, control_points, degree_u: int = 3, degree_v: int = 3, knots_u=None,
                 knots_v=None, weights=None, settings: Optional[Settings] = None):
        check_degree(degree_u)
        check_degree(degree_v)
        grid, dimension = check_grid(control_points)
        nu = len(grid)
        nv = len(grid[0])
        if knots_u is None:
            knots_u = clamped_knot_vector(degree_u, nu)
        if knots_v is None:
            knots_v = clamped_knot_vector(degree_v, nv)
        self._knots_u = KnotVector(knots_u, degree_u, nu)
        self._knots_v = KnotVector(knots_v, degree_v, nv)
        self._weights = check_weight_grid(weights, nu, nv)
        self._points = tuple(tuple(tuple(p) for p in row) for row in grid)
        self._degree_u = degree_u
        self._degree_v = degree_v
        self._dimension = dimension
        self._settings = settings

    def __repr__(self):
        return (f"NurbsSurface(degree=({self._degree_u}, {self._degree_v}), "
                f"grid={self.grid_size}, rational={self.is_rational})")

    ## structure
    ## ---------

    @property
    def degree_u(self) -> int:
        return self._degree_u

    @property
    def degree_v(self) -> int:
        return self._degree_v

    @property
    def knots_u(self) -> KnotVector:
        return self._knots_u

    @property
    def knots_v(self) -> KnotVector:
        return self._knots_v

    @property
    def grid_size(self) -> Tuple[int, int]:
        """``(rows along u, points per row along v)``"""
        return len(self._points), len(self._points[0])

    @property
    def control_points(self) -> Tuple[Tuple[list, ...], ...]:
        return tuple(tuple(list(p) for p in row) for row in self._points)

    def control_point(self, i: int, j: int) -> list:
        return list(self._points[i][j])

    @property
    def weights(self) -> Tuple[tuple, ...]:
        """Weight grid, all ones for a non-rational surface."""
        if self._weights is None:
            nu, nv = self.grid_size
            return tuple((1.0,) * nv for _ in range(nu))
        return self._weights

    def weight(self, i: int, j: int):
        return self.weights[i][j]

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_rational(self) -> bool:
        return self._weights is not None

    @property
    def parameter_domain(self) -> Tuple[tuple, tuple]:
        """``((u0, u1), (v0, v1))``"""
        return self._knots_u.domain, self._knots_v.domain

    @property
    def settings(self) -> Settings:
        return self._settings if self._settings is not None else get_settings()

    ## parameters
    ## ----------

    def are_parameters_valid(self, u, v) -> bool:
        (u0, u1), (v0, v1) = self.parameter_domain
        for x in (u, v):
            if not isgoodnum(x) or not isfinite(x):
                return False
        return u0 <= u <= u1 and v0 <= v <= v1

    def clamp_parameters(self, u, v) -> tuple:
        (u0, u1), (v0, v1) = self.parameter_domain
        return (clamp(require_scalar(u, "u parameter"), u0, u1),
                clamp(require_scalar(v, "v parameter"), v0, v1))

    def normalize_parameters(self, u, v) -> tuple:
        """Map ``(u, v)`` from the parameter rectangle to the unit square."""
        (u0, u1), (v0, v1) = self.parameter_domain
        return (u - u0) / (u1 - u0), (v - v0) / (v1 - v0)

    ## evaluation
    ## ----------

    def _point(self, u, v) -> list:
        return surface_point(self._points, self._weights, self._knots_u.values, self._knots_v.values,
                             self._degree_u, self._degree_v, u, v)

    def evaluate_at(self, u, v) -> list:
        """Surface point at ``(u, v)``, clamped into the parameter rectangle."""
        u, v = self.clamp_parameters(u, v)
        return self._point(u, v)

    def u_derivative_at(self, u, v, h=None) -> list:
        """``dS/du`` by central differences, one-sided at the u boundaries."""
        if h is None:
            h = self.settings.derivative_step
        (u0, u1), _ = self.parameter_domain
        u, v = self.clamp_parameters(u, v)
        a, b = difference_interval(u, u0, u1, h)
        return scale3(sub(self._point(b, v), self._point(a, v)), 1 / (b - a))

    def v_derivative_at(self, u, v, h=None) -> list:
        """``dS/dv`` by central differences, one-sided at the v boundaries."""
        if h is None:
            h = self.settings.derivative_step
        _, (v0, v1) = self.parameter_domain
        u, v = self.clamp_parameters(u, v)
        a, b = difference_interval(v, v0, v1, h)
        return scale3(sub(self._point(u, b), self._point(u, a)), 1 / (b - a))

    def _normal(self, u, v, tol):
        su = self.u_derivative_at(u, v)
        sv = self.v_derivative_at(u, v)
        n = cross(su, sv)
        m = mag(n)
        # |Su x Sv| <= tol*|Su|*|Sv| means the partials are (nearly) parallel
        if m == 0 or m <= tol * mag(su) * mag(sv):
            return None
        return unit(n)

    def normal_at(self, u, v) -> list:
        """Unit normal ``Su x Sv`` at ``(u, v)``.

        Where the partials vanish or are parallel (poles, collapsed edges)
        the normal is taken from the nearest well-defined point found by
        stepping into the interior; if there is none, ``[0, 0, 1, 0]`` is
        returned.  Never raises for a valid surface.
        """
        tol = self.settings.epsilon
        u, v = self.clamp_parameters(u, v)
        n = self._normal(u, v, tol)
        if n is not None:
            return n
        (u0, u1), (v0, v1) = self.parameter_domain
        uc = (u0 + u1) / 2
        vc = (v0 + v1) / 2
        for f in _PROBE_STEPS:
            du = (u1 - u0) * f
            dv = (v1 - v0) * f
            # step toward the middle of the domain first
            su = du if u <= uc else -du
            sv = dv if v <= vc else -dv
            for pu, pv in ((u + su, v), (u, v + sv), (u + su, v + sv),
                           (u - su, v), (u, v - sv)):
                pu, pv = clamp(pu, u0, u1), clamp(pv, v0, v1)
                n = self._normal(pu, pv, tol)
                if n is not None:
                    logger.debug("degenerate normal at (%r, %r), using (%r, %r)", u, v, pu, pv)
                    return n
        logger.debug("no well-defined normal near (%r, %r), using +z", u, v)
        return vect(0.0, 0.0, 1.0)

    def sample_grid(self, u_count: int, v_count: int) -> List[List[list]]:
        """Evaluate a ``u_count x v_count`` grid of points, rows along u."""
        if u_count < 2 or v_count < 2:
            raise NumericValidityError('u_count and v_count must be >= 2')
        (u0, u1), (v0, v1) = self.parameter_domain

        def steps(lo, hi, count):
            return [hi if i == count - 1 else lo + (hi - lo) * i / (count - 1) for i in range(count)]

        vs = steps(v0, v1, v_count)
        return [[self._point(u, v) for v in vs] for u in steps(u0, u1, u_count)]

    def approximate_area(self, u_subdivisions: Optional[int] = None,
                         v_subdivisions: Optional[int] = None):
        """Surface area from a triangulated ``u_subdivisions x v_subdivisions`` grid.

        Each grid cell contributes two triangles.  The estimate converges
        from below for curved patches and is exact for planar bilinear ones.
        """
        default = self.settings.area_subdivisions
        nu = default if u_subdivisions is None else u_subdivisions
        nv = default if v_subdivisions is None else v_subdivisions
        if nu < 1 or nv < 1:
            raise NumericValidityError('subdivisions must be >= 1')
        grid = self.sample_grid(nu + 1, nv + 1)
        area = 0
        for i in range(nu):
            for j in range(nv):
                p00 = grid[i][j]
                p10 = grid[i + 1][j]
                p01 = grid[i][j + 1]
                p11 = grid[i + 1][j + 1]
                area += triangle_area(p00, p10, p11) + triangle_area(p00, p11, p01)
        return area

    def bounding_box(self) -> List[list]:
        """Bounding box of the control grid."""
        return bbox([p for row in self._points for p in row])

    def is_u_closed(self, tolerance=None) -> bool:
        """Does the first row of control points coincide with the last?"""
        if tolerance is None:
            tolerance = self.settings.epsilon
        return all(vclose(a, b, tolerance) for a, b in zip(self._points[0], self._points[-1]))

    def is_v_closed(self, tolerance=None) -> bool:
        """Does the first column of control points coincide with the last?"""
        if tolerance is None:
            tolerance = self.settings.epsilon
        return all(vclose(row[0], row[-1], tolerance) for row in self._points)

    ## refinement
    ## ----------

    def _lines(self, direction: str) -> List[List[list]]:
        # homogeneous curves along the given direction
        if self._weights is None:
            grid = [lift(row, None) for row in self._points]
        else:
            grid = [lift(row, w) for row, w in zip(self._points, self._weights)]
        if direction == 'u':
            return [list(col) for col in zip(*grid)]
        return grid

    def _from_lines(self, lines, direction: str, knots, degree: int) -> "NurbsSurface":
        grid = lines if direction == 'v' else [list(row) for row in zip(*lines)]
        points = []
        weights = []
        for row in grid:
            pts, wts = project(row, self.is_rational)
            points.append([coords(p, self._dimension) for p in pts])
            weights.append(wts)
        if direction == 'u':
            knots_u, knots_v = knots, self._knots_v
            degree_u, degree_v = degree, self._degree_v
        else:
            knots_u, knots_v = self._knots_u, knots
            degree_u, degree_v = self._degree_u, degree
        return NurbsSurface(points, degree_u, degree_v, knots_u, knots_v,
                            weights if self.is_rational else None, self._settings)

    def _direction_data(self, direction: str):
        if _check_direction(direction) == 'u':
            return self._knots_u.values, self._degree_u
        return self._knots_v.values, self._degree_v

    def insert_knot(self, value, direction: str = 'u', times: int = 1) -> "NurbsSurface":
        """Insert ``value`` into the knot vector of ``direction`` without changing the shape."""
        knots, degree = self._direction_data(direction)
        lines = []
        new_knots = knots
        for line in self._lines(direction):
            cpw, new_knots = _insert_knot_hom(line, knots, degree, value, times)
            lines.append(cpw)
        return self._from_lines(lines, direction, new_knots, degree)

    def elevate_degree(self, direction: str = 'u', times: int = 1) -> "NurbsSurface":
        """Raise the degree in ``direction`` by ``times`` without changing the shape."""
        knots, degree = self._direction_data(direction)
        lines = []
        new_knots, new_degree = knots, degree
        for line in self._lines(direction):
            cpw, new_knots, new_degree = _elevate_hom(line, knots, degree, times)
            lines.append(cpw)
        return self._from_lines(lines, direction, new_knots, new_degree)

    def split(self, value, direction: str = 'u') -> Tuple["NurbsSurface", "NurbsSurface"]:
        """Cut the surface along the iso-line ``direction == value``."""
        knots, degree = self._direction_data(direction)
        left, right = [], []
        left_knots = right_knots = knots
        for line in self._lines(direction):
            (lcpw, left_knots), (rcpw, right_knots) = _split_hom(line, knots, degree, value)
            left.append(lcpw)
            right.append(rcpw)
        return (self._from_lines(left, direction, left_knots, degree),
                self._from_lines(right, direction, right_knots, degree))

    def iso_curve(self, value, direction: str = 'u') -> NurbsCurve:
        """The curve on the surface where the ``direction`` parameter equals ``value``.

        ``iso_curve(u0, 'u')`` runs along v; its control points are the
        columns of the control grid blended (in homogeneous coordinates)
        with the u basis at ``u0``.
        """
        knots, degree = self._direction_data(direction)
        lo, hi = parameter_domain(knots, degree)
        value = clamp(require_scalar(value, "iso parameter"), lo, hi)
        cpw = [_blend_line(line, knots, degree, value) for line in self._lines(direction)]
        points, weights = project(cpw, self.is_rational)
        if direction == 'u':
            other_knots, other_degree = self._knots_v, self._degree_v
        else:
            other_knots, other_degree = self._knots_u, self._degree_u
        return NurbsCurve([coords(p, self._dimension) for p in points], other_degree,
                          other_knots, weights, self._settings)


__all__ = ['NurbsSurface', 'surface_point', 'DIRECTIONS']
