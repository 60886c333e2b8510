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

"""Shape-preserving refinement of NURBS curves.

These routines change how a curve is represented without changing the
curve itself:

- :func:`insert_knot` adds knots (Boehm's algorithm, one knot at a time)
- :func:`elevate_degree` raises the polynomial degree
- :func:`split_curve` cuts a curve in two at a parameter

All three work on the same ``(control_points, weights, knots, degree)``
description used by :class:`nurbskit.curve.NurbsCurve`, where
``weights=None`` stands for a non-rational curve.  Internally every control
point is lifted to the homogeneous 4-vector ``[w*x, w*y, w*z, w]`` and the
algorithms blend those, which is what keeps rational curves (circles,
conics) exactly on shape.  The ``_*_hom`` variants operate on lifted points
directly and are shared with :mod:`nurbskit.surface`, which refines each
row or column of its control grid.

Results are returned as new sequences; inputs are never modified.
"""

from __future__ import annotations

import logging
from math import comb
from typing import List, Optional, Sequence, Tuple

from nurbskit.checks import check_curve_data
from nurbskit.errors import KnotMultiplicityError, NumericValidityError, ParameterOutOfDomainError
from nurbskit.knots import distinct_knots, find_span, knot_multiplicity, parameter_domain
from nurbskit.scalar import require_scalar
from nurbskit.vec import coords, homo, lerp4, weighted

logger = logging.getLogger(__name__)


## homogeneous lifting
## -------------------

def lift(points: Sequence, weights: Optional[Sequence]) -> List[list]:
    """Lift points to ``[w*x, w*y, w*z, w]``; ``weights=None`` lifts with ``w == 1``."""
    if weights is None:
        return [weighted(p, 1) for p in points]
    return [weighted(p, w) for p, w in zip(points, weights)]


def project(cpw: Sequence, rational: bool) -> Tuple[List[list], Optional[list]]:
    """Inverse of :func:`lift`: return ``(points, weights)``.

    For a non-rational curve every ``w`` is still 1, so the points are
    copied without dividing and ``None`` is returned for the weights.
    """
    if not rational:
        return [[q[0], q[1], q[2], 1.0] for q in cpw], None
    return [homo(q) for q in cpw], [q[3] for q in cpw]


def _check_times(times) -> int:
    if isinstance(times, bool) or not isinstance(times, int) or times < 0:
        raise NumericValidityError(f"times must be a non-negative integer, got {times!r}")
    return times


## knot insertion
## --------------

def _insert_once(cpw: List[list], knots: tuple, degree: int, u) -> Tuple[List[list], tuple]:
    p = degree
    k = find_span(u, knots, p)
    new = cpw[:k - p + 1]
    for i in range(k - p + 1, k + 1):
        alpha = (u - knots[i]) / (knots[i + p] - knots[i])
        new.append(lerp4(cpw[i - 1], cpw[i], alpha))
    new.extend(cpw[k:])
    return new, knots[:k + 1] + (u,) + knots[k + 1:]


def _insert_knot_hom(cpw: List[list], knots: tuple, degree: int, u, times: int = 1):
    """Insert ``u`` into a homogeneous curve ``times`` times.

    Returns ``(new_cpw, new_knots)``.

    Raises:
        ParameterOutOfDomainError: ``u`` is outside the parameter domain
        KnotMultiplicityError: the multiplicity of ``u`` would exceed
            ``degree + 1``
    """
    require_scalar(u, "knot value")
    _check_times(times)
    lo, hi = parameter_domain(knots, degree)
    if u < lo or u > hi:
        raise ParameterOutOfDomainError(u, (lo, hi))
    s = knot_multiplicity(knots, u)
    if s + times > degree + 1:
        raise KnotMultiplicityError(
            f"inserting {u!r} {times} time(s) would raise its multiplicity from {s} "
            f"to {s + times}, at most {degree + 1} allowed for degree {degree}")
    for _ in range(times):
        cpw, knots = _insert_once(cpw, knots, degree, u)
    logger.debug("inserted knot %r x%d, %d control points", u, times, len(cpw))
    return cpw, knots


def insert_knot(control_points, weights, knots, degree: int, u, times: int = 1):
    """Insert the knot ``u`` into a curve without changing its shape.

    Each insertion splices ``u`` into the knot vector after span ``k`` and
    replaces control points ``k-p+1 .. k`` with the blends
    ``(1 - a)*P[i-1] + a*P[i]``, ``a = (u - U[i]) / (U[i+p] - U[i])``,
    so the curve gains exactly one control point and one knot.

    Parameters
    ----------
    control_points : sequence of 2D or 3D points
    weights : sequence of positive scalars, or ``None`` for uniform weights
    knots : clamped knot vector
    degree : int
    u : scalar inside the parameter domain
    times : int, optional
        Number of insertions.

    Returns
    -------
    tuple
        ``(new_control_points, new_weights, new_knots)``.  Points are tuples
        of the input dimension; ``new_weights`` is ``None`` when ``weights``
        was ``None``.
    """
    points, weights, knots, dimension = check_curve_data(control_points, weights, knots, degree)
    cpw, new_knots = _insert_knot_hom(lift(points, weights), knots, degree, u, times)
    pts, wts = project(cpw, weights is not None)
    return [coords(p, dimension) for p in pts], wts, list(new_knots)


## degree elevation
## ----------------

def _elevate_hom(cpw: List[list], knots: tuple, degree: int, times: int = 1):
    """Raise the degree of a homogeneous curve by ``times``.

    Returns ``(new_cpw, new_knots, new_degree)``.  Interior knots of full
    multiplicity ``degree + 1`` separate independent pieces; the curve is cut
    there, each piece elevated, and the results joined again.
    """
    _check_times(times)
    if times == 0:
        return list(cpw), tuple(knots), degree
    for u in distinct_knots(knots)[1:-1]:
        if knot_multiplicity(knots, u) == degree + 1:
            (lcpw, lknots), (rcpw, rknots) = _split_hom(cpw, knots, degree, u)
            lq, lu, ph = _elevate_hom(lcpw, lknots, degree, times)
            rq, ru, _ = _elevate_hom(rcpw, rknots, degree, times)
            return lq + rq, lu[:-(ph + 1)] + ru, ph
    if degree == 0:
        # a single constant piece
        ph = times
        return [list(cpw[0]) for _ in range(ph + 1)], (knots[0],) * (ph + 1) + (knots[-1],) * (ph + 1), ph
    return _elevate_segments(cpw, knots, degree, times)


def _elevate_segments(cpw: List[list], knots: tuple, degree: int, times: int):
    """Degree elevation of a curve whose segments join continuously.

    This is the Bezier-decomposition algorithm (A5.9 in *The NURBS Book*):
    each segment is extracted by knot insertion, elevated with the Bezier
    coefficients ``C(p, j) C(t, i - j) / C(p + t, i)``, and the superfluous
    knots are removed again, so every distinct knot gains ``times`` in
    multiplicity.
    """
    p = degree
    t = times
    U = knots
    m = len(U) - 1
    ph = p + t
    n_new = len(cpw) + t * (len(distinct_knots(U)) - 1)

    Qw: List[Optional[list]] = [None] * n_new
    Uh: list = [None] * (n_new + ph + 1)
    bpts = [list(q) for q in cpw[:p + 1]]
    nextbpts: List[Optional[list]] = [None] * max(p - 1, 0)
    ebpts: List[Optional[list]] = [None] * (ph + 1)
    alfs: list = [None] * max(p - 1, 0)

    mh = ph
    kind = ph + 1
    r = -1
    a = p
    b = p + 1
    cind = 1
    ua = U[0]
    Qw[0] = list(cpw[0])
    for i in range(ph + 1):
        Uh[i] = ua

    while b < m:
        i = b
        while b < m and U[b] == U[b + 1]:
            b += 1
        mul = b - i + 1
        mh += mul + t
        ub = U[b]
        oldr = r
        r = p - mul
        lbz = (oldr + 2) // 2 if oldr > 0 else 1
        rbz = ph - (r + 1) // 2 if r > 0 else ph

        # insert ub r times to isolate the current Bezier segment
        if r > 0:
            numer = ub - ua
            for k in range(p, mul, -1):
                alfs[k - mul - 1] = numer / (U[a + k] - ua)
            for j in range(1, r + 1):
                save = r - j
                s = mul + j
                for k in range(p, s - 1, -1):
                    bpts[k] = lerp4(bpts[k - 1], bpts[k], alfs[k - s])
                nextbpts[save] = bpts[p]

        # elevate the segment
        for i in range(lbz, ph + 1):
            acc = [0, 0, 0, 0]
            for j in range(max(0, i - t), min(p, i) + 1):
                c = comb(p, j) * comb(t, i - j)
                acc = [acc[n] + bpts[j][n] * c for n in range(4)]
            d = comb(ph, i)
            ebpts[i] = [c / d for c in acc]

        # remove the knot ua oldr times
        if oldr > 1:
            first = kind - 2
            last = kind
            den = ub - ua
            bet = (ub - Uh[kind - 1]) / den
            for tr in range(1, oldr):
                i = first
                j = last
                kj = j - kind + 1
                while j - i > tr:
                    if i < cind:
                        alf = (ub - Uh[i]) / (ua - Uh[i])
                        Qw[i] = lerp4(Qw[i - 1], Qw[i], alf)
                    if j >= lbz:
                        if j - tr <= kind - ph + oldr:
                            gam = (ub - Uh[j - tr]) / den
                            ebpts[kj] = lerp4(ebpts[kj + 1], ebpts[kj], gam)
                        else:
                            ebpts[kj] = lerp4(ebpts[kj + 1], ebpts[kj], bet)
                    i += 1
                    j -= 1
                    kj -= 1
                first -= 1
                last += 1

        if a != p:
            for _ in range(ph - oldr):
                Uh[kind] = ua
                kind += 1
        for j in range(lbz, rbz + 1):
            Qw[cind] = ebpts[j]
            cind += 1

        if b < m:
            for j in range(r):
                bpts[j] = nextbpts[j]
            for j in range(r, p + 1):
                bpts[j] = list(cpw[b - p + j])
            a = b
            b += 1
            ua = ub
        else:
            for i in range(ph + 1):
                Uh[kind + i] = ub

    count = mh - ph
    logger.debug("elevated degree %d -> %d, %d -> %d control points", p, ph, len(cpw), count)
    return Qw[:count], tuple(Uh[:count + ph + 1]), ph


def elevate_degree(control_points, weights, knots, degree: int, times: int = 1):
    """Raise the degree of a curve by ``times`` without changing its shape.

    For a single-segment (Bezier) curve one step turns ``n + 1`` control
    points into ``n + 2``: the ends are kept and each interior point is
    ``a*P[i-1] + (1 - a)*P[i]`` with ``a = i / (p + 1)``.  Curves with
    interior knots are elevated segment by segment and each distinct knot
    gains one multiplicity per step.

    Returns
    -------
    tuple
        ``(new_control_points, new_weights, new_knots, new_degree)``
    """
    points, weights, knots, dimension = check_curve_data(control_points, weights, knots, degree)
    cpw, new_knots, new_degree = _elevate_hom(lift(points, weights), knots, degree, times)
    pts, wts = project(cpw, weights is not None)
    return [coords(p, dimension) for p in pts], wts, list(new_knots), new_degree


## splitting
## ---------

def _split_hom(cpw: List[list], knots: tuple, degree: int, t):
    """Split a homogeneous curve at ``t``.

    Returns ``((left_cpw, left_knots), (right_cpw, right_knots))``.
    """
    require_scalar(t, "split parameter")
    lo, hi = parameter_domain(knots, degree)
    if not lo < t < hi:
        raise ParameterOutOfDomainError(t, (lo, hi), "not strictly inside the parameter domain")
    s = knot_multiplicity(knots, t)
    if s < degree + 1:
        cpw, knots = _insert_knot_hom(cpw, knots, degree, t, degree + 1 - s)
    k = find_span(t, knots, degree)
    a = k - degree
    logger.debug("split at %r, index %d", t, a)
    left = (cpw[:a], knots[:a + degree + 1])
    right = (cpw[a:], knots[a:])
    return left, right


def split_curve(control_points, weights, knots, degree: int, t):
    """Cut a curve at ``t`` into two independently valid clamped curves.

    ``t`` is driven to full multiplicity ``degree + 1``, after which the
    control polygon passes through the curve at ``t``; the left half covers
    ``[start, t]`` and the right half ``[t, end]`` with the original
    parametrization.

    Returns ``(left, right)``, each a ``(control_points, weights, knots)``
    triple as returned by :func:`insert_knot`.

    Raises:
        ParameterOutOfDomainError: ``t`` is not strictly inside the domain
    """
    points, weights, knots, dimension = check_curve_data(control_points, weights, knots, degree)
    rational = weights is not None
    halves = _split_hom(lift(points, weights), knots, degree, t)
    result = []
    for cpw, half_knots in halves:
        pts, wts = project(cpw, rational)
        result.append(([coords(p, dimension) for p in pts], wts, list(half_knots)))
    return tuple(result)


__all__ = [
    'insert_knot',
    'elevate_degree',
    'split_curve',
    'lift',
    'project',
]
