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

"""B-spline basis functions.

:func:`basis_functions` is the workhorse used by every evaluator: for a
parameter ``u`` inside knot span ``span`` it returns the ``degree + 1``
basis functions ``N[span-degree] ... N[span]`` that can be non-zero there.
It builds them bottom-up from degree 0 with the Cox-de Boor recurrence,
keeping the knot differences in two small ``left``/``right`` buffers, so it
costs O(degree^2) rather than the exponential blow-up of the textbook
recursion.

:func:`basis_function` is that textbook recursion, for a single ``N[i,p]``.
It is slow but obviously correct and handy for spot checks.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


def basis_functions(span: int, u, degree: int, knots: Sequence) -> List:
    """Return the non-zero basis function values at ``u``.

    ``span`` must come from :func:`nurbskit.knots.find_span`.  The values
    are non-negative and sum to one for ``u`` inside the domain.
    """
    basis = [0] * (degree + 1)
    left = [0] * (degree + 1)
    right = [0] * (degree + 1)
    basis[0] = 1

    for j in range(1, degree + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = 0
        for r in range(j):
            temp = basis[r] / (right[r + 1] + left[j - r])
            basis[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        basis[j] = saved

    return basis


def basis_function(i: int, degree: int, u, knots: Sequence):
    """Return ``N[i,degree](u)`` by direct recursion.

    Zero-length knot intervals contribute nothing (the ``0/0 := 0``
    convention).  At the very end of a clamped knot vector the last basis
    function is 1, matching the span clamping in ``find_span``.
    """
    if degree == 0:
        if knots[i] <= u < knots[i + 1]:
            return 1
        if u == knots[-1] and knots[i] < knots[i + 1] == u:
            return 1
        return 0

    left = 0
    denom = knots[i + degree] - knots[i]
    if denom != 0:
        left = (u - knots[i]) / denom * basis_function(i, degree - 1, u, knots)

    right = 0
    denom = knots[i + degree + 1] - knots[i + 1]
    if denom != 0:
        right = (knots[i + degree + 1] - u) / denom * basis_function(i + 1, degree - 1, u, knots)

    return left + right


def rational_basis_functions(span: int, u, degree: int, knots: Sequence,
                             weights: Optional[Sequence]) -> List:
    """Return the rational basis ``R[i] = N[i]*w[i] / sum(N*w)`` over the span.

    ``weights`` is the full weight sequence of the curve, or ``None`` for a
    non-rational curve (in which case ``R == N``).
    """
    basis = basis_functions(span, u, degree, knots)
    if weights is None:
        return basis
    first = span - degree
    products = [b * weights[first + r] for r, b in enumerate(basis)]
    total = sum(products)
    return [p / total for p in products]


def basis_function_derivatives(span: int, u, degree: int, knots: Sequence) -> List:
    """First derivatives of the non-zero basis functions at ``u``.

    Uses ``N'[i,p] = p*N[i,p-1]/(U[i+p]-U[i]) - p*N[i+1,p-1]/(U[i+p+1]-U[i+1])``.
    Only the first derivative is provided.
    """
    if degree == 0:
        return [0]
    lower = basis_functions(span, u, degree - 1, knots)
    ders = []
    for r in range(degree + 1):
        i = span - degree + r
        value = 0
        if r >= 1:
            value += degree * lower[r - 1] / (knots[i + degree] - knots[i])
        if r <= degree - 1:
            value -= degree * lower[r] / (knots[i + degree + 1] - knots[i + 1])
        ders.append(value)
    return ders


def rational_basis_function_derivatives(span: int, u, degree: int, knots: Sequence,
                                        weights: Optional[Sequence]) -> List:
    """First derivatives of the rational basis over the span.

    With ``W = sum(N*w)`` and ``W' = sum(N'*w)`` the quotient rule gives
    ``R'[i] = w[i] * (N'[i]*W - N[i]*W') / W**2``.  For ``weights=None``
    this is :func:`basis_function_derivatives`.
    """
    ders = basis_function_derivatives(span, u, degree, knots)
    if weights is None:
        return ders
    basis = basis_functions(span, u, degree, knots)
    w = weights[span - degree:span + 1]
    total = sum(b * wi for b, wi in zip(basis, w))
    dtotal = sum(d * wi for d, wi in zip(ders, w))
    return [wi * (d * total - b * dtotal) / (total * total)
            for b, d, wi in zip(basis, ders, w)]


__all__ = [
    'basis_functions',
    'basis_function',
    'rational_basis_functions',
    'basis_function_derivatives',
    'rational_basis_function_derivatives',
]
