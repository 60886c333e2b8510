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

"""Exception hierarchy for nurbskit.

Errors fall into three families, and all of them derive from
:class:`NurbsError`, itself a :class:`ValueError` so callers that already
guard geometry construction with ``except ValueError`` keep working:

- :class:`StructuralError`: counts that do not line up (weights vs. control
  points, ragged or empty control grids, too few points for the degree).
- :class:`NumericValidityError`: values that are individually invalid
  (non-positive or non-finite weights, unordered knots).
- :class:`DegenerateGeometryError`: inputs that are well formed but describe
  no usable shape (empty parameter domain, refinement at a boundary).

Knot vector problems are all :class:`InvalidKnotVectorError` instances, and
additionally belong to the structural or numeric family where that applies.
:class:`InsufficientControlPointsError` belongs to both the structural and
the degenerate geometry family.
"""


class NurbsError(ValueError):
    """Base class for every error raised by nurbskit."""


class StructuralError(NurbsError):
    """Mismatched counts or shapes among degree, points, weights and knots."""


class NumericValidityError(NurbsError):
    """A scalar input is out of its admissible range."""


class DegenerateGeometryError(NurbsError):
    """The inputs do not define a usable curve or surface."""


class InsufficientControlPointsError(StructuralError, DegenerateGeometryError):
    """Fewer than ``degree + 1`` control points were supplied.

    Too few points also leave no usable shape, so this is a degenerate
    geometry error as well as a structural one.
    """

    def __init__(self, actual, degree):
        self.actual = actual
        self.degree = degree
        self.required = degree + 1
        super().__init__(
            f"degree {degree} needs at least {degree + 1} control points, got {actual}")


class WeightCountMismatchError(StructuralError):
    """The weight sequence does not line up with the control points."""

    def __init__(self, actual, expected, what="weights"):
        self.actual = actual
        self.expected = expected
        super().__init__(f"expected {expected} {what}, got {actual}")


class InvalidWeightError(NumericValidityError):
    """A weight is zero, negative or not finite."""

    def __init__(self, weight, index=None):
        self.weight = weight
        self.index = index
        where = '' if index is None else f" at index {index}"
        super().__init__(f"weights must be positive and finite, got {weight!r}{where}")


class InvalidKnotVectorError(DegenerateGeometryError):
    """The knot vector violates a structural invariant."""


class KnotCountError(InvalidKnotVectorError, StructuralError):
    """``len(knots) != len(control_points) + degree + 1``."""


class KnotOrderError(InvalidKnotVectorError, NumericValidityError):
    """The knot vector is not non-decreasing."""


class KnotMultiplicityError(InvalidKnotVectorError):
    """End knots are not clamped, or a knot repeats more than ``degree + 1`` times."""


class ParameterOutOfDomainError(DegenerateGeometryError):
    """A refinement parameter lies outside the usable part of the domain."""

    def __init__(self, parameter, domain, reason="outside the parameter domain"):
        self.parameter = parameter
        self.domain = tuple(domain)
        super().__init__(f"parameter {parameter!r} is {reason} {list(self.domain)}")


__all__ = [
    'NurbsError',
    'StructuralError',
    'NumericValidityError',
    'DegenerateGeometryError',
    'InsufficientControlPointsError',
    'WeightCountMismatchError',
    'InvalidWeightError',
    'InvalidKnotVectorError',
    'KnotCountError',
    'KnotOrderError',
    'KnotMultiplicityError',
    'ParameterOutOfDomainError',
]
