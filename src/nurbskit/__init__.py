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

"""NURBS curve and surface kernel.

The public entry points are :class:`nurbskit.curve.NurbsCurve`,
:class:`nurbskit.surface.NurbsSurface` and the functional refinement
routines in :mod:`nurbskit.refine`.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("nurbskit")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from nurbskit.curve import NurbsCurve
from nurbskit.errors import (
    DegenerateGeometryError,
    InvalidKnotVectorError,
    InvalidWeightError,
    NumericValidityError,
    NurbsError,
    StructuralError,
)
from nurbskit.knots import KnotVector
from nurbskit.refine import elevate_degree, insert_knot, split_curve
from nurbskit.surface import NurbsSurface

__all__ = [
    "__version__",
    "NurbsCurve",
    "NurbsSurface",
    "KnotVector",
    "insert_knot",
    "elevate_degree",
    "split_curve",
    "NurbsError",
    "StructuralError",
    "NumericValidityError",
    "DegenerateGeometryError",
    "InvalidKnotVectorError",
    "InvalidWeightError",
]
