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

"""Point and vector primitives for nurbskit.

Geometry is carried in plain lists, homogeneous-coordinate style:

- a point is ``[x, y, z, 1.0]``
- a vector is ``[x, y, z, 0.0]``
- a weighted control point is ``[w*x, w*y, w*z, w]``

2D data simply has ``z == 0``.  The R^3 functions ignore the fourth
component; the ``*4`` functions operate on all four, which is what the
refinement algorithms need when blending weighted control points.
"""

from __future__ import annotations

from typing import List, Sequence

from nurbskit.scalar import isgoodnum, ssqrt

## construction and discrimination
## -------------------------------

def point(x=False, y=False, z=False):
    """Make a homogeneous point from scalars or from a 2-, 3- or 4-sequence.

    A fourth component of a sequence is taken to be a
    ``w == 1`` marker and is not copied.
    """
    r = [0, 0, 0, 1.0]
    if isgoodnum(x):
        r[0] = x
        if isgoodnum(y):
            r[1] = y
            if isgoodnum(z):
                r[2] = z
    elif isinstance(x, (tuple, list)):
        for i in range(min(3, len(x))):
            if isgoodnum(x[i]):
                r[i] = x[i]
    return r


def vect(x=0, y=0, z=0):
    """Make a homogeneous direction vector ``[x, y, z, 0]``."""
    return [x, y, z, 0.0]


def coords(p, dimension: int = 3) -> tuple:
    """Return the first ``dimension`` Cartesian components of ``p``."""
    return tuple(p[i] for i in range(dimension))


## R^3 -> R^3 functions, ignoring w
## --------------------------------

def sub(a, b):
    """ 3 vector ``a - b`` """
    return [a[0]-b[0], a[1]-b[1], a[2]-b[2], 0.0]


def scale3(a, c):
    """ 3 vector ``a`` times scalar ``c`` """
    return [a[0]*c, a[1]*c, a[2]*c, 0.0]


def cross(a, b):
    """ 3 vector cross product ``a x b`` """
    return [a[1]*b[2] - a[2]*b[1],
            a[2]*b[0] - a[0]*b[2],
            a[0]*b[1] - a[1]*b[0],
            0.0]


## R^3 -> R functions
## ------------------

def mag(a):
    """ magnitude of 3 vector ``a`` """
    return ssqrt(a[0]*a[0] + a[1]*a[1] + a[2]*a[2])


def dist(a, b):
    """ euclidean distance between points ``a`` and ``b`` """
    return mag(sub(a, b))


def vclose(a, b, tol) -> bool:
    """ are two points the same to within ``tol``? """
    return dist(a, b) <= tol


def unit(a, tol=0.0):
    """Return ``a`` scaled to unit length, or the zero vector if ``|a| <= tol``."""
    m = mag(a)
    if m <= tol or m == 0:
        return vect(0.0, 0.0, 0.0)
    return [a[0]/m, a[1]/m, a[2]/m, 0.0]


## R^4 -> R^4 functions, operating on w
## ------------------------------------

def lerp4(a, b, alpha):
    """ 4 vector affine blend ``(1 - alpha)*a + alpha*b`` """
    beta = 1 - alpha
    return [beta*a[0] + alpha*b[0],
            beta*a[1] + alpha*b[1],
            beta*a[2] + alpha*b[2],
            beta*a[3] + alpha*b[3]]


def weighted(p, w):
    """Lift point ``p`` with weight ``w`` to ``[w*x, w*y, w*z, w]``."""
    return [p[0]*w, p[1]*w, p[2]*w, w]


def homo(a):
    """Project a weighted 4 vector back to the ``w == 1`` plane."""
    return [a[0]/a[3], a[1]/a[3], a[2]/a[3], 1.0]


## compound helpers
## ----------------

def triangle_area(v0, v1, v2):
    """Return the area of the triangle ``v0 v1 v2``."""
    return mag(cross(sub(v1, v0), sub(v2, v0))) / 2


def bbox(points: Sequence[Sequence]) -> List[list]:
    """Axis-aligned bounding box ``[min_point, max_point]`` of ``points``."""
    if not points:
        raise ValueError('bounding box of an empty point list')
    lo = list(points[0][:3])
    hi = list(points[0][:3])
    for p in points[1:]:
        for i in range(3):
            if p[i] < lo[i]:
                lo[i] = p[i]
            if p[i] > hi[i]:
                hi[i] = p[i]
    return [point(*lo), point(*hi)]


__all__ = [
    'point',
    'vect',
    'coords',
    'sub',
    'scale3',
    'cross',
    'mag',
    'dist',
    'vclose',
    'unit',
    'lerp4',
    'weighted',
    'homo',
    'triangle_area',
    'bbox',
]
