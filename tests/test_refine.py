"""Tests for knot insertion, degree elevation and splitting."""

import math
from fractions import Fraction

import pytest

from nurbskit.curve import NurbsCurve
from nurbskit.errors import (
    DegenerateGeometryError,
    KnotMultiplicityError,
    NumericValidityError,
    ParameterOutOfDomainError,
    WeightCountMismatchError,
)
from nurbskit.refine import elevate_degree, insert_knot, split_curve
from nurbskit.vec import dist, mag, point


CTRL = [(0, 0, 0), (1, 2, 0), (2, 2, 1), (3, 0, 1), (4, -1, 0), (5, 1, 2)]
KNOTS = [0, 0, 0, 0, 0.25, 0.5, 1, 1, 1, 1]

R = math.sqrt(2) / 2
ARC = [(1, 0), (1, 1), (0, 1)]
ARC_WEIGHTS = [1, R, 1]
ARC_KNOTS = [0, 0, 0, 1, 1, 1]


def _close(a, b, tol=1e-9):
    assert dist(point(a), point(b)) <= tol


def _params(lo=0.0, hi=1.0, count=50):
    return [lo + (hi - lo) * i / (count - 1) for i in range(count)]


def _same_shape(before, after, tol=1e-9):
    for t in _params(*before.parameter_domain):
        _close(before.evaluate_at(t), after.evaluate_at(t), tol)


def _on_unit_circle(curve, tol=1e-9):
    for t in _params(*curve.parameter_domain):
        assert abs(mag(curve.evaluate_at(t)) - 1.0) < tol


class TestInsertKnot:

    def test_counts(self):
        pts, wts, knots = insert_knot(CTRL, None, KNOTS, 3, 0.7)
        assert len(pts) == len(CTRL) + 1
        assert len(knots) == len(KNOTS) + 1
        assert wts is None
        assert knots == [0, 0, 0, 0, 0.25, 0.5, 0.7, 1, 1, 1, 1]

    def test_shape_preserved(self):
        before = NurbsCurve(CTRL, 3, KNOTS)
        for u in (0.1, 0.25, 0.6, 0.99):
            pts, wts, knots = insert_knot(CTRL, None, KNOTS, 3, u)
            _same_shape(before, NurbsCurve(pts, 3, knots, wts))

    def test_multiple_insertions(self):
        before = NurbsCurve(CTRL, 3, KNOTS)
        pts, wts, knots = insert_knot(CTRL, None, KNOTS, 3, 0.75, times=3)
        assert len(pts) == len(CTRL) + 3
        assert knots.count(0.75) == 3
        after = NurbsCurve(pts, 3, knots, wts)
        _same_shape(before, after)
        # at multiplicity p the curve interpolates a control point
        _close(after.evaluate_at(0.75), before.evaluate_at(0.75))
        assert any(dist(point(p), before.evaluate_at(0.75)) < 1e-9 for p in pts)

    def test_affected_window(self):
        # degree 1: the new point lies on the control polygon
        pts, _, knots = insert_knot([(0, 0), (2, 0), (2, 2)], None, [0, 0, 0.5, 1, 1], 1, 0.25)
        assert pts == [(0, 0), (1.0, 0.0), (2, 0), (2, 2)]
        assert knots == [0, 0, 0.25, 0.5, 1, 1]

    def test_keeps_dimension(self):
        pts, _, _ = insert_knot(ARC, ARC_WEIGHTS, ARC_KNOTS, 2, 0.5)
        assert all(len(p) == 2 for p in pts)
        pts, _, _ = insert_knot(CTRL, None, KNOTS, 3, 0.5)
        assert all(len(p) == 3 for p in pts)

    def test_rational_shape_preserved(self):
        pts, wts, knots = insert_knot(ARC, ARC_WEIGHTS, ARC_KNOTS, 2, 0.3)
        assert len(wts) == 4
        assert all(w > 0 for w in wts)
        _on_unit_circle(NurbsCurve(pts, 2, knots, wts))

    def test_exact_fractions(self):
        ctrl = [(Fraction(0), Fraction(0)), (Fraction(1), Fraction(2)), (Fraction(3), Fraction(0))]
        knots = [Fraction(k) for k in (0, 0, 0, 1, 1, 1)]
        pts, _, new_knots = insert_knot(ctrl, None, knots, 2, Fraction(1, 3))
        assert pts[1] == (Fraction(1, 3), Fraction(2, 3))
        assert pts[2] == (Fraction(5, 3), Fraction(4, 3))
        assert new_knots[3] == Fraction(1, 3)

    def test_outside_domain(self):
        with pytest.raises(ParameterOutOfDomainError):
            insert_knot(CTRL, None, KNOTS, 3, 1.5)
        with pytest.raises(ParameterOutOfDomainError):
            insert_knot(CTRL, None, KNOTS, 3, -0.1)

    def test_out_of_domain_is_degenerate_geometry(self):
        with pytest.raises(DegenerateGeometryError):
            insert_knot(CTRL, None, KNOTS, 3, 2)

    def test_multiplicity_limit(self):
        insert_knot(CTRL, None, KNOTS, 3, 0.5, times=3)
        with pytest.raises(KnotMultiplicityError):
            insert_knot(CTRL, None, KNOTS, 3, 0.5, times=4)
        with pytest.raises(KnotMultiplicityError):
            insert_knot(CTRL, None, KNOTS, 3, 1.0)

    def test_bad_times(self):
        with pytest.raises(NumericValidityError):
            insert_knot(CTRL, None, KNOTS, 3, 0.5, times=-1)

    def test_validates_input(self):
        with pytest.raises(WeightCountMismatchError):
            insert_knot(CTRL, [1, 1], KNOTS, 3, 0.5)


class TestElevateDegree:

    def test_bezier_blend(self):
        ctrl = [(Fraction(0), Fraction(0)), (Fraction(3), Fraction(3)), (Fraction(6), Fraction(0))]
        pts, wts, knots, degree = elevate_degree(ctrl, None, [0, 0, 0, 1, 1, 1], 2)
        assert degree == 3
        assert wts is None
        assert knots == [0, 0, 0, 0, 1, 1, 1, 1]
        # Q[i] = a*P[i-1] + (1-a)*P[i], a = i/(p+1)
        assert pts == [(0, 0), (2, 2), (4, 2), (6, 0)]

    def test_bezier_count_and_shape(self):
        ctrl = CTRL[:4]
        knots = [0, 0, 0, 0, 1, 1, 1, 1]
        pts, wts, new_knots, degree = elevate_degree(ctrl, None, knots, 3)
        assert len(pts) == 5
        _same_shape(NurbsCurve(ctrl, 3, knots), NurbsCurve(pts, degree, new_knots))

    def test_linear_multi_span(self):
        pts, _, knots, degree = elevate_degree([(0, 0), (2, 0), (2, 2)], None, [0, 0, 0.5, 1, 1], 1)
        assert degree == 2
        assert knots == [0, 0, 0, 0.5, 0.5, 1, 1, 1]
        for got, want in zip(pts, [(0, 0), (1, 0), (2, 0), (2, 1), (2, 2)]):
            _close(got, want)

    def test_multi_span_shape(self):
        before = NurbsCurve(CTRL, 3, KNOTS)
        pts, wts, knots, degree = elevate_degree(CTRL, None, KNOTS, 3)
        assert degree == 4
        # every distinct knot gains one multiplicity
        assert len(knots) == len(KNOTS) + 4
        assert len(pts) == len(CTRL) + 3
        _same_shape(before, NurbsCurve(pts, degree, knots, wts))

    def test_elevate_twice(self):
        before = NurbsCurve(CTRL, 3, KNOTS)
        pts, wts, knots, degree = elevate_degree(CTRL, None, KNOTS, 3, times=2)
        assert degree == 5
        assert len(pts) == len(CTRL) + 6
        _same_shape(before, NurbsCurve(pts, degree, knots, wts), tol=1e-8)

    def test_rational_circle(self):
        pts, wts, knots, degree = elevate_degree(ARC, ARC_WEIGHTS, ARC_KNOTS, 2)
        assert len(pts) == 4 and len(wts) == 4
        _on_unit_circle(NurbsCurve(pts, degree, knots, wts))

    def test_full_multiplicity_interior_knot(self):
        # two separate linear pieces meeting at a repeated knot
        ctrl = [(0, 0), (1, 0), (1, 1), (2, 1)]
        knots = [0, 0, 0.5, 0.5, 1, 1]
        before = NurbsCurve(ctrl, 1, knots)
        pts, _, new_knots, degree = elevate_degree(ctrl, None, knots, 1)
        assert new_knots == [0, 0, 0, 0.5, 0.5, 0.5, 1, 1, 1]
        assert len(pts) == 6
        after = NurbsCurve(pts, degree, new_knots)
        for t in (0.1, 0.3, 0.6, 0.9):
            _close(before.evaluate_at(t), after.evaluate_at(t))

    def test_degree_zero(self):
        pts, _, knots, degree = elevate_degree([(0, 0), (1, 1)], None, [0, 0.5, 1], 0)
        assert degree == 1
        assert knots == [0, 0, 0.5, 0.5, 1, 1]
        assert pts == [(0, 0), (0, 0), (1, 1), (1, 1)]

    def test_zero_times(self):
        pts, _, knots, degree = elevate_degree(CTRL, None, KNOTS, 3, times=0)
        assert degree == 3
        assert knots == KNOTS
        assert len(pts) == len(CTRL)


class TestSplit:

    @pytest.mark.parametrize("t", [0.1, 0.4, 0.5, 0.8])
    def test_continuity(self, t):
        original = NurbsCurve(CTRL, 3, KNOTS)
        (lp, lw, lk), (rp, rw, rk) = split_curve(CTRL, None, KNOTS, 3, t)
        left = NurbsCurve(lp, 3, lk, lw)
        right = NurbsCurve(rp, 3, rk, rw)
        assert left.parameter_domain == (0, t)
        assert right.parameter_domain == (t, 1)
        _close(left.evaluate_at(t), original.evaluate_at(t))
        _close(right.evaluate_at(t), original.evaluate_at(t))
        _close(left.evaluate_at(0), original.evaluate_at(0))
        _close(right.evaluate_at(1), original.evaluate_at(1))

    def test_reparametrized_agreement(self):
        t = 0.37
        original = NurbsCurve(CTRL, 3, KNOTS)
        (lp, lw, lk), (rp, rw, rk) = split_curve(CTRL, None, KNOTS, 3, t)
        left = NurbsCurve(lp, 3, lk, lw)
        right = NurbsCurve(rp, 3, rk, rw)
        for s in _params():
            _close(left.evaluate_at(left.denormalize_parameter(s)), original.evaluate_at(t * s))
            _close(right.evaluate_at(right.denormalize_parameter(s)),
                   original.evaluate_at(t + (1 - t) * s))

    def test_halves_are_clamped(self):
        (lp, _, lk), (rp, _, rk) = split_curve(CTRL, None, KNOTS, 3, 0.4)
        assert lk[-4:] == [0.4] * 4
        assert rk[:4] == [0.4] * 4
        assert len(lk) == len(lp) + 4
        assert len(rk) == len(rp) + 4
        _close(lp[-1], rp[0])

    def test_rational(self):
        (lp, lw, lk), (rp, rw, rk) = split_curve(ARC, ARC_WEIGHTS, ARC_KNOTS, 2, 0.5)
        left = NurbsCurve(lp, 2, lk, lw)
        right = NurbsCurve(rp, 2, rk, rw)
        _on_unit_circle(left)
        _on_unit_circle(right)
        _close(lp[-1], rp[0])

    def test_boundary_rejected(self):
        for t in (0, 1, -1, 2):
            with pytest.raises(ParameterOutOfDomainError):
                split_curve(CTRL, None, KNOTS, 3, t)
