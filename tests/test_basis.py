"""Tests for the B-spline basis functions."""

from fractions import Fraction

import pytest

from nurbskit.basis import (
    basis_function,
    basis_function_derivatives,
    basis_functions,
    rational_basis_function_derivatives,
    rational_basis_functions,
)
from nurbskit.knots import find_span, uniform_knot_vector


def _params(count=41):
    return [i / (count - 1) for i in range(count)]


@pytest.mark.parametrize("degree", [0, 1, 2, 3, 4, 5])
def test_partition_of_unity(degree):
    knots = uniform_knot_vector(degree, degree + 4)
    for u in _params():
        span = find_span(u, knots, degree)
        values = basis_functions(span, u, degree, knots)
        assert len(values) == degree + 1
        assert abs(sum(values) - 1.0) < 1e-12
        assert all(v >= -1e-15 for v in values)


@pytest.mark.parametrize("degree", [1, 2, 3])
def test_matches_recursive_definition(degree):
    knots = [0] * (degree + 1) + [0.2, 0.5, 0.5, 0.9] + [1] * (degree + 1)
    count = len(knots) - degree - 1
    for u in _params(23):
        span = find_span(u, knots, degree)
        fast = basis_functions(span, u, degree, knots)
        for i in range(count):
            slow = basis_function(i, degree, u, knots)
            if span - degree <= i <= span:
                assert abs(slow - fast[i - span + degree]) < 1e-12
            else:
                assert slow == 0


def test_last_basis_function_at_domain_end():
    knots = [0, 0, 0, 0.5, 1, 1, 1]
    assert basis_function(3, 2, 1, knots) == 1
    assert basis_function(2, 2, 1, knots) == 0
    span = find_span(1, knots, 2)
    assert basis_functions(span, 1, 2, knots) == [0, 0, 1]


def test_exact_fractions():
    knots = [Fraction(k) for k in (0, 0, 0, 1, 2, 2, 2)]
    u = Fraction(1, 2)
    values = basis_functions(find_span(u, knots, 2), u, 2, knots)
    assert values == [Fraction(1, 4), Fraction(5, 8), Fraction(1, 8)]
    assert sum(values) == 1


def test_rational_basis():
    knots = [0, 0, 0, 1, 1, 1]
    span = find_span(0.5, knots, 2)
    uniform = rational_basis_functions(span, 0.5, 2, knots, None)
    assert uniform == basis_functions(span, 0.5, 2, knots)
    weighted = rational_basis_functions(span, 0.5, 2, knots, [1, 2, 1])
    # N = [1/4, 1/2, 1/4], N*w = [1/4, 1, 1/4]
    assert weighted == pytest.approx([1 / 6, 2 / 3, 1 / 6])
    assert sum(weighted) == pytest.approx(1.0)


def test_derivatives_match_finite_difference():
    knots = [0, 0, 0, 0, 0.3, 0.7, 1, 1, 1, 1]
    h = 1e-6
    for u in (0.1, 0.4, 0.55, 0.9):
        span = find_span(u, knots, 3)
        ders = basis_function_derivatives(span, u, 3, knots)
        lo = basis_functions(span, u - h, 3, knots)
        hi = basis_functions(span, u + h, 3, knots)
        for r in range(4):
            assert ders[r] == pytest.approx((hi[r] - lo[r]) / (2 * h), abs=1e-5)
        assert sum(ders) == pytest.approx(0.0, abs=1e-9)


def test_degree_zero_derivative():
    assert basis_function_derivatives(0, 0.5, 0, [0, 1]) == [0]


def test_rational_derivatives_exact():
    knots = [Fraction(k) for k in (0, 0, 0, 1, 1, 1)]
    u = Fraction(1, 2)
    span = find_span(u, knots, 2)
    # N' = [-1, 0, 1], W = 3/2 and W' = 0, so R' = w*N'/W
    ders = rational_basis_function_derivatives(span, u, 2, knots, [1, 2, 1])
    assert ders == [Fraction(-2, 3), 0, Fraction(2, 3)]


def test_rational_derivatives_match_finite_difference():
    knots = [0, 0, 0, 0, 0.3, 0.7, 1, 1, 1, 1]
    weights = [1, 0.5, 2, 1.5, 0.8, 1]
    h = 1e-6
    for u in (0.1, 0.4, 0.55, 0.9):
        span = find_span(u, knots, 3)
        ders = rational_basis_function_derivatives(span, u, 3, knots, weights)
        lo = rational_basis_functions(span, u - h, 3, knots, weights)
        hi = rational_basis_functions(span, u + h, 3, knots, weights)
        for r in range(4):
            assert ders[r] == pytest.approx((hi[r] - lo[r]) / (2 * h), abs=1e-5)
        assert sum(ders) == pytest.approx(0.0, abs=1e-9)


def test_rational_derivatives_without_weights():
    knots = [0, 0, 0, 0.5, 1, 1, 1]
    span = find_span(0.25, knots, 2)
    assert (rational_basis_function_derivatives(span, 0.25, 2, knots, None)
            == basis_function_derivatives(span, 0.25, 2, knots))
