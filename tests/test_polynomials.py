"""Tests for polynomial arithmetic and Lagrange interpolation."""

from __future__ import annotations

import math

import pytest

from vsslib.backend import init_group
from vsslib.core.polynomials import (
    INTERPOLATION_NON_DISTINCT_XS,
    INTERPOLATION_NR_POINTS_EXCEEDS_ORDER,
    Lagrange,
    Polynomial,
    interpolate,
)
from vsslib.errors import InterpolationError, PolynomialError

P = 101


class TestPolynomial:
    def test_trailing_zeros_trimmed(self) -> None:
        poly = Polynomial([1, 2, 0, 0], P)
        assert poly.coeffs == (1, 2)
        assert poly.degree == 1

    def test_coefficients_reduced(self) -> None:
        assert Polynomial([P + 3, -1], P).coeffs == (3, P - 1)

    def test_zero_polynomial(self) -> None:
        zero = Polynomial.zero(P)
        assert zero.is_zero()
        assert zero.degree == -math.inf
        assert zero.evaluate(17) == 0
        assert Polynomial([0, 0], P) == zero

    def test_invalid_order(self) -> None:
        with pytest.raises(PolynomialError, match="Order must be > 1"):
            Polynomial([1], 1)

    def test_add(self) -> None:
        a = Polynomial([1, 2, 3], P)
        b = Polynomial([4, 5], P)
        assert (a + b).coeffs == (5, 7, 3)

    def test_add_cancels_leading_term(self) -> None:
        a = Polynomial([1, 1], P)
        b = Polynomial([0, P - 1], P)
        assert (a + b).coeffs == (1,)

    def test_mult(self) -> None:
        # (1 + x)(1 - x) = 1 - x^2
        a = Polynomial([1, 1], P)
        b = Polynomial([1, -1], P)
        assert (a * b).coeffs == (1, 0, P - 1)

    def test_mult_by_zero(self) -> None:
        assert (Polynomial([1, 2], P) * Polynomial.zero(P)).is_zero()

    def test_mult_scalar(self) -> None:
        assert (Polynomial([1, 2], P) * 3).coeffs == (3, 6)
        assert (Polynomial([1, 2], P) * P).is_zero()

    def test_different_orders_rejected(self) -> None:
        with pytest.raises(PolynomialError, match="different orders"):
            Polynomial([1], P) + Polynomial([1], 103)
        with pytest.raises(PolynomialError, match="different orders"):
            Polynomial([1], P) * Polynomial([1], 103)

    def test_evaluate(self) -> None:
        # 3 + 2x + x^2 at x = 4
        assert Polynomial([3, 2, 1], P).evaluate(4) == (3 + 8 + 16) % P

    def test_random_degree(self) -> None:
        g = init_group("secp256k1")
        poly = Polynomial.random(g, 3)
        assert poly.order == g.order
        assert poly.degree <= 3

    def test_random_negative_degree(self) -> None:
        with pytest.raises(PolynomialError):
            Polynomial.random(init_group("secp256k1"), -1)

    def test_equality_and_hash(self) -> None:
        assert Polynomial([1, 2], P) == Polynomial([1, 2, 0], P)
        assert hash(Polynomial([1, 2], P)) == hash(Polynomial([1, 2], P))
        assert Polynomial([1, 2], P) != Polynomial([1, 2], 103)


class TestLagrange:
    def test_passes_through_points(self) -> None:
        points = [(1, 5), (2, 17), (7, 3)]
        poly = interpolate(points, P)
        for x, y in points:
            assert poly.evaluate(x) == y

    def test_expanded_coefficients_match_barycentric(self) -> None:
        poly = interpolate([(0, 9), (3, 1), (4, 40), (10, 2)], P)
        expanded = Polynomial(poly.coeffs, P)
        for x in range(20):
            assert poly.evaluate(x) == expanded.evaluate(x)

    def test_recovers_known_polynomial(self) -> None:
        original = Polynomial([7, 0, 5], P)
        poly = interpolate([(x, original.evaluate(x)) for x in (2, 5, 9)], P)
        assert poly.coeffs == original.coeffs
        assert poly.degree == 2

    def test_single_point_is_constant(self) -> None:
        poly = interpolate([(3, 42)], P)
        assert poly.coeffs == (42,)
        assert poly.evaluate(99) == 42

    def test_empty_is_zero(self) -> None:
        poly = interpolate([], P)
        assert poly.is_zero()
        assert poly.evaluate(5) == 0

    def test_non_distinct_xs(self) -> None:
        with pytest.raises(InterpolationError, match=INTERPOLATION_NON_DISTINCT_XS):
            interpolate([(1, 2), (1, 3)], P)

    def test_xs_distinct_only_modulo_order(self) -> None:
        with pytest.raises(InterpolationError, match=INTERPOLATION_NON_DISTINCT_XS):
            interpolate([(1, 2), (1 + P, 3)], P)

    def test_too_many_points(self) -> None:
        with pytest.raises(InterpolationError, match=INTERPOLATION_NR_POINTS_EXCEEDS_ORDER):
            interpolate([(i, i) for i in range(4)], 3)

    def test_weights(self) -> None:
        poly = Lagrange([(1, 0), (2, 0)], P)
        # w_j = 1 / prod_{i != j} (x_j - x_i)
        assert poly.weights == (P - 1, 1)

    def test_large_order(self) -> None:
        g = init_group("ed25519")
        secret = g.random_scalar()
        poly = interpolate([(0, secret), (1, g.random_scalar()), (2, g.random_scalar())], g.order)
        assert poly.evaluate(0) == secret
