"""Polynomial arithmetic and Lagrange interpolation over Z_order."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from vsslib.errors import InterpolationError, PolynomialError
from vsslib.utils.arith import mod_inv

if TYPE_CHECKING:
    from vsslib.backend.base import Group

INTERPOLATION_NON_DISTINCT_XS = "Not all provided x's are distinct modulo order"
INTERPOLATION_NR_POINTS_EXCEEDS_ORDER = "Number of provided points exceeds order"


class Polynomial:
    """Immutable polynomial with coefficients reduced mod ``order``.

    Trailing zero coefficients are trimmed, so the zero polynomial has no
    coefficients and degree ``-inf``.
    """

    __slots__ = ("_coeffs", "_order")

    def __init__(self, coeffs: Iterable[int], order: int) -> None:
        if order <= 1:
            raise PolynomialError("Order must be > 1")
        reduced = [c % order for c in coeffs]
        while reduced and reduced[-1] == 0:
            reduced.pop()
        self._coeffs: tuple[int, ...] = tuple(reduced)
        self._order = order

    @classmethod
    def zero(cls, order: int) -> Polynomial:
        return cls((), order)

    @classmethod
    def random(cls, group: Group, degree: int) -> Polynomial:
        if degree < 0:
            raise PolynomialError("Polynomial degree must be >= 0")
        return cls([group.random_scalar() for _ in range(degree + 1)], group.order)

    @property
    def coeffs(self) -> tuple[int, ...]:
        return self._coeffs

    @property
    def order(self) -> int:
        return self._order

    @property
    def degree(self) -> int | float:
        return len(self._coeffs) - 1 if self._coeffs else -math.inf

    def is_zero(self) -> bool:
        return not self._coeffs

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self._order == other._order and self._coeffs == other._coeffs

    def __hash__(self) -> int:
        return hash((self._order, self._coeffs))

    def __repr__(self) -> str:
        return f"Polynomial(degree={self.degree}, order={self._order})"

    def _check_order(self, other: Polynomial, op: str) -> None:
        if self._order != other._order:
            raise PolynomialError(f"Cannot {op} polynomials with different orders")

    def add(self, other: Polynomial) -> Polynomial:
        self._check_order(other, "add")
        n = max(len(self._coeffs), len(other._coeffs))
        a = self._coeffs + (0,) * (n - len(self._coeffs))
        b = other._coeffs + (0,) * (n - len(other._coeffs))
        return Polynomial([x + y for x, y in zip(a, b)], self._order)

    def mult(self, other: Polynomial) -> Polynomial:
        self._check_order(other, "multiply")
        if self.is_zero() or other.is_zero():
            return Polynomial.zero(self._order)
        out = [0] * (len(self._coeffs) + len(other._coeffs) - 1)
        for i, a in enumerate(self._coeffs):
            for j, b in enumerate(other._coeffs):
                out[i + j] += a * b
        return Polynomial(out, self._order)

    def mult_scalar(self, scalar: int) -> Polynomial:
        s = scalar % self._order
        return Polynomial([s * c for c in self._coeffs], self._order)

    def __add__(self, other: Polynomial) -> Polynomial:
        return self.add(other)

    def __mul__(self, other: Polynomial | int) -> Polynomial:
        if isinstance(other, int):
            return self.mult_scalar(other)
        return self.mult(other)

    def evaluate(self, x: int) -> int:
        # Horner
        acc = 0
        for c in reversed(self._coeffs):
            acc = (acc * x + c) % self._order
        return acc


class Lagrange(Polynomial):
    """The unique polynomial of degree < k through k points with distinct x's.

    Coefficients are expanded explicitly so the result can be committed to;
    evaluation uses the barycentric form with precomputed weights.
    """

    __slots__ = ("_xs", "_ys", "_ws")

    def __init__(self, points: Sequence[tuple[int, int]], order: int) -> None:
        k = len(points)
        if k > order:
            raise InterpolationError(INTERPOLATION_NR_POINTS_EXCEEDS_ORDER)
        xs = [x % order for x, _ in points]
        ys = [y % order for _, y in points]
        if len(set(xs)) != k:
            raise InterpolationError(INTERPOLATION_NON_DISTINCT_XS)

        ws: list[int] = []
        coeffs = [0] * k
        for j in range(k):
            w = 1
            basis = [1]  # prod_{i != j} (X - x_i), lowest degree first
            for i in range(k):
                if i == j:
                    continue
                w = (w * (xs[j] - xs[i])) % order
                shifted = [0] + basis
                for a in range(len(basis)):
                    shifted[a] = (shifted[a] - xs[i] * basis[a]) % order
                basis = shifted
            wj = mod_inv(w, order)
            ws.append(wj)
            fj = ys[j] * wj
            coeffs = [(c + fj * b) % order for c, b in zip(coeffs, basis)]

        super().__init__(coeffs, order)
        self._xs = tuple(xs)
        self._ys = tuple(ys)
        self._ws = tuple(ws)

    @property
    def weights(self) -> tuple[int, ...]:
        return self._ws

    def evaluate(self, x: int) -> int:
        order = self._order
        x %= order
        num = 0
        den = 0
        for xj, yj, wj in zip(self._xs, self._ys, self._ws):
            if x == xj:
                return yj
            a = wj * mod_inv(x - xj, order)
            num += a * yj
            den += a
        if not self._xs:
            return 0
        return (num * mod_inv(den, order)) % order


def interpolate(points: Sequence[tuple[int, int]], order: int) -> Lagrange:
    return Lagrange(points, order)
