"""Shamir secret sharing with Feldman and Pedersen verifiable commitments.

A dealer interpolates a degree-(t-1) polynomial through (0, secret), any
predefined share values at x = 1..m, and random values for the remaining
x's below t. Shares are evaluations at 1..n. Any t of them reconstruct the
secret through Lagrange coefficients at zero:

    lambda_i = prod_{j != i} j / (j - i)   (mod order)

Group elements lifted from shares (public keys, decryptors) are
reconstructed with the same weights applied in the exponent.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import reduce

import structlog

from vsslib.backend.base import Group, Point
from vsslib.core.polynomials import Polynomial, interpolate
from vsslib.errors import InvalidShareError, ShamirError
from vsslib.metrics import SHARE_VERIFICATIONS
from vsslib.utils.arith import mod_inv

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SecretShare:
    """A party's evaluation f(index) of the sharing polynomial."""

    value: int
    index: int


@dataclass(frozen=True)
class PointShare:
    """A group-lifted share: operate(f(index), generator) or any point weighted like one."""

    value: Point
    index: int


@dataclass(frozen=True)
class FeldmanCommitments:
    commitments: tuple[Point, ...]


@dataclass(frozen=True)
class PedersenCommitments:
    """Hiding commitments g^a_j * h^b_j plus the per-index blinding values b(index)."""

    commitments: tuple[Point, ...]
    bindings: Mapping[int, int]
    h: Point


# ---------------------------------------------------------------------------
# Dealing
# ---------------------------------------------------------------------------


class ShamirSharing:
    """The dealer's view of one sharing instance."""

    def __init__(self, group: Group, nr_shares: int, threshold: int, polynomial: Polynomial) -> None:
        self.group = group
        self.nr_shares = nr_shares
        self.threshold = threshold
        self.polynomial = polynomial

    def get_share(self, index: int) -> SecretShare:
        if not 1 <= index <= self.nr_shares:
            raise ShamirError(f"No share with index {index}")
        return SecretShare(self.polynomial.evaluate(index), index)

    def get_secret_shares(self) -> list[SecretShare]:
        return [self.get_share(i) for i in range(1, self.nr_shares + 1)]

    def get_public_shares(self) -> list[PointShare]:
        g = self.group
        return [PointShare(g.generate_point(s.value), s.index) for s in self.get_secret_shares()]

    def create_feldman(self) -> FeldmanCommitments:
        g = self.group
        coeffs = self._padded_coeffs(self.polynomial)
        return FeldmanCommitments(tuple(g.generate_point(a) for a in coeffs))

    def create_pedersen(self, h: Point) -> PedersenCommitments:
        """Commit with a second generator ``h`` whose discrete log w.r.t. the
        generator must be unknown to the dealer."""
        g = self.group
        g.assert_valid(h)
        blinding = Polynomial.random(g, self.threshold - 1)
        a_coeffs = self._padded_coeffs(self.polynomial)
        b_coeffs = self._padded_coeffs(blinding)
        commitments = tuple(
            g.combine(g.generate_point(a), g.operate(b, h)) for a, b in zip(a_coeffs, b_coeffs)
        )
        bindings = {i: blinding.evaluate(i) for i in range(1, self.nr_shares + 1)}
        return PedersenCommitments(commitments, bindings, h)

    def _padded_coeffs(self, polynomial: Polynomial) -> list[int]:
        # Trimmed coefficients are padded back so there are always t commitments.
        coeffs = list(polynomial.coeffs)
        return coeffs + [0] * (self.threshold - len(coeffs))


def share_secret(
    group: Group,
    nr_shares: int,
    threshold: int,
    secret: int,
    predefined: Sequence[int] = (),
) -> ShamirSharing:
    """Share ``secret`` among ``nr_shares`` parties with the given threshold.

    Args:
        group: Group whose order defines the scalar field.
        nr_shares: Number of parties n (1 <= n < order).
        threshold: Minimum number of shares t needed to reconstruct (1 <= t <= n).
        secret: Scalar to share; reduced mod order.
        predefined: Up to t-1 share values fixed for indexes 1..m.

    Returns:
        A ShamirSharing whose polynomial has constant term ``secret``.
    """
    if nr_shares < 1:
        raise ShamirError("Number of shares must be at least 1")
    if threshold < 1:
        raise ShamirError("Threshold parameter must be at least 1")
    if threshold > nr_shares:
        raise ShamirError("Threshold parameter exceeds number of shares")
    if not nr_shares < group.order:
        raise ShamirError("Number of shares must be less than the group order")
    if not len(predefined) < threshold:
        raise ShamirError("Number of predefined points violates threshold")

    points = [(0, secret)]
    for x in range(1, threshold):
        y = predefined[x - 1] if x <= len(predefined) else group.random_scalar()
        points.append((x, y))
    polynomial = interpolate(points, group.order)
    log.debug("secret_shared", nr_shares=nr_shares, threshold=threshold, predefined=len(predefined))
    return ShamirSharing(group, nr_shares, threshold, polynomial)


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


def _weighted_commitments(group: Group, index: int, commitments: Sequence[Point]) -> Point:
    order = group.order
    return group.linear_combination([pow(index, j, order) for j in range(len(commitments))], commitments)


def verify_feldman(
    group: Group,
    share: SecretShare,
    commitments: Sequence[Point] | FeldmanCommitments,
    raise_on_invalid: bool = False,
) -> bool:
    """Check operate(value, generator) == sum_j operate(index^j, C_j)."""
    if isinstance(commitments, FeldmanCommitments):
        commitments = commitments.commitments
    lhs = group.generate_point(share.value)
    rhs = _weighted_commitments(group, share.index, commitments)
    return _record("feldman", share.index, lhs == rhs, raise_on_invalid)


def verify_pedersen(
    group: Group,
    share: SecretShare,
    binding: int,
    h: Point,
    commitments: Sequence[Point],
    raise_on_invalid: bool = False,
) -> bool:
    """Check g^value * h^binding == sum_j operate(index^j, C_j)."""
    lhs = group.combine(group.generate_point(share.value), group.operate(binding, h))
    rhs = _weighted_commitments(group, share.index, commitments)
    return _record("pedersen", share.index, lhs == rhs, raise_on_invalid)


def _record(scheme: str, index: int, valid: bool, raise_on_invalid: bool) -> bool:
    SHARE_VERIFICATIONS.labels(scheme=scheme, result="valid" if valid else "invalid").inc()
    if not valid:
        log.warning("share_verification_failed", scheme=scheme, index=index)
        if raise_on_invalid:
            raise InvalidShareError("Invalid share")
    return valid


# ---------------------------------------------------------------------------
# Reconstruction
# ---------------------------------------------------------------------------


def _distinct_indexes(shares: Sequence[SecretShare | PointShare]) -> list[int]:
    indexes = [s.index for s in shares]
    if len(set(indexes)) != len(indexes):
        raise ShamirError("Share indexes must be distinct")
    if any(i < 1 for i in indexes):
        raise ShamirError("Share indexes must be positive")
    return indexes


def compute_lambda(group: Group, index: int, qualified_indexes: Sequence[int]) -> int:
    """Lagrange coefficient at zero for ``index`` over ``qualified_indexes``."""
    order = group.order
    return reduce(
        lambda acc, j: (acc * j * mod_inv(j - index, order)) % order,
        (j for j in qualified_indexes if j != index),
        1,
    )


def reconstruct_secret(group: Group, shares: Sequence[SecretShare]) -> int:
    indexes = _distinct_indexes(shares)
    order = group.order
    return reduce(
        lambda acc, s: (acc + s.value * compute_lambda(group, s.index, indexes)) % order,
        shares,
        0,
    )


def reconstruct_point(group: Group, shares: Sequence[PointShare]) -> Point:
    """Weighted sum of lifted shares; every share must be a subgroup element."""
    indexes = _distinct_indexes(shares)
    for share in shares:
        group.assert_valid(share.value)
    return group.sum(group.operate(compute_lambda(group, s.index, indexes), s.value) for s in shares)
