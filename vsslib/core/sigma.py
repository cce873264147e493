"""Non-interactive Sigma protocols for linear relations in the exponent.

A linear relation is a matrix ``us`` (m rows x n columns of points) and a
vector ``vs`` (m points), claiming knowledge of scalars x_1..x_n with

    vs[i] = sum_j operate(x_j, us[i][j])    for every row i.

The prover commits with fresh blinders r_j, derives the challenge c by
Fiat-Shamir over the group description and the full transcript, and
responds with s_j = r_j + x_j * c. The verifier checks

    sum_j operate(s_j, us[i][j]) == commitments[i] + operate(c, vs[i]).

Discrete-log, AND-of-dlog, equality-of-dlog, DDH and representation proofs
are fixed shapes of this relation.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from vsslib.backend.base import Group, Point
from vsslib.enums import DEFAULT_ALGORITHM, Algorithm
from vsslib.errors import DimensionMismatchError
from vsslib.metrics import PROOF_VERIFICATIONS
from vsslib.utils.crypto import digest

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LinearRelation:
    us: tuple[tuple[Point, ...], ...]
    vs: tuple[Point, ...]

    @classmethod
    def create(cls, us: Sequence[Sequence[Point]], vs: Sequence[Point]) -> LinearRelation:
        return cls(tuple(tuple(row) for row in us), tuple(vs))

    def flatten(self) -> list[Point]:
        return [u for row in self.us for u in row] + list(self.vs)


@dataclass(frozen=True)
class SigmaProof:
    commitments: tuple[Point, ...]
    response: tuple[int, ...]
    algorithm: Algorithm


@dataclass(frozen=True)
class DlogPair:
    """Claim v = operate(x, u)."""

    u: Point
    v: Point


@dataclass(frozen=True)
class DDHTuple:
    """Claim v = operate(z, generator) and w = operate(z, u)."""

    u: Point
    v: Point
    w: Point


def _diagonal(group: Group, points: Sequence[Point]) -> list[list[Point]]:
    m = len(points)
    return [[points[i] if i == j else group.neutral for j in range(m)] for i in range(m)]


# ---------------------------------------------------------------------------
# Fiat-Shamir
# ---------------------------------------------------------------------------


class FiatShamir:
    """Challenge derivation bound to the group description.

    The group (which carries the randomness source) and the hash algorithm
    are fixed per instance and threaded through every proof.
    """

    def __init__(self, group: Group, algorithm: Algorithm | str = DEFAULT_ALGORITHM) -> None:
        self.group = group
        self.algorithm = Algorithm.parse(algorithm)

    def compute_challenge(
        self,
        points: Sequence[Point],
        scalars: Sequence[int] = (),
        extras: Sequence[bytes] = (),
        nonce: bytes | None = None,
        algorithm: Algorithm | str | None = None,
    ) -> int:
        g = self.group
        data = b"".join(
            [
                g.mod_bytes,
                g.ord_bytes,
                g.gen_bytes,
                *(g.pack(p) for p in points),
                *(g.scalar_to_bytes(s) for s in scalars),
                *extras,
                nonce or b"",
            ]
        )
        return g.le_bytes_to_scalar(digest(data, algorithm or self.algorithm))


# ---------------------------------------------------------------------------
# Generic linear protocol
# ---------------------------------------------------------------------------


class LinearProtocol(FiatShamir):
    protocol = "linear"

    def prove_linear(
        self,
        witnesses: Sequence[int],
        relation: LinearRelation,
        nonce: bytes | None = None,
        extras: Sequence[bytes] = (),
        blinders: Sequence[int] | None = None,
    ) -> SigmaProof:
        g = self.group
        n = len(witnesses)
        if len(relation.us) != len(relation.vs) or any(len(row) != n for row in relation.us):
            raise DimensionMismatchError("Invalid dimensions")
        rs = list(blinders) if blinders is not None else [g.random_scalar() for _ in range(n)]
        if len(rs) != n:
            raise DimensionMismatchError("Invalid dimensions")

        commitments = tuple(g.linear_combination(rs, row) for row in relation.us)
        c = self.compute_challenge(relation.flatten() + list(commitments), (), extras, nonce)
        response = tuple((r + x * c) % g.order for r, x in zip(rs, witnesses))
        return SigmaProof(commitments, response, self.algorithm)

    def verify_linear(
        self,
        relation: LinearRelation,
        proof: SigmaProof,
        nonce: bytes | None = None,
        extras: Sequence[bytes] = (),
    ) -> bool:
        g = self.group
        commitments, response = proof.commitments, proof.response
        self._check_dimensions(relation, proof)
        if not all(g.validate_point(c) for c in commitments):
            return self._record(False)
        # Responses must be canonical; s + order would otherwise verify too.
        if not all(g.validate_scalar(s) for s in response):
            return self._record(False)

        c = self.compute_challenge(
            relation.flatten() + list(commitments), (), extras, nonce, Algorithm.parse(proof.algorithm)
        )
        valid = all(
            g.linear_combination(response, row) == g.combine(ci, g.operate(c, v))
            for row, v, ci in zip(relation.us, relation.vs, commitments)
        )
        return self._record(valid)

    @staticmethod
    def _check_dimensions(relation: LinearRelation, proof: SigmaProof) -> None:
        if len(relation.vs) != len(proof.commitments) or len(relation.us) != len(relation.vs):
            raise DimensionMismatchError("Invalid dimensions")
        if any(len(row) != len(proof.response) for row in relation.us):
            raise DimensionMismatchError("Invalid dimensions")

    def _record(self, valid: bool) -> bool:
        PROOF_VERIFICATIONS.labels(protocol=self.protocol, result="valid" if valid else "invalid").inc()
        if not valid:
            log.debug("sigma_proof_rejected", protocol=self.protocol, group=self.group.label.value)
        return valid

    def prove(self, witnesses: Sequence[int], relation: LinearRelation, nonce: bytes | None = None) -> SigmaProof:
        return self.prove_linear(witnesses, relation, nonce)

    def verify(self, relation: LinearRelation, proof: SigmaProof, nonce: bytes | None = None) -> bool:
        return self.verify_linear(relation, proof, nonce)


# ---------------------------------------------------------------------------
# Specializations
# ---------------------------------------------------------------------------


class DlogProtocol(LinearProtocol):
    protocol = "dlog"

    def prove(self, x: int, pair: DlogPair, nonce: bytes | None = None) -> SigmaProof:
        return self.prove_linear([x], LinearRelation.create([[pair.u]], [pair.v]), nonce)

    def verify(self, pair: DlogPair, proof: SigmaProof, nonce: bytes | None = None) -> bool:
        return self.verify_linear(LinearRelation.create([[pair.u]], [pair.v]), proof, nonce)


class AndDlogProtocol(LinearProtocol):
    """Knowledge of independent x_i with v_i = operate(x_i, u_i) for every pair."""

    protocol = "and_dlog"

    def _relation(self, pairs: Sequence[DlogPair]) -> LinearRelation:
        return LinearRelation.create(_diagonal(self.group, [p.u for p in pairs]), [p.v for p in pairs])

    def prove(self, witnesses: Sequence[int], pairs: Sequence[DlogPair], nonce: bytes | None = None) -> SigmaProof:
        return self.prove_linear(witnesses, self._relation(pairs), nonce)

    def verify(self, pairs: Sequence[DlogPair], proof: SigmaProof, nonce: bytes | None = None) -> bool:
        return self.verify_linear(self._relation(pairs), proof, nonce)


class EqDlogProtocol(LinearProtocol):
    """Knowledge of one x with v_i = operate(x, u_i) for every pair.

    The relation is the diagonal matrix of the u_i with x replicated per
    column. Equality is enforced by sharing a single blinder across columns
    and rejecting proofs whose responses differ.
    """

    protocol = "eq_dlog"

    def _relation(self, pairs: Sequence[DlogPair]) -> LinearRelation:
        return LinearRelation.create(_diagonal(self.group, [p.u for p in pairs]), [p.v for p in pairs])

    def prove(self, x: int, pairs: Sequence[DlogPair], nonce: bytes | None = None) -> SigmaProof:
        m = len(pairs)
        r = self.group.random_scalar()
        return self.prove_linear([x] * m, self._relation(pairs), nonce, blinders=[r] * m)

    def verify(self, pairs: Sequence[DlogPair], proof: SigmaProof, nonce: bytes | None = None) -> bool:
        relation = self._relation(pairs)
        if len(set(proof.response)) > 1:
            self._check_dimensions(relation, proof)
            return self._record(False)
        return self.verify_linear(relation, proof, nonce)


class DDHProtocol(EqDlogProtocol):
    """Proof that (generator, v, u, w) is a DDH tuple: v = z*G and w = z*u."""

    protocol = "ddh"

    def prove(self, z: int, ddh: DDHTuple, nonce: bytes | None = None) -> SigmaProof:
        g = self.group
        return super().prove(z, [DlogPair(g.generator, ddh.v), DlogPair(ddh.u, ddh.w)], nonce)

    def verify(self, ddh: DDHTuple, proof: SigmaProof, nonce: bytes | None = None) -> bool:
        g = self.group
        return super().verify([DlogPair(g.generator, ddh.v), DlogPair(ddh.u, ddh.w)], proof, nonce)


class OkamotoProtocol(LinearProtocol):
    """Knowledge of (s, t) with u = operate(s, generator) + operate(t, h)."""

    protocol = "representation"

    def prove(self, s: int, t: int, h: Point, u: Point, nonce: bytes | None = None) -> SigmaProof:
        return self.prove_linear([s, t], LinearRelation.create([[self.group.generator, h]], [u]), nonce)

    def verify(self, h: Point, u: Point, proof: SigmaProof, nonce: bytes | None = None) -> bool:
        return self.verify_linear(LinearRelation.create([[self.group.generator, h]], [u]), proof, nonce)
