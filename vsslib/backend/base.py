"""Abstract prime-order group contract.

Every protocol layer (polynomials, sharing, sigma proofs, ElGamal, the
threshold combiner) programs against ``Group`` and ``Point`` only. Concrete
backends implement the private hooks; the public operations here enforce
the cross-cutting rules: scalars are reduced mod order, ``operate(0, p)`` is
the neutral element for any ``p``, and points from a foreign group are
rejected before any arithmetic happens.
"""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from functools import reduce

from vsslib.enums import System
from vsslib.errors import GroupMismatchError, InvalidPointError, InvalidScalarError
from vsslib.utils.arith import byte_len, le_bytes_to_int, le_int_to_bytes

Rng = Callable[[int], bytes]

# Extra random bytes drawn beyond the order's width so reduction mod order is
# statistically uniform.
_SCALAR_SLACK_BYTES = 16


class Point(ABC):
    """An element of a ``Group``. Immutable; compared by canonical bytes."""

    __slots__ = ("group",)

    def __init__(self, group: Group) -> None:
        self.group = group

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Canonical fixed-length encoding."""

    @property
    @abstractmethod
    def is_neutral(self) -> bool:
        ...

    def to_hex(self) -> str:
        return self.to_bytes().hex()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.group.label == other.group.label and self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash((self.group.label, self.to_bytes()))

    def __repr__(self) -> str:
        h = self.to_hex()
        return f"{type(self).__name__}({self.group.label.value}:{h[:16]}...)"


class Group(ABC):
    """A cyclic group of prime order with a distinguished generator.

    Instances are immutable after construction and safe to share across
    threads. The only injected dependency is ``rng``, a callable returning
    ``n`` cryptographically secure random bytes.
    """

    label: System
    modulus: int
    order: int

    def __init__(self, rng: Rng | None = None) -> None:
        self._rng: Rng = rng or secrets.token_bytes
        self.scalar_len = byte_len(self.order)
        self.mod_bytes = le_int_to_bytes(self.modulus, byte_len(self.modulus))
        self.ord_bytes = le_int_to_bytes(self.order, self.scalar_len)

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def generator(self) -> Point:
        ...

    @property
    @abstractmethod
    def neutral(self) -> Point:
        ...

    @property
    @abstractmethod
    def point_len(self) -> int:
        """Byte length of a packed point."""

    @abstractmethod
    def _operate(self, scalar: int, point: Point) -> Point:
        """Scalar multiplication for 0 < scalar < order and non-neutral point."""

    @abstractmethod
    def _combine(self, p: Point, q: Point) -> Point:
        """Group law for two non-neutral points."""

    @abstractmethod
    def _invert(self, point: Point) -> Point:
        """Inverse of a non-neutral point."""

    @abstractmethod
    def _is_valid(self, point: Point) -> bool:
        """Subgroup membership of a non-neutral point."""

    @abstractmethod
    def _decode(self, data: bytes) -> Point:
        """Parse canonical bytes. Raises InvalidPointError on undecodable input."""

    # ------------------------------------------------------------------
    # Group law
    # ------------------------------------------------------------------

    @property
    def gen_bytes(self) -> bytes:
        return self.generator.to_bytes()

    def _check(self, point: Point) -> None:
        if not isinstance(point, Point) or point.group.label != self.label:
            owner = getattr(getattr(point, "group", None), "label", None)
            raise GroupMismatchError(
                f"Point from {owner!s} cannot be used with group {self.label.value}"
            )

    def operate(self, scalar: int, point: Point) -> Point:
        self._check(point)
        scalar %= self.order
        if scalar == 0 or point.is_neutral:
            return self.neutral
        return self._operate(scalar, point)

    def combine(self, p: Point, q: Point) -> Point:
        self._check(p)
        self._check(q)
        if p.is_neutral:
            return q
        if q.is_neutral:
            return p
        return self._combine(p, q)

    def invert(self, point: Point) -> Point:
        self._check(point)
        if point.is_neutral:
            return point
        return self._invert(point)

    def sum(self, points: Iterable[Point]) -> Point:
        return reduce(self.combine, points, self.neutral)

    def linear_combination(self, scalars: Sequence[int], points: Sequence[Point]) -> Point:
        """Return sum_j operate(scalars[j], points[j])."""
        if len(scalars) != len(points):
            raise ValueError("Scalars and points differ in length")
        return self.sum(self.operate(s, p) for s, p in zip(scalars, points))

    # ------------------------------------------------------------------
    # Randomness
    # ------------------------------------------------------------------

    def random_bytes(self, n: int | None = None) -> bytes:
        return self._rng(self.scalar_len if n is None else n)

    def random_scalar(self) -> int:
        raw = self._rng(self.scalar_len + _SCALAR_SLACK_BYTES)
        return le_bytes_to_int(raw) % self.order

    def generate_point(self, scalar: int) -> Point:
        return self.operate(scalar, self.generator)

    def random_point(self) -> Point:
        return self.generate_point(self.random_scalar())

    # ------------------------------------------------------------------
    # Validation and equality
    # ------------------------------------------------------------------

    def validate_point(self, point: Point, raise_on_invalid: bool = False) -> bool:
        self._check(point)
        valid = point.is_neutral or self._is_valid(point)
        if not valid and raise_on_invalid:
            raise InvalidPointError("Point not in subgroup")
        return valid

    def assert_valid(self, point: Point) -> bool:
        return self.validate_point(point, raise_on_invalid=True)

    def validate_scalar(self, scalar: int, raise_on_invalid: bool = False) -> bool:
        valid = isinstance(scalar, int) and 0 <= scalar < self.order
        if not valid and raise_on_invalid:
            raise InvalidScalarError("Scalar not in range")
        return valid

    def is_compatible(self, other: Group) -> bool:
        return (
            isinstance(other, Group)
            and self.label == other.label
            and self.modulus == other.modulus
            and self.order == other.order
            and self.gen_bytes == other.gen_bytes
        )

    def is_equal(self, p: Point, q: Point) -> bool:
        self._check(p)
        self._check(q)
        return p.to_bytes() == q.to_bytes()

    def assert_equal(self, p: Point, q: Point) -> bool:
        if not self.is_equal(p, q):
            raise InvalidPointError("Points are not equal")
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Group):
            return NotImplemented
        return self.is_compatible(other)

    def __hash__(self) -> int:
        return hash((self.label, self.order))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.label.value})"

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def pack(self, point: Point) -> bytes:
        self._check(point)
        return point.to_bytes()

    def unpack(self, data: bytes) -> Point:
        data = bytes(data)
        if len(data) != self.point_len:
            raise InvalidPointError(
                f"Expected {self.point_len} bytes for {self.label.value} point, got {len(data)}"
            )
        return self._decode(data)

    def unpack_valid(self, data: bytes) -> Point:
        point = self.unpack(data)
        self.assert_valid(point)
        return point

    def hexify(self, point: Point) -> str:
        return self.pack(point).hex()

    def unhexify(self, value: str) -> Point:
        try:
            data = bytes.fromhex(value.removeprefix("0x"))
        except ValueError:
            raise InvalidPointError("Point encoding is not valid hex") from None
        return self.unpack(data)

    def unhexify_valid(self, value: str) -> Point:
        point = self.unhexify(value)
        self.assert_valid(point)
        return point

    def le_bytes_to_scalar(self, data: bytes) -> int:
        return le_bytes_to_int(data) % self.order

    def scalar_to_bytes(self, scalar: int) -> bytes:
        return le_int_to_bytes(scalar % self.order, self.scalar_len)
