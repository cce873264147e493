"""Schnorr group modulo the RFC 3526 2048-bit MODP safe prime.

The group is the subgroup of quadratic residues, of prime order
q = (p - 1) / 2. Since p = 7 (mod 8), 2 is a residue and generates it.
Points are packed as little-endian integers of the modulus' byte width.
"""

from __future__ import annotations

from vsslib.backend.base import Group, Point, Rng
from vsslib.enums import System
from vsslib.errors import InvalidPointError
from vsslib.utils.arith import byte_len, le_bytes_to_int, le_int_to_bytes

MODP_2048_PRIME = int(
    """
    FFFFFFFF FFFFFFFF C90FDAA2 2168C234 C4C6628B 80DC1CD1
    29024E08 8A67CC74 020BBEA6 3B139B22 514A0879 8E3404DD
    EF9519B3 CD3A431B 302B0A6D F25F1437 4FE1356D 6D51C245
    E485B576 625E7EC6 F44C42E9 A637ED6B 0BFF5CB6 F406B7ED
    EE386BFB 5A899FA5 AE9F2411 7C4B1FE6 49286651 ECE45B3D
    C2007CB8 A163BF05 98DA4836 1C55D39A 69163FA8 FD24CF5F
    83655D23 DCA3AD96 1C62F356 208552BB 9ED52907 7096966D
    670C354E 4ABC9804 F1746C08 CA18217C 32905E46 2E36CE3B
    E39E772C 180E8603 9B2783A2 EC07A28F B5C55DF0 6F4C52C9
    DE2BCBF6 95581718 3995497C EA956AE5 15D22618 98FA0510
    15728E5A 8AACAA68 FFFFFFFF FFFFFFFF
    """.replace(" ", "").replace("\n", ""),
    16,
)
MODP_2048_ORDER = (MODP_2048_PRIME - 1) // 2
MODP_2048_GENERATOR = 2


class ModPoint(Point):
    __slots__ = ("value",)

    def __init__(self, group: ModularGroup, value: int) -> None:
        super().__init__(group)
        self.value = value

    @property
    def is_neutral(self) -> bool:
        return self.value == 1

    def to_bytes(self) -> bytes:
        return le_int_to_bytes(self.value, self.group.point_len)


class ModularGroup(Group):
    label = System.MODP_2048
    modulus = MODP_2048_PRIME
    order = MODP_2048_ORDER

    def __init__(self, rng: Rng | None = None) -> None:
        self._point_len = byte_len(self.modulus)
        self._neutral = ModPoint(self, 1)
        self._generator = ModPoint(self, MODP_2048_GENERATOR)
        super().__init__(rng)

    @property
    def generator(self) -> Point:
        return self._generator

    @property
    def neutral(self) -> Point:
        return self._neutral

    @property
    def point_len(self) -> int:
        return self._point_len

    def _operate(self, scalar: int, point: Point) -> Point:
        return ModPoint(self, pow(point.value, scalar, self.modulus))

    def _combine(self, p: Point, q: Point) -> Point:
        return ModPoint(self, (p.value * q.value) % self.modulus)

    def _invert(self, point: Point) -> Point:
        # Fermat inverse; valid for any non-zero residue.
        return ModPoint(self, pow(point.value, self.modulus - 2, self.modulus))

    def _is_valid(self, point: Point) -> bool:
        v = point.value
        return 1 <= v < self.modulus and pow(v, self.order, self.modulus) == 1

    def _decode(self, data: bytes) -> Point:
        value = le_bytes_to_int(data)
        if value >= self.modulus:
            raise InvalidPointError("Point not in subgroup")
        return ModPoint(self, value)
