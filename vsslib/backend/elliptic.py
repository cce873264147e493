"""Elliptic-curve groups backed by native libraries.

secp256k1 delegates to ``coincurve`` (libsecp256k1); ed25519 delegates to
``nacl.bindings`` (libsodium). Neither library represents the point at
infinity, so the neutral element is a flag on the point wrapper.
"""

from __future__ import annotations

from coincurve import PrivateKey as _SK
from coincurve import PublicKey as _PK
from nacl import bindings as sodium
from nacl.exceptions import CryptoError

from vsslib.backend.base import Group, Point, Rng
from vsslib.enums import System
from vsslib.errors import InvalidPointError

# ---------------------------------------------------------------------------
# secp256k1
# ---------------------------------------------------------------------------

SECP256K1_FIELD = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_SECP_POINT_LEN = 33


class Secp256k1Point(Point):
    __slots__ = ("_pk",)

    def __init__(self, group: Group, pk: _PK | None = None) -> None:
        super().__init__(group)
        self._pk = pk

    @property
    def is_neutral(self) -> bool:
        return self._pk is None

    def to_bytes(self) -> bytes:
        if self._pk is None:
            return b"\x00" * _SECP_POINT_LEN
        return self._pk.format(compressed=True)


class Secp256k1Group(Group):
    label = System.SECP256K1
    modulus = SECP256K1_FIELD
    order = SECP256K1_ORDER

    def __init__(self, rng: Rng | None = None) -> None:
        self._neutral = Secp256k1Point(self)
        self._generator = Secp256k1Point(self, _SK(b"\x00" * 31 + b"\x01").public_key)
        super().__init__(rng)

    @property
    def generator(self) -> Point:
        return self._generator

    @property
    def neutral(self) -> Point:
        return self._neutral

    @property
    def point_len(self) -> int:
        return _SECP_POINT_LEN

    def _operate(self, scalar: int, point: Point) -> Point:
        if point is self._generator:
            return Secp256k1Point(self, _SK(scalar.to_bytes(32, "big")).public_key)
        return Secp256k1Point(self, point._pk.multiply(scalar.to_bytes(32, "big")))

    def _combine(self, p: Point, q: Point) -> Point:
        # libsecp256k1 refuses to return the point at infinity
        if p.to_bytes() == self._invert(q).to_bytes():
            return self._neutral
        return Secp256k1Point(self, _PK.combine_keys([p._pk, q._pk]))

    def _invert(self, point: Point) -> Point:
        raw = bytearray(point.to_bytes())
        raw[0] ^= 0x01
        return Secp256k1Point(self, _PK(bytes(raw)))

    def _is_valid(self, point: Point) -> bool:
        # Cofactor 1: every decodable curve point lies in the group.
        return point._pk is not None

    def _decode(self, data: bytes) -> Point:
        if data == b"\x00" * _SECP_POINT_LEN:
            return self._neutral
        if data[0] not in (0x02, 0x03):
            raise InvalidPointError("Point not in subgroup")
        try:
            return Secp256k1Point(self, _PK(data))
        except ValueError as e:
            raise InvalidPointError("Point not in subgroup") from e


# ---------------------------------------------------------------------------
# ed25519
# ---------------------------------------------------------------------------

ED25519_FIELD = 2**255 - 19
ED25519_ORDER = 2**252 + 27742317777372353535851937790883648493
_ED_POINT_LEN = 32
_ED_NEUTRAL = b"\x01" + b"\x00" * 31


class Ed25519Point(Point):
    __slots__ = ("_raw",)

    def __init__(self, group: Group, raw: bytes | None = None) -> None:
        super().__init__(group)
        self._raw = raw

    @property
    def is_neutral(self) -> bool:
        return self._raw is None

    def to_bytes(self) -> bytes:
        return _ED_NEUTRAL if self._raw is None else self._raw


class Ed25519Group(Group):
    label = System.ED25519
    modulus = ED25519_FIELD
    order = ED25519_ORDER

    def __init__(self, rng: Rng | None = None) -> None:
        self._neutral = Ed25519Point(self)
        base = sodium.crypto_scalarmult_ed25519_base_noclamp(_le32(1))
        self._generator = Ed25519Point(self, base)
        super().__init__(rng)

    @property
    def generator(self) -> Point:
        return self._generator

    @property
    def neutral(self) -> Point:
        return self._neutral

    @property
    def point_len(self) -> int:
        return _ED_POINT_LEN

    def _wrap(self, raw: bytes) -> Point:
        return self._neutral if raw == _ED_NEUTRAL else Ed25519Point(self, raw)

    def _operate(self, scalar: int, point: Point) -> Point:
        try:
            if point is self._generator:
                raw = sodium.crypto_scalarmult_ed25519_base_noclamp(_le32(scalar))
            else:
                raw = sodium.crypto_scalarmult_ed25519_noclamp(_le32(scalar), point._raw)
        except CryptoError as e:
            raise InvalidPointError("Point not in subgroup") from e
        return self._wrap(raw)

    def _combine(self, p: Point, q: Point) -> Point:
        try:
            return self._wrap(sodium.crypto_core_ed25519_add(p._raw, q._raw))
        except CryptoError as e:
            raise InvalidPointError("Point not in subgroup") from e

    def _invert(self, point: Point) -> Point:
        # Negation flips the sign bit of x.
        raw = bytearray(point._raw)
        raw[31] ^= 0x80
        return Ed25519Point(self, bytes(raw))

    def _is_valid(self, point: Point) -> bool:
        return bool(sodium.crypto_core_ed25519_is_valid_point(point._raw))

    def _decode(self, data: bytes) -> Point:
        return self._wrap(data)


def _le32(scalar: int) -> bytes:
    return scalar.to_bytes(32, "little")
