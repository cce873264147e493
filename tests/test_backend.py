"""Tests for the group backends."""

from __future__ import annotations

import pytest

from vsslib.backend import Group, init_group
from vsslib.backend.elliptic import ED25519_ORDER, SECP256K1_ORDER
from vsslib.backend.modular import MODP_2048_ORDER, MODP_2048_PRIME
from vsslib.enums import System
from vsslib.errors import (
    ConfigurationError,
    GroupMismatchError,
    InvalidPointError,
    InvalidScalarError,
    UnsupportedGroupError,
)


class TestInitGroup:
    @pytest.mark.parametrize(
        "label,order",
        [
            ("secp256k1", SECP256K1_ORDER),
            ("ed25519", ED25519_ORDER),
            ("modp-2048", MODP_2048_ORDER),
        ],
    )
    def test_known_labels(self, label: str, order: int) -> None:
        g = init_group(label)
        assert g.label == System(label)
        assert g.order == order

    def test_accepts_enum(self) -> None:
        assert init_group(System.ED25519).label is System.ED25519

    def test_unsupported_label(self) -> None:
        with pytest.raises(UnsupportedGroupError, match="Unsupported group: p-256"):
            init_group("p-256")

    def test_unsupported_label_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            init_group("")

    def test_modp_order_relation(self) -> None:
        assert MODP_2048_ORDER * 2 + 1 == MODP_2048_PRIME

    def test_injected_rng(self) -> None:
        g = init_group("secp256k1", rng=lambda n: b"\x07" * n)
        assert g.random_scalar() == g.random_scalar()
        assert g.random_bytes(4) == b"\x07" * 4

    def test_equal_groups(self) -> None:
        assert init_group("ed25519") == init_group("ed25519")
        assert init_group("ed25519") != init_group("secp256k1")


class TestGroupLaw:
    def test_neutral_is_identity(self, group: Group) -> None:
        p = group.random_point()
        assert group.combine(p, group.neutral) == p
        assert group.combine(group.neutral, p) == p

    def test_inverse(self, group: Group) -> None:
        p = group.random_point()
        assert group.combine(p, group.invert(p)) == group.neutral
        assert group.invert(group.neutral) == group.neutral

    def test_operate_distributes_over_scalar_addition(self, group: Group) -> None:
        r, s = group.random_scalar(), group.random_scalar()
        lhs = group.generate_point((r + s) % group.order)
        rhs = group.combine(group.generate_point(r), group.generate_point(s))
        assert lhs == rhs

    def test_operate_zero_and_order(self, group: Group) -> None:
        p = group.random_point()
        assert group.operate(0, p) == group.neutral
        assert group.operate(group.order, p) == group.neutral
        assert group.operate(5, group.neutral) == group.neutral

    def test_operate_one(self, group: Group) -> None:
        p = group.random_point()
        assert group.operate(1, p) == p

    def test_doubling_matches_combine(self, group: Group) -> None:
        p = group.random_point()
        assert group.combine(p, p) == group.operate(2, p)

    def test_operate_on_non_generator(self, group: Group) -> None:
        a, b = group.random_scalar(), group.random_scalar()
        p = group.generate_point(a)
        assert group.operate(b, p) == group.generate_point(a * b % group.order)

    def test_linear_combination(self, group: Group) -> None:
        p, q = group.random_point(), group.random_point()
        expected = group.combine(group.operate(3, p), group.operate(4, q))
        assert group.linear_combination([3, 4], [p, q]) == expected

    def test_linear_combination_length_mismatch(self, group: Group) -> None:
        with pytest.raises(ValueError, match="differ in length"):
            group.linear_combination([1, 2], [group.generator])

    def test_foreign_point_rejected(self) -> None:
        secp, ed = init_group("secp256k1"), init_group("ed25519")
        with pytest.raises(GroupMismatchError):
            secp.combine(secp.generator, ed.generator)
        with pytest.raises(GroupMismatchError):
            ed.operate(2, secp.generator)


class TestValidation:
    def test_generated_points_valid(self, group: Group) -> None:
        assert group.validate_point(group.random_point())
        assert group.validate_point(group.neutral)
        assert group.assert_valid(group.generator)

    def test_validate_scalar(self, group: Group) -> None:
        assert group.validate_scalar(0)
        assert group.validate_scalar(group.order - 1)
        assert not group.validate_scalar(group.order)
        assert not group.validate_scalar(-1)
        with pytest.raises(InvalidScalarError, match="Scalar not in range"):
            group.validate_scalar(group.order, raise_on_invalid=True)

    def test_is_equal(self, group: Group) -> None:
        p = group.random_point()
        assert group.is_equal(p, group.unpack(group.pack(p)))
        assert group.assert_equal(p, p)
        with pytest.raises(InvalidPointError):
            group.assert_equal(p, group.invert(p))

    def test_modp_non_residue_invalid(self) -> None:
        g = init_group("modp-2048")
        # p - 1 = -1 is not a quadratic residue since p = 3 (mod 4)
        point = g.unpack((MODP_2048_PRIME - 1).to_bytes(g.point_len, "little"))
        assert not g.validate_point(point)
        with pytest.raises(InvalidPointError, match="Point not in subgroup"):
            g.assert_valid(point)

    def test_modp_rejects_values_above_modulus(self) -> None:
        g = init_group("modp-2048")
        with pytest.raises(InvalidPointError):
            g.unpack(b"\xff" * g.point_len)

    def test_ed25519_small_order_point_invalid(self) -> None:
        g = init_group("ed25519")
        # Encoding of the order-2 point (0, -1)
        minus_one = (2**255 - 20).to_bytes(32, "little")
        point = g.unpack(minus_one)
        assert not g.validate_point(point)

    def test_secp256k1_rejects_bad_prefix(self) -> None:
        g = init_group("secp256k1")
        with pytest.raises(InvalidPointError):
            g.unpack(b"\x05" + b"\x01" * 32)

    def test_secp256k1_rejects_x_above_field(self) -> None:
        g = init_group("secp256k1")
        with pytest.raises(InvalidPointError):
            g.unpack(b"\x02" + b"\xff" * 32)


class TestEncoding:
    def test_pack_unpack(self, group: Group) -> None:
        p = group.random_point()
        data = group.pack(p)
        assert len(data) == group.point_len
        assert group.unpack(data) == p

    def test_neutral_round_trip(self, group: Group) -> None:
        assert group.unpack(group.pack(group.neutral)).is_neutral

    def test_unpack_wrong_length(self, group: Group) -> None:
        with pytest.raises(InvalidPointError, match="Expected"):
            group.unpack(b"\x01\x02")

    def test_hexify_accepts_prefix(self, group: Group) -> None:
        p = group.random_point()
        assert group.unhexify("0x" + group.hexify(p)) == p
        assert group.unhexify_valid(group.hexify(p)) == p

    def test_unhexify_invalid_hex(self, group: Group) -> None:
        with pytest.raises(InvalidPointError, match="not valid hex"):
            group.unhexify("zz")

    def test_scalar_bytes_fixed_width(self, group: Group) -> None:
        data = group.scalar_to_bytes(1)
        assert len(data) == group.scalar_len
        assert data[0] == 1
        assert group.le_bytes_to_scalar(data) == 1

    def test_mod_and_order_bytes_little_endian(self) -> None:
        g = init_group("secp256k1")
        assert int.from_bytes(g.ord_bytes, "little") == g.order
        assert int.from_bytes(g.mod_bytes, "little") == g.modulus
