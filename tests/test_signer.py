"""Tests for Schnorr signatures."""

from __future__ import annotations

import dataclasses

from vsslib.backend import Group
from vsslib.core.signer import SchnorrSigner
from vsslib.enums import Algorithm


class TestSchnorrSigner:
    def test_sign_verify(self, group: Group) -> None:
        secret = group.random_scalar()
        signer = SchnorrSigner(group)
        signature = signer.sign(secret, b"hello")
        assert signer.verify_signature(group.generate_point(secret), b"hello", signature)

    def test_wrong_message_rejected(self, fast_group: Group) -> None:
        secret = fast_group.random_scalar()
        signer = SchnorrSigner(fast_group)
        signature = signer.sign(secret, b"hello")
        assert not signer.verify_signature(fast_group.generate_point(secret), b"hellp", signature)

    def test_wrong_key_rejected(self, secp: Group) -> None:
        signer = SchnorrSigner(secp)
        signature = signer.sign(secp.random_scalar(), b"hello")
        assert not signer.verify_signature(secp.random_point(), b"hello", signature)

    def test_nonce(self, secp: Group) -> None:
        secret = secp.random_scalar()
        signer = SchnorrSigner(secp)
        signature = signer.sign(secret, b"msg", nonce=b"n1")
        pub = secp.generate_point(secret)
        assert signer.verify_signature(pub, b"msg", signature, nonce=b"n1")
        assert not signer.verify_signature(pub, b"msg", signature)

    def test_signatures_randomized(self, secp: Group) -> None:
        secret = secp.random_scalar()
        signer = SchnorrSigner(secp)
        assert signer.sign(secret, b"msg") != signer.sign(secret, b"msg")

    def test_algorithm_recorded(self, secp: Group) -> None:
        secret = secp.random_scalar()
        signature = SchnorrSigner(secp, "sha3-512").sign(secret, b"msg")
        assert signature.algorithm is Algorithm.SHA3_512
        assert SchnorrSigner(secp).verify_signature(secp.generate_point(secret), b"msg", signature)

    def test_algorithm_swap_rejected(self, secp: Group) -> None:
        secret = secp.random_scalar()
        signature = SchnorrSigner(secp).sign(secret, b"msg")
        swapped = dataclasses.replace(signature, algorithm=Algorithm.SHA384)
        assert not SchnorrSigner(secp).verify_signature(secp.generate_point(secret), b"msg", swapped)

    def test_response_plus_order_rejected(self, fast_group: Group) -> None:
        secret = fast_group.random_scalar()
        signer = SchnorrSigner(fast_group)
        signature = signer.sign(secret, b"msg")
        malleated = dataclasses.replace(signature, response=(signature.response[0] + fast_group.order,))
        assert not signer.verify_signature(fast_group.generate_point(secret), b"msg", malleated)
