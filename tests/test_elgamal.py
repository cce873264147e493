"""Tests for ElGamal encryption and its proofs."""

from __future__ import annotations

import dataclasses

import pytest

from vsslib.backend import Group, init_group
from vsslib.core.elgamal import (
    ByDecryptor,
    ByRandomness,
    BySecret,
    Ciphertext,
    IesAlpha,
    IesCipher,
    KemAlpha,
    KemCipher,
    PlainCipher,
    cipher_for,
    elgamal,
    prove_decryptor,
    prove_encryption,
    verify_decryptor,
    verify_encryption,
)
from vsslib.enums import Algorithm, BlockMode, ElgamalScheme
from vsslib.errors import ConfigurationError, DecryptionError, InvalidMacError, InvalidPointError


def _keypair(group: Group) -> tuple[int, object]:
    secret = group.random_scalar()
    return secret, group.generate_point(secret)


class TestFactory:
    @pytest.mark.parametrize(
        "scheme,cls",
        [("plain", PlainCipher), ("kem", KemCipher), ("ies", IesCipher)],
    )
    def test_elgamal(self, secp: Group, scheme: str, cls: type) -> None:
        cipher = elgamal(secp, scheme)
        assert isinstance(cipher, cls)
        assert cipher.scheme is ElgamalScheme(scheme)

    def test_unsupported_scheme(self, secp: Group) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported ElGamal scheme"):
            elgamal(secp, "rsa")

    def test_cipher_for_uses_recorded_parameters(self, secp: Group) -> None:
        _, pub = _keypair(secp)
        ct = elgamal(secp, "ies", "aes-256-gcm", "sha512").encrypt(b"m", pub).ciphertext
        cipher = cipher_for(secp, ct)
        assert isinstance(cipher, IesCipher)
        assert cipher.mode is BlockMode.AES_256_GCM
        assert cipher.algorithm is Algorithm.SHA512

    def test_scheme_property(self, secp: Group) -> None:
        _, pub = _keypair(secp)
        assert elgamal(secp, "kem").encrypt(b"m", pub).ciphertext.scheme is ElgamalScheme.KEM
        assert elgamal(secp, "plain").encrypt(secp.generator, pub).ciphertext.scheme is ElgamalScheme.PLAIN


class TestPlain:
    def test_round_trip(self, group: Group) -> None:
        secret, pub = _keypair(group)
        message = group.random_point()
        cipher = elgamal(group, "plain")
        ct = cipher.encrypt(message, pub).ciphertext
        assert cipher.decrypt_with_secret(ct, secret) == message

    def test_decrypt_by_each_input(self, secp: Group) -> None:
        secret, pub = _keypair(secp)
        message = secp.random_point()
        cipher = elgamal(secp, "plain")
        enc = cipher.encrypt(message, pub)
        assert cipher.decrypt(enc.ciphertext, BySecret(secret)) == message
        assert cipher.decrypt(enc.ciphertext, ByDecryptor(enc.decryptor)) == message
        assert cipher.decrypt(enc.ciphertext, ByRandomness(enc.randomness, pub)) == message

    def test_message_must_be_valid(self) -> None:
        g = init_group("ed25519")
        _, pub = _keypair(g)
        small_order = g.unpack((2**255 - 20).to_bytes(32, "little"))
        with pytest.raises(InvalidPointError):
            elgamal(g, "plain").encrypt(small_order, pub)

    def test_encryption_metadata(self, secp: Group) -> None:
        _, pub = _keypair(secp)
        enc = elgamal(secp, "plain").encrypt(secp.generator, pub)
        assert enc.ciphertext.beta == secp.generate_point(enc.randomness)
        assert enc.decryptor == secp.operate(enc.randomness, pub)


class TestHybrid:
    @pytest.mark.parametrize("scheme", ["kem", "ies"])
    @pytest.mark.parametrize("mode", [m.value for m in BlockMode])
    def test_round_trip_every_mode(self, secp: Group, scheme: str, mode: str) -> None:
        secret, pub = _keypair(secp)
        cipher = elgamal(secp, scheme, mode)
        enc = cipher.encrypt(b"threshold secrets", pub)
        assert cipher.decrypt_with_secret(enc.ciphertext, secret) == b"threshold secrets"
        assert cipher.decrypt_with_decryptor(enc.ciphertext, enc.decryptor) == b"threshold secrets"
        assert cipher.decrypt_with_randomness(enc.ciphertext, pub, enc.randomness) == b"threshold secrets"

    @pytest.mark.parametrize("scheme", ["kem", "ies"])
    def test_round_trip_every_group(self, group: Group, scheme: str) -> None:
        secret, pub = _keypair(group)
        cipher = elgamal(group, scheme)
        ct = cipher.encrypt(b"", pub).ciphertext
        assert cipher.decrypt_with_secret(ct, secret) == b""

    def test_wrong_secret_fails(self, secp: Group) -> None:
        _, pub = _keypair(secp)
        cipher = elgamal(secp, "ies")
        ct = cipher.encrypt(b"msg", pub).ciphertext
        with pytest.raises(DecryptionError, match="Could not decrypt"):
            cipher.decrypt_with_secret(ct, secp.random_scalar())

    def test_ies_mac_failure_chained(self, secp: Group) -> None:
        secret, pub = _keypair(secp)
        cipher = elgamal(secp, "ies")
        ct = cipher.encrypt(b"msg", pub).ciphertext
        alpha = dataclasses.replace(ct.alpha, mac=b"\x00" * len(ct.alpha.mac))
        with pytest.raises(DecryptionError) as exc_info:
            cipher.decrypt_with_secret(Ciphertext(alpha, ct.beta), secret)
        assert isinstance(exc_info.value.__cause__, InvalidMacError)

    def test_ies_tampered_ciphertext_rejected(self, secp: Group) -> None:
        secret, pub = _keypair(secp)
        cipher = elgamal(secp, "ies", "aes-256-ctr")
        ct = cipher.encrypt(b"msg", pub).ciphertext
        flipped = bytes([ct.alpha.ciphered[0] ^ 1]) + ct.alpha.ciphered[1:]
        tampered = Ciphertext(dataclasses.replace(ct.alpha, ciphered=flipped), ct.beta)
        with pytest.raises(DecryptionError):
            cipher.decrypt_with_secret(tampered, secret)

    def test_kem_gcm_tampered_rejected(self, secp: Group) -> None:
        secret, pub = _keypair(secp)
        cipher = elgamal(secp, "kem", "aes-256-gcm")
        ct = cipher.encrypt(b"msg", pub).ciphertext
        tampered = Ciphertext(dataclasses.replace(ct.alpha, tag=b"\x00" * 16), ct.beta)
        with pytest.raises(DecryptionError):
            cipher.decrypt_with_secret(tampered, secret)

    def test_payload_type_mismatch(self, secp: Group) -> None:
        secret, pub = _keypair(secp)
        ct = elgamal(secp, "kem").encrypt(b"msg", pub).ciphertext
        with pytest.raises(DecryptionError):
            elgamal(secp, "ies").decrypt_with_secret(ct, secret)

    def test_alpha_types(self, secp: Group) -> None:
        _, pub = _keypair(secp)
        assert isinstance(elgamal(secp, "kem").encrypt(b"m", pub).ciphertext.alpha, KemAlpha)
        assert isinstance(elgamal(secp, "ies").encrypt(b"m", pub).ciphertext.alpha, IesAlpha)

    def test_invalid_beta_rejected(self) -> None:
        g = init_group("ed25519")
        secret, pub = _keypair(g)
        ct = elgamal(g, "ies").encrypt(b"msg", pub).ciphertext
        small_order = g.unpack((2**255 - 20).to_bytes(32, "little"))
        with pytest.raises(DecryptionError):
            elgamal(g, "ies").decrypt_with_secret(Ciphertext(ct.alpha, small_order), secret)


class TestProofs:
    def test_proof_of_encryption(self, fast_group: Group) -> None:
        _, pub = _keypair(fast_group)
        enc = elgamal(fast_group, "ies").encrypt(b"m", pub)
        proof = prove_encryption(fast_group, enc.ciphertext, enc.randomness)
        assert verify_encryption(fast_group, enc.ciphertext, proof)

    def test_proof_of_encryption_wrong_randomness(self, secp: Group) -> None:
        _, pub = _keypair(secp)
        enc = elgamal(secp, "ies").encrypt(b"m", pub)
        proof = prove_encryption(secp, enc.ciphertext, enc.randomness + 1)
        assert not verify_encryption(secp, enc.ciphertext, proof)

    def test_proof_of_decryptor(self, group: Group) -> None:
        secret, pub = _keypair(group)
        ct = elgamal(group, "ies").encrypt(b"m", pub).ciphertext
        decryptor = group.operate(secret, ct.beta)
        proof = prove_decryptor(group, ct, secret, decryptor, nonce=b"n")
        assert verify_decryptor(group, decryptor, ct, pub, proof, nonce=b"n")

    def test_forged_decryptor_rejected(self, secp: Group) -> None:
        secret, pub = _keypair(secp)
        ct = elgamal(secp, "ies").encrypt(b"m", pub).ciphertext
        forged = secp.random_point()
        proof = prove_decryptor(secp, ct, secret, forged)
        assert not verify_decryptor(secp, forged, ct, pub, proof)
