"""Key pairs, key shares and partial decryptors.

``PrivateKey`` wraps a scalar and ``PublicKey`` its lift ``secret * G``; both
carry their group. Distributing a private key yields indexed
``PrivateShare``/``PublicShare`` pairs whose holders produce
``PartialDecryptor`` values with DDH proofs for the threshold combiner.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass

import structlog

from vsslib.backend import init_group
from vsslib.backend.base import Group, Point, Rng
from vsslib.config import Config
from vsslib.core.elgamal import (
    Ciphertext,
    Encryption,
    PartialDecryptor,
    cipher_for,
    elgamal,
    prove_decryptor,
    prove_encryption,
    verify_decryptor,
    verify_encryption,
)
from vsslib.core.shamir import (
    FeldmanCommitments,
    PedersenCommitments,
    SecretShare,
    ShamirSharing,
    share_secret,
    verify_feldman,
    verify_pedersen,
)
from vsslib.core.sigma import DlogPair, DlogProtocol, SigmaProof
from vsslib.core.signer import SchnorrSignature, SchnorrSigner
from vsslib.enums import (
    DEFAULT_ALGORITHM,
    Algorithm,
    BlockMode,
    ElgamalScheme,
    System,
)
from vsslib.errors import (
    ConfigurationError,
    GroupMismatchError,
    InvalidDecryptorError,
    InvalidEncryptionError,
    InvalidPartialDecryptorError,
    InvalidPublicShareError,
    InvalidSecretError,
    InvalidSignatureError,
    ShamirError,
)
from vsslib.metrics import INVALID_PARTIAL_DECRYPTORS
from vsslib.models import (
    SerializedCiphertext,
    SerializedKey,
    SerializedProof,
    SerializedPublicSharePacket,
    SerializedShare,
    SigncryptionEnvelope,
    SigncryptionPayload,
)
from vsslib.utils.arith import le_bytes_to_int

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class PrivateKey:
    def __init__(self, group: Group, secret: int) -> None:
        self.group = group
        self.secret = secret % group.order

    @classmethod
    def generate(cls, system: str | System, rng: Rng | None = None) -> PrivateKey:
        group = init_group(system, rng)
        return cls(group, group.random_scalar())

    @classmethod
    def from_scalar(cls, group: Group, scalar: int) -> PrivateKey:
        group.validate_scalar(scalar, raise_on_invalid=True)
        return cls(group, scalar)

    @classmethod
    def from_bytes(cls, group: Group, data: bytes) -> PrivateKey:
        return cls(group, le_bytes_to_int(data))

    @classmethod
    def deserialize(cls, serialized: SerializedKey | dict) -> PrivateKey:
        model = SerializedKey.model_validate(serialized)
        return cls.from_bytes(init_group(model.system), bytes.fromhex(model.value))

    def to_bytes(self) -> bytes:
        return self.group.scalar_to_bytes(self.secret)

    def serialize(self) -> SerializedKey:
        return SerializedKey(value=self.to_bytes().hex(), system=self.group.label)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrivateKey):
            return NotImplemented
        return self.group == other.group and hmac.compare_digest(self.to_bytes(), other.to_bytes())

    def __hash__(self) -> int:
        return hash((self.group.label, self.secret))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.group.label.value})"

    @property
    def public_point(self) -> Point:
        return self.group.generate_point(self.secret)

    def public_key(self) -> PublicKey:
        return PublicKey(self.group, self.public_point)

    def diffie_hellman(self, pub: PublicKey) -> Point:
        _same_group(self.group, pub.group)
        return self.group.operate(self.secret, pub.point)

    # --- Proofs and signatures ---

    def prove_identity(
        self, algorithm: Algorithm | str = DEFAULT_ALGORITHM, nonce: bytes | None = None
    ) -> SigmaProof:
        """Dlog proof of knowledge of the secret behind the public key."""
        g = self.group
        return DlogProtocol(g, algorithm).prove(self.secret, DlogPair(g.generator, self.public_point), nonce)

    def sign(
        self, message: bytes, algorithm: Algorithm | str = DEFAULT_ALGORITHM, nonce: bytes | None = None
    ) -> SchnorrSignature:
        return SchnorrSigner(self.group, algorithm).sign(self.secret, message, nonce)

    # --- Decryption ---

    def decrypt(self, ciphertext: Ciphertext):
        """Decrypt with the scheme and parameters recorded in ``ciphertext``."""
        return cipher_for(self.group, ciphertext).decrypt_with_secret(ciphertext, self.secret)

    def verify_encryption(self, ciphertext: Ciphertext, proof: SigmaProof, nonce: bytes | None = None) -> bool:
        if not verify_encryption(self.group, ciphertext, proof, nonce):
            raise InvalidEncryptionError("Invalid encryption")
        return True

    def generate_decryptor(
        self,
        ciphertext: Ciphertext,
        algorithm: Algorithm | str = DEFAULT_ALGORITHM,
        nonce: bytes | None = None,
    ) -> tuple[Point, SigmaProof]:
        g = self.group
        g.assert_valid(ciphertext.beta)
        decryptor = g.operate(self.secret, ciphertext.beta)
        return decryptor, self.prove_decryptor(ciphertext, decryptor, algorithm, nonce)

    def prove_decryptor(
        self,
        ciphertext: Ciphertext,
        decryptor: Point,
        algorithm: Algorithm | str = DEFAULT_ALGORITHM,
        nonce: bytes | None = None,
    ) -> SigmaProof:
        return prove_decryptor(self.group, ciphertext, self.secret, decryptor, algorithm, nonce)

    # --- Signcryption ---

    def sign_encrypt(
        self,
        message: bytes,
        receiver: PublicKey,
        scheme: ElgamalScheme | str | None = None,
        mode: BlockMode | str | None = None,
        algorithm: Algorithm | str | None = None,
        nonce: bytes | None = None,
    ) -> tuple[Ciphertext, SchnorrSignature]:
        """Sign, encrypt the message with its signature, then sign the ciphertext
        together with the receiver's key."""
        scheme, mode, algorithm = _cipher_defaults(scheme, mode, algorithm)
        if scheme is ElgamalScheme.PLAIN:
            raise ConfigurationError("Signcryption requires the kem or ies scheme")
        _same_group(self.group, receiver.group)
        g = self.group
        signer = SchnorrSigner(g, algorithm)
        inner = signer.sign(self.secret, message, nonce)
        payload = SigncryptionPayload(message=message.hex(), signature=SerializedProof.from_proof(g, inner))
        encryption = elgamal(g, scheme, mode, algorithm).encrypt(payload.model_dump_json().encode(), receiver.point)
        envelope = _envelope(g, encryption.ciphertext, receiver)
        return encryption.ciphertext, signer.sign(self.secret, envelope, nonce)

    def verify_decrypt(
        self,
        ciphertext: Ciphertext,
        signature: SchnorrSignature,
        sender: PublicKey,
        nonce: bytes | None = None,
    ) -> tuple[bytes, SchnorrSignature]:
        g = self.group
        _same_group(g, sender.group)
        signer = SchnorrSigner(g, signature.algorithm)
        envelope = _envelope(g, ciphertext, self.public_key())
        if not signer.verify_signature(sender.point, envelope, signature, nonce):
            raise InvalidSignatureError("Invalid signature")
        plaintext = self.decrypt(ciphertext)
        payload = SigncryptionPayload.model_validate_json(plaintext)
        message = bytes.fromhex(payload.message)
        inner = payload.signature.to_proof(g)
        if not SchnorrSigner(g, inner.algorithm).verify_signature(sender.point, message, inner, nonce):
            raise InvalidSignatureError("Invalid signature")
        return message, inner

    # --- Distribution ---

    def distribute(self, nr_shares: int, threshold: int) -> KeySharing:
        return KeySharing(share_secret(self.group, nr_shares, threshold, self.secret))

    def add(self, other: PrivateKey) -> PrivateKey:
        """Sum of secrets; the public key of the result is the combined public key."""
        _same_group(self.group, other.group)
        return PrivateKey(self.group, self.secret + other.secret)


class PublicKey:
    def __init__(self, group: Group, point: Point) -> None:
        group.assert_valid(point)
        self.group = group
        self.point = point

    @classmethod
    def from_bytes(cls, group: Group, data: bytes) -> PublicKey:
        return cls(group, group.unpack_valid(data))

    @classmethod
    def deserialize(cls, serialized: SerializedKey | dict) -> PublicKey:
        model = SerializedKey.model_validate(serialized)
        return cls.from_bytes(init_group(model.system), bytes.fromhex(model.value))

    def to_bytes(self) -> bytes:
        return self.group.pack(self.point)

    def serialize(self) -> SerializedKey:
        return SerializedKey(value=self.to_bytes().hex(), system=self.group.label)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.group == other.group and self.point == other.point

    def __hash__(self) -> int:
        return hash(self.point)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.group.label.value}:{self.point.to_hex()[:16]}...)"

    def combine(self, other: PublicKey) -> PublicKey:
        _same_group(self.group, other.group)
        return PublicKey(self.group, self.group.combine(self.point, other.point))

    def verify_identity(self, proof: SigmaProof, nonce: bytes | None = None) -> bool:
        g = self.group
        if not DlogProtocol(g, proof.algorithm).verify(DlogPair(g.generator, self.point), proof, nonce):
            raise InvalidSecretError("Invalid proof of secret")
        return True

    def verify_signature(self, message: bytes, signature: SchnorrSignature, nonce: bytes | None = None) -> bool:
        if not SchnorrSigner(self.group, signature.algorithm).verify_signature(self.point, message, signature, nonce):
            raise InvalidSignatureError("Invalid signature")
        return True

    def encrypt(
        self,
        message,
        scheme: ElgamalScheme | str | None = None,
        mode: BlockMode | str | None = None,
        algorithm: Algorithm | str | None = None,
    ) -> Encryption:
        """Encrypt under this key; unset parameters fall back to the VSSLIB_* defaults."""
        scheme, mode, algorithm = _cipher_defaults(scheme, mode, algorithm)
        return elgamal(self.group, scheme, mode, algorithm).encrypt(message, self.point)

    def prove_encryption(
        self,
        ciphertext: Ciphertext,
        randomness: int,
        algorithm: Algorithm | str = DEFAULT_ALGORITHM,
        nonce: bytes | None = None,
    ) -> SigmaProof:
        return prove_encryption(self.group, ciphertext, randomness, algorithm, nonce)

    def verify_decryptor(
        self,
        ciphertext: Ciphertext,
        decryptor: Point,
        proof: SigmaProof,
        nonce: bytes | None = None,
        raise_on_invalid: bool = True,
    ) -> bool:
        valid = verify_decryptor(self.group, decryptor, ciphertext, self.point, proof, nonce)
        if not valid and raise_on_invalid:
            raise InvalidDecryptorError("Invalid decryptor")
        return valid


def generate_key(system: str | System | None = None, rng: Rng | None = None) -> PrivateKey:
    """Fresh private key over ``system`` (default: VSSLIB_SYSTEM)."""
    if system is None:
        system = Config().system
    return PrivateKey.generate(system, rng)


def _cipher_defaults(
    scheme: ElgamalScheme | str | None,
    mode: BlockMode | str | None,
    algorithm: Algorithm | str | None,
) -> tuple[ElgamalScheme, BlockMode, Algorithm]:
    config = Config()
    return (
        ElgamalScheme.parse(scheme or config.elgamal_scheme),
        BlockMode.parse(mode or config.block_mode),
        Algorithm.parse(algorithm or config.hash_algorithm),
    )


def _same_group(a: Group, b: Group) -> None:
    if a != b:
        raise GroupMismatchError(f"Keys belong to different groups: {a.label.value} vs {b.label.value}")


def _envelope(group: Group, ciphertext: Ciphertext, receiver: PublicKey) -> bytes:
    return (
        SigncryptionEnvelope(
            ciphertext=SerializedCiphertext.from_ciphertext(group, ciphertext),
            receiver=receiver.to_bytes().hex(),
        )
        .model_dump_json()
        .encode()
    )


# ---------------------------------------------------------------------------
# Shares
# ---------------------------------------------------------------------------


class PrivateShare(PrivateKey):
    def __init__(self, group: Group, secret: int, index: int) -> None:
        if index < 1:
            raise ShamirError("Share indexes must be positive")
        super().__init__(group, secret)
        self.index = index

    @classmethod
    def deserialize(cls, serialized: SerializedShare | dict) -> PrivateShare:
        model = SerializedShare.model_validate(serialized)
        group = init_group(model.system)
        return cls(group, le_bytes_to_int(bytes.fromhex(model.value)), model.index)

    def serialize(self) -> SerializedShare:
        return SerializedShare(value=self.to_bytes().hex(), system=self.group.label, index=self.index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrivateShare):
            return NotImplemented
        return self.index == other.index and super().__eq__(other)

    def __hash__(self) -> int:
        return hash((self.group.label, self.secret, self.index))

    def as_secret_share(self) -> SecretShare:
        return SecretShare(self.secret, self.index)

    def public_share(self) -> PublicShare:
        return PublicShare(self.group, self.public_point, self.index)

    def create_public_packet(
        self, algorithm: Algorithm | str = DEFAULT_ALGORITHM, nonce: bytes | None = None
    ) -> PublicSharePacket:
        return PublicSharePacket(self.public_point, self.index, self.prove_identity(algorithm, nonce))

    def verify_feldman(self, commitments: FeldmanCommitments | list[Point]) -> bool:
        return verify_feldman(self.group, self.as_secret_share(), commitments, raise_on_invalid=True)

    def verify_pedersen(self, binding: int, h: Point, commitments: list[Point] | tuple[Point, ...]) -> bool:
        return verify_pedersen(self.group, self.as_secret_share(), binding, h, commitments, raise_on_invalid=True)

    def compute_partial_decryptor(
        self,
        ciphertext: Ciphertext,
        algorithm: Algorithm | str = DEFAULT_ALGORITHM,
        nonce: bytes | None = None,
    ) -> PartialDecryptor:
        decryptor, proof = self.generate_decryptor(ciphertext, algorithm, nonce)
        return PartialDecryptor(decryptor, self.index, proof)

    def add(self, other: PrivateKey) -> PrivateShare:
        """Sum of two shares at the same index (DKG aggregation)."""
        if isinstance(other, PrivateShare) and other.index != self.index:
            raise ShamirError(f"Cannot add shares with indexes {self.index} and {other.index}")
        _same_group(self.group, other.group)
        return PrivateShare(self.group, self.secret + other.secret, self.index)


class PublicShare(PublicKey):
    def __init__(self, group: Group, point: Point, index: int) -> None:
        if index < 1:
            raise ShamirError("Share indexes must be positive")
        super().__init__(group, point)
        self.index = index

    @classmethod
    def deserialize(cls, serialized: SerializedShare | dict) -> PublicShare:
        model = SerializedShare.model_validate(serialized)
        group = init_group(model.system)
        return cls(group, group.unhexify_valid(model.value), model.index)

    def serialize(self) -> SerializedShare:
        return SerializedShare(value=self.to_bytes().hex(), system=self.group.label, index=self.index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicShare):
            return NotImplemented
        return self.index == other.index and super().__eq__(other)

    def __hash__(self) -> int:
        return hash((self.point, self.index))

    def combine(self, other: PublicKey) -> PublicShare:
        if isinstance(other, PublicShare) and other.index != self.index:
            raise ShamirError(f"Cannot combine shares with indexes {self.index} and {other.index}")
        _same_group(self.group, other.group)
        return PublicShare(self.group, self.group.combine(self.point, other.point), self.index)

    def verify_partial_decryptor(
        self,
        ciphertext: Ciphertext,
        partial: PartialDecryptor,
        nonce: bytes | None = None,
        raise_on_invalid: bool = True,
    ) -> bool:
        if partial.index != self.index:
            raise ShamirError(f"Partial decryptor index {partial.index} does not match share index {self.index}")
        valid = self.group.validate_point(partial.value) and self.verify_decryptor(
            ciphertext, partial.value, partial.proof, nonce, raise_on_invalid=False
        )
        if not valid:
            INVALID_PARTIAL_DECRYPTORS.inc()
            log.warning("partial_decryptor_invalid", index=self.index, group=self.group.label.value)
            if raise_on_invalid:
                raise InvalidPartialDecryptorError("Invalid partial decryptor", (self.index,))
        return valid


@dataclass(frozen=True)
class PublicSharePacket:
    """A public share broadcast with a Dlog proof that its sender holds the private share."""

    value: Point
    index: int
    proof: SigmaProof

    def serialize(self, group: Group) -> SerializedPublicSharePacket:
        return SerializedPublicSharePacket(
            value=group.hexify(self.value),
            system=group.label,
            index=self.index,
            proof=SerializedProof.from_proof(group, self.proof),
        )

    @classmethod
    def deserialize(
        cls, group: Group, serialized: SerializedPublicSharePacket | dict
    ) -> PublicSharePacket:
        model = SerializedPublicSharePacket.model_validate(serialized)
        if model.system is not group.label:
            raise GroupMismatchError(f"Packet for {model.system.value} parsed as {group.label.value}")
        return cls(group.unhexify_valid(model.value), model.index, model.proof.to_proof(group))


def parse_public_packet(group: Group, packet: PublicSharePacket, nonce: bytes | None = None) -> PublicShare:
    """Verify the proof of possession and return the public share.

    Raises:
        InvalidPointError: if the share is not a subgroup element.
        InvalidPublicShareError: if the proof does not verify.
    """
    share = PublicShare(group, packet.value, packet.index)
    pair = DlogPair(group.generator, share.point)
    if not DlogProtocol(group, packet.proof.algorithm).verify(pair, packet.proof, nonce):
        log.warning("public_share_rejected", index=packet.index, group=group.label.value)
        raise InvalidPublicShareError(f"Invalid packet with index {packet.index}")
    return share


class KeySharing:
    """Distribution of a private key into indexed shares with commitments."""

    def __init__(self, sharing: ShamirSharing) -> None:
        self.sharing = sharing
        self.group = sharing.group
        self.nr_shares = sharing.nr_shares
        self.threshold = sharing.threshold

    def private_shares(self) -> list[PrivateShare]:
        return [PrivateShare(self.group, s.value, s.index) for s in self.sharing.get_secret_shares()]

    def public_shares(self) -> list[PublicShare]:
        return [PublicShare(self.group, s.value, s.index) for s in self.sharing.get_public_shares()]

    def create_feldman(self) -> FeldmanCommitments:
        return self.sharing.create_feldman()

    def create_pedersen(self, h: Point) -> PedersenCommitments:
        return self.sharing.create_pedersen(h)
