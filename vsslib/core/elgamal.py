"""ElGamal encryption over a generic group with three encapsulation schemes.

Every scheme draws randomness r, publishes beta = r*G and derives the
decryptor d = r*pub. The payload alpha depends on the scheme:

- plain: alpha = d + message, with message a group element.
- kem:   message encrypted under SHA-256(d) with an AES block mode.
- ies:   SHA-512(d) split into an AES key and a MAC key; the MAC over the
         ciphered bytes is checked in constant time before decrypting.

Decryption takes exactly one of a secret, a decryptor or the encryption
randomness. Every decapsulation failure surfaces as ``DecryptionError`` with
the underlying cause chained.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union

import structlog

from vsslib.backend.base import Group, Point
from vsslib.core.sigma import DDHProtocol, DDHTuple, DlogPair, DlogProtocol, SigmaProof
from vsslib.enums import (
    DEFAULT_ALGORITHM,
    DEFAULT_BLOCK_MODE,
    DEFAULT_SCHEME,
    Algorithm,
    BlockMode,
    ElgamalScheme,
)
from vsslib.errors import DecryptionError, InvalidMacError, VsslibError
from vsslib.metrics import DECRYPTION_FAILURES
from vsslib.utils.crypto import aes_decrypt, aes_encrypt, ct_equal, digest, hmac_digest

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KemAlpha:
    ciphered: bytes
    iv: bytes
    mode: BlockMode
    tag: bytes | None = None


@dataclass(frozen=True)
class IesAlpha:
    ciphered: bytes
    iv: bytes
    mode: BlockMode
    algorithm: Algorithm
    mac: bytes
    tag: bytes | None = None


@dataclass(frozen=True)
class Ciphertext:
    alpha: Point | KemAlpha | IesAlpha
    beta: Point

    @property
    def scheme(self) -> ElgamalScheme:
        return resolve_scheme(self)


@dataclass(frozen=True)
class Encryption:
    """Result of ``encrypt``: the ciphertext and the sender-side secrets."""

    ciphertext: Ciphertext
    randomness: int
    decryptor: Point


@dataclass(frozen=True)
class PartialDecryptor:
    """A shareholder's contribution secret_i * beta with its DDH proof."""

    value: Point
    index: int
    proof: SigmaProof


@dataclass(frozen=True)
class BySecret:
    secret: int


@dataclass(frozen=True)
class ByDecryptor:
    decryptor: Point


@dataclass(frozen=True)
class ByRandomness:
    randomness: int
    pub: Point


DecryptionInput = Union[BySecret, ByDecryptor, ByRandomness]


def resolve_scheme(ciphertext: Ciphertext) -> ElgamalScheme:
    alpha = ciphertext.alpha
    if isinstance(alpha, IesAlpha):
        return ElgamalScheme.IES
    if isinstance(alpha, KemAlpha):
        return ElgamalScheme.KEM
    if isinstance(alpha, Point):
        return ElgamalScheme.PLAIN
    raise TypeError(f"Unrecognized ciphertext payload: {type(alpha).__name__}")


# ---------------------------------------------------------------------------
# Ciphers
# ---------------------------------------------------------------------------


class ElgamalCipher(ABC):
    scheme: ElgamalScheme

    def __init__(
        self,
        group: Group,
        mode: BlockMode | str = DEFAULT_BLOCK_MODE,
        algorithm: Algorithm | str = DEFAULT_ALGORITHM,
    ) -> None:
        self.group = group
        self.mode = BlockMode.parse(mode)
        self.algorithm = Algorithm.parse(algorithm)

    @abstractmethod
    def encapsulate(self, decryptor: Point, message):
        ...

    @abstractmethod
    def decapsulate(self, decryptor: Point, alpha):
        ...

    def encrypt(self, message, pub: Point) -> Encryption:
        g = self.group
        g.assert_valid(pub)
        randomness = g.random_scalar()
        beta = g.generate_point(randomness)
        decryptor = g.operate(randomness, pub)
        alpha = self.encapsulate(decryptor, message)
        return Encryption(Ciphertext(alpha, beta), randomness, decryptor)

    def resolve_decryptor(self, ciphertext: Ciphertext, key: DecryptionInput) -> Point:
        g = self.group
        if isinstance(key, BySecret):
            return g.operate(key.secret, ciphertext.beta)
        if isinstance(key, ByDecryptor):
            return key.decryptor
        if isinstance(key, ByRandomness):
            return g.operate(key.randomness, key.pub)
        raise TypeError(f"Unrecognized decryption input: {type(key).__name__}")

    def decrypt(self, ciphertext: Ciphertext, key: DecryptionInput):
        g = self.group
        try:
            g.assert_valid(ciphertext.beta)
            decryptor = self.resolve_decryptor(ciphertext, key)
            g.assert_valid(decryptor)
            return self.decapsulate(decryptor, ciphertext.alpha)
        except (VsslibError, ValueError) as e:
            DECRYPTION_FAILURES.labels(scheme=self.scheme.value).inc()
            log.warning("decryption_failed", scheme=self.scheme.value, group=g.label.value)
            raise DecryptionError("Could not decrypt") from e

    def decrypt_with_secret(self, ciphertext: Ciphertext, secret: int):
        return self.decrypt(ciphertext, BySecret(secret))

    def decrypt_with_decryptor(self, ciphertext: Ciphertext, decryptor: Point):
        return self.decrypt(ciphertext, ByDecryptor(decryptor))

    def decrypt_with_randomness(self, ciphertext: Ciphertext, pub: Point, randomness: int):
        return self.decrypt(ciphertext, ByRandomness(randomness, pub))


class PlainCipher(ElgamalCipher):
    scheme = ElgamalScheme.PLAIN

    def encapsulate(self, decryptor: Point, message: Point) -> Point:
        self.group.assert_valid(message)
        return self.group.combine(decryptor, message)

    def decapsulate(self, decryptor: Point, alpha: Point) -> Point:
        if not isinstance(alpha, Point):
            raise ValueError("Ciphertext payload is not a group element")
        g = self.group
        return g.combine(alpha, g.invert(decryptor))


class KemCipher(ElgamalCipher):
    scheme = ElgamalScheme.KEM

    def _key(self, decryptor: Point) -> bytes:
        return digest(decryptor.to_bytes(), Algorithm.SHA256)

    def encapsulate(self, decryptor: Point, message: bytes) -> KemAlpha:
        ciphered, iv, tag = aes_encrypt(self._key(decryptor), message, self.mode)
        return KemAlpha(ciphered, iv, self.mode, tag)

    def decapsulate(self, decryptor: Point, alpha: KemAlpha) -> bytes:
        if not isinstance(alpha, KemAlpha):
            raise ValueError("Ciphertext payload is not KEM-encapsulated")
        return aes_decrypt(self._key(decryptor), alpha.ciphered, alpha.iv, alpha.mode, alpha.tag)


class IesCipher(ElgamalCipher):
    scheme = ElgamalScheme.IES

    def _keys(self, decryptor: Point) -> tuple[bytes, bytes]:
        key = digest(decryptor.to_bytes(), Algorithm.SHA512)
        return key[:32], key[32:64]

    def encapsulate(self, decryptor: Point, message: bytes) -> IesAlpha:
        key_aes, key_mac = self._keys(decryptor)
        ciphered, iv, tag = aes_encrypt(key_aes, message, self.mode)
        mac = hmac_digest(key_mac, ciphered, self.algorithm)
        return IesAlpha(ciphered, iv, self.mode, self.algorithm, mac, tag)

    def decapsulate(self, decryptor: Point, alpha: IesAlpha) -> bytes:
        if not isinstance(alpha, IesAlpha):
            raise ValueError("Ciphertext payload is not IES-encapsulated")
        key_aes, key_mac = self._keys(decryptor)
        expected = hmac_digest(key_mac, alpha.ciphered, alpha.algorithm)
        if not ct_equal(alpha.mac, expected):
            raise InvalidMacError("Invalid MAC")
        return aes_decrypt(key_aes, alpha.ciphered, alpha.iv, alpha.mode, alpha.tag)


_CIPHERS: dict[ElgamalScheme, type[ElgamalCipher]] = {
    ElgamalScheme.PLAIN: PlainCipher,
    ElgamalScheme.KEM: KemCipher,
    ElgamalScheme.IES: IesCipher,
}


def elgamal(
    group: Group,
    scheme: ElgamalScheme | str = DEFAULT_SCHEME,
    mode: BlockMode | str = DEFAULT_BLOCK_MODE,
    algorithm: Algorithm | str = DEFAULT_ALGORITHM,
) -> ElgamalCipher:
    return _CIPHERS[ElgamalScheme.parse(scheme)](group, mode, algorithm)


def cipher_for(group: Group, ciphertext: Ciphertext) -> ElgamalCipher:
    """Cipher matching the scheme and parameters recorded in ``ciphertext``."""
    alpha = ciphertext.alpha
    if isinstance(alpha, IesAlpha):
        return IesCipher(group, alpha.mode, alpha.algorithm)
    if isinstance(alpha, KemAlpha):
        return KemCipher(group, alpha.mode)
    return elgamal(group, resolve_scheme(ciphertext))


# ---------------------------------------------------------------------------
# Proofs
# ---------------------------------------------------------------------------


def prove_encryption(
    group: Group,
    ciphertext: Ciphertext,
    randomness: int,
    algorithm: Algorithm | str = DEFAULT_ALGORITHM,
    nonce: bytes | None = None,
) -> SigmaProof:
    """Dlog proof that beta = randomness * generator."""
    return DlogProtocol(group, algorithm).prove(randomness, DlogPair(group.generator, ciphertext.beta), nonce)


def verify_encryption(
    group: Group,
    ciphertext: Ciphertext,
    proof: SigmaProof,
    nonce: bytes | None = None,
) -> bool:
    return DlogProtocol(group, proof.algorithm).verify(DlogPair(group.generator, ciphertext.beta), proof, nonce)


def prove_decryptor(
    group: Group,
    ciphertext: Ciphertext,
    secret: int,
    decryptor: Point,
    algorithm: Algorithm | str = DEFAULT_ALGORITHM,
    nonce: bytes | None = None,
) -> SigmaProof:
    """DDH proof that decryptor = secret * beta for pub = secret * generator."""
    pub = group.generate_point(secret)
    return DDHProtocol(group, algorithm).prove(secret, DDHTuple(ciphertext.beta, pub, decryptor), nonce)


def verify_decryptor(
    group: Group,
    decryptor: Point,
    ciphertext: Ciphertext,
    pub: Point,
    proof: SigmaProof,
    nonce: bytes | None = None,
) -> bool:
    return DDHProtocol(group, proof.algorithm).verify(DDHTuple(ciphertext.beta, pub, decryptor), proof, nonce)
