"""Closed enumerations of supported groups, hash algorithms, block modes and schemes."""

from __future__ import annotations

from enum import Enum

from vsslib.errors import ConfigurationError, UnsupportedGroupError


class System(str, Enum):
    SECP256K1 = "secp256k1"
    ED25519 = "ed25519"
    MODP_2048 = "modp-2048"

    @classmethod
    def parse(cls, label: str | System) -> System:
        try:
            return cls(label)
        except ValueError:
            raise UnsupportedGroupError(f"Unsupported group: {label}") from None


class Algorithm(str, Enum):
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    SHA3_224 = "sha3-224"
    SHA3_256 = "sha3-256"
    SHA3_384 = "sha3-384"
    SHA3_512 = "sha3-512"

    @property
    def hashlib_name(self) -> str:
        return self.value.replace("-", "_")

    @classmethod
    def parse(cls, value: str | Algorithm) -> Algorithm:
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"Unsupported hash algorithm: {value}") from None


class BlockMode(str, Enum):
    AES_256_CBC = "aes-256-cbc"
    AES_256_CFB = "aes-256-cfb"
    AES_256_OFB = "aes-256-ofb"
    AES_256_CTR = "aes-256-ctr"
    AES_256_GCM = "aes-256-gcm"

    @property
    def iv_length(self) -> int:
        return 12 if self is BlockMode.AES_256_GCM else 16

    @classmethod
    def parse(cls, value: str | BlockMode) -> BlockMode:
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"Unsupported block mode: {value}") from None


class ElgamalScheme(str, Enum):
    PLAIN = "plain"
    KEM = "kem"
    IES = "ies"

    @classmethod
    def parse(cls, value: str | ElgamalScheme) -> ElgamalScheme:
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"Unsupported ElGamal scheme: {value}") from None


DEFAULT_ALGORITHM = Algorithm.SHA256
DEFAULT_BLOCK_MODE = BlockMode.AES_256_CBC
DEFAULT_SCHEME = ElgamalScheme.IES
