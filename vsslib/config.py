"""vsslib defaults loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from vsslib.enums import Algorithm, BlockMode, ElgamalScheme, System
from vsslib.errors import ConfigurationError

load_dotenv()

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off", "")


def _bool_env(key: str, default: str) -> bool:
    val = os.getenv(key, default).strip().lower()
    if val in _TRUTHY:
        return True
    if val in _FALSY:
        return False
    raise ValueError(f"Invalid boolean for {key}: {val!r}")


@dataclass(frozen=True)
class Config:
    # Cryptosystem defaults
    system: str = os.getenv("VSSLIB_SYSTEM", "secp256k1")
    hash_algorithm: str = os.getenv("VSSLIB_HASH_ALGORITHM", "sha256")
    block_mode: str = os.getenv("VSSLIB_BLOCK_MODE", "aes-256-cbc")
    elgamal_scheme: str = os.getenv("VSSLIB_ELGAMAL_SCHEME", "ies")

    # Threshold policy: combiners only honour skip_threshold=True when set
    allow_skip_threshold: bool = _bool_env("VSSLIB_ALLOW_SKIP_THRESHOLD", "0")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = os.getenv("LOG_FORMAT", "console")

    def validate(self, *, strict: bool = False) -> list[str]:
        """Validate config. Returns list of warnings (empty = all good).

        Args:
            strict: If True, raise ConfigurationError on any warning.
        """
        System.parse(self.system)
        Algorithm.parse(self.hash_algorithm)
        BlockMode.parse(self.block_mode)
        ElgamalScheme.parse(self.elgamal_scheme)

        warnings = []
        if self.log_format not in ("console", "json"):
            raise ConfigurationError(f"LOG_FORMAT must be 'console' or 'json', got {self.log_format!r}")
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationError(f"LOG_LEVEL is not a recognized level: {self.log_level!r}")
        if self.allow_skip_threshold:
            warnings.append(
                "VSSLIB_ALLOW_SKIP_THRESHOLD is enabled: under-threshold reconstruction returns wrong results"
            )
        if self.elgamal_scheme == ElgamalScheme.PLAIN.value:
            warnings.append("VSSLIB_ELGAMAL_SCHEME=plain only encrypts group elements")
        if self.block_mode != BlockMode.AES_256_GCM.value and self.elgamal_scheme == ElgamalScheme.KEM.value:
            warnings.append(f"KEM with {self.block_mode} is unauthenticated; prefer ies or aes-256-gcm")
        if strict and warnings:
            raise ConfigurationError(
                "Config validation failed in strict mode:\n" + "\n".join(f"  - {w}" for w in warnings)
            )
        return warnings
