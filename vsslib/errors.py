"""Exception hierarchy for vsslib.

Configuration errors fail fast and indicate a programming or deployment
mistake. Validation errors surface rejected cryptographic material.
Decryption failures are collapsed into a single category so callers cannot
tell a wrong key from a corrupt ciphertext.
"""

from __future__ import annotations


class VsslibError(Exception):
    """Base class for every error raised by vsslib."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(VsslibError, ValueError):
    """Raised on unsupported labels, algorithms, block modes or schemes."""


class UnsupportedGroupError(ConfigurationError):
    """Raised when no group backend is registered for a label."""


class DimensionMismatchError(ConfigurationError):
    """Raised when a linear relation and its witnesses or proof disagree in shape."""


class GroupMismatchError(VsslibError, TypeError):
    """Raised when a point from a foreign group is fed to a group operation."""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class InvalidPointError(VsslibError, ValueError):
    """Raised when a point fails subgroup-membership validation."""


class InvalidScalarError(VsslibError, ValueError):
    """Raised when a scalar lies outside [0, order)."""


class PolynomialError(VsslibError, ValueError):
    """Raised on malformed polynomial arithmetic."""


class InterpolationError(PolynomialError):
    """Raised when Lagrange interpolation input is degenerate."""


class ShamirError(VsslibError, ValueError):
    """Raised when sharing parameters are inconsistent."""


class InvalidShareError(VsslibError, ValueError):
    """Raised when a share does not verify against its commitments."""


class InvalidPublicShareError(VsslibError, ValueError):
    """Raised when a public share packet carries an invalid proof of possession."""


class InvalidSignatureError(VsslibError, ValueError):
    """Raised when a Schnorr signature does not verify."""


class InvalidEncryptionError(VsslibError, ValueError):
    """Raised when a proof of encryption does not verify."""


class InvalidDecryptorError(VsslibError, ValueError):
    """Raised when a decryptor proof does not verify."""


class InvalidSecretError(VsslibError, ValueError):
    """Raised when a proof of identity (knowledge of secret) does not verify."""


class InvalidMacError(VsslibError, ValueError):
    """Raised when an integrated-encryption MAC does not match."""


class SymmetricCipherError(VsslibError, ValueError):
    """Raised on AES misuse or an AES decryption failure."""


class DecryptionError(VsslibError):
    """Raised on any decapsulation failure. The cause is chained."""


# ---------------------------------------------------------------------------
# Threshold policy
# ---------------------------------------------------------------------------


class ThresholdError(VsslibError, ValueError):
    """Raised when fewer shares than the threshold are supplied."""


class MissingShareError(VsslibError, LookupError):
    """Raised when no public share exists for a requested index."""


class InvalidPartialDecryptorError(VsslibError, ValueError):
    """Raised when one or more partial decryptors carry invalid proofs."""

    def __init__(self, message: str, indexes: tuple[int, ...] | list[int] = ()) -> None:
        super().__init__(message)
        self.indexes: tuple[int, ...] = tuple(indexes)
