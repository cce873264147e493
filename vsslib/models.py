"""Pydantic wire models for keys, shares, proofs and ciphertexts.

Points travel as canonical hex, scalars as fixed-width little-endian hex.
``model_dump_json()`` output doubles as the canonical byte encoding that
signcryption signs over.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

from vsslib.backend.base import Group
from vsslib.core.elgamal import Ciphertext, IesAlpha, KemAlpha, PartialDecryptor
from vsslib.core.sigma import SigmaProof
from vsslib.enums import Algorithm, BlockMode, ElgamalScheme, System
from vsslib.utils.arith import le_bytes_to_int

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


def _validate_hex(v: str, field_name: str) -> str:
    if not _HEX_RE.match(v) or len(v) % 2:
        raise ValueError(f"{field_name} must be an even-length hex string")
    return v.lower()


def _opt_hex(value: bytes | None) -> str | None:
    return None if value is None else value.hex()


def _opt_bytes(value: str | None) -> bytes | None:
    return None if value is None else bytes.fromhex(value)


class SerializedKey(BaseModel):
    """``{value, system}``: a scalar (private) or point (public) in hex."""

    value: str = Field(max_length=1024)
    system: System

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: str) -> str:
        return _validate_hex(v, "value")


class SerializedShare(SerializedKey):
    index: int = Field(ge=1)


class SerializedProof(BaseModel):
    commitments: list[str]
    response: list[str]
    algorithm: Algorithm

    @field_validator("commitments", "response")
    @classmethod
    def validate_hex_items(cls, v: list[str]) -> list[str]:
        return [_validate_hex(item, "proof component") for item in v]

    @classmethod
    def from_proof(cls, group: Group, proof: SigmaProof) -> SerializedProof:
        return cls(
            commitments=[group.hexify(c) for c in proof.commitments],
            response=[group.scalar_to_bytes(s).hex() for s in proof.response],
            algorithm=proof.algorithm,
        )

    def to_proof(self, group: Group) -> SigmaProof:
        return SigmaProof(
            commitments=tuple(group.unhexify(c) for c in self.commitments),
            response=tuple(le_bytes_to_int(bytes.fromhex(s)) for s in self.response),
            algorithm=self.algorithm,
        )


class SerializedPublicSharePacket(SerializedShare):
    """A public share with the holder's Dlog proof of the matching private share."""

    proof: SerializedProof


class SerializedCiphertext(BaseModel):
    """ElGamal ciphertext; ``alpha`` is set for plain, the byte fields otherwise."""

    scheme: ElgamalScheme
    beta: str
    alpha: str | None = None
    ciphered: str | None = None
    iv: str | None = None
    mode: BlockMode | None = None
    algorithm: Algorithm | None = None
    mac: str | None = None
    tag: str | None = None

    @field_validator("beta", "alpha", "ciphered", "iv", "mac", "tag")
    @classmethod
    def validate_hex_fields(cls, v: str | None) -> str | None:
        return None if v is None else _validate_hex(v, "ciphertext field")

    @classmethod
    def from_ciphertext(cls, group: Group, ciphertext: Ciphertext) -> SerializedCiphertext:
        alpha = ciphertext.alpha
        beta = group.hexify(ciphertext.beta)
        if isinstance(alpha, IesAlpha):
            return cls(
                scheme=ElgamalScheme.IES,
                beta=beta,
                ciphered=alpha.ciphered.hex(),
                iv=alpha.iv.hex(),
                mode=alpha.mode,
                algorithm=alpha.algorithm,
                mac=alpha.mac.hex(),
                tag=_opt_hex(alpha.tag),
            )
        if isinstance(alpha, KemAlpha):
            return cls(
                scheme=ElgamalScheme.KEM,
                beta=beta,
                ciphered=alpha.ciphered.hex(),
                iv=alpha.iv.hex(),
                mode=alpha.mode,
                tag=_opt_hex(alpha.tag),
            )
        return cls(scheme=ElgamalScheme.PLAIN, beta=beta, alpha=group.hexify(alpha))

    def to_ciphertext(self, group: Group) -> Ciphertext:
        beta = group.unhexify(self.beta)
        if self.scheme is ElgamalScheme.PLAIN:
            if self.alpha is None:
                raise ValueError("Plain ciphertext requires alpha")
            return Ciphertext(group.unhexify(self.alpha), beta)
        if self.ciphered is None or self.iv is None or self.mode is None:
            raise ValueError(f"{self.scheme.value} ciphertext requires ciphered, iv and mode")
        if self.scheme is ElgamalScheme.KEM:
            alpha = KemAlpha(bytes.fromhex(self.ciphered), bytes.fromhex(self.iv), self.mode, _opt_bytes(self.tag))
            return Ciphertext(alpha, beta)
        if self.algorithm is None or self.mac is None:
            raise ValueError("ies ciphertext requires algorithm and mac")
        alpha = IesAlpha(
            bytes.fromhex(self.ciphered),
            bytes.fromhex(self.iv),
            self.mode,
            self.algorithm,
            bytes.fromhex(self.mac),
            _opt_bytes(self.tag),
        )
        return Ciphertext(alpha, beta)


class SerializedPartialDecryptor(BaseModel):
    value: str
    index: int = Field(ge=1)
    proof: SerializedProof

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: str) -> str:
        return _validate_hex(v, "value")

    @classmethod
    def from_partial(cls, group: Group, partial: PartialDecryptor) -> SerializedPartialDecryptor:
        return cls(
            value=group.hexify(partial.value),
            index=partial.index,
            proof=SerializedProof.from_proof(group, partial.proof),
        )

    def to_partial(self, group: Group) -> PartialDecryptor:
        """Raises ``InvalidPointError`` unless the value is a subgroup element."""
        return PartialDecryptor(group.unhexify_valid(self.value), self.index, self.proof.to_proof(group))


class SigncryptionPayload(BaseModel):
    """Inner plaintext of a signcrypted message."""

    message: str
    signature: SerializedProof

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        return _validate_hex(v, "message")


class SigncryptionEnvelope(BaseModel):
    """What the outer signature covers: the ciphertext and the receiver's key."""

    ciphertext: SerializedCiphertext
    receiver: str
