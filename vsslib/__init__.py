"""vsslib: threshold cryptography over prime-order groups."""

from __future__ import annotations

from vsslib.backend import Group, Point, init_group
from vsslib.core.combiner import Combiner, VerificationResult
from vsslib.core.elgamal import Ciphertext, Encryption, PartialDecryptor, elgamal
from vsslib.core.keys import (
    KeySharing,
    PrivateKey,
    PrivateShare,
    PublicKey,
    PublicShare,
    PublicSharePacket,
    generate_key,
    parse_public_packet,
)
from vsslib.core.shamir import reconstruct_secret, share_secret
from vsslib.enums import Algorithm, BlockMode, ElgamalScheme, System

__version__ = "0.1.0"

__all__ = [
    "Algorithm",
    "BlockMode",
    "Ciphertext",
    "Combiner",
    "ElgamalScheme",
    "Encryption",
    "Group",
    "KeySharing",
    "PartialDecryptor",
    "Point",
    "PrivateKey",
    "PrivateShare",
    "PublicKey",
    "PublicShare",
    "PublicSharePacket",
    "System",
    "VerificationResult",
    "elgamal",
    "generate_key",
    "parse_public_packet",
    "init_group",
    "reconstruct_secret",
    "share_secret",
]
