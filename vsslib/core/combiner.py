"""Threshold combiner: verifies partial decryptors and reconstructs from shares.

A combiner holds only ``(group, threshold)`` and the skip policy. Every
operation is a pure function of its arguments, so one instance may serve
concurrent decryptions.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from vsslib.backend.base import Group, Point
from vsslib.config import Config
from vsslib.core.elgamal import Ciphertext, PartialDecryptor, cipher_for
from vsslib.core.keys import PrivateKey, PrivateShare, PublicKey, PublicShare
from vsslib.core.shamir import PointShare, SecretShare, reconstruct_point, reconstruct_secret
from vsslib.errors import (
    InvalidPartialDecryptorError,
    MissingShareError,
    ShamirError,
    ThresholdError,
)
from vsslib.metrics import RECONSTRUCTION_DURATION, THRESHOLD_REJECTIONS, THRESHOLD_SKIPS

log = structlog.get_logger()


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a batch partial-decryptor check: ``indexes`` lists the failures."""

    flag: bool
    indexes: tuple[int, ...] = ()


class Combiner:
    def __init__(self, group: Group, threshold: int, allow_skip_threshold: bool | None = None) -> None:
        if threshold < 1:
            raise ShamirError("Threshold parameter must be at least 1")
        self.group = group
        self.threshold = threshold
        if allow_skip_threshold is None:
            allow_skip_threshold = Config().allow_skip_threshold
        self.allow_skip_threshold = allow_skip_threshold

    def validate_nr_shares(self, shares: Sequence, skip_threshold: bool = False) -> None:
        """Reject fewer than ``threshold`` shares unless a skip is requested and allowed."""
        nr_shares = len(shares)
        if nr_shares >= self.threshold:
            return
        if skip_threshold and self.allow_skip_threshold:
            THRESHOLD_SKIPS.inc()
            log.warning("threshold_check_skipped", nr_shares=nr_shares, threshold=self.threshold)
            return
        THRESHOLD_REJECTIONS.inc()
        log.info("threshold_rejected", nr_shares=nr_shares, threshold=self.threshold, skip_requested=skip_threshold)
        if skip_threshold:
            raise ThresholdError("Insufficient number of shares: skipping the threshold check is not allowed")
        raise ThresholdError("Insufficient number of shares")

    # --- Key reconstruction ---

    def reconstruct_key(self, shares: Sequence[PrivateShare], skip_threshold: bool = False) -> PrivateKey:
        self.validate_nr_shares(shares, skip_threshold)
        secret = reconstruct_secret(self.group, [SecretShare(s.secret, s.index) for s in shares])
        return PrivateKey(self.group, secret)

    def reconstruct_public(self, shares: Sequence[PublicShare], skip_threshold: bool = False) -> PublicKey:
        self.validate_nr_shares(shares, skip_threshold)
        point = reconstruct_point(self.group, [PointShare(s.point, s.index) for s in shares])
        return PublicKey(self.group, point)

    # --- Threshold decryption ---

    def verify_partial_decryptors(
        self,
        ciphertext: Ciphertext,
        public_shares: Sequence[PublicShare],
        shares: Sequence[PartialDecryptor],
        nonce: bytes | None = None,
        raise_on_invalid: bool = False,
    ) -> VerificationResult:
        """Check every partial decryptor against the public share with its index.

        Raises:
            MissingShareError: if some partial decryptor has no public share.
            InvalidPartialDecryptorError: on the first failure when ``raise_on_invalid``.
        """
        by_index = {p.index: p for p in public_shares}
        failed: list[int] = []
        for share in shares:
            public = by_index.get(share.index)
            if public is None:
                raise MissingShareError(f"No share with index {share.index}")
            if not public.verify_partial_decryptor(ciphertext, share, nonce, raise_on_invalid=raise_on_invalid):
                failed.append(share.index)
        return VerificationResult(not failed, tuple(failed))

    def reconstruct_decryptor(self, shares: Sequence[PartialDecryptor], skip_threshold: bool = False) -> Point:
        """Combine lambda_i * d_i over the qualified set into secret * beta.

        Raises:
            InvalidPointError: if some partial decryptor is not a subgroup element.
        """
        self.validate_nr_shares(shares, skip_threshold)
        return self._combine_partials(shares)

    def _combine_partials(self, shares: Sequence[PartialDecryptor]) -> Point:
        return reconstruct_point(self.group, [PointShare(s.value, s.index) for s in shares])

    def decrypt(
        self,
        ciphertext: Ciphertext,
        shares: Sequence[PartialDecryptor],
        public_shares: Sequence[PublicShare] | None = None,
        nonce: bytes | None = None,
        skip_threshold: bool = False,
    ):
        """Verify (when ``public_shares`` is given), reconstruct the decryptor and decrypt.

        Returns the plaintext: bytes for kem/ies, a point for plain.
        """
        self.validate_nr_shares(shares, skip_threshold)
        start = time.perf_counter()
        if public_shares is not None:
            result = self.verify_partial_decryptors(ciphertext, public_shares, shares, nonce)
            if not result.flag:
                log.warning("partial_decryptors_rejected", indexes=result.indexes, nr_shares=len(shares))
                raise InvalidPartialDecryptorError("Invalid partial decryptors", result.indexes)
        decryptor = self._combine_partials(shares)
        RECONSTRUCTION_DURATION.observe(time.perf_counter() - start)
        return cipher_for(self.group, ciphertext).decrypt_with_decryptor(ciphertext, decryptor)
