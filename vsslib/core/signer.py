"""Schnorr signatures as Dlog proofs with the message bound into the challenge."""

from __future__ import annotations

from vsslib.backend.base import Point
from vsslib.core.sigma import LinearProtocol, LinearRelation, SigmaProof

SchnorrSignature = SigmaProof


class SchnorrSigner(LinearProtocol):
    protocol = "schnorr"

    def _relation(self, pub: Point) -> LinearRelation:
        return LinearRelation.create([[self.group.generator]], [pub])

    def sign(self, secret: int, message: bytes, nonce: bytes | None = None) -> SchnorrSignature:
        pub = self.group.generate_point(secret)
        return self.prove_linear([secret], self._relation(pub), nonce, extras=[message])

    def verify_signature(
        self,
        pub: Point,
        message: bytes,
        signature: SchnorrSignature,
        nonce: bytes | None = None,
    ) -> bool:
        return self.verify_linear(self._relation(pub), signature, nonce, extras=[message])
