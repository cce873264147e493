"""Prometheus metrics for vsslib.

Counts verification outcomes and threshold-policy decisions so a host
service can alert on misbehaving shareholders. Values never carry secret
material, only labels and counts.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram, generate_latest

# --- Verification metrics ---
PROOF_VERIFICATIONS = Counter(
    "vsslib_proof_verifications_total",
    "Sigma proof verifications",
    ["protocol", "result"],  # protocol: dlog, eq_dlog, ddh, ...; result: valid, invalid
)

SHARE_VERIFICATIONS = Counter(
    "vsslib_share_verifications_total",
    "VSS share verifications against published commitments",
    ["scheme", "result"],  # feldman, pedersen
)

INVALID_PARTIAL_DECRYPTORS = Counter(
    "vsslib_invalid_partial_decryptors_total",
    "Partial decryptors rejected because of an invalid proof",
)

# --- Combiner metrics ---
THRESHOLD_REJECTIONS = Counter(
    "vsslib_threshold_rejections_total",
    "Operations rejected for supplying fewer shares than the threshold",
)

THRESHOLD_SKIPS = Counter(
    "vsslib_threshold_skips_total",
    "Operations that bypassed the threshold check by explicit request",
)

DECRYPTION_FAILURES = Counter(
    "vsslib_decryption_failures_total",
    "Decapsulation failures by ElGamal scheme",
    ["scheme"],  # plain, kem, ies
)

RECONSTRUCTION_DURATION = Histogram(
    "vsslib_decryptor_reconstruction_seconds",
    "Time to verify and combine partial decryptors",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)


def metrics_response() -> bytes:
    """Generate Prometheus-compatible metrics text."""
    return generate_latest()
