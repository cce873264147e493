"""Shared test fixtures for the vsslib test suite."""

from __future__ import annotations

import os

# Pin defaults so a local .env cannot change behaviour under test.
os.environ["VSSLIB_SYSTEM"] = "secp256k1"
os.environ["VSSLIB_HASH_ALGORITHM"] = "sha256"
os.environ["VSSLIB_BLOCK_MODE"] = "aes-256-cbc"
os.environ["VSSLIB_ELGAMAL_SCHEME"] = "ies"
os.environ["VSSLIB_ALLOW_SKIP_THRESHOLD"] = "0"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from vsslib.backend import Group, init_group  # noqa: E402

ALL_SYSTEMS = ["secp256k1", "ed25519", "modp-2048"]
# The MODP group is slow; protocol-heavy suites run on the elliptic curves only.
FAST_SYSTEMS = ["secp256k1", "ed25519"]


@pytest.fixture(params=ALL_SYSTEMS)
def group(request: pytest.FixtureRequest) -> Group:
    return init_group(request.param)


@pytest.fixture(params=FAST_SYSTEMS)
def fast_group(request: pytest.FixtureRequest) -> Group:
    return init_group(request.param)


@pytest.fixture
def secp() -> Group:
    return init_group("secp256k1")
