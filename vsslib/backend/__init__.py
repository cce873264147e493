"""Group backends keyed by system label."""

from __future__ import annotations

from vsslib.backend.base import Group, Point, Rng
from vsslib.backend.elliptic import Ed25519Group, Secp256k1Group
from vsslib.backend.modular import ModularGroup
from vsslib.enums import System

_BACKENDS: dict[System, type[Group]] = {
    System.SECP256K1: Secp256k1Group,
    System.ED25519: Ed25519Group,
    System.MODP_2048: ModularGroup,
}


def init_group(label: str | System, rng: Rng | None = None) -> Group:
    """Instantiate the group for ``label``.

    Raises:
        UnsupportedGroupError: if no backend is registered for ``label``.
    """
    return _BACKENDS[System.parse(label)](rng)


__all__ = ["Group", "Point", "Rng", "init_group"]
