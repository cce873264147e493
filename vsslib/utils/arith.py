"""Modular arithmetic and fixed-width little-endian integer encoding."""

from __future__ import annotations


def mod(a: int, p: int) -> int:
    return a % p


def _extended_gcd(a: int, b: int) -> tuple[int, int, int]:
    x0, x1, y0, y1 = 1, 0, 0, 1
    while b:
        q, a, b = a // b, b, a % b
        x0, x1 = x1, x0 - q * x1
        y0, y1 = y1, y0 - q * y1
    return a, x0, y0


def mod_inv(a: int, p: int) -> int:
    """Modular multiplicative inverse using extended Euclidean algorithm."""
    a = a % p
    g, x, _ = _extended_gcd(a, p)
    if g != 1:
        raise ValueError("No inverse exists for provided modulo")
    return x % p


def byte_len(n: int) -> int:
    """Number of bytes needed to hold any integer in [0, n)."""
    return max(1, (n.bit_length() + 7) // 8)


def le_int_to_bytes(value: int, length: int) -> bytes:
    if value < 0:
        raise ValueError("Non-positive inputs")
    try:
        return value.to_bytes(length, "little")
    except OverflowError:
        raise ValueError("Bytelength exceeds range") from None


def le_bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, "little")
