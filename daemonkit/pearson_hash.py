"""Pearson hashing with the permutation table from Pearson's original paper."""

from __future__ import annotations

from collections.abc import Iterable

PEARSON_PERMUTATION_SIZE = 256

# The 256-entry permutation from "Fast Hashing of Variable-Length Text
# Strings" (CACM 33(6), 1990), stored as hex.
PEARSON_PERMUTATION: bytes = bytes.fromhex(
    "0157310cb0b266a679c10654f9e62ca3"
    "0ec5d5b5a155da5040ef18e2ec8e26c8"
    "6eb168678dfdff324d6551122d601fde"
    "196bbe4656edf02248f214d6f4e395eb"
    "61ea39163cfa52afd0057fc76f3e87f8"
    "aea9d33a429a6ac3f5ab11bbb6b300f3"
    "8438944b80859e64827e5b0d99f6d8db"
    "7744df4e5358c9637a0b5c208872340a"
    "8a1e30b79c233d1a8f4afb5e81a23f98"
    "aa0773a7f1ce0396373b97dc5a351783"
    "7dad0fee4f5f59106989e1e0d9a0257b"
    "7649029d2e74099186e4cfd4cad745e5"
    "1bbc437ca8fc2a041d6c15f713cd27cb"
    "e928ba93c6c09b21a4bf62cca5b4754c"
    "8c24d2ac29369f08b9e871c4e72f9278"
    "33411c90fedd5dbdc28b702b476db8d1"
)

if len(PEARSON_PERMUTATION) != PEARSON_PERMUTATION_SIZE:
    raise RuntimeError("Pearson permutation table has the wrong size")


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value < PEARSON_PERMUTATION_SIZE:
        raise ValueError(f"{name} must be in [0, 255], got {value}")


def pearson(cur: int, next_byte: int) -> int:
    """Advance the hash state cur by one input byte."""
    _check_byte("cur", cur)
    _check_byte("next_byte", next_byte)
    return PEARSON_PERMUTATION[cur ^ next_byte]


def pearson_hash(data: bytes | Iterable[int], seed: int = 0) -> int:
    """Hash a sequence of bytes into a single byte, starting from seed."""
    _check_byte("seed", seed)
    cur = seed
    for byte in data:
        cur = pearson(cur, byte)
    return cur