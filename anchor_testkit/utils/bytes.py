"""Byte coercion shared by the hashing helpers."""

from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


def from_hex(s: str) -> bytes:
    """Parse hex with or without a `0x` prefix; odd lengths are rejected."""
    if not isinstance(s, str):
        raise TypeError(f"expected a hex string, got {type(s).__name__}")
    digits = s[2:] if s[:2] in ("0x", "0X") else s
    if len(digits) & 1:
        raise ValueError(f"odd-length hex string ({len(digits)} digits)")
    try:
        return bytes.fromhex(digits)
    except ValueError as e:
        raise ValueError(f"not a hex string: {s!r}") from e


def ensure_bytes(data: Union[BytesLike, str]) -> bytes:
    """Coerce a bytes-like value to `bytes`; strings are read as hex."""
    if isinstance(data, str):
        return from_hex(data)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"cannot convert {type(data).__name__} to bytes")


__all__ = [
    "BytesLike",
    "ensure_bytes",
    "from_hex",
]
