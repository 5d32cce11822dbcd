"""
Utility helpers for the harness.

Re-exports:
- bytes: hex parsing and bytes coercion
- hash: SHA-256 convenience wrapper
"""

from .bytes import ensure_bytes, from_hex
from .hash import sha256

__all__ = [
    "from_hex",
    "ensure_bytes",
    "sha256",
]
