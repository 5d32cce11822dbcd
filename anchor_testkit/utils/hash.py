from __future__ import annotations

import hashlib

from .bytes import BytesLike, ensure_bytes


# Selectors and account tags both hash with SHA-256.
def sha256(data: BytesLike) -> bytes:
    """Return the SHA-256 digest of *data*."""
    return hashlib.sha256(ensure_bytes(data)).digest()


__all__ = ["sha256"]
