"""
anchor_testkit.wallet
=====================

Convenience exports for signing keys:

- Ed25519 `Keypair` (generate, seed, 64-byte import/export).
- `Signer` protocol accepted by the submission helpers.
"""

from .signer import KEYPAIR_LENGTH, SIGNATURE_LENGTH, Keypair, Signer

__all__ = [
    "Keypair",
    "Signer",
    "KEYPAIR_LENGTH",
    "SIGNATURE_LENGTH",
]
