"""
anchor_testkit.types
====================

Value types used across the harness:

- :mod:`anchor_testkit.types.core`: the `solders` Pubkey, AccountMeta,
  Instruction and Hash, with coercion helpers and the well-known program ids.

    from anchor_testkit.types import Pubkey, writable_meta
"""

from .core import (ASSOCIATED_TOKEN_PROGRAM_ID, HASH_LENGTH, PUBKEY_LENGTH,
                   RENT_SYSVAR_ID, SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID,
                   AccountMeta, Hash, Instruction, Pubkey, PubkeyLike,
                   ensure_hash, readonly_meta, to_pubkey, writable_meta)

__all__ = [
    "PUBKEY_LENGTH",
    "HASH_LENGTH",
    "Pubkey",
    "PubkeyLike",
    "to_pubkey",
    "Hash",
    "ensure_hash",
    "AccountMeta",
    "Instruction",
    "writable_meta",
    "readonly_meta",
    # well-known ids
    "SYSTEM_PROGRAM_ID",
    "TOKEN_PROGRAM_ID",
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "RENT_SYSVAR_ID",
]
