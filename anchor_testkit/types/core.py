"""
Value types shared by the builder, the signing layer and the
simulated-environment protocol.

The Solana types themselves come from `solders`:

- `Pubkey`: 32-byte account address, base58 in text form.
- `AccountMeta`: one account reference of an instruction (address plus
  signer/writable flags).
- `Instruction`: program id, ordered account metas, opaque data bytes.
- `Hash`: 32-byte recent blockhash.

This module adds the coercions the harness accepts at its edges (keypairs,
base58 text, raw bytes) and the well-known program ids.
"""

from __future__ import annotations

from typing import Any, Union

from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

PUBKEY_LENGTH = 32
HASH_LENGTH = 32

PubkeyLike = Union[Pubkey, str, bytes, bytearray]


def to_pubkey(value: Any) -> Pubkey:
    """
    Normalize a Pubkey, base58 string, 32 raw bytes, or anything exposing
    `pubkey()` (a keypair) into a Pubkey.
    """
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, str):
        return Pubkey.from_string(value.strip())
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if len(raw) != PUBKEY_LENGTH:
            raise ValueError(f"Pubkey must be {PUBKEY_LENGTH} bytes, got {len(raw)}")
        return Pubkey.from_bytes(raw)
    pk = getattr(value, "pubkey", None)
    if callable(pk):
        return to_pubkey(pk())
    raise TypeError(f"cannot interpret {type(value).__name__} as a Pubkey")


def ensure_hash(value: Any) -> Hash:
    """Normalize a Hash, base58 text, or 32 raw bytes to a Hash."""
    if isinstance(value, Hash):
        return value
    if isinstance(value, str):
        return Hash.from_string(value.strip())
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if len(raw) != HASH_LENGTH:
            raise ValueError(f"blockhash must be {HASH_LENGTH} bytes, got {len(raw)}")
        return Hash.from_bytes(raw)
    raise TypeError(f"cannot interpret {type(value).__name__} as a blockhash")


def writable_meta(pubkey: Any, is_signer: bool = False) -> AccountMeta:
    return AccountMeta(to_pubkey(pubkey), bool(is_signer), True)


def readonly_meta(pubkey: Any, is_signer: bool = False) -> AccountMeta:
    return AccountMeta(to_pubkey(pubkey), bool(is_signer), False)


# --- Well-known program ids --------------------------------------------------

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
RENT_SYSVAR_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")


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
    "SYSTEM_PROGRAM_ID",
    "TOKEN_PROGRAM_ID",
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "RENT_SYSVAR_ID",
]
