"""
Selector and account-tag derivation.

Both are the first eight bytes of SHA-256 over a namespaced name:

    instruction selector = sha256(b"global:"  + snake_case_name)[:8]
    account tag          = sha256(b"account:" + TypeName)[:8]

The namespaces are a compatibility contract with deployed programs; they are
not configurable.

>>> instruction_discriminator("initialize").hex()
'afaf6d1f0d989bed'
"""

from __future__ import annotations

from ..utils.hash import sha256

__all__ = [
    "DISCRIMINATOR_SIZE",
    "INSTRUCTION_NAMESPACE",
    "ACCOUNT_NAMESPACE",
    "instruction_discriminator",
    "calculate_anchor_discriminator",
    "account_discriminator",
]

DISCRIMINATOR_SIZE = 8
INSTRUCTION_NAMESPACE = "global"
ACCOUNT_NAMESPACE = "account"


def _discriminator(namespace: str, name: str) -> bytes:
    if not isinstance(name, str):
        raise TypeError(f"name must be a str, got {type(name).__name__}")
    if not name:
        raise ValueError(f"{namespace} name must be non-empty")
    return sha256(f"{namespace}:{name}".encode("utf-8"))[:DISCRIMINATOR_SIZE]


def instruction_discriminator(name: str) -> bytes:
    """8-byte selector for the instruction `name` (as written in the program, snake_case)."""
    return _discriminator(INSTRUCTION_NAMESPACE, name)


# Name used by the Anchor tooling.
calculate_anchor_discriminator = instruction_discriminator


def account_discriminator(type_name: str) -> bytes:
    """8-byte tag stored at the start of every account of type `type_name`."""
    return _discriminator(ACCOUNT_NAMESPACE, type_name)
