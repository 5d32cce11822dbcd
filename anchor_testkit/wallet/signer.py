"""
anchor_testkit.wallet.signer
============================

Ed25519 key pairs for signing test transactions.

The key material lives in `cryptography`'s Ed25519 primitives; what comes
out (`pubkey()`, `sign_message()`) is the `solders` Pubkey and Signature, so
this Keypair and `solders.keypair.Keypair` are interchangeable wherever the
harness asks for a signer.

Key features
------------
- Random (`Keypair.generate`) or deterministic (`Keypair.from_seed`) keys
- 64-byte `secret ++ public` import/export compatible with common keypair files
- `Signer` protocol so callers can plug in any object with `pubkey()` and
  `sign_message()`

Usage
-----
    kp = Keypair.from_seed(b"\\x01" * 32)
    sig = kp.sign_message(b"hello")
    assert Keypair.verify(kp.pubkey(), b"hello", sig)
"""

from __future__ import annotations

from typing import Any, Protocol, Union, runtime_checkable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from solders.signature import Signature

from ..types.core import Pubkey, to_pubkey

SEED_LENGTH = 32
KEYPAIR_LENGTH = 64
SIGNATURE_LENGTH = 64

__all__ = [
    "SEED_LENGTH",
    "KEYPAIR_LENGTH",
    "SIGNATURE_LENGTH",
    "Signer",
    "Keypair",
]


@runtime_checkable
class Signer(Protocol):
    def pubkey(self) -> Pubkey: ...

    def sign_message(self, message: bytes) -> Signature: ...


def _raw_public(pk: ed25519.Ed25519PublicKey) -> bytes:
    return pk.public_bytes(
        encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw
    )


def _raw_private(sk: ed25519.Ed25519PrivateKey) -> bytes:
    return sk.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )


class Keypair:
    """
    An Ed25519 signing key together with its address.

    Create instances via:
        - Keypair.generate()
        - Keypair.from_seed(seed32)
        - Keypair.from_bytes(secret32 ++ public32)
    """

    __slots__ = ("_sk", "_pubkey")

    def __init__(self, private_key: ed25519.Ed25519PrivateKey) -> None:
        self._sk = private_key
        self._pubkey = Pubkey.from_bytes(_raw_public(private_key.public_key()))

    # ---- Constructors ----

    @classmethod
    def generate(cls) -> "Keypair":
        return cls(ed25519.Ed25519PrivateKey.generate())

    @classmethod
    def from_seed(cls, seed: bytes) -> "Keypair":
        """Deterministic keypair from a 32-byte seed."""
        seed = bytes(seed)
        if len(seed) != SEED_LENGTH:
            raise ValueError(f"seed must be {SEED_LENGTH} bytes, got {len(seed)}")
        return cls(ed25519.Ed25519PrivateKey.from_private_bytes(seed))

    @classmethod
    def from_bytes(cls, data: bytes) -> "Keypair":
        """
        Import the 64-byte `secret ++ public` form. The public half must match
        the key derived from the secret half.
        """
        data = bytes(data)
        if len(data) != KEYPAIR_LENGTH:
            raise ValueError(f"keypair must be {KEYPAIR_LENGTH} bytes, got {len(data)}")
        kp = cls.from_seed(data[:SEED_LENGTH])
        if bytes(kp._pubkey) != data[SEED_LENGTH:]:
            raise ValueError("public key half does not match the secret key")
        return kp

    # ---- Accessors ----

    def pubkey(self) -> Pubkey:
        return self._pubkey

    def secret(self) -> bytes:
        return _raw_private(self._sk)

    def to_bytes(self) -> bytes:
        return _raw_private(self._sk) + bytes(self._pubkey)

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    # ---- Operations ----

    def sign_message(self, message: bytes) -> Signature:
        """Sign the exact message bytes."""
        return Signature.from_bytes(self._sk.sign(bytes(message)))

    @staticmethod
    def verify(pubkey: Any, message: bytes, signature: Union[Signature, bytes]) -> bool:
        """
        True iff `signature` is a valid Ed25519 signature of `message` under
        `pubkey` (a Pubkey, base58 string, or raw 32 bytes).
        """
        pk = ed25519.Ed25519PublicKey.from_public_bytes(bytes(to_pubkey(pubkey)))
        try:
            pk.verify(bytes(signature), bytes(message))
        except InvalidSignature:
            return False
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Keypair):
            return NotImplemented
        return self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash(self._pubkey)

    def __repr__(self) -> str:
        return f"Keypair(pubkey={self._pubkey})"
