"""
anchor_testkit.account
======================

Decode Anchor account state read from the simulated environment.

Every Anchor account starts with an 8-byte tag, sha256("account:<TypeName>")[:8],
followed by the Borsh-encoded fields. This module offers:

- `AnchorAccount`: base class for account layouts (a BorshStruct with a tag)
- `decode_anchor_account(data, cls)`: validate the tag, then decode
- `decode_anchor_account_unchecked(data, cls)`: skip the tag without checking,
  for layouts defined by other programs under a different name
- `get_anchor_account(svm, pubkey, cls)` / `get_anchor_account_unchecked(...)`:
  fetch + decode, raising AccountNotFound for missing accounts

Example
-------
    @dataclass
    class Counter(AnchorAccount):
        SCHEMA = (("authority", PUBKEY), ("count", U64))
        authority: Pubkey
        count: int

    counter = get_anchor_account(svm, counter_pda, Counter)
"""

from __future__ import annotations

from typing import Any, ClassVar, Optional, Type, TypeVar

from .abi.discriminator import DISCRIMINATOR_SIZE, account_discriminator
from .abi.encoding import BorshStruct
from .errors import (AccountNotFound, DecodeError, DeserializationFailed,
                     DiscriminatorMismatch)
from .logging import get_logger
from .svm import SimulatedEnvironment
from .types.core import to_pubkey

__all__ = [
    "AnchorAccount",
    "discriminator_for",
    "decode_anchor_account",
    "decode_anchor_account_unchecked",
    "get_anchor_account",
    "get_anchor_account_unchecked",
]

log = get_logger(__name__)

T = TypeVar("T")


class AnchorAccount(BorshStruct):
    """
    Base for Anchor account layouts. The tag is derived from ACCOUNT_NAME,
    or the class name when ACCOUNT_NAME is unset.
    """

    ACCOUNT_NAME: ClassVar[Optional[str]] = None

    @classmethod
    def account_name(cls) -> str:
        return cls.ACCOUNT_NAME or cls.__name__

    @classmethod
    def discriminator(cls) -> bytes:
        return account_discriminator(cls.account_name())

    def to_account_data(self) -> bytes:
        """Tag ++ fields: the bytes the program would store for this value."""
        return self.discriminator() + self.encode()


def discriminator_for(cls: Any) -> bytes:
    """Tag of an account class: its own `discriminator()` or one derived from its name."""
    fn = getattr(cls, "discriminator", None)
    if callable(fn):
        return fn()
    return account_discriminator(getattr(cls, "ACCOUNT_NAME", None) or cls.__name__)


def _type_name(cls: Any) -> str:
    return getattr(cls, "ACCOUNT_NAME", None) or cls.__name__


def _decode_body(data: bytes, cls: Type[T], allow_trailing: bool) -> T:
    try:
        value, end = cls.decode_from(data, DISCRIMINATOR_SIZE)  # type: ignore[attr-defined]
    except DecodeError as e:
        raise DeserializationFailed(str(e), type_name=_type_name(cls)) from e
    if not allow_trailing and end != len(data):
        raise DeserializationFailed(
            f"{len(data) - end} trailing bytes after decoded fields", type_name=_type_name(cls)
        )
    return value


def decode_anchor_account(data: bytes, cls: Type[T], *, allow_trailing: bool = True) -> T:
    """
    Check the leading 8 bytes against the tag for `cls`, then decode the
    remainder. Short data or a wrong tag raises DiscriminatorMismatch; a
    remainder that doesn't fit the layout raises DeserializationFailed.
    Accounts are often allocated larger than their layout, so trailing bytes
    are accepted unless `allow_trailing=False`.
    """
    data = bytes(data)
    expected = discriminator_for(cls)
    actual = data[:DISCRIMINATOR_SIZE]
    if actual != expected:
        raise DiscriminatorMismatch(expected, actual, type_name=_type_name(cls))
    return _decode_body(data, cls, allow_trailing)


def decode_anchor_account_unchecked(
    data: bytes, cls: Type[T], *, allow_trailing: bool = True
) -> T:
    """Decode after skipping the first 8 bytes without looking at them."""
    data = bytes(data)
    if len(data) < DISCRIMINATOR_SIZE:
        raise DeserializationFailed(
            f"account data is {len(data)} bytes, shorter than the {DISCRIMINATOR_SIZE}-byte tag",
            type_name=_type_name(cls),
        )
    return _decode_body(data, cls, allow_trailing)


def _fetch_data(svm: SimulatedEnvironment, pubkey: Any) -> bytes:
    pk = to_pubkey(pubkey)
    account = svm.get_account(pk)
    if account is None:
        raise AccountNotFound(str(pk))
    log.debug("account fetched", extra={"pubkey": str(pk), "data_len": len(account.data)})
    return bytes(account.data)


def get_anchor_account(
    svm: SimulatedEnvironment, pubkey: Any, cls: Type[T], *, allow_trailing: bool = True
) -> T:
    return decode_anchor_account(_fetch_data(svm, pubkey), cls, allow_trailing=allow_trailing)


def get_anchor_account_unchecked(
    svm: SimulatedEnvironment, pubkey: Any, cls: Type[T], *, allow_trailing: bool = True
) -> T:
    return decode_anchor_account_unchecked(
        _fetch_data(svm, pubkey), cls, allow_trailing=allow_trailing
    )
