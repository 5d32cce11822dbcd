from __future__ import annotations

from dataclasses import dataclass

import pytest

from anchor_testkit.abi.discriminator import account_discriminator
from anchor_testkit.abi.types import PUBKEY, STRING, U8, U64
from anchor_testkit.account import (AnchorAccount, decode_anchor_account,
                                    decode_anchor_account_unchecked,
                                    discriminator_for, get_anchor_account,
                                    get_anchor_account_unchecked)
from anchor_testkit.errors import (AccountError, AccountNotFound,
                                   DeserializationFailed,
                                   DiscriminatorMismatch)
from anchor_testkit.types.core import Pubkey


@dataclass
class Offer(AnchorAccount):
    SCHEMA = (("maker", PUBKEY), ("amount", U64), ("bump", U8))
    maker: Pubkey
    amount: int
    bump: int


@dataclass
class Profile(AnchorAccount):
    ACCOUNT_NAME = "UserProfile"
    SCHEMA = (("name", STRING),)
    name: str


@pytest.fixture
def offer() -> Offer:
    return Offer(maker=Pubkey.new_unique(), amount=1_000, bump=254)


def test_tag_is_derived_from_type_name() -> None:
    assert Offer.discriminator() == account_discriminator("Offer")
    assert Profile.discriminator() == account_discriminator("UserProfile")
    assert discriminator_for(Offer) == Offer.discriminator()


def test_discriminator_for_plain_struct_class() -> None:
    class Vault:
        pass

    assert discriminator_for(Vault) == account_discriminator("Vault")


def test_to_account_data_layout(offer: Offer) -> None:
    data = offer.to_account_data()
    assert data[:8] == Offer.discriminator()
    assert len(data) == 8 + 32 + 8 + 1


def test_decode_round_trip_with_padding(offer: Offer) -> None:
    data = offer.to_account_data() + bytes(16)
    assert decode_anchor_account(data, Offer) == offer
    with pytest.raises(DeserializationFailed):
        decode_anchor_account(data, Offer, allow_trailing=False)


def test_wrong_tag_is_a_mismatch(offer: Offer) -> None:
    data = bytes(8) + offer.encode()
    with pytest.raises(DiscriminatorMismatch) as ei:
        decode_anchor_account(data, Offer)
    assert ei.value.expected == Offer.discriminator()
    assert ei.value.actual == bytes(8)
    assert ei.value.type_name == "Offer"
    assert isinstance(ei.value, AccountError)


def test_short_data_is_a_mismatch() -> None:
    with pytest.raises(DiscriminatorMismatch) as ei:
        decode_anchor_account(Offer.discriminator()[:5], Offer)
    assert ei.value.actual == Offer.discriminator()[:5]
    with pytest.raises(DiscriminatorMismatch):
        decode_anchor_account(b"", Offer)


def test_truncated_body_fails_deserialization(offer: Offer) -> None:
    data = offer.to_account_data()[:-1]
    with pytest.raises(DeserializationFailed) as ei:
        decode_anchor_account(data, Offer)
    assert ei.value.type_name == "Offer"


def test_unchecked_skips_the_tag(offer: Offer) -> None:
    foreign = b"\xde\xad\xbe\xef" * 2 + offer.encode()
    assert decode_anchor_account_unchecked(foreign, Offer) == offer
    with pytest.raises(DeserializationFailed):
        decode_anchor_account_unchecked(b"\x00" * 7, Offer)


def test_get_from_environment(svm, offer: Offer) -> None:
    addr = Pubkey.new_unique()
    svm.set_account(addr, offer.to_account_data())
    assert get_anchor_account(svm, addr, Offer) == offer
    assert get_anchor_account(svm, str(addr), Offer) == offer
    assert get_anchor_account_unchecked(svm, addr, Offer) == offer


def test_get_missing_account(svm) -> None:
    addr = Pubkey.new_unique()
    with pytest.raises(AccountNotFound) as ei:
        get_anchor_account(svm, addr, Offer)
    assert ei.value.address == str(addr)
    with pytest.raises(AccountNotFound):
        get_anchor_account_unchecked(svm, addr, Offer)
