from __future__ import annotations

import hashlib

import pytest

from anchor_testkit.abi.discriminator import (DISCRIMINATOR_SIZE,
                                              account_discriminator,
                                              calculate_anchor_discriminator,
                                              instruction_discriminator)


def test_initialize_selector_matches_known_value() -> None:
    assert instruction_discriminator("initialize").hex() == "afaf6d1f0d989bed"


@pytest.mark.parametrize("name", ["make", "take", "refund", "increment", "close_escrow"])
def test_selector_is_first_eight_bytes_of_namespaced_sha256(name: str) -> None:
    expected = hashlib.sha256(f"global:{name}".encode()).digest()[:8]
    sel = instruction_discriminator(name)
    assert sel == expected
    assert len(sel) == DISCRIMINATOR_SIZE


def test_selector_is_deterministic_and_name_sensitive() -> None:
    assert instruction_discriminator("make") == instruction_discriminator("make")
    assert instruction_discriminator("make") != instruction_discriminator("take")
    # Case matters: names are taken verbatim.
    assert instruction_discriminator("Make") != instruction_discriminator("make")


def test_anchor_alias_is_the_same_function() -> None:
    assert calculate_anchor_discriminator("initialize") == instruction_discriminator("initialize")


def test_account_tag_uses_account_namespace() -> None:
    expected = hashlib.sha256(b"account:Escrow").digest()[:8]
    assert account_discriminator("Escrow") == expected
    assert account_discriminator("Escrow") != instruction_discriminator("Escrow")


@pytest.mark.parametrize("fn", [instruction_discriminator, account_discriminator])
def test_empty_name_is_rejected(fn) -> None:
    with pytest.raises(ValueError):
        fn("")


def test_non_string_name_is_rejected() -> None:
    with pytest.raises(TypeError):
        instruction_discriminator(b"initialize")  # type: ignore[arg-type]


_VERBS = ("initialize", "make", "take", "refund", "close", "deposit", "withdraw",
          "swap", "stake", "unstake", "claim", "mint", "burn", "transfer", "update",
          "set_authority", "create_pool", "add_liquidity", "remove_liquidity",
          "increment", "decrement", "vote", "propose", "execute", "cancel")


def test_selectors_do_not_collide_across_common_names() -> None:
    names = list(_VERBS) + [f"{v}_v2" for v in _VERBS]
    assert len(names) == 50
    assert len({instruction_discriminator(n) for n in names}) == len(names)
    assert len({account_discriminator(n.title()) for n in names}) == len(names)
