"""
anchor_testkit.tx.build
=======================

Fluent builder for Anchor instructions: named accounts in insertion order,
an 8-byte selector derived from the instruction name, and Borsh arguments.

The builder returns a `solders` `Instruction`. Feed that to
`anchor_testkit.tx.send` (or call `execute(ctx, signers)`) to submit it to a
simulated environment.

Design notes
------------
- Account order is insertion order. The program reads accounts positionally,
  so the order of `account*` / `signer*` calls must match the program's
  account struct.
- Names are for lookup only and never reach the wire. Reusing a name keeps
  both entries in the positional list and points the name at the newer one
  (logged as a warning); pass `strict_names=True` to make it an error.
- `args` may be called more than once; the last call wins.
- `build()` / `execute()` consume the builder.

Examples
--------
    ix = (
        InstructionBuilder(program_id, "make")
        .signer("maker", maker)
        .account_mut("escrow", escrow_pda)
        .system_program()
        .args(tuple_args(u64(42), u64(500_000_000), u64(1_000_000_000)))
        .build()
    )
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..abi.discriminator import instruction_discriminator
from ..abi.encoding import encode_args, tuple_args
from ..errors import BuildError
from ..logging import get_logger
from ..types.core import (ASSOCIATED_TOKEN_PROGRAM_ID, RENT_SYSVAR_ID,
                          SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID, AccountMeta,
                          Instruction, Pubkey, readonly_meta, to_pubkey,
                          writable_meta)

__all__ = [
    "InstructionBuilder",
    "build_anchor_instruction",
]

log = get_logger(__name__)


class InstructionBuilder:
    """
    Accumulates named account metas and encoded arguments for one
    instruction. Not thread-safe; one builder per instruction.
    """

    def __init__(
        self,
        program_id: Any,
        instruction_name: str,
        *,
        strict_names: bool = False,
    ) -> None:
        self._program_id: Pubkey = to_pubkey(program_id)
        self._name = instruction_name
        # Derive eagerly so an empty name fails at construction.
        self._selector = instruction_discriminator(instruction_name)
        self._strict = bool(strict_names)
        self._accounts: List[AccountMeta] = []
        self._names: List[str] = []
        self._index: Dict[str, int] = {}
        self._data: Optional[bytes] = None
        self._consumed = False

    # ---- Properties ----

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    @property
    def instruction_name(self) -> str:
        return self._name

    @property
    def consumed(self) -> bool:
        return self._consumed

    # ---- Accounts ----

    def _check_live(self, op: str) -> None:
        if self._consumed:
            raise BuildError(f"builder for '{self._name}' already consumed; {op}() not allowed")

    def _push(self, name: str, meta: AccountMeta) -> "InstructionBuilder":
        self._check_live("account")
        if name in self._index:
            if self._strict:
                raise BuildError(f"account name '{name}' already used in '{self._name}'")
            log.warning(
                "account name reused; lookups now resolve to the newer entry",
                extra={
                    "instruction": self._name,
                    "account_name": name,
                    "previous_position": self._index[name],
                    "position": len(self._accounts),
                },
            )
        self._index[name] = len(self._accounts)
        self._names.append(name)
        self._accounts.append(meta)
        log.debug(
            "account added",
            extra={
                "instruction": self._name,
                "account_name": name,
                "pubkey": str(meta.pubkey),
                "is_signer": meta.is_signer,
                "is_writable": meta.is_writable,
            },
        )
        return self

    def account(self, name: str, pubkey: Any) -> "InstructionBuilder":
        """Read-only, non-signer account."""
        return self._push(name, readonly_meta(pubkey))

    def account_mut(self, name: str, pubkey: Any) -> "InstructionBuilder":
        """Writable, non-signer account."""
        return self._push(name, writable_meta(pubkey))

    def signer(self, name: str, signer: Any) -> "InstructionBuilder":
        """Writable signer. Accepts a keypair or a pubkey."""
        return self._push(name, writable_meta(signer, True))

    def signer_readonly(self, name: str, signer: Any) -> "InstructionBuilder":
        return self._push(name, readonly_meta(signer, True))

    def system_program(self) -> "InstructionBuilder":
        return self.account("system_program", SYSTEM_PROGRAM_ID)

    def token_program(self) -> "InstructionBuilder":
        return self.account("token_program", TOKEN_PROGRAM_ID)

    def associated_token_program(self) -> "InstructionBuilder":
        return self.account("associated_token_program", ASSOCIATED_TOKEN_PROGRAM_ID)

    def rent_sysvar(self) -> "InstructionBuilder":
        return self.account("rent", RENT_SYSVAR_ID)

    # ---- Arguments ----

    def args(self, value: Any) -> "InstructionBuilder":
        """
        Set the instruction data to selector ++ encode(value). `value` is a
        BorshStruct, tuple_args(...), RawArgs, or a plain tuple. EncodeError
        propagates unchanged.
        """
        self._check_live("args")
        data = self._selector + encode_args(value)
        if self._data is not None:
            log.debug("args replaced", extra={"instruction": self._name})
        self._data = data
        log.debug("args set", extra={"instruction": self._name, "data_len": len(data)})
        return self

    def no_args(self) -> "InstructionBuilder":
        """Explicitly mark an argument-less instruction (data = selector only)."""
        return self.args(tuple_args())

    # ---- Introspection ----

    def get_account(self, name: str) -> Optional[AccountMeta]:
        i = self._index.get(name)
        return None if i is None else self._accounts[i]

    def accounts(self) -> List[AccountMeta]:
        return list(self._accounts)

    def account_names(self) -> List[str]:
        return list(self._names)

    @property
    def data(self) -> Optional[bytes]:
        return self._data

    # ---- Terminal operations ----

    def build(self) -> Instruction:
        """
        Produce the instruction. Raises BuildError if `args` was never called
        or the builder was already consumed.
        """
        self._check_live("build")
        if self._data is None:
            raise BuildError(
                f"no instruction data for '{self._name}': call args(...) or no_args() before build()"
            )
        self._consumed = True
        return Instruction(self._program_id, self._data, list(self._accounts))

    def execute(self, ctx: Any, signers: Sequence[Any]) -> Any:
        """Build and submit through `ctx` (an AnchorContext); returns a TransactionResult."""
        ix = self.build()
        return ctx.send_instruction(ix, signers, instruction_name=self._name)

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else "open"
        return (
            f"InstructionBuilder(name={self._name!r}, program={self._program_id}, "
            f"accounts={len(self._accounts)}, {state})"
        )


def build_anchor_instruction(
    program_id: Any,
    instruction_name: str,
    accounts: Sequence[AccountMeta],
    args: Any,
) -> Instruction:
    """
    One-shot form: data = selector(instruction_name) ++ encode(args), with the
    given metas in order.
    """
    data = instruction_discriminator(instruction_name) + encode_args(args)
    return Instruction(to_pubkey(program_id), data, list(accounts))
