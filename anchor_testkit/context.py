"""
anchor_testkit.context
======================

A small, ergonomic handle that binds one program id to one simulated
environment and:
- Creates instruction builders for that program
- Builds/sends transactions (first signer pays, fresh blockhash per call)
- Reads and decodes Anchor accounts
- Offers assertion helpers for account state in tests

The context is intentionally thin and delegates to:
- `anchor_testkit.tx.build` for instruction assembly
- `anchor_testkit.tx.send` for signing and submission
- `anchor_testkit.account` for account decoding

Example
-------
    ctx = AnchorContext(svm, program_id)
    ctx.airdrop(user.pubkey(), 10_000_000_000)

    result = (
        ctx.instruction_builder("initialize")
        .signer("user", user)
        .account_mut("counter", counter)
        .system_program()
        .no_args()
        .execute(ctx, [user])
    )
    assert result.has_log("Instruction: Initialize")

    state = ctx.get_anchor_account(counter, Counter)

The context is synchronous and does no internal concurrency; use one per
test.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence, Tuple, Type, TypeVar

from .account import get_anchor_account, get_anchor_account_unchecked
from .config import DEFAULT, HarnessConfig
from .logging import get_logger
from .svm import Account, SimulatedEnvironment
from .tx import send as tx_send
from .tx.build import InstructionBuilder, build_anchor_instruction
from .tx.result import TransactionResult
from .types.core import AccountMeta, Hash, Instruction, Pubkey, to_pubkey

__all__ = ["AnchorContext"]

log = get_logger(__name__)

T = TypeVar("T")


class AnchorContext:
    """
    Owns the environment handle (`ctx.svm`) and the program id. Tests may
    use `ctx.svm` directly for anything the context doesn't wrap.
    """

    def __init__(
        self,
        svm: SimulatedEnvironment,
        program_id: Any,
        *,
        config: Optional[HarnessConfig] = None,
    ) -> None:
        self.svm = svm
        self.program_id: Pubkey = to_pubkey(program_id)
        self.config: HarnessConfig = config or DEFAULT
        log.debug("context created", extra={"program": str(self.program_id)})

    # ---- Instructions ----

    def instruction_builder(self, instruction_name: str) -> InstructionBuilder:
        return InstructionBuilder(
            self.program_id,
            instruction_name,
            strict_names=self.config.strict_account_names,
        )

    def build_instruction(
        self, instruction_name: str, accounts: Sequence[AccountMeta], args: Any
    ) -> Instruction:
        return build_anchor_instruction(self.program_id, instruction_name, accounts, args)

    # ---- Submission ----

    def send_instruction(
        self,
        instruction: Instruction,
        signers: Sequence[Any],
        *,
        instruction_name: Optional[str] = None,
    ) -> TransactionResult:
        return tx_send.send_instruction(
            self.svm, instruction, signers, instruction_name=instruction_name, config=self.config
        )

    def send_instructions(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence[Any],
        *,
        instruction_name: Optional[str] = None,
    ) -> TransactionResult:
        return tx_send.send_instructions(
            self.svm, instructions, signers, instruction_name=instruction_name, config=self.config
        )

    def execute(
        self,
        instruction_name: str,
        accounts: Sequence[AccountMeta],
        args: Any,
        signers: Sequence[Any],
    ) -> TransactionResult:
        """Build `instruction_name` for this program and send it in one step."""
        return tx_send.execute(
            self.svm,
            self.program_id,
            instruction_name,
            accounts,
            args,
            signers,
            config=self.config,
        )

    # ---- Environment pass-through ----

    def find_pda(self, seeds: Sequence[bytes]) -> Tuple[Pubkey, int]:
        """Program-derived address for this program (delegated to the environment)."""
        pda, bump = self.svm.find_program_address([bytes(s) for s in seeds], self.program_id)
        return to_pubkey(pda), int(bump)

    def airdrop(self, pubkey: Any, lamports: int) -> Any:
        return self.svm.airdrop(to_pubkey(pubkey), int(lamports))

    def get_balance(self, pubkey: Any) -> Optional[int]:
        return self.svm.get_balance(to_pubkey(pubkey))

    def get_account(self, pubkey: Any) -> Optional[Account]:
        return self.svm.get_account(to_pubkey(pubkey))

    def minimum_balance_for_rent_exemption(self, data_len: int) -> int:
        return self.svm.minimum_balance_for_rent_exemption(int(data_len))

    def latest_blockhash(self) -> Hash:
        return self.svm.latest_blockhash()

    # ---- Accounts ----

    def get_anchor_account(self, pubkey: Any, cls: Type[T]) -> T:
        return get_anchor_account(
            self.svm, pubkey, cls, allow_trailing=self.config.allow_trailing_bytes
        )

    def get_anchor_account_unchecked(self, pubkey: Any, cls: Type[T]) -> T:
        return get_anchor_account_unchecked(
            self.svm, pubkey, cls, allow_trailing=self.config.allow_trailing_bytes
        )

    # ---- Assertions ----

    def assert_account_exists(self, pubkey: Any) -> Account:
        pk = to_pubkey(pubkey)
        account = self.svm.get_account(pk)
        if account is None:
            raise AssertionError(f"expected account {pk} to exist")
        return account

    def assert_account_closed(self, pubkey: Any) -> None:
        """
        Closed means absent, or left with zero lamports and no data (how the
        runtime reports an account whose lamports were drained).
        """
        pk = to_pubkey(pubkey)
        account = self.svm.get_account(pk)
        if account is None:
            return
        if account.lamports != 0 or len(account.data) != 0:
            raise AssertionError(
                f"expected account {pk} to be closed, found {account.lamports} lamports "
                f"and {len(account.data)} bytes of data"
            )

    def assert_accounts_closed(self, pubkeys: Iterable[Any]) -> None:
        for pk in pubkeys:
            self.assert_account_closed(pk)

    def assert_account_lamports(self, pubkey: Any, expected: int) -> None:
        pk = to_pubkey(pubkey)
        account = self.svm.get_account(pk)
        actual = None if account is None else account.lamports
        if actual != expected:
            raise AssertionError(f"account {pk}: expected {expected} lamports, found {actual}")

    def __repr__(self) -> str:
        return f"AnchorContext(program_id={self.program_id})"
