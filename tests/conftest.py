"""
Shared pytest fixtures:
- FakeSvm: in-memory simulated environment implementing the harness protocol
  over `solders` transactions (accounts, airdrops, blockhashes, signature
  checks, program-address derivation, scripted outcomes, and
  per-instruction program handlers)
- Funded keypairs and an AnchorContext bound to a throwaway program id
- A tiny "counter" program emulation with an Anchor-style account layout
"""
from __future__ import annotations

import dataclasses
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest
from solders.transaction import Transaction

from anchor_testkit.abi.discriminator import instruction_discriminator
from anchor_testkit.abi.types import PUBKEY, U64
from anchor_testkit.account import AnchorAccount
from anchor_testkit.config import HarnessConfig
from anchor_testkit.context import AnchorContext
from anchor_testkit.svm import (Account, FailedTransactionMetadata,
                                TransactionMetadata)
from anchor_testkit.tx.transaction import verify_transaction
from anchor_testkit.types.core import Hash, Pubkey
from anchor_testkit.utils.hash import sha256
from anchor_testkit.wallet.signer import Keypair

LAMPORTS_PER_SOL = 1_000_000_000

# handler(svm, account_keys, args) -> extra log lines
Handler = Callable[["FakeSvm", List[Pubkey], bytes], Optional[Sequence[str]]]


class ProgramFailure(Exception):
    """Raised by a fake program handler to make the transaction fail."""

    def __init__(self, err: str, logs: Sequence[str] = ()) -> None:
        super().__init__(err)
        self.err = err
        self.logs = tuple(logs)


class FakeSvm:
    """
    Deterministic stand-in for an in-process ledger. Every call to
    `latest_blockhash` returns a new hash; transactions must reference one
    that was issued and carry valid signatures.
    """

    def __init__(self) -> None:
        self.accounts: Dict[Pubkey, Account] = {}
        self.sent: List[Transaction] = []
        self.issued_blockhashes: List[Hash] = []
        self.programs: Dict[Tuple[Pubkey, bytes], Handler] = {}
        self._scripted: List[object] = []

    # ---- protocol ----

    def latest_blockhash(self) -> Hash:
        h = Hash.from_bytes(sha256(b"blockhash:%d" % len(self.issued_blockhashes)))
        self.issued_blockhashes.append(h)
        return h

    def airdrop(self, pubkey: Pubkey, lamports: int) -> None:
        acc = self.accounts.get(pubkey)
        if acc is None:
            self.accounts[pubkey] = Account(lamports=lamports)
        else:
            acc.lamports += lamports

    def get_account(self, pubkey: Pubkey) -> Optional[Account]:
        return self.accounts.get(pubkey)

    def get_balance(self, pubkey: Pubkey) -> Optional[int]:
        acc = self.accounts.get(pubkey)
        return None if acc is None else acc.lamports

    def minimum_balance_for_rent_exemption(self, data_len: int) -> int:
        return (128 + data_len) * 3480 * 2

    def find_program_address(self, seeds: Sequence[bytes], program_id: Pubkey) -> Tuple[Pubkey, int]:
        return Pubkey.find_program_address(list(seeds), program_id)

    def send_transaction(self, tx: Transaction):
        self.sent.append(tx)
        if not verify_transaction(tx):
            return FailedTransactionMetadata("SignatureFailure")
        if tx.message.recent_blockhash not in self.issued_blockhashes:
            return FailedTransactionMetadata("BlockhashNotFound")
        if self._scripted:
            return self._scripted.pop(0)

        keys = list(tx.message.account_keys)
        logs: List[str] = []
        for cix in tx.message.instructions:
            program_id = keys[cix.program_id_index]
            logs.append(f"Program {program_id} invoke [1]")
            handler = self.programs.get((program_id, cix.data[:8]))
            if handler is not None:
                try:
                    logs.extend(handler(self, [keys[i] for i in cix.accounts], cix.data[8:]) or ())
                except ProgramFailure as e:
                    logs.extend(e.logs)
                    logs.append(f"Program {program_id} failed: {e.err}")
                    return FailedTransactionMetadata(e.err, TransactionMetadata(logs=logs))
            logs.append(f"Program {program_id} success")
        return TransactionMetadata(logs=logs, signature=tx.signatures[0])

    # ---- test helpers ----

    def script(
        self,
        *,
        logs: Sequence[str] = (),
        error: Optional[str] = None,
        compute_units: int = 0,
    ) -> None:
        """Queue the outcome of the next valid transaction."""
        meta = TransactionMetadata(logs=tuple(logs), compute_units_consumed=compute_units)
        self._scripted.append(FailedTransactionMetadata(error, meta) if error else meta)

    def register(self, program_id: Pubkey, instruction_name: str, handler: Handler) -> None:
        self.programs[(program_id, instruction_discriminator(instruction_name))] = handler

    def set_account(self, pubkey: Pubkey, data: bytes, *, lamports: Optional[int] = None, owner: Optional[Pubkey] = None) -> None:
        self.accounts[pubkey] = Account(
            lamports=self.minimum_balance_for_rent_exemption(len(data)) if lamports is None else lamports,
            data=bytes(data),
            owner=owner or Pubkey.default(),
        )

    def snapshot(self) -> Dict[Pubkey, Tuple[int, bytes]]:
        return {k: (v.lamports, bytes(v.data)) for k, v in self.accounts.items()}


# ---------- counter program emulation ----------


@dataclasses.dataclass
class Counter(AnchorAccount):
    SCHEMA = (("authority", PUBKEY), ("count", U64))
    authority: Pubkey
    count: int


def _initialize(svm: FakeSvm, accounts: List[Pubkey], args: bytes) -> List[str]:
    user, counter = accounts[0], accounts[1]
    if counter in svm.accounts:
        raise ProgramFailure(
            "custom program error: 0x0",
            [f"Program log: Allocate: account Address {{ address: {counter} }} already in use"],
        )
    svm.set_account(counter, Counter(authority=user, count=0).to_account_data())
    return ["Program log: Instruction: Initialize", "Program log: Counter initialized"]


def _increment(svm: FakeSvm, accounts: List[Pubkey], args: bytes) -> List[str]:
    counter = accounts[0]
    amount = int.from_bytes(args[:8], "little")
    state = Counter.decode(svm.accounts[counter].data[8:])
    if state.count + amount > 10:
        raise ProgramFailure(
            "custom program error: 0x1770",
            ["Program log: AnchorError occurred. Error Code: Overflow. Error Number: 6000."],
        )
    state.count += amount
    svm.accounts[counter].data = state.to_account_data()
    return ["Program log: Instruction: Increment", f"Program log: count={state.count}"]


# ---------- fixtures ----------


@pytest.fixture
def svm() -> FakeSvm:
    return FakeSvm()


@pytest.fixture
def program_id() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def payer(svm: FakeSvm) -> Keypair:
    kp = Keypair.generate()
    svm.airdrop(kp.pubkey(), 10 * LAMPORTS_PER_SOL)
    return kp


@pytest.fixture
def config() -> HarnessConfig:
    return HarnessConfig()


@pytest.fixture
def ctx(svm: FakeSvm, program_id: Pubkey, config: HarnessConfig) -> AnchorContext:
    return AnchorContext(svm, program_id, config=config)


@pytest.fixture
def counter_program(svm: FakeSvm, program_id: Pubkey) -> Pubkey:
    svm.register(program_id, "initialize", _initialize)
    svm.register(program_id, "increment", _increment)
    return program_id
