"""
anchor_testkit.svm
==================

The simulated environment the harness drives. The harness never executes
programs itself; it talks to an in-process ledger through this protocol:

- send_transaction(tx) -> TransactionMetadata | FailedTransactionMetadata
- get_account(pubkey) -> Account | None
- airdrop(pubkey, lamports), get_balance(pubkey)
- minimum_balance_for_rent_exemption(data_len)
- latest_blockhash()
- find_program_address(seeds, program_id) -> (Pubkey, bump)

Any object with these methods works (an adapter over a native simulator, or
the in-memory fake used by this package's tests). Transactions, keys and
blockhashes are `solders` values; the result types below are
what the harness reads back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (Any, Optional, Protocol, Sequence, Tuple, Union,
                    runtime_checkable)

from solders.signature import Signature
from solders.transaction import Transaction

from .types.core import SYSTEM_PROGRAM_ID, Hash, Pubkey

__all__ = [
    "Account",
    "TransactionMetadata",
    "FailedTransactionMetadata",
    "SendResult",
    "SimulatedEnvironment",
]


@dataclass(slots=True)
class Account:
    lamports: int
    data: bytes = b""
    owner: Pubkey = field(default_factory=lambda: SYSTEM_PROGRAM_ID)
    executable: bool = False
    rent_epoch: int = 0


@dataclass(slots=True, frozen=True)
class TransactionMetadata:
    """Outcome of an executed transaction."""

    logs: Tuple[str, ...] = ()
    compute_units_consumed: int = 0
    signature: Signature = field(default_factory=Signature.default)
    return_data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "logs", tuple(self.logs))


@dataclass(slots=True, frozen=True)
class FailedTransactionMetadata:
    """
    Outcome of a rejected or reverted transaction. `err` is the environment's
    error description, kept verbatim; `meta` carries the logs up to the failure.
    """

    err: Any
    meta: TransactionMetadata = field(default_factory=TransactionMetadata)


SendResult = Union[TransactionMetadata, FailedTransactionMetadata]


@runtime_checkable
class SimulatedEnvironment(Protocol):
    def send_transaction(self, tx: Transaction) -> SendResult: ...

    def get_account(self, pubkey: Pubkey) -> Optional[Account]: ...

    def airdrop(self, pubkey: Pubkey, lamports: int) -> Any: ...

    def get_balance(self, pubkey: Pubkey) -> Optional[int]: ...

    def minimum_balance_for_rent_exemption(self, data_len: int) -> int: ...

    def latest_blockhash(self) -> Hash: ...

    def find_program_address(
        self, seeds: Sequence[bytes], program_id: Pubkey
    ) -> Tuple[Pubkey, int]: ...
