"""
anchor_testkit.tx.send
======================

Wrap instructions in a signed transaction and submit them to a simulated
environment.

Primary entry points
--------------------
- send_instructions(svm, instructions, signers, *, instruction_name=None) -> TransactionResult
    One transaction carrying every instruction, paid by the first signer,
    using a fresh `latest_blockhash()` for each call.

- send_instruction(svm, instruction, signers, ...) -> TransactionResult
    Single-instruction convenience wrapper.

- execute(svm, program_id, instruction_name, accounts, args, signers) -> TransactionResult
    Build (selector ++ Borsh args) and send in one step.

Failure semantics
-----------------
- No signers: BuildError("no signers provided"), raised before the
  environment is touched.
- The environment rejects or reverts: ExecutionFailed carrying the
  environment's error text verbatim plus the program logs.
- Exactly one attempt per call. The environment is deterministic, so a
  retry would only repeat the failure.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..config import DEFAULT, HarnessConfig
from ..errors import BuildError, ExecutionFailed
from ..logging import get_logger
from ..svm import FailedTransactionMetadata, SimulatedEnvironment
from ..types.core import AccountMeta, Instruction, to_pubkey
from .build import build_anchor_instruction
from .transaction import new_signed_with_payer
from .result import TransactionResult, extract_compute_units

__all__ = [
    "send_instructions",
    "send_instruction",
    "execute",
]

log = get_logger(__name__)


def send_instructions(
    svm: SimulatedEnvironment,
    instructions: Sequence[Instruction],
    signers: Sequence[Any],
    *,
    instruction_name: Optional[str] = None,
    config: Optional[HarnessConfig] = None,
) -> TransactionResult:
    """
    Sign and submit `instructions` as one transaction.

    The first signer pays. Raises BuildError on zero signers or a signer set
    that doesn't match the message, ExecutionFailed when the environment
    reports failure.
    """
    cfg = config or DEFAULT
    if not signers:
        raise BuildError("no signers provided")

    payer = to_pubkey(signers[0])
    blockhash = svm.latest_blockhash()
    log.debug(
        "submitting transaction",
        extra={
            "instruction": instruction_name,
            "instructions": len(instructions),
            "payer": str(payer),
            "blockhash": str(blockhash),
        },
    )

    tx = new_signed_with_payer(instructions, payer, signers, blockhash)
    outcome = svm.send_transaction(tx)

    if isinstance(outcome, FailedTransactionMetadata):
        logs = tuple(outcome.meta.logs) if outcome.meta is not None else ()
        message = str(outcome.err)
        log.warning(
            "transaction failed",
            extra={"instruction": instruction_name, "error": message, "log_lines": len(logs)},
        )
        if cfg.log_failed_tx_logs:
            for line in logs:
                log.debug("program log: %s", line, extra={"instruction": instruction_name})
        raise ExecutionFailed(message, logs=logs, instruction_name=instruction_name)

    log.info(
        "transaction succeeded",
        extra={
            "instruction": instruction_name,
            "compute_units": extract_compute_units(outcome.logs) or 0,
        },
    )
    return TransactionResult(outcome, instruction_name)


def send_instruction(
    svm: SimulatedEnvironment,
    instruction: Instruction,
    signers: Sequence[Any],
    *,
    instruction_name: Optional[str] = None,
    config: Optional[HarnessConfig] = None,
) -> TransactionResult:
    return send_instructions(
        svm, [instruction], signers, instruction_name=instruction_name, config=config
    )


def execute(
    svm: SimulatedEnvironment,
    program_id: Any,
    instruction_name: str,
    accounts: Sequence[AccountMeta],
    args: Any,
    signers: Sequence[Any],
    *,
    config: Optional[HarnessConfig] = None,
) -> TransactionResult:
    """Build `instruction_name` with `accounts` and `args`, then send it."""
    ix = build_anchor_instruction(program_id, instruction_name, accounts, args)
    return send_instruction(svm, ix, signers, instruction_name=instruction_name, config=config)
