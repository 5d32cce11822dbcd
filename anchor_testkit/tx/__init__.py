"""
anchor_testkit.tx
=================

Instruction building, transaction assembly and submission.

Submodules
----------
- build      : InstructionBuilder (named accounts, selector + Borsh args) and
               build_anchor_instruction.
- transaction: message compilation and signing on top of `solders`.
- send       : submit to a simulated environment, mapping failures to ExecutionFailed.
- result     : TransactionResult with log search and compute-unit extraction.

Typical usage
-------------
    from anchor_testkit.tx import InstructionBuilder, send_instruction

    ix = InstructionBuilder(program_id, "initialize").signer("user", user).no_args().build()
    result = send_instruction(svm, ix, [user])
    assert result.has_log("Instruction: Initialize")
"""

from __future__ import annotations

from . import build, result, send, transaction
from .build import InstructionBuilder, build_anchor_instruction
from .result import TransactionResult, extract_compute_units
from .send import execute, send_instruction, send_instructions
from .transaction import (compile_message, new_signed_with_payer,
                          sign_transaction, verify_transaction)

__all__ = [
    # submodules
    "build",
    "transaction",
    "send",
    "result",
    # builder
    "InstructionBuilder",
    "build_anchor_instruction",
    # signing
    "compile_message",
    "sign_transaction",
    "new_signed_with_payer",
    "verify_transaction",
    # submission
    "send_instructions",
    "send_instruction",
    "execute",
    "TransactionResult",
    "extract_compute_units",
]
