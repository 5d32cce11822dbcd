from __future__ import annotations

import logging

import pytest
from solders.keypair import Keypair as SoldersKeypair

from anchor_testkit.abi.encoding import tuple_args, u64
from anchor_testkit.config import HarnessConfig
from anchor_testkit.errors import BuildError, ExecutionFailed
from anchor_testkit.tx.build import InstructionBuilder
from anchor_testkit.tx.send import execute, send_instruction, send_instructions
from anchor_testkit.tx.transaction import verify_transaction
from anchor_testkit.types.core import Pubkey, writable_meta
from anchor_testkit.wallet.signer import Keypair


def _ix(program_id: Pubkey, payer: Keypair, name: str = "noop"):
    return InstructionBuilder(program_id, name).signer("payer", payer).no_args().build()


def test_compute_units_parsed_from_logs(svm, program_id, payer) -> None:
    svm.script(logs=["Program X consumed 12345 of 200000 compute units"])
    result = send_instruction(svm, _ix(program_id, payer), [payer])
    assert result.compute_units() == 12345


def test_compute_units_zero_without_matching_line(svm, program_id, payer) -> None:
    svm.script(logs=["Program X invoke [1]", "Program X success"])
    result = send_instruction(svm, _ix(program_id, payer), [payer])
    assert result.compute_units() == 0


def test_zero_signers_touches_nothing(svm, program_id, payer) -> None:
    before = svm.snapshot()
    with pytest.raises(BuildError, match="no signers provided"):
        send_instructions(svm, [_ix(program_id, payer)], [])
    assert svm.sent == []
    assert svm.issued_blockhashes == []
    assert svm.snapshot() == before


def test_failure_carries_error_and_logs_verbatim(svm, program_id, payer) -> None:
    svm.script(
        logs=["Program log: AnchorError occurred. Error Code: Overflow."],
        error="custom program error: 0x1770",
    )
    with pytest.raises(ExecutionFailed) as ei:
        send_instruction(svm, _ix(program_id, payer, "bump"), [payer], instruction_name="bump")
    err = ei.value
    assert err.message == "custom program error: 0x1770"
    assert err.logs == ("Program log: AnchorError occurred. Error Code: Overflow.",)
    assert err.instruction_name == "bump"
    assert err.has_log("Error Code: Overflow")
    assert "0x1770" in str(err)


def test_failure_is_logged(svm, program_id, payer, caplog: pytest.LogCaptureFixture) -> None:
    svm.script(logs=["Program log: boom"], error="boom")
    with caplog.at_level(logging.DEBUG, logger="anchor_testkit"):
        with pytest.raises(ExecutionFailed):
            send_instruction(svm, _ix(program_id, payer), [payer], instruction_name="noop")
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings and warnings[0].getMessage() == "transaction failed"
    assert any("program log: Program log: boom" == r.getMessage() for r in caplog.records)


def test_failed_logs_suppressed_by_config(svm, program_id, payer, caplog: pytest.LogCaptureFixture) -> None:
    svm.script(logs=["Program log: boom"], error="boom")
    cfg = HarnessConfig(log_failed_tx_logs=False)
    with caplog.at_level(logging.DEBUG, logger="anchor_testkit"):
        with pytest.raises(ExecutionFailed):
            send_instruction(svm, _ix(program_id, payer), [payer], config=cfg)
    assert not any(r.getMessage().startswith("program log:") for r in caplog.records)


def test_fresh_blockhash_for_every_submission(svm, program_id, payer) -> None:
    send_instruction(svm, _ix(program_id, payer), [payer])
    send_instruction(svm, _ix(program_id, payer), [payer])
    assert len(svm.issued_blockhashes) == 2
    hashes = [tx.message.recent_blockhash for tx in svm.sent]
    assert hashes == svm.issued_blockhashes
    assert hashes[0] != hashes[1]


def test_many_instructions_share_one_transaction(svm, program_id, payer) -> None:
    ixs = [_ix(program_id, payer, "first"), _ix(program_id, payer, "second")]
    result = send_instructions(svm, ixs, [payer])
    (tx,) = svm.sent
    assert len(tx.message.instructions) == 2
    assert result.logs().count(f"Program {program_id} success") == 2


def test_first_signer_pays(svm, program_id, payer) -> None:
    other = Keypair.generate()
    ix = (
        InstructionBuilder(program_id, "cosign")
        .signer("other", other)
        .signer("payer", payer)
        .no_args()
        .build()
    )
    send_instruction(svm, ix, [other, payer])
    (tx,) = svm.sent
    assert tx.message.account_keys[0] == other.pubkey()
    assert verify_transaction(tx)


def test_signer_mismatch_is_build_error_before_sending(svm, program_id, payer) -> None:
    stranger = Keypair.generate()
    with pytest.raises(BuildError):
        send_instruction(svm, _ix(program_id, payer), [stranger])
    assert svm.sent == []


def test_execute_builds_and_sends(svm, program_id, payer) -> None:
    user = Keypair.generate()
    svm.airdrop(user.pubkey(), 1)
    result = execute(
        svm,
        program_id,
        "deposit",
        [writable_meta(user.pubkey(), True)],
        tuple_args(u64(10)),
        [user],
    )
    assert result.instruction_name == "deposit"
    (tx,) = svm.sent
    assert tx.message.instructions[0].data[8:] == (10).to_bytes(8, "little")


def test_solders_keypair_signs_alongside_harness_keypair(svm, program_id, payer) -> None:
    cosigner = SoldersKeypair()
    ix = (
        InstructionBuilder(program_id, "cosign")
        .signer("payer", payer)
        .signer_readonly("cosigner", cosigner)
        .no_args()
        .build()
    )
    result = send_instruction(svm, ix, [payer, cosigner])
    (tx,) = svm.sent
    assert verify_transaction(tx)
    assert list(tx.message.account_keys[:2]) == [payer.pubkey(), cosigner.pubkey()]
    assert result.signature == tx.signatures[0]
