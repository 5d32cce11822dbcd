"""
anchor_testkit.tx.transaction
=============================

Assemble signed legacy transactions from encoded instructions.

Message compilation and the wire format belong to `solders`
(`Message.new_with_blockhash`, `bytes(tx)`, `Transaction.from_bytes`). This
module only decides who signs:

- `compile_message(instructions, payer, blockhash)`: the key table puts the
  payer first, then writable signers, read-only signers, writable
  non-signers and read-only non-signers, each group ordered by key bytes.
- `sign_transaction(message, signers)`: one signature per required signer,
  in key order. Signers are matched by pubkey, so their order in the list
  does not matter. A missing signer, or one the message does not require,
  is a BuildError raised before anything is signed.
- `new_signed_with_payer(...)`: both steps.
- `verify_transaction(tx)`: check every signature against the message bytes.

Any object with `pubkey()` and `sign_message()` can sign: the harness
Keypair and `solders.keypair.Keypair` both work.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Set

from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from ..errors import BuildError
from ..types.core import Instruction, ensure_hash, to_pubkey
from ..wallet.signer import SIGNATURE_LENGTH, Keypair

__all__ = [
    "MAX_ACCOUNT_KEYS",
    "compile_message",
    "required_signers",
    "sign_transaction",
    "new_signed_with_payer",
    "verify_transaction",
]

# Account indices are single bytes on the wire.
MAX_ACCOUNT_KEYS = 256


def _key_count(instructions: Sequence[Instruction], payer: Pubkey) -> int:
    keys: Set[Pubkey] = {payer}
    for ix in instructions:
        keys.add(ix.program_id)
        keys.update(m.pubkey for m in ix.accounts)
    return len(keys)


def compile_message(
    instructions: Sequence[Instruction],
    payer: Any,
    recent_blockhash: Any,
) -> Message:
    payer_pk = to_pubkey(payer)
    n = _key_count(instructions, payer_pk)
    if n > MAX_ACCOUNT_KEYS:
        raise BuildError(f"too many account keys for one transaction: {n}")
    return Message.new_with_blockhash(list(instructions), payer_pk, ensure_hash(recent_blockhash))


def required_signers(message: Message) -> Sequence[Pubkey]:
    return list(message.account_keys)[: message.header.num_required_signatures]


def sign_transaction(message: Message, signers: Sequence[Any]) -> Transaction:
    by_key: Dict[Pubkey, Any] = {}
    for s in signers:
        by_key.setdefault(to_pubkey(s.pubkey()), s)

    required = required_signers(message)
    missing = [str(k) for k in required if k not in by_key]
    if missing:
        raise BuildError(f"missing signature for required signer(s): {', '.join(missing)}")
    extra = [str(k) for k in by_key if k not in required]
    if extra:
        raise BuildError(f"signer(s) not required by the transaction: {', '.join(extra)}")

    payload = bytes(message)
    signatures = []
    for k in required:
        raw = bytes(by_key[k].sign_message(payload))
        if len(raw) != SIGNATURE_LENGTH:
            raise BuildError(f"signer {k} returned a {len(raw)}-byte signature")
        signatures.append(Signature.from_bytes(raw))
    return Transaction.populate(message, signatures)


def new_signed_with_payer(
    instructions: Sequence[Instruction],
    payer: Optional[Any],
    signers: Sequence[Any],
    recent_blockhash: Any,
) -> Transaction:
    """Compile and sign. `payer` defaults to the first signer."""
    if not signers:
        raise BuildError("no signers provided")
    payer_pk = to_pubkey(payer if payer is not None else signers[0])
    return sign_transaction(compile_message(instructions, payer_pk, recent_blockhash), signers)


def verify_transaction(tx: Transaction) -> bool:
    """True iff every required signature verifies against the message bytes."""
    required = required_signers(tx.message)
    sigs = list(tx.signatures)
    if len(sigs) != len(required):
        return False
    payload = bytes(tx.message)
    return all(Keypair.verify(k, payload, s) for k, s in zip(required, sigs))
