"""
Typed error classes for the harness.

These are raised by the argument codec, the instruction builder, the
submission helpers, and the account decoder so callers can catch specific
failure modes while still being able to catch the base `TestkitError`.

Nothing here is retried anywhere in the package: every failure is a
deterministic function of the inputs and the simulated environment's state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

__all__ = [
    "TestkitError",
    "EncodeError",
    "DecodeError",
    "TransactionError",
    "BuildError",
    "ExecutionFailed",
    "AccountError",
    "AccountNotFound",
    "DiscriminatorMismatch",
    "DeserializationFailed",
]


class TestkitError(Exception):
    """Base class for all harness errors."""

    __test__ = False  # not a pytest test class despite the name


# --- Codec --------------------------------------------------------------------


@dataclass(slots=True)
class EncodeError(TestkitError, ValueError):
    """
    Raised when an argument value cannot be serialized.

    Typical causes: out-of-range integers, wrong Python type for a field,
    wrong length for fixed-size bytes/arrays. Always a caller bug.
    """

    message: str
    field: Optional[str] = None
    type_name: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = []
        if self.field:
            where.append(f"field={self.field}")
        if self.type_name:
            where.append(f"type={self.type_name}")
        where_s = (" [" + ", ".join(where) + "]") if where else ""
        return f"EncodeError{where_s}: {self.message}"


@dataclass(slots=True)
class DecodeError(TestkitError, ValueError):
    """Raised when bytes are truncated or malformed for the requested layout."""

    message: str
    offset: Optional[int] = None
    type_name: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        bits = [self.message]
        if self.type_name:
            bits.append(f"type={self.type_name}")
        if self.offset is not None:
            bits.append(f"offset={self.offset}")
        return "DecodeError: " + " ".join(bits)


# --- Transactions -------------------------------------------------------------


@dataclass(slots=True)
class TransactionError(TestkitError):
    """Base for builder misuse and execution failures."""

    message: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Transaction error: {self.message}"


@dataclass(slots=True)
class BuildError(TransactionError):
    """
    Raised for builder misuse: no instruction data at build time, a consumed
    builder, zero signers at submit time, or signers that don't match the
    message's required signatures.
    """

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Transaction build error: {self.message}"


@dataclass(slots=True)
class ExecutionFailed(TransactionError):
    """
    Raised when the simulated environment rejects or reverts a transaction.

    Fields:
      - message: the environment's error description, verbatim
      - logs: program logs captured up to the failure (may be empty)
      - instruction_name: set when the failure came from a named instruction
    """

    logs: Tuple[str, ...] = ()
    instruction_name: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = f" [{self.instruction_name}]" if self.instruction_name else ""
        return f"Transaction execution failed{where}: {self.message}"

    def has_log(self, pattern: str) -> bool:
        """Substring search over the failure logs (asserting a specific revert)."""
        return any(pattern in line for line in self.logs)


# --- Accounts -----------------------------------------------------------------


class AccountError(TestkitError):
    """Base for account lookup and decoding failures."""


@dataclass(slots=True)
class AccountNotFound(AccountError):
    address: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Account not found: {self.address}"


@dataclass(slots=True)
class DiscriminatorMismatch(AccountError):
    """Leading 8 bytes of account data differ from the type's tag."""

    expected: bytes
    actual: bytes
    type_name: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        who = f" for {self.type_name}" if self.type_name else ""
        return (
            f"Discriminator mismatch{who}: expected {self.expected.hex()}, "
            f"got {self.actual.hex() or '<empty>'}"
        )


@dataclass(slots=True)
class DeserializationFailed(AccountError):
    message: str
    type_name: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        who = f" {self.type_name}" if self.type_name else ""
        return f"Failed to deserialize account{who}: {self.message}"
