"""
anchor_testkit.tx.result
========================

Wrapper around a successful transaction's metadata with log helpers.

Failures never produce a TransactionResult; they raise ExecutionFailed
(see anchor_testkit.tx.send).
"""

from __future__ import annotations

import sys
from typing import IO, List, Optional, Sequence

from solders.signature import Signature

from ..svm import TransactionMetadata

__all__ = [
    "TransactionResult",
    "extract_compute_units",
]

# Compute-unit counts are u64 in the runtime; larger digit runs are not counts.
U64_MAX = (1 << 64) - 1


def extract_compute_units(logs: Sequence[str]) -> Optional[int]:
    """
    Find the compute-unit count in runtime log lines of the shape

        Program <id> consumed 12345 of 200000 compute units

    The first line containing both "consumed" and "compute units" whose text
    between "consumed" and the next "of" is an unsigned integer that fits in
    a u64 wins.
    Returns None when no line matches.
    """
    for line in logs:
        if "consumed" not in line or "compute units" not in line:
            continue
        after = line.split("consumed", 1)[1]
        token = after.partition("of")[0].strip()
        if token.isascii() and token.isdigit() and int(token) <= U64_MAX:
            return int(token)
    return None


class TransactionResult:
    """
    Logs and metadata of a successful submission, optionally tagged with the
    instruction name it came from.
    """

    __slots__ = ("_meta", "_name")

    def __init__(self, meta: TransactionMetadata, instruction_name: Optional[str] = None) -> None:
        self._meta = meta
        self._name = instruction_name

    @property
    def inner(self) -> TransactionMetadata:
        return self._meta

    @property
    def instruction_name(self) -> Optional[str]:
        return self._name

    @property
    def signature(self) -> Signature:
        return self._meta.signature

    def logs(self) -> List[str]:
        return list(self._meta.logs)

    def has_log(self, pattern: str) -> bool:
        """Substring match (not regex) against every log line."""
        return any(pattern in line for line in self._meta.logs)

    def find_logs(self, pattern: str) -> List[str]:
        return [line for line in self._meta.logs if pattern in line]

    def compute_units(self) -> int:
        """Compute units parsed from the logs, or 0 if no line carries them."""
        cu = extract_compute_units(self._meta.logs)
        return 0 if cu is None else cu

    def assert_success(self) -> "TransactionResult":
        # A result only exists for successful submissions.
        return self

    def print_logs(self, stream: Optional[IO[str]] = None) -> None:
        out = stream if stream is not None else sys.stdout
        title = f"Transaction logs ({self._name})" if self._name else "Transaction logs"
        print(f"=== {title} ===", file=out)
        for i, line in enumerate(self._meta.logs):
            print(f"  [{i}] {line}", file=out)
        print(f"  compute units: {self.compute_units()}", file=out)

    def __repr__(self) -> str:
        return (
            f"TransactionResult(instruction={self._name!r}, "
            f"logs={len(self._meta.logs)}, compute_units={self.compute_units()})"
        )
