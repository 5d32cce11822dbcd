"""
anchor-testkit: Python
Convenience exports for testing Anchor programs against a simulated environment.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import HarnessConfig  # noqa: F401
from .errors import (  # noqa: F401
    TestkitError,
    EncodeError,
    DecodeError,
    TransactionError,
    BuildError,
    ExecutionFailed,
    AccountError,
    AccountNotFound,
    DiscriminatorMismatch,
    DeserializationFailed,
)

# Types
from .types.core import (  # noqa: F401
    Pubkey,
    AccountMeta,
    Instruction,
    writable_meta,
    readonly_meta,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    ASSOCIATED_TOKEN_PROGRAM_ID,
    RENT_SYSVAR_ID,
)

# Wallet
from .wallet.signer import Keypair, Signer  # noqa: F401

# Codec
from .abi.discriminator import (  # noqa: F401
    instruction_discriminator,
    calculate_anchor_discriminator,
    account_discriminator,
)
from .abi.encoding import (  # noqa: F401
    BorshStruct,
    RawArgs,
    TupleArgs,
    tuple_args,
    encode_args,
    u8, u16, u32, u64, u128,
    i8, i16, i32, i64, i128,
)

# Tx helpers
from .tx.build import InstructionBuilder, build_anchor_instruction  # noqa: F401
from .tx.transaction import new_signed_with_payer  # noqa: F401
from .tx.result import TransactionResult  # noqa: F401
from .tx.send import send_instruction, send_instructions  # noqa: F401

# Environment & context
from .svm import (  # noqa: F401
    Account,
    TransactionMetadata,
    FailedTransactionMetadata,
    SimulatedEnvironment,
)
from .account import (  # noqa: F401
    AnchorAccount,
    decode_anchor_account,
    decode_anchor_account_unchecked,
)
from .context import AnchorContext  # noqa: F401

__all__ = [
    "__version__",
    # Core
    "HarnessConfig",
    "TestkitError", "EncodeError", "DecodeError",
    "TransactionError", "BuildError", "ExecutionFailed",
    "AccountError", "AccountNotFound", "DiscriminatorMismatch", "DeserializationFailed",
    # Types
    "Pubkey", "AccountMeta", "Instruction", "writable_meta", "readonly_meta",
    "SYSTEM_PROGRAM_ID", "TOKEN_PROGRAM_ID", "ASSOCIATED_TOKEN_PROGRAM_ID", "RENT_SYSVAR_ID",
    # Wallet
    "Keypair", "Signer",
    # Codec
    "instruction_discriminator", "calculate_anchor_discriminator", "account_discriminator",
    "BorshStruct", "RawArgs", "TupleArgs", "tuple_args", "encode_args",
    "u8", "u16", "u32", "u64", "u128", "i8", "i16", "i32", "i64", "i128",
    # Tx
    "InstructionBuilder", "build_anchor_instruction", "new_signed_with_payer",
    "TransactionResult", "send_instruction", "send_instructions",
    # Environment / context
    "Account", "TransactionMetadata", "FailedTransactionMetadata", "SimulatedEnvironment",
    "AnchorAccount", "decode_anchor_account", "decode_anchor_account_unchecked",
    "AnchorContext",
]
