"""
anchor_testkit.abi
==================

Argument and account-state codec.

This package provides:
  • Field type definitions (u8 … i128, bool, pubkey, string, bytes, arrays,
    vec, option) and a textual type parser.
  • Borsh encoder/decoder for single values, explicit-schema structs and
    0–4 element tuple arguments.
  • Instruction selectors and account tags.

Everything here is pure-Python and deterministic.
"""

from __future__ import annotations

from .decoding import *  # noqa: F401,F403
from .discriminator import *  # noqa: F401,F403
from .encoding import *  # noqa: F401,F403
from .types import *  # noqa: F401,F403
from .decoding import __all__ as _all_decoding
from .discriminator import __all__ as _all_discriminator
from .encoding import __all__ as _all_encoding
from .types import __all__ as _all_types

__all__ = tuple(
    dict.fromkeys(  # preserve order, dedupe
        (*_all_types, *_all_encoding, *_all_decoding, *_all_discriminator)
    )
)
