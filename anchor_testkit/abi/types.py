"""
Field type definitions and value validation for the argument codec.

The surface mirrors the Borsh layout programs expect:
  - u8 … u128 / i8 … i128 (little-endian, natural width)
  - bool (one byte)
  - pubkey (32 raw bytes)
  - string / bytes (u32 length prefix)
  - bytesN / [T; N] (fixed size, no prefix)
  - vec<T> (u32 count prefix) and option<T> (one tag byte)

Utilities here *only* describe layouts and coerce/validate Python values;
the byte-level work lives in abi.encoding / abi.decoding.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from ..errors import EncodeError
from ..types.core import Pubkey, to_pubkey

__all__ = [
    "ABITypeError",
    "coerce_bool",
    "coerce_int",
    "coerce_bytes",
    "coerce_string",
    "coerce_pubkey",
    "IntType",
    "BoolType",
    "PubkeyType",
    "StringType",
    "BytesType",
    "FixedBytes",
    "Array",
    "Vec",
    "Option",
    "TupleType",
    "U8",
    "U16",
    "U32",
    "U64",
    "U128",
    "I8",
    "I16",
    "I32",
    "I64",
    "I128",
    "BOOL",
    "PUBKEY",
    "STRING",
    "BYTES",
    "type_name",
    "is_field_type",
    "parse_type",
]

# ──────────────────────────────────────────────────────────────────────────────
# Errors
# ──────────────────────────────────────────────────────────────────────────────


class ABITypeError(TypeError):
    """Raised when a type spec is malformed or unsupported."""


# ──────────────────────────────────────────────────────────────────────────────
# Scalar coercion helpers
# ──────────────────────────────────────────────────────────────────────────────


def coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise EncodeError("bool must be True/False", type_name="bool")


def coerce_int(value: Any, *, bits: int, signed: bool) -> int:
    name = f"{'i' if signed else 'u'}{bits}"
    # bool is an int subclass; reject it so a flag never silently becomes 0/1.
    if not isinstance(value, int) or isinstance(value, bool):
        raise EncodeError(f"expected int, got {type(value).__name__}", type_name=name)
    min_v = -(1 << (bits - 1)) if signed else 0
    max_v = (1 << (bits - 1)) - 1 if signed else (1 << bits) - 1
    if value < min_v or value > max_v:
        raise EncodeError(f"{value} out of range [{min_v}, {max_v}]", type_name=name)
    return int(value)


def coerce_bytes(value: Any, *, fixed_len: Optional[int] = None) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        b = bytes(value)
    else:
        raise EncodeError(
            f"expected bytes, got {type(value).__name__}",
            type_name="bytes" if fixed_len is None else f"bytes{fixed_len}",
        )
    if fixed_len is not None and len(b) != fixed_len:
        raise EncodeError(
            f"length must be exactly {fixed_len}, got {len(b)}",
            type_name=f"bytes{fixed_len}",
        )
    return b


def coerce_string(value: Any) -> str:
    if not isinstance(value, str):
        raise EncodeError(f"expected str, got {type(value).__name__}", type_name="string")
    return value


def coerce_pubkey(value: Any) -> Pubkey:
    try:
        return to_pubkey(value)
    except (TypeError, ValueError) as e:
        raise EncodeError(str(e), type_name="pubkey") from e


# ──────────────────────────────────────────────────────────────────────────────
# Type specs
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class IntType:
    bits: int
    signed: bool = False

    def __post_init__(self) -> None:
        if self.bits not in (8, 16, 32, 64, 128):
            raise ABITypeError("bit width must be one of 8, 16, 32, 64, 128")

    @property
    def size(self) -> int:
        return self.bits // 8

    @property
    def name(self) -> str:
        return f"{'i' if self.signed else 'u'}{self.bits}"

    def validate(self, value: Any) -> int:
        return coerce_int(value, bits=self.bits, signed=self.signed)


@dataclass(frozen=True)
class BoolType:
    @property
    def name(self) -> str:
        return "bool"

    def validate(self, value: Any) -> bool:
        return coerce_bool(value)


@dataclass(frozen=True)
class PubkeyType:
    @property
    def name(self) -> str:
        return "pubkey"

    def validate(self, value: Any) -> Pubkey:
        return coerce_pubkey(value)


@dataclass(frozen=True)
class StringType:
    @property
    def name(self) -> str:
        return "string"

    def validate(self, value: Any) -> str:
        return coerce_string(value)


@dataclass(frozen=True)
class BytesType:
    """Dynamic `bytes` (u32 length prefix)."""

    @property
    def name(self) -> str:
        return "bytes"

    def validate(self, value: Any) -> bytes:
        return coerce_bytes(value)


@dataclass(frozen=True)
class FixedBytes:
    """`bytesN`: exactly `length` raw bytes, no prefix."""

    length: int

    def __post_init__(self) -> None:
        if self.length < 0:
            raise ABITypeError("fixed byte length must be >= 0")

    @property
    def name(self) -> str:
        return f"bytes{self.length}"

    def validate(self, value: Any) -> bytes:
        return coerce_bytes(value, fixed_len=self.length)


@dataclass(frozen=True)
class Array:
    """`[T; N]`: N elements concatenated, no prefix."""

    elem: Any
    length: int

    def __post_init__(self) -> None:
        if self.length < 0:
            raise ABITypeError("array length must be >= 0")
        object.__setattr__(self, "elem", parse_type(self.elem))

    @property
    def name(self) -> str:
        return f"[{type_name(self.elem)};{self.length}]"


@dataclass(frozen=True)
class Vec:
    """`Vec<T>`: u32 count prefix then the elements."""

    elem: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "elem", parse_type(self.elem))

    @property
    def name(self) -> str:
        return f"vec<{type_name(self.elem)}>"


@dataclass(frozen=True)
class Option:
    """`Option<T>`: tag byte 0 (None) or 1 followed by the value."""

    elem: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "elem", parse_type(self.elem))

    @property
    def name(self) -> str:
        return f"option<{type_name(self.elem)}>"


@dataclass(frozen=True)
class TupleType:
    """Positional elements concatenated in order (used to decode tuple arguments)."""

    elems: Tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "elems", tuple(parse_type(e) for e in self.elems))

    @property
    def name(self) -> str:
        return "(" + ",".join(type_name(e) for e in self.elems) + ")"


U8 = IntType(8)
U16 = IntType(16)
U32 = IntType(32)
U64 = IntType(64)
U128 = IntType(128)
I8 = IntType(8, signed=True)
I16 = IntType(16, signed=True)
I32 = IntType(32, signed=True)
I64 = IntType(64, signed=True)
I128 = IntType(128, signed=True)
BOOL = BoolType()
PUBKEY = PubkeyType()
STRING = StringType()
BYTES = BytesType()

_LEAF_TYPES = (IntType, BoolType, PubkeyType, StringType, BytesType, FixedBytes)
_COMPOSITE_TYPES = (Array, Vec, Option, TupleType)


def _is_struct_class(typ: Any) -> bool:
    # Struct classes (BorshStruct subclasses) carry an explicit SCHEMA.
    return isinstance(typ, type) and hasattr(typ, "SCHEMA") and hasattr(typ, "decode_from")


def is_field_type(typ: Any) -> bool:
    return isinstance(typ, _LEAF_TYPES + _COMPOSITE_TYPES) or _is_struct_class(typ)


def _check_field_type(typ: Any) -> None:
    if isinstance(typ, str):
        return
    if not is_field_type(typ):
        raise ABITypeError(f"unsupported field type: {typ!r}")


def type_name(typ: Any) -> str:
    if isinstance(typ, str):
        return typ
    if _is_struct_class(typ):
        return typ.__name__
    return getattr(typ, "name", repr(typ))


# ──────────────────────────────────────────────────────────────────────────────
# Parser for textual type specs (e.g., "u64", "vec<u8>", "[u8;32]")
# ──────────────────────────────────────────────────────────────────────────────

_SCALARS = {
    "u8": U8,
    "u16": U16,
    "u32": U32,
    "u64": U64,
    "u128": U128,
    "i8": I8,
    "i16": I16,
    "i32": I32,
    "i64": I64,
    "i128": I128,
    "bool": BOOL,
    "pubkey": PUBKEY,
    "publickey": PUBKEY,
    "string": STRING,
    "bytes": BYTES,
}

_ARRAY_RE = re.compile(r"^\[(?P<elem>.+);\s*(?P<n>\d+)\]$")


def parse_type(spec: Any) -> Any:
    """
    Parse a textual type spec into a type object. Type objects (and struct
    classes) pass through unchanged.

    Supported forms:
      - "u8" … "u128", "i8" … "i128", "bool", "pubkey", "string", "bytes"
      - "bytesN" (fixed, no prefix)
      - "[T;N]" fixed arrays, "vec<T>", "option<T>" (nestable)
    """
    if not isinstance(spec, str):
        _check_field_type(spec)
        return spec
    s = spec.strip().replace(" ", "").lower()
    if not s:
        raise ABITypeError("type spec must be a non-empty string")

    if s in _SCALARS:
        return _SCALARS[s]

    if s.startswith("vec<") and s.endswith(">"):
        return Vec(parse_type(s[4:-1]))

    if s.startswith("option<") and s.endswith(">"):
        return Option(parse_type(s[7:-1]))

    m = _ARRAY_RE.match(s)
    if m:
        return Array(parse_type(m.group("elem")), int(m.group("n")))

    if s.startswith("bytes"):
        try:
            n = int(s[5:])
        except ValueError as e:
            raise ABITypeError(f"invalid bytesN length in {spec!r}") from e
        return FixedBytes(n)

    raise ABITypeError(f"unsupported type spec: {spec!r}")

