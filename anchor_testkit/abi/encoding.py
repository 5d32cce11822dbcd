"""
Borsh encoding for instruction arguments and account state.

Design goals:
- Byte-for-byte what the target program deserializes.
- Explicit schemas: field order comes from a declared SCHEMA, never from
  reflection over attributes.
- No implicit padding or alignment.

Primitives
----------
- bool:               1 byte: 0x00 (false) or 0x01 (true)
- uN / iN:            little-endian, natural width (two's complement for iN)
- pubkey:             32 raw bytes
- string:             u32 LE byte length || UTF-8
- bytes (dynamic):    u32 LE length || raw bytes
- bytesN / [T; N]:    raw concatenation, no prefix
- vec<T>:             u32 LE count || items
- option<T>:          0x00 | 0x01 || value

Argument shapes
---------------
- a struct (`BorshStruct` subclass): fields in SCHEMA order
- a tuple of 0..4 elements (`tuple_args`): elements in position order;
  the empty tuple encodes to b""
- `RawArgs`: bytes passed through untouched
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (Any, ClassVar, Dict, Iterable, Optional, Protocol,
                    Sequence, Tuple, runtime_checkable)

from ..errors import EncodeError
from ..types.core import Pubkey
from .decoding import decode_fields
from .types import (BOOL, BYTES, PUBKEY, STRING, U8, U16, U32, U64, U128, I8,
                    I16, I32, I64, I128, ABITypeError, Array, BoolType,
                    BytesType, FixedBytes, IntType, Option, PubkeyType,
                    StringType, TupleType, Vec, parse_type, type_name)

__all__ = [
    "MAX_TUPLE_ARITY",
    "Encodable",
    "encode_u32_len",
    "encode_int",
    "encode_value",
    "encode_fields",
    "BorshStruct",
    "Typed",
    "typed",
    "u8",
    "u16",
    "u32",
    "u64",
    "u128",
    "i8",
    "i16",
    "i32",
    "i64",
    "i128",
    "TupleArgs",
    "tuple_args",
    "RawArgs",
    "encode_args",
]

MAX_TUPLE_ARITY = 4
_U32_MAX = (1 << 32) - 1


@runtime_checkable
class Encodable(Protocol):
    def encode(self) -> bytes: ...


# ──────────────────────────────────────────────────────────────────────────────
# Primitive encoders
# ──────────────────────────────────────────────────────────────────────────────


def encode_u32_len(n: int) -> bytes:
    if n < 0 or n > _U32_MAX:
        raise EncodeError(f"length {n} does not fit a u32 prefix", type_name="u32")
    return n.to_bytes(4, "little")


def encode_int(value: Any, typ: IntType) -> bytes:
    v = typ.validate(value)
    return v.to_bytes(typ.size, "little", signed=typ.signed)


def _encode_struct(value: Any, cls: type) -> bytes:
    if not isinstance(value, cls):
        raise EncodeError(
            f"expected {cls.__name__}, got {type(value).__name__}", type_name=cls.__name__
        )
    return value.encode()


# ──────────────────────────────────────────────────────────────────────────────
# High-level dispatch
# ──────────────────────────────────────────────────────────────────────────────


def encode_value(value: Any, typ: Any) -> bytes:
    """
    Encode a single value according to a field type (object, struct class,
    or textual spec such as "u64" / "vec<pubkey>").
    """
    typ = parse_type(typ)

    if isinstance(typ, IntType):
        return encode_int(value, typ)

    if isinstance(typ, BoolType):
        return b"\x01" if typ.validate(value) else b"\x00"

    if isinstance(typ, PubkeyType):
        return bytes(typ.validate(value))

    if isinstance(typ, StringType):
        raw = typ.validate(value).encode("utf-8")
        return encode_u32_len(len(raw)) + raw

    if isinstance(typ, BytesType):
        raw = typ.validate(value)
        return encode_u32_len(len(raw)) + raw

    if isinstance(typ, FixedBytes):
        return typ.validate(value)

    if isinstance(typ, Array):
        items = _as_sequence(value, typ)
        if len(items) != typ.length:
            raise EncodeError(
                f"expected {typ.length} items, got {len(items)}", type_name=typ.name
            )
        return b"".join(encode_value(v, typ.elem) for v in items)

    if isinstance(typ, Vec):
        items = _as_sequence(value, typ)
        return encode_u32_len(len(items)) + b"".join(encode_value(v, typ.elem) for v in items)

    if isinstance(typ, Option):
        if value is None:
            return b"\x00"
        return b"\x01" + encode_value(value, typ.elem)

    if isinstance(typ, TupleType):
        items = _as_sequence(value, typ)
        if len(items) != len(typ.elems):
            raise EncodeError(
                f"expected {len(typ.elems)} items, got {len(items)}", type_name=typ.name
            )
        return b"".join(encode_value(v, t) for v, t in zip(items, typ.elems))

    if isinstance(typ, type):
        return _encode_struct(value, typ)

    raise ABITypeError(f"unsupported field type: {typ!r}")


def _as_sequence(value: Any, typ: Any) -> Sequence[Any]:
    # Fixed u8 arrays and vec<u8> also accept a bytes object.
    if isinstance(value, (bytes, bytearray)) and getattr(typ, "elem", None) == U8:
        return list(value)
    if isinstance(value, (list, tuple)):
        return value
    raise EncodeError(
        f"expected list or tuple, got {type(value).__name__}", type_name=type_name(typ)
    )


def encode_fields(values: Dict[str, Any], schema: Sequence[Tuple[str, Any]]) -> bytes:
    """
    Encode `values` in the order given by `schema`; every field is required.
    Errors carry the failing field name.
    """
    out = bytearray()
    for name, typ in schema:
        if name not in values:
            raise EncodeError("missing field", field=name, type_name=type_name(typ))
        try:
            out += encode_value(values[name], typ)
        except EncodeError as e:
            if e.field is None:
                e.field = name
            raise
    return bytes(out)


# ──────────────────────────────────────────────────────────────────────────────
# Structs
# ──────────────────────────────────────────────────────────────────────────────


class BorshStruct:
    """
    Base for struct-shaped arguments and account layouts.

    Subclasses declare their layout explicitly and are usually dataclasses:

        @dataclass
        class Offer(BorshStruct):
            SCHEMA = (("maker", PUBKEY), ("amount", U64), ("bump", U8))
            maker: Pubkey
            amount: int
            bump: int

    The class itself is a valid field type, so structs nest.
    """

    SCHEMA: ClassVar[Tuple[Tuple[str, Any], ...]] = ()

    def encode(self) -> bytes:
        values = {name: getattr(self, name) for name, _ in self.SCHEMA}
        return encode_fields(values, self.SCHEMA)

    @classmethod
    def decode_from(cls, buf: bytes, offset: int = 0) -> Tuple[Any, int]:
        """Decode at `offset`; returns (instance, new_offset)."""
        values, offset = decode_fields(buf, cls.SCHEMA, offset, type_name=cls.__name__)
        return cls(**values), offset

    @classmethod
    def decode(cls, buf: bytes) -> Any:
        """Decode from the start of `buf`; trailing bytes are ignored."""
        value, _ = cls.decode_from(bytes(buf), 0)
        return value


# ──────────────────────────────────────────────────────────────────────────────
# Tuple arguments
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Typed:
    """A value paired with its field type, e.g. `u64(42)`."""

    type: Any
    value: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", parse_type(self.type))

    def encode(self) -> bytes:
        return encode_value(self.value, self.type)


def typed(typ: Any, value: Any) -> Typed:
    return Typed(typ, value)


def u8(value: int) -> Typed:
    return Typed(U8, value)


def u16(value: int) -> Typed:
    return Typed(U16, value)


def u32(value: int) -> Typed:
    return Typed(U32, value)


def u64(value: int) -> Typed:
    return Typed(U64, value)


def u128(value: int) -> Typed:
    return Typed(U128, value)


def i8(value: int) -> Typed:
    return Typed(I8, value)


def i16(value: int) -> Typed:
    return Typed(I16, value)


def i32(value: int) -> Typed:
    return Typed(I32, value)


def i64(value: int) -> Typed:
    return Typed(I64, value)


def i128(value: int) -> Typed:
    return Typed(I128, value)


def _infer(item: Any) -> Any:
    """Map an untyped tuple element to something with `encode()`."""
    if isinstance(item, bool):
        return Typed(BOOL, item)
    if isinstance(item, int):
        raise EncodeError(
            f"integer {item} has no declared width; wrap it (u64({item})) or pass types="
        )
    if isinstance(item, str):
        return Typed(STRING, item)
    if isinstance(item, Pubkey):
        return Typed(PUBKEY, item)
    if isinstance(item, (bytes, bytearray)):
        return Typed(BYTES, bytes(item))
    # str also has .encode(), so the protocol check comes after the scalars.
    if isinstance(item, Encodable):
        return item
    raise EncodeError(f"cannot encode tuple element of type {type(item).__name__}")


@dataclass(frozen=True)
class TupleArgs:
    """Positional arguments (0..4 elements) encoded by concatenation."""

    items: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        items = tuple(self.items)
        if len(items) > MAX_TUPLE_ARITY:
            raise EncodeError(
                f"tuple arguments support at most {MAX_TUPLE_ARITY} elements, got {len(items)}"
            )
        object.__setattr__(self, "items", tuple(_infer(i) for i in items))

    def __len__(self) -> int:
        return len(self.items)

    def encode(self) -> bytes:
        out = bytearray()
        for idx, item in enumerate(self.items):
            try:
                out += item.encode()
            except EncodeError as e:
                if e.field is None:
                    e.field = str(idx)
                raise
        return bytes(out)


def tuple_args(*items: Any, types: Optional[Iterable[Any]] = None) -> TupleArgs:
    """
    Build tuple arguments. With `types`, each element is paired with the
    matching field type:

        tuple_args(42, 500_000_000, types=("u64", "u64"))
        tuple_args(u64(42), u64(500_000_000))
    """
    if types is not None:
        tys = tuple(types)
        if len(tys) != len(items):
            raise EncodeError(f"{len(items)} values but {len(tys)} types")
        items = tuple(Typed(t, v) for t, v in zip(tys, items))
    return TupleArgs(tuple(items))


@dataclass(frozen=True)
class RawArgs:
    """Pre-encoded argument bytes, passed through untouched."""

    data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))

    def encode(self) -> bytes:
        return self.data


def encode_args(value: Any) -> bytes:
    """
    Encode an argument value: anything with `encode()`, a plain tuple (treated
    as `tuple_args(*value)`), or None / () for no arguments.
    """
    if value is None:
        return b""
    if isinstance(value, tuple):
        return TupleArgs(value).encode()
    if isinstance(value, Encodable) and not isinstance(value, str):
        out = value.encode()
        if not isinstance(out, (bytes, bytearray)):
            raise EncodeError(f"{type(value).__name__}.encode() returned {type(out).__name__}")
        return bytes(out)
    raise EncodeError(
        f"cannot encode arguments of type {type(value).__name__}; "
        "use a BorshStruct, tuple_args(...) or RawArgs"
    )
