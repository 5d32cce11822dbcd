"""
Inverse of the Borsh encoder (see encoding.py).

Conventions mirrored from the encoder:
- bool:               1 byte (0x00/0x01)
- uN / iN:            little-endian, natural width
- pubkey:             32 raw bytes
- string / bytes:     u32 LE length || payload
- bytesN / [T; N]:    raw, no prefix
- vec<T>:             u32 LE count || items
- vec<u8> / [u8; N]:  returned as `bytes`, the form the encoder also accepts
- option<T>:          tag byte (0x00 None, 0x01 Some) || value

Top-level:
- decode_value(buf, typ, offset=0, strict=True) -> (value, new_offset)
- decode_fields(buf, schema, offset=0) -> (dict, new_offset)
- decode_args(buf, types, offset=0) -> (tuple, new_offset)
- decode(buf, typ, allow_trailing=False) -> value

`strict=True` rejects bool bytes other than 0/1 and option tags other than 0/1.
Truncated input always raises DecodeError.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..errors import DecodeError
from ..types.core import PUBKEY_LENGTH, Pubkey
from .types import (U8, ABITypeError, Array, BoolType, BytesType, FixedBytes,
                    IntType, Option, PubkeyType, StringType, TupleType, Vec,
                    parse_type, type_name)

__all__ = [
    "decode_u32_len",
    "decode_int",
    "decode_bool",
    "decode_value",
    "decode_fields",
    "decode_args",
    "decode",
]


# ──────────────────────────────────────────────────────────────────────────────
# Primitive decoders
# ──────────────────────────────────────────────────────────────────────────────


def _read_exact(buf: bytes, offset: int, n: int, type_name: str) -> Tuple[bytes, int]:
    j = offset + n
    if j > len(buf):
        raise DecodeError(
            f"truncated payload: need {n} bytes, have {max(len(buf) - offset, 0)}",
            offset=offset,
            type_name=type_name,
        )
    return buf[offset:j], j


def decode_u32_len(buf: bytes, offset: int = 0) -> Tuple[int, int]:
    raw, j = _read_exact(buf, offset, 4, "u32")
    return int.from_bytes(raw, "little"), j


def decode_int(buf: bytes, typ: IntType, offset: int = 0) -> Tuple[int, int]:
    raw, j = _read_exact(buf, offset, typ.size, typ.name)
    return int.from_bytes(raw, "little", signed=typ.signed), j


def decode_bool(buf: bytes, offset: int = 0, *, strict: bool = True) -> Tuple[bool, int]:
    b, j = _read_exact(buf, offset, 1, "bool")
    if b[0] == 0x00:
        return False, j
    if b[0] == 0x01:
        return True, j
    if strict:
        raise DecodeError(f"invalid bool byte 0x{b[0]:02x}", offset=offset, type_name="bool")
    # non-strict: treat any non-zero as True
    return True, j


# ──────────────────────────────────────────────────────────────────────────────
# High-level dispatch
# ──────────────────────────────────────────────────────────────────────────────


def decode_value(buf: bytes, typ: Any, offset: int = 0, *, strict: bool = True) -> Tuple[Any, int]:
    """
    Decode a single value of the given field type from buf[offset:].
    Returns (value, new_offset).
    """
    typ = parse_type(typ)

    if isinstance(typ, IntType):
        return decode_int(buf, typ, offset)

    if isinstance(typ, BoolType):
        return decode_bool(buf, offset, strict=strict)

    if isinstance(typ, PubkeyType):
        raw, j = _read_exact(buf, offset, PUBKEY_LENGTH, "pubkey")
        return Pubkey.from_bytes(raw), j

    if isinstance(typ, StringType):
        n, i = decode_u32_len(buf, offset)
        raw, j = _read_exact(buf, i, n, "string")
        try:
            return raw.decode("utf-8"), j
        except UnicodeDecodeError as e:
            raise DecodeError("string is not valid UTF-8", offset=i, type_name="string") from e

    if isinstance(typ, BytesType):
        n, i = decode_u32_len(buf, offset)
        return _read_exact(buf, i, n, "bytes")

    if isinstance(typ, FixedBytes):
        return _read_exact(buf, offset, typ.length, typ.name)

    if isinstance(typ, Array):
        if typ.elem == U8:
            return _read_exact(buf, offset, typ.length, typ.name)
        return _decode_many(buf, typ.elem, typ.length, offset, strict)

    if isinstance(typ, Vec):
        n, i = decode_u32_len(buf, offset)
        # A count whose minimum footprint exceeds the buffer is corrupt.
        if n * _min_size(typ.elem) > len(buf) - i:
            raise DecodeError(f"vec count {n} exceeds remaining bytes", offset=offset, type_name=typ.name)
        if typ.elem == U8:
            return _read_exact(buf, i, n, typ.name)
        return _decode_many(buf, typ.elem, n, i, strict)

    if isinstance(typ, Option):
        tag, i = _read_exact(buf, offset, 1, typ.name)
        if tag[0] == 0x00:
            return None, i
        if tag[0] != 0x01 and strict:
            raise DecodeError(f"invalid option tag 0x{tag[0]:02x}", offset=offset, type_name=typ.name)
        return decode_value(buf, typ.elem, i, strict=strict)

    if isinstance(typ, TupleType):
        return decode_args(buf, typ.elems, offset, strict=strict)

    if isinstance(typ, type) and hasattr(typ, "decode_from"):
        return typ.decode_from(buf, offset)

    raise ABITypeError(f"unsupported field type: {typ!r}")


def _decode_many(buf: bytes, elem: Any, n: int, offset: int, strict: bool) -> Tuple[List[Any], int]:
    out: List[Any] = []
    i = offset
    for _ in range(n):
        v, i = decode_value(buf, elem, i, strict=strict)
        out.append(v)
    return out, i


def _min_size(typ: Any) -> int:
    """Fewest bytes any encoding of `typ` can occupy."""
    if isinstance(typ, IntType):
        return typ.size
    if isinstance(typ, FixedBytes):
        return typ.length
    if isinstance(typ, Array):
        return typ.length * _min_size(typ.elem)
    if isinstance(typ, PubkeyType):
        return PUBKEY_LENGTH
    if isinstance(typ, (StringType, BytesType, Vec)):
        return 4
    if isinstance(typ, (BoolType, Option)):
        return 1
    if isinstance(typ, TupleType):
        return sum(_min_size(e) for e in typ.elems)
    schema = getattr(typ, "SCHEMA", None)
    if isinstance(typ, type) and schema is not None:
        return sum(_min_size(parse_type(t)) for _, t in schema)
    return 0


def decode_fields(
    buf: bytes,
    schema: Sequence[Tuple[str, Any]],
    offset: int = 0,
    *,
    type_name: Optional[str] = None,
    strict: bool = True,
) -> Tuple[Dict[str, Any], int]:
    """Decode struct fields in schema order. Returns (field_dict, new_offset)."""
    values: Dict[str, Any] = {}
    i = offset
    for name, typ in schema:
        try:
            values[name], i = decode_value(buf, typ, i, strict=strict)
        except DecodeError as e:
            if e.type_name is None and type_name:
                e.type_name = f"{type_name}.{name}"
            raise
    return values, i


def decode_args(
    buf: bytes, types: Sequence[Any], offset: int = 0, *, strict: bool = True
) -> Tuple[Tuple[Any, ...], int]:
    """
    Decode positional arguments (concatenated, no count prefix).
    Returns (tuple_of_values, new_offset).
    """
    out: List[Any] = []
    i = offset
    for t in types:
        v, i = decode_value(buf, t, i, strict=strict)
        out.append(v)
    return tuple(out), i


def decode(buf: bytes, typ: Any, *, allow_trailing: bool = False) -> Any:
    """Decode one value from the start of `buf`, optionally requiring it to consume everything."""
    buf = bytes(buf)
    value, end = decode_value(buf, typ, 0)
    if not allow_trailing and end != len(buf):
        raise DecodeError(
            f"{len(buf) - end} trailing bytes", offset=end, type_name=type_name(parse_type(typ))
        )
    return value
