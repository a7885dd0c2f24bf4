"""Borsh-compatible field codec driven by explicit, ordered schema tables.

A schema is a tuple of ``(name, type)`` pairs. The tuple order is the wire
order; nothing is inferred from object attributes. Supported type tags:

* ``"u8"``      1 byte
* ``"u64"``     8 bytes little-endian, unsigned
* ``"i64"``     8 bytes little-endian, two's complement
* ``"Pubkey"``  32 raw bytes
* ``"string"``  u32 little-endian length prefix + UTF-8 bytes
* ``ByteArray(n)``  exactly ``n`` raw bytes
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from borsh_construct import I64, String, U32, U64, U8
from solders.pubkey import Pubkey

from launchpad.errors import SchemaError, TruncationError


@dataclass(frozen=True)
class ByteArray:
    length: int

    def __post_init__(self):
        if isinstance(self.length, bool) or not isinstance(self.length, int) or self.length < 0:
            raise SchemaError(f"byte array length must be a non-negative int, got {self.length!r}")

    def __str__(self) -> str:
        return f"[u8; {self.length}]"


FieldType = Union[str, ByteArray]
FieldSchema = Tuple[Tuple[str, FieldType], ...]

PUBKEY_LEN = 32
SIGNATURE_LEN = 64
SIGNATURE = ByteArray(SIGNATURE_LEN)

_INT_LAYOUTS = {
    "u8": (U8, 0, 2**8 - 1),
    "u64": (U64, 0, 2**64 - 1),
    "i64": (I64, -(2**63), 2**63 - 1),
}
_STRING_PREFIX = U32.sizeof()


def field_size(ftype: FieldType) -> int:
    """Fixed byte size of a field type; strings report their prefix only."""
    if isinstance(ftype, ByteArray):
        return ftype.length
    if ftype in _INT_LAYOUTS:
        return _INT_LAYOUTS[ftype][0].sizeof()
    if ftype == "Pubkey":
        return PUBKEY_LEN
    if ftype == "string":
        return _STRING_PREFIX
    raise SchemaError(f"unsupported field type: {ftype!r}")


def schema_size(schema: FieldSchema, values: Optional[Mapping[str, Any]] = None) -> int:
    """Encoded length of ``schema``. Strings need ``values`` to be sized."""
    total = 0
    for name, ftype in schema:
        total += field_size(ftype)
        if ftype == "string":
            if values is None:
                continue
            total += len(str(values[name]).encode("utf-8"))
    return total


def _as_bytes(name: str, value: Any) -> bytes:
    if isinstance(value, (int, str)):
        raise SchemaError(f"{name}: expected bytes-like value, got {type(value).__name__}")
    try:
        return bytes(value)
    except TypeError as exc:
        raise SchemaError(f"{name}: cannot convert {type(value).__name__} to bytes") from exc


def _encode_field(name: str, ftype: FieldType, value: Any) -> bytes:
    if isinstance(ftype, ByteArray):
        raw = _as_bytes(name, value)
        if len(raw) != ftype.length:
            raise SchemaError(f"{name}: expected {ftype.length} bytes, got {len(raw)}")
        return bytes(U8[ftype.length].build(list(raw)))
    if ftype in _INT_LAYOUTS:
        layout, lo, hi = _INT_LAYOUTS[ftype]
        if isinstance(value, bool) or not isinstance(value, int):
            raise SchemaError(f"{name}: {ftype} expects an int, got {type(value).__name__}")
        if not lo <= value <= hi:
            raise SchemaError(f"{name}: {value} out of range for {ftype}")
        return layout.build(value)
    if ftype == "Pubkey":
        raw = _as_bytes(name, value)
        if len(raw) != PUBKEY_LEN:
            raise SchemaError(f"{name}: Pubkey must be {PUBKEY_LEN} bytes, got {len(raw)}")
        return raw
    if ftype == "string":
        if not isinstance(value, str):
            raise SchemaError(f"{name}: string expects str, got {type(value).__name__}")
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise SchemaError(f"{name}: not encodable as UTF-8") from exc
        return String.build(value)
    raise SchemaError(f"unsupported field type, {name}: {ftype!r}")


def encode(schema: FieldSchema, values: Mapping[str, Any]) -> bytes:
    out = bytearray()
    for name, ftype in schema:
        if name not in values:
            raise SchemaError(f"missing field: {name}")
        out += _encode_field(name, ftype, values[name])
    return bytes(out)


def _take(data: bytes, start: int, size: int, name: str) -> bytes:
    end = start + size
    if end > len(data):
        raise TruncationError(
            f"exceed max bytes length: field {name} needs bytes {start}..{end}, buffer has {len(data)}"
        )
    return data[start:end]


def decode_with_size(schema: FieldSchema, data: bytes) -> Tuple[Dict[str, Any], int]:
    """Decode ``data`` and also return how many bytes the schema consumed."""
    data = bytes(data)
    values: Dict[str, Any] = {}
    offset = 0
    for name, ftype in schema:
        size = field_size(ftype)
        raw = _take(data, offset, size, name)
        offset += size
        if isinstance(ftype, ByteArray):
            values[name] = raw
        elif ftype in _INT_LAYOUTS:
            values[name] = _INT_LAYOUTS[ftype][0].parse(raw)
        elif ftype == "Pubkey":
            values[name] = Pubkey.from_bytes(raw)
        else:
            length = U32.parse(raw)
            body = _take(data, offset, length, name)
            offset += length
            try:
                values[name] = body.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise SchemaError(f"{name}: invalid UTF-8 string") from exc
    return values, offset


def decode(schema: FieldSchema, data: bytes) -> Dict[str, Any]:
    return decode_with_size(schema, data)[0]
