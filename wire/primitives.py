# wire/primitives.py
from __future__ import annotations
import ipaddress
import math
import struct
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from tuples.errors import CodecNotFoundError, TypeMismatchError
from tuples.types import (
    ASCII, BIGINT, BLOB, BOOLEAN, COUNTER, DECIMAL, DOUBLE, FLOAT,
    INET, INT, TEXT, TIMESTAMP, UUID, VARCHAR, VARINT, TIMEUUID,
    DataType,
)

# ---------------- 基础类型的线上格式（native protocol，全部大端） ----------------
#   int                    : int32              (>i)
#   bigint / counter       : int64              (>q)
#   timestamp              : int64 毫秒 since epoch (>q)
#   float / double         : IEEE754 单/双精度   (>f / >d)
#   boolean                : 1 字节，0 为 false
#   varint                 : 最短的二进制补码
#   decimal                : scale(>i) | varint(unscaled)
#   ascii / text / varchar : 编码后的原始字节
#   blob                   : 原始字节
#   uuid / timeuuid        : 16 字节
#   inet                   : 4 字节(IPv4) 或 16 字节(IPv6)
_INT_FMT = ">i"
_BIGINT_FMT = ">q"
_FLOAT_FMT = ">f"
_DOUBLE_FMT = ">d"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class PrimitiveCodec:
    """
    单个基础类型的编解码器：
      - encode(value) -> bytes：值不兼容时抛 TypeMismatchError
      - decode(bytes) -> value：负载非法时抛 ValueError
      - literal(value) -> str：CQL 字面量形式（用于格式化）
    """
    name = "?"

    def encode(self, value: Any) -> bytes:
        raise NotImplementedError

    def decode(self, data: bytes) -> Any:
        raise NotImplementedError

    def literal(self, value: Any) -> str:
        return str(value)

    def _reject(self, value: Any, why: str = "") -> None:
        msg = f"cannot encode {type(value).__name__} {value!r} as {self.name}"
        raise TypeMismatchError(msg + (f": {why}" if why else ""))

    def _check_size(self, data: bytes, size: int) -> None:
        if len(data) != size:
            raise ValueError(f"{self.name} payload must be {size} bytes, got {len(data)}")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _varint_pack(n: int) -> bytes:
    size = (n + (n < 0)).bit_length() // 8 + 1
    return n.to_bytes(size, "big", signed=True)


def _varint_unpack(data: bytes) -> int:
    if not data:
        raise ValueError("varint payload is empty")
    return int.from_bytes(data, "big", signed=True)


class _FixedIntCodec(PrimitiveCodec):
    def __init__(self, name: str, fmt: str):
        self.name = name
        self._fmt = fmt
        self._size = struct.calcsize(fmt)

    def encode(self, value):
        if not _is_int(value):
            self._reject(value)
        try:
            return struct.pack(self._fmt, value)
        except struct.error:
            self._reject(value, "out of range")

    def decode(self, data):
        self._check_size(data, self._size)
        return struct.unpack(self._fmt, data)[0]


class _VarintCodec(PrimitiveCodec):
    name = "varint"

    def encode(self, value):
        if not _is_int(value):
            self._reject(value)
        return _varint_pack(value)

    def decode(self, data):
        return _varint_unpack(bytes(data))


def _numeric_literal(shortest: str, value: float) -> str:
    """
    按 Java Float/Double.toString 的规则排版最短数字串：
      - 1e-3 <= |x| < 1e7（或 0）：定点形式，10.0 / 0.001
      - 其余：科学计数法，1.0E7 / 1.0E-4
    """
    d = Decimal(shortest)
    if value == 0 or 1e-3 <= abs(value) < 1e7:
        s = format(d, "f")
        return s if "." in s else s + ".0"
    mant, exp = format(d.normalize(), "E").split("E")
    if "." not in mant:
        mant += ".0"
    return f"{mant}E{int(exp)}"


def _float_literal(value: float) -> str:
    """单精度的最短十进制表示：1.0 而不是 1.0000000149..."""
    target = struct.unpack(_FLOAT_FMT, struct.pack(_FLOAT_FMT, value))[0]
    s = repr(target)
    for digits in range(1, 10):
        cand = "%.*g" % (digits, target)
        if struct.unpack(_FLOAT_FMT, struct.pack(_FLOAT_FMT, float(cand)))[0] == target:
            s = cand
            break
    return _numeric_literal(s, target)


class _FloatingCodec(PrimitiveCodec):
    def __init__(self, name: str, fmt: str):
        self.name = name
        self._fmt = fmt
        self._size = struct.calcsize(fmt)

    def encode(self, value):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            self._reject(value)
        try:
            return struct.pack(self._fmt, value)
        except (struct.error, OverflowError):
            self._reject(value, "out of range")

    def decode(self, data):
        self._check_size(data, self._size)
        return struct.unpack(self._fmt, data)[0]

    def literal(self, value):
        value = float(value)
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if self._fmt == _FLOAT_FMT:
            return _float_literal(value)
        return _numeric_literal(repr(value), value)


class _BooleanCodec(PrimitiveCodec):
    name = "boolean"

    def encode(self, value):
        if not isinstance(value, bool):
            self._reject(value)
        return b"\x01" if value else b"\x00"

    def decode(self, data):
        self._check_size(data, 1)
        return data[0] != 0

    def literal(self, value):
        return "true" if value else "false"


class _DecimalCodec(PrimitiveCodec):
    name = "decimal"

    def encode(self, value):
        if _is_int(value):
            value = Decimal(value)
        if not isinstance(value, Decimal):
            self._reject(value)
        if not value.is_finite():
            self._reject(value, "not finite")
        sign, digits, exp = value.as_tuple()
        # varint 没有负零：Decimal("-0") 编码后读回为 Decimal("0")，scale 保留
        unscaled = int("".join(map(str, digits)) or "0")
        if sign:
            unscaled = -unscaled
        try:
            head = struct.pack(_INT_FMT, -exp)
        except struct.error:
            self._reject(value, "scale out of range")
        return head + _varint_pack(unscaled)

    def decode(self, data):
        data = bytes(data)
        if len(data) < 5:
            raise ValueError(f"decimal payload too short: {len(data)} bytes")
        scale = struct.unpack_from(_INT_FMT, data, 0)[0]
        unscaled = _varint_unpack(data[4:])
        digits = tuple(int(c) for c in str(abs(unscaled)))
        return Decimal((1 if unscaled < 0 else 0, digits, -scale))


class _StringCodec(PrimitiveCodec):
    def __init__(self, name: str, encoding: str):
        self.name = name
        self._encoding = encoding

    def encode(self, value):
        if not isinstance(value, str):
            self._reject(value)
        try:
            return value.encode(self._encoding)
        except UnicodeEncodeError:
            self._reject(value, f"not representable in {self._encoding}")

    def decode(self, data):
        return bytes(data).decode(self._encoding)

    def literal(self, value):
        return "'" + value.replace("'", "''") + "'"


class _BlobCodec(PrimitiveCodec):
    name = "blob"

    def encode(self, value):
        if not isinstance(value, (bytes, bytearray, memoryview)):
            self._reject(value)
        return bytes(value)

    def decode(self, data):
        return bytes(data)

    def literal(self, value):
        return "0x" + bytes(value).hex()


class _UUIDCodec(PrimitiveCodec):
    def __init__(self, name: str, version: Optional[int] = None):
        self.name = name
        self._version = version

    def encode(self, value):
        if not isinstance(value, uuid.UUID):
            self._reject(value)
        if self._version is not None and value.version != self._version:
            self._reject(value, f"expected a version {self._version} uuid")
        return value.bytes

    def decode(self, data):
        self._check_size(data, 16)
        u = uuid.UUID(bytes=bytes(data))
        if self._version is not None and u.version != self._version:
            raise ValueError(f"{self.name} payload is not a version {self._version} uuid")
        return u


class _InetCodec(PrimitiveCodec):
    name = "inet"

    def encode(self, value):
        if not isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
            self._reject(value)
        return value.packed

    def decode(self, data):
        data = bytes(data)
        if len(data) == 4:
            return ipaddress.IPv4Address(data)
        if len(data) == 16:
            return ipaddress.IPv6Address(data)
        raise ValueError(f"inet payload must be 4 or 16 bytes, got {len(data)}")

    def literal(self, value):
        return f"'{value}'"


def _to_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


class _TimestampCodec(PrimitiveCodec):
    name = "timestamp"

    def encode(self, value):
        if not isinstance(value, datetime):
            self._reject(value)
        try:
            return struct.pack(_BIGINT_FMT, _to_millis(value))
        except struct.error:
            self._reject(value, "out of range")

    def decode(self, data):
        self._check_size(data, 8)
        ms = struct.unpack(_BIGINT_FMT, data)[0]
        try:
            return _EPOCH + timedelta(milliseconds=ms)
        except OverflowError:
            raise ValueError(f"timestamp {ms} out of datetime range") from None

    def literal(self, value):
        return str(_to_millis(value))


class CodecRegistry:
    """
    基础类型编解码器注册表（按 DataType 索引）。
    freeze() 之后只读，可被任意线程共享；需要定制时 copy() 一份再 register。
    """

    def __init__(self, codecs: Optional[Dict[DataType, PrimitiveCodec]] = None):
        self._codecs: Dict[DataType, PrimitiveCodec] = dict(codecs or {})
        self._frozen = False

    def register(self, data_type: DataType, codec: PrimitiveCodec) -> "CodecRegistry":
        if self._frozen:
            raise TypeError("codec registry is read-only; use copy().register(...)")
        self._codecs[data_type] = codec
        return self

    def freeze(self) -> "CodecRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def codec_for(self, data_type: DataType) -> PrimitiveCodec:
        try:
            return self._codecs[data_type]
        except KeyError:
            raise CodecNotFoundError(f"no codec registered for type {data_type}") from None

    def copy(self) -> "CodecRegistry":
        # 副本总是可写的
        return CodecRegistry(self._codecs)

    def __contains__(self, data_type: DataType) -> bool:
        return data_type in self._codecs

    def __len__(self) -> int:
        return len(self._codecs)


def _build_default() -> CodecRegistry:
    reg = CodecRegistry()
    reg.register(ASCII, _StringCodec("ascii", "ascii"))
    reg.register(TEXT, _StringCodec("text", "utf-8"))
    reg.register(VARCHAR, _StringCodec("varchar", "utf-8"))
    reg.register(INT, _FixedIntCodec("int", _INT_FMT))
    reg.register(BIGINT, _FixedIntCodec("bigint", _BIGINT_FMT))
    reg.register(COUNTER, _FixedIntCodec("counter", _BIGINT_FMT))
    reg.register(VARINT, _VarintCodec())
    reg.register(FLOAT, _FloatingCodec("float", _FLOAT_FMT))
    reg.register(DOUBLE, _FloatingCodec("double", _DOUBLE_FMT))
    reg.register(DECIMAL, _DecimalCodec())
    reg.register(BOOLEAN, _BooleanCodec())
    reg.register(BLOB, _BlobCodec())
    reg.register(UUID, _UUIDCodec("uuid"))
    reg.register(TIMEUUID, _UUIDCodec("timeuuid", version=1))
    reg.register(INET, _InetCodec())
    reg.register(TIMESTAMP, _TimestampCodec())
    return reg.freeze()


_DEFAULT = _build_default()


def default_registry() -> CodecRegistry:
    return _DEFAULT
