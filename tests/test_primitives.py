import ipaddress
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from tuples.errors import CodecNotFoundError, TypeMismatchError
from tuples.types import (
    ASCII, BIGINT, BLOB, BOOLEAN, COUNTER, DECIMAL, DOUBLE, FLOAT, INET, INT,
    TEXT, TIMESTAMP, TIMEUUID, UUID, VARCHAR, VARINT, DataType, Kind, all_primitive_types,
)
from tuples.tuple_type import TupleType
from wire.primitives import CodecRegistry, default_registry

REG = default_registry()


def codec(t):
    return REG.codec_for(t)


def test_default_registry_covers_every_primitive():
    for t in all_primitive_types():
        assert t in REG
    assert len(REG) == len(all_primitive_types())


def test_unknown_type_has_no_codec():
    with pytest.raises(CodecNotFoundError):
        REG.codec_for(DataType("duration", Kind.BIGINT))
    with pytest.raises(CodecNotFoundError):
        CodecRegistry().codec_for(INT)


def test_fixed_width_integers():
    assert codec(INT).encode(1) == b"\x00\x00\x00\x01"
    assert codec(INT).encode(-1) == b"\xff\xff\xff\xff"
    assert codec(INT).decode(b"\x00\x00\x01\xc8") == 456
    assert codec(BIGINT).encode(2 ** 40) == b"\x00\x00\x01\x00\x00\x00\x00\x00"
    assert codec(COUNTER).decode(codec(COUNTER).encode(5)) == 5


def test_integers_reject_bool_and_overflow():
    with pytest.raises(TypeMismatchError):
        codec(INT).encode(True)
    with pytest.raises(TypeMismatchError):
        codec(INT).encode(2 ** 31)
    with pytest.raises(TypeMismatchError):
        codec(BIGINT).encode(1.5)
    with pytest.raises(ValueError):
        codec(INT).decode(b"\x00\x01")


def test_varint_minimal_twos_complement():
    c = codec(VARINT)
    assert c.encode(0) == b"\x00"
    assert c.encode(127) == b"\x7f"
    assert c.encode(128) == b"\x00\x80"
    assert c.encode(-1) == b"\xff"
    assert c.encode(-128) == b"\x80"
    assert c.encode(-129) == b"\xff\x7f"
    assert c.decode(c.encode(2 ** 100)) == 2 ** 100
    with pytest.raises(ValueError):
        c.decode(b"")


def test_decimal_scale_and_unscaled():
    c = codec(DECIMAL)
    assert c.encode(Decimal("1.23")) == b"\x00\x00\x00\x02\x7b"
    assert c.decode(b"\x00\x00\x00\x02\x7b") == Decimal("1.23")
    assert str(c.decode(c.encode(Decimal("-0.0050")))) == "-0.0050"
    assert c.decode(c.encode(7)) == Decimal(7)
    with pytest.raises(TypeMismatchError):
        c.encode(Decimal("NaN"))
    with pytest.raises(TypeMismatchError):
        c.encode(1.5)


def test_floating_point():
    assert codec(FLOAT).encode(1.0) == b"\x3f\x80\x00\x00"
    assert codec(DOUBLE).encode(1.0) == b"\x3f\xf0\x00\x00\x00\x00\x00\x00"
    assert codec(FLOAT).encode(2) == codec(FLOAT).encode(2.0)
    with pytest.raises(TypeMismatchError):
        codec(FLOAT).encode("1.0")
    with pytest.raises(TypeMismatchError):
        codec(FLOAT).encode(1e40)
    with pytest.raises(TypeMismatchError):
        codec(DOUBLE).encode(False)


def test_float_literals():
    f = codec(FLOAT)
    assert f.literal(1.0) == "1.0"
    assert f.literal(f.decode(f.encode(1.1))) == "1.1"
    assert f.literal(float("nan")) == "NaN"
    assert f.literal(float("-inf")) == "-Infinity"
    assert codec(DOUBLE).literal(0.1) == "0.1"
    assert codec(DOUBLE).literal(float("inf")) == "Infinity"


def test_boolean():
    c = codec(BOOLEAN)
    assert c.encode(True) == b"\x01"
    assert c.decode(b"\x00") is False
    assert c.literal(True) == "true"
    with pytest.raises(TypeMismatchError):
        c.encode(1)


def test_strings():
    assert codec(ASCII).encode("bar") == b"bar"
    assert codec(TEXT).encode("é") == "é".encode("utf-8")
    assert codec(VARCHAR).decode(b"zoo") == "zoo"
    with pytest.raises(TypeMismatchError):
        codec(ASCII).encode("é")
    with pytest.raises(TypeMismatchError):
        codec(TEXT).encode(b"bytes")
    with pytest.raises(ValueError):
        codec(ASCII).decode(b"\xc3\xa9")
    assert codec(TEXT).literal("it's") == "'it''s'"


def test_blob():
    c = codec(BLOB)
    assert c.encode(bytearray(b"\x00\x01")) == b"\x00\x01"
    assert c.literal(b"\xca\xfe") == "0xcafe"
    with pytest.raises(TypeMismatchError):
        c.encode("cafe")


def test_uuid_and_timeuuid():
    u4 = uuid.UUID("067e6162-3b6f-4ae2-a171-2470b63dff00")
    u1 = uuid.UUID("fe2b4360-28c6-11e2-81c1-0800200c9a66")
    assert codec(UUID).decode(codec(UUID).encode(u4)) == u4
    assert codec(TIMEUUID).decode(codec(TIMEUUID).encode(u1)) == u1
    assert codec(UUID).literal(u4) == "067e6162-3b6f-4ae2-a171-2470b63dff00"
    with pytest.raises(TypeMismatchError):
        codec(TIMEUUID).encode(u4)
    with pytest.raises(TypeMismatchError):
        codec(UUID).encode(str(u4))


def test_inet():
    c = codec(INET)
    v4 = ipaddress.ip_address("123.123.123.123")
    v6 = ipaddress.ip_address("::1")
    assert c.encode(v4) == b"\x7b\x7b\x7b\x7b"
    assert c.decode(c.encode(v6)) == v6
    assert c.literal(v4) == "'123.123.123.123'"
    with pytest.raises(TypeMismatchError):
        c.encode("127.0.0.1")
    with pytest.raises(ValueError):
        c.decode(b"\x00\x00")


def test_timestamp_millis_since_epoch():
    c = codec(TIMESTAMP)
    assert c.encode(datetime(1970, 1, 1, 0, 0, 1)) == b"\x00\x00\x00\x00\x00\x00\x03\xe8"
    aware = datetime(2014, 1, 1, tzinfo=timezone.utc)
    assert c.decode(c.encode(aware)) == aware
    assert c.literal(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == "1000"
    with pytest.raises(TypeMismatchError):
        c.encode(1000)


def test_registry_copy_is_independent():
    reg = REG.copy()
    custom = DataType("ascii2", Kind.STRING)
    reg.register(custom, REG.codec_for(ASCII))
    assert custom in reg
    assert custom not in REG


def test_default_registry_is_read_only():
    with pytest.raises(TypeError):
        default_registry().register(INT, codec(BOOLEAN))
    assert default_registry().frozen
    # 共享注册表保持原样，后续 TupleType 仍按 int 检查
    t = TupleType.of(INT)
    with pytest.raises(TypeMismatchError):
        t.new_value(True)
    assert t.new_value(1).get_bytes_unsafe(0) == b"\x00\x00\x00\x01"


def test_customised_copy_does_not_leak_into_default():
    custom = default_registry().copy().register(INT, codec(BOOLEAN))
    assert not custom.frozen
    assert TupleType.of(INT, registry=custom).new_value(True).get(0) is True
    with pytest.raises(TypeMismatchError):
        TupleType.of(INT).new_value(True)


def test_decimal_negative_zero_reads_back_as_zero():
    c = codec(DECIMAL)
    raw = c.encode(Decimal("-0.00"))
    assert raw == c.encode(Decimal("0.00"))
    assert str(c.decode(raw)) == "0.00"
