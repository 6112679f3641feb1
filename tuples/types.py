# tuples/types.py
"""Primitive column types that can appear as tuple components."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from .errors import TypeMismatchError


class Kind(Enum):
    """
    能力标签（component kind）：
    把共享同一种 Python 表示的类型归为一组，
    TupleValue.get/set 通过它做“按种类”的类型检查，避免 setInt/getString 这类方法爆炸。
    """
    STRING = "string"        # ascii / text / varchar -> str
    INT = "int"              # int -> int (32 位)
    BIGINT = "bigint"        # bigint / counter -> int (64 位)
    VARINT = "varint"        # varint -> int (任意精度)
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"      # -> decimal.Decimal
    BOOLEAN = "boolean"
    BYTES = "bytes"          # blob
    UUID = "uuid"            # uuid / timeuuid
    INET = "inet"            # -> ipaddress
    TIMESTAMP = "timestamp"  # -> datetime


@dataclass(frozen=True)
class DataType:
    name: str
    kind: Kind = field(compare=False)

    def __str__(self) -> str:
        return self.name


ASCII = DataType("ascii", Kind.STRING)
BIGINT = DataType("bigint", Kind.BIGINT)
BLOB = DataType("blob", Kind.BYTES)
BOOLEAN = DataType("boolean", Kind.BOOLEAN)
COUNTER = DataType("counter", Kind.BIGINT)
DECIMAL = DataType("decimal", Kind.DECIMAL)
DOUBLE = DataType("double", Kind.DOUBLE)
FLOAT = DataType("float", Kind.FLOAT)
INET = DataType("inet", Kind.INET)
INT = DataType("int", Kind.INT)
TEXT = DataType("text", Kind.STRING)
TIMESTAMP = DataType("timestamp", Kind.TIMESTAMP)
UUID = DataType("uuid", Kind.UUID)
VARCHAR = DataType("varchar", Kind.STRING)
VARINT = DataType("varint", Kind.VARINT)
TIMEUUID = DataType("timeuuid", Kind.UUID)

_ALL: List[DataType] = [
    ASCII, BIGINT, BLOB, BOOLEAN, COUNTER, DECIMAL, DOUBLE, FLOAT,
    INET, INT, TEXT, TIMESTAMP, UUID, VARCHAR, VARINT, TIMEUUID,
]
_BY_NAME: Dict[str, DataType] = {t.name: t for t in _ALL}


def all_primitive_types() -> List[DataType]:
    return list(_ALL)


def normalize_type(t: str) -> str:
    return (t or "").strip().lower()


def primitive(name: str) -> DataType:
    """按类型名查找基础类型；未知类型名抛 TypeMismatchError。"""
    t = _BY_NAME.get(normalize_type(name))
    if t is None:
        raise TypeMismatchError(f"unknown primitive type: {name!r}")
    return t
