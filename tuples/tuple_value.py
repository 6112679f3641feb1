# tuples/tuple_value.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import TYPE_CHECKING, Any, Iterator, List, Optional

from .errors import TypeMismatchError, check_index
from .formatter import format_value, value_hash, values_equal
from .types import DataType, Kind

if TYPE_CHECKING:
    from .tuple_type import TupleType


def _kind_accessors(kind: Kind):
    def setter(self: "TupleValue", index: int, value: Any) -> "TupleValue":
        return self.set(index, value, kind)

    def getter(self: "TupleValue", index: int) -> Any:
        return self.get(index, kind)

    return setter, getter


class TupleValue:
    """
    绑定到某个 TupleType 的元组值（可变，单一所有者，内部不加锁）：
      - 槽位数恒等于类型的 arity
      - 每个槽位保存已编码的原始字节，或 None 表示 null
      - 写入时即通过基础编解码器做类型检查与转换（fail-fast，不推迟到线上）
    """

    __slots__ = ("_type", "_slots")

    def __init__(self, tuple_type: "TupleType"):
        self._type = tuple_type
        self._slots: List[Optional[bytes]] = [None] * tuple_type.arity

    @property
    def type(self) -> "TupleType":
        return self._type

    @property
    def arity(self) -> int:
        return len(self._slots)

    # ---------- 写 ----------
    def set(self, index: int, value: Any, kind: Optional[Kind] = None) -> "TupleValue":
        """
        把 value 写入第 index 个槽位：
          - None 总是允许（写入 null）
          - 指定 kind 时，必须与该位置声明类型的 kind 一致
          - 值无法表示为声明类型时抛 TypeMismatchError，槽位保持原样
        """
        comp = self._type.component_type(index)
        if value is None:
            self._slots[index] = None
            return self
        self._check_kind(index, comp, kind)
        raw = self._type.registry.codec_for(comp).encode(value)
        self._slots[index] = raw
        return self

    def set_bytes_unsafe(self, index: int, raw: Optional[bytes]) -> "TupleValue":
        # 不做类型检查，解码器已经校验过负载
        check_index(index, self.arity)
        self._slots[index] = None if raw is None else bytes(raw)
        return self

    # ---------- 读 ----------
    def get(self, index: int, kind: Optional[Kind] = None) -> Any:
        comp = self._type.component_type(index)
        raw = self._slots[index]
        if raw is None:
            return None
        self._check_kind(index, comp, kind)
        return self._type.registry.codec_for(comp).decode(raw)

    def get_bytes_unsafe(self, index: int) -> Optional[bytes]:
        return self._slots[check_index(index, self.arity)]

    def is_null(self, index: int) -> bool:
        return self._slots[check_index(index, self.arity)] is None

    def values(self) -> List[Any]:
        return [self.get(i) for i in range(self.arity)]

    @staticmethod
    def _check_kind(index: int, comp: DataType, kind: Optional[Kind]) -> None:
        if kind is not None and kind is not comp.kind:
            raise TypeMismatchError(
                f"component {index} is of type {comp.name}, cannot be accessed as {kind.value}")

    # 按 kind 命名的便捷方法：set_int(i, v) / get_string(i) ...
    set_string, get_string = _kind_accessors(Kind.STRING)
    set_int, get_int = _kind_accessors(Kind.INT)
    set_long, get_long = _kind_accessors(Kind.BIGINT)
    set_varint, get_varint = _kind_accessors(Kind.VARINT)
    set_float, get_float = _kind_accessors(Kind.FLOAT)
    set_double, get_double = _kind_accessors(Kind.DOUBLE)
    set_decimal, get_decimal = _kind_accessors(Kind.DECIMAL)
    set_bool, get_bool = _kind_accessors(Kind.BOOLEAN)
    set_bytes, get_bytes = _kind_accessors(Kind.BYTES)
    set_uuid, get_uuid = _kind_accessors(Kind.UUID)
    set_inet, get_inet = _kind_accessors(Kind.INET)
    set_timestamp, get_timestamp = _kind_accessors(Kind.TIMESTAMP)

    # ---------- 容器协议 ----------
    def __getitem__(self, index: int) -> Any:
        return self.get(index)

    def __setitem__(self, index: int, value: Any) -> None:
        self.set(index, value)

    def __len__(self) -> int:
        return self.arity

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TupleValue):
            return NotImplemented
        return values_equal(self, other)

    def __hash__(self) -> int:
        return value_hash(self)

    def __str__(self) -> str:
        return format_value(self)

    def __repr__(self) -> str:
        return f"TupleValue({self._type!s}, {format_value(self)})"
