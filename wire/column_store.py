# wire/column_store.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict, Hashable, List, Optional, Union

from tuples.errors import TypeMismatchError
from tuples.tuple_type import TupleType, parse_type
from tuples.tuple_value import TupleValue

from .composite import Buffer, decode_tuple, encode_tuple
from .diag import log
from .primitives import CodecRegistry

# delete() 区分“键不存在”与“存的是 null 列”
_MISSING: Any = object()


class TupleColumn:
    """
    单个元组列的内存存储（代替被排除在外的传输层，用来走通 写 -> 读 的完整路径）：
      - 列有一个声明类型（TupleType），写入的值可以更窄（模式放宽）
      - bind()  : 校验字面量类型是声明类型的前缀，然后编码为线上字节
      - read()  : 按声明类型解码线上字节（短元组尾部补 null）
      - insert/select : 按主键保存/读取已编码的字节
    """

    def __init__(self, name: str, declared_type: Union[TupleType, str],
                 registry: Optional[CodecRegistry] = None):
        if isinstance(declared_type, str):
            declared_type = parse_type(declared_type)
            if not isinstance(declared_type, TupleType):
                raise TypeMismatchError(f"column {name!r} must be declared as a tuple type")
        if not isinstance(declared_type, TupleType):
            raise TypeMismatchError(
                f"column {name!r} must be declared as a TupleType, got {type(declared_type).__name__}")
        if registry is not None:
            declared_type = TupleType(declared_type.component_types, registry=registry)
        self.name = name
        self.declared_type = declared_type
        self._rows: Dict[Hashable, Optional[bytes]] = {}

    # ---------- 绑定 / 读取 ----------
    def bind(self, value: Optional[TupleValue]) -> Optional[bytes]:
        if value is None:
            return None
        if not isinstance(value, TupleValue):
            raise TypeMismatchError(
                f"column {self.name!r} expects a TupleValue, got {type(value).__name__}")
        if not self.declared_type.accepts(value.type):
            raise TypeMismatchError(
                f"cannot bind {value.type} to column {self.name!r} of type {self.declared_type}")
        return encode_tuple(value)

    def read(self, raw: Optional[Buffer]) -> Optional[TupleValue]:
        return decode_tuple(raw, self.declared_type)

    # ---------- 按主键存取 ----------
    def insert(self, key: Hashable, value: Optional[TupleValue]) -> int:
        """写入（覆盖）一行，返回影响行数。"""
        raw = self.bind(value)
        self._rows[key] = raw
        log.debug("column %s: stored %s bytes under key %r",
                  self.name, "null" if raw is None else len(raw), key)
        return 1

    def select(self, key: Hashable) -> Optional[TupleValue]:
        if key not in self._rows:
            raise KeyError(f"key {key!r} not found in column {self.name!r}")
        return self.read(self._rows[key])

    def raw(self, key: Hashable) -> Optional[bytes]:
        return self._rows[key]

    def delete(self, key: Hashable) -> int:
        return 1 if self._rows.pop(key, _MISSING) is not _MISSING else 0

    def keys(self) -> List[Hashable]:
        return list(self._rows.keys())

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"TupleColumn({self.name!r}, {self.declared_type})"
