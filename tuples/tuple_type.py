# tuples/tuple_type.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import re
from typing import Any, Iterable, List, Optional, Tuple, Union

from wire.primitives import CodecRegistry, default_registry

from .errors import ArityMismatchError, InvalidArityError, TypeMismatchError, check_index
from .formatter import format_value
from .types import DataType, normalize_type, primitive
from .tuple_value import TupleValue


class TupleType:
    """
    元组类型（不可变的模式描述）：
      - 有序、定长的分量类型序列，arity >= 1，顺序有语义（不是集合）
      - 构造后不可修改，可被多个 TupleValue / 多个线程共享
      - 相等：arity 相同且每个位置的分量类型相同

    注意“声明 arity”与“字面量 arity”是两回事：
      - new_value(*values) 严格要求个数 == arity
      - 想写一个更短的元组，需要显式构造一个更窄的 TupleType；
        解码时由目标列的（更宽的）类型负责补 null。
    """

    __slots__ = ("_components", "_registry")

    def __init__(self, component_types: Iterable[Union[DataType, str]],
                 registry: Optional[CodecRegistry] = None):
        comps: List[DataType] = []
        for t in component_types:
            if isinstance(t, str):
                t = primitive(t)
            if not isinstance(t, DataType):
                raise TypeMismatchError(f"tuple component must be a DataType, got {type(t).__name__}")
            comps.append(t)
        if not comps:
            raise InvalidArityError("a tuple type needs at least one component")
        self._components: Tuple[DataType, ...] = tuple(comps)
        self._registry = registry if registry is not None else default_registry()

    @classmethod
    def of(cls, *component_types: Union[DataType, str],
           registry: Optional[CodecRegistry] = None) -> "TupleType":
        return cls(component_types, registry=registry)

    # ---------- 访问器 ----------
    @property
    def arity(self) -> int:
        return len(self._components)

    @property
    def component_types(self) -> Tuple[DataType, ...]:
        return self._components

    @property
    def registry(self) -> CodecRegistry:
        return self._registry

    def component_type(self, index: int) -> DataType:
        return self._components[check_index(index, self.arity)]

    # ---------- 工厂 ----------
    def new_value(self, *values: Any) -> TupleValue:
        """
        new_value()           -> 全部为 null 的值
        new_value(v0, ..., vn) -> 按位置填充；个数必须等于 arity
        """
        v = TupleValue(self)
        if not values:
            return v
        if len(values) != self.arity:
            raise ArityMismatchError(
                f"tuple type {self} has {self.arity} components, got {len(values)} values")
        for i, x in enumerate(values):
            v.set(i, x)
        return v

    def accepts(self, literal_type: "TupleType") -> bool:
        """literal_type 不比本类型宽，且分量与本类型的前缀一致（模式放宽兼容）。"""
        n = literal_type.arity
        return n <= self.arity and literal_type.component_types == self._components[:n]

    def format(self, value: TupleValue) -> str:
        if value.type != self:
            raise TypeMismatchError(f"value of type {value.type} cannot be formatted as {self}")
        return format_value(value)

    # ---------- 比较 / 展示 ----------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TupleType):
            return NotImplemented
        return self._components == other._components

    def __hash__(self) -> int:
        return hash(("tuple",) + self._components)

    def __len__(self) -> int:
        return self.arity

    def __str__(self) -> str:
        return "tuple<" + ", ".join(t.name for t in self._components) + ">"

    def __repr__(self) -> str:
        return f"TupleType({', '.join(t.name for t in self._components)})"


_TUPLE_RE = re.compile(r"^tuple\s*<(.*)>$", flags=re.IGNORECASE | re.DOTALL)


def parse_type(name: str) -> Union[DataType, TupleType]:
    """'int' -> DataType；'tuple<ascii, int, boolean>' -> TupleType。"""
    s = normalize_type(name)
    m = _TUPLE_RE.match(s)
    if not m:
        if "<" in s or ">" in s:
            raise TypeMismatchError(f"malformed type name: {name!r}")
        return primitive(s)
    parts = [p.strip() for p in m.group(1).split(",")]
    if parts == [""]:
        raise InvalidArityError(f"empty tuple type: {name!r}")
    if any(not p or "<" in p or ">" in p for p in parts):
        # 只支持基础类型作为分量
        raise TypeMismatchError(f"malformed tuple type: {name!r}")
    return TupleType(primitive(p) for p in parts)
