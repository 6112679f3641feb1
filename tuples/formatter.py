# tuples/formatter.py
"""Literal rendering and structural equality for tuple values."""
from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .tuple_value import TupleValue

NULL_LITERAL = "null"


def format_value(value: "TupleValue") -> str:
    """
    渲染为 "(e0, e1, ..., ek)"：
      - 元素个数 = 值自身的 arity，从不按更宽的列类型补齐
      - 每个元素用基础编解码器的字面量形式；null 槽位输出 null
    """
    t = value.type
    parts = []
    for i in range(value.arity):
        raw = value.get_bytes_unsafe(i)
        if raw is None:
            parts.append(NULL_LITERAL)
            continue
        codec = t.registry.codec_for(t.component_type(i))
        parts.append(codec.literal(codec.decode(raw)))
    return "(" + ", ".join(parts) + ")"


def values_equal(a: "TupleValue", b: "TupleValue") -> bool:
    # 按已编码字节逐位比较：null 只等于 null，且保证字节级往返相等
    if a.type != b.type:
        return False
    return all(a.get_bytes_unsafe(i) == b.get_bytes_unsafe(i) for i in range(a.arity))


def value_hash(value: "TupleValue") -> int:
    return hash((value.type,) + tuple(value.get_bytes_unsafe(i) for i in range(value.arity)))
