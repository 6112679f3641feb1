# wire/composite.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import struct
from typing import Optional, Union

from tuples.errors import MalformedTupleError, TypeMismatchError
from tuples.tuple_type import TupleType
from tuples.tuple_value import TupleValue

from .diag import log, padding_event

# ---------------- 元组的线上格式 ----------------
# 每个分量一个块：
#   length(int32, 大端, 有符号) | payload(length 字节)
# 含义：
#   - length == -1 (0xFFFFFFFF) 表示 null 分量，没有 payload
#   - 没有总长度/分量个数前缀：分量个数由写出的块数隐含决定
#   - 所以更窄的字面量（arity 更小）也是更宽列类型的合法输入
_LEN_FMT = ">i"
_LEN_SIZE = struct.calcsize(_LEN_FMT)  # 4 字节
NULL_LENGTH = -1

Buffer = Union[bytes, bytearray, memoryview]


def encode_tuple(value: Optional[TupleValue]) -> Optional[bytes]:
    """
    编码 TupleValue：
      - 只遍历值自身的 arity（不是目标列的 arity）
      - null 槽位写 -1，非 null 槽位写 长度 + 负载
      - value 为 None（整列为 null）时返回 None

    槽位在 set 时已经由类型的编解码器注册表编码好，
    所以只有实际存在的分量才需要有对应的编解码器。
    """
    if value is None:
        return None
    out = bytearray()
    t = value.type
    for i in range(value.arity):
        raw = value.get_bytes_unsafe(i)
        if raw is None:
            out += struct.pack(_LEN_FMT, NULL_LENGTH)
            continue
        out += struct.pack(_LEN_FMT, len(raw))
        out += raw
    log.debug("encoded %s into %d bytes", t, len(out))
    return bytes(out)


def decode_tuple(data: Optional[Buffer], tuple_type: TupleType) -> Optional[TupleValue]:
    """
    按目标类型（列声明的、可能更宽的类型）解码：
      - 字节用尽时，剩余位置全部为 null（短元组的前向兼容路径，不报错）
      - length == -1：该位置为 null，只前进 4 字节
      - 否则读取 length 字节，并用该位置声明类型的编解码器校验
    失败时抛 MalformedTupleError，不返回半成品。
    """
    if data is None:
        return None
    if not isinstance(tuple_type, TupleType):
        raise TypeMismatchError(f"decode target must be a TupleType, got {type(tuple_type).__name__}")
    reg = tuple_type.registry
    mv = memoryview(data).cast("B")
    size = len(mv)
    off = 0
    value = TupleValue(tuple_type)
    for i in range(tuple_type.arity):
        if off >= size:
            padding_event(i, tuple_type.arity, str(tuple_type))
            break
        if size - off < _LEN_SIZE:
            raise MalformedTupleError(
                f"component {i}: truncated length header ({size - off} of {_LEN_SIZE} bytes)")
        (length,) = struct.unpack_from(_LEN_FMT, mv, off)
        off += _LEN_SIZE
        if length == NULL_LENGTH:
            continue
        if length < 0:
            raise MalformedTupleError(f"component {i}: invalid length {length}")
        if length > size - off:
            raise MalformedTupleError(
                f"component {i}: declared length {length} exceeds remaining {size - off} bytes")
        payload = bytes(mv[off:off + length])
        off += length
        comp = tuple_type.component_type(i)
        try:
            reg.codec_for(comp).decode(payload)
        except ValueError as e:
            raise MalformedTupleError(f"component {i}: invalid {comp.name} payload: {e}") from e
        value.set_bytes_unsafe(i, payload)
    if off < size:
        raise MalformedTupleError(
            f"{size - off} bytes left after decoding {tuple_type.arity} components of {tuple_type}")
    log.debug("decoded %d bytes as %s", size, tuple_type)
    return value
