# tuples/errors.py
"""Error kinds raised by the tuple model and the wire codec."""
from __future__ import annotations


class TupleCodecError(Exception):
    """所有元组编解码错误的公共基类。"""


class InvalidArityError(TupleCodecError, ValueError):
    """TupleType 的分量列表为空。"""


class ArityMismatchError(TupleCodecError, ValueError):
    """按位置构造 TupleValue 时，值的个数与 TupleType 的 arity 不一致。"""


class TypeMismatchError(TupleCodecError, TypeError):
    """值（或请求的 kind）与分量声明的类型不兼容；读写两个方向都会抛出。"""


class IndexOutOfRangeError(TupleCodecError, IndexError):
    """位置不在 [0, arity) 内。"""


class MalformedTupleError(TupleCodecError, ValueError):
    """线上字节与声明的长度不一致，或超出目标 arity。"""


class CodecNotFoundError(TupleCodecError, LookupError):
    """注册表里没有该分量类型的基础编解码器。"""


def check_index(index: int, arity: int) -> int:
    # bool 是 int 的子类，这里一并拒绝
    if isinstance(index, bool) or not isinstance(index, int):
        raise IndexOutOfRangeError(f"index must be an int, got {type(index).__name__}")
    if not 0 <= index < arity:
        raise IndexOutOfRangeError(f"index {index} out of range [0, {arity})")
    return index
