# tuples/cli/tuple_cli.py
from __future__ import annotations
import argparse, sys, json, uuid, ipaddress
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, List, Optional

from tuples.errors import TupleCodecError, TypeMismatchError
from tuples.tuple_type import TupleType, parse_type
from tuples.tuple_value import TupleValue
from tuples.types import DataType, Kind
from wire.composite import decode_tuple, encode_tuple

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def convert_json(value: Any, t: DataType) -> Any:
    """把 JSON 里的值转换成分量类型对应的 Python 值（JSON 没有 uuid/inet/blob 等类型）。"""
    if value is None:
        return None
    k = t.kind
    if k in (Kind.FLOAT, Kind.DOUBLE) and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        return value
    if k is Kind.DECIMAL:
        return Decimal(str(value))
    if k is Kind.BYTES and isinstance(value, str):
        s = value[2:] if value.lower().startswith("0x") else value
        return bytes.fromhex(s)
    if k is Kind.UUID and isinstance(value, str):
        return uuid.UUID(value)
    if k is Kind.INET and isinstance(value, str):
        return ipaddress.ip_address(value)
    if k is Kind.TIMESTAMP:
        if isinstance(value, str):
            return datetime.fromisoformat(value)
        return _EPOCH + timedelta(milliseconds=int(value))
    return value


def _tuple_type(spec: str) -> TupleType:
    t = parse_type(spec)
    if not isinstance(t, TupleType):
        raise TypeMismatchError(f"--type 需要元组类型，如 'tuple<int, text>'，实际为 {spec!r}")
    return t


def build_value(t: TupleType, values_json: str) -> TupleValue:
    raw = json.loads(values_json)
    if not isinstance(raw, list):
        raise TypeMismatchError("--values 必须是 JSON 数组")
    values: List[Any] = [convert_json(v, t.component_type(i)) if i < t.arity else v
                         for i, v in enumerate(raw)]
    return t.new_value(*values) if values else t.new_value()


def cmd_encode(args) -> None:
    t = _tuple_type(args.type)
    print(encode_tuple(build_value(t, args.values)).hex())


def cmd_decode(args) -> None:
    t = _tuple_type(args.type)
    s = args.hex[2:] if args.hex.lower().startswith("0x") else args.hex
    v = decode_tuple(bytes.fromhex(s), t)
    print(t.format(v))


def cmd_format(args) -> None:
    t = _tuple_type(args.type)
    print(t.format(build_value(t, args.values)))


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="tuple_cli", description="元组类型的编码/解码/格式化工具")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("encode", help="把 JSON 数组编码为线上字节（十六进制输出）")
    p.add_argument("--type", required=True, help="元组类型，如 'tuple<int, text, float>'")
    p.add_argument("--values", required=True, help="JSON 数组，如 '[1, \"a\", 1.0]'")
    p.set_defaults(func=cmd_encode)

    p = sub.add_parser("decode", help="按目标类型解码十六进制字节（短元组尾部补 null）")
    p.add_argument("--type", required=True, help="目标（列声明）元组类型")
    p.add_argument("--hex", required=True, help="线上字节的十六进制表示")
    p.set_defaults(func=cmd_decode)

    p = sub.add_parser("format", help="不编码，直接输出字面量形式")
    p.add_argument("--type", required=True, help="元组类型")
    p.add_argument("--values", required=True, help="JSON 数组")
    p.set_defaults(func=cmd_format)

    args = ap.parse_args(argv)
    try:
        args.func(args)
    except (TupleCodecError, ValueError) as e:
        # ValueError 覆盖 JSON / 十六进制 / uuid 等输入格式错误
        print(f"错误 {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
