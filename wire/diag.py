# wire/diag.py
from __future__ import annotations

import os
import logging

# 将 True 改为打印到 stdout 的补齐日志（适合本地快速观察短元组）
DEBUG_PADDING = False

LOGGER_NAME = "tuple_codec"
log = logging.getLogger(LOGGER_NAME)

_log_handler: logging.Handler | None = None


def enable_log(path: str | None = None) -> None:
    """
    开启文件日志（仅初始化一次）：
    - 默认写入 __logs__/tuple_codec.log
    - 主要记录短元组补 null 事件（INFO），编解码细节为 DEBUG
    """
    global _log_handler
    if _log_handler is not None:
        return
    if path is None:
        os.makedirs("__logs__", exist_ok=True)
        path = os.path.join("__logs__", "tuple_codec.log")
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    log.setLevel(logging.INFO)
    log.addHandler(handler)
    _log_handler = handler


def disable_log() -> None:
    """关闭文件日志（移除并关闭 handler）"""
    global _log_handler
    if _log_handler is not None:
        log.removeHandler(_log_handler)
        _log_handler.close()
    log.setLevel(logging.NOTSET)
    _log_handler = None


def padding_event(present: int, arity: int, type_name: str) -> None:
    msg = f"PAD tuple {type_name}: {present}/{arity} components on the wire, {arity - present} padded with null"
    if DEBUG_PADDING:
        print(msg)
    log.info(msg)
