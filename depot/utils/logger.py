"""depot 日志配置

普通终端输出使用人类可读格式；CI 中可切换为一行一条的 JSON。
各组件通过 get_logger() 取得 "depot" 下的子 logger，由调用方显式传入。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

ROOT_LOGGER = "depot"

_HUMAN_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器

    输出示例:
        {"timestamp": "...", "level": "WARNING", "logger": "depot.upgrade",
         "message": "...", "function": "upgrade_child", "line": 88}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器（进程启动时调用一次）

    参数:
        level: DEBUG / INFO / WARNING / ERROR，大小写不敏感，非法值按 INFO
        json_output: True 时输出 JSON 行
    """
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(_HUMAN_FORMAT))
    root.addHandler(handler)


def get_logger(name: str = "") -> logging.Logger:
    """获取 depot 命名空间下的 logger

    >>> get_logger("resolver").name
    'depot.resolver'
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER)
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def reset_logging() -> None:
    """移除根日志器上的所有 handler"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
