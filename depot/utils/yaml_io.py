"""YAML 读写工具

锁文件、配置文件、包清单 (package.yml) 统一走这里：
UTF-8 编码、空文件保护、写入前自动建目录、临时文件 + rename 原子落盘。
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 清单与锁文件都很小，超过此大小基本可以断定是误读了其他文件
MAX_YAML_SIZE = 4 * 1024 * 1024


def atomic_write(path: Path, content: str) -> None:
    """先写同目录临时文件，再 os.replace 覆盖目标文件

    异常:
        OSError: 写入或替换失败（临时文件会被清理）
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, str(path))
    except Exception:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def load_yaml(path: str | Path) -> dict[str, Any]:
    """读取 YAML 映射

    文件不存在、为空或顶层不是映射时返回空字典。

    异常:
        yaml.YAMLError: 语法错误
        ValueError: 文件超过 MAX_YAML_SIZE
        OSError: 读取失败
    """
    p = Path(path)
    if not p.exists():
        return {}

    size = p.stat().st_size
    if size > MAX_YAML_SIZE:
        raise ValueError(f"YAML 文件过大: {p} ({size} 字节)")

    try:
        with open(p, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("解析 YAML 失败: %s: %s", p, e)
        raise

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("%s 顶层不是映射 (%s)，按空处理", p, type(data).__name__)
        return {}
    return data


def dump_yaml(data: Any) -> str:
    """序列化为块风格 YAML，保持键顺序，便于 diff"""
    return yaml.safe_dump(
        data, default_flow_style=False,
        allow_unicode=True, sort_keys=False,
    )


def save_yaml(path: str | Path, data: Any) -> None:
    """原子写入 YAML 文件

    异常:
        yaml.YAMLError: 数据无法序列化
        OSError: 写入失败
    """
    p = Path(path)
    try:
        atomic_write(p, dump_yaml(data))
    except (yaml.YAMLError, OSError) as e:
        logger.error("写入 YAML 失败: %s: %s", p, e)
        raise
