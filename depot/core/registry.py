"""YAML 分节注册表基类

一个 YAML 文件内按 section_key 存放若干命名条目，
子类只需指定 section_key 即可获得读写、列举、删除。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from depot.utils.yaml_io import load_yaml, save_yaml

logger = logging.getLogger(__name__)


class YamlRegistry:
    """YAML 文件注册表基类

    子类用法:
        class LockRegistry(YamlRegistry):
            section_key = "rooms"
    """

    section_key: str = "entries"

    def __init__(self, registry_file: str | Path) -> None:
        self.registry_file = Path(registry_file)
        self._data: dict[str, Any] = load_yaml(self.registry_file)

    def reload(self) -> None:
        """丢弃内存中的内容，重新读取文件"""
        self._data = load_yaml(self.registry_file)

    def _section(self) -> dict[str, Any]:
        section = self._data.get(self.section_key)
        if not isinstance(section, dict):
            section = {}
            self._data[self.section_key] = section
        return section

    def _save(self) -> None:
        save_yaml(self.registry_file, self._data)

    def _put(self, name: str, entry: dict[str, Any]) -> dict[str, Any]:
        """写入条目（同名覆盖）并保存"""
        self._section()[name] = entry
        self._save()
        return entry

    def _get_raw(self, name: str) -> dict[str, Any] | None:
        entry = self._section().get(name)
        return entry if isinstance(entry, dict) else None

    def _names(self) -> list[str]:
        return sorted(str(k) for k in self._section())

    def _remove(self, name: str) -> bool:
        section = self._section()
        if name not in section:
            return False
        del section[name]
        self._save()
        return True
