"""包清单读取

支持两种清单:
  - package.yml   （name / version / requires / url）
  - *.nimble      （version = "x" 与 requires "a >= 1", "b" 语句）

同一目录两者都有时以 package.yml 为准。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from depot.core.exceptions import ConfigError
from depot.core.requirement import Requirement, parse_requirement
from depot.core.version import Version, parse_version
from depot.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

_NIMBLE_FIELD_RE = re.compile(r'^\s*(?P<key>name|version)\s*=\s*"(?P<value>[^"]*)"', re.MULTILINE)
_NIMBLE_REQUIRES_RE = re.compile(r"^\s*requires\b(?P<body>.*)$", re.MULTILINE)
_QUOTED_RE = re.compile(r'"([^"]+)"')


@dataclass
class Manifest:
    """清单内容"""

    name: str
    path: Path
    version: Version | None = None
    requires: list[Requirement] = field(default_factory=list)
    url: str = ""


class ManifestReader:
    """包清单读取器"""

    def __init__(self, manifest_file: str = "package.yml") -> None:
        self.manifest_file = manifest_file

    def find(self, directory: Path) -> Path | None:
        """目录中的清单文件路径"""
        primary = directory / self.manifest_file
        if primary.is_file():
            return primary
        nimbles = sorted(directory.glob("*.nimble"))
        return nimbles[0] if nimbles else None

    def read(self, directory: Path) -> Manifest | None:
        """读取目录清单；没有清单时返回 None

        Raises:
            ConfigError: 清单存在但无法解析
        """
        path = self.find(directory)
        if path is None:
            return None
        if path.suffix == ".nimble":
            return self._read_nimble(path)
        return self._read_yaml(path)

    def _read_yaml(self, path: Path) -> Manifest:
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, ValueError, OSError) as e:
            raise ConfigError(f"无法读取清单: {e}", path=str(path)) from e

        name = str(data.get("name") or path.parent.name)
        requires = data.get("requires") or []
        if not isinstance(requires, list):
            raise ConfigError("requires 必须是列表", path=str(path))
        return Manifest(
            name=name,
            path=path,
            version=self._version(data.get("version"), path),
            requires=[self._requirement(r, path) for r in requires],
            url=str(data.get("url") or ""),
        )

    def _read_nimble(self, path: Path) -> Manifest:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"无法读取清单: {e}", path=str(path)) from e

        fields = {m.group("key"): m.group("value") for m in _NIMBLE_FIELD_RE.finditer(text)}
        requires: list[Requirement] = []
        for m in _NIMBLE_REQUIRES_RE.finditer(text):
            for raw in _QUOTED_RE.findall(m.group("body")):
                requires.append(self._requirement(raw, path))
        return Manifest(
            name=fields.get("name") or path.stem,
            path=path,
            version=self._version(fields.get("version"), path),
            requires=requires,
        )

    @staticmethod
    def _version(raw: object, path: Path) -> Version | None:
        if raw is None or str(raw).strip() == "":
            return None
        if isinstance(raw, bool) or not isinstance(raw, (str, int)):
            # YAML 会把 1.10 读成浮点数 1.1
            raise ConfigError(f"版本号必须写成字符串，请加引号: {raw!r}", path=str(path))
        try:
            return parse_version(str(raw))
        except ValueError as e:
            raise ConfigError(str(e), path=str(path)) from e

    @staticmethod
    def _requirement(raw: object, path: Path) -> Requirement:
        if not isinstance(raw, str):
            raise ConfigError(f"依赖需求必须写成字符串，请加引号: {raw!r}", path=str(path))
        try:
            return parse_requirement(raw)
        except ValueError as e:
            raise ConfigError(str(e), path=str(path)) from e
