"""集中配置管理

项目根目录下的 depot.yml 覆盖默认值；不存在时全部使用默认。
相对路径（deps_dir、locks_file）均相对于项目根目录解析。
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path

import yaml

from depot.core.exceptions import ConfigError
from depot.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

CONFIG_FILE = "depot.yml"


@dataclass
class Config:
    """depot 全局配置"""

    # 目录与文件
    deps_dir: str = "deps/pkgs"
    locks_file: str = "locks.yml"
    manifest_file: str = "package.yml"
    managed_marker: str = "nimblemeta.json"

    # 永不自动升级、也不参与解析的工具链包名
    compiler_names: list[str] = field(default_factory=lambda: ["nim", "Nim", "compiler"])

    # Git
    remote_name: str = "origin"
    upstream_remote: str = "upstream"
    git_timeout: int = 600

    # GitHub
    github_owner: str = ""
    github_token_env: str = "GITHUB_TOKEN"
    github_api: str = "https://api.github.com"

    # 包名 -> clone URL，用于只写了包名的依赖
    remotes: dict[str, str] = field(default_factory=dict)

    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str | Path = CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, ValueError, OSError) as e:
            raise ConfigError(f"无法读取配置: {e}", path=str(path)) from e
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        cfg = cls(**matched)
        cfg.extra = {k: v for k, v in data.items() if k not in known}
        if not isinstance(cfg.remotes, dict):
            raise ConfigError("remotes 必须是 包名: URL 的映射", path=str(path))
        return cfg

    @property
    def owner(self) -> str:
        """视为"自己的"仓库所属账号"""
        return self.github_owner or os.getenv("GITHUB_USER", "")

    def deps_path(self, root: Path) -> Path:
        p = Path(self.deps_dir)
        return p if p.is_absolute() else root / p

    def locks_path(self, root: Path) -> Path:
        p = Path(self.locks_file)
        return p if p.is_absolute() else root / p

    def to_dict(self) -> dict:
        return asdict(self)


_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str | Path = CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.debug("配置已加载: %s", path)
    return _current
