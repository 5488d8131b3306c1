"""核心数据模型

Project 表示磁盘上的一个具体包实例。解析、升级、锁定都围绕它进行；
Git 落地操作会原地修改它（版本、路径、HEAD）。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from depot.core.requirement import Requirement, satisfies, same_name
from depot.core.version import Version, latest


class Dist(str, Enum):
    """包的分发方式"""

    GIT = "git"          # Git 工作副本
    LOCAL = "local"      # 普通目录
    MANAGED = "managed"  # 由底层包工具安装


@dataclass
class Project:
    """一个磁盘上的包实例"""

    name: str
    path: Path
    dist: Dist = Dist.LOCAL
    version: Version | None = None
    requirements: list[Requirement] = field(default_factory=list)
    url: str = ""                # origin 远端
    commit: str = ""             # HEAD 完整提交哈希
    head_tags: list[str] = field(default_factory=list)
    tags: dict[str, Version] = field(default_factory=dict)  # 发布标签 -> 版本
    tag_commits: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.name}-{self.version}" if self.version else f"{self.name}-#{self.release or 'head'}"

    @property
    def key(self) -> Path:
        """访问集合使用的位置键"""
        return self.path.resolve()

    @property
    def release(self) -> str:
        """HEAD 上版本最高的发布标签；没有则为短提交号"""
        tagged = [t for t in self.head_tags if t in self.tags]
        if tagged:
            return max(tagged, key=lambda t: self.tags[t])
        if self.head_tags:
            return self.head_tags[0]
        return self.commit[:12]

    @property
    def reference(self) -> str:
        """锁定用的精确引用：Git 为提交哈希，其余为版本号"""
        if self.dist is Dist.GIT and self.commit:
            return self.commit
        return str(self.version) if self.version else ""

    @property
    def latest_release(self) -> Version | None:
        return latest(self.tags.values())

    @property
    def upgrade_available(self) -> bool:
        newest = self.latest_release
        if newest is None:
            return False
        return self.version is None or newest > self.version

    def matches_name(self, name: str) -> bool:
        return same_name(self.name, name)

    def satisfies(self, requirement: Requirement) -> bool:
        """判断本实例能否满足需求（名称 + 版本范围 + 固定引用）"""
        if not requirement.matches_name(self.name):
            return False
        if requirement.release and not self._at_release(requirement.release):
            return False
        return satisfies(self.version, requirement)

    def _at_release(self, release: str) -> bool:
        if self.dist is not Dist.GIT:
            return False
        if release.lower() == "head":
            return True
        if release in self.head_tags:
            return True
        return len(release) >= 7 and self.commit.startswith(release)

    def tag_for(self, version: Version) -> str | None:
        """版本对应的发布标签（多个时取最短的写法）"""
        names = [t for t, v in self.tags.items() if v == version]
        return min(names, key=len) if names else None
