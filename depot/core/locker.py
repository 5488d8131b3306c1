"""锁定管理

把一次解析结果中每个依赖的精确引用（Git 提交或版本号）连同原始需求写入
命名锁（room），之后可按名称把依赖恢复到这些引用。

锁存放在项目根目录的 locks.yml:

    rooms:
      ci:
        created_at: "2026-01-01T00:00:00+00:00"
        root: app
        entries:
          - name: bump
            requirement: "bump >= 1.0.0 & < 2.0.0"
            reference: 5f2c...
            url: https://github.com/disruptek/bump
            dist: git
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import yaml

from depot.core.dep.models import DependencyGroup
from depot.core.exceptions import LockNotFoundError, LockWriteError, MaterializationError, describe
from depot.core.models import Dist, Project
from depot.core.registry import YamlRegistry
from depot.core.requirement import parse_requirement

if TYPE_CHECKING:
    from depot.services.git.materialize import Materializer
    from depot.services.workspace import Workspace

_logger = logging.getLogger(__name__)


@dataclass
class LockEntry:
    """锁中的一个依赖"""

    name: str
    reference: str
    requirement: str
    url: str = ""
    dist: str = Dist.GIT.value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LockEntry:
        return cls(
            name=str(data.get("name", "")),
            reference=str(data.get("reference", "")),
            requirement=str(data.get("requirement", "")),
            url=str(data.get("url", "") or ""),
            dist=str(data.get("dist", Dist.GIT.value)),
        )


@dataclass
class LockRecord:
    """一个命名锁"""

    name: str
    root: str = ""
    created_at: str = ""
    entries: list[LockEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "created_at": self.created_at,
            "root": self.root,
            "entries": [asdict(e) for e in self.entries],
        }

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> LockRecord:
        raw = data.get("entries") or []
        return cls(
            name=name,
            root=str(data.get("root", "")),
            created_at=str(data.get("created_at", "")),
            entries=[LockEntry.from_dict(e) for e in raw if isinstance(e, dict)],
        )

    def references(self) -> dict[str, str]:
        """需求原文 -> 引用"""
        return {e.requirement: e.reference for e in self.entries}


class LockRegistry(YamlRegistry):
    """locks.yml 中的 rooms 分节"""

    section_key = "rooms"

    def get(self, name: str) -> LockRecord | None:
        raw = self._get_raw(name)
        return LockRecord.from_dict(name, raw) if raw is not None else None

    def put(self, record: LockRecord) -> None:
        self._put(record.name, record.to_dict())

    def names(self) -> list[str]:
        return self._names()

    def remove(self, name: str) -> bool:
        return self._remove(name)


class LockManager:
    """锁定 / 解锁"""

    def __init__(
        self,
        registry: LockRegistry,
        workspace: Workspace,
        materializer: Materializer,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.registry = registry
        self.workspace = workspace
        self.materializer = materializer
        self.log = logger or _logger

    def list_locks(self) -> list[str]:
        """已保存的锁名（排序）"""
        return self.registry.names()

    # ---- 锁定 ----

    def lock(self, group: DependencyGroup, name: str) -> bool:
        """把依赖组的当前引用写入命名锁（同名覆盖）"""
        name = name.strip()
        if not name:
            self.log.error("锁名不能为空")
            return False
        if not group.ok:
            missing = ", ".join(str(r) for r in group.unresolved)
            self.log.error("依赖未全部满足，拒绝锁定: %s", missing)
            return False

        record = LockRecord(
            name=name,
            root=group.root.name,
            created_at=datetime.now(tz=timezone.utc).isoformat(),
        )
        for requirement, dependency in group.items():
            chosen = dependency.selected
            if chosen is None:
                continue
            if not chosen.reference:
                self.log.error(describe(LockWriteError(name, f"{chosen.name} 没有可锁定的引用")))
                return False
            record.entries.append(LockEntry(
                name=chosen.name,
                reference=chosen.reference,
                requirement=str(requirement),
                url=chosen.url,
                dist=chosen.dist.value,
            ))

        try:
            self.registry.put(record)
        except (OSError, yaml.YAMLError) as e:
            self.log.error(describe(LockWriteError(name, str(e))))
            return False
        self.log.info("已写入锁 %s (%d 个依赖)", name, len(record.entries))
        return True

    # ---- 解锁 ----

    def unlock(self, name: str, group: DependencyGroup | None = None) -> bool:
        """把锁中每个依赖恢复到记录的引用

        Raises:
            LockNotFoundError: 没有该名称的锁
        """
        record = self.registry.get(name.strip())
        if record is None:
            raise LockNotFoundError(name)

        ok = True
        for entry in record.entries:
            if not self._restore(entry, group):
                ok = False
        if ok:
            self.log.info("已按锁 %s 恢复 %d 个依赖", record.name, len(record.entries))
        return ok

    def _restore(self, entry: LockEntry, group: DependencyGroup | None) -> bool:
        project = self._locate(entry, group)
        if project is None:
            if not entry.url:
                self.log.error(describe(MaterializationError("恢复", entry.name, "本地不存在且没有远端地址")))
                return False
            project = self.materializer.clone(entry.url, entry.name)
            if project is None:
                return False

        if project.reference == entry.reference:
            return True
        if project.dist is not Dist.GIT:
            self.log.error(describe(MaterializationError(
                "恢复", entry.name, f"非 Git 依赖无法切换到 {entry.reference}",
            )))
            return False
        return self.materializer.checkout(project, entry.reference)

    def _locate(self, entry: LockEntry, group: DependencyGroup | None) -> Project | None:
        """先按需求在依赖组中找，再在已安装包中按名称找（引用相同者优先）"""
        if group is not None and entry.requirement:
            try:
                requirement = parse_requirement(entry.requirement)
            except ValueError:
                requirement = None
            dependency = group.dependency_for(requirement) if requirement is not None else None
            if dependency is not None:
                for project in dependency.ordered():
                    if project.reference == entry.reference:
                        return project
                if dependency.selected is not None:
                    return dependency.selected

        installed = self.workspace.named(entry.name)
        for project in installed:
            if project.reference == entry.reference:
                return project
        git_copies = [p for p in installed if p.dist is Dist.GIT]
        return (git_copies or installed or [None])[0]

