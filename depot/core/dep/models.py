"""依赖解析结果模型

- Dependency: 一条需求及满足它的候选项目集合（同名多版本可以共存）
- DependencyGroup: 需求 -> Dependency 的有序映射，即一次解析的完整结果

迭代顺序就是需求被处理的顺序（清单声明顺序、深度优先），
所有按名称 / 路径的查找都取该顺序下的第一个匹配。
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from depot.core.models import Project
from depot.core.requirement import Requirement, parse_requirement
from depot.core.version import Version

_NO_VERSION = Version(())


def latest_project(projects: list[Project]) -> Project | None:
    """版本最高的项目；版本未知的排最后，同版本取先出现者"""
    if not projects:
        return None
    return max(projects, key=lambda p: (p.version is not None, p.version or _NO_VERSION))


@dataclass
class Dependency:
    """需求与其候选项目

    不变量: projects 中每个项目都满足 requirement。
    merged 记录被判定为兼容、并入本条目的其他需求写法。
    """

    requirement: Requirement
    projects: dict[Path, Project] = field(default_factory=dict)
    merged: list[Requirement] = field(default_factory=list)

    @classmethod
    def of(cls, project: Project) -> Dependency:
        """用项目自身构造一个无子句依赖（供 path 等命令把根项目加入组）"""
        dep = cls(requirement=parse_requirement(project.name))
        dep.add(project)
        return dep

    @property
    def name(self) -> str:
        return self.requirement.name

    @property
    def requirements(self) -> list[Requirement]:
        return [self.requirement, *self.merged]

    def add(self, project: Project) -> bool:
        """加入候选；已存在返回 False

        Raises:
            ValueError: 项目不满足本条需求
        """
        if not project.satisfies(self.requirement):
            raise ValueError(f"{project} 不满足 {self.requirement}")
        if self.holds(project):
            return False
        self.projects[project.key] = project
        return True

    def holds(self, project: Project) -> bool:
        """按对象或当前位置判断（项目可能已被重定位）"""
        key = project.key
        return any(p is project or p.key == key for p in self.projects.values())

    @property
    def selected(self) -> Project | None:
        """优先选同时满足所有已并入需求的最高版本"""
        pool = list(self.projects.values())
        strict = [p for p in pool if all(p.satisfies(r) for r in self.requirements)]
        return latest_project(strict or pool)

    def ordered(self) -> list[Project]:
        """候选按版本从高到低"""
        return sorted(
            self.projects.values(),
            key=lambda p: (p.version is not None, p.version or _NO_VERSION),
            reverse=True,
        )


class DependencyGroup:
    """一次解析的完整依赖图"""

    def __init__(self, root: Project) -> None:
        self.root = root
        self._deps: dict[Requirement, Dependency] = {}
        self.unresolved: list[Requirement] = []

    def __len__(self) -> int:
        return len(self._deps)

    def __iter__(self) -> Iterator[Requirement]:
        return iter(self._deps)

    def __contains__(self, requirement: object) -> bool:
        return isinstance(requirement, Requirement) and self.dependency_for(requirement) is not None

    def items(self) -> list[tuple[Requirement, Dependency]]:
        return list(self._deps.items())

    def values(self) -> list[Dependency]:
        return list(self._deps.values())

    def add(self, requirement: Requirement, dependency: Dependency) -> None:
        self._deps[requirement] = dependency

    @property
    def ok(self) -> bool:
        return not self.unresolved

    def dependency_for(self, requirement: Requirement) -> Dependency | None:
        """按需求查找（含已并入的需求写法）"""
        found = self._deps.get(requirement)
        if found is not None:
            return found
        for dep in self._deps.values():
            if requirement in dep.merged:
                return dep
        return None

    def named(self, name: str) -> list[Dependency]:
        """同名的全部条目（同名不兼容需求会各自成条）"""
        return [d for d in self._deps.values() if d.requirement.matches_name(name)]

    def claimant(self, project: Project) -> Dependency | None:
        for dep in self._deps.values():
            if dep.holds(project):
                return dep
        return None

    def has_name(self, name: str) -> bool:
        return self.project_for_name(name) is not None

    def include_root(self) -> None:
        """根项目不在组中时把它作为一条依赖加入"""
        if not self.has_name(self.root.name):
            dep = Dependency.of(self.root)
            self.add(dep.requirement, dep)

    # ---- 查找 ----

    def project_for_name(self, name: str) -> Project | None:
        for dep in self._deps.values():
            chosen = dep.selected
            if chosen is None:
                continue
            if dep.requirement.matches_name(name) or chosen.matches_name(name):
                return chosen
        return None

    def path_for_name(self, name: str) -> Path | None:
        found = self.project_for_name(name)
        return found.path if found is not None else None

    def req_for_project(self, project: Project) -> Requirement | None:
        dep = self.claimant(project)
        return dep.requirement if dep is not None else None

    def project_for_path(self, path: Path) -> Project | None:
        key = Path(path).resolve()
        for dep in self._deps.values():
            for project in dep.projects.values():
                if project.key == key:
                    return project
        return None

    def references(self) -> dict[str, str]:
        """需求原文 -> 选中项目的精确引用"""
        result: dict[str, str] = {}
        for req, dep in self._deps.items():
            chosen = dep.selected
            if chosen is not None:
                result[str(req)] = chosen.reference
        return result
