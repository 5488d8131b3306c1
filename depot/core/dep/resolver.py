"""依赖解析器

从根项目声明的需求出发，用显式工作栈构建传递依赖图:

  1. 弹出一条需求；组内已有同一需求则跳过
  2. 在本地已安装包中找满足它的候选；没有且能定位远端时，clone 一份
  3. 仍无候选 -> 记为未满足，继续处理其余需求（整体结果 ok=False）
  4. 候选与组内同名条目有交集 -> 视为兼容，并入该条目；否则新建条目
     （同名但范围不相交的需求各自成条，允许多版本共存）
  5. 新纳入、且未访问过的项目标记为已访问，其需求按声明顺序压栈

访问集以项目位置为键，循环引用也保证终止、每个位置至多访问一次。
这是贪心解析，不做全局回溯。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from depot.core.dep.models import Dependency, DependencyGroup
from depot.core.exceptions import UnsatisfiableRequirementError, describe
from depot.core.models import Project
from depot.core.requirement import Requirement, same_name

if TYPE_CHECKING:
    from depot.services.git.materialize import Materializer
    from depot.services.workspace import Workspace

_logger = logging.getLogger(__name__)


class DependencyResolver:
    """贪心依赖解析器"""

    def __init__(
        self,
        workspace: Workspace,
        materializer: Materializer | None = None,
        *,
        toolchain: Iterable[str] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self.workspace = workspace
        self.materializer = materializer
        self.toolchain = list(toolchain)
        self.log = logger or _logger

    def resolve(self, root: Project) -> tuple[DependencyGroup, bool]:
        """解析 root 的传递依赖，返回 (依赖组, 是否全部满足)"""
        group = DependencyGroup(root)
        visited: set[Path] = {root.key}
        stack: list[Requirement] = list(reversed(root.requirements))

        while stack:
            requirement = stack.pop()
            if requirement in group:
                continue
            if self._is_toolchain(requirement):
                self.log.debug("忽略工具链依赖: %s", requirement)
                continue

            candidates = self._candidates(requirement)
            if not candidates:
                self.log.warning(describe(UnsatisfiableRequirementError(str(requirement))))
                group.unresolved.append(requirement)
                continue

            admitted = self._admit(group, requirement, candidates)
            for project in admitted:
                if project.key in visited:
                    continue
                visited.add(project.key)
                self.log.debug("访问 %s (%s)", project, project.path)
                stack.extend(reversed(project.requirements))

        ok = group.ok
        if ok:
            self.log.info("已解析 %s 的 %d 条依赖", root.name, len(group))
        else:
            self.log.warning("%s 有 %d 条依赖未满足", root.name, len(group.unresolved))
        return group, ok

    def _is_toolchain(self, requirement: Requirement) -> bool:
        return any(same_name(requirement.name, n) for n in self.toolchain)

    def _candidates(self, requirement: Requirement) -> list[Project]:
        """本地优先；本地没有任何满足者时尝试从远端获取"""
        found = self.workspace.candidates(requirement)
        if found or self.materializer is None:
            return found

        url = self.workspace.url_for(requirement)
        if not url:
            return []
        self.log.info("本地没有满足 %s 的包，从 %s 获取", requirement, url)
        if self.materializer.fetch(requirement, url) is None:
            return []
        self.workspace.refresh()
        return self.workspace.candidates(requirement)

    def _admit(
        self, group: DependencyGroup, requirement: Requirement, candidates: list[Project],
    ) -> list[Project]:
        """把候选并入已有兼容条目或新建条目，返回本条需求纳入的项目"""
        existing = self._compatible(group, requirement, candidates)
        if existing is not None:
            existing.merged.append(requirement)
            for project in candidates:
                owner = group.claimant(project)
                if owner is None and project.satisfies(existing.requirement):
                    existing.add(project)
            self.log.debug("%s 与 %s 兼容，合并候选", requirement, existing.requirement)
            return [p for p in candidates if existing.holds(p)]

        dependency = Dependency(requirement=requirement)
        for project in candidates:
            if group.claimant(project) is None:
                dependency.add(project)
        group.add(requirement, dependency)
        return list(dependency.projects.values())

    @staticmethod
    def _compatible(
        group: DependencyGroup, requirement: Requirement, candidates: list[Project],
    ) -> Dependency | None:
        """同名条目中第一个与候选集合有交集的条目"""
        for dep in group.named(requirement.name):
            if any(dep.holds(p) for p in candidates):
                return dep
        return None
