"""升级引擎

在已解析的依赖组上，把 Git 依赖推进到需求范围内的最新发布标签。
超出需求上界的更新版本不会被采用，只报告为"被屏蔽"（masked）。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from depot.core.dep.models import DependencyGroup
from depot.core.exceptions import UnknownNameError, describe
from depot.core.models import Dist, Project
from depot.core.requirement import Requirement, ceiling, latest_satisfying, same_name
from depot.core.version import Version

if TYPE_CHECKING:
    from depot.services.git.materialize import Materializer

_logger = logging.getLogger(__name__)


def _masked(newest: Version, requirement: Requirement) -> bool:
    """newest 是否被需求的上界排除（超过上界，或等于开区间上界）"""
    top = ceiling(requirement)
    if top is None or newest < top:
        return False
    return newest > top or not all(c.holds(newest) for c in requirement.clauses if c.version == top)


class UpgradeEngine:
    """依赖升级"""

    def __init__(
        self,
        materializer: Materializer,
        *,
        toolchain: Iterable[str] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self.materializer = materializer
        self.toolchain = list(toolchain)
        self.log = logger or _logger

    def upgrade_child(self, project: Project, requirement: Requirement, dry_run: bool = False) -> bool:
        """把单个项目推进到满足需求的最新发布版本

        跳过的情况都视为成功。只有检出失败返回 False。
        """
        if project.dist is not Dist.GIT:
            return True
        if any(same_name(project.name, n) for n in self.toolchain):
            self.log.debug("忽略工具链 %s", project.name)
            return True
        if requirement.is_pinned:
            self.log.debug("%s 固定在 #%s，不升级", project.name, requirement.release)
            return True

        self.materializer.refresh_tags(project)
        if not project.upgrade_available:
            self.log.debug("%s 没有可用的升级", project.name)
            return True

        newest = project.latest_release
        target = latest_satisfying(project.tags.values(), requirement)
        current = project.version
        if target is not None and (current is None or target > current):
            if dry_run:
                self.log.info("%s 可升级: %s -> %s", project.name, current, target)
            elif self.materializer.roll_to(project, target):
                self.log.info("%s 已升级到 %s", project.name, target)
            else:
                self.log.warning("无法升级 %s", project.name)
                return False
        else:
            target = current

        if newest is not None and (target is None or target < newest) and _masked(newest, requirement):
            self.log.warning("%s 的最新发布 %s 被需求 %s 屏蔽", project.name, newest, requirement)
        return True

    def upgrade_group(
        self, group: DependencyGroup, names: Sequence[str] = (), dry_run: bool = False,
    ) -> bool:
        """升级整个依赖组，或仅升级给定名称；任何一项失败则返回 False"""
        ok = True
        if not names:
            for requirement, dependency in group.items():
                chosen = dependency.selected
                if chosen is not None and not self.upgrade_child(chosen, requirement, dry_run):
                    ok = False
            return ok

        for name in names:
            project = group.project_for_name(name)
            requirement = group.req_for_project(project) if project is not None else None
            if project is None or requirement is None:
                self.log.error(describe(UnknownNameError(name)))
                ok = False
                continue
            if not self.upgrade_child(project, requirement, dry_run):
                ok = False
        return ok
