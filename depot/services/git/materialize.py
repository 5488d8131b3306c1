"""Git 包落地

解析器、升级与锁定共用的工作副本操作:
  - clone:               克隆远端为新的依赖项目（未给名称时取 URL 末段）
  - roll_towards:        检出满足需求的最高发布标签，并按新版本重定位目录
  - roll_to / checkout:  检出指定版本 / 精确引用
  - relocate:            把目录改名为 <name>-<version> 形式
  - promote:             自己账号下的 GitHub 仓库改用 SSH 远端
  - promote_remote_like: 把命名远端指向新 fork（原 origin 保留为 upstream）

每个操作都是一次同步的文件系统 / Git 动作，失败返回 False 并记录原因。
"""

from __future__ import annotations

import logging
import shutil

from depot.core.exceptions import ConfigError, MaterializationError, describe
from depot.core.models import Dist, Project
from depot.core.requirement import Requirement, latest_satisfying
from depot.core.version import Version
from depot.services.git.repo import GitRepo
from depot.services.workspace import Workspace
from depot.utils.net import github_coordinates, slug_from_url

_logger = logging.getLogger(__name__)


class Materializer:
    """依赖工作副本的落地操作"""

    def __init__(
        self,
        workspace: Workspace,
        *,
        remote_name: str = "origin",
        upstream_remote: str = "upstream",
        owner: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self.workspace = workspace
        self.remote_name = remote_name
        self.upstream_remote = upstream_remote
        self.owner = owner
        self.log = logger or _logger

    def _repo(self, project: Project) -> GitRepo:
        return self.workspace.git(project.path)

    # ---- 获取 ----

    def fetch(self, requirement: Requirement, url: str) -> Project | None:
        """为缺失的依赖克隆远端，并尽量滚动到满足需求的版本"""
        project = self.clone(url, requirement.name)
        if project is None:
            return None
        if not self.roll_towards(project, requirement):
            self.relocate(project)
        return project

    def clone(self, url: str, name: str = "") -> Project | None:
        """克隆到依赖目录，返回新项目"""
        name = name or slug_from_url(url)
        dest = self.workspace.deps_dir / name
        if dest.exists():
            self.log.error(describe(MaterializationError("克隆", url, f"目标目录已存在: {dest}")))
            return None
        try:
            GitRepo.clone(url, dest, self.workspace.executor, self.workspace.git_timeout)
            project = self.workspace.load(dest)
        except MaterializationError as e:
            self.log.error(describe(e))
            return None
        except ConfigError as e:
            self.log.error(describe(e))
            shutil.rmtree(dest, ignore_errors=True)
            return None
        finally:
            self.workspace.refresh()
        self.log.info("已克隆 %s -> %s", url, dest)
        return project

    # ---- 版本切换 ----

    def roll_towards(self, project: Project, requirement: Requirement) -> bool:
        """检出满足需求的最高发布版本（固定引用则检出该引用）"""
        if project.dist is not Dist.GIT:
            return project.satisfies(requirement)
        if requirement.release:
            if requirement.release.lower() == "head" or project.satisfies(requirement):
                return self.relocate(project)
            return self.checkout(project, requirement.release)

        target = latest_satisfying(project.tags.values(), requirement)
        if target is None:
            self.log.warning("%s 没有满足 %s 的发布标签", project.name, requirement)
            return False
        if project.version == target and project.satisfies(requirement):
            return self.relocate(project)
        return self.roll_to(project, target)

    def roll_to(self, project: Project, version: Version) -> bool:
        tag = project.tag_for(version)
        if tag is None:
            self.log.error(describe(MaterializationError("检出", f"{project.name}@{version}", "没有对应标签")))
            return False
        return self.checkout(project, tag)

    def checkout(self, project: Project, reference: str) -> bool:
        """检出精确引用，刷新项目并重定位目录

        重定位失败时退回原来的引用，工作副本与项目字段保持检出前的状态。
        """
        repo = self._repo(project)
        previous = repo.current_ref()
        try:
            repo.checkout(reference)
        except MaterializationError as e:
            self.log.error(describe(e))
            return False
        try:
            self.workspace.reload(project)
        except ConfigError as e:
            self.log.error(describe(e))
            self._restore(project, previous)
            return False
        if self.relocate(project):
            self.log.info("%s 已检出 %s", project.name, reference)
            return True
        self._restore(project, previous)
        return False

    def _restore(self, project: Project, ref: str) -> None:
        if not ref:
            return
        try:
            self._repo(project).checkout(ref)
            self.workspace.reload(project)
        except (MaterializationError, ConfigError) as e:
            self.log.error(describe(e))
            return
        self.log.warning("%s 已退回 %s", project.name, ref)

    def refresh_tags(self, project: Project) -> bool:
        """从远端拉取标签并刷新项目"""
        if project.dist is not Dist.GIT:
            return False
        try:
            self._repo(project).fetch_tags(self.remote_name)
            self.workspace.reload(project)
        except (MaterializationError, ConfigError) as e:
            self.log.warning(describe(e))
            return False
        return True

    def relocate(self, project: Project) -> bool:
        """目录改名以反映当前版本；不在依赖目录中的项目不动"""
        deps_dir = self.workspace.deps_dir.resolve()
        if project.path.resolve().parent != deps_dir:
            return True
        target = self.workspace.dir_for(project)
        if target.resolve() == project.key:
            return True
        if target.exists():
            self.log.error(describe(MaterializationError("重定位", str(project.path), f"{target} 已存在")))
            return False
        try:
            project.path.rename(target)
        except OSError as e:
            self.log.error(describe(MaterializationError("重定位", str(project.path), str(e))))
            return False
        finally:
            self.workspace.refresh()
        self.log.debug("已重定位 %s -> %s", project.path.name, target.name)
        project.path = target
        return True

    # ---- 远端 ----

    def promote(self, project: Project) -> bool:
        """origin 是自己账号下的 GitHub 仓库时改为 SSH 地址；否则不做改动"""
        if project.dist is not Dist.GIT or not self.owner or not project.url:
            return False
        coords = github_coordinates(project.url)
        if coords is None or coords[0].lower() != self.owner.lower():
            return False
        ssh = f"git@github.com:{coords[0]}/{coords[1]}.git"
        if project.url == ssh:
            return False
        try:
            self._repo(project).set_remote(self.remote_name, ssh)
        except MaterializationError as e:
            self.log.error(describe(e))
            return False
        project.url = ssh
        self.log.info("%s 的远端已改为 %s", project.name, ssh)
        return True

    def promote_remote_like(self, project: Project, url: str, name: str = "") -> bool:
        """让命名远端指向 url；替换 origin 时原地址保留为 upstream"""
        if project.dist is not Dist.GIT:
            return False
        name = name or self.remote_name
        repo = self._repo(project)
        try:
            current = repo.remote_url(name)
            if current == url:
                return True
            if current and name == self.remote_name and self.upstream_remote not in repo.remotes():
                repo.rename_remote(name, self.upstream_remote)
            repo.set_remote(name, url)
        except MaterializationError as e:
            self.log.error(describe(e))
            return False
        if name == self.remote_name:
            project.url = url
        self.log.info("%s 的远端 %s -> %s", project.name, name, url)
        return True
