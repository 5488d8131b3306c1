"""工作区：定位根项目、扫描已安装依赖、把目录读成 Project

依赖目录采用 nimble 风格的命名，目录名里编码了版本:
    deps/pkgs/<name>-<version>/
    deps/pkgs/<name>-#<tag|head>/
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from depot.core.exceptions import ConfigError, MaterializationError, ProjectNotFoundError, describe
from depot.core.manifest import ManifestReader
from depot.core.models import Dist, Project
from depot.core.requirement import Requirement, same_name
from depot.core.version import Version, parse_version, version_from_tag
from depot.services.git.repo import GitRepo
from depot.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)

_DIR_RE = re.compile(r"^(?P<name>.+?)-(?P<suffix>#\S+|[vV]?\d+(?:\.[0-9A-Za-z]+)*)$")


def split_dir_name(dirname: str) -> tuple[str, Version | None]:
    """从依赖目录名拆出 (包名, 版本)

    >>> split_dir_name("bump-1.8.0")
    ('bump', Version('1.8.0'))
    >>> split_dir_name("cligen-#head")
    ('cligen', None)
    """
    m = _DIR_RE.match(dirname)
    if not m:
        return dirname, None
    suffix = m.group("suffix")
    if suffix.startswith("#"):
        return m.group("name"), None
    return m.group("name"), parse_version(suffix)


class Workspace:
    """项目根目录与依赖目录的视图"""

    def __init__(
        self,
        root: Path,
        deps_dir: Path,
        reader: ManifestReader | None = None,
        *,
        managed_marker: str = "nimblemeta.json",
        remotes: dict[str, str] | None = None,
        remote_name: str = "origin",
        executor: CommandExecutor | None = None,
        git_timeout: int | None = None,
    ) -> None:
        self.root = Path(root)
        self.deps_dir = Path(deps_dir)
        self.reader = reader or ManifestReader()
        self.managed_marker = managed_marker
        self.remotes = dict(remotes or {})
        self.remote_name = remote_name
        self.executor = executor
        self.git_timeout = git_timeout
        self._installed: list[Project] | None = None

    # ---- 根项目 ----

    @staticmethod
    def find_project(start: Path, reader: ManifestReader | None = None) -> Path:
        """从 start 向上查找第一个含清单的目录

        Raises:
            ProjectNotFoundError: 一直到文件系统根都没有清单
        """
        reader = reader or ManifestReader()
        start = Path(start).resolve()
        for directory in (start, *start.parents):
            if reader.find(directory) is not None:
                return directory
        raise ProjectNotFoundError(str(start))

    def root_project(self) -> Project:
        """读取根项目；清单无法解析时 ConfigError 直接抛出"""
        if self.reader.find(self.root) is None:
            raise ProjectNotFoundError(str(self.root))
        return self.load(self.root)

    # ---- 读取 ----

    def git(self, path: Path) -> GitRepo:
        return GitRepo(path, self.executor, self.git_timeout)

    def load(self, path: Path) -> Project:
        """把目录读成 Project

        Raises:
            ConfigError: 清单存在但无法解析
        """
        path = Path(path)
        manifest = self.reader.read(path)
        if manifest is not None:
            name, version = manifest.name, manifest.version
        else:
            name, version = split_dir_name(path.name)

        project = Project(
            name=name,
            path=path,
            dist=self._dist(path),
            version=version,
            requirements=list(manifest.requires) if manifest else [],
            url=manifest.url if manifest else "",
        )
        if project.dist is Dist.GIT:
            self._inspect_git(project)
        return project

    def reload(self, project: Project) -> Project:
        """检出新版本后原地刷新项目字段"""
        fresh = self.load(project.path)
        project.name = fresh.name
        project.dist = fresh.dist
        project.version = fresh.version
        project.requirements = fresh.requirements
        project.url = fresh.url
        project.commit = fresh.commit
        project.head_tags = fresh.head_tags
        project.tags = fresh.tags
        project.tag_commits = fresh.tag_commits
        return project

    def _dist(self, path: Path) -> Dist:
        if (path / ".git").exists():
            return Dist.GIT
        if (path / self.managed_marker).exists():
            return Dist.MANAGED
        return Dist.LOCAL

    def _inspect_git(self, project: Project) -> None:
        repo = self.git(project.path)
        try:
            tag_commits = repo.tags()
        except MaterializationError as e:
            logger.warning(describe(e))
            tag_commits = {}
        project.commit = repo.head()
        project.tag_commits = tag_commits
        project.tags = {
            tag: v for tag, v in ((t, version_from_tag(t)) for t in tag_commits) if v is not None
        }
        project.head_tags = sorted(t for t, c in tag_commits.items() if project.commit and c == project.commit)
        project.url = repo.remote_url(self.remote_name) or project.url
        if project.version is None:
            released = [project.tags[t] for t in project.head_tags if t in project.tags]
            project.version = max(released, default=None)

    # ---- 已安装依赖 ----

    def installed(self) -> list[Project]:
        """依赖目录下的全部项目（按目录名排序，结果缓存）"""
        if self._installed is None:
            self._installed = self._scan()
        return list(self._installed)

    def refresh(self) -> None:
        self._installed = None

    def _scan(self) -> list[Project]:
        if not self.deps_dir.is_dir():
            return []
        projects: list[Project] = []
        for child in sorted(self.deps_dir.iterdir()):
            if not child.is_dir() or child.name.startswith("."):
                continue
            try:
                projects.append(self.load(child))
            except ConfigError as e:
                logger.warning("跳过无法读取的依赖 %s: %s", child.name, describe(e))
        logger.debug("依赖目录 %s 中有 %d 个包", self.deps_dir, len(projects))
        return projects

    def candidates(self, requirement: Requirement) -> list[Project]:
        """满足需求的已安装项目，版本从高到低"""
        found = [p for p in self.installed() if p.satisfies(requirement)]
        return sorted(
            found,
            key=lambda p: (p.version is not None, p.version or Version(())),
            reverse=True,
        )

    def named(self, name: str) -> list[Project]:
        return [p for p in self.installed() if p.matches_name(name)]

    def url_for(self, requirement: Requirement) -> str | None:
        """需求对应的 clone 地址：URL 需求本身，或配置中的 remotes 映射"""
        if requirement.is_url:
            return requirement.url
        for name, url in self.remotes.items():
            if same_name(name, requirement.name):
                return url
        return None

    def dir_for(self, project: Project) -> Path:
        """项目当前版本对应的规范目录"""
        if project.version is not None:
            return self.deps_dir / f"{project.name}-{project.version}"
        ref = project.head_tags[0] if project.head_tags else "head"
        return self.deps_dir / f"{project.name}-#{ref}"
