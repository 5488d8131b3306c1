"""服务容器：按项目根目录与配置懒加载各组件

依赖关系（→ 表示依赖）:
  materializer → workspace
  resolver     → workspace, materializer
  upgrader     → materializer
  locker       → workspace, materializer

每个组件拿到 "depot" 下各自的子 logger。

用法:
    container = ServiceContainer(Config.from_file(root / "depot.yml"), root)
    group, ok = container.resolver.resolve(container.workspace.root_project())
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from depot.utils.logger import get_logger

if TYPE_CHECKING:
    from depot.core.config import Config
    from depot.core.dep.resolver import DependencyResolver
    from depot.core.locker import LockManager
    from depot.core.upgrade import UpgradeEngine
    from depot.services.git.materialize import Materializer
    from depot.services.hub import GitHubClient
    from depot.services.workspace import Workspace

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器，同一容器内的组件共享工作区缓存"""

    def __init__(self, config: Config | None = None, root: Path | None = None) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from depot.core.config import get_config
            config = get_config()
        self._config = config
        self._root = Path(root) if root is not None else Path.cwd()

    @property
    def config(self) -> Config:
        return self._config

    @property
    def root(self) -> Path:
        return self._root

    @property
    def workspace(self) -> Workspace:
        if "workspace" not in self._instances:
            from depot.core.manifest import ManifestReader
            from depot.services.workspace import Workspace
            self._instances["workspace"] = Workspace(
                root=self._root,
                deps_dir=self._config.deps_path(self._root),
                reader=ManifestReader(self._config.manifest_file),
                managed_marker=self._config.managed_marker,
                remotes=self._config.remotes,
                remote_name=self._config.remote_name,
                git_timeout=self._config.git_timeout,
            )
        return self._instances["workspace"]  # type: ignore[return-value]

    @property
    def materializer(self) -> Materializer:
        if "materializer" not in self._instances:
            from depot.services.git.materialize import Materializer
            self._instances["materializer"] = Materializer(
                self.workspace,
                remote_name=self._config.remote_name,
                upstream_remote=self._config.upstream_remote,
                owner=self._config.owner,
                logger=get_logger("materialize"),
            )
        return self._instances["materializer"]  # type: ignore[return-value]

    @property
    def resolver(self) -> DependencyResolver:
        if "resolver" not in self._instances:
            from depot.core.dep.resolver import DependencyResolver
            self._instances["resolver"] = DependencyResolver(
                self.workspace,
                self.materializer,
                toolchain=self._config.compiler_names,
                logger=get_logger("resolver"),
            )
        return self._instances["resolver"]  # type: ignore[return-value]

    @property
    def upgrader(self) -> UpgradeEngine:
        if "upgrader" not in self._instances:
            from depot.core.upgrade import UpgradeEngine
            self._instances["upgrader"] = UpgradeEngine(
                self.materializer,
                toolchain=self._config.compiler_names,
                logger=get_logger("upgrade"),
            )
        return self._instances["upgrader"]  # type: ignore[return-value]

    @property
    def locker(self) -> LockManager:
        if "locker" not in self._instances:
            from depot.core.locker import LockManager, LockRegistry
            self._instances["locker"] = LockManager(
                LockRegistry(self._config.locks_path(self._root)),
                self.workspace,
                self.materializer,
                logger=get_logger("locker"),
            )
        return self._instances["locker"]  # type: ignore[return-value]

    @property
    def hub(self) -> GitHubClient:
        if "hub" not in self._instances:
            from depot.services.hub import GitHubClient
            self._instances["hub"] = GitHubClient(
                api=self._config.github_api,
                token_env=self._config.github_token_env,
                logger=get_logger("hub"),
            )
        return self._instances["hub"]  # type: ignore[return-value]
