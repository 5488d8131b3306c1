"""depot 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
退出码: 全部成功为 0；任何名称找不到、任何步骤失败或依赖未满足为 1。
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, NoReturn

import click

from depot import __version__
from depot.core.dep.models import DependencyGroup
from depot.core.exceptions import DepotError, describe
from depot.core.models import Project
from depot.services.container import ServiceContainer
from depot.utils.logger import get_logger, setup_logging

logger = get_logger("cli")


class DepotGroup(click.Group):
    """把业务异常转换为一行错误信息和退出码 1

    其他异常在调试模式（--debug 或 DEPOT_DEBUG=1）下原样抛出，
    否则只显示一条笼统的失败信息。
    """

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except (click.exceptions.Exit, click.ClickException, click.Abort):
            raise
        except DepotError as e:
            click.echo(f"错误: {describe(e)}", err=True)
            ctx.exit(1)
        except Exception:
            if ctx.params.get("debug") or os.getenv("DEPOT_DEBUG", "") == "1":
                raise
            logger.debug("未处理的异常", exc_info=True)
            click.echo("depot 执行失败（设置 DEPOT_DEBUG=1 查看详情）", err=True)
            ctx.exit(1)


class CliState:
    """一次命令调用的上下文：配置路径与懒加载的服务容器"""

    def __init__(self, config_path: str | None = None) -> None:
        self.config_path = config_path
        self._container: ServiceContainer | None = None

    @property
    def container(self) -> ServiceContainer:
        if self._container is None:
            self._container = _build_container(self.config_path)
        return self._container


def _build_container(config_path: str | None) -> ServiceContainer:
    """从当前目录向上定位项目根，加载其中的 depot.yml"""
    from depot.core.config import CONFIG_FILE, Config, init_config
    from depot.core.manifest import ManifestReader
    from depot.services.workspace import Workspace

    manifest_file = Config().manifest_file
    if config_path:
        manifest_file = Config.from_file(config_path).manifest_file
    root = Workspace.find_project(Path.cwd(), ManifestReader(manifest_file))
    cfg = init_config(config_path or root / CONFIG_FILE)
    logger.debug("项目根目录: %s", root)
    return ServiceContainer(config=cfg, root=root)


def _svc() -> ServiceContainer:
    """获取当前调用的服务容器"""
    return click.get_current_context().ensure_object(CliState).container


def _resolve() -> tuple[ServiceContainer, Project, DependencyGroup, bool]:
    """读取根项目并解析依赖；解析不完整只提示，由命令决定退出码"""
    svc = _svc()
    project = svc.workspace.root_project()
    group, ok = svc.resolver.resolve(project)
    if not ok:
        logger.warning("%s 的依赖未能全部满足", project.name)
    return svc, project, group, ok


def _finish(ok: bool) -> NoReturn:
    click.get_current_context().exit(0 if ok else 1)


@click.group(cls=DepotGroup)
@click.version_option(version=__version__)
@click.option(
    "--log-level", default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="日志级别（默认取 DEPOT_LOG_LEVEL，否则 INFO）",
)
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False), help="配置文件路径")
@click.option("--debug", is_flag=True, help="出错时显示完整堆栈")
@click.pass_context
def main(ctx: click.Context, log_level: str | None, config_path: str | None, debug: bool) -> None:
    """depot - 基于 Git 的源码包依赖管理"""
    setup_logging(
        level=log_level or os.getenv("DEPOT_LOG_LEVEL", "INFO"),
        json_output=os.getenv("DEPOT_LOG_JSON", "") == "1",
    )
    ctx.obj = CliState(config_path=config_path)


# 注册各领域子命令
from depot.cli.cmd_deps import register as _reg_deps  # noqa: E402
from depot.cli.cmd_lock import register as _reg_lock  # noqa: E402
from depot.cli.cmd_repo import register as _reg_repo  # noqa: E402

_reg_deps(main)
_reg_lock(main)
_reg_repo(main)
