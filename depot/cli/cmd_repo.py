"""CLI - 远端仓库命令（clone / fork / search）"""

from __future__ import annotations

import click

from depot.cli import _finish, _resolve, _svc, logger
from depot.core.exceptions import UnknownNameError, describe
from depot.core.models import Dist
from depot.services.hub import RemoteRepo, fork_target
from depot.utils.net import is_clone_url, slug_from_url


def register(group: click.Group) -> None:
    group.add_command(clone)
    group.add_command(fork)
    group.add_command(search)


def _render(repo: RemoteRepo) -> str:
    line = f"{repo.web}  ★{repo.stars}"
    if repo.description:
        line += f"\n    {repo.description}"
    return line


@click.command()
@click.argument("query", nargs=-1, required=True)
def search(query: tuple[str, ...]) -> None:
    """在 GitHub 上搜索仓库"""
    repos = _svc().hub.search(" ".join(query))
    if not repos:
        click.echo("没有结果。")
        return
    # 最佳结果放在最后，离提示符最近
    for repo in reversed(repos):
        click.echo(_render(repo))


@click.command()
@click.argument("target", nargs=-1, required=True)
def clone(target: tuple[str, ...]) -> None:
    """克隆一个 URL（或 GitHub 搜索的第一个结果）到依赖目录"""
    svc = _svc()
    project = svc.workspace.root_project()

    url, name = "", ""
    if len(target) == 1 and is_clone_url(target[0]):
        url, name = target[0], slug_from_url(target[0])
    else:
        query = " ".join(target)
        hits = svc.hub.search(query)
        if not hits:
            logger.error("找不到与 `%s` 匹配的仓库", query)
            _finish(False)
        url, name = hits[0].git, hits[0].name

    cloned = svc.materializer.clone(url, name)
    if cloned is None:
        _finish(False)

    # 重新解析，找出新包对应的需求并滚动到满足它的版本
    group, _ok = svc.resolver.resolve(project)
    needed = group.project_for_path(cloned.path)
    if needed is not None:
        cloned = needed
    rolled = False
    requirement = group.req_for_project(cloned) if needed is not None else None
    if requirement is not None:
        rolled = svc.materializer.roll_towards(cloned, requirement)
        if rolled:
            logger.info("%s 已滚动到 %s", cloned.name, cloned.version)
        else:
            logger.warning("%s 无法满足 %s", cloned, requirement)
    if not rolled and not svc.materializer.relocate(cloned):
        _finish(False)

    if not svc.materializer.promote(cloned):
        logger.debug("%s 的远端未改为 SSH", cloned.name)
    click.echo(str(cloned.path))


@click.command()
@click.argument("names", nargs=-1, required=True)
def fork(names: tuple[str, ...]) -> None:
    """在 GitHub 上 fork 依赖，并把 origin 指向新 fork"""
    svc, _project, group, _ok = _resolve()
    ok = True
    for name in names:
        child = group.project_for_name(name)
        if child is None:
            logger.error(describe(UnknownNameError(name)))
            ok = False
            continue
        coords = fork_target(child)
        if coords is None:
            logger.error("%s 的远端不是 GitHub 仓库: %s", child.name, child.url or "(无)")
            ok = False
            continue
        logger.info("正在 fork %s", child)
        forked = svc.hub.fork(*coords)
        if forked is None:
            ok = False
            continue
        click.echo(forked.web)
        if child.dist is Dist.GIT and not svc.materializer.promote_remote_like(child, forked.git):
            logger.warning("无法把 %s 指向新 fork", svc.config.remote_name)
    _finish(ok)
