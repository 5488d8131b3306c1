"""CLI - 依赖查询与升级命令"""

from __future__ import annotations

import click

from depot.cli import _finish, _resolve, logger
from depot.core.exceptions import ExecutionError, UnknownNameError, describe
from depot.utils.shell import run_cmd


def register(group: click.Group) -> None:
    group.add_command(path_cmd)
    group.add_command(run_in_deps)
    group.add_command(upgrade)
    group.add_command(outdated)


@click.command(name="path")
@click.argument("names", nargs=-1, required=True)
def path_cmd(names: tuple[str, ...]) -> None:
    """输出依赖的目录（每个名称一行，找不到时输出空行）"""
    _svc, _project, group, _ok = _resolve()
    group.include_root()

    ok = True
    for name in names:
        found = group.path_for_name(name)
        if found is not None:
            click.echo(str(found))
        else:
            logger.error(describe(UnknownNameError(name)))
            click.echo("")
            ok = False
    _finish(ok)


@click.command(name="run", context_settings={"ignore_unknown_options": True})
@click.argument("exe")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def run_in_deps(exe: str, args: tuple[str, ...]) -> None:
    """在每个已解析依赖的目录中执行命令"""
    _svc, _project, group, ok = _resolve()
    for dependency in group.values():
        for child in dependency.ordered():
            try:
                result = run_cmd([exe, *args], cwd=child.path, label=exe)
            except ExecutionError as e:
                logger.error("%s: %s", child.path, describe(e))
                ok = False
                continue
            click.echo(result.stdout, nl=False)
    _finish(ok)


def _upgrade(names: tuple[str, ...], dry_run: bool) -> None:
    svc, project, group, ok = _resolve()
    if not svc.upgrader.upgrade_group(group, names, dry_run=dry_run):
        ok = False
    if ok:
        click.echo(f"{project.name} 已是最新")
    else:
        click.echo(f"{project.name} 未能全部更新")
    _finish(ok)


@click.command()
@click.argument("names", nargs=-1)
@click.option("--dry-run", is_flag=True, help="只报告可用升级，不检出")
def upgrade(names: tuple[str, ...], dry_run: bool) -> None:
    """把 Git 依赖升级到需求范围内的最新发布"""
    _upgrade(names, dry_run)


@click.command()
@click.argument("names", nargs=-1)
def outdated(names: tuple[str, ...]) -> None:
    """列出可用升级（等同 upgrade --dry-run）"""
    _upgrade(names, dry_run=True)
