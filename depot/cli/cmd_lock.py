"""CLI - 锁定命令"""

from __future__ import annotations

import click

from depot.cli import _finish, _resolve, _svc


def register(group: click.Group) -> None:
    group.add_command(lock)
    group.add_command(unlock)


def _dump_locks() -> None:
    names = _svc().locker.list_locks()
    if not names:
        click.echo("还没有任何锁。")
        return
    click.echo("已有的锁:")
    for name in names:
        click.echo(f"  {name}")


@click.command()
@click.argument("words", nargs=-1)
def lock(words: tuple[str, ...]) -> None:
    """把当前依赖的精确引用保存为命名锁（多个词以空格连接为锁名）"""
    name = " ".join(words).strip()
    if not name:
        _dump_locks()
        click.echo("请给出锁名", err=True)
        _finish(False)

    svc, project, group, _ok = _resolve()
    if svc.locker.lock(group, name):
        click.echo(f"已锁定 {project} 为 `{name}`")
        _finish(True)
    else:
        _finish(False)


@click.command()
@click.argument("words", nargs=-1)
def unlock(words: tuple[str, ...]) -> None:
    """把依赖恢复到命名锁中记录的引用；不给锁名时列出所有锁"""
    name = " ".join(words).strip()
    if not name:
        _dump_locks()
        return

    svc, project, group, _ok = _resolve()
    if svc.locker.unlock(name, group):
        click.echo(f"已按 `{name}` 恢复 {project}")
        _finish(True)
    else:
        _finish(False)
