"""Git 命令封装

所有调用都经过 CommandExecutor；失败统一抛 MaterializationError，
由上层 Materializer 记录并转换为布尔结果。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from depot.core.exceptions import MaterializationError
from depot.utils.shell import CommandExecutor, CommandResult, get_executor

logger = logging.getLogger(__name__)


def _git_env() -> dict[str, str]:
    # 禁止交互式认证提示，避免 clone 私有仓库时卡住
    return {**os.environ, "GIT_TERMINAL_PROMPT": "0"}


class GitRepo:
    """单个 Git 工作副本"""

    def __init__(
        self,
        path: Path,
        executor: CommandExecutor | None = None,
        timeout: int | None = None,
    ) -> None:
        self.path = Path(path)
        self.executor = executor or get_executor()
        self.timeout = timeout

    @classmethod
    def clone(
        cls,
        url: str,
        dest: Path,
        executor: CommandExecutor | None = None,
        timeout: int | None = None,
    ) -> GitRepo:
        """完整 clone（需要全部标签与历史才能在版本间切换）"""
        executor = executor or get_executor()
        dest.parent.mkdir(parents=True, exist_ok=True)
        r = executor.execute(
            ["git", "clone", "--quiet", url, str(dest)],
            cwd=str(dest.parent), env=_git_env(), timeout=timeout,
        )
        if not r.ok:
            raise MaterializationError("克隆", url, r.stderr.strip()[:300])
        logger.debug("已克隆 %s -> %s", url, dest)
        return cls(dest, executor, timeout)

    def _run(self, *args: str) -> CommandResult:
        return self.executor.execute(
            ["git", *args], cwd=str(self.path), env=_git_env(), timeout=self.timeout,
        )

    def _check(self, action: str, *args: str) -> str:
        r = self._run(*args)
        if not r.ok:
            raise MaterializationError(action, str(self.path), r.stderr.strip()[:300])
        return r.stdout

    # ---- 查询 ----

    def head(self) -> str:
        """HEAD 完整提交哈希；空仓库返回空串"""
        r = self._run("rev-parse", "--verify", "--quiet", "HEAD")
        return r.stdout.strip() if r.ok else ""

    def tags(self) -> dict[str, str]:
        """标签名 -> 指向的提交（附注标签取解引用后的提交）"""
        out = self._check(
            "读取标签", "for-each-ref",
            "--format=%(refname:strip=2)\t%(objectname)\t%(*objectname)", "refs/tags",
        )
        result: dict[str, str] = {}
        for line in out.splitlines():
            parts = line.split("\t")
            if len(parts) < 2 or not parts[0]:
                continue
            peeled = parts[2] if len(parts) > 2 and parts[2] else parts[1]
            result[parts[0]] = peeled
        return result

    def current_ref(self) -> str:
        """当前分支名；分离 HEAD 时为提交哈希"""
        r = self._run("symbolic-ref", "--short", "-q", "HEAD")
        return r.stdout.strip() if r.ok and r.stdout.strip() else self.head()

    def remote_url(self, name: str) -> str:
        r = self._run("remote", "get-url", name)
        return r.stdout.strip() if r.ok else ""

    def remotes(self) -> list[str]:
        return self._check("读取远端", "remote").split()

    def is_dirty(self) -> bool:
        """已跟踪文件是否有未提交修改"""
        return bool(self._check("读取状态", "status", "--porcelain", "--untracked-files=no").strip())

    # ---- 修改 ----

    def fetch_tags(self, remote: str) -> None:
        self._check("拉取标签", "fetch", "--quiet", "--tags", remote)

    def checkout(self, ref: str) -> None:
        if self.is_dirty():
            raise MaterializationError("检出", str(self.path), "工作副本有未提交的修改")
        self._check("检出", "-c", "advice.detachedHead=false", "checkout", "--quiet", ref)

    def set_remote(self, name: str, url: str) -> None:
        """存在则改 URL，不存在则新增"""
        if name in self.remotes():
            self._check("改写远端", "remote", "set-url", name, url)
        else:
            self._check("添加远端", "remote", "add", name, url)

    def rename_remote(self, old: str, new: str) -> None:
        self._check("重命名远端", "remote", "rename", old, new)
