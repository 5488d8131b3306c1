"""共享测试夹具：本地包目录与一次性 Git 仓库"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest
import yaml


def write_manifest(
    directory: Path, name: str, version: str | None = None, requires: Iterable[str] = (),
) -> Path:
    """写入 package.yml，版本号一律按字符串保存"""
    directory.mkdir(parents=True, exist_ok=True)
    data: dict = {"name": name}
    if version is not None:
        data["version"] = version
    data["requires"] = list(requires)
    path = directory / "package.yml"
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


def git(path: Path, *args: str) -> str:
    r = subprocess.run(["git", *args], cwd=str(path), capture_output=True, text=True, check=True)
    return r.stdout.strip()


@pytest.fixture()
def git_identity(monkeypatch, tmp_path):
    """隔离用户级 git 配置并提供提交身份；没有 git 时跳过"""
    if shutil.which("git") is None:
        pytest.skip("需要 git")
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "depot-test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "depot@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "depot-test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "depot@example.com")


class PackageRepo:
    """一个带发布标签的上游仓库，每个版本一次提交"""

    def __init__(self, path: Path, name: str, requires: Iterable[str] = ()) -> None:
        self.path = path
        self.name = name
        self.requires = list(requires)
        path.mkdir(parents=True)
        git(path, "init", "--quiet")
        git(path, "symbolic-ref", "HEAD", "refs/heads/main")

    def release(self, version: str, tag: str | None = None) -> str:
        """提交该版本的清单并打标签，返回提交哈希"""
        write_manifest(self.path, self.name, version, self.requires)
        git(self.path, "add", "package.yml")
        git(self.path, "commit", "--quiet", "-m", f"release {version}")
        git(self.path, "tag", tag or f"v{version}")
        return git(self.path, "rev-parse", "HEAD")

    @property
    def url(self) -> str:
        return str(self.path)


@pytest.fixture()
def package_repo(tmp_path, git_identity) -> Callable[..., PackageRepo]:
    """创建上游仓库: package_repo("bump", ["1.0.0", "1.5.0"])"""

    def _make(name: str, versions: Iterable[str] = (), requires: Iterable[str] = ()) -> PackageRepo:
        repo = PackageRepo(tmp_path / "remotes" / name, name, requires)
        for v in versions:
            repo.release(v)
        return repo

    return _make


@pytest.fixture()
def app_root(tmp_path) -> Callable[..., Path]:
    """创建根项目: app_root(["bump >= 1.0.0 & < 2.0.0"], remotes={...})"""

    def _make(requires: Iterable[str] = (), name: str = "app", **config) -> Path:
        root = tmp_path / name
        write_manifest(root, name, "0.1.0", requires)
        if config:
            (root / "depot.yml").write_text(yaml.safe_dump(config), encoding="utf-8")
        return root

    return _make


@pytest.fixture()
def make_pkg() -> Callable[..., Path]:
    """写入包清单: make_pkg(dir, "name", "1.0.0", ["dep"])"""
    return write_manifest


@pytest.fixture()
def run_git() -> Callable[..., str]:
    """在指定目录执行 git 并返回标准输出"""
    return git
