"""GitHub API 客户端

只覆盖 clone / fork / search 命令需要的两个接口:
  - GET  /search/repositories?q=...
  - POST /repos/{owner}/{repo}/forks
网络或响应错误记录日志后返回空结果，由调用方决定退出码。
"""

from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any

from depot.core.exceptions import ValidationError, describe
from depot.core.models import Project
from depot.utils.net import github_coordinates, validate_url_scheme

_logger = logging.getLogger(__name__)


@dataclass
class RemoteRepo:
    """远端仓库摘要"""

    name: str
    owner: str
    git: str                 # clone 地址
    web: str                 # 浏览器地址
    description: str = ""
    stars: int = 0
    fork: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RemoteRepo:
        return cls(
            name=str(data.get("name", "")),
            owner=str((data.get("owner") or {}).get("login", "")),
            git=str(data.get("clone_url", "")),
            web=str(data.get("html_url", "")),
            description=str(data.get("description") or ""),
            stars=int(data.get("stargazers_count") or 0),
            fork=bool(data.get("fork", False)),
        )

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


def fork_target(project: Project) -> tuple[str, str] | None:
    """项目 origin 对应的 GitHub (owner, repo)"""
    return github_coordinates(project.url) if project.url else None


class GitHubClient:
    """最小 GitHub REST 客户端"""

    def __init__(
        self,
        api: str = "https://api.github.com",
        token_env: str = "GITHUB_TOKEN",
        *,
        timeout: int = 30,
        logger: logging.Logger | None = None,
    ) -> None:
        self.api = api.rstrip("/")
        self.token_env = token_env
        self.timeout = timeout
        self.log = logger or _logger

    @property
    def token(self) -> str:
        return os.getenv(self.token_env, "")

    def _request(self, path: str, *, method: str = "GET", data: dict | None = None) -> Any:
        url = f"{self.api}{path}"
        validate_url_scheme(url, context="github api")
        body = json.dumps(data).encode("utf-8") if data is not None else None
        req = urllib.request.Request(
            url, data=body, method=method,
            headers={"Accept": "application/vnd.github+json"},
        )
        if body is not None:
            req.add_header("Content-Type", "application/json")
        if self.token:
            req.add_header("Authorization", f"Bearer {self.token}")
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # nosec B310
            return json.loads(resp.read().decode("utf-8"))

    def _call(self, path: str, **kwargs: Any) -> Any:
        """发请求；失败时记录日志并返回 None"""
        try:
            return self._request(path, **kwargs)
        except ValidationError as e:
            self.log.error(describe(e))
        except urllib.error.HTTPError as e:
            self.log.error("GitHub 请求失败 %s: HTTP %s %s", path, e.code, e.reason)
        except urllib.error.URLError as e:
            self.log.error("GitHub 网络错误 %s: %s", path, e.reason)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self.log.error("GitHub 响应格式错误 %s: %s", path, e)
        except OSError as e:
            self.log.error("GitHub 请求失败 %s: %s", path, e)
        return None

    def search(self, query: str, limit: int = 30) -> list[RemoteRepo]:
        """按关键字搜索仓库（按 star 数排序）"""
        query = query.strip()
        if not query:
            return []
        params = urllib.parse.urlencode({"q": query, "sort": "stars", "per_page": limit})
        found = self._call(f"/search/repositories?{params}")
        if not isinstance(found, dict):
            return []
        items = found.get("items") or []
        repos = [RemoteRepo.from_api(i) for i in items if isinstance(i, dict)]
        self.log.debug("搜索 %r 命中 %d 个仓库", query, len(repos))
        return repos

    def fork(self, owner: str, repo: str) -> RemoteRepo | None:
        """在当前令牌对应的账号下 fork 仓库"""
        if not self.token:
            self.log.error("fork 需要 GitHub 令牌，请设置环境变量 %s", self.token_env)
            return None
        created = self._call(
            f"/repos/{urllib.parse.quote(owner)}/{urllib.parse.quote(repo)}/forks",
            method="POST", data={},
        )
        if not isinstance(created, dict):
            return None
        result = RemoteRepo.from_api(created)
        self.log.info("已 fork %s/%s -> %s", owner, repo, result)
        return result
