"""网络工具 - URL 判定与校验"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from depot.core.exceptions import ValidationError

_HTTP_SCHEMES = frozenset(("http", "https"))
_CLONE_SCHEMES = frozenset(("http", "https", "git", "ssh", "file"))

# scp 风格: git@github.com:owner/repo.git
_SCP_RE = re.compile(r"^[\w.-]+@[\w.-]+:[\w./~-]+$")


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 API 请求 URL 仅使用 http/https

    Raises:
        ValidationError: URL scheme 不在白名单内
    """
    parsed = urlparse(url)
    if parsed.scheme not in _HTTP_SCHEMES:
        label = f" ({context})" if context else ""
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，仅支持 http/https: {url}"
        )


def is_clone_url(text: str) -> bool:
    """判断字符串是否可作为 git clone 的远端地址"""
    if _SCP_RE.match(text):
        return True
    parsed = urlparse(text)
    return parsed.scheme in _CLONE_SCHEMES and bool(parsed.netloc or parsed.path)


def slug_from_url(url: str) -> str:
    """从 URL 路径末段推导包名

    >>> slug_from_url("https://github.com/owner/Some-Pkg.git")
    'Some-Pkg'
    """
    path = url.split(":", 1)[1] if _SCP_RE.match(url) else urlparse(url).path
    last = path.rstrip("/").rsplit("/", 1)[-1]
    if last.endswith(".git"):
        last = last[: -len(".git")]
    return last


_GITHUB_RE = re.compile(
    r"^(?:https?://github\.com/|git@github\.com:|ssh://git@github\.com/)"
    r"(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+?)(?:\.git)?/?$"
)


def github_coordinates(url: str) -> tuple[str, str] | None:
    """GitHub 远端地址 -> (owner, repo)；不是 GitHub 地址返回 None"""
    m = _GITHUB_RE.match(url.strip())
    if not m:
        return None
    return m.group("owner"), m.group("repo")
