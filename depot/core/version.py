"""版本号解析与比较

版本是由数字 / 字母数字分量组成的有序元组，来源于包清单或 Git 标签：
- 数字分量按数值比较，字母数字分量排在同位置的任何数字之后、彼此按字典序
- 缺失的尾部分量视为 0，因此 1.2 == 1.2.0 < 1.2.1
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Union

Component = Union[int, str]

_VERSION_RE = re.compile(r"^[vV]?(\d+(?:\.[0-9A-Za-z]+)*)$")

# 形如 v1.2.3、1.2.3、pkg-1.2.3、pkg_v1.2 的发布标签
_TAG_RE = re.compile(r"^(?:[A-Za-z][\w-]*?[-_])?[vV]?(\d+(?:\.[0-9A-Za-z]+)*)$")

_ZERO_KEY = (0, 0, "")


def _key(part: Component) -> tuple[int, int, str]:
    if isinstance(part, int):
        return (0, part, "")
    return (1, 0, part)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """不可变版本号"""

    parts: tuple[Component, ...]

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)

    def __repr__(self) -> str:
        return f"Version('{self}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) == 0

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) < 0

    def __hash__(self) -> int:
        return hash(self.normalized())

    def normalized(self) -> tuple[Component, ...]:
        """去掉尾部 0 分量后的元组（与相等性一致）"""
        parts = list(self.parts)
        while parts and parts[-1] == 0:
            parts.pop()
        return tuple(parts)

    def bump(self, index: int) -> Version:
        """第 index 个数字分量加一，之后的分量截断

        >>> str(Version.parse("1.4.2").bump(1))
        '1.5'
        """
        parts = [p if isinstance(p, int) else 0 for p in self.parts[: index + 1]]
        while len(parts) <= index:
            parts.append(0)
        parts[index] += 1
        return Version(tuple(parts))

    @classmethod
    def parse(cls, text: str) -> Version:
        return parse_version(text)


def _component(piece: str) -> Component:
    return int(piece) if piece.isdigit() else piece.lower()


def parse_version(text: str) -> Version:
    """解析版本字符串（允许前缀 v）

    Raises:
        ValueError: 不是合法版本号
    """
    m = _VERSION_RE.match(text.strip())
    if not m:
        raise ValueError(f"非法版本号: '{text}'")
    return Version(tuple(_component(p) for p in m.group(1).split(".")))


def version_from_tag(tag: str) -> Version | None:
    """从发布标签提取版本；不像发布版本的标签返回 None"""
    m = _TAG_RE.match(tag.strip())
    if not m:
        return None
    return Version(tuple(_component(p) for p in m.group(1).split(".")))


def compare(a: Version, b: Version) -> int:
    """逐分量比较，返回 -1 / 0 / 1"""
    width = max(len(a.parts), len(b.parts))
    for i in range(width):
        ka = _key(a.parts[i]) if i < len(a.parts) else _ZERO_KEY
        kb = _key(b.parts[i]) if i < len(b.parts) else _ZERO_KEY
        if ka != kb:
            return -1 if ka < kb else 1
    return 0


def latest(versions: Iterable[Version]) -> Version | None:
    """最大版本，空集合返回 None"""
    return max(versions, default=None)
