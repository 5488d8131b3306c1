"""依赖需求：包名 + 以 AND 组合的版本范围子句

语法:
    identity [#release] [clause {& clause}]

    identity  包名或 clone URL
    release   固定到某个标签 / 分支 / head / 提交前缀
    clause    ==1.0  >=1.0  >1.0  <=1.0  <1.0  ~=1.2 (~1.2)  ^=1.2 (^1.2)
              1.0（精确）  *（任意）  1.2.*（通配）

    子句之间用 & 或逗号分隔，例如 "bump >= 1.2.0 & < 2.0.0"。

没有子句的需求被任何版本满足。所有判定都是纯函数。
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from depot.core.version import Version, latest, parse_version
from depot.utils.net import is_clone_url, slug_from_url


class Operator(str, Enum):
    """基本比较运算符（~ ^ 通配在解析时展开成这些）"""

    EQ = "=="
    GE = ">="
    GT = ">"
    LE = "<="
    LT = "<"


_UPPER_BOUNDS = (Operator.LT, Operator.LE, Operator.EQ)


@dataclass(frozen=True)
class Clause:
    """单个范围子句"""

    op: Operator
    version: Version

    def __str__(self) -> str:
        return f"{self.op.value} {self.version}"

    def holds(self, version: Version) -> bool:
        if self.op is Operator.EQ:
            return version == self.version
        if self.op is Operator.GE:
            return version >= self.version
        if self.op is Operator.GT:
            return version > self.version
        if self.op is Operator.LE:
            return version <= self.version
        return version < self.version


@dataclass(frozen=True)
class Requirement:
    """一条依赖需求

    相等性是语法层面的：identity、子句、release 都相同才视为同一需求。
    text 保留原始写法，用于日志和锁文件。
    """

    identity: str
    clauses: tuple[Clause, ...] = ()
    release: str = ""
    text: str = field(default="", compare=False)

    def __str__(self) -> str:
        return self.text or self.render()

    def render(self) -> str:
        out = self.identity
        if self.release:
            out += f"#{self.release}"
        if self.clauses:
            out += " " + " & ".join(str(c) for c in self.clauses)
        return out

    @property
    def is_url(self) -> bool:
        return is_clone_url(self.identity)

    @property
    def name(self) -> str:
        """包名（URL 需求取 URL 末段）"""
        return slug_from_url(self.identity) if self.is_url else self.identity

    @property
    def url(self) -> str:
        return self.identity if self.is_url else ""

    @property
    def is_pinned(self) -> bool:
        return bool(self.release)

    def satisfies(self, version: Version | None) -> bool:
        return satisfies(version, self)

    def matches_name(self, name: str) -> bool:
        return same_name(self.name, name)


def same_name(a: str, b: str) -> bool:
    """包名比较：忽略大小写，- 与 _ 等价"""
    return _fold(a) == _fold(b)


def _fold(name: str) -> str:
    return name.lower().replace("-", "_")


# ---------------------------------------------------------------------------
# 解析
# ---------------------------------------------------------------------------

_REQ_RE = re.compile(
    r"^\s*(?P<identity>[^\s<>=~^#&,*!]+)"
    r"(?:\s*#(?P<release>[^\s&,]+))?"
    r"\s*(?P<rest>.*?)\s*$"
)
_CLAUSE_RE = re.compile(r"^(?P<op>==|>=|<=|~=|\^=|=|>|<|~|\^)?\s*(?P<version>\S+)$")
_SEPARATORS = re.compile(r"\s*(?:&|,)\s*")


def parse_requirement(text: str) -> Requirement:
    """解析需求字符串

    Raises:
        ValueError: 语法错误或版本号非法
    """
    m = _REQ_RE.match(text)
    identity = m.group("identity").rstrip("@") if m else ""
    if not identity:
        raise ValueError(f"非法依赖需求: '{text}'")
    clauses: list[Clause] = []
    rest = m.group("rest")
    if rest:
        for piece in _SEPARATORS.split(rest):
            if piece:
                clauses.extend(parse_clause(piece))
    return Requirement(
        identity=identity,
        clauses=tuple(clauses),
        release=m.group("release") or "",
        text=" ".join(text.split()),
    )


def parse_clause(text: str) -> list[Clause]:
    """把一个子句展开为若干基本子句"""
    text = text.strip()
    if text == "*":
        return []
    m = _CLAUSE_RE.match(text)
    if not m:
        raise ValueError(f"非法版本子句: '{text}'")
    op = m.group("op") or "=="
    raw = m.group("version")

    if raw.endswith(".*"):
        if op not in ("==", "="):
            raise ValueError(f"通配符只能用于精确匹配: '{text}'")
        base = parse_version(raw[:-2])
        return [Clause(Operator.GE, base), Clause(Operator.LT, base.bump(len(base.parts) - 1))]

    version = parse_version(raw)
    if op in ("~=", "~"):
        index = max(len(version.parts) - 2, 0)
        return [Clause(Operator.GE, version), Clause(Operator.LT, version.bump(index))]
    if op in ("^=", "^"):
        return [Clause(Operator.GE, version), Clause(Operator.LT, version.bump(_caret_index(version)))]
    if op == "=":
        op = "=="
    return [Clause(Operator(op), version)]


def _caret_index(version: Version) -> int:
    """^ 锁定第一个非零分量"""
    for i, part in enumerate(version.parts):
        if part != 0:
            return i
    return len(version.parts) - 1


# ---------------------------------------------------------------------------
# 判定
# ---------------------------------------------------------------------------

def satisfies(version: Version | None, requirement: Requirement) -> bool:
    """所有子句都成立；无子句的需求恒真，未知版本只满足无子句需求"""
    if not requirement.clauses:
        return True
    if version is None:
        return False
    return all(c.holds(version) for c in requirement.clauses)


def latest_satisfying(candidates: Iterable[Version], requirement: Requirement) -> Version | None:
    """满足需求的最大版本"""
    return latest(v for v in candidates if satisfies(v, requirement))


def ceiling(requirement: Requirement) -> Version | None:
    """需求隐含的最紧上界（来自 < <= == 子句）"""
    return min(
        (c.version for c in requirement.clauses if c.op in _UPPER_BOUNDS),
        default=None,
    )
