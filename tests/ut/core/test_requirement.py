"""依赖需求解析与判定测试"""

from __future__ import annotations

import pytest

from depot.core.requirement import (
    Operator,
    ceiling,
    latest_satisfying,
    parse_requirement,
    same_name,
    satisfies,
)
from depot.core.version import parse_version


def v(text: str):
    return parse_version(text)


class TestParseRequirement:
    def test_bare_name(self) -> None:
        req = parse_requirement("bump")
        assert req.identity == "bump"
        assert req.clauses == ()
        assert not req.is_pinned

    def test_range(self) -> None:
        req = parse_requirement("bump >= 1.0.0 & < 2.0.0")
        assert req.name == "bump"
        assert [c.op for c in req.clauses] == [Operator.GE, Operator.LT]
        assert str(req) == "bump >= 1.0.0 & < 2.0.0"

    def test_no_space_and_comma(self) -> None:
        req = parse_requirement("foo>=1.2,<1.4")
        assert req.identity == "foo"
        assert req.satisfies(v("1.3"))
        assert not req.satisfies(v("1.4"))

    def test_bare_version_is_exact(self) -> None:
        req = parse_requirement("foo 1.2")
        assert req.satisfies(v("1.2.0"))
        assert not req.satisfies(v("1.2.1"))

    def test_star(self) -> None:
        assert parse_requirement("foo *").clauses == ()

    def test_wildcard(self) -> None:
        req = parse_requirement("foo 1.2.*")
        assert req.satisfies(v("1.2.9"))
        assert not req.satisfies(v("1.3"))

    def test_tilde(self) -> None:
        req = parse_requirement("foo ~= 1.2.3")
        assert req.satisfies(v("1.2.7"))
        assert not req.satisfies(v("1.3.0"))

    def test_caret(self) -> None:
        req = parse_requirement("foo ^1.2")
        assert req.satisfies(v("1.9"))
        assert not req.satisfies(v("2.0"))

    def test_caret_zero_major(self) -> None:
        req = parse_requirement("foo ^0.3.1")
        assert req.satisfies(v("0.3.5"))
        assert not req.satisfies(v("0.4.0"))

    def test_release_pin(self) -> None:
        req = parse_requirement("foo#head")
        assert req.release == "head"
        assert req.is_pinned

    def test_url_identity(self) -> None:
        req = parse_requirement("https://github.com/disruptek/bump.git >= 1.0")
        assert req.is_url
        assert req.name == "bump"
        assert req.url == "https://github.com/disruptek/bump.git"

    def test_syntactic_equality(self) -> None:
        assert parse_requirement("a >= 1") == parse_requirement("a   >=   1")
        assert parse_requirement("a >= 1") != parse_requirement("a >= 1.1")

    @pytest.mark.parametrize("bad", ["", ">= 1.0", "foo >= x.y", "foo >= 1 & ~"])
    def test_invalid(self, bad: str) -> None:
        with pytest.raises(ValueError):
            parse_requirement(bad)


class TestSatisfies:
    def test_no_clauses_accepts_anything(self) -> None:
        req = parse_requirement("foo")
        assert satisfies(v("0.0.1"), req)
        assert satisfies(None, req)

    def test_unknown_version_fails_ranges(self) -> None:
        assert not satisfies(None, parse_requirement("foo >= 1"))

    def test_lower_bound_monotone(self) -> None:
        req = parse_requirement("foo >= 1.2")
        versions = [v(t) for t in ["1.0", "1.2", "1.3", "2.0", "10.0"]]
        passing = [x for x in versions if satisfies(x, req)]
        assert passing == versions[1:]


class TestLatestSatisfying:
    def test_scenario_tags(self) -> None:
        tags = [v(t) for t in ["0.9.0", "1.0.0", "1.5.0", "2.0.0"]]
        req = parse_requirement("bump >= 1.0.0 & < 2.0.0")
        assert latest_satisfying(tags, req) == v("1.5.0")

    def test_none_qualifies(self) -> None:
        assert latest_satisfying([v("0.1")], parse_requirement("bump >= 1")) is None


class TestCeiling:
    def test_tightest_upper_bound(self) -> None:
        assert ceiling(parse_requirement("a < 2.0 & <= 1.8")) == v("1.8")

    def test_open_range(self) -> None:
        assert ceiling(parse_requirement("a >= 1")) is None

    def test_tilde_implies_ceiling(self) -> None:
        assert ceiling(parse_requirement("a ~= 1.4.0")) == v("1.5")


def test_same_name() -> None:
    assert same_name("Foo-Bar", "foo_bar")
    assert not same_name("foo", "foobar")
