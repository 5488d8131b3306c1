"""版本号解析与比较测试"""

from __future__ import annotations

import pytest

from depot.core.version import Version, compare, latest, parse_version, version_from_tag


def v(text: str) -> Version:
    return parse_version(text)


class TestParse:
    def test_numeric(self) -> None:
        assert v("1.2.3").parts == (1, 2, 3)

    def test_v_prefix(self) -> None:
        assert v("v2.0") == v("2.0")

    def test_alphanumeric_component(self) -> None:
        assert v("1.0.rc1").parts == (1, 0, "rc1")

    @pytest.mark.parametrize("bad", ["", "abc", "1..2", "1.2-beta", " "])
    def test_invalid(self, bad: str) -> None:
        with pytest.raises(ValueError):
            parse_version(bad)

    def test_str(self) -> None:
        assert str(v("0.10.2")) == "0.10.2"


class TestCompare:
    def test_numeric_not_lexical(self) -> None:
        assert v("1.10") > v("1.9")

    def test_missing_components_are_zero(self) -> None:
        assert compare(v("1.2"), v("1.2.0")) == 0
        assert v("1.2") == v("1.2.0")
        assert hash(v("1.2")) == hash(v("1.2.0"))

    def test_fewer_components_less_than_nonzero_tail(self) -> None:
        assert v("1.2") < v("1.2.1")

    def test_alpha_sorts_after_numbers(self) -> None:
        assert v("1.0.9") < v("1.0.rc1")

    def test_total_order(self) -> None:
        versions = [v(t) for t in ["2.0", "0.9", "1.5.0", "1.0", "1.10", "1.5"]]
        ordered = sorted(versions)
        assert [str(x) for x in ordered] == ["0.9", "1.0", "1.5.0", "1.5", "1.10", "2.0"]
        for a in versions:
            for b in versions:
                assert (compare(a, b) < 0) == (compare(b, a) > 0)

    def test_latest(self) -> None:
        assert latest([v("1.0"), v("2.1"), v("2.0.9")]) == v("2.1")
        assert latest([]) is None


class TestBump:
    def test_bump_truncates(self) -> None:
        assert v("1.4.2").bump(1) == v("1.5")

    def test_bump_extends(self) -> None:
        assert v("1").bump(2) == v("1.0.1")


class TestVersionFromTag:
    @pytest.mark.parametrize("tag, expected", [
        ("v1.2.3", "1.2.3"),
        ("1.0", "1.0"),
        ("bump-1.8.0", "1.8.0"),
        ("pkg_v0.3", "0.3"),
    ])
    def test_release_tags(self, tag: str, expected: str) -> None:
        assert version_from_tag(tag) == v(expected)

    @pytest.mark.parametrize("tag", ["latest", "feature/x", "nightly-build"])
    def test_non_release_tags(self, tag: str) -> None:
        assert version_from_tag(tag) is None
