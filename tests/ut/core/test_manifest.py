"""包清单读取测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from depot.core.exceptions import ConfigError
from depot.core.manifest import ManifestReader
from depot.core.version import parse_version


@pytest.fixture()
def reader() -> ManifestReader:
    return ManifestReader()


class TestPackageYml:
    def test_read(self, tmp_path: Path, reader: ManifestReader, make_pkg) -> None:
        make_pkg(tmp_path, "app", "0.3.0", ["bump >= 1.0", "cligen"])
        m = reader.read(tmp_path)
        assert m is not None
        assert m.name == "app"
        assert m.version == parse_version("0.3.0")
        assert [r.name for r in m.requires] == ["bump", "cligen"]

    def test_missing_returns_none(self, tmp_path: Path, reader: ManifestReader) -> None:
        assert reader.read(tmp_path) is None

    def test_name_defaults_to_directory(self, tmp_path: Path, reader: ManifestReader) -> None:
        pkg = tmp_path / "unnamed"
        pkg.mkdir()
        (pkg / "package.yml").write_text("version: '1.0'\n", encoding="utf-8")
        assert reader.read(pkg).name == "unnamed"

    def test_bad_requirement(self, tmp_path: Path, reader: ManifestReader, make_pkg) -> None:
        make_pkg(tmp_path, "app", "1.0", [">= 1.0"])
        with pytest.raises(ConfigError):
            reader.read(tmp_path)

    def test_requires_not_a_list(self, tmp_path: Path, reader: ManifestReader) -> None:
        (tmp_path / "package.yml").write_text("name: app\nrequires: bump\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="列表"):
            reader.read(tmp_path)

    def test_bad_yaml(self, tmp_path: Path, reader: ManifestReader) -> None:
        (tmp_path / "package.yml").write_text("name: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            reader.read(tmp_path)

    def test_bad_version(self, tmp_path: Path, reader: ManifestReader, make_pkg) -> None:
        make_pkg(tmp_path, "app", "one.two")
        with pytest.raises(ConfigError):
            reader.read(tmp_path)

    def test_unquoted_float_version_rejected(self, tmp_path: Path, reader: ManifestReader) -> None:
        (tmp_path / "package.yml").write_text("name: bump\nversion: 1.10\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="引号"):
            reader.read(tmp_path)

    def test_unquoted_int_version_accepted(self, tmp_path: Path, reader: ManifestReader) -> None:
        (tmp_path / "package.yml").write_text("name: bump\nversion: 2\n", encoding="utf-8")
        assert reader.read(tmp_path).version == parse_version("2")

    def test_quoted_version_kept_exact(self, tmp_path: Path, reader: ManifestReader) -> None:
        (tmp_path / "package.yml").write_text("name: bump\nversion: '1.10'\n", encoding="utf-8")
        assert reader.read(tmp_path).version == parse_version("1.10")

    def test_non_string_requirement_rejected(self, tmp_path: Path, reader: ManifestReader) -> None:
        (tmp_path / "package.yml").write_text("name: app\nrequires:\n  - 1.5\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="引号"):
            reader.read(tmp_path)


class TestNimble:
    def test_read(self, tmp_path: Path, reader: ManifestReader) -> None:
        (tmp_path / "bump.nimble").write_text(
            'version = "1.8.0"\n'
            'author = "someone"\n'
            'requires "nim >= 1.0.0", "cligen >= 0.9.40 & < 2.0.0"\n'
            'requires "https://github.com/disruptek/cutelog"\n',
            encoding="utf-8",
        )
        m = reader.read(tmp_path)
        assert m.name == "bump"
        assert m.version == parse_version("1.8.0")
        assert [r.name for r in m.requires] == ["nim", "cligen", "cutelog"]

    def test_package_yml_wins(self, tmp_path: Path, reader: ManifestReader, make_pkg) -> None:
        (tmp_path / "other.nimble").write_text('version = "9.9"\n', encoding="utf-8")
        make_pkg(tmp_path, "app", "1.0")
        assert reader.read(tmp_path).name == "app"

    def test_custom_manifest_file(self, tmp_path: Path) -> None:
        (tmp_path / "depot.pkg.yml").write_text("name: custom\n", encoding="utf-8")
        assert ManifestReader("depot.pkg.yml").read(tmp_path).name == "custom"
