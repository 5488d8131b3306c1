"""配置加载测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from depot.core.config import Config, get_config, init_config
from depot.core.exceptions import ConfigError


class TestConfig:
    def test_defaults_when_missing(self, tmp_path: Path) -> None:
        cfg = Config.from_file(tmp_path / "depot.yml")
        assert cfg.deps_dir == "deps/pkgs"
        assert cfg.locks_file == "locks.yml"
        assert "nim" in cfg.compiler_names

    def test_known_and_extra_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "depot.yml"
        path.write_text(
            "deps_dir: vendor\nremotes:\n  bump: https://github.com/disruptek/bump\nflavor: x\n",
            encoding="utf-8",
        )
        cfg = Config.from_file(path)
        assert cfg.deps_dir == "vendor"
        assert cfg.remotes == {"bump": "https://github.com/disruptek/bump"}
        assert cfg.extra == {"flavor": "x"}

    def test_bad_remotes(self, tmp_path: Path) -> None:
        path = tmp_path / "depot.yml"
        path.write_text("remotes: [a, b]\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="remotes"):
            Config.from_file(path)

    def test_bad_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "depot.yml"
        path.write_text("deps_dir: [oops\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            Config.from_file(path)

    def test_paths_relative_to_root(self, tmp_path: Path) -> None:
        cfg = Config()
        assert cfg.deps_path(tmp_path) == tmp_path / "deps" / "pkgs"
        assert cfg.locks_path(tmp_path) == tmp_path / "locks.yml"
        cfg.deps_dir = str(tmp_path / "abs")
        assert cfg.deps_path(Path("/elsewhere")) == tmp_path / "abs"

    def test_owner_falls_back_to_env(self, monkeypatch) -> None:
        monkeypatch.setenv("GITHUB_USER", "someone")
        assert Config().owner == "someone"
        assert Config(github_owner="me").owner == "me"

    def test_init_config_sets_global(self, tmp_path: Path) -> None:
        path = tmp_path / "depot.yml"
        path.write_text("git_timeout: 5\n", encoding="utf-8")
        assert init_config(path).git_timeout == 5
        assert get_config().git_timeout == 5
