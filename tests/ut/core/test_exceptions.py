"""异常体系与 describe() 测试"""

from __future__ import annotations

import pytest

from depot.core.exceptions import (
    ConfigError,
    DepotError,
    LockNotFoundError,
    LockWriteError,
    MaterializationError,
    ProjectNotFoundError,
    UnknownNameError,
    UnsatisfiableRequirementError,
    ValidationError,
    describe,
)


class TestExceptions:
    def test_hierarchy(self) -> None:
        assert issubclass(ProjectNotFoundError, ConfigError)
        for cls in (ConfigError, UnknownNameError, MaterializationError, LockNotFoundError):
            assert issubclass(cls, DepotError)

    def test_codes_distinct(self) -> None:
        codes = {
            ConfigError.code, ProjectNotFoundError.code, UnsatisfiableRequirementError.code,
            UnknownNameError.code, MaterializationError.code, LockNotFoundError.code,
            LockWriteError.code, ValidationError.code,
        }
        assert len(codes) == 8

    def test_structured_fields(self) -> None:
        e = MaterializationError("克隆", "https://x/y", "denied")
        assert (e.action, e.target, e.detail) == ("克隆", "https://x/y", "denied")


class TestDescribe:
    @pytest.mark.parametrize("error, fragment", [
        (ProjectNotFoundError("/tmp/x"), "找不到项目清单"),
        (ConfigError("坏了", path="package.yml"), "package.yml"),
        (UnsatisfiableRequirementError("bump >= 9"), "`bump >= 9`"),
        (UnknownNameError("cligen"), "`cligen`"),
        (MaterializationError("检出", "bump", "dirty"), "无法检出 bump: dirty"),
        (LockNotFoundError("ci"), "`ci`"),
        (LockWriteError("ci", "disk full"), "disk full"),
        (ValidationError("bad", ["a", "b"]), "  - b"),
    ])
    def test_each_kind(self, error: DepotError, fragment: str) -> None:
        assert fragment in describe(error)

    def test_project_not_found_before_config(self) -> None:
        assert "配置错误" not in describe(ProjectNotFoundError("/"))

    def test_base_error_falls_back_to_code(self) -> None:
        assert describe(DepotError("x")) == "UNKNOWN: x"
