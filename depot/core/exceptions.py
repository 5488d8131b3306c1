"""统一异常体系

所有业务异常继承 DepotError，每种错误携带各自的结构化字段。
describe() 按错误种类逐一格式化，CLI 与日志共用同一套文案。
"""

from __future__ import annotations


class DepotError(Exception):
    """depot 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(DepotError):
    """配置或包清单缺失、无法解析"""

    code = "CONFIG_ERROR"

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class ProjectNotFoundError(ConfigError):
    """从当前目录向上找不到包清单"""

    code = "PROJECT_NOT_FOUND"

    def __init__(self, start: str) -> None:
        super().__init__(f"找不到项目清单: {start}", path=start)
        self.start = start


class UnsatisfiableRequirementError(DepotError):
    """本地与远端都没有满足版本范围的候选"""

    code = "UNSATISFIABLE"

    def __init__(self, requirement: str) -> None:
        super().__init__(f"无法满足依赖: {requirement}")
        self.requirement = requirement


class UnknownNameError(DepotError):
    """按名称在已解析依赖组中查找失败"""

    code = "UNKNOWN_NAME"

    def __init__(self, name: str) -> None:
        super().__init__(f"依赖中找不到: {name}")
        self.name = name


class MaterializationError(DepotError):
    """clone / checkout / 重定位 / 远端改写失败"""

    code = "MATERIALIZATION_FAILED"

    def __init__(self, action: str, target: str, detail: str = "") -> None:
        super().__init__(f"{action} 失败: {target}" + (f": {detail}" if detail else ""))
        self.action = action
        self.target = target
        self.detail = detail


class LockNotFoundError(DepotError):
    """指定名称的锁不存在"""

    code = "LOCK_NOT_FOUND"

    def __init__(self, name: str) -> None:
        super().__init__(f"锁不存在: {name}")
        self.name = name


class LockWriteError(DepotError):
    """锁记录无法写入"""

    code = "LOCK_WRITE_FAILED"

    def __init__(self, name: str, detail: str = "") -> None:
        super().__init__(f"无法写入锁 {name}: {detail}")
        self.name = name
        self.detail = detail


class ValidationError(DepotError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class ExecutionError(DepotError):
    """外部命令执行失败"""

    code = "EXECUTION_ERROR"


def describe(error: DepotError) -> str:
    """生成面向用户的错误描述"""
    if isinstance(error, ProjectNotFoundError):
        return f"在 {error.start} 及其上级目录中找不到项目清单；先创建 package.yml？"
    if isinstance(error, ConfigError):
        where = f" ({error.path})" if error.path else ""
        return f"配置错误{where}: {error}"
    if isinstance(error, UnsatisfiableRequirementError):
        return f"没有任何已安装或可获取的包满足 `{error.requirement}`"
    if isinstance(error, UnknownNameError):
        return f"在已安装的依赖中找不到 `{error.name}`"
    if isinstance(error, MaterializationError):
        detail = f": {error.detail}" if error.detail else ""
        return f"无法{error.action} {error.target}{detail}"
    if isinstance(error, LockNotFoundError):
        return f"没有名为 `{error.name}` 的锁"
    if isinstance(error, LockWriteError):
        return f"无法写入锁 `{error.name}`: {error.detail}"
    if isinstance(error, ValidationError):
        extra = "".join(f"\n  - {d}" for d in error.details)
        return f"输入无效: {error}{extra}"
    if isinstance(error, ExecutionError):
        return f"命令执行失败: {error}"
    return f"{error.code}: {error}"
