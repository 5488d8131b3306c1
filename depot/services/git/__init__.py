"""Git 服务模块

拆分说明:
- repo.py: git 命令封装（查询 / 检出 / 远端）
- materialize.py: 依赖工作副本落地（克隆、滚动版本、重定位、远端提升）
"""

from depot.services.git.materialize import Materializer
from depot.services.git.repo import GitRepo

__all__ = [
    "GitRepo",
    "Materializer",
]
