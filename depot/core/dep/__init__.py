"""依赖解析模块

拆分说明:
- models.py: Dependency / DependencyGroup 结果模型
- resolver.py: 贪心解析器（本地优先，必要时经 Materializer 获取）
"""

from depot.core.dep.models import Dependency, DependencyGroup
from depot.core.dep.resolver import DependencyResolver

__all__ = [
    "Dependency",
    "DependencyGroup",
    "DependencyResolver",
]
