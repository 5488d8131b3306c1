"""depot - 源码包依赖管理工具

解析项目的传递依赖图，将依赖包以 Git 工作副本的形式落地到本地，
并支持把解析结果锁定为可复现的命名快照（lock room）。
"""

__version__ = "0.4.0"
