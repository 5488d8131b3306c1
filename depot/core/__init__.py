"""核心领域：版本、依赖需求、项目模型、解析、升级与锁定"""
