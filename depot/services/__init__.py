"""服务层：Git 落地、工作区扫描、GitHub 客户端、服务容器"""
