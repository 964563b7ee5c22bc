"""
持久化模块 - 设计文件读写

子模块：
- design_store: 设计文件存取
"""

from .design_store import DESIGN_VERSION, DesignStore

__all__ = ["DESIGN_VERSION", "DesignStore"]
