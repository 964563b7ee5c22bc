"""
图层模块 - 元素绘制顺序

子模块：
- order: 图层顺序管理器
"""

from .order import StackOrderManager

__all__ = ["StackOrderManager"]
