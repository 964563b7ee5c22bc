"""
页面写入器模块 - reportlab 之上的文档坐标绘制接口

子模块：
- page_writer: 页面写入器
- fonts: CSS字体 → 标准14字体
- colors: CSS颜色解析
"""

from .colors import parse_color, to_color, to_rgba
from .fonts import resolve_font, text_width
from .page_writer import PageWriter

__all__ = [
    "PageWriter",
    "parse_color",
    "to_color",
    "to_rgba",
    "resolve_font",
    "text_width",
]
