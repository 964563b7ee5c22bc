"""
导出模块 - 文档模型 → 绘制计划 → PDF / 脚本

子模块：
- operations: 绘制操作中间表示与写入器调用映射
- planner: 绘制规划器
- images: 图片引用解析
- charts: 图表栅格化
- binary: 二进制渲染器（分叉-汇合）
- recipe: 脚本渲染器
"""

from .operations import (
    ChartOp,
    DrawOp,
    ElementPlan,
    ImageOp,
    LineOp,
    RectOp,
    TextOp,
    WriterCall,
    writer_calls,
)
from .images import ResolvedImage, resolve_image_reference
from .charts import MatplotlibChartRasterizer, rasterize_chart
from .planner import DrawPlanner
from .binary import BinaryRenderer
from .recipe import RecipeRenderer, format_call

__all__ = [
    "ChartOp",
    "DrawOp",
    "ElementPlan",
    "ImageOp",
    "LineOp",
    "RectOp",
    "TextOp",
    "WriterCall",
    "writer_calls",
    "ResolvedImage",
    "resolve_image_reference",
    "MatplotlibChartRasterizer",
    "rasterize_chart",
    "DrawPlanner",
    "BinaryRenderer",
    "RecipeRenderer",
    "format_call",
]
