"""
绘制操作 - 规划器与渲染器之间的中间表示

每个元素被规划为一串绘制操作；二进制渲染器执行它们，
脚本渲染器把它们写成页面写入器调用语句。两者消费同一份操作列表。
坐标均为文档坐标（pt，左上角原点）。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from ..models.chart import ChartSpec


@dataclass(frozen=True)
class TextOp:
    """文本（x/y 为对齐锚点与基线）"""
    content: str
    x: float
    y: float
    font_name: str
    font_size: float
    font_style: str = "normal"
    font_weight: str = "normal"
    align: str = "left"
    color: str = "#000000"
    max_width: float | None = None


@dataclass(frozen=True)
class ImageOp:
    """图片"""
    data: bytes
    x: float
    y: float
    width: float
    height: float
    format: str = "PNG"
    # 原始引用（脚本渲染器输出用）
    source: str | None = None


@dataclass(frozen=True)
class ChartOp:
    """图表（二进制渲染时先栅格化为图片）"""
    spec: ChartSpec
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class RectOp:
    """矩形 / 圆角矩形"""
    x: float
    y: float
    width: float
    height: float
    mode: str = "F"
    fill_color: str | None = None
    stroke_color: str | None = None
    line_width: float = 0.0
    radius: float = 0.0
    dash: tuple[float, ...] | None = None

    @property
    def rounded(self) -> bool:
        return self.radius > 0


@dataclass(frozen=True)
class LineOp:
    """直线"""
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = "#000000"
    line_width: float = 1.0
    dash: tuple[float, ...] | None = None


DrawOp = Union[TextOp, ImageOp, ChartOp, RectOp, LineOp]


@dataclass
class ElementPlan:
    """单个元素的绘制计划"""
    index: int
    element_id: str
    element_type: str
    ops: list[DrawOp] = field(default_factory=list)
    skipped_reason: str | None = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None

    @property
    def has_chart(self) -> bool:
        return any(isinstance(op, ChartOp) for op in self.ops)


class Expr(str):
    """原样输出的表达式（脚本渲染器中代替图片字节）"""

    def __repr__(self) -> str:
        return str(self)


@dataclass(frozen=True)
class WriterCall:
    """一次页面写入器方法调用"""
    method: str
    args: tuple = ()
    kwargs: dict[str, Any] = field(default_factory=dict)


def writer_calls(op: DrawOp, image: Any = None) -> list[WriterCall]:
    """
    绘制操作 → 页面写入器调用序列

    二进制渲染器执行这些调用，脚本渲染器把它们格式化为语句，
    两条路径因此保持一致。

    Args:
        op: 绘制操作
        image: ImageOp/ChartOp 的图片参数（字节或脚本表达式），
            ImageOp 缺省时使用 op.data
    """
    if isinstance(op, TextOp):
        kwargs: dict[str, Any] = {
            "x": op.x,
            "y": op.y,
            "font_name": op.font_name,
            "font_size": op.font_size,
            "font_style": op.font_style,
            "font_weight": op.font_weight,
            "align": op.align,
            "color": op.color,
        }
        if op.max_width is not None:
            kwargs["max_width"] = op.max_width
        return [WriterCall("print_text", (op.content,), kwargs)]

    elif isinstance(op, ImageOp):
        data = op.data if image is None else image
        return [
            WriterCall(
                "add_image",
                (data,),
                {"x": op.x, "y": op.y, "w": op.width, "h": op.height, "format": op.format},
            )
        ]

    elif isinstance(op, ChartOp):
        if image is None:
            raise ValueError("图表需先栅格化")
        return [
            WriterCall(
                "add_image",
                (image,),
                {"x": op.x, "y": op.y, "w": op.width, "h": op.height, "format": "PNG"},
            )
        ]

    elif isinstance(op, RectOp):
        calls: list[WriterCall] = []
        if "S" in op.mode or "D" in op.mode:
            calls.append(WriterCall("set_line_dash", (list(op.dash) if op.dash else None,)))
            calls.append(WriterCall("set_line_width", (op.line_width,)))
            calls.append(WriterCall("set_draw_color", (op.stroke_color,)))
        if "F" in op.mode:
            calls.append(WriterCall("set_fill_color", (op.fill_color,)))
        if op.rounded:
            calls.append(
                WriterCall("rounded_rect", (op.x, op.y, op.width, op.height, op.radius, op.mode))
            )
        else:
            calls.append(WriterCall("rect", (op.x, op.y, op.width, op.height, op.mode)))
        return calls

    elif isinstance(op, LineOp):
        return [
            WriterCall("set_line_dash", (list(op.dash) if op.dash else None,)),
            WriterCall("set_line_width", (op.line_width,)),
            WriterCall("set_draw_color", (op.color,)),
            WriterCall("line", (op.x1, op.y1, op.x2, op.y2)),
        ]

    raise TypeError(f"未知绘制操作: {type(op).__name__}")
