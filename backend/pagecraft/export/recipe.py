"""
脚本渲染器 - 把绘制计划写成页面写入器调用语句

与二进制渲染器消费同一份绘制操作（writer_calls），
每个影响像素的分支（类型、对齐、阴影、圆角）都对应一条语句。
图片写成 resolve_image_reference(...) 调用，图表写成 rasterize_chart(...) 调用。
跳过的元素输出为注释。
"""

from __future__ import annotations

import logging

from ..interfaces import IExportRenderer
from ..models.paper import Paper
from .operations import ChartOp, DrawOp, ElementPlan, Expr, ImageOp, WriterCall, writer_calls

logger = logging.getLogger(__name__)

RECIPE_HEADER = """\
# PageCraft 导出脚本（自动生成）
from pagecraft.export import rasterize_chart, resolve_image_reference
from pagecraft.models import Paper
from pagecraft.writer import PageWriter
"""


class RecipeRenderer(IExportRenderer):
    """脚本渲染器"""

    def __init__(self, paper: Paper, output_name: str = "document.pdf"):
        self.paper = paper
        self.output_name = output_name

    def render(self, plans: list[ElementPlan]) -> str:
        lines = [
            RECIPE_HEADER,
            f"writer = PageWriter(Paper(size={self.paper.size.value!r}, "
            f"orientation={self.paper.orientation.value!r}))",
            "writer.init_page(header=False, footer=False)",
        ]
        for plan in plans:
            lines.append("")
            lines.append(f"# [{plan.index}] {plan.element_type} {plan.element_id}")
            if plan.skipped:
                reason = " ".join((plan.skipped_reason or "").split())
                lines.append(f"# 跳过: {reason}")
                continue
            for op in plan.ops:
                for call in writer_calls(op, image=self._image_expr(op)):
                    lines.append(format_call(call))

        lines.append("")
        lines.append(f"writer.export({self.output_name!r})")
        logger.debug(f"脚本生成完成: {len(plans)} 个元素")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _image_expr(op: DrawOp) -> Expr | None:
        if isinstance(op, ChartOp):
            return Expr(
                f"rasterize_chart({op.spec.to_json()!r}, {op.width!r}, {op.height!r})"
            )
        if isinstance(op, ImageOp):
            if op.source is None:
                return Expr(repr(op.data))
            return Expr(f"resolve_image_reference({op.source!r}).data")
        return None


def format_call(call: WriterCall, target: str = "writer") -> str:
    """WriterCall → Python语句"""
    parts = [repr(arg) for arg in call.args]
    parts.extend(f"{key}={value!r}" for key, value in call.kwargs.items())
    return f"{target}.{call.method}({', '.join(parts)})"
