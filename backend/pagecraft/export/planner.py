"""
绘制规划器 - 文档模型 → 按z-order排列的元素绘制计划

职责：
1. 元素按 z_index 升序访问（靠后绘制在上层）
2. 每类元素的版式决策（对齐、基线、内边距、阴影、圆角、分隔线厚度）
3. 单元素失败隔离：规格/图片错误 → 空计划 + 跳过原因

二进制渲染器与脚本渲染器都只消费这里产出的绘制操作，
任何影响像素的分支都只在此处决定一次。

测试要点：
- test_text_alignment_offsets: 左/中/右对齐偏移
- test_card_shadow_before_body: 阴影先于卡片主体
- test_divider_centered: 分隔线垂直居中
- test_malformed_chart_skipped: 非法图表规格跳过
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import get_config
from ..interfaces import RenderError
from ..models.document import DocumentModel
from ..models.element import (
    BoxStyle,
    CardElement,
    ChartElement,
    DividerElement,
    ElementBase,
    ImageElement,
    TextualElementBase,
)
from ..writer.colors import to_color
from ..writer.fonts import text_width
from .images import resolve_image_reference
from .operations import ChartOp, DrawOp, ElementPlan, ImageOp, LineOp, RectOp, TextOp

logger = logging.getLogger(__name__)

# 边框线型 → 虚线样式
BORDER_DASHES: dict[str, tuple[float, ...] | None] = {
    "solid": None,
    "double": None,
    "dashed": (4.0, 2.0),
    "dotted": (1.0, 2.0),
}


class DrawPlanner:
    """绘制规划器"""

    def __init__(self, image_base_dir: str | Path | None = None):
        config = get_config().export
        self.baseline_ratio = config.baseline_ratio
        self.shadow_offset = config.shadow_offset
        self.shadow_color = config.shadow_color
        self.divider_min_thickness = config.divider_min_thickness
        self.image_base_dir = image_base_dir

    def plan(self, document: DocumentModel) -> list[ElementPlan]:
        """按z_index升序生成全部元素的绘制计划"""
        return [
            self.plan_element(index, element)
            for index, element in enumerate(document.sorted_by_z())
        ]

    def plan_element(self, index: int, element: ElementBase) -> ElementPlan:
        """规划单个元素（失败时返回带跳过原因的空计划）"""
        plan = ElementPlan(index=index, element_id=element.id, element_type=element.type)
        try:
            plan.ops = self._ops_for(element)
        except RenderError as e:
            logger.warning(f"元素跳过 [{element.type}] {element.id}: {e}")
            plan.ops = []
            plan.skipped_reason = str(e)
        except Exception as e:
            logger.exception(f"元素规划异常 [{element.type}] {element.id}")
            plan.ops = []
            plan.skipped_reason = f"{type(e).__name__}: {e}"
        return plan

    def _ops_for(self, element: ElementBase) -> list[DrawOp]:
        if isinstance(element, TextualElementBase):
            return self._plan_text(element)
        elif isinstance(element, ImageElement):
            return self._plan_image(element)
        elif isinstance(element, ChartElement):
            return self._plan_chart(element)
        elif isinstance(element, DividerElement):
            return self._plan_divider(element)
        elif isinstance(element, CardElement):
            return self._plan_card(element)
        raise RenderError(f"未知元素类型: {element.type}")

    # === text / title ===

    def _plan_text(self, element: TextualElementBase) -> list[DrawOp]:
        ops: list[DrawOp] = []
        box = self._styled_rect(
            element.position.x, element.position.y, element.width, element.height, element.style
        )
        if box is not None:
            ops.append(box)

        if not element.content:
            return ops

        typo = element.typography
        padding = element.style.padding
        available = max(0.0, element.width - 2 * padding)
        measured = text_width(
            element.content, typo.font_family, typo.font_size, typo.font_style, typo.font_weight
        )

        left = element.position.x + padding
        align = "left"
        if available and measured > available and typo.text_align in ("center", "right"):
            # 折行文本逐行对齐：锚点取内容区中点/右端
            align = typo.text_align
            anchor = left + (available / 2 if align == "center" else available)
        else:
            offset = 0.0
            if typo.text_align == "center":
                offset = (available - measured) / 2
            elif typo.text_align == "right":
                offset = available - measured
            anchor = left + max(0.0, offset)

        ops.append(
            TextOp(
                content=element.content,
                x=anchor,
                align=align,
                y=element.position.y + padding + typo.font_size * self.baseline_ratio,
                font_name=typo.font_family,
                font_size=typo.font_size,
                font_style=typo.font_style,
                font_weight=typo.font_weight,
                color=typo.text_color,
                max_width=available or None,
            )
        )
        return ops

    # === image ===

    def _plan_image(self, element: ImageElement) -> list[DrawOp]:
        image = resolve_image_reference(element.content, self.image_base_dir)
        return [
            ImageOp(
                data=image.data,
                x=element.position.x,
                y=element.position.y,
                width=element.width,
                height=element.height,
                format=image.format,
                source=image.source,
            )
        ]

    # === chart ===

    def _plan_chart(self, element: ChartElement) -> list[DrawOp]:
        spec = element.chart_spec()
        return [
            ChartOp(
                spec=spec,
                x=element.position.x,
                y=element.position.y,
                width=element.width,
                height=element.height,
            )
        ]

    # === divider ===

    def _plan_divider(self, element: DividerElement) -> list[DrawOp]:
        style = element.style
        thickness = max(style.border_width, self.divider_min_thickness)
        thickness = min(thickness, element.height) if element.height > 0 else thickness

        dash = BORDER_DASHES.get(style.border_style)
        if dash:
            # 虚线/点线分隔线以带线宽的虚线绘制
            center_y = element.position.y + element.height / 2
            return [
                LineOp(
                    x1=element.position.x,
                    y1=center_y,
                    x2=element.right,
                    y2=center_y,
                    color=style.border_color,
                    line_width=thickness,
                    dash=dash,
                )
            ]
        return [
            RectOp(
                x=element.position.x,
                y=element.position.y + (element.height - thickness) / 2,
                width=element.width,
                height=thickness,
                mode="F",
                fill_color=style.border_color,
            )
        ]

    # === card ===

    def _plan_card(self, element: CardElement) -> list[DrawOp]:
        style = element.style
        ops: list[DrawOp] = []
        x, y = element.position.x, element.position.y

        if style.shadow:
            ops.append(
                RectOp(
                    x=x + self.shadow_offset,
                    y=y + self.shadow_offset,
                    width=element.width,
                    height=element.height,
                    mode="F",
                    fill_color=self.shadow_color,
                    radius=style.border_radius,
                )
            )

        body = self._styled_rect(x, y, element.width, element.height, style)
        if body is not None:
            ops.append(body)
        return ops

    def _styled_rect(
        self, x: float, y: float, width: float, height: float, style: BoxStyle
    ) -> RectOp | None:
        """
        按盒样式生成矩形

        有背景有边框 FD；仅背景 F；仅边框 S；都没有时不绘制。
        """
        has_fill = to_color(style.background_color) is not None
        has_border = style.has_border
        if has_fill and has_border:
            mode = "FD"
        elif has_fill:
            mode = "F"
        elif has_border:
            mode = "S"
        else:
            return None

        return RectOp(
            x=x,
            y=y,
            width=width,
            height=height,
            mode=mode,
            fill_color=style.background_color if has_fill else None,
            stroke_color=style.border_color if has_border else None,
            line_width=style.border_width if has_border else 0.0,
            radius=style.border_radius,
            dash=BORDER_DASHES.get(style.border_style) if has_border else None,
        )
