"""
图表栅格化 - 图表规格 → PNG（matplotlib，不经过pyplot）

职责：
1. 按元素尺寸与DPI分配临时 Figure（离屏绘图面）
2. 绘制 bar / line / pie / doughnut
3. 导出PNG快照，finally 中释放 Figure
4. 异步接口：渲染在工作线程执行，多个图表互不阻塞

测试要点：
- test_rasterize_bar_png: 输出为PNG
- test_rasterize_releases_surface: 渲染后绘图面数量归零
- test_pie_negative_values: 非法数据抛ChartSpecError
"""

from __future__ import annotations

import asyncio
import logging
import threading
from io import BytesIO
from typing import Any

from matplotlib.axes import Axes
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from ..config import get_config
from ..interfaces import ChartSpecError, IChartRasterizer
from ..models.chart import ChartSpec
from ..writer.colors import to_rgba

logger = logging.getLogger(__name__)

PT_PER_INCH = 72.0


def rasterize_chart(
    spec: ChartSpec | dict | str,
    width: float,
    height: float,
    dpi: int | None = None,
) -> bytes:
    """
    同步栅格化图表

    Args:
        spec: 图表规格（对象/字典/JSON文本）
        width/height: 元素尺寸（pt）
        dpi: 输出分辨率

    Returns:
        PNG字节流

    Raises:
        ChartSpecError: 规格非法或数据无法绘制
    """
    spec = ChartSpec.parse(spec)
    if width <= 0 or height <= 0:
        raise ChartSpecError(f"图表尺寸无效: {width}x{height}")
    dpi = dpi or get_config().export.chart_dpi

    fig = Figure(figsize=(width / PT_PER_INCH, height / PT_PER_INCH), dpi=dpi)
    try:
        FigureCanvasAgg(fig)
        ax = fig.add_subplot(1, 1, 1)
        chart_type = spec.resolved_chart_type()
        try:
            if chart_type in ("pie", "doughnut"):
                _draw_pie(ax, spec, doughnut=chart_type == "doughnut")
            elif chart_type == "line":
                _draw_line(ax, spec)
            else:
                _draw_bar(ax, spec)
            _apply_options(ax, spec, chart_type)
            fig.tight_layout(pad=0.4)
            buffer = BytesIO()
            fig.savefig(buffer, format="png", dpi=dpi)
        except (ValueError, TypeError) as e:
            raise ChartSpecError(f"图表数据无法绘制: {e}") from e
        return buffer.getvalue()
    finally:
        fig.clear()


class MatplotlibChartRasterizer(IChartRasterizer):
    """matplotlib 图表栅格化器"""

    def __init__(self, dpi: int | None = None):
        self.dpi = dpi or get_config().export.chart_dpi
        self._active = 0
        self._lock = threading.Lock()

    @property
    def active_surfaces(self) -> int:
        return self._active

    async def rasterize(self, spec: ChartSpec, width: float, height: float) -> bytes:
        return await asyncio.to_thread(self._render, spec, width, height)

    def _render(self, spec: ChartSpec, width: float, height: float) -> bytes:
        with self._lock:
            self._active += 1
        try:
            return rasterize_chart(spec, width, height, self.dpi)
        finally:
            with self._lock:
                self._active -= 1


# === 绘制 ===

def _draw_bar(ax: Axes, spec: ChartSpec) -> None:
    count = _category_count(spec)
    datasets = spec.datasets
    slot = 0.8 / len(datasets)
    for i, dataset in enumerate(datasets):
        values = _padded(dataset.data, count)
        offset = -0.4 + slot * (i + 0.5)
        ax.bar(
            [p + offset for p in range(count)],
            values,
            width=slot,
            label=dataset.label,
            color=_colors(dataset.background_color, count),
            edgecolor=_colors(dataset.border_color, count),
            linewidth=dataset.border_width or 0,
        )
    _set_categories(ax, spec, count)


def _draw_line(ax: Axes, spec: ChartSpec) -> None:
    count = _category_count(spec)
    for dataset in spec.datasets:
        color = _first_color(dataset.border_color) or _first_color(dataset.background_color)
        ax.plot(
            range(count),
            _padded(dataset.data, count),
            label=dataset.label,
            color=color,
            linewidth=dataset.border_width or 2,
            marker="o",
            markersize=3,
        )
    _set_categories(ax, spec, count)


def _draw_pie(ax: Axes, spec: ChartSpec, doughnut: bool) -> None:
    # 仅绘制首个数据集
    dataset = spec.datasets[0]
    values = list(dataset.data)
    if not values or any(v < 0 for v in values) or sum(values) <= 0:
        raise ChartSpecError("饼图数据必须为非负且总和大于0")
    labels = _padded_labels(spec.labels, len(values))
    wedgeprops: dict[str, Any] = {"linewidth": dataset.border_width or 0}
    edge = _first_color(dataset.border_color)
    if edge:
        wedgeprops["edgecolor"] = edge
    if doughnut:
        wedgeprops["width"] = 0.5
    ax.pie(
        values,
        labels=labels,
        colors=_colors(dataset.background_color, len(values)),
        wedgeprops=wedgeprops,
        textprops={"fontsize": 7},
    )
    ax.set_aspect("equal")


def _apply_options(ax: Axes, spec: ChartSpec, chart_type: str) -> None:
    """chart.js 风格 options 中可映射的部分：标题、图例、y轴起点"""
    plugins = spec.options.get("plugins") or {}
    title = plugins.get("title") or {}
    if title.get("display", True) and title.get("text"):
        ax.set_title(str(title["text"]), fontsize=9)

    legend = plugins.get("legend") or {}
    has_labels = any(d.label for d in spec.datasets)
    default_legend = chart_type not in ("pie", "doughnut") and has_labels
    if legend.get("display", default_legend) and has_labels:
        ax.legend(fontsize=7, frameon=False)

    if chart_type in ("bar", "line"):
        y_scale = ((spec.options.get("scales") or {}).get("y")) or {}
        if y_scale.get("beginAtZero"):
            ax.set_ylim(bottom=0)
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        ax.tick_params(labelsize=7)


# === 工具 ===

def _category_count(spec: ChartSpec) -> int:
    return max([len(spec.labels)] + [len(d.data) for d in spec.datasets])


def _padded(values: list[float], count: int) -> list[float]:
    return list(values) + [0.0] * (count - len(values))


def _padded_labels(labels: list[str], count: int) -> list[str]:
    return [labels[i] if i < len(labels) else "" for i in range(count)]


def _set_categories(ax: Axes, spec: ChartSpec, count: int) -> None:
    ax.set_xticks(range(count))
    ax.set_xticklabels(_padded_labels(spec.labels, count))


def _colors(value: str | list[str] | None, count: int) -> list | None:
    """颜色（单值或逐项列表）→ matplotlib颜色列表，未指定时使用默认配色"""
    if value is None:
        return None
    items = value if isinstance(value, list) else [value]
    resolved = [to_rgba(v) or (0.0, 0.0, 0.0, 0.0) for v in items]
    if not resolved:
        return None
    return [resolved[i % len(resolved)] for i in range(count)]


def _first_color(value: str | list[str] | None) -> tuple | None:
    if not value:
        return None
    first = value[0] if isinstance(value, list) else value
    return to_rgba(first)
