"""
几何变换 - 屏幕像素空间与文档点空间之间的纯函数

职责：
1. 屏幕坐标 → 文档坐标（按容器尺寸等比换算，取整到pt）
2. 文档坐标 → 屏幕坐标（逆变换）
3. 位置约束（矩形完全落在纸张内）与尺寸约束
4. 网格吸附（网格在屏幕上的视觉大小不随缩放变化）
5. 纸张方向切换时的位置重映射

所有函数不抛异常，越界请求直接约束。

测试要点：
- test_clamp_inside_paper: 约束后矩形在页面内
- test_round_trip_within_one_point: 正逆变换误差≤1pt
- test_snap_constant_visual_grid: 不同缩放下网格视觉大小不变
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..models.element import Position
from ..models.paper import PaperDimensions
from ..models.view import ContainerRect, ViewTransform

if TYPE_CHECKING:
    from ..models.element import ElementBase

ZOOM_MIN = 0.5
ZOOM_MAX = 2.0


def to_document_coordinates(
    screen_x: float,
    screen_y: float,
    container_rect: ContainerRect,
    paper_dims: PaperDimensions,
) -> Position | None:
    """
    屏幕坐标转文档坐标

    point = (screen - 容器原点) / 容器尺寸 × 纸张尺寸，取整

    Returns:
        文档坐标；容器尺寸为0时返回None（忽略该事件）
    """
    if container_rect.is_empty:
        return None
    rel_x = screen_x - container_rect.left
    rel_y = screen_y - container_rect.top
    return Position(
        x=round(rel_x / container_rect.width * paper_dims.width),
        y=round(rel_y / container_rect.height * paper_dims.height),
    )


def to_screen_coordinates(
    x: float,
    y: float,
    container_rect: ContainerRect,
    paper_dims: PaperDimensions,
) -> tuple[float, float]:
    """文档坐标转屏幕坐标（to_document_coordinates 的逆变换）"""
    return (
        container_rect.left + x / paper_dims.width * container_rect.width,
        container_rect.top + y / paper_dims.height * container_rect.height,
    )


def clamp_to_paper(
    x: float,
    y: float,
    width: float,
    height: float,
    paper_dims: PaperDimensions,
) -> Position:
    """
    约束位置使矩形完全落在页面内

    矩形比页面还大时贴靠原点。
    """
    max_x = max(0.0, paper_dims.width - width)
    max_y = max(0.0, paper_dims.height - height)
    return Position(
        x=min(max(0.0, x), max_x),
        y=min(max(0.0, y), max_y),
    )


def fit_size_to_paper(
    width: float,
    height: float,
    min_size: tuple[float, float],
    paper_dims: PaperDimensions,
) -> tuple[float, float]:
    """尺寸约束到 [最小尺寸, 纸张尺寸]"""
    min_w, min_h = min_size
    return (
        min(max(width, min_w), paper_dims.width),
        min(max(height, min_h), paper_dims.height),
    )


def snap_to_grid(value: float, grid_size: float) -> float:
    """吸附到最近的网格倍数（网格≤0时原样返回）"""
    if grid_size <= 0:
        return value
    return round(value / grid_size) * grid_size


def grid_size_for_scale(base_grid_pixels: float, scale: float) -> float:
    """当前缩放下的网格大小（文档单位）"""
    if scale <= 0:
        return base_grid_pixels
    return base_grid_pixels / scale


def clamp_zoom(zoom: float, minimum: float = ZOOM_MIN, maximum: float = ZOOM_MAX) -> float:
    return min(max(zoom, minimum), maximum)


def compute_view_transform(
    paper_dims: PaperDimensions,
    viewport_width: float | None = None,
    viewport_height: float | None = None,
    zoom: float = 1.0,
    zoom_min: float = ZOOM_MIN,
    zoom_max: float = ZOOM_MAX,
) -> ViewTransform:
    """
    计算视图变换

    适配缩放 = min(视口宽/纸宽, 视口高/纸高)，未给出视口时为1；
    最终缩放 = 适配缩放 × 用户缩放（约束到[zoom_min, zoom_max]）
    """
    fit = 1.0
    if viewport_width and viewport_height and viewport_width > 0 and viewport_height > 0:
        fit = min(viewport_width / paper_dims.width, viewport_height / paper_dims.height)
    scale = fit * clamp_zoom(zoom, zoom_min, zoom_max)
    return ViewTransform(
        scale=scale,
        display_width=paper_dims.width * scale,
        display_height=paper_dims.height * scale,
    )


def remap_on_orientation_change(
    element: ElementBase,
    old_paper: PaperDimensions,
    new_paper: PaperDimensions,
) -> Position:
    """
    纸张变化时重映射元素位置

    宽高互换（方向切换）时按比例交换x/y；否则各轴按比例缩放。
    宽高本身不交换，也不在此处约束到页面内。
    """
    x, y = element.position.x, element.position.y
    if new_paper.is_swap_of(old_paper):
        return Position(
            x=round(y / old_paper.height * new_paper.width),
            y=round(x / old_paper.width * new_paper.height),
        )
    return Position(
        x=round(x / old_paper.width * new_paper.width),
        y=round(y / old_paper.height * new_paper.height),
    )
