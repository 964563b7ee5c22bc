"""
几何引擎 - 屏幕空间与文档空间的换算

子模块：
- transforms: 纯函数坐标变换、约束、网格吸附、方向重映射
- interaction: 拖拽事件规范化与画布控制器
"""

from .transforms import (
    clamp_to_paper,
    clamp_zoom,
    compute_view_transform,
    fit_size_to_paper,
    grid_size_for_scale,
    remap_on_orientation_change,
    snap_to_grid,
    to_document_coordinates,
    to_screen_coordinates,
)
from .interaction import CanvasController, DropEvent, MoveEvent, ResizeEvent, ScreenPoint

__all__ = [
    "clamp_to_paper",
    "clamp_zoom",
    "compute_view_transform",
    "fit_size_to_paper",
    "grid_size_for_scale",
    "remap_on_orientation_change",
    "snap_to_grid",
    "to_document_coordinates",
    "to_screen_coordinates",
    "CanvasController",
    "DropEvent",
    "MoveEvent",
    "ResizeEvent",
    "ScreenPoint",
]
