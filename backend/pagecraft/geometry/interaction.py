"""
画布交互控制器 - 消费外部拖拽事件并规范化到文档空间

职责：
1. 放置事件：无id时按模板插入新元素，有id时移动已有元素
2. 移动事件：实时移动
3. 缩放事件：右下角跟随指针（吸附、最小尺寸、页面边界）
4. 维护容器矩形与用户缩放

容器尺寸为0的事件、过期元素id均忽略。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from ..config import get_config
from ..models.element import ElementBase, ElementType, Position
from ..models.view import ContainerRect, ViewTransform
from . import transforms

if TYPE_CHECKING:
    from ..models.document import DocumentModel

logger = logging.getLogger(__name__)


class ScreenPoint(BaseModel):
    """屏幕坐标（px）"""
    x: float
    y: float


class DropEvent(BaseModel):
    """放置事件"""
    element_id: str | None = None
    type: ElementType
    content: Any = None
    screen_position: ScreenPoint
    style: dict[str, Any] = {}


class MoveEvent(BaseModel):
    """移动事件"""
    element_id: str
    screen_position: ScreenPoint


class ResizeEvent(BaseModel):
    """缩放事件（指针位置即右下角）"""
    element_id: str
    screen_position: ScreenPoint


class CanvasController:
    """画布交互控制器"""

    def __init__(
        self,
        document: DocumentModel,
        container_rect: ContainerRect | None = None,
        zoom: float = 1.0,
        snap: bool | None = None,
    ):
        config = get_config()
        self.document = document
        self.base_grid_px = config.canvas.base_grid_px
        self.zoom_min = config.canvas.zoom_min
        self.zoom_max = config.canvas.zoom_max
        self.snap = config.canvas.snap_enabled if snap is None else snap
        self.container_rect = container_rect or ContainerRect()
        self.zoom = transforms.clamp_zoom(zoom, self.zoom_min, self.zoom_max)

    # === 视图 ===

    def set_container_rect(self, rect: ContainerRect) -> None:
        if rect.is_empty:
            logger.debug("忽略尺寸为0的容器")
            return
        self.container_rect = rect

    def set_zoom(self, zoom: float) -> float:
        self.zoom = transforms.clamp_zoom(zoom, self.zoom_min, self.zoom_max)
        return self.zoom

    @property
    def view(self) -> ViewTransform:
        return transforms.compute_view_transform(
            self.document.paper_dimensions,
            zoom=self.zoom,
            zoom_min=self.zoom_min,
            zoom_max=self.zoom_max,
        )

    def fitted_container(self, left: float = 0.0, top: float = 0.0) -> ContainerRect:
        """按当前视图变换得到的容器矩形"""
        view = self.view
        return ContainerRect(
            left=left, top=top, width=view.display_width, height=view.display_height
        )

    @property
    def scale(self) -> float:
        """实际屏幕/文档比例：容器非空时取容器宽/纸宽，否则取视图变换"""
        if not self.container_rect.is_empty:
            return self.container_rect.width / self.document.paper_dimensions.width
        return self.view.scale

    @property
    def grid_size(self) -> float:
        """网格大小（文档单位）"""
        return transforms.grid_size_for_scale(self.base_grid_px, self.scale)

    # === 事件 ===

    def handle_drop(self, event: DropEvent) -> ElementBase | None:
        """处理放置事件"""
        point = self._normalize(event.screen_position)
        if point is None:
            return None

        if event.element_id:
            if not self.document.move_element(event.element_id, point.x, point.y):
                return None
            return self.document.get_element(event.element_id)

        return self.document.add_element(
            event.type,
            content=event.content,
            position=point,
            **event.style,
        )

    def handle_move(self, event: MoveEvent) -> ElementBase | None:
        """处理移动事件"""
        point = self._normalize(event.screen_position)
        if point is None:
            return None
        if not self.document.move_element(event.element_id, point.x, point.y):
            return None
        return self.document.get_element(event.element_id)

    def handle_resize(self, event: ResizeEvent) -> ElementBase | None:
        """处理缩放事件"""
        element = self.document.get_element(event.element_id)
        point = self._normalize(event.screen_position)
        if element is None or point is None:
            return None
        width = self._snap(point.x - element.position.x)
        height = self._snap(point.y - element.position.y)
        self.document.resize_element(element.id, width, height)
        return element

    # === 内部 ===

    def _normalize(self, screen: ScreenPoint) -> Position | None:
        point = transforms.to_document_coordinates(
            screen.x, screen.y, self.container_rect, self.document.paper_dimensions
        )
        if point is None:
            logger.debug("容器尺寸为0，忽略事件")
            return None
        return Position(x=self._snap(point.x), y=self._snap(point.y))

    def _snap(self, value: float) -> float:
        if not self.snap:
            return value
        return transforms.snap_to_grid(value, self.grid_size)
