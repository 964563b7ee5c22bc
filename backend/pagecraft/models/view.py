"""
视图变换模型 - 屏幕像素与文档坐标之间的缩放关系

派生数据，不持久化。
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ContainerRect(BaseModel):
    """画布容器在屏幕上的矩形（px）"""
    model_config = ConfigDict(frozen=True)

    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


class ViewTransform(BaseModel):
    """视图变换"""
    model_config = ConfigDict(frozen=True)

    scale: float
    display_width: float
    display_height: float
