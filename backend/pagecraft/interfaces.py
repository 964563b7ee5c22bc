"""
模块接口契约 - 定义各模块的抽象接口

设计原则：
1. 模块间通过接口通信，不直接依赖具体实现
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换

使用方式：
    from pagecraft.interfaces import IChartRasterizer

    class MyRasterizer(IChartRasterizer):
        async def rasterize(self, spec, width, height) -> bytes:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .export.operations import ElementPlan
    from .models import ChartSpec, DocumentModel


# ============================================================================
# 导出模块接口
# ============================================================================

class IChartRasterizer(ABC):
    """图表栅格化接口 - 将图表规格渲染为PNG"""

    @abstractmethod
    async def rasterize(self, spec: ChartSpec, width: float, height: float) -> bytes:
        """
        栅格化单个图表

        Args:
            spec: 图表规格
            width: 元素宽度（pt）
            height: 元素高度（pt）

        Returns:
            PNG字节流

        Raises:
            ChartSpecError: 图表规格无法渲染
        """
        ...

    @property
    @abstractmethod
    def active_surfaces(self) -> int:
        """当前尚未释放的临时绘图面数量"""
        ...


class IExportRenderer(ABC):
    """导出渲染器接口 - 消费同一份绘制计划"""

    @abstractmethod
    def render(self, plans: list[ElementPlan]) -> object:
        """
        渲染绘制计划

        Args:
            plans: 按z-order排列的元素绘制计划

        Returns:
            渲染结果（二进制渲染器为协程，脚本渲染器为字符串）
        """
        ...


class IDesignStore(ABC):
    """设计文件存取接口"""

    @abstractmethod
    def save(self, document: DocumentModel, path: Path) -> Path:
        """保存设计文件"""
        ...

    @abstractmethod
    def load(self, path: Path, document: DocumentModel) -> bool:
        """
        加载设计文件

        Args:
            path: 设计文件路径
            document: 目标文档（成功时整体替换）

        Returns:
            是否加载成功（失败时文档保持原状）
        """
        ...


class IArtifactStore(ABC):
    """导出产物存储接口"""

    @abstractmethod
    def publish(self, data: bytes, suffix: str = ".pdf") -> str:
        """发布临时预览，返回引用URL"""
        ...

    @abstractmethod
    def revoke(self, url: str) -> bool:
        """撤销临时预览"""
        ...

    @abstractmethod
    def save(self, data: bytes, path: Path) -> Path:
        """保存产物到指定路径（下载）"""
        ...


# ============================================================================
# 异常定义
# ============================================================================

class PageCraftError(Exception):
    """基础异常"""
    pass


class RenderError(PageCraftError):
    """单元素渲染错误（可恢复，元素跳过）"""
    pass


class ChartSpecError(RenderError):
    """图表规格错误"""
    pass


class ImageResolveError(RenderError):
    """图片引用无法解析"""
    pass


class DesignLoadError(PageCraftError):
    """设计文件加载错误"""
    pass


class PageStateError(PageCraftError):
    """页面写入器状态错误（致命，不捕获）"""
    pass


class ExportError(PageCraftError):
    """导出错误"""
    pass
