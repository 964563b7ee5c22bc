"""
文档模型 - 元素集合 + 纸张配置

职责：
1. 元素插入（默认值来自模板目录）、移动、缩放、样式补丁、删除
2. 纸张规格/方向切换（元素重映射后重新约束到页面内）
3. 维护不变量：z_index 为 [0..N-1] 的稠密排列且与列表顺序一致；
   元素矩形始终位于纸张内；宽高不低于类型最小值

列表位置即绘制顺序（靠后的元素绘制在上层）。
所有变更同步完成，过期id直接忽略。

测试要点：
- test_add_element_defaults: 模板默认值
- test_add_element_clamped: 插入位置约束
- test_move_stale_id: 过期id忽略
- test_orientation_flip: 方向切换尺寸互换
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr, ValidationError
from pydantic.alias_generators import to_snake

from ..config import TemplateCatalog, get_config, load_catalog
from ..config.catalog import BOX_STYLE_KEYS, TYPOGRAPHY_KEYS
from ..geometry import transforms
from .chart import ChartSpec
from .element import Element, ElementBase, ElementType, Position, make_element
from .paper import Orientation, Paper, PaperDimensions, PaperSize

logger = logging.getLogger(__name__)


class DocumentModel(BaseModel):
    """文档模型"""

    paper: Paper = Field(default_factory=Paper)
    elements: list[Element] = Field(default_factory=list)

    _catalog: TemplateCatalog | None = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        self.renumber()

    # === 基础访问 ===

    @property
    def catalog(self) -> TemplateCatalog:
        if self._catalog is None:
            self._catalog = load_catalog(get_config().catalog_path)
        return self._catalog

    def use_catalog(self, catalog: TemplateCatalog) -> DocumentModel:
        """指定模板目录"""
        self._catalog = catalog
        return self

    @property
    def paper_dimensions(self) -> PaperDimensions:
        return self.paper.dimensions

    def get_element(self, element_id: str) -> ElementBase | None:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def index_of(self, element_id: str) -> int | None:
        for i, element in enumerate(self.elements):
            if element.id == element_id:
                return i
        return None

    def sorted_by_z(self) -> list[ElementBase]:
        """按z_index升序（稳定排序）"""
        return sorted(self.elements, key=lambda e: e.z_index)

    def renumber(self) -> None:
        """z_index 重新编号为列表下标"""
        for i, element in enumerate(self.elements):
            element.z_index = i

    # === 元素变更 ===

    def add_element(
        self,
        element_type: ElementType | str,
        content: Any = None,
        position: Position | tuple[float, float] | None = None,
        width: float | None = None,
        height: float | None = None,
        **style: Any,
    ) -> ElementBase:
        """
        插入元素

        Args:
            element_type: 元素类型
            content: 内容（None时取模板内容）
            position: 文档坐标（pt）
            width/height: 尺寸（None时取模板尺寸）
            **style: 排版/盒样式覆盖（fontSize、backgroundColor等）

        Returns:
            新元素（z_index = 插入前元素数）
        """
        etype = ElementType(element_type)
        template = self.catalog.template_for(etype.value, content)
        fallback = self.catalog.fallback_size

        typography: dict[str, Any] = template.typography_defaults() if template else {}
        box_style: dict[str, Any] = template.style_defaults() if template else {}
        for raw_key, value in style.items():
            if value is None:
                continue
            key = to_snake(raw_key)
            if key in TYPOGRAPHY_KEYS:
                typography[key] = value
            elif key in BOX_STYLE_KEYS:
                box_style[key] = value
            else:
                logger.debug(f"忽略未知样式字段: {raw_key}")

        if content is None:
            content = template.content if template else ""

        fields: dict[str, Any] = {
            "width": width or (template.width if template and template.width else fallback.width),
            "height": height or (template.height if template and template.height else fallback.height),
            "style": box_style,
        }
        if etype in (ElementType.TEXT, ElementType.TITLE):
            fields["typography"] = typography
        if etype != ElementType.DIVIDER:
            fields["content"] = self._coerce_content(etype, content)

        element = make_element(etype, **fields)
        if isinstance(position, tuple):
            position = Position(x=position[0], y=position[1])
        element.position = position or Position()
        self._normalize(element)
        element.z_index = len(self.elements)
        self.elements.append(element)
        logger.debug(f"插入元素: {etype.value} {element.id} z={element.z_index}")
        return element

    def move_element(self, element_id: str, x: float, y: float) -> bool:
        """移动元素（约束到页面内）"""
        element = self.get_element(element_id)
        if element is None:
            logger.debug(f"移动忽略过期元素: {element_id}")
            return False
        dims = self.paper_dimensions
        element.position = transforms.clamp_to_paper(x, y, element.width, element.height, dims)
        return True

    def resize_element(self, element_id: str, width: float, height: float) -> bool:
        """缩放元素（不低于最小尺寸、不超出页面）"""
        element = self.get_element(element_id)
        if element is None:
            logger.debug(f"缩放忽略过期元素: {element_id}")
            return False
        element.width = width
        element.height = height
        self._normalize(element)
        return True

    def update_element_style(self, element_id: str, patch: dict[str, Any]) -> bool:
        """应用样式补丁"""
        element = self.get_element(element_id)
        if element is None:
            logger.debug(f"样式补丁忽略过期元素: {element_id}")
            return False
        return bool(element.apply_patch(patch))

    def delete_element(self, element_id: str) -> bool:
        """删除元素"""
        index = self.index_of(element_id)
        if index is None:
            return False
        del self.elements[index]
        self.renumber()
        return True

    # === 纸张 ===

    def set_paper_size(self, size: PaperSize | str) -> None:
        self._change_paper(self.paper.with_size(size))

    def set_orientation(self, orientation: Orientation | str) -> None:
        self._change_paper(self.paper.with_orientation(orientation))

    def _change_paper(self, new_paper: Paper) -> None:
        old_dims = self.paper_dimensions
        self.paper = new_paper
        new_dims = self.paper_dimensions
        if old_dims == new_dims:
            return
        for element in self.elements:
            element.position = transforms.remap_on_orientation_change(element, old_dims, new_dims)
            self._normalize(element)

    def replace(self, other: DocumentModel) -> None:
        """整体替换（加载设计文件），重新约束元素并编号"""
        self.paper = other.paper
        self.elements = list(other.elements)
        for element in self.elements:
            self._normalize(element)
        self.renumber()

    # === 内部 ===

    def _normalize(self, element: ElementBase) -> None:
        """尺寸约束 + 位置约束"""
        dims = self.paper_dimensions
        min_size = self.catalog.min_size(element.type)
        element.width, element.height = transforms.fit_size_to_paper(
            element.width, element.height, min_size, dims
        )
        element.position = transforms.clamp_to_paper(
            element.position.x, element.position.y, element.width, element.height, dims
        )

    @staticmethod
    def _coerce_content(etype: ElementType, content: Any) -> Any:
        if etype == ElementType.CHART and isinstance(content, dict):
            # 非法规格保留为文本，导出时按元素跳过
            try:
                return ChartSpec.model_validate(content)
            except ValidationError:
                return json.dumps(content)
        if not isinstance(content, (str, ChartSpec)):
            return str(content)
        return content
