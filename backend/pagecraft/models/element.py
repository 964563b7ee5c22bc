"""
元素模型 - 页面上单个定位、带样式的可视单元

元素按type区分为封闭的标签联合：
- text/title: 文本内容 + 排版
- image: 图片引用（data URL / base64 / 文件路径）
- chart: 图表规格（或导出时才解析的JSON文本）
- divider: 分隔线（厚度=border_width，颜色=border_color）
- card: 卡片（圆角/阴影/边框）
"""

from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel, to_snake

from .chart import ChartSpec

logger = logging.getLogger(__name__)


class ElementType(str, Enum):
    """元素类型枚举"""
    TEXT = "text"
    TITLE = "title"
    IMAGE = "image"
    CHART = "chart"
    DIVIDER = "divider"
    CARD = "card"


_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True, validate_assignment=True)


class Position(BaseModel):
    """位置（pt，左上角为原点，y向下）"""
    x: float = 0.0
    y: float = 0.0


class Typography(BaseModel):
    """排版"""
    model_config = _CAMEL

    font_size: float = Field(16.0, gt=0)
    font_family: str = "Arial"
    font_weight: str = "normal"
    font_style: Literal["normal", "italic", "oblique"] = "normal"
    text_align: Literal["left", "center", "right"] = "left"
    text_color: str = "#000000"

    @field_validator("font_weight", mode="before")
    @classmethod
    def _weight_to_str(cls, v: Any) -> Any:
        # 数字字重（600/700）统一为字符串
        if isinstance(v, (int, float)):
            return str(int(v))
        return v


class BoxStyle(BaseModel):
    """盒样式"""
    model_config = _CAMEL

    background_color: str = "transparent"
    border_style: Literal["none", "solid", "dashed", "dotted", "double"] = "none"
    border_color: str = "#000000"
    border_width: float = Field(0.0, ge=0)
    border_radius: float = Field(0.0, ge=0)
    padding: float = Field(0.0, ge=0)
    shadow: bool = False

    @property
    def has_border(self) -> bool:
        return self.border_style != "none" and self.border_width > 0


class ElementBase(BaseModel):
    """元素公共字段"""
    model_config = _CAMEL

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    position: Position = Field(default_factory=Position)
    width: float = Field(100.0, ge=0)
    height: float = Field(100.0, ge=0)
    style: BoxStyle = Field(default_factory=BoxStyle)
    z_index: int = 0

    def apply_patch(self, patch: dict[str, Any]) -> list[str]:
        """
        应用扁平样式补丁（fontSize/backgroundColor/content等，驼峰或下划线均可）

        补丁整体校验：任一值非法则不做任何修改。
        本类型不携带的字段忽略。

        Returns:
            实际应用的字段名（下划线形式）
        """
        candidate = self.model_copy(deep=True)
        applied: list[str] = []
        try:
            for raw_key, value in patch.items():
                key = to_snake(raw_key)
                if candidate._assign_patch_field(key, value):
                    applied.append(key)
                else:
                    logger.debug(f"忽略补丁字段: {self.type}.{raw_key}")
        except ValidationError as e:
            logger.warning(f"样式补丁非法，已忽略: {self.id}: {e}")
            return []

        for name in ("content", "typography", "style"):
            if name in type(self).model_fields:
                setattr(self, name, getattr(candidate, name))
        return applied

    def _assign_patch_field(self, key: str, value: Any) -> bool:
        if key == "content" and "content" in type(self).model_fields:
            self.content = value
            return True
        typography = getattr(self, "typography", None)
        if typography is not None and key in Typography.model_fields:
            setattr(typography, key, value)
            return True
        if key in BoxStyle.model_fields:
            setattr(self.style, key, value)
            return True
        return False

    @property
    def right(self) -> float:
        return self.position.x + self.width

    @property
    def bottom(self) -> float:
        return self.position.y + self.height


class TextualElementBase(ElementBase):
    """文本类元素"""
    content: str = ""
    typography: Typography = Field(default_factory=Typography)


class TextElement(TextualElementBase):
    type: Literal["text"] = "text"


class TitleElement(TextualElementBase):
    type: Literal["title"] = "title"


class ImageElement(ElementBase):
    type: Literal["image"] = "image"
    content: str = ""


class ChartElement(ElementBase):
    type: Literal["chart"] = "chart"
    content: ChartSpec | str = ""

    def chart_spec(self) -> ChartSpec:
        """解析图表规格（失败抛ChartSpecError）"""
        return ChartSpec.parse(self.content)


class DividerElement(ElementBase):
    type: Literal["divider"] = "divider"


class CardElement(ElementBase):
    type: Literal["card"] = "card"
    content: str = ""


Element = Annotated[
    Union[TextElement, TitleElement, ImageElement, ChartElement, DividerElement, CardElement],
    Field(discriminator="type"),
]

ELEMENT_CLASSES: dict[ElementType, type[ElementBase]] = {
    ElementType.TEXT: TextElement,
    ElementType.TITLE: TitleElement,
    ElementType.IMAGE: ImageElement,
    ElementType.CHART: ChartElement,
    ElementType.DIVIDER: DividerElement,
    ElementType.CARD: CardElement,
}

element_adapter: TypeAdapter[Element] = TypeAdapter(Element)


def make_element(element_type: ElementType | str, **fields: Any) -> ElementBase:
    """按类型构建元素（未知类型抛ValueError）"""
    cls = ELEMENT_CLASSES[ElementType(element_type)]
    return cls(**fields)
