"""
纸张模型 - 纸张规格与方向

纸张尺寸单位为pt（1/72英寸），横向时宽高互换。
派生的宽高是画布与导出器共同使用的唯一来源。
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class PaperSize(str, Enum):
    """纸张规格"""
    A4 = "A4"
    A3 = "A3"
    LETTER = "Letter"


class Orientation(str, Enum):
    """纸张方向"""
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


# 纵向尺寸（pt）
PAPER_SIZES: dict[PaperSize, tuple[float, float]] = {
    PaperSize.A4: (595.0, 842.0),
    PaperSize.A3: (842.0, 1191.0),
    PaperSize.LETTER: (612.0, 792.0),
}


class PaperDimensions(BaseModel):
    """纸张宽高（pt）"""
    model_config = ConfigDict(frozen=True)

    width: float
    height: float

    def swapped(self) -> PaperDimensions:
        return PaperDimensions(width=self.height, height=self.width)

    def is_swap_of(self, other: PaperDimensions) -> bool:
        """判断是否为另一尺寸的宽高互换"""
        return (
            self.width != self.height
            and self.width == other.height
            and self.height == other.width
        )


class Paper(BaseModel):
    """纸张配置"""
    model_config = ConfigDict(frozen=True)

    size: PaperSize = PaperSize.A4
    orientation: Orientation = Orientation.PORTRAIT

    @property
    def dimensions(self) -> PaperDimensions:
        width, height = PAPER_SIZES[self.size]
        if self.orientation == Orientation.LANDSCAPE:
            return PaperDimensions(width=height, height=width)
        return PaperDimensions(width=width, height=height)

    @property
    def width(self) -> float:
        return self.dimensions.width

    @property
    def height(self) -> float:
        return self.dimensions.height

    def flipped(self) -> Paper:
        """返回另一方向的纸张"""
        other = (
            Orientation.PORTRAIT
            if self.orientation == Orientation.LANDSCAPE
            else Orientation.LANDSCAPE
        )
        return Paper(size=self.size, orientation=other)

    def with_size(self, size: PaperSize | str) -> Paper:
        return Paper(size=PaperSize(size), orientation=self.orientation)

    def with_orientation(self, orientation: Orientation | str) -> Paper:
        return Paper(size=self.size, orientation=Orientation(orientation))
