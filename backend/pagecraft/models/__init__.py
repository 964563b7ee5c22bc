"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- Paper: 纸张规格与方向（派生宽高）
- Element: 元素标签联合（text/title/image/chart/divider/card）
- ChartSpec: 图表规格
- DocumentModel: 元素集合 + 纸张配置
- ViewTransform: 屏幕↔文档缩放（派生，不持久化）
- ExportRun: 单次导出的状态与结果
"""

from .paper import PAPER_SIZES, Orientation, Paper, PaperDimensions, PaperSize
from .chart import ChartDataset, ChartSpec
from .element import (
    ELEMENT_CLASSES,
    BoxStyle,
    CardElement,
    ChartElement,
    DividerElement,
    Element,
    ElementBase,
    ElementType,
    ImageElement,
    Position,
    TextElement,
    TitleElement,
    Typography,
    element_adapter,
    make_element,
)
from .document import DocumentModel
from .view import ContainerRect, ViewTransform
from .export_run import ExportArtifacts, ExportRun, ExportStatus, SkippedElement

__all__ = [
    "PAPER_SIZES",
    "Orientation",
    "Paper",
    "PaperDimensions",
    "PaperSize",
    "ChartDataset",
    "ChartSpec",
    "ELEMENT_CLASSES",
    "BoxStyle",
    "CardElement",
    "ChartElement",
    "DividerElement",
    "Element",
    "ElementBase",
    "ElementType",
    "ImageElement",
    "Position",
    "TextElement",
    "TitleElement",
    "Typography",
    "element_adapter",
    "make_element",
    "DocumentModel",
    "ContainerRect",
    "ViewTransform",
    "ExportArtifacts",
    "ExportRun",
    "ExportStatus",
    "SkippedElement",
]
