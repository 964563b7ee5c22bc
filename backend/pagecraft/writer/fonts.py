"""
字体映射 - CSS字体族/字重/字形 → PDF标准14字体
"""

from __future__ import annotations

from reportlab.pdfbase.pdfmetrics import stringWidth

_FAMILIES = {
    "arial": "helvetica",
    "helvetica": "helvetica",
    "sans-serif": "helvetica",
    "times": "times",
    "times new roman": "times",
    "serif": "times",
    "georgia": "times",
    "courier": "courier",
    "courier new": "courier",
    "monospace": "courier",
}

# (family, bold, italic) → 字体名
_BASE14 = {
    ("helvetica", False, False): "Helvetica",
    ("helvetica", True, False): "Helvetica-Bold",
    ("helvetica", False, True): "Helvetica-Oblique",
    ("helvetica", True, True): "Helvetica-BoldOblique",
    ("times", False, False): "Times-Roman",
    ("times", True, False): "Times-Bold",
    ("times", False, True): "Times-Italic",
    ("times", True, True): "Times-BoldItalic",
    ("courier", False, False): "Courier",
    ("courier", True, False): "Courier-Bold",
    ("courier", False, True): "Courier-Oblique",
    ("courier", True, True): "Courier-BoldOblique",
}

DEFAULT_FONT = "Helvetica"


def family_of(font_family: str | None) -> str:
    """CSS字体族（可为逗号分隔的候选列表）→ 标准字体族"""
    if not font_family:
        return "helvetica"
    for candidate in font_family.split(","):
        key = candidate.strip().strip("'\"").lower()
        if key in _FAMILIES:
            return _FAMILIES[key]
    return "helvetica"


def is_bold(font_weight: str | int | None) -> bool:
    if font_weight is None:
        return False
    text = str(font_weight).strip().lower()
    if text in ("bold", "bolder"):
        return True
    if text.isdigit():
        return int(text) >= 600
    return False


def is_italic(font_style: str | None) -> bool:
    return (font_style or "").strip().lower() in ("italic", "oblique")


def resolve_font(
    font_family: str | None = None,
    font_weight: str | int | None = None,
    font_style: str | None = None,
) -> str:
    """解析为reportlab字体名"""
    return _BASE14[(family_of(font_family), is_bold(font_weight), is_italic(font_style))]


def text_width(
    content: str,
    font_family: str | None = None,
    font_size: float = 16.0,
    font_style: str | None = None,
    font_weight: str | int | None = None,
) -> float:
    """按标准字体度量文本宽度（pt）"""
    return stringWidth(content or "", resolve_font(font_family, font_weight, font_style), font_size)
