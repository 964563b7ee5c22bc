"""
颜色解析 - CSS颜色字符串 → reportlab Color

支持：#rgb、#rgba、#rrggbb、#rrggbbaa、rgb()、rgba()、CSS颜色名；
transparent / 空值 → None（不绘制）。
"""

from __future__ import annotations

import logging
import re

from reportlab.lib import colors
from reportlab.lib.colors import Color

logger = logging.getLogger(__name__)

_FUNC_RE = re.compile(r"^rgba?\(\s*([^)]*)\)$")


def parse_color(value: str | Color | None) -> Color | None:
    """
    解析颜色

    Raises:
        ValueError: 无法识别的颜色
    """
    if value is None or isinstance(value, Color):
        return value
    text = str(value).strip().lower()
    if not text or text in ("transparent", "none"):
        return None

    if text.startswith("#"):
        digits = text[1:]
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) == 6:
            return colors.HexColor("#" + digits)
        if len(digits) == 8:
            return colors.HexColor("#" + digits, hasAlpha=True)
        raise ValueError(f"无效的颜色值: {value}")

    match = _FUNC_RE.match(text)
    if match:
        parts = [p.strip() for p in match.group(1).split(",")]
        if len(parts) not in (3, 4):
            raise ValueError(f"无效的颜色值: {value}")
        r, g, b = (_channel(p) for p in parts[:3])
        alpha = _alpha(parts[3]) if len(parts) == 4 else 1.0
        return Color(r, g, b, alpha=alpha)

    return colors.toColor(text)


def to_color(value: str | Color | None, default: Color | None = None) -> Color | None:
    """解析颜色，失败时记录告警并返回默认值"""
    try:
        return parse_color(value)
    except ValueError:
        logger.warning(f"无法识别的颜色，使用默认值: {value!r}")
        return default


def to_rgba(value: str | Color | None) -> tuple[float, float, float, float] | None:
    """颜色 → (r, g, b, a) 元组（供matplotlib使用），透明或无法识别时为None"""
    color = to_color(value)
    if color is None:
        return None
    return (color.red, color.green, color.blue, color.alpha)


def _channel(part: str) -> float:
    if part.endswith("%"):
        return min(max(float(part[:-1]) / 100.0, 0.0), 1.0)
    return min(max(float(part) / 255.0, 0.0), 1.0)


def _alpha(part: str) -> float:
    if part.endswith("%"):
        return min(max(float(part[:-1]) / 100.0, 0.0), 1.0)
    return min(max(float(part), 0.0), 1.0)
