"""
图片引用解析 - data URL / base64 / 文件路径 → 可嵌入PDF的图片字节

职责：
1. 解码 data URL 与裸 base64
2. 读取本地文件
3. SVG 经 cairosvg 转 PNG
4. Pillow 识别格式并规范化（PNG/JPEG 原样保留，其余转 PNG）

任何失败均抛 ImageResolveError（元素跳过，导出继续）。
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass, replace
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ..interfaces import ImageResolveError

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:([^;,]*)(;base64)?,(.*)$", re.IGNORECASE | re.DOTALL)
_BASE64_RE = re.compile(r"^[A-Za-z0-9+/=\s]+$")

# PDF可直接嵌入的格式
PASSTHROUGH_FORMATS = ("PNG", "JPEG")


@dataclass(frozen=True)
class ResolvedImage:
    """解析后的图片"""
    data: bytes
    format: str
    width_px: int
    height_px: int
    # 可独立复现的引用（文件引用为绝对路径）
    source: str | None = None


def resolve_image_reference(reference: str, base_dir: str | Path | None = None) -> ResolvedImage:
    """
    解析图片引用

    Args:
        reference: data URL、裸base64或文件路径
        base_dir: 相对路径的基准目录

    Raises:
        ImageResolveError: 引用为空、无法解码或无法识别
    """
    if not reference or not reference.strip():
        raise ImageResolveError("图片引用为空")
    reference = reference.strip()

    raw, mime, source = _load_bytes(reference, base_dir)
    if not raw:
        raise ImageResolveError("图片数据为空")

    if mime == "image/svg+xml" or _looks_like_svg(raw):
        raw = _svg_to_png(raw)

    return replace(_normalize(raw), source=source)


def _load_bytes(reference: str, base_dir: str | Path | None) -> tuple[bytes, str | None, str]:
    match = _DATA_URL_RE.match(reference)
    if match:
        mime = match.group(1).lower() or None
        payload = match.group(3)
        if match.group(2):
            return _b64decode(payload), mime, reference
        # 非base64 data URL（常见于内联SVG）
        from urllib.parse import unquote

        return unquote(payload).encode("utf-8"), mime, reference

    if reference.lower().startswith(("http://", "https://")):
        raise ImageResolveError(f"不支持远程图片: {reference[:80]}")

    path = Path(reference)
    if base_dir is not None and not path.is_absolute():
        path = Path(base_dir) / path
    try:
        if path.is_file():
            return path.read_bytes(), None, str(path.resolve())
    except OSError as e:
        # 过长的base64串作为路径时会触发 ENAMETOOLONG
        logger.debug(f"图片引用不是可读文件: {e}")

    if _BASE64_RE.match(reference):
        return _b64decode(reference), None, reference
    raise ImageResolveError(f"图片文件不存在: {reference[:80]}")


def _b64decode(payload: str) -> bytes:
    try:
        return base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageResolveError(f"base64图片数据无法解码: {e}") from e


def _looks_like_svg(raw: bytes) -> bool:
    head = raw[:256].lstrip().lower()
    return head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in raw[:1024].lower())


def _svg_to_png(raw: bytes) -> bytes:
    try:
        import cairosvg
    except ImportError as e:
        raise ImageResolveError("SVG图片需要安装 cairosvg（pip install pagecraft[svg]）") from e
    try:
        return cairosvg.svg2png(bytestring=raw)
    except (ValueError, SyntaxError) as e:
        raise ImageResolveError(f"SVG转换失败: {e}") from e


def _normalize(raw: bytes) -> ResolvedImage:
    """Pillow识别格式，非PNG/JPEG转为PNG（保留透明通道）"""
    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageResolveError(f"无法识别的图片数据: {e}") from e

    original_format = (img.format or "").upper()
    width, height = img.size
    if original_format in PASSTHROUGH_FORMATS:
        return ResolvedImage(data=raw, format=original_format, width_px=width, height_px=height)

    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA" if "A" in img.getbands() or img.mode == "P" else "RGB")
    output = io.BytesIO()
    img.save(output, format="PNG", optimize=True)
    logger.info(f"图片格式规范化: {original_format or 'unknown'} -> PNG, {width}x{height}")
    return ResolvedImage(data=output.getvalue(), format="PNG", width_px=width, height_px=height)
