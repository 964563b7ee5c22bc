"""
页面写入器 - reportlab Canvas 的文档坐标封装

职责：
1. 文档坐标（pt，左上角原点，y向下）→ PDF坐标（左下角原点）
2. 光标跟踪（页眉/副标题/分隔线等顺序内容推进光标）
3. 页眉/页脚模板（页脚 {PAGENUM}/{PAGES} 在定稿时统一替换）
4. 新页钩子（每次 new_page 触发一次回调）
5. 绘制原语：文本、图片、SVG、矩形、圆角矩形、直线
6. 输出：字节、BytesIO、文件、临时预览

失败语义：
- 图片数据缺失/无效：跳过该次调用并记录告警
- 定稿后继续绘制、页面状态非法：抛 PageStateError（致命）

测试要点：
- test_cursor_advances_by_font_size: 光标推进
- test_footer_tokens_substituted: 页脚页码替换
- test_page_hook_fires_once_per_page: 新页钩子
- test_draw_after_finalize_raises: 定稿后绘制
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from PIL import Image
from reportlab.lib.colors import Color, black
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from ..config import get_config
from ..interfaces import ExportError, PageStateError
from ..models.paper import PAPER_SIZES, Orientation, Paper, PaperDimensions, PaperSize
from .colors import to_color
from .fonts import DEFAULT_FONT, resolve_font, text_width

if TYPE_CHECKING:
    from ..interfaces import IArtifactStore

logger = logging.getLogger(__name__)

# 光标接近页面底部时自动换页的阈值（pt）
AUTO_PAGE_BREAK_MARGIN = 40.0
# 行高系数（多行文本）
LINE_HEIGHT_FACTOR = 1.15
FOOTER_FONT_SIZE = 8.0
FOOTER_COLOR = "#00000055"

DRAW_MODES = {
    "F": (0, 1),
    "S": (1, 0),
    "FD": (1, 1),
    "DF": (1, 1),
}


class _DeferredFooterCanvas(canvas.Canvas):
    """
    延迟页脚画布

    showPage 时只保存页面状态，save 时才知道总页数，
    再逐页回放并绘制页脚。
    """

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._saved_page_states: list[dict] = []
        self.footer_painter: Callable[[canvas.Canvas, int, int], None] | None = None

    def showPage(self) -> None:
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        # 回放页面状态会覆盖实例属性，先取出页脚回调
        painter = self.footer_painter
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            # 页面对象在回放时才真正创建，书签必须在此处登记
            self.bookmarkPage(_page_key(self.getPageNumber()))
            if painter is not None:
                painter(self, self.getPageNumber(), total)
            super().showPage()
        super().save()


class PageWriter:
    """页面写入器"""

    def __init__(
        self,
        paper: Paper | PaperDimensions | None = None,
        *,
        x: float | None = None,
        y: float | None = None,
        line_spacing: float | None = None,
        header: str = "",
        sub_header: str = "",
        left_footer: str = "",
        right_footer: str = "",
        center_footer: str = "",
        compress: bool | None = None,
    ):
        config = get_config().writer
        paper = paper or Paper()
        if isinstance(paper, Paper):
            self._orientation = paper.orientation
            dims = paper.dimensions
        else:
            dims = paper
            self._orientation = (
                Orientation.LANDSCAPE if dims.width > dims.height else Orientation.PORTRAIT
            )

        self.start_x = config.start_x if x is None else x
        self.start_y = config.start_y if y is None else y
        self.line_spacing = config.line_spacing if line_spacing is None else line_spacing
        self.footer_from_page = config.footer_from_page
        self.header = header
        self.sub_header = sub_header
        self.left_footer = left_footer
        self.right_footer = right_footer
        self.center_footer = center_footer

        self._cursor_x = self.start_x
        self._cursor_y = self.start_y
        self._font_name = DEFAULT_FONT
        self._font_size = 16.0
        self._on_new_page: Callable[[PageWriter], None] | None = None
        self._footer_armed = False
        self._pdf_bytes: bytes | None = None

        self._buffer = BytesIO()
        compress = config.compress if compress is None else compress
        self._canvas = _DeferredFooterCanvas(
            self._buffer,
            pagesize=(dims.width, dims.height),
            pageCompression=1 if compress else 0,
        )
        self._canvas.setFont(self._font_name, self._font_size)

    # === 页面信息 ===

    def get_page_width(self) -> float:
        return self._canvas._pagesize[0]

    def get_page_height(self) -> float:
        return self._canvas._pagesize[1]

    def get_current_page(self) -> int:
        return self._canvas.getPageNumber()

    def get_font_size(self) -> float:
        return self._font_size

    @property
    def finalized(self) -> bool:
        return self._pdf_bytes is not None

    def set_properties(
        self,
        title: str | None = None,
        author: str | None = None,
        subject: str | None = None,
        keywords: str | list[str] | None = None,
        creator: str | None = None,
    ) -> None:
        """设置文档属性"""
        self._ensure_open()
        if title:
            self._canvas.setTitle(title)
        if author:
            self._canvas.setAuthor(author)
        if subject:
            self._canvas.setSubject(subject)
        if keywords:
            self._canvas.setKeywords(keywords)
        if creator:
            self._canvas.setCreator(creator)

    # === 光标 ===

    def get_current_pos(self) -> tuple[float, float]:
        return self._cursor_x, self._cursor_y

    def set_current_pos(
        self,
        x: float | None = None,
        y: float | None = None,
        auto_next_page: bool = False,
    ) -> None:
        """
        设置光标

        y 按当前字号推进；auto_next_page 时接近页面底部自动换页。
        """
        base_y = self._cursor_y if y is None else y
        self._cursor_y = base_y + self._font_size
        if x is not None:
            self._cursor_x = x
        if auto_next_page and self._cursor_y >= self.get_page_height() - AUTO_PAGE_BREAK_MARGIN:
            self.new_page(orientation=self._orientation)

    # === 页眉/页脚 ===

    def init_page(self, header: bool = True, footer: bool = True) -> None:
        """
        重置光标并打印页眉

        footer 控制副标题及其分隔线。
        """
        self._cursor_x = self.start_x
        self._cursor_y = self.start_y
        if header:
            self.print_header()
        if footer:
            self.print_sub_header()

    def set_header(self, content: str) -> None:
        self.header = content
        self.print_header()

    def set_sub_header(self, content: str) -> None:
        self.sub_header = content
        self.print_sub_header()

    def set_left_footer(self, content: str) -> None:
        self.left_footer = content

    def set_right_footer(self, content: str) -> None:
        self.right_footer = content

    def set_center_footer(self, content: str) -> None:
        self.center_footer = content

    def print_header(self) -> None:
        if not self.header:
            return
        self._ensure_open()
        self._use_font("Times-Bold", 20)
        self._canvas.setFillColor(black)
        self._canvas.drawString(
            self._cursor_x, self._pdf_y(self._cursor_y + 20), self.header
        )
        self._cursor_x = self.start_x
        self._cursor_y += self._font_size + self.line_spacing

    def print_sub_header(self) -> None:
        if not self.sub_header:
            return
        self._ensure_open()
        self._use_font("Times-Roman", 14)
        self._canvas.setFillColor(black)
        self._canvas.drawString(
            self._cursor_x, self._pdf_y(self._cursor_y + self._font_size), self.sub_header
        )
        self._cursor_y += self._font_size + self.line_spacing + 5
        self.print_divider()

    def print_divider(self) -> None:
        """整页宽分隔线，光标移到线下"""
        y = self._cursor_y + 8
        self.line(10, y, self.get_page_width() - 10, y)
        self.set_current_pos(y=y)

    def print_footer(self, from_page_number: int | None = None) -> None:
        """
        启用页脚

        页码在定稿时替换，从 from_page_number 页开始每页绘制。
        未设置右页脚时不启用。
        """
        if not self.right_footer:
            return
        self._ensure_open()
        self.footer_from_page = (
            self.footer_from_page if from_page_number is None else from_page_number
        )
        self._footer_armed = True
        self._canvas.footer_painter = self._paint_footer

    def _paint_footer(self, c: canvas.Canvas, page_number: int, total: int) -> None:
        if page_number < self.footer_from_page:
            return
        width, height = c._pagesize
        c.saveState()
        c.setStrokeColor(black)
        c.setLineWidth(1)
        c.line(10, 34, width - 10, 34)
        c.setFillColor(to_color(FOOTER_COLOR))
        c.setFont(DEFAULT_FONT, FOOTER_FONT_SIZE)
        if self.left_footer:
            c.drawString(20, 20, _substitute(self.left_footer, page_number, total))
        if self.right_footer:
            c.drawRightString(width - 20, 20, _substitute(self.right_footer, page_number, total))
        if self.center_footer:
            c.drawCentredString(width / 2, 20, _substitute(self.center_footer, page_number, total))
        c.restoreState()

    # === 页面管理 ===

    def set_page_header(self, callback: Callable[[PageWriter], None]) -> None:
        """注册新页回调（每次 new_page 触发一次）"""
        self._on_new_page = callback

    def new_page(
        self,
        format: PaperSize | str | tuple[float, float] | None = None,
        orientation: Orientation | str | None = None,
    ) -> None:
        """
        新增一页

        Args:
            format: 纸张规格名或(宽, 高)，None时沿用当前页尺寸
            orientation: portrait/landscape（p/l），None时沿用当前方向
        """
        self._ensure_open()
        size = self._resolve_page_size(format, orientation)
        self._canvas.showPage()
        self._canvas.setPageSize(size)
        self._canvas.setFont(self._font_name, self._font_size)
        if self._on_new_page is not None:
            self._on_new_page(self)

    def _resolve_page_size(
        self,
        format: PaperSize | str | tuple[float, float] | None,
        orientation: Orientation | str | None,
    ) -> tuple[float, float]:
        if orientation is not None:
            key = str(getattr(orientation, "value", orientation)).lower()
            if key in ("p", "portrait"):
                self._orientation = Orientation.PORTRAIT
            elif key in ("l", "landscape"):
                self._orientation = Orientation.LANDSCAPE
            else:
                raise PageStateError(f"未知纸张方向: {orientation}")

        if format is None:
            width, height = sorted(self._canvas._pagesize)
        elif isinstance(format, (tuple, list)):
            if len(format) != 2 or min(format) <= 0:
                raise PageStateError(f"无效的页面尺寸: {format}")
            width, height = sorted(float(v) for v in format)
        else:
            try:
                width, height = PAPER_SIZES[PaperSize(getattr(format, "value", format))]
            except ValueError as e:
                raise PageStateError(f"未知纸张规格: {format}") from e

        if self._orientation == Orientation.LANDSCAPE:
            return height, width
        return width, height

    # === 文本 ===

    def text_width(
        self,
        content: str,
        font_name: str | None = None,
        font_size: float | None = None,
        font_style: str | None = None,
        font_weight: str | int | None = None,
    ) -> float:
        """测量文本宽度（pt）"""
        return text_width(content, font_name, font_size or self._font_size, font_style, font_weight)

    def print_text(
        self,
        content: str,
        *,
        x: float | None = None,
        y: float | None = None,
        font_name: str | None = None,
        font_size: float | None = None,
        font_style: str | None = None,
        font_weight: str | int | None = None,
        align: str = "left",
        color: str | Color | None = "black",
        link: str | dict[str, Any] | None = None,
        max_width: float | None = None,
    ) -> None:
        """
        打印文本

        x/y 为基线起点（文档坐标），缺省时使用光标位置并在打印后推进光标。
        align 为 center/right 时 x 分别为中点/右端。
        link 为URL字符串或 {"url": ...} / {"page_number": n}。
        max_width 给出时按宽度折行。
        """
        if not content:
            return
        self._ensure_open()
        font = resolve_font(font_name, font_weight, font_style)
        size = font_size or 12
        self._use_font(font, size)
        self._canvas.setFillColor(to_color(color, default=black) or black)

        use_cursor = x is None or y is None
        start_x = self._cursor_x if x is None else x
        start_y = self._cursor_y if y is None else y

        lines = [content]
        if max_width and max_width > 0:
            lines = simpleSplit(content, font, size, max_width) or [content]

        leading = size * LINE_HEIGHT_FACTOR
        for i, text in enumerate(lines):
            line_y = start_y + i * leading
            pdf_y = self._pdf_y(line_y)
            if align == "center":
                self._canvas.drawCentredString(start_x, pdf_y, text)
            elif align == "right":
                self._canvas.drawRightString(start_x, pdf_y, text)
            else:
                self._canvas.drawString(start_x, pdf_y, text)

        if link:
            widest = max(stringWidth(t, font, size) for t in lines)
            left = start_x
            if align == "center":
                left = start_x - widest / 2
            elif align == "right":
                left = start_x - widest
            top = start_y - size
            bottom = start_y + (len(lines) - 1) * leading + size * 0.25
            self._add_link(link, left, top, left + widest, bottom)

        if use_cursor:
            self.set_current_pos(x=x, y=y)

    def _add_link(
        self, link: str | dict[str, Any], left: float, top: float, right: float, bottom: float
    ) -> None:
        rect = (left, self._pdf_y(bottom), right, self._pdf_y(top))
        if isinstance(link, str):
            self._canvas.linkURL(link, rect, relative=0, thickness=0)
            return
        url = link.get("url")
        page_number = link.get("page_number", link.get("pageNumber"))
        if url:
            self._canvas.linkURL(url, rect, relative=0, thickness=0)
        elif page_number:
            self._canvas.linkRect("", _page_key(int(page_number)), rect, relative=0, thickness=0)
        else:
            logger.warning(f"链接缺少目标，忽略: {link}")

    # === 图片 ===

    def add_image(
        self,
        data: bytes | Image.Image | ImageReader | None,
        *,
        x: float,
        y: float,
        w: float,
        h: float,
        format: str | None = None,
        rotation: float | None = None,
    ) -> None:
        """
        添加图片

        Args:
            data: 图片字节、PIL图像或ImageReader
            format: 格式提示（SVG时转交 add_svg_image，其余由数据自动识别）
            rotation: 绕左上角逆时针旋转角度
        """
        self._ensure_open()
        if data is None or (isinstance(data, (bytes, bytearray)) and not data):
            logger.warning("图片数据为空，跳过绘制")
            return
        if format and format.upper() == "SVG":
            svg = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
            self.add_svg_image(svg, x=x, y=y, w=w, h=h, rotation=rotation)
            return
        if w <= 0 or h <= 0:
            logger.warning(f"图片尺寸无效，跳过绘制: {w}x{h}")
            return

        try:
            if isinstance(data, ImageReader):
                reader = data
            elif isinstance(data, Image.Image):
                reader = ImageReader(data)
            else:
                reader = ImageReader(BytesIO(bytes(data)))
            reader.getSize()
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"图片数据无效，跳过绘制: {e}")
            return

        top = self._pdf_y(y)
        self._canvas.saveState()
        self._canvas.translate(x, top)
        if rotation:
            self._canvas.rotate(rotation)
        self._canvas.drawImage(reader, 0, -h, width=w, height=h, mask="auto")
        self._canvas.restoreState()

    def add_svg_image(
        self,
        svg: str | None,
        *,
        x: float,
        y: float,
        w: float,
        h: float,
        rotation: float | None = None,
    ) -> None:
        """添加SVG图片（经cairosvg栅格化）"""
        self._ensure_open()
        if not svg:
            logger.warning("SVG内容为空，跳过绘制")
            return
        try:
            import cairosvg
        except ImportError as e:
            raise ExportError("SVG图片需要安装 cairosvg（pip install pagecraft[svg]）") from e

        dpi_scale = get_config().export.chart_dpi / 72.0
        try:
            png = cairosvg.svg2png(
                bytestring=svg.encode("utf-8"),
                output_width=max(1, round(w * dpi_scale)),
                output_height=max(1, round(h * dpi_scale)),
            )
        except (ValueError, SyntaxError) as e:
            logger.warning(f"SVG无法解析，跳过绘制: {e}")
            return
        self.add_image(png, x=x, y=y, w=w, h=h, rotation=rotation)

    # === 图形 ===

    def set_fill_color(self, color: str | Color | None) -> None:
        self._ensure_open()
        resolved = to_color(color)
        if resolved is not None:
            self._canvas.setFillColor(resolved)

    def set_draw_color(self, color: str | Color | None) -> None:
        self._ensure_open()
        resolved = to_color(color)
        if resolved is not None:
            self._canvas.setStrokeColor(resolved)

    def set_line_width(self, width: float) -> None:
        self._ensure_open()
        self._canvas.setLineWidth(width)

    def set_line_dash(self, pattern: list[float] | None = None) -> None:
        """虚线样式（None/空列表为实线）"""
        self._ensure_open()
        if pattern:
            self._canvas.setDash(pattern)
        else:
            self._canvas.setDash()

    def rect(self, x: float, y: float, w: float, h: float, mode: str = "S") -> None:
        """矩形（mode: F填充 / S描边 / FD填充+描边）"""
        self._ensure_open()
        stroke, fill = _draw_mode(mode)
        self._canvas.rect(x, self._pdf_y(y + h), w, h, stroke=stroke, fill=fill)

    def rounded_rect(
        self, x: float, y: float, w: float, h: float, radius: float, mode: str = "S"
    ) -> None:
        """圆角矩形"""
        self._ensure_open()
        stroke, fill = _draw_mode(mode)
        radius = min(radius, w / 2, h / 2)
        self._canvas.roundRect(x, self._pdf_y(y + h), w, h, radius, stroke=stroke, fill=fill)

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._ensure_open()
        self._canvas.line(x1, self._pdf_y(y1), x2, self._pdf_y(y2))

    # === 输出 ===

    def to_bytes(self) -> bytes:
        """定稿并返回PDF字节（可重复调用）"""
        if self._pdf_bytes is None:
            self._canvas.showPage()
            self._canvas.save()
            self._pdf_bytes = self._buffer.getvalue()
            logger.debug(
                f"PDF定稿: {len(self._pdf_bytes)} bytes, footer={self._footer_armed}"
            )
        return self._pdf_bytes

    def to_buffer(self) -> BytesIO:
        return BytesIO(self.to_bytes())

    def export(self, path: str | Path) -> Path:
        """写出到文件"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(self.to_bytes())
        return path

    def preview(self, store: IArtifactStore) -> str:
        """发布临时预览，返回预览URL"""
        return store.publish(self.to_bytes(), suffix=".pdf")

    # === 内部 ===

    def _ensure_open(self) -> None:
        if self._pdf_bytes is not None:
            raise PageStateError("文档已定稿，不能继续绘制")

    def _pdf_y(self, y: float) -> float:
        return self.get_page_height() - y

    def _use_font(self, font: str, size: float) -> None:
        self._font_name = font
        self._font_size = size
        self._canvas.setFont(font, size)


def _draw_mode(mode: str) -> tuple[int, int]:
    try:
        return DRAW_MODES[mode.upper()]
    except (KeyError, AttributeError) as e:
        raise PageStateError(f"未知绘制模式: {mode}") from e


def _substitute(template: str, page_number: int, total: int) -> str:
    return template.replace("{PAGENUM}", str(page_number)).replace("{PAGES}", str(total))


def _page_key(page_number: int) -> str:
    return f"page-{page_number}"
