"""
页面写入器单元测试

运行：pytest tests/unit/test_page_writer.py -v
"""

import io
import logging
from pathlib import Path

import pdfplumber
import pytest

from pagecraft.interfaces import PageStateError
from pagecraft.models import Paper
from pagecraft.pipeline import ArtifactStore
from pagecraft.writer import PageWriter, parse_color, resolve_font, to_color


def _open_pdf(data: bytes) -> pdfplumber.PDF:
    return pdfplumber.open(io.BytesIO(data))


class TestCursor:
    """光标测试"""

    def test_initial_position(self):
        writer = PageWriter()
        assert writer.get_current_pos() == (10, 10)
        assert writer.get_page_width() == 595
        assert writer.get_page_height() == 842

    def test_cursor_advances_by_font_size(self):
        writer = PageWriter()
        writer.set_current_pos(y=100)
        assert writer.get_current_pos() == (10, 100 + writer.get_font_size())

    def test_cursor_x_zero_honoured(self):
        writer = PageWriter()
        writer.set_current_pos(x=0, y=100)
        assert writer.get_current_pos()[0] == 0

    def test_header_advances_cursor(self):
        """页眉后光标下移 字号+行距"""
        writer = PageWriter(header="Quarterly Report")
        writer.init_page(header=True, footer=False)
        assert writer.get_current_pos() == (10, 10 + 20 + 5)

    def test_print_text_uses_cursor(self):
        """缺省坐标时使用光标并推进"""
        writer = PageWriter()
        writer.print_text("line one", font_size=12)
        assert writer.get_current_pos()[1] == 10 + 12

        writer.print_text("placed", x=50, y=300, font_size=12)
        assert writer.get_current_pos()[1] == 10 + 12

    def test_auto_next_page(self):
        writer = PageWriter()
        writer.set_current_pos(y=830, auto_next_page=True)
        assert writer.get_current_page() == 2


class TestPages:
    """页面管理测试"""

    def test_page_hook_fires_once_per_page(self):
        """新页钩子每次 new_page 触发一次"""
        calls = []
        writer = PageWriter()
        writer.set_page_header(lambda w: calls.append(w.get_current_page()))
        writer.new_page()
        writer.new_page()
        assert calls == [2, 3]

    def test_new_page_landscape(self):
        writer = PageWriter(Paper(size="A3"))
        writer.new_page(orientation="l")
        assert (writer.get_page_width(), writer.get_page_height()) == (1191, 842)
        writer.new_page(format="Letter", orientation="portrait")
        assert (writer.get_page_width(), writer.get_page_height()) == (612, 792)

    @pytest.mark.parametrize(
        "kwargs",
        [{"format": "B5"}, {"orientation": "diagonal"}, {"format": (0, 100)}],
    )
    def test_new_page_invalid(self, kwargs):
        with pytest.raises(PageStateError):
            PageWriter().new_page(**kwargs)

    def test_footer_tokens_substituted(self):
        """页脚页码在定稿时替换，默认从第3页开始"""
        writer = PageWriter(right_footer="{PAGENUM}/{PAGES}", left_footer="PageCraft")
        writer.print_footer()
        writer.new_page()
        writer.new_page()

        with _open_pdf(writer.to_bytes()) as pdf:
            assert len(pdf.pages) == 3
            texts = [page.extract_text() or "" for page in pdf.pages]
        assert "3/3" in texts[2]
        assert "PageCraft" in texts[2]
        assert "/3" not in texts[0]
        assert "/3" not in texts[1]

    def test_footer_from_first_page(self):
        writer = PageWriter(right_footer="Page {PAGENUM} of {PAGES}")
        writer.print_footer(from_page_number=1)
        writer.new_page()
        with _open_pdf(writer.to_bytes()) as pdf:
            assert "Page 1 of 2" in (pdf.pages[0].extract_text() or "")
            assert "Page 2 of 2" in (pdf.pages[1].extract_text() or "")

    def test_footer_requires_right_footer(self):
        writer = PageWriter(left_footer="only left")
        writer.print_footer(from_page_number=1)
        with _open_pdf(writer.to_bytes()) as pdf:
            assert "only left" not in (pdf.pages[0].extract_text() or "")


class TestDrawing:
    """绘制原语测试"""

    def test_text_in_uncompressed_output(self):
        writer = PageWriter()
        writer.print_text("Hello", x=20, y=40, font_name="Arial", font_size=14)
        assert b"Hello" in writer.to_bytes()

    def test_text_extracted(self):
        writer = PageWriter()
        writer.print_text("Centered words", x=297, y=100, align="center")
        writer.print_text("Right side", x=580, y=140, align="right", color="#ff0000")
        with _open_pdf(writer.to_bytes()) as pdf:
            text = pdf.pages[0].extract_text()
        assert "Centered words" in text
        assert "Right side" in text

    def test_wrapped_text(self):
        writer = PageWriter()
        writer.print_text("alpha beta gamma delta", x=10, y=50, font_size=12, max_width=60)
        with _open_pdf(writer.to_bytes()) as pdf:
            lines = (pdf.pages[0].extract_text() or "").splitlines()
        assert len(lines) >= 2

    def test_links(self):
        writer = PageWriter()
        writer.print_text("site", x=10, y=50, link="https://example.com")
        writer.print_text("next", x=10, y=80, link={"page_number": 2})
        writer.new_page()
        with _open_pdf(writer.to_bytes()) as pdf:
            annots = pdf.pages[0].annots
        assert len(annots) == 2
        assert any(a.get("uri") == "https://example.com" for a in annots)

    def test_image_drawn(self, png_bytes: bytes):
        writer = PageWriter()
        writer.add_image(png_bytes, x=100, y=100, w=50, h=40)
        with _open_pdf(writer.to_bytes()) as pdf:
            images = pdf.pages[0].images
        assert len(images) == 1
        # 文档坐标 y=100 为图片上边
        assert images[0]["top"] == pytest.approx(100, abs=0.5)
        assert images[0]["x0"] == pytest.approx(100, abs=0.5)

    def test_invalid_image_skipped(self, caplog):
        """图片数据无效时跳过并告警"""
        writer = PageWriter()
        with caplog.at_level(logging.WARNING):
            writer.add_image(b"definitely not an image", x=0, y=0, w=10, h=10)
            writer.add_image(b"", x=0, y=0, w=10, h=10)
        assert "跳过" in caplog.text
        with _open_pdf(writer.to_bytes()) as pdf:
            assert pdf.pages[0].images == []

    def test_shapes(self):
        writer = PageWriter()
        writer.set_fill_color("#336699")
        writer.set_draw_color("rgba(0, 0, 0, 0.5)")
        writer.set_line_width(2)
        writer.set_line_dash([4, 2])
        writer.rect(10, 10, 100, 50, "FD")
        writer.rounded_rect(10, 100, 100, 50, 80, "F")
        writer.set_line_dash(None)
        writer.line(10, 200, 200, 200)
        with _open_pdf(writer.to_bytes()) as pdf:
            page = pdf.pages[0]
            assert len(page.rects) >= 1
            assert len(page.lines) >= 1

    def test_bad_draw_mode(self):
        with pytest.raises(PageStateError):
            PageWriter().rect(0, 0, 10, 10, "Q")

    def test_draw_after_finalize_raises(self):
        """定稿后继续绘制为致命错误"""
        writer = PageWriter()
        first = writer.to_bytes()
        assert writer.finalized
        assert writer.to_bytes() is first
        with pytest.raises(PageStateError):
            writer.rect(0, 0, 10, 10, "F")
        with pytest.raises(PageStateError):
            writer.print_text("late", x=0, y=0)


class TestOutput:
    """输出测试"""

    def test_export_file(self, temp_dir: Path):
        writer = PageWriter()
        writer.set_properties(title="Doc", author="tests")
        path = writer.export(temp_dir / "out" / "doc.pdf")
        assert path.read_bytes().startswith(b"%PDF")

    def test_preview_and_revoke(self, temp_dir: Path):
        store = ArtifactStore(temp_dir / "previews")
        writer = PageWriter()
        url = writer.preview(store)
        assert url.startswith("file://")
        assert store.published == [url]
        assert store.revoke(url) is True
        assert store.revoke(url) is False
        assert list((temp_dir / "previews").iterdir()) == []


class TestColorsAndFonts:
    """颜色与字体解析测试"""

    def test_hex_colors(self):
        assert parse_color("#f00").red == 1
        assert parse_color("#ff000080").alpha == pytest.approx(0.5, abs=0.01)
        assert parse_color("#0000ff").blue == 1

    def test_functional_colors(self):
        color = parse_color("rgba(255, 0, 0, 0.25)")
        assert color.red == 1
        assert color.alpha == pytest.approx(0.25)

    @pytest.mark.parametrize("value", ["transparent", "none", "", None])
    def test_transparent(self, value):
        assert parse_color(value) is None

    def test_invalid_color(self):
        with pytest.raises(ValueError):
            parse_color("#12345")
        assert to_color("not-a-colour") is None

    @pytest.mark.parametrize(
        "family,weight,style,expected",
        [
            ("Arial", "bold", "normal", "Helvetica-Bold"),
            ("Georgia, serif", "400", "italic", "Times-Italic"),
            ("'Courier New'", 700, "oblique", "Courier-BoldOblique"),
            ("Comic Sans", "normal", "normal", "Helvetica"),
        ],
    )
    def test_resolve_font(self, family, weight, style, expected):
        assert resolve_font(family, weight, style) == expected
