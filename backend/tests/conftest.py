"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(document, catalog):
        element = document.add_element("title", position=(100, 100))
        assert element.z_index == 0
"""

from __future__ import annotations

import asyncio
import base64
import io
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from PIL import Image

from pagecraft.config import TemplateCatalog, load_catalog
from pagecraft.config import runtime_config as runtime_config_module
from pagecraft.config.runtime_config import ExportConfig, RuntimeConfig, WriterConfig
from pagecraft.interfaces import ChartSpecError, IChartRasterizer
from pagecraft.models import ChartSpec, DocumentModel, Paper


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def runtime_config(temp_dir: Path) -> Generator[RuntimeConfig, None, None]:
    """
    测试用运行期配置（替换全局配置）

    - 存储目录指向临时目录
    - 关闭PDF压缩，便于断言内容
    - 缩短预览撤销宽限期
    """
    config = RuntimeConfig(
        storage_dir=temp_dir / "storage",
        writer=WriterConfig(compress=False),
        export=ExportConfig(preview_revoke_delay_sec=0.05, chart_dpi=72),
    )
    previous = runtime_config_module._config
    runtime_config_module._config = config
    yield config
    runtime_config_module._config = previous


@pytest.fixture(scope="session")
def catalog() -> TemplateCatalog:
    """内置模板目录（会话级别缓存）"""
    return load_catalog()


# ============================================================================
# 文档 Fixtures
# ============================================================================

@pytest.fixture
def document(catalog: TemplateCatalog) -> DocumentModel:
    """A4纵向空文档"""
    return DocumentModel(paper=Paper()).use_catalog(catalog)


@pytest.fixture
def three_element_document(document: DocumentModel) -> DocumentModel:
    """三个元素，z_index [0,1,2]"""
    document.add_element("title", position=(20, 20))
    document.add_element("text", position=(20, 100))
    document.add_element("card", position=(100, 200))
    return document


@pytest.fixture
def sample_chart_spec() -> ChartSpec:
    """示例柱状图规格"""
    return ChartSpec.parse(
        {
            "chartType": "bar",
            "labels": ["Q1", "Q2", "Q3"],
            "datasets": [
                {"label": "Sales", "data": [3, 5, 2], "backgroundColor": "#4e79a7"},
            ],
        }
    )


# ============================================================================
# 图片 Fixtures
# ============================================================================

def make_png_bytes(size: tuple[int, int] = (4, 4), color: tuple = (255, 0, 0, 255)) -> bytes:
    img = Image.new("RGBA", size, color)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    """4x4 红色PNG"""
    return make_png_bytes()


@pytest.fixture
def png_data_url(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


# ============================================================================
# 栅格化 Fixtures
# ============================================================================

class FakeChartRasterizer(IChartRasterizer):
    """
    假栅格化器

    按 delays 中的顺序为每次调用设定延迟，用于制造任意完成顺序；
    记录完成顺序，空数据集抛 ChartSpecError。
    """

    def __init__(self, delays: list[float] | None = None):
        self.delays = list(delays or [])
        self.completed: list[str] = []
        self._active = 0
        self._calls = 0

    @property
    def active_surfaces(self) -> int:
        return self._active

    async def rasterize(self, spec: ChartSpec, width: float, height: float) -> bytes:
        delay = self.delays[self._calls] if self._calls < len(self.delays) else 0.0
        self._calls += 1
        self._active += 1
        try:
            await asyncio.sleep(delay)
            label = spec.datasets[0].label if spec.datasets else None
            if label == "boom":
                raise ChartSpecError("raster failed")
            self.completed.append(label or "")
            return make_png_bytes((8, 8), (0, 0, 255, 255))
        finally:
            self._active -= 1


@pytest.fixture
def make_rasterizer() -> type[FakeChartRasterizer]:
    """假栅格化器工厂（可传入逐次延迟）"""
    return FakeChartRasterizer
