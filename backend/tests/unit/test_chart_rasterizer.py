"""
图表栅格化单元测试

运行：pytest tests/unit/test_chart_rasterizer.py -v
"""

import asyncio
import io

import pytest
from PIL import Image

from pagecraft.export import MatplotlibChartRasterizer, rasterize_chart
from pagecraft.interfaces import ChartSpecError
from pagecraft.models import ChartSpec

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestRasterizeChart:
    """同步栅格化测试"""

    def test_rasterize_bar_png(self, sample_chart_spec: ChartSpec):
        png = rasterize_chart(sample_chart_spec, 300, 200, dpi=72)
        assert png.startswith(PNG_SIGNATURE)
        with Image.open(io.BytesIO(png)) as img:
            assert img.size == (300, 200)

    @pytest.mark.parametrize(
        "raw",
        [
            {
                "chartType": "line",
                "labels": ["a", "b", "c"],
                "datasets": [
                    {"label": "x", "data": [1, 3, 2], "borderColor": "#ff0000"},
                    {"label": "y", "data": [2, 2]},
                ],
                "options": {"plugins": {"title": {"display": True, "text": "Trend"}}},
            },
            {
                "chartType": "doughnut",
                "labels": ["a", "b"],
                "datasets": [{"data": [1, 1], "backgroundColor": ["#ff0000", "rgba(0,0,255,0.5)"]}],
            },
            {
                "labels": ["a", "b", "c"],
                "datasets": [{"type": "pie", "data": [1, 2, 3]}],
                "options": {"plugins": {"legend": {"display": True}}},
            },
            '{"datasets": [{"data": [5, -2]}], "options": {"scales": {"y": {"beginAtZero": true}}}}',
        ],
    )
    def test_chart_variants(self, raw):
        assert rasterize_chart(raw, 200, 150, dpi=72).startswith(PNG_SIGNATURE)

    @pytest.mark.parametrize("data", [[1, -1], [0, 0], []])
    def test_pie_invalid_values(self, data):
        """饼图数据必须非负且总和大于0"""
        with pytest.raises(ChartSpecError):
            rasterize_chart({"chartType": "pie", "datasets": [{"data": data}]}, 200, 200)

    def test_zero_size(self, sample_chart_spec: ChartSpec):
        with pytest.raises(ChartSpecError):
            rasterize_chart(sample_chart_spec, 0, 100)

    def test_malformed_spec(self):
        with pytest.raises(ChartSpecError):
            rasterize_chart("{broken", 200, 100)


class TestMatplotlibChartRasterizer:
    """异步栅格化器测试"""

    def test_rasterize_releases_surface(self, sample_chart_spec: ChartSpec):
        """渲染结束后绘图面数量归零"""
        rasterizer = MatplotlibChartRasterizer(dpi=72)

        async def scenario():
            return await asyncio.gather(
                rasterizer.rasterize(sample_chart_spec, 200, 100),
                rasterizer.rasterize(sample_chart_spec, 100, 100),
            )

        results = asyncio.run(scenario())
        assert all(png.startswith(PNG_SIGNATURE) for png in results)
        assert rasterizer.active_surfaces == 0

    def test_failure_releases_surface(self):
        rasterizer = MatplotlibChartRasterizer(dpi=72)
        spec = ChartSpec.parse({"chartType": "pie", "datasets": [{"data": [-1]}]})
        with pytest.raises(ChartSpecError):
            asyncio.run(rasterizer.rasterize(spec, 100, 100))
        assert rasterizer.active_surfaces == 0

    def test_default_dpi_from_config(self, runtime_config):
        assert MatplotlibChartRasterizer().dpi == runtime_config.export.chart_dpi
