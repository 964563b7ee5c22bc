"""
配置加载单元测试

运行：pytest tests/unit/test_config.py -v
"""

from pathlib import Path

import pytest

from pagecraft.config import RuntimeConfig, TemplateCatalog, get_config, load_catalog


class TestTemplateCatalog:
    """模板目录测试"""

    def test_load_catalog(self, catalog: TemplateCatalog):
        """测试加载内置目录"""
        assert catalog.schema_version == "1.0"
        assert catalog.paper_sizes["A4"].width == 595
        assert catalog.paper_sizes["A4"].height == 842

    def test_min_size(self, catalog: TemplateCatalog):
        """测试类型最小尺寸"""
        assert catalog.min_size("chart") == (100, 80)
        assert catalog.min_size("divider") == (20, 1)

    def test_min_size_unknown_type(self, catalog: TemplateCatalog):
        """未知类型最小尺寸为1x1"""
        assert catalog.min_size("sticker") == (1.0, 1.0)

    def test_template_for_prefers_matching_content(self, catalog: TemplateCatalog):
        """类型+内容都匹配的模板优先"""
        template = catalog.template_for("text", "Caption Text")
        assert template is not None
        assert template.font_size == 12

        fallback = catalog.template_for("text", "something else")
        assert fallback is not None
        assert fallback.type == "text"

    def test_card_template_defaults(self, catalog: TemplateCatalog):
        """卡片模板样式"""
        card = catalog.get_template("card")
        style = card.style_defaults()
        assert style["background_color"] == "#ffffff"
        assert style["border_radius"] == 4
        assert style["padding"] == 16
        assert style["shadow"] is True
        assert card.typography_defaults() == {}

    def test_grouped(self, catalog: TemplateCatalog):
        """按分组列出模板"""
        groups = catalog.grouped()
        assert {"typography", "layout", "media", "charts"} <= set(groups)

    def test_missing_catalog_file(self, temp_dir: Path):
        """目录文件不存在时报错"""
        with pytest.raises(FileNotFoundError):
            load_catalog(temp_dir / "missing.yaml")


class TestRuntimeConfig:
    """运行期配置测试"""

    def test_default_values(self):
        """测试默认配置"""
        config = RuntimeConfig()
        assert config.canvas.base_grid_px == 10
        assert config.canvas.zoom_min == 0.5
        assert config.canvas.zoom_max == 2.0
        assert config.writer.footer_from_page == 3
        assert config.export.baseline_ratio == 0.75
        assert config.logging.log_level == "INFO"

    def test_from_yaml_default_form(self, temp_dir: Path):
        """YAML中 {default: 值} 与直接值两种写法"""
        yaml_path = temp_dir / "runtime.yaml"
        yaml_path.write_text(
            "runtime_options:\n"
            "  storage_dir: data\n"
            "  canvas:\n"
            "    base_grid_px: {default: 20}\n"
            "    snap_enabled: false\n"
            "  export:\n"
            "    chart_dpi: {default: 96, description: dpi}\n",
            encoding="utf-8",
        )

        config = RuntimeConfig.from_yaml(yaml_path)

        assert config.canvas.base_grid_px == 20
        assert config.canvas.snap_enabled is False
        assert config.export.chart_dpi == 96
        # 相对路径基于配置文件目录
        assert config.storage_dir == (temp_dir / "data").resolve()
        assert config.get_preview_dir() == config.storage_dir / "previews"

    def test_from_yaml_missing_file(self, temp_dir: Path):
        """配置文件不存在时使用默认值"""
        config = RuntimeConfig.from_yaml(temp_dir / "absent.yaml")
        assert config.writer.start_x == 10

    def test_env_override(self, monkeypatch):
        """环境变量覆盖"""
        monkeypatch.setenv("PAGECRAFT_STORAGE_DIR", "/tmp/pagecraft-env")
        config = RuntimeConfig()
        assert config.storage_dir == Path("/tmp/pagecraft-env")

    def test_env_overrides_yaml(self, temp_dir: Path, monkeypatch):
        """环境变量优先于YAML取值，未覆盖的键仍取YAML"""
        yaml_path = temp_dir / "runtime.yaml"
        yaml_path.write_text(
            "runtime_options:\n"
            "  export:\n"
            "    chart_dpi: {default: 144}\n"
            "    shadow_offset: {default: 6}\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("PAGECRAFT_EXPORT__CHART_DPI", "200")

        config = RuntimeConfig.from_yaml(yaml_path)
        assert config.export.chart_dpi == 200
        assert config.export.shadow_offset == 6
        # 加载结束后不影响直接构造
        assert RuntimeConfig().export.shadow_offset == 4

    def test_catalog_path_from_yaml(self, temp_dir: Path):
        yaml_path = temp_dir / "runtime.yaml"
        yaml_path.write_text("runtime_options:\n  catalog_path: catalog.yaml\n", encoding="utf-8")
        config = RuntimeConfig.from_yaml(yaml_path)
        assert config.catalog_path == (temp_dir / "catalog.yaml").resolve()

    def test_global_config_is_test_config(self, runtime_config: RuntimeConfig):
        """测试期间全局配置被替换"""
        assert get_config() is runtime_config
        assert get_config().writer.compress is False

    def test_ensure_dirs(self, runtime_config: RuntimeConfig):
        """创建存储目录"""
        runtime_config.ensure_dirs()
        assert runtime_config.get_preview_dir().is_dir()
