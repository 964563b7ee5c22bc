"""
运行期配置 - 读取 config/pagecraft_runtime.yaml

职责：
- 加载画布/写入器/导出/存储等运行参数
- 提供环境变量覆盖机制
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar

import yaml
from pydantic import BaseModel, Field
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


class CanvasConfig(BaseModel):
    """画布配置"""

    base_grid_px: float = 10.0
    snap_enabled: bool = True
    zoom_min: float = 0.5
    zoom_max: float = 2.0


class WriterConfig(BaseModel):
    """页面写入器配置"""

    start_x: float = 10.0
    start_y: float = 10.0
    line_spacing: float = 5.0
    footer_from_page: int = 3
    compress: bool = True


class ExportConfig(BaseModel):
    """导出配置"""

    baseline_ratio: float = 0.75
    chart_dpi: int = 144
    preview_revoke_delay_sec: float = 1.0
    shadow_offset: float = 4.0
    shadow_color: str = "#00000033"
    divider_min_thickness: float = 1.0


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"


class YamlOptionsSource(PydanticBaseSettingsSource):
    """YAML runtime_options 配置源（优先级低于初始化参数与环境变量）"""

    def __init__(self, settings_cls: type[BaseSettings], values: dict[str, Any]):
        super().__init__(settings_cls)
        self.values = values

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self.values.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self.values)


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    # from_yaml 加载期间的YAML取值
    yaml_values: ClassVar[dict[str, Any]] = {}

    # 基础路径
    storage_dir: Path = Path("storage")
    catalog_path: Path | None = None

    # 各子配置
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    writer: WriterConfig = Field(default_factory=WriterConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "PAGECRAFT_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {}) or {}

        values: dict[str, Any] = {
            section: cls._extract(runtime_opts, section)
            for section in ("canvas", "writer", "export", "logging")
        }
        # 相对路径基于配置文件所在目录
        for key in ("storage_dir", "catalog_path"):
            if runtime_opts.get(key):
                values[key] = cls._resolve_path(Path(runtime_opts[key]), path.parent)

        # 环境变量（PAGECRAFT_*）优先于YAML取值
        cls.yaml_values = values
        try:
            return cls()
        finally:
            cls.yaml_values = {}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
            YamlOptionsSource(settings_cls, cls.yaml_values),
        )

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置"""
        section = data.get(key, {}) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    @staticmethod
    def _resolve_path(value: Path, base_dir: Path) -> Path:
        """相对路径解析为绝对路径"""
        if value.is_absolute():
            return value
        return (base_dir / value).resolve()

    def get_preview_dir(self) -> Path:
        """获取预览文件目录"""
        return self.storage_dir / "previews"

    def ensure_dirs(self) -> None:
        """确保必要目录存在"""
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.get_preview_dir().mkdir(exist_ok=True)


# 全局配置实例
_config: RuntimeConfig | None = None

DEFAULT_CONFIG_PATH = Path("config/pagecraft_runtime.yaml")


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_CONFIG_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config
