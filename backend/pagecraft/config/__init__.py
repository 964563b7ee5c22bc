"""
配置层 - 加载运行期配置与元素模板目录

职责：
- 加载 config/pagecraft_runtime.yaml（运行期参数，支持环境变量覆盖）
- 加载 element_templates.yaml（纸张尺寸/最小尺寸/元素模板）
- 提供类型安全的配置访问接口
"""

from .catalog import CatalogLoader, ElementTemplate, TemplateCatalog, load_catalog
from .runtime_config import RuntimeConfig, get_config, reload_config

__all__ = [
    "CatalogLoader",
    "ElementTemplate",
    "TemplateCatalog",
    "load_catalog",
    "RuntimeConfig",
    "get_config",
    "reload_config",
]
