"""
模板目录加载器 - 读取 element_templates.yaml

职责：
- 解析YAML并提供类型安全访问
- 提供纸张尺寸、元素最小尺寸、元素模板默认值
- 缓存加载结果（避免重复解析）

使用方式：
    catalog = CatalogLoader.load()
    template = catalog.template_for("title")
    min_w, min_h = catalog.min_size("chart")
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

BUNDLED_CATALOG_PATH = Path(__file__).with_name("element_templates.yaml")

# 模板字段中属于排版/盒样式的部分
TYPOGRAPHY_KEYS = ("font_size", "font_family", "font_weight", "font_style", "text_align", "text_color")
BOX_STYLE_KEYS = (
    "background_color",
    "border_style",
    "border_color",
    "border_width",
    "border_radius",
    "padding",
    "shadow",
)


class SizeSpec(BaseModel):
    """尺寸（pt）"""
    width: float
    height: float


class ElementTemplate(BaseModel):
    """元素模板"""
    label: str
    type: str
    content: Any = ""
    group: str = "other"
    width: float | None = None
    height: float | None = None

    font_size: float | None = None
    font_family: str | None = None
    font_weight: str | None = None
    font_style: str | None = None
    text_align: str | None = None
    text_color: str | None = None

    background_color: str | None = None
    border_style: str | None = None
    border_color: str | None = None
    border_width: float | None = None
    border_radius: float | None = None
    padding: float | None = None
    shadow: bool | None = None

    def typography_defaults(self) -> dict[str, Any]:
        """模板中声明的排版默认值"""
        return {k: getattr(self, k) for k in TYPOGRAPHY_KEYS if getattr(self, k) is not None}

    def style_defaults(self) -> dict[str, Any]:
        """模板中声明的盒样式默认值"""
        return {k: getattr(self, k) for k in BOX_STYLE_KEYS if getattr(self, k) is not None}


class TemplateCatalog(BaseModel):
    """模板目录（element_templates.yaml 的结构化表示）"""
    schema_version: str
    paper_sizes: dict[str, SizeSpec] = Field(default_factory=dict)
    min_sizes: dict[str, SizeSpec] = Field(default_factory=dict)
    fallback_size: SizeSpec = Field(default_factory=lambda: SizeSpec(width=300, height=100))
    templates: dict[str, ElementTemplate] = Field(default_factory=dict)

    # === 便捷访问方法 ===

    def min_size(self, element_type: str) -> tuple[float, float]:
        """获取类型最小尺寸"""
        spec = self.min_sizes.get(element_type)
        if spec is None:
            return 1.0, 1.0
        return spec.width, spec.height

    def template_for(self, element_type: str, content: Any = None) -> ElementTemplate | None:
        """
        查找模板

        优先匹配类型+内容都相同的模板，其次取该类型的第一个模板
        """
        candidates = [t for t in self.templates.values() if t.type == element_type]
        if not candidates:
            return None
        if content is not None:
            for template in candidates:
                if template.content == content:
                    return template
        return candidates[0]

    def get_template(self, key: str) -> ElementTemplate | None:
        """按键名获取模板"""
        return self.templates.get(key)

    def grouped(self) -> dict[str, list[ElementTemplate]]:
        """按分组列出模板"""
        groups: dict[str, list[ElementTemplate]] = {}
        for template in self.templates.values():
            groups.setdefault(template.group, []).append(template)
        return groups


class CatalogLoader:
    """模板目录加载器（缓存）"""

    @classmethod
    @lru_cache(maxsize=4)
    def load(cls, catalog_path: str | Path | None = None) -> TemplateCatalog:
        """加载并缓存模板目录"""
        path = Path(catalog_path) if catalog_path else BUNDLED_CATALOG_PATH
        if not path.exists():
            raise FileNotFoundError(f"模板目录不存在: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        return TemplateCatalog(**data)

    @classmethod
    def reload(cls, catalog_path: str | Path | None = None) -> TemplateCatalog:
        """强制重新加载（清除缓存）"""
        cls.load.cache_clear()
        return cls.load(catalog_path)


# 便捷函数
def load_catalog(catalog_path: str | Path | None = None) -> TemplateCatalog:
    """加载模板目录"""
    return CatalogLoader.load(catalog_path)
