"""
设计文件存取 - 文档模型 ⇄ JSON

格式：{version, paperSize, orientation, elements[]}
- 元素按z-order输出，不含 id / zIndex（加载时按文件顺序重新生成）
- 版本不符、JSON错误、字段非法 → 加载失败，文档保持原状

测试要点：
- test_round_trip: 保存后加载，元素数量/类型/样式/相对顺序一致
- test_version_mismatch: 版本不符时不修改文档
- test_malformed_json: JSON错误返回False
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..interfaces import DesignLoadError, IDesignStore
from ..models import DocumentModel, Paper, element_adapter

logger = logging.getLogger(__name__)

DESIGN_VERSION = "1.0"

# 不持久化的元素字段（别名与字段名两种写法）
_TRANSIENT_KEYS = ("id", "zIndex", "z_index")


class DesignStore(IDesignStore):
    """设计文件存取实现"""

    def __init__(self, version: str = DESIGN_VERSION):
        self.version = version

    # === 保存 ===

    def to_dict(self, document: DocumentModel) -> dict[str, Any]:
        return {
            "version": self.version,
            "paperSize": document.paper.size.value,
            "orientation": document.paper.orientation.value,
            "elements": [
                element.model_dump(
                    mode="json", by_alias=True, exclude={"id", "z_index"}, exclude_none=True
                )
                for element in document.sorted_by_z()
            ],
        }

    def dumps(self, document: DocumentModel) -> str:
        return json.dumps(self.to_dict(document), ensure_ascii=False, indent=2)

    def save(self, document: DocumentModel, path: Path) -> Path:
        """保存设计文件"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.dumps(document))
        logger.info(f"设计已保存: {path} ({len(document.elements)} 个元素)")
        return path

    # === 加载 ===

    def loads(self, text: str, document: DocumentModel) -> bool:
        """
        从JSON文本加载

        Returns:
            是否成功（失败时文档保持原状）
        """
        try:
            loaded = self.parse(text)
        except DesignLoadError as e:
            logger.warning(f"设计加载失败: {e}")
            return False
        document.replace(loaded)
        logger.info(f"设计已加载: {len(document.elements)} 个元素")
        return True

    def load(self, path: Path, document: DocumentModel) -> bool:
        """从文件加载"""
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"设计文件无法读取: {path}: {e}")
            return False
        return self.loads(text, document)

    def parse(self, text: str) -> DocumentModel:
        """
        解析设计文件（不修改任何现有文档）

        Raises:
            DesignLoadError: JSON错误、版本不符或字段非法
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DesignLoadError(f"JSON格式错误: {e}") from e
        if not isinstance(data, dict):
            raise DesignLoadError("设计文件顶层必须是对象")

        version = data.get("version")
        if version != self.version:
            raise DesignLoadError(f"版本不符: {version!r}（期望 {self.version!r}）")

        raw_elements = data.get("elements", [])
        if not isinstance(raw_elements, list):
            raise DesignLoadError("elements 必须是数组")

        try:
            paper = Paper(
                size=data.get("paperSize", "A4"),
                orientation=data.get("orientation", "portrait"),
            )
            elements = []
            for i, raw in enumerate(raw_elements):
                if not isinstance(raw, dict):
                    raise DesignLoadError(f"第 {i} 个元素不是对象")
                item = {k: v for k, v in raw.items() if k not in _TRANSIENT_KEYS}
                elements.append(element_adapter.validate_python(item))
        except ValidationError as e:
            raise DesignLoadError(f"字段校验失败: {e}") from e

        return DocumentModel(paper=paper, elements=elements)
