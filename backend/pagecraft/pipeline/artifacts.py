"""
产物存储 - 导出PDF的落盘、临时预览与manifest

职责：
1. 保存PDF到指定路径（下载）
2. 发布临时预览文件，返回 file:// URL
3. 宽限期后撤销预览（删除文件）
4. 生成 manifest.json

测试要点：
- test_publish_and_revoke: 预览发布与撤销
- test_schedule_revoke: 延迟撤销
- test_manifest_structure: manifest结构
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse
from urllib.request import url2pathname

from ..config import get_config
from ..interfaces import IArtifactStore

if TYPE_CHECKING:
    from ..models import ExportRun

logger = logging.getLogger(__name__)


class ArtifactStore(IArtifactStore):
    """产物存储实现"""

    def __init__(self, preview_dir: str | Path | None = None):
        self.preview_dir = Path(preview_dir) if preview_dir else get_config().get_preview_dir()
        self._published: set[Path] = set()

    def publish(self, data: bytes, suffix: str = ".pdf") -> str:
        """写出临时预览文件，返回其URL"""
        self.preview_dir.mkdir(parents=True, exist_ok=True)
        path = (self.preview_dir / f"preview-{uuid.uuid4().hex}{suffix}").resolve()
        with open(path, "wb") as f:
            f.write(data)
        self._published.add(path)
        url = path.as_uri()
        logger.debug(f"发布预览: {url}")
        return url

    def revoke(self, url: str) -> bool:
        """撤销预览（仅删除本存储发布的文件）"""
        path = self._path_of(url)
        if path is None or path not in self._published:
            return False
        self._published.discard(path)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"撤销预览: {url}")
        return True

    def schedule_revoke(self, url: str, delay_sec: float) -> asyncio.TimerHandle:
        """在当前事件循环上延迟撤销"""
        loop = asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay_sec), self.revoke, url)

    def revoke_all(self) -> int:
        """撤销全部未撤销的预览"""
        count = 0
        for path in list(self._published):
            if self.revoke(path.as_uri()):
                count += 1
        return count

    @property
    def published(self) -> list[str]:
        return sorted(p.as_uri() for p in self._published)

    def save(self, data: bytes, path: Path) -> Path:
        """保存产物"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        return path

    def write_manifest(self, run: ExportRun, path: Path) -> Path:
        """生成manifest.json"""
        manifest = {
            "schema_version": "1.0",
            "run_id": run.run_id,
            "status": run.status.value,
            "paper": {
                "size": run.paper_size,
                "orientation": run.orientation,
            },
            "element_count": run.element_count,
            "artifacts": {
                "pdf_size": run.artifacts.pdf_size,
                "output_path": str(run.artifacts.output_path) if run.artifacts.output_path else None,
                "recipe_path": str(run.artifacts.recipe_path) if run.artifacts.recipe_path else None,
            },
            "skipped_elements": [s.model_dump() for s in run.skipped_elements],
            "flags": run.flags,
            "errors": run.errors,
            "timestamps": {
                "created_at": run.created_at.isoformat() if run.created_at else None,
                "started_at": run.started_at.isoformat() if run.started_at else None,
                "finished_at": run.finished_at.isoformat() if run.finished_at else None,
            },
        }

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(manifest, f, ensure_ascii=False, indent=2)
        return path

    @staticmethod
    def _path_of(url: str) -> Path | None:
        parsed = urlparse(url)
        if parsed.scheme != "file":
            return None
        return Path(url2pathname(parsed.path)).resolve()
