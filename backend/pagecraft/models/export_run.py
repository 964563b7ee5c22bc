"""
导出记录模型 - 单次导出流水线的状态与结果

每次导出调用对应一个独立的 ExportRun，互不共享状态。
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class ExportStatus(str, Enum):
    """导出状态枚举"""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ExportArtifacts(BaseModel):
    """导出产物"""
    pdf_size: int | None = None
    preview_url: str | None = None
    output_path: Path | None = None
    recipe_path: Path | None = None


class SkippedElement(BaseModel):
    """被跳过的元素（渲染为空区域）"""
    element_id: str
    element_type: str
    reason: str


class ExportRun(BaseModel):
    """导出记录"""
    run_id: str = Field(..., description="UUID")
    paper_size: str
    orientation: str
    element_count: int = 0

    # 状态
    status: ExportStatus = ExportStatus.QUEUED
    stage: str = "INIT"
    percent: int = 0

    # 产物
    artifacts: ExportArtifacts = Field(default_factory=ExportArtifacts)

    # 结果
    flags: list[str] = Field(default_factory=list, description="告警标记")
    skipped_elements: list[SkippedElement] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list, description="错误信息")

    # 时间戳
    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    model_config = {"arbitrary_types_allowed": True}

    def mark_running(self, stage: str = "RESOLVE_PAPER") -> None:
        """标记为运行中"""
        self.status = ExportStatus.RUNNING
        self.started_at = datetime.now()
        self.stage = stage

    def mark_succeeded(self) -> None:
        """标记为成功"""
        self.status = ExportStatus.SUCCEEDED
        self.finished_at = datetime.now()
        self.percent = 100

    def mark_failed(self, error: str) -> None:
        """标记为失败"""
        self.status = ExportStatus.FAILED
        self.finished_at = datetime.now()
        self.errors.append(error)

    def add_flag(self, flag: str) -> None:
        """添加告警标记（不中断）"""
        if flag not in self.flags:
            self.flags.append(flag)

    def skip_element(self, element_id: str, element_type: str, reason: str) -> None:
        """记录跳过的元素"""
        if any(s.element_id == element_id for s in self.skipped_elements):
            return
        self.skipped_elements.append(
            SkippedElement(element_id=element_id, element_type=element_type, reason=reason)
        )
        self.add_flag(f"元素跳过:{element_id}")

    @property
    def skipped_ids(self) -> list[str]:
        return [s.element_id for s in self.skipped_elements]
