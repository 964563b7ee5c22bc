"""
导出流水线阶段定义

职责：
1. 定义各阶段的名称和进度区间
2. 提供进度回调类型

测试要点：
- test_stage_order: 阶段顺序
- test_stage_progress_update: 进度更新
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from ..models import ExportRun


class ExportStage(str, Enum):
    """导出阶段枚举"""
    RESOLVE_PAPER = "RESOLVE_PAPER"
    PLAN = "PLAN"
    RASTERIZE = "RASTERIZE"
    REPLAY = "REPLAY"
    FINALIZE = "FINALIZE"


@dataclass(frozen=True)
class PipelineStage:
    """流水线阶段"""
    name: str
    progress_start: int  # 进度起点（0-100）
    progress_end: int    # 进度终点


ProgressCallback = Callable[["ExportRun"], None]


# 导出流水线各阶段配置
EXPORT_STAGES: list[PipelineStage] = [
    PipelineStage(ExportStage.RESOLVE_PAPER.value, 0, 5),
    PipelineStage(ExportStage.PLAN.value, 5, 20),
    PipelineStage(ExportStage.RASTERIZE.value, 20, 70),
    PipelineStage(ExportStage.REPLAY.value, 70, 90),
    PipelineStage(ExportStage.FINALIZE.value, 90, 100),
]
