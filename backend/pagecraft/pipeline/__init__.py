"""
流水线模块 - 导出编排与执行

子模块：
- stages: 流水线各阶段定义
- executor: 导出流水线执行器
- artifacts: 产物存储（文件、预览、manifest）
"""

from .stages import EXPORT_STAGES, ExportStage, PipelineStage
from .artifacts import ArtifactStore
from .executor import ExportPipeline, ExportResult

__all__ = [
    "EXPORT_STAGES",
    "ExportStage",
    "PipelineStage",
    "ArtifactStore",
    "ExportPipeline",
    "ExportResult",
]
