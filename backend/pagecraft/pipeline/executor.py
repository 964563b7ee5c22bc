"""
导出流水线执行器 - 编排各阶段执行

职责：
1. 按顺序执行各阶段（纸张 → 规划 → 栅格化 → 回放 → 定稿）
2. 更新导出记录进度
3. 单元素失败隔离，致命错误标记失败后重新抛出
4. 生成预览URL并安排撤销；可选输出文件、脚本与manifest

每次 export 调用都是独立的运行，不共享写入器与中间状态。

测试要点：
- test_export_malformed_chart_and_text: 非法图表不阻断文本
- test_progress_tracking: 进度跟踪
- test_preview_revoked_after_delay: 预览延迟撤销
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config import get_config
from ..export import BinaryRenderer, DrawPlanner, MatplotlibChartRasterizer, RecipeRenderer
from ..interfaces import IChartRasterizer
from ..models import DocumentModel, ExportRun, ExportStatus
from ..writer import PageWriter
from .artifacts import ArtifactStore
from .stages import EXPORT_STAGES, ExportStage, PipelineStage, ProgressCallback

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """导出结果"""
    run: ExportRun
    pdf_bytes: bytes
    preview_url: str | None = None
    recipe: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.run.status == ExportStatus.SUCCEEDED


class ExportPipeline:
    """导出流水线"""

    def __init__(
        self,
        rasterizer: IChartRasterizer | None = None,
        artifact_store: ArtifactStore | None = None,
        progress_callback: ProgressCallback | None = None,
        image_base_dir: str | Path | None = None,
        preview_revoke_delay: float | None = None,
    ):
        self.config = get_config()
        self.rasterizer = rasterizer or MatplotlibChartRasterizer()
        self.artifact_store = artifact_store or ArtifactStore()
        self.progress_callback = progress_callback
        self.planner = DrawPlanner(image_base_dir=image_base_dir)
        self.preview_revoke_delay = (
            self.config.export.preview_revoke_delay_sec
            if preview_revoke_delay is None
            else preview_revoke_delay
        )

    async def export(
        self,
        document: DocumentModel,
        output_path: str | Path | None = None,
        recipe_path: str | Path | None = None,
        preview: bool = True,
    ) -> ExportResult:
        """
        导出文档

        Args:
            document: 文档模型
            output_path: PDF输出路径（None时不落盘）
            recipe_path: 脚本输出路径（None时不生成脚本）
            preview: 是否发布临时预览（需在运行中的事件循环内，宽限期后自动撤销）

        Returns:
            导出结果

        Raises:
            PageStateError 及写入器定稿期间的错误（运行标记为失败）
        """
        paper = document.paper
        run = ExportRun(
            run_id=uuid.uuid4().hex,
            paper_size=paper.size.value,
            orientation=paper.orientation.value,
            element_count=len(document.elements),
        )
        run.mark_running(stage=ExportStage.RESOLVE_PAPER.value)
        logger.info(
            f"[{run.run_id}] 导出开始: {run.paper_size}/{run.orientation}, "
            f"{run.element_count} 个元素"
        )
        self._update_progress(run)

        context: dict[str, Any] = {
            "document": document,
            "output_path": Path(output_path) if output_path else None,
            "recipe_path": Path(recipe_path) if recipe_path else None,
            "preview": preview,
            "preview_url": None,
            "recipe": None,
        }

        try:
            for stage in EXPORT_STAGES:
                await self._execute_stage(run, stage, context)
            run.mark_succeeded()
        except Exception as e:
            logger.exception(f"导出失败: {run.run_id}")
            run.mark_failed(str(e))
            self._update_progress(run)
            raise

        if context["output_path"] is not None:
            manifest_path = context["output_path"].with_suffix(".manifest.json")
            self.artifact_store.write_manifest(run, manifest_path)

        self._update_progress(run)
        logger.info(
            f"[{run.run_id}] 导出完成: {run.artifacts.pdf_size} bytes, "
            f"跳过 {len(run.skipped_elements)} 个元素"
        )
        return ExportResult(
            run=run,
            pdf_bytes=context["pdf_bytes"],
            preview_url=context["preview_url"],
            recipe=context["recipe"],
        )

    def export_sync(
        self,
        document: DocumentModel,
        output_path: str | Path | None = None,
        recipe_path: str | Path | None = None,
    ) -> ExportResult:
        """同步导出（不发布预览：事件循环结束后无法按期撤销）"""
        return asyncio.run(
            self.export(document, output_path=output_path, recipe_path=recipe_path, preview=False)
        )

    def build_recipe(self, document: DocumentModel, output_name: str = "document.pdf") -> str:
        """只生成脚本，不绘制"""
        plans = self.planner.plan(document)
        return RecipeRenderer(document.paper, output_name=output_name).render(plans)

    async def _execute_stage(
        self, run: ExportRun, stage: PipelineStage, context: dict[str, Any]
    ) -> None:
        """执行单个阶段"""
        run.stage = stage.name
        run.percent = stage.progress_start
        logger.debug(f"[{run.run_id}] 开始阶段: {stage.name}")
        self._update_progress(run)

        try:
            if stage.name == ExportStage.RESOLVE_PAPER.value:
                self._stage_resolve_paper(run, context)

            elif stage.name == ExportStage.PLAN.value:
                self._stage_plan(run, context)

            elif stage.name == ExportStage.RASTERIZE.value:
                await self._stage_rasterize(run, context)

            elif stage.name == ExportStage.REPLAY.value:
                self._stage_replay(run, context)

            elif stage.name == ExportStage.FINALIZE.value:
                self._stage_finalize(run, context)

        except Exception as e:
            logger.error(f"[{run.run_id}] 阶段失败 {stage.name}: {e}")
            run.add_flag(f"阶段失败:{stage.name}")
            raise

        run.percent = stage.progress_end
        self._update_progress(run)

    def _stage_resolve_paper(self, run: ExportRun, context: dict[str, Any]) -> None:
        """按纸张创建写入器"""
        document: DocumentModel = context["document"]
        writer = PageWriter(document.paper)
        writer.init_page(header=False, footer=False)
        context["writer"] = writer
        context["renderer"] = BinaryRenderer(writer, self.rasterizer, run)

    def _stage_plan(self, run: ExportRun, context: dict[str, Any]) -> None:
        """生成绘制计划（按z_index升序）"""
        context["plans"] = self.planner.plan(context["document"])

    async def _stage_rasterize(self, run: ExportRun, context: dict[str, Any]) -> None:
        """并发栅格化图表并汇合"""
        renderer: BinaryRenderer = context["renderer"]
        context["steps"] = await renderer.prepare(context["plans"])

    def _stage_replay(self, run: ExportRun, context: dict[str, Any]) -> None:
        """按z-order回放"""
        renderer: BinaryRenderer = context["renderer"]
        renderer.replay(context["plans"], context["steps"])

    def _stage_finalize(self, run: ExportRun, context: dict[str, Any]) -> None:
        """定稿：PDF字节、文件、预览、脚本"""
        writer: PageWriter = context["writer"]
        pdf_bytes = writer.to_bytes()
        context["pdf_bytes"] = pdf_bytes
        run.artifacts.pdf_size = len(pdf_bytes)

        output_path: Path | None = context["output_path"]
        if output_path is not None:
            run.artifacts.output_path = self.artifact_store.save(pdf_bytes, output_path)

        if context["preview"]:
            url = writer.preview(self.artifact_store)
            self.artifact_store.schedule_revoke(url, self.preview_revoke_delay)
            run.artifacts.preview_url = url
            context["preview_url"] = url

        recipe_path: Path | None = context["recipe_path"]
        if recipe_path is not None:
            output_name = output_path.name if output_path else "document.pdf"
            recipe = RecipeRenderer(
                context["document"].paper, output_name=output_name
            ).render(context["plans"])
            recipe_path.parent.mkdir(parents=True, exist_ok=True)
            with open(recipe_path, "w", encoding="utf-8") as f:
                f.write(recipe)
            run.artifacts.recipe_path = recipe_path
            context["recipe"] = recipe

    def _update_progress(self, run: ExportRun) -> None:
        if self.progress_callback is None:
            return
        try:
            self.progress_callback(run)
        except Exception as e:
            logger.warning(f"进度回调失败: {e}")
