"""
二进制渲染器 - 执行绘制计划，生成PDF

分叉-汇合：
1. 每个元素计划一个协程，图表在其中栅格化为图片
2. asyncio.gather 等待全部完成（唯一的同步点），结果保持原始下标顺序
3. 按z-order顺序依次回放到页面写入器

单元素失败（栅格化/绘制异常）只让该元素变为空区域；
PageStateError 为致命错误，直接向上抛出。

测试要点：
- test_replay_order_independent_of_raster_completion: 回放顺序与完成顺序无关
- test_failed_chart_becomes_noop: 图表失败为空操作
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..interfaces import IExportRenderer, PageStateError, RenderError
from .operations import ChartOp, ElementPlan, WriterCall, writer_calls

if TYPE_CHECKING:
    from ..interfaces import IChartRasterizer
    from ..models import ExportRun
    from ..writer import PageWriter

logger = logging.getLogger(__name__)


class BinaryRenderer(IExportRenderer):
    """二进制渲染器"""

    def __init__(
        self,
        writer: PageWriter,
        rasterizer: IChartRasterizer,
        run: ExportRun | None = None,
    ):
        self.writer = writer
        self.rasterizer = rasterizer
        self.run = run

    async def render(self, plans: list[ElementPlan]) -> PageWriter:
        """栅格化并回放全部计划，返回页面写入器（尚未定稿）"""
        steps = await self.prepare(plans)
        self.replay(plans, steps)
        return self.writer

    async def prepare(self, plans: list[ElementPlan]) -> list[list[WriterCall]]:
        """并发准备每个元素的写入器调用（gather 保持输入顺序）"""
        return list(await asyncio.gather(*(self._prepare_plan(plan) for plan in plans)))

    def replay(self, plans: list[ElementPlan], steps: list[list[WriterCall]]) -> None:
        """按计划顺序依次执行"""
        for plan, calls in zip(plans, steps):
            if not calls:
                continue
            try:
                for call in calls:
                    getattr(self.writer, call.method)(*call.args, **call.kwargs)
            except PageStateError:
                raise
            except Exception as e:
                logger.exception(f"元素绘制失败 [{plan.element_type}] {plan.element_id}")
                self._skip(plan, f"{type(e).__name__}: {e}")

    async def _prepare_plan(self, plan: ElementPlan) -> list[WriterCall]:
        if plan.skipped:
            self._skip(plan, plan.skipped_reason or "")
            return []

        calls: list[WriterCall] = []
        try:
            for op in plan.ops:
                if isinstance(op, ChartOp):
                    png = await self.rasterizer.rasterize(op.spec, op.width, op.height)
                    calls.extend(writer_calls(op, image=png))
                else:
                    calls.extend(writer_calls(op))
        except RenderError as e:
            logger.warning(f"元素跳过 [{plan.element_type}] {plan.element_id}: {e}")
            self._skip(plan, str(e))
            return []
        except Exception as e:
            logger.exception(f"元素准备失败 [{plan.element_type}] {plan.element_id}")
            self._skip(plan, f"{type(e).__name__}: {e}")
            return []
        return calls

    def _skip(self, plan: ElementPlan, reason: str) -> None:
        if self.run is not None:
            self.run.skip_element(plan.element_id, plan.element_type, reason)
