"""
图表规格模型 - 图表元素的内容

对外格式：{chartType, labels[], datasets[{label,data[],backgroundColor,borderColor,borderWidth}], options}
模板目录中图表类型写在数据集上（datasets[0].type），两种写法都接受。
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ..interfaces import ChartSpecError

ChartType = Literal["bar", "line", "pie", "doughnut"]


class ChartDataset(BaseModel):
    """图表数据集"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    label: str | None = None
    data: list[float] = Field(default_factory=list)
    background_color: str | list[str] | None = None
    border_color: str | list[str] | None = None
    border_width: float | None = None
    type: ChartType | None = None


class ChartSpec(BaseModel):
    """图表规格"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    chart_type: ChartType | None = None
    labels: list[str] = Field(default_factory=list)
    datasets: list[ChartDataset] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=dict)

    def resolved_chart_type(self) -> ChartType:
        """图表类型：显式类型 > 首个数据集类型 > bar"""
        if self.chart_type:
            return self.chart_type
        if self.datasets and self.datasets[0].type:
            return self.datasets[0].type
        return "bar"

    @classmethod
    def parse(cls, raw: ChartSpec | dict | str) -> ChartSpec:
        """
        解析图表规格

        Args:
            raw: 规格对象、字典或JSON文本

        Raises:
            ChartSpecError: JSON错误、字段非法或无数据集
        """
        if isinstance(raw, ChartSpec):
            spec = raw
        else:
            try:
                data = json.loads(raw) if isinstance(raw, str) else raw
                if not isinstance(data, dict):
                    raise ChartSpecError(f"图表规格必须是对象: {type(data).__name__}")
                spec = cls.model_validate(data)
            except (json.JSONDecodeError, ValidationError, TypeError) as e:
                raise ChartSpecError(f"图表规格无法解析: {e}") from e

        if not spec.datasets:
            raise ChartSpecError("图表规格缺少数据集")
        return spec

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
