"""
图层顺序管理 - 调整元素绘制顺序并重新编号z_index

列表位置即绘制顺序：
- bring_forward / send_backward: 与相邻元素交换，已在端点时不变
- bring_to_front / send_to_back: 移出后插入到末尾/开头

每次操作后 z_index 重新赋值为列表下标（O(N)）。
所有操作同步完成且不抛异常，过期id返回False。

测试要点：
- test_dense_after_random_ops: 任意操作序列后z_index稠密
- test_bring_to_front_idempotent: 置顶幂等
- test_send_to_back_scenario: [0,1,2] 置底后为 [2,0,1]
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import DocumentModel

logger = logging.getLogger(__name__)


class StackOrderManager:
    """图层顺序管理器"""

    def __init__(self, document: DocumentModel):
        self.document = document

    def bring_forward(self, element_id: str) -> bool:
        """上移一层"""
        index = self._locate(element_id)
        if index is None or index >= len(self.document.elements) - 1:
            return False
        return self._swap(index, index + 1)

    def send_backward(self, element_id: str) -> bool:
        """下移一层"""
        index = self._locate(element_id)
        if index is None or index == 0:
            return False
        return self._swap(index, index - 1)

    def bring_to_front(self, element_id: str) -> bool:
        """置顶"""
        index = self._locate(element_id)
        if index is None or index == len(self.document.elements) - 1:
            return False
        return self._reinsert(index, len(self.document.elements) - 1)

    def send_to_back(self, element_id: str) -> bool:
        """置底"""
        index = self._locate(element_id)
        if index is None or index == 0:
            return False
        return self._reinsert(index, 0)

    def order(self) -> list[str]:
        """当前绘制顺序（元素id）"""
        return [e.id for e in self.document.elements]

    # === 内部 ===

    def _locate(self, element_id: str) -> int | None:
        index = self.document.index_of(element_id)
        if index is None:
            logger.debug(f"图层操作忽略过期元素: {element_id}")
        return index

    def _swap(self, a: int, b: int) -> bool:
        elements = self.document.elements
        elements[a], elements[b] = elements[b], elements[a]
        self.document.renumber()
        return True

    def _reinsert(self, index: int, target: int) -> bool:
        elements = self.document.elements
        element = elements.pop(index)
        elements.insert(target, element)
        self.document.renumber()
        return True
