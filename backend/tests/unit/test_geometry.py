"""
几何变换与画布交互单元测试

运行：pytest tests/unit/test_geometry.py -v
"""

import random

import pytest

from pagecraft.geometry import (
    CanvasController,
    DropEvent,
    MoveEvent,
    ResizeEvent,
    ScreenPoint,
    clamp_to_paper,
    clamp_zoom,
    compute_view_transform,
    grid_size_for_scale,
    remap_on_orientation_change,
    snap_to_grid,
    to_document_coordinates,
    to_screen_coordinates,
)
from pagecraft.models import ContainerRect, DocumentModel, Paper, PaperSize, TextElement, Position

A4 = Paper().dimensions


class TestTransforms:
    """坐标变换测试"""

    def test_clamp_inside_paper(self):
        """任意输入约束后矩形都在页面内"""
        rng = random.Random(42)
        for _ in range(500):
            w = rng.uniform(1, 595)
            h = rng.uniform(1, 842)
            pos = clamp_to_paper(rng.uniform(-2000, 2000), rng.uniform(-2000, 2000), w, h, A4)
            assert 0 <= pos.x <= 595 - w + 1e-9
            assert 0 <= pos.y <= 842 - h + 1e-9

    def test_clamp_oversized_rect_pins_origin(self):
        pos = clamp_to_paper(50, 50, 1000, 1000, A4)
        assert (pos.x, pos.y) == (0, 0)

    @pytest.mark.parametrize("zoom", [0.5, 0.75, 1.0, 1.5, 2.0])
    def test_round_trip_within_one_point(self, zoom):
        """文档→屏幕→文档 误差不超过1pt"""
        view = compute_view_transform(A4, zoom=zoom)
        container = ContainerRect(
            left=37, top=12, width=view.display_width, height=view.display_height
        )
        rng = random.Random(int(zoom * 100))
        for _ in range(200):
            x, y = rng.uniform(0, 595), rng.uniform(0, 842)
            sx, sy = to_screen_coordinates(x, y, container, A4)
            back = to_document_coordinates(sx, sy, container, A4)
            assert abs(back.x - x) <= 1
            assert abs(back.y - y) <= 1

    def test_zero_container_ignored(self):
        """容器尺寸为0时返回None"""
        empty = ContainerRect(left=0, top=0, width=0, height=100)
        assert to_document_coordinates(10, 10, empty, A4) is None

    def test_to_document_rounds(self):
        container = ContainerRect(left=0, top=0, width=1190, height=1684)
        point = to_document_coordinates(100, 100, container, A4)
        assert (point.x, point.y) == (50, 50)

    def test_snap(self):
        assert snap_to_grid(14, 10) == 10
        assert snap_to_grid(16, 10) == 20
        assert snap_to_grid(7.3, 0) == 7.3

    @pytest.mark.parametrize("scale", [0.5, 1.0, 2.0])
    def test_snap_constant_visual_grid(self, scale):
        """网格在屏幕上的视觉大小不随缩放变化"""
        grid = grid_size_for_scale(10, scale)
        assert grid * scale == pytest.approx(10)

    def test_clamp_zoom(self):
        assert clamp_zoom(0.1) == 0.5
        assert clamp_zoom(5) == 2.0
        assert clamp_zoom(1.2) == 1.2

    def test_view_transform_fit(self):
        """适配视口"""
        view = compute_view_transform(A4, viewport_width=595 / 2, viewport_height=2000)
        assert view.scale == pytest.approx(0.5)
        assert view.display_width == pytest.approx(297.5)

    def test_remap_orientation_swaps_axes(self):
        """方向切换时x/y按比例交换"""
        element = TextElement(position=Position(x=119, y=421))
        new = remap_on_orientation_change(element, A4, A4.swapped())
        assert new.x == round(421 / 842 * 842)
        assert new.y == round(119 / 595 * 595)

    def test_remap_size_change_scales(self):
        a3 = Paper(size=PaperSize.A3).dimensions
        element = TextElement(position=Position(x=595 / 2, y=842 / 2))
        new = remap_on_orientation_change(element, A4, a3)
        assert new.x == round(a3.width / 2)
        assert new.y == round(a3.height / 2)


@pytest.fixture
def controller(document: DocumentModel) -> CanvasController:
    """1:1 缩放、原点在(0,0)的控制器"""
    ctrl = CanvasController(document)
    ctrl.set_container_rect(ctrl.fitted_container())
    return ctrl


class TestCanvasController:
    """画布交互测试"""

    def test_drop_inserts_element(self, controller: CanvasController):
        element = controller.handle_drop(
            DropEvent(type="card", screen_position=ScreenPoint(x=104, y=96))
        )
        assert element is not None
        assert element.type == "card"
        # 吸附到10pt网格
        assert (element.position.x, element.position.y) == (100, 100)
        assert element.z_index == 0

    def test_drop_with_style(self, controller: CanvasController):
        element = controller.handle_drop(
            DropEvent(
                type="text",
                content="Hello",
                screen_position=ScreenPoint(x=0, y=0),
                style={"fontSize": 18},
            )
        )
        assert element.content == "Hello"
        assert element.typography.font_size == 18

    def test_drop_existing_moves(self, controller: CanvasController):
        element = controller.handle_drop(DropEvent(type="card", screen_position=ScreenPoint(x=0, y=0)))
        moved = controller.handle_drop(
            DropEvent(element_id=element.id, type="card", screen_position=ScreenPoint(x=200, y=300))
        )
        assert moved is element
        assert (element.position.x, element.position.y) == (200, 300)
        assert len(controller.document.elements) == 1

    def test_move_clamped(self, controller: CanvasController):
        element = controller.handle_drop(DropEvent(type="card", screen_position=ScreenPoint(x=0, y=0)))
        controller.handle_move(MoveEvent(element_id=element.id, screen_position=ScreenPoint(x=590, y=840)))
        assert element.right <= 595
        assert element.bottom <= 842

    def test_resize_follows_pointer(self, controller: CanvasController):
        element = controller.handle_drop(DropEvent(type="card", screen_position=ScreenPoint(x=100, y=100)))
        controller.handle_resize(ResizeEvent(element_id=element.id, screen_position=ScreenPoint(x=351, y=249)))
        assert (element.width, element.height) == (250, 150)

    def test_resize_respects_min_size(self, controller: CanvasController):
        element = controller.handle_drop(DropEvent(type="chart", screen_position=ScreenPoint(x=100, y=100)))
        controller.handle_resize(ResizeEvent(element_id=element.id, screen_position=ScreenPoint(x=110, y=110)))
        assert (element.width, element.height) == (100, 80)

    def test_stale_id_ignored(self, controller: CanvasController):
        assert controller.handle_move(MoveEvent(element_id="gone", screen_position=ScreenPoint(x=1, y=1))) is None
        assert controller.handle_resize(ResizeEvent(element_id="gone", screen_position=ScreenPoint(x=1, y=1))) is None

    def test_zero_container_ignored(self, document: DocumentModel):
        """容器尺寸为0时事件被忽略"""
        ctrl = CanvasController(document)
        assert ctrl.handle_drop(DropEvent(type="card", screen_position=ScreenPoint(x=5, y=5))) is None
        assert document.elements == []

    def test_zoomed_grid(self, document: DocumentModel):
        """放大2倍时网格为5pt"""
        ctrl = CanvasController(document, zoom=2.0)
        ctrl.set_container_rect(ctrl.fitted_container())
        assert ctrl.grid_size == pytest.approx(5)
        element = ctrl.handle_drop(DropEvent(type="card", screen_position=ScreenPoint(x=212, y=88)))
        assert (element.position.x, element.position.y) == (105, 45)

    def test_grid_follows_container_scale(self, document: DocumentModel):
        """容器以0.5倍显示页面时网格为20pt（与用户缩放无关）"""
        ctrl = CanvasController(document, zoom=1.0)
        ctrl.set_container_rect(ContainerRect(width=297.5, height=421))
        assert ctrl.scale == pytest.approx(0.5)
        assert ctrl.grid_size == pytest.approx(20)
        element = ctrl.handle_drop(DropEvent(type="card", screen_position=ScreenPoint(x=52, y=48)))
        assert (element.position.x, element.position.y) == (100, 100)

    def test_zoom_clamped(self, document: DocumentModel):
        ctrl = CanvasController(document)
        assert ctrl.set_zoom(10) == 2.0
        assert ctrl.set_zoom(0.01) == 0.5

    def test_snap_disabled(self, document: DocumentModel):
        ctrl = CanvasController(document, snap=False)
        ctrl.set_container_rect(ctrl.fitted_container())
        element = ctrl.handle_drop(DropEvent(type="card", screen_position=ScreenPoint(x=104, y=96)))
        assert (element.position.x, element.position.y) == (104, 96)
