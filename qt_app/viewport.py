from __future__ import annotations

import math
from typing import List, Sequence, Set, Tuple

import numpy as np
import pyqtgraph.opengl as gl
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QVector3D
from PySide6.QtWidgets import QLabel, QSizePolicy, QWidget

from lasso_select.candidates import CandidateEntry, CandidateSet
from lasso_select.config import SelectionConfig
from lasso_select.projection import CameraPose
from lasso_select.selection import Mode, MouseButton, SelectionOrchestrator

from qt_app.bridge import SelectionBridge

LASSO_COLOR = (1.0, 1.0, 1.0, 0.25)
POINT_COLOR = np.array([0.55, 0.66, 0.86, 0.9], dtype=np.float32)
SELECTED_COLOR = np.array([1.0, 0.42, 0.05, 1.0], dtype=np.float32)

_BUTTONS = {
    Qt.MouseButton.LeftButton: MouseButton.LEFT,
    Qt.MouseButton.MiddleButton: MouseButton.MIDDLE,
    Qt.MouseButton.RightButton: MouseButton.RIGHT,
}


def _matrix_to_numpy(m) -> np.ndarray:
    rows = [m.row(i) for i in range(4)]
    return np.array([[r.x(), r.y(), r.z(), r.w()] for r in rows], dtype=np.float64)


class LassoViewportWidget(gl.GLViewWidget):
    modeChanged = Signal(str)
    selectionChanged = Signal(list)

    def __init__(self, candidates: CandidateSet, config: SelectionConfig | None = None, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setObjectName("LassoViewportWidget")
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMouseTracking(True)
        self.setMinimumSize(100, 100)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setBackgroundColor((43, 43, 43, 255))

        self.candidates = candidates
        self.config = config or SelectionConfig()
        self.selected_ids: Set = set()
        self._nav_last: Tuple[float, float] | None = None
        self.is_rotating = False
        self.is_panning = False
        self._lasso_items: List[gl.GLLinePlotItem] = []
        self._preview_item: gl.GLLinePlotItem | None = None

        self.bridge = SelectionBridge(self.config, self)
        self.orchestrator = SelectionOrchestrator(
            camera_source=self.camera_pose,
            candidate_source=self.candidates,
            events=self.bridge.events(),
            config=self.config,
        )
        self.bridge.edgeAdded.connect(self._add_lasso_segment)
        self.bridge.previewEdgeUpdated.connect(self._draw_preview_line)
        self.bridge.polygonCleared.connect(self._remove_lasso)
        self.bridge.selectionEnded.connect(self._on_selection_ended)
        self.bridge.lassoExpired.connect(self._remove_lasso_segments)
        self.bridge.selectionMade.connect(self.set_selected)

        self.grid_item = gl.GLGridItem(color=(85, 85, 85, 110))
        self.grid_item.setSize(x=4000.0, y=4000.0, z=1.0)
        self.grid_item.setSpacing(100.0, 100.0, 1.0)
        self.addItem(self.grid_item)

        self.points_item = gl.GLScatterPlotItem(pos=np.empty((0, 3), np.float32), size=4.0, pxMode=True)
        self.addItem(self.points_item)

        self.overlay = QLabel("Import a point cloud or mesh\n(PLY / OBJ / STL)", self)
        self.overlay.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.overlay.setStyleSheet("QLabel { color:#8fa0b7; font-size:24px; font-weight:600; background:transparent; }")
        self.overlay.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)

        self.candidates.subscribe(self._on_candidates_changed)
        self.setCameraPosition(pos=QVector3D(0.0, 0.0, 0.0), distance=600.0, elevation=24.0, azimuth=-58.0)
        self._on_candidates_changed(self.candidates.entries())

    def camera_pose(self) -> CameraPose:
        w = max(1, int(self.width()))
        h = max(1, int(self.height()))
        aspect = float(w) / float(h)
        # pyqtgraph's fov is horizontal; the projector expects a vertical one.
        vfov = math.degrees(2.0 * math.atan(math.tan(math.radians(float(self.opts["fov"])) * 0.5) / aspect))
        return CameraPose.from_view_matrix(_matrix_to_numpy(self.viewMatrix()), fov=vfov, aspect=aspect)

    def to_ndc(self, sx: float, sy: float) -> Tuple[float, float]:
        w = max(1, int(self.width()))
        h = max(1, int(self.height()))
        return (2.0 * sx / float(w)) - 1.0, 1.0 - (2.0 * sy / float(h))

    def set_lasso_mode(self, enabled: bool) -> None:
        mode = Mode.SELECTION if enabled else Mode.NAVIGATION
        self.orchestrator.set_mode(mode)
        self.modeChanged.emit(mode.value)

    def set_selected(self, ids: Sequence) -> None:
        self.selected_ids = set(ids)
        self._update_point_colors()
        self.modeChanged.emit(self.orchestrator.mode.value)
        self.selectionChanged.emit(list(ids))

    def clear_selection(self) -> None:
        if self.selected_ids:
            self.set_selected([])

    def resizeEvent(self, event) -> None:  # noqa: N802
        super().resizeEvent(event)
        self.overlay.setGeometry(self.rect())

    def mousePressEvent(self, event) -> None:  # noqa: N802
        pos = event.position()
        self._nav_last = (float(pos.x()), float(pos.y()))
        if event.button() == Qt.MouseButton.RightButton:
            self.is_rotating = True
            event.accept()
            return
        if event.button() == Qt.MouseButton.MiddleButton:
            self.is_panning = True
            event.accept()
            return
        if event.button() == Qt.MouseButton.LeftButton and self.orchestrator.mode is Mode.SELECTION:
            self.orchestrator.cursor_clicked(self.to_ndc(float(pos.x()), float(pos.y())), _BUTTONS[event.button()])
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:  # noqa: N802
        cur = (float(event.position().x()), float(event.position().y()))
        if self._nav_last is None:
            self._nav_last = cur
        dx = cur[0] - self._nav_last[0]
        dy = cur[1] - self._nav_last[1]
        self._nav_last = cur

        if self.is_rotating:
            self.orbit(-dx, dy)
            event.accept()
            return
        if self.is_panning:
            self.pan(dx, dy, 0.0, relative="view-upright")
            event.accept()
            return
        if self.orchestrator.mode is Mode.SELECTION:
            self.orchestrator.cursor_moved(self.to_ndc(*cur))
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:  # noqa: N802
        if event.button() == Qt.MouseButton.RightButton and self.is_rotating:
            self.is_rotating = False
            self._nav_last = None
            event.accept()
            return
        if event.button() == Qt.MouseButton.MiddleButton and self.is_panning:
            self.is_panning = False
            self._nav_last = None
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event) -> None:  # noqa: N802
        delta = int(event.angleDelta().x()) or int(event.angleDelta().y())
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            self.opts["fov"] = float(np.clip(self.opts["fov"] * (0.999 ** delta), 5.0, 120.0))
        else:
            self.opts["distance"] = float(np.clip(self.opts["distance"] * (0.999 ** delta), 1e-3, 1e12))
        self.update()
        event.accept()

    def keyPressEvent(self, event) -> None:  # noqa: N802
        if event.key() == Qt.Key.Key_Escape and self.orchestrator.mode is Mode.SELECTION:
            self.set_lasso_mode(False)
            event.accept()
            return
        super().keyPressEvent(event)

    def _on_candidates_changed(self, entries: Sequence[CandidateEntry]) -> None:
        self.selected_ids.clear()
        self.selectionChanged.emit([])
        pos = self.candidates.positions().astype(np.float32)
        self.overlay.setVisible(len(pos) == 0)
        self._update_point_colors(pos)
        if len(pos):
            self._fit_camera_to_points(pos)

    def _update_point_colors(self, pos: np.ndarray | None = None) -> None:
        entries = self.candidates.entries()
        if pos is None:
            pos = self.candidates.positions().astype(np.float32)
        colors = np.tile(POINT_COLOR, (len(entries), 1))
        if self.selected_ids:
            hit = np.array([e.id in self.selected_ids for e in entries], dtype=bool)
            colors[hit] = SELECTED_COLOR
        self.points_item.setData(pos=pos, color=colors)
        self.update()

    def _fit_camera_to_points(self, pos: np.ndarray) -> None:
        mins = pos.min(axis=0)
        maxs = pos.max(axis=0)
        center = (mins + maxs) * 0.5
        span = float(max(np.linalg.norm(maxs - mins), 1.0))
        self.setCameraPosition(pos=QVector3D(float(center[0]), float(center[1]), float(center[2])), distance=max(span * 1.8, 20.0))

    def _line(self, a: np.ndarray, b: np.ndarray) -> gl.GLLinePlotItem:
        item = gl.GLLinePlotItem(pos=np.array([a, b], dtype=np.float32), color=LASSO_COLOR, width=1.5, antialias=True)
        item.setGLOptions("additive")
        return item

    def _add_lasso_segment(self, a: np.ndarray, b: np.ndarray) -> None:
        item = self._line(a, b)
        self.addItem(item)
        self._lasso_items.append(item)

    def _draw_preview_line(self, a: np.ndarray, b: np.ndarray) -> None:
        self._clear_preview_line()
        self._preview_item = self._line(a, b)
        self.addItem(self._preview_item)

    def _clear_preview_line(self) -> None:
        if self._preview_item is not None:
            self.removeItem(self._preview_item)
            self._preview_item = None

    def _remove_lasso_segments(self) -> None:
        for item in self._lasso_items:
            self.removeItem(item)
        self._lasso_items.clear()

    def _remove_lasso(self) -> None:
        self._clear_preview_line()
        self._remove_lasso_segments()

    def _on_selection_ended(self) -> None:
        self._clear_preview_line()

