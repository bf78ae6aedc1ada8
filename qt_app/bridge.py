from __future__ import annotations

from typing import List

import numpy as np
from PySide6.QtCore import QObject, QTimer, Signal

from lasso_select.config import SelectionConfig
from lasso_select.selection import SelectionEvents


class SelectionBridge(QObject):
    """Re-emits lasso engine callbacks as Qt signals for the viewport."""

    edgeAdded = Signal(object, object)
    previewEdgeUpdated = Signal(object, object)
    polygonCleared = Signal()
    selectionEnded = Signal()
    selectionMade = Signal(list)
    lassoExpired = Signal()

    def __init__(self, config: SelectionConfig | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.config = config or SelectionConfig()
        self._expire_timer = QTimer(self)
        self._expire_timer.setSingleShot(True)
        self._expire_timer.setInterval(int(self.config.feedback_delay_ms))
        self._expire_timer.timeout.connect(self.lassoExpired.emit)

    def events(self) -> SelectionEvents:
        return SelectionEvents(
            edge_added=self._on_edge_added,
            preview_edge_updated=self._on_preview_edge,
            polygon_cleared=self._on_polygon_cleared,
            selection_ended=self._on_selection_ended,
            selection_computed=self._on_selection_computed,
        )

    def _on_edge_added(self, a: np.ndarray, b: np.ndarray) -> None:
        self.edgeAdded.emit(a, b)

    def _on_preview_edge(self, a: np.ndarray, b: np.ndarray) -> None:
        self.previewEdgeUpdated.emit(a, b)

    def _on_polygon_cleared(self) -> None:
        self._expire_timer.stop()
        self.polygonCleared.emit()

    def _on_selection_ended(self) -> None:
        # Keep the closed lasso on screen briefly as feedback.
        self.selectionEnded.emit()
        self._expire_timer.start()

    def _on_selection_computed(self, ids: List) -> None:
        self.selectionMade.emit(list(ids))
