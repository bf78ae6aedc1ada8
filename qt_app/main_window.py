from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import List

import numpy as np
from PySide6.QtCore import QObject, QSettings, Qt, Signal
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QApplication,
    QDockWidget,
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QTextEdit,
    QToolBar,
)

from lasso_select.candidates import CandidateSet, entries_from_array, load_candidates
from lasso_select.config import SelectionConfig

from qt_app.viewport import LassoViewportWidget


class _LogEmitter(QObject):
    message = Signal(str)


class DockLogHandler(logging.Handler):
    """Mirrors log records into the messages dock as ``LEVEL | message``."""

    def __init__(self) -> None:
        super().__init__(level=logging.INFO)
        self.emitter = _LogEmitter()
        self.setFormatter(logging.Formatter("%(levelname)s | %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.emitter.message.emit(self.format(record))
        except Exception:
            self.handleError(record)


class LassoMainWindow(QMainWindow):
    SETTINGS_ORG = "LassoSelect"
    SETTINGS_APP = "QtWorkspace"

    def __init__(self, config: SelectionConfig | None = None) -> None:
        super().__init__()
        self.setWindowTitle("Lasso Select")
        self.resize(1280, 820)
        self._settings = QSettings(self.SETTINGS_ORG, self.SETTINGS_APP)
        self.config = config or SelectionConfig.from_env()
        self.last_import_dir: str = str(self._settings.value("last_import_dir", ""))

        self.candidates = CandidateSet()
        self.viewport3d = LassoViewportWidget(self.candidates, self.config, self)
        self.viewport3d.modeChanged.connect(self._on_mode_changed)
        self.viewport3d.selectionChanged.connect(self._on_selection_changed)
        self.setCentralWidget(self.viewport3d)

        self.messages_dock = self._build_messages_dock()
        self.addDockWidget(Qt.DockWidgetArea.BottomDockWidgetArea, self.messages_dock)
        self._build_top_toolbar()

        self._log_handler = DockLogHandler()
        self._log_handler.emitter.message.connect(self.messages.append)
        logging.getLogger("lasso_select").addHandler(self._log_handler)

        self._restore_layout()
        self.log("Ready. Toggle Lasso and click 4 points to select.")

    def _build_messages_dock(self) -> QDockWidget:
        dock = QDockWidget("Messages", self)
        dock.setObjectName("MessagesDock")
        self.messages = QTextEdit(dock)
        self.messages.setReadOnly(True)
        dock.setWidget(self.messages)
        return dock

    def _build_top_toolbar(self) -> None:
        tb = QToolBar("Main", self)
        tb.setObjectName("MainToolbar")
        tb.setMovable(False)
        self.addToolBar(Qt.ToolBarArea.TopToolBarArea, tb)

        import_action = QAction("Import Points", self)
        import_action.triggered.connect(self.import_dialog)
        tb.addAction(import_action)

        self.lasso_action = QAction("Lasso", self)
        self.lasso_action.setCheckable(True)
        self.lasso_action.setShortcut("L")
        self.lasso_action.toggled.connect(self.viewport3d.set_lasso_mode)
        tb.addAction(self.lasso_action)

        clear_action = QAction("Clear Selection", self)
        clear_action.triggered.connect(self.viewport3d.clear_selection)
        tb.addAction(clear_action)

        tb.addSeparator()
        self.selection_label = QLabel("Selected: 0", self)
        tb.addWidget(self.selection_label)

    def log(self, text: str) -> None:
        self.messages.append(text)

    def import_dialog(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Import Points", self.last_import_dir, "Point files (*.ply *.obj *.stl *.xyz *.json)")
        if path:
            self.load_points_file(path)

    def load_points_file(self, path: str) -> None:
        try:
            t0 = time.perf_counter()
            entries = load_candidates(path)
            self.candidates.replace(entries)
            self.last_import_dir = str(Path(path).parent)
            dt = (time.perf_counter() - t0) * 1000.0
            self.log(f"INFO | Points loaded: {Path(path).name} ({len(entries)} points) in {dt:.0f} ms")
        except (OSError, ValueError) as exc:
            QMessageBox.critical(self, "Load Error", str(exc))
            self.log(f"ERROR | Load error: {exc}")

    def load_demo_points(self, count: int = 2000, seed: int = 7) -> None:
        rng = np.random.default_rng(seed)
        self.candidates.replace(entries_from_array(rng.normal(scale=120.0, size=(count, 3))))
        self.log(f"INFO | Demo cloud with {count} points")

    def _on_mode_changed(self, mode: str) -> None:
        selecting = mode == "selection"
        if self.lasso_action.isChecked() != selecting:
            self.lasso_action.blockSignals(True)
            self.lasso_action.setChecked(selecting)
            self.lasso_action.blockSignals(False)

    def _on_selection_changed(self, ids: List) -> None:
        self.selection_label.setText(f"Selected: {len(ids)}")

    def closeEvent(self, event) -> None:  # noqa: N802
        logging.getLogger("lasso_select").removeHandler(self._log_handler)
        self._save_layout()
        super().closeEvent(event)

    def _save_layout(self) -> None:
        self._settings.setValue("geometry", self.saveGeometry())
        self._settings.setValue("state", self.saveState())
        self._settings.setValue("last_import_dir", self.last_import_dir)

    def _restore_layout(self) -> None:
        geometry = self._settings.value("geometry")
        state = self._settings.value("state")
        if geometry is not None:
            self.restoreGeometry(geometry)
        if state is not None:
            self.restoreState(state)


def run_qt_app(path: str | None = None) -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    app.setStyleSheet(
        """
        QMainWindow, QWidget { background-color: #20242b; color: #d8e0ee; }
        QToolBar { background: #1d2128; border-bottom: 1px solid #364050; }
        QTextEdit { background: #2a2f38; border: 1px solid #445066; border-radius: 4px; padding: 4px; }
        """
    )

    win = LassoMainWindow()
    if path:
        win.load_points_file(path)
    else:
        win.load_demo_points()
    win.show()
    return app.exec()
