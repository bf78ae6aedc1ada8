import os

import numpy as np
import pytest

pytest.importorskip("PySide6")
pytest.importorskip("pyqtgraph.opengl")

from qt_app.viewport import LassoViewportWidget  # noqa: E402

from lasso_select.candidates import CandidateSet, entries_from_array  # noqa: E402


@pytest.fixture
def viewport():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    widget = LassoViewportWidget(CandidateSet(entries_from_array(np.zeros((3, 3)))))
    yield widget
    widget.deleteLater()
    app.processEvents()


def test_loading_new_candidates_resets_selection_count(viewport):
    seen = []
    viewport.selectionChanged.connect(seen.append)
    viewport.set_selected([0, 1])
    viewport.candidates.replace(entries_from_array(np.ones((5, 3))))
    assert seen == [[0, 1], []]
    assert viewport.selected_ids == set()


def test_viewport_only_exposes_mode_and_selection_signals():
    assert not hasattr(LassoViewportWidget, "cameraChanged")
    assert hasattr(LassoViewportWidget, "modeChanged")
    assert hasattr(LassoViewportWidget, "selectionChanged")
