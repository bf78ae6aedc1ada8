"""Polygonal lasso selection.

The orchestrator turns cursor input into a 4-point lasso on the reference
surface, builds a pyramid from the lasso and the camera position, and
reports which candidate entries lie inside. When the first pyramid selects
nothing the lasso was drawn in the other direction, so the pyramid is
rebuilt once with inverted planes.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .candidates import CandidateEntry
from .classify import select_all
from .config import SelectionConfig
from .errors import SelectionError
from .lasso import AccumulatorState, LassoAccumulator
from .projection import CameraPose, Projector
from .region import Region, build_region

logger = logging.getLogger(__name__)


class Mode(enum.Enum):
    NAVIGATION = "navigation"
    SELECTION = "selection"


class MouseButton(enum.Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True, eq=False)
class Collecting:
    lasso: LassoAccumulator


@dataclass(frozen=True, eq=False)
class Resolving:
    polygon: Tuple[np.ndarray, ...]


State = Union[Idle, Collecting, Resolving]


def _noop(*args) -> None:
    pass


@dataclass
class SelectionEvents:
    edge_added: Callable[[np.ndarray, np.ndarray], None] = _noop
    preview_edge_updated: Callable[[np.ndarray, np.ndarray], None] = _noop
    polygon_cleared: Callable[[], None] = _noop
    selection_ended: Callable[[], None] = _noop
    selection_computed: Callable[[List], None] = _noop


def resolve(polygon: Sequence, apex, entries: Sequence[CandidateEntry],
            region_builder: Callable[..., Region] = build_region) -> List:
    region = region_builder(polygon, apex, inverted=False)
    selected = select_all(entries, region)
    if not selected:
        logger.debug("Outward region selected nothing, retrying with inverted region")
        region = region_builder(polygon, apex, inverted=True)
        selected = select_all(entries, region)
    return selected


class SelectionOrchestrator:
    def __init__(
        self,
        camera_source: Callable[[], CameraPose],
        candidate_source: Callable[[], Sequence[CandidateEntry]],
        events: SelectionEvents | None = None,
        config: SelectionConfig | None = None,
        region_builder: Callable[..., Region] = build_region,
    ) -> None:
        self.camera_source = camera_source
        self.candidate_source = candidate_source
        self.events = events or SelectionEvents()
        self.config = config or SelectionConfig()
        self.projector = Projector(self.config)
        self.region_builder = region_builder
        self._mode = Mode.NAVIGATION
        self._state: State = Idle()

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def state(self) -> State:
        return self._state

    @property
    def points(self) -> Tuple[np.ndarray, ...]:
        if isinstance(self._state, Collecting):
            return self._state.lasso.points
        if isinstance(self._state, Resolving):
            return self._state.polygon
        return ()

    def set_mode(self, mode: Mode) -> None:
        mode = Mode(mode)
        if mode is Mode.SELECTION:
            self._mode = mode
            self._state = Collecting(LassoAccumulator(arity=self.config.lasso_points))
            self.events.polygon_cleared()
            logger.debug("Lasso selection started")
            return
        self._mode = mode
        if isinstance(self._state, Collecting):
            logger.debug("Lasso selection cancelled with %d points", len(self._state.lasso))
            self._state = Idle()
            self.events.polygon_cleared()

    def cursor_moved(self, cursor) -> None:
        if self._mode is not Mode.SELECTION or not isinstance(self._state, Collecting):
            return
        last = self._state.lasso.last_point
        if last is None:
            return
        point = self.projector.project(cursor, self.camera_source())
        if point is not None:
            self.events.preview_edge_updated(last, point)

    def cursor_clicked(self, cursor, button: MouseButton = MouseButton.LEFT) -> Optional[List]:
        if button is not MouseButton.LEFT:
            return None
        if self._mode is not Mode.SELECTION or not isinstance(self._state, Collecting):
            return None
        camera = self.camera_source()
        point = self.projector.project(cursor, camera)
        if point is None:
            return None
        step = self._state.lasso.add_point(point)
        for a, b in step.edges:
            self.events.edge_added(a, b)
        if step.state is AccumulatorState.COLLECTING:
            self._state = Collecting(step.accumulator)
            return None
        self._state = Resolving(step.accumulator.points)
        return self._finalize(camera)

    def _finalize(self, camera: CameraPose) -> List:
        if not isinstance(self._state, Resolving):
            raise SelectionError("No closed lasso to resolve")
        polygon = self._state.polygon
        self._mode = Mode.NAVIGATION
        self.events.selection_ended()
        try:
            selected = resolve(polygon, camera.position, list(self.candidate_source()), self.region_builder)
        finally:
            self._state = Idle()
        logger.info("Lasso selected %d entries", len(selected))
        self.events.selection_computed(selected)
        return selected
