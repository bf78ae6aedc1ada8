from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .config import LASSO_POINTS
from .errors import SelectionError
from .geometry import as_point

Edge = Tuple[np.ndarray, np.ndarray]


class AccumulatorState(enum.Enum):
    COLLECTING = "collecting"
    COMPLETE = "complete"


@dataclass(frozen=True, eq=False)
class LassoStep:
    accumulator: "LassoAccumulator"
    state: AccumulatorState
    edges: Tuple[Edge, ...]


@dataclass(frozen=True, eq=False)
class LassoAccumulator:
    """Ordered lasso vertices; each ``add_point`` returns a new accumulator."""

    points: Tuple[np.ndarray, ...] = ()
    arity: int = LASSO_POINTS

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_complete(self) -> bool:
        return len(self.points) >= self.arity

    @property
    def last_point(self) -> np.ndarray | None:
        return self.points[-1] if self.points else None

    def add_point(self, p) -> LassoStep:
        if self.is_complete:
            raise SelectionError("Lasso polygon is already closed")
        p = as_point(p)
        points = self.points + (p,)
        edges = []
        if len(points) > 1:
            edges.append((points[-2], p))
        if len(points) == self.arity:
            edges.append((p, points[0]))
            state = AccumulatorState.COMPLETE
        else:
            state = AccumulatorState.COLLECTING
        return LassoStep(LassoAccumulator(points, self.arity), state, tuple(edges))

    def reset(self) -> "LassoAccumulator":
        if not self.points:
            return self
        return LassoAccumulator((), self.arity)
