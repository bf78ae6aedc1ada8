from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .config import LASSO_POINTS
from .errors import InvalidArity
from .geometry import EPS, as_point, plane_through_3_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Region:
    """Pyramid with its apex at the camera, one plane per lasso edge.

    A point is inside when its signed distance to every plane is <= 0 and,
    when ``axis`` is set, it lies on the lasso's side of ``apex``. The four
    planes alone also admit the mirrored cone behind the camera.
    """

    normals: np.ndarray
    constants: np.ndarray
    inverted: bool = False
    apex: Optional[np.ndarray] = None
    axis: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        normals = np.array(self.normals, dtype=np.float64).reshape(-1, 3)
        constants = np.array(self.constants, dtype=np.float64).reshape(-1)
        if len(normals) != LASSO_POINTS or len(constants) != LASSO_POINTS:
            raise InvalidArity(len(normals))
        normals.setflags(write=False)
        constants.setflags(write=False)
        object.__setattr__(self, "normals", normals)
        object.__setattr__(self, "constants", constants)
        if (self.apex is None) != (self.axis is None):
            raise ValueError("Region apex and axis must be given together")
        if self.axis is not None:
            object.__setattr__(self, "apex", as_point(self.apex))
            object.__setattr__(self, "axis", as_point(self.axis))

    def __len__(self) -> int:
        return len(self.normals)

    @property
    def degenerate(self) -> bool:
        return bool(np.any(np.linalg.norm(self.normals, axis=1) < EPS))

    def distances(self, point) -> np.ndarray:
        return self.normals @ as_point(point) + self.constants


def build_region(points: Sequence, apex, inverted: bool = False) -> Region:
    if len(points) != LASSO_POINTS:
        raise InvalidArity(len(points))
    pts = [as_point(p) for p in points]
    apex = as_point(apex)
    normals = []
    constants = []
    for i, a in enumerate(pts):
        b = pts[(i + 1) % len(pts)]
        # Swapping the first two points flips the normal of the same plane.
        n, d = plane_through_3_points(apex, a, b) if inverted else plane_through_3_points(a, apex, b)
        normals.append(n)
        constants.append(d)
    axis = np.mean(pts, axis=0) - apex
    region = Region(np.asarray(normals), np.asarray(constants), inverted=inverted, apex=apex, axis=axis)
    if region.degenerate:
        logger.warning("Lasso polygon has collinear edges; degenerate planes accept every point")
    if float(np.linalg.norm(axis)) < EPS:
        logger.warning("Lasso is centered on the camera; the region is empty")
    return region
