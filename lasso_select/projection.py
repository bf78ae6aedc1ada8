"""Cursor to 3D projection.

A square reference surface is kept a fixed distance in front of the camera,
perpendicular to the view direction. Lasso clicks are turned into 3D points
by casting a ray from the camera through the cursor and intersecting it
with that surface.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from .config import SelectionConfig
from .geometry import EPS, as_point, matrix_to_quaternion, quaternion_to_matrix

logger = logging.getLogger(__name__)

IDENTITY_QUATERNION = (0.0, 0.0, 0.0, 1.0)


@dataclass(frozen=True, eq=False)
class CameraPose:
    position: np.ndarray
    orientation: np.ndarray = field(default_factory=lambda: np.array(IDENTITY_QUATERNION))
    fov: float = 50.0
    aspect: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_point(self.position))
        q = np.asarray(self.orientation, dtype=np.float64).reshape(-1)
        if q.shape != (4,):
            raise ValueError("Camera orientation must be a quaternion (x, y, z, w)")
        object.__setattr__(self, "orientation", q)
        if not 0.0 < self.fov < 180.0:
            raise ValueError(f"Field of view out of range: {self.fov}")
        if self.aspect <= 0.0:
            raise ValueError(f"Aspect ratio must be positive: {self.aspect}")

    @classmethod
    def from_view_matrix(cls, view, fov: float, aspect: float) -> "CameraPose":
        world = np.linalg.inv(np.asarray(view, dtype=np.float64))
        return cls(position=world[:3, 3], orientation=matrix_to_quaternion(world[:3, :3]), fov=fov, aspect=aspect)

    @property
    def rotation(self) -> np.ndarray:
        return quaternion_to_matrix(self.orientation)

    @property
    def forward(self) -> np.ndarray:
        return self.rotation @ np.array([0.0, 0.0, -1.0])

    def ray(self, cursor) -> Tuple[np.ndarray, np.ndarray]:
        x, y = (float(c) for c in cursor)
        half = math.tan(math.radians(self.fov) * 0.5)
        d = self.rotation @ np.array([x * half * self.aspect, y * half, -1.0])
        return self.position.copy(), d / np.linalg.norm(d)


@dataclass(frozen=True, eq=False)
class ReferenceSurface:
    center: np.ndarray
    orientation: np.ndarray
    extent: float

    @classmethod
    def in_front_of(cls, camera: CameraPose, distance: float, extent: float) -> "ReferenceSurface":
        return cls(center=camera.position + camera.forward * distance, orientation=camera.orientation.copy(), extent=float(extent))

    @property
    def axes(self) -> np.ndarray:
        # Columns: right, up, normal (facing the camera).
        return quaternion_to_matrix(self.orientation)

    def intersect(self, origin, direction) -> np.ndarray | None:
        axes = self.axes
        normal = axes[:, 2]
        denom = float(np.dot(direction, normal))
        if abs(denom) < EPS:
            return None
        t = float(np.dot(self.center - origin, normal)) / denom
        if t <= EPS:
            return None
        hit = origin + direction * t
        local = hit - self.center
        half = self.extent * 0.5
        if abs(float(np.dot(local, axes[:, 0]))) > half or abs(float(np.dot(local, axes[:, 1]))) > half:
            return None
        return hit


def project(cursor, camera: CameraPose, surface: ReferenceSurface | None = None,
            config: SelectionConfig | None = None) -> np.ndarray | None:
    """Point on the reference surface under ``cursor`` or ``None``.

    ``cursor`` is in normalized device coordinates, ``(-1, -1)`` bottom
    left to ``(1, 1)`` top right. Without an explicit ``surface`` one is
    placed in front of ``camera`` using ``config``.
    """
    if surface is None:
        cfg = config or SelectionConfig()
        surface = ReferenceSurface.in_front_of(camera, cfg.plane_distance, cfg.plane_size)
    origin, direction = camera.ray(cursor)
    hit = surface.intersect(origin, direction)
    if hit is None:
        logger.debug("Cursor %s misses the projection surface", tuple(cursor))
    return hit


class Projector:
    def __init__(self, config: SelectionConfig | None = None) -> None:
        self.config = config or SelectionConfig()

    def surface_for(self, camera: CameraPose) -> ReferenceSurface:
        return ReferenceSurface.in_front_of(camera, self.config.plane_distance, self.config.plane_size)

    def project(self, cursor, camera: CameraPose) -> np.ndarray | None:
        return project(cursor, camera, self.surface_for(camera))
