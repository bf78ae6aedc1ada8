from __future__ import annotations

from typing import Iterable, List

import numpy as np

from .geometry import as_point, signed_distance
from .region import Region


def classify(point, region: Region) -> bool:
    p = as_point(point)
    for normal, constant in zip(region.normals, region.constants):
        if signed_distance(normal, constant, p) > 0.0:
            return False
    if region.axis is not None:
        # Drop the mirrored cone behind the camera.
        return float(np.dot(p - region.apex, region.axis)) > 0.0
    return True


def inside_mask(positions, region: Region) -> np.ndarray:
    pts = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    if len(pts) == 0:
        return np.zeros(0, dtype=bool)
    distances = pts @ region.normals.T + region.constants
    mask = np.all(distances <= 0.0, axis=1)
    if region.axis is not None:
        mask &= (pts - region.apex) @ region.axis > 0.0
    return mask


def select_all(entries: Iterable, region: Region) -> List:
    """Identifiers of the candidate entries that lie inside ``region``."""
    entries = list(entries)
    if not entries:
        return []
    positions = np.array([e.position for e in entries], dtype=np.float64)
    mask = inside_mask(positions, region)
    return [e.id for e, hit in zip(entries, mask) if hit]
