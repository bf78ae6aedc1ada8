from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping

# Distance from the projection surface to the camera.
PLANE_DISTANCE = 2000.0
# Side length of the projection surface; covers the viewport without
# growing the raycast needlessly.
PLANE_SIZE = 2000.0
LASSO_POINTS = 4
FEEDBACK_DELAY_MS = 100


@dataclass(frozen=True)
class SelectionConfig:
    plane_distance: float = PLANE_DISTANCE
    plane_size: float = PLANE_SIZE
    lasso_points: int = LASSO_POINTS
    feedback_delay_ms: int = FEEDBACK_DELAY_MS
    epsilon: float = 1e-9

    def __post_init__(self) -> None:
        if self.plane_distance <= 0:
            raise ValueError("plane_distance must be positive")
        if self.plane_size <= 0:
            raise ValueError("plane_size must be positive")
        if self.lasso_points != LASSO_POINTS:
            raise ValueError(f"Only {LASSO_POINTS}-point lassos are supported")
        if self.feedback_delay_ms < 0:
            raise ValueError("feedback_delay_ms must not be negative")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SelectionConfig":
        env = os.environ if environ is None else environ
        cfg = cls()
        overrides = {}
        for name, field, cast in (
            ("LASSO_PLANE_DISTANCE", "plane_distance", float),
            ("LASSO_PLANE_SIZE", "plane_size", float),
            ("LASSO_FEEDBACK_DELAY_MS", "feedback_delay_ms", int),
        ):
            raw = env.get(name, "").strip()
            if not raw:
                continue
            try:
                overrides[field] = cast(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {name}: {raw!r}") from exc
        return replace(cfg, **overrides) if overrides else cfg
