from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Hashable, Iterable, List, Mapping, Sequence

import numpy as np
import trimesh

from .geometry import as_point

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class CandidateEntry:
    id: Hashable
    position: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_point(self.position))


def entries_from_array(positions, ids: Sequence | None = None) -> List[CandidateEntry]:
    pts = np.asarray(positions, dtype=np.float64)
    if pts.size == 0:
        return []
    pts = pts.reshape(-1, 3)
    if ids is None:
        ids = range(len(pts))
    elif len(ids) != len(pts):
        raise ValueError(f"Got {len(ids)} ids for {len(pts)} positions")
    return [CandidateEntry(i, p) for i, p in zip(ids, pts)]


def entries_from_records(records: Iterable[Mapping]) -> List[CandidateEntry]:
    """Entries from ``{"x", "y", "z", "__id"}`` style records."""
    entries = []
    for n, rec in enumerate(records):
        try:
            key = "__id" if "__id" in rec else "id"
            entries.append(CandidateEntry(rec[key], (float(rec["x"]), float(rec["y"]), float(rec["z"]))))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed candidate record #{n}: {rec!r}") from exc
    return entries


def _load_vertices(path: str) -> np.ndarray:
    geom = trimesh.load(path)
    if isinstance(geom, trimesh.Scene):
        if not geom.geometry:
            raise ValueError("Empty 3D file")
        geom = geom.dump(concatenate=True)
    vertices = np.asarray(getattr(geom, "vertices", ()), dtype=np.float64)
    if vertices.size == 0:
        raise ValueError(f"No points found in {Path(path).name}")
    return vertices.reshape(-1, 3)


def _load_records(path: str) -> List[CandidateEntry]:
    with open(path, "r", encoding="utf-8") as fh:
        try:
            records = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {Path(path).name}: {exc}") from exc
    if not isinstance(records, list):
        raise ValueError(f"Expected a list of point records in {Path(path).name}")
    return entries_from_records(records)


def load_candidates(path: str) -> List[CandidateEntry]:
    """Entries from a mesh or point cloud file, or a JSON list of records."""
    if not Path(path).exists():
        raise OSError(f"File not found: '{path}'")
    if Path(path).suffix.lower() == ".json":
        entries = _load_records(path)
        logger.info("Loaded %d candidates from %s", len(entries), Path(path).name)
        return entries
    vertices = _load_vertices(path)
    logger.info("Loaded %d candidates from %s", len(vertices), Path(path).name)
    return entries_from_array(vertices)


class CandidateSet:
    """Current candidate entries plus change subscribers."""

    def __init__(self, entries: Iterable[CandidateEntry] = ()) -> None:
        self._entries: tuple = tuple(entries)
        self._subscribers: List[Callable[[Sequence[CandidateEntry]], None]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __call__(self) -> Sequence[CandidateEntry]:
        return self._entries

    def entries(self) -> Sequence[CandidateEntry]:
        return self._entries

    def positions(self) -> np.ndarray:
        if not self._entries:
            return np.empty((0, 3), dtype=np.float64)
        return np.array([e.position for e in self._entries], dtype=np.float64)

    def subscribe(self, callback: Callable[[Sequence[CandidateEntry]], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def replace(self, entries: Iterable[CandidateEntry]) -> None:
        self._entries = tuple(entries)
        for callback in list(self._subscribers):
            callback(self._entries)
