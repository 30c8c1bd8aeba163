"""Plain geometric primitives used by the solver and its outputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np


def as_point(xyz: Sequence[float]) -> np.ndarray:
    """Return ``xyz`` as a fresh float array of shape ``(3,)``."""

    p = np.array(xyz, dtype=float).reshape(-1)
    if p.shape != (3,):
        raise ValueError(f"expected a 3D point, got shape {p.shape}")
    return p


@dataclass
class Line:
    """Straight segment between two points."""

    start: np.ndarray
    end: np.ndarray

    def __post_init__(self):
        self.start = as_point(self.start)
        self.end = as_point(self.end)

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.end - self.start))

    def as_tuple(self) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
        return (tuple(map(float, self.start)), tuple(map(float, self.end)))


def polygon_area(points: Sequence[Sequence[float]]) -> float:
    """Area of a planar polygon in 3D using Newell's cross-product sum.

    Vertices are taken in order and the polygon is closed implicitly.
    """

    pts = np.asarray(points, dtype=float)
    if len(pts) < 3:
        return 0.0
    total = np.zeros(3)
    for a, b in zip(pts, np.roll(pts, -1, axis=0)):
        total += np.cross(a, b)
    return 0.5 * float(np.linalg.norm(total))


@dataclass
class TriMesh:
    """Single-face triangle mesh built from three vertices."""

    vertices: np.ndarray
    faces: List[Tuple[int, int, int]] = field(default_factory=lambda: [(0, 1, 2)])

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=float).reshape(3, 3)

    @property
    def area(self) -> float:
        return polygon_area(self.vertices)

    @property
    def normal(self) -> np.ndarray:
        a, b, c = self.vertices
        n = np.cross(b - a, c - a)
        norm = np.linalg.norm(n)
        if norm == 0.0:
            return np.zeros(3)
        return n / norm


def nearest_index(point: Sequence[float], points: np.ndarray) -> Tuple[int, float]:
    """Return ``(index, distance)`` of the entry in ``points`` closest to ``point``.

    Ties resolve to the lowest index.
    """

    pts = np.asarray(points, dtype=float)
    if pts.size == 0:
        raise ValueError("cannot search an empty point set")
    dists = np.linalg.norm(pts - as_point(point), axis=1)
    idx = int(np.argmin(dists))
    return idx, float(dists[idx])


__all__ = ["as_point", "Line", "polygon_area", "TriMesh", "nearest_index"]
