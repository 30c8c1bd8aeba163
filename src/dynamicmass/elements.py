"""Point masses and axial springs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import List, Optional, Sequence

import numpy as np

from .config import NATURAL_LENGTH_SENTINEL, SUPPORT_TOLERANCE
from .geometry import Line, TriMesh, as_point
from .mass import MassType

logger = logging.getLogger(__name__)


class NodeType(Enum):
    FREE = "free"
    PINNED = "pinned"
    ROLLER = "roller"
    FIXED = "fixed"
    LOADED = "load"


def classify_node(
    point: Sequence[float],
    supports: Sequence[Sequence[float]] = (),
    rollers: Sequence[Sequence[float]] = (),
    tolerance: float = SUPPORT_TOLERANCE,
) -> NodeType:
    """Kinetic type of a node placed at ``point``.

    Supports win over rollers when a point lies on both.
    """

    p = as_point(point)
    for s in supports:
        if np.linalg.norm(p - as_point(s)) <= tolerance:
            return NodeType.PINNED
    for r in rollers:
        if np.linalg.norm(p - as_point(r)) <= tolerance:
            return NodeType.ROLLER
    return NodeType.FREE


@dataclass(eq=False)
class Node:
    """Point mass.

    ``velocity`` doubles as the force register: bars, gravity and imposed
    loads add straight into it, damping scales it and ``integrate`` moves the
    node by it. It is never divided by ``mass``.
    """

    id: int
    position: np.ndarray
    kind: NodeType = NodeType.FREE
    mass: float = 0.0
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    neighbours: List[int] = field(default_factory=list)
    valency: int = 0
    tri_mesh: Optional[TriMesh] = None

    def __post_init__(self):
        self.id = int(self.id)
        self.position = as_point(self.position)
        self.velocity = as_point(self.velocity)
        self.kind = NodeType(self.kind)
        self.mass = float(self.mass)

    # -- loads -------------------------------------------------------------
    def apply_gravity(self, g: float) -> None:
        self.velocity[2] += self.mass * g

    def apply_wind(self, w: float) -> None:
        self.velocity[0] += w

    def apply_dead_load(self, v: float) -> None:
        self.velocity[2] += v

    def apply_force(self, vector: Sequence[float]) -> None:
        self.velocity += as_point(vector)

    def damp(self, d: float) -> None:
        self.velocity *= d

    # -- motion ------------------------------------------------------------
    def integrate(self, time_step: float, roller_uses_time_step: bool = False) -> None:
        """Explicit Euler move according to ``kind``."""

        if self.kind in (NodeType.FREE, NodeType.LOADED):
            self.position += self.velocity * time_step
        elif self.kind is NodeType.ROLLER:
            move = np.array([self.velocity[0], self.velocity[1], 0.0])
            if roller_uses_time_step:
                move *= time_step
            self.position += move
        elif self.kind in (NodeType.PINNED, NodeType.FIXED):
            pass
        else:  # pragma: no cover - closed enum
            raise ValueError(f"unknown node type: {self.kind!r}")

    # -- mass & topology ---------------------------------------------------
    def reset_mass(self, mass_type: MassType) -> None:
        if mass_type in (MassType.LENGTH, MassType.AREA):
            self.mass = 0.0

    def reset_neighbours(self) -> None:
        self.neighbours.clear()

    def compute_area_mass(self, nodes: Sequence["Node"], density: float) -> None:
        """Add tributary triangle area times ``density`` for valency-3 nodes.

        The triangle spans the three neighbours, so the node itself is not a
        vertex. Nodes with any other neighbour count are left untouched.
        """

        if len(self.neighbours) != 3:
            return
        self.tri_mesh = TriMesh(np.array([nodes[k].position for k in self.neighbours]))
        self.mass += self.tri_mesh.area * density


class Bar:
    """Axial spring between two nodes.

    ``stiffness`` is the spring constant; cross-section ``area`` is kept at
    1.0 so ``stress`` equals ``tension``.
    """

    area = 1.0

    def __init__(
        self,
        start: Node,
        end: Node,
        stiffness: float,
        natural_length: float = NATURAL_LENGTH_SENTINEL,
    ):
        if start is end or start.id == end.id:
            raise ValueError(f"bar cannot connect node {start.id} to itself")
        self.start = start
        self.end = end
        self.stiffness = float(stiffness)
        self.tension = 0.0
        start.valency += 1
        end.valency += 1
        self.update_geometry()
        self.set_natural_length(natural_length)

    def __repr__(self) -> str:
        return (
            f"Bar(i={self.i}, j={self.j}, stiffness={self.stiffness}, "
            f"natural_length={self.natural_length}, length={self.length})"
        )

    @property
    def i(self) -> int:
        return self.start.id

    @property
    def j(self) -> int:
        return self.end.id

    @property
    def stress(self) -> float:
        return self.tension / self.area

    def set_natural_length(self, value: float) -> None:
        if value == NATURAL_LENGTH_SENTINEL:
            self.natural_length = self.length
        else:
            self.natural_length = float(value)

    def retune(self, stiffness: float) -> None:
        self.stiffness = float(stiffness)

    def update_geometry(self) -> None:
        self.line = Line(self.start.position, self.end.position)
        self.length = self.line.length

    def compute_force(self) -> None:
        """Set ``tension`` from the current length and push both ends.

        Positive tension pulls the endpoints toward each other.
        """

        self.update_geometry()
        self.tension = -self.stiffness * self.area * (self.natural_length - self.length)
        if self.length == 0.0:
            logger.warning("bar %d-%d has zero length; force skipped this step", self.i, self.j)
            return
        d = (self.end.position - self.start.position) / self.length
        self.start.velocity += d * self.tension
        self.end.velocity -= d * self.tension

    def distribute_mass(self, density: Sequence[float]) -> None:
        self.start.mass += density[self.i] * self.length / 2
        self.end.mass += density[self.j] * self.length / 2

    def register_neighbours(self) -> None:
        self.start.neighbours.append(self.j)
        self.end.neighbours.append(self.i)


__all__ = ["NodeType", "classify_node", "Node", "Bar"]
