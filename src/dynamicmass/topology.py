"""Node arena and the topology import pass.

Springs arrive as loose line segments. :func:`snap_segments` resolves every
segment endpoint to the nearest node once, up front, and reports how far each
endpoint had to move. :class:`Network` then builds bars from those validated
handles only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import NATURAL_LENGTH_SENTINEL, SUPPORT_TOLERANCE
from .elements import Bar, Node, NodeType, classify_node
from .geometry import Line, TriMesh, as_point, nearest_index
from .mass import MassType, initial_mass

logger = logging.getLogger(__name__)

Segment = Tuple[Sequence[float], Sequence[float]]


class ConfigurationError(ValueError):
    """Inputs that cannot be turned into a valid network."""


@dataclass
class SnapReport:
    """Result of matching segment endpoints to node handles.

    ``pairs[k]`` holds the handles for segment ``k`` and ``distances[k]`` the
    distance each endpoint travelled to reach its node.
    """

    pairs: List[Tuple[int, int]] = field(default_factory=list)
    distances: List[Tuple[float, float]] = field(default_factory=list)

    @property
    def max_distance(self) -> float:
        return max((max(d) for d in self.distances), default=0.0)

    @property
    def degenerate(self) -> List[int]:
        """Indices of segments whose two ends landed on the same node."""

        return [k for k, (i, j) in enumerate(self.pairs) if i == j]


def snap_segments(points: Sequence[Sequence[float]], segments: Sequence[Segment]) -> SnapReport:
    """Resolve each segment endpoint to the nearest point in ``points``."""

    pts = np.array([as_point(p) for p in points], dtype=float).reshape(-1, 3)
    report = SnapReport()
    for a, b in segments:
        i, da = nearest_index(a, pts)
        j, db = nearest_index(b, pts)
        report.pairs.append((i, j))
        report.distances.append((da, db))
    return report


class Network:
    """Arena owning every node and bar of one relaxation model.

    Node handles are indices into :attr:`nodes` and stay stable for the
    lifetime of the network.
    """

    def __init__(
        self,
        mass_type: MassType = MassType.LENGTH,
        density: Optional[Sequence[float]] = None,
        loads: Optional[Sequence[Sequence[float]]] = None,
    ):
        self.mass_type = MassType(mass_type)
        self.nodes: List[Node] = []
        self.bars: List[Bar] = []
        self.density: List[float] = [] if density is None else [float(v) for v in density]
        self.loads: List[np.ndarray] = [] if loads is None else [as_point(v) for v in loads]

    def __len__(self) -> int:
        return len(self.nodes)

    # -- construction ------------------------------------------------------
    def add_node(self, position, kind: NodeType = NodeType.FREE, mass: float = 0.0) -> int:
        handle = len(self.nodes)
        self.nodes.append(Node(handle, position, kind=kind, mass=mass))
        return handle

    def node(self, handle: int) -> Node:
        if not 0 <= handle < len(self.nodes):
            raise IndexError(f"node handle {handle} out of range for {len(self.nodes)} nodes")
        return self.nodes[handle]

    def add_bar(
        self,
        i: int,
        j: int,
        stiffness: float,
        natural_length: float = NATURAL_LENGTH_SENTINEL,
    ) -> Bar:
        bar = Bar(self.node(i), self.node(j), stiffness, natural_length)
        self.bars.append(bar)
        return bar

    def register_topology(self) -> None:
        """Rebuild every neighbour list from the current bars."""

        for node in self.nodes:
            node.reset_neighbours()
        for bar in self.bars:
            bar.register_neighbours()

    @classmethod
    def build(
        cls,
        points: Sequence[Sequence[float]],
        segments: Sequence[Segment],
        stiffnesses: Sequence[float],
        nat_lengths: Sequence[float],
        density: Sequence[float],
        mass_type: MassType,
        supports: Sequence[Sequence[float]] = (),
        rollers: Sequence[Sequence[float]] = (),
        loads: Optional[Sequence[Sequence[float]]] = None,
        tolerance: float = SUPPORT_TOLERANCE,
    ) -> "Network":
        """Build nodes, then bars, then neighbour topology.

        ``stiffnesses`` and ``nat_lengths`` must already hold one value per
        segment, ``density`` (and ``loads`` when given) one per point.
        """

        net = cls(mass_type, density, loads)
        for k, p in enumerate(points):
            kind = classify_node(p, supports, rollers, tolerance)
            if kind is NodeType.FREE and net.loads and np.any(net.loads[k]):
                kind = NodeType.LOADED
            net.add_node(p, kind=kind, mass=initial_mass(net.mass_type, net.density[k]))

        report = snap_segments(points, segments) if len(segments) else SnapReport()
        if report.degenerate:
            k = report.degenerate[0]
            raise ConfigurationError(
                f"spring {k} snaps both ends to node {report.pairs[k][0]}; "
                f"{len(report.degenerate)} degenerate spring(s) in total"
            )
        logger.debug(
            "snapped %d springs onto %d nodes (max snap distance %.3g)",
            len(report.pairs),
            len(net.nodes),
            report.max_distance,
        )
        for (i, j), k, L0 in zip(report.pairs, stiffnesses, nat_lengths):
            net.add_bar(i, j, k, L0)

        net.register_topology()
        return net

    # -- read-out ----------------------------------------------------------
    @property
    def positions(self) -> np.ndarray:
        return np.array([n.position for n in self.nodes], dtype=float).reshape(-1, 3)

    @property
    def velocities(self) -> np.ndarray:
        return np.array([n.velocity for n in self.nodes], dtype=float).reshape(-1, 3)

    @property
    def valencies(self) -> List[int]:
        return [n.valency for n in self.nodes]

    @property
    def masses(self) -> List[float]:
        return [n.mass for n in self.nodes]

    @property
    def neighbours(self) -> List[List[int]]:
        return [list(n.neighbours) for n in self.nodes]

    @property
    def meshes(self) -> List[Optional[TriMesh]]:
        return [n.tri_mesh for n in self.nodes]

    @property
    def lines(self) -> List[Line]:
        return [b.line for b in self.bars]

    @property
    def tensions(self) -> List[float]:
        return [b.tension for b in self.bars]


__all__ = ["ConfigurationError", "SnapReport", "snap_segments", "Network"]
