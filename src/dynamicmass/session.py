"""Incremental stepping protocol.

A :class:`Session` is driven by repeated calls to :meth:`Session.trigger`.
The first trigger after construction or reset builds the network from the
supplied inputs and runs one step; every later trigger only steps the
network it already holds, re-reading damping, gravity and time step so they
can be tuned live.

Problems with the inputs are reported through :attr:`Session.messages`
rather than raised: a rejected trigger returns ``None`` and leaves the
previous state untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import (
    DEFAULT_DAMPING,
    DEFAULT_GRAVITY,
    DEFAULT_MASS_DENSITY,
    DEFAULT_MASS_TYPE,
    DEFAULT_NAT_LENGTH,
    DEFAULT_STIFFNESS,
    DEFAULT_TIME_STEP,
    SimulationParams,
)
from .dr import relax_step, valency_check
from .geometry import Line, TriMesh, as_point
from .mass import as_mass_type
from .topology import ConfigurationError, Network

logger = logging.getLogger(__name__)

Point = Sequence[float]
Segment = Tuple[Point, Point]


class MessageLevel(Enum):
    REMARK = "remark"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class RuntimeMessage:
    level: MessageLevel
    text: str


@dataclass
class RelaxationInputs:
    """Everything a trigger may read.

    Topology-related fields are only consumed when the session rebuilds;
    ``damping``, ``gravity`` and ``time_step`` are read on every trigger.
    """

    nodes: List[Point] = field(default_factory=list)
    springs: List[Segment] = field(default_factory=list)
    supports: List[Point] = field(default_factory=list)
    stiffnesses: List[float] = field(default_factory=lambda: [DEFAULT_STIFFNESS])
    nat_lengths: List[float] = field(default_factory=lambda: [DEFAULT_NAT_LENGTH])
    mass_density: List[float] = field(default_factory=lambda: [DEFAULT_MASS_DENSITY])
    mass_type: int = DEFAULT_MASS_TYPE
    damping: float = DEFAULT_DAMPING
    gravity: float = DEFAULT_GRAVITY
    time_step: float = DEFAULT_TIME_STEP
    reset: bool = False
    rollers: List[Point] = field(default_factory=list)
    loads: List[Point] = field(default_factory=list)

    def params(self) -> SimulationParams:
        return SimulationParams(damping=self.damping, gravity=self.gravity, time_step=self.time_step)


@dataclass
class StepResult:
    positions: np.ndarray
    valencies: List[int]
    masses: List[float]
    bars: List[Line]
    tensions: List[float]
    iterations: int
    neighbours: List[List[int]]
    meshes: List[Optional[TriMesh]]
    messages: List[RuntimeMessage] = field(default_factory=list)

    @classmethod
    def from_network(cls, network: Network, iterations: int, messages=()) -> "StepResult":
        return cls(
            positions=network.positions.copy(),
            valencies=network.valencies,
            masses=network.masses,
            bars=[Line(line.start, line.end) for line in network.lines],
            tensions=network.tensions,
            iterations=iterations,
            neighbours=network.neighbours,
            meshes=network.meshes,
            messages=list(messages),
        )


def broadcast(values: Sequence, count: int, name: str, target: str = "spring") -> list:
    """Return ``values`` as a list of length ``count``.

    A single value is repeated ``count`` times; any other length that does
    not match ``count`` raises :class:`ConfigurationError`.
    """

    values = list(values)
    if len(values) != count and len(values) != 1:
        raise ConfigurationError(
            f"{name} list count must be either equal to the {target} list count "
            f"({count}) or a single value, got {len(values)}"
        )
    if len(values) == 1:
        logger.debug("single value %s copied for all %ss", name, target)
        return values * count
    return values


class Session:
    """Owns the network and iteration counter between triggers.

    Parameters
    ----------
    params : SimulationParams, optional
        When given, used for every step instead of the globals carried by the
        inputs.
    live_stiffness : bool
        Retune bar stiffnesses from the inputs on every incremental step
        (when the supplied list fits the current bar count).
    """

    def __init__(self, params: Optional[SimulationParams] = None, live_stiffness: bool = False):
        self.params = params
        self.live_stiffness = live_stiffness
        self.counter = 0
        self.network: Optional[Network] = None
        self.messages: List[RuntimeMessage] = []

    @property
    def iterations(self) -> int:
        return self.counter

    def reset(self) -> None:
        self.counter = 0
        self.messages = []

    def trigger(self, inputs: RelaxationInputs) -> Optional[StepResult]:
        """Handle one external trigger.

        Returns the outputs of the step, or ``None`` when the trigger was a
        reset or was rejected (see :attr:`messages`).
        """

        self.messages = []
        if inputs.reset:
            self.reset()
            logger.debug("session reset")
            return None

        params = self.params if self.params is not None else inputs.params()

        if self.counter == 0:
            try:
                network = self.build(inputs)
            except ValueError as exc:
                self._report(MessageLevel.ERROR, str(exc))
                return None
            self.network = network
        elif self.live_stiffness:
            self._retune(inputs.stiffnesses)

        if self.network is None or len(self.network) < 2:
            self._report(MessageLevel.ERROR, "Not enough nodes to calculate (need at least 2)")
            return None

        _, warnings = valency_check(self.network)
        for text in warnings:
            self._report(MessageLevel.WARNING, text)

        relax_step(self.network, params)
        self.counter += 1
        return StepResult.from_network(self.network, self.counter, self.messages)

    def build(self, inputs: RelaxationInputs) -> Network:
        """Validate and broadcast ``inputs`` into a fresh :class:`Network`."""

        n_nodes, n_bars = len(inputs.nodes), len(inputs.springs)
        stiffnesses = self._broadcast(inputs.stiffnesses, n_bars, "Stiffness")
        nat_lengths = self._broadcast(inputs.nat_lengths, n_bars, "NatLength")
        density = self._broadcast(inputs.mass_density, n_nodes, "Mass", target="vertex")
        loads = None
        if len(inputs.loads):
            loads = [as_point(v) for v in self._broadcast(inputs.loads, n_nodes, "Load", target="vertex")]
        mass_type = as_mass_type(inputs.mass_type)
        if n_nodes < 2:
            raise ConfigurationError("Not enough nodes to calculate (need at least 2)")

        network = Network.build(
            inputs.nodes,
            inputs.springs,
            stiffnesses,
            nat_lengths,
            density,
            mass_type,
            supports=inputs.supports,
            rollers=inputs.rollers,
            loads=loads,
        )
        logger.info(
            "built network: %d nodes, %d bars, mass type %s",
            len(network.nodes),
            len(network.bars),
            mass_type.name,
        )
        return network

    def _broadcast(self, values, count, name, target="spring"):
        out = broadcast(values, count, name, target)
        if len(values) == 1 and count > 1:
            self._report(MessageLevel.REMARK, f"single value {name.lower()} copied for all {target}s")
        return out

    def _retune(self, stiffnesses: Sequence[float]) -> None:
        bars = self.network.bars if self.network is not None else []
        try:
            values = broadcast(stiffnesses, len(bars), "Stiffness")
        except ConfigurationError as exc:
            self._report(MessageLevel.WARNING, f"stiffness not retuned: {exc}")
            return
        for bar, k in zip(bars, values):
            bar.retune(k)

    def _report(self, level: MessageLevel, text: str) -> None:
        self.messages.append(RuntimeMessage(level, text))
        if level is MessageLevel.ERROR:
            logger.error(text)
        elif level is MessageLevel.WARNING:
            logger.warning(text)
        else:
            logger.info(text)


__all__ = [
    "MessageLevel",
    "RuntimeMessage",
    "RelaxationInputs",
    "StepResult",
    "broadcast",
    "Session",
]
