"""Default values and simulation-wide parameters.

Every default below matches what an interactive host would feed the solver
when the corresponding input is left unconnected.
"""

from __future__ import annotations

from dataclasses import dataclass

# Proximity (model units) within which a node is considered to sit on a
# support or roller point.
SUPPORT_TOLERANCE = 0.001

DEFAULT_STIFFNESS = 0.1
DEFAULT_NAT_LENGTH = 0.0
DEFAULT_MASS_DENSITY = 1.0
DEFAULT_MASS_TYPE = 1

DEFAULT_DAMPING = 0.95
DEFAULT_GRAVITY = 9.81
DEFAULT_TIME_STEP = 0.005

# Natural length value meaning "use the length measured at build time".
NATURAL_LENGTH_SENTINEL = -1.0

# Nodes with more incident bars than this are reported as indeterminate.
MAX_DETERMINATE_VALENCY = 3


@dataclass
class SimulationParams:
    """Global parameters re-read on every relaxation step.

    Parameters
    ----------
    damping : float
        Velocity multiplier applied once per step. Values above 1 amplify.
    gravity : float
        Added to ``velocity.z`` scaled by nodal mass.
    time_step : float
        Explicit Euler step used by free and loaded nodes.
    roller_uses_time_step : bool
        When ``True`` roller nodes scale their in-plane move by
        ``time_step`` like every other moving node.
    """

    damping: float = DEFAULT_DAMPING
    gravity: float = DEFAULT_GRAVITY
    time_step: float = DEFAULT_TIME_STEP
    roller_uses_time_step: bool = False


__all__ = [
    "SUPPORT_TOLERANCE",
    "DEFAULT_STIFFNESS",
    "DEFAULT_NAT_LENGTH",
    "DEFAULT_MASS_DENSITY",
    "DEFAULT_MASS_TYPE",
    "DEFAULT_DAMPING",
    "DEFAULT_GRAVITY",
    "DEFAULT_TIME_STEP",
    "NATURAL_LENGTH_SENTINEL",
    "MAX_DETERMINATE_VALENCY",
    "SimulationParams",
]
