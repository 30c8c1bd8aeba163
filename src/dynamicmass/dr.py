import logging

import numpy as np

from .config import MAX_DETERMINATE_VALENCY, SimulationParams
from .elements import NodeType
from .mass import accumulate_masses, reset_masses
from .topology import Network

logger = logging.getLogger(__name__)

_MOVING = (NodeType.FREE, NodeType.LOADED, NodeType.ROLLER)


def relax_step(network: Network, params: SimulationParams) -> None:
    """Advance ``network`` by one explicit dynamic relaxation tick.

    The order matters: gravity in step 4 must see the masses rebuilt in
    step 3, and bar geometry is refreshed last so outputs and the next
    force pass read the moved positions.

    1. reset masses for the active strategy
    2. bar forces into endpoint velocities
    3. rebuild masses
    4. gravity, imposed loads, damping
    5. integrate positions
    6. refresh bar geometry
    """

    nodes, bars = network.nodes, network.bars

    reset_masses(nodes, network.mass_type)

    for bar in bars:
        bar.compute_force()

    accumulate_masses(nodes, bars, network.density, network.mass_type)

    for k, node in enumerate(nodes):
        node.apply_gravity(params.gravity)
        if network.loads:
            node.apply_force(network.loads[k])
        node.damp(params.damping)

    for node in nodes:
        node.integrate(params.time_step, params.roller_uses_time_step)

    for bar in bars:
        bar.update_geometry()


def velocity_rms(network: Network) -> float:
    """RMS of the velocity register over nodes that are allowed to move."""

    moving = [n.velocity for n in network.nodes if n.kind in _MOVING]
    if not moving:
        return 0.0
    V = np.asarray(moving)
    return float(np.sqrt((V**2).sum() / len(moving)))


def valency_check(network: Network, limit: int = MAX_DETERMINATE_VALENCY):
    """Check nodal valencies against ``limit``.

    Returns a tuple ``(ok, warnings)`` where ``ok`` is ``True`` when no node
    exceeds ``limit``.
    """

    over = [n.id for n in network.nodes if n.valency > limit]
    warnings = []
    if over:
        warnings.append(
            f"One or more nodes have valency > {limit}. System is not statically determinate! "
            f"(nodes {over})"
        )
    return len(warnings) == 0, warnings


def relax(
    inputs,
    max_steps: int = 1000,
    tol: float | None = None,
    callback=None,
    verbose: bool = False,
    params: SimulationParams | None = None,
):
    """Run a fresh session until it settles or ``max_steps`` is reached.

    Parameters
    ----------
    inputs : RelaxationInputs
        Model definition. ``inputs.reset`` is ignored.
    max_steps : int
        Maximum number of relaxation steps.
    tol : float | None
        Stop once the velocity RMS of moving nodes drops below this value.
        ``None`` always runs ``max_steps`` steps.
    callback : callable(step, rms) | None
        Called after every step.
    verbose : bool
        Print a one-line summary when True.
    params : SimulationParams | None
        Overrides the global parameters carried by ``inputs``.

    Returns
    -------
    tuple
        ``(result, info)`` where ``result`` is the last
        :class:`~dynamicmass.session.StepResult` (``None`` if the first step
        was rejected) and ``info`` holds ``rms`` and ``steps``.
    """

    from dataclasses import replace

    from .session import Session

    session = Session(params=params)
    run_inputs = replace(inputs, reset=False)
    result = None
    rms = float("inf")
    step = 0
    for step in range(1, max_steps + 1):
        result = session.trigger(run_inputs)
        if result is None:
            step -= 1
            break
        rms = velocity_rms(session.network)
        if callback is not None:
            callback(step, rms)
        if tol is not None and rms < tol:
            break
    if verbose:
        print(f"[DR] stopped at step {step}, RMS={rms:.3e}")
    return result, {"rms": rms, "steps": step}


def to_bar_dataframe(network: Network):
    """Export bar data to a :class:`pandas.DataFrame`."""

    import pandas as pd

    rows = [
        {
            "i": b.i,
            "j": b.j,
            "L": b.length,
            "L0": b.natural_length,
            "stiffness": b.stiffness,
            "tension": b.tension,
            "stress": b.stress,
        }
        for b in network.bars
    ]
    return pd.DataFrame(rows, columns=["i", "j", "L", "L0", "stiffness", "tension", "stress"])


def to_node_dataframe(network: Network):
    """Export node data to a :class:`pandas.DataFrame`."""

    import pandas as pd

    rows = [
        {
            "x": float(n.position[0]),
            "y": float(n.position[1]),
            "z": float(n.position[2]),
            "type": n.kind.value,
            "valency": n.valency,
            "mass": n.mass,
        }
        for n in network.nodes
    ]
    return pd.DataFrame(rows, columns=["x", "y", "z", "type", "valency", "mass"])


def to_structure_json(network: Network):
    """Serialize the relaxed network to a plain Python ``dict``."""

    return {
        "nodes": network.positions.tolist(),
        "types": [n.kind.value for n in network.nodes],
        "bars": [
            {
                "i": b.i,
                "j": b.j,
                "stiffness": b.stiffness,
                "L0": b.natural_length,
                "tension": b.tension,
            }
            for b in network.bars
        ],
        "mass_type": int(network.mass_type),
    }


__all__ = [
    "relax_step",
    "relax",
    "velocity_rms",
    "valency_check",
    "to_bar_dataframe",
    "to_node_dataframe",
    "to_structure_json",
]
