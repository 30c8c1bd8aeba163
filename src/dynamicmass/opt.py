"""Parameter sweeps for choosing damping and time step."""

from __future__ import annotations

from dataclasses import replace
import itertools
from typing import Iterable

import numpy as np

from .dr import relax
from .session import RelaxationInputs


def sweep_parameters(
    inputs: RelaxationInputs,
    dampings: Iterable[float],
    time_steps: Iterable[float],
    steps: int = 500,
):
    """Relax ``inputs`` for every damping / time step pair.

    Parameters
    ----------
    inputs : RelaxationInputs
        Base model. Its own damping and time step are overridden.
    dampings, time_steps : iterable of float
        Values to combine.
    steps : int
        Relaxation steps per case.

    Returns
    -------
    tuple
        ``(best_params, history)`` where ``best_params`` is a ``dict`` with
        ``damping``, ``time_step`` and ``rms`` keys for the case with the
        lowest final velocity RMS, and ``history`` is a
        :class:`pandas.DataFrame` of all evaluated cases. Cases whose inputs
        were rejected or that blew up score ``inf``.
    """

    import pandas as pd

    results = []
    for d, dt in itertools.product(dampings, time_steps):
        case = replace(inputs, damping=float(d), time_step=float(dt))
        result, info = relax(case, max_steps=steps)
        rms = info["rms"]
        if result is None or not np.isfinite(rms):
            rms = np.inf
        results.append({"damping": float(d), "time_step": float(dt), "rms": rms})

    history = pd.DataFrame(results, columns=["damping", "time_step", "rms"])
    if history.empty:
        raise ValueError("empty sweep range")

    best_row = history.loc[history["rms"].idxmin()]
    best_params = {
        "damping": float(best_row["damping"]),
        "time_step": float(best_row["time_step"]),
        "rms": float(best_row["rms"]),
    }
    return best_params, history


__all__ = ["sweep_parameters"]
