from .presets import build_hanging_chain, build_cable_net, build_tripod
from .dr import relax, relax_step
from .session import RelaxationInputs, Session, StepResult
from .opt import sweep_parameters

__all__ = [
    "build_hanging_chain",
    "build_cable_net",
    "build_tripod",
    "relax",
    "relax_step",
    "RelaxationInputs",
    "Session",
    "StepResult",
    "sweep_parameters",
]
