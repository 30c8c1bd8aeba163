"""Nodal mass strategies.

The strategy is a plain integer tag applied uniformly to every node within a
step: ``0`` holds a constant mass, ``1`` lumps half of each incident bar
length, ``2`` uses the tributary triangle spanned by exactly three neighbours.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .elements import Bar, Node


class MassType(IntEnum):
    CONSTANT = 0
    LENGTH = 1
    AREA = 2


def as_mass_type(value) -> MassType:
    """Coerce ``value`` to :class:`MassType`, raising ``ValueError`` otherwise."""

    try:
        return MassType(int(value))
    except (TypeError, ValueError):
        raise ValueError(
            f"mass type must be one of 0 (constant), 1 (length) or 2 (area), got {value!r}"
        ) from None


def initial_mass(mass_type: MassType, density: float) -> float:
    """Mass a node starts with before the first step."""

    return float(density) if mass_type == MassType.CONSTANT else 0.0


def reset_masses(nodes: Sequence["Node"], mass_type: MassType) -> None:
    for node in nodes:
        node.reset_mass(mass_type)


def accumulate_masses(
    nodes: Sequence["Node"],
    bars: Sequence["Bar"],
    density: Sequence[float],
    mass_type: MassType,
) -> None:
    """Rebuild nodal masses for the current step.

    ``density`` holds one value per node: a mass for ``CONSTANT``, a mass per
    unit length for ``LENGTH`` and a mass per unit area for ``AREA``.
    """

    if mass_type == MassType.CONSTANT:
        for node in nodes:
            node.mass = float(density[node.id])
    elif mass_type == MassType.LENGTH:
        for bar in bars:
            bar.distribute_mass(density)
    elif mass_type == MassType.AREA:
        for node in nodes:
            node.compute_area_mass(nodes, density[node.id])
    else:  # pragma: no cover - guarded by as_mass_type
        raise ValueError(f"unknown mass type: {mass_type!r}")


__all__ = [
    "MassType",
    "as_mass_type",
    "initial_mass",
    "reset_masses",
    "accumulate_masses",
]
