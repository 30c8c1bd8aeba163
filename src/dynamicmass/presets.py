import numpy as np

from .mass import MassType
from .session import RelaxationInputs


def _pt(p) -> tuple:
    return tuple(float(v) for v in p)


def build_hanging_chain(
    n: int = 10,
    span: float = 1.0,
    stiffness: float = 100.0,
    nat_length_scale: float = 1.0,
    mass_density: float = 0.1,
    gravity: float = -9.81,
) -> RelaxationInputs:
    """Create a straight chain of ``n`` springs pinned at both ends.

    With ``gravity`` negative the chain sags into a catenary; flip the sign
    for the inverted (compression) arch.
    """

    if n < 1:
        raise ValueError("a chain needs at least one spring")
    X = np.column_stack([np.linspace(0.0, span, n + 1), np.zeros(n + 1), np.zeros(n + 1)])
    nodes = [_pt(p) for p in X]
    springs = [(nodes[k], nodes[k + 1]) for k in range(n)]
    return RelaxationInputs(
        nodes=nodes,
        springs=springs,
        supports=[nodes[0], nodes[-1]],
        stiffnesses=[stiffness],
        nat_lengths=[nat_length_scale * span / n],
        mass_density=[mass_density],
        mass_type=int(MassType.LENGTH),
        gravity=gravity,
    )


def build_cable_net(
    nx: int = 5,
    ny: int = 5,
    spacing: float = 1.0,
    stiffness: float = 50.0,
    mass_density: float = 0.1,
    gravity: float = -9.81,
    support_edges: bool = False,
) -> RelaxationInputs:
    """Create an ``nx`` by ``ny`` grid of springs in the XY plane.

    The four corners are supported, or the whole boundary when
    ``support_edges`` is True. Natural lengths default to the build length.
    """

    if nx < 2 or ny < 2:
        raise ValueError("a cable net needs at least 2 nodes per side")
    grid = [[(i * spacing, j * spacing, 0.0) for j in range(ny)] for i in range(nx)]
    nodes = [p for row in grid for p in row]

    springs = []
    for i in range(nx):
        for j in range(ny):
            if i + 1 < nx:
                springs.append((grid[i][j], grid[i + 1][j]))
            if j + 1 < ny:
                springs.append((grid[i][j], grid[i][j + 1]))

    if support_edges:
        supports = [grid[i][j] for i in range(nx) for j in range(ny) if i in (0, nx - 1) or j in (0, ny - 1)]
    else:
        supports = [grid[0][0], grid[nx - 1][0], grid[0][ny - 1], grid[nx - 1][ny - 1]]

    return RelaxationInputs(
        nodes=nodes,
        springs=springs,
        supports=supports,
        stiffnesses=[stiffness],
        nat_lengths=[-1.0],
        mass_density=[mass_density],
        mass_type=int(MassType.LENGTH),
        gravity=gravity,
    )


def build_tripod(
    radius: float = 1.0,
    height: float = 1.0,
    stiffness: float = 10.0,
    mass_density: float = 1.0,
    gravity: float = -9.81,
) -> RelaxationInputs:
    """Create an apex hung from three supported feet.

    The apex has valency 3, so area based mass applies to it.
    """

    feet = [
        _pt((radius * np.cos(2 * np.pi * k / 3), radius * np.sin(2 * np.pi * k / 3), 0.0))
        for k in range(3)
    ]
    apex = (0.0, 0.0, float(height))
    return RelaxationInputs(
        nodes=[apex] + feet,
        springs=[(apex, f) for f in feet],
        supports=feet,
        stiffnesses=[stiffness],
        nat_lengths=[-1.0],
        mass_density=[mass_density],
        mass_type=int(MassType.AREA),
        gravity=gravity,
    )


__all__ = [
    "build_hanging_chain",
    "build_cable_net",
    "build_tripod",
]
