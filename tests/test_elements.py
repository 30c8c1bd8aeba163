import numpy as np
import pytest

from dynamicmass.elements import Bar, Node, NodeType, classify_node
from dynamicmass.mass import MassType


def _pair(b=(2.0, 0.0, 0.0), stiffness=3.0, natural_length=1.0):
    a = Node(0, (0.0, 0.0, 0.0))
    n = Node(1, b)
    return a, n, Bar(a, n, stiffness, natural_length)


def test_update_geometry_matches_live_positions():
    a, b, bar = _pair()
    b.position[:] = (3.0, 4.0, 12.0)
    bar.update_geometry()
    assert bar.length == pytest.approx(13.0)
    assert np.allclose(bar.line.end, (3.0, 4.0, 12.0))


def test_tension_sign_convention():
    a, b, bar = _pair(natural_length=1.0)
    bar.compute_force()
    assert bar.tension == pytest.approx(3.0)
    # stretched bar pulls the ends together
    assert a.velocity[0] == pytest.approx(3.0)
    assert b.velocity[0] == pytest.approx(-3.0)

    a, b, bar = _pair(natural_length=3.0)
    bar.compute_force()
    assert bar.tension == pytest.approx(-3.0)
    assert a.velocity[0] == pytest.approx(-3.0)

    a, b, bar = _pair(natural_length=-1)
    bar.compute_force()
    assert bar.natural_length == pytest.approx(2.0)
    assert bar.tension == 0.0
    assert np.all(a.velocity == 0.0)


def test_stress_equals_tension_over_unit_area():
    _, _, bar = _pair()
    bar.compute_force()
    assert bar.area == 1.0
    assert bar.stress == bar.tension


def test_retune_and_natural_length():
    _, _, bar = _pair()
    bar.retune(7.5)
    assert bar.stiffness == 7.5
    bar.set_natural_length(0.25)
    assert bar.natural_length == 0.25
    bar.set_natural_length(-1)
    assert bar.natural_length == pytest.approx(bar.length)


def test_bar_attaches_valency_and_rejects_self_loop():
    a, b, _ = _pair()
    assert a.valency == 1 and b.valency == 1
    with pytest.raises(ValueError):
        Bar(a, a, 1.0)


def test_zero_length_bar_skips_force():
    a = Node(0, (0.0, 0.0, 0.0))
    b = Node(1, (0.0, 0.0, 0.0))
    bar = Bar(a, b, 2.0, 1.0)
    bar.compute_force()
    assert bar.tension == pytest.approx(-2.0)
    assert np.all(np.isfinite(a.velocity)) and np.all(np.isfinite(b.velocity))
    assert np.all(a.velocity == 0.0) and np.all(b.velocity == 0.0)


def test_register_neighbours():
    a, b, bar = _pair()
    bar.register_neighbours()
    assert a.neighbours == [1]
    assert b.neighbours == [0]
    a.reset_neighbours()
    assert a.neighbours == []


def test_load_helpers_add_to_velocity():
    n = Node(0, (0.0, 0.0, 0.0), mass=2.0)
    n.apply_gravity(-9.81)
    assert n.velocity[2] == pytest.approx(-19.62)
    n.apply_wind(1.5)
    n.apply_dead_load(-0.5)
    n.apply_force((1.0, 2.0, 3.0))
    assert np.allclose(n.velocity, (2.5, 2.0, -17.12))
    n.damp(0.5)
    assert np.allclose(n.velocity, (1.25, 1.0, -8.56))


@pytest.mark.parametrize(
    "kind, expected",
    [
        (NodeType.FREE, (0.1, 0.2, 0.3)),
        (NodeType.LOADED, (0.1, 0.2, 0.3)),
        (NodeType.ROLLER, (1.0, 2.0, 0.0)),
        (NodeType.FIXED, (0.0, 0.0, 0.0)),
        (NodeType.PINNED, (0.0, 0.0, 0.0)),
    ],
)
def test_integrate_by_type(kind, expected):
    n = Node(0, (0.0, 0.0, 0.0), kind=kind, velocity=(1.0, 2.0, 3.0))
    n.integrate(0.1)
    assert np.allclose(n.position, expected)


def test_roller_can_use_time_step():
    n = Node(0, (0.0, 0.0, 0.0), kind=NodeType.ROLLER, velocity=(1.0, 2.0, 3.0))
    n.integrate(0.1, roller_uses_time_step=True)
    assert np.allclose(n.position, (0.1, 0.2, 0.0))


def test_pinned_position_is_bit_identical():
    start = np.array([0.123456789, -4.5, 1e-9])
    n = Node(0, start, kind=NodeType.PINNED)
    for _ in range(100):
        n.apply_force((3.0, -2.0, 1.0))
        n.integrate(0.01)
    assert np.array_equal(n.position, start)


def test_reset_mass_by_strategy():
    n = Node(0, (0.0, 0.0, 0.0), mass=4.0)
    n.reset_mass(MassType.CONSTANT)
    assert n.mass == 4.0
    n.reset_mass(MassType.LENGTH)
    assert n.mass == 0.0
    n.mass = 4.0
    n.reset_mass(MassType.AREA)
    assert n.mass == 0.0


def test_classify_node():
    supports = [(0.0, 0.0, 0.0)]
    rollers = [(1.0, 0.0, 0.0)]
    assert classify_node((0.0, 0.0, 0.0005), supports, rollers) is NodeType.PINNED
    assert classify_node((1.0, 0.0, 0.0), supports, rollers) is NodeType.ROLLER
    assert classify_node((0.0, 0.0, 0.01), supports, rollers) is NodeType.FREE


def test_support_tolerance_is_inclusive():
    supports = [(0.0, 0.0, 0.0)]
    assert classify_node((0.001, 0.0, 0.0), supports) is NodeType.PINNED
    assert classify_node((0.0011, 0.0, 0.0), supports) is NodeType.FREE
    assert classify_node((0.5, 0.0, 0.0), supports, tolerance=0.5) is NodeType.PINNED
