import numpy as np
import pytest

from dynamicmass.editor_state import inputs_from_json, inputs_to_json
from dynamicmass.presets import build_cable_net, build_hanging_chain, build_tripod
from dynamicmass.session import RelaxationInputs


def test_json_round_trip():
    inputs = build_hanging_chain()
    inputs.rollers = [(0.5, 0.0, 0.0)]
    inputs.loads = [(0.0, 0.0, -1.0)]
    restored = inputs_from_json(inputs_to_json(inputs))
    assert restored == inputs
    assert restored.reset is False


def test_json_accepts_numpy_points():
    X = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0]])
    inputs = RelaxationInputs(
        nodes=list(X),
        springs=[(X[0], X[1]), (X[1], X[2])],
        supports=[X[0], X[2]],
        stiffnesses=[np.float64(2.0)],
        mass_density=list(np.ones(3)),
        mass_type=np.int64(0),
        gravity=np.float64(-1.0),
        loads=[np.zeros(3)],
    )
    restored = inputs_from_json(inputs_to_json(inputs))
    assert restored.nodes == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 0.0, 0.0)]
    assert restored.springs[1] == ((1.0, 0.0, 0.0), (2.0, 0.0, 0.0))
    assert restored.supports == [(0.0, 0.0, 0.0), (2.0, 0.0, 0.0)]
    assert restored.stiffnesses == [2.0]
    assert restored.mass_density == [1.0, 1.0, 1.0]
    assert restored.mass_type == 0
    assert restored.gravity == -1.0
    assert restored.loads == [(0.0, 0.0, 0.0)]

def test_from_json_fills_defaults():
    restored = inputs_from_json('{"nodes": [[0, 0, 0], [1, 0, 0]], "unknown": 1}')
    assert restored.nodes == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)]
    assert restored.stiffnesses == [0.1]
    assert restored.mass_type == 1


def test_cable_net_basic():
    inputs = build_cable_net(4, 3)
    assert len(inputs.nodes) == 12
    assert len(inputs.springs) == 3 * 3 + 4 * 2
    assert len(inputs.supports) == 4
    edged = build_cable_net(4, 3, support_edges=True)
    assert len(edged.supports) == 10


def test_chain_and_tripod_basic():
    chain = build_hanging_chain(n=4, span=2.0)
    assert len(chain.nodes) == 5
    assert chain.nat_lengths == [pytest.approx(0.5)]
    tripod = build_tripod()
    assert len(tripod.nodes) == 4
    assert tripod.mass_type == 2
    with pytest.raises(ValueError):
        build_cable_net(1, 3)
