import math

import numpy as np
import pytest

from mlpnet.core.errors import SizeMismatch, UserCostFunctionMissing
from mlpnet.core.network import Network
from mlpnet.core.types import Topology


def _sigmoid(x):
    return 1.0 / (1.0 + math.exp(-x))


@pytest.mark.parametrize("sizes", [[2, 2, 1], [3, 4, 2], [5, 3, 4, 2]])
def test_layer_shapes_follow_topology(sizes):
    net = Network(sizes, seed=0)
    assert len(net.layers) == len(sizes) - 1
    for layer, (prev, width) in zip(net.layers, zip(sizes[:-1], sizes[1:])):
        assert len(layer) == width
        assert all(len(neuron.weights) == prev for neuron in layer)
    assert net.topology == Topology(sizes)
    assert net.input_size == sizes[0]
    assert net.output_size == sizes[-1]


@pytest.mark.parametrize("sizes", [[2, 1], [2, 0, 1], [3], [2.7, 2, 1], [2, "x", 1]])
def test_invalid_topology_is_rejected(sizes):
    with pytest.raises(SizeMismatch):
        Network(sizes)


def test_same_seed_gives_identical_outputs():
    a = Network([3, 5, 2], seed=42)
    b = Network([3, 5, 2], seed=42)
    for net in (a, b):
        net.set_input([0.2, -0.7, 1.0])
        net.feed_forward()
    assert a.copy_output() == b.copy_output()
    c = Network([3, 5, 2], seed=43)
    c.set_input([0.2, -0.7, 1.0])
    c.feed_forward()
    assert c.copy_output() != a.copy_output()


def test_reshuffle_ranges():
    net = Network([4, 6, 3], seed=3)
    bound = 1.0 / math.sqrt(Topology([4, 6, 3]).weight_count())
    for layer in net.layers:
        for neuron in layer:
            assert np.all(np.abs(neuron.weights.values) <= bound)
            assert np.all(neuron.delta_weights.values == 0.0)
            assert 0.0 <= neuron.bias < 1.0


def test_wrong_input_size_leaves_network_unchanged():
    net = Network([3, 2, 1], seed=1)
    before = net.dumps()
    with pytest.raises(SizeMismatch):
        net.set_input([1.0, 2.0])
    assert net.dumps() == before


def test_wrong_target_size_leaves_weights_unchanged():
    net = Network([2, 3, 2], seed=1)
    net.set_input([1.0, 0.0])
    before = net.dumps()
    with pytest.raises(SizeMismatch):
        net.back_propagate([1.0])
    assert net.dumps() == before


def test_single_step_matches_hand_computation():
    net = Network([1, 1, 1], learning_rate=0.5, momentum=0.0, seed=0)
    hidden = net.layers[0][0]
    out = net.layers[1][0]
    hidden.weights[0], hidden.bias = 0.5, 0.1
    out.weights[0], out.bias = -0.3, 0.2

    net.set_input([1.0])
    returned = net.back_propagate([1.0])

    h = _sigmoid(0.6)
    o = _sigmoid(-0.3 * h + 0.2)
    err_o = (1.0 - o) * o * (1.0 - o)
    w_o = -0.3 + h * err_o * 0.5
    bias_o = err_o * 0.5
    err_h = h * (1.0 - h) * (err_o * w_o + err_o * bias_o)

    assert returned[0] == pytest.approx(o)
    assert out.weights[0] == pytest.approx(w_o)
    assert out.bias == pytest.approx(bias_o)
    assert hidden.error == pytest.approx(err_h)
    assert hidden.weights[0] == pytest.approx(0.5 + err_h * 0.5)
    assert hidden.bias == pytest.approx(err_h * 0.5)


def test_momentum_reuses_previous_delta():
    net = Network([1, 1, 1], learning_rate=0.5, momentum=0.9, seed=0)
    out = net.layers[1][0]
    net.set_input([1.0])
    net.back_propagate([1.0])
    first_delta = out.delta_weights[0]
    net.back_propagate([1.0])
    h = net.layers[0][0].output
    err = out.error
    expected = h * err * 0.5 + err * 0.9 * first_delta
    assert out.delta_weights[0] == pytest.approx(expected, rel=1e-6)


def test_cross_entropy_policy_uses_plain_difference():
    net = Network([2, 2, 2], cost="cross_entropy", seed=5)
    net.set_input([1.0, 0.0])
    outputs = net.back_propagate([0.0, 1.0])
    errors = [neuron.error for neuron in net.layers[-1]]
    assert errors == pytest.approx([0.0 - outputs[0], 1.0 - outputs[1]])


def test_cost_selection():
    net = Network([2, 2, 1], seed=0)
    net.set_input([1.0, 1.0])
    net.feed_forward()
    expected = 0.5 * (net.copy_output()[0] - 1.0) ** 2
    assert net.calc_error_cost([1.0]) == pytest.approx(expected)
    assert net.mean_squared_error([1.0]) == pytest.approx(expected)

    net.select_cost_function("ce")
    assert net.cost_name == "cross_entropy"
    assert net.calc_error_cost([1.0]) == pytest.approx(net.cross_entropy([1.0]))

    net.select_cost_function("userdef")
    with pytest.raises(UserCostFunctionMissing):
        net.calc_error_cost([1.0])

    net.set_cost_function(lambda output, target: 42.0)
    assert net.calc_error_cost([1.0]) == 42.0

    with pytest.raises(KeyError):
        net.select_cost_function("hinge")


def test_copy_is_deep():
    net = Network([2, 3, 1], seed=9)
    clone = net.copy()
    clone.layers[0][0].weights[0] = 123.0
    clone.learning_rate = 0.9
    assert net.layers[0][0].weights[0] != 123.0
    assert net.learning_rate == pytest.approx(0.1)
    assert clone.dumps() != net.dumps()


def test_unbuilt_network():
    net = Network()
    assert net.topology is None
    assert net.output_size == 0
    assert net.copy_output().empty()
    with pytest.raises(ValueError):
        net.back_propagate([])
    with pytest.raises(ValueError):
        net.dumps()


def test_recurrent_rule_tracks_previous_delta():
    net = Network([2, 3, 1], update_rule="rmlp", seed=4)
    assert net.net_id == "rmlp"
    net.set_input([1.0, 0.0])
    net.back_propagate([1.0])
    out = net.layers[-1][0]
    first = out.delta_weights.copy()
    net.back_propagate([1.0])
    assert out.delta_weights_tm1 == first


def test_dump_and_to_dict():
    net = Network([2, 2, 1], seed=0)
    data = net.to_dict()["ann"]
    assert data["topology"] == [2, 2, 1]
    assert set(data["layers"]) == {"layer0", "layer1"}
    assert set(data["layers"]["layer0"]["neuron0"]) == {"bias", "weights", "deltaW"}
    assert "Output" in net.dump()
