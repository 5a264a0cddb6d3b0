import math

import pytest

from mlpnet.core import losses
from mlpnet.core.errors import SizeMismatch
from mlpnet.core.vector import Vector


def test_mean_squared_error_is_half_squared_norm():
    assert losses.mean_squared_error([1.0, 2.0], [0.0, 0.0]) == pytest.approx(2.5)
    assert losses.mean_squared_error([0.3], [0.3]) == 0.0


def test_cross_entropy_survives_saturated_outputs():
    value = losses.cross_entropy(Vector([0.0, 1.0]), Vector([0.0, 1.0]))
    assert math.isfinite(value)
    assert value == pytest.approx(0.0)

    wrong = losses.cross_entropy(Vector([1.0, 0.0]), Vector([0.0, 1.0]))
    assert math.isfinite(wrong)
    assert wrong > 700.0


def test_cross_entropy_matches_formula():
    o, t = [0.25, 0.8], [0.0, 1.0]
    expected = -((math.log(0.75)) + math.log(0.8)) / 2
    assert losses.cross_entropy(o, t) == pytest.approx(expected)


def test_error_vectors():
    output, target = Vector([0.5, 0.25]), Vector([1.0, 0.0])
    assert losses.mse_error_vector(output, target).to_list() == pytest.approx([0.125, -0.046875])
    assert losses.cross_entropy_error_vector(output, target).to_list() == [0.5, -0.25]


@pytest.mark.parametrize(
    "fn",
    [
        losses.mean_squared_error,
        losses.cross_entropy,
        losses.mse_error_vector,
        losses.cross_entropy_error_vector,
    ],
)
def test_size_mismatch(fn):
    with pytest.raises(SizeMismatch):
        fn(Vector([0.1, 0.2]), Vector([0.1]))


def test_registry_lookup_and_aliases():
    assert list(losses.REGISTRY.names()) == ["cross_entropy", "mse"]
    assert losses.REGISTRY.get("ce").name == "cross_entropy"
    assert "crossentropy" in losses.REGISTRY
    assert losses.REGISTRY.get("mse")(Vector([1.0]), Vector([0.0])) == pytest.approx(0.5)
    with pytest.raises(KeyError, match="Available losses"):
        losses.REGISTRY.get("hinge")
