import pytest

from mlpnet.core.types import Sample
from mlpnet.core.vector import Vector
from mlpnet.data import available_datasets, get_dataset, register_dataset
from mlpnet.data.registry import DatasetSpec


@pytest.mark.parametrize(
    "name, outputs",
    [
        ("xor", [0.0, 1.0, 1.0, 0.0]),
        ("and", [0.0, 0.0, 0.0, 1.0]),
        ("or", [0.0, 1.0, 1.0, 1.0]),
        ("nand", [1.0, 1.0, 1.0, 0.0]),
    ],
)
def test_logic_gates(name, outputs):
    spec = get_dataset(name)
    assert spec.input_size == 2
    assert spec.output_size == 1
    assert [s.inputs.to_list() for s in spec] == [[0, 0], [0, 1], [1, 0], [1, 1]]
    assert [s.target[0] for s in spec] == outputs
    assert spec.provenance["gate"] == name


def test_registry_rejects_unknown_and_inconsistent(monkeypatch):
    with pytest.raises(KeyError, match="Available datasets"):
        get_dataset("mnist")

    from mlpnet.data import registry

    monkeypatch.setattr(registry, "_REGISTRY", dict(registry._REGISTRY))

    @register_dataset("ragged")
    def _ragged(**_):
        return DatasetSpec(
            "ragged",
            [Sample(Vector([0.0]), Vector([1.0])), Sample(Vector([0.0, 1.0]), Vector([1.0]))],
        )

    assert "ragged" in available_datasets()
    with pytest.raises(ValueError, match="inconsistent"):
        get_dataset("ragged")
