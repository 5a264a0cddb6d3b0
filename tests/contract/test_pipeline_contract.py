import csv
import json
from pathlib import Path

import pytest

from mlpnet.core.network import Network
from mlpnet.core.perceptron import Perceptron
from mlpnet.training import pipelines


def _quick(preset: str, tmp_path: Path, epochs: int = 5) -> dict:
    config = pipelines.load_preset(preset)
    config["train"].update(
        {"epochs": epochs, "min_error": -1.0, "run_dir": str(tmp_path / preset), "log_every": 1}
    )
    return config


def test_pipeline_produces_artifacts(tmp_path, capsys):
    config = _quick("xor", tmp_path)
    result = pipelines.run_pipeline(config)

    assert "=== mlpnet run ===" in capsys.readouterr().out
    assert result.epochs == 5
    assert not result.converged
    assert 0.0 <= result.accuracy <= 1.0
    assert len(result.predictions) == 4

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert [r["epoch"] for r in records] == [0, 1, 2, 3, 4]
    assert all({"error", "sha", "seed"} <= set(r) for r in records)
    assert records[0]["seed"] == 1

    with (tmp_path / "xor" / "metrics.csv").open() as handle:
        assert len(list(csv.DictReader(handle))) == 5

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 1
    assert manifest["dataset"]["gate"] == "xor"
    assert manifest["results"]["epochs"] == 5

    saved = pipelines.load_model(result.network_path)
    assert isinstance(saved, Network)
    assert saved.topology.to_list() == [2, 2, 1]


def test_pipeline_is_deterministic(tmp_path):
    first = pipelines.run_pipeline(_quick("xor-recurrent", tmp_path / "a"))
    second = pipelines.run_pipeline(_quick("xor-recurrent", tmp_path / "b"))
    assert first.predictions == second.predictions
    assert Path(first.network_path).read_text() == Path(second.network_path).read_text()
    assert Path(first.network_path).read_text().startswith("rmlp")


def test_perceptron_pipeline_learns_and(tmp_path):
    config = pipelines.load_preset("and-perceptron")
    config["train"]["run_dir"] = str(tmp_path / "and")
    result = pipelines.run_pipeline(config)
    assert isinstance(pipelines.load_model(result.network_path), Perceptron)
    assert result.accuracy == 1.0
    assert result.epochs <= 2000


def test_enable_plots_writes_curve(tmp_path):
    config = _quick("or-perceptron", tmp_path, epochs=3)
    config["train"]["enable_plots"] = True
    result = pipelines.run_pipeline(config)
    assert Path(result.plot_path).exists()


def test_default_run_dir_uses_config_hash(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = pipelines.load_preset("nand-mlp")
    config["train"]["epochs"] = 1
    result = pipelines.run_pipeline(config)
    assert Path(result.run_dir) == Path("runs") / pipelines.config_hash(config)


def test_shape_mismatch_is_reported(tmp_path):
    config = _quick("xor", tmp_path)
    config["model"]["topology"] = [3, 2, 1]
    with pytest.raises(ValueError, match="inputs"):
        pipelines.run_pipeline(config)


def test_unknown_model_kind(tmp_path):
    config = _quick("xor", tmp_path)
    config["model"]["kind"] = "hopfield"
    with pytest.raises(ValueError, match="Unknown model kind"):
        pipelines.run_pipeline(config)
