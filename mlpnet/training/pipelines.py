"""Configuration-driven training runs for mlpnet."""

from __future__ import annotations

import hashlib
import json
import logging
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Sequence, Union

from ..core.activations import StepFunction
from ..core.network import Network
from ..core.perceptron import ID_PERCEPTRON, Perceptron
from ..core.serialization import load_file, save_file
from ..data import registry
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import ErrorLog
from ..reporting.plots import PlotAdapter
from .losses import get_cost
from .trainer import Trainer

logger = logging.getLogger(__name__)

Model = Union[Network, Perceptron]

MODEL_KINDS = {"mlp": "ann", "rmlp": "rmlp", "perceptron": None}

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "data": {"name": "xor"},
        "model": {
            "kind": "mlp",
            "topology": [2, 2, 1],
            "learning_rate": 0.4,
            "momentum": 0.9,
            "cost": "mse",
            "threshold": 0.5,
        },
        "train": {
            "epochs": 40000,
            "min_error": 0.01,
            "seed": 1,
            "cost": "mse",
            "log_every": 1000,
            "enable_plots": False,
        },
    },
    "xor-cross-entropy": {
        "data": {"name": "xor"},
        "model": {
            "kind": "mlp",
            "topology": [2, 4, 1],
            "learning_rate": 0.3,
            "momentum": 0.5,
            "cost": "cross_entropy",
            "threshold": 0.5,
        },
        "train": {
            "epochs": 20000,
            "min_error": 0.01,
            "seed": 3,
            "cost": "network",
            "log_every": 1000,
            "enable_plots": False,
        },
    },
    "xor-recurrent": {
        "data": {"name": "xor"},
        "model": {
            "kind": "rmlp",
            "topology": [2, 4, 1],
            "learning_rate": 0.2,
            "momentum": 0.5,
            "cost": "mse",
            "threshold": 0.5,
        },
        "train": {
            "epochs": 20000,
            "min_error": 0.01,
            "seed": 5,
            "cost": "mse",
            "log_every": 1000,
            "enable_plots": False,
        },
    },
    "and-perceptron": {
        "data": {"name": "and"},
        "model": {
            "kind": "perceptron",
            "inputs": 2,
            "learning_rate": 0.2,
            "threshold": 0.5,
        },
        "train": {
            "epochs": 2000,
            "min_error": 0.01,
            "seed": 0,
            "cost": "perceptron",
            "log_every": 100,
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


@dataclass
class RunResult:
    """What a pipeline run produced."""

    run_dir: str
    epochs: int
    converged: bool
    error: float
    accuracy: float
    predictions: List[List[float]] = field(default_factory=list)
    metrics_path: str = ""
    manifest_path: str = ""
    network_path: str = ""
    plot_path: str = ""


def config_hash(config: Mapping[str, object]) -> str:
    """Return a stable 12-character hash for ``config``."""

    canonical = json.dumps(config, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:12]


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError:
        available = ", ".join(sorted(presets()))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}") from None


def build_model(model_cfg: Mapping[str, object], seed: int | None = None) -> Model:
    """Instantiate the network or perceptron described by ``model_cfg``."""

    kind = str(model_cfg.get("kind", "mlp"))
    if kind not in MODEL_KINDS:
        raise ValueError(f"Unknown model kind {kind!r}; expected one of {sorted(MODEL_KINDS)}")
    learning_rate = float(model_cfg.get("learning_rate", 0.1))
    if kind == "perceptron":
        if "inputs" not in model_cfg:
            raise KeyError("Perceptron models require `inputs` in the model config")
        step = StepFunction(threshold=float(model_cfg.get("threshold", 0.5)))
        return Perceptron(int(model_cfg["inputs"]), learning_rate, step, seed=seed)
    if "topology" not in model_cfg:
        raise KeyError(f"{kind} models require `topology` in the model config")
    return Network(
        [int(size) for size in model_cfg["topology"]],
        learning_rate,
        float(model_cfg.get("momentum", 0.5)),
        update_rule=MODEL_KINDS[kind],
        cost=str(model_cfg.get("cost", "mse")),
        seed=seed,
    )


def load_model(path: str | Path) -> Model:
    """Load a saved network or perceptron, picking the type from its leading tag."""

    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        head = handle.read(len(ID_PERCEPTRON) + 1).split()
    if head and head[0] == ID_PERCEPTRON:
        return load_file(path, Perceptron().load)
    return load_file(path, Network().load)


def predict(model: Model, inputs: Sequence[float]) -> List[float]:
    """Feed ``inputs`` forward and return the raw outputs."""

    model.set_input(inputs)
    model.feed_forward()
    if isinstance(model, Perceptron):
        return [model.output]
    return model.copy_output().to_list()


def accuracy(model: Model, samples, threshold: float = 0.5) -> tuple[float, List[List[float]]]:
    """Fraction of samples whose thresholded outputs all equal the target."""

    step = StepFunction(threshold=threshold)
    hits = 0
    predictions: List[List[float]] = []
    for sample in samples:
        outputs = predict(model, sample.inputs)
        predictions.append(outputs)
        if [step(value) for value in outputs] == sample.target.to_list():
            hits += 1
    return hits / len(samples) if samples else 0.0, predictions


class _ProgressLog:
    """Trainer callback logging the error every ``every`` epochs."""

    def __init__(self, every: int) -> None:
        self.every = max(1, every)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if epoch % self.every == 0:
            logger.info("epoch %d error %.6g", epoch, metrics.get("error", 0.0))


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    dataset = registry.get_dataset(str(data_cfg["name"]), **data_cfg.get("options", {}))
    seed = train_cfg.get("seed")
    seed = int(seed) if seed is not None else None

    model = build_model(model_cfg, seed=seed)
    if model.input_size != dataset.input_size:
        raise ValueError(
            f"Model expects {model.input_size} inputs but dataset "
            f"{dataset.name!r} provides {dataset.input_size}"
        )
    outputs = 1 if isinstance(model, Perceptron) else model.output_size
    if outputs != dataset.output_size:
        raise ValueError(
            f"Model produces {outputs} outputs but dataset "
            f"{dataset.name!r} has {dataset.output_size}"
        )

    default_cost = "perceptron" if isinstance(model, Perceptron) else "network"
    cost_name = str(train_cfg.get("cost", default_cost))
    cost = get_cost(cost_name)

    run_dir = _resolve_run_dir(train_cfg, config)
    run_dir.mkdir(parents=True, exist_ok=True)

    epochs = int(train_cfg.get("epochs", 1))
    min_error = float(train_cfg.get("min_error", -1.0))
    fraction = float(train_cfg.get("fraction", 1.0))
    threshold = float(model_cfg.get("threshold", 0.5))

    _print_startup_summary(
        dataset_name=dataset.name,
        kind=str(model_cfg.get("kind", "mlp")),
        shape=_describe_shape(model),
        cost=cost_name,
        epochs=epochs,
        min_error=min_error,
        run_dir=run_dir,
    )

    error_log = ErrorLog(run_dir, seed=seed)
    plots = PlotAdapter(
        run_dir,
        enable_plots=bool(train_cfg.get("enable_plots", False)),
        min_error=min_error,
        label=dataset.name,
    )
    callbacks: List[object] = [error_log, plots]
    log_every = int(train_cfg.get("log_every", 0))
    if log_every > 0:
        callbacks.append(_ProgressLog(log_every))

    trainer = Trainer(model, epochs, min_error=min_error, callbacks=callbacks)
    samples = [(sample.inputs, sample.target) for sample in dataset]
    reached = trainer.run_training(samples, cost, fraction=fraction)
    converged = reached < epochs
    plot_path = plots.close()

    acc, predictions = accuracy(model, dataset.samples, threshold)
    logger.info(
        "run finished after %d epochs (converged=%s, error=%.6g, accuracy=%.3f)",
        reached,
        converged,
        trainer.error,
        acc,
    )

    network_path = save_file(run_dir / "network.txt", model)
    results = {
        "epochs": reached,
        "converged": converged,
        "error": trainer.error,
        "accuracy": acc,
        "predictions": predictions,
    }
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=json.loads(json.dumps(config)),
        dataset_provenance=dataset.provenance,
        results=results,
    )

    return RunResult(
        run_dir=str(run_dir),
        epochs=reached,
        converged=converged,
        error=trainer.error,
        accuracy=acc,
        predictions=predictions,
        metrics_path=str(error_log.jsonl_path),
        manifest_path=manifest,
        network_path=str(network_path),
        plot_path=str(plot_path) if plot_path else "",
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], config: Mapping[str, object]) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    return Path("runs") / config_hash(config)


def _describe_shape(model: Model) -> str:
    if isinstance(model, Perceptron):
        return f"{model.input_size} inputs"
    return str(model.topology.to_list())


def _print_startup_summary(
    *,
    dataset_name: str,
    kind: str,
    shape: str,
    cost: str,
    epochs: int,
    min_error: float,
    run_dir: Path,
) -> None:
    print("=== mlpnet run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Model         : {kind}")
    print(f"Shape         : {shape}")
    print(f"Cost          : {cost}")
    print(f"Epochs        : {epochs}")
    print(f"Min error     : {min_error}")
    print(f"Run dir       : {run_dir}")
    print("==================")


__all__ = [
    "RunResult",
    "accuracy",
    "build_model",
    "config_hash",
    "load_model",
    "load_preset",
    "predict",
    "presets",
    "run_pipeline",
]
