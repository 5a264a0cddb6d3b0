"""Command line entry point for mlpnet training runs."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable

from mlpnet.core.errors import NetworkError
from mlpnet.core.network import Network
from mlpnet.reporting.topology import topology_to_dot, write_dot
from mlpnet.training import pipelines


def _format_result(result: pipelines.RunResult, run_id: str | None = None) -> str:
    payload = {
        "epochs": result.epochs,
        "converged": result.converged,
        "error": result.error,
        "accuracy": result.accuracy,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "network": result.network_path,
    }
    if result.plot_path:
        payload["plot"] = result.plot_path
    if run_id is not None:
        payload["run_id"] = run_id
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--seed", type=int, help="Seed used for weight initialisation")
    parser.add_argument("--epochs", type=int, help="Override the epoch budget")
    parser.add_argument("--run-dir", type=Path, help="Directory receiving run artifacts")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Save an error curve with matplotlib"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument(
        "--load", type=Path, help="Load a saved network instead of training one"
    )
    parser.add_argument(
        "--dot",
        nargs="?",
        const="-",
        help="Export the loaded network topology as Graphviz (file, or stdout)",
    )
    parser.add_argument(
        "--probe",
        help="Comma separated input values to feed through the loaded network",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        import yaml

        return yaml.safe_load(text) or {}
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def _parse_probe(text: str) -> list[float]:
    try:
        return [float(item) for item in text.split(",") if item.strip()]
    except ValueError:
        raise SystemExit(f"--probe expects comma separated numbers, got {text!r}") from None


def _inspect(args: argparse.Namespace) -> None:
    model = pipelines.load_model(args.load)
    if args.dot is not None:
        if not isinstance(model, Network):
            raise SystemExit("--dot requires a multilayer network")
        if args.dot == "-":
            sys.stdout.write(topology_to_dot(model.topology))
        else:
            write_dot(args.dot, model.topology)
    if args.probe:
        outputs = pipelines.predict(model, _parse_probe(args.probe))
        print(json.dumps({"outputs": outputs}))
    if args.dot is None and not args.probe:
        model.dump(sys.stdout)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    try:
        if args.load:
            _inspect(args)
            return

        config = json.loads(json.dumps(pipelines.load_preset(args.preset)))
        if args.config:
            override = _load_override(args.config)
            if {"data", "model", "train"} <= set(override.keys()):
                config = json.loads(json.dumps(override))
            else:
                config = _merge(config, override)

        train_cfg = config.setdefault("train", {})
        if args.enable_plots:
            train_cfg["enable_plots"] = True
        if args.seed is not None:
            train_cfg["seed"] = int(args.seed)
        if args.epochs is not None:
            train_cfg["epochs"] = int(args.epochs)

        run_id = pipelines.config_hash(config)
        if args.run_dir is not None:
            train_cfg["run_dir"] = str(args.run_dir)

        if args.dump_config:
            args.dump_config.parent.mkdir(parents=True, exist_ok=True)
            args.dump_config.write_text(json.dumps(config, indent=2))

        result = pipelines.run_pipeline(config)
    except (NetworkError, OSError, KeyError, ValueError, TypeError) as exc:
        message = exc.args[0] if isinstance(exc, KeyError) and exc.args else exc
        print(f"error: {message}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(_format_result(result, run_id=run_id))


if __name__ == "__main__":
    main()
