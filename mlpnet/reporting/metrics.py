"""Per-epoch error history written while a model trains."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Mapping

from .artifacts import git_sha

CSV_FIELDS = ("epoch", "error")


class ErrorLog:
    """Trainer callback recording the last sample error of every epoch.

    Each epoch becomes one line of ``metrics.jsonl`` (tagged with the seed
    and git sha of the run) and one row of ``metrics.csv``.
    """

    def __init__(
        self,
        run_dir: str | Path,
        *,
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        self.run_dir = Path(run_dir)
        self.run_dir.mkdir(parents=True, exist_ok=True)
        self.jsonl_path = self.run_dir / "metrics.jsonl"
        self.csv_path = self.run_dir / "metrics.csv"
        self.seed = seed
        self.sha = sha or git_sha()
        self.jsonl_path.write_text("")
        with self.csv_path.open("w", encoding="utf-8", newline="") as handle:
            csv.writer(handle).writerow(CSV_FIELDS)

    def on_epoch(self, epoch: int, metrics: Mapping[str, object]) -> None:
        error = float(metrics.get("error", 0.0))
        record = {"epoch": int(epoch), "seed": self.seed, "sha": self.sha, "error": error}
        with self.jsonl_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")
        with self.csv_path.open("a", encoding="utf-8", newline="") as handle:
            csv.writer(handle).writerow((int(epoch), error))

    __call__ = on_epoch


__all__ = ["ErrorLog"]
