"""Error curve of a training run, drawn with matplotlib on the Agg backend."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Optional


class PlotAdapter:
    """Epoch callback that keeps the error history and renders ``error.png``.

    With plots disabled every call is a no-op and nothing touches the disk.
    A positive ``min_error`` is drawn as a dashed target line; errors are
    shown on a log scale since they span several decades on the logic sets.
    """

    def __init__(
        self,
        run_dir: str | Path,
        enable_plots: bool = False,
        *,
        min_error: Optional[float] = None,
        label: str = "",
    ):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.min_error = min_error
        self.label = label
        self._errors: List[float] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    @property
    def plot_path(self) -> Path:
        return self.run_dir / "error.png"

    def on_epoch(self, epoch: int, metrics: Mapping[str, object]) -> None:
        if self.enable_plots:
            self._errors.append(float(metrics.get("error", 0.0)))

    __call__ = on_epoch

    def close(self) -> Path | None:
        if not self.enable_plots or not self._errors:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        fig, ax = plt.subplots()
        ax.plot(range(len(self._errors)), self._errors, label="last sample error")
        if self.min_error is not None and self.min_error > 0:
            ax.axhline(self.min_error, linestyle="--", color="grey", label="min error")
        if all(err > 0 for err in self._errors):
            ax.set_yscale("log")
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Error")
        ax.set_title(f"Training error {self.label}".strip())
        ax.legend()
        fig.savefig(self.plot_path)
        plt.close(fig)
        return self.plot_path


__all__ = ["PlotAdapter"]
