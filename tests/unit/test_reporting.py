import csv
import json

from mlpnet.reporting.metrics import ErrorLog
from mlpnet.reporting.plots import PlotAdapter
from mlpnet.reporting.topology import topology_to_dot, write_dot


def test_dot_export_names_and_edges():
    dot = topology_to_dot([2, 3, 1])
    assert dot.startswith("digraph G\n{")
    assert "x000 x001;" in dot
    assert "a001000 a001001 a001002;" in dot
    assert 'label = "Output Layer";' in dot
    assert "x001->a001002;" in dot
    assert "a001002->y000;" in dot
    assert dot.count("->") == 2 * 3 + 3 * 1
    assert dot.rstrip().endswith("}")


def test_dot_export_links_hidden_layers(tmp_path):
    dot = topology_to_dot([1, 2, 2, 1])
    assert "a001001->a002000;" in dot
    assert 'label = "Hidden Layer2";' in dot
    path = write_dot(tmp_path / "net.dot", [1, 2, 2, 1])
    assert (tmp_path / "net.dot").read_text() == dot
    assert path.endswith("net.dot")


def test_error_log_writes_one_row_per_epoch(tmp_path):
    log = ErrorLog(tmp_path / "run", seed=3, sha="abc")
    for epoch in range(3):
        log.on_epoch(epoch, {"error": 1.0 / (epoch + 1), "note": "skip"})

    lines = log.jsonl_path.read_text().splitlines()
    records = [json.loads(line) for line in lines]
    assert [r["epoch"] for r in records] == [0, 1, 2]
    assert records[0] == {"epoch": 0, "seed": 3, "sha": "abc", "error": 1.0}

    with log.csv_path.open() as handle:
        rows = list(csv.DictReader(handle))
    assert [row["epoch"] for row in rows] == ["0", "1", "2"]
    assert float(rows[2]["error"]) == 1.0 / 3


def test_error_log_starts_fresh_files(tmp_path):
    ErrorLog(tmp_path, sha="abc").on_epoch(0, {"error": 0.5})
    log = ErrorLog(tmp_path, sha="abc")
    assert log.jsonl_path.read_text() == ""
    assert log.csv_path.read_text().splitlines() == ["epoch,error"]


def test_plot_adapter_disabled_is_noop(tmp_path):
    plots = PlotAdapter(tmp_path / "run", enable_plots=False)
    plots.on_epoch(0, {"error": 0.5})
    assert plots.close() is None
    assert not (tmp_path / "run").exists()


def test_plot_adapter_writes_png(tmp_path):
    plots = PlotAdapter(tmp_path, enable_plots=True)
    for epoch, err in enumerate([0.5, 0.3, 0.1]):
        plots.on_epoch(epoch, {"error": err})
    path = plots.close()
    assert path is not None and path.exists()


def test_plot_adapter_draws_target_line_and_zero_errors(tmp_path):
    plots = PlotAdapter(tmp_path, enable_plots=True, min_error=0.01, label="xor")
    for err in [0.4, 0.05, 0.0]:
        plots(0, {"error": err})
    assert plots.close() == tmp_path / "error.png"
    assert (tmp_path / "error.png").stat().st_size > 0
