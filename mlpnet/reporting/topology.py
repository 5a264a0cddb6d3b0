"""Graphviz export of a network topology."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from ..core.types import Topology


def _input_node(idx: int) -> str:
    return f"x{idx:03d}"


def _hidden_node(level: int, idx: int) -> str:
    return f"a{level:03d}{idx:03d}"


def _output_node(idx: int) -> str:
    return f"y{idx:03d}"


def _cluster(index: int, color: str, label: str, nodes: Iterable[str]) -> List[str]:
    return [
        f"\tsubgraph cluster_{index} {{",
        "\t\tcolor=white;",
        f"\t\tnode [style=solid,color={color}, shape=circle];",
        "\t\t" + " ".join(nodes) + ";",
        f'\t\tlabel = "{label}";',
        "\t}",
    ]


def topology_to_dot(topology: Topology | Iterable[int]) -> str:
    """Render ``topology`` as a left-to-right Graphviz digraph.

    Inputs are named ``xNNN``, hidden units ``aLLLNNN`` (layer, unit) and
    outputs ``yNNN``. Every unit is connected to every unit of the next layer.
    """

    if not isinstance(topology, Topology):
        topology = Topology(topology)
    hidden = topology.hidden
    last_hidden = len(hidden)

    lines = [
        "digraph G",
        "{",
        "\trankdir=LR",
        "\tsplines=line",
        "\tnodesep=.55;",
        "\tranksep=20;",
        "",
        '\tnode [label="", shape=circle, width=1];',
        "",
    ]
    lines += _cluster(
        0, "blue4", "Input Layer", (_input_node(i) for i in range(topology.input_size))
    )
    for level, width in enumerate(hidden, start=1):
        lines += _cluster(
            level,
            "red2",
            f"Hidden Layer{level}",
            (_hidden_node(level, i) for i in range(width)),
        )
    lines += _cluster(
        last_hidden + 1,
        "green2",
        "Output Layer",
        (_output_node(i) for i in range(topology.output_size)),
    )
    lines.append("")

    for src in range(topology.input_size):
        for dst in range(hidden[0]):
            lines.append(f"{_input_node(src)}->{_hidden_node(1, dst)};")
    lines.append("")

    for level in range(1, last_hidden):
        for src in range(hidden[level - 1]):
            for dst in range(hidden[level]):
                lines.append(f"{_hidden_node(level, src)}->{_hidden_node(level + 1, dst)};")
        lines.append("")

    for dst in range(topology.output_size):
        for src in range(hidden[-1]):
            lines.append(f"{_hidden_node(last_hidden, src)}->{_output_node(dst)};")
    lines.append("")
    lines.append("}")
    return "\n".join(lines) + "\n"


def write_dot(path: str | Path, topology: Topology | Iterable[int]) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(topology_to_dot(topology))
    return str(path)


__all__ = ["topology_to_dot", "write_dot"]
