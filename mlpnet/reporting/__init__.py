"""Reporting utilities for mlpnet."""

from .artifacts import write_manifest
from .metrics import ErrorLog
from .plots import PlotAdapter
from .topology import topology_to_dot, write_dot

__all__ = ["ErrorLog", "PlotAdapter", "topology_to_dot", "write_dot", "write_manifest"]
