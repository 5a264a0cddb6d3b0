"""Training loop, cost adapters and configuration-driven runs."""

from .losses import COSTS, get_cost
from .trainer import Trainer

__all__ = ["COSTS", "Trainer", "get_cost"]
