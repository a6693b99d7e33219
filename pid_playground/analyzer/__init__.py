"""Step metrics and plotting of simulation results."""

from pid_playground.analyzer.metrics import (
    PerformanceMetrics,
    StepResponseMetrics,
    compute_step_metrics,
)
from pid_playground.analyzer.plots import PIDPlotter, format_metrics

__all__ = [
    "PerformanceMetrics",
    "StepResponseMetrics",
    "compute_step_metrics",
    "PIDPlotter",
    "format_metrics",
]
