"""
Experiments module for batch running and analysis.
"""

from .runner import (
    ExperimentConfig,
    ExperimentResult,
    ExperimentRunner,
    run_single_experiment,
    run_homophily_sweep,
    run_zealot_sweep,
)

__all__ = [
    "ExperimentConfig",
    "ExperimentResult",
    "ExperimentRunner",
    "run_single_experiment",
    "run_homophily_sweep",
    "run_zealot_sweep",
]
