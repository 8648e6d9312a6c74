"""
Experiment runner for batch simulations and parameter sweeps.

Runs configurations one after another in the current process and
aggregates their outcomes into a DataFrame.
"""

import logging
import time
from dataclasses import dataclass
from itertools import product
from pathlib import Path
from typing import List, Optional

import pandas as pd
from tqdm import tqdm

from opinion_dynamics import SimulationConfig, SimulationController

logger = logging.getLogger(__name__)


@dataclass
class ExperimentConfig:
    """Configuration for a single experiment run."""

    name: str
    population_size: int = 100
    red_proportion: float = 0.5
    red_zealot_fraction: float = 0.0
    blue_zealot_fraction: float = 0.0
    homophily: float = 0.7
    zealot_influence_probability: float = 1.0
    max_interactions: int = 5000
    random_seed: Optional[int] = None

    def to_simulation_config(self) -> SimulationConfig:
        return SimulationConfig(
            population_size=self.population_size,
            red_proportion=self.red_proportion,
            red_zealot_fraction=self.red_zealot_fraction,
            blue_zealot_fraction=self.blue_zealot_fraction,
            homophily=self.homophily,
            zealot_influence_probability=self.zealot_influence_probability,
            max_interactions=self.max_interactions,
            random_seed=self.random_seed,
        )


@dataclass
class ExperimentResult:
    """Result from a single experiment run."""

    config: ExperimentConfig
    termination_reason: Optional[str]
    final_interaction: int
    final_red_count: int
    final_blue_count: int
    final_red_proportion: float
    winner: Optional[str]  # "red", "blue" or None when neither dominates
    n_edges: int
    n_components: int
    same_opinion_edge_fraction: float
    run_time_seconds: float


def run_single_experiment(config: ExperimentConfig) -> ExperimentResult:
    """
    Run a single experiment with given configuration.

    Args:
        config: Experiment configuration

    Returns:
        ExperimentResult with outcomes
    """
    start_time = time.time()

    controller = SimulationController()
    controller.initialize(config.to_simulation_config())
    result = controller.run()

    run_time = time.time() - start_time

    stats = result.statistics
    counts = stats.opinion_counts
    if counts.blue == 0:
        winner = "red"
    elif counts.red == 0:
        winner = "blue"
    else:
        winner = None

    return ExperimentResult(
        config=config,
        termination_reason=stats.termination_reason.value if stats.termination_reason else None,
        final_interaction=stats.interaction_count,
        final_red_count=counts.red,
        final_blue_count=counts.blue,
        final_red_proportion=counts.red / counts.total if counts.total > 0 else 0.0,
        winner=winner,
        n_edges=result.network["n_edges"],
        n_components=result.network["n_components"],
        same_opinion_edge_fraction=result.network["same_opinion_edge_fraction"],
        run_time_seconds=run_time,
    )


class ExperimentRunner:
    """
    Batch experiment runner.

    Handles:
    - Running multiple configurations sequentially
    - Result aggregation
    - Output saving
    """

    def __init__(self, output_dir: str = "data/experiments"):
        """
        Initialize experiment runner.

        Args:
            output_dir: Directory for output files
        """
        self._output_dir = Path(output_dir)
        self._results: List[ExperimentResult] = []

    @property
    def results(self) -> List[ExperimentResult]:
        return list(self._results)

    def run_experiments(
        self,
        configs: List[ExperimentConfig],
        progress: bool = True,
    ) -> List[ExperimentResult]:
        """
        Run multiple experiments.

        Args:
            configs: List of experiment configurations
            progress: Show progress bar

        Returns:
            List of experiment results
        """
        results = []

        iterator = configs
        if progress:
            iterator = tqdm(configs, desc="Running experiments")

        for config in iterator:
            try:
                results.append(run_single_experiment(config))
            except ValueError as e:
                logger.error("Error in experiment %s: %s", config.name, e)

        self._results.extend(results)
        return results

    def get_results_dataframe(self) -> pd.DataFrame:
        """
        Convert results to pandas DataFrame.

        Returns:
            DataFrame with one row per experiment
        """
        rows = []
        for result in self._results:
            rows.append({
                "name": result.config.name,
                "population_size": result.config.population_size,
                "red_proportion": result.config.red_proportion,
                "red_zealot_fraction": result.config.red_zealot_fraction,
                "blue_zealot_fraction": result.config.blue_zealot_fraction,
                "homophily": result.config.homophily,
                "zealot_influence_probability": result.config.zealot_influence_probability,
                "random_seed": result.config.random_seed,
                "termination_reason": result.termination_reason,
                "final_interaction": result.final_interaction,
                "final_red_count": result.final_red_count,
                "final_blue_count": result.final_blue_count,
                "final_red_proportion": result.final_red_proportion,
                "winner": result.winner,
                "n_edges": result.n_edges,
                "n_components": result.n_components,
                "same_opinion_edge_fraction": result.same_opinion_edge_fraction,
                "run_time_seconds": result.run_time_seconds,
            })

        return pd.DataFrame(rows)

    def save_results(self, filename: str = "results.csv") -> str:
        """
        Save results to CSV.

        Args:
            filename: Output filename

        Returns:
            Path to saved file
        """
        self._output_dir.mkdir(parents=True, exist_ok=True)
        path = self._output_dir / filename
        self.get_results_dataframe().to_csv(path, index=False)
        return str(path)


def run_homophily_sweep(
    homophily_values: List[float] = [0.5, 0.6, 0.7, 0.8, 0.9, 0.95],
    population_size: int = 100,
    red_proportion: float = 0.3,
    red_zealot_fraction: float = 0.1,
    max_interactions: int = 5000,
    n_trials: int = 10,
    base_seed: int = 0,
    output_dir: str = "data/experiments",
    progress: bool = True,
) -> pd.DataFrame:
    """
    Sweep homophily for a fixed zealot minority.

    Returns:
        DataFrame with one row per run
    """
    configs = []
    for homophily, trial in product(homophily_values, range(n_trials)):
        configs.append(ExperimentConfig(
            name=f"homophily_{homophily:.2f}_trial_{trial}",
            population_size=population_size,
            red_proportion=red_proportion,
            red_zealot_fraction=red_zealot_fraction,
            homophily=homophily,
            max_interactions=max_interactions,
            random_seed=base_seed + trial,
        ))

    runner = ExperimentRunner(output_dir=output_dir)
    runner.run_experiments(configs, progress=progress)
    runner.save_results("homophily_sweep.csv")
    return runner.get_results_dataframe()


def run_zealot_sweep(
    zealot_fractions: List[float] = [0.0, 0.05, 0.1, 0.2, 0.3],
    homophily_values: List[float] = [0.7],
    population_size: int = 100,
    red_proportion: float = 0.3,
    max_interactions: int = 5000,
    n_trials: int = 10,
    base_seed: int = 0,
    output_dir: str = "data/experiments",
    progress: bool = True,
) -> pd.DataFrame:
    """
    Sweep the red zealot fraction (optionally crossed with homophily).

    Returns:
        DataFrame with one row per run
    """
    configs = []
    for fraction, homophily, trial in product(zealot_fractions, homophily_values, range(n_trials)):
        configs.append(ExperimentConfig(
            name=f"zealots_{fraction:.2f}_homophily_{homophily:.2f}_trial_{trial}",
            population_size=population_size,
            red_proportion=red_proportion,
            red_zealot_fraction=fraction,
            homophily=homophily,
            max_interactions=max_interactions,
            random_seed=base_seed + trial,
        ))

    runner = ExperimentRunner(output_dir=output_dir)
    runner.run_experiments(configs, progress=progress)
    runner.save_results("zealot_sweep.csv")
    return runner.get_results_dataframe()
