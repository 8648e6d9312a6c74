"""
Simulation configuration.

Defines every parameter consumed by ``SimulationController.initialize``
together with its validation rules. Preset configurations for common
scenarios live in the top-level ``config`` module.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

RECOMMENDED_HOMOPHILY = (0.5, 0.95)


@dataclass
class SimulationConfig:
    """Configuration for one opinion dynamics run."""

    # Population
    population_size: int = 100
    red_proportion: float = 0.5
    red_zealot_fraction: float = 0.0
    blue_zealot_fraction: float = 0.0

    # Network
    homophily: float = 0.7  # P(sought partner shares opinion)
    network_max_attempts: int = 50

    # Interaction
    zealot_influence_probability: float = 1.0
    direct_pair_probability: float = 0.7

    # Run control
    max_interactions: int = 5000
    random_seed: Optional[int] = 42

    # Statistics
    history_interval: int = 10  # Snapshot every N interactions
    history_limit: int = 1000
    progress_interval: int = 50  # Progress notification every N interactions

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.population_size < 1:
            raise ValueError("population_size must be positive")

        for name in (
            "red_proportion",
            "red_zealot_fraction",
            "blue_zealot_fraction",
            "homophily",
            "zealot_influence_probability",
            "direct_pair_probability",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")

        if self.max_interactions < 1:
            raise ValueError("max_interactions must be positive")
        if self.network_max_attempts < 1:
            raise ValueError("network_max_attempts must be positive")
        if self.history_interval < 1:
            raise ValueError("history_interval must be positive")
        if self.history_limit < 1:
            raise ValueError("history_limit must be positive")
        if self.progress_interval < 1:
            raise ValueError("progress_interval must be positive")

        low, high = RECOMMENDED_HOMOPHILY
        if not low <= self.homophily <= high:
            logger.warning(
                "homophily %.2f is outside the recommended range [%.2f, %.2f]",
                self.homophily, low, high,
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
