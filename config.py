"""
Configuration presets for the Zealot Opinion Dynamics simulation.

The ``SimulationConfig`` dataclass itself lives in
``opinion_dynamics.config``; this module collects ready-made scenarios
and the settings for batch experiments.

Scenarios:
- DEFAULT: balanced population, moderate homophily, no zealots
- ECHO_CHAMBER: strong homophily, few cross-opinion links
- MIXED_NETWORK: weak homophily, many cross-opinion links
- RED_ZEALOT_MINORITY: a committed red minority inside a blue majority
- COMPETING_ZEALOTS: zealots on both sides
"""

from dataclasses import dataclass, field

from opinion_dynamics.config import SimulationConfig


@dataclass
class SweepConfig:
    """Configuration for batch experiments."""

    # Parameter sweep settings
    homophily_values: list = field(default_factory=lambda: [0.5, 0.6, 0.7, 0.8, 0.9, 0.95])
    zealot_fractions: list = field(default_factory=lambda: [0.0, 0.05, 0.1, 0.2, 0.3])
    population_size: int = 100
    red_proportion: float = 0.3
    max_interactions: int = 5000
    num_trials: int = 10  # Repetitions per configuration
    base_seed: int = 0


# Default configurations
DEFAULT_CONFIG = SimulationConfig()

QUICK_TEST_CONFIG = SimulationConfig(
    population_size=20,
    max_interactions=500,
)

# =============================================================================
# Preset Configurations for Different Scenarios
# =============================================================================

# Strong homophily: most links stay inside each camp, so cross-camp
# influence travels mainly through indirect pairings.
ECHO_CHAMBER_CONFIG = SimulationConfig(
    homophily=0.95,
    max_interactions=10000,
)

# Weak homophily: agents see the other camp often and susceptibility is high.
MIXED_NETWORK_CONFIG = SimulationConfig(
    homophily=0.5,
    max_interactions=10000,
)

# 30% red, a third of whom never move.
RED_ZEALOT_MINORITY_CONFIG = SimulationConfig(
    red_proportion=0.3,
    red_zealot_fraction=0.33,
    homophily=0.7,
    max_interactions=10000,
)

# Both camps hold zealots, so dominance is impossible and the run ends at the cap.
COMPETING_ZEALOTS_CONFIG = SimulationConfig(
    red_proportion=0.5,
    red_zealot_fraction=0.1,
    blue_zealot_fraction=0.1,
    homophily=0.7,
    max_interactions=10000,
)

# Zealots persuade only some of the time
PARTIAL_ZEALOT_INFLUENCE_CONFIG = SimulationConfig(
    red_proportion=0.3,
    red_zealot_fraction=0.2,
    zealot_influence_probability=0.25,
    max_interactions=10000,
)

# Named presets selectable from the command line
PRESETS = {
    "default": DEFAULT_CONFIG,
    "quick": QUICK_TEST_CONFIG,
    "echo_chamber": ECHO_CHAMBER_CONFIG,
    "mixed_network": MIXED_NETWORK_CONFIG,
    "red_zealot_minority": RED_ZEALOT_MINORITY_CONFIG,
    "competing_zealots": COMPETING_ZEALOTS_CONFIG,
    "partial_zealot_influence": PARTIAL_ZEALOT_INFLUENCE_CONFIG,
}
