"""
Visualization module for opinion dynamics simulation.

Provides static plots of the opinion history, beliefs and network degrees.
"""

from .static_plots import (
    plot_opinion_evolution,
    plot_belief_distribution,
    plot_degree_distribution,
    create_summary_figure,
    save_figure,
)

__all__ = [
    "plot_opinion_evolution",
    "plot_belief_distribution",
    "plot_degree_distribution",
    "create_summary_figure",
    "save_figure",
]
