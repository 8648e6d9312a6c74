"""
Static visualization plots for opinion dynamics analysis.

Generates figures from the data the simulation produces: the opinion
history table, the per-agent table and the network degrees.
"""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from typing import List, Optional
from pathlib import Path

RED_COLOR = "#e63946"
BLUE_COLOR = "#1d3557"


def plot_opinion_evolution(
    df: pd.DataFrame,
    ax: Optional[plt.Axes] = None,
    title: str = "Opinion Distribution Over Time",
) -> plt.Axes:
    """Plot red/blue proportions over the sampled interactions."""
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 6))

    ax.fill_between(
        df["interaction_count"],
        0,
        df["red_proportion"],
        alpha=0.7,
        label="Red",
        color=RED_COLOR,
    )
    ax.fill_between(
        df["interaction_count"],
        df["red_proportion"],
        1,
        alpha=0.7,
        label="Blue",
        color=BLUE_COLOR,
    )

    ax.axhline(y=0.5, color="gray", linestyle="--", alpha=0.5)
    ax.set_xlabel("Interaction")
    ax.set_ylabel("Fraction of Population")
    ax.set_title(title)
    ax.set_ylim(0, 1)
    ax.legend(loc="upper right")
    ax.grid(True, alpha=0.3)
    return ax


def plot_belief_distribution(
    beliefs: List[float],
    zealot_mask: Optional[List[bool]] = None,
    ax: Optional[plt.Axes] = None,
    title: str = "Belief Distribution",
    bins: int = 20,
) -> plt.Axes:
    """Histogram of beliefs, zealots stacked separately."""
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 6))

    beliefs = np.asarray(beliefs, dtype=float)
    if zealot_mask is None:
        zealot_mask = np.zeros(len(beliefs), dtype=bool)
    zealot_mask = np.asarray(zealot_mask, dtype=bool)

    ax.hist(
        [beliefs[~zealot_mask], beliefs[zealot_mask]],
        bins=bins,
        range=(-1, 1),
        stacked=True,
        color=["steelblue", "black"],
        edgecolor="black",
        alpha=0.7,
        label=["Regular", "Zealot"],
    )
    ax.axvline(x=0, color="gray", linestyle="--", alpha=0.5)

    ax.set_xlabel("Belief")
    ax.set_ylabel("Count")
    ax.set_title(title)
    ax.set_xlim(-1, 1)
    ax.legend()
    ax.grid(True, alpha=0.3)
    return ax


def plot_degree_distribution(
    degrees: List[int],
    ax: Optional[plt.Axes] = None,
    title: str = "Degree Distribution",
) -> plt.Axes:
    """Bar chart of network degrees."""
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 6))

    unique_degrees = sorted(set(degrees))
    counts = [degrees.count(d) for d in unique_degrees]

    ax.bar(unique_degrees, counts, color="teal", edgecolor="black", alpha=0.7)
    ax.set_xlabel("Degree")
    ax.set_ylabel("Number of Agents")
    ax.set_title(title)
    ax.set_xticks(unique_degrees)
    ax.grid(True, alpha=0.3, axis="y")
    return ax


def create_summary_figure(
    df: pd.DataFrame,
    agent_df: Optional[pd.DataFrame] = None,
    title: str = "Simulation Summary",
    figsize: tuple = (16, 10),
) -> Figure:
    """Create a summary figure with opinion, belief and degree panels."""
    fig, axes = plt.subplots(2, 2, figsize=figsize)
    fig.suptitle(title, fontsize=16, fontweight="bold")

    plot_opinion_evolution(df, ax=axes[0, 0])

    ax = axes[0, 1]
    ax.plot(df["interaction_count"], df["red_count"], color=RED_COLOR, label="Red", linewidth=2)
    ax.plot(df["interaction_count"], df["blue_count"], color=BLUE_COLOR, label="Blue", linewidth=2)
    ax.set_xlabel("Interaction")
    ax.set_ylabel("Agents")
    ax.set_title("Opinion Counts")
    ax.legend(loc="upper right")
    ax.grid(True, alpha=0.3)

    if agent_df is not None and len(agent_df) > 0:
        plot_belief_distribution(
            agent_df["belief_value"].tolist(),
            agent_df["is_zealot"].tolist(),
            ax=axes[1, 0],
            title="Final Belief Distribution",
        )
        plot_degree_distribution(agent_df["degree"].tolist(), ax=axes[1, 1])
    else:
        axes[1, 0].set_visible(False)
        axes[1, 1].set_visible(False)

    plt.tight_layout()
    return fig


def save_figure(
    fig: Figure,
    filename: str,
    output_dir: str = "data",
    formats: List[str] = ["png", "pdf"],
    dpi: int = 150,
) -> List[str]:
    """Save figure in multiple formats."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    saved = []
    for fmt in formats:
        filepath = output_path / f"{filename}.{fmt}"
        fig.savefig(filepath, format=fmt, dpi=dpi, bbox_inches="tight")
        saved.append(str(filepath))

    return saved
