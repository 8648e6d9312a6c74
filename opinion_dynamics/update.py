"""
Belief update rule applied to each participant of an interaction.

An agent is moved by a regular partner in proportion to its susceptibility
(the share of its neighbors holding the opposing opinion) and to how
moderate the partner is: ``influence = rate * S * (1 - |other|)``. A zealot
partner is adopted outright with a configurable probability. Zealots
themselves never move.
"""

from typing import Any, Callable

import numpy as np

from .agent import Agent

NeighborLookup = Callable[[int], Any]


def susceptibility(agent: Agent, neighbor_lookup: NeighborLookup) -> float:
    """
    Fraction of an agent's neighbors whose opinion differs from its own.

    Args:
        agent: Agent being updated
        neighbor_lookup: Maps an agent id to an object with an ``opinion``

    Returns:
        Value in [0, 1]; 0 when the agent has no neighbors
    """
    neighbors = agent.neighbors
    if not neighbors:
        return 0.0

    opinion = agent.opinion
    opposed = sum(1 for n in neighbors if neighbor_lookup(n).opinion != opinion)
    return opposed / len(neighbors)


class BeliefUpdateEngine:
    """Applies the belief update rule from one participant's perspective."""

    def __init__(
        self,
        rng: np.random.RandomState,
        zealot_influence_probability: float = 1.0,
        influence_rate: float = 0.1,
    ):
        """
        Initialize the engine.

        Args:
            rng: Shared random generator (one draw per zealot encounter)
            zealot_influence_probability: Chance a zealot partner is adopted
            influence_rate: Scale of a regular partner's pull
        """
        if not 0.0 <= zealot_influence_probability <= 1.0:
            raise ValueError("zealot_influence_probability must be in [0, 1]")

        self._rng = rng
        self._zealot_influence_probability = zealot_influence_probability
        self._influence_rate = influence_rate

    @property
    def zealot_influence_probability(self) -> float:
        return self._zealot_influence_probability

    def update(
        self,
        agent: Agent,
        other: Any,
        neighbor_lookup: NeighborLookup,
        tick: int = 0,
    ) -> bool:
        """
        Update ``agent`` after interacting with ``other``.

        Args:
            agent: Agent whose belief may change
            other: Partner (Agent or AgentView with its pre-update belief)
            neighbor_lookup: Maps a neighbor id to its current state
            tick: Interaction number written to the history record

        Returns:
            Whether the agent's opinion flipped
        """
        agent.record_interaction(other, tick)

        if agent.is_zealot:
            return False

        # Isolated agents have no susceptibility and never move
        if agent.degree == 0:
            return False

        original_opinion = agent.opinion
        s = susceptibility(agent, neighbor_lookup)

        if other.is_zealot:
            if self._rng.random_sample() < self._zealot_influence_probability:
                agent.belief_value = other.belief_value
        else:
            direction = np.sign(other.belief_value - agent.belief_value)
            influence = self._influence_rate * s * (1.0 - abs(other.belief_value))
            agent.belief_value = float(
                np.clip(agent.belief_value + direction * influence, -1.0, 1.0)
            )

        return agent.opinion != original_opinion
