"""
Agent class for the zealot opinion dynamics simulation.

Each agent holds a continuous belief in [-1, +1]. The sign of the belief
defines its opinion: negative beliefs are RED, non-negative beliefs are BLUE.
Zealots sit at the extreme of their side and never change.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional


class Opinion(Enum):
    """Binary opinion derived from the sign of a belief value."""

    RED = "red"
    BLUE = "blue"

    @classmethod
    def from_belief(cls, belief_value: float) -> "Opinion":
        return cls.RED if belief_value < 0 else cls.BLUE


@dataclass(frozen=True)
class InteractionRecord:
    """
    Record of one interaction from the point of view of a single agent.

    Attributes:
        agent_id: Id of the agent interacted with
        other_belief: That agent's belief at the time of the interaction
        belief_before: This agent's belief before any update
        tick: Interaction number at which the record was written
    """

    agent_id: int
    other_belief: float
    belief_before: float
    tick: int


@dataclass(frozen=True)
class AgentView:
    """Read-only snapshot of an agent's interaction-relevant state."""

    id: int
    belief_value: float
    is_zealot: bool

    @property
    def opinion(self) -> Opinion:
        return Opinion.from_belief(self.belief_value)


class Agent:
    """
    An agent in the opinion dynamics simulation.

    Holds:
    - Belief value in [-1, +1] (opinion is derived, never stored)
    - Zealot flag (fixed at creation)
    - Neighbor ids (set by the network builder, symmetric)
    - Interaction history (append-only, statistics only)
    - Transient pairing flags describing the most recent interaction
    """

    def __init__(self, agent_id: int, belief_value: float, is_zealot: bool = False):
        """
        Initialize an agent.

        Args:
            agent_id: Unique identifier, dense within a population
            belief_value: Initial belief in [-1, 1]
            is_zealot: Whether the belief is fixed for the agent's lifetime
        """
        if not -1.0 <= belief_value <= 1.0:
            raise ValueError(f"belief_value must be in [-1, 1], got {belief_value}")

        self._id = agent_id
        self._belief_value = float(belief_value)
        self._is_zealot = is_zealot

        self._neighbors: set = set()
        self._interaction_history: List[InteractionRecord] = []

        # Overwritten every step
        self._is_in_pairing = False
        self._current_pairing_id: Optional[int] = None

    @property
    def id(self) -> int:
        """Agent's unique identifier."""
        return self._id

    @property
    def is_zealot(self) -> bool:
        """Whether this agent never changes belief."""
        return self._is_zealot

    @property
    def belief_value(self) -> float:
        """Current belief in [-1, 1]."""
        return self._belief_value

    @belief_value.setter
    def belief_value(self, value: float) -> None:
        assert not self._is_zealot, f"zealot {self._id} belief must not be written"
        assert -1.0 <= value <= 1.0, f"belief {value} outside [-1, 1]"
        self._belief_value = float(value)

    @property
    def opinion(self) -> Opinion:
        """Opinion derived from the sign of the belief."""
        return Opinion.from_belief(self._belief_value)

    @property
    def neighbors(self) -> FrozenSet[int]:
        """Ids of directly connected agents."""
        return frozenset(self._neighbors)

    @property
    def degree(self) -> int:
        return len(self._neighbors)

    def connect(self, other_id: int) -> None:
        """
        Add a neighbor id. Only the network builder calls this; it is
        responsible for adding the reverse edge.
        """
        if other_id == self._id:
            raise ValueError(f"agent {self._id} cannot be its own neighbor")
        self._neighbors.add(other_id)

    @property
    def interaction_history(self) -> List[InteractionRecord]:
        """Past interactions, oldest first."""
        return list(self._interaction_history)

    def record_interaction(self, other: Any, tick: int) -> None:
        """
        Append an interaction record.

        Args:
            other: Agent or AgentView interacted with
            tick: Current interaction number
        """
        self._interaction_history.append(
            InteractionRecord(
                agent_id=other.id,
                other_belief=other.belief_value,
                belief_before=self._belief_value,
                tick=tick,
            )
        )

    @property
    def is_in_pairing(self) -> bool:
        return self._is_in_pairing

    @property
    def current_pairing_id(self) -> Optional[int]:
        return self._current_pairing_id

    def mark_pairing(self, other_id: int) -> None:
        self._is_in_pairing = True
        self._current_pairing_id = other_id

    def clear_pairing(self) -> None:
        self._is_in_pairing = False
        self._current_pairing_id = None

    def snapshot(self) -> AgentView:
        """Freeze the current belief for use by the other participant."""
        return AgentView(
            id=self._id,
            belief_value=self._belief_value,
            is_zealot=self._is_zealot,
        )

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get agent state for analysis.

        Returns:
            Dictionary of agent metrics
        """
        return {
            "id": self._id,
            "belief_value": self._belief_value,
            "opinion": self.opinion.value,
            "is_zealot": self._is_zealot,
            "degree": len(self._neighbors),
            "neighbors": sorted(self._neighbors),
            "total_interactions": len(self._interaction_history),
        }

    def __repr__(self) -> str:
        return (
            f"Agent(id={self._id}, belief={self._belief_value:.3f}, "
            f"opinion={self.opinion.value}, zealot={self._is_zealot})"
        )
