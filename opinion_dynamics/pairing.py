"""
Selection of the two agents that interact in a step.

Most interactions are between direct neighbors. Some of the time the pair is
chosen across the network instead: a breadth-first search from a random start
finds every reachable agent, and agents more than one hop away are preferred
so that belief can travel along paths the participants are not directly
aware of.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import networkx as nx
import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pairing:
    """
    Two agents selected to interact.

    Attributes:
        agent1_id: First participant
        agent2_id: Second participant
        path: Agent ids from agent1 to agent2 inclusive (length >= 2)
        direct: Whether the direct-neighbor policy produced the pair
    """

    agent1_id: int
    agent2_id: int
    path: Tuple[int, ...]
    direct: bool

    @property
    def hops(self) -> int:
        return len(self.path) - 1


class PairFinder:
    """
    Chooses interaction pairs over a fixed graph.

    Policy:
    1. With probability ``direct_probability`` try a direct pick.
    2. Otherwise, or when the direct pick fails, try an indirect pick.
    3. Finally retry the direct pick once; report ``None`` if that fails.
    """

    def __init__(
        self,
        graph: nx.Graph,
        rng: np.random.RandomState,
        direct_probability: float = 0.7,
        direct_attempts: int = 5,
        indirect_attempts: int = 3,
    ):
        """
        Initialize the pair finder.

        Args:
            graph: Connection graph with nodes 0..N-1
            rng: Shared random generator
            direct_probability: Probability of trying a direct pick first
            direct_attempts: Random agents drawn per direct pick
            indirect_attempts: Random starts per indirect pick
        """
        self._graph = graph
        self._rng = rng
        self._direct_probability = direct_probability
        self._direct_attempts = direct_attempts
        self._indirect_attempts = indirect_attempts
        self._nodes: List[int] = sorted(graph.nodes())

    def find_pair(self) -> Optional[Pairing]:
        """
        Select two distinct agents to interact.

        Returns:
            Pairing, or None when the graph has no usable pair
        """
        if not self._nodes:
            return None

        pairing = None
        if self._rng.random_sample() < self._direct_probability:
            pairing = self.direct_pick()
        if pairing is None:
            pairing = self.indirect_pick()
        if pairing is None:
            pairing = self.direct_pick()

        if pairing is None:
            logger.debug("No usable pair found")
        return pairing

    def direct_pick(self) -> Optional[Pairing]:
        """Pick a random agent with neighbors and one of its neighbors."""
        for _ in range(self._direct_attempts):
            agent_id = self._nodes[self._rng.randint(len(self._nodes))]
            neighbors = sorted(self._graph.neighbors(agent_id))
            if not neighbors:
                continue
            partner_id = neighbors[self._rng.randint(len(neighbors))]
            return Pairing(agent_id, partner_id, (agent_id, partner_id), direct=True)
        return None

    def indirect_pick(self) -> Optional[Pairing]:
        """Pick a partner reachable from a random start, preferring multi-hop paths."""
        for _ in range(self._indirect_attempts):
            start = self._nodes[self._rng.randint(len(self._nodes))]
            paths = nx.single_source_shortest_path(self._graph, start)
            reachable = sorted(target for target in paths if target != start)
            if not reachable:
                continue

            multi_hop = [target for target in reachable if len(paths[target]) > 2]
            candidates = multi_hop or reachable
            target = candidates[self._rng.randint(len(candidates))]
            return Pairing(start, target, tuple(paths[target]), direct=False)
        return None
