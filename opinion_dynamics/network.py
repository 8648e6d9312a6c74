"""
Network construction under an opinion-homophily bias.

Each agent seeks 1-3 partners. Every attempt flips a biased coin to decide
whether to look among agents sharing its opinion or among the opposite side.
An attempt whose chosen side has no valid candidate is skipped rather than
redirected, so a scarce side lowers the realized degree instead of diluting
the homophily bias. Agents that already hold the maximum number of
neighbors are never candidates, so no degree exceeds 3. Only an agent left
with no neighbors at all is forced into a single fallback connection.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import networkx as nx
import numpy as np

from .agent import Agent

logger = logging.getLogger(__name__)


class NetworkBuilder:
    """
    Builds the undirected connection graph for a population.

    Draw order per agent (part of the reproducibility contract):
    one draw for the target degree, then per attempt one draw for the
    same/opposite coin plus one draw for the partner when candidates exist,
    then one draw for the fallback partner if needed.
    """

    def __init__(
        self,
        homophily: float,
        rng: np.random.RandomState,
        max_attempts: int = 50,
        degree_choices: Sequence[int] = (1, 2, 3),
    ):
        """
        Initialize the builder.

        Args:
            homophily: Probability that a sought partner shares the opinion
            rng: Shared random generator
            max_attempts: Retry budget per agent
            degree_choices: Target degrees drawn uniformly per agent
        """
        if not 0.0 <= homophily <= 1.0:
            raise ValueError("homophily must be in [0, 1]")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not degree_choices or min(degree_choices) < 1:
            raise ValueError("degree_choices must be positive")

        self._homophily = homophily
        self._rng = rng
        self._max_attempts = max_attempts
        self._degree_choices = tuple(degree_choices)
        self._max_degree = max(self._degree_choices)

    @property
    def homophily(self) -> float:
        return self._homophily

    @property
    def max_degree(self) -> int:
        return self._max_degree

    def build(self, agents: List[Agent]) -> nx.Graph:
        """
        Assign neighbors to every agent and return the resulting graph.

        Args:
            agents: Population ordered by id (ids must be 0..N-1)

        Returns:
            Undirected graph whose nodes are agent ids
        """
        graph = nx.Graph()
        graph.add_nodes_from(agent.id for agent in agents)

        for agent in agents:
            self._connect_agent(agent, agents, graph)

        isolated = [agent.id for agent in agents if agent.degree == 0]
        if isolated and len(agents) > 1:
            logger.warning("%d agents left without neighbors", len(isolated))

        self._assert_symmetric(agents)
        assert all(agent.degree <= self._max_degree for agent in agents)
        logger.debug(
            "Built network: %d nodes, %d edges, homophily=%.2f",
            graph.number_of_nodes(), graph.number_of_edges(), self._homophily,
        )
        return graph

    def _connect_agent(self, agent: Agent, agents: List[Agent], graph: nx.Graph) -> None:
        target_degree = self._degree_choices[self._rng.randint(len(self._degree_choices))]

        for _ in range(self._max_attempts):
            if agent.degree >= target_degree:
                break

            seek_same = self._rng.random_sample() < self._homophily
            candidates = self._candidates(agent, agents, same_opinion=seek_same)
            if not candidates:
                continue

            partner = candidates[self._rng.randint(len(candidates))]
            self._link(agent, partner, graph)

        if agent.degree == 0:
            self._fallback_connection(agent, agents, graph)

    def _fallback_connection(self, agent: Agent, agents: List[Agent], graph: nx.Graph) -> None:
        prefer_same = self._homophily >= 0.5
        for same_opinion in (prefer_same, not prefer_same):
            candidates = self._candidates(agent, agents, same_opinion=same_opinion)
            if candidates:
                partner = candidates[self._rng.randint(len(candidates))]
                self._link(agent, partner, graph)
                return

    def _candidates(self, agent: Agent, agents: List[Agent], same_opinion: bool) -> List[Agent]:
        # A full side counts as empty: the attempt is skipped, not redirected
        opinion = agent.opinion
        neighbors = agent.neighbors
        return [
            other for other in agents
            if other.id != agent.id
            and other.id not in neighbors
            and other.degree < self._max_degree
            and (other.opinion == opinion) == same_opinion
        ]

    @staticmethod
    def _link(agent: Agent, partner: Agent, graph: nx.Graph) -> None:
        agent.connect(partner.id)
        partner.connect(agent.id)
        graph.add_edge(agent.id, partner.id)

    @staticmethod
    def _assert_symmetric(agents: List[Agent]) -> None:
        for agent in agents:
            for neighbor_id in agent.neighbors:
                assert agent.id in agents[neighbor_id].neighbors, (
                    f"asymmetric edge {agent.id} -> {neighbor_id}"
                )


def network_summary(graph: nx.Graph, agents: Optional[List[Agent]] = None) -> Dict[str, Any]:
    """
    Get information about the network.

    Args:
        graph: Connection graph
        agents: Population, used for realized homophily

    Returns:
        Dictionary with network statistics
    """
    degrees = [d for _, d in graph.degree()]
    n_edges = graph.number_of_edges()

    info = {
        "n_agents": graph.number_of_nodes(),
        "n_edges": n_edges,
        "mean_degree": float(np.mean(degrees)) if degrees else 0.0,
        "min_degree": int(min(degrees)) if degrees else 0,
        "max_degree": int(max(degrees)) if degrees else 0,
        "n_components": nx.number_connected_components(graph) if degrees else 0,
        "n_isolated": sum(1 for d in degrees if d == 0),
    }

    if agents is not None:
        same = sum(
            1 for u, v in graph.edges()
            if agents[u].opinion == agents[v].opinion
        )
        info["same_opinion_edge_fraction"] = same / n_edges if n_edges > 0 else 0.0

    return info
