"""
Simulation controller for zealot opinion dynamics on a homophilous network.

Owns the population, the connection graph and every running statistic.
Each call to ``step()`` performs exactly one interaction: a pair is chosen
over the network, both participants update from each other's pre-update
state, counts and history are refreshed, termination is evaluated and any
registered notifications fire.
"""

import json
import logging
import math
from collections import deque
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

import networkx as nx
import numpy as np
import pandas as pd

from .agent import Agent, AgentView, Opinion
from .config import SimulationConfig
from .network import NetworkBuilder, network_summary
from .pairing import PairFinder, Pairing
from .update import BeliefUpdateEngine

logger = logging.getLogger(__name__)

# Smallest positive float: non-zealot beliefs are drawn strictly inside their side
_OPEN_LOW = float(np.nextafter(0.0, 1.0))


class SimulationPhase(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RUNNING = "running"
    COMPLETE = "complete"


class TerminationReason(Enum):
    DOMINANCE = "dominance"  # One opinion count reached zero
    MAX_INTERACTIONS = "max_interactions"
    NO_PAIR = "no_pair"  # Graph offers no usable pair


@dataclass(frozen=True)
class OpinionCounts:
    """Number of agents holding each opinion."""

    red: int
    blue: int

    @property
    def total(self) -> int:
        return self.red + self.blue


@dataclass(frozen=True)
class HistorySnapshot:
    """Opinion counts sampled at one point of the run."""

    interaction_count: int
    red_count: int
    blue_count: int
    red_proportion: float
    blue_proportion: float


@dataclass(frozen=True)
class ParticipantResult:
    """Before/after state of one participant."""

    id: int
    opinion_before: Opinion
    opinion_after: Opinion
    belief_before: float
    belief_after: float
    changed: bool
    is_zealot: bool


@dataclass(frozen=True)
class InteractionResult:
    """Outcome of a single step."""

    interaction_count: int
    agent1: ParticipantResult
    agent2: ParticipantResult
    opinion_counts: OpinionCounts
    current_pairing: Pairing
    is_complete: bool


@dataclass(frozen=True)
class ProgressSnapshot:
    """Periodic progress notification payload."""

    interaction_count: int
    opinion_counts: OpinionCounts
    opinion_history: Tuple[HistorySnapshot, ...]
    current_pairing: Optional[Pairing]
    is_complete: bool


@dataclass(frozen=True)
class CompletionSnapshot:
    """Completion notification payload."""

    interaction_count: int
    opinion_counts: OpinionCounts
    opinion_history: Tuple[HistorySnapshot, ...]
    termination_reason: Optional[TerminationReason]


@dataclass(frozen=True)
class Statistics:
    """Read-only view of the current simulation state."""

    interaction_count: int
    opinion_counts: OpinionCounts
    opinion_history: Tuple[HistorySnapshot, ...]
    current_pairing: Optional[Pairing]
    is_complete: bool
    zealot_count: int
    red_zealot_count: int
    blue_zealot_count: int
    termination_reason: Optional[TerminationReason]


@dataclass
class SimulationResult:
    """Complete simulation results."""

    config: Dict[str, Any]
    statistics: Statistics
    final_beliefs: List[float]
    agent_final_states: List[Dict[str, Any]]
    network: Dict[str, Any]

    @property
    def termination_reason(self) -> Optional[TerminationReason]:
        return self.statistics.termination_reason


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class SimulationController:
    """
    Controller for running opinion dynamics simulations.

    Manages:
    - Agent population and zealot assignment
    - Network construction (once per run)
    - One interaction per ``step()`` call
    - Opinion counts and bounded opinion history
    - Termination detection and lifecycle notifications

    Notifications are invoked synchronously inside ``step()``; handlers must
    not call ``step()`` again.
    """

    def __init__(
        self,
        on_interaction: Optional[Callable[[InteractionResult], None]] = None,
        on_progress: Optional[Callable[[ProgressSnapshot], None]] = None,
        on_complete: Optional[Callable[[CompletionSnapshot], None]] = None,
    ):
        """
        Initialize an empty controller.

        Args:
            on_interaction: Called after every interaction
            on_progress: Called every ``progress_interval`` interactions
            on_complete: Called once when the run completes
        """
        self.on_interaction = on_interaction
        self.on_progress = on_progress
        self.on_complete = on_complete

        self._config: Optional[SimulationConfig] = None
        self._agents: List[Agent] = []
        self._graph: nx.Graph = nx.Graph()
        self._pair_finder: Optional[PairFinder] = None
        self._update_engine: Optional[BeliefUpdateEngine] = None

        self._phase = SimulationPhase.UNINITIALIZED
        self._interaction_count = 0
        self._opinion_counts = OpinionCounts(red=0, blue=0)
        self._opinion_history: Deque[HistorySnapshot] = deque()
        self._current_pairing: Optional[Pairing] = None
        self._termination_reason: Optional[TerminationReason] = None
        self._in_step = False

    @property
    def agents(self) -> List[Agent]:
        """List of all agents."""
        return self._agents

    @property
    def graph(self) -> nx.Graph:
        """Connection graph (nodes are agent ids)."""
        return self._graph

    @property
    def config(self) -> Optional[SimulationConfig]:
        return self._config

    @property
    def phase(self) -> SimulationPhase:
        return self._phase

    @property
    def is_complete(self) -> bool:
        return self._phase == SimulationPhase.COMPLETE

    @property
    def interaction_count(self) -> int:
        return self._interaction_count

    @property
    def opinion_counts(self) -> OpinionCounts:
        return self._opinion_counts

    @property
    def current_pairing(self) -> Optional[Pairing]:
        return self._current_pairing

    @property
    def termination_reason(self) -> Optional[TerminationReason]:
        return self._termination_reason

    def initialize(self, config: Optional[SimulationConfig] = None) -> None:
        """
        Create the population and network for a new run.

        The previous run's state, if any, is discarded as a whole. Invalid
        configuration raises before anything is replaced.

        Args:
            config: Simulation configuration (defaults if None)
        """
        if self._in_step:
            raise RuntimeError("initialize() must not be called from a notification handler")

        config = config or SimulationConfig()
        config.validate()

        rng = np.random.RandomState(config.random_seed)
        agents = self._create_agents(config, rng)
        graph = NetworkBuilder(
            homophily=config.homophily,
            rng=rng,
            max_attempts=config.network_max_attempts,
        ).build(agents)

        self._config = config
        self._agents = agents
        self._graph = graph
        self._pair_finder = PairFinder(
            graph, rng, direct_probability=config.direct_pair_probability
        )
        self._update_engine = BeliefUpdateEngine(
            rng, zealot_influence_probability=config.zealot_influence_probability
        )

        self._interaction_count = 0
        self._opinion_history = deque(maxlen=config.history_limit)
        self._current_pairing = None
        self._termination_reason = None
        self._phase = SimulationPhase.READY

        self._opinion_counts = self._count_opinions()
        self._record_opinion_state()

        logger.info(
            "Initialized %d agents (red=%d, blue=%d, zealots=%d), %d edges",
            len(agents),
            self._opinion_counts.red,
            self._opinion_counts.blue,
            sum(1 for a in agents if a.is_zealot),
            graph.number_of_edges(),
        )

    @staticmethod
    def _create_agents(config: SimulationConfig, rng: np.random.RandomState) -> List[Agent]:
        """
        Partition the population into opinion groups and zealots.

        Red agents take ids 0..R-1 and blue agents the rest; within each
        group the first agents are the zealots.
        """
        n_red = _round_half_up(config.population_size * config.red_proportion)
        n_blue = config.population_size - n_red

        groups = (
            (n_red, config.red_zealot_fraction, -1.0),
            (n_blue, config.blue_zealot_fraction, 1.0),
        )

        agents: List[Agent] = []
        for group_size, zealot_fraction, side in groups:
            n_zealots = _round_half_up(group_size * zealot_fraction)
            for i in range(group_size):
                is_zealot = i < n_zealots
                if is_zealot:
                    belief = side
                else:
                    belief = side * rng.uniform(_OPEN_LOW, 1.0)
                agents.append(Agent(len(agents), belief, is_zealot))

        return agents

    def step(self) -> Optional[InteractionResult]:
        """
        Execute one interaction.

        Returns:
            Interaction result, or None once the run is complete
        """
        if self._phase == SimulationPhase.UNINITIALIZED:
            raise RuntimeError("initialize() must be called before step()")
        if self._in_step:
            raise RuntimeError("step() must not be called from a notification handler")
        if self.is_complete:
            return None

        self._in_step = True
        try:
            return self._run_interaction()
        finally:
            self._in_step = False

    def _run_interaction(self) -> Optional[InteractionResult]:
        self._clear_current_pairing()

        pairing = self._pair_finder.find_pair()
        if pairing is None:
            self._complete(TerminationReason.NO_PAIR)
            self._notify_complete()
            return None

        self._phase = SimulationPhase.RUNNING
        agent1 = self._agents[pairing.agent1_id]
        agent2 = self._agents[pairing.agent2_id]
        agent1.mark_pairing(agent2.id)
        agent2.mark_pairing(agent1.id)
        self._current_pairing = pairing

        view1 = agent1.snapshot()
        view2 = agent2.snapshot()
        frozen = {view1.id: view1, view2.id: view2}

        def neighbor_lookup(agent_id: int) -> Any:
            # Participants are seen as they were before this interaction
            if agent_id in frozen:
                return frozen[agent_id]
            return self._agents[agent_id]

        tick = self._interaction_count + 1
        changed1 = self._update_engine.update(agent1, view2, neighbor_lookup, tick=tick)
        changed2 = self._update_engine.update(agent2, view1, neighbor_lookup, tick=tick)
        self._check_participant(agent1, view1)
        self._check_participant(agent2, view2)

        self._interaction_count += 1
        if changed1 or changed2:
            self._opinion_counts = self._count_opinions()
        assert self._opinion_counts.total == len(self._agents)

        if self._interaction_count % self._config.history_interval == 0:
            self._record_opinion_state()

        self._check_completion_conditions()

        result = InteractionResult(
            interaction_count=self._interaction_count,
            agent1=self._participant_result(agent1, view1, changed1),
            agent2=self._participant_result(agent2, view2, changed2),
            opinion_counts=self._opinion_counts,
            current_pairing=pairing,
            is_complete=self.is_complete,
        )
        logger.debug(
            "Interaction %d: %d <-> %d (hops=%d), red=%d blue=%d",
            self._interaction_count, agent1.id, agent2.id, pairing.hops,
            self._opinion_counts.red, self._opinion_counts.blue,
        )

        if self.on_interaction is not None:
            self.on_interaction(result)
        if (
            self.on_progress is not None
            and self._interaction_count % self._config.progress_interval == 0
        ):
            self.on_progress(
                ProgressSnapshot(
                    interaction_count=self._interaction_count,
                    opinion_counts=self._opinion_counts,
                    opinion_history=tuple(self._opinion_history),
                    current_pairing=self._current_pairing,
                    is_complete=self.is_complete,
                )
            )
        if self.is_complete:
            self._notify_complete()

        return result

    def _clear_current_pairing(self) -> None:
        if self._current_pairing is not None:
            self._agents[self._current_pairing.agent1_id].clear_pairing()
            self._agents[self._current_pairing.agent2_id].clear_pairing()
        self._current_pairing = None

    @staticmethod
    def _participant_result(agent: Agent, before: AgentView, changed: bool) -> ParticipantResult:
        return ParticipantResult(
            id=agent.id,
            opinion_before=before.opinion,
            opinion_after=agent.opinion,
            belief_before=before.belief_value,
            belief_after=agent.belief_value,
            changed=changed,
            is_zealot=agent.is_zealot,
        )

    @staticmethod
    def _check_participant(agent: Agent, before: AgentView) -> None:
        assert -1.0 <= agent.belief_value <= 1.0
        if agent.is_zealot:
            assert agent.belief_value == before.belief_value

    def _count_opinions(self) -> OpinionCounts:
        red = sum(1 for agent in self._agents if agent.opinion == Opinion.RED)
        return OpinionCounts(red=red, blue=len(self._agents) - red)

    def _record_opinion_state(self) -> None:
        total = len(self._agents)
        red = self._opinion_counts.red
        blue = self._opinion_counts.blue
        self._opinion_history.append(
            HistorySnapshot(
                interaction_count=self._interaction_count,
                red_count=red,
                blue_count=blue,
                red_proportion=red / total if total > 0 else 0.0,
                blue_proportion=blue / total if total > 0 else 0.0,
            )
        )

    def _check_completion_conditions(self) -> None:
        """Dominance is checked before the interaction cap."""
        if self._opinion_counts.red == 0 or self._opinion_counts.blue == 0:
            self._complete(TerminationReason.DOMINANCE)
        elif self._interaction_count >= self._config.max_interactions:
            self._complete(TerminationReason.MAX_INTERACTIONS)

    def _complete(self, reason: TerminationReason) -> None:
        self._phase = SimulationPhase.COMPLETE
        self._termination_reason = reason
        logger.info(
            "Simulation complete after %d interactions: %s (red=%d, blue=%d)",
            self._interaction_count, reason.value,
            self._opinion_counts.red, self._opinion_counts.blue,
        )

    def _notify_complete(self) -> None:
        if self.on_complete is not None:
            self.on_complete(
                CompletionSnapshot(
                    interaction_count=self._interaction_count,
                    opinion_counts=self._opinion_counts,
                    opinion_history=tuple(self._opinion_history),
                    termination_reason=self._termination_reason,
                )
            )

    def get_statistics(self) -> Statistics:
        """
        Get current simulation statistics without changing any state.

        Returns:
            Statistics snapshot
        """
        red_zealots = sum(
            1 for a in self._agents if a.is_zealot and a.opinion == Opinion.RED
        )
        blue_zealots = sum(
            1 for a in self._agents if a.is_zealot and a.opinion == Opinion.BLUE
        )
        return Statistics(
            interaction_count=self._interaction_count,
            opinion_counts=self._opinion_counts,
            opinion_history=tuple(self._opinion_history),
            current_pairing=self._current_pairing,
            is_complete=self.is_complete,
            zealot_count=red_zealots + blue_zealots,
            red_zealot_count=red_zealots,
            blue_zealot_count=blue_zealots,
            termination_reason=self._termination_reason,
        )

    def run(self, max_steps: Optional[int] = None) -> SimulationResult:
        """
        Step until the run completes.

        Args:
            max_steps: Optional limit on steps taken by this call

        Returns:
            SimulationResult with complete simulation data
        """
        if self._phase == SimulationPhase.UNINITIALIZED:
            raise RuntimeError("initialize() must be called before run()")

        steps = 0
        while not self.is_complete:
            if max_steps is not None and steps >= max_steps:
                break
            self.step()
            steps += 1

        return self._compile_results()

    def _compile_results(self) -> SimulationResult:
        """Compile simulation results."""
        return SimulationResult(
            config=self._config.to_dict() if self._config is not None else {},
            statistics=self.get_statistics(),
            final_beliefs=[agent.belief_value for agent in self._agents],
            agent_final_states=[agent.get_metrics() for agent in self._agents],
            network=network_summary(self._graph, self._agents),
        )

    def get_history_dataframe(self) -> pd.DataFrame:
        """
        Convert opinion history to a pandas DataFrame.

        Returns:
            DataFrame with one row per snapshot
        """
        columns = [
            "interaction_count",
            "red_count",
            "blue_count",
            "red_proportion",
            "blue_proportion",
        ]
        return pd.DataFrame([asdict(s) for s in self._opinion_history], columns=columns)

    def get_agent_dataframe(self) -> pd.DataFrame:
        """
        Current per-agent state as a DataFrame.

        Returns:
            DataFrame with one row per agent
        """
        return pd.DataFrame([agent.get_metrics() for agent in self._agents])

    def save_results(
        self,
        output_dir: str = "data",
        prefix: str = "simulation",
    ) -> Dict[str, str]:
        """
        Save simulation results to files.

        Args:
            output_dir: Directory for output files
            prefix: Filename prefix

        Returns:
            Dict mapping file type to path
        """
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        paths = {}

        csv_path = output_path / f"{prefix}_history.csv"
        self.get_history_dataframe().to_csv(csv_path, index=False)
        paths["history_csv"] = str(csv_path)

        agents_path = output_path / f"{prefix}_agents.csv"
        self.get_agent_dataframe().to_csv(agents_path, index=False)
        paths["agents_csv"] = str(agents_path)

        stats = self.get_statistics()
        json_data = {
            "config": self._config.to_dict() if self._config is not None else {},
            "interaction_count": stats.interaction_count,
            "opinion_counts": {"red": stats.opinion_counts.red, "blue": stats.opinion_counts.blue},
            "is_complete": stats.is_complete,
            "termination_reason": (
                stats.termination_reason.value if stats.termination_reason else None
            ),
            "zealot_count": stats.zealot_count,
            "red_zealot_count": stats.red_zealot_count,
            "blue_zealot_count": stats.blue_zealot_count,
            "network": network_summary(self._graph, self._agents),
        }
        json_path = output_path / f"{prefix}_results.json"
        with open(json_path, "w") as f:
            json.dump(json_data, f, indent=2)
        paths["results_json"] = str(json_path)

        return paths

    def __repr__(self) -> str:
        return (
            f"SimulationController(agents={len(self._agents)}, "
            f"interactions={self._interaction_count}, "
            f"phase={self._phase.value})"
        )
