"""
Zealot Opinion Dynamics - Core Module.

This package contains the simulation engine: agents with continuous
beliefs, homophily-biased network construction, pair selection over the
network, the belief update rule and the step-driven controller.
"""

from .agent import Agent, AgentView, InteractionRecord, Opinion
from .config import SimulationConfig
from .network import NetworkBuilder, network_summary
from .pairing import PairFinder, Pairing
from .update import BeliefUpdateEngine, susceptibility
from .controller import (
    SimulationController,
    SimulationPhase,
    TerminationReason,
    InteractionResult,
    Statistics,
    SimulationResult,
)
from .driver import run_paced

__all__ = [
    "Agent",
    "AgentView",
    "InteractionRecord",
    "Opinion",
    "SimulationConfig",
    "NetworkBuilder",
    "network_summary",
    "PairFinder",
    "Pairing",
    "BeliefUpdateEngine",
    "susceptibility",
    "SimulationController",
    "SimulationPhase",
    "TerminationReason",
    "InteractionResult",
    "Statistics",
    "SimulationResult",
    "run_paced",
]
