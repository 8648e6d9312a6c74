"""
Tests for the simulation controller: initialization, the step cycle,
termination, history, notifications and result export.
"""

import json
import logging

import pandas as pd
import pytest

from opinion_dynamics.agent import Opinion
from opinion_dynamics.config import SimulationConfig
from opinion_dynamics.controller import (
    SimulationController,
    SimulationPhase,
    TerminationReason,
)


def _competing_zealots(**overrides) -> SimulationConfig:
    """Zealots on both sides, so the run can only end at the interaction cap."""
    params = dict(
        population_size=20,
        red_proportion=0.5,
        red_zealot_fraction=0.2,
        blue_zealot_fraction=0.2,
        homophily=0.7,
        max_interactions=1000,
        random_seed=42,
    )
    params.update(overrides)
    return SimulationConfig(**params)


def _initialized(config: SimulationConfig, **callbacks) -> SimulationController:
    controller = SimulationController(**callbacks)
    controller.initialize(config)
    return controller


class TestInitialization:
    """Population partition, zealot placement and initial state."""

    def test_partition_and_zealots(self):
        config = SimulationConfig(
            population_size=20,
            red_proportion=0.5,
            red_zealot_fraction=0.2,
            blue_zealot_fraction=0.5,
        )
        controller = _initialized(config)
        agents = controller.agents

        assert [a.id for a in agents] == list(range(20))
        assert [a.id for a in agents if a.is_zealot] == [0, 1, 10, 11, 12, 13, 14]
        assert all(agents[i].belief_value == -1.0 for i in (0, 1))
        assert all(agents[i].belief_value == 1.0 for i in range(10, 15))

        stats = controller.get_statistics()
        assert stats.zealot_count == 7
        assert stats.red_zealot_count == 2
        assert stats.blue_zealot_count == 5

    def test_group_sizes_round_half_up(self):
        controller = _initialized(SimulationConfig(population_size=5, red_proportion=0.5))
        assert controller.opinion_counts.red == 3
        assert controller.opinion_counts.blue == 2

    def test_regular_beliefs_strictly_inside_their_side(self):
        controller = _initialized(SimulationConfig(population_size=200, red_proportion=0.4))

        for agent in controller.agents:
            if agent.opinion == Opinion.RED:
                assert -1.0 < agent.belief_value < 0.0
            else:
                assert 0.0 < agent.belief_value < 1.0

    def test_initial_state(self):
        controller = _initialized(SimulationConfig(population_size=10))
        stats = controller.get_statistics()

        assert controller.phase == SimulationPhase.READY
        assert stats.interaction_count == 0
        assert stats.is_complete is False
        assert stats.current_pairing is None
        assert len(stats.opinion_history) == 1
        assert stats.opinion_history[0].interaction_count == 0
        assert stats.opinion_counts.total == 10

    def test_invalid_config_leaves_previous_run_untouched(self):
        controller = _initialized(SimulationConfig(population_size=10))
        agents = controller.agents

        with pytest.raises(ValueError):
            controller.initialize(SimulationConfig(population_size=0))

        assert controller.agents is agents
        assert controller.phase == SimulationPhase.READY

    def test_reinitialize_discards_state(self):
        config = _competing_zealots()
        controller = _initialized(config)
        for _ in range(25):
            controller.step()

        controller.initialize(config)

        assert controller.interaction_count == 0
        assert controller.phase == SimulationPhase.READY
        assert controller.termination_reason is None
        assert len(controller.get_statistics().opinion_history) == 1

    def test_initialization_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="opinion_dynamics.controller")
        _initialized(SimulationConfig(population_size=10))

        assert any("Initialized 10 agents" in r.getMessage() for r in caplog.records)


class TestLifecycle:
    """Phase guards around step() and run()."""

    def test_step_before_initialize(self):
        with pytest.raises(RuntimeError):
            SimulationController().step()

    def test_run_before_initialize(self):
        with pytest.raises(RuntimeError):
            SimulationController().run()

    def test_phase_running_after_first_step(self):
        controller = _initialized(_competing_zealots())
        controller.step()
        assert controller.phase == SimulationPhase.RUNNING

    def test_run_with_step_limit(self):
        controller = _initialized(_competing_zealots())
        result = controller.run(max_steps=5)

        assert controller.interaction_count == 5
        assert not controller.is_complete
        assert result.termination_reason is None


class TestTermination:
    """Dominance, interaction cap and missing pairs end the run."""

    def test_single_opinion_completes_on_first_step(self):
        config = SimulationConfig(population_size=10, red_proportion=1.0)
        controller = _initialized(config)

        assert controller.opinion_counts.red == 10
        assert controller.opinion_counts.blue == 0
        assert not controller.is_complete

        result = controller.step()

        assert result is not None
        assert result.is_complete
        assert controller.interaction_count == 1
        assert controller.termination_reason == TerminationReason.DOMINANCE
        assert controller.step() is None
        assert controller.interaction_count == 1

    def test_stops_exactly_at_max_interactions(self):
        controller = _initialized(_competing_zealots(max_interactions=300))
        result = controller.run()

        assert controller.interaction_count == 300
        assert result.termination_reason == TerminationReason.MAX_INTERACTIONS
        assert controller.opinion_counts.red >= 2
        assert controller.opinion_counts.blue >= 2

    def test_no_pair_for_single_agent(self):
        completions = []
        controller = _initialized(
            SimulationConfig(population_size=1),
            on_complete=completions.append,
        )

        assert controller.step() is None
        assert controller.is_complete
        assert controller.termination_reason == TerminationReason.NO_PAIR
        assert controller.interaction_count == 0
        assert len(completions) == 1
        assert completions[0].termination_reason == TerminationReason.NO_PAIR


class TestStepInvariants:
    """Properties that hold after every interaction."""

    def test_beliefs_in_range_and_zealots_fixed(self):
        controller = _initialized(_competing_zealots(max_interactions=500))
        zealots = {a.id: a.belief_value for a in controller.agents if a.is_zealot}

        controller.run()

        for agent in controller.agents:
            assert -1.0 <= agent.belief_value <= 1.0
        for agent_id, belief in zealots.items():
            assert controller.agents[agent_id].belief_value == belief

    def test_counts_match_population(self):
        checked = []
        controller = SimulationController()

        def check(result):
            red = sum(1 for a in controller.agents if a.opinion == Opinion.RED)
            assert result.opinion_counts.red == red
            assert result.opinion_counts.total == len(controller.agents)
            checked.append(result.interaction_count)

        controller.on_interaction = check
        controller.initialize(_competing_zealots(max_interactions=200))
        controller.run()

        assert checked == list(range(1, 201))

    def test_participants_distinct_and_match_pairing(self):
        controller = _initialized(_competing_zealots())

        for _ in range(50):
            result = controller.step()
            pairing = result.current_pairing
            assert result.agent1.id == pairing.agent1_id
            assert result.agent2.id == pairing.agent2_id
            assert pairing.agent1_id != pairing.agent2_id
            assert result.agent1.belief_after == controller.agents[pairing.agent1_id].belief_value

    def test_only_current_pair_is_flagged(self):
        controller = _initialized(_competing_zealots())

        for _ in range(30):
            controller.step()
            pairing = controller.current_pairing
            flagged = sorted(a.id for a in controller.agents if a.is_in_pairing)
            assert flagged == sorted([pairing.agent1_id, pairing.agent2_id])
            assert controller.agents[pairing.agent1_id].current_pairing_id == pairing.agent2_id
            assert controller.agents[pairing.agent2_id].current_pairing_id == pairing.agent1_id

    def test_zealot_partner_converts_regular_agent(self):
        """Four agents, one red zealot: every regular partner of the zealot becomes -1."""
        conversions = []

        def check(result):
            for zealot, other in ((result.agent1, result.agent2), (result.agent2, result.agent1)):
                if zealot.is_zealot and not other.is_zealot:
                    assert other.belief_after == -1.0
                    conversions.append(result.interaction_count)

        controller = _initialized(
            SimulationConfig(
                population_size=4,
                red_proportion=0.25,
                red_zealot_fraction=1.0,
                max_interactions=200,
                random_seed=1,
            ),
            on_interaction=check,
        )
        assert controller.agents[0].is_zealot
        assert controller.agents[0].belief_value == -1.0

        controller.run()

        assert conversions

    def test_interaction_history_recorded_for_both(self):
        controller = _initialized(_competing_zealots())
        result = controller.step()

        first = controller.agents[result.agent1.id].interaction_history[-1]
        second = controller.agents[result.agent2.id].interaction_history[-1]
        assert first.agent_id == result.agent2.id
        assert first.other_belief == result.agent2.belief_before
        assert second.agent_id == result.agent1.id
        assert second.other_belief == result.agent1.belief_before
        assert first.tick == second.tick == 1


class TestHistory:
    def test_snapshot_every_interval(self):
        controller = _initialized(_competing_zealots(history_interval=10))
        for _ in range(35):
            controller.step()

        history = controller.get_statistics().opinion_history
        assert [h.interaction_count for h in history] == [0, 10, 20, 30]
        for h in history:
            assert h.red_count + h.blue_count == 20
            assert h.red_proportion + h.blue_proportion == pytest.approx(1.0)

    def test_history_is_bounded(self):
        controller = _initialized(_competing_zealots(history_interval=1, history_limit=5))
        for _ in range(20):
            controller.step()

        history = controller.get_statistics().opinion_history
        assert [h.interaction_count for h in history] == [16, 17, 18, 19, 20]


class TestNotifications:
    def test_order_and_progress_interval(self):
        events = []
        controller = _initialized(
            _competing_zealots(max_interactions=25, progress_interval=10),
            on_interaction=lambda r: events.append(("interaction", r.interaction_count)),
            on_progress=lambda s: events.append(("progress", s.interaction_count)),
            on_complete=lambda s: events.append(("complete", s.interaction_count)),
        )
        controller.run()

        assert [e for e in events if e[0] == "progress"] == [("progress", 10), ("progress", 20)]
        assert sum(1 for e in events if e[0] == "interaction") == 25
        assert events.index(("progress", 10)) == events.index(("interaction", 10)) + 1
        assert events[-2:] == [("interaction", 25), ("complete", 25)]
        assert sum(1 for e in events if e[0] == "complete") == 1

    def test_step_from_handler_rejected(self):
        controller = SimulationController()
        controller.on_interaction = lambda result: controller.step()
        controller.initialize(_competing_zealots())

        with pytest.raises(RuntimeError):
            controller.step()

        controller.on_interaction = None
        assert controller.step() is not None

    def test_initialize_from_handler_rejected(self):
        controller = SimulationController()
        controller.on_interaction = lambda result: controller.initialize(_competing_zealots())
        controller.initialize(_competing_zealots())

        with pytest.raises(RuntimeError):
            controller.step()


class TestStatistics:
    def test_get_statistics_is_idempotent(self):
        controller = _initialized(_competing_zealots())
        for _ in range(15):
            controller.step()

        first = controller.get_statistics()
        second = controller.get_statistics()

        assert first == second
        assert controller.interaction_count == 15

    def test_same_seed_reproduces_run(self):
        def run_once():
            results = []
            controller = _initialized(
                _competing_zealots(max_interactions=300),
                on_interaction=results.append,
            )
            controller.run()
            return results, [a.belief_value for a in controller.agents]

        results1, beliefs1 = run_once()
        results2, beliefs2 = run_once()

        assert results1 == results2
        assert beliefs1 == beliefs2


class TestResultsExport:
    def test_compiled_result(self):
        controller = _initialized(_competing_zealots(max_interactions=100))
        result = controller.run()

        assert len(result.final_beliefs) == 20
        assert len(result.agent_final_states) == 20
        assert result.network["n_agents"] == 20
        assert result.config["population_size"] == 20
        assert result.statistics.interaction_count == 100

    def test_dataframes(self):
        controller = _initialized(_competing_zealots(max_interactions=50))
        controller.run()

        history_df = controller.get_history_dataframe()
        assert list(history_df.columns) == [
            "interaction_count",
            "red_count",
            "blue_count",
            "red_proportion",
            "blue_proportion",
        ]
        assert history_df["interaction_count"].tolist() == [0, 10, 20, 30, 40, 50]

        agent_df = controller.get_agent_dataframe()
        assert len(agent_df) == 20
        assert agent_df["is_zealot"].sum() == 4

    def test_save_results(self, tmp_path):
        controller = _initialized(_competing_zealots(max_interactions=50))
        controller.run()

        paths = controller.save_results(output_dir=str(tmp_path), prefix="run")

        history = pd.read_csv(paths["history_csv"])
        pd.testing.assert_frame_equal(history, controller.get_history_dataframe())

        with open(paths["results_json"]) as f:
            data = json.load(f)
        assert data["interaction_count"] == 50
        assert data["termination_reason"] == "max_interactions"
        assert data["opinion_counts"]["red"] + data["opinion_counts"]["blue"] == 20
        assert (tmp_path / "run_agents.csv").exists()
