"""
Tests for resolving the command-line run configuration from presets.
"""

import matplotlib

matplotlib.use("Agg")

import pytest

import config as presets
from main import build_config, build_sweep_config, parse_args


class TestBuildConfig:
    """Run configuration starts from a preset and applies explicit options."""

    def test_no_options_uses_default_preset(self):
        config = build_config(parse_args([]))
        assert config == presets.DEFAULT_CONFIG

    def test_quick_uses_quick_preset(self):
        config = build_config(parse_args(["--quick"]))

        assert config == presets.QUICK_TEST_CONFIG
        assert config.population_size == 20
        assert config.max_interactions == 500

    @pytest.mark.parametrize("name", sorted(presets.PRESETS))
    def test_named_preset(self, name):
        config = build_config(parse_args(["--preset", name]))
        assert config == presets.PRESETS[name]

    def test_explicit_options_override_preset(self):
        args = parse_args([
            "--preset", "competing_zealots",
            "--agents", "40",
            "--homophily", "0.9",
            "--seed", "7",
        ])

        config = build_config(args)

        assert config.population_size == 40
        assert config.homophily == 0.9
        assert config.random_seed == 7
        assert config.red_zealot_fraction == presets.COMPETING_ZEALOTS_CONFIG.red_zealot_fraction

    def test_presets_not_mutated(self):
        build_config(parse_args(["--quick", "--agents", "12"]))
        assert presets.QUICK_TEST_CONFIG.population_size == 20

    def test_unknown_preset_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["--preset", "nope"])


class TestBuildSweepConfig:
    def test_defaults(self):
        sweep = build_sweep_config(parse_args(["--experiment"]))
        assert sweep == presets.SweepConfig()

    def test_quick_shrinks_runs(self):
        sweep = build_sweep_config(parse_args(["--experiment", "--quick", "--seed", "3"]))

        assert sweep.population_size == presets.QUICK_TEST_CONFIG.population_size
        assert sweep.max_interactions == presets.QUICK_TEST_CONFIG.max_interactions
        assert sweep.base_seed == 3
