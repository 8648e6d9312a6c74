"""
Main entry point for the Zealot Opinion Dynamics simulation.

This script provides a command-line interface for running simulations
and experiments.

Usage:
    python main.py                                 # Run default simulation
    python main.py --preset echo_chamber           # Named scenario
    python main.py --homophily 0.9                 # Strong echo chambers
    python main.py --red-proportion 0.3 --red-zealots 0.2
    python main.py --experiment                    # Homophily x zealot sweep
"""

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from config import DEFAULT_CONFIG, PRESETS, QUICK_TEST_CONFIG, SweepConfig
from opinion_dynamics import SimulationConfig, SimulationController
from visualization.static_plots import create_summary_figure, save_figure

# Command-line option -> SimulationConfig field
CONFIG_OVERRIDES = {
    "agents": "population_size",
    "red_proportion": "red_proportion",
    "red_zealots": "red_zealot_fraction",
    "blue_zealots": "blue_zealot_fraction",
    "homophily": "homophily",
    "zealot_influence": "zealot_influence_probability",
    "max_interactions": "max_interactions",
    "seed": "random_seed",
}


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Zealot Opinion Dynamics Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py                                 # Default (50/50, homophily 0.7)
    python main.py --agents 200 --max-interactions 20000
    python main.py --preset competing_zealots
    python main.py --red-proportion 0.3 --red-zealots 0.33
    python main.py --red-zealots 0.1 --blue-zealots 0.1
    python main.py --homophily 0.95                # Echo chambers
    python main.py --zealot-influence 0.25         # Weak zealots
    python main.py --experiment                    # Parameter sweep
        """,
    )

    # Mode selection
    parser.add_argument(
        "--experiment",
        action="store_true",
        help="Run homophily x zealot fraction sweep",
    )
    parser.add_argument(
        "--quick",
        action="store_true",
        help="Run quick test preset (20 agents, 500 interactions)",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default=None,
        help="Start from a named scenario (default: default)",
    )

    # Population settings (None keeps the preset's value)
    parser.add_argument(
        "--agents", "-n",
        type=int,
        default=None,
        help=f"Population size (default: {DEFAULT_CONFIG.population_size})",
    )
    parser.add_argument(
        "--red-proportion",
        type=float,
        default=None,
        help=f"Initial fraction of red agents (default: {DEFAULT_CONFIG.red_proportion})",
    )
    parser.add_argument(
        "--red-zealots",
        type=float,
        default=None,
        help="Fraction of red agents that are zealots (default: 0.0)",
    )
    parser.add_argument(
        "--blue-zealots",
        type=float,
        default=None,
        help="Fraction of blue agents that are zealots (default: 0.0)",
    )

    # Network and interaction settings
    parser.add_argument(
        "--homophily",
        type=float,
        default=None,
        help=f"Probability a sought partner shares opinion (default: {DEFAULT_CONFIG.homophily})",
    )
    parser.add_argument(
        "--zealot-influence",
        type=float,
        default=None,
        help="Probability a zealot partner is adopted (default: 1.0)",
    )

    # Simulation settings
    parser.add_argument(
        "--max-interactions", "-t",
        type=int,
        default=None,
        help=f"Maximum interactions (default: {DEFAULT_CONFIG.max_interactions})",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help=f"Random seed (default: {DEFAULT_CONFIG.random_seed})",
    )

    # Output settings
    parser.add_argument(
        "--output", "-o",
        type=str,
        default="data",
        help="Output directory (default: data)",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Don't save results to files",
    )
    parser.add_argument(
        "--no-plot",
        action="store_true",
        help="Don't generate plots",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )

    return parser.parse_args(argv)


def build_config(args) -> SimulationConfig:
    """
    Resolve the run configuration from a preset plus command-line overrides.

    Args:
        args: Parsed command line arguments

    Returns:
        SimulationConfig for the run
    """
    if args.preset is not None:
        base = PRESETS[args.preset]
    elif args.quick:
        base = QUICK_TEST_CONFIG
    else:
        base = DEFAULT_CONFIG

    overrides = {
        field: getattr(args, option)
        for option, field in CONFIG_OVERRIDES.items()
        if getattr(args, option) is not None
    }
    return replace(base, **overrides)


def run_simulation(args):
    """Run a single simulation with given arguments."""
    print("=" * 60)
    print("Zealot Opinion Dynamics Simulation")
    print("=" * 60)

    config = build_config(args)

    def report_progress(snapshot):
        if args.verbose:
            print(
                f"Interaction {snapshot.interaction_count}: "
                f"red={snapshot.opinion_counts.red}, "
                f"blue={snapshot.opinion_counts.blue}"
            )

    controller = SimulationController(on_progress=report_progress)
    controller.initialize(config)

    stats = controller.get_statistics()
    print(f"\nConfiguration:")
    print(f"  Agents: {config.population_size}")
    print(f"  Red / blue: {stats.opinion_counts.red} / {stats.opinion_counts.blue}")
    print(f"  Zealots (red / blue): {stats.red_zealot_count} / {stats.blue_zealot_count}")
    print(f"  Homophily: {config.homophily:.2f}")
    print(f"  Zealot influence: {config.zealot_influence_probability:.2f}")
    print(f"  Network edges: {controller.graph.number_of_edges()}")
    print(f"  Max interactions: {config.max_interactions}")
    print(f"  Seed: {config.random_seed}")
    print()

    print("Running simulation...")
    result = controller.run()
    stats = result.statistics

    print("\n" + "=" * 60)
    print("Results")
    print("=" * 60)
    reason = stats.termination_reason.value if stats.termination_reason else "not finished"
    print(f"  Termination: {reason}")
    print(f"  Interactions: {stats.interaction_count}")
    print(f"  Final red: {stats.opinion_counts.red} ({stats.opinion_counts.red / config.population_size:.1%})")
    print(f"  Final blue: {stats.opinion_counts.blue} ({stats.opinion_counts.blue / config.population_size:.1%})")
    print(f"  Network components: {result.network['n_components']}")
    print(f"  Same-opinion edge fraction: {result.network['same_opinion_edge_fraction']:.1%}")

    if not args.no_save:
        output_dir = Path(args.output)
        paths = controller.save_results(output_dir=str(output_dir), prefix="simulation")
        print(f"\n  Results saved to:")
        for key, path in paths.items():
            print(f"    {key}: {path}")

    if not args.no_plot:
        import matplotlib
        matplotlib.use('Agg')  # Non-interactive backend
        import matplotlib.pyplot as plt

        fig = create_summary_figure(
            controller.get_history_dataframe(),
            controller.get_agent_dataframe(),
            title=f"Simulation Summary (homophily {config.homophily:.2f})",
        )

        if not args.no_save:
            saved = save_figure(fig, "simulation_summary", str(args.output))
            print(f"\n  Plots saved to:")
            for path in saved:
                print(f"    {path}")

        plt.close(fig)

    return result


def build_sweep_config(args) -> SweepConfig:
    """Sweep settings, shrunk to the quick preset's size with --quick."""
    sweep = SweepConfig()
    if args.quick:
        sweep = replace(
            sweep,
            population_size=QUICK_TEST_CONFIG.population_size,
            max_interactions=QUICK_TEST_CONFIG.max_interactions,
        )

    overrides = {
        "population_size": args.agents,
        "red_proportion": args.red_proportion,
        "max_interactions": args.max_interactions,
        "base_seed": args.seed,
    }
    return replace(sweep, **{k: v for k, v in overrides.items() if v is not None})


def run_experiment(args):
    """Run homophily x zealot fraction sweep."""
    print("=" * 60)
    print("Running Homophily x Zealot Fraction Sweep")
    print("=" * 60)

    from experiments.runner import run_zealot_sweep

    sweep = build_sweep_config(args)
    df = run_zealot_sweep(
        zealot_fractions=sweep.zealot_fractions,
        homophily_values=sweep.homophily_values,
        population_size=sweep.population_size,
        red_proportion=sweep.red_proportion,
        max_interactions=sweep.max_interactions,
        n_trials=sweep.num_trials,
        base_seed=sweep.base_seed,
        output_dir=str(Path(args.output) / "experiments"),
    )

    print(f"\nExperiment complete. {len(df)} runs performed.")
    if len(df) > 0:
        summary = df.groupby(["red_zealot_fraction", "homophily"])["final_red_proportion"].mean()
        print("\nMean final red proportion:")
        print(summary.unstack().round(3).to_string())
    print(f"\nResults saved to {args.output}/experiments/")


def main():
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if args.experiment:
        run_experiment(args)
    else:
        run_simulation(args)


if __name__ == "__main__":
    main()
