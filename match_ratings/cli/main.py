"""
Command-line interface for online skill rating.

Usage:
    python -m match_ratings replay <games.parquet|games.csv> [options]
    python -m match_ratings compare <games.parquet|games.csv> [options]
    python -m match_ratings trajectory <games.parquet|games.csv> [options]
    python -m match_ratings simulate <output.parquet|output.csv> [options]
"""

import argparse
import sys

import polars as pl


def build_loop(args, model_name: str = None):
    """Create an OnlineRatingLoop from the common command-line options."""
    from ..data import Gaussian, Marginals
    from ..experiments import OnlineRatingLoop
    from ..models import RandomModel, TrueSkill

    models = {
        "trueskill": lambda: TrueSkill(
            performance_variance=args.performance_variance,
            dynamics_variance=args.dynamics_variance,
            seed=args.seed,
        ),
        "random": lambda: RandomModel(
            empirical_draw_proportion=args.draw_proportion,
            include_draws=args.draw_proportion > 0,
            seed=args.seed,
        ),
    }

    model = models[model_name or args.model]()
    skill_prior = Gaussian.from_mean_and_std(args.prior_mean, args.prior_std)
    priors = Marginals(draw_margin=Gaussian.point_mass(args.draw_margin))
    return OnlineRatingLoop(model, skill_prior=skill_prior, priors=priors)


def load_games(args):
    from ..data import GameDataset

    dataset = GameDataset.from_file(args.data, sort_by_time=args.sort_by_time)
    print(f"Loaded {dataset}")
    return dataset


def cmd_replay(args):
    """Replay games through one model and show the leaderboard."""
    from ..results import RunReport

    dataset = load_games(args)
    loop = build_loop(args)

    print(f"Replaying {loop.name}...")
    run = loop.run(dataset, count=args.count, verbose=args.verbose)
    report = RunReport(run)

    print(f"\n{report}")
    print(f"\nTop {args.top} players:")
    print(report.leaderboard_table(args.top))

    if args.output:
        report.to_dataframe().write_csv(args.output)
        print(f"\nSaved to {args.output}")

    return 0


def cmd_compare(args):
    """Replay games through TrueSkill and the random baseline."""
    from ..experiments import ExperimentComparison

    dataset = load_games(args)
    comparison = ExperimentComparison([build_loop(args, "trueskill"), build_loop(args, "random")])
    comparison.run_all(dataset, count=args.count, verbose=True)

    print("\nResults:")
    print(comparison.summary())
    return 0


def cmd_trajectory(args):
    """Print skill trajectories of selected players."""
    from ..results import PlayerSelector, RunReport

    dataset = load_games(args)
    loop = build_loop(args)
    run = loop.run(dataset, count=args.count)
    report = RunReport(run)

    if args.player:
        players = args.player
    else:
        selector = PlayerSelector[args.selector.upper()]
        players = report.top_n(selector, n=args.n, rng=args.seed, min_games=args.min_games)

    frames = []
    for player, points in report.trajectories(players, with_std=True).items():
        frames.append(
            pl.DataFrame(
                {
                    "player_id": [player] * len(points),
                    "index": [p.index for p in points],
                    "mean": [p.mean for p in points],
                    "std": [p.std for p in points],
                },
                schema={"player_id": pl.Utf8, "index": pl.Int64, "mean": pl.Float64, "std": pl.Float64},
            )
        )

    if not frames:
        print("No players selected")
        return 1

    table = pl.concat(frames)
    print(table)

    if args.output:
        table.write_csv(args.output)
        print(f"\nSaved to {args.output}")

    return 0


def cmd_simulate(args):
    """Write a synthetic game stream with known true skills."""
    import numpy as np

    from ..data import sample_two_player_games

    rng = np.random.default_rng(args.seed)
    true_skills = {f"player_{i}": float(s) for i, s in enumerate(rng.normal(0.0, args.skill_std, args.players))}
    dataset = sample_two_player_games(
        true_skills,
        num_games=args.games,
        performance_variance=args.performance_variance,
        draw_margin=args.draw_margin,
        seed=rng,
    )

    if args.output.lower().endswith(".csv"):
        dataset.write_csv(args.output)
    else:
        dataset.write_parquet(args.output)

    print(f"Wrote {dataset} to {args.output}")
    return 0


def main(argv=None):
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Online skill rating CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_model_args(p):
        p.add_argument("--prior-mean", type=float, default=0.0,
                       help="Mean of the default skill prior (default: 0)")
        p.add_argument("--prior-std", type=float, default=1.0,
                       help="Std of the default skill prior (default: 1)")
        p.add_argument("--performance-variance", type=float, default=1.0,
                       help="TrueSkill performance variance (default: 1)")
        p.add_argument("--dynamics-variance", type=float, default=0.0,
                       help="TrueSkill skill drift per game (default: 0)")
        p.add_argument("--draw-margin", type=float, default=0.0,
                       help="Draw margin (default: 0, no draws)")
        p.add_argument("--draw-proportion", type=float, default=0.0,
                       help="Empirical draw share for the random baseline")
        p.add_argument("--seed", type=int, default=None, help="Random seed")

    def add_data_args(p):
        p.add_argument("data", help="Path to games parquet or csv file")
        p.add_argument("--count", "-c", type=int, default=None,
                       help="Only replay the first N games")
        p.add_argument("--sort-by-time", action="store_true",
                       help="Sort games by the EndTime column")
        add_model_args(p)

    # replay command
    replay_parser = subparsers.add_parser("replay", help="Replay games through one model")
    add_data_args(replay_parser)
    replay_parser.add_argument("--model", "-m", default="trueskill",
                               choices=["trueskill", "random"], help="Model to use")
    replay_parser.add_argument("--top", "-t", type=int, default=10,
                               help="Show top N players (default: 10)")
    replay_parser.add_argument("--output", "-o", help="Save final ratings to CSV")
    replay_parser.add_argument("--verbose", "-v", action="store_true",
                               help="Print posteriors after every game")

    # compare command
    compare_parser = subparsers.add_parser("compare", help="Compare TrueSkill with a random baseline")
    add_data_args(compare_parser)

    # trajectory command
    trajectory_parser = subparsers.add_parser("trajectory", help="Skill trajectories")
    add_data_args(trajectory_parser)
    trajectory_parser.add_argument("--model", "-m", default="trueskill",
                                   choices=["trueskill", "random"], help="Model to use")
    trajectory_parser.add_argument("--player", action="append",
                                   help="Player id (repeatable); overrides --selector")
    trajectory_parser.add_argument("--selector", default="by_skill",
                                   choices=["by_skill", "by_games_played", "random", "first_n", "min_games"],
                                   help="How to pick players (default: by_skill)")
    trajectory_parser.add_argument("-n", type=int, default=5, help="Number of players")
    trajectory_parser.add_argument("--min-games", type=int, default=100,
                                   help="Threshold for the min_games selector")
    trajectory_parser.add_argument("--output", "-o", help="Save trajectories to CSV")

    # simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Write synthetic games")
    simulate_parser.add_argument("output", help="Output .parquet or .csv path")
    simulate_parser.add_argument("--players", type=int, default=20, help="Number of players")
    simulate_parser.add_argument("--games", type=int, default=1000, help="Number of games")
    simulate_parser.add_argument("--skill-std", type=float, default=1.0,
                                 help="Std of the true skill distribution")
    simulate_parser.add_argument("--performance-variance", type=float, default=1.0,
                                 help="Performance noise per game")
    simulate_parser.add_argument("--draw-margin", type=float, default=0.0,
                                 help="Draw threshold on the performance difference")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    commands = {
        "replay": cmd_replay,
        "compare": cmd_compare,
        "trajectory": cmd_trajectory,
        "simulate": cmd_simulate,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
