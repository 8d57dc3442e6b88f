"""
Match Ratings - Online skill rating with TrueSkill-style Gaussian beliefs.

Games are replayed one at a time in arrival order. Before each game the
current beliefs predict the outcome; the model then updates every
participant's skill belief. The full belief history is kept so that
leaderboards, skill trajectories and cumulative prediction metrics can be
derived at any point.

Quick Start:
    from match_ratings import (
        ExperimentComparison, GameDataset, Gaussian, OnlineRatingLoop,
        RandomModel, RunReport, TrueSkill,
    )

    # Load data
    dataset = GameDataset.from_parquet("games.parquet")

    # Replay the games through TrueSkill
    loop = OnlineRatingLoop(TrueSkill(), skill_prior=Gaussian(0.0, 1.0))
    run = loop.run(dataset)

    # Query the run
    report = RunReport(run)
    print(report.leaderboard_table(10))      # Top 10 by mean - sqrt(3 * variance)
    print(report.cumulative_error_rate()[-1])
    print(report.trajectory("alice"))

    # Compare against a random baseline
    comparison = ExperimentComparison([
        loop,
        OnlineRatingLoop(RandomModel(seed=0), skill_prior=Gaussian(0.0, 1.0)),
    ])
    comparison.run_all(dataset, verbose=True)
    print(comparison.summary())

Command-line interface:
    python -m match_ratings simulate games.parquet --players 50 --games 5000
    python -m match_ratings replay games.parquet --top 20
    python -m match_ratings compare games.parquet
    python -m match_ratings trajectory games.parquet -n 3
"""

from .base import RatingModel, RatingStore
from .data import (
    Game,
    GameDataset,
    Gaussian,
    Marginals,
    MatchOutcome,
    PointEstimate,
    Prediction,
    Results,
    SkillEstimate,
    Team,
    TeamGame,
    TwoPlayerGame,
    sample_two_player_games,
)
from .evaluation import (
    compare_runs,
    cumulative_error_rate,
    cumulative_errors,
    cumulative_negative_log_prob_of_truth,
)
from .exceptions import ConfigurationError, MatchRatingsError, ModelError, UnknownPlayerError
from .experiments import ExperimentComparison, OnlineRatingLoop, RatingRun, RunUpdate
from .models import RandomModel, RandomModelConfig, TrueSkill, TrueSkillConfig
from .results import PlayerSelector, RunReport, TrajectoryPoint, conservative_skill

__version__ = "0.1.0"

__all__ = [
    # Data
    "Game",
    "GameDataset",
    "Gaussian",
    "Marginals",
    "MatchOutcome",
    "PointEstimate",
    "Prediction",
    "Results",
    "SkillEstimate",
    "Team",
    "TeamGame",
    "TwoPlayerGame",
    "sample_two_player_games",
    # Base
    "RatingModel",
    "RatingStore",
    # Models
    "RandomModel",
    "RandomModelConfig",
    "TrueSkill",
    "TrueSkillConfig",
    # Experiments
    "ExperimentComparison",
    "OnlineRatingLoop",
    "RatingRun",
    "RunUpdate",
    # Results
    "PlayerSelector",
    "RunReport",
    "TrajectoryPoint",
    "conservative_skill",
    # Evaluation
    "compare_runs",
    "cumulative_error_rate",
    "cumulative_errors",
    "cumulative_negative_log_prob_of_truth",
    # Errors
    "ConfigurationError",
    "MatchRatingsError",
    "ModelError",
    "UnknownPlayerError",
]
