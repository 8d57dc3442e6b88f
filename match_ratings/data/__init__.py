"""Data types and loading for online skill rating."""

from .dataset import GameDataset
from .synthetic import sample_two_player_games
from .types import (
    Game,
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
)

__all__ = [
    "GameDataset",
    "sample_two_player_games",
    "Game",
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
]
