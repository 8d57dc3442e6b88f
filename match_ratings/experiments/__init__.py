"""Online replay of game streams through rating models."""

from .comparison import ExperimentComparison
from .online import OnlineRatingLoop
from .run import RatingRun, RunUpdate

__all__ = ["ExperimentComparison", "OnlineRatingLoop", "RatingRun", "RunUpdate"]
