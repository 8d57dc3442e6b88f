"""Base classes for online skill rating."""

from .model import RatingModel, game_rng
from .rating_store import RatingStore

__all__ = ["RatingModel", "RatingStore", "game_rng"]
