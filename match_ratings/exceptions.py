"""Exception hierarchy for match_ratings.

Three failure categories are distinguished:
- configuration problems detected before any state is touched,
- queries about players the store has never seen,
- failures of the injected rating model while processing a game.
"""

from typing import Dict, Optional


class MatchRatingsError(Exception):
    """
    Base exception for all match_ratings errors.

    Attributes:
        message: Human-readable error description
        details: Extra context (player id, game id, ...) for debugging
    """

    def __init__(self, message: str, details: Optional[Dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(MatchRatingsError, ValueError):
    """Raised when a run is missing configuration it needs (e.g. a skill prior)."""


class UnknownPlayerError(MatchRatingsError, KeyError):
    """Raised when a player id has never been registered in a rating store."""

    def __init__(self, player_id: str):
        self.player_id = player_id
        super().__init__(
            message=f"Unknown player: {player_id!r}",
            details={"player_id": player_id},
        )

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class ModelError(MatchRatingsError, RuntimeError):
    """
    Raised when the rating model fails on a game.

    The original exception is available as ``__cause__``. Nothing of the
    failing game has been applied to the run when this is raised.
    """

    def __init__(self, game_id: Optional[str], message: str):
        self.game_id = game_id
        super().__init__(
            message=f"Game {game_id}: {message}",
            details={"game_id": game_id},
        )
