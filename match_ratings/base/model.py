"""Abstract base class for rating models consumed by the online loop."""

import zlib
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import numpy as np

from ..data.types import Game, Marginals, Prediction, Results


def game_rng(seed: Optional[int], game: Game) -> np.random.Generator:
    """
    Generator for randomness in a prediction about game.

    Derived from the model seed and the game id only, so predicting the same
    game from the same beliefs always gives the same answer and leaves the
    model untouched.
    """
    entropy = [zlib.crc32(str(game.id).encode("utf-8"))]
    if seed is not None:
        entropy.insert(0, seed)
    return np.random.default_rng(entropy)


class RatingModel(ABC):
    """
    Abstract base class for all rating models.

    Subclasses must implement:
    - train(): Posterior beliefs for one game's participants given priors
    - predict_outcome(): Prediction for a game from current beliefs

    The base class provides:
    - train_many(): Fold train() over a list of games
    - name: Display label (class name by default)
    """

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def train(self, game: Game, players: Sequence[str], priors: Marginals) -> Results:
        """
        Update beliefs with the outcome of one game.

        Args:
            game: The game to learn from
            players: Participants whose skills must appear in the posteriors
            priors: Beliefs before the game (not modified)

        Returns:
            Results whose posteriors hold a skill for every id in players
            and an updated draw margin
        """
        pass

    def train_many(
        self,
        games: Sequence[Game],
        players: Sequence[str],
        priors: Marginals,
    ) -> List[Results]:
        """
        Train on games in order, feeding each game's posteriors into the next.

        Returns one Results per game.
        """
        results: List[Results] = []
        current = priors
        for game in games:
            result = self.train(game, players, current)
            results.append(result)
            merged = current.copy()
            merged.skills.update(result.posteriors.skills)
            merged.draw_margin = result.posteriors.draw_margin
            current = merged
        return results

    @abstractmethod
    def predict_outcome(self, game: Game, marginals: Marginals) -> Optional[Prediction]:
        """
        Predict the outcome of game without learning from it.

        Must not modify marginals. Returns None for game types the model
        cannot predict.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.name}()"
