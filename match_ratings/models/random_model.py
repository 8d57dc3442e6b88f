"""Random baseline model: learns nothing, guesses outcomes."""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from ..base import RatingModel, game_rng
from ..data.types import Game, Marginals, MatchOutcome, Prediction, Results, TeamGame, TwoPlayerGame


@dataclass
class RandomModelConfig:
    """Configuration for the random baseline.

    - empirical_draw_proportion: share of draws observed in the data
    - include_draws: whether draws are guessed (and scored) as an outcome
    - seed: combined with each game id to draw that game's guess
    """

    empirical_draw_proportion: float = 0.0
    include_draws: bool = False
    seed: Optional[int] = None


class RandomModel(RatingModel):
    """
    Baseline that keeps beliefs unchanged and predicts at random.

    With draws included, outcomes are drawn from (1 - p, p, 1 - p) normalised,
    where p is the empirical draw proportion; otherwise a fair coin decides
    between the two sides. The guess for a game depends only on the seed and
    the game id, so predicting never changes the model.
    """

    def __init__(
        self,
        empirical_draw_proportion: float = 0.0,
        include_draws: bool = False,
        seed: Optional[int] = None,
    ):
        if not 0.0 <= empirical_draw_proportion <= 1.0:
            raise ValueError(
                f"empirical_draw_proportion must be in [0, 1], got {empirical_draw_proportion}"
            )
        self.config = RandomModelConfig(
            empirical_draw_proportion=empirical_draw_proportion,
            include_draws=include_draws,
            seed=seed,
        )

        if include_draws:
            p = empirical_draw_proportion
            weights = np.array([1.0 - p, p, 1.0 - p])
            self.outcome_distribution = weights / weights.sum()
        else:
            self.outcome_distribution = np.array([0.5, 0.0, 0.5])

    @property
    def name(self) -> str:
        return "Random"

    def train(self, game: Game, players: Sequence[str], priors: Marginals) -> Results:
        return Results(posteriors=priors.restrict(players))

    def predict_outcome(self, game: Game, marginals: Marginals) -> Optional[Prediction]:
        if not isinstance(game, (TwoPlayerGame, TeamGame)):
            return None
        if isinstance(game, TeamGame) and len(game.teams) != 2:
            return None

        predicted = MatchOutcome(int(game_rng(self.config.seed, game).choice(3, p=self.outcome_distribution)))
        actual = game.outcome
        # Without draws a draw scores like a second-side result: a coin flip either way
        p_truth = self.outcome_distribution[actual] if self.config.include_draws else 0.5

        return Prediction(
            predicted=predicted,
            actual=actual,
            log_prob_of_truth=math.log(p_truth) if p_truth > 0 else -math.inf,
            include_draws=self.config.include_draws,
        )
