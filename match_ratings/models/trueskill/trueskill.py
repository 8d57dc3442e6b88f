"""
TrueSkill rating model - closed-form per-game update with Numba acceleration.

Each player's skill is a Gaussian belief N(mu, var). A game updates the
participants' beliefs with the truncated-Gaussian (assumed density
filtering) formulas of Herbrich, Minka and Graepel (2006), for:

- two-player games (win / loss / draw)
- two-team games, where a team performs as the sum of its players

The draw margin is read from the shared draw-margin belief (its mean) and
passed through unchanged; this model does not learn it.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.special import log_ndtr

from ...base import RatingModel, game_rng
from ...data.types import (
    Game,
    Gaussian,
    Marginals,
    MatchOutcome,
    Prediction,
    Results,
    TeamGame,
    TwoPlayerGame,
    skills_to_arrays,
)
from ._numba_core import outcome_probabilities, update_two_teams


@dataclass
class TrueSkillConfig:
    """Configuration for the TrueSkill model.

    Variances rather than standard deviations, matching how skills are stored:
    - performance_variance: beta^2, per-player performance noise in a game
    - dynamics_variance: tau^2, added to each skill variance before a game
    - min_variance: floor for posterior skill variances
    - include_draws: score predictions with draws as a distinct outcome;
      None means "whenever the draw margin is not a point mass at zero"
    - seed: seed for breaking exact win/loss ties in predictions, combined
      with the game id so repeated predictions agree
    """

    performance_variance: float = 1.0
    dynamics_variance: float = 0.0
    min_variance: float = 1e-6
    include_draws: Optional[bool] = None
    seed: Optional[int] = None


class TrueSkill(RatingModel):
    """
    TrueSkill model for two-player and two-team games.

    Parameters:
        performance_variance: Per-player performance variance (default: 1.0)
        dynamics_variance: Skill drift added before each game (default: 0.0)
        min_variance: Posterior variance floor (default: 1e-6)
        include_draws: Whether predictions distinguish draws (default: auto)
        seed: Seed for tie-breaking in predictions

    The draw margin is not learned: train() returns the prior draw-margin
    belief unchanged, so with this model a run's draw-margin history stays
    at its initial value. Games with more than two teams are not supported.

    Example:
        >>> model = TrueSkill(performance_variance=1.0)
        >>> priors = Marginals(skills={"a": Gaussian(0, 1), "b": Gaussian(0, 1)})
        >>> game = TwoPlayerGame.create("g1", "a", "b", MatchOutcome.FIRST_WIN)
        >>> results = model.train(game, game.players, priors)
        >>> results.posteriors.skills["a"].mean > 0
        True
    """

    def __init__(
        self,
        performance_variance: float = 1.0,
        dynamics_variance: float = 0.0,
        min_variance: float = 1e-6,
        include_draws: Optional[bool] = None,
        seed: Optional[int] = None,
    ):
        if performance_variance <= 0:
            raise ValueError(f"performance_variance must be positive, got {performance_variance}")
        if dynamics_variance < 0:
            raise ValueError(f"dynamics_variance must be non-negative, got {dynamics_variance}")

        self.config = TrueSkillConfig(
            performance_variance=performance_variance,
            dynamics_variance=dynamics_variance,
            min_variance=min_variance,
            include_draws=include_draws,
            seed=seed,
        )

    def _team_players(self, game: Game) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
        """Split a game's players into the two competing sides."""
        if isinstance(game, TwoPlayerGame):
            return (game.player1,), (game.player2,)
        if isinstance(game, TeamGame) and len(game.teams) == 2:
            return game.teams[0].players, game.teams[1].players
        raise ValueError(
            f"{self.name} supports two-player and two-team games only, "
            f"got {type(game).__name__} with {len(game.players)} players"
        )

    def _team_arrays(
        self,
        players: Sequence[str],
        marginals: Marginals,
    ) -> Tuple[np.ndarray, np.ndarray]:
        mu, var = skills_to_arrays([marginals.skills[p] for p in players])
        if self.config.dynamics_variance > 0:
            var = var + self.config.dynamics_variance
        return mu, var

    @staticmethod
    def _draw_margin(marginals: Marginals) -> float:
        return max(float(marginals.draw_margin.mean), 0.0)

    def _include_draws(self, marginals: Marginals) -> bool:
        if self.config.include_draws is not None:
            return self.config.include_draws
        margin = marginals.draw_margin
        return not (margin.is_point_mass and margin.mean == 0.0)

    def train(self, game: Game, players: Sequence[str], priors: Marginals) -> Results:
        """Posterior skills for the game's participants; draw margin unchanged."""
        first, second = self._team_players(game)
        mu1, var1 = self._team_arrays(first, priors)
        mu2, var2 = self._team_arrays(second, priors)

        new_mu1, new_var1, new_mu2, new_var2 = update_two_teams(
            mu1, var1, mu2, var2,
            int(game.outcome),
            self.config.performance_variance,
            self._draw_margin(priors),
            self.config.min_variance,
        )

        skills = {}
        for player, m, v in zip(first, new_mu1, new_var1):
            skills[player] = Gaussian(float(m), float(v))
        for player, m, v in zip(second, new_mu2, new_var2):
            skills[player] = Gaussian(float(m), float(v))

        # Requested players outside the game keep their priors
        posterior_skills = {p: skills[p] if p in skills else priors.skills[p] for p in players}
        for p in game.players:
            posterior_skills.setdefault(p, skills[p])

        return Results(posteriors=Marginals(skills=posterior_skills, draw_margin=priors.draw_margin))

    def outcome_probabilities(self, game: Game, marginals: Marginals) -> np.ndarray:
        """Probabilities of (first wins, draw, second wins), indexed by MatchOutcome."""
        first, second = self._team_players(game)
        mu1, var1 = self._team_arrays(first, marginals)
        mu2, var2 = self._team_arrays(second, marginals)
        return np.array(outcome_probabilities(
            mu1, var1, mu2, var2,
            self.config.performance_variance,
            self._draw_margin(marginals),
        ))

    def _log_prob(self, game: Game, marginals: Marginals, outcome: MatchOutcome) -> float:
        """Log probability of outcome; tail-stable for decisive results."""
        first, second = self._team_players(game)
        mu1, var1 = self._team_arrays(first, marginals)
        mu2, var2 = self._team_arrays(second, marginals)
        n_players = len(mu1) + len(mu2)
        c = math.sqrt(var1.sum() + var2.sum() + n_players * self.config.performance_variance)
        d = mu1.sum() - mu2.sum()
        e = self._draw_margin(marginals)

        if outcome == MatchOutcome.FIRST_WIN:
            return float(log_ndtr((d - e) / c))
        if outcome == MatchOutcome.SECOND_WIN:
            return float(log_ndtr((-d - e) / c))

        p_draw = self.outcome_probabilities(game, marginals)[MatchOutcome.DRAW]
        return math.log(p_draw) if p_draw > 0.0 else -math.inf

    def predict_outcome(self, game: Game, marginals: Marginals) -> Optional[Prediction]:
        """
        Most probable outcome and the log probability of the actual one.

        Returns None for game types the model cannot handle.
        """
        try:
            self._team_players(game)
        except ValueError:
            return None

        probs = self.outcome_probabilities(game, marginals)
        actual = game.outcome

        if probs[MatchOutcome.FIRST_WIN] == probs[MatchOutcome.SECOND_WIN] and \
                probs[MatchOutcome.FIRST_WIN] >= probs[MatchOutcome.DRAW]:
            # Symmetric beliefs: pick a side per game rather than favour the first
            first = game_rng(self.config.seed, game).integers(2) == 0
            predicted = MatchOutcome.FIRST_WIN if first else MatchOutcome.SECOND_WIN
        else:
            predicted = MatchOutcome(int(np.argmax(probs)))

        return Prediction(
            predicted=predicted,
            actual=actual,
            log_prob_of_truth=self._log_prob(game, marginals, actual),
            include_draws=self._include_draws(marginals),
        )

    def __repr__(self) -> str:
        return (
            f"TrueSkill(performance_variance={self.config.performance_variance}, "
            f"dynamics_variance={self.config.dynamics_variance})"
        )
