"""Online replay of a game stream through a rating model."""

import itertools
import time
from typing import Iterable, Optional

from ..base import RatingModel
from ..data.types import Game, Gaussian, Marginals, Prediction
from ..exceptions import ConfigurationError, ModelError
from .run import RatingRun, RunUpdate


class OnlineRatingLoop:
    """
    Replays games one at a time, in arrival order, through a rating model.

    For each game:
    1. Build priors from the latest belief of every participant (new
       players start from ``skill_prior``) and the latest draw margin
    2. Optionally ask the prediction model for a prediction
    3. Train the model on the game to get posteriors
    4. Append the prediction, every participant's posterior skill and the
       new draw margin to the run, all at once

    Ratings are path dependent: the prediction for game k only sees beliefs
    produced by games 1..k-1, and reordering games changes the results.

    A failing model call aborts the replay with a ModelError; the run keeps
    exactly the games applied before the failure. An observer that raises
    also aborts the replay, but only after its game has been applied.

    Parameters:
        model: Model used for training
        skill_prior: Prior for players not in ``priors``
        priors: Initial skills and draw margin
        predict: Record a prediction before training on each game
        predict_model: Model used for predictions (default: ``model``)
        name: Run name (default: the training model's name)
    """

    def __init__(
        self,
        model: RatingModel,
        skill_prior: Optional[Gaussian] = None,
        priors: Optional[Marginals] = None,
        predict: bool = True,
        predict_model: Optional[RatingModel] = None,
        name: Optional[str] = None,
    ):
        self.model = model
        self.skill_prior = skill_prior
        self.priors = priors if priors is not None else Marginals()
        self.predict_model = (predict_model or model) if predict else None
        self._name = name

    @property
    def name(self) -> str:
        return self._name or self.model.name

    def new_run(self) -> RatingRun:
        """Fresh run seeded with this loop's priors."""
        return RatingRun(name=self.name, priors=self.priors)

    def run(
        self,
        games: Iterable[Game],
        count: Optional[int] = None,
        verbose: bool = False,
    ) -> RatingRun:
        """
        Replay games into a new run.

        Args:
            games: Games in arrival order (any forward iterable)
            count: Maximum number of games to consume (None = all)
            verbose: Print posteriors per game and the total time

        Returns:
            The populated RatingRun
        """
        run = self.new_run()
        if count is not None:
            games = itertools.islice(games, count)

        start = time.perf_counter()
        for game in games:
            update = self.step(run, game)
            if verbose:
                post = ", ".join(f"{k}: {v}" for k, v in update.posteriors.skills.items())
                print(f"Game {game.id}, Posteriors: {post}")

        if verbose:
            elapsed = time.perf_counter() - start
            print(f"{self.name}: {run.games_processed:,} games in {elapsed:.3f}s")

        return run

    def build_priors(self, run: RatingRun, game: Game) -> Marginals:
        """Priors for game's participants from the run's latest beliefs."""
        skills = {}
        with run.lock:
            for player in game.players:
                if player in run.store:
                    skills[player] = run.store.latest(player)
                elif self.skill_prior is not None:
                    skills[player] = self.skill_prior
                else:
                    raise ConfigurationError(
                        f"Player {player!r} in game {game.id} has no prior and "
                        f"no default skill prior is configured",
                        details={"player_id": player, "game_id": game.id},
                    )
            draw_margin = run.store.latest_draw_margin
        return Marginals(skills=skills, draw_margin=draw_margin)

    def step(self, run: RatingRun, game: Game) -> RunUpdate:
        """
        Predict, train and commit a single game.

        The run is locked from building priors until the commit, so concurrent
        callers stepping the same run are serialised and each game sees the
        beliefs left by the previous one. Observers are notified afterwards.
        """
        with run.lock:
            update = self._step_locked(run, game)
        run.notify(update)
        return update

    def _step_locked(self, run: RatingRun, game: Game) -> RunUpdate:
        priors = self.build_priors(run, game)
        players = list(game.players)

        prediction: Optional[Prediction] = None
        if self.predict_model is not None:
            try:
                prediction = self.predict_model.predict_outcome(game, priors.copy())
            except Exception as exc:
                raise ModelError(game.id, f"prediction failed: {exc}") from exc

        try:
            results = self.model.train(game, players, priors.copy())
        except Exception as exc:
            raise ModelError(game.id, f"training failed: {exc}") from exc

        posteriors = results.posteriors
        missing = [p for p in players if posteriors.skills.get(p) is None]
        if missing:
            raise ModelError(game.id, f"posteriors missing players {missing}")
        if posteriors.draw_margin is None:
            raise ModelError(game.id, "posteriors missing draw margin")

        return run.apply(game, priors, posteriors, prediction)

    def __repr__(self) -> str:
        return f"OnlineRatingLoop(name={self.name!r}, model={self.model!r})"
