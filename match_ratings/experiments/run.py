"""The state of one scored replay over a game stream."""

import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..base import RatingStore
from ..data.types import Game, Marginals, Prediction


@dataclass(frozen=True)
class RunUpdate:
    """Immutable record of one committed game, passed to run observers."""

    index: int
    game: Game
    priors: Marginals
    posteriors: Marginals
    prediction: Optional[Prediction]


class RatingRun:
    """
    Aggregate state of a rating replay.

    Owns the RatingStore, the ordered predictions and the number of games
    processed. Only OnlineRatingLoop mutates it, one whole game at a time
    under ``lock``; readers take the same lock to see a consistent state.
    """

    def __init__(self, name: str, priors: Optional[Marginals] = None):
        self.name = name
        self.store = RatingStore.from_priors(priors)
        self.predictions: List[Prediction] = []
        self.lock = threading.RLock()
        self._games_processed = 0
        self._observers: List[Callable[[RunUpdate], None]] = []

    @property
    def games_processed(self) -> int:
        return self._games_processed

    @property
    def num_players(self) -> int:
        return len(self.store)

    def subscribe(self, callback: Callable[[RunUpdate], None]) -> Callable[[], None]:
        """
        Register callback to receive a RunUpdate after each committed game.

        Returns a function that unregisters the callback.
        """
        with self.lock:
            self._observers.append(callback)

        def unsubscribe() -> None:
            with self.lock:
                if callback in self._observers:
                    self._observers.remove(callback)

        return unsubscribe

    def commit(
        self,
        game: Game,
        priors: Marginals,
        posteriors: Marginals,
        prediction: Optional[Prediction],
    ) -> RunUpdate:
        """Apply one game and notify observers."""
        update = self.apply(game, priors, posteriors, prediction)
        self.notify(update)
        return update

    def apply(
        self,
        game: Game,
        priors: Marginals,
        posteriors: Marginals,
        prediction: Optional[Prediction],
    ) -> RunUpdate:
        """
        Apply one game's update as a unit, without notifying observers.

        Callers must have checked that posteriors hold every participant.
        Participants new to the store are registered with their prior first.
        """
        with self.lock:
            for player in game.players:
                if player not in self.store:
                    self.store.ensure_player(player, priors.skills[player])
            if prediction is not None:
                self.predictions.append(prediction)
            for player in game.players:
                self.store.append_skill(player, posteriors.skills[player])
            self.store.append_draw_margin(posteriors.draw_margin)
            self._games_processed += 1

            return RunUpdate(
                index=self._games_processed - 1,
                game=game,
                priors=priors,
                posteriors=posteriors,
                prediction=prediction,
            )

    def notify(self, update: RunUpdate) -> None:
        """
        Pass update to every observer, in subscription order.

        Call without holding ``lock`` so observers may read the run from
        other threads. The game is already applied: an observer that raises
        stops the notification and the exception reaches the caller.
        """
        with self.lock:
            observers = list(self._observers)
        for callback in observers:
            callback(update)

    def __repr__(self) -> str:
        return (
            f"RatingRun(name={self.name!r}, games={self._games_processed}, "
            f"players={len(self.store)}, predictions={len(self.predictions)})"
        )
