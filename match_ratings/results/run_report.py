"""
Queryable views over a rating run.

RunReport derives leaderboards, trajectories, player selections and
cumulative prediction metrics from a RatingRun without modifying it.
Every view is recomputed from the run's current state on each call.
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Union

import numpy as np
import polars as pl

from ..data.types import Gaussian, PointEstimate, SkillEstimate
from ..evaluation import metrics

if TYPE_CHECKING:
    from ..experiments.run import RatingRun

DEFAULT_MIN_GAMES = 100


def conservative_skill(estimate: SkillEstimate) -> float:
    """
    Conservative skill: mean - sqrt(3 * variance).

    Point estimates have no uncertainty, so their conservative skill is the
    value itself.
    """
    if isinstance(estimate, Gaussian):
        return estimate.mean - math.sqrt(3.0 * estimate.variance)
    if isinstance(estimate, PointEstimate):
        return estimate.value
    raise TypeError(f"Unsupported skill estimate type: {type(estimate).__name__}")


class PlayerSelector(Enum):
    """How top_n() picks players."""

    BY_SKILL = auto()         # Leaderboard order (conservative skill)
    BY_GAMES_PLAYED = auto()  # Most games first
    RANDOM = auto()           # Uniform random subset, explicit generator
    FIRST_N = auto()          # Registration (stream) order
    MIN_GAMES = auto()        # Played at least min_games, by final mean


@dataclass(frozen=True)
class TrajectoryPoint:
    """One step of a player's skill trajectory (std is None unless requested)."""

    index: int
    mean: float
    std: Optional[float] = None


class RunReport:
    """
    Read-only reporting over a RatingRun.

    Provides:
    - leaderboard() / leaderboard_table(): players by conservative skill
    - trajectory() / trajectories(): belief history for plotting
    - top_n(): player selection by skill, activity, order or at random
    - cumulative_errors() / cumulative_error_rate() /
      cumulative_negative_log_prob_of_truth(): prediction quality over time
    - skill_average(): mean of the latest skill means

    Example:
        >>> run = OnlineRatingLoop(TrueSkill(), skill_prior=Gaussian(0, 1)).run(games)
        >>> report = RunReport(run)
        >>> list(report.leaderboard())[:3]  # Top three player ids
    """

    def __init__(self, run: "RatingRun"):
        self.run = run

    @property
    def name(self) -> str:
        return self.run.name

    # =========================================================================
    # Leaderboard
    # =========================================================================

    def leaderboard(self) -> Dict[str, float]:
        """
        Player id -> conservative skill, in descending order.

        Ties keep registration order.
        """
        with self.run.lock:
            latest = self.run.store.all_latest()
        scored = [(p, conservative_skill(g)) for p, g in latest.items()]
        scored.sort(key=lambda item: item[1], reverse=True)
        return dict(scored)

    def leaderboard_table(self, n: Optional[int] = None) -> pl.DataFrame:
        """
        Leaderboard as a DataFrame.

        Columns: rank, player_id, games_played, skill_mean, skill_std,
        conservative_skill.
        """
        with self.run.lock:
            board = self.leaderboard()
            ids = list(board)[:n] if n is not None else list(board)
            latest = [self.run.store.latest(p) for p in ids]
            played = [self.run.store.games_played(p) for p in ids]

        return pl.DataFrame(
            {
                "rank": np.arange(1, len(ids) + 1, dtype=np.int64),
                "player_id": ids,
                "games_played": np.array(played, dtype=np.int64),
                "skill_mean": np.array([g.mean for g in latest], dtype=np.float64),
                "skill_std": np.array([g.std for g in latest], dtype=np.float64),
                "conservative_skill": np.array([board[p] for p in ids], dtype=np.float64),
            },
            schema={
                "rank": pl.Int64,
                "player_id": pl.Utf8,
                "games_played": pl.Int64,
                "skill_mean": pl.Float64,
                "skill_std": pl.Float64,
                "conservative_skill": pl.Float64,
            },
        )

    # =========================================================================
    # Trajectories
    # =========================================================================

    def trajectory(self, player_id: str, with_std: bool = False) -> List[TrajectoryPoint]:
        """Full belief history of a player, index 0 being the prior."""
        with self.run.lock:
            history = self.run.store.history(player_id)
        return [
            TrajectoryPoint(index=i, mean=g.mean, std=g.std if with_std else None)
            for i, g in enumerate(history)
        ]

    def trajectories(
        self,
        player_ids: Sequence[str],
        with_std: bool = False,
    ) -> Dict[str, List[TrajectoryPoint]]:
        with self.run.lock:
            return {p: self.trajectory(p, with_std=with_std) for p in player_ids}

    def draw_margin_means(self) -> np.ndarray:
        with self.run.lock:
            history = self.run.store.draw_margin_history
        return np.array([g.mean for g in history], dtype=np.float64)

    # =========================================================================
    # Player selection
    # =========================================================================

    def top_n(
        self,
        selector: PlayerSelector,
        n: Optional[int] = None,
        rng: Optional[Union[int, np.random.Generator]] = None,
        min_games: int = DEFAULT_MIN_GAMES,
    ) -> List[str]:
        """
        Select up to n players (None = all) according to selector.

        Args:
            selector: Selection rule
            n: Maximum number of players, None for no limit
            rng: Generator or integer seed, required for RANDOM
            min_games: Minimum games played for MIN_GAMES

        Returns:
            Player ids in the selector's order
        """
        if n is not None and n < 0:
            raise ValueError(f"n must be non-negative, got {n}")

        with self.run.lock:
            store = self.run.store
            players = store.players

            if selector == PlayerSelector.BY_SKILL:
                ordered = list(self.leaderboard())
            elif selector == PlayerSelector.BY_GAMES_PLAYED:
                ordered = sorted(players, key=store.games_played, reverse=True)
            elif selector == PlayerSelector.FIRST_N:
                ordered = players
            elif selector == PlayerSelector.RANDOM:
                if rng is None:
                    raise ValueError("RANDOM selection needs an explicit rng or seed")
                generator = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)
                ordered = [players[i] for i in generator.permutation(len(players))]
            elif selector == PlayerSelector.MIN_GAMES:
                eligible = [p for p in players if store.games_played(p) >= min_games]
                ordered = sorted(eligible, key=lambda p: store.latest(p).mean, reverse=True)
            else:
                raise ValueError(f"Unknown selector: {selector}")

        return list(ordered) if n is None else list(ordered[:n])

    # =========================================================================
    # Metrics
    # =========================================================================

    def cumulative_errors(self) -> np.ndarray:
        with self.run.lock:
            predictions = list(self.run.predictions)
        return metrics.cumulative_errors(predictions)

    def cumulative_error_rate(self) -> np.ndarray:
        with self.run.lock:
            predictions = list(self.run.predictions)
        return metrics.cumulative_error_rate(predictions)

    def cumulative_negative_log_prob_of_truth(self) -> List[Optional[float]]:
        with self.run.lock:
            predictions = list(self.run.predictions)
        return metrics.cumulative_negative_log_prob_of_truth(predictions)

    def skill_average(self) -> float:
        """Mean of the latest skill means (0.0 with no players)."""
        with self.run.lock:
            latest = self.run.store.all_latest()
        if not latest:
            return 0.0
        return float(np.mean([g.mean for g in latest.values()]))

    def latest_posteriors(self, player_ids: Optional[Sequence[str]] = None) -> Dict[str, Gaussian]:
        with self.run.lock:
            if player_ids is None:
                return self.run.store.all_latest()
            return {p: self.run.store.latest(p) for p in player_ids}

    # =========================================================================
    # Export
    # =========================================================================

    def to_dataframe(self) -> pl.DataFrame:
        """All players in registration order."""
        with self.run.lock:
            latest = self.run.store.all_latest()
            played = {p: self.run.store.games_played(p) for p in latest}
        ids = list(latest)
        return pl.DataFrame(
            {
                "player_id": ids,
                "games_played": [played[p] for p in ids],
                "skill_mean": [latest[p].mean for p in ids],
                "skill_variance": [latest[p].variance for p in ids],
                "conservative_skill": [conservative_skill(latest[p]) for p in ids],
            },
            schema={
                "player_id": pl.Utf8,
                "games_played": pl.Int64,
                "skill_mean": pl.Float64,
                "skill_variance": pl.Float64,
                "conservative_skill": pl.Float64,
            },
        )

    def __repr__(self) -> str:
        return f"RunReport({self.run!r})"

    def __str__(self) -> str:
        with self.run.lock:
            games = self.run.games_processed
            players = self.run.num_players
            n_predictions = len(self.run.predictions)
        lines = [
            f"Rating run: {self.name}",
            f"  Games processed: {games:,}",
            f"  Players: {players:,}",
            f"  Predictions: {n_predictions:,}",
            f"  Skill average: {self.skill_average():.4f}",
        ]
        if n_predictions:
            rate = self.cumulative_error_rate()[-1]
            nlp = self.cumulative_negative_log_prob_of_truth()[-1]
            lines.append(f"  Error rate: {rate:.4f}")
            lines.append(f"  Mean -log P(truth): {'undefined' if nlp is None else f'{nlp:.4f}'}")
        return "\n".join(lines)
