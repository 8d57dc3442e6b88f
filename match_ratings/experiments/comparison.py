"""Side-by-side replay of several rating loops on the same game stream."""

from typing import Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
import polars as pl

from ..data.types import Game
from ..evaluation.metrics import compare_runs
from ..results.run_report import PlayerSelector, RunReport, TrajectoryPoint
from .online import OnlineRatingLoop
from .run import RatingRun

RANDOM_NAME = "Random"


def _is_random(name: str) -> bool:
    return name == RANDOM_NAME


class ExperimentComparison:
    """
    Run several OnlineRatingLoops over the same games and compare them.

    Example:
        >>> comparison = ExperimentComparison([
        ...     OnlineRatingLoop(TrueSkill(), skill_prior=Gaussian(0, 1)),
        ...     OnlineRatingLoop(RandomModel(seed=0), skill_prior=Gaussian(0, 1)),
        ... ])
        >>> comparison.run_all(games)
        >>> print(comparison.summary())
    """

    def __init__(self, loops: Sequence[OnlineRatingLoop]):
        if not loops:
            raise ValueError("ExperimentComparison needs at least one loop")
        self.loops = list(loops)
        self._runs: List[RatingRun] = []

    @property
    def runs(self) -> List[RatingRun]:
        return list(self._runs)

    @property
    def reports(self) -> List[RunReport]:
        return [RunReport(run) for run in self._runs]

    def run_all(
        self,
        games: Iterable[Game],
        count: Optional[int] = None,
        verbose: bool = False,
    ) -> List[RatingRun]:
        """
        Replay every loop over the same games.

        The stream is materialised once so that single-pass iterables feed
        every loop identically.
        """
        games = list(games)
        self._runs = []
        for loop in self.loops:
            if verbose:
                print(f"Running {loop.name}")
            self._runs.append(loop.run(games, count=count, verbose=verbose))
        return self.runs

    def _require_runs(self) -> None:
        if not self._runs:
            raise ValueError("No runs yet. Call run_all() first.")

    def summary(self) -> pl.DataFrame:
        self._require_runs()
        return compare_runs(self._runs)

    def trajectories(
        self,
        selector: PlayerSelector = PlayerSelector.BY_SKILL,
        n: Optional[int] = 5,
        with_std: bool = False,
        rng: Optional[Union[int, np.random.Generator]] = None,
    ) -> Dict[str, List[TrajectoryPoint]]:
        """
        Trajectories of the same players across every run.

        Players are chosen from the first run whose name is not "Random"
        (or the first run when all are random). Series are labelled
        "<player> (<run name>)".
        """
        self._require_runs()
        reference = next((r for r in self._runs if not _is_random(r.name)), self._runs[0])
        players = RunReport(reference).top_n(selector, n=n, rng=rng)

        series = {}
        for run in self._runs:
            report = RunReport(run)
            for player in players:
                series[f"{player} ({run.name})"] = report.trajectory(player, with_std=with_std)
        return series

    def cumulative_error_rates(self) -> Dict[str, np.ndarray]:
        self._require_runs()
        return {run.name: RunReport(run).cumulative_error_rate() for run in self._runs}

    def cumulative_negative_log_prob_of_truth(self) -> Dict[str, List[Optional[float]]]:
        """Log-loss curves per run; random baselines are left out."""
        self._require_runs()
        return {
            run.name: RunReport(run).cumulative_negative_log_prob_of_truth()
            for run in self._runs
            if not _is_random(run.name)
        }

    def skill_averages(self) -> Dict[str, float]:
        self._require_runs()
        return {run.name: RunReport(run).skill_average() for run in self._runs}

    def __repr__(self) -> str:
        names = ", ".join(loop.name for loop in self.loops)
        return f"ExperimentComparison([{names}])"
