"""Evaluation metrics over sequences of predictions (numpy-based)."""

from typing import List, Optional, Sequence

import numpy as np
import polars as pl

from ..data.types import Prediction


def _errors(predictions: Sequence[Prediction]) -> np.ndarray:
    return np.fromiter((not p.correct for p in predictions), dtype=np.int64, count=len(predictions))


def cumulative_errors(predictions: Sequence[Prediction]) -> np.ndarray:
    """
    Running count of incorrect predictions.

    Index i holds the number of incorrect predictions among 0..i.
    Empty input gives an empty array.
    """
    return np.cumsum(_errors(predictions))


def cumulative_error_rate(predictions: Sequence[Prediction]) -> np.ndarray:
    """Running error rate: cumulative_errors[i] / (i + 1)."""
    errors = cumulative_errors(predictions)
    return errors / np.arange(1, len(errors) + 1, dtype=np.float64)


def cumulative_negative_log_prob_of_truth(
    predictions: Sequence[Prediction],
) -> List[Optional[float]]:
    """
    Running average of -log P(actual outcome).

    Once the running value becomes NaN or infinite it is reported as None
    at that index and at every later index: a degenerate running average
    is not trusted again for the rest of the run.

    Args:
        predictions: Predictions in game order

    Returns:
        List with one entry per prediction (empty for no predictions)
    """
    n = len(predictions)
    if n == 0:
        return []

    surprise = -np.fromiter((p.log_prob_of_truth for p in predictions), dtype=np.float64, count=n)
    with np.errstate(invalid="ignore", over="ignore"):
        running = np.cumsum(surprise) / np.arange(1, n + 1, dtype=np.float64)

    bad = ~np.isfinite(running)
    if bad.any():
        first_bad = int(np.argmax(bad))
        bad[first_bad:] = True

    return [None if bad[i] else float(running[i]) for i in range(n)]


def accuracy(predictions: Sequence[Prediction]) -> float:
    """
    Share of correct predictions.

    Returns NaN for no predictions.
    """
    if len(predictions) == 0:
        return float("nan")
    return float(1.0 - np.mean(_errors(predictions)))


def mean_negative_log_prob(predictions: Sequence[Prediction]) -> Optional[float]:
    """Average -log P(actual outcome); None when empty or degenerate."""
    curve = cumulative_negative_log_prob_of_truth(predictions)
    return curve[-1] if curve else None


def compare_runs(runs: Sequence) -> pl.DataFrame:
    """
    Summarise several rating runs side by side.

    Args:
        runs: RatingRun objects

    Returns:
        DataFrame with one row per run: name, games, players, predictions,
        error_rate, neg_log_prob, skill_average
    """
    rows = []
    for run in runs:
        with run.lock:
            predictions = list(run.predictions)
            means = [g.mean for g in run.store.all_latest().values()]
            games = run.games_processed
            name = run.name

        rates = cumulative_error_rate(predictions)
        rows.append(
            {
                "name": name,
                "games": games,
                "players": len(means),
                "predictions": len(predictions),
                "error_rate": float(rates[-1]) if len(rates) else None,
                "neg_log_prob": mean_negative_log_prob(predictions),
                "skill_average": float(np.mean(means)) if means else 0.0,
            }
        )

    return pl.DataFrame(
        rows,
        schema={
            "name": pl.Utf8,
            "games": pl.Int64,
            "players": pl.Int64,
            "predictions": pl.Int64,
            "error_rate": pl.Float64,
            "neg_log_prob": pl.Float64,
            "skill_average": pl.Float64,
        },
    )
