"""Tests for cumulative prediction metrics."""

import math

import numpy as np

from match_ratings import MatchOutcome, Prediction
from match_ratings.evaluation import (
    accuracy,
    cumulative_error_rate,
    cumulative_errors,
    cumulative_negative_log_prob_of_truth,
    mean_negative_log_prob,
)


def make_predictions(pattern, log_probs=None):
    """'C' for a correct prediction, 'I' for an incorrect one."""
    predictions = []
    for i, mark in enumerate(pattern):
        predicted = MatchOutcome.FIRST_WIN if mark == "C" else MatchOutcome.SECOND_WIN
        lp = log_probs[i] if log_probs is not None else math.log(0.5)
        predictions.append(Prediction(predicted=predicted, actual=MatchOutcome.FIRST_WIN, log_prob_of_truth=lp))
    return predictions


def test_cumulative_errors():
    predictions = make_predictions("CICC")
    assert list(cumulative_errors(predictions)) == [0, 1, 1, 1]


def test_cumulative_error_rate():
    rates = cumulative_error_rate(make_predictions("CICC"))
    assert np.allclose(rates, [0.0, 0.5, 1.0 / 3.0, 0.25])


def test_error_counts_never_decrease():
    rng = np.random.default_rng(0)
    pattern = "".join(rng.choice(["C", "I"], size=200))
    errors = cumulative_errors(make_predictions(pattern))
    assert (np.diff(errors) >= 0).all()
    assert errors[-1] == pattern.count("I")


def test_empty_metrics():
    assert len(cumulative_errors([])) == 0
    assert len(cumulative_error_rate([])) == 0
    assert cumulative_negative_log_prob_of_truth([]) == []
    assert math.isnan(accuracy([]))
    assert mean_negative_log_prob([]) is None


def test_negative_log_prob_running_average():
    log_probs = [math.log(0.5), math.log(0.25), math.log(1.0)]
    curve = cumulative_negative_log_prob_of_truth(make_predictions("CCC", log_probs))

    assert len(curve) == 3
    assert np.isclose(curve[0], math.log(2))
    assert np.isclose(curve[1], (math.log(2) + math.log(4)) / 2)
    assert np.isclose(curve[2], (math.log(2) + math.log(4)) / 3)


def test_negative_log_prob_degeneracy_is_sticky():
    """Once undefined the running value stays undefined."""
    log_probs = [math.log(0.5), -math.inf, math.log(0.5), math.log(0.5)]
    curve = cumulative_negative_log_prob_of_truth(make_predictions("CCCC", log_probs))

    assert curve[0] is not None
    assert curve[1:] == [None, None, None]
    assert mean_negative_log_prob(make_predictions("CCCC", log_probs)) is None


def test_nan_log_prob_is_degenerate():
    log_probs = [math.nan, math.log(0.5)]
    curve = cumulative_negative_log_prob_of_truth(make_predictions("CC", log_probs))
    assert curve == [None, None]


def test_draw_insensitive_predictions():
    """Without draws only 'first side won' versus not is scored."""
    draw_vs_loss = Prediction(
        predicted=MatchOutcome.SECOND_WIN,
        actual=MatchOutcome.DRAW,
        include_draws=False,
    )
    assert draw_vs_loss.correct

    strict = Prediction(
        predicted=MatchOutcome.SECOND_WIN,
        actual=MatchOutcome.DRAW,
        include_draws=True,
    )
    assert not strict.correct
    assert list(cumulative_errors([draw_vs_loss, strict])) == [0, 1]


def test_accuracy():
    assert accuracy(make_predictions("CICC")) == 0.75
