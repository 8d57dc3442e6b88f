"""Tests for side-by-side experiment comparison."""

import numpy as np
import polars as pl
import pytest

from match_ratings import (
    ExperimentComparison,
    Gaussian,
    OnlineRatingLoop,
    PlayerSelector,
    RandomModel,
    TrueSkill,
    compare_runs,
    sample_two_player_games,
)


def generate_test_games(num_players: int = 15, num_games: int = 600, seed: int = 42):
    true_skills = {f"p{i}": float(s) for i, s in enumerate(np.linspace(-2, 2, num_players))}
    return sample_two_player_games(true_skills, num_games, seed=seed)


def make_comparison():
    prior = Gaussian(0.0, 1.0)
    return ExperimentComparison([
        OnlineRatingLoop(TrueSkill(seed=0), skill_prior=prior),
        OnlineRatingLoop(RandomModel(seed=0), skill_prior=prior),
    ])


def test_run_all(capsys):
    comparison = make_comparison()
    runs = comparison.run_all(iter(generate_test_games()), verbose=True)

    # A one-shot iterator still feeds every loop
    assert [r.name for r in runs] == ["TrueSkill", "Random"]
    assert all(r.games_processed == 600 for r in runs)

    out = capsys.readouterr().out
    assert "Running TrueSkill" in out
    assert "Running Random" in out


def test_summary():
    comparison = make_comparison()
    comparison.run_all(generate_test_games())
    summary = comparison.summary()
    print(summary)

    assert isinstance(summary, pl.DataFrame)
    assert summary.columns == [
        "name", "games", "players", "predictions", "error_rate", "neg_log_prob", "skill_average",
    ]
    assert summary["name"].to_list() == ["TrueSkill", "Random"]

    rates = dict(zip(summary["name"].to_list(), summary["error_rate"].to_list()))
    assert rates["TrueSkill"] < rates["Random"]

    # Random learns nothing
    assert summary.filter(pl.col("name") == "Random")["skill_average"][0] == 0.0


def test_compare_runs_empty_run():
    loop = OnlineRatingLoop(TrueSkill(), skill_prior=Gaussian(0.0, 1.0))
    summary = compare_runs([loop.new_run()])

    assert summary["games"][0] == 0
    assert summary["error_rate"][0] is None
    assert summary["skill_average"][0] == 0.0


def test_trajectories_labelled_per_run():
    comparison = make_comparison()
    comparison.run_all(generate_test_games())
    series = comparison.trajectories(PlayerSelector.BY_SKILL, n=2, with_std=True)

    assert len(series) == 4
    labels = list(series)
    assert labels[0].endswith("(TrueSkill)")
    assert labels[2].endswith("(Random)")

    player = labels[0].split(" (")[0]
    random_points = series[f"{player} (Random)"]
    assert all(p.mean == 0.0 for p in random_points)


def test_log_prob_curves_exclude_random():
    comparison = make_comparison()
    comparison.run_all(generate_test_games(num_games=100))

    curves = comparison.cumulative_negative_log_prob_of_truth()
    assert list(curves) == ["TrueSkill"]
    assert len(curves["TrueSkill"]) == 100

    rates = comparison.cumulative_error_rates()
    assert set(rates) == {"TrueSkill", "Random"}

    averages = comparison.skill_averages()
    assert averages["Random"] == 0.0


def test_requires_runs():
    comparison = make_comparison()
    with pytest.raises(ValueError):
        comparison.summary()
    with pytest.raises(ValueError):
        ExperimentComparison([])
