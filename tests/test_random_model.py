"""Tests for the random baseline model."""

import math

import numpy as np
import pytest

from match_ratings import (
    Gaussian,
    Marginals,
    MatchOutcome,
    OnlineRatingLoop,
    RandomModel,
    RandomModelConfig,
    RunReport,
    Team,
    TeamGame,
    TwoPlayerGame,
)


def test_train_returns_priors_unchanged():
    model = RandomModel(seed=0)
    priors = Marginals(
        skills={"a": Gaussian(1.0, 0.5), "b": Gaussian(-1.0, 2.0), "c": Gaussian(0.0, 1.0)},
        draw_margin=Gaussian(0.2, 0.0),
    )
    game = TwoPlayerGame.create("g", "a", "b", MatchOutcome.FIRST_WIN)
    post = model.train(game, ["a", "b"], priors).posteriors

    assert post.skills == {"a": Gaussian(1.0, 0.5), "b": Gaussian(-1.0, 2.0)}
    assert post.draw_margin == Gaussian(0.2, 0.0)


def test_outcome_distribution():
    assert np.allclose(RandomModel().outcome_distribution, [0.5, 0.0, 0.5])

    with_draws = RandomModel(empirical_draw_proportion=0.2, include_draws=True)
    assert np.allclose(with_draws.outcome_distribution, np.array([0.8, 0.2, 0.8]) / 1.8)
    assert with_draws.config == RandomModelConfig(empirical_draw_proportion=0.2, include_draws=True)

    with pytest.raises(ValueError):
        RandomModel(empirical_draw_proportion=1.5)


def test_predictions_are_seeded():
    game = TwoPlayerGame.create("g", "a", "b", MatchOutcome.FIRST_WIN)
    marginals = Marginals(skills={"a": Gaussian(0.0, 1.0), "b": Gaussian(0.0, 1.0)})

    repeated = RandomModel(seed=1)
    first = [repeated.predict_outcome(game, marginals).predicted for _ in range(10)]
    assert len(set(first)) == 1

    games = [TwoPlayerGame.create(str(i), "a", "b", MatchOutcome.FIRST_WIN) for i in range(40)]
    model_a, model_b = RandomModel(seed=5), RandomModel(seed=5)
    seq_a = [model_a.predict_outcome(g, marginals).predicted for g in games]
    seq_b = [model_b.predict_outcome(g, marginals).predicted for g in reversed(games)]

    # Guesses depend on the game, not on how many predictions came before
    assert seq_a == list(reversed(seq_b))
    assert set(seq_a) == {MatchOutcome.FIRST_WIN, MatchOutcome.SECOND_WIN}


def test_prediction_log_prob():
    game = TwoPlayerGame.create("g", "a", "b", MatchOutcome.DRAW)
    marginals = Marginals(skills={"a": Gaussian(0.0, 1.0), "b": Gaussian(0.0, 1.0)})

    coin = RandomModel(seed=0).predict_outcome(game, marginals)
    assert coin.log_prob_of_truth == pytest.approx(math.log(0.5))
    assert coin.include_draws is False

    with_draws = RandomModel(empirical_draw_proportion=0.2, include_draws=True, seed=0)
    prediction = with_draws.predict_outcome(game, marginals)
    assert prediction.log_prob_of_truth == pytest.approx(math.log(0.2 / 1.8))


def test_unsupported_game_has_no_prediction():
    game = TeamGame(id="ffa", teams=(Team("x", {"a": 1}), Team("y", {"b": 0}), Team("z", {"c": 0})))
    assert RandomModel(seed=0).predict_outcome(game, Marginals()) is None


def test_random_error_rate_near_half():
    """Over many games a coin flip is wrong about half the time."""
    rng = np.random.default_rng(0)
    games = [
        TwoPlayerGame.create(str(i), "a", "b", MatchOutcome(int(rng.choice([0, 2]))))
        for i in range(2000)
    ]
    run = OnlineRatingLoop(RandomModel(seed=0), skill_prior=Gaussian(0.0, 1.0)).run(games)
    report = RunReport(run)

    rate = report.cumulative_error_rate()[-1]
    print(f"Random error rate: {rate:.3f}")
    assert 0.45 < rate < 0.55
    assert run.name == "Random"
    # Beliefs never move
    assert run.store.latest("a") == Gaussian(0.0, 1.0)
    assert len(run.store.history("a")) == 2001
