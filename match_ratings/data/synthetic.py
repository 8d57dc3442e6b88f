"""Synthetic game streams with known true skills."""

from typing import Dict, Optional, Union

import numpy as np

from .dataset import GameDataset
from .types import MatchOutcome, TwoPlayerGame


def sample_two_player_games(
    true_skills: Dict[str, float],
    num_games: int,
    performance_variance: float = 1.0,
    draw_margin: float = 0.0,
    seed: Optional[Union[int, np.random.Generator]] = None,
) -> GameDataset:
    """
    Sample head-to-head games from fixed true skills.

    Each game picks two distinct players uniformly at random; each player's
    performance is drawn from N(skill, performance_variance) and the game is a
    draw when the performances differ by less than ``draw_margin``.

    Args:
        true_skills: Mapping player id -> true skill
        num_games: Number of games to sample
        performance_variance: Per-game performance noise
        draw_margin: Non-negative draw threshold on the performance difference
        seed: Integer seed or an existing numpy Generator

    Returns:
        GameDataset of TwoPlayerGame in sampled order
    """
    if len(true_skills) < 2:
        raise ValueError("Need at least two players to sample games")
    if draw_margin < 0:
        raise ValueError(f"draw_margin must be non-negative, got {draw_margin}")

    rng = seed if isinstance(seed, np.random.Generator) else np.random.default_rng(seed)

    players = list(true_skills)
    skills = np.array([true_skills[p] for p in players], dtype=np.float64)
    n = len(players)

    p1 = rng.integers(0, n, num_games)
    # Offset in [1, n) guarantees p2 != p1
    p2 = (p1 + rng.integers(1, n, num_games)) % n

    noise = np.sqrt(performance_variance)
    perf1 = rng.normal(skills[p1], noise)
    perf2 = rng.normal(skills[p2], noise)
    diff = perf1 - perf2

    games = []
    for i in range(num_games):
        if abs(diff[i]) < draw_margin:
            outcome = MatchOutcome.DRAW
        elif diff[i] > 0:
            outcome = MatchOutcome.FIRST_WIN
        else:
            outcome = MatchOutcome.SECOND_WIN
        games.append(TwoPlayerGame.create(
            id=f"game_{i}",
            player1=players[p1[i]],
            player2=players[p2[i]],
            outcome=outcome,
        ))

    return GameDataset.from_games(games)
