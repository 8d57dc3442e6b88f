"""
Numba-accelerated core functions for the TrueSkill update.

Skills are Gaussian N(mu, var). A team's performance is the sum of its
players' performances, each N(skill, beta^2). For two teams:

- c^2 = sum(var_team1) + sum(var_team2) + (n1 + n2) * beta^2
- t = (sum(mu_team1) - sum(mu_team2)) / c
- e = draw_margin / c

The outcome truncates the performance difference to d > e (first wins),
|d| <= e (draw) or d < -e (second wins); v and w are the mean and variance
corrections of that truncated Gaussian.
"""

import math

import numpy as np
from numba import njit

# Constants
SQRT_2 = math.sqrt(2.0)
INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)
MIN_DENOM = 1e-10

OUTCOME_FIRST_WIN = 0
OUTCOME_DRAW = 1
OUTCOME_SECOND_WIN = 2


@njit(cache=True, fastmath=True, inline="always")
def _pdf(x: float) -> float:
    """Standard normal PDF."""
    return INV_SQRT_2PI * math.exp(-0.5 * x * x)


@njit(cache=True, fastmath=True, inline="always")
def _cdf(x: float) -> float:
    """Standard normal CDF."""
    return 0.5 * (1.0 + math.erf(x / SQRT_2))


@njit(cache=True, fastmath=True)
def v_win(t: float, e: float) -> float:
    """
    Mean correction for a win: pdf(t - e) / Phi(t - e).

    Falls back to the asymptote -(t - e) when Phi underflows.
    """
    x = t - e
    denom = _cdf(x)
    if denom < MIN_DENOM:
        return -x
    return _pdf(x) / denom


@njit(cache=True, fastmath=True)
def w_win(t: float, e: float, v: float) -> float:
    """Variance correction for a win: v * (v + t - e), clamped to [0, 1]."""
    w = v * (v + t - e)
    if w < 0.0:
        return 0.0
    if w > 1.0:
        return 1.0
    return w


@njit(cache=True, fastmath=True)
def v_draw(t: float, e: float) -> float:
    """
    Mean correction for a draw.

    Computed on |t| and signed back, so the stronger side always moves down.
    """
    abs_t = abs(t)
    a = e - abs_t
    b = -e - abs_t
    denom = _cdf(a) - _cdf(b)
    if denom < MIN_DENOM:
        v = a
    else:
        v = (_pdf(b) - _pdf(a)) / denom
    return -v if t < 0.0 else v


@njit(cache=True, fastmath=True)
def w_draw(t: float, e: float) -> float:
    """Variance correction for a draw, clamped to [0, 1]."""
    abs_t = abs(t)
    a = e - abs_t
    b = -e - abs_t
    denom = _cdf(a) - _cdf(b)
    if denom < MIN_DENOM:
        return 1.0
    v = (_pdf(b) - _pdf(a)) / denom
    w = v * v + (a * _pdf(a) - b * _pdf(b)) / denom
    if w < 0.0:
        return 0.0
    if w > 1.0:
        return 1.0
    return w


@njit(cache=True, fastmath=True)
def update_two_teams(
    mu1: np.ndarray,
    var1: np.ndarray,
    mu2: np.ndarray,
    var2: np.ndarray,
    outcome: int,
    beta_sq: float,
    draw_margin: float,
    min_var: float,
) -> tuple:
    """
    Posterior skills for both teams after one game.

    Args:
        mu1, var1: Skill means/variances of the first team's players
        mu2, var2: Skill means/variances of the second team's players
        outcome: 0 = first wins, 1 = draw, 2 = second wins
        beta_sq: Performance variance per player
        draw_margin: Draw margin on the performance difference (>= 0)
        min_var: Floor for posterior variances

    Returns:
        (new_mu1, new_var1, new_mu2, new_var2)
    """
    n_players = len(mu1) + len(mu2)
    c_sq = var1.sum() + var2.sum() + n_players * beta_sq
    c = math.sqrt(c_sq)

    t = (mu1.sum() - mu2.sum()) / c
    e = draw_margin / c

    if outcome == OUTCOME_FIRST_WIN:
        v = v_win(t, e)
        w = w_win(t, e, v)
    elif outcome == OUTCOME_SECOND_WIN:
        # Same update seen from the second team, sign flipped back
        v = -v_win(-t, e)
        w = w_win(-t, e, -v)
    else:
        v = v_draw(t, e)
        w = w_draw(t, e)

    new_mu1 = np.empty_like(mu1)
    new_var1 = np.empty_like(var1)
    new_mu2 = np.empty_like(mu2)
    new_var2 = np.empty_like(var2)

    for i in range(len(mu1)):
        new_mu1[i] = mu1[i] + var1[i] / c * v
        new_var1[i] = max(var1[i] * (1.0 - var1[i] / c_sq * w), min_var)

    for i in range(len(mu2)):
        new_mu2[i] = mu2[i] - var2[i] / c * v
        new_var2[i] = max(var2[i] * (1.0 - var2[i] / c_sq * w), min_var)

    return new_mu1, new_var1, new_mu2, new_var2


@njit(cache=True, fastmath=True)
def outcome_probabilities(
    mu1: np.ndarray,
    var1: np.ndarray,
    mu2: np.ndarray,
    var2: np.ndarray,
    beta_sq: float,
    draw_margin: float,
) -> tuple:
    """
    Probabilities of (first wins, draw, second wins) before the game.

    The performance difference is N(sum(mu1) - sum(mu2), c^2).
    """
    n_players = len(mu1) + len(mu2)
    c = math.sqrt(var1.sum() + var2.sum() + n_players * beta_sq)
    d = mu1.sum() - mu2.sum()

    p_first = _cdf((d - draw_margin) / c)
    p_second = _cdf((-d - draw_margin) / c)
    p_draw = 1.0 - p_first - p_second
    if p_draw < 0.0:
        p_draw = 0.0

    return p_first, p_draw, p_second
