"""Data types for online skill rating: beliefs, games, marginals and predictions."""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class Gaussian:
    """
    Gaussian belief N(mean, variance).

    Used both for a player's skill belief and for the shared draw-margin
    belief. A variance of zero is a point mass.
    """

    mean: float
    variance: float

    def __post_init__(self):
        if self.variance < 0.0 or math.isnan(self.variance):
            raise ValueError(f"Variance must be non-negative, got {self.variance}")

    @classmethod
    def point_mass(cls, value: float) -> "Gaussian":
        return cls(mean=float(value), variance=0.0)

    @classmethod
    def from_mean_and_std(cls, mean: float, std: float) -> "Gaussian":
        return cls(mean=float(mean), variance=float(std) ** 2)

    @property
    def std(self) -> float:
        return math.sqrt(self.variance)

    @property
    def is_point_mass(self) -> bool:
        return self.variance == 0.0

    def log_prob(self, x: float) -> float:
        """Log density at x (0 / -inf for a point mass)."""
        if self.is_point_mass:
            return 0.0 if x == self.mean else -math.inf
        z = (x - self.mean) ** 2 / self.variance
        return -0.5 * (z + math.log(2.0 * math.pi * self.variance))

    def __str__(self) -> str:
        return f"Gaussian({self.mean:.4g}, {self.variance:.4g})"


@dataclass(frozen=True)
class PointEstimate:
    """A skill known (or assumed) exactly, e.g. an Elo-style scalar rating."""

    value: float

    @property
    def mean(self) -> float:
        return self.value

    @property
    def variance(self) -> float:
        return 0.0


SkillEstimate = Union[Gaussian, PointEstimate]


class MatchOutcome(IntEnum):
    """Outcome of a game between two players or two teams."""

    FIRST_WIN = 0
    DRAW = 1
    SECOND_WIN = 2


def _outcome_from_scores(first: float, second: float) -> MatchOutcome:
    if first == second:
        return MatchOutcome.DRAW
    return MatchOutcome.FIRST_WIN if first > second else MatchOutcome.SECOND_WIN


@dataclass(frozen=True)
class Game(ABC):
    """A single game. Immutable once created."""

    id: str

    @property
    @abstractmethod
    def players(self) -> Tuple[str, ...]:
        """Participating player ids in game order."""

    @property
    @abstractmethod
    def scores(self) -> Tuple[int, ...]:
        """Scores per player (two-player) or per team (team games)."""

    @property
    @abstractmethod
    def outcome(self) -> MatchOutcome:
        pass

    @property
    @abstractmethod
    def draw_proportion(self) -> float:
        pass


@dataclass(frozen=True)
class TwoPlayerGame(Game):
    """A head-to-head game; the higher score wins, equal scores draw."""

    player1: str = ""
    player2: str = ""
    player1_score: int = 0
    player2_score: int = 0

    def __post_init__(self):
        if self.player1 == self.player2:
            raise ValueError(f"Game {self.id}: player {self.player1!r} cannot play themselves")

    @property
    def players(self) -> Tuple[str, ...]:
        return (self.player1, self.player2)

    @property
    def scores(self) -> Tuple[int, ...]:
        return (self.player1_score, self.player2_score)

    @property
    def outcome(self) -> MatchOutcome:
        return _outcome_from_scores(self.player1_score, self.player2_score)

    @property
    def draw_proportion(self) -> float:
        return 1.0 if self.outcome == MatchOutcome.DRAW else 0.0

    @classmethod
    def create(
        cls,
        id: str,
        player1: str,
        player2: str,
        outcome: MatchOutcome,
    ) -> "TwoPlayerGame":
        """Build a game whose scores encode the given outcome (2-0, 1-1 or 0-2)."""
        outcome = MatchOutcome(outcome)
        return cls(
            id=id,
            player1=player1,
            player2=player2,
            player1_score=2 - int(outcome),
            player2_score=int(outcome),
        )


@dataclass(frozen=True)
class Team:
    """A team within a TeamGame. The team score is the sum of its players' scores."""

    id: str
    player_scores: Dict[str, int] = field(default_factory=dict)

    @property
    def players(self) -> Tuple[str, ...]:
        return tuple(self.player_scores)

    @property
    def score(self) -> int:
        return sum(self.player_scores.values())

    def __str__(self) -> str:
        return f"{self.id}: {self.score}"


@dataclass(frozen=True)
class TeamGame(Game):
    """
    A game between teams of players.

    Any number of teams can be represented, but outcomes (and so the
    bundled models) are only defined for exactly two teams; free-for-all
    games with three or more teams are rejected by TrueSkill.train.
    """

    teams: Tuple[Team, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "teams", tuple(self.teams))
        seen = set()
        for team in self.teams:
            for player in team.players:
                if player in seen:
                    raise ValueError(f"Player {player!r} appears in more than one team")
                seen.add(player)

    @property
    def players(self) -> Tuple[str, ...]:
        return tuple(p for team in self.teams for p in team.players)

    @property
    def scores(self) -> Tuple[int, ...]:
        return tuple(team.score for team in self.teams)

    @property
    def team_counts(self) -> Tuple[int, ...]:
        return tuple(len(team.player_scores) for team in self.teams)

    @property
    def outcome(self) -> MatchOutcome:
        if len(self.teams) != 2:
            raise ValueError("Outcome is only defined for exactly two teams")
        return _outcome_from_scores(self.teams[0].score, self.teams[1].score)

    @property
    def draw_proportion(self) -> float:
        # Average over all team pairings, not just successive ranks
        n = len(self.teams)
        possible = n * (n - 1) // 2
        if possible == 0:
            return 0.0
        scores = self.scores
        ties = sum(
            1
            for i in range(n)
            for j in range(i + 1, n)
            if scores[i] == scores[j]
        )
        return ties / possible

    def team_index(self, player: str) -> int:
        """Index of the team containing player, or -1."""
        for i, team in enumerate(self.teams):
            if player in team.player_scores:
                return i
        return -1


@dataclass
class Marginals:
    """
    Snapshot of beliefs: a skill Gaussian per player plus the draw margin.

    Serves as Priors (fed into a game) and Posteriors (returned by a model).
    """

    skills: Dict[str, Gaussian] = field(default_factory=dict)
    draw_margin: Gaussian = field(default_factory=lambda: Gaussian.point_mass(0.0))

    def restrict(self, players: Iterable[str]) -> "Marginals":
        """Copy limited to the given players (all must be present)."""
        return Marginals(
            skills={p: self.skills[p] for p in players},
            draw_margin=self.draw_margin,
        )

    def copy(self) -> "Marginals":
        return Marginals(skills=dict(self.skills), draw_margin=self.draw_margin)

    def __str__(self) -> str:
        return ", ".join(f"{k}: {v}" for k, v in self.skills.items())


@dataclass
class Results:
    """Output of training a model on one game."""

    posteriors: Marginals

    @property
    def posterior_skill_means(self) -> np.ndarray:
        return np.array([g.mean for g in self.posteriors.skills.values()], dtype=np.float64)

    @property
    def posterior_skill_variances(self) -> np.ndarray:
        return np.array([g.variance for g in self.posteriors.skills.values()], dtype=np.float64)

    @property
    def conservative_skill_estimates(self) -> np.ndarray:
        return self.posterior_skill_means - np.sqrt(3.0 * self.posterior_skill_variances)


@dataclass(frozen=True)
class Prediction:
    """
    A model's prediction for a game, made before training on it.

    Attributes:
        predicted: Predicted outcome
        actual: Actual outcome of the game
        log_prob_of_truth: Log probability the model gave the actual outcome
        include_draws: Whether draws count as a distinct outcome when scoring
    """

    predicted: MatchOutcome
    actual: MatchOutcome
    log_prob_of_truth: float = math.nan
    include_draws: bool = True

    @property
    def correct(self) -> bool:
        if self.include_draws:
            return self.predicted == self.actual
        return (self.actual == MatchOutcome.FIRST_WIN) == (self.predicted == MatchOutcome.FIRST_WIN)


def skills_to_arrays(skills: List[Gaussian]) -> Tuple[np.ndarray, np.ndarray]:
    """Split Gaussians into contiguous (mean, variance) arrays."""
    mu = np.ascontiguousarray([g.mean for g in skills], dtype=np.float64)
    var = np.ascontiguousarray([g.variance for g in skills], dtype=np.float64)
    return mu, var
