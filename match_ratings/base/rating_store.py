"""Append-only history of skill and draw-margin beliefs."""

from typing import Dict, List, Optional, Tuple

from ..data.types import Gaussian, Marginals
from ..exceptions import UnknownPlayerError


class RatingStore:
    """
    Per-player skill belief history plus the shared draw-margin history.

    Index 0 of a player's history is the prior; index k is the belief after
    the k-th game that player took part in. Histories only ever grow.

    The draw-margin history starts with the run's initial draw margin and
    gains one entry per processed game.
    """

    def __init__(self, initial_draw_margin: Optional[Gaussian] = None):
        self._skills: Dict[str, List[Gaussian]] = {}
        self._draw_margins: List[Gaussian] = [
            initial_draw_margin if initial_draw_margin is not None else Gaussian.point_mass(0.0)
        ]

    @classmethod
    def from_priors(cls, priors: Optional[Marginals]) -> "RatingStore":
        """Seed a store with every player in priors and its draw margin."""
        if priors is None:
            return cls()
        store = cls(initial_draw_margin=priors.draw_margin)
        for player, prior in priors.skills.items():
            store.ensure_player(player, prior)
        return store

    # =========================================================================
    # Mutation
    # =========================================================================

    def ensure_player(self, player_id: str, default_prior: Gaussian) -> None:
        """Register player_id with history [default_prior] if it is not yet known."""
        if player_id not in self._skills:
            self._skills[player_id] = [default_prior]

    def append_skill(self, player_id: str, belief: Gaussian) -> None:
        self._history_list(player_id).append(belief)

    def append_draw_margin(self, belief: Gaussian) -> None:
        self._draw_margins.append(belief)

    # =========================================================================
    # Queries
    # =========================================================================

    def latest(self, player_id: str) -> Gaussian:
        return self._history_list(player_id)[-1]

    def history(self, player_id: str) -> Tuple[Gaussian, ...]:
        return tuple(self._history_list(player_id))

    def all_latest(self) -> Dict[str, Gaussian]:
        """Latest belief for every known player, in registration order."""
        return {p: h[-1] for p, h in self._skills.items()}

    def games_played(self, player_id: str) -> int:
        return len(self._history_list(player_id)) - 1

    @property
    def players(self) -> List[str]:
        """Known player ids in registration order."""
        return list(self._skills)

    @property
    def draw_margin_history(self) -> Tuple[Gaussian, ...]:
        return tuple(self._draw_margins)

    @property
    def latest_draw_margin(self) -> Gaussian:
        return self._draw_margins[-1]

    def _history_list(self, player_id: str) -> List[Gaussian]:
        try:
            return self._skills[player_id]
        except KeyError:
            raise UnknownPlayerError(player_id) from None

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._skills

    def __len__(self) -> int:
        return len(self._skills)

    def __repr__(self) -> str:
        return (
            f"RatingStore(players={len(self._skills)}, "
            f"draw_margins={len(self._draw_margins)})"
        )
