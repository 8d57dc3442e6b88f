"""Game stream loading.

Uses Polars to read and order game tables. Two layouts are understood:

- two-player (wide): Id, Player1, Player2, Player1Score, Player2Score
- team (long): Id, Team, Player, Score  (one row per player per game)

Rows keep their arrival order unless ``sort_by_time`` is requested and an
``EndTime`` column is present.
"""

from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

import polars as pl

from .types import Game, Team, TeamGame, TwoPlayerGame

TWO_PLAYER_COLUMNS = ("Id", "Player1", "Player2", "Player1Score", "Player2Score")
TEAM_COLUMNS = ("Id", "Team", "Player", "Score")


class GameDataset:
    """
    Ordered, re-iterable collection of games.

    Iterating yields games in arrival order, which is the order an
    online replay must consume them in.
    """

    def __init__(self, games: Optional[Iterable[Game]] = None):
        self._games: List[Game] = list(games) if games is not None else []

    @classmethod
    def from_games(cls, games: Iterable[Game]) -> "GameDataset":
        return cls(games)

    @classmethod
    def from_dataframe(cls, df, sort_by_time: bool = False) -> "GameDataset":
        """
        Create dataset from a DataFrame (polars, or anything ``pl.from_pandas`` accepts).

        The layout is detected from the columns present.
        """
        if not isinstance(df, pl.DataFrame):
            df = pl.from_pandas(df)

        if sort_by_time and "EndTime" in df.columns:
            df = df.sort("EndTime", maintain_order=True)

        if "Team" in df.columns:
            return cls(_team_games(df))
        return cls(_two_player_games(df))

    @classmethod
    def from_parquet(cls, path: Union[str, Path], sort_by_time: bool = False) -> "GameDataset":
        return cls.from_dataframe(pl.read_parquet(path), sort_by_time=sort_by_time)

    @classmethod
    def from_csv(cls, path: Union[str, Path], sort_by_time: bool = False) -> "GameDataset":
        # Read every column as text so ids are never coerced to integers
        df = pl.read_csv(path, infer_schema_length=0)
        return cls.from_dataframe(df, sort_by_time=sort_by_time)

    @classmethod
    def from_file(cls, path: Union[str, Path], sort_by_time: bool = False) -> "GameDataset":
        """Load from .parquet or .csv based on the file suffix."""
        suffix = Path(path).suffix.lower()
        if suffix == ".parquet":
            return cls.from_parquet(path, sort_by_time=sort_by_time)
        if suffix == ".csv":
            return cls.from_csv(path, sort_by_time=sort_by_time)
        raise ValueError(f"Unsupported file type: {suffix!r} (expected .parquet or .csv)")

    @property
    def num_games(self) -> int:
        return len(self._games)

    @property
    def games(self) -> List[Game]:
        return list(self._games)

    @property
    def players(self) -> List[str]:
        """Unique player ids in order of first appearance."""
        seen = {}
        for game in self._games:
            for p in game.players:
                seen.setdefault(p, None)
        return list(seen)

    @property
    def num_players(self) -> int:
        return len(self.players)

    def head(self, n: int) -> "GameDataset":
        """First n games."""
        return GameDataset(self._games[:n])

    def to_dataframe(self) -> pl.DataFrame:
        """Export to the two-player or team layout."""
        if self._games and all(isinstance(g, TwoPlayerGame) for g in self._games):
            return pl.DataFrame({
                "Id": [g.id for g in self._games],
                "Player1": [g.player1 for g in self._games],
                "Player2": [g.player2 for g in self._games],
                "Player1Score": [g.player1_score for g in self._games],
                "Player2Score": [g.player2_score for g in self._games],
            })

        rows = {"Id": [], "Team": [], "Player": [], "Score": []}
        for game in self._games:
            if not isinstance(game, TeamGame):
                raise ValueError("Mixed game types cannot be exported to a single table")
            for team in game.teams:
                for player, score in team.player_scores.items():
                    rows["Id"].append(game.id)
                    rows["Team"].append(team.id)
                    rows["Player"].append(player)
                    rows["Score"].append(score)
        return pl.DataFrame(rows, schema={"Id": pl.Utf8, "Team": pl.Utf8,
                                          "Player": pl.Utf8, "Score": pl.Int64})

    def write_parquet(self, path: Union[str, Path]) -> None:
        self.to_dataframe().write_parquet(path)

    def write_csv(self, path: Union[str, Path]) -> None:
        self.to_dataframe().write_csv(path)

    def __iter__(self) -> Iterator[Game]:
        return iter(self._games)

    def __len__(self) -> int:
        return self.num_games

    def __getitem__(self, idx: int) -> Game:
        return self._games[idx]

    def __repr__(self) -> str:
        if not self._games:
            return "GameDataset(empty)"
        return f"GameDataset(games={self.num_games:,}, players={self.num_players:,})"


def _require(df: pl.DataFrame, columns) -> None:
    missing = set(columns) - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {sorted(missing)}")


def _two_player_games(df: pl.DataFrame) -> List[Game]:
    _require(df, TWO_PLAYER_COLUMNS)
    df = df.select(
        pl.col("Id").cast(pl.Utf8),
        pl.col("Player1").cast(pl.Utf8),
        pl.col("Player2").cast(pl.Utf8),
        pl.col("Player1Score").cast(pl.Int64),
        pl.col("Player2Score").cast(pl.Int64),
    )
    return [
        TwoPlayerGame(
            id=row[0],
            player1=row[1],
            player2=row[2],
            player1_score=row[3],
            player2_score=row[4],
        )
        for row in df.iter_rows()
    ]


def _team_games(df: pl.DataFrame) -> List[Game]:
    _require(df, TEAM_COLUMNS)
    df = df.select(
        pl.col("Id").cast(pl.Utf8),
        pl.col("Team").cast(pl.Utf8),
        pl.col("Player").cast(pl.Utf8),
        pl.col("Score").cast(pl.Int64),
    )

    # Group rows by game, keeping first-appearance order of games and teams
    grouped = df.group_by("Id", maintain_order=True).agg(
        pl.col("Team"), pl.col("Player"), pl.col("Score")
    )

    games: List[Game] = []
    for game_id, team_ids, players, scores in grouped.iter_rows():
        teams = {}
        for team_id, player, score in zip(team_ids, players, scores):
            teams.setdefault(team_id, {})[player] = score
        games.append(TeamGame(
            id=game_id,
            teams=tuple(Team(id=t, player_scores=ps) for t, ps in teams.items()),
        ))
    return games
