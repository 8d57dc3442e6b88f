"""Tests for game loading and synthetic streams."""

import polars as pl
import pytest

from match_ratings import (
    GameDataset,
    MatchOutcome,
    TeamGame,
    TwoPlayerGame,
    sample_two_player_games,
)


def two_player_frame() -> pl.DataFrame:
    return pl.DataFrame({
        "Id": ["g1", "g2", "g3"],
        "Player1": ["alice", "bob", "carol"],
        "Player2": ["bob", "carol", "alice"],
        "Player1Score": [2, 1, 0],
        "Player2Score": [0, 1, 2],
        "EndTime": [3, 1, 2],
    })


def team_frame() -> pl.DataFrame:
    return pl.DataFrame({
        "Id": ["m1", "m1", "m1", "m1", "m2", "m2"],
        "Team": ["red", "red", "blue", "blue", "red", "blue"],
        "Player": ["a", "b", "c", "d", "a", "c"],
        "Score": [1, 1, 0, 1, 0, 0],
    })


def test_two_player_from_dataframe():
    dataset = GameDataset.from_dataframe(two_player_frame())

    assert dataset.num_games == 3
    assert len(dataset) == 3
    assert [g.id for g in dataset] == ["g1", "g2", "g3"]
    assert [g.outcome for g in dataset] == [
        MatchOutcome.FIRST_WIN, MatchOutcome.DRAW, MatchOutcome.SECOND_WIN,
    ]
    assert dataset.players == ["alice", "bob", "carol"]
    assert dataset.num_players == 3
    assert isinstance(dataset[0], TwoPlayerGame)


def test_sort_by_time():
    dataset = GameDataset.from_dataframe(two_player_frame(), sort_by_time=True)
    assert [g.id for g in dataset] == ["g2", "g3", "g1"]


def test_team_format():
    dataset = GameDataset.from_dataframe(team_frame())

    assert dataset.num_games == 2
    first = dataset[0]
    assert isinstance(first, TeamGame)
    assert [t.id for t in first.teams] == ["red", "blue"]
    assert first.scores == (2, 1)
    assert first.outcome == MatchOutcome.FIRST_WIN
    assert dataset[1].outcome == MatchOutcome.DRAW


def test_missing_columns():
    with pytest.raises(ValueError, match="Missing required columns"):
        GameDataset.from_dataframe(pl.DataFrame({"Id": ["g1"], "Player1": ["a"]}))


def test_parquet_round_trip(tmp_path):
    path = tmp_path / "games.parquet"
    original = GameDataset.from_dataframe(two_player_frame())
    original.write_parquet(path)

    loaded = GameDataset.from_file(path)
    assert loaded.games == original.games


def test_csv_keeps_string_ids(tmp_path):
    path = tmp_path / "games.csv"
    pl.DataFrame({
        "Id": ["001", "002"],
        "Player1": ["7", "8"],
        "Player2": ["8", "7"],
        "Player1Score": [2, 0],
        "Player2Score": [0, 2],
    }).write_csv(path)

    dataset = GameDataset.from_csv(path)
    assert [g.id for g in dataset] == ["001", "002"]
    assert dataset.players == ["7", "8"]
    assert dataset[1].outcome == MatchOutcome.SECOND_WIN


def test_unknown_suffix(tmp_path):
    with pytest.raises(ValueError):
        GameDataset.from_file(tmp_path / "games.json")


def test_head():
    dataset = GameDataset.from_dataframe(two_player_frame())
    assert [g.id for g in dataset.head(2)] == ["g1", "g2"]


def test_create_game_scores():
    game = TwoPlayerGame.create("g", "a", "b", MatchOutcome.DRAW)
    assert game.scores == (1, 1)
    assert TwoPlayerGame.create("g", "a", "b", MatchOutcome.FIRST_WIN).scores == (2, 0)


def test_duplicate_team_player_rejected():
    from match_ratings import Team

    with pytest.raises(ValueError):
        TeamGame(id="bad", teams=(Team("x", {"a": 1}), Team("y", {"a": 0})))


def test_synthetic_games():
    true_skills = {"strong": 3.0, "weak": -3.0, "mid": 0.0}
    dataset = sample_two_player_games(true_skills, 300, draw_margin=0.1, seed=0)

    assert dataset.num_games == 300
    assert all(g.player1 != g.player2 for g in dataset)
    assert set(dataset.players) == set(true_skills)

    strong_vs_weak = [
        g for g in dataset
        if set(g.players) == {"strong", "weak"}
    ]
    strong_wins = sum(
        1 for g in strong_vs_weak
        if (g.outcome == MatchOutcome.FIRST_WIN) == (g.player1 == "strong")
        and g.outcome != MatchOutcome.DRAW
    )
    assert strong_wins / len(strong_vs_weak) > 0.9

    again = sample_two_player_games(true_skills, 300, draw_margin=0.1, seed=0)
    assert again.games == dataset.games


def test_synthetic_validation():
    with pytest.raises(ValueError):
        sample_two_player_games({"solo": 0.0}, 10)
    with pytest.raises(ValueError):
        sample_two_player_games({"a": 0.0, "b": 1.0}, 10, draw_margin=-1.0)


def test_self_play_row_rejected():
    frame = pl.DataFrame({
        "Id": ["g1"],
        "Player1": ["alice"],
        "Player2": ["alice"],
        "Player1Score": [1],
        "Player2Score": [0],
    })
    with pytest.raises(ValueError, match="cannot play themselves"):
        GameDataset.from_dataframe(frame)
