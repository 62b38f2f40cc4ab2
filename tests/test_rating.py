"""Tests for the rating model."""

import pytest

from competitions.models import RatingEntry, RatingTable, parse_competition
from competitions.services.rating import (
    game_rating,
    is_blowout,
    pre_ratings,
    project_ratings,
    project_team,
    rating_diff,
)
from tests.helpers import completed


class TestRatingDiff:
    """Tests for the margin curve."""

    def test_one_point_win_is_minimum_swing(self):
        for winner in (1, 2, 7, 15, 21):
            assert rating_diff(winner, winner - 1) == 125

    def test_known_values(self):
        assert rating_diff(15, 10) == 454
        assert rating_diff(15, 5) == 600

    def test_saturates_at_maximum(self):
        """Once the loser has half the winner's score or less, the cap applies."""
        assert rating_diff(15, 0) == 600
        assert rating_diff(13, 4) == 600

    def test_not_a_win_is_zero(self):
        assert rating_diff(10, 10) == 0
        assert rating_diff(8, 15) == 0

    def test_monotonic_in_margin(self):
        """For a fixed winning score, a bigger margin never lowers the swing."""
        for winner in (11, 13, 15, 17):
            diffs = [rating_diff(winner, loser) for loser in range(winner - 1, -1, -1)]
            assert diffs == sorted(diffs)

    def test_range(self):
        for winner in range(1, 26):
            for loser in range(winner):
                assert 125 <= rating_diff(winner, loser) <= 600


class TestGameRating:
    """Tests for the per-game rating."""

    def test_win_adds_swing(self):
        assert game_rating(1000, 15, 10) == 1454

    def test_loss_subtracts_swing(self):
        assert game_rating(1000, 10, 15) == 546

    def test_one_point_game(self):
        assert game_rating(1500, 15, 14) == 1625
        assert game_rating(1500, 14, 15) == 1375

    def test_tie_earns_opponent_rating(self):
        assert game_rating(1200, 12, 12) == 1200


class TestBlowout:
    """Tests for the blowout classifier."""

    def test_qualifies(self):
        assert is_blowout(1800, 1100, 15, 3, 5) is True

    def test_gap_too_small(self):
        assert is_blowout(1600, 1100, 15, 3, 5) is False

    def test_score_not_lopsided(self):
        # 15 is not above 2 * 7 + 1
        assert is_blowout(1800, 1100, 15, 7, 5) is False

    def test_too_few_other_results(self):
        assert is_blowout(1800, 1100, 15, 3, 4) is False

    def test_unknown_rating(self):
        assert is_blowout(None, 1100, 15, 3, 10) is False
        assert is_blowout(1800, None, 15, 3, 10) is False


class TestProjection:
    """Tests for per-team projections."""

    def test_mean_of_game_ratings(self):
        ratings = {"A": 1000.0, "B": 1000.0, "C": 1200.0}
        matchups = [
            completed("m1", "A", "B", 15, 10),
            completed("m2", "C", "A", 15, 14),
        ]
        snapshot = project_team("A", matchups, ratings)

        # 1000 + 454 and 1200 - 125
        assert [g.rating for g in snapshot.games] == [1454, 1075]
        assert snapshot.projected == pytest.approx((1454 + 1075) / 2)
        assert snapshot.delta == pytest.approx(snapshot.projected - 1000)

    def test_unknown_opponent_excluded(self):
        ratings = {"A": 1000.0, "B": 1000.0, "X": None}
        matchups = [
            completed("m1", "A", "B", 15, 10),
            completed("m2", "A", "X", 15, 0),
        ]
        snapshot = project_team("A", matchups, ratings)

        assert len(snapshot.games) == 2
        assert snapshot.games[1].rating is None
        assert snapshot.projected == 1454

    def test_no_games_keeps_pre_rating(self):
        snapshot = project_team("A", [], {"A": 1300.0})

        assert snapshot.projected == 1300.0
        assert snapshot.delta == 0
        assert snapshot.games == []

    def test_unknown_team_has_no_projection(self):
        snapshot = project_team("A", [completed("m1", "A", "B", 15, 10)], {"B": 1000.0})

        assert snapshot.pre_rating is None
        assert snapshot.projected is None
        assert snapshot.delta is None
        assert snapshot.games[0].rating is None

    def test_incomplete_matchups_skipped(self):
        from tests.helpers import scheduled

        snapshot = project_team("A", [scheduled("m1", "A", "B")], {"A": 1000.0, "B": 900.0})
        assert snapshot.games == []

    def test_blowout_flag_is_informational(self):
        """A blowout loss is flagged but still counts towards the mean."""
        ratings = {f"t{i}": 1000.0 for i in range(6)}
        ratings["fav"] = 1800.0
        ratings["dog"] = 1100.0
        matchups = [completed(f"w{i}", "fav", f"t{i}", 15, 10) for i in range(5)]
        matchups.append(completed("blow", "fav", "dog", 15, 2))

        snapshot = project_team("dog", matchups, ratings)

        assert snapshot.games[0].blowout is True
        assert snapshot.projected == 1800 - 600


class TestProjectRatings:
    """Tests for projections over a whole competition."""

    def test_lookup_by_team_name(self, pool_play_data):
        competition = parse_competition(pool_play_data)
        competition.pool_matchups = [completed("A-1", "t1", "t2", 15, 10, pool_id="A")]
        names = {"t1": "Revolver", "t2": "Ring of Fire", "t3": "Sockeye"}
        table = RatingTable({
            "revolver": RatingEntry(rating=2000, rank=1),
            "ring-of-fire": RatingEntry(rating=1900, rank=4),
        })

        snapshots = project_ratings(competition, names, table)

        assert set(snapshots) == {"t1", "t2", "t3"}
        assert snapshots["t1"].rank == 1
        assert snapshots["t2"].pre_rating == 1900
        assert snapshots["t1"].projected == 1900 + 454
        assert snapshots["t3"].pre_rating is None

    def test_pre_ratings_fall_back_to_id(self):
        table = RatingTable({"t9": RatingEntry(rating=1234)})
        assert pre_ratings(["t9", "t8"], {}, table) == {"t9": 1234, "t8": None}
