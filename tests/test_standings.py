"""
Tests for points tables and net run rate.
"""
import pytest

from cricket_core.engine.standings import PointsTable, TeamRecord
from cricket_core.errors import ConfigurationError


def innings(team, runs, balls=120, wickets=5, all_out=False, max_overs=20):
    return {
        "batting_team": team, "runs": runs, "balls": balls, "wickets": wickets,
        "all_out": all_out, "max_overs": max_overs,
    }


def result(first, second, winner):
    return {"innings1": first, "innings2": second, "winner": winner, "super_overs": []}


class TestNetRunRate:
    """NRR arithmetic."""

    def test_zero_overs_is_zero(self):
        assert TeamRecord(team="A").net_run_rate == 0.0

    def test_runs_per_over(self):
        record = TeamRecord(team="A", runs_scored=180, balls_faced=120, runs_conceded=150, balls_bowled=120)
        assert record.net_run_rate == pytest.approx(1.5)

    def test_all_out_side_charged_full_overs(self):
        table = PointsTable(["A", "B"])
        table.record_result(result(
            innings("A", 100, balls=60, wickets=10, all_out=True),
            innings("B", 101, balls=90),
            winner="B",
        ))
        a = table.records["A"]
        assert a.balls_faced == 120
        assert a.net_run_rate == pytest.approx(100 / 20 - 101 / 15)


class TestPointsTable:
    """Points, ordering and tie-breakers."""

    def test_points_for_win_tie_and_no_result(self):
        table = PointsTable(["A", "B", "C"])
        table.record_result(result(innings("A", 150), innings("B", 140), winner="A"))
        table.record_result(result(innings("B", 150), innings("C", 150), winner=None))
        table.record_no_result("A", "C")

        points = {r.team: r.points for r in table.records.values()}
        assert points == {"A": 3, "B": 1, "C": 2}
        assert table.records["B"].tied == 1
        assert table.records["C"].no_result == 1
        assert table.records["A"].played == 2

    def test_super_over_winner_takes_the_points(self):
        table = PointsTable(["A", "B"])
        tied = result(innings("A", 150), innings("B", 150), winner="B")
        tied["super_overs"] = [{"innings": [innings("B", 10, balls=6), innings("A", 8, balls=6)], "winner": "B"}]
        table.record_result(tied)

        assert table.records["B"].points == 2
        # Super overs don't count toward NRR
        assert table.records["B"].runs_scored == 150
        assert table.records["B"].net_run_rate == 0.0

    def test_ordered_by_points_then_nrr(self):
        table = PointsTable(["A", "B", "C", "D"])
        table.record_result(result(innings("A", 200), innings("B", 100), winner="A"))
        table.record_result(result(innings("C", 160), innings("D", 150), winner="C"))
        table.record_result(result(innings("B", 120), innings("D", 110), winner="B"))

        standings = table.standings()
        assert [s.team for s in standings] == ["A", "C", "B", "D"]
        assert [s.position for s in standings] == [1, 2, 3, 4]
        keys = [(s.points, s.nrr) for s in standings]
        assert keys == sorted(keys, reverse=True)

    def test_ties_keep_insertion_order(self):
        table = PointsTable(["B", "A", "C"])
        assert table.top(3) == ["B", "A", "C"]

    def test_configured_tiebreaker(self):
        table = PointsTable(["A", "B"], tiebreakers=["runs_scored"])
        # Equal points and NRR; B scored more
        table.records["A"].runs_scored = 10
        table.records["B"].runs_scored = 20
        assert table.top(1) == ["B"]

    def test_unknown_tiebreaker(self):
        with pytest.raises(ConfigurationError):
            PointsTable(["A"], tiebreakers=["head_to_head_coin"])

    def test_round_trip(self):
        table = PointsTable(["A", "B"], tiebreakers=["wins"], name="Group A")
        table.record_result(result(innings("A", 150), innings("B", 140), winner="A"))
        restored = PointsTable.from_dict(table.to_dict())
        assert restored.standings() == table.standings()
        assert restored.name == "Group A"
