"""
Tests for fixture generation, stage progression and tournament lifecycle.
"""
import json
from datetime import date, timedelta

import pytest

from cricket_core.engine.formats import MatchFormat
from cricket_core.engine.tournament_engine import (
    FixtureType, TournamentConfig, TournamentEngine, TournamentFormat,
    TournamentStatus, bracket_positions, round_name,
)
from cricket_core.errors import Cancelled, ConfigurationError, FixtureFinalized
from cricket_core.events import EventKind, EventQueue

from conftest import make_team, make_venue

NAMES = ["Alpha", "Bravo", "Charlie", "Delta", "Echo", "Foxtrot", "Golf", "Hotel"]


def squads(count):
    return [make_team(name) for name in NAMES[:count]]


def tournament(count=4, seed=1, venues=None, events=None, **config):
    return TournamentEngine(
        TournamentConfig(**config), squads(count), venues, seed=seed, events=events,
    )


class TestRoundRobin:
    """Single and double round-robin leagues."""

    @pytest.mark.parametrize("count", [3, 4, 6])
    def test_fixture_count(self, count):
        engine = tournament(count, format=TournamentFormat.ROUND_ROBIN)
        assert len(engine.fixtures) == count * (count - 1) // 2
        pairs = {frozenset((f.team1, f.team2)) for f in engine.fixtures.values()}
        assert len(pairs) == len(engine.fixtures)

    def test_double_round_robin_is_home_and_away(self):
        engine = tournament(4, format=TournamentFormat.ROUND_ROBIN, double_round_robin=True)
        assert len(engine.fixtures) == 12
        ordered = {(f.team1, f.team2) for f in engine.fixtures.values()}
        assert len(ordered) == 12

    def test_standings_totally_ordered_after_all_matches(self):
        engine = tournament(4, format=TournamentFormat.ROUND_ROBIN)
        winner = engine.simulate_all()

        standings = engine.get_standings()
        assert len(standings) == 4
        assert all(s.played == 3 for s in standings)
        keys = [(s.points, s.nrr) for s in standings]
        assert keys == sorted(keys, reverse=True)
        assert sum(s.points for s in standings) == 2 * 6
        assert winner == standings[0].team
        assert engine.runner_up == standings[1].team
        assert engine.status == TournamentStatus.COMPLETED

    def test_dates_and_venues(self):
        venues = [make_venue("North"), make_venue("South")]
        engine = tournament(
            4, venues=venues, format=TournamentFormat.ROUND_ROBIN,
            start_date=date(2026, 4, 1), days_between_matches=2,
        )
        fixtures = sorted(engine.fixtures.values(), key=lambda f: f.id)
        assert [f.venue for f in fixtures] == ["North", "South"] * 3
        assert fixtures[0].date == date(2026, 4, 1)
        assert fixtures[-1].date == date(2026, 4, 1) + timedelta(days=10)

    def test_schedule_avoids_back_to_back_where_possible(self):
        engine = tournament(6, format=TournamentFormat.ROUND_ROBIN)
        fixtures = sorted(engine.fixtures.values(), key=lambda f: f.id)
        first, second = fixtures[0], fixtures[1]
        assert not {first.team1, first.team2} & {second.team1, second.team2}


class TestKnockout:
    """Single elimination with byes."""

    def test_bracket_positions(self):
        assert bracket_positions(2) == [1, 2]
        assert bracket_positions(4) == [1, 4, 2, 3]
        assert bracket_positions(8) == [1, 8, 4, 5, 2, 7, 3, 6]

    def test_round_names(self):
        assert round_name(2) == "Final"
        assert round_name(4) == "Semi-finals"
        assert round_name(8) == "Quarter-finals"
        assert round_name(16) == "Round of 16"

    def test_byes_go_to_top_seeds(self):
        engine = tournament(5, format=TournamentFormat.KNOCKOUT)
        first_round = [engine.fixtures[i] for i in engine.current_stage.fixture_ids]

        assert engine.current_stage.name == "Quarter-finals"
        assert len(first_round) == 1
        assert {first_round[0].team1, first_round[0].team2} == {"Delta", "Echo"}

    def test_knockout_runs_to_a_champion(self):
        engine = tournament(5, format=TournamentFormat.KNOCKOUT)
        champion = engine.simulate_all()

        assert champion in NAMES[:5]
        assert len(engine.fixtures) == 4
        assert [s.name for s in engine.stages] == ["Quarter-finals", "Semi-finals", "Final"]
        final = engine.fixtures[max(engine.fixtures)]
        assert final.fixture_type == FixtureType.FINAL
        assert champion == final.winner
        assert engine.runner_up == final.loser
        assert engine.tables == {}

    def test_every_knockout_fixture_has_a_winner(self):
        engine = tournament(4, format=TournamentFormat.KNOCKOUT, super_over_enabled=False)
        engine.simulate_all()
        assert all(f.winner in (f.team1, f.team2) for f in engine.fixtures.values())


class TestGroupStage:
    """Groups feeding a knockout bracket."""

    def test_groups_filled_round_robin(self):
        engine = tournament(8, format=TournamentFormat.GROUP_STAGE, num_groups=2)
        assert engine.groups == {
            "Group A": ["Alpha", "Charlie", "Echo", "Golf"],
            "Group B": ["Bravo", "Delta", "Foxtrot", "Hotel"],
        }
        assert len(engine.fixtures) == 12
        assert all(f.fixture_type == FixtureType.GROUP for f in engine.fixtures.values())
        for fixture in engine.fixtures.values():
            assert fixture.team1 in engine.groups[fixture.group]
            assert fixture.team2 in engine.groups[fixture.group]

    def test_advances_qualifiers_into_semi_finals(self):
        engine = tournament(8, format=TournamentFormat.GROUP_STAGE, num_groups=2, qualifiers_per_group=2)
        for fixture in engine.pending_fixtures():
            engine.play_match(fixture.id)
        assert engine.advance()

        a = engine.tables["Group A"].top(2)
        b = engine.tables["Group B"].top(2)
        semis = [engine.fixtures[i] for i in engine.current_stage.fixture_ids]
        assert engine.current_stage.name == "Semi-finals"
        # Winners first, then runners-up: A1 v B2, B1 v A2
        assert {(f.team1, f.team2) for f in semis} == {(a[0], b[1]), (b[0], a[1])}

        champion = engine.simulate_all()
        assert champion in a + b
        assert len(engine.fixtures) == 12 + 2 + 1

    def test_groups_too_small(self):
        with pytest.raises(ConfigurationError):
            tournament(3, format=TournamentFormat.GROUP_STAGE, num_groups=2)

    def test_too_many_qualifiers(self):
        with pytest.raises(ConfigurationError):
            tournament(4, format=TournamentFormat.GROUP_STAGE, num_groups=2, qualifiers_per_group=3)


class TestHybridPlayoffs:
    """League followed by IPL-style playoffs."""

    def test_playoff_path(self):
        engine = tournament(4, format=TournamentFormat.HYBRID, playoff_teams=4)
        for fixture in engine.pending_fixtures():
            engine.play_match(fixture.id)
        top = engine.tables["League"].top(4)
        engine.advance()

        playoffs = {engine.fixtures[i].fixture_type: engine.fixtures[i] for i in engine.current_stage.fixture_ids}
        q1, elim = playoffs[FixtureType.QUALIFIER_1], playoffs[FixtureType.ELIMINATOR]
        assert (q1.team1, q1.team2) == (top[0], top[1])
        assert (elim.team1, elim.team2) == (top[2], top[3])

        engine.play_match(q1.id)
        engine.play_match(elim.id)
        engine.advance()
        q2 = engine.fixtures[engine.current_stage.fixture_ids[0]]
        assert q2.fixture_type == FixtureType.QUALIFIER_2
        assert {q2.team1, q2.team2} == {q1.loser, elim.winner}

        engine.play_match(q2.id)
        engine.advance()
        final = engine.fixtures[engine.current_stage.fixture_ids[0]]
        assert final.fixture_type == FixtureType.FINAL
        assert {final.team1, final.team2} == {q1.winner, q2.winner}

        engine.play_match(final.id)
        engine.advance()
        assert engine.winner == final.winner
        assert engine.is_complete

    def test_two_team_playoff_is_a_final(self):
        engine = tournament(4, format=TournamentFormat.HYBRID, playoff_teams=2)
        engine.simulate_all()
        types = [f.fixture_type for f in engine.fixtures.values()]
        assert types.count(FixtureType.LEAGUE) == 6
        assert types.count(FixtureType.FINAL) == 1
        assert len(types) == 7

    def test_invalid_playoff_size(self):
        with pytest.raises(ConfigurationError):
            TournamentEngine({"format": "hybrid", "playoff_teams": 3}, squads(4))


class TestLifecycle:
    """Advance, replay, pause and cancel."""

    def test_advance_is_a_noop_until_stage_complete(self):
        engine = tournament(4, format=TournamentFormat.HYBRID)
        first = engine.pending_fixtures()[0]
        engine.play_match(first.id)

        assert engine.advance() is False
        assert engine.current_stage.name == "League"

    def test_replaying_a_fixture_fails(self):
        engine = tournament(4)
        fixture = engine.pending_fixtures()[0]
        engine.play_match(fixture.id)
        with pytest.raises(FixtureFinalized):
            engine.play_match(fixture.id)

    def test_paused_tournament_plays_nothing(self):
        engine = tournament(4)
        engine.pause()
        fixture = engine.pending_fixtures()[0]
        assert engine.play_match(fixture.id) is None
        assert not fixture.completed
        assert engine.simulate_all() is None

        engine.resume()
        assert engine.simulate_all() is not None

    def test_cancel_is_terminal(self):
        engine = tournament(4)
        engine.cancel()
        assert engine.status == TournamentStatus.CANCELLED
        assert engine.winner is None
        with pytest.raises(Cancelled):
            engine.play_match(1)
        with pytest.raises(Cancelled):
            engine.advance()

    def test_unplayable_venue_is_a_no_result(self):
        venues = [make_venue("Swamp", rain_probability=0.9)]
        engine = tournament(3, venues=venues, format=TournamentFormat.ROUND_ROBIN)
        fixture = engine.play_match(engine.pending_fixtures()[0].id)

        assert fixture.no_result
        assert fixture.winner is None
        assert engine.tables["League"].records[fixture.team1].points == 1

    def test_match_completion_precedes_stage_advance(self):
        events = EventQueue()
        engine = tournament(4, events=events, format=TournamentFormat.HYBRID, playoff_teams=2)
        engine.simulate_all()

        kinds = [e.kind for e in events.drain()]
        first_advance = kinds.index(EventKind.STAGE_ADVANCE)
        assert kinds[:first_advance].count(EventKind.MATCH_COMPLETED) == 6
        assert kinds[-1] == EventKind.TOURNAMENT_END

    def test_morale_moves_with_results(self):
        engine = tournament(2, format=TournamentFormat.ROUND_ROBIN)
        fixture = engine.play_match(1)
        if fixture.winner:
            winner = engine.teams[fixture.winner]
            loser = engine.teams[fixture.loser]
            assert all(p.morale == 52 for p in winner.players)
            assert all(p.morale == 48 for p in loser.players)

    def test_stats(self):
        engine = tournament(4, format=TournamentFormat.ROUND_ROBIN)
        engine.simulate_all()
        stats = engine.stats(count=3)

        assert stats["completed_matches"] == 6
        assert len(stats["top_run_scorers"]) == 3
        assert stats["total_runs"] > 0
        assert stats["highest_score"]["runs"] >= stats["lowest_score"]["runs"]


class TestDeterminismAndRestore:
    """Seeds reproduce tournaments; snapshots resume them."""

    def test_same_seed_same_standings(self):
        first = tournament(4, seed=9, format=TournamentFormat.ROUND_ROBIN)
        second = tournament(4, seed=9, format=TournamentFormat.ROUND_ROBIN)
        first.simulate_all()
        second.simulate_all()

        assert first.get_standings() == second.get_standings()
        assert [f.to_dict() for f in first.fixtures.values()] == [f.to_dict() for f in second.fixtures.values()]

    def test_restore_mid_tournament(self):
        uninterrupted = tournament(4, seed=5, format=TournamentFormat.HYBRID)
        uninterrupted.simulate_all()

        engine = tournament(4, seed=5, format=TournamentFormat.HYBRID)
        for fixture in engine.pending_fixtures()[:3]:
            engine.play_match(fixture.id)
        snapshot = json.loads(json.dumps(engine.to_dict()))

        restored = TournamentEngine.from_dict(snapshot, list(engine.teams.values()))
        restored.simulate_all()

        assert restored.winner == uninterrupted.winner
        assert restored.get_standings() == uninterrupted.get_standings()
        assert [f.to_dict() for f in restored.fixtures.values()] == \
            [f.to_dict() for f in uninterrupted.fixtures.values()]

    def test_snapshot_kind_is_checked(self):
        with pytest.raises(ConfigurationError):
            TournamentEngine.from_dict({"kind": "match"}, squads(2))

    def test_match_format_flows_to_fixtures(self):
        engine = tournament(2, match_format=MatchFormat.ODI)
        fixture = engine.play_match(1)
        assert fixture.match_format == MatchFormat.ODI
        assert engine.last_match.format_config.overs == 50
