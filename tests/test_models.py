"""
Tests for players, squads, selection and venues.
"""
import pytest

from cricket_core.errors import ConfigurationError, InvalidLineup
from cricket_core.models.player import BowlingType, Injury, Player, PlayerRole
from cricket_core.models.team import MAX_SQUAD_SIZE, MAX_XI_OVERSEAS, Team
from cricket_core.models.venue import PitchConditions, Venue, WeatherConditions
from cricket_core.validators.playing_xi_validator import PlayingXIValidator

from conftest import make_player, make_team, make_venue


class TestPlayer:

    @pytest.mark.parametrize("field", ["batting", "bowling", "fielding", "form", "morale"])
    @pytest.mark.parametrize("value", [0, 101])
    def test_ratings_out_of_range(self, field, value):
        with pytest.raises(ConfigurationError):
            make_player("Bad", **{field: value})

    def test_overall_rating_by_role(self):
        assert make_player("Bat", PlayerRole.BATSMAN, batting=80, fielding=60).overall_rating == 74
        assert make_player("Bowl", PlayerRole.BOWLER, bowling=80, fielding=60).overall_rating == 74
        assert make_player("AR", PlayerRole.ALL_ROUNDER, batting=70, bowling=70, fielding=50).overall_rating == 66
        assert make_player("WK", PlayerRole.WICKET_KEEPER, batting=70, fielding=80).overall_rating == 74

    def test_who_can_bowl(self):
        assert make_player("Bowl", PlayerRole.BOWLER).can_bowl
        assert make_player("AR", PlayerRole.ALL_ROUNDER).can_bowl
        assert not make_player("Bat", PlayerRole.BATSMAN).can_bowl
        assert make_player("Part", PlayerRole.BATSMAN, bowling_type=BowlingType.OFF_SPIN).can_bowl
        assert not make_player("WK", PlayerRole.WICKET_KEEPER, bowling_type=BowlingType.MEDIUM).can_bowl

    def test_default_bowling_type_follows_role(self):
        assert make_player("Bowl", PlayerRole.BOWLER).bowling_type == BowlingType.MEDIUM
        assert make_player("Bat", PlayerRole.BATSMAN).bowling_type == BowlingType.NONE
        assert BowlingType.LEG_SPIN.is_spin and BowlingType.PACE.is_seam

    def test_injury_and_recovery(self):
        player = make_player("Hurt")
        player.add_injury("hamstring", severity=4, recovery_matches=2)

        assert player.is_injured
        assert player.morale == 40

        player.recover(1)
        assert player.is_injured
        player.recover(1)
        assert not player.is_injured
        assert player.injuries == []

    def test_injury_severity_range(self):
        with pytest.raises(ConfigurationError):
            make_player("Hurt").add_injury("side strain", severity=11, recovery_matches=1)

    def test_form_and_morale_are_clamped(self):
        player = make_player("Steady")
        player.update_morale(200)
        player.update_form(-200)
        assert player.morale == 100
        assert player.form == 1


class TestSquad:

    def test_add_and_remove(self):
        team = make_team("Alpha")
        name = team.playing_xi[0].name
        removed = team.remove_player(name)

        assert removed.team is None
        assert team.squad_size == 10
        assert name not in [p.name for p in team.playing_xi]
        assert name not in [p.name for p in team.batting_order]

    def test_remove_unknown_player(self):
        with pytest.raises(ConfigurationError):
            make_team("Alpha").remove_player("Nobody")

    def test_squad_is_capped(self):
        team = make_team("Alpha", extra_players=MAX_SQUAD_SIZE - 11, select=False)
        with pytest.raises(ConfigurationError):
            team.add_player(make_player("One Too Many"))

    def test_player_belongs_to_one_squad(self):
        alpha, bravo = make_team("Alpha"), make_team("Bravo")
        with pytest.raises(ConfigurationError):
            bravo.add_player(alpha.players[0])

    def test_squad_errors(self):
        team = make_team("Alpha")
        assert team.squad_errors()  # 11 is below the minimum squad size
        assert make_team("Bravo", extra_players=7).squad_errors() == []


class TestSelection:

    def test_xi_rejects_duplicates_strangers_and_injured(self):
        team = make_team("Alpha", extra_players=2)
        names = [p.name for p in team.players[:11]]

        with pytest.raises(InvalidLineup):
            team.set_playing_xi(names[:10] + [names[0]])
        with pytest.raises(InvalidLineup):
            team.set_playing_xi(names[:10] + ["Stranger"])

        team.players[0].add_injury("finger", severity=3, recovery_matches=1)
        with pytest.raises(InvalidLineup):
            team.set_playing_xi(names)

    def test_new_xi_resets_stale_orders(self):
        team = make_team("Alpha", extra_players=1)
        bench = next(p.name for p in team.players if p not in team.playing_xi)
        dropped = team.batting_order[0].name
        xi = [p.name for p in team.playing_xi if p.name != dropped] + [bench]

        team.set_playing_xi(xi)

        assert sorted(p.name for p in team.batting_order) == sorted(xi)
        assert all(p.name in xi for p in team.bowling_order)

    def test_batting_order_must_be_permutation(self):
        team = make_team("Alpha")
        names = [p.name for p in team.batting_order]

        team.set_batting_order(list(reversed(names)))
        assert team.batting_order[0].name == names[-1]
        with pytest.raises(InvalidLineup):
            team.set_batting_order(names[:10])

    def test_bowling_order_rules(self):
        team = make_team("Alpha")
        keeper = next(p for p in team.playing_xi if p.role == PlayerRole.WICKET_KEEPER)
        bowlers = [p.name for p in team.playing_xi if p.role == PlayerRole.BOWLER]

        with pytest.raises(InvalidLineup):
            team.set_bowling_order([keeper.name])
        with pytest.raises(InvalidLineup):
            team.set_bowling_order(bowlers + bowlers[:1])
        team.set_bowling_order(bowlers)
        assert [p.name for p in team.bowling_order] == bowlers

    def test_captain_and_vice_captain_differ(self):
        team = make_team("Alpha")
        first, second = (p.name for p in team.playing_xi[:2])
        team.vice_captain = None
        team.set_captain(first)

        with pytest.raises(InvalidLineup):
            team.set_vice_captain(first)
        with pytest.raises(InvalidLineup):
            team.set_captain("Stranger")
        team.set_vice_captain(second)
        assert (team.captain, team.vice_captain) == (first, second)

    def test_auto_select_xi_is_valid(self):
        team = make_team("Alpha", extra_players=5)
        xi = team.auto_select_xi()

        assert len(xi) == 11
        assert PlayingXIValidator.validate(team)["valid"]
        assert any(p.role == PlayerRole.WICKET_KEEPER for p in xi)
        # Bowlers bat at the bottom
        roles = [p.role == PlayerRole.BOWLER for p in team.batting_order]
        assert roles == sorted(roles)

    def test_auto_select_limits_overseas(self):
        team = make_team("Alpha", select=False)
        for i in range(8):
            role = PlayerRole.BOWLER if i % 2 else PlayerRole.BATSMAN
            team.add_player(make_player(f"Import {i}", role, batting=90, bowling=90, fielding=90, overseas=True))

        xi = team.auto_select_xi()

        assert sum(p.is_overseas for p in xi) == MAX_XI_OVERSEAS
        assert len(xi) == 11

    def test_auto_select_skips_injured(self):
        team = make_team("Alpha", extra_players=3, select=False)
        injured = team.players[0]
        injured.add_injury("back", severity=6, recovery_matches=3)
        team.add_player(make_player("Reserve Keeper", PlayerRole.WICKET_KEEPER))

        xi = team.auto_select_xi()
        assert injured not in xi

    def test_auto_select_needs_eleven_fit_players(self):
        team = make_team("Alpha", select=False)
        team.players[0].add_injury("ankle", severity=5, recovery_matches=2)
        with pytest.raises(InvalidLineup):
            team.auto_select_xi()


class TestPlayingXIValidator:

    def test_breakdown(self):
        result = PlayingXIValidator.validate(make_team("Alpha"))

        assert result["valid"]
        assert result["breakdown"] == {
            "batsmen": 3, "bowlers": 5, "all_rounders": 2, "wicket_keepers": 1, "overseas": 0,
        }

    def test_reports_every_problem(self):
        team = Team(name="Empty")
        result = PlayingXIValidator.validate(team)

        assert not result["valid"]
        assert len(result["errors"]) >= 3
        with pytest.raises(InvalidLineup):
            PlayingXIValidator.check(team)


class TestVenue:

    def test_pitch_descriptors(self):
        assert PitchConditions(wear=8).is_spinning
        assert PitchConditions(wear=5, moisture=3).is_spinning
        assert PitchConditions(grass=7).is_seaming
        assert PitchConditions(hardness=8).is_bouncy
        assert not PitchConditions().is_spinning

    def test_weather_descriptors(self):
        assert WeatherConditions(rain_probability=0.6).is_raining
        assert WeatherConditions(rain_probability=0.6).is_playable
        assert not WeatherConditions(rain_probability=0.8).is_playable
        assert not WeatherConditions(visibility=2).is_playable
        assert WeatherConditions(temperature=40).is_extreme_temperature

    def test_wear_and_rest(self):
        venue = make_venue(wear=9, moisture=5)
        venue.record_match()
        venue.record_match()
        assert venue.wear == 10
        venue.rest(3)
        assert venue.moisture == 2
        venue.rest(10)
        assert venue.moisture == 1

    def test_conditions_views(self):
        venue = make_venue(grass=8, rain_probability=0.9)
        assert venue.pitch.is_seaming
        assert not venue.is_playable


class TestPersistence:

    def test_team_round_trip(self, db_session):
        team = make_team("Alpha", extra_players=2)
        team.players[0].add_injury("hamstring", severity=4, recovery_matches=2)
        db_session.add(team)
        db_session.add(make_venue("Oval"))
        db_session.commit()
        db_session.expire_all()

        loaded = db_session.query(Team).filter_by(name="Alpha").one()
        assert loaded.squad_size == 13
        assert len(loaded.playing_xi) == 11
        assert loaded.captain == team.captain
        assert loaded.get_player(team.players[0].name).is_injured
        assert db_session.query(Venue).filter_by(name="Oval").one().wear == 1

    def test_injuries_cascade_with_player(self, db_session):
        player = make_player("Fragile")
        player.add_injury("knee", severity=7, recovery_matches=5)
        db_session.add(player)
        db_session.commit()

        db_session.delete(player)
        db_session.commit()
        assert db_session.query(Injury).count() == 0
        assert db_session.query(Player).count() == 0
