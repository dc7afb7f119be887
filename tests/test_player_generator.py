"""
Tests for player generator - verifying all players have 55+ OVR.
"""
import random

import pytest

from cricket_core.generators.player_generator import PlayerGenerator
from cricket_core.generators.team_generator import FRANCHISE_TEAMS, TeamGenerator
from cricket_core.models.player import BowlingType, Player, PlayerRole

from conftest import make_player


@pytest.fixture(scope="module")
def pool():
    return PlayerGenerator(seed=7).generate_player_pool()


class TestPlayerGeneratorMinimumOVR:
    """Test that all generated players have minimum 55 OVR."""

    def test_single_player_has_minimum_ovr(self):
        generator = PlayerGenerator(seed=1)
        for tier in ["elite", "star", "good", "solid"]:
            for _ in range(10):
                player = generator.generate_player(tier=tier)
                assert player.overall_rating >= 55, \
                    f"Player {player.name} (tier={tier}) has OVR {player.overall_rating} < 55"

    def test_player_pool_all_above_minimum_ovr(self, pool):
        below_55 = [p for p in pool if p.overall_rating < 55]
        assert below_55 == []

    def test_ensure_minimum_ovr_boosts_weak_players(self):
        generator = PlayerGenerator(seed=1)
        for role in (PlayerRole.BATSMAN, PlayerRole.BOWLER, PlayerRole.ALL_ROUNDER, PlayerRole.WICKET_KEEPER):
            player = make_player(f"Weak {role.value}", role, batting=20, bowling=20, fielding=20)
            assert player.overall_rating < 55

            generator._ensure_minimum_ovr(player, min_ovr=55)
            assert player.overall_rating >= 55


class TestPlayerPool:

    def test_pool_size(self, pool):
        assert len(pool) == 230

    def test_pool_scales_with_count(self):
        assert len(PlayerGenerator(seed=3).generate_player_pool(count=60)) == 60

    def test_role_distribution_is_balanced(self, pool):
        for role in (PlayerRole.BATSMAN, PlayerRole.BOWLER, PlayerRole.ALL_ROUNDER, PlayerRole.WICKET_KEEPER):
            count = sum(1 for p in pool if p.role == role)
            assert count >= 20, f"Role {role.value} only has {count} players"

    def test_overseas_distribution(self, pool):
        overseas = [p for p in pool if p.is_overseas]
        # 8 franchises with up to 8 overseas each
        assert len(overseas) == 80
        assert all(p.country != PlayerGenerator.HOME_COUNTRY for p in overseas)

    def test_names_are_unique(self, pool):
        names = [p.name for p in pool]
        assert len(set(names)) == len(names)

    def test_keepers_do_not_bowl(self, pool):
        keepers = [p for p in pool if p.role == PlayerRole.WICKET_KEEPER]
        assert all(p.bowling_type == BowlingType.NONE for p in keepers)
        assert all(p.can_bowl for p in pool if p.role == PlayerRole.BOWLER)

    def test_base_prices_follow_tier(self, pool):
        assert all(2.0 <= p.base_price <= 25.0 for p in pool)

    def test_ovr_distribution_is_reasonable(self, pool):
        ovrs = [p.overall_rating for p in pool]
        assert max(ovrs) <= 100
        assert 60 <= sum(ovrs) / len(ovrs) <= 80

    def test_same_seed_same_pool(self):
        first = PlayerGenerator(seed=11).generate_player_pool(count=40)
        second = PlayerGenerator(seed=11).generate_player_pool(count=40)

        def describe(p):
            return (p.name, p.role, p.country, p.batting, p.bowling, p.fielding, p.base_price)

        assert [describe(p) for p in first] == [describe(p) for p in second]

    def test_save_players_to_db(self, db_session):
        players = PlayerGenerator(seed=5).generate_player_pool(count=20)
        PlayerGenerator.save_players_to_db(players, session=db_session)
        assert db_session.query(Player).count() == 20


class TestTeamGenerator:

    def test_create_teams(self):
        teams = TeamGenerator.create_teams(count=4, user_team_index=2)

        assert [t.name for t in teams] == [t["name"] for t in FRANCHISE_TEAMS[:4]]
        assert [t.is_user_team for t in teams] == [False, False, True, False]
        assert all(t.remaining_budget == t.budget for t in teams)

    @pytest.mark.parametrize("count", [0, len(FRANCHISE_TEAMS) + 1])
    def test_create_teams_count_range(self, count):
        with pytest.raises(ValueError):
            TeamGenerator.create_teams(count=count)

    def test_create_venues(self):
        teams = TeamGenerator.create_teams()
        venues = TeamGenerator.create_venues(teams, random.Random(3))

        assert [v.name for v in venues] == [t.home_ground for t in teams]
        assert all(0.0 <= v.rain_probability <= 0.3 for v in venues)
        assert all(v.is_playable for v in venues)

    def test_team_choices(self):
        choices = TeamGenerator.get_team_choices()
        assert len(choices) == len(FRANCHISE_TEAMS)
        assert choices[0]["index"] == 0

    def test_save_teams_to_db(self, db_session):
        teams = TeamGenerator.save_teams_to_db(TeamGenerator.create_teams(count=2), session=db_session)
        assert all(t.id is not None for t in teams)
