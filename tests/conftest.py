"""
Shared factories and fixtures.
"""
import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from cricket_core.database import Base, init_db
from cricket_core.models.player import (
    BattingApproach, BowlingType, Nationality, Player, PlayerRole,
)
from cricket_core.models.team import Team
from cricket_core.models.venue import Venue

# 1 WK, 3 batsmen, 2 all-rounders, 5 bowlers
XI_ROLES = (
    [PlayerRole.WICKET_KEEPER]
    + [PlayerRole.BATSMAN] * 3
    + [PlayerRole.ALL_ROUNDER] * 2
    + [PlayerRole.BOWLER] * 5
)


def make_player(
    name: str,
    role: PlayerRole = PlayerRole.BATSMAN,
    batting: int = 50,
    bowling: int = 50,
    fielding: int = 50,
    overseas: bool = False,
    approach: BattingApproach = BattingApproach.BALANCED,
    **kwargs,
) -> Player:
    """Create a player with fixed ratings"""
    return Player(
        name=name,
        role=role,
        batting=batting,
        bowling=bowling,
        fielding=fielding,
        nationality=Nationality.OVERSEAS if overseas else Nationality.LOCAL,
        country="Australia" if overseas else "India",
        batting_approach=approach,
        **kwargs,
    )


def make_team(
    name: str,
    batting: int = 50,
    bowling: int = 50,
    fielding: int = 50,
    approach: BattingApproach = BattingApproach.BALANCED,
    extra_players: int = 0,
    select: bool = True,
) -> Team:
    """A team whose players all share the same ratings, with an XI picked"""
    team = Team(name=name)
    roles = XI_ROLES + [PlayerRole.BATSMAN] * extra_players
    for i, role in enumerate(roles, 1):
        bowling_type = BowlingType.OFF_SPIN if role == PlayerRole.ALL_ROUNDER else None
        kwargs = {"bowling_type": bowling_type} if bowling_type else {}
        team.add_player(make_player(
            f"{name} P{i}", role, batting=batting, bowling=bowling,
            fielding=fielding, approach=approach, **kwargs,
        ))
    if select:
        team.auto_select_xi()
    return team


def make_venue(name: str = "Test Ground", **kwargs) -> Venue:
    return Venue(name=name, city="Test City", **kwargs)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def two_teams():
    return make_team("Alpha"), make_team("Bravo")


@pytest.fixture
def db_session():
    """In-memory SQLite session with all tables created"""
    engine = create_engine("sqlite:///:memory:")
    init_db(bind=engine)
    session = sessionmaker(bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
