from cricket_core.models.player import Player, Injury
from cricket_core.models.team import Team
from cricket_core.models.venue import Venue

__all__ = [
    "Player",
    "Injury",
    "Team",
    "Venue",
]
