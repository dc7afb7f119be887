from cricket_core.generators.player_generator import PlayerGenerator
from cricket_core.generators.team_generator import TeamGenerator

__all__ = ["PlayerGenerator", "TeamGenerator"]
