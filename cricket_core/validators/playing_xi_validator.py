from cricket_core.errors import InvalidLineup
from cricket_core.models.player import PlayerRole
from cricket_core.models.team import MAX_XI_OVERSEAS, XI_SIZE


class PlayingXIValidator:
    @staticmethod
    def validate(team) -> dict:
        """
        Validate a team's match-day selection.

        Rules:
        1. Exactly 11 players
        2. Max 4 overseas players
        3. Captain named and in the XI
        4. No injured players
        5. Batting order is a permutation of the XI
        6. Bowling order is non-empty and drawn from the XI's bowlers
        """
        errors = []
        players = team.playing_xi
        names = [p.name for p in players]

        if len(players) != XI_SIZE:
            errors.append(f"Must select exactly {XI_SIZE} players, got {len(players)}")

        overseas_count = sum(1 for p in players if p.is_overseas)
        if overseas_count > MAX_XI_OVERSEAS:
            errors.append(f"Max {MAX_XI_OVERSEAS} overseas players allowed, got {overseas_count}")

        if not team.captain or team.captain not in names:
            errors.append("Captain must be named from the XI")
        elif team.vice_captain == team.captain:
            errors.append("Captain and vice-captain must differ")

        injured = [p.name for p in players if p.is_injured]
        if injured:
            errors.append(f"Injured players selected: {', '.join(injured)}")

        batting = [p.name for p in team.batting_order]
        if len(batting) != XI_SIZE or sorted(batting) != sorted(names):
            errors.append("Batting order must be a permutation of the XI")

        bowling = team.bowling_order
        if not bowling:
            errors.append("Bowling order must name at least one bowler")
        for bowler in bowling:
            if bowler.name not in names or not bowler.can_bowl:
                errors.append(f"{bowler.name} cannot bowl for this XI")

        return {
            "valid": len(errors) == 0,
            "errors": errors,
            "breakdown": {
                "batsmen": sum(1 for p in players if p.role == PlayerRole.BATSMAN),
                "bowlers": sum(1 for p in players if p.role == PlayerRole.BOWLER),
                "all_rounders": sum(1 for p in players if p.role == PlayerRole.ALL_ROUNDER),
                "wicket_keepers": sum(1 for p in players if p.role == PlayerRole.WICKET_KEEPER),
                "overseas": overseas_count,
            },
        }

    @classmethod
    def check(cls, team) -> None:
        """Raise InvalidLineup unless the selection is valid"""
        result = cls.validate(team)
        if not result["valid"]:
            raise InvalidLineup(f"{team.name}: " + "; ".join(result["errors"]))
