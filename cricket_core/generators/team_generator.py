"""
Team Generator - Creates fictional franchise teams and their home venues
"""
import random
from typing import Optional

from cricket_core.database import get_session
from cricket_core.models.team import Team
from cricket_core.models.venue import Venue


# 8 fictional franchise teams, budgets in bid units
FRANCHISE_TEAMS = [
    {"name": "Mumbai Titans", "short_name": "MT", "city": "Mumbai", "home_ground": "Wankhede Stadium", "budget": 90.0},
    {"name": "Chennai Kings", "short_name": "CK", "city": "Chennai", "home_ground": "M.A. Chidambaram Stadium", "budget": 90.0},
    {"name": "Bangalore Warriors", "short_name": "BW", "city": "Bangalore", "home_ground": "M. Chinnaswamy Stadium", "budget": 90.0},
    {"name": "Kolkata Knights", "short_name": "KK", "city": "Kolkata", "home_ground": "Eden Gardens", "budget": 90.0},
    {"name": "Delhi Capitals", "short_name": "DC", "city": "Delhi", "home_ground": "Arun Jaitley Stadium", "budget": 90.0},
    {"name": "Hyderabad Sunrisers", "short_name": "HS", "city": "Hyderabad", "home_ground": "Rajiv Gandhi Intl. Stadium", "budget": 90.0},
    {"name": "Rajasthan Royals", "short_name": "RR", "city": "Jaipur", "home_ground": "Sawai Mansingh Stadium", "budget": 90.0},
    {"name": "Punjab Lions", "short_name": "PL", "city": "Mohali", "home_ground": "PCA Stadium", "budget": 90.0},
]

# Home venue character: Chennai turns, Mohali seams, Mumbai bounces
VENUES = {
    "Wankhede Stadium": {"capacity": 33000, "hardness": 8, "moisture": 5, "grass": 4, "humidity": 70.0},
    "M.A. Chidambaram Stadium": {"capacity": 50000, "hardness": 5, "moisture": 3, "grass": 2, "wear": 5, "temperature": 33.0},
    "M. Chinnaswamy Stadium": {"capacity": 40000, "hardness": 7, "moisture": 4, "grass": 3},
    "Eden Gardens": {"capacity": 66000, "hardness": 5, "moisture": 6, "grass": 5, "humidity": 75.0},
    "Arun Jaitley Stadium": {"capacity": 41000, "hardness": 5, "moisture": 4, "grass": 3, "wear": 3},
    "Rajiv Gandhi Intl. Stadium": {"capacity": 55000, "hardness": 6, "moisture": 4, "grass": 4},
    "Sawai Mansingh Stadium": {"capacity": 30000, "hardness": 6, "moisture": 2, "grass": 3, "temperature": 36.0},
    "PCA Stadium": {"capacity": 26000, "hardness": 7, "moisture": 6, "grass": 7, "wind_speed": 18.0},
}


class TeamGenerator:
    """Generates the franchise teams for a tournament"""

    @classmethod
    def create_teams(cls, count: int = 8, user_team_index: Optional[int] = None) -> list[Team]:
        """
        Create franchise teams.

        Args:
            count: How many of the franchises to create (1-8)
            user_team_index: Index of the team the user manages, if any

        Returns:
            List of Team objects (not yet saved to DB)
        """
        if not 1 <= count <= len(FRANCHISE_TEAMS):
            raise ValueError(f"count must be within 1-{len(FRANCHISE_TEAMS)}")
        teams = []
        for i, team_data in enumerate(FRANCHISE_TEAMS[:count]):
            team = Team(
                name=team_data["name"],
                short_name=team_data["short_name"],
                home_ground=team_data["home_ground"],
                budget=team_data["budget"],
                remaining_budget=team_data["budget"],
                is_user_team=(i == user_team_index),
            )
            teams.append(team)
        return teams

    @classmethod
    def create_venues(cls, teams: list[Team], rng: Optional[random.Random] = None) -> list[Venue]:
        """Home venues for the given teams, with a touch of weather variation"""
        rng = rng or random.Random()
        cities = {t["home_ground"]: t["city"] for t in FRANCHISE_TEAMS}
        venues = []
        for team in teams:
            if not team.home_ground:
                continue
            profile = dict(VENUES.get(team.home_ground, {}))
            profile.setdefault("temperature", 28.0)
            profile["temperature"] += rng.uniform(-3, 3)
            profile["rain_probability"] = round(rng.uniform(0.0, 0.3), 2)
            venues.append(Venue(name=team.home_ground, city=cities.get(team.home_ground, ""), **profile))
        return venues

    @classmethod
    def save_teams_to_db(cls, teams: list[Team], session=None) -> list[Team]:
        """Save teams to database and return with IDs"""
        own_session = session is None
        session = session or get_session()
        try:
            session.add_all(teams)
            session.commit()
            for team in teams:
                session.refresh(team)
            return teams
        finally:
            if own_session:
                session.close()

    @classmethod
    def get_team_choices(cls) -> list[dict]:
        """Get list of teams for user selection"""
        return [
            {"index": i, "name": t["name"], "short_name": t["short_name"], "city": t["city"]}
            for i, t in enumerate(FRANCHISE_TEAMS)
        ]
