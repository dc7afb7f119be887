"""
Points table with net run rate
"""
from dataclasses import dataclass, asdict
from typing import Optional

from cricket_core.errors import ConfigurationError

POINTS_WIN = 2
POINTS_TIE = 1
POINTS_NO_RESULT = 1

# Extra ordering keys after points and NRR, higher is better
TIEBREAKERS = {
    "wins": lambda s: s.won,
    "runs_scored": lambda s: s.runs_scored,
    "fewest_runs_conceded": lambda s: -s.runs_conceded,
    "fewest_losses": lambda s: -s.lost,
}


def validate_tiebreakers(names: list[str]) -> list[str]:
    unknown = [n for n in names if n not in TIEBREAKERS]
    if unknown:
        raise ConfigurationError(f"Unknown tie-breakers: {unknown}. Choose from {sorted(TIEBREAKERS)}")
    return names


@dataclass
class TeamRecord:
    """Running totals for one team in one table"""
    team: str
    played: int = 0
    won: int = 0
    lost: int = 0
    tied: int = 0
    no_result: int = 0
    points: int = 0
    runs_scored: int = 0
    balls_faced: int = 0
    runs_conceded: int = 0
    balls_bowled: int = 0

    @property
    def overs_faced(self) -> float:
        return self.balls_faced / 6

    @property
    def overs_bowled(self) -> float:
        return self.balls_bowled / 6

    @property
    def net_run_rate(self) -> float:
        """Calculate NRR: (runs scored / overs faced) - (runs conceded / overs bowled)"""
        if self.balls_faced == 0 or self.balls_bowled == 0:
            return 0.0
        return (self.runs_scored * 6 / self.balls_faced) - (self.runs_conceded * 6 / self.balls_bowled)


@dataclass
class LeagueStanding:
    """Team standing in league table"""
    position: int
    team: str
    played: int
    won: int
    lost: int
    tied: int
    no_result: int
    points: int
    nrr: float


def _innings_balls(innings: dict) -> int:
    # An all-out side is charged its full quota of overs
    if innings["all_out"]:
        return innings["max_overs"] * 6
    return innings["balls"]


class PointsTable:
    """Standings for a league or a group"""

    def __init__(self, teams: list[str], tiebreakers: Optional[list[str]] = None, name: str = "League"):
        self.name = name
        self.tiebreakers = validate_tiebreakers(list(tiebreakers or []))
        self.records: dict[str, TeamRecord] = {t: TeamRecord(team=t) for t in teams}

    def __contains__(self, team: str) -> bool:
        return team in self.records

    def record_result(self, result: dict) -> None:
        """Apply a completed match. Super overs decide the winner but not NRR."""
        first, second = result["innings1"], result["innings2"]
        bat1 = self.records[first["batting_team"]]
        bat2 = self.records[second["batting_team"]]

        for record in (bat1, bat2):
            record.played += 1

        winner = result["winner"]
        if winner is None:
            for record in (bat1, bat2):
                record.tied += 1
                record.points += POINTS_TIE
        else:
            loser = bat2 if winner == bat1.team else bat1
            self.records[winner].won += 1
            self.records[winner].points += POINTS_WIN
            loser.lost += 1

        balls1, balls2 = _innings_balls(first), _innings_balls(second)
        bat1.runs_scored += first["runs"]
        bat1.balls_faced += balls1
        bat1.runs_conceded += second["runs"]
        bat1.balls_bowled += balls2

        bat2.runs_scored += second["runs"]
        bat2.balls_faced += balls2
        bat2.runs_conceded += first["runs"]
        bat2.balls_bowled += balls1

    def record_no_result(self, team1: str, team2: str) -> None:
        for name in (team1, team2):
            record = self.records[name]
            record.played += 1
            record.no_result += 1
            record.points += POINTS_NO_RESULT

    def _sort_key(self, record: TeamRecord) -> tuple:
        return (record.points, record.net_run_rate) + tuple(
            TIEBREAKERS[name](record) for name in self.tiebreakers
        )

    def ordered(self) -> list[TeamRecord]:
        """Sort by points (desc), then NRR (desc), then configured tie-breakers"""
        return sorted(self.records.values(), key=self._sort_key, reverse=True)

    def standings(self) -> list[LeagueStanding]:
        return [
            LeagueStanding(
                position=pos,
                team=record.team,
                played=record.played,
                won=record.won,
                lost=record.lost,
                tied=record.tied,
                no_result=record.no_result,
                points=record.points,
                nrr=round(record.net_run_rate, 3),
            )
            for pos, record in enumerate(self.ordered(), 1)
        ]

    def top(self, count: int) -> list[str]:
        return [r.team for r in self.ordered()[:count]]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "tiebreakers": list(self.tiebreakers),
            "records": [asdict(r) for r in self.records.values()],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PointsTable":
        table = cls([], data["tiebreakers"], name=data["name"])
        table.records = {r["team"]: TeamRecord(**r) for r in data["records"]}
        return table
