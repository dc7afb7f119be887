"""
Tournament Engine - Handles fixtures, points tables, knockouts and playoffs
"""
import enum
import logging
import random
from collections import Counter
from dataclasses import dataclass, field, asdict
from datetime import date, timedelta
from typing import Callable, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from cricket_core.config import settings
from cricket_core.errors import Cancelled, ConfigurationError, FixtureFinalized
from cricket_core.events import EventKind, EventQueue
from cricket_core.engine.formats import MatchFormat
from cricket_core.engine.match_engine import MatchEngine
from cricket_core.engine.standings import PointsTable, validate_tiebreakers
from cricket_core.models.team import Team
from cricket_core.models.venue import Venue
from cricket_core.validators.playing_xi_validator import PlayingXIValidator

logger = logging.getLogger(__name__)


class TournamentType(enum.Enum):
    IPL = "ipl"
    WORLD_CUP = "world_cup"
    T20_WORLD_CUP = "t20_world_cup"
    CHAMPIONS_TROPHY = "champions_trophy"
    CUSTOM = "custom"


class TournamentFormat(enum.Enum):
    ROUND_ROBIN = "round_robin"
    GROUP_STAGE = "group_stage"
    KNOCKOUT = "knockout"
    HYBRID = "hybrid"  # League, then IPL-style playoffs


class TournamentStatus(enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class FixtureType(enum.Enum):
    LEAGUE = "league"
    GROUP = "group"
    KNOCKOUT = "knockout"
    QUALIFIER_1 = "qualifier_1"
    ELIMINATOR = "eliminator"
    QUALIFIER_2 = "qualifier_2"
    FINAL = "final"


# Fixtures that must produce a winner
DECISIVE_TYPES = {
    FixtureType.KNOCKOUT,
    FixtureType.QUALIFIER_1,
    FixtureType.ELIMINATOR,
    FixtureType.QUALIFIER_2,
    FixtureType.FINAL,
}


class TournamentConfig(BaseModel):
    name: str = "Tournament"
    tournament_type: TournamentType = TournamentType.CUSTOM
    format: TournamentFormat = TournamentFormat.ROUND_ROBIN
    match_format: MatchFormat = MatchFormat.T20
    num_groups: int = Field(default=2, ge=1)
    qualifiers_per_group: int = Field(default=2, ge=1)
    double_round_robin: bool = False
    playoff_teams: int = 4
    super_over_enabled: bool = settings.SUPER_OVER_ENABLED
    super_over_limit: int = Field(default=settings.SUPER_OVER_LIMIT, ge=0)
    max_bowler_overs: Optional[int] = None
    start_date: date = date(2026, 3, 20)
    days_between_matches: int = Field(default=1, ge=0)
    tiebreakers: list[str] = Field(default_factory=lambda: ["wins", "runs_scored"])
    auto_select_xi: bool = True

    @field_validator("playoff_teams")
    @classmethod
    def _playoff_size(cls, value: int) -> int:
        if value not in (2, 4):
            raise ValueError("playoff_teams must be 2 (final only) or 4 (IPL playoffs)")
        return value

    @field_validator("tiebreakers")
    @classmethod
    def _known_tiebreakers(cls, value: list[str]) -> list[str]:
        try:
            return validate_tiebreakers(value)
        except ConfigurationError as exc:
            raise ValueError(str(exc)) from exc


@dataclass
class Fixture:
    """A scheduled match and, once played, its outcome"""
    id: int
    team1: str
    team2: str
    venue: Optional[str]
    date: date
    match_format: MatchFormat
    fixture_type: FixtureType
    stage: str
    group: Optional[str] = None
    completed: bool = False
    team1_score: Optional[int] = None
    team1_wickets: Optional[int] = None
    team2_score: Optional[int] = None
    team2_wickets: Optional[int] = None
    winner: Optional[str] = None
    no_result: bool = False
    result: str = ""

    @property
    def loser(self) -> Optional[str]:
        if self.winner is None:
            return None
        return self.team2 if self.winner == self.team1 else self.team1

    def to_dict(self) -> dict:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        data["match_format"] = self.match_format.value
        data["fixture_type"] = self.fixture_type.value
        return data

    @classmethod
    def from_dict(cls, d: dict) -> "Fixture":
        return cls(**{
            **d,
            "date": date.fromisoformat(d["date"]),
            "match_format": MatchFormat(d["match_format"]),
            "fixture_type": FixtureType(d["fixture_type"]),
        })


@dataclass
class Stage:
    name: str
    fixture_type: FixtureType
    fixture_ids: list[int] = field(default_factory=list)


def bracket_positions(size: int) -> list[int]:
    """Standard seeding order, e.g. 8 -> [1, 8, 4, 5, 2, 7, 3, 6]"""
    positions = [1]
    while len(positions) < size:
        total = len(positions) * 2 + 1
        positions = [x for p in positions for x in (p, total - p)]
    return positions


def round_name(teams_left: int) -> str:
    if teams_left == 2:
        return "Final"
    if teams_left == 4:
        return "Semi-finals"
    if teams_left == 8:
        return "Quarter-finals"
    return f"Round of {teams_left}"


class TournamentEngine:
    """
    Schedules fixtures, plays them through the match engine, keeps standings
    and moves the tournament from stage to stage.
    """

    def __init__(
        self,
        config: Union[TournamentConfig, dict],
        teams: list[Team],
        venues: Optional[list[Venue]] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        events: Optional[EventQueue] = None,
        match_events: Optional[EventQueue] = None,
    ):
        self.config = self._load_config(config)
        self.teams: dict[str, Team] = {t.name: t for t in teams}
        if len(self.teams) != len(teams):
            raise ConfigurationError("Team names must be unique")
        if len(teams) < 2:
            raise ConfigurationError("A tournament needs at least two teams")
        self.venues: dict[str, Venue] = {v.name: v for v in venues or []}
        self._venue_order = [v.name for v in venues or []]
        self._check_shape()

        self.rng = rng or random.Random()
        if seed is not None:
            self.rng.seed(seed)
        self.events = events if events is not None else EventQueue()
        self.match_events = match_events

        self.status = TournamentStatus.IN_PROGRESS
        self.paused = False
        self.winner: Optional[str] = None
        self.runner_up: Optional[str] = None
        self.fixtures: dict[int, Fixture] = {}
        self.stages: list[Stage] = []
        self.tables: dict[str, PointsTable] = {}
        self.groups: dict[str, list[str]] = {}
        self.bracket: list[Optional[str]] = []
        self.results: dict[int, dict] = {}
        self.last_match: Optional[MatchEngine] = None
        self._venue_last_played: dict[str, date] = {}
        self._run_scorers: Counter = Counter()
        self._wicket_takers: Counter = Counter()
        self._innings_totals: list[tuple[str, int]] = []

        self._schedule_first_stage()

    @staticmethod
    def _load_config(config) -> TournamentConfig:
        if isinstance(config, TournamentConfig):
            return config
        try:
            return TournamentConfig(**config)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid tournament configuration: {exc}") from exc

    def _check_shape(self) -> None:
        n = len(self.teams)
        config = self.config
        if config.format == TournamentFormat.GROUP_STAGE:
            smallest = n // config.num_groups
            if smallest < 2:
                raise ConfigurationError(f"{n} teams cannot fill {config.num_groups} groups")
            if config.qualifiers_per_group > smallest:
                raise ConfigurationError(
                    f"Cannot qualify {config.qualifiers_per_group} from groups of {smallest}"
                )
            if config.qualifiers_per_group * config.num_groups < 2:
                raise ConfigurationError("At least two teams must reach the knockouts")
        if config.format == TournamentFormat.HYBRID and n < config.playoff_teams:
            raise ConfigurationError(f"{n} teams cannot fill {config.playoff_teams} playoff places")

    # --- scheduling ---

    @property
    def current_stage(self) -> Optional[Stage]:
        return self.stages[-1] if self.stages else None

    def _add_fixture(
        self, team1: str, team2: str, fixture_type: FixtureType, stage: Stage, group: Optional[str] = None,
    ) -> Fixture:
        number = len(self.fixtures) + 1
        venue = self._venue_order[(number - 1) % len(self._venue_order)] if self._venue_order else None
        fixture = Fixture(
            id=number,
            team1=team1,
            team2=team2,
            venue=venue,
            date=self.config.start_date + timedelta(days=(number - 1) * self.config.days_between_matches),
            match_format=self.config.match_format,
            fixture_type=fixture_type,
            stage=stage.name,
            group=group,
        )
        self.fixtures[number] = fixture
        stage.fixture_ids.append(number)
        return fixture

    def _round_robin_matchups(self, teams: list[str]) -> list[tuple[str, str]]:
        matchups = []
        for i, team1 in enumerate(teams):
            for team2 in teams[i + 1:]:
                matchups.append((team1, team2))
                if self.config.double_round_robin:
                    # Return fixture with home and away swapped
                    matchups.append((team2, team1))
        return matchups

    def _schedule_matchups(
        self, matchups: list[tuple[str, str, Optional[str]]], fixture_type: FixtureType, stage: Stage,
    ) -> None:
        """Order matchups so no team plays too many in a row"""
        remaining = list(matchups)
        self.rng.shuffle(remaining)
        last_played = {name: -3 for name in self.teams}
        slot = len(self.fixtures) + 1

        while remaining:
            # Find a matchup where neither team played in the last 1-2 matches
            best, best_gap = None, None
            for matchup in remaining:
                team1, team2, _ = matchup
                gap = min(slot - last_played[team1], slot - last_played[team2])
                if best_gap is None or gap > best_gap:
                    best, best_gap = matchup, gap
            remaining.remove(best)
            team1, team2, group = best
            self._add_fixture(team1, team2, fixture_type, stage, group)
            last_played[team1] = last_played[team2] = slot
            slot += 1

    def _schedule_first_stage(self) -> None:
        names = list(self.teams)
        fmt = self.config.format
        if fmt in (TournamentFormat.ROUND_ROBIN, TournamentFormat.HYBRID):
            stage = Stage(name="League", fixture_type=FixtureType.LEAGUE)
            self.stages.append(stage)
            self.tables["League"] = PointsTable(names, self.config.tiebreakers)
            matchups = [(a, b, None) for a, b in self._round_robin_matchups(names)]
            self._schedule_matchups(matchups, FixtureType.LEAGUE, stage)
        elif fmt == TournamentFormat.GROUP_STAGE:
            stage = Stage(name="Group Stage", fixture_type=FixtureType.GROUP)
            self.stages.append(stage)
            # Teams go round-robin into groups, keeping insertion order
            labels = [f"Group {chr(ord('A') + i)}" for i in range(self.config.num_groups)]
            self.groups = {label: [] for label in labels}
            for i, name in enumerate(names):
                self.groups[labels[i % len(labels)]].append(name)
            matchups = []
            for label, members in self.groups.items():
                self.tables[label] = PointsTable(members, self.config.tiebreakers, name=label)
                matchups.extend((a, b, label) for a, b in self._round_robin_matchups(members))
            self._schedule_matchups(matchups, FixtureType.GROUP, stage)
        else:
            self._start_bracket(names)
        logger.info(
            "%s scheduled: %s, %d fixtures in %s",
            self.config.name, fmt.value, len(self.fixtures), self.current_stage.name,
        )

    def _start_bracket(self, seeds: list[str]) -> None:
        """Single elimination, byes to the top seeds"""
        size = 1
        while size < len(seeds):
            size *= 2
        self.bracket = [seeds[p - 1] if p <= len(seeds) else None for p in bracket_positions(size)]
        self._schedule_bracket_round()

    def _schedule_bracket_round(self) -> Stage:
        stage = Stage(name=round_name(len(self.bracket)), fixture_type=FixtureType.KNOCKOUT)
        self.stages.append(stage)
        fixture_type = FixtureType.FINAL if len(self.bracket) == 2 else FixtureType.KNOCKOUT
        for i in range(0, len(self.bracket), 2):
            team1, team2 = self.bracket[i], self.bracket[i + 1]
            if team1 and team2:
                self._add_fixture(team1, team2, fixture_type, stage)
        return stage

    # --- accessors ---

    def get_fixture(self, fixture_id: int) -> Fixture:
        try:
            return self.fixtures[fixture_id]
        except KeyError as exc:
            raise ConfigurationError(f"No fixture {fixture_id}") from exc

    def pending_fixtures(self) -> list[Fixture]:
        stage = self.current_stage
        return [self.fixtures[i] for i in stage.fixture_ids if not self.fixtures[i].completed]

    def is_stage_complete(self) -> bool:
        return not self.pending_fixtures()

    @property
    def is_complete(self) -> bool:
        return self.status == TournamentStatus.COMPLETED

    def get_standings(self, table: str = "League"):
        return self.tables[table].standings()

    # --- control ---

    def _check_mutable(self) -> None:
        if self.status == TournamentStatus.CANCELLED:
            raise Cancelled("Tournament was cancelled")

    def pause(self) -> None:
        self._check_mutable()
        self.paused = True

    def resume(self) -> None:
        self._check_mutable()
        self.paused = False

    def cancel(self) -> None:
        self._check_mutable()
        self.status = TournamentStatus.CANCELLED
        self.winner = None
        logger.info("%s cancelled", self.config.name)

    # --- playing ---

    def _prepare_xi(self, team: Team) -> None:
        if not self.config.auto_select_xi:
            return
        if not PlayingXIValidator.validate(team)["valid"]:
            team.auto_select_xi()

    def play_match(self, fixture_id: int) -> Optional[Fixture]:
        """
        Play a fixture of the current stage.

        Returns None while the tournament is paused.
        """
        self._check_mutable()
        fixture = self.get_fixture(fixture_id)
        if fixture.completed:
            raise FixtureFinalized(f"Fixture {fixture_id} has already been played")
        if fixture_id not in self.current_stage.fixture_ids:
            raise ConfigurationError(f"Fixture {fixture_id} is not in the current stage")
        if self.paused:
            return None

        team1, team2 = self.teams[fixture.team1], self.teams[fixture.team2]
        venue = self.venues.get(fixture.venue) if fixture.venue else None
        if venue is not None:
            last = self._venue_last_played.get(venue.name)
            if last is not None:
                venue.rest((fixture.date - last).days)
            self._venue_last_played[venue.name] = fixture.date

        if venue is not None and not venue.is_playable:
            self._record_no_result(fixture)
        else:
            self._simulate(fixture, team1, team2, venue)

        fixture.completed = True
        self.events.emit(EventKind.MATCH_COMPLETED, fixture.to_dict())
        return fixture

    def _record_no_result(self, fixture: Fixture) -> None:
        fixture.no_result = True
        if fixture.fixture_type in DECISIVE_TYPES:
            fixture.winner = fixture.team1
            fixture.result = f"No result, {fixture.team1} advance as higher seed"
        else:
            fixture.result = "No result"
            self.tables[self._table_for(fixture)].record_no_result(fixture.team1, fixture.team2)
        logger.info("Fixture %d: %s v %s washed out", fixture.id, fixture.team1, fixture.team2)

    def _table_for(self, fixture: Fixture) -> str:
        return fixture.group or "League"

    def _simulate(self, fixture: Fixture, team1: Team, team2: Team, venue: Optional[Venue]) -> None:
        self._prepare_xi(team1)
        self._prepare_xi(team2)

        # Simulate toss; most teams prefer to chase
        toss_winner = self.rng.choice([team1, team2])
        toss_decision = self.rng.choices(["bowl", "bat"], weights=[70, 30])[0]
        if toss_decision == "bowl":
            batting_first = team2 if toss_winner is team1 else team1
        else:
            batting_first = toss_winner
        batting_second = team2 if batting_first is team1 else team1

        engine = MatchEngine(
            rng=random.Random(self.rng.getrandbits(64)),
            events=self.match_events,
            super_over_enabled=self.config.super_over_enabled,
            super_over_limit=self.config.super_over_limit,
            max_bowler_overs=self.config.max_bowler_overs,
        )
        engine.initialise(batting_first, batting_second, venue, fixture.match_format)
        result = engine.simulate_match()
        result["toss_winner"] = toss_winner.name
        result["toss_decision"] = toss_decision
        self.last_match = engine
        self.results[fixture.id] = result

        scores = {
            result["innings1"]["batting_team"]: result["innings1"],
            result["innings2"]["batting_team"]: result["innings2"],
        }
        fixture.team1_score = scores[fixture.team1]["runs"]
        fixture.team1_wickets = scores[fixture.team1]["wickets"]
        fixture.team2_score = scores[fixture.team2]["runs"]
        fixture.team2_wickets = scores[fixture.team2]["wickets"]
        fixture.winner = result["winner"]
        fixture.result = result["margin"] if result["winner"] is None else f"{result['winner']} won by {result['margin']}"

        if fixture.fixture_type in DECISIVE_TYPES:
            if fixture.winner is None:
                fixture.winner = fixture.team1
                fixture.result = f"Match tied, {fixture.team1} advance as higher seed"
        else:
            self.tables[self._table_for(fixture)].record_result(result)

        if venue is not None:
            venue.record_match()
        self._update_squads(team1, team2, fixture.winner)
        self._update_stats(engine)
        logger.info("Fixture %d: %s", fixture.id, fixture.result)

    def _update_squads(self, team1: Team, team2: Team, winner: Optional[str]) -> None:
        for team in (team1, team2):
            if winner is not None:
                delta = 2 if team.name == winner else -2
                for player in team.players:
                    player.update_morale(delta)
            for player in team.players:
                player.recover(1)

    def _update_stats(self, engine: MatchEngine) -> None:
        for innings in engine.innings[:2]:
            self._innings_totals.append((innings.batting_team, innings.total_runs))
            for batter in innings.batter_innings.values():
                self._run_scorers[batter.name] += batter.runs
            for spell in innings.bowler_spells.values():
                self._wicket_takers[spell.name] += spell.wickets

    def advance(self) -> bool:
        """
        Move to the next stage once every fixture of this one is played.

        No-op (returns False) while the stage is incomplete or the tournament is paused.
        """
        self._check_mutable()
        if self.is_complete or self.paused or not self.is_stage_complete():
            return False

        stage = self.current_stage
        fmt = self.config.format
        if stage.fixture_type == FixtureType.LEAGUE:
            ranked = self.tables["League"].top(len(self.teams))
            if fmt == TournamentFormat.ROUND_ROBIN:
                self._finish(ranked[0], ranked[1])
                return True
            self._start_playoffs(ranked[: self.config.playoff_teams])
        elif stage.fixture_type == FixtureType.GROUP:
            self._start_bracket(self._group_qualifiers())
        elif stage.fixture_type == FixtureType.KNOCKOUT:
            if not self._advance_bracket():
                return True
        else:
            if not self._advance_playoffs(stage):
                return True

        logger.info("Advanced to %s", self.current_stage.name)
        self.events.emit(EventKind.STAGE_ADVANCE, self.current_stage.name)
        return True

    def _group_qualifiers(self) -> list[str]:
        """Group winners first, then runners-up, and so on"""
        ranked = [self.tables[label].top(self.config.qualifiers_per_group) for label in self.groups]
        return [group[place] for place in range(self.config.qualifiers_per_group) for group in ranked]

    def _advance_bracket(self) -> bool:
        """Winners move on. Returns False once the champion is known."""
        fixtures_by_pair = {
            frozenset((f.team1, f.team2)): f
            for f in (self.fixtures[i] for i in self.current_stage.fixture_ids)
        }
        winners = []
        for i in range(0, len(self.bracket), 2):
            team1, team2 = self.bracket[i], self.bracket[i + 1]
            if team1 and team2:
                winners.append(fixtures_by_pair[frozenset((team1, team2))].winner)
            else:
                winners.append(team1 or team2)

        if len(winners) == 1:
            final = fixtures_by_pair[frozenset(self.bracket)]
            self._finish(final.winner, final.loser)
            return False
        self.bracket = winners
        self._schedule_bracket_round()
        return True

    def _start_playoffs(self, top: list[str]) -> None:
        if len(top) == 2:
            stage = Stage(name="Final", fixture_type=FixtureType.FINAL)
            self.stages.append(stage)
            self._add_fixture(top[0], top[1], FixtureType.FINAL, stage)
            return
        # IPL format: Qualifier 1 (1st v 2nd) and Eliminator (3rd v 4th)
        stage = Stage(name="Playoffs", fixture_type=FixtureType.QUALIFIER_1)
        self.stages.append(stage)
        self._add_fixture(top[0], top[1], FixtureType.QUALIFIER_1, stage)
        self._add_fixture(top[2], top[3], FixtureType.ELIMINATOR, stage)

    def _stage_fixture(self, stage: Stage, fixture_type: FixtureType) -> Fixture:
        return next(
            self.fixtures[i] for i in stage.fixture_ids if self.fixtures[i].fixture_type == fixture_type
        )

    def _advance_playoffs(self, stage: Stage) -> bool:
        """Returns False once the champion is known."""
        if stage.name == "Final":
            final = self._stage_fixture(stage, FixtureType.FINAL)
            self._finish(final.winner, final.loser)
            return False
        if stage.name == "Playoffs":
            q1 = self._stage_fixture(stage, FixtureType.QUALIFIER_1)
            elim = self._stage_fixture(stage, FixtureType.ELIMINATOR)
            # Q1 loser gets a second chance against the Eliminator winner
            new_stage = Stage(name="Qualifier 2", fixture_type=FixtureType.QUALIFIER_2)
            self.stages.append(new_stage)
            self._add_fixture(q1.loser, elim.winner, FixtureType.QUALIFIER_2, new_stage)
            return True
        # Qualifier 2 done: Q1 winner meets Q2 winner
        q1 = next(f for f in self.fixtures.values() if f.fixture_type == FixtureType.QUALIFIER_1)
        q2 = self._stage_fixture(stage, FixtureType.QUALIFIER_2)
        new_stage = Stage(name="Final", fixture_type=FixtureType.FINAL)
        self.stages.append(new_stage)
        self._add_fixture(q1.winner, q2.winner, FixtureType.FINAL, new_stage)
        return True

    def _finish(self, champion: str, runner_up: Optional[str]) -> None:
        self.status = TournamentStatus.COMPLETED
        self.winner = champion
        self.runner_up = runner_up
        logger.info("%s won by %s", self.config.name, champion)
        self.events.emit(EventKind.TOURNAMENT_END, champion)

    def simulate_all(self, on_match: Optional[Callable[[Fixture], None]] = None) -> Optional[str]:
        """Play and advance until a winner is known. Returns the winner."""
        self._check_mutable()
        while not self.is_complete:
            for fixture in self.pending_fixtures():
                played = self.play_match(fixture.id)
                if played is None:
                    return None
                if on_match:
                    on_match(played)
            if not self.advance():
                return None
        return self.winner

    # --- statistics ---

    def stats(self, count: int = 10) -> dict:
        totals = [runs for _, runs in self._innings_totals]
        highest = max(self._innings_totals, key=lambda t: t[1], default=None)
        lowest = min(self._innings_totals, key=lambda t: t[1], default=None)
        completed = [f for f in self.fixtures.values() if f.completed]
        wins = Counter(f.winner for f in completed if f.winner)
        return {
            "total_matches": len(self.fixtures),
            "completed_matches": len(completed),
            "total_runs": sum(totals),
            "total_wickets": sum(self._wicket_takers.values()),
            "average_score": round(sum(totals) / len(totals), 1) if totals else 0.0,
            "highest_score": {"team": highest[0], "runs": highest[1]} if highest else None,
            "lowest_score": {"team": lowest[0], "runs": lowest[1]} if lowest else None,
            "top_run_scorers": self._run_scorers.most_common(count),
            "top_wicket_takers": self._wicket_takers.most_common(count),
            "team_wins": dict(wins),
        }

    # --- persistence ---

    def to_dict(self) -> dict:
        version, internal, gauss = self.rng.getstate()
        return {
            "kind": "tournament",
            "config": self.config.model_dump(mode="json"),
            "status": self.status.value,
            "paused": self.paused,
            "winner": self.winner,
            "runner_up": self.runner_up,
            "fixtures": [f.to_dict() for f in self.fixtures.values()],
            "stages": [
                {"name": s.name, "fixture_type": s.fixture_type.value, "fixture_ids": list(s.fixture_ids)}
                for s in self.stages
            ],
            "tables": {name: t.to_dict() for name, t in self.tables.items()},
            "groups": self.groups,
            "bracket": list(self.bracket),
            "venue_last_played": {k: v.isoformat() for k, v in self._venue_last_played.items()},
            "run_scorers": dict(self._run_scorers),
            "wicket_takers": dict(self._wicket_takers),
            "innings_totals": [list(t) for t in self._innings_totals],
            "rng_state": [version, list(internal), gauss],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        teams: list[Team],
        venues: Optional[list[Venue]] = None,
        events: Optional[EventQueue] = None,
        match_events: Optional[EventQueue] = None,
    ) -> "TournamentEngine":
        if data.get("kind") != "tournament":
            raise ConfigurationError("Not a tournament snapshot")
        engine = cls.__new__(cls)
        engine.config = cls._load_config(data["config"])
        engine.teams = {t.name: t for t in teams}
        engine.venues = {v.name: v for v in venues or []}
        engine._venue_order = [v.name for v in venues or []]
        engine.rng = random.Random()
        version, internal, gauss = data["rng_state"]
        engine.rng.setstate((version, tuple(internal), gauss))
        engine.events = events if events is not None else EventQueue()
        engine.match_events = match_events

        engine.status = TournamentStatus(data["status"])
        engine.paused = data["paused"]
        engine.winner = data["winner"]
        engine.runner_up = data["runner_up"]
        engine.fixtures = {f["id"]: Fixture.from_dict(f) for f in data["fixtures"]}
        engine.stages = [
            Stage(name=s["name"], fixture_type=FixtureType(s["fixture_type"]), fixture_ids=list(s["fixture_ids"]))
            for s in data["stages"]
        ]
        engine.tables = {name: PointsTable.from_dict(t) for name, t in data["tables"].items()}
        engine.groups = {k: list(v) for k, v in data["groups"].items()}
        engine.bracket = list(data["bracket"])
        engine.results = {}
        engine.last_match = None
        engine._venue_last_played = {k: date.fromisoformat(v) for k, v in data["venue_last_played"].items()}
        engine._run_scorers = Counter(data["run_scorers"])
        engine._wicket_takers = Counter(data["wicket_takers"])
        engine._innings_totals = [tuple(t) for t in data["innings_totals"]]
        return engine
