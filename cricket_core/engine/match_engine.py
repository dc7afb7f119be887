"""
Match Engine - ball-by-ball simulation with super over tie-break
"""
import enum
import logging
import random
from dataclasses import dataclass, field, asdict
from typing import Callable, Optional

from cricket_core.config import settings
from cricket_core.errors import (
    Cancelled, ConfigurationError, InvalidBowlingChange, InvalidLineup,
    InvariantViolation, MatchComplete, OrderLocked,
)
from cricket_core.events import EventKind, EventQueue
from cricket_core.engine.formats import FormatConfig, MatchFormat, SUPER_OVER, get_format
from cricket_core.engine.probabilities import (
    BallResult, DISMISSAL_TYPES, FIELDER_DISMISSALS, KEEPER_DISMISSALS,
    outcome_distribution, run_shift, shift_result,
)
from cricket_core.models.player import Player, PlayerRole
from cricket_core.models.team import Team
from cricket_core.models.venue import PitchConditions, Venue, WeatherConditions
from cricket_core.validators.playing_xi_validator import PlayingXIValidator

logger = logging.getLogger(__name__)

SUPER_OVER_BATTERS = 3
SUPER_OVER_WICKETS = 2


class MatchState(enum.Enum):
    NOT_STARTED = "not_started"
    FIRST_INNINGS = "first_innings"
    SECOND_INNINGS = "second_innings"
    SUPER_OVER = "super_over"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class BallEvent:
    """
    One delivery, legal or not.

    `ball` counts every delivery in the over so positions strictly increase;
    `legal_balls` is the legal count after this delivery.
    """
    innings: int
    over: int
    ball: int
    legal_balls: int
    batting_team: str
    striker: str
    non_striker: str
    bowler: str
    result: BallResult
    runs: int = 0
    extras: int = 0
    wicket_kind: Optional[str] = None
    fielder: Optional[str] = None

    @property
    def position(self) -> tuple[int, int, int]:
        return (self.innings, self.over, self.ball)

    @property
    def total_runs(self) -> int:
        return self.runs + self.extras

    def to_dict(self) -> dict:
        data = asdict(self)
        data["result"] = self.result.value
        return data

    @classmethod
    def from_dict(cls, d: dict) -> "BallEvent":
        return cls(**{**d, "result": BallResult(d["result"])})


@dataclass
class BatterInnings:
    """Tracks a batter's innings"""
    name: str
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    is_out: bool = False
    dismissal: str = ""
    bowler: Optional[str] = None
    fielder: Optional[str] = None

    @property
    def strike_rate(self) -> float:
        if self.balls == 0:
            return 0.0
        return (self.runs / self.balls) * 100


@dataclass
class BowlerSpell:
    """Tracks a bowler's spell"""
    name: str
    overs: int = 0
    balls: int = 0
    runs: int = 0
    wickets: int = 0
    wides: int = 0
    no_balls: int = 0

    @property
    def overs_display(self) -> str:
        return f"{self.overs}.{self.balls}"

    @property
    def economy(self) -> float:
        total_balls = self.overs * 6 + self.balls
        if total_balls == 0:
            return 0.0
        return (self.runs / total_balls) * 6


@dataclass
class InningsState:
    """Current state of an innings"""
    number: int
    batting_team: str
    bowling_team: str
    batting_order: list[str]
    bowling_order: list[str]
    max_overs: int
    bowler_cap: int
    max_wickets: int = 10
    target: Optional[int] = None
    is_super_over: bool = False

    total_runs: int = 0
    wickets: int = 0
    overs: int = 0
    balls: int = 0  # legal balls in the current over
    deliveries: int = 0  # all deliveries in the current over
    extras: int = 0
    over_runs: int = 0
    over_wickets: int = 0

    batter_innings: dict = field(default_factory=dict)  # name -> BatterInnings
    bowler_spells: dict = field(default_factory=dict)  # name -> BowlerSpell
    over_bowlers: list = field(default_factory=list)  # bowler of each over, in order

    striker: Optional[str] = None
    non_striker: Optional[str] = None
    current_bowler: Optional[str] = None
    last_bowler: Optional[str] = None
    next_batter_index: int = 2  # 0 and 1 are openers
    is_complete: bool = False

    @property
    def legal_balls(self) -> int:
        return self.overs * 6 + self.balls

    @property
    def overs_display(self) -> str:
        return f"{self.overs}.{self.balls}"

    @property
    def run_rate(self) -> float:
        if self.legal_balls == 0:
            return 0.0
        return (self.total_runs / self.legal_balls) * 6

    @property
    def required_rate(self) -> Optional[float]:
        if self.target is None:
            return None
        remaining = self.target - self.total_runs
        balls_left = self.max_overs * 6 - self.legal_balls
        if balls_left <= 0:
            return 99.99
        return (remaining / balls_left) * 6

    @property
    def is_all_out(self) -> bool:
        return self.wickets >= self.max_wickets or (
            self.wickets > 0 and self.next_batter_index > len(self.batting_order)
        )

    @property
    def is_innings_complete(self) -> bool:
        if self.is_all_out:
            return True
        if self.overs >= self.max_overs:
            return True
        if self.target and self.total_runs >= self.target:
            return True
        return False

    def summary(self) -> dict:
        return {
            "innings": self.number,
            "batting_team": self.batting_team,
            "bowling_team": self.bowling_team,
            "runs": self.total_runs,
            "wickets": self.wickets,
            "overs": self.overs_display,
            "balls": self.legal_balls,
            "max_overs": self.max_overs,
            "all_out": self.is_all_out,
            "extras": self.extras,
            "run_rate": round(self.run_rate, 2),
            "is_super_over": self.is_super_over,
        }

    def to_dict(self) -> dict:
        data = asdict(self)
        data["batter_innings"] = {k: asdict(v) for k, v in self.batter_innings.items()}
        data["bowler_spells"] = {k: asdict(v) for k, v in self.bowler_spells.items()}
        return data

    @classmethod
    def from_dict(cls, d: dict) -> "InningsState":
        data = dict(d)
        data["batter_innings"] = {k: BatterInnings(**v) for k, v in d["batter_innings"].items()}
        data["bowler_spells"] = {k: BowlerSpell(**v) for k, v in d["bowler_spells"].items()}
        return cls(**data)


class MatchEngine:
    """
    Cricket match simulation engine.
    Simulates matches ball by ball with probability-based outcomes.

    States: NOT_STARTED -> FIRST_INNINGS -> SECOND_INNINGS -> [SUPER_OVER]* -> COMPLETE.
    Pausing is orthogonal: a paused engine accepts no deliveries.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        events: Optional[EventQueue] = None,
        super_over_enabled: Optional[bool] = None,
        super_over_limit: Optional[int] = None,
        max_bowler_overs: Optional[int] = None,
    ):
        self.rng = rng or random.Random()
        self.events = events if events is not None else EventQueue()
        self.super_over_enabled = (
            settings.SUPER_OVER_ENABLED if super_over_enabled is None else super_over_enabled
        )
        self.super_over_limit = (
            settings.SUPER_OVER_LIMIT if super_over_limit is None else super_over_limit
        )
        if self.super_over_limit < 0:
            raise ConfigurationError("super_over_limit cannot be negative")
        self.max_bowler_overs = max_bowler_overs

        self.state = MatchState.NOT_STARTED
        self.paused = False
        self.match_format: Optional[MatchFormat] = None
        self.format_config: Optional[FormatConfig] = None
        self.team1: Optional[Team] = None
        self.team2: Optional[Team] = None
        self.venue: Optional[Venue] = None
        self.pitch = PitchConditions()
        self.weather = WeatherConditions()

        self.players: dict[str, Player] = {}
        self.playing_xi: dict[str, list[str]] = {}
        self.batting_orders: dict[str, list[str]] = {}
        self.bowling_orders: dict[str, list[str]] = {}
        self.innings: list[InningsState] = []
        self.ball_history: list[BallEvent] = []
        self.super_overs: list[dict] = []
        self.result: Optional[dict] = None

    # --- setup ---

    def initialise(
        self,
        team1: Team,
        team2: Team,
        venue: Optional[Venue] = None,
        match_format: MatchFormat = MatchFormat.T20,
        pitch: Optional[PitchConditions] = None,
        weather: Optional[WeatherConditions] = None,
        seed: Optional[int] = None,
    ) -> None:
        """Validate both lineups and set up the first innings. team1 bats first."""
        if self.state == MatchState.CANCELLED:
            raise Cancelled("Match was cancelled")
        if self.state != MatchState.NOT_STARTED:
            raise ConfigurationError("Match already initialised")
        if team1 is team2 or team1.name == team2.name:
            raise InvalidLineup("A team cannot play itself")

        PlayingXIValidator.check(team1)
        PlayingXIValidator.check(team2)

        config = get_format(match_format, self.max_bowler_overs)
        if config.max_bowler_overs * 10 < config.overs:
            raise ConfigurationError(
                f"Bowler cap of {config.max_bowler_overs} cannot cover {config.overs} overs"
            )

        if seed is not None:
            self.rng.seed(seed)

        self.match_format = MatchFormat(match_format)
        self.format_config = config
        self.team1 = team1
        self.team2 = team2
        self.venue = venue
        self.pitch = pitch or (venue.pitch if venue else PitchConditions())
        self.weather = weather or (venue.weather if venue else WeatherConditions())
        self._capture_lineups()

        self.state = MatchState.FIRST_INNINGS
        self._start_innings(team1.name, team2.name)
        logger.info(
            "%s vs %s (%s) initialised at %s",
            team1.name, team2.name, config.name, venue.name if venue else "neutral venue",
        )

    def _capture_lineups(self) -> None:
        for team in (self.team1, self.team2):
            xi = team.playing_xi
            self.players.update({p.name: p for p in xi})
            self.playing_xi[team.name] = [p.name for p in xi]
            self.batting_orders[team.name] = [p.name for p in team.batting_order]
            self.bowling_orders[team.name] = [p.name for p in team.bowling_order]

    def _opponent(self, team_name: str) -> str:
        return self.team2.name if team_name == self.team1.name else self.team1.name

    def _start_innings(
        self,
        batting: str,
        bowling: str,
        target: Optional[int] = None,
        super_over: bool = False,
    ) -> InningsState:
        if super_over:
            order = self.batting_orders[batting][:SUPER_OVER_BATTERS]
            max_overs, cap, max_wickets = SUPER_OVER.overs, SUPER_OVER.max_bowler_overs, SUPER_OVER_WICKETS
        else:
            order = list(self.batting_orders[batting])
            max_overs = self.format_config.overs
            cap = self.format_config.max_bowler_overs
            max_wickets = 10

        innings = InningsState(
            number=len(self.innings) + 1,
            batting_team=batting,
            bowling_team=bowling,
            batting_order=order,
            bowling_order=list(self.bowling_orders[bowling]),
            max_overs=max_overs,
            bowler_cap=cap,
            max_wickets=max_wickets,
            target=target,
            is_super_over=super_over,
        )

        # Set openers
        innings.striker = order[0]
        innings.non_striker = order[1]
        innings.batter_innings[order[0]] = BatterInnings(name=order[0])
        innings.batter_innings[order[1]] = BatterInnings(name=order[1])
        innings.current_bowler = innings.bowling_order[0]

        self.innings.append(innings)
        logger.debug("Innings %d: %s batting, target %s", innings.number, batting, target)
        return innings

    # --- accessors ---

    @property
    def current_innings(self) -> Optional[InningsState]:
        return self.innings[-1] if self.innings else None

    @property
    def innings_number(self) -> int:
        return len(self.innings)

    @property
    def striker(self) -> Optional[str]:
        return self.current_innings.striker if self.innings else None

    @property
    def non_striker(self) -> Optional[str]:
        return self.current_innings.non_striker if self.innings else None

    @property
    def bowler(self) -> Optional[str]:
        return self.current_innings.current_bowler if self.innings else None

    @property
    def winner(self) -> Optional[str]:
        return self.result["winner"] if self.result else None

    @property
    def is_complete(self) -> bool:
        return self.state == MatchState.COMPLETE

    # --- control ---

    def _check_mutable(self) -> None:
        if self.state == MatchState.CANCELLED:
            raise Cancelled("Match was cancelled")
        if self.state == MatchState.COMPLETE:
            raise MatchComplete("Match is complete")
        if self.state == MatchState.NOT_STARTED:
            raise ConfigurationError("Match has not been initialised")

    def pause(self) -> None:
        self._check_mutable()
        self.paused = True

    def resume(self) -> None:
        self._check_mutable()
        self.paused = False

    def cancel(self) -> None:
        if self.state == MatchState.CANCELLED:
            raise Cancelled("Match was cancelled")
        if self.state == MatchState.COMPLETE:
            raise MatchComplete("Match is complete")
        self.state = MatchState.CANCELLED
        self.result = None
        logger.info("Match cancelled")

    def set_bowler(self, name: str) -> None:
        """Choose the bowler for the coming over"""
        self._check_mutable()
        innings = self.current_innings
        if innings.deliveries > 0:
            raise InvalidBowlingChange("Bowler can only be changed between overs")
        if name not in self.playing_xi[innings.bowling_team]:
            raise InvalidBowlingChange(f"{name} is not in the {innings.bowling_team} XI")
        if name == innings.last_bowler:
            raise InvalidBowlingChange(f"{name} bowled the previous over")
        spell = innings.bowler_spells.get(name)
        if spell and spell.overs >= innings.bowler_cap:
            raise InvalidBowlingChange(f"{name} has bowled the maximum {innings.bowler_cap} overs")
        innings.current_bowler = name

    def set_batting_order(self, team_name: str, order: list[str]) -> None:
        """Reorder a side that has not yet batted"""
        self._check_mutable()
        if team_name not in self.batting_orders:
            raise InvalidLineup(f"{team_name} is not playing this match")
        if any(i.batting_team == team_name for i in self.innings):
            raise OrderLocked(f"{team_name} batting order is locked")
        xi = self.playing_xi[team_name]
        if len(order) != len(xi) or sorted(order) != sorted(xi):
            raise InvalidLineup(f"{team_name}: batting order must be a permutation of the XI")
        self.batting_orders[team_name] = list(order)

    # --- simulation ---

    def _select_bowler(self, innings: InningsState) -> str:
        """Next bowler in rotation (cannot be same as last over, capped overs per bowler)"""
        def eligible(name: str) -> bool:
            spell = innings.bowler_spells.get(name)
            if spell and spell.overs >= innings.bowler_cap:
                return False
            return name != innings.last_bowler

        order = innings.bowling_order
        start = order.index(innings.last_bowler) + 1 if innings.last_bowler in order else 0
        for i in range(len(order)):
            candidate = order[(start + i) % len(order)]
            if eligible(candidate):
                return candidate

        # Fallback: anyone in the XI with overs left
        fallback = [n for n in self.playing_xi[innings.bowling_team] if eligible(n)]
        if not fallback:
            raise InvariantViolation(f"No eligible bowler for over {innings.overs + 1}")

        def remaining(name: str) -> int:
            spell = innings.bowler_spells.get(name)
            return innings.bowler_cap - (spell.overs if spell else 0)

        fallback.sort(key=lambda n: (
            not self.players[n].can_bowl,
            -remaining(n),
            -self.players[n].bowling,
            n,
        ))
        return fallback[0]

    def _dismissal(self, innings: InningsState, bowler: str) -> tuple[str, Optional[str]]:
        kinds = [d[0] for d in DISMISSAL_TYPES]
        weights = [d[1] for d in DISMISSAL_TYPES]
        kind = self.rng.choices(kinds, weights=weights)[0]

        fielding_xi = self.playing_xi[innings.bowling_team]
        if kind in KEEPER_DISMISSALS:
            keeper = next(
                (n for n in fielding_xi if self.players[n].role == PlayerRole.WICKET_KEEPER),
                None,
            )
            if keeper is not None and keeper != bowler:
                return kind, keeper
            kind = "caught"
        if kind in FIELDER_DISMISSALS:
            fielders = [n for n in fielding_xi if n != bowler]
            return kind, self.rng.choice(fielders)
        return kind, None

    def simulate_ball(self) -> Optional[BallEvent]:
        """
        Bowl one delivery and apply it to the current innings.

        Returns None while paused.
        """
        self._check_mutable()
        if self.paused:
            return None

        innings = self.current_innings
        if innings.deliveries == 0 and innings.current_bowler is None:
            innings.current_bowler = self._select_bowler(innings)

        bowler_name = innings.current_bowler
        striker_name = innings.striker
        non_striker_name = innings.non_striker
        batter = self.players[striker_name]
        bowler = self.players[bowler_name]

        dist = outcome_distribution(self.match_format, batter, bowler, self.pitch, self.weather)
        result = self.rng.choices(list(dist), weights=list(dist.values()))[0]
        result = shift_result(result, run_shift(batter, bowler))

        innings.deliveries += 1
        runs = result.bat_runs
        extras = result.extra_runs
        wicket_kind = fielder = None

        spell = innings.bowler_spells.setdefault(bowler_name, BowlerSpell(name=bowler_name))
        if innings.balls == 0 and innings.deliveries == 1:
            innings.over_bowlers.append(bowler_name)
        batter_innings = innings.batter_innings[striker_name]

        if result.is_legal:
            innings.balls += 1
            spell.balls += 1
            batter_innings.balls += 1

        batter_innings.runs += runs
        if result == BallResult.FOUR:
            batter_innings.fours += 1
        elif result == BallResult.SIX:
            batter_innings.sixes += 1

        innings.total_runs += runs + extras
        innings.extras += extras
        innings.over_runs += runs + extras

        # Byes and leg byes are not charged to the bowler
        if result == BallResult.WIDE:
            spell.wides += 1
            spell.runs += extras
        elif result == BallResult.NO_BALL:
            spell.no_balls += 1
            spell.runs += extras
        spell.runs += runs

        if result == BallResult.WICKET:
            wicket_kind, fielder = self._dismissal(innings, bowler_name)
            innings.wickets += 1
            innings.over_wickets += 1
            if wicket_kind != "run_out":
                spell.wickets += 1
            batter_innings.is_out = True
            batter_innings.dismissal = wicket_kind
            batter_innings.bowler = bowler_name
            batter_innings.fielder = fielder

        event = BallEvent(
            innings=innings.number,
            over=innings.overs,
            ball=innings.deliveries,
            legal_balls=innings.balls,
            batting_team=innings.batting_team,
            striker=striker_name,
            non_striker=non_striker_name,
            bowler=bowler_name,
            result=result,
            runs=runs,
            extras=extras,
            wicket_kind=wicket_kind,
            fielder=fielder,
        )
        self._record(event)

        if result == BallResult.WICKET:
            # Bring in next batter; the dismissed batter keeps strike if none is left
            if (
                innings.wickets < innings.max_wickets
                and innings.next_batter_index < len(innings.batting_order)
            ):
                next_batter = innings.batting_order[innings.next_batter_index]
                innings.striker = next_batter
                innings.batter_innings[next_batter] = BatterInnings(name=next_batter)
            innings.next_batter_index += 1
        elif result.is_legal and (runs + extras) % 2 == 1:
            # Rotate strike on odd runs
            innings.striker, innings.non_striker = innings.non_striker, innings.striker

        if innings.balls >= self.format_config.balls_per_over:
            self._end_over(innings, spell)

        if innings.is_innings_complete:
            self._end_innings(innings)

        return event

    def _record(self, event: BallEvent) -> None:
        if self.ball_history and event.position <= self.ball_history[-1].position:
            raise InvariantViolation(
                f"Ball event {event.position} out of order after {self.ball_history[-1].position}"
            )
        self.ball_history.append(event)
        logger.debug(
            "%d.%d %s to %s: %s", event.over, event.ball, event.bowler, event.striker, event.result.value
        )
        self.events.emit(EventKind.BALL, event)

    def _end_over(self, innings: InningsState, spell: BowlerSpell) -> None:
        summary = {
            "innings": innings.number,
            "over": innings.overs + 1,
            "bowler": innings.current_bowler,
            "runs": innings.over_runs,
            "wickets": innings.over_wickets,
            "score": f"{innings.total_runs}/{innings.wickets}",
        }
        innings.overs += 1
        innings.balls = 0
        innings.deliveries = 0
        innings.over_runs = 0
        innings.over_wickets = 0
        spell.overs += 1
        spell.balls = 0
        innings.last_bowler = innings.current_bowler
        innings.current_bowler = None

        # Rotate strike at end of over
        innings.striker, innings.non_striker = innings.non_striker, innings.striker
        self.events.emit(EventKind.OVER, summary)

        if not innings.is_innings_complete:
            innings.current_bowler = self._select_bowler(innings)

    def _end_innings(self, innings: InningsState) -> None:
        innings.is_complete = True
        innings.current_bowler = None
        summary = innings.summary()
        logger.info(
            "Innings %d: %s %d/%d (%s)",
            innings.number, innings.batting_team, innings.total_runs, innings.wickets, innings.overs_display,
        )
        self.events.emit(EventKind.INNINGS_END, summary)

        if self.state == MatchState.FIRST_INNINGS:
            self.state = MatchState.SECOND_INNINGS
            self._start_innings(innings.bowling_team, innings.batting_team, target=innings.total_runs + 1)
        elif self.state == MatchState.SECOND_INNINGS:
            first = self.innings[0]
            if first.total_runs != innings.total_runs:
                self._finish()
            else:
                self._next_super_over()
        elif self.state == MatchState.SUPER_OVER:
            if innings.target is None:
                self._start_innings(
                    innings.bowling_team, innings.batting_team,
                    target=innings.total_runs + 1, super_over=True,
                )
            else:
                first = self.innings[-2]
                winner = None
                if innings.total_runs != first.total_runs:
                    winner = first.batting_team if first.total_runs > innings.total_runs else innings.batting_team
                self.super_overs.append({
                    "innings": [first.summary(), innings.summary()],
                    "winner": winner,
                })
                if winner:
                    self._finish()
                else:
                    self._next_super_over()
        else:
            raise InvariantViolation(f"Innings ended in state {self.state.value}")

    def _next_super_over(self) -> None:
        if not self.super_over_enabled or len(self.super_overs) >= self.super_over_limit:
            self._finish()
            return
        self.state = MatchState.SUPER_OVER
        # Side that batted second goes first; alternates on repeated ties
        second = self.innings[1].batting_team
        batting = second if len(self.super_overs) % 2 == 0 else self._opponent(second)
        logger.info("Scores level, super over %d: %s bat first", len(self.super_overs) + 1, batting)
        self._start_innings(batting, self._opponent(batting), super_over=True)

    def _finish(self) -> None:
        first, second = self.innings[0], self.innings[1]
        winner = None
        if self.super_overs and self.super_overs[-1]["winner"]:
            winner = self.super_overs[-1]["winner"]
            margin = "Super Over"
        elif second.total_runs >= (second.target or 0):
            winner = second.batting_team
            margin = f"{10 - second.wickets} wickets"
            balls_remaining = second.max_overs * 6 - second.legal_balls
            if balls_remaining > 0:
                margin += f" ({balls_remaining} balls remaining)"
        elif second.total_runs < first.total_runs:
            winner = first.batting_team
            margin = f"{first.total_runs - second.total_runs} runs"
        else:
            margin = "Match tied"

        self.state = MatchState.COMPLETE
        self.result = {
            "team1": self.team1.name,
            "team2": self.team2.name,
            "format": self.match_format.value,
            "venue": self.venue.name if self.venue else None,
            "innings1": first.summary(),
            "innings2": second.summary(),
            "super_overs": list(self.super_overs),
            "winner": winner,
            "is_tie": winner is None,
            "margin": margin,
        }
        logger.info("Result: %s (%s)", winner or "tie", margin)
        self.events.emit(EventKind.MATCH_END, self.result)

    def simulate_over(self) -> list[BallEvent]:
        """Simulate until the current over (or innings) ends"""
        self._check_mutable()
        innings = self.current_innings
        over = innings.overs
        events = []
        while self.current_innings is innings and innings.overs == over and not self.is_complete:
            event = self.simulate_ball()
            if event is None:
                break
            events.append(event)
        return events

    def simulate_innings(self) -> InningsState:
        """Simulate a complete innings"""
        self._check_mutable()
        innings = self.current_innings
        while not innings.is_complete:
            if self.simulate_ball() is None:
                break
        return innings

    def simulate_match(self, on_step: Optional[Callable[[BallEvent], None]] = None) -> Optional[dict]:
        """
        Simulate to the end, calling on_step after each delivery.

        Returns the result, or None if the match was paused or cancelled midway.
        """
        self._check_mutable()
        while self.state not in (MatchState.COMPLETE, MatchState.CANCELLED):
            event = self.simulate_ball()
            if event is None:
                return None
            if on_step:
                on_step(event)
        return self.result

    # --- persistence ---

    def to_dict(self) -> dict:
        version, internal, gauss = self.rng.getstate()
        return {
            "kind": "match",
            "state": self.state.value,
            "paused": self.paused,
            "format": self.match_format.value if self.match_format else None,
            "max_bowler_overs": self.max_bowler_overs,
            "super_over_enabled": self.super_over_enabled,
            "super_over_limit": self.super_over_limit,
            "team1": self.team1.name if self.team1 else None,
            "team2": self.team2.name if self.team2 else None,
            "venue": self.venue.name if self.venue else None,
            "pitch": asdict(self.pitch),
            "weather": asdict(self.weather),
            "playing_xi": self.playing_xi,
            "batting_orders": self.batting_orders,
            "bowling_orders": self.bowling_orders,
            "innings": [i.to_dict() for i in self.innings],
            "ball_history": [e.to_dict() for e in self.ball_history],
            "super_overs": self.super_overs,
            "result": self.result,
            "rng_state": [version, list(internal), gauss],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        teams: list[Team],
        venue: Optional[Venue] = None,
        events: Optional[EventQueue] = None,
    ) -> "MatchEngine":
        if data.get("kind") != "match":
            raise ConfigurationError("Not a match snapshot")
        engine = cls(
            events=events,
            super_over_enabled=data["super_over_enabled"],
            super_over_limit=data["super_over_limit"],
            max_bowler_overs=data["max_bowler_overs"],
        )
        version, internal, gauss = data["rng_state"]
        engine.rng.setstate((version, tuple(internal), gauss))

        by_name = {t.name: t for t in teams}
        try:
            engine.team1 = by_name[data["team1"]]
            engine.team2 = by_name[data["team2"]]
        except KeyError as exc:
            raise ConfigurationError(f"Team {exc} missing from restore") from exc
        engine.venue = venue
        engine.state = MatchState(data["state"])
        engine.paused = data["paused"]
        engine.match_format = MatchFormat(data["format"])
        engine.format_config = get_format(engine.match_format, engine.max_bowler_overs)
        engine.pitch = PitchConditions(**data["pitch"])
        engine.weather = WeatherConditions(**data["weather"])
        engine.playing_xi = {k: list(v) for k, v in data["playing_xi"].items()}
        engine.batting_orders = {k: list(v) for k, v in data["batting_orders"].items()}
        engine.bowling_orders = {k: list(v) for k, v in data["bowling_orders"].items()}
        for team in (engine.team1, engine.team2):
            engine.players.update({p.name: p for p in team.players})
        engine.innings = [InningsState.from_dict(i) for i in data["innings"]]
        engine.ball_history = [BallEvent.from_dict(e) for e in data["ball_history"]]
        engine.super_overs = list(data["super_overs"])
        engine.result = data["result"]
        return engine
