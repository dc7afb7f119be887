"""
Outcome tables for the match engine.

Ball resolution composes three layers multiplicatively (format baseline,
batter approach, bowler quality) with pitch and weather factors, then
normalises before sampling.
"""
import enum

from cricket_core.engine.formats import MatchFormat
from cricket_core.models.player import BattingApproach, Player
from cricket_core.models.venue import PitchConditions, WeatherConditions


class BallResult(enum.Enum):
    DOT = "dot"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    SIX = "6"
    WICKET = "wicket"
    WIDE = "wide"
    NO_BALL = "no_ball"
    BYE = "bye"
    LEG_BYE = "leg_bye"

    @property
    def bat_runs(self) -> int:
        return BAT_RUNS.get(self, 0)

    @property
    def is_scoring(self) -> bool:
        return self in SCORING_RESULTS

    @property
    def is_legal(self) -> bool:
        return self not in (BallResult.WIDE, BallResult.NO_BALL)

    @property
    def extra_runs(self) -> int:
        return 1 if self in (BallResult.WIDE, BallResult.NO_BALL, BallResult.BYE, BallResult.LEG_BYE) else 0


BAT_RUNS = {
    BallResult.ONE: 1,
    BallResult.TWO: 2,
    BallResult.THREE: 3,
    BallResult.FOUR: 4,
    BallResult.SIX: 6,
}

SCORING_RESULTS = frozenset(BAT_RUNS)

# Shifting a scoring ball by N runs moves it N steps along this ladder
RUN_LADDER = [
    BallResult.DOT,
    BallResult.ONE,
    BallResult.TWO,
    BallResult.THREE,
    BallResult.FOUR,
    BallResult.SIX,
]

R = BallResult

# Baseline per-delivery distributions (relative weights)
BASE_PROBS = {
    MatchFormat.T20: {
        R.DOT: 0.36, R.ONE: 0.30, R.TWO: 0.09, R.THREE: 0.015, R.FOUR: 0.11, R.SIX: 0.045,
        R.WICKET: 0.05, R.WIDE: 0.02, R.NO_BALL: 0.008, R.BYE: 0.007, R.LEG_BYE: 0.005,
    },
    MatchFormat.ODI: {
        R.DOT: 0.45, R.ONE: 0.30, R.TWO: 0.08, R.THREE: 0.015, R.FOUR: 0.08, R.SIX: 0.015,
        R.WICKET: 0.032, R.WIDE: 0.015, R.NO_BALL: 0.005, R.BYE: 0.006, R.LEG_BYE: 0.006,
    },
    MatchFormat.TEST: {
        R.DOT: 0.62, R.ONE: 0.20, R.TWO: 0.05, R.THREE: 0.012, R.FOUR: 0.07, R.SIX: 0.004,
        R.WICKET: 0.022, R.WIDE: 0.006, R.NO_BALL: 0.004, R.BYE: 0.006, R.LEG_BYE: 0.006,
    },
}

APPROACH_MODIFIERS = {
    BattingApproach.AGGRESSIVE: {R.FOUR: 1.4, R.SIX: 1.6, R.WICKET: 1.5, R.ONE: 0.8, R.TWO: 0.8},
    BattingApproach.ATTACKING: {R.DOT: 0.75, R.ONE: 1.15, R.FOUR: 1.2, R.SIX: 1.2},
    BattingApproach.BALANCED: {},
    BattingApproach.DEFENSIVE: {R.FOUR: 0.7, R.SIX: 0.5, R.DOT: 1.2, R.ONE: 1.15, R.WICKET: 0.7},
}

DISMISSAL_TYPES = [
    ("bowled", 0.20),
    ("caught", 0.50),
    ("lbw", 0.15),
    ("caught_behind", 0.10),
    ("run_out", 0.03),
    ("stumped", 0.02),
]

# Dismissals credited to a fielder; the keeper takes the "keeper" ones
FIELDER_DISMISSALS = {"caught", "run_out"}
KEEPER_DISMISSALS = {"caught_behind", "stumped"}

RAIN_FACTOR = 0.7
WIND_FACTOR = 0.9
WIND_THRESHOLD = 15
TEMPERATURE_FACTOR = 0.8
FAVOURED_BOWLER_WICKET = 1.3
UNFAVOURED_BOWLER_WICKET = 0.85


def bowler_wicket_factor(bowling: int) -> float:
    if bowling > 90:
        return 2.0
    if bowling > 80:
        return 1.5
    return 1.0


def run_shift(batter: Player, bowler: Player) -> int:
    """Runs added (or removed) on scoring balls for this matchup"""
    shift = 0
    if batter.batting > 80:
        shift += 1
    elif batter.batting < 60:
        shift -= 1

    if bowler.bowling > 90:
        shift -= 2
    elif bowler.bowling > 80:
        shift -= 1
    elif bowler.bowling < 60:
        shift += 1
    return shift


def shift_result(result: BallResult, shift: int) -> BallResult:
    if not result.is_scoring or shift == 0:
        return result
    index = RUN_LADDER.index(result) + shift
    return RUN_LADDER[max(0, min(len(RUN_LADDER) - 1, index))]


def weather_factor(weather: WeatherConditions) -> float:
    factor = 1.0
    if weather.is_raining:
        factor *= RAIN_FACTOR
    if weather.wind_speed > WIND_THRESHOLD:
        factor *= WIND_FACTOR
    if weather.is_extreme_temperature:
        factor *= TEMPERATURE_FACTOR
    return factor


def pitch_wicket_factor(bowler: Player, pitch: PitchConditions) -> float:
    factor = 1.0
    if pitch.is_spinning:
        if bowler.bowling_type.is_spin:
            factor *= FAVOURED_BOWLER_WICKET
        elif bowler.bowling_type.is_seam:
            factor *= UNFAVOURED_BOWLER_WICKET
    if pitch.is_seaming:
        if bowler.bowling_type.is_seam:
            factor *= FAVOURED_BOWLER_WICKET
        elif bowler.bowling_type.is_spin:
            factor *= UNFAVOURED_BOWLER_WICKET
    return factor


def outcome_distribution(
    match_format: MatchFormat,
    batter: Player,
    bowler: Player,
    pitch: PitchConditions,
    weather: WeatherConditions,
) -> dict[BallResult, float]:
    """Normalised probability of each result for one delivery"""
    weights = dict(BASE_PROBS[match_format])

    for result, mult in APPROACH_MODIFIERS[batter.batting_approach].items():
        weights[result] *= mult

    weights[R.WICKET] *= bowler_wicket_factor(bowler.bowling)
    weights[R.WICKET] *= pitch_wicket_factor(bowler, pitch)

    scoring_factor = weather_factor(weather)
    for result in SCORING_RESULTS:
        weights[result] *= scoring_factor

    total = sum(weights.values())
    return {result: w / total for result, w in weights.items()}
