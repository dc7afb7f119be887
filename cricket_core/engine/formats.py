"""
Format-specific match parameters.

Every engine component reads overs and bowling quotas from a FormatConfig
rather than hardcoding T20 numbers.
"""
import enum
from dataclasses import dataclass, replace
from typing import Optional

from cricket_core.errors import ConfigurationError


class MatchFormat(enum.Enum):
    T20 = "t20"
    ODI = "odi"
    TEST = "test"


@dataclass(frozen=True)
class FormatConfig:
    """
    name             : display name ("T20", "ODI", "Test")
    overs            : overs per innings (per day for Test)
    max_bowler_overs : bowling quota per bowler per innings
    balls_per_over   : legal deliveries in an over

    No bowler may bowl consecutive overs in any format.
    """
    name: str
    overs: int
    max_bowler_overs: int
    balls_per_over: int = 6

    @property
    def total_balls(self) -> int:
        return self.overs * self.balls_per_over


FORMAT_REGISTRY: dict[MatchFormat, FormatConfig] = {
    MatchFormat.T20: FormatConfig(name="T20", overs=20, max_bowler_overs=20 // 5),
    MatchFormat.ODI: FormatConfig(name="ODI", overs=50, max_bowler_overs=50 // 5),
    MatchFormat.TEST: FormatConfig(name="Test", overs=90, max_bowler_overs=90 // 5),
}

SUPER_OVER = FormatConfig(name="Super Over", overs=1, max_bowler_overs=1)


def get_format(match_format: MatchFormat, max_bowler_overs: Optional[int] = None) -> FormatConfig:
    """Look up a format, optionally with a custom per-bowler cap"""
    try:
        config = FORMAT_REGISTRY[MatchFormat(match_format)]
    except ValueError as exc:
        raise ConfigurationError(f"Unknown match format: {match_format!r}") from exc
    if max_bowler_overs is None:
        return config
    if not 1 <= max_bowler_overs <= config.overs:
        raise ConfigurationError(
            f"Bowler cap must be within 1-{config.overs} overs, got {max_bowler_overs}"
        )
    return replace(config, max_bowler_overs=max_bowler_overs)
