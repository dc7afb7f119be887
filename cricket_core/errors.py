"""
Errors raised by the simulation core.

Every error is surfaced to the caller; nothing is retried inside the core.
"""
from typing import Optional


class CricketCoreError(Exception):
    """Base class for all core errors"""


class ConfigurationError(CricketCoreError, ValueError):
    """Invalid rules, entities or settings detected at construction"""


class InvalidLineup(CricketCoreError):
    """Playing XI, batting order or bowling order breaks team rules"""


class InvalidBowlingChange(CricketCoreError):
    """Requested bowler exceeds the over cap or would bowl consecutive overs"""


class OrderLocked(CricketCoreError):
    """Batting order changed for a side that is batting or has batted"""


class MatchComplete(CricketCoreError):
    """Match has a result; no further deliveries"""


class Cancelled(CricketCoreError):
    """Match, auction session or tournament was cancelled"""


class IneligibleBid(CricketCoreError):
    """Bid rejected by the auction rules"""

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason


class SessionInactive(CricketCoreError):
    """Auction session is not accepting bids"""


class LotFinalized(CricketCoreError):
    """Lot is already sold or unsold"""


class FixtureFinalized(CricketCoreError):
    """Fixture has already been played"""


class InvariantViolation(CricketCoreError):
    """Internal bookkeeping is corrupted. Fatal."""
