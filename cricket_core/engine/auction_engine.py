"""
Auction Engine - time-boxed ascending auction with AI bidding
"""
import enum
import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cricket_core.config import settings
from cricket_core.errors import (
    Cancelled, ConfigurationError, IneligibleBid, InvariantViolation,
    LotFinalized, SessionInactive,
)
from cricket_core.events import EventKind, EventQueue
from cricket_core.models.player import Player
from cricket_core.models.team import MAX_SQUAD_SIZE, Team

logger = logging.getLogger(__name__)


class AuctionStatus(enum.Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LotStatus(enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SOLD = "sold"
    UNSOLD = "unsold"


class BidStrategy(enum.Enum):
    AGGRESSIVE = "aggressive"
    BALANCED = "balanced"
    CONSERVATIVE = "conservative"
    WILDCARD = "wildcard"


STRATEGY_MULTIPLIERS = {
    BidStrategy.AGGRESSIVE: 1.5,
    BidStrategy.BALANCED: 1.2,
    BidStrategy.CONSERVATIVE: 1.0,
}
WILDCARD_RANGE = (1.0, 1.5)

# Bid amounts are kept to this many decimals so repeated increments land on the cap
PRICE_DIGITS = 6


def default_base_price(player: Player) -> float:
    return player.base_price


def price(amount: float) -> float:
    return round(amount, PRICE_DIGITS)


class AuctionRules(BaseModel):
    """Rules for one auction session. Amounts are in bid units."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    base_price: Callable[[Player], float] = default_base_price
    min_increment: float = Field(default=settings.AUCTION_MIN_INCREMENT, gt=0)
    bidding_time: float = Field(default=settings.AUCTION_BIDDING_TIME, gt=0)
    max_bid: float = Field(default=settings.AUCTION_MAX_BID, gt=0)
    max_squad_size: int = Field(default=MAX_SQUAD_SIZE, ge=1, le=MAX_SQUAD_SIZE)
    max_overseas: int = Field(default=8, ge=0)
    auto_bidding: bool = True
    # Bid units per point of mean skill
    valuation_scale: float = Field(default=0.1, gt=0)


@dataclass
class Bid:
    team: str
    amount: float


@dataclass
class AuctionLot:
    """A single player under the hammer"""
    player: Player
    base_price: float
    status: LotStatus = LotStatus.PENDING
    current_bid: Optional[float] = None
    current_bidder: Optional[str] = None
    bid_history: list[Bid] = field(default_factory=list)
    countdown: float = 0.0

    @property
    def is_finalized(self) -> bool:
        return self.status in (LotStatus.SOLD, LotStatus.UNSOLD)

    def to_dict(self) -> dict:
        return {
            "player": self.player.name,
            "base_price": self.base_price,
            "status": self.status.value,
            "current_bid": self.current_bid,
            "current_bidder": self.current_bidder,
            "bid_history": [{"team": b.team, "amount": b.amount} for b in self.bid_history],
            "countdown": self.countdown,
        }


@dataclass
class TeamBudget:
    """A team's purse and roster position during the auction"""
    team: Team
    initial: float
    strategy: BidStrategy = BidStrategy.BALANCED
    is_human: bool = False
    spent: float = 0.0
    players_bought: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.team.name

    @property
    def remaining(self) -> float:
        return self.initial - self.spent

    @property
    def squad_size(self) -> int:
        return self.team.squad_size

    @property
    def overseas_count(self) -> int:
        return self.team.overseas_count


@dataclass
class BidResult:
    """Result of a finalised lot"""
    player: Player
    winning_team: Optional[Team]
    winning_bid: float
    is_sold: bool
    bid_history: list[dict]


class AuctionEngine:
    """
    Manages an auction session including AI bidding decisions.

    Time is driven by the caller through tick(); nothing runs in the background.
    """

    def __init__(
        self,
        players: list[Player],
        teams: list[Team],
        rules: Union[AuctionRules, dict, None] = None,
        strategies: Optional[dict[str, BidStrategy]] = None,
        human_teams: Optional[list[str]] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        events: Optional[EventQueue] = None,
    ):
        self.rules = self._load_rules(rules)
        self.rng = rng or random.Random()
        if seed is not None:
            self.rng.seed(seed)
        self.events = events if events is not None else EventQueue()

        names = [t.name for t in teams]
        if len(set(names)) != len(names):
            raise ConfigurationError("Team names must be unique")
        if not teams:
            raise ConfigurationError("An auction needs at least one team")
        strategies = strategies or {}
        unknown = set(strategies) - set(names)
        if unknown:
            raise ConfigurationError(f"Strategies given for unknown teams: {sorted(unknown)}")
        if human_teams is None:
            human_teams = [t.name for t in teams if t.is_user_team]

        self.budgets: dict[str, TeamBudget] = {
            team.name: TeamBudget(
                team=team,
                initial=team.remaining_budget,
                strategy=BidStrategy(strategies.get(team.name, BidStrategy.BALANCED)),
                is_human=team.name in human_teams,
            )
            for team in teams
        }

        seen = set()
        for player in players:
            if player.team is not None:
                raise ConfigurationError(f"{player.name} already belongs to {player.team.name}")
            if player.name in seen:
                raise ConfigurationError(f"{player.name} entered twice")
            seen.add(player.name)

        # Order: highest base price first, then by overall rating
        ordered = sorted(
            players,
            key=lambda p: (-self.rules.base_price(p), -p.overall_rating, p.name),
        )
        self.lots: list[AuctionLot] = [
            AuctionLot(player=p, base_price=float(self.rules.base_price(p))) for p in ordered
        ]

        self.status = AuctionStatus.NOT_STARTED
        self.paused = False
        self.current_index = -1
        self._rr_offset = 0
        self._wildcard: dict[str, float] = {}

    @staticmethod
    def _load_rules(rules) -> AuctionRules:
        if rules is None:
            return AuctionRules()
        if isinstance(rules, AuctionRules):
            return rules
        try:
            return AuctionRules(**rules)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid auction rules: {exc}") from exc

    # --- accessors ---

    @property
    def current_lot(self) -> Optional[AuctionLot]:
        if 0 <= self.current_index < len(self.lots):
            return self.lots[self.current_index]
        return None

    @property
    def is_active(self) -> bool:
        return self.status == AuctionStatus.ACTIVE and not self.paused

    def get_team_budget(self, team_name: str) -> TeamBudget:
        return self.budgets[team_name]

    def get_lot(self, player_name: str) -> AuctionLot:
        lot = next((lot for lot in self.lots if lot.player.name == player_name), None)
        if lot is None:
            raise IneligibleBid(f"{player_name} is not in this auction", reason="unknown_player")
        return lot

    # --- lifecycle ---

    def start(self) -> None:
        if self.status == AuctionStatus.CANCELLED:
            raise Cancelled("Auction was cancelled")
        if self.status != AuctionStatus.NOT_STARTED:
            raise SessionInactive("Auction already started")
        self.status = AuctionStatus.ACTIVE
        logger.info("Auction started: %d lots, %d teams", len(self.lots), len(self.budgets))
        self._open_next_lot()

    def pause(self) -> None:
        self._check_running()
        self.paused = True

    def resume(self) -> None:
        self._check_running()
        self.paused = False

    def cancel(self) -> None:
        if self.status == AuctionStatus.CANCELLED:
            raise Cancelled("Auction was cancelled")
        if self.status == AuctionStatus.COMPLETED:
            raise SessionInactive("Auction is complete")
        self.status = AuctionStatus.CANCELLED
        logger.info("Auction cancelled")

    def _check_running(self) -> None:
        if self.status == AuctionStatus.CANCELLED:
            raise Cancelled("Auction was cancelled")
        if self.status != AuctionStatus.ACTIVE:
            raise SessionInactive(f"Auction is {self.status.value}")

    def _open_next_lot(self) -> None:
        if all(b.squad_size >= self.rules.max_squad_size for b in self.budgets.values()):
            self._complete()
            return
        next_index = next(
            (i for i, lot in enumerate(self.lots) if lot.status == LotStatus.PENDING),
            None,
        )
        if next_index is None:
            self._complete()
            return

        self.current_index = next_index
        lot = self.lots[next_index]
        lot.status = LotStatus.ACTIVE
        lot.countdown = self.rules.bidding_time
        self._wildcard = {
            name: self.rng.uniform(*WILDCARD_RANGE)
            for name, budget in self.budgets.items()
            if budget.strategy == BidStrategy.WILDCARD
        }
        logger.debug("Lot %d: %s at %.1f", next_index + 1, lot.player.name, lot.base_price)
        self.events.emit(EventKind.LOT_START, {"player": lot.player.name, "base_price": lot.base_price})

    def _complete(self) -> None:
        self.status = AuctionStatus.COMPLETED
        aggregates = self.aggregates()
        logger.info(
            "Auction complete: %d sold, %d unsold, top price %.1f",
            aggregates["sold"], aggregates["unsold"], aggregates["highest_price"],
        )
        self.events.emit(EventKind.SESSION_END, aggregates)

    def aggregates(self) -> dict:
        sold = [lot for lot in self.lots if lot.status == LotStatus.SOLD]
        top = max(sold, key=lambda lot: lot.current_bid, default=None)
        revenue = price(sum(lot.current_bid for lot in sold))
        return {
            "spend": {name: b.spent for name, b in self.budgets.items()},
            "total_revenue": revenue,
            "average_price": price(revenue / len(sold)) if sold else 0.0,
            "highest_price": top.current_bid if top else 0.0,
            "highest_player": top.player.name if top else None,
            "sold": len(sold),
            "unsold": sum(1 for lot in self.lots if lot.status == LotStatus.UNSOLD),
            "unauctioned": sum(1 for lot in self.lots if lot.status == LotStatus.PENDING),
        }

    # --- bidding ---

    def next_bid_amount(self, lot: AuctionLot) -> float:
        """Smallest valid bid on the lot right now"""
        if lot.current_bid is None:
            return price(min(lot.base_price, self.rules.max_bid))
        return price(lot.current_bid + self.rules.min_increment)

    def _ineligibility(self, budget: TeamBudget, lot: AuctionLot, amount: float) -> Optional[str]:
        """Reason the bid is invalid, or None"""
        amount = price(amount)
        if lot.current_bidder == budget.name:
            return "already_leading"
        if amount > self.rules.max_bid:
            return "above_cap"
        if amount < self.next_bid_amount(lot):
            return "below_minimum"
        if price(budget.remaining) < amount:
            return "budget"
        if budget.squad_size + 1 > self.rules.max_squad_size:
            return "squad_full"
        if lot.player.is_overseas and budget.overseas_count + 1 > self.rules.max_overseas:
            return "overseas_cap"
        return None

    def place_bid(self, team_name: str, amount: float, player_name: Optional[str] = None) -> Bid:
        """
        Bid on the active lot.

        Invalid bids raise IneligibleBid and leave the countdown untouched.
        """
        if self.status == AuctionStatus.CANCELLED:
            raise Cancelled("Auction was cancelled")
        if player_name is not None:
            target = self.get_lot(player_name)
            if target.is_finalized:
                raise LotFinalized(f"{player_name} is already {target.status.value}")
        if not self.is_active:
            raise SessionInactive("Auction is not accepting bids")

        lot = self.current_lot
        if player_name is not None and lot.player.name != player_name:
            raise IneligibleBid(f"{player_name} is not under the hammer", reason="lot_not_open")
        budget = self.budgets.get(team_name)
        if budget is None:
            raise IneligibleBid(f"{team_name} is not in this auction", reason="unknown_team")

        reason = self._ineligibility(budget, lot, amount)
        if reason:
            raise IneligibleBid(f"{team_name} cannot bid {amount} for {lot.player.name}: {reason}", reason=reason)
        return self._accept_bid(lot, team_name, amount)

    def _accept_bid(self, lot: AuctionLot, team_name: str, amount: float) -> Bid:
        amount = price(amount)
        bid = Bid(team=team_name, amount=amount)
        lot.current_bid = amount
        lot.current_bidder = team_name
        lot.bid_history.append(bid)
        lot.countdown = self.rules.bidding_time
        logger.debug("%s bids %.1f for %s", team_name, amount, lot.player.name)
        self.events.emit(EventKind.BID, {"team": team_name, "amount": amount, "player": lot.player.name})
        return bid

    def valuation(self, player: Player) -> float:
        return player.skill_mean * self.rules.valuation_scale

    def willingness(self, team_name: str, player: Player) -> float:
        """Most the team would pay for the player"""
        budget = self.budgets[team_name]
        if budget.strategy == BidStrategy.WILDCARD:
            multiplier = self._wildcard.get(team_name, WILDCARD_RANGE[0])
        else:
            multiplier = STRATEGY_MULTIPLIERS[budget.strategy]
        return self.valuation(player) * multiplier

    def _ai_order(self) -> list[str]:
        names = [n for n, b in self.budgets.items() if not b.is_human]
        if not names:
            return []
        start = self._rr_offset % len(names)
        self._rr_offset += 1
        return names[start:] + names[:start]

    def run_bidding_round(self) -> list[Bid]:
        """
        One round-robin pass over the AI teams.

        Each team bids the next increment if it is eligible and the price is
        within min(willingness, max_bid). Returns the bids placed.
        """
        lot = self.current_lot
        bids = []
        for name in self._ai_order():
            budget = self.budgets[name]
            amount = self.next_bid_amount(lot)
            if amount > min(self.willingness(name, lot.player), self.rules.max_bid):
                continue
            if self._ineligibility(budget, lot, amount):
                continue
            bids.append(self._accept_bid(lot, name, amount))

        at_cap = (
            lot.current_bid is not None
            and self.next_bid_amount(lot) > self.rules.max_bid
        )
        if not bids and at_cap:
            bid = self._resolve_cap(lot)
            if bid:
                bids.append(bid)
        return bids

    def _resolve_cap(self, lot: AuctionLot) -> Optional[Bid]:
        """At the cap the keenest eligible AI team holds the lot"""
        holder = self.budgets[lot.current_bidder]
        if holder.is_human:
            return None
        held = self.willingness(holder.name, lot.player)
        best, best_value = None, held
        for name in self._ai_order():
            budget = self.budgets[name]
            if name == holder.name:
                continue
            value = self.willingness(name, lot.player)
            if value < lot.current_bid or value <= best_value:
                continue
            if price(budget.remaining) < lot.current_bid or budget.squad_size + 1 > self.rules.max_squad_size:
                continue
            if lot.player.is_overseas and budget.overseas_count + 1 > self.rules.max_overseas:
                continue
            best, best_value = name, value
        if best is None:
            return None
        return self._accept_bid(lot, best, lot.current_bid)

    def run_ai_bidding(self) -> list[Bid]:
        """Let AI teams bid until nobody raises"""
        bids = []
        while True:
            placed = self.run_bidding_round()
            if not placed:
                return bids
            bids.extend(placed)

    def tick(self, delta: float) -> Optional[BidResult]:
        """
        Advance the clock. AI teams respond first, then the countdown runs.

        Returns the BidResult if the lot closed on this tick.
        """
        if self.status == AuctionStatus.CANCELLED:
            raise Cancelled("Auction was cancelled")
        if self.status != AuctionStatus.ACTIVE:
            raise SessionInactive(f"Auction is {self.status.value}")
        if self.paused:
            return None

        lot = self.current_lot
        if self.rules.auto_bidding:
            self.run_ai_bidding()
        lot.countdown = max(0.0, lot.countdown - delta)
        if lot.countdown > 0:
            return None
        return self.finalize_lot()

    def skip_lot(self) -> BidResult:
        """Close the active lot now"""
        self._check_running()
        if self.paused:
            raise SessionInactive("Auction is paused")
        return self.finalize_lot()

    def finalize_lot(self) -> BidResult:
        """
        Finalize bidding on the active lot - either sold or unsold.
        """
        lot = self.current_lot
        if lot is None or lot.status != LotStatus.ACTIVE:
            raise InvariantViolation("No active lot to finalise")
        player = lot.player
        winning_team = None

        if lot.current_bidder:
            budget = self.budgets[lot.current_bidder]
            winning_team = budget.team
            winning_bid = lot.current_bid

            # Squad first; a refused player leaves the budget and the lot untouched
            winning_team.add_player(player)
            budget.spent = price(budget.spent + winning_bid)
            budget.players_bought.append(player.name)
            winning_team.remaining_budget = price(winning_team.remaining_budget - winning_bid)
            player.sold_price = winning_bid
            lot.status = LotStatus.SOLD

            if budget.remaining < 0 or abs(budget.remaining - winning_team.remaining_budget) > 1e-9:
                raise InvariantViolation(f"{budget.name} budget out of balance")
            logger.info("%s sold to %s for %.1f", player.name, budget.name, winning_bid)
            self.events.emit(EventKind.LOT_SOLD, {"team": budget.name, "price": winning_bid, "player": player.name})
        else:
            winning_bid = 0.0
            lot.status = LotStatus.UNSOLD
            logger.info("%s unsold", player.name)
            self.events.emit(EventKind.LOT_UNSOLD, {"player": player.name})

        result = BidResult(
            player=player,
            winning_team=winning_team,
            winning_bid=winning_bid,
            is_sold=winning_team is not None,
            bid_history=[{"team": b.team, "amount": b.amount} for b in lot.bid_history],
        )
        self._open_next_lot()
        return result

    def auto_complete(
        self,
        step: Optional[float] = None,
        on_step: Optional[Callable[[Optional[BidResult]], None]] = None,
    ) -> dict:
        """Tick until the session ends. Returns the session aggregates."""
        if self.status == AuctionStatus.NOT_STARTED:
            self.start()
        step = step or self.rules.bidding_time
        while self.status == AuctionStatus.ACTIVE and not self.paused:
            result = self.tick(step)
            if on_step:
                on_step(result)
        return self.aggregates()

    # --- persistence ---

    def to_dict(self) -> dict:
        version, internal, gauss = self.rng.getstate()
        return {
            "kind": "auction",
            "status": self.status.value,
            "paused": self.paused,
            "current_index": self.current_index,
            "rr_offset": self._rr_offset,
            "wildcard": dict(self._wildcard),
            "lots": [lot.to_dict() for lot in self.lots],
            "budgets": {
                name: {
                    "initial": b.initial,
                    "spent": b.spent,
                    "strategy": b.strategy.value,
                    "is_human": b.is_human,
                    "players_bought": list(b.players_bought),
                }
                for name, b in self.budgets.items()
            },
            "rng_state": [version, list(internal), gauss],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        players: list[Player],
        teams: list[Team],
        rules: Union[AuctionRules, dict, None] = None,
        events: Optional[EventQueue] = None,
    ) -> "AuctionEngine":
        """Rebuild a session. Players already sold must be in their teams' squads."""
        if data.get("kind") != "auction":
            raise ConfigurationError("Not an auction snapshot")
        engine = cls.__new__(cls)
        engine.rules = cls._load_rules(rules)
        engine.rng = random.Random()
        version, internal, gauss = data["rng_state"]
        engine.rng.setstate((version, tuple(internal), gauss))
        engine.events = events if events is not None else EventQueue()

        teams_by_name = {t.name: t for t in teams}
        players_by_name = {p.name: p for p in players}
        try:
            engine.budgets = {
                name: TeamBudget(
                    team=teams_by_name[name],
                    initial=b["initial"],
                    strategy=BidStrategy(b["strategy"]),
                    is_human=b["is_human"],
                    spent=b["spent"],
                    players_bought=list(b["players_bought"]),
                )
                for name, b in data["budgets"].items()
            }
            engine.lots = [
                AuctionLot(
                    player=players_by_name[lot["player"]],
                    base_price=lot["base_price"],
                    status=LotStatus(lot["status"]),
                    current_bid=lot["current_bid"],
                    current_bidder=lot["current_bidder"],
                    bid_history=[Bid(**b) for b in lot["bid_history"]],
                    countdown=lot["countdown"],
                )
                for lot in data["lots"]
            ]
        except KeyError as exc:
            raise ConfigurationError(f"{exc} missing from restore") from exc
        engine.status = AuctionStatus(data["status"])
        engine.paused = data["paused"]
        engine.current_index = data["current_index"]
        engine._rr_offset = data["rr_offset"]
        engine._wildcard = dict(data["wildcard"])
        return engine
