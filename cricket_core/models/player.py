from typing import Optional
from sqlalchemy import String, Integer, Float, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
import enum
from cricket_core.database import Base
from cricket_core.errors import ConfigurationError


class PlayerRole(enum.Enum):
    BATSMAN = "batsman"
    BOWLER = "bowler"
    ALL_ROUNDER = "all_rounder"
    WICKET_KEEPER = "wicket_keeper"
    CAPTAIN = "captain"


class Nationality(enum.Enum):
    LOCAL = "local"
    OVERSEAS = "overseas"


class BattingApproach(enum.Enum):
    AGGRESSIVE = "aggressive"   # Boundaries or bust
    ATTACKING = "attacking"     # Rotates strike, punishes bad balls
    BALANCED = "balanced"
    DEFENSIVE = "defensive"     # Occupies the crease


class BowlingType(enum.Enum):
    PACE = "pace"
    MEDIUM = "medium"
    OFF_SPIN = "off_spin"
    LEG_SPIN = "leg_spin"
    LEFT_ARM_SPIN = "left_arm_spin"
    NONE = "none"

    @property
    def is_spin(self) -> bool:
        return "spin" in self.value

    @property
    def is_seam(self) -> bool:
        return self in (BowlingType.PACE, BowlingType.MEDIUM)


BOWLING_ROLES = (PlayerRole.BOWLER, PlayerRole.ALL_ROUNDER)

RATED_FIELDS = ("batting", "bowling", "fielding", "form", "morale")


class Player(Base):
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    age: Mapped[int] = mapped_column(Integer)
    country: Mapped[str] = mapped_column(String(50))
    nationality: Mapped[Nationality] = mapped_column(Enum(Nationality))

    # Role and style
    role: Mapped[PlayerRole] = mapped_column(Enum(PlayerRole))
    batting_approach: Mapped[BattingApproach] = mapped_column(Enum(BattingApproach))
    bowling_type: Mapped[BowlingType] = mapped_column(Enum(BowlingType))

    # Core attributes (1-100 scale)
    batting: Mapped[int] = mapped_column(Integer)
    bowling: Mapped[int] = mapped_column(Integer)
    fielding: Mapped[int] = mapped_column(Integer)

    # Current state (1-100 scale)
    form: Mapped[int] = mapped_column(Integer, default=50)
    morale: Mapped[int] = mapped_column(Integer, default=50)

    # Squad membership
    team_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)
    team: Mapped[Optional["Team"]] = relationship("Team", back_populates="players")

    injuries: Mapped[list["Injury"]] = relationship(
        "Injury", back_populates="player", cascade="all, delete-orphan"
    )

    # Auction (bid units)
    base_price: Mapped[float] = mapped_column(Float, default=2.0)
    sold_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    def __init__(self, **kwargs):
        # Column defaults only apply on flush; engines use players before that
        kwargs.setdefault("age", 25)
        kwargs.setdefault("country", "India")
        kwargs.setdefault("nationality", Nationality.LOCAL)
        kwargs.setdefault("batting_approach", BattingApproach.BALANCED)
        kwargs.setdefault("form", 50)
        kwargs.setdefault("morale", 50)
        kwargs.setdefault("base_price", 2.0)
        if "bowling_type" not in kwargs:
            role = kwargs.get("role")
            kwargs["bowling_type"] = BowlingType.MEDIUM if role in BOWLING_ROLES else BowlingType.NONE
        super().__init__(**kwargs)

    @validates(*RATED_FIELDS)
    def _validate_rating(self, key, value):
        if value is None or not 1 <= value <= 100:
            raise ConfigurationError(f"{key} must be within 1-100, got {value}")
        return value

    @property
    def is_overseas(self) -> bool:
        return self.nationality == Nationality.OVERSEAS

    @property
    def can_bowl(self) -> bool:
        if self.role in BOWLING_ROLES:
            return True
        return self.role != PlayerRole.WICKET_KEEPER and self.bowling_type != BowlingType.NONE

    @property
    def skill_mean(self) -> float:
        return (self.batting + self.bowling + self.fielding) / 3

    @property
    def overall_rating(self) -> int:
        """Calculate overall rating based on role"""
        if self.role == PlayerRole.BATSMAN:
            return int(self.batting * 0.7 + self.fielding * 0.3)
        elif self.role == PlayerRole.BOWLER:
            return int(self.bowling * 0.7 + self.fielding * 0.3)
        elif self.role == PlayerRole.ALL_ROUNDER:
            return int(self.batting * 0.4 + self.bowling * 0.4 + self.fielding * 0.2)
        elif self.role == PlayerRole.WICKET_KEEPER:
            return int(self.batting * 0.6 + self.fielding * 0.4)
        elif self.role == PlayerRole.CAPTAIN:
            return int(self.batting * 0.4 + self.bowling * 0.3 + self.fielding * 0.3)
        return 50

    @property
    def is_injured(self) -> bool:
        return any(i.recovery_matches > 0 for i in self.injuries)

    def add_injury(self, kind: str, severity: int, recovery_matches: int) -> "Injury":
        """Put the player on the injury list. Knocks morale by 10."""
        if not 1 <= severity <= 10:
            raise ConfigurationError(f"Injury severity must be within 1-10, got {severity}")
        injury = Injury(kind=kind, severity=severity, recovery_matches=max(1, recovery_matches))
        self.injuries.append(injury)
        self.update_morale(-10)
        return injury

    def recover(self, matches: int = 1) -> None:
        """Count down recovery and drop healed injuries"""
        for injury in list(self.injuries):
            injury.recovery_matches = max(0, injury.recovery_matches - matches)
            if injury.recovery_matches == 0:
                self.injuries.remove(injury)

    def update_form(self, delta: int) -> None:
        self.form = max(1, min(100, self.form + delta))

    def update_morale(self, delta: int) -> None:
        self.morale = max(1, min(100, self.morale + delta))

    def __repr__(self):
        return f"<Player {self.name} ({self.role.value}) - OVR: {self.overall_rating}>"


class Injury(Base):
    __tablename__ = "injuries"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id", ondelete="CASCADE"))
    kind: Mapped[str] = mapped_column(String(50))
    severity: Mapped[int] = mapped_column(Integer)  # 1-10
    recovery_matches: Mapped[int] = mapped_column(Integer)

    player: Mapped["Player"] = relationship("Player", back_populates="injuries")

    def __repr__(self):
        return f"<Injury {self.kind} sev={self.severity} out={self.recovery_matches}>"
