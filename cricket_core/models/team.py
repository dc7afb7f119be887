import json
from typing import Optional
from sqlalchemy import String, Float, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from cricket_core.database import Base
from cricket_core.errors import ConfigurationError, InvalidLineup
from cricket_core.models.player import Player, PlayerRole

MIN_SQUAD_SIZE = 18
MAX_SQUAD_SIZE = 25
MAX_SQUAD_OVERSEAS = 8
MAX_XI_OVERSEAS = 4
XI_SIZE = 11


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    short_name: Mapped[str] = mapped_column(String(5))  # e.g., "MI", "CSK"
    home_ground: Mapped[str] = mapped_column(String(100), default="")

    # Finances (bid units)
    budget: Mapped[float] = mapped_column(Float, default=100.0)
    remaining_budget: Mapped[float] = mapped_column(Float, default=100.0)

    # Is this team controlled by the human player?
    is_user_team: Mapped[bool] = mapped_column(default=False)

    # Selection, stored as JSON arrays of player names
    playing_xi_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    batting_order_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bowling_order_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    captain: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    vice_captain: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Relationships
    players: Mapped[list["Player"]] = relationship("Player", back_populates="team")

    def __init__(self, **kwargs):
        kwargs.setdefault("short_name", kwargs.get("name", "")[:3].upper())
        kwargs.setdefault("home_ground", "")
        kwargs.setdefault("budget", 100.0)
        kwargs.setdefault("remaining_budget", kwargs["budget"])
        kwargs.setdefault("is_user_team", False)
        super().__init__(**kwargs)

    # --- squad ---

    @property
    def squad_size(self) -> int:
        return len(self.players)

    @property
    def overseas_count(self) -> int:
        return sum(1 for p in self.players if p.is_overseas)

    @property
    def available_players(self) -> list[Player]:
        return [p for p in self.players if not p.is_injured]

    def get_player(self, name: str) -> Optional[Player]:
        return next((p for p in self.players if p.name == name), None)

    def add_player(self, player: Player) -> None:
        """Add a player to the squad. A player belongs to at most one squad."""
        if player.team is not None and player.team is not self:
            raise ConfigurationError(f"{player.name} already belongs to {player.team.name}")
        if player in self.players:
            return
        if self.squad_size >= MAX_SQUAD_SIZE:
            raise ConfigurationError(f"{self.name} squad is full ({MAX_SQUAD_SIZE})")
        self.players.append(player)

    def remove_player(self, name: str) -> Player:
        player = self.get_player(name)
        if player is None:
            raise ConfigurationError(f"{name} is not in the {self.name} squad")
        self.players.remove(player)
        # Drop from selection
        for attr in ("playing_xi_json", "batting_order_json", "bowling_order_json"):
            names = self._load_names(attr)
            if name in names:
                names.remove(name)
                setattr(self, attr, json.dumps(names))
        if self.captain == name:
            self.captain = None
        if self.vice_captain == name:
            self.vice_captain = None
        return player

    def squad_errors(self) -> list[str]:
        errors = []
        if not MIN_SQUAD_SIZE <= self.squad_size <= MAX_SQUAD_SIZE:
            errors.append(
                f"Squad must have {MIN_SQUAD_SIZE}-{MAX_SQUAD_SIZE} players, got {self.squad_size}"
            )
        if self.overseas_count > MAX_SQUAD_OVERSEAS:
            errors.append(f"Max {MAX_SQUAD_OVERSEAS} overseas players in squad, got {self.overseas_count}")
        return errors

    # --- selection ---

    def _load_names(self, attr: str) -> list[str]:
        raw = getattr(self, attr)
        return json.loads(raw) if raw else []

    def _resolve(self, names: list[str]) -> list[Player]:
        by_name = {p.name: p for p in self.players}
        return [by_name[n] for n in names if n in by_name]

    @property
    def playing_xi(self) -> list[Player]:
        return self._resolve(self._load_names("playing_xi_json"))

    @property
    def batting_order(self) -> list[Player]:
        return self._resolve(self._load_names("batting_order_json"))

    @property
    def bowling_order(self) -> list[Player]:
        return self._resolve(self._load_names("bowling_order_json"))

    def set_playing_xi(self, names: list[str]) -> None:
        if len(set(names)) != len(names):
            raise InvalidLineup(f"{self.name}: duplicate players in XI")
        for name in names:
            player = self.get_player(name)
            if player is None:
                raise InvalidLineup(f"{self.name}: {name} is not in the squad")
            if player.is_injured:
                raise InvalidLineup(f"{self.name}: {name} is injured")
        self.playing_xi_json = json.dumps(list(names))
        # Orders that no longer match the XI are reset
        if sorted(self._load_names("batting_order_json")) != sorted(names):
            self.batting_order_json = json.dumps(list(names))
        self.bowling_order_json = json.dumps(
            [n for n in self._load_names("bowling_order_json") if n in names]
        )
        if self.captain not in names:
            self.captain = None
        if self.vice_captain not in names:
            self.vice_captain = None

    def set_batting_order(self, names: list[str]) -> None:
        xi = self._load_names("playing_xi_json")
        if len(names) != len(xi) or sorted(names) != sorted(xi):
            raise InvalidLineup(f"{self.name}: batting order must be a permutation of the XI")
        self.batting_order_json = json.dumps(list(names))

    def set_bowling_order(self, names: list[str]) -> None:
        xi = self._load_names("playing_xi_json")
        if len(set(names)) != len(names):
            raise InvalidLineup(f"{self.name}: duplicate bowlers in bowling order")
        for name in names:
            if name not in xi:
                raise InvalidLineup(f"{self.name}: bowler {name} is not in the XI")
            if not self.get_player(name).can_bowl:
                raise InvalidLineup(f"{self.name}: {name} does not bowl")
        self.bowling_order_json = json.dumps(list(names))

    def set_captain(self, name: str) -> None:
        if name not in self._load_names("playing_xi_json"):
            raise InvalidLineup(f"{self.name}: captain {name} is not in the XI")
        if name == self.vice_captain:
            raise InvalidLineup(f"{self.name}: captain and vice-captain must differ")
        self.captain = name

    def set_vice_captain(self, name: str) -> None:
        if name not in self._load_names("playing_xi_json"):
            raise InvalidLineup(f"{self.name}: vice-captain {name} is not in the XI")
        if name == self.captain:
            raise InvalidLineup(f"{self.name}: captain and vice-captain must differ")
        self.vice_captain = name

    def auto_select_xi(self) -> list[Player]:
        """
        Select best XI from fit squad members and derive orders:
        - Max 4 overseas players
        - At least 1 WK
        - Balance of batsmen, bowlers, all-rounders
        """
        players = self.available_players

        # Separate by role
        wks = [p for p in players if p.role == PlayerRole.WICKET_KEEPER]
        bats = [p for p in players if p.role in (PlayerRole.BATSMAN, PlayerRole.CAPTAIN)]
        bowls = [p for p in players if p.role == PlayerRole.BOWLER]
        ars = [p for p in players if p.role == PlayerRole.ALL_ROUNDER]

        # Sort each by overall rating, name breaks ties
        for group in (wks, bats, bowls, ars):
            group.sort(key=lambda p: (-p.overall_rating, p.name))

        xi = []
        overseas_count = 0

        def can_add(player):
            nonlocal overseas_count
            if player in xi:
                return False
            if player.is_overseas:
                if overseas_count >= MAX_XI_OVERSEAS:
                    return False
                overseas_count += 1
            return True

        # 1 WK (mandatory)
        for wk in wks:
            if can_add(wk):
                xi.append(wk)
                break

        # 4-5 batsmen
        for bat in bats[:5]:
            if len(xi) < 6 and can_add(bat):
                xi.append(bat)

        # 2-3 all-rounders
        for ar in ars[:3]:
            if len(xi) < 9 and can_add(ar):
                xi.append(ar)

        # 4-5 bowlers
        for bowl in bowls[:5]:
            if len(xi) < XI_SIZE and can_add(bowl):
                xi.append(bowl)

        # Fill remaining with best available
        remaining = sorted(
            (p for p in players if p not in xi),
            key=lambda p: (-p.overall_rating, p.name),
        )
        for player in remaining:
            if len(xi) >= XI_SIZE:
                break
            if can_add(player):
                xi.append(player)

        if len(xi) < XI_SIZE:
            raise InvalidLineup(f"{self.name}: only {len(xi)} selectable players")

        # Bowlers bat last, then by batting skill
        batting_order = sorted(xi, key=lambda p: (
            1 if p.role == PlayerRole.BOWLER else 0,
            -p.batting,
            p.name,
        ))
        bowling_order = sorted(
            (p for p in xi if p.can_bowl),
            key=lambda p: (-p.bowling, p.name),
        )
        leaders = sorted(xi, key=lambda p: (-p.overall_rating, p.name))

        self.playing_xi_json = json.dumps([p.name for p in xi])
        self.batting_order_json = json.dumps([p.name for p in batting_order])
        self.bowling_order_json = json.dumps([p.name for p in bowling_order])
        self.captain = leaders[0].name
        self.vice_captain = leaders[1].name
        return xi

    def __repr__(self):
        return f"<Team {self.name} ({self.short_name})>"
