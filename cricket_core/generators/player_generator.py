import random
from typing import Optional

from faker import Faker

from cricket_core.database import get_session
from cricket_core.models.player import (
    BattingApproach, BowlingType, Nationality, Player, PlayerRole,
)


class PlayerGenerator:
    """Generates fictional cricket players with realistic attributes"""

    # (country, faker locale, weight); the first entry is the home country
    COUNTRIES = [
        ("India", "en_IN", 60),
        ("Australia", "en_AU", 10),
        ("England", "en_GB", 8),
        ("South Africa", "en_US", 7),  # en_ZA not available
        ("New Zealand", "en_NZ", 5),
        ("West Indies", "en_US", 5),
        ("Other", "en_GB", 5),
    ]
    HOME_COUNTRY = "India"

    ROLE_WEIGHTS = {
        PlayerRole.BATSMAN: 30,
        PlayerRole.BOWLER: 35,
        PlayerRole.ALL_ROUNDER: 20,
        PlayerRole.WICKET_KEEPER: 15,
    }

    BOWLING_TYPES = {
        PlayerRole.BOWLER: [
            (BowlingType.PACE, 40),
            (BowlingType.MEDIUM, 15),
            (BowlingType.OFF_SPIN, 20),
            (BowlingType.LEG_SPIN, 15),
            (BowlingType.LEFT_ARM_SPIN, 10),
        ],
        PlayerRole.ALL_ROUNDER: [
            (BowlingType.PACE, 30),
            (BowlingType.MEDIUM, 25),
            (BowlingType.OFF_SPIN, 25),
            (BowlingType.LEG_SPIN, 10),
            (BowlingType.LEFT_ARM_SPIN, 10),
        ],
    }

    # Bowlers mostly just try to survive
    APPROACH_WEIGHTS = {
        PlayerRole.BOWLER: [
            (BattingApproach.DEFENSIVE, 50),
            (BattingApproach.BALANCED, 35),
            (BattingApproach.AGGRESSIVE, 15),
        ],
        None: [
            (BattingApproach.BALANCED, 45),
            (BattingApproach.ATTACKING, 25),
            (BattingApproach.AGGRESSIVE, 18),
            (BattingApproach.DEFENSIVE, 12),
        ],
    }

    TIER_BASES = {
        "elite": (80, 90),
        "star": (70, 80),
        "good": (62, 72),
        "solid": (58, 65),
    }

    TIER_AGES = {
        "elite": (27, 34),
        "star": (25, 33),
        "good": (23, 31),
        "solid": (21, 29),
    }

    # Base price range per tier, in bid units
    TIER_PRICES = {
        "elite": (15.0, 25.0),
        "star": (10.0, 15.0),
        "good": (5.0, 10.0),
        "solid": (2.0, 5.0),
    }

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random(seed)
        self._fakers: dict[str, Faker] = {}
        self._seed = seed if seed is not None else self.rng.getrandbits(32)
        self._used_names: set[str] = set()

    def _faker(self, locale: str) -> Faker:
        if locale not in self._fakers:
            fake = Faker(locale)
            fake.seed_instance(self._seed)
            self._fakers[locale] = fake
        return self._fakers[locale]

    def _weighted_choice(self, choices: list[tuple]):
        """Select from weighted choices [(item, weight), ...]"""
        items = [c[0] for c in choices]
        weights = [c[1] for c in choices]
        return self.rng.choices(items, weights=weights, k=1)[0]

    def _attribute(self, base: int, variance: int = 15, minimum: int = 1) -> int:
        """Generate an attribute value with some variance"""
        value = base + self.rng.randint(-variance, variance)
        return max(minimum, min(100, value))

    def _unique_name(self, fake: Faker) -> str:
        # Player names are unique across the pool
        name = fake.name_male()
        suffix = 2
        candidate = name
        while candidate in self._used_names:
            candidate = f"{name} {suffix}"
            suffix += 1
        self._used_names.add(candidate)
        return candidate

    def _ensure_minimum_ovr(self, player: Player, min_ovr: int = 55) -> Player:
        """Boost primary attributes until the player reaches min_ovr"""
        while player.overall_rating < min_ovr:
            diff = min_ovr - player.overall_rating + 2
            if player.role == PlayerRole.BATSMAN:
                player.batting = min(100, player.batting + diff)
            elif player.role == PlayerRole.BOWLER:
                player.bowling = min(100, player.bowling + diff)
            elif player.role == PlayerRole.ALL_ROUNDER:
                boost = diff // 2 + 1
                player.batting = min(100, player.batting + boost)
                player.bowling = min(100, player.bowling + boost)
            else:
                player.batting = min(100, player.batting + (diff * 5) // 9 + 1)
                player.fielding = min(100, player.fielding + (diff * 4) // 9 + 1)
        return player

    def generate_player(
        self,
        role: Optional[PlayerRole] = None,
        country: Optional[str] = None,
        tier: str = "solid",
    ) -> Player:
        """
        Generate a single player.

        Args:
            role: Specific role, or random if None
            country: Specific country, or weighted random if None
            tier: "elite", "star", "good" or "solid"
        """
        if country is None:
            country = self._weighted_choice([(c[0], c[2]) for c in self.COUNTRIES])
        locale = next((c[1] for c in self.COUNTRIES if c[0] == country), "en_GB")

        if role is None:
            role = self._weighted_choice(list(self.ROLE_WEIGHTS.items()))

        if role in self.BOWLING_TYPES:
            bowling_type = self._weighted_choice(self.BOWLING_TYPES[role])
        elif role == PlayerRole.WICKET_KEEPER:
            bowling_type = BowlingType.NONE
        else:
            # Part-timers get medium or spin, some don't bowl at all
            bowling_type = self.rng.choice([
                BowlingType.NONE,
                BowlingType.MEDIUM,
                BowlingType.OFF_SPIN,
                BowlingType.LEG_SPIN,
            ])

        low, high = self.TIER_BASES.get(tier, self.TIER_BASES["solid"])
        base = self.rng.randint(low, high)

        if role == PlayerRole.BATSMAN:
            batting = self._attribute(base + 10, 10)
            bowling = self._attribute(20, 10)
        elif role == PlayerRole.BOWLER:
            batting = self._attribute(30, 15)
            bowling = self._attribute(base + 10, 10)
        elif role == PlayerRole.ALL_ROUNDER:
            batting = self._attribute(base, 12)
            bowling = self._attribute(base, 12)
        else:
            batting = self._attribute(base, 12)
            bowling = self._attribute(15, 10)
        fielding = self._attribute(base + 15 if role == PlayerRole.WICKET_KEEPER else base, 15)

        approaches = self.APPROACH_WEIGHTS.get(role, self.APPROACH_WEIGHTS[None])
        low_price, high_price = self.TIER_PRICES.get(tier, self.TIER_PRICES["solid"])

        player = Player(
            name=self._unique_name(self._faker(locale)),
            age=self.rng.randint(*self.TIER_AGES.get(tier, self.TIER_AGES["solid"])),
            country=country,
            nationality=Nationality.LOCAL if country == self.HOME_COUNTRY else Nationality.OVERSEAS,
            role=role,
            batting_approach=self._weighted_choice(approaches),
            bowling_type=bowling_type,
            batting=batting,
            bowling=bowling,
            fielding=fielding,
            form=self._attribute(50, 20),
            morale=self._attribute(50, 10),
            base_price=round(self.rng.uniform(low_price, high_price) * 2) / 2,
        )
        return self._ensure_minimum_ovr(player, min_ovr=55)

    def overseas_country(self) -> str:
        overseas = [c for c in self.COUNTRIES if c[0] != self.HOME_COUNTRY]
        return self._weighted_choice([(c[0], c[2]) for c in overseas])

    def generate_player_pool(self, count: int = 230) -> list[Player]:
        """
        Generate a pool of players for the auction.

        Default 230 players (25 per team * 8 teams + 30 buffer), all 55+ OVR.
        The tier and overseas mix scales with count.
        """
        # (tier, home players, overseas players) per 230
        mix = [
            ("elite", 8, 12),
            ("star", 18, 22),
            ("good", 50, 30),
            ("solid", 74, 16),
        ]
        plan = []
        for tier, home, overseas in mix:
            plan.extend([(tier, False)] * round(home * count / 230))
            plan.extend([(tier, True)] * round(overseas * count / 230))
        plan = plan[:count]
        while len(plan) < count:
            plan.append(("solid", False))

        players = []
        for tier, overseas in plan:
            country = self.overseas_country() if overseas else self.HOME_COUNTRY
            players.append(self.generate_player(tier=tier, country=country))
        return players

    @staticmethod
    def save_players_to_db(players: list[Player], session=None) -> None:
        """Save generated players to database"""
        own_session = session is None
        session = session or get_session()
        try:
            session.add_all(players)
            session.commit()
        finally:
            if own_session:
                session.close()
