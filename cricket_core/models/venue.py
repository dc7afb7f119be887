from dataclasses import dataclass
from sqlalchemy import String, Integer, Float
from sqlalchemy.orm import Mapped, mapped_column
from cricket_core.database import Base


@dataclass(frozen=True)
class PitchConditions:
    """Pitch descriptor, each attribute on a 1-10 scale"""
    hardness: int = 5
    moisture: int = 5
    grass: int = 5
    wear: int = 1

    @property
    def is_spinning(self) -> bool:
        return self.wear >= 7 or (self.wear >= 5 and self.moisture <= 3)

    @property
    def is_seaming(self) -> bool:
        return self.grass >= 6 or self.moisture >= 7

    @property
    def is_bouncy(self) -> bool:
        return self.hardness >= 7


@dataclass(frozen=True)
class WeatherConditions:
    temperature: float = 25.0  # Celsius
    humidity: float = 50.0  # Percentage
    wind_speed: float = 10.0  # km/h
    rain_probability: float = 0.0  # 0-1
    visibility: int = 10  # 1-10

    @property
    def is_raining(self) -> bool:
        return self.rain_probability >= 0.5

    @property
    def is_extreme_temperature(self) -> bool:
        return self.temperature > 35 or self.temperature < 10

    @property
    def is_playable(self) -> bool:
        if self.is_raining and self.rain_probability > 0.7:
            return False
        return self.visibility >= 3


class Venue(Base):
    __tablename__ = "venues"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    city: Mapped[str] = mapped_column(String(50), default="")
    capacity: Mapped[int] = mapped_column(Integer, default=30000)

    # Pitch (1-10)
    hardness: Mapped[int] = mapped_column(Integer, default=5)
    moisture: Mapped[int] = mapped_column(Integer, default=5)
    grass: Mapped[int] = mapped_column(Integer, default=5)
    wear: Mapped[int] = mapped_column(Integer, default=1)

    # Weather
    temperature: Mapped[float] = mapped_column(Float, default=25.0)
    humidity: Mapped[float] = mapped_column(Float, default=50.0)
    wind_speed: Mapped[float] = mapped_column(Float, default=10.0)
    rain_probability: Mapped[float] = mapped_column(Float, default=0.0)
    visibility: Mapped[int] = mapped_column(Integer, default=10)

    def __init__(self, **kwargs):
        for key, value in (
            ("city", ""), ("capacity", 30000),
            ("hardness", 5), ("moisture", 5), ("grass", 5), ("wear", 1),
            ("temperature", 25.0), ("humidity", 50.0), ("wind_speed", 10.0),
            ("rain_probability", 0.0), ("visibility", 10),
        ):
            kwargs.setdefault(key, value)
        super().__init__(**kwargs)

    @property
    def pitch(self) -> PitchConditions:
        return PitchConditions(
            hardness=self.hardness,
            moisture=self.moisture,
            grass=self.grass,
            wear=self.wear,
        )

    @property
    def weather(self) -> WeatherConditions:
        return WeatherConditions(
            temperature=self.temperature,
            humidity=self.humidity,
            wind_speed=self.wind_speed,
            rain_probability=self.rain_probability,
            visibility=self.visibility,
        )

    @property
    def is_playable(self) -> bool:
        return self.weather.is_playable

    def record_match(self) -> None:
        """Pitch wears with every match played on it"""
        self.wear = min(10, self.wear + 1)

    def rest(self, days: int) -> None:
        """Moisture dries out between matches"""
        if days > 0:
            self.moisture = max(1, self.moisture - days)

    def __repr__(self):
        return f"<Venue {self.name} ({self.city})>"
