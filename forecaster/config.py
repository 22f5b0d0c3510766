"""Forecaster — application configuration.

Loads .env variables into a typed config object.
Validates numeric variables on startup.
"""

import math
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from forecaster.simulation.random_source import RandomSource, make_random_source

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class Settings:
    """User-chosen analysis settings.

    Window lengths are in seconds; the analysis works in whole days.
    """

    historical_window_seconds: int = SECONDS_PER_DAY
    forecast_window_seconds: int = SECONDS_PER_DAY
    strategy_key: str = "trend"

    @property
    def historical_days(self) -> int:
        return math.ceil(self.historical_window_seconds / SECONDS_PER_DAY)

    @property
    def forecast_days(self) -> int:
        return math.ceil(self.forecast_window_seconds / SECONDS_PER_DAY)


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    historical_window_seconds: int
    forecast_window_seconds: int
    strategy_key: str
    simulation_seed: Optional[int]  # None = entropy-backed simulation
    cycle_length_days: int
    price_floor: float
    log_level: str

    @property
    def settings(self) -> Settings:
        """Default ``Settings`` derived from this configuration."""
        return Settings(
            historical_window_seconds=self.historical_window_seconds,
            forecast_window_seconds=self.forecast_window_seconds,
            strategy_key=self.strategy_key,
        )

    def random_source(self) -> RandomSource:
        """Seeded source when a seed is configured, entropy source otherwise."""
        return make_random_source(self.simulation_seed)


def _int_var(name: str, default: str, minimum: int = 0) -> int:
    raw = os.environ.get(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got '{raw}'") from None
    if value < minimum:
        raise ValueError(f"Environment variable {name} must be >= {minimum}, got {value}")
    return value


def _float_var(name: str, default: str) -> float:
    raw = os.environ.get(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got '{raw}'") from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    An empty ``FORECASTER_SIMULATION_SEED`` selects entropy-backed
    simulation.  Raises ``ValueError`` naming the variable when a numeric
    variable cannot be parsed or is out of range.
    """
    load_dotenv(dotenv_path=env_path)

    raw_seed = os.environ.get("FORECASTER_SIMULATION_SEED", "42").strip()
    seed = _int_var("FORECASTER_SIMULATION_SEED", raw_seed, minimum=0) if raw_seed else None

    return Config(
        historical_window_seconds=_int_var("FORECASTER_HISTORICAL_WINDOW_SECONDS", str(SECONDS_PER_DAY)),
        forecast_window_seconds=_int_var("FORECASTER_FORECAST_WINDOW_SECONDS", str(SECONDS_PER_DAY)),
        strategy_key=os.environ.get("FORECASTER_STRATEGY", "trend"),
        simulation_seed=seed,
        cycle_length_days=_int_var("FORECASTER_CYCLE_LENGTH_DAYS", "365", minimum=1),
        price_floor=_float_var("FORECASTER_PRICE_FLOOR", "1000.0"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
