"""Application state — an explicit value plus pure reducers.

The state holds the price history, the active settings and the report
computed from them.  Reducers never mutate; each returns a new state with
a freshly recomputed report.  ``ForecastController`` is the single owner
of the current state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from forecaster.analysis.models import PricePoint
from forecaster.analysis.summary import DEFAULT_CYCLE_LENGTH_DAYS
from forecaster.config import Config, Settings
from forecaster.history import minimum_interval, resample_points, should_append
from forecaster.pipeline import AnalysisReport, run_analysis
from forecaster.simulation.engine import DEFAULT_PRICE_FLOOR
from forecaster.simulation.random_source import RandomSource
from forecaster.strategy.models import TradingSignal

logger = logging.getLogger("forecaster.state")

_SETTING_FIELDS = ("historical_window_seconds", "forecast_window_seconds", "strategy_key")


@dataclass(frozen=True)
class ForecasterState:
    price_history: tuple[PricePoint, ...] = ()
    settings: Settings = Settings()
    report: Optional[AnalysisReport] = None

    @property
    def current_price(self) -> Optional[float]:
        if not self.price_history:
            return None
        return self.price_history[-1].price


# ── Reducers ─────────────────────────────────────────────────────────────


def recompute(
    state: ForecasterState,
    random_source: RandomSource,
    cycle_length: int = DEFAULT_CYCLE_LENGTH_DAYS,
    price_floor: float = DEFAULT_PRICE_FLOOR,
) -> ForecasterState:
    """Return *state* with its report rebuilt (``None`` without history)."""
    if not state.price_history:
        return replace(state, report=None)
    report = run_analysis(
        state.price_history,
        state.settings,
        random_source,
        cycle_length=cycle_length,
        price_floor=price_floor,
    )
    return replace(state, report=report)


def with_price_history(
    state: ForecasterState,
    points: Sequence[PricePoint],
    random_source: RandomSource,
    **kwargs,
) -> ForecasterState:
    """Replace the whole history and recompute."""
    return recompute(replace(state, price_history=tuple(points)), random_source, **kwargs)


def with_settings(
    state: ForecasterState,
    random_source: RandomSource,
    changes: dict,
    **kwargs,
) -> ForecasterState:
    """Apply setting changes (any ``Settings`` field) and recompute.

    Raises ``ValueError`` for an unknown setting name.
    """
    unknown = [name for name in changes if name not in _SETTING_FIELDS]
    if unknown:
        raise ValueError(f"Unknown setting(s): {', '.join(unknown)}")
    settings = replace(state.settings, **changes)
    return recompute(replace(state, settings=settings), random_source, **kwargs)


def append_price_point(
    state: ForecasterState,
    point: PricePoint,
    random_source: RandomSource,
    **kwargs,
) -> ForecasterState:
    """Append a live observation when it clears the sampling interval.

    The history is resampled to the interval of the current historical
    window.  A point arriving too early leaves *state* unchanged.
    """
    window = state.settings.historical_window_seconds
    if not should_append(state.price_history, point, window):
        return state

    history = resample_points([*state.price_history, point], minimum_interval(window))
    return recompute(replace(state, price_history=tuple(history)), random_source, **kwargs)


# ── Controller ───────────────────────────────────────────────────────────


class ForecastController:
    """Owns the current ``ForecasterState`` and applies reducers to it.

    Args:
        random_source: Randomness for every forecast this controller runs.
        settings: Initial settings.
        cycle_length: Cycle length handed to the summary.
        price_floor: Minimum simulated price.
    """

    def __init__(
        self,
        random_source: RandomSource,
        settings: Optional[Settings] = None,
        cycle_length: int = DEFAULT_CYCLE_LENGTH_DAYS,
        price_floor: float = DEFAULT_PRICE_FLOOR,
    ) -> None:
        self._random_source = random_source
        self._cycle_length = cycle_length
        self._price_floor = price_floor
        self._state = ForecasterState(settings=settings or Settings())

    @classmethod
    def from_config(cls, config: Config) -> ForecastController:
        return cls(
            random_source=config.random_source(),
            settings=config.settings,
            cycle_length=config.cycle_length_days,
            price_floor=config.price_floor,
        )

    @property
    def state(self) -> ForecasterState:
        return self._state

    @property
    def report(self) -> Optional[AnalysisReport]:
        return self._state.report

    @property
    def signal(self) -> Optional[TradingSignal]:
        if self._state.report is None:
            return None
        return self._state.report.signal

    def _analysis_kwargs(self) -> dict:
        return {"cycle_length": self._cycle_length, "price_floor": self._price_floor}

    def load_history(self, points: Sequence[PricePoint]) -> AnalysisReport | None:
        """Replace the history and recompute everything."""
        self._state = with_price_history(
            self._state, points, self._random_source, **self._analysis_kwargs()
        )
        logger.info("History loaded: %d point(s)", len(self._state.price_history))
        return self._state.report

    def update_setting(self, name: str, value) -> AnalysisReport | None:
        """Change one setting and recompute."""
        self._state = with_settings(
            self._state, self._random_source, {name: value}, **self._analysis_kwargs()
        )
        logger.info("Setting %s updated to %r", name, value)
        return self._state.report

    def push_price(self, point: PricePoint) -> bool:
        """Offer a live observation; returns True if it was appended."""
        before = self._state
        self._state = append_price_point(
            self._state, point, self._random_source, **self._analysis_kwargs()
        )
        appended = self._state is not before
        if not appended:
            logger.debug("Price at %d skipped: inside sampling interval", point.timestamp)
        return appended
