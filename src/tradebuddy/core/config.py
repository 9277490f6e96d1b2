"""Configuration management.

``AnalyticsConfig`` is the single, injectable threshold table for the
analytics engine: every cut-off the aggregators use (sample sizes,
trend margin, behavioural warning levels) lives here with a named
default rather than inline in the computations.

``Settings`` wraps it for the CLI and loads from a TOML file plus
environment variables via pydantic-settings.  The analytics core itself
only ever receives an ``AnalyticsConfig`` instance.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings

from .enums import OutcomeFilter

# ---------------------------------------------------------------------------
# Named defaults
# ---------------------------------------------------------------------------

DEFAULT_INITIAL_BALANCE = 10_000.0
DEFAULT_ROLLING_WINDOW = 20

# Setup reliability: trades needed before a setup's numbers are trusted.
MIN_SAMPLE_HIGH = 20
MIN_SAMPLE_MODERATE = 8

# Rolling trend: later expectancy must beat the earlier one by this many R.
TREND_MARGIN_R = 0.05

# Post-loss behaviour warnings.
RISK_INCREASE_WARNING_PCT = 15.0
CHECKLIST_DROP_WARNING_POINTS = 10.0
FREQUENCY_SPIKE_WARNING_PCT = 20.0
FREQUENCY_SPIKE_HIGH_PCT = 50.0
CONFIDENCE_DROP_WARNING_RATIO = 0.2
CONFIDENCE_DROP_HIGH_RATIO = 0.5
MIN_CONSECUTIVE_LOSS_EVENTS = 2


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class BehaviorThresholds(BaseModel):
    """Thresholds for post-loss behavioural warnings."""

    risk_increase_warning_pct: float = RISK_INCREASE_WARNING_PCT
    checklist_drop_warning_points: float = CHECKLIST_DROP_WARNING_POINTS
    frequency_spike_warning_pct: float = FREQUENCY_SPIKE_WARNING_PCT
    frequency_spike_high_pct: float = FREQUENCY_SPIKE_HIGH_PCT
    confidence_drop_warning_ratio: float = Field(
        default=CONFIDENCE_DROP_WARNING_RATIO, ge=0.0
    )
    confidence_drop_high_ratio: float = Field(
        default=CONFIDENCE_DROP_HIGH_RATIO, ge=0.0
    )
    min_consecutive_loss_events: int = Field(
        default=MIN_CONSECUTIVE_LOSS_EVENTS, ge=1
    )

    model_config = {"frozen": True}


class TradeFilter(BaseModel):
    """Optional pre-aggregation filter on normalized trades.

    Empty lists and ``None`` bounds mean "no restriction".  Text matches
    are case-insensitive.
    """

    start: datetime | None = None
    end: datetime | None = None
    setups: list[str] = Field(default_factory=list)
    emotions: list[str] = Field(default_factory=list)
    symbols: list[str] = Field(default_factory=list)
    outcome: OutcomeFilter = OutcomeFilter.ALL
    min_r: float | None = None
    max_r: float | None = None
    min_risk_percent: float | None = None
    max_risk_percent: float | None = None
    min_checklist_percent: float | None = None
    max_checklist_percent: float | None = None

    model_config = {"frozen": True}


class AnalyticsConfig(BaseModel):
    """Options recognised by ``assemble_report``."""

    initial_balance: float = DEFAULT_INITIAL_BALANCE
    rolling_window_size: int = Field(default=DEFAULT_ROLLING_WINDOW, ge=1)
    min_sample_high: int = Field(default=MIN_SAMPLE_HIGH, ge=1)
    min_sample_moderate: int = Field(default=MIN_SAMPLE_MODERATE, ge=1)
    trend_margin_r: float = Field(default=TREND_MARGIN_R, ge=0.0)
    behavior: BehaviorThresholds = Field(default_factory=BehaviorThresholds)

    # Monte Carlo projection (0 simulations disables it)
    monte_carlo_simulations: int = Field(default=1000, ge=0)
    monte_carlo_seed: int = 42
    monte_carlo_ruin_pct: float = Field(default=50.0, gt=0.0, le=100.0)

    filters: TradeFilter | None = None
    # Overrides the clock as the report's "today".
    as_of: datetime | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_sample_thresholds(self) -> AnalyticsConfig:
        if self.min_sample_moderate > self.min_sample_high:
            raise ValueError(
                "min_sample_moderate must not exceed min_sample_high "
                f"({self.min_sample_moderate} > {self.min_sample_high})"
            )
        return self


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level CLI settings.

    Loaded from a TOML config file, overridden by environment variables
    (``TRADEBUDDY_ANALYTICS__INITIAL_BALANCE=25000``).
    """

    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADEBUDDY_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).  A missing file
            is ignored; an unparseable one raises ``ConfigError``.
        overrides: Dict of overrides to apply on top.  Nested dicts are
            merged one level deep so ``{"analytics": {...}}`` only
            replaces the keys it names.
    """
    from .errors import ConfigError

    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Cannot parse {path}: {exc}") from exc

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    return Settings(**data)
