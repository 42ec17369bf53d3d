"""
Configuration management for prize-alloc.

Centralized configuration with sensible defaults, loadable from YAML.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from prize_alloc.exceptions import ConfigError


DEFAULT_TIERS = ["XXL", "XL", "L", "M", "S"]

DEFAULT_CHANNELS = [
    "google_search",
    "tiktok_video",
    "meta_video",
    "youtube",
    "outdoor_brand",
    "outdoor_perf",
    "display",
    "audio",
    "affiliates",
    "crm",
]

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class CurveConfig(BaseModel):
    """Synthetic response-curve generation settings."""

    seed: int = Field(default=1337, description="Seed for the curve parameter stream")

    tiers: list[str] = Field(default_factory=lambda: list(DEFAULT_TIERS))
    channels: list[str] = Field(default_factory=lambda: list(DEFAULT_CHANNELS))

    # Bigger prize draws respond more strongly
    tier_weights: dict[str, float] = Field(
        default_factory=lambda: {"XXL": 1.25, "XL": 1.10, "L": 1.00, "M": 0.85, "S": 0.70}
    )
    # Assumed relative channel efficiency
    channel_weights: dict[str, float] = Field(
        default_factory=lambda: {
            "google_search": 1.20,
            "tiktok_video": 0.95,
            "meta_video": 1.00,
            "youtube": 0.90,
            "outdoor_brand": 0.80,
            "outdoor_perf": 0.88,
            "display": 0.92,
            "audio": 0.78,
            "affiliates": 1.05,
            "crm": 1.15,
        }
    )

    coefficient_mean: float = Field(default=120.0, gt=0, description="Uplift scale mean")
    coefficient_sd: float = Field(default=35.0, ge=0)
    coefficient_bounds: tuple[float, float] = Field(default=(25.0, 260.0))

    saturation_mean: float = Field(default=60000.0, gt=0, description="Saturation scale mean")
    saturation_sd: float = Field(default=15000.0, ge=0)
    saturation_bounds: tuple[float, float] = Field(default=(20000.0, 120000.0))

    n_periods: int = Field(default=12, ge=1, description="Number of periods (months)")
    period_labels: list[str] = Field(default_factory=lambda: list(MONTHS))

    @model_validator(mode="after")
    def _check_bounds(self) -> "CurveConfig":
        for name in ("coefficient_bounds", "saturation_bounds"):
            lo, hi = getattr(self, name)
            if not 0 < lo <= hi:
                raise ValueError(f"{name} must satisfy 0 < low <= high, got ({lo}, {hi})")
        return self

    def period_label(self, period: int) -> str:
        if period < len(self.period_labels):
            return self.period_labels[period]
        return str(period)


class AllocationConfig(BaseModel):
    """Spend grid and allocator settings."""

    step: float = Field(default=10000.0, gt=0, description="Spend increment per allocator step")
    max_spend: float = Field(default=100000.0, gt=0, description="Maximum spend per curve")
    default_budget: float = Field(default=300000.0, ge=0)


class BaselineConfig(BaseModel):
    """Previous-spend baseline used for comparison."""

    total_spend: float = Field(default=1_000_000.0, ge=0)
    seed: int = Field(default=2026)
    min_weight: float = Field(default=0.2, gt=0, description="Floor added to every random weight")


class LoggingConfig(BaseModel):
    """Log sink configuration."""

    level: str = Field(default="INFO")


class PrizeAllocConfig(BaseModel):
    """Root configuration for prize-alloc."""

    project_name: str = Field(default="prize-alloc")

    curves: CurveConfig = Field(default_factory=CurveConfig)
    allocation: AllocationConfig = Field(default_factory=AllocationConfig)
    baseline: BaselineConfig = Field(default_factory=BaselineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "PrizeAllocConfig":
        """Load configuration from YAML file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}", path=str(path))
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config {path}: {e}", path=str(path)) from e

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)


# Global config instance (can be overridden)
_config: PrizeAllocConfig | None = None


def get_config() -> PrizeAllocConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = PrizeAllocConfig()
    return _config


def set_config(config: PrizeAllocConfig | None) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def load_config(path: Path | str | None = None) -> PrizeAllocConfig:
    """Load configuration from file or use defaults."""
    global _config

    if path is not None:
        _config = PrizeAllocConfig.from_yaml(Path(path))
    else:
        # Check for config file in standard locations
        for config_path in [Path("config.yaml"), Path("config/config.yaml")]:
            if config_path.exists():
                _config = PrizeAllocConfig.from_yaml(config_path)
                break
        else:
            _config = PrizeAllocConfig()

    return _config
