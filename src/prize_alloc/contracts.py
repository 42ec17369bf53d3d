"""
Input contracts for prize-alloc.

A ``ScenarioRequest`` is what a caller (CLI, UI, notebook) hands over to
run one scenario. It is validated here, then turned into the immutable
``Plan`` and channel snapshot the allocator works from.
"""

from __future__ import annotations

import math
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from prize_alloc.config import CurveConfig
from prize_alloc.exceptions import ConfigError
from prize_alloc.plan import Plan


class ScenarioRequest(BaseModel):
    """One scenario run request."""

    name: str = Field(default="", max_length=200)
    budget: float = Field(ge=0)
    live_periods: dict[str, list[int]] = Field(
        default_factory=dict, description="Tier -> live period indices"
    )
    channels: list[str] = Field(default_factory=list)

    @field_validator("budget")
    @classmethod
    def _finite_budget(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("budget must be finite")
        return v

    @field_validator("channels")
    @classmethod
    def _unique_channels(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    def to_plan(self, settings: CurveConfig | None = None) -> Plan:
        settings = settings or CurveConfig()
        return Plan.from_live_periods(
            self.live_periods,
            n_periods=settings.n_periods,
            tiers=settings.tiers,
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> ScenarioRequest:
        """Load a request from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Scenario file not found: {path}", path=str(path))
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid scenario file {path}: {e}", path=str(path)) from e
