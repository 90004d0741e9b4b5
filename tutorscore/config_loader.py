"""Configuration file loader for threshold and weight overrides.

Supports loading per-tenant tuning from YAML and JSON files. Anything not
set in the file keeps its default value.

Example YAML:

    thresholds:
      lateness_threshold_minutes: 7
      min_sessions_for_aggregate_rules: 8
    weights:
      attendance: 0.4
      ratings: 0.3
      completion: 0.15
      reliability: 0.15
    rule_overrides:
      detect_early_end:
        enabled: false
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import RULES_CONFIG_PATH
from .exceptions import ConfigValidationError
from .rules.enums import Severity
from .rules.thresholds import (
    DEFAULT_RULES_ENGINE_CONFIG,
    DEFAULT_SCORE_TIER_THRESHOLDS,
    RulesEngineConfig,
    ScoreTierThresholds,
)
from .scoring.calculator import DEFAULT_SCORE_WEIGHTS, ScoreWeights

logger = logging.getLogger(__name__)


class ThresholdSettings(BaseModel):
    """Overrides for RulesEngineConfig fields."""

    model_config = ConfigDict(extra="forbid")

    lateness_threshold_minutes: int | None = Field(default=None, ge=0, le=120)
    early_end_threshold_minutes: int | None = Field(default=None, ge=0, le=240)
    poor_first_session_rating_threshold: int | None = Field(default=None, ge=1, le=5)
    high_reschedule_rate_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    chronic_lateness_rate_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    aggregate_window_days: int | None = Field(default=None, ge=1, le=365)
    min_sessions_for_aggregate_rules: int | None = Field(default=None, ge=0)
    rating_trend_short_window_days: int | None = Field(default=None, ge=1, le=365)
    rating_trend_long_window_days: int | None = Field(default=None, ge=1, le=730)
    trend_threshold_fraction: float | None = Field(default=None, ge=0.0, le=1.0)


class WeightSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    attendance: float = Field(default=DEFAULT_SCORE_WEIGHTS.attendance, ge=0.0, le=1.0)
    ratings: float = Field(default=DEFAULT_SCORE_WEIGHTS.ratings, ge=0.0, le=1.0)
    completion: float = Field(default=DEFAULT_SCORE_WEIGHTS.completion, ge=0.0, le=1.0)
    reliability: float = Field(default=DEFAULT_SCORE_WEIGHTS.reliability, ge=0.0, le=1.0)


class TierSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    excellent: float = Field(default=DEFAULT_SCORE_TIER_THRESHOLDS.excellent, ge=0, le=100)
    good: float = Field(default=DEFAULT_SCORE_TIER_THRESHOLDS.good, ge=0, le=100)
    average: float = Field(default=DEFAULT_SCORE_TIER_THRESHOLDS.average, ge=0, le=100)


class RuleOverrideSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    severity: str | None = None

    @field_validator("severity")
    @classmethod
    def validate_severity(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return Severity.from_label(v).label


class RulesConfigFile(BaseModel):
    """Top-level shape of an overrides file."""

    model_config = ConfigDict(extra="forbid")

    thresholds: ThresholdSettings = Field(default_factory=ThresholdSettings)
    weights: WeightSettings | None = None
    tiers: TierSettings | None = None
    rule_overrides: dict[str, RuleOverrideSettings] = Field(default_factory=dict)


@dataclass(frozen=True)
class LoadedConfig:
    """Resolved configuration values ready to pass to the engine."""

    rules_config: RulesEngineConfig = DEFAULT_RULES_ENGINE_CONFIG
    weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS
    tiers: ScoreTierThresholds = DEFAULT_SCORE_TIER_THRESHOLDS
    rule_overrides: dict[str, dict[str, Any]] = field(default_factory=dict)


class ConfigLoader:
    """Loads and validates scoring configuration from files."""

    def __init__(self, base: RulesEngineConfig = DEFAULT_RULES_ENGINE_CONFIG):
        """Initialize the config loader.

        Args:
            base: Config that file overrides are applied on top of
        """
        self.base = base

    def load_file(self, file_path: str | Path) -> LoadedConfig:
        """Load overrides from a single file.

        Args:
            file_path: Path to YAML or JSON config file

        Returns:
            LoadedConfig with overrides applied

        Raises:
            ConfigValidationError: If validation fails
            FileNotFoundError: If file doesn't exist
            ValueError: If the extension is not .yaml, .yml or .json
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        suffix = path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            with open(path) as f:
                data = yaml.safe_load(f)
        elif suffix == ".json":
            with open(path) as f:
                data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

        loaded = self.parse(data or {}, str(path))
        logger.info("Loaded scoring configuration from %s", path.name)
        return loaded

    def parse(self, data: Any, source: str = "<memory>") -> LoadedConfig:
        """Validate already-decoded configuration data.

        Raises:
            ConfigValidationError: If validation fails
        """
        if not isinstance(data, dict):
            raise ConfigValidationError(
                f"Invalid config format in {source}",
                errors=[{"file": source, "error": "Expected a mapping"}],
            )

        try:
            parsed = RulesConfigFile.model_validate(data)
        except ValidationError as e:
            raise ConfigValidationError(
                f"Validation failed for {source}",
                errors=[
                    {
                        "file": source,
                        "field": ".".join(str(part) for part in err["loc"]),
                        "error": err["msg"],
                    }
                    for err in e.errors()
                ],
            ) from e

        return self._resolve(parsed, source)

    def _resolve(self, parsed: RulesConfigFile, source: str) -> LoadedConfig:
        errors: list[dict[str, Any]] = []

        threshold_overrides = parsed.thresholds.model_dump(exclude_none=True)
        rules_config = replace(self.base, **threshold_overrides)
        if not (
            rules_config.rating_trend_short_window_days
            < rules_config.aggregate_window_days
            < rules_config.rating_trend_long_window_days
        ):
            errors.append(
                {
                    "file": source,
                    "field": "thresholds",
                    "error": "Rating windows must satisfy short < aggregate < long",
                }
            )

        weights = DEFAULT_SCORE_WEIGHTS
        if parsed.weights is not None:
            weights = ScoreWeights(**parsed.weights.model_dump())
            try:
                weights.validate()
            except ValueError as e:
                errors.append({"file": source, "field": "weights", "error": str(e)})

        tiers = DEFAULT_SCORE_TIER_THRESHOLDS
        if parsed.tiers is not None:
            tiers = ScoreTierThresholds(**parsed.tiers.model_dump())
            if not tiers.average <= tiers.good <= tiers.excellent:
                errors.append(
                    {"file": source, "field": "tiers", "error": "Tiers must satisfy average <= good <= excellent"}
                )

        if errors:
            raise ConfigValidationError(f"Validation failed for {len(errors)} item(s)", errors=errors)

        return LoadedConfig(
            rules_config=rules_config,
            weights=weights,
            tiers=tiers,
            rule_overrides={
                name: override.model_dump(exclude_none=True)
                for name, override in parsed.rule_overrides.items()
            },
        )


def load_default_config(path: str | Path | None = None) -> LoadedConfig:
    """Load the overrides file named by TUTORSCORE_RULES_CONFIG, if any.

    Returns the built-in defaults when no file is configured.
    """
    config_path = path or RULES_CONFIG_PATH
    if not config_path:
        return LoadedConfig()
    return ConfigLoader().load_file(config_path)
