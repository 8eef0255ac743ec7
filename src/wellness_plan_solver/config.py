"""Configuration management - settings from env, solver policy from YAML."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseSettings):
    """Application settings from environment and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PLAN_SOLVER_",
        extra="ignore",
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8000, description="Bind port")
    log_level: str = Field(default="INFO", description="Root log level")

    # Data
    policy_path: Path | None = Field(default=None, description="Override for solver_policy.yaml")
    catalog_path: Path | None = Field(default=None, description="Override for catalog.yaml")


class NutrientPolicy(BaseModel):
    """Tolerance band and score weight for one nutrient."""

    unit: str = Field(default="g")
    lower_tolerance: float = Field(default=0.05, ge=0.0, le=1.0)
    upper_tolerance: float = Field(default=0.05, ge=0.0)
    weight: float = Field(default=1.0, ge=0.0, description="Weight in the diet distance function")


class RulePolicy(BaseModel):
    """One named adjustment rule. Deltas are applied only when a flag in `when` is set."""

    name: str
    when: list[str] = Field(default_factory=list)
    description: str = ""
    energy_factor: float = 1.0
    macro_shift: dict[str, float] = Field(default_factory=dict)
    nutrient_factors: dict[str, float] = Field(default_factory=dict)
    activity_factors: dict[str, float] = Field(default_factory=dict)
    activity_minutes: dict[str, float] = Field(default_factory=dict)
    strength_sessions_delta: int = 0


class SolverPolicy(BaseModel):
    """Product-policy constants. Every numeric default of the solver lives here."""

    # Requirements engine
    activity_multipliers: dict[str, float]
    macro_shares: dict[str, float]
    fiber_per_1000_kcal: float = 14.0
    reference_intakes: dict[str, dict[str, float]]
    nutrients: dict[str, NutrientPolicy]
    activity_targets: dict[str, float]
    strength_sessions: int = 2
    activity_tolerance: float = 0.10
    rules: list[RulePolicy] = Field(default_factory=list)

    # Diet core
    slots: list[str] = Field(default_factory=lambda: ["breakfast", "lunch", "dinner", "snack"])
    slot_shares: dict[str, float]
    portion_scales: list[float] = Field(default_factory=lambda: [1.0, 0.75, 1.25, 1.5])
    variety_window: int = Field(default=2, ge=0)
    max_improvement_passes: int = Field(default=3, ge=0)
    band_penalty: float = 25.0
    preference_weight: float = 0.5

    # Exercise core
    per_day_cap: int = Field(default=90, gt=0)
    max_session_minutes: dict[str, int] = Field(default_factory=dict)
    default_session_minutes: int = 30
    focus_boost: float = Field(default=2.0, ge=1.0)

    # Validator / relaxer
    relax_step: float = Field(default=0.05, gt=0.0)
    max_relax_retries: int = Field(default=3, ge=0)

    def session_minutes(self, category: str) -> int:
        return self.max_session_minutes.get(category, self.default_session_minutes)


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load YAML config file."""
    if not config_path.exists():
        return {}
    with config_path.open() as f:
        return yaml.safe_load(f) or {}


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()


@lru_cache
def get_policy(policy_path_str: str = "") -> SolverPolicy:
    """Load and validate the solver policy table. Falls back to the packaged default."""
    if not policy_path_str:
        override = get_settings().policy_path
        policy_path = override or DATA_DIR / "solver_policy.yaml"
    else:
        policy_path = Path(policy_path_str)
    data = load_yaml_config(policy_path)
    if not data:
        raise FileNotFoundError(f"Solver policy not found or empty: {policy_path}")
    return SolverPolicy.model_validate(data)
