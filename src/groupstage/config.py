"""Engine settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

import logging
import pathlib

from pydantic import model_validator
from pydantic_settings import BaseSettings

from groupstage.core.presets import (
    PRESET_RULES,
    PRESET_TIEBREAKERS,
    load_rules_yaml,
    preset_config,
)
from groupstage.models.rules import RulesConfig

VALID_ENVS = frozenset({"development", "production", "test"})


class Settings(BaseSettings):
    """groupstage configuration.

    All values can be overridden via environment variables or .env file.
    """

    groupstage_env: str = "development"

    # Logging
    groupstage_log_level: str = "INFO"

    # Rules
    groupstage_default_preset: str = "fifa_2018"
    groupstage_rules_file: pathlib.Path | None = None

    # Team id to ranking position for presets ending in a ranking, as JSON in the env
    groupstage_ranking: dict[int, int] | None = None

    # Seeds the drawing of lots outside production
    groupstage_random_seed: int | None = None

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_env(self) -> Settings:
        if self.groupstage_env not in VALID_ENVS:
            msg = f"GROUPSTAGE_ENV must be one of {sorted(VALID_ENVS)}, got {self.groupstage_env!r}"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def _check_preset(self) -> Settings:
        if self.groupstage_default_preset not in PRESET_RULES:
            msg = (
                f"Unknown preset {self.groupstage_default_preset!r}, "
                f"known presets: {sorted(PRESET_RULES)}"
            )
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def _ranking_for_ranking_preset(self) -> Settings:
        preset = self.groupstage_default_preset
        if (
            self.groupstage_rules_file is None
            and PRESET_TIEBREAKERS.get(preset) == "ranking"
            and not self.groupstage_ranking
        ):
            msg = f"Preset {preset!r} needs GROUPSTAGE_RANKING or GROUPSTAGE_RULES_FILE"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def _no_fixed_seed_in_production(self) -> Settings:
        """A drawing of lots must not be predictable in production."""
        if self.groupstage_env == "production" and self.groupstage_random_seed is not None:
            msg = "GROUPSTAGE_RANDOM_SEED must not be set in production"
            raise ValueError(msg)
        return self

    def load_rules_config(self) -> RulesConfig:
        """Rule set from ``groupstage_rules_file`` if set, else the default preset."""
        if self.groupstage_rules_file is not None:
            return load_rules_yaml(self.groupstage_rules_file)
        return preset_config(
            self.groupstage_default_preset,
            seed=self.groupstage_random_seed,
            ranks=self.groupstage_ranking,
        )


def configure_logging(settings: Settings) -> None:
    """Configure root logging for applications embedding the engine."""
    logging.basicConfig(
        level=getattr(logging, settings.groupstage_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
