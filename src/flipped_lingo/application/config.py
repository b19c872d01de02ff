from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from flipped_lingo.domain import constants as c
from flipped_lingo.domain.srs.models import SchedulerSettings


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/flipped-lingo/config.toml",
        Path.home() / ".flipped-lingo.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for flipped-lingo.
    Supports loading from:
    1. Config file (~/.config/flipped-lingo/config.toml or ~/.flipped-lingo.toml)
    2. Environment variables (LINGO_*)
    3. Manual overrides (CLI / HTTP)
    """

    model_config = SettingsConfigDict(
        env_prefix="LINGO_",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/flipped-lingo/decks"
    )

    # Scheduler
    max_new_cards_per_day: int = Field(default=c.DEFAULT_MAX_NEW_CARDS_PER_DAY, ge=0)
    max_reviews_per_day: int = Field(default=c.DEFAULT_MAX_REVIEWS_PER_DAY, ge=0)
    easy_bonus: float = Field(default=c.DEFAULT_EASY_BONUS, gt=0)
    hard_penalty: float = Field(default=c.DEFAULT_HARD_PENALTY, gt=0)
    graduating_interval: int = Field(default=c.DEFAULT_GRADUATING_INTERVAL, ge=1)
    easy_interval: int = Field(default=c.DEFAULT_EASY_INTERVAL, ge=1)
    maximum_interval: int = Field(default=c.DEFAULT_MAXIMUM_INTERVAL, ge=1)
    minimum_interval: int = Field(default=c.DEFAULT_MINIMUM_INTERVAL, ge=1)

    # Sessions
    session_size: int = Field(default=c.DEFAULT_SESSION_SIZE, ge=1)
    default_target_minutes: int = Field(default=c.DEFAULT_TARGET_MINUTES, ge=1)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins; earlier sources take precedence
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_dir(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @model_validator(mode="after")
    def check_interval_bounds(self) -> "AppConfig":
        if self.minimum_interval > self.maximum_interval:
            raise ValueError(
                f"minimum_interval ({self.minimum_interval}) exceeds "
                f"maximum_interval ({self.maximum_interval})"
            )
        return self

    def scheduler_settings(self) -> SchedulerSettings:
        """Immutable settings value handed to the scheduler."""
        return SchedulerSettings(
            max_new_cards_per_day=self.max_new_cards_per_day,
            max_reviews_per_day=self.max_reviews_per_day,
            easy_bonus=self.easy_bonus,
            hard_penalty=self.hard_penalty,
            graduating_interval=self.graduating_interval,
            easy_interval=self.easy_interval,
            maximum_interval=self.maximum_interval,
            minimum_interval=self.minimum_interval,
        )


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/flipped-lingo/config.toml (if exists)
    3. Environment variables (LINGO_*)
    4. cli_overrides (None values are dropped)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
