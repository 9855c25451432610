import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from .types import ListenerRunnerStrategy

_CONFIG_PATH = os.getenv("EVENTEXT_CONFIG", "eventext.toml")
_ENV_PATH = os.getenv("EVENTEXT_ENV", ".env")


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    stream: bool = False  # also log to stdout
    logs_dir: Optional[Path] = None  # rotating file logs when set


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVENTEXT_",
        env_nested_delimiter="__",
        toml_file=_CONFIG_PATH,
        env_file=_ENV_PATH,
        extra="ignore",
    )

    # Defaults applied to every new EventRegistry
    auto_register: bool = False
    listener_runner_strategy: ListenerRunnerStrategy = (
        ListenerRunnerStrategy.ORDERED_BY_EVENTS
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Source order: init args > OS env > .env > eventext.toml > secrets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


settings = Settings()
