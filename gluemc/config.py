import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

_CONFIG_PATH = os.getenv("GLUEMC_CONFIG", "config.toml")
_ENV_PATH = os.getenv("GLUEMC_ENV", ".env")


class LangSettings(BaseModel):
    game_version: str = "1.21.11"
    url_template: str = (
        "https://assets.mcasset.cloud/{version}/assets/minecraft/lang/en_us.json"
    )
    file: Optional[Path] = None  # local en_us.json, skips the download
    timeout: float = 30.0

    @property
    def url(self) -> str:
        return self.url_template.format(version=self.game_version)


class RelaySettings(BaseModel):
    avatar_url_template: str = "https://skinatar.firstdark.dev/avatar/{name}"
    console_username: str = "Console"
    message_limit: int = 2000  # discord content limit
    console_flush_interval: float = 0.1
    console_max_delay: float = 2.0
    timeout: float = 10.0

    def avatar_url(self, name: str) -> str:
        return self.avatar_url_template.format(name=name)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        toml_file=_CONFIG_PATH,
        env_file=_ENV_PATH,
        extra="ignore",
    )

    discord_webhook_url: Optional[str] = None
    discord_console_webhook_url: Optional[str] = None

    server_directory: Path = Field(default=Path("."))
    logs_dir: Path = Field(default=Path("logs"))

    localization: LangSettings = Field(default_factory=LangSettings)
    relay: RelaySettings = Field(default_factory=RelaySettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Source order: init args > OS env > .env > config.toml > secrets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


settings = Settings()
