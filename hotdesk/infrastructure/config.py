import os
from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

CONFIG_FILE_ENV = "HOTDESK_CONFIG_FILE"


class ImageSinkSettings(BaseModel):
    provider: str = "local"
    directory: Path = Path("var/floor-plans")
    upload_url: str | None = None
    api_token: str | None = None
    timeout_seconds: float = 30.0
    # Formats the sink's opaque id into a direct download link
    url_template: str = "https://drive.google.com/uc?export=download&id={id}"


class ReaperSettings(BaseModel):
    period_seconds: float = 60.0
    enabled: bool = True


class HttpSettings(BaseModel):
    listen_addr: str = "0.0.0.0:8000"
    request_timeout_seconds: float = 30.0

    @property
    def host(self) -> str:
        return self.listen_addr.rpartition(":")[0] or "0.0.0.0"

    @property
    def port(self) -> int:
        return int(self.listen_addr.rpartition(":")[2])


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HOTDESK_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage_url: str = "sqlite+pysqlite:///:memory:"
    log_level: str = "INFO"
    image_sink: ImageSinkSettings = ImageSinkSettings()
    reaper: ReaperSettings = ReaperSettings()
    http: HttpSettings = HttpSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources = [init_settings, env_settings, dotenv_settings]
        config_file = os.getenv(CONFIG_FILE_ENV)
        if config_file:
            # Environment wins over the YAML file
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=config_file))
        sources.append(file_secret_settings)
        return tuple(sources)


settings = Settings()
