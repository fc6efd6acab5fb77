from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from compose2nomad.libs.schemas.nomad_job import JobOptions

DEFAULT_CONFIG_PATHS = (
    Path("./compose2nomad.yaml"),
    Path("./compose2nomad.yml"),
)


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="COMPOSE2NOMAD_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    job: JobOptions = Field(
        default_factory=JobOptions,
        description="Defaults for the generated `job` block.",
    )
    log_level: str = Field(
        default="WARNING",
        examples=["DEBUG", "INFO", "WARNING"],
    )


@lru_cache(maxsize=1)
def load_app_config(paths: Sequence[Path] = DEFAULT_CONFIG_PATHS) -> AppConfig:
    class LoadedAppConfig(AppConfig):
        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            return (
                init_settings,
                env_settings,
                dotenv_settings,
                file_secret_settings,
                *(
                    YamlConfigSettingsSource(
                        settings_cls, yaml_file=path, yaml_file_encoding="utf-8"
                    )
                    for path in paths
                ),
            )

    return LoadedAppConfig()
