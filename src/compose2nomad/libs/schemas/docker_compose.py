from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Compose fields that accept a string, a list or a mapping.
ComposeValue = str | list[Any] | dict[Any, Any] | None

# `ports` and `volumes` entries: short syntax string or long syntax mapping.
ComposeEntry = str | dict[str, Any]


class DockerComposeDeployModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    replicas: int | None = Field(default=None, ge=0)


class DockerComposeServiceModel(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, coerce_numbers_to_str=True)

    image: str = ""
    ports: list[ComposeEntry] = Field(default_factory=list)
    environment: ComposeValue = None
    volumes: list[ComposeEntry] = Field(default_factory=list)
    command: ComposeValue = None
    entrypoint: ComposeValue = None
    restart: str = ""
    deploy: DockerComposeDeployModel | None = None

    @field_validator("ports", "volumes", mode="before")
    @classmethod
    def _normalize_entries(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [
                str(item)
                if isinstance(item, int | float) and not isinstance(item, bool)
                else item
                for item in v
            ]
        return v

    @field_validator("image", "restart", mode="before")
    @classmethod
    def _scalar_as_str(cls, v: Any) -> Any:
        # `restart: false` arrives as a boolean.
        if v is None:
            return ""
        if isinstance(v, bool):
            return "yes" if v else "no"
        return v

    @property
    def replicas(self) -> int | None:
        return self.deploy.replicas if self.deploy else None


class DockerComposeModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    version: str | None = None
    services: dict[str, DockerComposeServiceModel] = Field(default_factory=dict)
    volumes: dict[str, Any] = Field(default_factory=dict)

    @field_validator("services", "volumes", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_str(cls, v: Any) -> Any:
        return v if v is None or isinstance(v, str) else str(v)
