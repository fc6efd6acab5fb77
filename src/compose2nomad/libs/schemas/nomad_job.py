from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class JobOptions(_Frozen):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(
        default="my-docker-compose-job",
        description="Label of the generated `job` block.",
    )
    datacenters: list[str] = Field(
        default_factory=lambda: ["dc1"],
        examples=[["dc1"], ["eu-west-1", "eu-west-2"]],
    )
    type: str = Field(
        default="service",
        examples=["service", "batch", "system"],
    )


class Comment(_Frozen):
    kind: Literal["comment"] = "comment"
    text: str


class VolumeMount(_Frozen):
    kind: Literal["volume_mount"] = "volume_mount"
    volume: str
    destination: str
    read_only: bool = False
    comment: str | None = None


VolumeEntry = Comment | VolumeMount


class Port(_Frozen):
    label: str
    static: int | None = None
    to: int | None = None


class Network(_Frozen):
    ports: list[Port]


class RestartPolicy(_Frozen):
    attempts: int
    delay: str | None = None
    interval: str | None = None
    mode: str


class DockerConfig(_Frozen):
    image: str
    ports: list[str] = Field(default_factory=list)
    volumes: list[str] = Field(default_factory=list)
    command: str | None = None
    args: list[str] = Field(default_factory=list)


class Task(_Frozen):
    name: str
    driver: str = "docker"
    config: DockerConfig
    notes: list[str] = Field(default_factory=list)
    volume_entries: list[VolumeEntry] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)
    restart: RestartPolicy | None = None


class Group(_Frozen):
    name: str
    count: int = 1
    task: Task
    network: Network | None = None


class Job(_Frozen):
    name: str
    datacenters: list[str]
    type: str
    groups: list[Group] = Field(default_factory=list)
