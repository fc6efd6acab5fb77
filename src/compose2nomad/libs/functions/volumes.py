import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from compose2nomad.libs.schemas.nomad_job import Comment, VolumeEntry, VolumeMount

logger = logging.getLogger(__name__)


class VolumeKind(Enum):
    BIND = "bind"
    NAMED = "named"
    SKIPPED = "skipped"


@dataclass(kw_only=True, frozen=True)
class VolumeClassification:
    kind: VolumeKind
    source: str = ""
    destination: str = ""
    read_only: bool = False
    comment: str | None = None

    @property
    def bind_string(self) -> str:
        value = f"{self.source}:{self.destination}"
        return f"{value}:ro" if self.read_only else value


@dataclass(kw_only=True)
class VolumeMapping:
    bind_volumes: list[str] = field(default_factory=list)
    entries: list[VolumeEntry] = field(default_factory=list)


def _is_host_path(source: str) -> bool:
    return source.startswith(("./", "/"))


def volume_spec_from_mapping(entry: dict[str, Any]) -> str | None:
    """Rewrite a long syntax bind or volume mount as a short syntax entry."""
    kind = entry.get("type", "volume")
    source, target = entry.get("source"), entry.get("target")
    if kind not in ("bind", "volume") or not source or not target:
        return None

    source = str(source)
    if kind == "bind" and not _is_host_path(source):
        source = f"./{source}"

    spec = f"{source}:{target}"
    return f"{spec}:ro" if entry.get("read_only") else spec


def classify_volume(spec: str) -> VolumeClassification:
    parts = spec.split(":", 2)
    source = parts[0]

    if not source:
        return VolumeClassification(
            kind=VolumeKind.SKIPPED,
            comment=f"Skipping invalid volume spec: {spec}.",
        )

    if len(parts) == 1:
        if "/" in source and not source.startswith("./"):
            return VolumeClassification(
                kind=VolumeKind.SKIPPED,
                source=source,
                comment=(
                    f"Anonymous volume '{source}' needs mapping to a host path "
                    "or named Nomad volume."
                ),
            )
        destination = source
    else:
        destination = parts[1]

    options = parts[2] if len(parts) == 3 else ""
    read_only = "ro" in options

    if _is_host_path(source):
        comment = None
        if source.startswith("./"):
            comment = (
                f"Mapping relative host path '{source}'. "
                "In Nomad, this is relative to task alloc dir."
            )
        return VolumeClassification(
            kind=VolumeKind.BIND,
            source=source,
            destination=destination,
            read_only=read_only,
            comment=comment,
        )

    return VolumeClassification(
        kind=VolumeKind.NAMED,
        source=source,
        destination=destination,
        read_only=read_only,
        comment=f"Ensure Nomad volume '{source}' is defined in the job or cluster.",
    )


def build_volumes(specs: Iterable[str | dict[str, Any]]) -> VolumeMapping:
    mapping = VolumeMapping()

    for spec in specs:
        if isinstance(spec, dict):
            short_spec = volume_spec_from_mapping(spec)
            if short_spec is None:
                message = f"Skipping long syntax volume spec: {spec}"
                logger.warning(message)
                mapping.entries.append(Comment(text=message))
                continue
            spec = short_spec

        volume = classify_volume(spec)
        logger.debug("Classified volume %r as %s", spec, volume.kind.value)

        match volume.kind:
            case VolumeKind.SKIPPED:
                logger.warning(volume.comment)
                mapping.entries.append(Comment(text=volume.comment or spec))
            case VolumeKind.BIND:
                if volume.comment:
                    mapping.entries.append(Comment(text=volume.comment))
                mapping.bind_volumes.append(volume.bind_string)
            case VolumeKind.NAMED:
                mapping.entries.append(
                    VolumeMount(
                        volume=volume.source,
                        destination=volume.destination,
                        read_only=volume.read_only,
                        comment=volume.comment,
                    )
                )

    return mapping
