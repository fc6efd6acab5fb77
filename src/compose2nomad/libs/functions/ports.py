import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from compose2nomad.libs.schemas.nomad_job import Network, Port

logger = logging.getLogger(__name__)

WELL_KNOWN_PORTS: dict[str, str] = {
    "80": "http",
    "443": "https",
    "21": "ftp",
    "22": "ssh",
    "23": "telnet",
    "25": "smtp",
    "53": "dns",
    "110": "pop3",
    "143": "imap",
    "3306": "mysql",
    "5432": "postgresql",
}

_NON_LABEL_CHARS_RE = re.compile(r"[^a-z0-9_]+")
_REPEATED_UNDERSCORES_RE = re.compile(r"_+")


@dataclass(kw_only=True, frozen=True)
class ProcessedPortInfo:
    raw: str
    host_port: str
    container_port: str
    comment: str
    protocol_stripped_port: str


@dataclass(kw_only=True)
class PortMapping:
    network: Network | None = None
    labels: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def _strip_protocol(port_spec: str) -> str:
    return port_spec.split("/", 1)[0]


def parse_port_spec(raw: str) -> ProcessedPortInfo | None:
    """Split a ``[host:]container[/protocol][ #comment]`` entry.

    Returns ``None`` when no container port can be found.
    """
    port_spec, comment = raw, ""
    if "#" in raw:
        port_spec, comment = (part.strip() for part in raw.split("#", 1))

    without_protocol = _strip_protocol(port_spec)

    if ":" in without_protocol:
        host_port, container_port = without_protocol.split(":", 1)
    else:
        host_port, container_port = "", without_protocol

    if not container_port:
        return None

    return ProcessedPortInfo(
        raw=raw,
        host_port=host_port,
        container_port=container_port,
        comment=comment,
        protocol_stripped_port=_strip_protocol(container_port),
    )


def port_spec_from_mapping(entry: dict[str, Any]) -> str | None:
    """Rewrite a long syntax port mapping as a short syntax entry."""
    target = entry.get("target")
    if target in (None, ""):
        return None

    spec = str(target)
    if entry.get("published") not in (None, ""):
        spec = f"{entry['published']}:{spec}"
    if entry.get("protocol"):
        spec = f"{spec}/{entry['protocol']}"
    if entry.get("name"):
        spec = f"{spec} # {entry['name']}"
    return spec


def consolidate_ports(
    infos: Iterable[ProcessedPortInfo],
    notes: list[str] | None = None,
) -> list[ProcessedPortInfo]:
    """Keep the first entry for each container port, in input order."""
    consolidated: dict[str, ProcessedPortInfo] = {}

    for info in infos:
        key = info.protocol_stripped_port
        if key in consolidated:
            message = (
                f"Skipping duplicate port spec '{info.raw}': "
                f"container port {key} is already mapped."
            )
            logger.warning(message)
            if notes is not None:
                notes.append(message)
            continue
        consolidated[key] = info

    return list(consolidated.values())


def sanitize_comment_to_label(comment: str) -> str:
    if not comment:
        return ""

    label = comment.strip().lower().replace(" ", "_").replace("-", "_")
    label = _NON_LABEL_CHARS_RE.sub("", label)
    label = _REPEATED_UNDERSCORES_RE.sub("_", label)
    return label.strip("_")


def well_known_port_label(port: str) -> str | None:
    return WELL_KNOWN_PORTS.get(port)


def port_label(info: ProcessedPortInfo) -> str:
    return (
        sanitize_comment_to_label(info.comment)
        or well_known_port_label(info.protocol_stripped_port)
        or f"port_{info.protocol_stripped_port}"
    )


def parse_port_number(value: str) -> int:
    if not value.strip():
        raise ValueError("port string is empty")
    try:
        return int(value.strip())
    except ValueError:
        raise ValueError(f"could not parse port '{value}' to an integer") from None


def _build_port(info: ProcessedPortInfo, label: str) -> Port:
    if info.host_port:
        try:
            host = parse_port_number(info.host_port)
        except ValueError as exc:
            raise ValueError(
                f"Error parsing host port '{info.host_port}' for label '{label}': {exc}"
            ) from exc
        try:
            container = parse_port_number(info.container_port)
        except ValueError as exc:
            raise ValueError(
                f"Error parsing container port '{info.container_port}' "
                f"for label '{label}': {exc}"
            ) from exc

        return Port(label=label, static=host, to=container if container != host else None)

    try:
        container = parse_port_number(info.protocol_stripped_port)
    except ValueError as exc:
        raise ValueError(
            f"Error parsing container port '{info.protocol_stripped_port}' "
            f"for label '{label}': {exc}"
        ) from exc

    return Port(label=label, to=container)


def build_network(raw_ports: Iterable[str | dict[str, Any]]) -> PortMapping:
    """Turn compose ``ports`` entries into a Nomad ``network`` block.

    Malformed entries never abort the conversion: they are reported in
    ``notes`` and left out of the block.
    """
    mapping = PortMapping()
    infos: list[ProcessedPortInfo] = []

    for raw in raw_ports:
        if isinstance(raw, dict):
            spec = port_spec_from_mapping(raw)
            if spec is None:
                message = f"Skipping long syntax port spec without target: {raw}"
                logger.warning(message)
                mapping.notes.append(message)
                continue
            raw = spec

        info = parse_port_spec(raw)
        if info is None:
            message = f"Skipping invalid port spec: {raw}"
            logger.warning(message)
            mapping.notes.append(message)
            continue
        infos.append(info)

    ports: list[Port] = []
    for info in consolidate_ports(infos, mapping.notes):
        label = port_label(info)
        try:
            port = _build_port(info, label)
        except ValueError as exc:
            logger.warning(str(exc))
            mapping.notes.append(str(exc))
            continue

        logger.debug("Mapped port %r to label %r", info.raw, label)
        ports.append(port)
        mapping.labels.append(label)

    if ports:
        mapping.network = Network(ports=ports)

    return mapping
