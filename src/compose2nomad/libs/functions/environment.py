import logging
from typing import Any

from compose2nomad.libs.schemas.docker_compose import ComposeValue

logger = logging.getLogger(__name__)


def _env_value_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_environment(value: ComposeValue) -> dict[str, str]:
    """Flatten a compose ``environment`` into a key-sorted mapping."""
    env: dict[str, str] = {}

    match value:
        case None:
            pass
        case dict():
            for key, item in value.items():
                if not isinstance(key, str):
                    logger.debug("Dropping environment entry with key %r", key)
                    continue
                env[key] = _env_value_to_str(item)
        case list():
            for item in value:
                if not isinstance(item, str):
                    continue
                key, _, item_value = item.partition("=")
                if not key:
                    logger.debug("Dropping environment entry %r", item)
                    continue
                env[key] = item_value
        case str():
            logger.debug("Ignoring environment given as a plain string: %r", value)

    return dict(sorted(env.items()))


def shell_words(value: ComposeValue, *, split_string: bool) -> list[str]:
    match value:
        case str():
            return value.split() if split_string else [value]
        case list():
            return [item for item in value if isinstance(item, str)]
        case _:
            return []


def resolve_command(
    entrypoint: ComposeValue, command: ComposeValue
) -> tuple[str | None, list[str]]:
    """Return the docker driver ``command`` and ``args`` for a service.

    The entrypoint wins when both are set; the compose command is then
    appended to its arguments.
    """
    entrypoint_parts = shell_words(entrypoint, split_string=False)
    command_parts = shell_words(command, split_string=True)

    if entrypoint_parts:
        return entrypoint_parts[0], entrypoint_parts[1:] + command_parts
    if command_parts:
        return command_parts[0], command_parts[1:]
    return None, []
