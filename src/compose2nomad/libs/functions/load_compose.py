import logging
import re
from typing import Any

import yaml
from pydantic import ValidationError

from compose2nomad.libs.errors import ComposeParseError
from compose2nomad.libs.schemas.docker_compose import DockerComposeModel

logger = logging.getLogger(__name__)

_BOOL_TAG = "tag:yaml.org,2002:bool"
_INT_TAG = "tag:yaml.org,2002:int"
_FLOAT_TAG = "tag:yaml.org,2002:float"


class ComposeLoader(yaml.SafeLoader):
    """SafeLoader that resolves plain booleans and numbers like YAML 1.2.

    ``2222:22`` stays a string instead of a base-60 integer, and
    ``yes``/``no``/``on``/``off`` stay words.
    """


ComposeLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag not in {_BOOL_TAG, _INT_TAG, _FLOAT_TAG}
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
ComposeLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
ComposeLoader.add_implicit_resolver(
    _INT_TAG,
    re.compile(r"^(?:[-+]?(?:0|[1-9][0-9]*)|0x[0-9a-fA-F]+)$"),
    list("-+0123456789"),
)
ComposeLoader.add_implicit_resolver(
    _FLOAT_TAG,
    re.compile(
        r"^(?:[-+]?(?:\.[0-9]+|[0-9]+\.[0-9]*)(?:[eE][-+]?[0-9]+)?"
        r"|[-+]?[0-9]+[eE][-+]?[0-9]+"
        r"|[-+]?\.(?:inf|Inf|INF)|\.(?:nan|NaN|NAN))$"
    ),
    list("-+0123456789."),
)


def parse_compose_yaml(content: str) -> dict[str, Any]:
    try:
        data = yaml.load(content, Loader=ComposeLoader)  # noqa: S506
    except yaml.YAMLError as exc:
        raise ComposeParseError(exc) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ComposeParseError(
            f"expected a mapping at the document root, got {type(data).__name__}"
        )

    return data


def load_compose(content: str) -> DockerComposeModel:
    """Parse a Compose document into a validated :class:`DockerComposeModel`.

    Malformed YAML and documents that do not fit the model both raise
    :class:`ComposeParseError`.
    """
    data = parse_compose_yaml(content)

    try:
        compose = DockerComposeModel.model_validate(data)
    except ValidationError as exc:
        raise ComposeParseError(exc) from exc

    logger.debug("Loaded %d compose service(s)", len(compose.services))
    return compose
