import re
from functools import cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from compose2nomad.libs.errors import HclRenderError
from compose2nomad.libs.schemas.nomad_job import Job

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
JOB_TEMPLATE = "job.hcl.jinja"

INDENT = "  "

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")
_ATTRIBUTE_RE = re.compile(
    r'^(?P<key>"(?:[^"\\]|\\.)*"|[^\s="#{}]+)\s*=\s*(?P<value>.+)$'
)
_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _quote(value: str) -> str:
    chars = []
    for char in value:
        if char in _ESCAPES:
            chars.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            chars.append(f"\\u{ord(char):04x}")
        else:
            chars.append(char)
    # Compose values are literal; keep HCL from treating them as templates.
    escaped = "".join(chars).replace("${", "$${").replace("%{", "%%{")
    return f'"{escaped}"'


def hcl_value(value: Any) -> str:
    match value:
        case None:
            return "null"
        case bool():
            return "true" if value else "false"
        case int():
            return str(value)
        case str():
            return _quote(value)
        case list() | tuple():
            return "[" + ", ".join(hcl_value(item) for item in value) + "]"
        case _:
            raise TypeError(f"Unsupported HCL value type: {type(value).__name__}")


def is_hcl_identifier(name: str) -> bool:
    return _IDENTIFIER_RE.match(name) is not None


def hcl_key(name: str) -> str:
    return name if is_hcl_identifier(name) else _quote(name)


def hcl_comment(text: str) -> str:
    return "# " + " ".join(text.splitlines())


@cache
def get_jinja_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        undefined=StrictUndefined,
        autoescape=False,  # noqa: S701
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["hcl"] = hcl_value
    env.filters["hcl_key"] = hcl_key
    env.filters["hcl_comment"] = hcl_comment
    env.tests["hcl_identifier"] = is_hcl_identifier
    return env


def _align_attributes(lines: list[tuple[int, str]]) -> list[str]:
    """Align ``=`` across runs of consecutive attributes at the same depth."""
    output: list[str] = []
    run: list[tuple[int, re.Match[str]]] = []

    def flush() -> None:
        if not run:
            return
        width = max(len(match["key"]) for _, match in run)
        for depth, match in run:
            output.append(
                f"{INDENT * depth}{match['key'].ljust(width)} = {match['value']}"
            )
        run.clear()

    for depth, line in lines:
        match = None
        if line and not line.startswith("#") and not line.endswith("{"):
            match = _ATTRIBUTE_RE.match(line)

        if match is None:
            flush()
            output.append(f"{INDENT * depth}{line}" if line else "")
            continue

        if run and run[-1][0] != depth:
            flush()
        run.append((depth, match))

    flush()
    return output


def format_hcl(text: str) -> str:
    """Canonically format HCL produced by :func:`render_job`.

    Re-indents by brace depth, drops redundant blank lines and aligns the
    equals signs of neighbouring attributes.
    """
    lines: list[tuple[int, str]] = []
    depth = 0

    for raw_line in text.splitlines():
        line = raw_line.strip()
        is_comment = line.startswith("#")

        if not line:
            if lines and lines[-1][1] and not lines[-1][1].endswith("{"):
                lines.append((depth, ""))
            continue

        if line.startswith("}"):
            depth = max(depth - 1, 0)
            while lines and not lines[-1][1]:
                lines.pop()

        lines.append((depth, line))

        if line.endswith("{") and not is_comment:
            depth += 1

    while lines and not lines[-1][1]:
        lines.pop()

    if not lines:
        return ""

    return "\n".join(_align_attributes(lines)) + "\n"


def render_job(job: Job) -> str:
    try:
        rendered = get_jinja_env().get_template(JOB_TEMPLATE).render(job=job)
    except (TemplateError, TypeError) as exc:
        raise HclRenderError(exc) from exc

    return format_hcl(rendered)
