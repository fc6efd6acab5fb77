import json
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, cast

import typer
import yaml
from omegaconf import OmegaConf
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from compose2nomad.app_config import DEFAULT_CONFIG_PATHS, load_app_config
from compose2nomad.app_state import AppState
from compose2nomad.libs.errors import ConversionError
from compose2nomad.libs.functions.convert import build_job
from compose2nomad.libs.functions.load_compose import load_compose
from compose2nomad.libs.functions.render_hcl import render_job
from compose2nomad.libs.schemas.nomad_job import JobOptions

app = typer.Typer(
    no_args_is_help=True,
)
console = Console(stderr=True)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    config_paths: list[Path] = typer.Option(
        list(DEFAULT_CONFIG_PATHS),
        "--config",
        "-c",
        help="Path to the application configuration file.",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (overrides the configuration file).",
    ),
    verbose: bool = typer.Option(
        False,  # noqa: FBT003
        "--verbose",
        "-v",
        help="Shortcut for --log-level DEBUG.",
    ),
):
    app_config = load_app_config(tuple(config_paths))
    _configure_logging("DEBUG" if verbose else log_level or app_config.log_level)
    ctx.obj = AppState(app_config=app_config)


class OutputFormat(Enum):
    HCL = "hcl"
    JSON = "json"
    YAML = "yaml"


def _read_input(input_path: str) -> str:
    if input_path == "-":
        return sys.stdin.read()

    path = Path(input_path)
    if not path.is_file():
        console.print(f"[red]Error:[/red] input file not found: {escape(input_path)}")
        raise typer.Exit(code=2)

    return path.read_text(encoding="utf-8")


def _job_options(
    defaults: JobOptions,
    overrides: list[str],
    explicit: dict[str, Any],
) -> JobOptions:
    conf = OmegaConf.merge(
        OmegaConf.create(defaults.model_dump()),
        OmegaConf.from_dotlist(overrides),
        OmegaConf.create({k: v for k, v in explicit.items() if v}),
    )
    return JobOptions.model_validate(
        cast(dict[str, Any], OmegaConf.to_container(conf, resolve=True))
    )


@app.command()
def convert(
    ctx: typer.Context,
    input_path: str = typer.Argument(
        "-",
        help="Docker Compose file to convert, or '-' to read from stdin.",
    ),
    *,
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the result to this file instead of stdout.",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.HCL,
        "--format",
        "-f",
        help="Output format. json and yaml dump the job tree before rendering.",
    ),
    job_name: str | None = typer.Option(
        None,
        "--job-name",
        help="Label of the generated job block.",
    ),
    datacenters: list[str] | None = typer.Option(
        None,
        "--datacenter",
        help="Datacenter to schedule the job in. Can be repeated.",
    ),
    job_type: str | None = typer.Option(
        None,
        "--type",
        help="Nomad job type.",
    ),
    overrides: list[str] = typer.Option(
        [],
        "--set",
        help="Job option override in key=value format, e.g. datacenters=[dc1,dc2].",
    ),
):
    app_state: AppState = ctx.obj

    content = _read_input(input_path)

    try:
        options = _job_options(
            app_state.app_config.job,
            overrides,
            {"name": job_name, "datacenters": datacenters, "type": job_type},
        )
        job = build_job(load_compose(content), options)

        result: str
        match output_format:
            case OutputFormat.HCL:
                result = render_job(job)
            case OutputFormat.JSON:
                result = json.dumps(job.model_dump(mode="json"), indent=2) + "\n"
            case OutputFormat.YAML:
                result = yaml.dump(
                    job.model_dump(mode="json"),
                    sort_keys=False,
                    width=float("inf"),
                )
    except (ConversionError, ValidationError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    if output is None:
        sys.stdout.write(result)
        sys.stdout.flush()
        return

    output.write_text(result, encoding="utf-8")
    console.print(
        f"[green][bold]Wrote[/bold] {len(job.groups)} group(s) to "
        f"'[italic]{escape(str(output))}[/italic]'[/green]"
    )
