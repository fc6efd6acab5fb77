import json

import yaml
from typer.testing import CliRunner

from compose2nomad.cli.app import app
from compose2nomad.libs.functions.convert import convert_to_nomad_hcl

runner = CliRunner()

COMPOSE = """
services:
  cache:
    image: redis:7
    ports: ["6379"]
    restart: always
"""


def _compose_file(tmp_path):
    path = tmp_path / "docker-compose.yml"
    path.write_text(COMPOSE, encoding="utf-8")
    return path


def _config_args(tmp_path):
    return ["-c", str(tmp_path / "compose2nomad.yaml")]


def test_convert_file_to_stdout(tmp_path):
    result = runner.invoke(
        app, [*_config_args(tmp_path), "convert", str(_compose_file(tmp_path))]
    )

    assert result.exit_code == 0, result.output
    assert result.stdout == convert_to_nomad_hcl(COMPOSE)


def test_convert_reads_stdin(tmp_path):
    result = runner.invoke(app, [*_config_args(tmp_path), "convert", "-"], input=COMPOSE)

    assert result.exit_code == 0, result.output
    assert 'group "cache" {' in result.stdout


def test_convert_job_overrides(tmp_path):
    result = runner.invoke(
        app,
        [
            *_config_args(tmp_path),
            "convert",
            str(_compose_file(tmp_path)),
            "--set",
            "type=batch",
            "--set",
            "name=ignored",
            "--job-name",
            "cache-job",
            "--datacenter",
            "eu-1",
            "--datacenter",
            "eu-2",
        ],
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.startswith('job "cache-job" {\n')
    assert 'datacenters = ["eu-1", "eu-2"]' in result.stdout
    assert 'type        = "batch"' in result.stdout


def test_convert_uses_config_file(tmp_path):
    (tmp_path / "compose2nomad.yaml").write_text(
        "job:\n  name: from-config\n", encoding="utf-8"
    )

    result = runner.invoke(
        app, [*_config_args(tmp_path), "convert", str(_compose_file(tmp_path))]
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.startswith('job "from-config" {\n')


def test_convert_json_and_yaml_formats(tmp_path):
    compose_file = str(_compose_file(tmp_path))

    as_json = runner.invoke(
        app, [*_config_args(tmp_path), "convert", compose_file, "--format", "json"]
    )
    as_yaml = runner.invoke(
        app, [*_config_args(tmp_path), "convert", compose_file, "-f", "yaml"]
    )

    assert as_json.exit_code == 0, as_json.output
    assert as_yaml.exit_code == 0, as_yaml.output
    job = json.loads(as_json.stdout)
    assert job == yaml.safe_load(as_yaml.stdout)
    group = job["groups"][0]
    assert group["name"] == "cache"
    assert group["network"]["ports"] == [{"label": "port_6379", "static": None, "to": 6379}]
    assert group["task"]["restart"]["mode"] == "delay"


def test_convert_to_output_file(tmp_path):
    output = tmp_path / "cache.nomad.hcl"

    result = runner.invoke(
        app,
        [*_config_args(tmp_path), "convert", str(_compose_file(tmp_path)), "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    assert output.read_text(encoding="utf-8") == convert_to_nomad_hcl(COMPOSE)
    assert "Wrote" in result.output


def test_convert_reports_conversion_errors(tmp_path):
    result = runner.invoke(
        app, [*_config_args(tmp_path), "convert", "-"], input="version: '3.8'\n"
    )

    assert result.exit_code == 1
    assert "no services found" in result.output


def test_convert_rejects_unknown_job_option(tmp_path):
    result = runner.invoke(
        app,
        [*_config_args(tmp_path), "convert", str(_compose_file(tmp_path)), "--set", "region=eu"],
    )

    assert result.exit_code == 1


def test_convert_missing_input_file(tmp_path):
    result = runner.invoke(
        app, [*_config_args(tmp_path), "convert", str(tmp_path / "nope.yml")]
    )

    assert result.exit_code == 2
    assert "input file not found" in result.output
