import logging

from compose2nomad.libs.errors import NoServicesError
from compose2nomad.libs.functions.environment import (
    normalize_environment,
    resolve_command,
)
from compose2nomad.libs.functions.load_compose import load_compose
from compose2nomad.libs.functions.ports import build_network
from compose2nomad.libs.functions.render_hcl import render_job
from compose2nomad.libs.functions.restart import map_restart_policy
from compose2nomad.libs.functions.volumes import build_volumes
from compose2nomad.libs.schemas.docker_compose import (
    DockerComposeModel,
    DockerComposeServiceModel,
)
from compose2nomad.libs.schemas.nomad_job import (
    DockerConfig,
    Group,
    Job,
    JobOptions,
    Task,
)

logger = logging.getLogger(__name__)


def build_group(name: str, service: DockerComposeServiceModel) -> Group:
    """Map one compose service to a Nomad group holding a single docker task."""
    ports = build_network(service.ports)
    volumes = build_volumes(service.volumes)
    command, args = resolve_command(service.entrypoint, service.command)

    restart = map_restart_policy(service.restart)
    if service.restart and restart is None:
        logger.warning(
            "Service %r: restart policy %r has no Nomad equivalent, skipping",
            name,
            service.restart,
        )

    task = Task(
        name=name,
        config=DockerConfig(
            image=service.image,
            ports=ports.labels,
            volumes=volumes.bind_volumes,
            command=command,
            args=args,
        ),
        notes=ports.notes,
        volume_entries=volumes.entries,
        env=normalize_environment(service.environment),
        restart=restart,
    )

    replicas = service.replicas
    return Group(
        name=name,
        count=1 if replicas is None else replicas,
        task=task,
        network=ports.network,
    )


def build_job(
    compose: DockerComposeModel, options: JobOptions | None = None
) -> Job:
    if not compose.services:
        raise NoServicesError()

    options = options or JobOptions()
    groups = []
    for name in sorted(compose.services):
        logger.debug("Mapping service %r", name)
        groups.append(build_group(name, compose.services[name]))

    return Job(
        name=options.name,
        datacenters=options.datacenters,
        type=options.type,
        groups=groups,
    )


def convert_to_nomad_hcl(yaml_input: str, options: JobOptions | None = None) -> str:
    """Convert a Docker Compose document into a formatted Nomad job.

    Raises :class:`~compose2nomad.libs.errors.ConversionError` subclasses on
    malformed input, an empty ``services`` section or a rendering failure.
    Skipped ports and volumes are reported as comments inside the job.
    """
    return render_job(build_job(load_compose(yaml_input), options))
