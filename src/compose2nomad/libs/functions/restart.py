from compose2nomad.libs.schemas.nomad_job import RestartPolicy

RESTART_POLICIES: dict[str, RestartPolicy] = {
    "always": RestartPolicy(attempts=0, delay="15s", mode="delay"),
    "unless-stopped": RestartPolicy(attempts=0, delay="15s", mode="delay"),
    "on-failure": RestartPolicy(attempts=3, interval="1m", mode="fail"),
    "no": RestartPolicy(attempts=0, mode="fail"),
}


def map_restart_policy(value: str | None) -> RestartPolicy | None:
    if not value:
        return None
    return RESTART_POLICIES.get(value)
