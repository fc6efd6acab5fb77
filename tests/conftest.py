import pytest

from compose2nomad.app_config import load_app_config


@pytest.fixture(autouse=True)
def _fresh_app_config(monkeypatch):
    for name in ("COMPOSE2NOMAD_JOB__NAME", "COMPOSE2NOMAD_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    load_app_config.cache_clear()
    yield
    load_app_config.cache_clear()
