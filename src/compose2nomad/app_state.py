from dataclasses import dataclass

from compose2nomad.app_config import AppConfig


@dataclass
class AppState:
    app_config: AppConfig
