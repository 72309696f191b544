from __future__ import annotations

import os
from dataclasses import dataclass

from .models import WaitConfig


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Target
    marathon_host: str | None = None
    app_file: str = "marathon.json"
    http_timeout_s: float = 10.0

    # Waiting for the rollout
    wait: bool = False
    wait_timeout_s: float = 10.0
    poll_interval_s: float = 1.0

    # Optional sqlite journal of deploy events
    events_db: str | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            marathon_host=os.getenv("MDEPLOY_MARATHON_HOST") or None,
            app_file=os.getenv("MDEPLOY_APP_FILE", "marathon.json"),
            http_timeout_s=_env_float("MDEPLOY_HTTP_TIMEOUT_S", 10.0),
            wait=_env_bool("MDEPLOY_WAIT", False),
            wait_timeout_s=_env_float("MDEPLOY_WAIT_TIMEOUT_S", 10.0),
            poll_interval_s=_env_float("MDEPLOY_POLL_INTERVAL_S", 1.0),
            events_db=os.getenv("MDEPLOY_EVENTS_DB") or None,
        )

    def wait_config(self) -> WaitConfig:
        return WaitConfig(wait=self.wait, timeout_s=self.wait_timeout_s, poll_interval_s=self.poll_interval_s)
