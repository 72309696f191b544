from __future__ import annotations

import time
from enum import Enum
from typing import Callable

from .client import OrchestratorClient
from .errors import OrchestratorError, WaitFailed
from .events import EventLog
from .models import ApplicationRecord, WaitConfig


class WaitOutcome(str, Enum):
    SKIPPED = "skipped"  # waiting not requested
    CONVERGED = "converged"
    TIMED_OUT = "timed_out"


class ConvergenceWaiter:
    """Polls Marathon until the deployments started for an app are finished.

    Marathon has no completion event for deployments, so we list the active
    ones every ``poll_interval_s`` until none of the app's deployment ids is
    among them or ``timeout_s`` has passed. A timeout is only a warning: the
    rollout may still complete on Marathon's side.
    """

    def __init__(
        self,
        client: OrchestratorClient,
        config: WaitConfig,
        host: str,
        events: EventLog | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.config = config
        self.host = host
        self.events = events or EventLog(host=host)
        self.clock = clock
        self.sleep = sleep
        self.polls = 0

    def await_convergence(self, record: ApplicationRecord) -> WaitOutcome:
        if not self.config.wait:
            return WaitOutcome.SKIPPED

        target_ids = record.deployment_ids()
        if not target_ids:
            self.events.log("INFO", f"No deployments to wait for: {record.id}", app_id=record.id)
            return WaitOutcome.CONVERGED

        awaited = sorted(target_ids)
        deadline = self.clock() + self.config.timeout_s
        while self.clock() < deadline:
            active_ids = self._active_ids(record.id)
            if target_ids.isdisjoint(active_ids):
                self.events.log("INFO", f"All deployments are started: {awaited}", app_id=record.id)
                return WaitOutcome.CONVERGED

            self.events.log("DEBUG", "Deployment still found for at least one deployment id", app_id=record.id)
            try:
                self.sleep(self.config.poll_interval_s)
            except InterruptedError:
                pass

        self.events.log("WARN", f"Timeout waiting for deployment: {awaited}", app_id=record.id)
        return WaitOutcome.TIMED_OUT

    def _active_ids(self, app_id: str) -> set[str]:
        """Ids of the running deployments that touch ``app_id``."""
        try:
            deployments = self.client.list_deployments()
        except OrchestratorError as e:
            raise WaitFailed(self.host, e) from e
        finally:
            self.polls += 1
        return {d.id for d in deployments if app_id in d.affected_apps}
