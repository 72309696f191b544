from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

from .client import OrchestratorClient
from .events import EventLog
from .models import ApplicationRecord, ApplicationSpec, WaitConfig
from .reconciler import Reconciler
from .waiter import ConvergenceWaiter, WaitOutcome


@dataclass(frozen=True)
class DeployResult:
    record: ApplicationRecord
    action: str  # created|updated
    outcome: WaitOutcome

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.record.id,
            "action": self.action,
            "deployments": sorted(self.record.deployment_ids()),
            "wait": self.outcome.value,
        }


def deploy(
    client: OrchestratorClient,
    spec: ApplicationSpec,
    host: str,
    wait_config: WaitConfig,
    events: EventLog | None = None,
    source: str | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> DeployResult:
    """Reconcile ``spec`` on Marathon, then wait for the rollout if asked to.

    Raises CreateFailed/UpdateFailed/LookupFailed before anything is waited
    for, and WaitFailed if the rollout state cannot be read. A timeout is
    returned as WaitOutcome.TIMED_OUT.
    """
    events = events or EventLog(host=host)
    origin = f" from {source}" if source else ""
    events.log("INFO", f"deploying Marathon config for {spec.id}{origin} to {host}", app_id=spec.id)

    reconciler = Reconciler(client, host, events)
    record, action = reconciler.reconcile(spec)

    waiter = ConvergenceWaiter(client, wait_config, host, events, clock=clock, sleep=sleep)
    outcome = waiter.await_convergence(record)
    return DeployResult(record=record, action=action, outcome=outcome)
