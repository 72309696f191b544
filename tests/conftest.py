from __future__ import annotations

import sys
from typing import Callable

import pytest

# Ensure project root is importable (so `import cli` works without installing)
import os as _os
_project_root = _os.path.dirname(_os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from mdeploy.errors import OrchestratorError  # noqa: E402
from mdeploy.models import ActiveDeployment, ApplicationRecord, ApplicationSpec  # noqa: E402


class FakeClock:
    """Monotonic clock that only moves when someone sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeOrchestrator:
    """In-memory OrchestratorClient that records every call."""

    def __init__(
        self,
        existing: set[str] | None = None,
        created_deployments: list[str] | None = None,
        deployments: Callable[[int], list[ActiveDeployment]] | None = None,
    ) -> None:
        self.existing = set(existing or ())
        self.created_deployments = list(created_deployments or [])
        self.deployments = deployments or (lambda poll: [])
        self.calls: list[tuple] = []
        self.fail_on: dict[str, OrchestratorError] = {}

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise self.fail_on[name]

    def exists(self, app_id: str) -> bool:
        self.calls.append(("exists", app_id))
        self._maybe_fail("exists")
        return app_id in self.existing

    def create(self, spec: ApplicationSpec) -> ApplicationRecord:
        self.calls.append(("create", spec.id))
        self._maybe_fail("create")
        self.existing.add(spec.id)
        payload = spec.payload()
        payload["deployments"] = [{"id": d} for d in self.created_deployments]
        return ApplicationRecord.model_validate(payload)

    def update(self, app_id: str, spec: ApplicationSpec, force: bool) -> None:
        self.calls.append(("update", app_id, force))
        self._maybe_fail("update")

    def list_deployments(self) -> list[ActiveDeployment]:
        poll = sum(1 for c in self.calls if c[0] == "list_deployments")
        self.calls.append(("list_deployments",))
        self._maybe_fail("list_deployments")
        return self.deployments(poll)

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]


def deployment(dep_id: str, *apps: str) -> ActiveDeployment:
    return ActiveDeployment.model_validate({"id": dep_id, "affectedApps": list(apps)})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
