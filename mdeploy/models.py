from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApplicationSpec(BaseModel):
    """A Marathon app definition.

    Only ``id`` is interpreted here. Every other field (container, cpus, mem,
    instances, ...) is kept as-is and sent back to Marathon untouched.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., description="Marathon app id, e.g. /web or /group/web")

    def payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class DeploymentRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str


class ApplicationRecord(ApplicationSpec):
    """An app as Marathon returns it after create/update."""

    deployments: list[DeploymentRef] = Field(default_factory=list)

    def deployment_ids(self) -> set[str]:
        return {d.id for d in self.deployments}


class ActiveDeployment(BaseModel):
    """An entry of GET /v2/deployments."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    affected_apps: list[str] = Field(default_factory=list, alias="affectedApps")


@dataclass(frozen=True)
class WaitConfig:
    wait: bool = False
    timeout_s: float = 10.0
    poll_interval_s: float = 1.0


def strip_leading_slash(app_id: str) -> str:
    """'/group/web' -> 'group/web'. Marathon's update path takes the id without it."""
    return app_id[1:] if app_id.startswith("/") else app_id
