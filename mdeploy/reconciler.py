from __future__ import annotations

from typing import Any

from .client import OrchestratorClient
from .errors import CreateFailed, LookupFailed, OrchestratorError, UpdateFailed
from .events import EventLog
from .models import ApplicationRecord, ApplicationSpec, strip_leading_slash

CREATED = "created"
UPDATED = "updated"


class Reconciler:
    """Makes Marathon hold the given app definition: create it or update it.

    Exactly two calls per reconcile: the existence check, then create or
    update. Nothing is retried; the build pipeline decides whether to rerun.
    """

    def __init__(self, client: OrchestratorClient, host: str, events: EventLog | None = None):
        self.client = client
        self.host = host
        self.events = events or EventLog(host=host)

    def reconcile(self, spec: ApplicationSpec) -> tuple[ApplicationRecord, str]:
        """Returns the app record and the action taken (``created`` or ``updated``)."""
        try:
            exists = self.client.exists(spec.id)
        except OrchestratorError as e:
            raise LookupFailed(self.host, e) from e

        if exists:
            self.events.log("INFO", f"{spec.id} already exists - will be updated", app_id=spec.id)
            self._update(spec)
            return _record_from_spec(spec), UPDATED

        self.events.log("INFO", f"{spec.id} does not exist yet - will be created", app_id=spec.id)
        return self._create(spec), CREATED

    def _update(self, spec: ApplicationSpec) -> None:
        try:
            # force=False: Marathon rejects the update while another deployment
            # of this app is in flight.
            self.client.update(strip_leading_slash(spec.id), spec, force=False)
        except OrchestratorError as e:
            raise UpdateFailed(self.host, e) from e

    def _create(self, spec: ApplicationSpec) -> ApplicationRecord:
        try:
            return self.client.create(spec)
        except OrchestratorError as e:
            raise CreateFailed(self.host, e) from e


def _record_from_spec(spec: ApplicationSpec) -> ApplicationRecord:
    """The record after an update: Marathon's answer carries no app.

    The deployments we know about are whatever the definition itself lists.
    The definition is opaque, so entries that are not ``{"id": "..."}`` are
    skipped rather than validated.
    """
    payload = spec.payload()
    raw = payload.get("deployments")
    refs: list[dict[str, Any]] = []
    if isinstance(raw, list):
        refs = [d for d in raw if isinstance(d, dict) and isinstance(d.get("id"), str)]
    return ApplicationRecord.model_validate(dict(payload, deployments=refs))
