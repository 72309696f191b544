from __future__ import annotations

from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from .errors import OrchestratorError, OrchestratorHTTPError, OrchestratorUnavailable
from .models import ActiveDeployment, ApplicationRecord, ApplicationSpec, strip_leading_slash


class OrchestratorClient(Protocol):
    """The four Marathon calls a deploy needs.

    Every method is a network call. Failures surface as OrchestratorError.
    """

    def exists(self, app_id: str) -> bool:
        """True if the app is currently registered. A missing app is not an error."""

    def create(self, spec: ApplicationSpec) -> ApplicationRecord:
        """Register a new app and return it, including its initial deployments."""

    def update(self, app_id: str, spec: ApplicationSpec, force: bool) -> None:
        """Replace the definition of an existing app."""

    def list_deployments(self) -> list[ActiveDeployment]:
        """All deployments Marathon is currently running."""


class MarathonClient:
    """OrchestratorClient over Marathon's REST API (/v2)."""

    def __init__(self, host: str, timeout_s: float = 10.0, http: httpx.Client | None = None):
        self.host = host.rstrip("/")
        self._owns_http = http is None
        self._http = http if http is not None else httpx.Client(base_url=self.host, timeout=timeout_s, follow_redirects=False)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "MarathonClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def exists(self, app_id: str) -> bool:
        resp = self._request("GET", self._app_path(app_id), ok_statuses={404})
        return resp.status_code != 404

    def create(self, spec: ApplicationSpec) -> ApplicationRecord:
        resp = self._request("POST", "/v2/apps", json=spec.payload())
        return self._parse(resp, ApplicationRecord.model_validate)

    def update(self, app_id: str, spec: ApplicationSpec, force: bool) -> None:
        self._request(
            "PUT",
            self._app_path(app_id),
            json=spec.payload(),
            params={"force": "true" if force else "false"},
        )

    def list_deployments(self) -> list[ActiveDeployment]:
        resp = self._request("GET", "/v2/deployments")
        data = self._parse(resp, lambda body: body)
        if not isinstance(data, list):
            raise OrchestratorError(f"GET /v2/deployments: expected a JSON list, got {type(data).__name__}")
        return [self._parse_item(d) for d in data]

    @staticmethod
    def _app_path(app_id: str) -> str:
        return f"/v2/apps/{strip_leading_slash(app_id)}"

    def _request(
        self,
        method: str,
        path: str,
        ok_statuses: set[int] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise OrchestratorUnavailable(f"{method} {self.host}{path}: timed out") from e
        except httpx.RequestError as e:
            raise OrchestratorUnavailable(f"{method} {self.host}{path}: {type(e).__name__}: {e}") from e
        if resp.is_success or resp.status_code in (ok_statuses or set()):
            return resp
        raise OrchestratorHTTPError(method, f"{self.host}{path}", resp.status_code, resp.text)

    @staticmethod
    def _parse(resp: httpx.Response, build: Any) -> Any:
        try:
            return build(resp.json())
        except ValueError as e:
            # ValidationError is a ValueError too.
            raise OrchestratorError(f"{resp.request.method} {resp.request.url}: unexpected response: {e}") from e

    @staticmethod
    def _parse_item(item: Any) -> ActiveDeployment:
        try:
            return ActiveDeployment.model_validate(item)
        except ValidationError as e:
            raise OrchestratorError(f"GET /v2/deployments: malformed deployment: {e}") from e
